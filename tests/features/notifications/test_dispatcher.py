import threading
import pytest

from streamvault.core.pipeline import VideoPipeline
from streamvault.core.common.enums import NotificationKind
from streamvault.features.notifications.data.sinks import LoggingNotificationSink, SqlNotificationSink
from streamvault.features.notifications.domain.interfaces import INotificationSink
from streamvault.features.notifications.domain.models import NotificationEvent
from streamvault.features.notifications.service.dispatcher import NotificationDispatcher


class FlakySink(INotificationSink):
    """Fails for one asset id, records the rest. Optionally blocks on a gate."""

    def __init__(self, fail_for: int = None, gate: threading.Event = None):
        self.fail_for = fail_for
        self.gate = gate
        self.sent = []

    def notify(self, event: NotificationEvent) -> None:
        if self.gate is not None:
            self.gate.wait(timeout=10)
        if event.asset_id == self.fail_for:
            raise ConnectionError("sink unreachable")
        self.sent.append(event)


def test_event_factories():
    ok = NotificationEvent.upload_succeeded(7)
    bad = NotificationEvent.upload_failed(7)

    assert ok.kind == NotificationKind.SUCCESS
    assert ok.message == "The upload was successful."
    assert bad.kind == NotificationKind.ERROR
    assert bad.message == "The upload has failed."
    assert ok.name == bad.name == "Upload Status"


def test_failed_delivery_is_recorded_not_raised():
    sink = FlakySink(fail_for=2)
    dispatcher = NotificationDispatcher(sink)

    dispatcher.dispatch(NotificationEvent.upload_succeeded(1))
    dispatcher.dispatch(NotificationEvent.upload_failed(2))
    dispatcher.dispatch(NotificationEvent.upload_succeeded(3))

    assert dispatcher.flush(timeout=5)
    assert dispatcher.delivered == 2
    assert dispatcher.failed == 1

    failed = [r for r in dispatcher.results() if not r.delivered]
    assert failed[0].event.asset_id == 2
    assert "unreachable" in failed[0].error
    dispatcher.shutdown()


def test_dispatch_does_not_block_caller():
    gate = threading.Event()
    dispatcher = NotificationDispatcher(FlakySink(gate=gate))

    future = dispatcher.dispatch(NotificationEvent.upload_succeeded(1))
    assert future is not None
    assert not future.done()
    assert not dispatcher.flush(timeout=0.1)

    gate.set()
    assert dispatcher.flush(timeout=5)
    assert dispatcher.delivered == 1
    dispatcher.shutdown()


def test_dispatch_after_shutdown_is_dropped():
    dispatcher = NotificationDispatcher(FlakySink())
    dispatcher.shutdown()

    assert dispatcher.dispatch(NotificationEvent.upload_failed(5)) is None
    assert dispatcher.failed == 1


def test_sql_sink_persists_event(session_factory):
    sink = SqlNotificationSink(session_factory)
    sink.notify(NotificationEvent.upload_failed(42))

    rows = sink.list_for_video(42)
    assert len(rows) == 1
    assert rows[0].kind == NotificationKind.ERROR
    assert rows[0].body == "The upload has failed."
    assert rows[0].name == "Upload Status"
    assert rows[0].is_read is False


def test_logging_sink_logs_errors(caplog):
    with caplog.at_level("INFO"):
        LoggingNotificationSink().notify(NotificationEvent.upload_failed(9))
    assert "asset=9" in caplog.text
    assert any(r.levelname == "ERROR" for r in caplog.records)


def test_result_history_is_bounded():
    """
    A long-running dispatcher keeps only recent outcomes, while the
    delivered/failed counts still cover every event.
    """
    sink = FlakySink(fail_for=0)
    dispatcher = NotificationDispatcher(sink, history=100)

    for i in range(500):
        dispatcher.dispatch(NotificationEvent.upload_succeeded(i))

    assert dispatcher.flush(timeout=10)
    assert len(dispatcher.results()) == 100
    assert dispatcher.delivered == 499
    assert dispatcher.failed == 1
    dispatcher.shutdown()


def test_pipeline_can_run_with_logging_sink(test_settings, session_factory, caplog):
    pipeline = VideoPipeline.from_settings(
        test_settings, session_factory=session_factory, sink=LoggingNotificationSink(),
    )
    assert isinstance(pipeline.dispatcher.sink, LoggingNotificationSink)

    with caplog.at_level("INFO"):
        pipeline.dispatcher.dispatch(NotificationEvent.upload_succeeded(3))
        assert pipeline.dispatcher.flush(timeout=5)
    pipeline.dispatcher.shutdown()

    assert "asset=3" in caplog.text
