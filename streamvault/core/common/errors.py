# File: streamvault/core/common/errors.py


class PipelineError(Exception):
    """
    Base failure for the ingestion-to-playback pipeline.
    Carries a stable operation tag (e.g. "IngestionService.ingest") so the
    HTTP layer can log where it failed while only ever answering "failed".
    """

    def __init__(self, op: str, message: str):
        super().__init__(f"{op}: {message}")
        self.op = op
        self.message = message


class IngestionError(PipelineError):
    """I/O failure, probe failure or storage-write failure during upload."""


class EncodeError(PipelineError):
    """A single-resolution encoder pass failed."""

    def __init__(self, op: str, message: str, label: str = ""):
        super().__init__(op, message)
        self.label = label


class PersistenceError(PipelineError):
    """A repository call failed."""


class InvalidTransitionError(PersistenceError):
    """A status change that would break the Processing -> Processed|Failed machine."""


class ResolutionNotFoundError(PipelineError):
    """The playback resolver exhausted the exact path and every fallback."""
