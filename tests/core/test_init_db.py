from sqlalchemy import create_engine, inspect

from streamvault.core.database.init_db import init_db


def test_init_db_creates_database_and_tables(tmp_path):
    """
    Verifies that a missing database file is created along with the
    videos and notifications tables, and that a second run is harmless.
    """
    url = f"sqlite:///{tmp_path / 'fresh.db'}"
    assert not (tmp_path / "fresh.db").exists()

    tables = init_db(url)

    assert (tmp_path / "fresh.db").exists()
    assert {"videos", "notifications"} <= set(tables)

    # Idempotent
    assert set(init_db(url)) == set(tables)

    engine = create_engine(url)
    columns = {c["name"] for c in inspect(engine).get_columns("videos")}
    engine.dispose()
    assert {"uuid", "hash_name", "status", "duration", "deleted_at"} <= columns
