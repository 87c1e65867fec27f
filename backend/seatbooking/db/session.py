"""
Engine and session factories for partition storage.

Each flight partition owns a private SQLite database file. The file name is a
SHA-256 digest of the flight id so any identifier maps to a stable, safe path
(the same flight always reopens the same file after a restart).
"""

import hashlib
from pathlib import Path

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from seatbooking.core.config import Settings


def partition_db_path(data_dir: str, flight_id: str) -> Path:
    digest = hashlib.sha256(flight_id.encode("utf-8")).hexdigest()
    return Path(data_dir) / f"flight-{digest[:32]}.sqlite3"


def create_partition_engine(settings: Settings, flight_id: str) -> Engine:
    """Create the engine backing one flight partition, creating DATA_DIR if needed."""
    path = partition_db_path(settings.DATA_DIR, flight_id)
    path.parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(
        f"sqlite:///{path}",
        echo=settings.DATABASE_ECHO,
        # The partition worker runs on the event loop thread, which may differ
        # from the thread that created the engine.
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragmas(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself so DDL joins the transaction too
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin_transaction(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)
