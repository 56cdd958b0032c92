"""
Database handle with an explicit lifecycle.

A `Database` is constructed once per process by the runtime, opened at
startup and closed at shutdown. Components receive it (or the store built
on it) at construction time instead of importing a module-level engine.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from captionkit.exceptions import CaptionKitError
from captionkit.storage.tables import Base
from captionkit.utils.logging import get_logger

log = get_logger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:  # noqa: ANN001
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    def __init__(self, url: str) -> None:
        self.url = url
        self._engine: Engine | None = None
        self._sessions: sessionmaker | None = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def open(self) -> "Database":
        if self._engine is not None:
            return self
        connect_args = {}
        if self.url.startswith("sqlite"):
            # Background transcription threads share the engine.
            connect_args["check_same_thread"] = False
        engine = create_engine(self.url, future=True, connect_args=connect_args)
        if self.url.startswith("sqlite"):
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        Base.metadata.create_all(engine)
        self._engine = engine
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False, future=True)
        log.debug("Database opened: %s", self.url)
        return self

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._sessions = None
        log.debug("Database closed: %s", self.url)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on error."""
        if self._sessions is None:
            raise CaptionKitError("Database is not open.")
        session = self._sessions()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, *_exc) -> None:  # noqa: ANN002
        self.close()
