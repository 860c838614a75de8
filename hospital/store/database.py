from contextlib import AbstractContextManager
from typing import Any

from loguru import logger
from sqlalchemy import create_engine, event, make_url
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from hospital.store.tables import Base
from hospital.store.unit_of_work import UnitOfWork, transaction

SQLITE_BUSY_TIMEOUT = 30.0


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Engine and session factory owned by one process.

    Create it once at start-up, hand it to the services, and call
    :meth:`close` at shutdown.
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        kwargs: dict[str, Any] = {"echo": echo}
        parsed = make_url(url)
        is_sqlite = parsed.get_backend_name() == "sqlite"
        if is_sqlite:
            # Writers wait this long for a competing transaction before failing
            kwargs["connect_args"] = {"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT}
            if parsed.database in (None, "", ":memory:"):
                # In-memory databases only live as long as their connection
                kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_pre_ping"] = True

        self.url = url
        self.engine: Engine = create_engine(url, **kwargs)
        if is_sqlite:
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self._session_factory = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )
        logger.info("Database engine created: dialect={}", self.engine.dialect.name)

    def create_schema(self) -> None:
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema ready")

    def unit_of_work(self, operation: str) -> AbstractContextManager[UnitOfWork]:
        """Open a unit of work. ``operation`` names it in errors and logs."""
        return transaction(self._session_factory, operation)

    def session(self) -> Session:
        """Bare session for tests and maintenance scripts."""
        return self._session_factory()

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")
