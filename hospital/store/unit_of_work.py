from collections.abc import Iterator
from contextlib import contextmanager
from types import TracebackType

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from hospital.domain.exceptions import HospitalError, PersistenceError


class UnitOfWork:
    """A single transaction boundary over one session.

    Entering begins a transaction. Leaving rolls back whatever was not
    committed and always closes the session, whether the block succeeded or
    raised. Callers commit explicitly with :meth:`commit`.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        self._session: Session | None = None

    @property
    def session(self) -> Session:
        if self._session is None:
            raise RuntimeError("Unit of work has not been started")
        return self._session

    def __enter__(self) -> "UnitOfWork":
        self._session = self._session_factory()
        self._session.begin()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        session = self.session
        try:
            if session.in_transaction():
                if exc_type is not None:
                    logger.debug("Rolling back unit of work after {}", exc_type.__name__)
                session.rollback()
        finally:
            session.close()
            self._session = None

    def commit(self) -> None:
        self.session.commit()

    def flush(self) -> None:
        self.session.flush()


@contextmanager
def transaction(session_factory: sessionmaker[Session], operation: str) -> Iterator[UnitOfWork]:
    """Run a block inside a unit of work named after ``operation``.

    Domain errors pass through unchanged. Store failures are wrapped in
    :class:`PersistenceError` once the rollback has happened.
    """
    try:
        with UnitOfWork(session_factory) as uow:
            yield uow
    except HospitalError:
        raise
    except SQLAlchemyError as exc:
        logger.error("Store failure during '{}': {}", operation, exc)
        raise PersistenceError(operation, exc) from exc
