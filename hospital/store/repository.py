from typing import Generic, TypeVar

from sqlalchemy import select

from hospital.store.tables import Base
from hospital.store.unit_of_work import UnitOfWork

RowT = TypeVar("RowT", bound=Base)


class Store(Generic[RowT]):
    """Identity-based access to one table.

    Every call runs on the unit of work it is given; the store keeps no
    session of its own.
    """

    def __init__(self, row_type: type[RowT]) -> None:
        self._row_type = row_type

    def find_by_id(self, uow: UnitOfWork, identity: object) -> RowT | None:
        if identity is None:
            return None
        return uow.session.get(self._row_type, identity)

    def lock_by_id(self, uow: UnitOfWork, identity: object) -> RowT | None:
        """Load a row with ``SELECT ... FOR UPDATE``.

        Concurrent writers locking the same row wait for this unit of work to
        finish. Dialects without row locks (SQLite) ignore the clause.
        """
        if identity is None:
            return None
        return uow.session.get(self._row_type, identity, with_for_update=True)

    def add(self, uow: UnitOfWork, row: RowT) -> RowT:
        uow.session.add(row)
        uow.session.flush()
        return row

    def merge(self, uow: UnitOfWork, row: RowT) -> RowT:
        merged = uow.session.merge(row)
        uow.session.flush()
        return merged

    def remove(self, uow: UnitOfWork, row: RowT) -> None:
        uow.session.delete(row)
        uow.session.flush()

    def list_all(self, uow: UnitOfWork) -> list[RowT]:
        stmt = select(self._row_type).order_by(*self._row_type.__mapper__.primary_key)
        return list(uow.session.scalars(stmt).all())
