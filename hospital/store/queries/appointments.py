import datetime as dt

from sqlalchemy import exists, func, select

from hospital.domain.models import AppointmentStatus
from hospital.store.tables import AppointmentRow
from hospital.store.unit_of_work import UnitOfWork


def exists_scheduled(
    uow: UnitOfWork,
    doctor_id: int,
    scheduled_at: dt.datetime,
    exclude_id: int | None = None,
) -> bool:
    """Whether a SCHEDULED appointment holds the doctor's exact slot."""
    condition = (
        (AppointmentRow.doctor_id == doctor_id)
        & (AppointmentRow.scheduled_at == scheduled_at)
        & (AppointmentRow.status == AppointmentStatus.SCHEDULED)
    )
    if exclude_id is not None:
        condition = condition & (AppointmentRow.id != exclude_id)
    return bool(uow.session.scalar(select(exists().where(condition))))


def by_patient(uow: UnitOfWork, patient_id: int) -> list[AppointmentRow]:
    stmt = (
        select(AppointmentRow)
        .where(AppointmentRow.patient_id == patient_id)
        .order_by(AppointmentRow.scheduled_at.desc())
    )
    return list(uow.session.scalars(stmt).all())


def by_doctor(uow: UnitOfWork, doctor_id: int) -> list[AppointmentRow]:
    stmt = (
        select(AppointmentRow)
        .where(AppointmentRow.doctor_id == doctor_id)
        .order_by(AppointmentRow.scheduled_at.asc())
    )
    return list(uow.session.scalars(stmt).all())


def upcoming_by_doctor(uow: UnitOfWork, doctor_id: int, now: dt.datetime) -> list[AppointmentRow]:
    stmt = (
        select(AppointmentRow)
        .where(AppointmentRow.doctor_id == doctor_id, AppointmentRow.scheduled_at >= now)
        .order_by(AppointmentRow.scheduled_at.asc())
    )
    return list(uow.session.scalars(stmt).all())


def by_date_range(uow: UnitOfWork, start: dt.datetime, end: dt.datetime) -> list[AppointmentRow]:
    stmt = (
        select(AppointmentRow)
        .where(AppointmentRow.scheduled_at.between(start, end))
        .order_by(AppointmentRow.scheduled_at.asc())
    )
    return list(uow.session.scalars(stmt).all())


def by_status(uow: UnitOfWork, status: AppointmentStatus) -> list[AppointmentRow]:
    stmt = (
        select(AppointmentRow)
        .where(AppointmentRow.status == status)
        .order_by(AppointmentRow.scheduled_at.asc())
    )
    return list(uow.session.scalars(stmt).all())


def all_newest_first(uow: UnitOfWork) -> list[AppointmentRow]:
    stmt = select(AppointmentRow).order_by(AppointmentRow.scheduled_at.desc())
    return list(uow.session.scalars(stmt).all())


def count_by_doctor(uow: UnitOfWork, doctor_id: int) -> int:
    stmt = select(func.count(AppointmentRow.id)).where(AppointmentRow.doctor_id == doctor_id)
    return uow.session.scalar(stmt) or 0
