import datetime as dt

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from hospital.domain.models import Specialty
from hospital.store.tables import AppointmentRow, DoctorRow, MedicalHistoryRow, PatientRow
from hospital.store.unit_of_work import UnitOfWork


def patient_by_national_id(uow: UnitOfWork, national_id: str) -> PatientRow | None:
    stmt = select(PatientRow).where(PatientRow.national_id == national_id)
    return uow.session.scalars(stmt).first()


def patient_by_email(uow: UnitOfWork, email: str) -> PatientRow | None:
    stmt = select(PatientRow).where(PatientRow.email == email)
    return uow.session.scalars(stmt).first()


def doctor_by_license(uow: UnitOfWork, license_number: str) -> DoctorRow | None:
    stmt = select(DoctorRow).where(DoctorRow.license_number == license_number)
    return uow.session.scalars(stmt).first()


def doctor_by_email(uow: UnitOfWork, email: str) -> DoctorRow | None:
    stmt = select(DoctorRow).where(DoctorRow.email == email)
    return uow.session.scalars(stmt).first()


def doctors_by_specialty(uow: UnitOfWork, specialty: Specialty) -> list[DoctorRow]:
    stmt = select(DoctorRow).where(DoctorRow.specialty == specialty).order_by(DoctorRow.name)
    return list(uow.session.scalars(stmt).all())


def doctors_with_upcoming(uow: UnitOfWork, now: dt.datetime) -> list[DoctorRow]:
    """Every doctor by name, with ``appointments`` holding only those at or after ``now``."""
    stmt = (
        select(DoctorRow)
        .options(selectinload(DoctorRow.appointments.and_(AppointmentRow.scheduled_at >= now)))
        .order_by(DoctorRow.name)
        .execution_options(populate_existing=True)
    )
    return list(uow.session.scalars(stmt).all())


def history_by_national_id(uow: UnitOfWork, national_id: str) -> MedicalHistoryRow | None:
    stmt = (
        select(MedicalHistoryRow)
        .join(PatientRow, MedicalHistoryRow.patient_id == PatientRow.id)
        .where(PatientRow.national_id == national_id)
    )
    return uow.session.scalars(stmt).first()
