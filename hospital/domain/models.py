import datetime as dt
from enum import Enum

from pydantic import BaseModel, ConfigDict


class AppointmentStatus(str, Enum):
    """Possible states of an appointment."""

    SCHEDULED = "SCHEDULED"
    ATTENDED = "ATTENDED"
    CANCELLED = "CANCELLED"


class Specialty(str, Enum):
    CARDIOLOGY = "CARDIOLOGY"
    DERMATOLOGY = "DERMATOLOGY"
    GYNECOLOGY = "GYNECOLOGY"
    NEUROLOGY = "NEUROLOGY"
    OPHTHALMOLOGY = "OPHTHALMOLOGY"
    PEDIATRICS = "PEDIATRICS"
    PSYCHIATRY = "PSYCHIATRY"
    TRAUMATOLOGY = "TRAUMATOLOGY"


class Patient(BaseModel):
    """A registered patient."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    name: str
    national_id: str
    birth_date: dt.date
    phone: str | None = None
    email: str


class Doctor(BaseModel):
    """A doctor who can hold appointments."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    name: str
    license_number: str
    specialty: Specialty
    email: str


class MedicalHistory(BaseModel):
    """Free-text clinical notes, one record per patient.

    ``patient_id`` doubles as the record's identity.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    patient_id: int
    allergies: str | None = None
    background: str | None = None
    observations: str | None = None

    @property
    def has_information(self) -> bool:
        return any(
            value is not None and value.strip()
            for value in (self.allergies, self.background, self.observations)
        )


class Appointment(BaseModel):
    """An appointment between one patient and one doctor at an exact slot."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    scheduled_at: dt.datetime
    reason: str | None = None
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    patient_id: int
    doctor_id: int
    patient_name: str | None = None
    doctor_name: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status == AppointmentStatus.SCHEDULED


class DoctorAgenda(BaseModel):
    """A doctor together with their appointments from now on, earliest first."""

    model_config = ConfigDict(frozen=True)

    doctor: Doctor
    upcoming: list[Appointment] = []
