import datetime as dt

from loguru import logger

from hospital.domain.datetime_helpers import Clock
from hospital.domain.exceptions import (
    DuplicateRecordError,
    NotFoundError,
    PatientAlreadyExistsError,
)
from hospital.domain.models import Patient
from hospital.domain.validation import (
    NAME_MAX,
    NATIONAL_ID_MAX,
    PHONE_MAX,
    max_length,
    require,
    require_text,
    validate_birth_date,
    validate_email,
)
from hospital.store.database import Database
from hospital.store.queries import people
from hospital.store.repository import Store
from hospital.store.tables import PatientRow
from hospital.store.unit_of_work import UnitOfWork


class PatientService:
    """Registration and upkeep of patient records."""

    def __init__(self, database: Database, clock: Clock) -> None:
        self._db = database
        self._clock = clock
        self._patients: Store[PatientRow] = Store(PatientRow)

    def register_patient(
        self,
        name: str | None,
        national_id: str | None,
        birth_date: dt.date | None,
        email: str | None,
        phone: str | None = None,
    ) -> Patient:
        name = require_text(name, NAME_MAX, "name")
        national_id = require_text(national_id, NATIONAL_ID_MAX, "national_id")
        birth_date = validate_birth_date(birth_date, self._clock().date())
        email = validate_email(email)
        max_length(phone, PHONE_MAX, "phone")

        with self._db.unit_of_work("register patient") as uow:
            self._ensure_unique(uow, national_id=national_id, email=email)
            row = self._patients.add(
                uow,
                PatientRow(
                    name=name,
                    national_id=national_id,
                    birth_date=birth_date,
                    phone=phone,
                    email=email,
                ),
            )
            patient = Patient.model_validate(row)
            uow.commit()

        logger.info("Patient registered: id={}", patient.id)
        return patient

    def update_patient(
        self,
        patient_id: int | None,
        *,
        name: str | None = None,
        national_id: str | None = None,
        birth_date: dt.date | None = None,
        email: str | None = None,
        phone: str | None = None,
    ) -> Patient:
        """Apply the supplied fields; fields left as ``None`` keep their value."""
        require(patient_id, "patient_id")

        with self._db.unit_of_work("update patient") as uow:
            row = self._patients.find_by_id(uow, patient_id)
            if row is None:
                raise NotFoundError("Patient", patient_id)

            if name is not None:
                row.name = require_text(name, NAME_MAX, "name")
            if national_id is not None:
                national_id = require_text(national_id, NATIONAL_ID_MAX, "national_id")
                if national_id != row.national_id:
                    self._ensure_unique(uow, national_id=national_id)
                row.national_id = national_id
            if birth_date is not None:
                row.birth_date = validate_birth_date(birth_date, self._clock().date())
            if email is not None:
                email = validate_email(email)
                if email != row.email:
                    self._ensure_unique(uow, email=email)
                row.email = email
            if phone is not None:
                max_length(phone, PHONE_MAX, "phone")
                row.phone = phone

            row = self._patients.merge(uow, row)
            patient = Patient.model_validate(row)
            uow.commit()

        logger.info("Patient updated: id={}", patient.id)
        return patient

    def get_patient(self, patient_id: int | None) -> Patient | None:
        with self._db.unit_of_work("find patient") as uow:
            row = self._patients.find_by_id(uow, patient_id)
            return Patient.model_validate(row) if row is not None else None

    def find_by_national_id(self, national_id: str | None) -> Patient | None:
        if national_id is None or not national_id.strip():
            return None
        with self._db.unit_of_work("find patient by national ID") as uow:
            row = people.patient_by_national_id(uow, national_id.strip())
            return Patient.model_validate(row) if row is not None else None

    def list_patients(self) -> list[Patient]:
        with self._db.unit_of_work("list patients") as uow:
            return [Patient.model_validate(row) for row in self._patients.list_all(uow)]

    def delete_patient(self, patient_id: int | None) -> bool:
        """Remove a patient along with their medical history and appointments."""
        if patient_id is None:
            return False
        with self._db.unit_of_work("delete patient") as uow:
            row = self._patients.find_by_id(uow, patient_id)
            if row is None:
                return False
            self._patients.remove(uow, row)
            uow.commit()

        logger.info("Patient deleted: id={}", patient_id)
        return True

    def _ensure_unique(
        self, uow: UnitOfWork, national_id: str | None = None, email: str | None = None
    ) -> None:
        if national_id is not None and people.patient_by_national_id(uow, national_id):
            raise PatientAlreadyExistsError(national_id)
        if email is not None and people.patient_by_email(uow, email):
            raise DuplicateRecordError(f"A patient with email {email} is already registered")
