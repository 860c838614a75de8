from loguru import logger

from hospital.domain.exceptions import DuplicateRecordError, NotFoundError
from hospital.domain.models import MedicalHistory
from hospital.domain.validation import ALLERGIES_MAX, NOTES_MAX, max_length, require
from hospital.store.database import Database
from hospital.store.queries import people
from hospital.store.repository import Store
from hospital.store.tables import MedicalHistoryRow, PatientRow


def _validate_notes(allergies: str | None, background: str | None, observations: str | None) -> None:
    max_length(allergies, ALLERGIES_MAX, "allergies")
    max_length(background, NOTES_MAX, "background")
    max_length(observations, NOTES_MAX, "observations")


class MedicalHistoryService:
    """One free-text medical history per patient, keyed by the patient's ID."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._patients: Store[PatientRow] = Store(PatientRow)
        self._histories: Store[MedicalHistoryRow] = Store(MedicalHistoryRow)

    def create_history(
        self,
        patient_id: int | None,
        allergies: str | None = None,
        background: str | None = None,
        observations: str | None = None,
    ) -> MedicalHistory:
        require(patient_id, "patient_id")
        _validate_notes(allergies, background, observations)

        with self._db.unit_of_work("create medical history") as uow:
            patient = self._patients.find_by_id(uow, patient_id)
            if patient is None:
                raise NotFoundError("Patient", patient_id)
            if self._histories.find_by_id(uow, patient_id) is not None:
                raise DuplicateRecordError(
                    f"Patient {patient_id} already has a medical history"
                )
            row = self._histories.add(
                uow,
                MedicalHistoryRow(
                    patient=patient,
                    allergies=allergies,
                    background=background,
                    observations=observations,
                ),
            )
            history = MedicalHistory.model_validate(row)
            uow.commit()

        logger.info("Medical history created for patient {}", patient_id)
        return history

    def update_history(
        self,
        patient_id: int | None,
        allergies: str | None = None,
        background: str | None = None,
        observations: str | None = None,
    ) -> MedicalHistory:
        """Replace all three notes fields."""
        require(patient_id, "patient_id")
        _validate_notes(allergies, background, observations)

        with self._db.unit_of_work("update medical history") as uow:
            row = self._histories.find_by_id(uow, patient_id)
            if row is None:
                raise NotFoundError("MedicalHistory", patient_id)
            row.allergies = allergies
            row.background = background
            row.observations = observations
            row = self._histories.merge(uow, row)
            history = MedicalHistory.model_validate(row)
            uow.commit()

        logger.info("Medical history updated for patient {}", patient_id)
        return history

    def create_or_update(
        self,
        patient_id: int | None,
        allergies: str | None = None,
        background: str | None = None,
        observations: str | None = None,
    ) -> MedicalHistory:
        if self.has_history(patient_id):
            return self.update_history(patient_id, allergies, background, observations)
        return self.create_history(patient_id, allergies, background, observations)

    def get_history(self, patient_id: int | None) -> MedicalHistory | None:
        with self._db.unit_of_work("find medical history") as uow:
            row = self._histories.find_by_id(uow, patient_id)
            return MedicalHistory.model_validate(row) if row is not None else None

    def get_by_national_id(self, national_id: str | None) -> MedicalHistory | None:
        if national_id is None or not national_id.strip():
            return None
        with self._db.unit_of_work("find medical history by national ID") as uow:
            row = people.history_by_national_id(uow, national_id.strip())
            return MedicalHistory.model_validate(row) if row is not None else None

    def has_history(self, patient_id: int | None) -> bool:
        return self.get_history(patient_id) is not None

    def delete_history(self, patient_id: int | None) -> bool:
        if patient_id is None:
            return False
        with self._db.unit_of_work("delete medical history") as uow:
            row = self._histories.find_by_id(uow, patient_id)
            if row is None:
                return False
            self._histories.remove(uow, row)
            uow.commit()

        logger.info("Medical history deleted for patient {}", patient_id)
        return True
