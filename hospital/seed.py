import datetime as dt

from loguru import logger

from hospital.config import AppConfig, configure_logging
from hospital.domain.exceptions import HospitalError
from hospital.domain.models import Specialty
from hospital.factory import HospitalServices, build_services

DEMO_DOCTORS: list[tuple[str, str, Specialty, str]] = [
    ("Dr. Elena Morales", "COL-1001", Specialty.CARDIOLOGY, "emorales@hospital.test"),
    ("Dr. Andres Pineda", "COL-1002", Specialty.PEDIATRICS, "apineda@hospital.test"),
    ("Dr. Lucia Herrera", "COL-1003", Specialty.DERMATOLOGY, "lherrera@hospital.test"),
    ("Dr. Tomas Castillo", "COL-1004", Specialty.NEUROLOGY, "tcastillo@hospital.test"),
]

DEMO_PATIENTS: list[tuple[str, str, dt.date, str, str | None]] = [
    ("Maria Lopez", "2501-00001", dt.date(1985, 4, 12), "maria.lopez@mail.test", "5550-1001"),
    ("Jose Ramirez", "2501-00002", dt.date(1972, 11, 3), "jose.ramirez@mail.test", None),
    ("Ana Gutierrez", "2501-00003", dt.date(1999, 7, 21), "ana.gutierrez@mail.test", "5550-1003"),
]


def seed(services: HospitalServices) -> None:
    """Load demo doctors, patients and next-day appointments. Safe to re-run."""
    today = services.clock().date()
    doctor_ids: list[int] = []
    for name, license_number, specialty, email in DEMO_DOCTORS:
        existing = services.doctors.find_by_license(license_number)
        if existing:
            logger.info("Doctor already exists: {}", name)
            doctor_ids.append(existing.id)
            continue
        doctor = services.doctors.register_doctor(name, license_number, specialty, email)
        doctor_ids.append(doctor.id)

    patient_ids: list[int] = []
    for name, national_id, birth_date, email, phone in DEMO_PATIENTS:
        existing_patient = services.patients.find_by_national_id(national_id)
        if existing_patient:
            logger.info("Patient already exists: {}", name)
            patient_ids.append(existing_patient.id)
            continue
        patient = services.patients.register_patient(name, national_id, birth_date, email, phone)
        patient_ids.append(patient.id)

    services.histories.create_or_update(
        patient_ids[0], allergies="Penicillin", background="Hypertension"
    )

    tomorrow = today + dt.timedelta(days=1)
    for offset, (patient_id, doctor_id) in enumerate(zip(patient_ids, doctor_ids)):
        slot = dt.datetime.combine(tomorrow, dt.time(9 + offset, 0))
        try:
            services.scheduling.schedule_appointment(patient_id, doctor_id, slot, "General check-up")
        except HospitalError as exc:
            logger.info("Skipping demo appointment: {}", exc)


def main() -> None:
    config = AppConfig()
    configure_logging(config.log_level)
    services = build_services(config)
    try:
        services.database.create_schema()
        seed(services)
        logger.info("Demo data loaded")
    finally:
        services.close()


if __name__ == "__main__":
    main()
