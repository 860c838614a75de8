import datetime as dt
from collections.abc import Iterator

import pytest

from hospital.domain.models import Doctor, Patient, Specialty
from hospital.factory import HospitalServices
from hospital.services.scheduling import SchedulingService
from hospital.store.database import Database

NOW = dt.datetime(2026, 3, 10, 8, 0)
TOMORROW_NINE = dt.datetime(2026, 3, 11, 9, 0)
NEXT_WEEK = dt.datetime(2026, 3, 17, 9, 0)


@pytest.fixture
def database() -> Iterator[Database]:
    db = Database("sqlite://")
    db.create_schema()
    yield db
    db.close()


@pytest.fixture
def services(database: Database) -> HospitalServices:
    return HospitalServices(database, clock=lambda: NOW)


@pytest.fixture
def scheduling(services: HospitalServices) -> SchedulingService:
    return services.scheduling


@pytest.fixture
def patient(services: HospitalServices) -> Patient:
    return services.patients.register_patient(
        "Maria Lopez", "2501-00001", dt.date(1985, 4, 12), "maria.lopez@mail.test", "5550-1001"
    )


@pytest.fixture
def other_patient(services: HospitalServices) -> Patient:
    return services.patients.register_patient(
        "Jose Ramirez", "2501-00002", dt.date(1972, 11, 3), "jose.ramirez@mail.test"
    )


@pytest.fixture
def doctor(services: HospitalServices) -> Doctor:
    return services.doctors.register_doctor(
        "Dr. Elena Morales", "COL-1001", Specialty.CARDIOLOGY, "emorales@hospital.test"
    )


@pytest.fixture
def other_doctor(services: HospitalServices) -> Doctor:
    return services.doctors.register_doctor(
        "Dr. Andres Pineda", "COL-1002", Specialty.PEDIATRICS, "apineda@hospital.test"
    )
