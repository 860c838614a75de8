from loguru import logger

from hospital.config import AppConfig
from hospital.domain.datetime_helpers import Clock, clinic_clock
from hospital.services.doctors import DoctorService
from hospital.services.histories import MedicalHistoryService
from hospital.services.patients import PatientService
from hospital.services.scheduling import SchedulingService
from hospital.store.database import Database


class HospitalServices:
    """Every service of the application, sharing one database handle."""

    def __init__(self, database: Database, clock: Clock) -> None:
        self.database = database
        self.clock = clock
        self.patients = PatientService(database, clock)
        self.doctors = DoctorService(database, clock)
        self.histories = MedicalHistoryService(database)
        self.scheduling = SchedulingService(database, clock)

    def close(self) -> None:
        self.database.close()


def build_services(config: AppConfig, clock: Clock | None = None) -> HospitalServices:
    """Build the services described by ``config``."""
    logger.info("Building hospital services for clinic timezone {}", config.clinic_timezone)
    database = Database(config.database.url, echo=config.database.echo)
    return HospitalServices(database, clock or clinic_clock(config.clinic_timezone))
