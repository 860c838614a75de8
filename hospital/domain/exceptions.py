import datetime as dt

SLOT_FORMAT = "%d/%m/%Y %H:%M"


class HospitalError(Exception):
    """Base exception for all hospital domain errors."""


class ValidationError(HospitalError):
    """Raised when a required field is missing or malformed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class InvalidEmailError(ValidationError):
    """Raised when an email address does not have a valid format."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"Email '{email}' is not a valid address", field="email")


class NotFoundError(HospitalError):
    """Raised when a referenced record does not exist."""

    def __init__(self, entity: str, identity: object) -> None:
        self.entity = entity
        self.identity = identity
        super().__init__(f"{entity} with ID {identity} was not found")


class InvalidDateError(HospitalError):
    """Raised when an appointment date-time is not strictly in the future."""

    def __init__(self, value: dt.datetime) -> None:
        self.value = value
        super().__init__(
            f"Date and time {value.strftime(SLOT_FORMAT)} is not valid. "
            "Appointments must be scheduled for future dates."
        )


class SchedulingConflictError(HospitalError):
    """Raised when the doctor already has an active appointment in the slot."""

    def __init__(self, doctor_name: str, scheduled_at: dt.datetime) -> None:
        self.doctor_name = doctor_name
        self.scheduled_at = scheduled_at
        super().__init__(
            f"Doctor {doctor_name} already has an appointment scheduled for "
            f"{scheduled_at.strftime(SLOT_FORMAT)}"
        )


class IllegalTransitionError(HospitalError):
    """Raised when an appointment in a terminal state is changed."""

    def __init__(self, current: object, target: object | None = None) -> None:
        self.current = current
        self.target = target
        if target is None:
            message = f"Appointment in status {current} can no longer be modified"
        else:
            message = f"Cannot change appointment status from {current} to {target}"
        super().__init__(message)


class DuplicateRecordError(HospitalError):
    """Raised when a unique business key is already registered."""


class PatientAlreadyExistsError(DuplicateRecordError):
    def __init__(self, national_id: str) -> None:
        self.national_id = national_id
        super().__init__(f"A patient with national ID {national_id} is already registered")


class DoctorAlreadyExistsError(DuplicateRecordError):
    def __init__(self, license_number: str) -> None:
        self.license_number = license_number
        super().__init__(f"A doctor with license number {license_number} is already registered")


class ReferentialIntegrityError(HospitalError):
    """Raised when a record cannot be removed because others still reference it."""


class PersistenceError(HospitalError):
    """Raised when the underlying store fails. Wraps the original cause."""

    def __init__(self, operation: str, cause: BaseException) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"Failed to {operation}: {cause}")
