"""Appointment status state machine.

``SCHEDULED`` is the only initial state. ``ATTENDED`` and ``CANCELLED`` are
terminal: nothing leaves them, and an appointment in either can no longer be
rescheduled.
"""

from hospital.domain.exceptions import IllegalTransitionError, ValidationError
from hospital.domain.models import AppointmentStatus

INITIAL_STATUS = AppointmentStatus.SCHEDULED

_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset(
        {AppointmentStatus.ATTENDED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.ATTENDED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}


def is_terminal(status: AppointmentStatus) -> bool:
    return not _TRANSITIONS[status]


def can_be_cancelled(status: AppointmentStatus) -> bool:
    return AppointmentStatus.CANCELLED in _TRANSITIONS[status]


def can_be_attended(status: AppointmentStatus) -> bool:
    return AppointmentStatus.ATTENDED in _TRANSITIONS[status]


def transition(
    current: AppointmentStatus, target: AppointmentStatus | str | None
) -> AppointmentStatus:
    """Validate a status change and return the new status.

    Raises:
        ValidationError: If ``target`` is missing or not a known status.
        IllegalTransitionError: If ``current`` does not allow moving to ``target``.
    """
    if target is None:
        raise ValidationError("New status must not be empty", field="status")
    try:
        target = AppointmentStatus(target)
    except ValueError:
        raise ValidationError(f"Unknown appointment status '{target}'", field="status") from None
    if target not in _TRANSITIONS[current]:
        raise IllegalTransitionError(current.value, target.value)
    return target


def ensure_modifiable(status: AppointmentStatus) -> None:
    """Only SCHEDULED appointments may change date-time or reason."""
    if status != AppointmentStatus.SCHEDULED:
        raise IllegalTransitionError(status.value)
