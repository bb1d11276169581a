"""Short operator-facing messages and HTTP statuses for every terminal state."""
from __future__ import annotations

from ..core.enums import Outcome
from ..core.exceptions import (
    AmbiguousEvent,
    DomainError,
    EventNotFound,
    InvalidScan,
    NoOpenSession,
    SessionAlreadyClosed,
    StateConflict,
    StoreError,
    UserInactive,
    UserNotFound,
)
from .model import ReconciliationResult

_OUTCOME_STATUS = {
    Outcome.OPENED: 200,
    Outcome.CLOSED: 200,
    Outcome.NO_OP: 200,
    Outcome.LOCATION_REQUIRED: 202,
}


def outcome_message(result: ReconciliationResult) -> str:
    if result.outcome == Outcome.OPENED:
        msg = f"Clocked in at {result.location}"
        if result.event_id:
            msg += f" for event {result.event_id}"
        return msg + (" (late)" if result.is_late else "")
    if result.outcome == Outcome.CLOSED:
        msg = f"Clocked out. Hours worked: {result.hours_worked:.2f}"
        if result.hours_clamped:
            msg += " (adjusted, flagged for review)"
        return msg
    if result.outcome == Outcome.NO_OP:
        return "Already clocked in. No action needed"
    if result.outcome == Outcome.LOCATION_REQUIRED:
        return "Please select a location and scan again"
    return result.outcome.value


def outcome_status(result: ReconciliationResult) -> int:
    return _OUTCOME_STATUS.get(result.outcome, 200)


def error_message(error: Exception) -> str:
    if isinstance(error, UserNotFound):
        return "Unknown member. Check the QR code"
    if isinstance(error, UserInactive):
        return "This member is inactive. Contact an administrator"
    if isinstance(error, AmbiguousEvent):
        return "Several events match. Choose the event and scan again"
    if isinstance(error, EventNotFound):
        return "The selected event does not exist"
    if isinstance(error, NoOpenSession):
        return "No open clock-in found. Contact an administrator"
    if isinstance(error, SessionAlreadyClosed):
        return "Already clocked out. No action needed"
    if isinstance(error, InvalidScan):
        return f"Invalid scan: {error}"
    if isinstance(error, StoreError):
        return "Attendance storage is unavailable. Please try again"
    return str(error) or "Attendance error"


def error_status(error: Exception) -> int:
    if isinstance(error, (UserNotFound, EventNotFound)):
        return 404
    if isinstance(error, StateConflict):
        return 409
    if isinstance(error, DomainError):
        return 400
    if isinstance(error, StoreError):
        return 503
    return 500


def error_code(error: Exception) -> str:
    return type(error).__name__
