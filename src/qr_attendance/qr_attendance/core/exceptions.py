from __future__ import annotations

from typing import Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidScan(ValidationError):
    """Raised when a scan request is malformed."""


class UserNotFound(ValidationError):
    def __init__(self, user_id: str):
        super().__init__(f"User {user_id!r} not found")
        self.user_id = user_id


class UserInactive(ValidationError):
    def __init__(self, user_id: str):
        super().__init__(f"User {user_id!r} is inactive")
        self.user_id = user_id


class EventNotFound(ValidationError):
    def __init__(self, event_id: str):
        super().__init__(f"Event {event_id!r} not found")
        self.event_id = event_id


class AmbiguousEvent(ValidationError):
    """More than one scheduled event matches; the caller must pass an event hint."""

    def __init__(self, candidates: Sequence[str]):
        super().__init__(f"Several events match this scan: {', '.join(candidates)}")
        self.candidates = list(candidates)


class StateConflict(DomainError):
    """The scan conflicts with the persisted session state."""


class NoOpenSession(StateConflict):
    def __init__(self, user_id: str):
        super().__init__(f"No open session found for user {user_id!r}")
        self.user_id = user_id


class SessionAlreadyClosed(StateConflict):
    def __init__(self, session_key: str):
        super().__init__(f"Session {session_key!r} is already closed")
        self.session_key = session_key


class StoreError(Exception):
    """Raised when the backing tree store fails; callers may retry the whole request."""


class StoreTimeout(StoreError):
    """Raised when a store request does not complete within its time bound."""
