"""Phase schemas for the authentication and booking flows.

Each flow is a tagged variant: exactly one phase at a time, so combinations
such as "loading and succeeded" cannot be represented.
"""
from enum import Enum
from typing import Dict, List


class AuthPhase(str, Enum):
    """Login/registration form phases."""
    EDITING = "editing"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


class BookingPhase(str, Enum):
    """Booking modal phases."""
    CLOSED = "closed"
    OPEN = "open"
    FILLING = "filling"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


# Pattern: Current phase → [allowed next phases]
AUTH_TRANSITIONS: Dict[AuthPhase, List[AuthPhase]] = {
    AuthPhase.EDITING: [AuthPhase.EDITING, AuthPhase.VALIDATING],
    AuthPhase.VALIDATING: [
        AuthPhase.EDITING,  # Rule failure, back to the form
        AuthPhase.SUBMITTING,
    ],
    AuthPhase.SUBMITTING: [AuthPhase.SUCCESS, AuthPhase.FAILED],
    AuthPhase.SUCCESS: [],
    AuthPhase.FAILED: [
        AuthPhase.EDITING,
        AuthPhase.VALIDATING,  # Resubmit without editing
    ],
}

BOOKING_TRANSITIONS: Dict[BookingPhase, List[BookingPhase]] = {
    BookingPhase.CLOSED: [BookingPhase.OPEN],
    BookingPhase.OPEN: [BookingPhase.FILLING, BookingPhase.SUBMITTING, BookingPhase.CLOSED],
    BookingPhase.FILLING: [BookingPhase.FILLING, BookingPhase.SUBMITTING, BookingPhase.CLOSED],
    BookingPhase.SUBMITTING: [BookingPhase.SUCCESS, BookingPhase.FAILED, BookingPhase.CLOSED],
    BookingPhase.SUCCESS: [BookingPhase.CLOSED],
    BookingPhase.FAILED: [BookingPhase.FILLING, BookingPhase.SUBMITTING, BookingPhase.CLOSED],
}


def validate_transition(current: Enum, intended: Enum) -> bool:
    """
    Validate a phase transition for either flow.

    Example:
        >>> validate_transition(BookingPhase.CLOSED, BookingPhase.OPEN)
        True
    """
    if isinstance(current, AuthPhase):
        table = AUTH_TRANSITIONS
    elif isinstance(current, BookingPhase):
        table = BOOKING_TRANSITIONS
    else:
        return False
    return intended in table.get(current, [])
