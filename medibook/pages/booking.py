"""Booking modal state machine.

CLOSED → OPEN(doctor) → FILLING → SUBMITTING → {SUCCESS, FAILED}

The draft lives only inside the modal: opening resets it, closing discards it
whatever the phase, and a successful booking is confirmed until dismissed.
"""
from datetime import date
from typing import Dict, Optional

from medibook.errors import ApiError, InvalidTransitionError
from medibook.logging_config import get_logger
from medibook.models import Doctor
from medibook.state import BookingPhase, validate_transition
from medibook.validation import FormErrors, combine_date_time, validate_booking

logger = get_logger(__name__)

DRAFT_FIELDS = ("selected_date", "selected_time", "reason")


def _empty_draft(doctor_id: str = "") -> Dict[str, str]:
    return {
        "doctor_id": doctor_id,
        "selected_date": "",
        "selected_time": "",
        "reason": "",
    }


class BookingModal:
    """Collects and submits one appointment request for one doctor."""

    def __init__(self, api, session):
        self.api = api
        self.session = session
        self.phase = BookingPhase.CLOSED
        self.doctor: Optional[Doctor] = None
        self.draft = _empty_draft()
        self.errors: FormErrors = {}
        self.appointment: Optional[dict] = None

    def _transition(self, intended: BookingPhase):
        if not validate_transition(self.phase, intended):
            raise InvalidTransitionError(f"{self.phase.value} → {intended.value}")
        self.phase = intended

    @property
    def is_open(self) -> bool:
        return self.phase is not BookingPhase.CLOSED

    @property
    def is_busy(self) -> bool:
        return self.phase is BookingPhase.SUBMITTING

    def open(self, doctor: Optional[Doctor]):
        """Capture the target doctor and start from an empty draft."""
        if self.is_open:
            self.close()
        self.doctor = doctor
        self.draft = _empty_draft(doctor.id if doctor else "")
        self.errors = {}
        self.appointment = None
        self._transition(BookingPhase.OPEN)

    def close(self):
        """Dismiss the modal; the draft is dropped without confirmation."""
        if self.phase is BookingPhase.CLOSED:
            return
        self._transition(BookingPhase.CLOSED)
        self.doctor = None
        self.draft = _empty_draft()
        self.errors = {}

    def update_field(self, field: str, value: str):
        if field not in DRAFT_FIELDS:
            raise ValueError(f"Unknown field: {field}")
        if self.phase not in (BookingPhase.OPEN, BookingPhase.FILLING, BookingPhase.FAILED):
            raise InvalidTransitionError(f"Cannot edit draft while {self.phase.value}")
        self._transition(BookingPhase.FILLING)
        self.draft[field] = value
        self.errors.pop(field, None)

    def _reject(self, errors: FormErrors):
        self.errors = errors
        self._transition(BookingPhase.FILLING)

    def submit(self, today: Optional[date] = None) -> bool:
        """
        Validate the draft and post the appointment.

        Args:
            today: Reference day for the no-past-dates rule

        Returns:
            True if the appointment was booked
        """
        if self.is_busy:
            logger.debug("duplicate_submit_ignored", page="booking")
            return False
        if self.phase not in (BookingPhase.OPEN, BookingPhase.FILLING, BookingPhase.FAILED):
            raise InvalidTransitionError(f"Cannot submit while {self.phase.value}")

        if not self.doctor or not self.doctor.id:
            logger.error("booking_without_doctor")
            self._reject({"reason": "Doctor selection error. Please try again."})
            return False

        errors = validate_booking(self.draft, today=today)
        if errors:
            self._reject(errors)
            return False

        try:
            instant = combine_date_time(self.draft["selected_date"], self.draft["selected_time"])
        except ValueError:
            self._reject({"selected_time": "Please select a valid date and time"})
            return False

        self.errors = {}
        self._transition(BookingPhase.SUBMITTING)
        doctor_id = self.doctor.id
        try:
            appointment = self.api.create_appointment(
                doctor_id, instant, self.draft["reason"]
            )
        except ApiError as e:
            logger.warning("booking_failed", doctor_id=doctor_id, status_code=e.status_code)
            if self.phase is BookingPhase.SUBMITTING:
                self.errors = {"reason": e.user_message("Booking failed")}
                self._transition(BookingPhase.FAILED)
            return False

        # Modal may have been closed while the request was in flight
        if self.phase is not BookingPhase.SUBMITTING:
            logger.info("booking_response_discarded", doctor_id=doctor_id)
            return True

        self.appointment = appointment
        self._transition(BookingPhase.SUCCESS)
        logger.info("appointment_booked", doctor_id=doctor_id)
        return True
