"""Appointment list pages for patients and doctors.

Both pages share the same list mechanics:
- A failed fetch empties the list and resets pagination
- Status changes are patched locally without a refetch
- Each load bumps a generation counter; a status response that comes back
  after the list was reloaded is not patched in, the list is reloaded instead
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError

from medibook.errors import ApiError
from medibook.logging_config import get_logger
from medibook.models import Appointment, AppointmentStatus

logger = get_logger(__name__)

ALL = "all"
STATUS_FILTERS = (ALL, "PENDING", "COMPLETED", "CANCELLED")


@dataclass
class PendingAction:
    """Status change awaiting confirmation in a blocking dialog."""
    appointment: Appointment
    new_status: AppointmentStatus

    @property
    def title(self) -> str:
        if self.new_status is AppointmentStatus.COMPLETED:
            return "Mark as Completed"
        return "Cancel Appointment"


def _parse_filter(status: str) -> str:
    if str(status).strip().lower() == ALL:
        return ALL
    return AppointmentStatus.parse(status).value


class _AppointmentList(ABC):
    """Shared list state, loading and optimistic patching."""

    def __init__(self, api, session):
        self.api = api
        self.session = session
        self.appointments: List[Appointment] = []
        self.status_filter = ALL
        self.total_pages = 1
        self.generation = 0
        self.loading = False
        self.is_updating = False
        self.needs_reconcile = False
        self.pending: Optional[PendingAction] = None

    @abstractmethod
    def _fetch(self) -> Tuple[List[dict], int]:
        """Return (rows, total_pages) for the current filter view."""

    @abstractmethod
    def _map(self, row: dict) -> Appointment:
        """Map one API row to an Appointment."""

    def load(self):
        """Fetch the current filter view, replacing the list."""
        if not self.session.get_token():
            return
        self.generation += 1
        self.loading = True
        try:
            rows, total_pages = self._fetch()
            self.appointments = [self._map(row) for row in rows]
            self.total_pages = total_pages
        except (ApiError, ValidationError) as e:
            logger.error("fetch_appointments_failed", page=type(self).__name__, error=str(e))
            self.appointments = []
            self.total_pages = 1
        finally:
            self.loading = False
            self.needs_reconcile = False

    def reconcile(self):
        """Refetch after optimistic patches so the list converges to server state."""
        if self.needs_reconcile:
            self.load()

    def set_status_filter(self, status: str):
        self.status_filter = _parse_filter(status)
        self.load()

    def counts(self) -> Dict[str, int]:
        """Per-status counts over the fetched page only."""
        counts = {"all": len(self.appointments), "pending": 0, "completed": 0, "cancelled": 0}
        for apt in self.appointments:
            counts[apt.status.value.lower()] += 1
        return counts

    def find(self, appointment_id: str) -> Optional[Appointment]:
        return next((a for a in self.appointments if a.id == appointment_id), None)

    def _apply_status(self, appointment_id: str, status: AppointmentStatus, started: int):
        if self.generation != started:
            logger.info("stale_status_response", appointment_id=appointment_id)
            self.load()
            return
        self.appointments = [
            apt.with_status(status) if apt.id == appointment_id else apt
            for apt in self.appointments
        ]
        self.needs_reconcile = True

    def _request(self, appointment: Appointment, new_status: AppointmentStatus) -> bool:
        if appointment.is_terminal:
            return False
        self.pending = PendingAction(appointment, new_status)
        return True

    def _dismiss(self):
        self.pending = None


class PatientAppointmentsPage(_AppointmentList):
    """The signed-in patient's appointments, with cancellation."""

    def _fetch(self):
        status = None
        if self.status_filter != ALL:
            status = AppointmentStatus(self.status_filter).patient_wire()
        return self.api.list_patient_appointments(status=status), 1

    def _map(self, row):
        return Appointment.from_patient_row(row)

    def actions(self, appointment: Appointment) -> List[str]:
        return ["cancel"] if not appointment.is_terminal else []

    def request_cancel(self, appointment: Appointment) -> bool:
        return self._request(appointment, AppointmentStatus.CANCELLED)

    def close_cancel(self):
        self._dismiss()

    def confirm_cancel(self) -> bool:
        """
        Cancel the appointment awaiting confirmation.

        Returns:
            True if the server accepted the cancellation
        """
        if self.pending is None or self.is_updating or not self.session.get_token():
            return False

        appointment_id = self.pending.appointment.id
        started = self.generation
        self.is_updating = True
        try:
            self.api.cancel_appointment(appointment_id)
        except ApiError as e:
            logger.error("cancel_appointment_failed", appointment_id=appointment_id, error=str(e))
            return False
        finally:
            self.is_updating = False

        self._apply_status(appointment_id, AppointmentStatus.CANCELLED, started)
        self.pending = None
        return True


class DoctorDashboard(_AppointmentList):
    """The signed-in doctor's schedule with date filter, paging and status updates."""

    def __init__(self, api, session):
        super().__init__(api, session)
        self.date_filter = ""
        self.current_page = 1

    @property
    def doctor_name(self) -> str:
        user = self.session.get_user()
        return (user.name if user else "") or "Doctor"

    def _fetch(self):
        status = None
        if self.status_filter != ALL:
            status = AppointmentStatus(self.status_filter).doctor_wire()
        return self.api.list_doctor_appointments(
            status=status,
            date=self.date_filter or None,
            page=self.current_page,
        )

    def _map(self, row):
        return Appointment.from_doctor_row(row)

    def load(self):
        super().load()
        if self.current_page > self.total_pages:
            # Result set shrank under the current page; show its last page instead
            self.current_page = self.total_pages
            super().load()

    def set_date_filter(self, value: str):
        """Filter to one calendar day (YYYY-MM-DD); '' clears it."""
        if value:
            date.fromisoformat(value)
        self.date_filter = value
        self.current_page = 1
        self.load()

    def go_to_page(self, page: int):
        self.current_page = min(max(1, page), self.total_pages)
        self.load()

    def next_page(self):
        self.go_to_page(self.current_page + 1)

    def prev_page(self):
        self.go_to_page(self.current_page - 1)

    @property
    def has_filters(self) -> bool:
        return self.status_filter != ALL or bool(self.date_filter)

    def clear_filters(self):
        self.status_filter = ALL
        self.date_filter = ""
        self.current_page = 1
        self.load()

    def actions(self, appointment: Appointment) -> List[str]:
        return ["complete", "cancel"] if not appointment.is_terminal else []

    def request_status_change(self, appointment: Appointment, new_status) -> bool:
        new_status = AppointmentStatus.parse(new_status)
        if new_status is AppointmentStatus.PENDING:
            raise ValueError("Appointments can only move to COMPLETED or CANCELLED")
        return self._request(appointment, new_status)

    def close_confirm(self):
        self._dismiss()

    def confirm_status_change(self) -> bool:
        """
        Send the confirmed status change.

        Failures are logged only; the list and the dialog stay as they were.

        Returns:
            True if the server accepted the update
        """
        if self.pending is None or self.is_updating:
            return False

        action = self.pending
        appointment_id = action.appointment.id
        started = self.generation
        self.is_updating = True
        try:
            self.api.update_appointment_status(appointment_id, action.new_status.doctor_wire())
        except ApiError as e:
            logger.error(
                "update_status_failed",
                appointment_id=appointment_id,
                status=action.new_status.value,
                error=str(e),
            )
            return False
        finally:
            self.is_updating = False

        self._apply_status(appointment_id, action.new_status, started)
        self.pending = None
        return True
