"""Patient dashboard: doctor directory, filtering and booking entry point."""
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence

from pydantic import ValidationError

from medibook import config
from medibook.errors import ApiError
from medibook.logging_config import get_logger
from medibook.models import Doctor
from medibook.pages.booking import BookingModal

logger = get_logger(__name__)


def filter_doctors(
    doctors: Sequence[Doctor],
    search_term: str = "",
    selected_specialization: str = "",
) -> List[Doctor]:
    """
    Presentation-only filter over the directory.

    Name match is a case-insensitive substring test; specialization match is
    case-insensitive equality, skipped when nothing is selected. Returns a new
    list and never mutates the input.

    Example:
        >>> [d.name for d in filter_doctors(doctors, search_term="ali")]
        ['Alice']
    """
    term = (search_term or "").lower()
    specialization = (selected_specialization or "").lower()
    return [
        doctor
        for doctor in doctors
        if term in doctor.name.lower()
        and (specialization == "" or doctor.specialization.lower() == specialization)
    ]


class PatientDashboard:
    """
    Doctor directory for a signed-in patient.

    Both lists are fetched once per load; search and specialization filtering
    are recomputed on every read of filtered_doctors.
    """

    def __init__(self, api, session):
        self.api = api
        self.session = session
        self.doctors: List[Doctor] = []
        self.specializations: List[str] = []
        self.search_term = ""
        self.selected_specialization = ""

    @property
    def welcome_name(self) -> str:
        user = self.session.get_user()
        return (user.name if user else "") or "Patient"

    def _fetch_doctors(self) -> List[Doctor]:
        try:
            rows = self.api.list_doctors(page=1, limit=config.DOCTOR_PAGE_SIZE)
            return [Doctor.model_validate(row) for row in rows]
        except (ApiError, ValidationError) as e:
            logger.error("fetch_doctors_failed", error=str(e))
            return []

    def _fetch_specializations(self) -> List[str]:
        try:
            return self.api.list_specializations()
        except ApiError as e:
            logger.error("fetch_specializations_failed", error=str(e))
            return []

    def load(self):
        """Fetch doctors and specializations concurrently."""
        with ThreadPoolExecutor(max_workers=2) as pool:
            doctors = pool.submit(self._fetch_doctors)
            specializations = pool.submit(self._fetch_specializations)
            self.doctors = doctors.result()
            self.specializations = specializations.result()
        logger.info(
            "directory_loaded",
            doctors=len(self.doctors),
            specializations=len(self.specializations),
        )

    def set_search(self, term: str):
        self.search_term = term

    def set_specialization(self, specialization: str):
        self.selected_specialization = specialization

    def clear_filters(self):
        self.search_term = ""
        self.selected_specialization = ""

    @property
    def has_filters(self) -> bool:
        return bool(self.search_term or self.selected_specialization)

    @property
    def filtered_doctors(self) -> List[Doctor]:
        return filter_doctors(self.doctors, self.search_term, self.selected_specialization)

    def summary(self) -> str:
        return f"Showing {len(self.filtered_doctors)} of {len(self.doctors)} doctors"

    def open_booking(self, doctor: Doctor) -> BookingModal:
        """Open the booking modal for one doctor with a fresh draft."""
        modal = BookingModal(self.api, self.session)
        modal.open(doctor)
        return modal
