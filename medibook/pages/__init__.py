"""Page controllers: one per client route, each holding its own page-local state."""
from medibook.pages.auth import LoginPage, RegistrationPage
from medibook.pages.booking import BookingModal
from medibook.pages.directory import PatientDashboard, filter_doctors
from medibook.pages.appointments import (
    PatientAppointmentsPage,
    DoctorDashboard,
    PendingAction,
)
from medibook.pages.home import HomePage

__all__ = [
    "LoginPage",
    "RegistrationPage",
    "BookingModal",
    "PatientDashboard",
    "filter_doctors",
    "PatientAppointmentsPage",
    "DoctorDashboard",
    "PendingAction",
    "HomePage",
]
