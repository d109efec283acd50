#!/usr/bin/env python3
"""Terminal client for the appointment booking platform.

Usage:
    python terminal_client.py

Features:
- Patient/doctor login and registration
- Doctor directory with search and specialization filter
- Appointment booking, cancellation and status updates
- Session persisted between runs
- Colored output for better UX
"""
import sys
from typing import Optional

from medibook import config, router
from medibook.http_client import ApiClient
from medibook.logging_config import setup_structured_logging
from medibook.models import Appointment, AppointmentStatus, Doctor, Role
from medibook.pages import (
    DoctorDashboard,
    HomePage,
    LoginPage,
    PatientAppointmentsPage,
    PatientDashboard,
    RegistrationPage,
)
from medibook.session import SessionStore
from medibook.storage import LocalStorage


# ANSI color codes
class Colors:
    BLUE = '\033[94m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    GRAY = '\033[90m'
    RESET = '\033[0m'
    BOLD = '\033[1m'


STATUS_COLORS = {
    AppointmentStatus.PENDING: Colors.YELLOW,
    AppointmentStatus.COMPLETED: Colors.GREEN,
    AppointmentStatus.CANCELLED: Colors.RED,
}

COMMANDS = {
    "/home": router.HOME,
    "/login": router.LOGIN,
    "/register": router.REGISTER,
    "/appointments": router.PATIENT_APPOINTMENTS,
}


class Navigate(Exception):
    """Leave the current screen for another route."""

    def __init__(self, path: Optional[str]):
        super().__init__(path)
        self.path = path


class Quit(Exception):
    pass


def print_colored(text: str, color: str = Colors.RESET, end: str = "\n"):
    """Print colored text."""
    print(f"{color}{text}{Colors.RESET}", end=end)


def status_color(status) -> str:
    return STATUS_COLORS.get(AppointmentStatus.parse(status), Colors.GRAY)


def format_doctor(index: int, doctor: Doctor) -> str:
    line = f"{index}. {doctor.name} - {doctor.specialization or 'N/A'}"
    if doctor.experience:
        line += f" ({doctor.experience})"
    if doctor.rating is not None:
        line += f" ★ {doctor.rating:.1f}"
    return line


def format_appointment(index: int, apt: Appointment) -> str:
    return (
        f"{index}. {apt.counterparty_name} ({apt.counterparty_detail})\n"
        f"   {apt.date} at {apt.time} - {apt.reason}"
    )


def print_errors(errors: dict):
    for field, message in errors.items():
        label = "" if field == "general" else f"{field}: "
        print_colored(f"  ✗ {label}{message}", Colors.RED)


class TerminalApp:
    """Routes between screens; each screen drives one page controller."""

    def __init__(self, api: ApiClient, session: SessionStore, input_func=input):
        self.api = api
        self.session = session
        self.router = router.Router(session)
        self.input = input_func

    # Input helpers

    def ask(self, label: str) -> str:
        value = self.input(f"{label}: ").strip()
        if value.startswith("/"):
            self.command(value.lower())
        return value

    def choose(self, label: str, count: int) -> Optional[int]:
        """Ask for a 1-based index; returns a 0-based index or None."""
        raw = self.ask(label)
        if raw.isdigit() and 1 <= int(raw) <= count:
            return int(raw) - 1
        return None

    def ask_role(self) -> Role:
        while True:
            raw = self.ask("Role [patient/doctor]") or Role.PATIENT.value
            try:
                return Role.parse(raw)
            except ValueError:
                print_colored("Please type patient or doctor", Colors.YELLOW)

    def command(self, cmd: str):
        if cmd in ("/quit", "/exit"):
            raise Quit()
        if cmd == "/logout":
            self.session.logout()
            print_colored("✅ Signed out", Colors.GREEN)
            raise Navigate(router.LOGIN)
        if cmd == "/dashboard":
            user = self.session.get_user()
            raise Navigate(router.dashboard_for(user.role) if user else router.LOGIN)
        if cmd in COMMANDS:
            raise Navigate(COMMANDS[cmd])
        print_colored(f"❌ Unknown command: {cmd}", Colors.RED)

    # Screens

    def home(self) -> str:
        page = HomePage(self.api)
        page.load()
        print_colored("🏥 Your Health, Our Priority", Colors.BOLD)
        print(f"{page.total_doctors}+ doctors · {len(page.specializations)}+ specializations")
        for specialization in page.featured_specializations:
            print(f"  • {specialization}")
        if page.more_link:
            print_colored(f"  {page.more_link}", Colors.BLUE)
        print_colored("Type /login to sign in or /register to get started.", Colors.YELLOW)
        self.ask("Command")
        return router.HOME

    def login(self) -> str:
        page = LoginPage(self.api, self.session)
        page.select_role(self.ask_role())
        while True:
            page.update_field("email", self.ask("Email"))
            page.update_field("password", self.ask("Password"))
            print_colored("Signing in...", Colors.GRAY)
            redirect = page.submit()
            if redirect:
                print_colored(f"✅ Welcome, {self.session.get_user().name}", Colors.GREEN)
                return redirect
            print_errors(page.errors)

    def register(self) -> str:
        page = RegistrationPage(self.api)
        page.select_role(self.ask_role())
        while True:
            for field in ("name", "email", "password", "confirm_password"):
                page.update_field(field, self.ask(field.replace("_", " ").capitalize()))
            if page.role is Role.DOCTOR:
                for index, (_, label) in enumerate(config.SPECIALIZATIONS, 1):
                    print(f"  {index}. {label}")
                choice = self.choose("Specialization", len(config.SPECIALIZATIONS))
                value = config.SPECIALIZATIONS[choice][0] if choice is not None else ""
                page.update_field("specialization", value)
            page.update_field("photo_url", self.ask("Profile photo URL (optional)"))
            print_colored("Creating account...", Colors.GRAY)
            redirect = page.submit()
            if redirect:
                print_colored("✅ Account created, please sign in", Colors.GREEN)
                return redirect
            print_errors(page.errors)

    def patient_dashboard(self) -> str:
        page = PatientDashboard(self.api, self.session)
        page.load()
        while True:
            print_colored(f"\nPatient Dashboard - Welcome, {page.welcome_name}", Colors.BOLD)
            print_colored(page.summary(), Colors.GRAY)
            doctors = page.filtered_doctors
            for index, doctor in enumerate(doctors, 1):
                print(format_doctor(index, doctor))
            action = self.ask("[s]earch, [f]ilter, [c]lear, [b]ook, /appointments").lower()
            if action == "s":
                page.set_search(self.ask("Search doctors"))
            elif action == "f":
                print("  " + ", ".join(page.specializations))
                page.set_specialization(self.ask("Specialization (blank for all)"))
            elif action == "c":
                page.clear_filters()
            elif action == "b":
                choice = self.choose("Doctor #", len(doctors))
                if choice is not None:
                    self.booking(page.open_booking(doctors[choice]))

    def booking(self, modal):
        print_colored(f"\nBook with {modal.doctor.name}", Colors.BOLD)
        try:
            while True:
                modal.update_field("selected_date", self.ask("Date (YYYY-MM-DD)"))
                for index, slot in enumerate(config.TIME_SLOTS, 1):
                    print(f"  {index}. {slot}")
                slot = self.choose("Time slot #", len(config.TIME_SLOTS))
                modal.update_field(
                    "selected_time", config.TIME_SLOTS[slot] if slot is not None else ""
                )
                modal.update_field("reason", self.ask("Reason for visit"))
                print_colored("Booking...", Colors.GRAY)
                if modal.submit():
                    print_colored("✅ Appointment booked! Status: PENDING", Colors.GREEN)
                    self.input("Press Enter to close")
                    return
                print_errors(modal.errors)
                if self.ask("Try again? [y/n]").lower() != "y":
                    return
        finally:
            modal.close()

    def patient_appointments(self) -> str:
        page = PatientAppointmentsPage(self.api, self.session)
        page.load()
        # The render right after a status change shows the local patch
        patched = False
        while True:
            if not patched:
                page.reconcile()
            patched = False
            counts = page.counts()
            print_colored(
                f"\nMy Appointments [{page.status_filter}] all:{counts['all']} "
                f"pending:{counts['pending']} completed:{counts['completed']} "
                f"cancelled:{counts['cancelled']}",
                Colors.BOLD,
            )
            for index, apt in enumerate(page.appointments, 1):
                print_colored(f"[{apt.status.value}] ", status_color(apt.status), end="")
                print(format_appointment(index, apt))
            if not page.appointments:
                print_colored("No appointments found", Colors.GRAY)
            action = self.ask("[f]ilter, [x] cancel, /dashboard").lower()
            if action == "f":
                try:
                    page.set_status_filter(self.ask("Status [all/PENDING/COMPLETED/CANCELLED]") or "all")
                except ValueError:
                    print_colored("Unknown status", Colors.YELLOW)
            elif action == "x":
                choice = self.choose("Appointment #", len(page.appointments))
                if choice is None or not page.request_cancel(page.appointments[choice]):
                    print_colored("Only pending appointments can be cancelled", Colors.YELLOW)
                    continue
                if self.ask("Cancel this appointment? [y/n]").lower() == "y":
                    patched = page.confirm_cancel()
                    if not patched:
                        print_colored("❌ Could not cancel appointment", Colors.RED)
                page.close_cancel()

    def doctor_dashboard(self) -> str:
        page = DoctorDashboard(self.api, self.session)
        page.load()
        patched = False
        while True:
            if not patched:
                page.reconcile()
            patched = False
            print_colored(
                f"\nDoctor Dashboard - {page.doctor_name} · {page.counts()['all']} appointments "
                f"[{page.status_filter}{' ' + page.date_filter if page.date_filter else ''}] "
                f"page {page.current_page}/{page.total_pages}",
                Colors.BOLD,
            )
            for index, apt in enumerate(page.appointments, 1):
                print_colored(f"[{apt.status.value}] ", status_color(apt.status), end="")
                print(format_appointment(index, apt))
            action = self.ask("[f]ilter, [d]ate, [c]lear, [n]ext, [p]rev, [m]ark completed, [x] cancel").lower()
            if action == "f":
                try:
                    page.set_status_filter(self.ask("Status [all/PENDING/COMPLETED/CANCELLED]") or "all")
                except ValueError:
                    print_colored("Unknown status", Colors.YELLOW)
            elif action == "d":
                try:
                    page.set_date_filter(self.ask("Date (YYYY-MM-DD, blank to clear)"))
                except ValueError:
                    print_colored("Please enter a date as YYYY-MM-DD", Colors.YELLOW)
            elif action == "c":
                page.clear_filters()
            elif action == "n":
                page.next_page()
            elif action == "p":
                page.prev_page()
            elif action in ("m", "x"):
                status = AppointmentStatus.COMPLETED if action == "m" else AppointmentStatus.CANCELLED
                choice = self.choose("Appointment #", len(page.appointments))
                if choice is None or not page.request_status_change(page.appointments[choice], status):
                    continue
                if self.ask(f"{page.pending.title}? [y/n]").lower() == "y":
                    patched = page.confirm_status_change()
                page.close_confirm()

    SCREENS = {
        router.HOME: home,
        router.LOGIN: login,
        router.REGISTER: register,
        router.PATIENT_DASHBOARD: patient_dashboard,
        router.PATIENT_APPOINTMENTS: patient_appointments,
        router.DOCTOR_DASHBOARD: doctor_dashboard,
    }

    def run(self, start: str = router.HOME):
        path = start
        while True:
            path = self.router.navigate(path)
            try:
                path = self.SCREENS[path](self)
            except Navigate as nav:
                path = nav.path
            except (Quit, EOFError, KeyboardInterrupt):
                print()
                print_colored("👋 Goodbye!", Colors.YELLOW)
                return


def main():
    """Main interactive loop."""
    setup_structured_logging(config.LOG_LEVEL)
    session = SessionStore(LocalStorage(config.STORAGE_URL))
    session.restore()
    api = ApiClient(config.API_BASE_URL, session=session)

    print_colored("=" * 60, Colors.BLUE)
    print_colored("🏥 Medical Appointments - Terminal Client", Colors.BOLD)
    print_colored("=" * 60, Colors.BLUE)
    print_colored(f"API: {api.base_url}", Colors.YELLOW)
    print_colored("Commands: /home /login /register /dashboard /appointments /logout /quit", Colors.YELLOW)

    start = router.HOME
    user = session.get_user()
    if user:
        start = router.dashboard_for(user.role)
    TerminalApp(api, session).run(start)
    return 0


if __name__ == "__main__":
    sys.exit(main())
