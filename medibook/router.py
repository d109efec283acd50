"""Route table and access gating for the client pages."""
from typing import Optional

from medibook.models import Role

HOME = "/"
LOGIN = "/login"
REGISTER = "/register"
DOCTOR_DASHBOARD = "/doctor/dashboard"
PATIENT_DASHBOARD = "/patient/dashboard"
PATIENT_APPOINTMENTS = "/patient/appointments"

ROUTES = (
    HOME,
    LOGIN,
    REGISTER,
    DOCTOR_DASHBOARD,
    PATIENT_DASHBOARD,
    PATIENT_APPOINTMENTS,
)

PUBLIC_ROUTES = frozenset({HOME, LOGIN, REGISTER})

# Protected route → role allowed to view it
ROUTE_ROLES = {
    DOCTOR_DASHBOARD: Role.DOCTOR,
    PATIENT_DASHBOARD: Role.PATIENT,
    PATIENT_APPOINTMENTS: Role.PATIENT,
}


def dashboard_for(role) -> str:
    """Landing route after login for the given role."""
    return DOCTOR_DASHBOARD if Role.parse(role) is Role.DOCTOR else PATIENT_DASHBOARD


class Router:
    """
    Resolves a requested path to the path that should actually be shown.

    Gating reads the injected SessionStore synchronously.
    """

    def __init__(self, session):
        self.session = session
        self.current = HOME

    def resolve(self, path: Optional[str]) -> str:
        """
        Apply access rules to a requested path.

        - Unknown paths fall back to home
        - Protected paths require a session
        - A protected path for the other role redirects to the caller's dashboard
        """
        path = (path or HOME).rstrip("/") or HOME
        if path not in ROUTES:
            return HOME
        if path in PUBLIC_ROUTES:
            return path

        user = self.session.get_user() if self.session.is_authenticated else None
        if user is None:
            return LOGIN
        if ROUTE_ROLES[path] is not user.role:
            return dashboard_for(user.role)
        return path

    def navigate(self, path: Optional[str]) -> str:
        self.current = self.resolve(path)
        return self.current
