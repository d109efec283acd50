"""Login and registration flows.

Both run the same phase machine:
EDITING → VALIDATING → SUBMITTING → {SUCCESS, FAILED}, with rule failures
returning straight to EDITING before any request is made.
"""
from typing import Dict, Optional

from pydantic import ValidationError

from medibook import router
from medibook.errors import ApiError, InvalidTransitionError
from medibook.logging_config import get_logger
from medibook.models import Role
from medibook.state import AuthPhase, validate_transition
from medibook.validation import FormErrors, validate_login, validate_registration

logger = get_logger(__name__)


class _AuthForm:
    """Phase and error bookkeeping shared by the auth pages."""

    fields: tuple = ()

    def __init__(self):
        self.phase = AuthPhase.EDITING
        self.errors: FormErrors = {}
        self.redirect: Optional[str] = None

    def _transition(self, intended: AuthPhase):
        if not validate_transition(self.phase, intended):
            raise InvalidTransitionError(f"{self.phase.value} → {intended.value}")
        self.phase = intended

    @property
    def is_busy(self) -> bool:
        """Submit control is disabled while a request is in flight."""
        return self.phase is AuthPhase.SUBMITTING

    def _begin_edit(self, field: str):
        if field not in self.fields:
            raise ValueError(f"Unknown field: {field}")
        if self.phase in (AuthPhase.EDITING, AuthPhase.FAILED):
            self._transition(AuthPhase.EDITING)
        self.errors.pop(field, None)

    def _validate(self, errors: FormErrors) -> bool:
        """Run the VALIDATING step; True means the request may be sent."""
        self._transition(AuthPhase.VALIDATING)
        if errors:
            self.errors = errors
            self._transition(AuthPhase.EDITING)
            return False
        self.errors = {}
        self._transition(AuthPhase.SUBMITTING)
        return True

    def _fail(self, message: str):
        self.errors = {"general": message}
        self._transition(AuthPhase.FAILED)


class LoginPage(_AuthForm):
    """Sign-in form with a patient/doctor tab."""

    fields = ("email", "password")

    def __init__(self, api, session, role: Role = Role.PATIENT):
        super().__init__()
        self.api = api
        self.session = session
        self.role = Role.parse(role)
        self.email = ""
        self.password = ""

    def select_role(self, role):
        self.role = Role.parse(role)

    def update_field(self, field: str, value: str):
        self._begin_edit(field)
        setattr(self, field, value)

    def submit(self) -> Optional[str]:
        """
        Validate and send credentials.

        Returns:
            Dashboard route for the selected role on success, else None
        """
        if self.is_busy:
            logger.debug("duplicate_submit_ignored", page="login")
            return None

        if not self._validate(validate_login(self.email, self.password)):
            return None

        try:
            data = self.api.login(self.email, self.password, self.role.value)
            self.session.set_credentials(data["user"], data["token"])
        except ApiError as e:
            logger.warning("login_failed", status_code=e.status_code, role=self.role.value)
            self._fail(e.user_message("Invalid email or password"))
            return None
        except ValidationError:
            logger.error("login_response_invalid", role=self.role.value, exc_info=True)
            self._fail("Invalid email or password")
            return None

        self._transition(AuthPhase.SUCCESS)
        self.redirect = router.dashboard_for(self.role)
        return self.redirect


def _empty_form(role: Role) -> Dict[str, str]:
    form = {
        "name": "",
        "email": "",
        "password": "",
        "confirm_password": "",
        "photo_url": "",
    }
    if role is Role.DOCTOR:
        form["specialization"] = ""
    return form


class RegistrationPage(_AuthForm):
    """Account creation form; patient and doctor tabs keep separate drafts."""

    fields = ("name", "email", "password", "confirm_password", "photo_url", "specialization")

    def __init__(self, api, role: Role = Role.PATIENT):
        super().__init__()
        self.api = api
        self.role = Role.parse(role)
        self.forms = {r: _empty_form(r) for r in Role}

    @property
    def form(self) -> Dict[str, str]:
        return self.forms[self.role]

    def select_role(self, role):
        self.role = Role.parse(role)

    def update_field(self, field: str, value: str):
        if field not in self.form:
            raise ValueError(f"Field {field} is not part of the {self.role.value} form")
        self._begin_edit(field)
        self.form[field] = value

    def _payload(self) -> Dict[str, str]:
        form = self.form
        payload = {
            "name": form["name"].strip(),
            "email": form["email"],
            "password": form["password"],
            "role": self.role.value,
        }
        if form["photo_url"].strip():
            payload["photo_url"] = form["photo_url"].strip()
        if self.role is Role.DOCTOR:
            payload["specialization"] = form["specialization"]
        return payload

    def submit(self) -> Optional[str]:
        """
        Validate and create the account.

        Returns:
            Login route on success, else None
        """
        if self.is_busy:
            logger.debug("duplicate_submit_ignored", page="register")
            return None

        if not self._validate(validate_registration(self.form, self.role)):
            return None

        try:
            self.api.register(self._payload())
        except ApiError as e:
            logger.warning("registration_failed", status_code=e.status_code, role=self.role.value)
            self._fail(e.user_message("An error occurred. Please try again."))
            return None

        self._transition(AuthPhase.SUCCESS)
        self.redirect = router.LOGIN
        return self.redirect
