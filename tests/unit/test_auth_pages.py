"""Test login and registration flows."""
import pytest

from medibook.errors import ApiError
from medibook.models import Role
from medibook.pages.auth import LoginPage, RegistrationPage
from medibook.router import DOCTOR_DASHBOARD, LOGIN, PATIENT_DASHBOARD
from medibook.state import AuthPhase
from tests.conftest import make_response


def login_page(api, session, email="pat@example.com", password="secret1", role=Role.PATIENT):
    page = LoginPage(api, session, role=role)
    page.update_field("email", email)
    page.update_field("password", password)
    return page


class TestLoginPage:

    def test_valid_patient_login_populates_session_and_redirects(self, api_client, http, session):
        http.request.return_value = make_response(200, {
            "data": {"user": {"id": "p1", "name": "Pat", "role": "PATIENT"}, "token": "tok-1"}
        })
        page = login_page(api_client, session)

        redirect = page.submit()

        assert redirect == PATIENT_DASHBOARD
        assert page.phase is AuthPhase.SUCCESS
        assert session.get_token() == "tok-1"
        assert session.get_user().name == "Pat"

    def test_401_leaves_session_untouched_and_shows_error(self, api_client, http, session):
        http.request.return_value = make_response(401, {"message": "Invalid credentials"})
        page = login_page(api_client, session)

        assert page.submit() is None

        assert page.phase is AuthPhase.FAILED
        assert page.errors == {"general": "Invalid credentials"}
        assert not session.is_authenticated

    def test_generic_message_without_server_message(self, api, session):
        api.login.side_effect = ApiError()
        page = login_page(api, session)

        page.submit()

        assert page.errors == {"general": "Invalid email or password"}

    def test_doctor_tab_redirects_to_doctor_dashboard(self, api, session):
        api.login.return_value = {"user": {"id": "d1", "name": "Dr", "role": "doctor"}, "token": "t"}
        page = login_page(api, session, role=Role.DOCTOR)

        assert page.submit() == DOCTOR_DASHBOARD
        api.login.assert_called_once_with("pat@example.com", "secret1", "doctor")

    def test_validation_failure_makes_no_request(self, api, session):
        page = login_page(api, session, email="user@", password="12345")

        assert page.submit() is None

        assert page.phase is AuthPhase.EDITING
        assert set(page.errors) == {"email", "password"}
        api.login.assert_not_called()

    def test_editing_clears_only_that_field_error(self, api, session):
        page = login_page(api, session, email="user@", password="12345")
        page.submit()

        page.update_field("email", "user@example.com")

        assert "email" not in page.errors
        assert "password" in page.errors

    def test_failed_then_edit_returns_to_editing(self, api, session):
        api.login.side_effect = ApiError(message="Nope", status_code=401)
        page = login_page(api, session)
        page.submit()

        page.update_field("password", "another1")

        assert page.phase is AuthPhase.EDITING

    def test_duplicate_submit_ignored(self, api, session):
        page = login_page(api, session)
        page.phase = AuthPhase.SUBMITTING

        assert page.submit() is None
        api.login.assert_not_called()

    def test_unknown_field_rejected(self, api, session):
        with pytest.raises(ValueError):
            LoginPage(api, session).update_field("role", "doctor")


def fill_registration(page, **overrides):
    values = {
        "name": "Jane Roe",
        "email": "jane@example.com",
        "password": "Abcdefg1",
        "confirm_password": "Abcdefg1",
        "photo_url": "",
    }
    if page.role is Role.DOCTOR:
        values["specialization"] = "cardiology"
    values.update(overrides)
    for field, value in values.items():
        page.update_field(field, value)


class TestRegistrationPage:

    def test_patient_registration_redirects_to_login(self, api):
        page = RegistrationPage(api)
        fill_registration(page)

        assert page.submit() == LOGIN
        api.register.assert_called_once_with({
            "name": "Jane Roe",
            "email": "jane@example.com",
            "password": "Abcdefg1",
            "role": "patient",
        })

    def test_doctor_registration_sends_specialization_and_photo(self, api):
        page = RegistrationPage(api, role=Role.DOCTOR)
        fill_registration(page, photo_url="https://example.com/me.jpg")

        page.submit()

        payload = api.register.call_args.args[0]
        assert payload["specialization"] == "cardiology"
        assert payload["photo_url"] == "https://example.com/me.jpg"
        assert payload["role"] == "doctor"

    def test_tabs_keep_separate_drafts(self, api):
        page = RegistrationPage(api)
        page.update_field("name", "Patient Name")
        page.select_role(Role.DOCTOR)

        assert page.form["name"] == ""
        page.select_role(Role.PATIENT)
        assert page.form["name"] == "Patient Name"

    def test_patient_form_has_no_specialization(self, api):
        with pytest.raises(ValueError):
            RegistrationPage(api).update_field("specialization", "cardiology")

    def test_mismatched_confirmation_blocks_request(self, api):
        page = RegistrationPage(api)
        fill_registration(page, confirm_password="Abcdefg2")

        assert page.submit() is None
        assert page.errors["confirm_password"] == "Passwords do not match"
        api.register.assert_not_called()

    def test_server_error_message(self, api):
        api.register.side_effect = ApiError(message="Email already exists", status_code=409)
        page = RegistrationPage(api)
        fill_registration(page)

        assert page.submit() is None
        assert page.errors == {"general": "Email already exists"}
        assert page.phase is AuthPhase.FAILED

    def test_generic_error_message(self, api):
        api.register.side_effect = ApiError()
        page = RegistrationPage(api)
        fill_registration(page)

        page.submit()

        assert page.errors == {"general": "An error occurred. Please try again."}
