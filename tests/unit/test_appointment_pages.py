"""Test patient and doctor appointment list pages."""
import pytest

from medibook.errors import ApiError
from medibook.models import AppointmentStatus
from medibook.pages.appointments import DoctorDashboard, PatientAppointmentsPage, _AppointmentList


def patient_row(apt_id, status="PENDING"):
    return {
        "_id": apt_id,
        "doctor": {"name": "Dr. Alice", "specialization": "Cardiology"},
        "date": "2026-11-02T14:30:00.000Z",
        "reason": "Routine check-up",
        "status": status,
        "createdAt": "2026-10-18T09:00:00.000Z",
    }


def doctor_row(apt_id, status="PENDING"):
    return {
        "id": apt_id,
        "patient": {"name": "Pat", "age": 30, "phone": "555-0100"},
        "date": "2026-11-02T14:30:00.000Z",
        "reason": "Follow-up visit",
        "status": status,
    }


@pytest.fixture
def patient_page(api, patient_session):
    api.list_patient_appointments.return_value = [
        patient_row("a1"),
        patient_row("a2", "COMPLETE"),
        patient_row("a3", "CANCELLED"),
    ]
    page = PatientAppointmentsPage(api, patient_session)
    page.load()
    return page


@pytest.fixture
def doctor_page(api, doctor_session):
    api.list_doctor_appointments.return_value = ([doctor_row("b1"), doctor_row("b2")], 3)
    page = DoctorDashboard(api, doctor_session)
    page.load()
    return page


class TestPatientAppointments:

    def test_load_maps_rows_and_counts(self, patient_page, api):
        api.list_patient_appointments.assert_called_once_with(status=None)
        assert [a.id for a in patient_page.appointments] == ["a1", "a2", "a3"]
        assert patient_page.counts() == {"all": 3, "pending": 1, "completed": 1, "cancelled": 1}

    def test_no_token_means_no_request(self, api, session):
        PatientAppointmentsPage(api, session).load()
        api.list_patient_appointments.assert_not_called()

    def test_completed_filter_uses_patient_spelling(self, patient_page, api):
        patient_page.set_status_filter("COMPLETED")
        api.list_patient_appointments.assert_called_with(status="COMPLETE")

    def test_all_filter_sends_no_status(self, patient_page, api):
        patient_page.set_status_filter("CANCELLED")
        patient_page.set_status_filter("All")
        api.list_patient_appointments.assert_called_with(status=None)

    def test_failed_fetch_clears_list(self, patient_page, api):
        api.list_patient_appointments.side_effect = ApiError(status_code=500)

        patient_page.load()

        assert patient_page.appointments == []
        assert patient_page.total_pages == 1

    def test_cancel_only_offered_for_pending(self, patient_page):
        pending, completed, cancelled = patient_page.appointments
        assert patient_page.actions(pending) == ["cancel"]
        assert patient_page.actions(completed) == []
        assert patient_page.actions(cancelled) == []
        assert patient_page.request_cancel(completed) is False

    def test_cancel_patches_locally_without_refetch(self, patient_page, api):
        api.list_patient_appointments.reset_mock()
        pending = patient_page.appointments[0]

        assert patient_page.request_cancel(pending)
        assert patient_page.confirm_cancel() is True

        api.cancel_appointment.assert_called_once_with("a1")
        api.list_patient_appointments.assert_not_called()
        updated = patient_page.find("a1")
        assert updated.status is AppointmentStatus.CANCELLED
        assert patient_page.actions(updated) == []
        assert patient_page.pending is None
        assert patient_page.needs_reconcile

    def test_reconcile_refetches_once_after_patch(self, patient_page, api):
        patient_page.request_cancel(patient_page.appointments[0])
        patient_page.confirm_cancel()
        api.list_patient_appointments.reset_mock()

        patient_page.reconcile()
        patient_page.reconcile()

        api.list_patient_appointments.assert_called_once()
        assert not patient_page.needs_reconcile

    def test_failed_cancel_keeps_list_and_dialog(self, patient_page, api):
        api.cancel_appointment.side_effect = ApiError(message="Too late", status_code=400)
        patient_page.request_cancel(patient_page.appointments[0])

        assert patient_page.confirm_cancel() is False

        assert patient_page.find("a1").status is AppointmentStatus.PENDING
        assert patient_page.pending is not None
        assert not patient_page.is_updating

    def test_stale_cancel_response_reloads_instead_of_patching(self, patient_page, api):
        def refreshed_meanwhile(appointment_id):
            patient_page.load()
            return {}

        api.cancel_appointment.side_effect = refreshed_meanwhile
        api.list_patient_appointments.return_value = [patient_row("a9")]
        patient_page.request_cancel(patient_page.appointments[0])

        assert patient_page.confirm_cancel() is True

        assert [a.id for a in patient_page.appointments] == ["a9"]
        assert patient_page.appointments[0].status is AppointmentStatus.PENDING
        assert not patient_page.needs_reconcile

    def test_close_cancel_dismisses(self, patient_page):
        patient_page.request_cancel(patient_page.appointments[0])
        patient_page.close_cancel()

        assert patient_page.pending is None
        assert patient_page.confirm_cancel() is False


class TestDoctorDashboard:

    def test_load_reads_pagination(self, doctor_page, api):
        api.list_doctor_appointments.assert_called_once_with(status=None, date=None, page=1)
        assert doctor_page.total_pages == 3
        assert doctor_page.appointments[0].counterparty_detail == "Age: 30 • 555-0100"

    def test_status_filter_uses_doctor_spelling(self, doctor_page, api):
        doctor_page.set_status_filter("COMPLETE")
        api.list_doctor_appointments.assert_called_with(status="COMPLETED", date=None, page=1)

    def test_date_filter_resets_page(self, doctor_page, api):
        doctor_page.next_page()
        assert doctor_page.current_page == 2

        doctor_page.set_date_filter("2026-11-02")

        assert doctor_page.current_page == 1
        api.list_doctor_appointments.assert_called_with(status=None, date="2026-11-02", page=1)

    def test_bad_date_filter_rejected(self, doctor_page):
        with pytest.raises(ValueError):
            doctor_page.set_date_filter("02/11/2026")

    def test_pagination_is_clamped(self, doctor_page):
        doctor_page.prev_page()
        assert doctor_page.current_page == 1

        for _ in range(5):
            doctor_page.next_page()
        assert doctor_page.current_page == 3

    def test_clear_filters(self, doctor_page, api):
        doctor_page.set_status_filter("PENDING")
        doctor_page.set_date_filter("2026-11-02")
        assert doctor_page.has_filters

        doctor_page.clear_filters()

        assert not doctor_page.has_filters
        api.list_doctor_appointments.assert_called_with(status=None, date=None, page=1)

    def test_failed_fetch_resets_pagination(self, doctor_page, api):
        api.list_doctor_appointments.side_effect = ApiError()

        doctor_page.load()

        assert doctor_page.appointments == []
        assert doctor_page.total_pages == 1
        assert doctor_page.current_page == 1

    def test_confirmation_titles(self, doctor_page):
        apt = doctor_page.appointments[0]

        doctor_page.request_status_change(apt, "COMPLETED")
        assert doctor_page.pending.title == "Mark as Completed"

        doctor_page.request_status_change(apt, AppointmentStatus.CANCELLED)
        assert doctor_page.pending.title == "Cancel Appointment"

    def test_cannot_request_pending(self, doctor_page):
        with pytest.raises(ValueError):
            doctor_page.request_status_change(doctor_page.appointments[0], "PENDING")

    def test_confirm_marks_completed(self, doctor_page, api):
        doctor_page.request_status_change(doctor_page.appointments[0], "COMPLETED")

        assert doctor_page.confirm_status_change() is True

        api.update_appointment_status.assert_called_once_with("b1", "COMPLETED")
        assert doctor_page.find("b1").status is AppointmentStatus.COMPLETED
        assert doctor_page.actions(doctor_page.find("b1")) == []
        assert doctor_page.actions(doctor_page.find("b2")) == ["complete", "cancel"]

    def test_failed_update_is_silent_and_leaves_list(self, doctor_page, api):
        api.update_appointment_status.side_effect = ApiError(message="Forbidden", status_code=403)
        doctor_page.request_status_change(doctor_page.appointments[0], "CANCELLED")

        assert doctor_page.confirm_status_change() is False

        assert doctor_page.find("b1").status is AppointmentStatus.PENDING
        assert doctor_page.pending is not None

    def test_terminal_appointment_offers_no_change(self, doctor_page, api):
        api.list_doctor_appointments.return_value = ([doctor_row("b3", "cancelled")], 1)
        doctor_page.load()

        assert doctor_page.request_status_change(doctor_page.appointments[0], "COMPLETED") is False
        assert doctor_page.pending is None

    def test_doctor_name(self, doctor_page):
        assert doctor_page.doctor_name == "Dr. Who"

    def test_filter_that_shrinks_results_refetches_last_page(self, doctor_page, api):
        doctor_page.go_to_page(3)

        def server(status=None, date=None, page=1):
            if status == "PENDING":
                return ([doctor_row("f1")] if page == 1 else []), 1
            return [doctor_row("b1")], 3

        api.list_doctor_appointments.side_effect = server

        doctor_page.set_status_filter("PENDING")

        assert doctor_page.current_page == 1
        assert doctor_page.total_pages == 1
        assert [a.id for a in doctor_page.appointments] == ["f1"]
        api.list_doctor_appointments.assert_called_with(status="PENDING", date=None, page=1)


class TestAppointmentListBase:

    def test_subclass_must_provide_fetch_and_map(self, api, patient_session):
        class NoMapping(_AppointmentList):
            def _fetch(self):
                return [], 1

        with pytest.raises(TypeError):
            NoMapping(api, patient_session)
