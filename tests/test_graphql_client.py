import asyncio
import json

import httpx
import pytest

from app.core.errors import GraphQLRequestError, RemotePayloadError
from app.models.appointment import AppointmentQuery
from app.services.actions import Action
from app.services.appointment_service import AppointmentService
from app.services.graphql_client import GraphQLClient

ENDPOINT = "https://main.example.com/graphql"


def _client(handler, endpoint=ENDPOINT):
    return GraphQLClient(endpoint=endpoint, token="secret-token", timeout=5, transport=httpx.MockTransport(handler))


def _run(coro):
    return asyncio.run(coro)


class TestGraphQLClient:

    def test_posts_query_with_bearer_token(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["Authorization"]
            seen["cache"] = request.headers["Cache-Control"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"data": {"ok": True}})

        data = _run(_client(handler).execute("query { ok }", {"a": 1}))

        assert data == {"ok": True}
        assert seen["auth"] == "Bearer secret-token"
        assert seen["cache"] == "no-store"
        assert seen["body"] == {"query": "query { ok }", "variables": {"a": 1}}

    def test_missing_endpoint(self):
        client = GraphQLClient(endpoint="", token="t")
        with pytest.raises(GraphQLRequestError, match="MAIN_SERVER_GRAPHQL_URL"):
            _run(client.execute("query { ok }"))

    def test_http_error_status(self):
        client = _client(lambda request: httpx.Response(500, text="upstream exploded"))

        with pytest.raises(GraphQLRequestError) as exc_info:
            _run(client.execute("query { ok }"))

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "GraphQL fetch failed with status: 500. Details: upstream exploded"

    def test_graphql_errors_are_joined(self):
        payload = {"errors": [{"message": "Not authorised"}, {"message": "Doctor not found"}], "data": None}
        client = _client(lambda request: httpx.Response(200, json=payload))

        with pytest.raises(GraphQLRequestError) as exc_info:
            _run(client.execute("query { ok }"))

        assert exc_info.value.message == "GraphQL Internal Error: Not authorised, Doctor not found"

    def test_missing_data(self):
        client = _client(lambda request: httpx.Response(200, json={}))
        with pytest.raises(GraphQLRequestError, match="no data"):
            _run(client.execute("query { ok }"))

    def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(GraphQLRequestError, match="GraphQL request failed"):
            _run(_client(handler).execute("query { ok }"))


def _service(handler):
    return AppointmentService(_client(handler))


class TestAppointmentService:

    def test_list_appointments(self):
        seen = {}

        def handler(request):
            seen["variables"] = json.loads(request.content)["variables"]
            return httpx.Response(200, json={"data": {"getDoctorAppointments": {
                "hasNextPage": True,
                "appointments": [{
                    "id": "a1", "trackingId": 7, "patientName": "Ann", "patientEmail": None,
                    "date": "2026-02-23", "time": "9:00 AM", "status": "Pending",
                    "appointmentType": None, "fee": None, "attendance": None, "doctorTimeZone": None,
                }],
            }}})

        query = AppointmentQuery(doctor_id="doc-1", start_date="2026-02-07", page=1, limit=20)
        page = _run(_service(handler).list_appointments(query))

        assert seen["variables"] == {"doctorId": "doc-1", "startDate": "2026-02-07", "page": 1, "limit": 20}
        assert page.has_next_page
        appointment = page.appointments[0]
        assert appointment.fee == 0
        assert appointment.appointment_type == "General Consultation"
        assert appointment.status == "Pending"

    def test_negative_fee_does_not_drop_the_page(self):
        def handler(request):
            return httpx.Response(200, json={"data": {"getDoctorAppointments": {
                "hasNextPage": False,
                "appointments": [
                    {"id": "a1", "date": "2026-02-23", "time": "09:00", "status": "pending", "fee": -40},
                    {"id": "a2", "date": "2026-02-24", "time": "10:00", "status": "approved", "fee": 60},
                ],
            }}})

        page = _run(_service(handler).list_appointments(AppointmentQuery(doctor_id="doc-1")))

        assert [a.id for a in page.appointments] == ["a1", "a2"]
        assert page.appointments[0].fee == 0
        assert page.appointments[1].fee == 60

    def test_malformed_payload(self):
        def handler(request):
            return httpx.Response(200, json={"data": {"getDoctorAppointments": {
                "hasNextPage": False,
                "appointments": [{"id": "a1"}],
            }}})

        with pytest.raises(RemotePayloadError):
            _run(_service(handler).list_appointments(AppointmentQuery(doctor_id="doc-1")))

    def test_missing_detail_is_none(self):
        handler = lambda request: httpx.Response(200, json={"data": {"getAppointmentById": None}})
        assert _run(_service(handler).get_appointment_detail("a1", "doc-1")) is None

    def test_cancel_uses_remote_spelling(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"data": {"updateAppointmentStatus": {
                "success": True, "message": "Appointment cancelled",
            }}})

        result = _run(_service(handler).execute_action(Action.CANCEL, "a1", "doc-1", "Clinic closed"))

        assert result.success
        assert "UpdateAppointmentStatus" in seen["body"]["query"]
        assert seen["body"]["variables"] == {
            "id": "a1", "doctorId": "doc-1", "status": "canceled", "notes": "Clinic closed",
        }

    def test_attendance_goes_through_decision(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"data": {"updateAppointmentDecision": {
                "success": True, "message": None,
            }}})

        result = _run(_service(handler).execute_action(Action.SHOWN, "a1", "doc-1"))

        assert result.success
        assert result.message == ""
        assert seen["body"]["variables"]["decision"] == "shown"

    def test_mutation_failure_is_reported_not_raised(self):
        handler = lambda request: httpx.Response(503, text="maintenance")
        result = _run(_service(handler).update_status("a1", "doc-1", "approved"))

        assert not result.success
        assert "503" in result.message

    def test_mutation_without_payload(self):
        handler = lambda request: httpx.Response(200, json={"data": {"updateAppointmentStatus": None}})
        result = _run(_service(handler).update_status("a1", "doc-1", "approved"))

        assert result == result.__class__(success=False, message="Unknown error occurred")

    def test_settings(self):
        def handler(request):
            return httpx.Response(200, json={"data": {"getDoctorSettings": {
                "timeZone": "America/Toronto",
                "reference_time_zone": "America/Toronto",
                "slotInterval": None,
                "availability": [
                    {"day": "Mon", "isAvailable": True, "startTime": "09:00", "endTime": "17:00"},
                ],
            }}})

        settings = _run(_service(handler).get_settings("doc-1"))

        assert settings.slot_interval == 30
        assert settings.availability[0].is_available

    def test_settings_with_unpadded_times(self):
        def handler(request):
            return httpx.Response(200, json={"data": {"getDoctorSettings": {
                "timeZone": "America/Toronto",
                "slotInterval": 15,
                "availability": [
                    {"day": "Wed", "isAvailable": True, "startTime": "9:00", "endTime": "5:00"},
                ],
            }}})

        settings = _run(_service(handler).get_settings("doc-1"))

        assert settings.availability[0].start_time == "9:00"
        assert settings.availability[0].end_time == "5:00"
