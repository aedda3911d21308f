# app/services/appointment_service.py

from typing import Optional

from pydantic import ValidationError

from app.core.errors import GraphQLRequestError, RemotePayloadError
from app.core.logger import logger
from app.models.appointment import (
    AppointmentDetail, AppointmentPage, AppointmentQuery, MutationResult
)
from app.models.settings import DoctorSettings
from app.services.actions import Action, ATTENDANCE_ACTIONS
from app.services.filters import remote_status
from app.services.graphql_client import GraphQLClient

_APPOINTMENT_FIELDS = """
        id
        trackingId
        patientName
        patientEmail
        date
        time
        status
        appointmentType
        fee
        attendance
        doctorTimeZone
"""

GET_APPOINTMENTS_QUERY = """
  query GetDoctorAppointments($doctorId: ID!, $startDate: String, $endDate: String, $status: String, $page: Int, $limit: Int) {
    getDoctorAppointments(doctorId: $doctorId, startDate: $startDate, endDate: $endDate, status: $status, page: $page, limit: $limit) {
      hasNextPage
      appointments {%s      }
    }
  }
""" % _APPOINTMENT_FIELDS

GET_APPOINTMENT_BY_ID_QUERY = """
  query GetAppointmentById($id: ID!, $doctorId: ID!) {
    getAppointmentById(id: $id, doctorId: $doctorId) {
      id
      trackingId
      patientName
      patientEmail
      patientPhone
      patientAddress
      patientPostalCode
      patientDateOfBirth
      patientGender
      familyMembers {
        name
        dateOfBirth
        gender
      }
      date
      time
      status
      appointmentType
      fee
      notes
      statusNotes
      doctorId
      doctorTimeZone
      attendance
      attendanceNotes
      attendanceUpdatedAt
      attendanceUpdatedByName
      rescheduleAttemptUsed
      rescheduleRequestStatus
      rescheduleHistory {
        oldDate
        oldTime
        newDate
        newTime
        rescheduledAt
        rescheduledByName
        reason
      }
      cancellationStatus
      cancellationReason
      createdAt
      updatedAt
    }
  }
"""

UPDATE_STATUS_MUTATION = """
  mutation UpdateAppointmentStatus($id: ID!, $doctorId: ID!, $status: String!, $notes: String) {
    updateAppointmentStatus(id: $id, doctorId: $doctorId, status: $status, notes: $notes) {
      success
      message
    }
  }
"""

UPDATE_DECISION_MUTATION = """
  mutation UpdateAppointmentDecision($id: ID!, $doctorId: ID!, $decision: String!, $notes: String) {
    updateAppointmentDecision(id: $id, doctorId: $doctorId, decision: $decision, notes: $notes) {
      success
      message
    }
  }
"""

GET_DOCTOR_SETTINGS_QUERY = """
  query GetDoctorSettings($doctorId: ID!) {
    getDoctorSettings(doctorId: $doctorId) {
      timeZone
      reference_time_zone
      slotInterval
      availability {
        day
        isAvailable
        startTime
        endTime
      }
    }
  }
"""

UPDATE_SETTINGS_MUTATION = """
  mutation UpdateDoctorSettings($doctorId: ID!, $settings: UpdateDoctorSettingsInput!) {
    updateDoctorSettings(doctorId: $doctorId, settings: $settings) {
      success
      message
    }
  }
"""


def _parse(model, payload, operation: str):
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.error(f"{operation} returned a malformed payload: {str(e)}")
        raise RemotePayloadError(f"{operation} returned a malformed payload") from e


class AppointmentService:
    """
    Typed access to the remote appointment operations.

    Queries raise GraphQLRequestError; mutations never raise and report
    failure through MutationResult instead.
    """

    def __init__(self, client: Optional[GraphQLClient] = None):
        self.client = client or GraphQLClient()

    async def list_appointments(self, query: AppointmentQuery) -> AppointmentPage:
        data = await self.client.execute(GET_APPOINTMENTS_QUERY, query.variables())
        page = _parse(AppointmentPage, data.get("getDoctorAppointments") or {}, "getDoctorAppointments")
        logger.info(
            f"Fetched {len(page.appointments)} appointments for doctor {query.doctor_id} "
            f"(page={query.page}, status={query.status}, start={query.start_date}, end={query.end_date})"
        )
        return page

    async def get_appointment_detail(self, appointment_id: str, doctor_id: str) -> Optional[AppointmentDetail]:
        data = await self.client.execute(
            GET_APPOINTMENT_BY_ID_QUERY,
            {"id": appointment_id, "doctorId": doctor_id},
        )
        payload = data.get("getAppointmentById")
        if payload is None:
            logger.info(f"Appointment {appointment_id} not found for doctor {doctor_id}")
            return None
        return _parse(AppointmentDetail, payload, "getAppointmentById")

    async def _mutate(self, mutation: str, field: str, variables: dict, default_error: str) -> MutationResult:
        try:
            data = await self.client.execute(mutation, variables)
        except GraphQLRequestError as e:
            logger.error(f"{field} failed: {e.message}")
            return MutationResult(success=False, message=e.message or default_error)

        payload = data.get(field)
        if not isinstance(payload, dict):
            logger.error(f"{field} returned no result")
            return MutationResult(success=False, message="Unknown error occurred")
        try:
            return MutationResult.model_validate(payload)
        except ValidationError:
            logger.error(f"{field} returned a malformed payload: {payload}")
            return MutationResult(success=False, message=default_error)

    async def update_status(self, appointment_id: str, doctor_id: str, status: str,
                            notes: Optional[str] = None) -> MutationResult:
        result = await self._mutate(
            UPDATE_STATUS_MUTATION,
            "updateAppointmentStatus",
            {"id": appointment_id, "doctorId": doctor_id, "status": remote_status(status), "notes": notes},
            "Failed to update status.",
        )
        logger.info(f"Status of appointment {appointment_id} -> {status}: success={result.success}")
        return result

    async def update_decision(self, appointment_id: str, doctor_id: str, decision: str,
                              notes: Optional[str] = None) -> MutationResult:
        result = await self._mutate(
            UPDATE_DECISION_MUTATION,
            "updateAppointmentDecision",
            {"id": appointment_id, "doctorId": doctor_id, "decision": decision, "notes": notes},
            "Failed to update decision.",
        )
        logger.info(f"Attendance of appointment {appointment_id} -> {decision}: success={result.success}")
        return result

    async def execute_action(self, action: Action, appointment_id: str, doctor_id: str,
                             notes: Optional[str] = None) -> MutationResult:
        if action in ATTENDANCE_ACTIONS:
            return await self.update_decision(appointment_id, doctor_id, action.value, notes)
        return await self.update_status(appointment_id, doctor_id, action.value, notes)

    async def get_settings(self, doctor_id: str) -> Optional[DoctorSettings]:
        data = await self.client.execute(GET_DOCTOR_SETTINGS_QUERY, {"doctorId": doctor_id})
        payload = data.get("getDoctorSettings")
        if payload is None:
            logger.info(f"No settings stored for doctor {doctor_id}")
            return None
        return _parse(DoctorSettings, payload, "getDoctorSettings")

    async def update_settings(self, doctor_id: str, settings: dict) -> MutationResult:
        return await self._mutate(
            UPDATE_SETTINGS_MUTATION,
            "updateDoctorSettings",
            {"doctorId": doctor_id, "settings": settings},
            "Failed to update settings.",
        )


def get_appointment_service() -> AppointmentService:
    return AppointmentService()
