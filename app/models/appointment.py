# app/models/appointment.py

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from typing import Optional, List

from app.core.logger import get_module_logger

logger = get_module_logger("models")

DEFAULT_APPOINTMENT_TYPE = "General Consultation"


class Appointment(BaseModel):
    """Appointment row as returned by GetDoctorAppointments"""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    tracking_id: Optional[int] = Field(None, alias="trackingId")
    patient_name: str = Field("", alias="patientName")
    patient_email: Optional[str] = Field(None, alias="patientEmail")
    date: str = Field(..., description="Doctor-local civil date, YYYY-MM-DD")
    time: str = Field("", description="Doctor-local civil time, 'H:MM' or 'H:MM AM/PM'")
    status: str = "pending"
    appointment_type: str = Field(DEFAULT_APPOINTMENT_TYPE, alias="appointmentType")
    fee: float = 0
    attendance: Optional[str] = None
    doctor_time_zone: Optional[str] = Field(None, alias="doctorTimeZone")

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v):
        return v or "pending"

    @field_validator("time", "patient_name", mode="before")
    @classmethod
    def empty_string_for_null(cls, v):
        return v if v is not None else ""

    @field_validator("appointment_type", mode="before")
    @classmethod
    def default_appointment_type(cls, v):
        return v or DEFAULT_APPOINTMENT_TYPE

    @field_validator("fee", mode="before")
    @classmethod
    def fee_or_zero(cls, v):
        if v is None:
            return 0
        return v

    @field_validator("fee")
    @classmethod
    def non_negative_fee(cls, v: float, info: ValidationInfo) -> float:
        if v < 0:
            logger.warning(f"Negative fee {v} on appointment {info.data.get('id')}, using 0")
            return 0
        return v


class AppointmentPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_next_page: bool = Field(False, alias="hasNextPage")
    appointments: List[Appointment] = Field(default_factory=list)

    @field_validator("appointments", mode="before")
    @classmethod
    def empty_list_for_null(cls, v):
        return v or []

    @field_validator("has_next_page", mode="before")
    @classmethod
    def false_for_null(cls, v):
        return bool(v)


class FamilyMember(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    date_of_birth: Optional[str] = Field(None, alias="dateOfBirth")
    gender: Optional[str] = None


class RescheduleEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    old_date: Optional[str] = Field(None, alias="oldDate")
    old_time: Optional[str] = Field(None, alias="oldTime")
    new_date: Optional[str] = Field(None, alias="newDate")
    new_time: Optional[str] = Field(None, alias="newTime")
    rescheduled_at: Optional[str] = Field(None, alias="rescheduledAt")
    rescheduled_by_name: Optional[str] = Field(None, alias="rescheduledByName")
    reason: Optional[str] = None


class AppointmentDetail(Appointment):
    """Full appointment record from GetAppointmentById. Read-only here."""
    # Patient
    patient_phone: Optional[str] = Field(None, alias="patientPhone")
    patient_address: Optional[str] = Field(None, alias="patientAddress")
    patient_postal_code: Optional[str] = Field(None, alias="patientPostalCode")
    patient_date_of_birth: Optional[str] = Field(None, alias="patientDateOfBirth")
    patient_gender: Optional[str] = Field(None, alias="patientGender")
    family_members: List[FamilyMember] = Field(default_factory=list, alias="familyMembers")
    # Appointment
    notes: Optional[str] = None
    status_notes: Optional[str] = Field(None, alias="statusNotes")
    doctor_id: Optional[str] = Field(None, alias="doctorId")
    # Attendance
    attendance_notes: Optional[str] = Field(None, alias="attendanceNotes")
    attendance_updated_at: Optional[str] = Field(None, alias="attendanceUpdatedAt")
    attendance_updated_by_name: Optional[str] = Field(None, alias="attendanceUpdatedByName")
    # Reschedule
    reschedule_attempt_used: bool = Field(False, alias="rescheduleAttemptUsed")
    reschedule_request_status: Optional[str] = Field(None, alias="rescheduleRequestStatus")
    reschedule_history: List[RescheduleEntry] = Field(default_factory=list, alias="rescheduleHistory")
    # Cancellation
    cancellation_status: Optional[str] = Field(None, alias="cancellationStatus")
    cancellation_reason: Optional[str] = Field(None, alias="cancellationReason")
    # Meta
    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")

    @field_validator("family_members", "reschedule_history", mode="before")
    @classmethod
    def empty_list_for_null(cls, v):
        return v or []

    @field_validator("reschedule_attempt_used", mode="before")
    @classmethod
    def false_for_null(cls, v):
        return bool(v)


class MutationResult(BaseModel):
    success: bool
    message: str = ""

    @field_validator("message", mode="before")
    @classmethod
    def empty_string_for_null(cls, v):
        return v or ""


class GeoResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lat: float
    lng: float
    display_name: str = Field(..., alias="displayName")


class AppointmentQuery(BaseModel):
    """Variables of GetDoctorAppointments"""
    model_config = ConfigDict(populate_by_name=True)

    doctor_id: str = Field(..., alias="doctorId")
    start_date: Optional[str] = Field(None, alias="startDate")
    end_date: Optional[str] = Field(None, alias="endDate")
    status: Optional[str] = None
    page: Optional[int] = Field(None, ge=1)
    limit: Optional[int] = Field(None, ge=1)

    def variables(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
