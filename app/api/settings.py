# app/api/settings.py

from fastapi import APIRouter, Depends

from app.core.errors import GraphQLRequestError
from app.core.logger import logger
from app.core.security import require_doctor_reference
from app.helpers.settings_helper import DAYS_OF_WEEK, build_settings_input, time_slot_options
from app.models.appointment import MutationResult
from app.models.settings import DoctorSettingsResponse, UpdateDoctorSettingsRequest
from app.services.appointment_service import AppointmentService, get_appointment_service

router = APIRouter(
    prefix="/appointment-settings",
    tags=["Appointment Settings"]
)


@router.get("/", response_model=DoctorSettingsResponse)
async def get_appointment_settings(
        doctor_id: str = Depends(require_doctor_reference),
        service: AppointmentService = Depends(get_appointment_service)
):
    """
    Weekly availability and slot interval, plus the form's option lists.
    """
    response = DoctorSettingsResponse(time_slots=time_slot_options(), days_of_week=DAYS_OF_WEEK)

    try:
        settings = await service.get_settings(doctor_id)
    except GraphQLRequestError as e:
        logger.error(f"Error fetching doctor settings for {doctor_id}: {e.message}")
        response.error = e.message or "Failed to fetch appointment settings."
        return response

    if settings is None:
        response.message = "No appointment settings found for your account."
    response.settings = settings
    return response


@router.put("/", response_model=MutationResult)
async def update_appointment_settings(
        request: UpdateDoctorSettingsRequest,
        doctor_id: str = Depends(require_doctor_reference),
        service: AppointmentService = Depends(get_appointment_service)
):
    """
    Save availability. `copyFromDay` copies that day's hours to the other available days first.
    """
    result = await service.update_settings(doctor_id, build_settings_input(request))
    logger.info(f"Settings update for doctor {doctor_id}: success={result.success}")
    return result
