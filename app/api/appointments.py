# app/api/appointments.py

import asyncio
from datetime import date, datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi import status as http_status

from app.core import config
from app.core.errors import GraphQLRequestError
from app.core.logger import logger
from app.core.security import require_doctor_reference
from app.models.appointment import AppointmentPage
from app.models.dashboard import AppointmentDetailView, AppointmentsView
from app.models.schemas import ActionRequest, ActionResponse, NoticeOut
from app.services.actions import ActionController, InFlightRegistry, available_actions
from app.services.aggregator import (
    attendance_label, build_history_view, build_live_view, split_time, status_label
)
from app.services.appointment_service import AppointmentService, get_appointment_service
from app.services.classifier import canonical_status, is_past_due, is_terminal
from app.services.filters import (
    build_appointment_query, build_navigation, build_pending_query, parse_filter_state
)
from app.services.geocoding import get_geocoder
from app.utils.date_utils import display_date, server_today, utc_now

router = APIRouter(
    prefix="/appointments",
    tags=["Appointments"]
)

LIVE_PATH = "/appointments"
HISTORY_PATH = "/appointments/history"

# (doctorId, appointmentId) pairs with a mutation outstanding
in_flight_actions = InFlightRegistry()


def _page_or_empty(result, label: str, errors: List[str]) -> AppointmentPage:
    """Unwrap one gathered fetch; a remote failure becomes a banner and an empty page"""
    if isinstance(result, GraphQLRequestError):
        logger.error(f"Failed to load {label}: {result.message}")
        errors.append(f"Failed to load {label}: {result.message}")
        return AppointmentPage()
    if isinstance(result, BaseException):
        raise result
    return result


@router.get("", response_model=AppointmentsView)
async def list_live_appointments(
        request: Request,
        doctor_id: str = Depends(require_doctor_reference),
        service: AppointmentService = Depends(get_appointment_service),
        today: date = Depends(server_today),
        now: datetime = Depends(utc_now)
):
    """
    Live appointments (last LIVE_WINDOW_DAYS days onward) with urgent pinning.

    The current page and the global pending set are fetched concurrently;
    either one failing leaves the other usable.
    """
    filters = parse_filter_state(request.query_params)

    page_query = build_appointment_query(filters, doctor_id, "live", today, config.APPOINTMENTS_PAGE_SIZE)
    pending_query = build_pending_query(doctor_id, today, config.URGENT_QUERY_LIMIT)

    page_result, pending_result = await asyncio.gather(
        service.list_appointments(page_query),
        service.list_appointments(pending_query),
        return_exceptions=True,
    )

    errors: List[str] = []
    page = _page_or_empty(page_result, "appointments", errors)
    pending = _page_or_empty(pending_result, "urgent appointments", errors)

    has_next_page = page.has_next_page and not filters.urgent_only
    navigation = build_navigation(filters, has_next_page, request.url.path)

    return build_live_view(page, pending, filters, today, now, navigation=navigation, errors=errors)


@router.get("/history", response_model=AppointmentsView)
async def list_appointment_history(
        request: Request,
        doctor_id: str = Depends(require_doctor_reference),
        service: AppointmentService = Depends(get_appointment_service),
        today: date = Depends(server_today),
        now: datetime = Depends(utc_now)
):
    """
    Appointments older than the live window, ordered by status priority.
    """
    filters = parse_filter_state(request.query_params)
    query = build_appointment_query(filters, doctor_id, "history", today, config.HISTORY_QUERY_LIMIT)

    errors: List[str] = []
    try:
        page = await service.list_appointments(query)
    except GraphQLRequestError as e:
        logger.error(f"Failed to load history for doctor {doctor_id}: {e.message}")
        errors.append(f"Failed to load history: {e.message}")
        page = AppointmentPage()

    navigation = build_navigation(filters, page.has_next_page, request.url.path)
    return build_history_view(page, filters, today, now, navigation=navigation, errors=errors)


@router.get("/{appointment_id}", response_model=AppointmentDetailView)
async def get_appointment(
        appointment_id: str,
        doctor_id: str = Depends(require_doctor_reference),
        service: AppointmentService = Depends(get_appointment_service),
        geocoder=Depends(get_geocoder),
        now: datetime = Depends(utc_now)
):
    """
    Full appointment record with its available actions and patient location.
    """
    try:
        detail = await service.get_appointment_detail(appointment_id, doctor_id)
    except GraphQLRequestError as e:
        logger.error(f"Error fetching appointment {appointment_id}: {e.message}")
        raise HTTPException(
            status_code=http_status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to load appointment: {e.message}"
        )

    if detail is None:
        raise HTTPException(
            status_code=http_status.HTTP_404_NOT_FOUND,
            detail=f"Appointment with ID {appointment_id} not found"
        )

    # map display only; the geocoder returns None on failure
    location = await geocoder(detail.patient_address, detail.patient_postal_code)

    past = is_past_due(detail, now)
    time_value, time_period = split_time(detail.time)
    return AppointmentDetailView(
        appointment=detail,
        status=canonical_status(detail.status),
        status_label=status_label(detail.status),
        date_label=display_date(detail.date),
        time_value=time_value,
        time_period=time_period,
        attendance_label=attendance_label(detail.attendance),
        is_past=past,
        show_actions=not is_terminal(detail.status),
        actions=available_actions(detail, now, past=past),
        location=location,
    )


@router.post("/{appointment_id}/actions", response_model=ActionResponse)
async def perform_appointment_action(
        appointment_id: str,
        body: ActionRequest,
        doctor_id: str = Depends(require_doctor_reference),
        service: AppointmentService = Depends(get_appointment_service)
):
    """
    Approve, cancel or record attendance for an appointment.

    A second request for the same appointment while one is outstanding is
    rejected without contacting the remote API.
    """
    key = (doctor_id, appointment_id)
    if not in_flight_actions.acquire(key):
        raise HTTPException(
            status_code=http_status.HTTP_409_CONFLICT,
            detail="An action is already in progress for this appointment"
        )

    revalidate: List[str] = []
    try:
        try:
            detail = await service.get_appointment_detail(appointment_id, doctor_id)
        except GraphQLRequestError as e:
            logger.error(f"Error loading appointment {appointment_id} before action: {e.message}")
            raise HTTPException(
                status_code=http_status.HTTP_502_BAD_GATEWAY,
                detail=f"Failed to load appointment: {e.message}"
            )

        if detail is None:
            raise HTTPException(
                status_code=http_status.HTTP_404_NOT_FOUND,
                detail=f"Appointment with ID {appointment_id} not found"
            )

        controller = ActionController(
            detail,
            doctor_id,
            service,
            on_refresh=[lambda: revalidate.append(LIVE_PATH), lambda: revalidate.append(HISTORY_PATH)],
        )
        controller.is_open = True
        controller.note = body.note or ""

        result = await controller.handle(body.action)
    finally:
        in_flight_actions.release(key)

    notice = controller.notice
    return ActionResponse(
        success=result.success,
        message=result.message,
        notice=NoticeOut(
            kind=notice.kind,
            message=notice.message,
            expires_in_seconds=notice.expires_in(controller.clock()),
        ) if notice else None,
        note=controller.note,
        panel_open=controller.is_open,
        revalidate=revalidate,
    )
