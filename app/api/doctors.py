# app/api/doctors.py

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi import status as http_status

from app.core.logger import logger
from app.core.security import hash_password, verify_external_token
from app.db.client import get_db
from app.models.doctor import DoctorCreate, DoctorOut, DoctorSyncPayload

router = APIRouter(
    prefix="/api",
    tags=["Doctors"]
)


def split_full_name(name: Optional[str]):
    """'Jane van Dyke' -> ('Jane', 'van Dyke')"""
    parts = (name or "").strip().split()
    first_name = parts[0] if parts else ""
    last_name = " ".join(parts[1:])
    return first_name, last_name


@router.post("/external/create_doctor", status_code=http_status.HTTP_201_CREATED)
def create_doctor(
        doctor: DoctorCreate,
        authorization: Optional[str] = Header(None),
        db=Depends(get_db)
):
    """
    Provision a dashboard account for a doctor of the main platform.
    """
    verify_external_token((authorization or "").replace("Bearer ", "", 1))

    if db["doctors"].find_one({"email": doctor.email}):
        raise HTTPException(
            status_code=http_status.HTTP_409_CONFLICT,
            detail="Doctor with this email already exists"
        )

    now = datetime.now(timezone.utc)
    document = {
        "first_name": doctor.first_name,
        "last_name": doctor.last_name,
        "email": doctor.email,
        "password": hash_password(doctor.password),
        "clinic_name": doctor.clinic_name,
        "reference_id": doctor.reference_id,
        "member_id": doctor.member_id,
        "is_non_community": doctor.is_non_community,
        "specialization": doctor.specialization,
        "city": doctor.city,
        "created_at": now,
        "updated_at": now,
    }

    try:
        result = db["doctors"].insert_one(document)
    except Exception as e:
        logger.error(f"Error creating doctor {doctor.email}: {str(e)}")
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error"
        )

    logger.info(f"Doctor account created for {doctor.email}")
    created = DoctorOut(
        id=str(result.inserted_id),
        first_name=doctor.first_name,
        last_name=doctor.last_name,
        email=doctor.email,
        clinic_name=doctor.clinic_name,
        specialization=doctor.specialization,
        created_at=now.isoformat(),
    )
    return {
        "success": True,
        "message": "Doctor account created successfully",
        "data": created.model_dump(by_alias=True),
    }


@router.post("/sync/doctor")
def sync_doctor(
        payload: DoctorSyncPayload,
        x_api_key: Optional[str] = Header(None),
        db=Depends(get_db)
):
    """
    Update a dashboard account from the main platform's doctor profile.

    Matches on reference id first and falls back to email only when no
    account carries that reference id yet.
    """
    verify_external_token(x_api_key or "")

    if not payload.reference_id:
        raise HTTPException(status_code=http_status.HTTP_400_BAD_REQUEST, detail="Missing Mapleime _id")

    first_name, last_name = split_full_name(payload.name)

    if db["doctors"].find_one({"reference_id": payload.reference_id}):
        match = {"reference_id": payload.reference_id}
    elif payload.email:
        match = {"email": payload.email}
    else:
        raise HTTPException(
            status_code=http_status.HTTP_404_NOT_FOUND,
            detail="No doctor found in Dashboard matching this Mapleime user"
        )

    update = {
        "first_name": first_name,
        "last_name": last_name,
        "email": payload.email,
        "clinic_name": payload.clinic_name or "",
        "member_id": payload.member_id,
        "is_non_community": bool(payload.is_non_community),
        "specialization": payload.specialization or "General",
        "city": payload.city or "Unknown",
        "reference_id": payload.reference_id,
        "updated_at": datetime.now(timezone.utc),
    }

    try:
        result = db["doctors"].update_many(match, {"$set": update})
    except Exception as e:
        logger.error(f"Dashboard sync error for {payload.reference_id}: {str(e)}")
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

    if result.matched_count == 0:
        raise HTTPException(
            status_code=http_status.HTTP_404_NOT_FOUND,
            detail="No doctor found in Dashboard matching this Mapleime user"
        )

    logger.info(f"Synced doctor {payload.reference_id} ({result.matched_count} record(s))")
    return {"message": "Successfully synced doctor details", "count": result.matched_count}
