# app/api/auth.py

from datetime import datetime, timezone, timedelta
from fastapi import APIRouter, HTTPException, Depends
from fastapi.security import OAuth2PasswordRequestForm

from app.core import config
from app.core.logger import logger
from app.core.security import authenticate_doctor, create_access_token, get_current_doctor, token_claims_for
from app.db.client import get_db
from app.models.doctor import DoctorSession
from app.models.schemas import Token

router = APIRouter(tags=["Authentication"])


@router.post("/token", response_model=Token)
def login(form_data: OAuth2PasswordRequestForm = Depends(), db=Depends(get_db)):
    if not form_data.username or not form_data.password:
        raise HTTPException(status_code=400, detail="Missing email or password")

    doctor = authenticate_doctor(db, form_data.username, form_data.password)
    if not doctor:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    try:
        db["doctors"].update_one(
            {"_id": doctor["_id"]},
            {"$set": {"last_login_at": datetime.now(timezone.utc)}}
        )
    except Exception as e:
        # Continue with login even if update fails
        logger.error(f"Failed to update login time for {form_data.username}: {str(e)}")

    if not doctor.get("reference_id"):
        logger.warning(f"Doctor {form_data.username} signed in without a reference id")

    access_token = create_access_token(
        data=token_claims_for(doctor),
        expires_delta=timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    logger.info(f"Doctor {form_data.username} logged in successfully")
    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/me", response_model=DoctorSession)
def read_current_doctor(doctor: DoctorSession = Depends(get_current_doctor)):
    return doctor
