# app/core/security.py

import datetime
import bcrypt
from jose import jwt, JWTError
from fastapi import HTTPException, Depends
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError

from app.core import config
from app.core.errors import SessionError
from app.models.doctor import DoctorSession

ALGORITHM = "HS256"
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/token")


# Hash password using bcrypt
def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def authenticate_doctor(db, email: str, password: str):
    doctor = db["doctors"].find_one({"email": email})
    if not doctor or not verify_password(password, doctor.get("password", "")):
        return None
    return doctor


def create_access_token(data: dict, expires_delta: datetime.timedelta) -> str:
    to_encode = data.copy()
    expire = datetime.datetime.now(datetime.timezone.utc) + expires_delta
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.JWT_SECRET_KEY, algorithm=ALGORITHM)


def token_claims_for(doctor: dict) -> dict:
    return {
        "sub": str(doctor.get("_id") or doctor.get("id")),
        "email": doctor["email"],
        "name": f"{doctor.get('first_name', '')} {doctor.get('last_name', '')}".strip(),
        "clinicName": doctor.get("clinic_name"),
        "referenceId": doctor.get("reference_id"),
    }


def get_current_doctor(token: str = Depends(oauth2_scheme)) -> DoctorSession:
    credentials_exception = HTTPException(
        status_code=401,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[ALGORITHM])
        return DoctorSession.model_validate(payload)
    except (JWTError, ValidationError):
        raise credentials_exception


def require_doctor_reference(doctor: DoctorSession = Depends(get_current_doctor)) -> str:
    """Reference id used as `doctorId` on every remote call"""
    if not doctor.reference_id:
        raise SessionError()
    return doctor.reference_id


def verify_external_token(supplied: str) -> None:
    if not config.EXTERNAL_API_AUTH_TOKEN or supplied != config.EXTERNAL_API_AUTH_TOKEN:
        raise HTTPException(status_code=401, detail="Unauthorized: Invalid or missing token")
