# app/models/doctor.py

from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import Optional


class DoctorSession(BaseModel):
    """Claims carried by a signed-in doctor's access token"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="sub")
    email: str
    name: Optional[str] = None
    clinic_name: Optional[str] = Field(None, alias="clinicName")
    reference_id: Optional[str] = Field(None, alias="referenceId")


class DoctorCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(..., min_length=1, alias="firstName")
    last_name: str = Field(..., min_length=1, alias="lastName")
    email: EmailStr
    password: str = Field(..., min_length=1)
    clinic_name: str = Field(..., min_length=1, alias="clinicName")
    specialization: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    reference_id: Optional[str] = Field(None, alias="mapleimeReferenceId")
    member_id: Optional[str] = Field(None, alias="memberId")
    is_non_community: bool = Field(False, alias="isNonCommunity")


class DoctorSyncPayload(BaseModel):
    """Doctor profile pushed by the main platform; `_id` is its reference id"""
    model_config = ConfigDict(populate_by_name=True)

    reference_id: Optional[str] = Field(None, alias="_id")
    name: Optional[str] = ""
    email: Optional[str] = None
    clinic_name: Optional[str] = Field(None, alias="clinicName")
    member_id: Optional[str] = Field(None, alias="memberId")
    is_non_community: Optional[bool] = Field(False, alias="isNonCommunity")
    specialization: Optional[str] = None
    city: Optional[str] = None


class DoctorOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    email: str
    clinic_name: str = Field(..., alias="clinicName")
    specialization: str
    created_at: Optional[str] = Field(None, alias="createdAt")
