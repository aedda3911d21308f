# app/models/settings.py

import re
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, List, Literal

Weekday = Literal["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

_CLOCK_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


class DayAvailability(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    day: Weekday
    is_available: bool = Field(False, alias="isAvailable")
    start_time: str = Field("09:00", alias="startTime", description="24h HH:MM")
    end_time: str = Field("17:00", alias="endTime", description="24h HH:MM")

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_clock(cls, v: str) -> str:
        if not _CLOCK_PATTERN.match(v):
            raise ValueError("Time must be in 24h HH:MM format")
        return v

    @model_validator(mode="after")
    def start_before_end(self):
        # Zero-padded HH:MM compares correctly as text
        if self.is_available and self.start_time >= self.end_time:
            raise ValueError(f"{self.day}: start time must be before end time")
        return self


class StoredDayAvailability(BaseModel):
    """One weekday as stored remotely; values are passed through for display as-is"""
    model_config = ConfigDict(populate_by_name=True)

    day: str
    is_available: bool = Field(False, alias="isAvailable")
    start_time: str = Field("", alias="startTime")
    end_time: str = Field("", alias="endTime")

    @field_validator("is_available", mode="before")
    @classmethod
    def false_for_null(cls, v):
        return bool(v)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def empty_string_for_null(cls, v):
        return v if v is not None else ""


class DoctorSettings(BaseModel):
    """Response of GetDoctorSettings"""
    model_config = ConfigDict(populate_by_name=True)

    time_zone: Optional[str] = Field(None, alias="timeZone")
    reference_time_zone: Optional[str] = None
    slot_interval: int = Field(30, alias="slotInterval")
    availability: List[StoredDayAvailability] = Field(default_factory=list)

    @field_validator("availability", mode="before")
    @classmethod
    def empty_list_for_null(cls, v):
        return v or []

    @field_validator("slot_interval", mode="before")
    @classmethod
    def default_interval(cls, v):
        return v or 30


class UpdateDoctorSettingsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    slot_interval: Optional[int] = Field(None, alias="slotInterval", ge=0, le=240)
    availability: List[DayAvailability]
    copy_from_day: Optional[Weekday] = Field(None, alias="copyFromDay")

    @field_validator("availability")
    @classmethod
    def unique_days(cls, v: List[DayAvailability]) -> List[DayAvailability]:
        days = [item.day for item in v]
        if len(days) != len(set(days)):
            raise ValueError("Each weekday may appear only once")
        return v


class SelectOption(BaseModel):
    value: str
    label: str


class DoctorSettingsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    settings: Optional[DoctorSettings] = None
    message: Optional[str] = None
    time_slots: List[SelectOption] = Field(default_factory=list, alias="timeSlots")
    days_of_week: List[SelectOption] = Field(default_factory=list, alias="daysOfWeek")
    error: Optional[str] = None
