# app/helpers/settings_helper.py

from typing import List, Optional

from app.models.settings import DayAvailability, SelectOption, UpdateDoctorSettingsRequest

DAYS_OF_WEEK = [
    SelectOption(value="Mon", label="Monday"),
    SelectOption(value="Tue", label="Tuesday"),
    SelectOption(value="Wed", label="Wednesday"),
    SelectOption(value="Thu", label="Thursday"),
    SelectOption(value="Fri", label="Friday"),
    SelectOption(value="Sat", label="Saturday"),
    SelectOption(value="Sun", label="Sunday"),
]

DEFAULT_SLOT_INTERVAL = 30


def time_slot_options(step_minutes: int = 15) -> List[SelectOption]:
    """Every `step_minutes` of the day as 24h values with 12h labels"""
    options = []
    for minute_of_day in range(0, 24 * 60, step_minutes):
        hour, minute = divmod(minute_of_day, 60)
        period = "PM" if hour >= 12 else "AM"
        hour12 = hour % 12 or 12
        options.append(SelectOption(
            value=f"{hour:02d}:{minute:02d}",
            label=f"{hour12}:{minute:02d} {period}",
        ))
    return options


def copy_time_slots(availability: List[DayAvailability], source_day: str) -> List[DayAvailability]:
    """
    Copy the source day's hours onto every other available day.
    Unavailable days are left as they are. Returns a new list.
    """
    source: Optional[DayAvailability] = next((a for a in availability if a.day == source_day), None)
    if source is None:
        return list(availability)

    return [
        item.model_copy(update={"start_time": source.start_time, "end_time": source.end_time})
        if item.day != source_day and item.is_available
        else item
        for item in availability
    ]


def build_settings_input(request: UpdateDoctorSettingsRequest) -> dict:
    """UpdateDoctorSettingsInput payload for the remote mutation"""
    availability = request.availability
    if request.copy_from_day:
        availability = copy_time_slots(availability, request.copy_from_day)

    return {
        "slotInterval": request.slot_interval or DEFAULT_SLOT_INTERVAL,
        "availability": [
            {
                "day": item.day,
                "isAvailable": item.is_available,
                "startTime": item.start_time,
                "endTime": item.end_time,
            }
            for item in availability
        ],
    }
