# app/utils/date_utils.py

from datetime import datetime, date, timezone
from typing import Optional


def server_today() -> date:
    """Calendar date on the server's clock"""
    return date.today()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def display_date(value: Optional[str]) -> str:
    """'2026-02-22' or an ISO timestamp -> 'February 22, 2026'; a dash placeholder when empty"""
    if not value:
        return "—"
    try:
        if "T" in value:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        else:
            parsed = datetime.strptime(value, '%Y-%m-%d')
    except ValueError:
        return value
    return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"
