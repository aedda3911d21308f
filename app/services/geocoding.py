# app/services/geocoding.py

from typing import Optional

import requests
from starlette.concurrency import run_in_threadpool

from app.core import config
from app.core.logger import logger
from app.models.appointment import GeoResult


def search_location(query: str, session: Optional[requests.Session] = None) -> Optional[GeoResult]:
    """Single Nominatim lookup limited to Canada and the US; None on any failure"""
    if not query or not query.strip():
        return None

    http = session or requests
    try:
        response = http.get(
            config.GEOCODER_URL,
            params={"q": query, "format": "json", "limit": 1, "countrycodes": "ca,us"},
            headers={"User-Agent": config.GEOCODER_USER_AGENT},
            timeout=config.GEOCODER_TIMEOUT_SECONDS,
        )
        if response.status_code != 200:
            return None
        results = response.json()
        if not isinstance(results, list) or not results:
            return None
        first = results[0]
        return GeoResult(
            lat=float(first["lat"]),
            lng=float(first["lon"]),
            display_name=first.get("display_name") or query,
        )
    except (requests.RequestException, ValueError, KeyError, TypeError) as e:
        logger.warning(f"Geocoding lookup failed for {query!r}: {str(e)}")
        return None


def geocode_address(
        address: Optional[str],
        postal_code: Optional[str],
        session: Optional[requests.Session] = None
) -> Optional[GeoResult]:
    """
    Locate a patient address, trying progressively looser queries:
    address + postal code, address alone, postal code in Canada, postal code alone.
    """
    candidates = []
    if address and postal_code:
        candidates.append(f"{address}, {postal_code}")
    if address:
        candidates.append(address)
    if postal_code:
        candidates.append(f"{postal_code}, Canada")
        candidates.append(postal_code)

    for query in candidates:
        result = search_location(query, session=session)
        if result:
            return result
    return None


async def geocode_address_async(address: Optional[str], postal_code: Optional[str]) -> Optional[GeoResult]:
    return await run_in_threadpool(geocode_address, address, postal_code)


def get_geocoder():
    return geocode_address_async
