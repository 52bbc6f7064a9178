"""Location providers used by the announcer's refresh cycle."""
from __future__ import annotations

import asyncio
import logging
from typing import NamedTuple

import requests

from .errors import LocationError

logger = logging.getLogger(__name__)

PRIMARY_URL = "https://ipinfo.io/json"
FALLBACK_URL = "https://ipapi.co/json"
TIMEOUT = 4


class Coordinates(NamedTuple):
    latitude: float
    longitude: float


def autolocate() -> Coordinates:
    """Best-effort IP geolocation returning the current coordinates.

    The helper first attempts to resolve the coordinates via ipinfo.io (which
    is fast and does not require an API key). If that fails for any reason it
    falls back to ipapi.co.  Errors from the fallback service are raised as
    :class:`LocationError`.
    """

    try:
        response = requests.get(PRIMARY_URL, timeout=TIMEOUT)
        if response.ok and response.json().get("loc"):
            lat_s, lon_s = response.json()["loc"].split(",")
            return Coordinates(float(lat_s), float(lon_s))
    except (requests.RequestException, ValueError) as e:
        logger.debug("Primary geolocation failed: %s", e)

    try:
        fallback = requests.get(FALLBACK_URL, timeout=TIMEOUT)
        fallback.raise_for_status()
        data = fallback.json()
        return Coordinates(float(data["latitude"]), float(data["longitude"]))
    except (requests.RequestException, ValueError, KeyError, TypeError) as e:
        raise LocationError(f"IP geolocation failed: {e}") from e


class IPLocationProvider:
    """Resolves the position from the public IP address."""

    async def get_current_position(self) -> Coordinates:
        # requests is blocking; keep the event loop free while it runs
        return await asyncio.to_thread(autolocate)


class StaticLocationProvider:
    """Always reports the same, user supplied coordinates."""

    def __init__(self, latitude: float, longitude: float):
        if not -90.0 <= latitude <= 90.0:
            raise LocationError(f"latitude out of range: {latitude}")
        if not -180.0 <= longitude <= 180.0:
            raise LocationError(f"longitude out of range: {longitude}")
        self.coordinates = Coordinates(latitude, longitude)

    async def get_current_position(self) -> Coordinates:
        return self.coordinates
