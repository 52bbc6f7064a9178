from __future__ import annotations
from datetime import date, datetime
from typing import NamedTuple, Optional, Tuple

import pytz
from timezonefinder import TimezoneFinder
from astral import LocationInfo
from astral.sun import sun

from .errors import SunTimeError


class EventTimes(NamedTuple):
    sunrise: datetime
    sunset: datetime


# --------------- Timezone lookup ---------------
_tf = None
def _finder() -> TimezoneFinder:
    global _tf
    if _tf is None:
        _tf = TimezoneFinder()
    return _tf

def iana_timezone_for(lat: float, lon: float):
    tzname = _finder().timezone_at(lng=lon, lat=lat) or "UTC"
    return pytz.timezone(tzname)

# --------------- Rise/Set ----------------------
def local_sun_times(lat: float, lon: float, day: date, tz) -> Tuple[datetime, datetime]:
    loc = LocationInfo(latitude=lat, longitude=lon, timezone=tz.zone)
    sdict = sun(loc.observer, date=day, tzinfo=tz)
    return sdict["sunrise"], sdict["sunset"]


class AstralSunOracle:
    """Computes sunrise/sunset for a calendar date at a given position."""

    def __init__(self, tz=None):
        # fixed zone for every position, otherwise looked up per call
        self.tz = tz

    def timezone_for(self, lat: float, lon: float):
        return self.tz if self.tz is not None else iana_timezone_for(lat, lon)

    def today(self, lat: float, lon: float, now: Optional[datetime] = None) -> date:
        tz = self.timezone_for(lat, lon)
        now = now or datetime.now(pytz.utc)
        return now.astimezone(tz).date()

    def compute_times(self, day: date, lat: float, lon: float) -> EventTimes:
        tz = self.timezone_for(lat, lon)
        try:
            sunrise, sunset = local_sun_times(lat, lon, day, tz)
        except ValueError as e:
            # astral raises when the sun stays above/below the horizon all day
            raise SunTimeError(f"no sunrise/sunset on {day} at {lat},{lon}: {e}") from e
        return EventTimes(sunrise, sunset)
