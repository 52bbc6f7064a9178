from datetime import date, datetime

import pytest
import pytz

from sun_announcer.astronomy import AstralSunOracle, EventTimes, iana_timezone_for
from sun_announcer.errors import SunTimeError

STOCKHOLM = (59.33, 18.06)
LONGYEARBYEN = (78.22, 15.65)


def test_timezone_lookup():
    assert iana_timezone_for(*STOCKHOLM).zone == "Europe/Stockholm"
    assert iana_timezone_for(19.076, 72.8777).zone == "Asia/Kolkata"


def test_compute_times_for_stockholm_midsummer():
    times = AstralSunOracle().compute_times(date(2024, 6, 21), *STOCKHOLM)

    assert isinstance(times, EventTimes)
    assert times.sunrise < times.sunset
    assert times.sunrise.date() == date(2024, 6, 21)
    # roughly 03:30 and 22:08 local time
    assert times.sunrise.hour == 3
    assert times.sunset.hour == 22
    assert times.sunrise.tzinfo is not None


def test_fixed_timezone():
    oracle = AstralSunOracle(tz=pytz.utc)
    times = oracle.compute_times(date(2024, 3, 20), 0.0, 0.0)
    assert times.sunrise.utcoffset().total_seconds() == 0
    assert times.sunrise.hour == 6
    assert times.sunset.hour == 18


def test_polar_day_raises_sun_time_error():
    with pytest.raises(SunTimeError):
        AstralSunOracle().compute_times(date(2024, 6, 21), *LONGYEARBYEN)


def test_today_uses_local_calendar_date():
    late_utc = datetime(2024, 6, 1, 23, 30, tzinfo=pytz.utc)
    assert AstralSunOracle().today(*STOCKHOLM, now=late_utc) == date(2024, 6, 2)
    assert AstralSunOracle(tz=pytz.utc).today(*STOCKHOLM, now=late_utc) == date(2024, 6, 1)
