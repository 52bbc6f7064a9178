from datetime import datetime, timezone

import pytest

from sun_announcer.astronomy import EventTimes
from sun_announcer.errors import LocationError
from sun_announcer.location import Coordinates
from sun_announcer.settings import Settings


class FakeJob:
    def __init__(self, func, trigger, id, run_date, args):
        self.func = func
        self.trigger = trigger
        self.id = id
        self.run_date = run_date
        self.args = args
        self.removed = False

    def remove(self):
        self.removed = True

    async def fire(self):
        if not self.removed:
            await self.func(*self.args)


class FakeJobScheduler:
    """Records add_job requests instead of running them."""

    def __init__(self):
        self.jobs = []

    def add_job(self, func, trigger=None, id=None, run_date=None, args=None, **kwargs):
        job = FakeJob(func, trigger, id, run_date, args or [])
        self.jobs.append(job)
        return job


class FakeProvider:
    def __init__(self, coords=Coordinates(59.33, 18.06), error=None):
        self.coords = coords
        self.error = error
        self.calls = 0

    async def get_current_position(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.coords


class FakeOracle:
    def __init__(self, times):
        self.times = times
        self.requests = []

    def today(self, lat, lon, now=None):
        return now.date()

    def compute_times(self, day, lat, lon):
        self.requests.append((day, lat, lon))
        return self.times


class RecordingNotifier:
    def __init__(self):
        self.events = []

    def notify(self, event_type):
        self.events.append(event_type)
        return {}


NOW = datetime(2024, 6, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def fake_jobs():
    return FakeJobScheduler()


@pytest.fixture
def times():
    return EventTimes(
        sunrise=datetime(2024, 6, 1, 4, 0, tzinfo=timezone.utc),
        sunset=datetime(2024, 6, 1, 18, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def failing_provider():
    return FakeProvider(error=LocationError("permission denied"))


@pytest.fixture
def notifier():
    return RecordingNotifier()
