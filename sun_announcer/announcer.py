"""Refresh location, compute the sun times and keep the timers up to date."""
from __future__ import annotations

import asyncio
import enum
import logging
from datetime import date, datetime
from typing import Callable, Optional, Protocol

import pytz
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .astronomy import EventTimes
from .errors import SunAnnouncerError
from .location import Coordinates
from .notifier import Notifier
from .scheduler import Scheduler, utcnow
from .settings import Settings

logger = logging.getLogger(__name__)

REFRESH_JOB = "refresh"


class LocationProvider(Protocol):
    async def get_current_position(self) -> Coordinates: ...


class SunTimeOracle(Protocol):
    def today(self, lat: float, lon: float, now: Optional[datetime] = None) -> date: ...

    def compute_times(self, day: date, lat: float, lon: float) -> EventTimes: ...


class AnnouncerState(enum.Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class Announcer:
    def __init__(self, settings: Settings, location_provider: LocationProvider,
                 oracle: SunTimeOracle, notifier: Notifier,
                 clock: Callable[[], datetime] = utcnow):
        self.settings = settings
        self.location_provider = location_provider
        self.oracle = oracle
        self.notifier = notifier
        self.clock = clock
        self.scheduler = Scheduler(settings, self._on_event)
        self.state = AnnouncerState.STOPPED
        self.jobs: Optional[AsyncIOScheduler] = None
        self._stopped: Optional[asyncio.Event] = None
        logger.info("Loaded settings: %s", settings)

    @property
    def running(self) -> bool:
        return self.state is AnnouncerState.RUNNING

    async def start(self) -> None:
        """Start the refresh cycle and run the first refresh right away."""
        if self.running:
            logger.warning("Already running")
            return
        logger.info("Starting..")
        self.state = AnnouncerState.RUNNING
        self._stopped = asyncio.Event()
        self.jobs = AsyncIOScheduler(timezone=pytz.utc)
        self.scheduler.jobs = self.jobs
        self.jobs.add_job(
            self.load,
            "interval",
            seconds=self.refresh_delay,
            id=REFRESH_JOB,
            max_instances=1,
            coalesce=True,
        )
        self.jobs.start()
        await self.load()

    def stop(self) -> None:
        if not self.running:
            return
        logger.info("Stopping..")
        self.state = AnnouncerState.STOPPED
        self.scheduler.cancel_all()
        if self.jobs is not None:
            if self.jobs.running:
                self.jobs.shutdown(wait=False)
            self.jobs = None
        if self._stopped is not None:
            self._stopped.set()

    async def run_forever(self) -> None:
        await self.start()
        if self._stopped is not None:
            await self._stopped.wait()

    @property
    def refresh_delay(self) -> float:
        return self.settings.interval * 60

    async def locate_and_compute(self) -> tuple[Coordinates, EventTimes]:
        coords = await self.location_provider.get_current_position()
        day = self.oracle.today(coords.latitude, coords.longitude, self.clock())
        times = self.oracle.compute_times(day, coords.latitude, coords.longitude)
        return coords, times

    async def load(self) -> Optional[EventTimes]:
        """One refresh cycle: locate, compute today's times, reset the timers.

        Failures are logged and leave the current timers alone.  A result
        that arrives after :meth:`stop` is discarded.
        """
        logger.info("Loading..")
        try:
            coords, times = await self.locate_and_compute()
        except SunAnnouncerError as e:
            logger.error("Could not load: %s", e)
            return None
        except Exception:
            logger.exception("Could not load")
            return None

        if not self.running:
            logger.info("Stopped while loading, discarding result")
            return None

        self.scheduler.set_timers(times.sunrise, times.sunset, self.clock())
        logger.info(
            "Done! Notifications for %s,%s: sunrise %s, sunset %s",
            coords.latitude, coords.longitude, times.sunrise, times.sunset,
        )
        return times

    def _on_event(self, event_type: str) -> None:
        logger.info("Sending a notification for the %s at %s", event_type, self.clock())
        self.notifier.notify(event_type)
