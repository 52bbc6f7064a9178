"""One-shot notification jobs for the day's sunrise and sunset.

Jobs are APScheduler ``date`` jobs with the ids ``"sunrise"`` and
``"sunset"``.  Every call to :meth:`Scheduler.set_timers` removes whatever
is still pending before new jobs are added, so a refresh can never leave a
stale job behind.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .settings import Settings

logger = logging.getLogger(__name__)

EVENT_TYPES = ("sunrise", "sunset")

# seconds a job may run late (event loop busy, laptop waking up)
MISFIRE_GRACE = 60


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ActiveTimers:
    sunrise: Optional[Job] = None
    sunset: Optional[Job] = None

    def get(self, event_type: str) -> Optional[Job]:
        return getattr(self, event_type)

    def put(self, event_type: str, job: Optional[Job]) -> None:
        setattr(self, event_type, job)


class Scheduler:
    def __init__(self, settings: Settings, on_event: Callable[[str], None],
                 jobs: Optional[AsyncIOScheduler] = None,
                 clock: Callable[[], datetime] = utcnow):
        self.settings = settings
        self.on_event = on_event
        self.jobs = jobs
        # wall clock the job run dates are anchored to
        self.clock = clock
        self.timers = ActiveTimers()

    @property
    def advance(self) -> timedelta:
        return timedelta(minutes=self.settings.advance)

    def pending(self) -> List[str]:
        return [t for t in EVENT_TYPES if self.timers.get(t) is not None]

    def cancel_all(self) -> None:
        for event_type in EVENT_TYPES:
            job = self.timers.get(event_type)
            if job is None:
                continue
            try:
                job.remove()
            except JobLookupError:
                logger.debug("%s job already gone", event_type)
            self.timers.put(event_type, None)

    def set_timers(self, sunrise: datetime, sunset: datetime,
                   now: datetime) -> Dict[str, timedelta]:
        """Replace the pending jobs with ones for ``sunrise`` and ``sunset``.

        Returns the delay of every job that was actually scheduled.  Events
        that are disabled, or whose notification time has already passed,
        are skipped without notifying.
        """
        self.cancel_all()

        scheduled: Dict[str, timedelta] = {}
        for event_type, when in (("sunrise", sunrise), ("sunset", sunset)):
            delay = when - now - self.advance
            if not self.settings.enabled(event_type):
                logger.debug("Skipping %s: disabled", event_type)
                continue
            if delay < timedelta(0):
                logger.info("Skipping %s at %s: already passed", event_type, when)
                continue
            job = self.jobs.add_job(
                self._fire,
                "date",
                run_date=self.clock() + delay,
                args=[event_type],
                id=event_type,
                replace_existing=True,
                misfire_grace_time=MISFIRE_GRACE,
            )
            self.timers.put(event_type, job)
            scheduled[event_type] = delay
            logger.info("Scheduled %s notification in %s", event_type, delay)
        return scheduled

    async def _fire(self, event_type: str) -> None:
        # must stay a coroutine: plain callables run in the executor thread pool
        self.timers.put(event_type, None)
        self.on_event(event_type)
