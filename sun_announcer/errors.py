"""Exception hierarchy shared by the announcer components."""
from __future__ import annotations


class SunAnnouncerError(Exception):
    """Base class for every error raised by this package."""


class LocationError(SunAnnouncerError):
    """The location provider failed or access was denied."""


class SunTimeError(SunAnnouncerError):
    """Sunrise/sunset could not be computed for the requested date."""


class ConfigParseError(SunAnnouncerError, ValueError):
    """A configuration value could not be coerced to its expected type."""

    def __init__(self, key: str, value: str, reason: str):
        super().__init__(f"{key}={value!r}: {reason}")
        self.key = key
        self.value = value


class NotificationDeliveryError(SunAnnouncerError):
    """A visual or spoken notification could not be delivered."""
