"""Settings resolution: built-in defaults, a ``.env`` file and the process env.

The type of each recognised option is inferred from its default value and
text overrides are coerced to that type.  Keys that have no default are
kept as the raw strings they arrived as.
"""
from __future__ import annotations

import logging
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from dotenv import dotenv_values

from .errors import ConfigParseError

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Union[bool, int]] = {
    "SUNRISES": True,
    "SUNSETS": True,
    "ADVANCE": 5,        # minutes before the event
    "INTERVAL": 60,      # minutes between location refreshes
    "SPEECH": True,
    "NOTIFICATIONS": True,
    "VERBOSE": True,
}

# Extra keys read from the process environment even though they have no default.
PASSTHROUGH_KEYS = frozenset({"SPEECH_COMMAND"})


@dataclass(frozen=True)
class Settings:
    sunrises: bool = True
    sunsets: bool = True
    advance: int = 5
    interval: int = 60
    speech: bool = True
    notifications: bool = True
    verbose: bool = True
    extra: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def enabled(self, event_type: str) -> bool:
        if event_type == "sunrise":
            return self.sunrises
        if event_type == "sunset":
            return self.sunsets
        return False

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "Settings":
        known = {k.lower(): v for k, v in values.items() if k in DEFAULTS}
        extra = {k: v for k, v in values.items() if k not in DEFAULTS}
        settings = cls(extra=MappingProxyType(extra), **known)
        _validate(settings)
        return settings


def _coerce(key: str, raw: Any, default: Any) -> Any:
    if not isinstance(raw, str):
        return raw
    if isinstance(default, bool):
        return raw.strip().lower() == "true"
    if isinstance(default, int):
        try:
            return int(raw.strip())
        except ValueError:
            raise ConfigParseError(key, raw, "expected an integer") from None
    return raw


def _validate(settings: Settings) -> None:
    if settings.interval < 1:
        raise ConfigParseError("INTERVAL", str(settings.interval), "must be at least 1 minute")
    if settings.advance < 0:
        raise ConfigParseError("ADVANCE", str(settings.advance), "must not be negative")
    command = settings.extra.get("SPEECH_COMMAND")
    if command is not None:
        try:
            shlex.split(command)
        except ValueError as e:
            raise ConfigParseError("SPEECH_COMMAND", command, str(e)) from None


def merge_settings(defaults: Mapping[str, Any],
                   overrides: Mapping[str, Optional[str]]) -> Dict[str, Any]:
    """Merge ``overrides`` over ``defaults`` and coerce by the default's type.

    Override keys are matched case-insensitively against the defaults;
    ``None`` values (bare keys in a ``.env`` file) are ignored.
    """
    merged: Dict[str, Any] = dict(defaults)
    for key, raw in overrides.items():
        if raw is None:
            continue
        canonical = key.upper() if key.upper() in defaults else key
        if canonical in defaults:
            merged[canonical] = _coerce(canonical, raw, defaults[canonical])
        else:
            merged[canonical] = raw
    return merged


def read_overrides(env_file: Union[str, Path, None] = ".env",
                   environ: Optional[Mapping[str, str]] = None) -> Dict[str, Optional[str]]:
    """Collect raw override values; the process env wins over the file."""
    environ = os.environ if environ is None else environ
    overrides: Dict[str, Optional[str]] = {}

    if env_file is not None:
        path = Path(env_file)
        if path.is_file():
            overrides.update(dotenv_values(path))
            logger.debug("Read %d values from %s", len(overrides), path)

    wanted = {k.upper() for k in overrides} | set(DEFAULTS) | PASSTHROUGH_KEYS
    for key, value in environ.items():
        if key.upper() in wanted:
            overrides[key] = value
    return overrides


def load_settings(env_file: Union[str, Path, None] = ".env",
                  environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build the immutable settings snapshot used for the whole process run."""
    return Settings.from_mapping(merge_settings(DEFAULTS, read_overrides(env_file, environ)))
