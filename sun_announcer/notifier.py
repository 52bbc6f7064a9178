"""Desktop notification and speech output for sun events.

Two independent channels:
- visual notification via plyer (native toasts on macOS, Linux and Windows)
- speech via a TTS command (``say`` on macOS, ``espeak`` on Linux), which
  can be replaced with the ``SPEECH_COMMAND`` setting

Both are fire-and-forget; a failing channel is logged and never blocks the
other one.
"""
from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
import sys
from typing import Dict, List, Optional

from plyer import notification

from .errors import NotificationDeliveryError
from .settings import Settings

logger = logging.getLogger(__name__)

TITLE = "Look"
APP_NAME = "Sun Announcer"

MESSAGES = {
    "sunrise": "The sun is rising",
    "sunset": "The sun is setting",
}


def message_for(event_type: str) -> str:
    return MESSAGES.get(event_type, "It's time")


def default_speech_command() -> Optional[List[str]]:
    if sys.platform == "darwin":
        return ["say"]
    if sys.platform.startswith("linux"):
        return ["espeak"]
    return None


class Notifier:
    def __init__(self, settings: Settings, speech_command: Optional[List[str]] = None):
        self.settings = settings
        if speech_command is None and settings.extra.get("SPEECH_COMMAND"):
            speech_command = shlex.split(settings.extra["SPEECH_COMMAND"])
        self.speech_command = speech_command or default_speech_command()

    def show_notification(self, title: str, message: str) -> None:
        try:
            notification.notify(title=title, message=message, app_name=APP_NAME, timeout=10)
        except Exception as e:
            # plyer raises NotImplementedError or backend specific errors
            raise NotificationDeliveryError(f"notification failed: {e}") from e

    def speak(self, message: str) -> None:
        if not self.speech_command:
            raise NotificationDeliveryError(f"no speech command available on {sys.platform}")
        if shutil.which(self.speech_command[0]) is None:
            raise NotificationDeliveryError(f"speech command not found: {self.speech_command[0]}")
        try:
            subprocess.Popen(
                [*self.speech_command, message],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            raise NotificationDeliveryError(f"speech failed: {e}") from e

    def notify(self, event_type: str) -> Dict[str, bool]:
        """Deliver the message for ``event_type`` on every enabled channel.

        Returns channel -> success for the channels that were attempted.
        """
        message = message_for(event_type)
        results: Dict[str, bool] = {}

        if self.settings.notifications:
            try:
                self.show_notification(TITLE, message)
                results["notification"] = True
            except NotificationDeliveryError as e:
                logger.error("Could not show notification: %s", e)
                results["notification"] = False

        if self.settings.speech:
            try:
                self.speak(message)
                results["speech"] = True
            except NotificationDeliveryError as e:
                logger.error("Could not speak: %s", e)
                results["speech"] = False

        logger.info("Notified %s (%s): %s", event_type, message, results)
        return results
