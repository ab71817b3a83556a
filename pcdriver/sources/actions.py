"""Local OS actions: text-to-speech and delayed reboot."""

from __future__ import annotations

import logging
import math
import os
import shutil
import subprocess
import sys
from collections.abc import Mapping, Sequence

from pcdriver.core.errors import ActionError

LOGGER = logging.getLogger(__name__)

_LINUX_SPEAKERS = ("espeak-ng", "espeak", "spd-say")
_WINDOWS_SPEAK_SCRIPT = (
    "Add-Type -AssemblyName System.Speech; "
    "(New-Object System.Speech.Synthesis.SpeechSynthesizer).Speak($env:PCDRIVER_SPEAK_TEXT)"
)


class SystemActions:
    """Spawns OS processes for driver services without waiting on them."""

    def __init__(self, *, platform: str | None = None) -> None:
        self.platform = platform or sys.platform

    def speak(self, text: str) -> None:
        if self.platform.startswith("win"):
            env = dict(os.environ, PCDRIVER_SPEAK_TEXT=text)
            self.execute("powershell", ["-NoProfile", "-Command", _WINDOWS_SPEAK_SCRIPT], env=env)
            return
        if self.platform == "darwin":
            self.execute("say", ["--", text])
            return

        for candidate in _LINUX_SPEAKERS:
            if shutil.which(candidate):
                self.execute(candidate, ["--", text])
                return
        raise ActionError(
            "No speech synthesizer found. Install one of: " + ", ".join(_LINUX_SPEAKERS)
        )

    def reboot(self, timeout: int) -> int:
        if timeout < 0:
            raise ActionError(f"Reboot timeout must not be negative, got {timeout}")
        if self.platform.startswith("win"):
            return self.execute("shutdown", ["-r", "-t", str(timeout)])
        # POSIX shutdown schedules in whole minutes.
        when = "now" if timeout == 0 else f"+{math.ceil(timeout / 60)}"
        return self.execute("shutdown", ["-r", when])

    def execute(
        self,
        command: str,
        args: Sequence[str],
        *,
        env: Mapping[str, str] | None = None,
    ) -> int:
        cmd = [command, *args]
        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                env=dict(env) if env is not None else None,
            )
        except FileNotFoundError as exc:
            raise ActionError(f"Command '{command}' not found") from exc
        except OSError as exc:
            raise ActionError(f"Could not start '{command}': {exc}") from exc
        LOGGER.info("Started %s (pid %s)", command, process.pid)
        return process.pid
