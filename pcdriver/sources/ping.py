"""Reachability probe built on the system ping command."""

from __future__ import annotations

import math
import re
import subprocess
import sys
from collections.abc import Sequence

from pcdriver.core.errors import ProbeError, ProbeResolutionError
from pcdriver.core.model import ProbeReply, ProbeStatus

_TIME_RE = re.compile(r"time\s*([=<])\s*([\d.]+)\s*ms", re.IGNORECASE)
_UNREACHABLE_RE = re.compile(r"unreachable", re.IGNORECASE)
_RESOLVE_RE = re.compile(
    r"unknown host|could not find host|name or service not known|"
    r"temporary failure in name resolution|cannot resolve|no address associated",
    re.IGNORECASE,
)
_GRACE_S = 2.0


class SubprocessProber:
    def __init__(self, *, executable: str = "ping", platform: str | None = None) -> None:
        self.executable = executable
        self.platform = platform or sys.platform

    def send(self, address: str, timeout_ms: int) -> ProbeReply:
        target = address.strip()
        if not target or target.startswith("-"):
            raise ProbeResolutionError(f"Invalid probe address '{address}'")

        cmd = self._build_command(target, timeout_ms)
        try:
            result = subprocess.run(
                cmd,
                check=False,
                capture_output=True,
                text=True,
                timeout=timeout_ms / 1000 + _GRACE_S,
            )
        except subprocess.TimeoutExpired:
            return ProbeReply(status=ProbeStatus.TIMED_OUT)
        except FileNotFoundError as exc:
            raise ProbeError(f"Ping executable '{self.executable}' not found") from exc
        except OSError as exc:
            raise ProbeError(f"Could not start ping for {target}: {exc}") from exc

        return _parse_reply(target, result)

    def _build_command(self, target: str, timeout_ms: int) -> Sequence[str]:
        if self.platform.startswith("win"):
            return [self.executable, "-n", "1", "-w", str(timeout_ms), target]
        if self.platform == "darwin":
            return [self.executable, "-c", "1", "-W", str(timeout_ms), target]
        # Linux iputils takes whole seconds.
        wait_s = max(1, math.ceil(timeout_ms / 1000))
        return [self.executable, "-c", "1", "-W", str(wait_s), target]


def _parse_reply(target: str, result: subprocess.CompletedProcess[str]) -> ProbeReply:
    output = f"{result.stdout or ''}\n{result.stderr or ''}"

    if _RESOLVE_RE.search(output):
        detail = (result.stderr or result.stdout or "").strip().splitlines()
        message = detail[-1] if detail else f"Could not resolve {target}"
        raise ProbeResolutionError(message)

    if _UNREACHABLE_RE.search(output):
        return ProbeReply(status=ProbeStatus.DESTINATION_HOST_UNREACHABLE)

    match = _TIME_RE.search(output)
    if match and result.returncode == 0:
        roundtrip = 0 if match.group(1) == "<" else int(round(float(match.group(2))))
        return ProbeReply(status=ProbeStatus.SUCCESS, roundtrip_ms=roundtrip)

    if result.returncode in (0, 1):
        return ProbeReply(status=ProbeStatus.TIMED_OUT)

    stderr = (result.stderr or "").strip()
    if stderr:
        raise ProbeError(stderr)
    return ProbeReply(status=ProbeStatus.UNKNOWN)
