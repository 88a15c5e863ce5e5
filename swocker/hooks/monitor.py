"""Detached monitor that runs post-healthy hooks once the container is healthy."""

from __future__ import annotations

import subprocess
import sys
import time
from enum import Enum
from typing import Callable, Final

from swocker.health import HealthMarker
from swocker.logger import get_logger

from .interfaces import HookPhasePolicy, HookRunReport
from .runner import HookRunner

logger = get_logger("swocker.hooks.monitor")

MONITOR_COMMAND_NAME: Final[str] = "post-healthy-monitor"


class HealthSignal(str, Enum):
    """Source the monitor trusts for "container is healthy"."""

    MARKER = "marker"
    PROBE = "probe"
    ANY = "any"


class PostHealthyMonitor:
    """Bounded wait for health followed by a single post-healthy hook batch."""

    def __init__(
        self,
        hook_runner: HookRunner,
        policy: HookPhasePolicy,
        healthy_marker: HealthMarker,
        completion_marker: HealthMarker,
        timeout_seconds: int,
        poll_interval_seconds: float,
        signal: HealthSignal = HealthSignal.ANY,
        probe_check: Callable[[], bool] | None = None,
        clock: Callable[[], float] | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        """Initialize post-healthy monitor.

        Args:
            hook_runner: Runner for the post-healthy batch.
            policy: Post-healthy phase policy.
            healthy_marker: Marker written by the health probe.
            completion_marker: Marker written after the batch ran.
            timeout_seconds: Maximum wait for health.
            poll_interval_seconds: Delay between two health polls.
            signal: Health signal source.
            probe_check: In-process probe returning True when healthy.
            clock: Optional monotonic clock, defaults to `time.monotonic`.
            sleep: Optional sleep function, defaults to `time.sleep`.

        Raises:
            ValueError: Raised when arguments are invalid.
        """

        if hook_runner is None:
            raise ValueError("hook_runner must not be None")
        if timeout_seconds < 0:
            raise ValueError("timeout_seconds must be >= 0")
        if poll_interval_seconds <= 0:
            raise ValueError("poll_interval_seconds must be > 0")
        if signal is not HealthSignal.MARKER and probe_check is None:
            raise ValueError("probe_check is required unless signal is marker")

        self._hook_runner = hook_runner
        self._policy = policy
        self._healthy_marker = healthy_marker
        self._completion_marker = completion_marker
        self._timeout_seconds = timeout_seconds
        self._poll_interval_seconds = poll_interval_seconds
        self._signal = signal
        self._probe_check = probe_check
        self._clock = clock or time.monotonic
        self._sleep = sleep or time.sleep

    def monitor_is_healthy(self) -> bool:
        """Evaluate the configured health signal once.

        Returns:
            bool: True when the container is observed healthy.
        """

        if self._signal is not HealthSignal.PROBE and self._healthy_marker.marker_is_set():
            return True
        if self._signal is HealthSignal.MARKER or self._probe_check is None:
            return False
        return self._probe_check()

    def monitor_wait_until_healthy(self) -> bool:
        """Poll the health signal until healthy or the timeout expires.

        Returns:
            bool: True when health was observed before the deadline.
        """

        deadline = self._clock() + self._timeout_seconds
        while True:
            if self.monitor_is_healthy():
                return True
            remaining_seconds = deadline - self._clock()
            if remaining_seconds <= 0:
                return False
            self._sleep(min(self._poll_interval_seconds, remaining_seconds))

    def monitor_run(self) -> HookRunReport | None:
        """Wait for health, run the batch once and write the completion marker.

        Returns:
            HookRunReport | None: Batch outcome, None when the wait timed out.
        """

        logger.info("Post-healthy hook monitor started (max wait: %ds)", self._timeout_seconds)
        if not self.monitor_wait_until_healthy():
            logger.warning(
                "WARNING: Container did not become healthy within %ds, skipping post-healthy hooks",
                self._timeout_seconds,
            )
            return None

        logger.info("Container is healthy, executing post-healthy hooks...")
        report = self._hook_runner.hooks_run_phase(self._policy)
        self._completion_marker.marker_set()
        logger.info("Post-healthy hooks complete")
        return report


def hooks_launch_monitor(
    popen: Callable[..., subprocess.Popen] | None = None,
) -> subprocess.Popen:
    """Start the monitor as a detached child that survives the entrypoint `exec`.

    Args:
        popen: Optional process factory, defaults to `subprocess.Popen`.

    Returns:
        subprocess.Popen: Handle of the started monitor process.

    Raises:
        OSError: Raised when the process cannot be spawned.
    """

    process_factory = popen or subprocess.Popen
    return process_factory(
        [sys.executable, "-m", "swocker", MONITOR_COMMAND_NAME],
        stdin=subprocess.DEVNULL,
        start_new_session=True,
        close_fds=True,
    )
