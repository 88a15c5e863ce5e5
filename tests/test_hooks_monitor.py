"""Tests for the post-healthy hook monitor."""

from __future__ import annotations

import logging
import os
import pwd
import subprocess
import sys
from pathlib import Path

import pytest

from swocker.adapters import SubprocessCommandRunner
from swocker.health import HealthMarker
from swocker.hooks import (
    HealthSignal,
    HookPhase,
    HookRunner,
    HookRunReport,
    PostHealthyMonitor,
    hooks_build_phase_policies,
    hooks_launch_monitor,
)


class _FakeClock:
    """Monotonic clock double advanced by the injected sleep."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []

    def clock(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class _HookRunnerStub:
    """Hook runner double recording phase runs."""

    def __init__(self):
        self.phases: list[HookPhase] = []

    def hooks_run_phase(self, policy, actions=None) -> HookRunReport:
        """Record one phase run.

        Args:
            policy: Phase policy.
            actions: Ignored explicit actions.

        Returns:
            HookRunReport: Empty successful report.

        Raises:
            RuntimeError: Never raised by this test double.
        """

        _ = actions
        self.phases.append(policy.phase)
        return HookRunReport(phase=policy.phase)


def _build_monitor(
    tmp_path: Path,
    hook_runner: _HookRunnerStub | HookRunner,
    fake_clock: _FakeClock,
    signal: HealthSignal = HealthSignal.MARKER,
    probe_check=None,
    timeout_seconds: int = 10,
    service_user: str = "www-data",
) -> PostHealthyMonitor:
    policy = hooks_build_phase_policies(
        pre_init_dir=tmp_path / "init.d",
        post_install_dir=tmp_path / "shopware.d",
        post_healthy_dir=tmp_path / "healthy.d",
        service_user=service_user,
    )[HookPhase.POST_HEALTHY]
    return PostHealthyMonitor(
        hook_runner=hook_runner,
        policy=policy,
        healthy_marker=HealthMarker(tmp_path / "healthy"),
        completion_marker=HealthMarker(tmp_path / "post-healthy-complete"),
        timeout_seconds=timeout_seconds,
        poll_interval_seconds=5.0,
        signal=signal,
        probe_check=probe_check,
        clock=fake_clock.clock,
        sleep=fake_clock.sleep,
    )


def _current_user() -> str:
    return pwd.getpwuid(os.geteuid()).pw_name


def test_hooks_monitor_runs_batch_once_marker_appears(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    """Run the post-healthy batch and write the completion marker.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when the batch or marker is missing.
    """

    caplog.set_level(logging.INFO)
    (tmp_path / "healthy").touch()
    hook_runner = _HookRunnerStub()
    fake_clock = _FakeClock()

    report = _build_monitor(tmp_path, hook_runner, fake_clock).monitor_run()

    assert report is not None
    assert hook_runner.phases == [HookPhase.POST_HEALTHY]
    assert (tmp_path / "post-healthy-complete").is_file()
    assert fake_clock.sleeps == []
    assert "Post-healthy hook monitor started (max wait: 10s)" in caplog.text
    assert "Container is healthy, executing post-healthy hooks..." in caplog.text
    assert "Post-healthy hooks complete" in caplog.text


def test_hooks_monitor_timeout_skips_batch(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    """Give up after the timeout without running hooks or writing the marker.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when hooks run after the timeout.
    """

    caplog.set_level(logging.INFO)
    hook_runner = _HookRunnerStub()
    fake_clock = _FakeClock()

    report = _build_monitor(tmp_path, hook_runner, fake_clock, timeout_seconds=12).monitor_run()

    assert report is None
    assert hook_runner.phases == []
    assert not (tmp_path / "post-healthy-complete").exists()
    assert fake_clock.sleeps == [5.0, 5.0, 2.0]
    assert "WARNING: Container did not become healthy within 12s, skipping post-healthy hooks" in caplog.text


def test_hooks_monitor_any_signal_falls_back_to_probe(tmp_path: Path) -> None:
    probe_results = iter([False, False, True])
    hook_runner = _HookRunnerStub()
    fake_clock = _FakeClock()
    monitor = _build_monitor(
        tmp_path,
        hook_runner,
        fake_clock,
        signal=HealthSignal.ANY,
        probe_check=lambda: next(probe_results),
    )

    assert monitor.monitor_wait_until_healthy() is True
    assert fake_clock.sleeps == [5.0, 5.0]


def test_hooks_monitor_probe_signal_ignores_marker(tmp_path: Path) -> None:
    (tmp_path / "healthy").touch()
    monitor = _build_monitor(
        tmp_path,
        _HookRunnerStub(),
        _FakeClock(),
        signal=HealthSignal.PROBE,
        probe_check=lambda: False,
    )

    assert monitor.monitor_is_healthy() is False


def test_hooks_monitor_requires_probe_unless_marker_signal(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        _build_monitor(tmp_path, _HookRunnerStub(), _FakeClock(), signal=HealthSignal.ANY)


def test_hooks_monitor_launch_detaches_child_process() -> None:
    """Start the monitor in its own session with stdin detached.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when launch arguments are wrong.
    """

    launches: list[tuple[list[str], dict[str, object]]] = []

    def _popen_stub(argv: list[str], **kwargs: object) -> str:
        launches.append((argv, kwargs))
        return "process"

    assert hooks_launch_monitor(popen=_popen_stub) == "process"

    argv, kwargs = launches[0]
    assert argv == [sys.executable, "-m", "swocker", "post-healthy-monitor"]
    assert kwargs["start_new_session"] is True
    assert kwargs["stdin"] is subprocess.DEVNULL


def test_hooks_monitor_empty_hook_directory_still_writes_completion_marker(
    tmp_path: Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO)
    (tmp_path / "healthy.d").mkdir()
    (tmp_path / "healthy").touch()
    monitor = _build_monitor(
        tmp_path,
        HookRunner(SubprocessCommandRunner()),
        _FakeClock(),
        service_user=_current_user(),
    )

    report = monitor.monitor_run()

    assert report is not None
    assert report.executed == ()
    assert (tmp_path / "post-healthy-complete").is_file()
    assert "No post-healthy initialization scripts found, skipping" in caplog.text
    assert "Executing post-healthy initialization scripts" not in caplog.text


def test_hooks_monitor_failing_script_does_not_block_later_scripts_or_marker(
    tmp_path: Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Run every post-healthy script despite a failure and still write the marker.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when a failing script stops the batch or the marker.
    """

    caplog.set_level(logging.INFO)
    hook_dir = tmp_path / "healthy.d"
    hook_dir.mkdir()
    for name, body in (("10-failure.sh", "exit 3"), ("20-success.sh", f'touch "{tmp_path / "second-ran"}"')):
        script_path = hook_dir / name
        script_path.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
        script_path.chmod(0o755)
    (tmp_path / "healthy").touch()
    monitor = _build_monitor(
        tmp_path,
        HookRunner(SubprocessCommandRunner()),
        _FakeClock(),
        service_user=_current_user(),
    )

    report = monitor.monitor_run()

    assert report is not None
    assert report.executed == ("10-failure.sh", "20-success.sh")
    assert [(failure.name, failure.returncode) for failure in report.failures] == [("10-failure.sh", 3)]
    assert (tmp_path / "second-ran").is_file()
    assert (tmp_path / "post-healthy-complete").is_file()
    assert "WARNING: Post-healthy hook failed, but container continues" in caplog.text
