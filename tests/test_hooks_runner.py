"""Tests for hook discovery, ordering and per-phase failure semantics."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from swocker.adapters import SubprocessCommandRunner
from swocker.domain import HookFailedError
from swocker.hooks import (
    HookPhase,
    HookRunner,
    InProcessAction,
    hooks_build_phase_policies,
    hooks_discover_scripts,
)


def _write_script(directory: Path, name: str, body: str, mode: int = 0o755) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    script_path = directory / name
    script_path.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
    script_path.chmod(mode)
    return script_path


def _policies(tmp_path: Path):
    return hooks_build_phase_policies(
        pre_init_dir=tmp_path / "init.d",
        post_install_dir=tmp_path / "shopware.d",
        post_healthy_dir=tmp_path / "healthy.d",
        service_user="www-data",
    )


def test_hooks_runner_discovers_executable_scripts_in_name_order(tmp_path: Path) -> None:
    """Select executable `.sh` files only and sort them by name.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when discovery order or filtering is wrong.
    """

    hook_dir = tmp_path / "init.d"
    _write_script(hook_dir, "20-second.sh", "true")
    _write_script(hook_dir, "10-first.sh", "true")
    _write_script(hook_dir, "30-disabled.sh", "true", mode=0o644)
    _write_script(hook_dir, "05-notes.txt", "true")
    (hook_dir / "40-directory.sh").mkdir()

    assert [path.name for path in hooks_discover_scripts(hook_dir)] == ["10-first.sh", "20-second.sh"]
    assert hooks_discover_scripts(tmp_path / "missing") == []


def test_hooks_runner_executes_scripts_sequentially(tmp_path: Path) -> None:
    """Run real scripts in order so later hooks observe earlier effects.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when execution order differs from name order.
    """

    trace_path = tmp_path / "trace.log"
    hook_dir = tmp_path / "init.d"
    _write_script(hook_dir, "20-b.sh", f"echo b >> {trace_path}")
    _write_script(hook_dir, "10-a.sh", f"echo a >> {trace_path}")
    _write_script(hook_dir, "30-c.sh", f"test -f {trace_path} && echo c >> {trace_path}")
    policy = _policies(tmp_path)[HookPhase.PRE_INIT]

    report = HookRunner(SubprocessCommandRunner()).hooks_run_phase(policy)

    assert report.executed == ("10-a.sh", "20-b.sh", "30-c.sh")
    assert report.succeeded is True
    assert trace_path.read_text(encoding="utf-8").split() == ["a", "b", "c"]


def test_hooks_runner_empty_phase_logs_skip_message(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)
    policy = _policies(tmp_path)[HookPhase.PRE_INIT]

    report = HookRunner(SubprocessCommandRunner()).hooks_run_phase(policy)

    assert report.executed == ()
    assert "No pre-initialization scripts found, skipping" in caplog.text
    assert "Executing pre-initialization scripts" not in caplog.text


def test_hooks_runner_fatal_phase_stops_at_first_failure(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    """Abort a fatal phase on the first non-zero hook.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when later hooks still run.
    """

    caplog.set_level(logging.INFO)
    executed: list[str] = []
    actions = [
        InProcessAction("10-ok", lambda: executed.append("10-ok")),
        InProcessAction("20-fail", lambda: 3),
        InProcessAction("30-never", lambda: executed.append("30-never")),
    ]
    policy = _policies(tmp_path)[HookPhase.POST_INSTALL]

    with pytest.raises(HookFailedError) as error_info:
        HookRunner(SubprocessCommandRunner()).hooks_run_phase(policy, actions=actions)

    assert error_info.value.script_name == "20-fail"
    assert error_info.value.returncode == 3
    assert error_info.value.phase == "post-install"
    assert executed == ["10-ok"]
    assert "Executing Shopware initialization scripts" in caplog.text
    assert "✗ 20-fail failed with exit code 3" in caplog.text


def test_hooks_runner_post_healthy_phase_continues_past_failure(
    tmp_path: Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Warn and keep going when a post-healthy hook fails.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when the batch stops early.
    """

    caplog.set_level(logging.INFO)
    actions = [
        InProcessAction("10-success.sh", lambda: 0),
        InProcessAction("20-failure.sh", lambda: 1),
        InProcessAction("30-also-success.sh", lambda: None),
    ]
    policy = _policies(tmp_path)[HookPhase.POST_HEALTHY]

    report = HookRunner(SubprocessCommandRunner()).hooks_run_phase(policy, actions=actions)

    assert report.executed == ("10-success.sh", "20-failure.sh", "30-also-success.sh")
    assert [failure.name for failure in report.failures] == ["20-failure.sh"]
    assert "⚠ 20-failure.sh failed with exit code 1" in caplog.text
    assert "WARNING: Post-healthy hook failed, but container continues" in caplog.text
    assert "✓ 30-also-success.sh completed" in caplog.text


def test_hooks_runner_in_process_exception_counts_as_failure(tmp_path: Path) -> None:
    def _raise_error() -> int:
        raise RuntimeError("boom")

    policy = _policies(tmp_path)[HookPhase.POST_HEALTHY]

    report = HookRunner(SubprocessCommandRunner()).hooks_run_phase(
        policy,
        actions=[InProcessAction("10-python", _raise_error)],
    )

    assert report.failures[0].returncode == 1


def test_hooks_runner_phase_policies_bind_identity(tmp_path: Path) -> None:
    policies = _policies(tmp_path)

    assert policies[HookPhase.PRE_INIT].user is None
    assert policies[HookPhase.POST_INSTALL].user == "www-data"
    assert policies[HookPhase.PRE_INIT].fatal is True
    assert policies[HookPhase.POST_HEALTHY].fatal is False
