"""Tests for lifecycle dependency wiring."""

from __future__ import annotations

from pathlib import Path

import pytest

from swocker.bootstrap import (
    bootstrap_create_entrypoint_orchestrator,
    bootstrap_create_post_healthy_monitor,
    bootstrap_create_readiness_poller,
)
from swocker.config import SwockerSettings
from swocker.db import db_build_store_url
from swocker.domain import MissingRuntimeBinaryError, StoreEndpoint
from swocker.hooks import HealthSignal


def _settings(tmp_path: Path, **overrides: object) -> SwockerSettings:
    return SwockerSettings(
        swocker_app_root=tmp_path / "app",
        swocker_ready_marker=tmp_path / "ready",
        swocker_healthy_marker=tmp_path / "healthy",
        swocker_post_healthy_marker=tmp_path / "post-healthy",
        **overrides,
    )


def test_bootstrap_without_store_host_has_no_readiness_poller(tmp_path: Path) -> None:
    assert bootstrap_create_readiness_poller(_settings(tmp_path, database_host="")) is None


def test_bootstrap_store_urls_separate_server_and_schema_scope() -> None:
    """Bind readiness to the server and probes to the target schema.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when URL scoping is wrong.
    """

    endpoint = StoreEndpoint(host="db", port=3306, user="root", password="", name="shopware")

    server_url = db_build_store_url(endpoint, with_schema=False)
    schema_url = db_build_store_url(endpoint, with_schema=True)

    assert server_url.database is None
    assert server_url.password is None
    assert schema_url.database == "shopware"
    assert schema_url.drivername == "mysql+pymysql"


def test_bootstrap_entrypoint_orchestrator_wires_store_poller(tmp_path: Path) -> None:
    orchestrator = bootstrap_create_entrypoint_orchestrator(_settings(tmp_path, database_host="db"))

    assert orchestrator.job_supported_names() == ("entrypoint",)
    assert bootstrap_create_readiness_poller(_settings(tmp_path, database_host="db")) is not None


def test_bootstrap_marker_monitor_needs_no_probe(tmp_path: Path) -> None:
    """Trust the healthy marker alone when the signal is `marker`.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when the marker monitor does not read the marker.
    """

    monitor = bootstrap_create_post_healthy_monitor(_settings(tmp_path, post_healthy_signal=HealthSignal.MARKER.value))

    assert monitor.monitor_is_healthy() is False
    (tmp_path / "healthy").touch()
    assert monitor.monitor_is_healthy() is True


def test_bootstrap_entrypoint_orchestrator_clears_stale_health_markers(tmp_path: Path) -> None:
    (tmp_path / "healthy").touch()
    (tmp_path / "post-healthy").touch()
    orchestrator = bootstrap_create_entrypoint_orchestrator(_settings(tmp_path, swocker_php_binary_dir=tmp_path / "bin"))

    with pytest.raises(MissingRuntimeBinaryError):
        orchestrator.job_execute(job_name="entrypoint")

    assert not (tmp_path / "healthy").exists()
    assert not (tmp_path / "post-healthy").exists()
