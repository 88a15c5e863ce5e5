"""Composite container health probe."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Final

import httpx

from swocker.adapters import ProcessTablePort
from swocker.db import StoreHealthPort
from swocker.domain import (
    HealthCheckResult,
    HealthReport,
    HealthState,
    StoreAuthenticationError,
    StoreConnectionError,
    Variant,
)
from swocker.logger import get_logger

from .marker import HealthMarker

logger = get_logger("swocker.health")

HTTP_SUCCESS_STATUS_RANGE: Final[range] = range(200, 400)

# (check label, process name, exact match)
_VARIANT_PROCESS_CHECKS: Final[dict[str, tuple[tuple[str, str, bool], ...]]] = {
    "nginx": (("Nginx", "nginx", True), ("PHP-FPM", "php-fpm", False)),
    "apache": (("Apache", "apache2", True),),
    "none": (),
}


@dataclass(frozen=True)
class HttpCheckPolicy:
    """HTTP self-check configuration.

    Attributes:
        url: Local application URL.
        attempts: Number of request attempts.
        backoff_seconds: Fixed delay between attempts.
        timeout_seconds: Per-request timeout.
    """

    url: str
    attempts: int = 3
    backoff_seconds: float = 2.0
    timeout_seconds: float = 10.0

    def __post_init__(self) -> None:
        if not self.url.strip():
            raise ValueError("url must not be blank")
        if self.attempts < 1:
            raise ValueError("attempts must be >= 1")
        if self.backoff_seconds < 0:
            raise ValueError("backoff_seconds must be >= 0")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")


class HealthProbe:
    """Evaluates process, store and HTTP checks and maintains the healthy marker."""

    def __init__(
        self,
        variant: Variant,
        process_table: ProcessTablePort,
        http_policy: HttpCheckPolicy,
        healthy_marker: HealthMarker,
        ready_marker: HealthMarker,
        store: StoreHealthPort | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        """Initialize health probe.

        Args:
            variant: Active image variant.
            process_table: Process liveness lookup.
            http_policy: HTTP self-check configuration.
            healthy_marker: Marker written on success and removed on failure.
            ready_marker: Marker written by the entrypoint once startup finished.
            store: Store health service, None when no store is configured.
            sleep: Optional sleep function, defaults to `time.sleep`.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if process_table is None:
            raise ValueError("process_table must not be None")

        self._variant = variant
        self._process_table = process_table
        self._http_policy = http_policy
        self._healthy_marker = healthy_marker
        self._ready_marker = ready_marker
        self._store = store
        self._sleep = sleep or time.sleep

    def probe_run(self) -> HealthReport:
        """Run every check once and update the healthy marker.

        Returns:
            HealthReport: Tri-state outcome with individual checks.
        """

        logger.info("Starting comprehensive health check...")
        checks: list[HealthCheckResult] = [*self.probe_check_processes()]
        store_check = self.probe_check_store()
        if store_check is not None:
            checks.append(store_check)
        checks.append(self.probe_check_http())

        if all(check.passed for check in checks):
            logger.info("✓ All health checks passed")
            self._healthy_marker.marker_set()
            return HealthReport(state=HealthState.HEALTHY, checks=tuple(checks))

        logger.error("✗ Health check failed")
        self._healthy_marker.marker_clear()
        state = HealthState.UNHEALTHY if self._ready_marker.marker_is_set() else HealthState.STARTING
        return HealthReport(state=state, checks=tuple(checks))

    def probe_is_healthy(self) -> bool:
        return self.probe_run().healthy

    def probe_check_processes(self) -> list[HealthCheckResult]:
        """Check the worker processes expected for the variant.

        Returns:
            list[HealthCheckResult]: One result per expected process.
        """

        expected_processes = _VARIANT_PROCESS_CHECKS[self._variant.web_server]
        if not expected_processes:
            logger.info("Variant has no web server, skipping process check")
            return []

        results: list[HealthCheckResult] = []
        for label, process_name, exact in expected_processes:
            if self._process_table.process_is_running(process_name, exact=exact):
                logger.info("✓ %s is running", label)
                results.append(HealthCheckResult(name=label, passed=True, detail=f"{process_name} running"))
            else:
                logger.error("ERROR: %s is not running", label)
                results.append(HealthCheckResult(name=label, passed=False, detail=f"{process_name} not running"))
        return results

    def probe_check_store(self) -> HealthCheckResult | None:
        """Run a trivial query against the configured store.

        Returns:
            HealthCheckResult | None: Result, or None when no store is configured.
        """

        if self._store is None:
            logger.info("Database not configured, skipping database check")
            return None

        logger.info("Checking database connection...")
        try:
            status = self._store.db_check_health()
        except (StoreConnectionError, StoreAuthenticationError) as error:
            logger.error("ERROR: Database connection failed: %s", error)
            return HealthCheckResult(name="database", passed=False, detail=str(error))

        logger.info("✓ Database connection successful")
        return HealthCheckResult(name="database", passed=True, detail=status.detail)

    def probe_check_http(self) -> HealthCheckResult:
        """Request the local application root with bounded retries.

        Returns:
            HealthCheckResult: Passed when a status in [200, 400) was observed.
        """

        logger.info("Checking Shopware HTTP response...")
        attempts = self._http_policy.attempts
        last_status = "no response"
        with httpx.Client(timeout=self._http_policy.timeout_seconds, follow_redirects=False) as client:
            for attempt in range(1, attempts + 1):
                try:
                    response = client.get(self._http_policy.url)
                    status_code = response.status_code
                except httpx.HTTPError as error:
                    status_code = None
                    last_status = type(error).__name__
                else:
                    last_status = str(status_code)

                if status_code is not None and status_code in HTTP_SUCCESS_STATUS_RANGE:
                    logger.info("✓ HTTP status %s (attempt %d/%d)", status_code, attempt, attempts)
                    logger.info("✓ Shopware responding to HTTP requests")
                    return HealthCheckResult(name="http", passed=True, detail=f"HTTP {status_code}")

                if attempt < attempts:
                    logger.info(
                        "HTTP check failed with status %s, retrying (attempt %d/%d)...",
                        last_status,
                        attempt,
                        attempts,
                    )
                    self._sleep(self._http_policy.backoff_seconds)

        logger.error(
            "ERROR: Web server not responding correctly after %d attempts (last status: %s)",
            attempts,
            last_status,
        )
        return HealthCheckResult(name="http", passed=False, detail=f"last status {last_status}")


