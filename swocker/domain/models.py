"""Typed domain models shared across lifecycle components.

This module provides immutable data contracts resolved once at startup and
passed explicitly into each component.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Variant(str, Enum):
    """Named image variant selecting web-server kind and environment purpose."""

    DEV = "dev"
    PROD = "prod"
    DEV_NGINX = "dev-nginx"
    PROD_NGINX = "prod-nginx"
    CI = "ci"

    @property
    def web_server(self) -> str:
        """Return the web-server kind served by this variant.

        Returns:
            str: `apache`, `nginx` or `none`.
        """

        if self in (Variant.DEV_NGINX, Variant.PROD_NGINX):
            return "nginx"
        if self in (Variant.DEV, Variant.PROD):
            return "apache"
        return "none"

    @property
    def is_dev(self) -> bool:
        """Return whether the variant ships development tooling such as Xdebug."""

        return self.value.startswith("dev")


class InstallationState(str, Enum):
    """Installation state of the application against the attached store."""

    NO_STORE = "no_store"
    UNINSTALLED = "uninstalled"
    INSTALLED = "installed"


class HealthState(str, Enum):
    """Composite container health computed on every probe invocation."""

    STARTING = "starting"
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass(frozen=True)
class StoreEndpoint:
    """Connection parameters for the relational store.

    Attributes:
        host: Store hostname. Blank disables the installation subsystem.
        port: Store TCP port.
        user: Login user name.
        password: Login password, may be blank.
        name: Target schema name.
    """

    host: str
    port: int
    user: str
    password: str = field(repr=False)
    name: str

    @property
    def store_configured(self) -> bool:
        """Return whether a store host was configured at all."""

        return bool(self.host.strip())

    @property
    def label(self) -> str:
        """Return a password-free `host:port` label for log lines."""

        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class XdebugSettings:
    """Debug-adapter settings written into PHP SAPI configuration.

    Attributes:
        enabled: Whether the adapter should be activated.
        client_host: IDE host the adapter connects back to.
        client_port: IDE listening port.
        idekey: IDE session key.
    """

    enabled: bool
    client_host: str
    client_port: int
    idekey: str


@dataclass(frozen=True)
class PhpTunables:
    """Scalar PHP resource ceilings. `None` keeps the image default.

    Attributes:
        memory_limit: `memory_limit` override.
        upload_max_filesize: `upload_max_filesize` override.
        post_max_size: `post_max_size` override.
        max_execution_time: `max_execution_time` override.
    """

    memory_limit: str | None = None
    upload_max_filesize: str | None = None
    post_max_size: str | None = None
    max_execution_time: str | None = None

    def tunables_items(self) -> list[tuple[str, str]]:
        """Return configured `(ini_key, value)` pairs in a stable order.

        Returns:
            list[tuple[str, str]]: Only tunables that carry a value.
        """

        candidates = (
            ("memory_limit", self.memory_limit),
            ("upload_max_filesize", self.upload_max_filesize),
            ("post_max_size", self.post_max_size),
            ("max_execution_time", self.max_execution_time),
        )
        return [(key, value) for key, value in candidates if value]


@dataclass(frozen=True)
class RuntimeConfig:
    """Resolved runtime variant configuration, immutable after resolution.

    Attributes:
        php_version: Effective PHP version.
        default_php_version: Build-time default PHP version of the image.
        supported_php_versions: Versions the application release supports.
        variant: Active image variant.
        ssl_enabled: Whether TLS must be provisioned.
        xdebug: Debug-adapter settings.
        tunables: PHP resource ceilings.
    """

    php_version: str
    default_php_version: str
    supported_php_versions: tuple[str, ...]
    variant: Variant
    ssl_enabled: bool
    xdebug: XdebugSettings
    tunables: PhpTunables

    @property
    def version_differs_from_build(self) -> bool:
        """Return whether dependencies were built for another PHP version."""

        return self.php_version != self.default_php_version


@dataclass(frozen=True)
class HealthCheckResult:
    """Outcome of one individual health check.

    Attributes:
        name: Check label.
        passed: Whether the check passed.
        detail: Diagnostic detail for logs.
    """

    name: str
    passed: bool
    detail: str


@dataclass(frozen=True)
class HealthReport:
    """Composite health payload produced by one probe invocation.

    Attributes:
        state: Tri-state health outcome.
        checks: Individual check results in evaluation order.
    """

    state: HealthState
    checks: tuple[HealthCheckResult, ...]

    @property
    def healthy(self) -> bool:
        return self.state is HealthState.HEALTHY


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by store connectivity checks.

    Attributes:
        status: Overall status text.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str
