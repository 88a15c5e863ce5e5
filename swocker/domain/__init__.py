"""Domain package for shared lifecycle models, errors and failure policy."""

from .errors import (
    ExitCode,
    HookFailedError,
    LifecycleError,
    MissingRuntimeBinaryError,
    StepFailedError,
    StoreAuthenticationError,
    StoreConnectionError,
    StoreUnavailableError,
    UnsupportedRuntimeVersionError,
)
from .models import (
    HealthCheckResult,
    HealthReport,
    HealthState,
    HealthStatus,
    InstallationState,
    PhpTunables,
    RuntimeConfig,
    StoreEndpoint,
    Variant,
    XdebugSettings,
)
from .policy import (
    STEP_FAILURE_POLICY,
    FailureAction,
    LifecycleStep,
    domain_apply_failure_policy,
    domain_resolve_failure_action,
)

__all__ = [
    "ExitCode",
    "FailureAction",
    "HealthCheckResult",
    "HealthReport",
    "HealthState",
    "HealthStatus",
    "HookFailedError",
    "InstallationState",
    "LifecycleError",
    "LifecycleStep",
    "MissingRuntimeBinaryError",
    "PhpTunables",
    "RuntimeConfig",
    "STEP_FAILURE_POLICY",
    "StepFailedError",
    "StoreAuthenticationError",
    "StoreConnectionError",
    "StoreEndpoint",
    "StoreUnavailableError",
    "UnsupportedRuntimeVersionError",
    "Variant",
    "XdebugSettings",
    "domain_apply_failure_policy",
    "domain_resolve_failure_action",
]
