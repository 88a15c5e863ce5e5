"""Job layer package for lifecycle orchestration boundaries."""

from .entrypoint_orchestrator import EntrypointOrchestrator, EntrypointOrchestratorConfig
from .interfaces import (
    HookRunnerPort,
    InstallationPort,
    JobExecutionResult,
    JobOrchestratorPort,
    RuntimeConfiguratorPort,
    StoreReadinessPort,
)

__all__ = [
    "EntrypointOrchestrator",
    "EntrypointOrchestratorConfig",
    "HookRunnerPort",
    "InstallationPort",
    "JobExecutionResult",
    "JobOrchestratorPort",
    "RuntimeConfiguratorPort",
    "StoreReadinessPort",
]
