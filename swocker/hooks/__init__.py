"""Hook package for phase discovery, execution and the post-healthy monitor."""

from .actions import InProcessAction, ShellScriptAction
from .interfaces import HookAction, HookFailure, HookPhase, HookPhasePolicy, HookRunReport
from .monitor import MONITOR_COMMAND_NAME, HealthSignal, PostHealthyMonitor, hooks_launch_monitor
from .runner import HookRunner, hooks_build_phase_policies, hooks_discover_scripts

__all__ = [
    "MONITOR_COMMAND_NAME",
    "HealthSignal",
    "HookAction",
    "HookFailure",
    "HookPhase",
    "HookPhasePolicy",
    "HookRunReport",
    "HookRunner",
    "InProcessAction",
    "PostHealthyMonitor",
    "ShellScriptAction",
    "hooks_build_phase_policies",
    "hooks_discover_scripts",
    "hooks_launch_monitor",
]
