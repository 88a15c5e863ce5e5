"""Plugin auto-installation against the application console."""

from __future__ import annotations

from dataclasses import dataclass

from swocker.adapters import ApplicationConsolePort
from swocker.domain import LifecycleStep, domain_apply_failure_policy
from swocker.logger import get_logger

logger = get_logger("swocker.install.plugins")


def install_parse_plugin_list(raw_value: str) -> tuple[str, ...]:
    """Split a comma-separated plugin list.

    Args:
        raw_value: Raw `AUTO_INSTALL_PLUGINS` value.

    Returns:
        tuple[str, ...]: Trimmed, non-empty plugin names in declared order.
    """

    return tuple(name.strip() for name in raw_value.split(",") if name.strip())


@dataclass(frozen=True)
class PluginInstallReport:
    """Per-plugin outcome of one auto-install run.

    Attributes:
        installed: Plugins installed and activated.
        failed: Plugins whose install failed.
    """

    installed: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()


class PluginInstaller:
    """Refreshes the plugin registry and installs a list of plugins."""

    def __init__(self, console: ApplicationConsolePort):
        if console is None:
            raise ValueError("console must not be None")
        self._console = console

    def plugins_install(self, plugin_names: tuple[str, ...]) -> PluginInstallReport:
        """Install and activate each plugin, continuing past failures.

        Args:
            plugin_names: Plugin technical names.

        Returns:
            PluginInstallReport: Installed and failed plugin names.
        """

        if not plugin_names:
            return PluginInstallReport()

        logger.info("Auto-installing plugins: %s", ",".join(plugin_names))
        logger.info("Refreshing plugin list...")
        refresh_result = self._console.console_plugin_refresh()
        if not refresh_result.ok:
            domain_apply_failure_policy(
                LifecycleStep.PLUGIN_REFRESH,
                f"Plugin refresh failed with exit code {refresh_result.returncode}",
                logger,
            )

        installed: list[str] = []
        failed: list[str] = []
        for plugin_name in plugin_names:
            logger.info("Installing and activating plugin: %s", plugin_name)
            result = self._console.console_plugin_install(plugin_name)
            if result.ok:
                logger.info("Successfully installed plugin: %s", plugin_name)
                installed.append(plugin_name)
                continue
            domain_apply_failure_policy(LifecycleStep.PLUGIN_INSTALL, f"Failed to install plugin: {plugin_name}", logger)
            failed.append(plugin_name)

        logger.info("Clearing cache after plugin installation...")
        cache_result = self._console.console_cache_clear()
        if not cache_result.ok:
            domain_apply_failure_policy(
                LifecycleStep.CACHE_CLEAR,
                f"Cache clear failed with exit code {cache_result.returncode}",
                logger,
            )
        return PluginInstallReport(installed=tuple(installed), failed=tuple(failed))
