"""Installation package for `.env` rendering, first install and plugins."""

from .env_file import AppEnvFileWriter, AppEnvironment, install_build_database_url
from .plugins import PluginInstaller, PluginInstallReport, install_parse_plugin_list
from .state_machine import (
    INSTALL_MARKER_NAME,
    AdminAccount,
    InstallationOptions,
    InstallationOutcome,
    InstallationStateMachine,
)

__all__ = [
    "INSTALL_MARKER_NAME",
    "AdminAccount",
    "AppEnvFileWriter",
    "AppEnvironment",
    "InstallationOptions",
    "InstallationOutcome",
    "InstallationStateMachine",
    "PluginInstallReport",
    "PluginInstaller",
    "install_build_database_url",
    "install_parse_plugin_list",
]
