"""Idempotent application installation keyed on a local marker file.

State is derived from two facts only: whether a store host is configured and
whether `<app_root>/install.lock` exists. A fresh container attached to a
persisted store therefore reinstalls with drop-and-recreate semantics.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from swocker.adapters import ApplicationConsolePort, fs_touch
from swocker.domain import InstallationState, LifecycleStep, StoreEndpoint, domain_apply_failure_policy
from swocker.logger import get_logger

from .env_file import AppEnvFileWriter
from .plugins import PluginInstaller, PluginInstallReport

logger = get_logger("swocker.install")

INSTALL_MARKER_NAME: Final[str] = "install.lock"


@dataclass(frozen=True)
class AdminAccount:
    """Administrative account created on first install.

    Attributes:
        username: Account user name.
        password: Account password.
        email: Account email.
        first_name: Account first name.
        last_name: Account last name.
    """

    username: str
    password: str = field(repr=False)
    email: str
    first_name: str
    last_name: str


@dataclass(frozen=True)
class InstallationOptions:
    """Caller-controlled installation inputs.

    Attributes:
        app_env: Application environment name.
        app_url: Application base URL.
        app_secret: Externally supplied secret, if any.
        instance_id: Externally supplied instance id, if any.
        admin_account: Administrative account for first install.
        install_demo_data: Seed demo data on first install.
        plugin_names: Plugins to install and activate.
    """

    app_env: str
    app_url: str
    admin_account: AdminAccount
    app_secret: str | None = field(default=None, repr=False)
    instance_id: str | None = None
    install_demo_data: bool = False
    plugin_names: tuple[str, ...] = ()


@dataclass(frozen=True)
class InstallationOutcome:
    """Result of one state machine run.

    Attributes:
        initial_state: State observed before the run.
        final_state: State after the run.
        install_attempted: Whether the first-install path ran.
        plugin_report: Plugin installation outcome.
    """

    initial_state: InstallationState
    final_state: InstallationState
    install_attempted: bool = False
    plugin_report: PluginInstallReport = field(default_factory=PluginInstallReport)


class InstallationStateMachine:
    """Drives `NO_STORE`, `UNINSTALLED` and `INSTALLED` transitions."""

    def __init__(
        self,
        console: ApplicationConsolePort,
        env_writer: AppEnvFileWriter,
        plugin_installer: PluginInstaller,
        endpoint: StoreEndpoint,
        options: InstallationOptions,
        app_root: Path,
        service_user: str,
    ):
        """Initialize installation state machine.

        Args:
            console: Application console adapter.
            env_writer: `.env` file writer.
            plugin_installer: Plugin installer.
            endpoint: Resolved store endpoint.
            options: Installation inputs.
            app_root: Application root holding the installation marker.
            service_user: Owner of the installation marker.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if console is None:
            raise ValueError("console must not be None")
        if env_writer is None:
            raise ValueError("env_writer must not be None")
        if plugin_installer is None:
            raise ValueError("plugin_installer must not be None")

        self._console = console
        self._env_writer = env_writer
        self._plugin_installer = plugin_installer
        self._endpoint = endpoint
        self._options = options
        self._marker_path = app_root / INSTALL_MARKER_NAME
        self._service_user = service_user

    @property
    def marker_path(self) -> Path:
        return self._marker_path

    def install_resolve_state(self) -> InstallationState:
        """Derive the current installation state.

        Returns:
            InstallationState: Current state.
        """

        if not self._endpoint.store_configured:
            return InstallationState.NO_STORE
        if self._marker_path.exists():
            return InstallationState.INSTALLED
        return InstallationState.UNINSTALLED

    def install_run(self) -> InstallationOutcome:
        """Run the transition for the current state, then plugins.

        The store must already accept connections when a host is configured.

        Returns:
            InstallationOutcome: Observed and resulting states.
        """

        initial_state = self.install_resolve_state()
        if initial_state is InstallationState.NO_STORE:
            logger.info("No database configured, skipping Shopware installation")
            return InstallationOutcome(initial_state=initial_state, final_state=initial_state)

        try:
            self._env_writer.env_write(
                endpoint=self._endpoint,
                app_env=self._options.app_env,
                app_url=self._options.app_url,
                app_secret=self._options.app_secret,
                instance_id=self._options.instance_id,
            )
        except OSError as error:
            domain_apply_failure_policy(
                LifecycleStep.ENV_FILE,
                f"Could not write application .env file: {error}",
                logger,
            )

        if initial_state is InstallationState.UNINSTALLED:
            final_state = self._install_first_time()
        else:
            final_state = self._install_reenter()

        self._install_clear_cache()
        plugin_report = self._plugin_installer.plugins_install(self._options.plugin_names)
        return InstallationOutcome(
            initial_state=initial_state,
            final_state=final_state,
            install_attempted=initial_state is InstallationState.UNINSTALLED,
            plugin_report=plugin_report,
        )

    def _install_first_time(self) -> InstallationState:
        logger.info("Installing Shopware for the first time...")
        install_result = self._console.console_system_install()
        if not install_result.ok:
            domain_apply_failure_policy(
                LifecycleStep.APP_INSTALL,
                f"Shopware installation failed with exit code {install_result.returncode}",
                logger,
            )
            return InstallationState.UNINSTALLED

        admin_account = self._options.admin_account
        logger.info("Creating admin user...")
        admin_result = self._console.console_user_create(
            username=admin_account.username,
            password=admin_account.password,
            email=admin_account.email,
            first_name=admin_account.first_name,
            last_name=admin_account.last_name,
        )
        if not admin_result.ok:
            logger.info("Admin user might already exist")

        if self._options.install_demo_data:
            logger.info("Installing demo data...")
            demo_result = self._console.console_demo_data()
            if demo_result.ok:
                logger.info("Demo data installed successfully")
            else:
                domain_apply_failure_policy(
                    LifecycleStep.DEMO_DATA,
                    "Failed to install demo data (command might not be available)",
                    logger,
                )

        try:
            fs_touch(self._marker_path)
        except OSError as error:
            domain_apply_failure_policy(
                LifecycleStep.INSTALL_MARKER,
                f"Could not write installation marker {self._marker_path}: {error}",
                logger,
            )
            return InstallationState.UNINSTALLED

        try:
            shutil.chown(self._marker_path, user=self._service_user, group=self._service_user)
        except (LookupError, OSError) as error:
            domain_apply_failure_policy(
                LifecycleStep.INSTALL_MARKER,
                f"Could not change owner of {self._marker_path}: {error}",
                logger,
            )

        logger.info("Shopware installation complete!")
        return InstallationState.INSTALLED

    def _install_reenter(self) -> InstallationState:
        logger.info("Shopware already installed, running migrations...")
        result = self._console.console_update_finish()
        if not result.ok:
            domain_apply_failure_policy(
                LifecycleStep.MIGRATIONS,
                f"system:update:finish exited with code {result.returncode}",
                logger,
            )
        return InstallationState.INSTALLED

    def _install_clear_cache(self) -> None:
        logger.info("Clearing cache...")
        result = self._console.console_cache_clear()
        if not result.ok:
            domain_apply_failure_policy(
                LifecycleStep.CACHE_CLEAR,
                f"Cache clear failed with exit code {result.returncode}",
                logger,
            )
