"""Runtime configurator for PHP version, web server, ownership and PHP settings."""

from __future__ import annotations

import pwd
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from swocker.adapters import CommandRunnerPort, fs_write_text_atomic
from swocker.domain import (
    LifecycleStep,
    MissingRuntimeBinaryError,
    RuntimeConfig,
    StepFailedError,
    domain_apply_failure_policy,
)
from swocker.logger import get_logger

from .php_settings import PhpSettingsWriter
from .tls import FASTCGI_ADDRESS, TlsProvisioner

logger = get_logger("swocker.runtime")

ALTERNATIVE_TOOL_NAMES: Final[tuple[str, ...]] = ("php", "phar", "phar.phar", "phpize", "php-config")
COMPOSER_INSTALL_ARGUMENTS: Final[tuple[str, ...]] = (
    "composer",
    "install",
    "--no-scripts",
    "--no-interaction",
    "--optimize-autoloader",
)
FPM_LISTEN_PATTERN: Final[re.Pattern[str]] = re.compile(r"^listen\s*=.*$", re.MULTILINE)


@dataclass(frozen=True)
class RuntimePaths:
    """Filesystem locations the runtime configurator touches.

    Attributes:
        php_binary_dir: Directory holding versioned `php<version>` binaries.
        php_config_root: PHP configuration root, usually `/etc/php`.
        app_root: Application root used for dependency reinstall.
        writable_dirs: Runtime-writable directories owned by the service account.
        service_user: Unprivileged service account.
    """

    php_binary_dir: Path
    php_config_root: Path
    app_root: Path
    writable_dirs: tuple[Path, ...]
    service_user: str


class RuntimeConfigurator:
    """Applies one resolved runtime configuration to the container."""

    def __init__(
        self,
        runtime_config: RuntimeConfig,
        command_runner: CommandRunnerPort,
        paths: RuntimePaths,
        tls_provisioner: TlsProvisioner,
        php_settings_writer: PhpSettingsWriter,
    ):
        """Initialize runtime configurator.

        Args:
            runtime_config: Resolved runtime configuration.
            command_runner: Runner for system commands.
            paths: Filesystem locations.
            tls_provisioner: TLS certificate and site provisioner.
            php_settings_writer: PHP fragment writer.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if runtime_config is None:
            raise ValueError("runtime_config must not be None")
        if command_runner is None:
            raise ValueError("command_runner must not be None")

        self._runtime_config = runtime_config
        self._command_runner = command_runner
        self._paths = paths
        self._tls_provisioner = tls_provisioner
        self._php_settings_writer = php_settings_writer

    def runtime_configure(self) -> None:
        """Run every runtime configuration step in order.

        Raises:
            MissingRuntimeBinaryError: Raised when the selected PHP binary is absent.
        """

        php_version = self._runtime_config.php_version
        self.runtime_validate_binary()
        logger.info("Using PHP %s", php_version)

        self.runtime_switch_alternatives()
        self.runtime_configure_web_server()
        self.runtime_log_php_banner()
        self.runtime_fix_ownership()
        self.runtime_reinstall_dependencies()
        self.runtime_configure_tls()
        self.runtime_configure_xdebug()
        self.runtime_apply_tunables()

    def runtime_validate_binary(self) -> Path:
        """Verify the selected PHP binary exists.

        Returns:
            Path: Versioned PHP binary path.

        Raises:
            MissingRuntimeBinaryError: Raised with the list of installed binaries.
        """

        php_version = self._runtime_config.php_version
        binary_path = self._paths.php_binary_dir / f"php{php_version}"
        if binary_path.is_file():
            return binary_path

        available_binaries = tuple(
            str(candidate) for candidate in sorted(self._paths.php_binary_dir.glob("php[0-9]*"))
        )
        raise MissingRuntimeBinaryError(requested_version=php_version, available_binaries=available_binaries)

    def runtime_switch_alternatives(self) -> list[str]:
        """Point CLI tool alternatives at the selected version.

        Returns:
            list[str]: Tool names whose alternative could not be switched.
        """

        php_version = self._runtime_config.php_version
        failed_tools: list[str] = []
        for tool_name in ALTERNATIVE_TOOL_NAMES:
            result = self._command_runner.command_run(
                [
                    "update-alternatives",
                    "--set",
                    tool_name,
                    str(self._paths.php_binary_dir / f"{tool_name}{php_version}"),
                ],
                capture=True,
            )
            if not result.ok:
                failed_tools.append(tool_name)

        if failed_tools:
            logger.debug("update-alternatives skipped for: %s", ", ".join(failed_tools))
        return failed_tools

    def runtime_configure_web_server(self) -> None:
        """Bind the variant's web server to the selected PHP version."""

        web_server = self._runtime_config.variant.web_server
        if web_server == "apache":
            self._runtime_configure_apache()
        elif web_server == "nginx":
            self._runtime_configure_nginx()

    def _runtime_configure_apache(self) -> None:
        php_version = self._runtime_config.php_version
        logger.info("Configuring Apache for PHP %s...", php_version)
        self._command_runner.command_run(
            ["a2dismod", *(f"php{version}" for version in self._runtime_config.supported_php_versions)],
            capture=True,
        )
        result = self._command_runner.command_run(["a2enmod", f"php{php_version}"])
        if not result.ok:
            domain_apply_failure_policy(
                LifecycleStep.WEB_SERVER,
                f"a2enmod php{php_version} failed with exit code {result.returncode}",
                logger,
            )

    def _runtime_configure_nginx(self) -> None:
        php_version = self._runtime_config.php_version
        logger.info("Configuring Nginx/PHP-FPM for PHP %s...", php_version)
        for version in self._runtime_config.supported_php_versions:
            self._command_runner.command_run(["service", f"php{version}-fpm", "stop"], capture=True)

        pool_config_path = self._paths.php_config_root / php_version / "fpm" / "pool.d" / "www.conf"
        if pool_config_path.is_file():
            try:
                pool_config = pool_config_path.read_text(encoding="utf-8")
                fs_write_text_atomic(pool_config_path, FPM_LISTEN_PATTERN.sub(f"listen = {FASTCGI_ADDRESS}", pool_config))
            except OSError as error:
                domain_apply_failure_policy(
                    LifecycleStep.WEB_SERVER,
                    f"Could not update PHP-FPM pool configuration {pool_config_path}: {error}",
                    logger,
                )
        else:
            logger.debug("PHP-FPM pool configuration %s not found", pool_config_path)

        result = self._command_runner.command_run(["service", f"php{php_version}-fpm", "start"])
        if not result.ok:
            domain_apply_failure_policy(
                LifecycleStep.WEB_SERVER,
                f"php{php_version}-fpm failed to start with exit code {result.returncode}",
                logger,
            )

    def runtime_log_php_banner(self) -> str:
        """Log the first line of `php -v`.

        Returns:
            str: Banner line, empty when PHP could not be invoked.
        """

        result = self._command_runner.command_run(["php", "-v"], capture=True)
        banner_lines = result.output.splitlines() if result.ok else []
        banner = banner_lines[0].strip() if banner_lines else ""
        logger.info("PHP version: %s", banner or "unknown")
        return banner

    def runtime_fix_ownership(self) -> list[Path]:
        """Hand runtime-writable directories to the service account.

        Directories already owned by the service account are left alone.

        Returns:
            list[Path]: Directories whose ownership was changed.
        """

        service_user = self._paths.service_user
        try:
            service_uid = pwd.getpwnam(service_user).pw_uid
        except KeyError:
            logger.debug("Service user %s not found, skipping ownership fix", service_user)
            return []

        changed_paths: list[Path] = []
        for writable_dir in self._paths.writable_dirs:
            if not writable_dir.is_dir() or writable_dir.stat().st_uid == service_uid:
                continue

            logger.info("Fixing tmpfs ownership for %s...", writable_dir)
            result = self._command_runner.command_run(
                ["chown", "-R", f"{service_user}:{service_user}", str(writable_dir)],
                capture=True,
            )
            if not result.ok:
                domain_apply_failure_policy(
                    LifecycleStep.OWNERSHIP,
                    f"Could not fix ownership of {writable_dir}: {result.output.strip()}",
                    logger,
                )
                continue
            logger.info("Ownership fixed: %s", writable_dir)
            changed_paths.append(writable_dir)
        return changed_paths

    def runtime_reinstall_dependencies(self) -> bool:
        """Reinstall PHP dependencies when the version differs from the build.

        Returns:
            bool: True when a reinstall was attempted and succeeded.
        """

        php_version = self._runtime_config.php_version
        default_php_version = self._runtime_config.default_php_version
        if not self._runtime_config.version_differs_from_build:
            logger.info("Using build-time dependencies (PHP %s)", default_php_version)
            return False

        logger.info("PHP version %s differs from build default %s", php_version, default_php_version)
        logger.info("Re-installing Composer dependencies for PHP %s...", php_version)
        result = self._command_runner.command_run(
            list(COMPOSER_INSTALL_ARGUMENTS),
            user=self._paths.service_user,
            cwd=self._paths.app_root,
        )
        if not result.ok:
            domain_apply_failure_policy(
                LifecycleStep.DEPENDENCY_REINSTALL,
                "Composer install had some issues, but continuing...",
                logger,
            )
            return False

        logger.info("Composer dependencies re-installed successfully")
        return True

    def runtime_configure_tls(self) -> bool:
        """Provision TLS when enabled.

        Returns:
            bool: True when TLS is configured.
        """

        if not self._runtime_config.ssl_enabled:
            return False

        logger.info("Configuring SSL/HTTPS...")
        try:
            self._tls_provisioner.tls_ensure_certificate()
            self._tls_provisioner.tls_configure_web_server(self._runtime_config.variant)
        except (StepFailedError, OSError) as error:
            domain_apply_failure_policy(LifecycleStep.TLS, f"SSL configuration failed: {error}", logger)
            return False

        logger.info("SSL/HTTPS configured")
        return True

    def runtime_configure_xdebug(self) -> list[Path]:
        try:
            return self._php_settings_writer.php_write_xdebug(self._runtime_config)
        except OSError as error:
            domain_apply_failure_policy(LifecycleStep.XDEBUG, f"Xdebug configuration failed: {error}", logger)
            return []

    def runtime_apply_tunables(self) -> list[Path]:
        try:
            return self._php_settings_writer.php_write_tunables(self._runtime_config)
        except OSError as error:
            domain_apply_failure_policy(LifecycleStep.PHP_TUNABLES, f"PHP settings could not be written: {error}", logger)
            return []
