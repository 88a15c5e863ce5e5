"""PHP configuration fragments for Xdebug and resource tunables.

Fragments use a `zz-` prefix so PHP loads them after every base `.ini` file in
the same `conf.d` directory and their values win.
"""

from __future__ import annotations

from pathlib import Path
from typing import Final

from swocker.adapters import fs_write_text_atomic
from swocker.domain import RuntimeConfig, Variant, XdebugSettings
from swocker.logger import get_logger

logger = get_logger("swocker.runtime")

XDEBUG_FRAGMENT_NAME: Final[str] = "zz-xdebug-runtime.ini"
XDEBUG_SAPI_NAMES: Final[tuple[str, ...]] = ("cli", "apache2", "fpm")
TUNABLE_FRAGMENT_NAMES: Final[dict[str, str]] = {
    "memory_limit": "zz-memory-limit.ini",
    "upload_max_filesize": "zz-upload-max-filesize.ini",
    "post_max_size": "zz-post-max-size.ini",
    "max_execution_time": "zz-max-execution-time.ini",
}


def runtime_render_xdebug_ini(xdebug: XdebugSettings) -> str:
    """Render the Xdebug runtime fragment with resolved values.

    Args:
        xdebug: Debug-adapter settings.

    Returns:
        str: INI fragment text.
    """

    return (
        "[xdebug]\n"
        "xdebug.mode=debug\n"
        "xdebug.start_with_request=yes\n"
        f"xdebug.client_host={xdebug.client_host}\n"
        f"xdebug.client_port={xdebug.client_port}\n"
        f"xdebug.idekey={xdebug.idekey}\n"
        "xdebug.log=/tmp/xdebug.log\n"
        "xdebug.log_level=7\n"
    )


def runtime_php_conf_dirs(config_root: Path, php_version: str, variant: Variant) -> tuple[Path, ...]:
    """Return the `conf.d` directories read by the active SAPI and the CLI.

    Args:
        config_root: PHP configuration root, usually `/etc/php`.
        php_version: Effective PHP version.
        variant: Active image variant.

    Returns:
        tuple[Path, ...]: Active SAPI directory first, CLI directory last.
    """

    version_root = config_root / php_version
    cli_dir = version_root / "cli" / "conf.d"
    if variant.web_server == "nginx":
        return (version_root / "fpm" / "conf.d", cli_dir)
    if variant.web_server == "apache":
        return (version_root / "apache2" / "conf.d", cli_dir)
    return (cli_dir,)


class PhpSettingsWriter:
    """Writes PHP override fragments for one resolved runtime configuration."""

    def __init__(self, config_root: Path):
        self._config_root = config_root

    def php_write_xdebug(self, runtime_config: RuntimeConfig) -> list[Path]:
        """Activate Xdebug for every installed SAPI when requested.

        Only dev variants carry Xdebug. When the flag is not set a dev variant
        logs that the extension is present but inactive.

        Args:
            runtime_config: Resolved runtime configuration.

        Returns:
            list[Path]: Written fragment paths.

        Raises:
            OSError: Raised when a fragment cannot be written.
        """

        if not runtime_config.variant.is_dev:
            return []
        if not runtime_config.xdebug.enabled:
            logger.info("Xdebug is installed but disabled (set XDEBUG_ENABLED=1 to enable)")
            return []

        logger.info("Enabling Xdebug...")
        fragment = runtime_render_xdebug_ini(runtime_config.xdebug)
        written_paths: list[Path] = []
        for sapi_name in XDEBUG_SAPI_NAMES:
            conf_dir = self._config_root / runtime_config.php_version / sapi_name / "conf.d"
            if not conf_dir.is_dir():
                continue
            fragment_path = conf_dir / XDEBUG_FRAGMENT_NAME
            fs_write_text_atomic(fragment_path, fragment)
            written_paths.append(fragment_path)
        return written_paths

    def php_write_tunables(self, runtime_config: RuntimeConfig) -> list[Path]:
        """Write one override fragment per configured tunable.

        Args:
            runtime_config: Resolved runtime configuration.

        Returns:
            list[Path]: Written fragment paths.

        Raises:
            OSError: Raised when a fragment cannot be written.
        """

        conf_dirs = runtime_php_conf_dirs(
            config_root=self._config_root,
            php_version=runtime_config.php_version,
            variant=runtime_config.variant,
        )
        written_paths: list[Path] = []
        for ini_key, value in runtime_config.tunables.tunables_items():
            logger.info("Setting PHP %s to %s", ini_key, value)
            for conf_dir in conf_dirs:
                fragment_path = conf_dir / TUNABLE_FRAGMENT_NAMES[ini_key]
                fs_write_text_atomic(fragment_path, f"{ini_key} = {value}\n")
                written_paths.append(fragment_path)
        return written_paths
