"""Runtime package for PHP version, web server, TLS and PHP settings."""

from .configurator import RuntimeConfigurator, RuntimePaths
from .php_settings import PhpSettingsWriter, runtime_php_conf_dirs, runtime_render_xdebug_ini
from .tls import TlsProvisioner

__all__ = [
    "PhpSettingsWriter",
    "RuntimeConfigurator",
    "RuntimePaths",
    "TlsProvisioner",
    "runtime_php_conf_dirs",
    "runtime_render_xdebug_ini",
]
