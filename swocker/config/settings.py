"""Typed runtime settings with environment loading and startup validation."""

from pathlib import Path
from typing import Final
from urllib.parse import unquote, urlsplit

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from swocker.domain import (
    PhpTunables,
    RuntimeConfig,
    StoreEndpoint,
    UnsupportedRuntimeVersionError,
    Variant,
    XdebugSettings,
)

LOG_LEVEL_NAMES: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class SwockerSettings(BaseSettings):
    """Container lifecycle settings read from the process environment.

    Environment variable names map directly to field names in uppercase.
    Example: `database_host` reads from `DATABASE_HOST`.

    Attributes:
        shopware_version: Application release label used in log banners.
        variant: Active image variant.
        php_version: Requested PHP version override.
        default_php_version: Build-time default PHP version of the image.
        supported_php_versions: Comma-separated supported PHP versions.
        php_memory_limit: Optional `memory_limit` override.
        php_upload_max_filesize: Optional `upload_max_filesize` override.
        php_post_max_size: Optional `post_max_size` override.
        php_max_execution_time: Optional `max_execution_time` override.
        ssl_enabled: Provision a self-signed TLS listener.
        xdebug_enabled: Activate Xdebug in dev variants.
        xdebug_client_host: Xdebug client host.
        xdebug_client_port: Xdebug client port.
        xdebug_idekey: Xdebug IDE key.
        database_host: Store host. Blank disables installation.
        database_port: Store port.
        database_user: Store user.
        database_password: Store password.
        database_name: Target schema name.
        database_url: Composed `mysql://` URL overriding the discrete fields.
        db_max_retries: Readiness poll attempts.
        db_retry_interval: Seconds between readiness poll attempts.
        app_env: Application environment written to `.env`.
        app_secret: Application secret; generated when absent.
        instance_id: Application instance id; generated when absent.
        app_url: Application base URL.
        shopware_admin_user: Administrative account user name.
        shopware_admin_password: Administrative account password.
        shopware_admin_email: Administrative account email.
        shopware_admin_firstname: Administrative account first name.
        shopware_admin_lastname: Administrative account last name.
        install_demo_data: Seed demo data on first install.
        auto_install_plugins: Comma-separated plugin names.
        post_healthy_timeout: Seconds the post-healthy monitor waits.
        post_healthy_poll_interval: Seconds between monitor health polls.
        post_healthy_signal: Health signal trusted by the monitor.
        log_level: Logging level.
    """

    model_config = SettingsConfigDict(
        env_file=None,
        extra="ignore",
        case_sensitive=False,
    )

    shopware_version: str = Field(default="")
    variant: Variant = Field(default=Variant.DEV)
    php_version: str | None = Field(default=None)
    default_php_version: str = Field(default="8.3", min_length=1)
    supported_php_versions: str = Field(default="8.2,8.3", min_length=1)
    php_memory_limit: str | None = Field(default=None)
    php_upload_max_filesize: str | None = Field(default=None)
    php_post_max_size: str | None = Field(default=None)
    php_max_execution_time: str | None = Field(default=None)

    ssl_enabled: bool = Field(default=False)
    xdebug_enabled: bool = Field(default=False)
    xdebug_client_host: str = Field(default="host.docker.internal")
    xdebug_client_port: int = Field(default=9003, ge=1, le=65535)
    xdebug_idekey: str = Field(default="PHPSTORM")

    database_host: str = Field(default="")
    database_port: int = Field(default=3306, ge=1, le=65535)
    database_user: str = Field(default="root")
    database_password: str = Field(default="", repr=False)
    database_name: str = Field(default="shopware", min_length=1)
    database_url: str | None = Field(default=None, repr=False)
    db_max_retries: int = Field(default=30, ge=1)
    db_retry_interval: float = Field(default=2.0, ge=0)

    app_env: str = Field(default="dev")
    app_secret: str | None = Field(default=None, repr=False)
    instance_id: str | None = Field(default=None)
    app_url: str = Field(default="http://localhost")
    shopware_admin_user: str = Field(default="admin")
    shopware_admin_password: str = Field(default="shopware", repr=False)
    shopware_admin_email: str = Field(default="admin@example.com")
    shopware_admin_firstname: str = Field(default="Admin")
    shopware_admin_lastname: str = Field(default="User")
    install_demo_data: bool = Field(default=False)
    auto_install_plugins: str = Field(default="")

    post_healthy_timeout: int = Field(default=300, ge=0)
    post_healthy_poll_interval: float = Field(default=5.0, gt=0)
    post_healthy_signal: str = Field(default="any")
    log_level: str = Field(default="INFO")

    swocker_app_root: Path = Field(default=Path("/var/www/html"))
    swocker_service_user: str = Field(default="www-data")
    swocker_pre_init_hook_dir: Path = Field(default=Path("/docker-entrypoint-init.d"))
    swocker_post_install_hook_dir: Path = Field(default=Path("/docker-entrypoint-shopware.d"))
    swocker_post_healthy_hook_dir: Path = Field(default=Path("/docker-entrypoint-shopware-healthy.d"))
    swocker_healthy_marker: Path = Field(default=Path("/tmp/.swocker-healthy"))
    swocker_ready_marker: Path = Field(default=Path("/tmp/.swocker-ready"))
    swocker_post_healthy_marker: Path = Field(default=Path("/tmp/.swocker-post-healthy-complete"))
    swocker_php_binary_dir: Path = Field(default=Path("/usr/bin"))
    swocker_php_config_root: Path = Field(default=Path("/etc/php"))
    swocker_nginx_root: Path = Field(default=Path("/etc/nginx"))
    swocker_apache_root: Path = Field(default=Path("/etc/apache2"))
    swocker_tls_certificate: Path = Field(default=Path("/etc/ssl/certs/swocker.crt"))
    swocker_tls_private_key: Path = Field(default=Path("/etc/ssl/private/swocker.key"))
    swocker_writable_dirs: str = Field(default="/var/www/html/var")
    swocker_health_url: str = Field(default="http://localhost/")
    swocker_health_http_attempts: int = Field(default=3, ge=1)
    swocker_health_http_backoff_seconds: float = Field(default=2.0, ge=0)
    swocker_health_http_timeout_seconds: float = Field(default=10.0, gt=0)

    @field_validator(
        "php_version",
        "php_memory_limit",
        "php_upload_max_filesize",
        "php_post_max_size",
        "php_max_execution_time",
        "database_url",
        "app_secret",
        "instance_id",
        mode="before",
    )
    @classmethod
    def _validate_blank_as_unset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("ssl_enabled", "xdebug_enabled", "install_demo_data", mode="before")
    @classmethod
    def _validate_blank_flag(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return False
        return value

    @field_validator("database_host", "database_user", "default_php_version", mode="before")
    @classmethod
    def _validate_strip(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("post_healthy_signal")
    @classmethod
    def _validate_health_signal(cls, value: str) -> str:
        normalized_value = value.strip().lower()
        if normalized_value not in ("marker", "probe", "any"):
            raise ValueError("post_healthy_signal must be one of: marker, probe, any")
        return normalized_value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in LOG_LEVEL_NAMES:
            raise ValueError(f"log_level must be one of: {', '.join(LOG_LEVEL_NAMES)}")
        return normalized_value

    @field_validator("database_url")
    @classmethod
    def _validate_database_url(cls, value: str | None) -> str | None:
        if value is None:
            return value
        if not value.startswith(("mysql://", "mysql+pymysql://", "mariadb://")):
            raise ValueError("database_url must use the mysql:// scheme")
        return value

    def supported_php_version_tuple(self) -> tuple[str, ...]:
        """Return supported PHP versions with whitespace trimmed.

        Returns:
            tuple[str, ...]: Non-empty supported versions in declared order.
        """

        return tuple(version.strip() for version in self.supported_php_versions.split(",") if version.strip())

    def writable_dir_paths(self) -> tuple[Path, ...]:
        """Return runtime-writable directories whose ownership is normalized.

        Returns:
            tuple[Path, ...]: Declared writable directories.
        """

        return tuple(Path(entry.strip()) for entry in self.swocker_writable_dirs.split(",") if entry.strip())


def config_load_settings() -> SwockerSettings:
    """Load and validate lifecycle settings from the environment.

    Returns:
        SwockerSettings: Validated settings object.

    Raises:
        SettingsLoadError: Raised when settings are missing or invalid.
    """

    try:
        return SwockerSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update environment variables. Details: {error}"
        ) from error


def config_build_runtime_config(settings: SwockerSettings) -> RuntimeConfig:
    """Resolve and validate the effective runtime configuration.

    The effective PHP version is the explicit `PHP_VERSION` override when set,
    otherwise the image build-time default.

    Args:
        settings: Validated lifecycle settings.

    Returns:
        RuntimeConfig: Immutable runtime configuration.

    Raises:
        UnsupportedRuntimeVersionError: Raised when the effective version is not supported.
    """

    php_version = settings.php_version or settings.default_php_version
    supported_versions = settings.supported_php_version_tuple()
    if php_version not in supported_versions:
        raise UnsupportedRuntimeVersionError(
            requested_version=php_version,
            supported_versions=settings.supported_php_versions,
        )

    return RuntimeConfig(
        php_version=php_version,
        default_php_version=settings.default_php_version,
        supported_php_versions=supported_versions,
        variant=settings.variant,
        ssl_enabled=settings.ssl_enabled,
        xdebug=XdebugSettings(
            enabled=settings.xdebug_enabled,
            client_host=settings.xdebug_client_host,
            client_port=settings.xdebug_client_port,
            idekey=settings.xdebug_idekey,
        ),
        tunables=PhpTunables(
            memory_limit=settings.php_memory_limit,
            upload_max_filesize=settings.php_upload_max_filesize,
            post_max_size=settings.php_post_max_size,
            max_execution_time=settings.php_max_execution_time,
        ),
    )


def config_build_store_endpoint(settings: SwockerSettings) -> StoreEndpoint:
    """Resolve store connection parameters.

    A configured `DATABASE_URL` takes precedence over the discrete
    `DATABASE_*` fields; components it omits fall back to them.

    Args:
        settings: Validated lifecycle settings.

    Returns:
        StoreEndpoint: Resolved store endpoint.

    Raises:
        SettingsLoadError: Raised when `DATABASE_URL` cannot be parsed.
    """

    if not settings.database_url:
        return StoreEndpoint(
            host=settings.database_host,
            port=settings.database_port,
            user=settings.database_user,
            password=settings.database_password,
            name=settings.database_name,
        )

    try:
        parsed_url = urlsplit(settings.database_url)
        parsed_port = parsed_url.port
    except ValueError as error:
        raise SettingsLoadError(f"DATABASE_URL could not be parsed: {error}") from error

    schema_name = unquote(parsed_url.path.lstrip("/"))
    return StoreEndpoint(
        host=parsed_url.hostname or settings.database_host,
        port=parsed_port or settings.database_port,
        user=unquote(parsed_url.username) if parsed_url.username else settings.database_user,
        password=unquote(parsed_url.password) if parsed_url.password is not None else settings.database_password,
        name=schema_name or settings.database_name,
    )
