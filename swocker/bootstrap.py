"""Lifecycle bootstrap wiring for startup validation and dependency assembly."""

from __future__ import annotations

from swocker.adapters import CommandRunnerPort, PgrepProcessTable, ShopwareConsole, SubprocessCommandRunner
from swocker.config import (
    SwockerSettings,
    config_build_runtime_config,
    config_build_store_endpoint,
    config_load_settings,
)
from swocker.db import (
    ReadinessRetryPolicy,
    SQLAlchemyStoreService,
    StoreReadinessPoller,
    db_build_store_url,
    db_create_engine,
)
from swocker.domain import StoreEndpoint
from swocker.health import HealthMarker, HealthProbe, HttpCheckPolicy
from swocker.hooks import (
    HealthSignal,
    HookPhase,
    HookPhasePolicy,
    HookRunner,
    PostHealthyMonitor,
    hooks_build_phase_policies,
    hooks_launch_monitor,
)
from swocker.install import (
    AdminAccount,
    AppEnvFileWriter,
    InstallationOptions,
    InstallationStateMachine,
    PluginInstaller,
    install_parse_plugin_list,
)
from swocker.jobs import EntrypointOrchestrator, EntrypointOrchestratorConfig
from swocker.runtime import PhpSettingsWriter, RuntimeConfigurator, RuntimePaths, TlsProvisioner


def bootstrap_create_store_service(endpoint: StoreEndpoint, with_schema: bool) -> SQLAlchemyStoreService | None:
    """Build a store service for a configured endpoint.

    Engine creation does not connect, so this never blocks.

    Args:
        endpoint: Resolved store endpoint.
        with_schema: Bind to the target schema instead of the server.

    Returns:
        SQLAlchemyStoreService | None: Store service, None when no store host is configured.
    """

    if not endpoint.store_configured:
        return None
    engine = db_create_engine(store_url=db_build_store_url(endpoint=endpoint, with_schema=with_schema))
    return SQLAlchemyStoreService(engine=engine)


def bootstrap_create_readiness_poller(settings: SwockerSettings | None = None) -> StoreReadinessPoller | None:
    """Build the store readiness poller.

    Returns:
        StoreReadinessPoller | None: Poller, None when no store host is configured.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    endpoint = config_build_store_endpoint(resolved_settings)
    store_service = bootstrap_create_store_service(endpoint=endpoint, with_schema=False)
    if store_service is None:
        return None
    return StoreReadinessPoller(
        store=store_service,
        schema_name=endpoint.name,
        retry_policy=ReadinessRetryPolicy(
            max_attempts=resolved_settings.db_max_retries,
            interval_seconds=resolved_settings.db_retry_interval,
        ),
        store_label=endpoint.label,
    )


def bootstrap_create_runtime_configurator(
    settings: SwockerSettings,
    command_runner: CommandRunnerPort,
) -> RuntimeConfigurator:
    """Build the runtime configurator.

    Returns:
        RuntimeConfigurator: Configurator bound to the resolved runtime configuration.

    Raises:
        UnsupportedRuntimeVersionError: Raised when the effective PHP version is not supported.
    """

    runtime_config = config_build_runtime_config(settings)
    return RuntimeConfigurator(
        runtime_config=runtime_config,
        command_runner=command_runner,
        paths=RuntimePaths(
            php_binary_dir=settings.swocker_php_binary_dir,
            php_config_root=settings.swocker_php_config_root,
            app_root=settings.swocker_app_root,
            writable_dirs=settings.writable_dir_paths(),
            service_user=settings.swocker_service_user,
        ),
        tls_provisioner=TlsProvisioner(
            command_runner=command_runner,
            certificate_path=settings.swocker_tls_certificate,
            private_key_path=settings.swocker_tls_private_key,
            nginx_root=settings.swocker_nginx_root,
            apache_root=settings.swocker_apache_root,
            document_root=settings.swocker_app_root / "public",
        ),
        php_settings_writer=PhpSettingsWriter(config_root=settings.swocker_php_config_root),
    )


def bootstrap_create_hook_policies(settings: SwockerSettings) -> dict[HookPhase, HookPhasePolicy]:
    return hooks_build_phase_policies(
        pre_init_dir=settings.swocker_pre_init_hook_dir,
        post_install_dir=settings.swocker_post_install_hook_dir,
        post_healthy_dir=settings.swocker_post_healthy_hook_dir,
        service_user=settings.swocker_service_user,
    )


def bootstrap_create_installation(
    settings: SwockerSettings,
    command_runner: CommandRunnerPort,
) -> InstallationStateMachine:
    """Build the installation state machine.

    Returns:
        InstallationStateMachine: State machine bound to the resolved store endpoint.
    """

    console = ShopwareConsole(
        command_runner=command_runner,
        app_root=settings.swocker_app_root,
        service_user=settings.swocker_service_user,
    )
    return InstallationStateMachine(
        console=console,
        env_writer=AppEnvFileWriter(app_root=settings.swocker_app_root),
        plugin_installer=PluginInstaller(console=console),
        endpoint=config_build_store_endpoint(settings),
        options=InstallationOptions(
            app_env=settings.app_env,
            app_url=settings.app_url,
            app_secret=settings.app_secret,
            instance_id=settings.instance_id,
            admin_account=AdminAccount(
                username=settings.shopware_admin_user,
                password=settings.shopware_admin_password,
                email=settings.shopware_admin_email,
                first_name=settings.shopware_admin_firstname,
                last_name=settings.shopware_admin_lastname,
            ),
            install_demo_data=settings.install_demo_data,
            plugin_names=install_parse_plugin_list(settings.auto_install_plugins),
        ),
        app_root=settings.swocker_app_root,
        service_user=settings.swocker_service_user,
    )


def bootstrap_create_entrypoint_orchestrator(settings: SwockerSettings | None = None) -> EntrypointOrchestrator:
    """Build the entrypoint orchestrator.

    Returns:
        EntrypointOrchestrator: Fully wired lifecycle orchestrator.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    command_runner = SubprocessCommandRunner()
    return EntrypointOrchestrator(
        config=EntrypointOrchestratorConfig(
            shopware_version=resolved_settings.shopware_version,
            variant=resolved_settings.variant,
            requested_php_version=resolved_settings.php_version or resolved_settings.default_php_version,
            launch_monitor=resolved_settings.post_healthy_timeout > 0,
        ),
        runtime_configurator_factory=lambda: bootstrap_create_runtime_configurator(
            settings=resolved_settings,
            command_runner=command_runner,
        ),
        hook_runner=HookRunner(command_runner=command_runner),
        hook_policies=bootstrap_create_hook_policies(resolved_settings),
        installation=bootstrap_create_installation(settings=resolved_settings, command_runner=command_runner),
        ready_marker=HealthMarker(resolved_settings.swocker_ready_marker),
        readiness_poller=bootstrap_create_readiness_poller(resolved_settings),
        monitor_launcher=hooks_launch_monitor,
        healthy_marker=HealthMarker(resolved_settings.swocker_healthy_marker),
        completion_marker=HealthMarker(resolved_settings.swocker_post_healthy_marker),
    )


def bootstrap_create_health_probe(settings: SwockerSettings | None = None) -> HealthProbe:
    """Build the composite health probe.

    Returns:
        HealthProbe: Probe bound to the active variant and store.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    endpoint = config_build_store_endpoint(resolved_settings)
    return HealthProbe(
        variant=resolved_settings.variant,
        process_table=PgrepProcessTable(command_runner=SubprocessCommandRunner()),
        http_policy=HttpCheckPolicy(
            url=resolved_settings.swocker_health_url,
            attempts=resolved_settings.swocker_health_http_attempts,
            backoff_seconds=resolved_settings.swocker_health_http_backoff_seconds,
            timeout_seconds=resolved_settings.swocker_health_http_timeout_seconds,
        ),
        healthy_marker=HealthMarker(resolved_settings.swocker_healthy_marker),
        ready_marker=HealthMarker(resolved_settings.swocker_ready_marker),
        store=bootstrap_create_store_service(endpoint=endpoint, with_schema=True),
    )


def bootstrap_create_post_healthy_monitor(settings: SwockerSettings | None = None) -> PostHealthyMonitor:
    """Build the post-healthy hook monitor.

    Returns:
        PostHealthyMonitor: Monitor with the configured health signal source.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    signal = HealthSignal(resolved_settings.post_healthy_signal)
    probe_check = None
    if signal is not HealthSignal.MARKER:
        probe_check = bootstrap_create_health_probe(resolved_settings).probe_is_healthy

    return PostHealthyMonitor(
        hook_runner=HookRunner(command_runner=SubprocessCommandRunner()),
        policy=bootstrap_create_hook_policies(resolved_settings)[HookPhase.POST_HEALTHY],
        healthy_marker=HealthMarker(resolved_settings.swocker_healthy_marker),
        completion_marker=HealthMarker(resolved_settings.swocker_post_healthy_marker),
        timeout_seconds=resolved_settings.post_healthy_timeout,
        poll_interval_seconds=resolved_settings.post_healthy_poll_interval,
        signal=signal,
        probe_check=probe_check,
    )
