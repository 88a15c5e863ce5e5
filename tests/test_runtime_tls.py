"""Tests for self-signed certificate provisioning and TLS site configuration."""

from __future__ import annotations

import stat
from collections.abc import Mapping, Sequence
from pathlib import Path

import pytest

from swocker.adapters import CommandResult
from swocker.domain import StepFailedError, Variant
from swocker.runtime import TlsProvisioner


class _OpensslRunnerStub:
    """Command runner double that materializes openssl output files."""

    def __init__(self, returncode: int = 0):
        self.returncode = returncode
        self.calls: list[tuple[str, ...]] = []

    def command_run(
        self,
        argv: Sequence[str],
        user: str | None = None,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        capture: bool = False,
    ) -> CommandResult:
        """Record the command and emulate openssl file creation.

        Args:
            argv: Argument vector.
            user: Ignored identity.
            cwd: Ignored working directory.
            env: Ignored environment.
            capture: Ignored capture flag.

        Returns:
            CommandResult: Configured exit status.

        Raises:
            RuntimeError: Never raised by this test double.
        """

        _ = (user, cwd, env, capture)
        self.calls.append(tuple(argv))
        if argv[0] == "openssl" and self.returncode == 0:
            Path(argv[argv.index("-keyout") + 1]).write_text("KEY", encoding="utf-8")
            Path(argv[argv.index("-out") + 1]).write_text("CERT", encoding="utf-8")
        output = "" if self.returncode == 0 else "unable to write private key"
        return CommandResult(argv=tuple(argv), returncode=self.returncode, output=output)


def _build_provisioner(tmp_path: Path, runner: _OpensslRunnerStub) -> TlsProvisioner:
    return TlsProvisioner(
        command_runner=runner,
        certificate_path=tmp_path / "certs" / "swocker.crt",
        private_key_path=tmp_path / "private" / "swocker.key",
        nginx_root=tmp_path / "nginx",
        apache_root=tmp_path / "apache2",
        document_root=Path("/var/www/html/public"),
    )


def test_runtime_tls_generates_certificate_once(tmp_path: Path) -> None:
    """Generate a certificate on first call and reuse it afterwards.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when the certificate is regenerated.
    """

    runner = _OpensslRunnerStub()
    provisioner = _build_provisioner(tmp_path, runner)

    assert provisioner.tls_ensure_certificate() is True
    assert provisioner.tls_ensure_certificate() is False

    assert len(runner.calls) == 1
    assert "/C=US/ST=State/L=City/O=Organization/CN=localhost" in runner.calls[0]
    assert stat.S_IMODE((tmp_path / "private" / "swocker.key").stat().st_mode) == 0o600
    assert stat.S_IMODE((tmp_path / "certs" / "swocker.crt").stat().st_mode) == 0o644


def test_runtime_tls_openssl_failure_raises_step_failed(tmp_path: Path) -> None:
    provisioner = _build_provisioner(tmp_path, _OpensslRunnerStub(returncode=1))

    with pytest.raises(StepFailedError) as error_info:
        provisioner.tls_ensure_certificate()

    assert error_info.value.step == "tls"


def test_runtime_tls_nginx_site_replaces_plain_site(tmp_path: Path) -> None:
    """Enable the TLS site and drop the plain HTTP site for nginx variants.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when site links are wrong.
    """

    enabled_dir = tmp_path / "nginx" / "sites-enabled"
    enabled_dir.mkdir(parents=True)
    (enabled_dir / "shopware.conf").write_text("server {}", encoding="utf-8")
    provisioner = _build_provisioner(tmp_path, _OpensslRunnerStub())

    written_paths = provisioner.tls_configure_web_server(Variant.PROD_NGINX)

    site_config = written_paths[0].read_text(encoding="utf-8")
    assert "listen 443 ssl" in site_config
    assert "return 301 https://$host$request_uri;" in site_config
    assert "fastcgi_pass 127.0.0.1:9000;" in site_config
    assert not (enabled_dir / "shopware.conf").exists()
    assert (enabled_dir / "shopware-ssl.conf").resolve() == written_paths[0].resolve()


def test_runtime_tls_apache_site_enables_ssl_module(tmp_path: Path) -> None:
    runner = _OpensslRunnerStub()
    provisioner = _build_provisioner(tmp_path, runner)

    written_paths = provisioner.tls_configure_web_server(Variant.DEV)

    assert runner.calls == [("a2enmod", "ssl"), ("a2ensite", "000-default-ssl")]
    assert "SSLEngine on" in written_paths[0].read_text(encoding="utf-8")
    assert "Redirect permanent / https://localhost/" in written_paths[1].read_text(encoding="utf-8")


def test_runtime_tls_ci_variant_configures_no_site(tmp_path: Path) -> None:
    runner = _OpensslRunnerStub()

    assert _build_provisioner(tmp_path, runner).tls_configure_web_server(Variant.CI) == []
    assert runner.calls == []
