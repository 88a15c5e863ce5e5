"""Self-signed TLS provisioning and web-server TLS site configuration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Final

from swocker.adapters import CommandRunnerPort, fs_write_text_atomic
from swocker.domain import StepFailedError, Variant
from swocker.logger import get_logger

logger = get_logger("swocker.runtime.tls")

CERTIFICATE_SUBJECT: Final[str] = "/C=US/ST=State/L=City/O=Organization/CN=localhost"
CERTIFICATE_VALIDITY_DAYS: Final[int] = 365
FASTCGI_ADDRESS: Final[str] = "127.0.0.1:9000"

NGINX_TLS_SITE_TEMPLATE: Final[str] = """server {{
    listen 443 ssl http2;
    listen [::]:443 ssl http2;
    server_name _;

    ssl_certificate {certificate};
    ssl_certificate_key {private_key};
    ssl_protocols TLSv1.2 TLSv1.3;
    ssl_ciphers HIGH:!aNULL:!MD5;

    root {document_root};
    index index.php;

    location ~ /(\\.)|^/\\. {{
        deny all;
    }}

    location ~* ^.+\\.(?:css|cur|js|jpe?g|gif|ico|png|svg|webp|avif|html|woff|woff2|xml)$ {{
        expires 1y;
        add_header Cache-Control "public, must-revalidate, proxy-revalidate, immutable";
        access_log off;
    }}

    location / {{
        try_files $uri /index.php$is_args$args;
    }}

    location ~ ^/(index|shopware-installer\\.phar)\\.php(/|$) {{
        fastcgi_split_path_info ^(.+\\.php)(/.+)$;
        fastcgi_pass {fastcgi_address};
        include fastcgi_params;
        fastcgi_param SCRIPT_FILENAME $document_root$fastcgi_script_name;
        fastcgi_param PATH_INFO $fastcgi_path_info;
        fastcgi_param HTTPS on;
        fastcgi_buffers 8 16k;
        fastcgi_buffer_size 32k;
        fastcgi_read_timeout 300s;
    }}
}}

server {{
    listen 80;
    listen [::]:80;
    server_name _;
    return 301 https://$host$request_uri;
}}
"""

APACHE_TLS_SITE_TEMPLATE: Final[str] = """<VirtualHost *:443>
    ServerName localhost
    DocumentRoot {document_root}

    SSLEngine on
    SSLCertificateFile {certificate}
    SSLCertificateKeyFile {private_key}

    <Directory {document_root}>
        Options -Indexes +FollowSymLinks
        AllowOverride All
        Require all granted
    </Directory>

    ErrorLog ${{APACHE_LOG_DIR}}/error.log
    CustomLog ${{APACHE_LOG_DIR}}/access.log combined
</VirtualHost>
"""

APACHE_REDIRECT_SITE: Final[str] = """<VirtualHost *:80>
    ServerName localhost
    Redirect permanent / https://localhost/
</VirtualHost>
"""


class TlsProvisioner:
    """Generates a reusable self-signed certificate and enables TLS listeners."""

    def __init__(
        self,
        command_runner: CommandRunnerPort,
        certificate_path: Path,
        private_key_path: Path,
        nginx_root: Path,
        apache_root: Path,
        document_root: Path,
    ):
        """Initialize TLS provisioner.

        Args:
            command_runner: Runner for openssl and apache helper commands.
            certificate_path: PEM certificate location.
            private_key_path: PEM private key location.
            nginx_root: Nginx configuration root.
            apache_root: Apache configuration root.
            document_root: Public document root served over TLS.

        Raises:
            ValueError: Raised when command_runner is None.
        """

        if command_runner is None:
            raise ValueError("command_runner must not be None")

        self._command_runner = command_runner
        self._certificate_path = certificate_path
        self._private_key_path = private_key_path
        self._nginx_root = nginx_root
        self._apache_root = apache_root
        self._document_root = document_root

    def tls_ensure_certificate(self) -> bool:
        """Generate the self-signed certificate unless one already exists.

        Returns:
            bool: True when a new certificate was generated.

        Raises:
            StepFailedError: Raised when openssl fails.
        """

        if self._certificate_path.is_file():
            logger.info("Reusing existing SSL certificate %s", self._certificate_path)
            return False

        logger.info("Generating self-signed SSL certificate...")
        self._certificate_path.parent.mkdir(parents=True, exist_ok=True)
        self._private_key_path.parent.mkdir(parents=True, exist_ok=True)
        result = self._command_runner.command_run(
            [
                "openssl",
                "req",
                "-x509",
                "-nodes",
                "-days",
                str(CERTIFICATE_VALIDITY_DAYS),
                "-newkey",
                "rsa:2048",
                "-keyout",
                str(self._private_key_path),
                "-out",
                str(self._certificate_path),
                "-subj",
                CERTIFICATE_SUBJECT,
            ],
            capture=True,
        )
        if not result.ok:
            raise StepFailedError(step="tls", message=f"SSL certificate generation failed: {result.output.strip()}")

        os.chmod(self._private_key_path, 0o600)
        os.chmod(self._certificate_path, 0o644)
        logger.info("SSL certificate generated")
        return True

    def tls_configure_web_server(self, variant: Variant) -> list[Path]:
        """Write and enable TLS site configuration for the variant's web server.

        Args:
            variant: Active image variant.

        Returns:
            list[Path]: Written site configuration paths.

        Raises:
            StepFailedError: Raised when enabling the configuration fails.
        """

        if variant.web_server == "nginx":
            return self._tls_configure_nginx()
        if variant.web_server == "apache":
            return self._tls_configure_apache()
        logger.info("Variant %s has no web server, skipping SSL site configuration", variant.value)
        return []

    def _tls_configure_nginx(self) -> list[Path]:
        logger.info("Configuring Nginx for SSL...")
        available_path = self._nginx_root / "sites-available" / "shopware-ssl.conf"
        enabled_dir = self._nginx_root / "sites-enabled"
        fs_write_text_atomic(
            available_path,
            NGINX_TLS_SITE_TEMPLATE.format(
                certificate=self._certificate_path,
                private_key=self._private_key_path,
                document_root=self._document_root,
                fastcgi_address=FASTCGI_ADDRESS,
            ),
        )

        enabled_dir.mkdir(parents=True, exist_ok=True)
        (enabled_dir / "shopware.conf").unlink(missing_ok=True)
        enabled_link = enabled_dir / "shopware-ssl.conf"
        if enabled_link.is_symlink() or enabled_link.exists():
            enabled_link.unlink()
        enabled_link.symlink_to(available_path)
        return [available_path]

    def _tls_configure_apache(self) -> list[Path]:
        logger.info("Configuring Apache for SSL...")
        module_result = self._command_runner.command_run(["a2enmod", "ssl"])
        if not module_result.ok:
            raise StepFailedError(step="tls", message="a2enmod ssl failed")

        sites_dir = self._apache_root / "sites-available"
        tls_site_path = sites_dir / "000-default-ssl.conf"
        redirect_site_path = sites_dir / "000-default.conf"
        fs_write_text_atomic(
            tls_site_path,
            APACHE_TLS_SITE_TEMPLATE.format(
                certificate=self._certificate_path,
                private_key=self._private_key_path,
                document_root=self._document_root,
            ),
        )
        fs_write_text_atomic(redirect_site_path, APACHE_REDIRECT_SITE)

        site_result = self._command_runner.command_run(["a2ensite", "000-default-ssl"])
        if not site_result.ok:
            raise StepFailedError(step="tls", message="a2ensite 000-default-ssl failed")
        return [tls_site_path, redirect_site_path]
