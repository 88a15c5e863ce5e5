"""Tests for application `.env` rendering."""

from __future__ import annotations

from pathlib import Path

from dotenv import dotenv_values

from swocker.domain import StoreEndpoint
from swocker.install import AppEnvFileWriter, install_build_database_url


def _endpoint(password: str = "root") -> StoreEndpoint:
    return StoreEndpoint(host="db", port=3306, user="root", password=password, name="shopware")


def _counting_token_factory(prefix: str):
    counter = {"calls": 0}

    def _token_factory(byte_count: int) -> str:
        counter["calls"] += 1
        return f"{prefix}{byte_count}-{counter['calls']}"

    return _token_factory


def test_install_env_file_database_url_quotes_credentials() -> None:
    assert install_build_database_url(_endpoint("p@ss:w/rd")) == "mysql://root:p%40ss%3Aw%2Frd@db:3306/shopware"


def test_install_env_file_database_url_omits_empty_password() -> None:
    assert install_build_database_url(_endpoint("")) == "mysql://root@db:3306/shopware"


def test_install_env_file_writes_generated_values(tmp_path: Path) -> None:
    """Render every entry with generated secrets when none are supplied.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when rendered values are wrong.
    """

    writer = AppEnvFileWriter(app_root=tmp_path, token_factory=_counting_token_factory("gen"))

    environment = writer.env_write(endpoint=_endpoint(), app_env="prod", app_url="https://shop.example")

    values = dotenv_values(tmp_path / ".env")
    assert values["APP_ENV"] == "prod"
    assert values["APP_URL"] == "https://shop.example"
    assert values["DATABASE_URL"] == "mysql://root:root@db:3306/shopware"
    assert values["APP_SECRET"] == environment.app_secret == "gen32-1"
    assert values["INSTANCE_ID"] == "gen16-2"
    assert values["SHOPWARE_HTTP_CACHE_ENABLED"] == "0"
    assert values["COMPOSER_HOME"] == "/tmp/composer"


def test_install_env_file_reuses_secrets_from_previous_file(tmp_path: Path) -> None:
    """Keep previously generated secrets across restarts.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when a secret is regenerated.
    """

    AppEnvFileWriter(app_root=tmp_path, token_factory=_counting_token_factory("first")).env_write(
        endpoint=_endpoint(),
        app_env="dev",
        app_url="http://localhost",
    )

    def _failing_token_factory(byte_count: int) -> str:
        raise AssertionError(f"unexpected token generation for {byte_count} bytes")

    environment = AppEnvFileWriter(app_root=tmp_path, token_factory=_failing_token_factory).env_write(
        endpoint=_endpoint("changed"),
        app_env="dev",
        app_url="http://localhost",
    )

    assert environment.app_secret == "first32-1"
    assert environment.instance_id == "first16-2"
    assert dotenv_values(tmp_path / ".env")["DATABASE_URL"] == "mysql://root:changed@db:3306/shopware"


def test_install_env_file_supplied_secret_wins(tmp_path: Path) -> None:
    writer = AppEnvFileWriter(app_root=tmp_path, token_factory=_counting_token_factory("gen"))
    writer.env_write(endpoint=_endpoint(), app_env="dev", app_url="http://localhost")

    environment = writer.env_write(
        endpoint=_endpoint(),
        app_env="dev",
        app_url="http://localhost",
        app_secret="operator-secret",
    )

    assert environment.app_secret == "operator-secret"
    assert "operator-secret" not in repr(environment)


def test_install_env_file_is_readable_by_service_account(tmp_path: Path) -> None:
    AppEnvFileWriter(app_root=tmp_path).env_write(endpoint=_endpoint(), app_env="dev", app_url="http://x")

    assert (tmp_path / ".env").stat().st_mode & 0o044 == 0o044
