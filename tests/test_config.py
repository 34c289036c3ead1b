from __future__ import annotations

from pathlib import Path

import pytest

from pyseta.config import DEFAULT_RULES_PATH, SetaConfig
from pyseta.exceptions import SetaConfigError

_URLS = {
    "SETA_VEHICLES_URL": "https://seta.test/vehicles/map",
    "SETA_ARRIVAL_URL": "https://seta.test/arrival",
    "SETA_ROUTES_URL": "https://seta.test/routes",
}


@pytest.fixture
def seta_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for key in (
        "PORT",
        "SETA_HOST",
        "SETA_OUTPUT_DIR",
        "SETA_RULES_PATH",
        "SETA_STOP_ALIASES_PATH",
        "SETA_HTTP_TIMEOUT",
        "SETA_CATALOG_INTERVAL",
        "SETA_ROUTE_NUMBERS_INTERVAL",
        "ENABLE_SETA_API_ROUTES",
        "ENABLE_STATIC_FILE_ROUTES",
    ):
        monkeypatch.delenv(key, raising=False)
    for key, value in _URLS.items():
        monkeypatch.setenv(key, value)
    return monkeypatch


def test_from_env_defaults(seta_env: pytest.MonkeyPatch) -> None:
    config = SetaConfig.from_env()

    assert config.vehicles_url == "https://seta.test/vehicles/map"
    assert config.port == 5001
    assert config.output_dir == Path("output")
    assert config.rules_path == DEFAULT_RULES_PATH
    assert config.catalog_interval == 20.0
    assert config.route_numbers_interval == 8 * 3600.0
    assert config.enable_api_routes and config.enable_static_routes


def test_from_env_reads_values(seta_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    seta_env.setenv("PORT", "8080")
    seta_env.setenv("SETA_OUTPUT_DIR", str(tmp_path))
    seta_env.setenv("SETA_CATALOG_INTERVAL", "60")
    seta_env.setenv("ENABLE_SETA_API_ROUTES", "false")
    seta_env.setenv("ENABLE_STATIC_FILE_ROUTES", "0")

    config = SetaConfig.from_env()

    assert config.port == 8080
    assert config.output_dir == tmp_path
    assert config.catalog_interval == 60.0
    assert not config.enable_api_routes
    assert not config.enable_static_routes


def test_unrecognized_bool_falls_back_to_default(seta_env: pytest.MonkeyPatch) -> None:
    seta_env.setenv("ENABLE_SETA_API_ROUTES", "maybe")
    assert SetaConfig.from_env().enable_api_routes is True


def test_overrides_win_over_env(seta_env: pytest.MonkeyPatch) -> None:
    seta_env.setenv("PORT", "8080")
    config = SetaConfig.from_env(port=9000, host="127.0.0.1")

    assert config.port == 9000
    assert config.host == "127.0.0.1"


def test_missing_url_is_rejected(seta_env: pytest.MonkeyPatch) -> None:
    seta_env.delenv("SETA_ROUTES_URL")
    with pytest.raises(SetaConfigError, match="routes_url is required"):
        SetaConfig.from_env()


def test_non_http_url_is_rejected(seta_env: pytest.MonkeyPatch) -> None:
    seta_env.setenv("SETA_ARRIVAL_URL", "ftp://seta.test/arrival")
    with pytest.raises(SetaConfigError, match="arrival_url"):
        SetaConfig.from_env()


def test_non_numeric_env_is_rejected(seta_env: pytest.MonkeyPatch) -> None:
    seta_env.setenv("SETA_HTTP_TIMEOUT", "soon")
    with pytest.raises(SetaConfigError, match="Invalid numeric"):
        SetaConfig.from_env()


@pytest.mark.parametrize("field", ["http_timeout", "catalog_interval", "route_numbers_interval"])
def test_non_positive_durations_are_rejected(seta_env: pytest.MonkeyPatch, field: str) -> None:
    with pytest.raises(SetaConfigError, match=field):
        SetaConfig.from_env(**{field: 0})


def test_port_range(seta_env: pytest.MonkeyPatch) -> None:
    with pytest.raises(SetaConfigError, match="port"):
        SetaConfig.from_env(port=70000)
