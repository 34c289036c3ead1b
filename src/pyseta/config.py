"""Service configuration for pyseta."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from pyseta._constants import (
    DEFAULT_CATALOG_INTERVAL,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_ROUTE_NUMBERS_INTERVAL,
)
from pyseta.exceptions import SetaConfigError

_DATA_DIR = Path(__file__).resolve().parent / "data"

DEFAULT_RULES_PATH = _DATA_DIR / "transformation_rules.json"
DEFAULT_STOP_ALIASES_PATH = _DATA_DIR / "stop_aliases.json"


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class SetaConfig:
    """Service configuration.

    Parameters
    ----------
    vehicles_url : str
        Vehicle map feed (GeoJSON feature collection).
    arrival_url : str
        Arrival feed base URL; the stop id is appended as a path segment.
    routes_url : str
        Route list feed (``{"routesdata": [{"linea": ...}]}``).
    host : str
        Interface the HTTP surface binds to.
    port : int
        Port the HTTP surface listens on.
    output_dir : Path
        Directory holding the catalog snapshots.
    rules_path : Path
        Normalization rules file. Defaults to the packaged file.
    stop_aliases_path : Path
        Stop code to friendly name table. Defaults to the packaged file.
    http_timeout : float
        Total timeout in seconds for a single upstream request.
    catalog_interval : float
        Seconds between stop list / route code refreshes.
    route_numbers_interval : float
        Seconds between route number refreshes.
    enable_api_routes : bool
        Mount the ``/api`` routes.
    enable_static_routes : bool
        Mount the ``/static`` snapshot routes.
    """

    vehicles_url: str
    arrival_url: str
    routes_url: str
    host: str = "0.0.0.0"
    port: int = 5001
    output_dir: Path = Path("output")
    rules_path: Path = DEFAULT_RULES_PATH
    stop_aliases_path: Path = DEFAULT_STOP_ALIASES_PATH
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    catalog_interval: float = DEFAULT_CATALOG_INTERVAL
    route_numbers_interval: float = DEFAULT_ROUTE_NUMBERS_INTERVAL
    enable_api_routes: bool = True
    enable_static_routes: bool = True

    def __post_init__(self) -> None:
        for name in ("vehicles_url", "arrival_url", "routes_url"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise SetaConfigError(f"{name} is required")
            if not value.startswith(("http://", "https://")):
                raise SetaConfigError(f"{name} must be an http(s) URL, got {value!r}")
        for name in ("http_timeout", "catalog_interval", "route_numbers_interval"):
            if getattr(self, name) <= 0:
                raise SetaConfigError(f"{name} must be > 0")
        if not 0 < self.port < 65536:
            raise SetaConfigError(f"port out of range: {self.port}")

    @classmethod
    def from_env(cls, **overrides: Any) -> SetaConfig:
        """Create configuration from environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "SETA_VEHICLES_URL": "vehicles_url",
            "SETA_ARRIVAL_URL": "arrival_url",
            "SETA_ROUTES_URL": "routes_url",
            "SETA_HOST": "host",
        }
        _ENV_PATH_MAP = {
            "SETA_OUTPUT_DIR": "output_dir",
            "SETA_RULES_PATH": "rules_path",
            "SETA_STOP_ALIASES_PATH": "stop_aliases_path",
        }
        _ENV_FLOAT_MAP = {
            "SETA_HTTP_TIMEOUT": "http_timeout",
            "SETA_CATALOG_INTERVAL": "catalog_interval",
            "SETA_ROUTE_NUMBERS_INTERVAL": "route_numbers_interval",
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val
        for env_key, field_name in _ENV_PATH_MAP.items():
            val = env.get(env_key)
            if val:
                config_kwargs[field_name] = Path(val)
        try:
            for env_key, field_name in _ENV_FLOAT_MAP.items():
                val = env.get(env_key)
                if val is not None and field_name not in overrides:
                    config_kwargs[field_name] = float(val)

            port_env = env.get("PORT")
            if port_env and "port" not in overrides:
                config_kwargs["port"] = int(port_env)
        except ValueError as exc:
            raise SetaConfigError(f"Invalid numeric environment value: {exc}") from exc

        if "enable_api_routes" not in overrides:
            config_kwargs["enable_api_routes"] = _env_bool(env.get("ENABLE_SETA_API_ROUTES"), True)
        if "enable_static_routes" not in overrides:
            config_kwargs["enable_static_routes"] = _env_bool(env.get("ENABLE_STATIC_FILE_ROUTES"), True)

        config_kwargs.update(overrides)

        for name in ("vehicles_url", "arrival_url", "routes_url"):
            config_kwargs.setdefault(name, "")

        return cls(**config_kwargs)
