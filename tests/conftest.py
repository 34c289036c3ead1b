from __future__ import annotations

import copy
from typing import Any

import pytest

from pyseta.config import SetaConfig
from pyseta.rules.engine import RuleEngine
from pyseta.rules.store import build_rule_store


class MemoryGateway:
    """In-memory snapshot gateway recording every write."""

    def __init__(self, initial: dict[str, Any] | None = None, *, fail_writes: bool = False) -> None:
        self.data: dict[str, Any] = copy.deepcopy(initial or {})
        self.writes: list[str] = []
        self.fail_writes = fail_writes

    def load(self, name: str, default: Any) -> Any:
        return copy.deepcopy(self.data.get(name, default))

    def save(self, name: str, data: Any) -> bool:
        if self.fail_writes:
            return False
        self.data[name] = copy.deepcopy(data)
        self.writes.append(name)
        return True


@pytest.fixture
def config(tmp_path) -> SetaConfig:
    return SetaConfig(
        vehicles_url="https://seta.test/vehicles/map",
        arrival_url="https://seta.test/arrival",
        routes_url="https://seta.test/routes",
        output_dir=tmp_path / "output",
    )


@pytest.fixture
def engine() -> RuleEngine:
    return RuleEngine(
        build_rule_store(
            {
                "arrival_rules": [
                    {"conditions": {"service": "7"}, "mutations": {"service": "7A"}},
                ],
                "bus_rules": [
                    {"conditions": {"linea": "7/"}, "mutations": {"linea": "7A"}},
                    {"conditions": {"route_desc_includes": "NAVETTA"}, "mutations": {"linea": "NAV"}},
                ],
                "model_rules": [
                    {"range": [100, 199], "model": "Citaro", "plate_prefix": "MO"},
                    {"exact": 250, "model": "Urbino"},
                ],
            }
        )
    )


@pytest.fixture
def gateway() -> MemoryGateway:
    return MemoryGateway()
