from __future__ import annotations

import threading
from typing import Any

import pytest

from pyseta._constants import ROUTE_CODES_SNAPSHOT, ROUTE_NUMBERS_SNAPSHOT, STOP_LIST_SNAPSHOT
from pyseta.config import SetaConfig
from pyseta.exceptions import SetaError, SetaTransportError
from pyseta.models.vehicle import VehicleFeatureCollection
from pyseta.reconcile.catalog import CatalogReconciler
from pyseta.rules.engine import RuleEngine
from pyseta.scheduler import TaskRunner
from pyseta.updater import CATALOG_TASK, ROUTE_NUMBERS_TASK, CatalogUpdater


class _FakeClient:
    def __init__(self, *, vehicles: Any = None, routes: Any = None) -> None:
        self._vehicles = vehicles
        self._routes = routes

    async def fetch_vehicle_feed(self) -> VehicleFeatureCollection:
        if isinstance(self._vehicles, Exception):
            raise self._vehicles
        return VehicleFeatureCollection.model_validate(self._vehicles)

    async def fetch_route_list(self) -> list[str]:
        if isinstance(self._routes, Exception):
            raise self._routes
        return list(self._routes)


_VEHICLES = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "properties": {
                "vehicle_code": 150,
                "linea": "7/",
                "reached_waypoint_code": "S1",
                "wp_desc": "GARIBALDI",
                "route_code": "728(1)",
            },
            "geometry": None,
        }
    ],
}


def _updater(client: _FakeClient, engine: RuleEngine, gateway) -> CatalogUpdater:
    return CatalogUpdater(client, CatalogReconciler(engine, gateway, {}))  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_stop_and_route_update_writes_catalogs(engine: RuleEngine, gateway) -> None:
    updater = _updater(_FakeClient(vehicles=_VEHICLES), engine, gateway)

    update = await updater.update_stop_and_route_data()

    assert update is not None
    assert update.stops_written and update.route_codes_written
    assert gateway.data[STOP_LIST_SNAPSHOT] == [{"stopName": "S1", "stopId": "GARIBALDI", "lines": ["7A"]}]
    assert gateway.data[ROUTE_CODES_SNAPSHOT] == [{"line": "7A", "codes": ["728(1)"]}]


@pytest.mark.asyncio
async def test_stop_and_route_update_second_run_is_noop(engine: RuleEngine, gateway) -> None:
    updater = _updater(_FakeClient(vehicles=_VEHICLES), engine, gateway)
    await updater.update_stop_and_route_data()

    update = await updater.update_stop_and_route_data()

    assert update is not None
    assert not update.stops_changed and not update.route_codes_changed
    assert gateway.writes == [STOP_LIST_SNAPSHOT, ROUTE_CODES_SNAPSHOT]


@pytest.mark.asyncio
async def test_fetch_failure_skips_tick(engine: RuleEngine, gateway, caplog: pytest.LogCaptureFixture) -> None:
    gateway.data[STOP_LIST_SNAPSHOT] = [{"stopName": "S1", "stopId": "Garibaldi", "lines": ["1"]}]
    updater = _updater(_FakeClient(vehicles=SetaTransportError("HTTP 503", status_code=503)), engine, gateway)

    assert await updater.update_stop_and_route_data() is None
    assert gateway.writes == []
    assert gateway.data[STOP_LIST_SNAPSHOT] == [{"stopName": "S1", "stopId": "Garibaldi", "lines": ["1"]}]
    assert "Failed to update stop and route data" in caplog.text


@pytest.mark.asyncio
async def test_route_numbers_update(engine: RuleEngine, gateway) -> None:
    updater = _updater(_FakeClient(routes=["10", "7/", "2"]), engine, gateway)

    assert await updater.update_route_numbers_list() is True
    assert gateway.data[ROUTE_NUMBERS_SNAPSHOT] == ["2", "7A", "10"]
    assert await updater.update_route_numbers_list() is False


@pytest.mark.asyncio
async def test_route_numbers_failure_skips_tick(engine: RuleEngine, gateway) -> None:
    updater = _updater(_FakeClient(routes=SetaError("down")), engine, gateway)

    assert await updater.update_route_numbers_list() is None
    assert gateway.writes == []


@pytest.mark.asyncio
async def test_run_all(engine: RuleEngine, gateway) -> None:
    updater = _updater(_FakeClient(vehicles=_VEHICLES, routes=["7A"]), engine, gateway)
    await updater.run_all()

    assert set(gateway.writes) == {STOP_LIST_SNAPSHOT, ROUTE_CODES_SNAPSHOT, ROUTE_NUMBERS_SNAPSHOT}


def test_schedule_registers_both_tasks(engine: RuleEngine, gateway, config: SetaConfig) -> None:
    runner = TaskRunner()
    _updater(_FakeClient(), engine, gateway).schedule(runner, config)

    assert [(t.name, t.interval) for t in runner.tasks] == [
        (CATALOG_TASK, 20.0),
        (ROUTE_NUMBERS_TASK, 8 * 3600.0),
    ]


class _ThreadRecordingGateway:
    def __init__(self) -> None:
        self.threads: set[int] = set()

    def load(self, name: str, default: Any) -> Any:
        self.threads.add(threading.get_ident())
        return default

    def save(self, name: str, data: Any) -> bool:
        self.threads.add(threading.get_ident())
        return True


@pytest.mark.asyncio
async def test_snapshot_io_runs_off_the_event_loop(engine: RuleEngine) -> None:
    gateway = _ThreadRecordingGateway()
    updater = _updater(_FakeClient(vehicles=_VEHICLES, routes=["7A"]), engine, gateway)

    await updater.run_all()

    assert gateway.threads
    assert threading.get_ident() not in gateway.threads
