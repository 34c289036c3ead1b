"""Incremental merge of vehicle observations into the persisted catalogs.

Three independent catalogs are kept:

* stop list: stop code -> display name + lines serving the stop
* route codes: line label -> route variant codes
* route numbers: every line label ever seen on the route list feed

Every merge is a union. Entries are never removed, and a catalog is only
written back when the union actually grew, so a rerun over identical
input performs no write at all.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from pyseta._constants import ROUTE_CODES_SNAPSHOT, ROUTE_NUMBERS_SNAPSHOT, STOP_LIST_SNAPSHOT
from pyseta.models.catalog import (
    ROUTE_CODES_ADAPTER,
    ROUTE_NUMBERS_ADAPTER,
    STOP_LIST_ADAPTER,
    RouteCodesEntry,
    StopEntry,
)
from pyseta.models.vehicle import VehicleRecord
from pyseta.persistence import SnapshotGateway
from pyseta.reconcile.ordering import natural_key, sort_natural, text_key
from pyseta.rules.engine import RuleEngine

_logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ObservedStop:
    name: str
    lines: set[str] = field(default_factory=set)


@dataclass
class Observations:
    """Facts derived from one snapshot of vehicle observations."""

    stops: dict[str, ObservedStop] = field(default_factory=dict)
    routes: dict[str, set[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class MergeResult(Generic[T]):
    entries: T
    changed: bool


@dataclass(frozen=True)
class CatalogUpdate:
    """Outcome of one vehicle reconciliation tick."""

    stops_changed: bool = False
    route_codes_changed: bool = False
    stops_written: bool = False
    route_codes_written: bool = False


def derive_observations(vehicles: Iterable[VehicleRecord], aliases: Mapping[str, str]) -> Observations:
    """Collect stop and route facts from already-normalized vehicles.

    A stop is recorded when the vehicle carries both a waypoint code and a
    description; its display name comes from *aliases* when listed there,
    otherwise from the first description seen in this snapshot.
    """
    observations = Observations()
    for vehicle in vehicles:
        stop_code = vehicle.reached_waypoint_code
        stop_name = vehicle.wp_desc
        line = vehicle.linea
        route_code = vehicle.route_code

        if stop_code and stop_name:
            stop = observations.stops.get(stop_code)
            if stop is None:
                # Unaliased stops take the waypoint description, not the bare stop code.
                stop = ObservedStop(name=aliases.get(stop_code) or stop_name)
                observations.stops[stop_code] = stop
            if line:
                stop.lines.add(line)

        if line and route_code:
            observations.routes.setdefault(line, set()).add(route_code)
    return observations


def merge_stops(persisted: Iterable[StopEntry], observed: Mapping[str, ObservedStop]) -> MergeResult[list[StopEntry]]:
    by_code = {entry.code: entry for entry in persisted}
    changed = False

    for code, stop in observed.items():
        existing = by_code.get(code)
        if existing is None:
            by_code[code] = StopEntry(code=code, name=stop.name, lines=tuple(sort_natural(stop.lines)))
            changed = True
            continue
        known = set(existing.lines)
        if stop.lines <= known:
            continue
        by_code[code] = existing.model_copy(update={"lines": tuple(sort_natural(known | stop.lines))})
        changed = True

    entries = sorted(by_code.values(), key=lambda e: (text_key(e.name), e.code))
    return MergeResult(entries=entries, changed=changed)


def merge_route_codes(
    persisted: Iterable[RouteCodesEntry],
    observed: Mapping[str, set[str]],
) -> MergeResult[list[RouteCodesEntry]]:
    by_line: dict[str, set[str]] = {}
    for entry in persisted:
        by_line.setdefault(entry.line, set()).update(entry.codes)
    changed = False

    for line, codes in observed.items():
        existing = by_line.get(line)
        if existing is None:
            by_line[line] = set(codes)
            changed = True
        elif not codes <= existing:
            existing.update(codes)
            changed = True

    entries = [
        RouteCodesEntry(line=line, codes=tuple(sorted(codes)))
        for line, codes in sorted(by_line.items(), key=lambda item: natural_key(item[0]))
    ]
    return MergeResult(entries=entries, changed=changed)


def merge_route_numbers(persisted: Iterable[str], observed: Iterable[str]) -> MergeResult[list[str]]:
    known = set(persisted)
    before = len(known)
    known.update(observed)
    return MergeResult(entries=sort_natural(known), changed=len(known) > before)


class CatalogReconciler:
    """Read-modify-write of the catalog snapshots through a gateway.

    Not safe against concurrent runs of the same method; callers schedule
    it through a single-flight task (see :mod:`pyseta.scheduler`).
    """

    def __init__(
        self,
        engine: RuleEngine,
        gateway: SnapshotGateway,
        aliases: Mapping[str, str],
    ) -> None:
        self._engine = engine
        self._gateway = gateway
        self._aliases = aliases

    def _load(self, name: str, adapter: TypeAdapter[list[Any]]) -> list[Any]:
        raw = self._gateway.load(name, [])
        try:
            return adapter.validate_python(raw)
        except ValidationError as exc:
            _logger.error("Snapshot %s has an unexpected shape, treating it as empty: %s", name, exc)
            return []

    def _save(self, name: str, adapter: TypeAdapter[list[Any]], entries: list[Any]) -> bool:
        return self._gateway.save(name, adapter.dump_python(entries, mode="json", by_alias=True))

    def reconcile_vehicles(self, vehicles: list[VehicleRecord]) -> CatalogUpdate:
        """Normalize *vehicles* in place and fold them into stops and route codes."""
        for vehicle in vehicles:
            self._engine.transform_vehicle(vehicle)
        observations = derive_observations(vehicles, self._aliases)

        stops = merge_stops(self._load(STOP_LIST_SNAPSHOT, STOP_LIST_ADAPTER), observations.stops)
        stops_written = stops.changed and self._save(STOP_LIST_SNAPSHOT, STOP_LIST_ADAPTER, stops.entries)

        routes = merge_route_codes(self._load(ROUTE_CODES_SNAPSHOT, ROUTE_CODES_ADAPTER), observations.routes)
        routes_written = routes.changed and self._save(ROUTE_CODES_SNAPSHOT, ROUTE_CODES_ADAPTER, routes.entries)

        return CatalogUpdate(
            stops_changed=stops.changed,
            route_codes_changed=routes.changed,
            stops_written=stops_written,
            route_codes_written=routes_written,
        )

    def reconcile_route_numbers(self, raw_lines: Iterable[str]) -> MergeResult[list[str]]:
        """Normalize raw line labels through the vehicle rules and merge them."""
        normalized = [self._engine.normalize_line(line) for line in raw_lines]
        result = merge_route_numbers(self._load(ROUTE_NUMBERS_SNAPSHOT, ROUTE_NUMBERS_ADAPTER), normalized)
        if result.changed and not self._save(ROUTE_NUMBERS_SNAPSHOT, ROUTE_NUMBERS_ADAPTER, result.entries):
            _logger.warning("Route numbers merged but not persisted; next refresh will retry")
        return result
