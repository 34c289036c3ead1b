"""Arrival deduplication and delay computation for a single stop."""

from __future__ import annotations

import logging

from pyseta.models.arrival import ArrivalService
from pyseta.rules.engine import RuleEngine

_logger = logging.getLogger(__name__)


def minutes_of_day(clock: str) -> int:
    """Parse ``"HH:MM"`` into minutes since midnight.

    Raises ``ValueError`` on anything that is not two integer fields.
    """
    hour_text, minute_text = clock.strip().split(":")
    return int(hour_text) * 60 + int(minute_text)


def compute_delay(planned: str, realtime: str) -> int:
    """Realtime minus planned, in minutes.

    No day rollover: ``("23:55", "00:05")`` gives ``-1430``.
    """
    return minutes_of_day(realtime) - minutes_of_day(planned)


def reconcile_arrivals(services: list[ArrivalService], engine: RuleEngine) -> list[ArrivalService]:
    """Normalize, deduplicate and annotate the arrivals of one stop.

    1. arrival rules are applied to every record in place;
    2. the last planned and the last realtime record per trip id are indexed;
    3. planned records are dropped when a realtime record shares their trip id;
    4. each kept realtime record with a planned counterpart gets ``delay``.

    Input order is preserved for the records that survive.
    """
    for service in services:
        engine.transform_arrival(service)

    planned_by_trip: dict[str | None, ArrivalService] = {}
    realtime_by_trip: dict[str | None, ArrivalService] = {}
    for service in services:
        if service.is_planned:
            planned_by_trip[service.codice_corsa] = service
        if service.is_realtime:
            realtime_by_trip[service.codice_corsa] = service

    kept = [s for s in services if s.is_realtime or s.codice_corsa not in realtime_by_trip]

    for service in kept:
        if not service.is_realtime:
            continue
        planned = planned_by_trip.get(service.codice_corsa)
        if planned is None or planned.arrival is None or service.arrival is None:
            continue
        try:
            service.delay = compute_delay(planned.arrival, service.arrival)
        except ValueError:
            _logger.debug(
                "Unparseable arrival time for trip %s: planned=%r realtime=%r",
                service.codice_corsa,
                planned.arrival,
                service.arrival,
            )

    return kept
