"""Scheduled refresh of the stop, route code and route number catalogs."""

from __future__ import annotations

import asyncio
import logging

from pyseta.client import SetaClient
from pyseta.config import SetaConfig
from pyseta.exceptions import SetaError
from pyseta.reconcile.catalog import CatalogReconciler, CatalogUpdate
from pyseta.scheduler import TaskRunner

_logger = logging.getLogger(__name__)

CATALOG_TASK = "stop-and-route-data"
ROUTE_NUMBERS_TASK = "route-numbers"


class CatalogUpdater:
    """Fetches the feeds and hands them to the :class:`CatalogReconciler`.

    A failed fetch skips the whole tick; the next tick starts from scratch.
    Snapshot reads and writes run in a worker thread.
    """

    def __init__(self, client: SetaClient, reconciler: CatalogReconciler) -> None:
        self._client = client
        self._reconciler = reconciler

    async def update_stop_and_route_data(self) -> CatalogUpdate | None:
        """Merge the current vehicle snapshot into the stop list and route codes."""
        _logger.info("Updating stop list and route codes...")
        try:
            collection = await self._client.fetch_vehicle_feed()
        except SetaError as exc:
            _logger.error("Failed to update stop and route data: %s", exc)
            return None

        vehicles = [feature.properties for feature in collection.features]
        update = await asyncio.to_thread(self._reconciler.reconcile_vehicles, vehicles)
        if update.stops_changed or update.route_codes_changed:
            _logger.info(
                "Stop list and route codes updated (stops=%s, route codes=%s)",
                update.stops_written,
                update.route_codes_written,
            )
        else:
            _logger.info("Stop list and route codes are already up-to-date")
        return update

    async def update_route_numbers_list(self) -> bool | None:
        """Merge the route list feed into the route numbers catalog.

        Returns whether the catalog grew, or ``None`` when the tick was skipped.
        """
        _logger.info("Updating route numbers list...")
        try:
            raw_lines = await self._client.fetch_route_list()
        except SetaError as exc:
            _logger.error("Failed to update route numbers list: %s", exc)
            return None

        result = await asyncio.to_thread(self._reconciler.reconcile_route_numbers, raw_lines)
        if result.changed:
            _logger.info("Route numbers list updated (%d routes)", len(result.entries))
        else:
            _logger.info("Route numbers list is already up-to-date")
        return result.changed

    async def run_all(self) -> None:
        await self.update_stop_and_route_data()
        await self.update_route_numbers_list()

    def schedule(self, runner: TaskRunner, config: SetaConfig) -> None:
        """Register both refreshes; each also runs once as soon as the runner starts."""
        runner.add(CATALOG_TASK, config.catalog_interval, self.update_stop_and_route_data)
        runner.add(ROUTE_NUMBERS_TASK, config.route_numbers_interval, self.update_route_numbers_list)
