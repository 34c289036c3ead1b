"""High-level async client for the SETA bus feeds."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from pyseta._api.arrivals import fetch_arrival_board
from pyseta._api.routes import fetch_route_list
from pyseta._api.vehicles import fetch_vehicle_feed
from pyseta._constants import NO_ARRIVALS_ERROR
from pyseta._transport import HttpTransport
from pyseta.config import SetaConfig
from pyseta.exceptions import SetaError
from pyseta.models.arrival import ArrivalResponse
from pyseta.models.vehicle import VehicleFeatureCollection
from pyseta.reconcile.arrivals import reconcile_arrivals
from pyseta.reconcile.ordering import leading_number, text_key
from pyseta.rules.engine import RuleEngine

_logger = logging.getLogger(__name__)


class SetaClient:
    """Async client for the SETA feeds.

    Usage::

        async with SetaClient(config, engine) as client:
            arrivals = await client.fetch_arrivals("MO123")
    """

    def __init__(
        self,
        config: SetaConfig,
        engine: RuleEngine,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config
        self._engine = engine
        self._external_session = session is not None
        self._http_session = session
        self._transport: HttpTransport | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> SetaClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(self._http_session, timeout=self._config.http_timeout)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    @property
    def engine(self) -> RuleEngine:
        return self._engine

    def _require_transport(self) -> HttpTransport:
        if self._transport is None:
            raise SetaError("Client not initialized. Use 'async with SetaClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Per-request reads
    # ------------------------------------------------------------------

    async def fetch_arrivals(self, stop_id: str) -> ArrivalResponse:
        """Reconciled arrivals for *stop_id*.

        Never raises for upstream problems: the caller gets an empty
        service list tagged with an error marker instead.
        """
        try:
            response = await fetch_arrival_board(self._config, self._require_transport(), stop_id)
        except SetaError as exc:
            _logger.error("Error fetching arrivals for stop %s: %s", stop_id, exc)
            return ArrivalResponse.degraded(NO_ARRIVALS_ERROR)

        board = response.arrival
        if board.error or not board.services:
            return response

        board.services = reconcile_arrivals(board.services, self._engine)
        return response

    async def fetch_buses_in_service(self) -> VehicleFeatureCollection:
        """Normalized vehicles in service, ordered by line number."""
        try:
            collection = await self.fetch_vehicle_feed()
        except SetaError as exc:
            _logger.error("Error fetching buses in service: %s", exc)
            raise SetaError("Could not fetch buses in service") from exc

        for feature in collection.features:
            self._engine.transform_vehicle(feature.properties)

        collection.features.sort(
            key=lambda f: (leading_number(f.properties.linea), text_key(f.properties.linea or ""))
        )
        return collection

    # ------------------------------------------------------------------
    # Raw feeds (catalog path)
    # ------------------------------------------------------------------

    async def fetch_vehicle_feed(self) -> VehicleFeatureCollection:
        return await fetch_vehicle_feed(self._config, self._require_transport())

    async def fetch_route_list(self) -> list[str]:
        return await fetch_route_list(self._config, self._require_transport())
