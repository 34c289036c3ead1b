"""Vehicle map feed."""

from __future__ import annotations

from pyseta._api._common import get_model
from pyseta._transport import Transport
from pyseta.config import SetaConfig
from pyseta.models.vehicle import VehicleFeatureCollection


async def fetch_vehicle_feed(config: SetaConfig, transport: Transport) -> VehicleFeatureCollection:
    """Fetch and parse every vehicle currently in service."""
    return await get_model(transport, config.vehicles_url, VehicleFeatureCollection)
