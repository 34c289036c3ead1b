"""Arrival feed."""

from __future__ import annotations

from urllib.parse import quote

from pyseta._api._common import get_model
from pyseta._transport import Transport
from pyseta.config import SetaConfig
from pyseta.models.arrival import ArrivalResponse


def arrival_url(config: SetaConfig, stop_id: str) -> str:
    return f"{config.arrival_url.rstrip('/')}/{quote(stop_id, safe='')}"


async def fetch_arrival_board(config: SetaConfig, transport: Transport, stop_id: str) -> ArrivalResponse:
    """Fetch and parse the raw (unreconciled) arrivals of one stop."""
    return await get_model(transport, arrival_url(config, stop_id), ArrivalResponse)
