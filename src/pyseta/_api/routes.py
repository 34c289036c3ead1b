"""Route list feed."""

from __future__ import annotations

from pyseta._api._common import get_model
from pyseta._transport import Transport
from pyseta.config import SetaConfig
from pyseta.models.routes import RouteList


async def fetch_route_list(config: SetaConfig, transport: Transport) -> list[str]:
    """Fetch the raw line labels of every route the operator runs."""
    routes = await get_model(transport, config.routes_url, RouteList)
    return routes.lines
