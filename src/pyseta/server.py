"""aiohttp web application exposing arrivals, buses and catalog snapshots."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping

from aiohttp import web

from pyseta._constants import (
    ROUTE_CODES_SNAPSHOT,
    ROUTE_NUMBERS_SNAPSHOT,
    STOP_LIST_SNAPSHOT,
    TEST_STOP_ID,
)
from pyseta.client import SetaClient
from pyseta.config import SetaConfig
from pyseta.persistence import JsonSnapshotStore
from pyseta.reconcile.catalog import CatalogReconciler
from pyseta.rules.engine import RuleEngine
from pyseta.rules.store import load_rule_store, load_stop_aliases
from pyseta.scheduler import TaskRunner
from pyseta.updater import CatalogUpdater

_logger = logging.getLogger(__name__)

CONFIG_KEY = web.AppKey("config", SetaConfig)
ENGINE_KEY = web.AppKey("engine", RuleEngine)
SNAPSHOTS_KEY = web.AppKey("snapshots", JsonSnapshotStore)
ALIASES_KEY = web.AppKey("aliases", Mapping)
CLIENT_KEY = web.AppKey("client", SetaClient)
RUNNER_KEY = web.AppKey("runner", TaskRunner)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Log failures and answer them as ``{"error": {"message": ...}}``."""
    try:
        return await handler(request)
    except web.HTTPException as exc:
        if exc.status < 400:
            raise
        _logger.info("%s %s -> %d", request.method, request.path, exc.status)
        return web.json_response({"error": {"message": exc.reason}}, status=exc.status)
    except Exception as exc:
        _logger.exception("Unhandled error on %s %s", request.method, request.path)
        return web.json_response({"error": {"message": str(exc) or "Something went wrong!"}}, status=500)


# ----------------------------------------------------------------------
# /api
# ----------------------------------------------------------------------


async def api_index(request: web.Request) -> web.Response:
    return web.json_response(
        {
            "message": "Seta Bus API",
            "routes": {
                "arrivals": "/api/arrivals/{stopId}",
                "busesInService": "/api/buses-in-service",
            },
        }
    )


async def get_arrivals(request: web.Request) -> web.Response:
    stop_id = request.match_info["stop_id"]
    if stop_id == TEST_STOP_ID:
        return web.json_response({"message": "Test successful"})
    response = await request.app[CLIENT_KEY].fetch_arrivals(stop_id)
    return web.json_response(response.to_payload())


async def get_buses_in_service(request: web.Request) -> web.Response:
    buses = await request.app[CLIENT_KEY].fetch_buses_in_service()
    return web.json_response(buses.to_payload())


# ----------------------------------------------------------------------
# /static
# ----------------------------------------------------------------------


async def static_index(request: web.Request) -> web.Response:
    return web.json_response(
        {
            "message": "Static Files API",
            "routes": {
                "routeCodes": "/static/route-codes",
                "routeNumbers": "/static/route-numbers",
                "stopList": "/static/stop-list",
            },
        }
    )


def _snapshot_handler(name: str) -> Handler:
    async def handler(request: web.Request) -> web.Response:
        data = await asyncio.to_thread(request.app[SNAPSHOTS_KEY].load, name, {})
        return web.json_response(data)

    return handler


# ----------------------------------------------------------------------
# Application
# ----------------------------------------------------------------------


async def _client_ctx(app: web.Application) -> AsyncIterator[None]:
    app[SNAPSHOTS_KEY].ensure_directory()
    async with SetaClient(app[CONFIG_KEY], app[ENGINE_KEY]) as client:
        app[CLIENT_KEY] = client
        yield


async def _scheduler_ctx(app: web.Application) -> AsyncIterator[None]:
    config = app[CONFIG_KEY]
    reconciler = CatalogReconciler(app[ENGINE_KEY], app[SNAPSHOTS_KEY], app[ALIASES_KEY])
    updater = CatalogUpdater(app[CLIENT_KEY], reconciler)
    runner = TaskRunner()
    updater.schedule(runner, config)
    app[RUNNER_KEY] = runner

    _logger.info("Initializing scheduled data updates...")
    task = asyncio.create_task(runner.run(), name="pyseta:scheduler")
    yield
    runner.stop()
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task


def create_app(
    config: SetaConfig,
    *,
    engine: RuleEngine | None = None,
    aliases: Mapping[str, str] | None = None,
    run_scheduler: bool = True,
) -> web.Application:
    """Build the web application.

    *engine* and *aliases* default to the tables named in *config*.
    """
    app = web.Application(middlewares=[error_middleware])
    app[CONFIG_KEY] = config
    app[ENGINE_KEY] = engine if engine is not None else RuleEngine(load_rule_store(config.rules_path))
    app[ALIASES_KEY] = aliases if aliases is not None else load_stop_aliases(config.stop_aliases_path)
    app[SNAPSHOTS_KEY] = JsonSnapshotStore(config.output_dir)

    app.cleanup_ctx.append(_client_ctx)
    if run_scheduler:
        app.cleanup_ctx.append(_scheduler_ctx)

    if config.enable_api_routes:
        app.router.add_get("/api", api_index)
        app.router.add_get("/api/arrivals/{stop_id}", get_arrivals)
        app.router.add_get("/api/buses-in-service", get_buses_in_service)

    if config.enable_static_routes:
        app.router.add_get("/static", static_index)
        app.router.add_get("/static/route-codes", _snapshot_handler(ROUTE_CODES_SNAPSHOT))
        app.router.add_get("/static/route-numbers", _snapshot_handler(ROUTE_NUMBERS_SNAPSHOT))
        app.router.add_get("/static/stop-list", _snapshot_handler(STOP_LIST_SNAPSHOT))

    return app
