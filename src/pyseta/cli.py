"""Command line entry point.

Usage
-----
Set the feed URLs and run::

    export SETA_VEHICLES_URL="https://..."
    export SETA_ARRIVAL_URL="https://..."
    export SETA_ROUTES_URL="https://..."
    python -m pyseta serve

Commands::

    serve               Run the HTTP API and the scheduled catalog updates (default)
    update              Run both catalog updates once and exit

Options::

    --host HOST         Bind address (overrides SETA_HOST)
    --port PORT         Listen port (overrides PORT)
    --output-dir DIR    Snapshot directory (overrides SETA_OUTPUT_DIR)
    --log-level LEVEL   DEBUG, INFO, WARNING or ERROR (default: INFO)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

from aiohttp import web

from pyseta.client import SetaClient
from pyseta.config import SetaConfig
from pyseta.exceptions import SetaConfigError, SetaRuleError
from pyseta.persistence import JsonSnapshotStore
from pyseta.reconcile.catalog import CatalogReconciler
from pyseta.rules.engine import RuleEngine
from pyseta.rules.store import load_rule_store, load_stop_aliases
from pyseta.server import create_app
from pyseta.updater import CatalogUpdater

_logger = logging.getLogger("pyseta")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pyseta", description="SETA bus feed normalizer and catalog builder")
    parser.add_argument("command", nargs="?", choices=("serve", "update"), default="serve")
    parser.add_argument("--host", help="Bind address")
    parser.add_argument("--port", type=int, help="Listen port")
    parser.add_argument("--output-dir", type=Path, help="Snapshot directory")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Root log level",
    )
    return parser


def _config_from_args(args: argparse.Namespace) -> SetaConfig:
    overrides: dict[str, Any] = {}
    if args.host:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.output_dir is not None:
        overrides["output_dir"] = args.output_dir
    return SetaConfig.from_env(**overrides)


async def _update_once(config: SetaConfig) -> None:
    engine = RuleEngine(load_rule_store(config.rules_path))
    aliases = load_stop_aliases(config.stop_aliases_path)
    snapshots = JsonSnapshotStore(config.output_dir)
    snapshots.ensure_directory()

    async with SetaClient(config, engine) as client:
        updater = CatalogUpdater(client, CatalogReconciler(engine, snapshots, aliases))
        await updater.run_all()


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _config_from_args(args)
        if args.command == "update":
            asyncio.run(_update_once(config))
            return 0
        app = create_app(config)
    except (SetaConfigError, SetaRuleError) as exc:
        _logger.error("Failed to bootstrap the application: %s", exc)
        return 1

    _logger.info("API active on http://%s:%d", config.host, config.port)
    web.run_app(app, host=config.host, port=config.port, print=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
