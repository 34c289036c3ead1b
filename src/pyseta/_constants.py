"""Shared constants."""

from __future__ import annotations

USER_AGENT = "pyseta/0.1 (+aiohttp)"

#: Suffix on a condition selector that turns it into a substring match.
INCLUDES_SUFFIX = "_includes"

#: Error marker returned to callers when arrivals cannot be produced.
NO_ARRIVALS_ERROR = "no arrivals scheduled in next 90 minutes or API error"

#: Stop id answered with a canned payload (connectivity check).
TEST_STOP_ID = "test"

# Snapshot file names inside the output directory.
STOP_LIST_SNAPSHOT = "stop-list.json"
ROUTE_CODES_SNAPSHOT = "route-codes.json"
ROUTE_NUMBERS_SNAPSHOT = "route-numbers.json"

DEFAULT_CATALOG_INTERVAL: float = 20.0
DEFAULT_ROUTE_NUMBERS_INTERVAL: float = 8 * 3600.0
DEFAULT_HTTP_TIMEOUT: float = 10.0
