"""pyseta - Async normalizer and catalog builder for the SETA bus feeds."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyseta")
except PackageNotFoundError:
    __version__ = "0+local"
from pyseta.client import SetaClient
from pyseta.config import SetaConfig
from pyseta.exceptions import (
    SetaConfigError,
    SetaError,
    SetaFeedError,
    SetaRuleError,
    SetaTransportError,
)
from pyseta.models import (
    ArrivalResponse,
    ArrivalService,
    RouteCodesEntry,
    RuleStore,
    StopEntry,
    VehicleFeatureCollection,
    VehicleRecord,
)
from pyseta.persistence import JsonSnapshotStore
from pyseta.reconcile import CatalogReconciler, reconcile_arrivals
from pyseta.rules import RuleEngine, load_rule_store, load_stop_aliases
from pyseta.scheduler import TaskRunner

__all__ = [
    "__version__",
    "ArrivalResponse",
    "ArrivalService",
    "CatalogReconciler",
    "JsonSnapshotStore",
    "RouteCodesEntry",
    "RuleEngine",
    "RuleStore",
    "SetaClient",
    "SetaConfig",
    "SetaConfigError",
    "SetaError",
    "SetaFeedError",
    "SetaRuleError",
    "SetaTransportError",
    "StopEntry",
    "TaskRunner",
    "VehicleFeatureCollection",
    "VehicleRecord",
    "load_rule_store",
    "load_stop_aliases",
    "reconcile_arrivals",
]
