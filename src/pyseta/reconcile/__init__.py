"""Reconciliation of normalized feed records.

Arrivals are reconciled per request, entirely in memory. Catalogs are
reconciled per scheduler tick against persisted snapshots.
"""

from pyseta.reconcile.arrivals import compute_delay, reconcile_arrivals
from pyseta.reconcile.catalog import (
    CatalogReconciler,
    CatalogUpdate,
    derive_observations,
    merge_route_codes,
    merge_route_numbers,
    merge_stops,
)

__all__ = [
    "CatalogReconciler",
    "CatalogUpdate",
    "compute_delay",
    "derive_observations",
    "merge_route_codes",
    "merge_route_numbers",
    "merge_stops",
    "reconcile_arrivals",
]
