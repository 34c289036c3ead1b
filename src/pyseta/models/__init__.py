"""Pydantic models for feed records, catalog entries and rules."""

from pyseta.models.arrival import ArrivalBoard, ArrivalKind, ArrivalResponse, ArrivalService
from pyseta.models.catalog import RouteCodesEntry, StopEntry
from pyseta.models.rules import (
    Contains,
    Equals,
    ExactModelRule,
    FieldSetter,
    ModelRule,
    NormalizationRule,
    RangeModelRule,
    RuleStore,
)
from pyseta.models.vehicle import VehicleFeature, VehicleFeatureCollection, VehicleRecord

__all__ = [
    "ArrivalBoard",
    "ArrivalKind",
    "ArrivalResponse",
    "ArrivalService",
    "Contains",
    "Equals",
    "ExactModelRule",
    "FieldSetter",
    "ModelRule",
    "NormalizationRule",
    "RangeModelRule",
    "RouteCodesEntry",
    "RuleStore",
    "StopEntry",
    "VehicleFeature",
    "VehicleFeatureCollection",
    "VehicleRecord",
]
