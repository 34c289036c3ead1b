"""Rule engine: applies normalization and model rules to feed records.

The engine holds a reference to an immutable :class:`RuleStore` and no
per-call state, so one instance is shared by the request handlers and
the periodic catalog tasks.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeVar

from pyseta.models._base import MISSING, SetaRecord
from pyseta.models.arrival import ArrivalService
from pyseta.models.rules import (
    Condition,
    Contains,
    Equals,
    ExactModelRule,
    ModelRule,
    NormalizationRule,
    RangeModelRule,
    RuleStore,
    Scalar,
)
from pyseta.models.vehicle import VehicleRecord

TRecord = TypeVar("TRecord", bound=SetaRecord)


def _same_kind(actual: Any, expected: Scalar) -> bool:
    if isinstance(expected, bool) or isinstance(actual, bool):
        return isinstance(expected, bool) and isinstance(actual, bool)
    if isinstance(expected, str) or isinstance(actual, str):
        return isinstance(expected, str) and isinstance(actual, str)
    return isinstance(actual, (int, float)) and isinstance(expected, (int, float))


def _as_text(value: Scalar) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def condition_holds(record: SetaRecord, condition: Condition) -> bool:
    """Evaluate one condition. Absent fields never match."""
    actual = record.field_value(condition.field)
    if actual is MISSING:
        return False
    if isinstance(condition, Contains):
        return isinstance(actual, str) and bool(actual) and _as_text(condition.value) in actual
    if isinstance(condition, Equals):
        return _same_kind(actual, condition.value) and actual == condition.value
    return False


def matches(record: SetaRecord, rule: NormalizationRule) -> bool:
    return all(condition_holds(record, condition) for condition in rule.conditions)


def apply_rules(record: TRecord, rules: Iterable[NormalizationRule]) -> TRecord:
    """Apply every matching rule, in order, to *record* in place.

    Conditions see the mutations of earlier rules in the same pass.
    """
    for rule in rules:
        if not matches(record, rule):
            continue
        for setter in rule.mutations:
            setattr(record, setter.field, setter.value)
    return record


def match_model_rule(vehicle_code: int, rules: Iterable[ModelRule]) -> ModelRule | None:
    """Return the first rule covering *vehicle_code*."""
    for rule in rules:
        if isinstance(rule, RangeModelRule) and rule.matches(vehicle_code):
            return rule
        if isinstance(rule, ExactModelRule) and rule.matches(vehicle_code):
            return rule
    return None


def resolve_model(vehicle: VehicleRecord, rules: Iterable[ModelRule]) -> VehicleRecord:
    """Set model (and plate, when the rule has a prefix) from the first matching rule."""
    if vehicle.vehicle_code is None:
        return vehicle
    rule = match_model_rule(vehicle.vehicle_code, rules)
    if rule is None:
        return vehicle
    vehicle.model = rule.model
    if rule.plate_prefix:
        vehicle.plate_num = f"{rule.plate_prefix}{vehicle.vehicle_code}"
    return vehicle


class RuleEngine:
    """Applies a :class:`RuleStore` to arrival and vehicle records."""

    def __init__(self, rules: RuleStore) -> None:
        self._rules = rules

    @property
    def rules(self) -> RuleStore:
        return self._rules

    def transform_arrival(self, arrival: ArrivalService) -> ArrivalService:
        return apply_rules(arrival, self._rules.arrival_rules)

    def transform_vehicle(self, vehicle: VehicleRecord) -> VehicleRecord:
        apply_rules(vehicle, self._rules.vehicle_rules)
        return resolve_model(vehicle, self._rules.model_rules)

    def normalize_line(self, linea: str) -> str:
        """Run a bare line label through the vehicle rules."""
        placeholder = self.transform_vehicle(VehicleRecord.placeholder(linea))
        return placeholder.linea if placeholder.linea is not None else linea
