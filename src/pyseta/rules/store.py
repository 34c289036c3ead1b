"""Loading of the static tables: normalization rules and stop aliases.

Both are read once at startup. Mutation targets are checked against the
record schema here so a typo in the rules file fails the boot instead of
silently adding a field nobody reads. Equality conditions on declared
fields are coerced the same way the feed records are, so ``{"linea": 7}``
matches a feed that sends the line as a number.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from pydantic import ConfigDict, TypeAdapter, ValidationError

from pyseta.exceptions import SetaRuleError
from pyseta.models._base import SetaRecord
from pyseta.models.arrival import ArrivalService
from pyseta.models.rules import Condition, Equals, FieldSetter, NormalizationRule, RuleStore
from pyseta.models.vehicle import VehicleRecord

_logger = logging.getLogger(__name__)

_COERCE_CONFIG = ConfigDict(coerce_numbers_to_str=True)


def _coerce_setter(record_cls: type[SetaRecord], setter: FieldSetter, where: str) -> FieldSetter:
    field_info = record_cls.model_fields.get(setter.field)
    if field_info is None:
        known = ", ".join(sorted(record_cls.schema_fields()))
        raise SetaRuleError(f"{where}: unknown mutation field {setter.field!r} (known: {known})")
    adapter: TypeAdapter[Any] = TypeAdapter(field_info.annotation, config=_COERCE_CONFIG)
    try:
        value = adapter.validate_python(setter.value)
    except ValidationError as exc:
        raise SetaRuleError(f"{where}: invalid value {setter.value!r} for {setter.field!r}: {exc}") from exc
    if value == setter.value and type(value) is type(setter.value):
        return setter
    return FieldSetter(field=setter.field, value=value)


def _coerce_condition(record_cls: type[SetaRecord], condition: Condition, where: str) -> Condition:
    field_info = record_cls.model_fields.get(condition.field)
    # Extra upstream keys are not coerced; bools never equal a declared field.
    if not isinstance(condition, Equals) or field_info is None or isinstance(condition.value, bool):
        return condition
    adapter: TypeAdapter[Any] = TypeAdapter(field_info.annotation, config=_COERCE_CONFIG)
    try:
        value = adapter.validate_python(condition.value)
    except ValidationError as exc:
        raise SetaRuleError(
            f"{where}: condition value {condition.value!r} can never match field {condition.field!r}: {exc}"
        ) from exc
    if value == condition.value and type(value) is type(condition.value):
        return condition
    return Equals(field=condition.field, value=value)


def _checked_rules(
    record_cls: type[SetaRecord],
    rules: tuple[NormalizationRule, ...],
    section: str,
) -> tuple[NormalizationRule, ...]:
    checked: list[NormalizationRule] = []
    for index, rule in enumerate(rules):
        where = f"{section}[{index}]"
        conditions = tuple(_coerce_condition(record_cls, condition, where) for condition in rule.conditions)
        mutations = tuple(_coerce_setter(record_cls, setter, where) for setter in rule.mutations)
        checked.append(rule.model_copy(update={"conditions": conditions, "mutations": mutations}))
    return tuple(checked)


def build_rule_store(data: Mapping[str, Any]) -> RuleStore:
    """Validate a decoded rules document into a :class:`RuleStore`."""
    try:
        store = RuleStore.model_validate(data)
    except ValidationError as exc:
        raise SetaRuleError(f"Invalid rules document: {exc}") from exc

    return store.model_copy(
        update={
            "arrival_rules": _checked_rules(ArrivalService, store.arrival_rules, "arrival_rules"),
            "vehicle_rules": _checked_rules(VehicleRecord, store.vehicle_rules, "bus_rules"),
        }
    )


def load_rule_store(path: str | Path) -> RuleStore:
    """Read and validate the rules file at *path*."""
    p = Path(path)
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise SetaRuleError(f"Rules file not found: {p.resolve()}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise SetaRuleError(f"Could not read rules file {p}: {exc}") from exc
    if not isinstance(raw, dict):
        raise SetaRuleError(f"Rules file {p} must contain a JSON object")

    store = build_rule_store(raw)
    _logger.info(
        "Loaded %d arrival rules, %d vehicle rules, %d model rules from %s",
        len(store.arrival_rules),
        len(store.vehicle_rules),
        len(store.model_rules),
        p,
    )
    return store


def load_stop_aliases(path: str | Path) -> Mapping[str, str]:
    """Read the stop code to friendly name table. A missing file means no aliases."""
    p = Path(path)
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError:
        _logger.warning("Stop alias table %s not found; using observed stop names", p)
        return MappingProxyType({})
    except (OSError, json.JSONDecodeError) as exc:
        raise SetaRuleError(f"Could not read stop alias table {p}: {exc}") from exc
    if not isinstance(raw, dict):
        raise SetaRuleError(f"Stop alias table {p} must contain a JSON object")
    return MappingProxyType({str(code): str(name) for code, name in raw.items()})
