"""Normalization rule models.

The rules file stores conditions and mutations as flat mappings::

    {"conditions": {"linea": "7", "route_desc_includes": "OSPEDALE"},
     "mutations": {"linea": "7/"}}

On load they become explicit values:

* each condition key becomes an :class:`Equals` or, when the key ends in
  ``_includes``, a :class:`Contains` on the key without the suffix;
* each mutation key becomes a :class:`FieldSetter`.

Model rules are a sum type over :class:`RangeModelRule` and
:class:`ExactModelRule`, told apart by whether the entry carries a
``range`` or an ``exact`` key.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import Discriminator, Field, Tag, field_validator, model_validator

from pyseta._constants import INCLUDES_SUFFIX
from pyseta.models._base import SetaModel

Scalar = str | int | float | bool


class Equals(SetaModel):
    """Field is present and equal in value and kind."""

    op: Literal["equals"] = "equals"
    field: str
    value: Scalar


class Contains(SetaModel):
    """Field is present, textual, non-empty and contains ``value``."""

    op: Literal["contains"] = "contains"
    field: str
    value: Scalar


Condition = Annotated[Equals | Contains, Field(discriminator="op")]


class FieldSetter(SetaModel):
    field: str
    value: Scalar


def _parse_condition(selector: str, value: Any) -> dict[str, Any]:
    if selector.endswith(INCLUDES_SUFFIX) and len(selector) > len(INCLUDES_SUFFIX):
        return {"op": "contains", "field": selector[: -len(INCLUDES_SUFFIX)], "value": value}
    return {"op": "equals", "field": selector, "value": value}


class NormalizationRule(SetaModel):
    """A condition set paired with a mutation set.

    An empty condition set matches every record.
    """

    conditions: tuple[Condition, ...] = ()
    mutations: tuple[FieldSetter, ...] = ()

    @field_validator("conditions", mode="before")
    @classmethod
    def _conditions_from_mapping(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            nulls = sorted(str(k) for k, v in value.items() if v is None)
            if nulls:
                # None reads as absent, so a null condition could never match.
                raise ValueError(f"null condition values are not allowed: {', '.join(nulls)}")
            return [_parse_condition(str(k), v) for k, v in value.items()]
        return value

    @field_validator("mutations", mode="before")
    @classmethod
    def _mutations_from_mapping(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return [{"field": str(k), "value": v} for k, v in value.items()]
        return value


class RangeModelRule(SetaModel):
    """Matches vehicle codes in ``[low, high]`` (inclusive)."""

    bounds: tuple[int, int] = Field(alias="range")
    model: str
    plate_prefix: str | None = None

    def matches(self, vehicle_code: int) -> bool:
        low, high = self.bounds
        return low <= vehicle_code <= high


class ExactModelRule(SetaModel):
    """Matches one vehicle code."""

    value: int = Field(alias="exact")
    model: str
    plate_prefix: str | None = None

    def matches(self, vehicle_code: int) -> bool:
        return vehicle_code == self.value


def _model_rule_tag(value: Any) -> str | None:
    if isinstance(value, RangeModelRule):
        return "range"
    if isinstance(value, ExactModelRule):
        return "exact"
    if isinstance(value, Mapping):
        if "range" in value or "bounds" in value:
            return "range"
        if "exact" in value or "value" in value:
            return "exact"
    return None


ModelRule = Annotated[
    Annotated[RangeModelRule, Tag("range")] | Annotated[ExactModelRule, Tag("exact")],
    Discriminator(
        _model_rule_tag,
        custom_error_type="invalid_model_rule",
        custom_error_message="Model rule needs either a 'range' or an 'exact' key",
    ),
]


class RuleStore(SetaModel):
    """Immutable table of every rule pyseta applies.

    Built once at startup (see :func:`pyseta.rules.store.load_rule_store`)
    and handed to the rule engine by reference.
    """

    arrival_rules: tuple[NormalizationRule, ...] = ()
    vehicle_rules: tuple[NormalizationRule, ...] = Field(default=(), alias="bus_rules")
    model_rules: tuple[ModelRule, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _drop_null_sections(cls, values: Any) -> Any:
        if isinstance(values, Mapping):
            return {k: v for k, v in values.items() if v is not None}
        return values
