"""Persisted catalog entries.

Snapshot keys follow the format already stored on disk: a stop entry
keeps its stop code under ``stopName`` and its display name under
``stopId``.
"""

from __future__ import annotations

from pydantic import AliasChoices, Field, TypeAdapter

from pyseta.models._base import SetaModel


class StopEntry(SetaModel):
    """A known stop and the lines observed serving it."""

    code: str = Field(validation_alias=AliasChoices("stopName", "code"), serialization_alias="stopName")
    """Stop code, the catalog key."""
    name: str = Field(validation_alias=AliasChoices("stopId", "name"), serialization_alias="stopId")
    """Display name (alias table override or observed description)."""
    lines: tuple[str, ...] = ()
    """Line labels, deduplicated and naturally sorted."""


class RouteCodesEntry(SetaModel):
    """Route variant codes observed for a line."""

    line: str
    codes: tuple[str, ...] = ()
    """Route codes, deduplicated and sorted."""


STOP_LIST_ADAPTER: TypeAdapter[list[StopEntry]] = TypeAdapter(list[StopEntry])
ROUTE_CODES_ADAPTER: TypeAdapter[list[RouteCodesEntry]] = TypeAdapter(list[RouteCodesEntry])
ROUTE_NUMBERS_ADAPTER: TypeAdapter[list[str]] = TypeAdapter(list[str])
