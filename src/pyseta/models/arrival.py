"""Arrival feed models."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pyseta.models._base import SetaRecord


class ArrivalKind(StrEnum):
    PLANNED = "planned"
    REALTIME = "realtime"


class ArrivalService(SetaRecord):
    """One predicted arrival at a stop.

    ``type`` stays a plain string so unexpected kinds from the feed are
    passed through rather than rejected.
    """

    service: str | None = None
    """Line label."""
    destination: str | None = None
    arrival: str | None = None
    """Clock time, ``"HH:MM"``."""
    type: str | None = None
    """``"planned"`` or ``"realtime"``."""
    codice_corsa: str | None = None
    """Trip id shared by the planned and realtime entries of one run."""
    delay: int | None = None
    """Minutes late (negative when early), realtime entries only."""

    @property
    def is_planned(self) -> bool:
        return self.type == ArrivalKind.PLANNED

    @property
    def is_realtime(self) -> bool:
        return self.type == ArrivalKind.REALTIME


class ArrivalBoard(BaseModel):
    model_config = ConfigDict(extra="allow")

    services: list[ArrivalService] | None = Field(default_factory=list)
    error: str | None = None


class ArrivalResponse(BaseModel):
    """Arrival feed payload for one stop."""

    model_config = ConfigDict(extra="allow")

    arrival: ArrivalBoard = Field(default_factory=ArrivalBoard)

    @classmethod
    def degraded(cls, message: str) -> ArrivalResponse:
        """Structurally valid response carrying only an error marker."""
        return cls(arrival=ArrivalBoard(services=[], error=message))

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
