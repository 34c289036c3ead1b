"""Vehicle feed models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pyseta.models._base import SetaRecord


class VehicleRecord(SetaRecord):
    """A single vehicle observation (``properties`` of a feed feature).

    Every field besides ``vehicle_code`` may be missing on partially
    populated feed entries.
    """

    vehicle_code: int | None = None
    """Fleet number, used by model rules."""
    linea: str | None = None
    """Line label (e.g. ``"7A"``)."""
    route_desc: str | None = None
    """Route description shown on the vehicle."""
    plate_num: str | None = None
    """Plate number; model rules may rewrite it."""
    model: str | None = None
    """Vehicle model label, filled in by model rules."""
    reached_waypoint_code: str | None = None
    """Code of the last stop the vehicle reached."""
    wp_desc: str | None = None
    """Description of the last stop the vehicle reached."""
    route_code: str | None = None
    """Route variant code (e.g. ``"728(1)"``)."""

    @classmethod
    def placeholder(cls, linea: str) -> VehicleRecord:
        """Synthetic record used to push a bare line label through vehicle rules."""
        return cls(vehicle_code=0, linea=linea, route_desc="", plate_num="")


class VehicleFeature(BaseModel):
    """GeoJSON feature wrapping one vehicle observation."""

    model_config = ConfigDict(extra="allow")

    type: str = "Feature"
    properties: VehicleRecord
    geometry: dict[str, Any] | None = None


class VehicleFeatureCollection(BaseModel):
    """Vehicle map feed payload."""

    model_config = ConfigDict(extra="allow")

    type: str = "FeatureCollection"
    features: list[VehicleFeature] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
