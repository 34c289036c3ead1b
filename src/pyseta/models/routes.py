"""Route list feed models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RouteListItem(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    linea: str


class RouteList(BaseModel):
    """Route list feed payload (``{"routesdata": [{"linea": "7A"}, ...]}``)."""

    model_config = ConfigDict(extra="ignore")

    routesdata: list[RouteListItem] = Field(default_factory=list)

    @property
    def lines(self) -> list[str]:
        return [item.linea for item in self.routesdata]
