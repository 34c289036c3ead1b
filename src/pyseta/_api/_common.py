"""Shared helpers for the feed modules."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from pyseta._transport import Transport
from pyseta.exceptions import SetaFeedError

TModel = TypeVar("TModel", bound=BaseModel)


async def get_model(transport: Transport, url: str, model_cls: type[TModel]) -> TModel:
    """GET *url* and validate the decoded body as *model_cls*."""
    decoded: Any = await transport.get_json(url)
    try:
        return model_cls.model_validate(decoded)
    except ValidationError as exc:
        raise SetaFeedError(f"Unexpected payload from {url}: {exc}", url=url) from exc
