"""Base model for SETA feed records.

Feed records differ from the rest of the models in two ways:

* they are **mutable**, because the rule engine rewrites them in place
  during a response cycle;
* they keep unknown upstream keys (``extra="allow"``) so records can be
  passed back to clients without dropping fields pyseta does not model.

Numbers are coerced to strings for ``str`` fields because the upstream
feeds are not consistent about quoting line labels and route codes.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

#: Returned by :meth:`SetaRecord.field_value` for fields the record lacks.
MISSING: Any = object()


class SetaRecord(BaseModel):
    """Base for mutable feed records."""

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    @classmethod
    def schema_fields(cls) -> frozenset[str]:
        """Names of the fields declared by the record type."""
        return frozenset(cls.model_fields)

    def field_value(self, name: str) -> Any:
        """Look up *name* on the record.

        Declared fields and extra upstream keys are both visible. ``None``
        counts as absent, as does a name the record does not carry at all.
        """
        if name in type(self).model_fields:
            value = getattr(self, name)
        else:
            extra = self.model_extra or {}
            value = extra.get(name)
        return MISSING if value is None else value

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict, omitting unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True)


class SetaModel(BaseModel):
    """Base for immutable pyseta values (catalog entries, rules)."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )
