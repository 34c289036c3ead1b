"""JSON snapshot persistence for the catalogs."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

_logger = logging.getLogger(__name__)


class SnapshotGateway(Protocol):
    """Structural interface for named snapshot storage.

    ``load`` never raises: a missing or unreadable snapshot yields
    *default*. ``save`` never raises either and reports success.
    """

    def load(self, name: str, default: Any) -> Any: ...

    def save(self, name: str, data: Any) -> bool: ...


class JsonSnapshotStore:
    """Snapshots stored as pretty-printed JSON files in one directory."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path(self, name: str) -> Path:
        return self._directory / name

    def ensure_directory(self) -> None:
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
        except OSError:
            _logger.exception("Failed to create snapshot directory %s", self._directory)

    def load(self, name: str, default: Any) -> Any:
        p = self.path(name)
        try:
            return json.loads(p.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return default
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
            _logger.error("Error reading or parsing JSON file at %s: %s", p, exc)
            return default

    def save(self, name: str, data: Any) -> bool:
        p = self.path(name)
        try:
            p.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        except (OSError, TypeError, ValueError) as exc:
            _logger.error("Error writing JSON file to %s: %s", p, exc)
            return False
        _logger.debug("Wrote snapshot %s", p)
        return True
