"""Key/value persistence backends for the birthday store.

The store only needs ``get``/``set`` on a handful of keys, so any object
satisfying :class:`KeyValueStorage` can back it.  Two backends ship with the
package:

``MemoryStorage``
    Dict-backed.  Share one instance between two stores to simulate a
    process restart in tests.

``JsonFileStorage``
    A single JSON object on disk.  The file is re-read on every ``get`` and
    replaced atomically on every ``set``.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

logger: logging.Logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the storage backend cannot be read or written."""


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...


class MemoryStorage:
    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value


class JsonFileStorage:
    """Persist keys as members of one JSON object file.

    Args:
        path: Location of the JSON file.  Parent directories are created on
            the first write; a missing file reads as empty.
    """

    def __init__(self, path: Path | str) -> None:
        self.path: Path = Path(path).expanduser()

    def get(self, key: str) -> Any | None:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)
        logger.debug("Stored key %s in %s", key, self.path)

    def _load(self) -> dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise StorageError(f"Could not read {self.path}.") from exc

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError(f"{self.path} does not contain valid JSON.") from exc

        if not isinstance(data, dict):
            raise StorageError(f"{self.path} must contain a JSON object.")
        return data

    def _dump(self, data: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(data, fh, indent=2, sort_keys=True)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Could not write {self.path}.") from exc
