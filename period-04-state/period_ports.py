"""
period_ports.py — Period 04: Period State
-------------------------------------------
Capabilities the period controller needs from its environment, so the
controller runs the same under Streamlit, the CLI and the tests:

  Clock              -> wall-clock time for lastRefresh
  KeyValueStore      -> persisted preference (survives reload)
  QueryParamStore    -> URL query parameters
  CacheInvalidator   -> tells the data-fetching layer to refetch a tag

JsonFileKeyValueStore format (e.g. data/period_prefs.json):
  {
    "dashboard-period-type": "month"
  }
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol

logger = logging.getLogger("periods.ports")


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------

class Clock(Protocol):
    def now(self) -> datetime: ...


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class QueryParamStore(Protocol):
    def get(self, name: str) -> Optional[str]: ...

    def set(self, name: str, value: str) -> None: ...

    def delete(self, name: str) -> None: ...

    def to_dict(self) -> dict[str, str]: ...


class CacheInvalidator(Protocol):
    def invalidate(self, tag: str) -> None: ...


# ---------------------------------------------------------------------------
# Implementations
# ---------------------------------------------------------------------------

class SystemClock:
    def now(self) -> datetime:
        return datetime.now()


class InMemoryKeyValueStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileKeyValueStore:
    """
    Key-value store backed by a single JSON file.

    A missing, unreadable or non-object file reads as an empty store; the
    next set() rewrites it.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def get(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(f"Ignoring unreadable preference file {self.path}: {exc}")
            return {}
        return data if isinstance(data, dict) else {}


class InMemoryQueryParamStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._params = dict(initial or {})

    def get(self, name: str) -> Optional[str]:
        return self._params.get(name)

    def set(self, name: str, value: str) -> None:
        self._params[name] = value

    def delete(self, name: str) -> None:
        self._params.pop(name, None)

    def to_dict(self) -> dict[str, str]:
        return dict(self._params)
