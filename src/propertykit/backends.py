"""Key-value backends behind :class:`~propertykit.defaults.Defaults`.

A backend stores values per *suite* (namespace). Native values
(``str``, ``bool``, ``int``, ``float``, ``datetime``) are kept as such;
structured values arrive already encoded as ``bytes``.
"""

from __future__ import annotations

import logging
import math
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, ClassVar, Protocol, runtime_checkable

from propertykit._codec import is_native_value

_logger = logging.getLogger(__name__)

#: Suite used when no (or an invalid) suite name is given.
STANDARD_SUITE = "standard"

_SQLITE_INT_MIN = -(2**63)
_SQLITE_INT_MAX = 2**63 - 1


def normalize_suite_name(suite_name: str | None) -> str:
    """Return *suite_name*, falling back to :data:`STANDARD_SUITE`."""
    if suite_name is None or not isinstance(suite_name, str):
        return STANDARD_SUITE
    name = suite_name.strip()
    if not name:
        return STANDARD_SUITE
    return name


@runtime_checkable
class DefaultsBackend(Protocol):
    """Storage contract used by :class:`~propertykit.defaults.Defaults`."""

    @property
    def suite_name(self) -> str: ...

    def get_value(self, key: str) -> Any | None: ...

    def set_value(self, value: Any, key: str) -> None: ...

    def get_bytes(self, key: str) -> bytes | None: ...

    def set_bytes(self, data: bytes, key: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def contains(self, key: str) -> bool: ...


class MemoryBackend:
    """Process-local backend.

    Every instance opened on the same suite sees the same slots, the way a
    platform defaults database behaves inside one process.
    """

    _suites: ClassVar[dict[str, dict[str, Any]]] = {}
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, suite_name: str | None = None) -> None:
        self._suite_name = normalize_suite_name(suite_name)
        with self._lock:
            self._slots = self._suites.setdefault(self._suite_name, {})

    @property
    def suite_name(self) -> str:
        return self._suite_name

    def get_value(self, key: str) -> Any | None:
        with self._lock:
            value = self._slots.get(key)
        if isinstance(value, bytes):
            return None
        return value

    def set_value(self, value: Any, key: str) -> None:
        if not is_native_value(value):
            raise TypeError(f"{type(value).__name__} is not a native value; encode it first")
        with self._lock:
            self._slots[key] = value

    def get_bytes(self, key: str) -> bytes | None:
        with self._lock:
            value = self._slots.get(key)
        return value if isinstance(value, bytes) else None

    def set_bytes(self, data: bytes, key: str) -> None:
        with self._lock:
            self._slots[key] = bytes(data)

    def delete(self, key: str) -> None:
        with self._lock:
            self._slots.pop(key, None)

    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._slots

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._slots)

    @classmethod
    def remove_suite(cls, suite_name: str | None) -> None:
        """Drop every slot of *suite_name* for all instances."""
        with cls._lock:
            slots = cls._suites.get(normalize_suite_name(suite_name))
            if slots is not None:
                slots.clear()


class SqliteBackend:
    """Persistent backend on a SQLite database file.

    DB schema
    ---------
    CREATE TABLE defaults (
        suite TEXT NOT NULL,
        key   TEXT NOT NULL,
        kind  TEXT NOT NULL,
        value BLOB,
        PRIMARY KEY (suite, key)
    )

    ``kind`` names the Python type of the stored value so reads return
    exactly what was written.
    """

    def __init__(self, db_path: Path | str, suite_name: str | None = None) -> None:
        self._db_path = Path(db_path)
        self._suite_name = normalize_suite_name(suite_name)
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = None
        self._ensure_table()

    @property
    def suite_name(self) -> str:
        return self._suite_name

    @property
    def db_path(self) -> Path:
        return self._db_path

    @property
    def conn(self) -> sqlite3.Connection:
        """Return the shared connection; create it on first use."""
        if self._conn is None:
            self._conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        return self._conn

    def close(self) -> None:
        """Close the connection (idempotent); the next access reopens it."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def _ensure_table(self) -> None:
        with self._lock:
            self.conn.execute(
                """
                CREATE TABLE IF NOT EXISTS defaults (
                    suite TEXT NOT NULL,
                    key   TEXT NOT NULL,
                    kind  TEXT NOT NULL,
                    value BLOB,
                    PRIMARY KEY (suite, key)
                )
                """
            )
            self.conn.commit()
        _logger.debug("Opened defaults database %s suite=%s", self._db_path, self._suite_name)

    def _row(self, key: str) -> tuple[str, Any] | None:
        with self._lock:
            cur = self.conn.execute(
                "SELECT kind, value FROM defaults WHERE suite = ? AND key = ?",
                (self._suite_name, key),
            )
            row = cur.fetchone()
        if row is None:
            return None
        return row[0], row[1]

    def _write(self, kind: str, value: Any, key: str) -> None:
        with self._lock:
            self.conn.execute(
                "INSERT OR REPLACE INTO defaults (suite, key, kind, value) VALUES (?, ?, ?, ?)",
                (self._suite_name, key, kind, value),
            )
            self.conn.commit()

    def get_value(self, key: str) -> Any | None:
        row = self._row(key)
        if row is None:
            return None
        kind, raw = row
        if kind == "bool":
            return bool(raw)
        if kind in ("int", "bigint"):
            return int(raw)
        if kind == "float":
            return float(raw)
        if kind == "str":
            return str(raw)
        if kind == "datetime":
            return datetime.fromisoformat(raw)
        return None

    def set_value(self, value: Any, key: str) -> None:
        if isinstance(value, bool):
            self._write("bool", int(value), key)
        elif isinstance(value, int):
            if _SQLITE_INT_MIN <= value <= _SQLITE_INT_MAX:
                self._write("int", value, key)
            else:
                self._write("bigint", str(value), key)
        elif isinstance(value, float):
            # SQLite stores NaN as NULL; non-finite floats are kept as text.
            self._write("float", value if math.isfinite(value) else repr(value), key)
        elif isinstance(value, str):
            self._write("str", value, key)
        elif isinstance(value, datetime):
            self._write("datetime", value.isoformat(), key)
        else:
            raise TypeError(f"{type(value).__name__} is not a native value; encode it first")

    def get_bytes(self, key: str) -> bytes | None:
        row = self._row(key)
        if row is None or row[0] != "bytes":
            return None
        return bytes(row[1])

    def set_bytes(self, data: bytes, key: str) -> None:
        self._write("bytes", sqlite3.Binary(bytes(data)), key)

    def delete(self, key: str) -> None:
        with self._lock:
            self.conn.execute(
                "DELETE FROM defaults WHERE suite = ? AND key = ?",
                (self._suite_name, key),
            )
            self.conn.commit()

    def contains(self, key: str) -> bool:
        return self._row(key) is not None

    def keys(self) -> list[str]:
        with self._lock:
            cur = self.conn.execute(
                "SELECT key FROM defaults WHERE suite = ? ORDER BY key",
                (self._suite_name,),
            )
            return [row[0] for row in cur.fetchall()]
