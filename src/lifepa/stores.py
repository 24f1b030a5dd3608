"""Secret store and persistence store collaborators.

The core only depends on the two protocols. The in-memory implementations back
tests; the file and sqlite implementations back local use.
"""

import json
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

from lifepa.errors import StoreError
from lifepa.ids import new_record_id

logger = logging.getLogger(__name__)


class SecretStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class PersistenceStore(Protocol):
    def insert(self, collection: str, record: dict[str, Any]) -> str: ...

    def query(
        self,
        collection: str,
        filters: list[tuple[str, str, Any]] | None = None,
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]: ...


class MemorySecretStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class FileSecretStore:
    """Plaintext JSON secret store for platforms without a keychain."""

    def __init__(self, path: str) -> None:
        self.path = Path(path)
        logger.warning(
            "secret store at %s is plaintext; API keys are not encrypted at rest", self.path
        )

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"secret store unreadable: {exc}") from exc
        if not isinstance(payload, dict):
            return {}
        return {str(k): str(v) for k, v in payload.items()}

    def _save(self, values: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(values, indent=2), encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"secret store unwritable: {exc}") from exc

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        values = self._load()
        values[key] = value
        self._save(values)

    def remove(self, key: str) -> None:
        values = self._load()
        if values.pop(key, None) is not None:
            self._save(values)


_OPS = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a is not None and a < b,
    "<=": lambda a, b: a is not None and a <= b,
    ">": lambda a, b: a is not None and a > b,
    ">=": lambda a, b: a is not None and a >= b,
}


def _matches(record: dict[str, Any], filters: list[tuple[str, str, Any]]) -> bool:
    for field_name, op, value in filters:
        check = _OPS.get(op)
        if check is None:
            raise StoreError(f"unsupported filter operator: {op}")
        if not check(record.get(field_name), value):
            return False
    return True


def _apply_query(
    records: list[dict[str, Any]],
    filters: list[tuple[str, str, Any]] | None,
    order_by: str | None,
    limit: int | None,
) -> list[dict[str, Any]]:
    rows = [r for r in records if _matches(r, filters or [])]
    if order_by:
        descending = order_by.startswith("-")
        key = order_by.lstrip("-")
        rows.sort(key=lambda r: (r.get(key) is None, r.get(key)), reverse=descending)
    if limit is not None:
        rows = rows[:limit]
    return rows


class MemoryPersistenceStore:
    def __init__(self) -> None:
        self._collections: dict[str, list[dict[str, Any]]] = {}

    def insert(self, collection: str, record: dict[str, Any]) -> str:
        record_id = str(record.get("id") or new_record_id(collection))
        self._collections.setdefault(collection, []).append({**record, "id": record_id})
        return record_id

    def query(
        self,
        collection: str,
        filters: list[tuple[str, str, Any]] | None = None,
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        records = [dict(r) for r in self._collections.get(collection, [])]
        return _apply_query(records, filters, order_by, limit)


class SqlitePersistenceStore:
    """Document-style store: one table of JSON records keyed by collection."""

    def __init__(self, path: str | None = None) -> None:
        if path is None:
            from lifepa.config import get_settings

            path = get_settings().app_db
        self.path = path
        with self._conn() as conn:
            conn.execute(
                "CREATE TABLE IF NOT EXISTS records ("
                "id TEXT PRIMARY KEY, collection TEXT NOT NULL, "
                "body TEXT NOT NULL, created_at TEXT NOT NULL)"
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_records_collection ON records(collection)"
            )

    @contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.path, timeout=30.0, isolation_level=None)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        except sqlite3.Error as exc:
            raise StoreError(f"sqlite store error: {exc}") from exc
        finally:
            conn.close()

    def insert(self, collection: str, record: dict[str, Any]) -> str:
        record_id = str(record.get("id") or new_record_id(collection))
        body = json.dumps({**record, "id": record_id}, default=str)
        with self._conn() as conn:
            conn.execute(
                "INSERT INTO records(id, collection, body, created_at) VALUES(?,?,?,?)",
                (record_id, collection, body, datetime.now(UTC).isoformat()),
            )
        return record_id

    def query(
        self,
        collection: str,
        filters: list[tuple[str, str, Any]] | None = None,
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT body FROM records WHERE collection=? ORDER BY created_at",
                (collection,),
            ).fetchall()
        records = [json.loads(row["body"]) for row in rows]
        return _apply_query(records, filters, order_by, limit)


def build_secret_store(path: str | None = None) -> SecretStore:
    """File-backed store when SECRET_STORE_PATH is set, in-memory otherwise."""
    if path is None:
        from lifepa.config import get_settings

        path = get_settings().secret_store_path
    if path.strip():
        return FileSecretStore(path)
    return MemorySecretStore()
