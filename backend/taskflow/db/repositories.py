"""Storage media for entity-store collections.

Each repository persists a whole collection per key and knows nothing about
the records inside it. ``load`` returns ``None`` when the key was never
written so the store can seed it; any other failure is raised and handled by
the store.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from copy import deepcopy
from pathlib import Path
from typing import Any

from sqlalchemy.engine import Engine
from sqlmodel import Session

from taskflow.core.time import utcnow
from taskflow.models.collections import EntityCollection


class StorageError(Exception):
    pass


def _decode(key: str, raw: str) -> list[dict[str, Any]]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise StorageError(f"collection {key!r} is not valid JSON") from exc
    if not isinstance(data, list):
        raise StorageError(f"collection {key!r} is not a list")
    return data


class CollectionRepository(ABC):
    @abstractmethod
    def load(self, key: str) -> list[dict[str, Any]] | None:
        raise NotImplementedError

    @abstractmethod
    def save(self, key: str, items: list[dict[str, Any]]) -> None:
        raise NotImplementedError


class InMemoryRepository(CollectionRepository):
    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = deepcopy(initial) if initial else {}

    def load(self, key: str) -> list[dict[str, Any]] | None:
        if key not in self._data:
            return None
        raw = self._data[key]
        if isinstance(raw, str):
            return _decode(key, raw)
        if not isinstance(raw, list):
            raise StorageError(f"collection {key!r} is not a list")
        return deepcopy(raw)

    def save(self, key: str, items: list[dict[str, Any]]) -> None:
        self._data[key] = deepcopy(items)


class JsonFileRepository(CollectionRepository):
    def __init__(self, root: Path):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def load(self, key: str) -> list[dict[str, Any]] | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            raw = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise StorageError(f"collection {key!r} is not valid UTF-8") from exc
        return _decode(key, raw)

    def save(self, key: str, items: list[dict[str, Any]]) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(items, indent=2), encoding="utf-8")
        tmp.replace(path)


class SqlCollectionRepository(CollectionRepository):
    def __init__(self, engine: Engine):
        self.engine = engine

    def load(self, key: str) -> list[dict[str, Any]] | None:
        with Session(self.engine) as session:
            row = session.get(EntityCollection, key)
            if row is None:
                return None
            return _decode(key, row.payload)

    def save(self, key: str, items: list[dict[str, Any]]) -> None:
        payload = json.dumps(items)
        with Session(self.engine) as session:
            row = session.get(EntityCollection, key)
            if row is None:
                row = EntityCollection(key=key, payload=payload)
            else:
                row.payload = payload
                row.updated_at = utcnow()
            session.add(row)
            session.commit()
