"""Keyed text records that hold calendar configuration, state and events."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class Record:
    name: str
    entry: str = ""
    description: str = ""


@runtime_checkable
class RecordStore(Protocol):
    """Protocol for stores the calendar engine reads from and writes to."""

    def get(self, name: str) -> Record | None:
        ...

    def upsert(self, record: Record) -> None:
        ...


class InMemoryRecordStore:
    """Dictionary-backed store, used by tests and ad-hoc runs."""

    def __init__(self, records: list[Record] | None = None) -> None:
        self._records: dict[str, Record] = {}
        self.write_count = 0
        for record in records or []:
            self._records[record.name] = record

    def get(self, name: str) -> Record | None:
        return self._records.get(name)

    def upsert(self, record: Record) -> None:
        self._records[record.name] = record
        self.write_count += 1

    def __contains__(self, name: object) -> bool:
        return name in self._records


class JsonFileRecordStore(InMemoryRecordStore):
    """Store persisted as a single JSON document mapping names to text fields.

    The whole document is rewritten on every upsert.
    """

    def __init__(self, path: str | Path, indent: int = 2) -> None:
        super().__init__()
        self.path = Path(path)
        self.indent = indent
        if self.path.exists():
            with open(self.path, encoding="utf-8") as f:
                payload = json.load(f)
            for name, fields in payload.items():
                self._records[name] = Record(
                    name=name,
                    entry=fields.get("entry", ""),
                    description=fields.get("description", ""),
                )

    def upsert(self, record: Record) -> None:
        super().upsert(record)
        payload = {
            name: {"entry": stored.entry, "description": stored.description}
            for name, stored in self._records.items()
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=self.indent, ensure_ascii=False)
