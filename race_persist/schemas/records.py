"""
RESPONSIBILITIES
- Name the two JSON record documents kept under the application data root.
- Provide the typed entry returned for files in the uploads directory.
PROCESS OVERVIEW
1. Callers address record documents by kind name ("database" or "database.json").
2. RecordKind.parse() canonicalizes the name, rejecting unknown kinds.
3. DocumentEntry.to_dict() prepares the payload handed back to UI windows.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import MutableMapping

from race_persist.stores.base_store import UnknownRecordKindError


class RecordKind(str, Enum):
    DATABASE = "database"
    REQUIREMENTS = "requirements"

    @property
    def file_name(self) -> str:
        return f"{self.value}.json"

    @classmethod
    def parse(cls, value: "RecordKind | str") -> "RecordKind":
        """Return the kind for ``value``, accepting the bare or ``.json`` spelling."""

        if isinstance(value, RecordKind):
            return value
        token = str(value).strip().lower()
        if token.endswith(".json"):
            token = token[: -len(".json")]
        for kind in cls:
            if kind.value == token:
                return kind
        raise UnknownRecordKindError(f"Unknown record document: {value!r}")


@dataclass(slots=True, frozen=True)
class DocumentEntry:
    name: str
    modified_time: int

    def to_dict(self) -> MutableMapping[str, object]:
        return {"name": self.name, "modifiedTime": self.modified_time}
