"""Record shapes returned by the tabular record store."""

from dataclasses import dataclass, field
from typing import Any, Optional

from shared_types import SortDirection


@dataclass
class Record:
    """Single row: immutable id plus a schema-less field mapping."""

    id: str
    fields: dict[str, Any] = field(default_factory=dict)
    created_time: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "Record":
        return cls(
            id=data["id"],
            fields=dict(data.get("fields") or {}),
            created_time=data.get("createdTime"),
        )

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"id": self.id, "fields": self.fields}
        if self.created_time:
            out["createdTime"] = self.created_time
        return out

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)


@dataclass(frozen=True)
class SortSpec:
    """Single-field sort; direction defaults to newest first."""

    field: str
    direction: SortDirection = SortDirection.DESC

    def to_params(self) -> list[tuple[str, str]]:
        return [
            ("sort[0][field]", self.field),
            ("sort[0][direction]", str(self.direction)),
        ]
