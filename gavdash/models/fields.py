"""
Normalized field types produced by the field-discovery engine.
Nothing downstream of the normalizer touches raw upstream shapes.
"""

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class FieldTuple:
    """One custom field found in an upstream payload. label or id is always set."""
    label: str | None
    id: int | None
    value: str

    @property
    def name(self) -> str:
        return self.label if self.label is not None else str(self.id)

    def as_dict(self) -> dict:
        return {"label": self.label, "id": self.id, "value": self.value}


class ShapePhase(str, Enum):
    ARRAY = "array"
    STRUCTURED = "structured"
    BARE_NUMERIC = "bare_numeric"
    EMPTY = "empty"


@dataclass
class NormalizeResult:
    phase: ShapePhase
    tuples: list[FieldTuple] = field(default_factory=list)


@dataclass
class AggregateEntry:
    count: int = 0
    example: str = ""
    label_samples: set[str] = field(default_factory=set)


@dataclass
class ProbeAttempt:
    """Diagnostic trail entry: one per source tried for one record."""
    record_id: str
    endpoint: str
    succeeded: bool
    item_count: int = 0
    filtered: int = 0
    error: str | None = None

    def as_dict(self) -> dict:
        return {
            "recordId": self.record_id,
            "endpoint": self.endpoint,
            "succeeded": self.succeeded,
            "itemCount": self.item_count,
            "filtered": self.filtered,
            "error": self.error,
        }
