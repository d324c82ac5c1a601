"""
Field Aggregator: per-request frequency table of discovered field keys.
Holds state for one request only; create a new instance per scan.
"""

import math

from gavdash.models.fields import AggregateEntry, FieldTuple


def field_key(prefix: str, field: FieldTuple) -> str:
    return f"{prefix}.{field.name}"


def coverage_pct(count: int, total_records: int) -> int:
    """Percentage of records hit, halves rounded up."""
    return int(math.floor(count / max(total_records, 1) * 100 + 0.5))


class FieldAggregator:
    def __init__(self):
        self._entries: dict[str, AggregateEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str) -> AggregateEntry | None:
        return self._entries.get(key)

    def hit(self, key: str, value, label: str | None = None) -> None:
        """Count one observation of key. Empty values are ignored."""
        if value is None:
            return
        text = str(value).strip()
        if not text:
            return

        entry = self._entries.get(key)
        if entry is None:
            entry = AggregateEntry()
            self._entries[key] = entry

        entry.count += 1
        # first non-empty example sticks
        if not entry.example:
            entry.example = text
        if label:
            entry.label_samples.add(label)

    def hit_field(self, prefix: str, field: FieldTuple) -> None:
        self.hit(field_key(prefix, field), field.value, label=field.label)

    def summarize(self, total_records: int | None = None) -> list[dict]:
        rows = []
        for key, entry in self._entries.items():
            row = {"field": key, "count": entry.count}
            if total_records is not None:
                row["coverage_pct"] = coverage_pct(entry.count, total_records)
            row["example"] = entry.example
            if entry.label_samples:
                row["labels"] = sorted(entry.label_samples)
            rows.append(row)

        rows.sort(key=lambda r: (-r.get("coverage_pct", 0), -r["count"], r["field"]))
        return rows
