"""
Field Inventory: builds the coverage summaries served by the debug endpoints.

Each record contributes every field key at most once, so counts are numbers of
records and coverage is the share of records carrying a non-empty value.
"""

from gavdash.modules.fields.aggregator import FieldAggregator, field_key
from gavdash.modules.fields.extractor import coerce_value, parse_field_id
from gavdash.modules.fields.normalizer import normalize

# Upstream containers of account-configured fields. Their members are promoted
# to the record's own namespace.
CUSTOM_CONTAINERS = ("masterData", "resultData", "resultFields", "customFields", "fields")

MAX_DEPTH = 3


def _is_scalar(value) -> bool:
    return value is None or isinstance(value, (str, int, float, bool))


def _put(out: dict, key: str, raw) -> None:
    value = coerce_value(raw)
    if value and key not in out:
        out[key] = value


def _flatten_container(out: dict, container, prefix: str) -> None:
    for field in normalize(container):
        if field_key(prefix, field) not in out:
            out[field_key(prefix, field)] = field.value
    if isinstance(container, dict):
        for member, inner in container.items():
            if parse_field_id(str(member)) is None and _is_scalar(inner):
                _put(out, f"{prefix}.{member}", inner)


def _flatten_into(out: dict, obj: dict, prefix: str, depth: int) -> None:
    for key, value in obj.items():
        key = str(key)
        if key in CUSTOM_CONTAINERS:
            _flatten_container(out, value, prefix)
        elif isinstance(value, dict):
            if depth < MAX_DEPTH:
                _flatten_into(out, value, f"{prefix}.{key}", depth + 1)
        elif isinstance(value, list):
            if all(_is_scalar(item) for item in value):
                _put(out, f"{prefix}.{key}", value)
        else:
            _put(out, f"{prefix}.{key}", value)


def flatten_record(record, prefix: str = "lead") -> dict[str, str]:
    """Map one record to {field_key: value}; the first value seen per key wins."""
    out: dict[str, str] = {}
    if isinstance(record, dict):
        _flatten_into(out, record, prefix, 0)
    return out


def build_coverage(records: list, prefix: str = "lead") -> dict:
    aggregator = FieldAggregator()
    for record in records:
        for key, value in flatten_record(record, prefix).items():
            aggregator.hit(key, value)
    return {"total_rows": len(records), "fields": aggregator.summarize(len(records))}


def build_result_inventory(results: list, sample_size: int = 20) -> dict:
    """Summarize MultiSourceProber results by field id and by field label."""
    by_id = FieldAggregator()
    by_label = FieldAggregator()
    ids: set[int] = set()
    sample = []
    sources = {}

    for result in results:
        seen_ids: set[str] = set()
        seen_labels: set[str] = set()
        for field in result.tuples:
            if field.id is not None:
                ids.add(field.id)
                key = f"result.{field.id}"
                if key not in seen_ids:
                    seen_ids.add(key)
                    by_id.hit(key, field.value, label=field.label)
            if field.label:
                key = f"result.{field.label}"
                if key not in seen_labels:
                    seen_labels.add(key)
                    by_label.hit(key, field.value)
            if len(sample) < sample_size:
                sample.append({"recordId": result.record_id, **field.as_dict()})
        sources[result.record_id] = result.source

    scanned = len(results)
    return {
        "scanned": scanned,
        "ids": sorted(ids),
        "byId": by_id.summarize(scanned),
        "byLabel": by_label.summarize(scanned),
        "sample": sample,
        "sources": sources,
        "diag": [attempt.as_dict() for result in results for attempt in result.attempts],
    }
