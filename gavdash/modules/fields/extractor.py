"""
Value Extractor: pulls a (label|id, value) pair out of one field entry of
unknown shape. Total over any JSON-like input; never raises.
"""

import json
import re

from gavdash.models.fields import FieldTuple

LABEL_KEYS = ("label", "name", "title", "key")
ID_KEYS = ("id", "fieldId", "field_id")
VALUE_KEYS = ("value", "val", "data", "text", "content")
UNWRAP_KEYS = ("value", "text", "values")

_DIGITS = re.compile(r"^[0-9]+$")


def parse_field_id(raw) -> int | None:
    """Return raw as an unsigned int when it is one (or an all-digit string)."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw >= 0 else None
    if isinstance(raw, str) and _DIGITS.match(raw.strip()):
        return int(raw.strip())
    return None


def coerce_value(raw) -> str:
    """Render any JSON-like value as a trimmed display string ("" when empty)."""
    if raw is None:
        return ""
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, int):
        return str(raw)
    if isinstance(raw, float):
        return str(int(raw)) if raw.is_integer() else str(raw)
    if isinstance(raw, str):
        return raw.strip()
    if isinstance(raw, (list, tuple)):
        parts = [coerce_value(item) for item in raw if item is not None]
        return ", ".join(p for p in parts if p)
    if isinstance(raw, dict):
        for key in UNWRAP_KEYS:
            if raw.get(key) is not None:
                return coerce_value(raw[key])
        if not raw:
            return ""
        return json.dumps(raw, ensure_ascii=False, separators=(",", ":"), default=str)
    return str(raw).strip()


def _first_label(entry: dict) -> str | None:
    for key in LABEL_KEYS:
        candidate = entry.get(key)
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return None


def _first_id(entry: dict) -> int | None:
    for key in ID_KEYS:
        field_id = parse_field_id(entry.get(key))
        if field_id is not None:
            return field_id
    return None


def _first_value(entry: dict) -> str:
    for key in VALUE_KEYS:
        if key in entry:
            value = coerce_value(entry[key])
            if value:
                return value
    values = entry.get("values")
    if isinstance(values, (list, tuple)):
        return coerce_value(values)
    return ""


def extract_field(entry, fallback_key: str | None = None) -> FieldTuple | None:
    """Extract one FieldTuple from a field entry.

    fallback_key is the entry's own key when the caller iterates an id-keyed
    mapping: an all-digit key becomes the numeric id, anything else the label.
    """
    if not isinstance(entry, dict):
        return None

    label = _first_label(entry)
    field_id = _first_id(entry)

    if fallback_key is not None:
        fallback_id = parse_field_id(fallback_key)
        if field_id is None and fallback_id is not None:
            field_id = fallback_id
        elif label is None and field_id is None and str(fallback_key).strip():
            label = str(fallback_key).strip()

    if label is None and field_id is None:
        return None

    value = _first_value(entry)
    if not value:
        return None

    return FieldTuple(label=label, id=field_id, value=value)
