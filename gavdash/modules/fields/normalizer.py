"""
Shape Normalizer: turns a custom-field container into a flat list of FieldTuples.

Upstream sends the same fields as an array of entries, as an id-keyed mapping of
field descriptors ({"123": {"label": ..., "value": ...}}) or as a bare id-keyed
mapping of scalars ({"123": "..."}). Shapes are tried in that order.
"""

from gavdash.models.fields import FieldTuple, NormalizeResult, ShapePhase
from gavdash.modules.fields.extractor import coerce_value, extract_field, parse_field_id


def get_path(obj, path: str):
    """Walk a dotted path through mappings and list indices; None on any miss."""
    current = obj
    for part in path.split("."):
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, list) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


def _from_array(container: list) -> list[FieldTuple]:
    tuples = []
    for entry in container:
        extracted = extract_field(entry)
        if extracted is not None:
            tuples.append(extracted)
    return tuples


def _structured(container: dict) -> list[FieldTuple]:
    tuples = []
    for key, value in container.items():
        if not isinstance(value, dict):
            continue
        extracted = extract_field(value, fallback_key=str(key))
        if extracted is not None:
            tuples.append(extracted)
    return tuples


def _bare_numeric(container: dict) -> list[FieldTuple]:
    tuples = []
    for key, value in container.items():
        field_id = parse_field_id(str(key))
        if field_id is None:
            continue
        coerced = coerce_value(value)
        if coerced:
            tuples.append(FieldTuple(label=None, id=field_id, value=coerced))
    return tuples


def normalize_shape(container) -> NormalizeResult:
    """Normalize a container and report which shape matched."""
    if isinstance(container, list):
        tuples = _from_array(container)
        if tuples:
            return NormalizeResult(ShapePhase.ARRAY, tuples)
        return NormalizeResult(ShapePhase.EMPTY)

    if isinstance(container, dict):
        tuples = _structured(container)
        if tuples:
            return NormalizeResult(ShapePhase.STRUCTURED, tuples)
        tuples = _bare_numeric(container)
        if tuples:
            return NormalizeResult(ShapePhase.BARE_NUMERIC, tuples)

    return NormalizeResult(ShapePhase.EMPTY)


def normalize(container) -> list[FieldTuple]:
    return normalize_shape(container).tuples
