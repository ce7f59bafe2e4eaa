import re
from typing import Any, List, Tuple

# ──────────────────────────────────────────────────────
# TYPE INFERENCE FROM SAMPLE VALUES
# Used to propose schema additions for fields the schema does not know yet.
# String rules are tried in order; first match wins.
# ──────────────────────────────────────────────────────

STRING_TYPE_RULES: List[Tuple[str, "re.Pattern[str]"]] = [
    ("timestamp", re.compile(r'^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}')),
    ("uuid",      re.compile(r'^[a-f0-9-]{36}$')),
    ("url",       re.compile(r'^https?://')),
    ("slug",      re.compile(r'^[a-z0-9-]+$')),
]

# Inferred type → JSON Schema fragment for the proposed optional field
JSON_SCHEMA_FOR_TYPE = {
    "timestamp": {"type": "string", "pattern": r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}"},
    "uuid":      {"type": "string", "pattern": r"^[a-f0-9-]{36}$"},
    "url":       {"type": "string", "pattern": r"^https?://"},
    "slug":      {"type": "string", "pattern": r"^[a-z0-9-]+$"},
    "string":    {"type": "string"},
    "integer":   {"type": "integer"},
    "number":    {"type": "number"},
    "boolean":   {"type": "boolean"},
    "array":     {"type": "array"},
    "object":    {"type": "object"},
    "unknown":   {},
}


def infer_field_type(value: Any) -> str:
    """
    Infers a primitive type label from a sample value.

    Returns one of: timestamp, uuid, url, slug, string, integer, number,
    boolean, array, object, unknown.
    """
    if isinstance(value, str):
        for label, pattern in STRING_TYPE_RULES:
            if pattern.match(value):
                return label
        return "string"
    # bool is a subclass of int, so it must be checked first
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "integer" if value.is_integer() else "number"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return "unknown"


def json_schema_for(value: Any) -> dict:
    """JSON Schema fragment matching infer_field_type(value)."""
    return dict(JSON_SCHEMA_FOR_TYPE[infer_field_type(value)])
