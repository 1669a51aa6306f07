"""Schema validator — structural validation of IDL documents.

Walks a parsed document against ``IDL_SCHEMA`` and reports every mismatch,
plus the one cross-entry rule the schema cannot express: account and type
names never overlap.
"""

from __future__ import annotations

from idlgen.idl.schema import get_schema


def validate_document(data: dict) -> list[str]:
    """Validate a parsed IDL document (from JSON or YAML).

    Returns:
        List of error messages. Empty list means valid.
    """
    issues: list[str] = []
    _validate_node(data, get_schema(), "", issues)

    if not issues:
        accounts = {a["name"] for a in data["accounts"]}
        overlap = sorted(accounts & {t["name"] for t in data["types"]})
        for name in overlap:
            issues.append(f"/: '{name}' is listed both as an account and as a type")

    return issues


def _validate_node(data, schema: dict, path: str, issues: list[str]):
    """Recursively validate data against a JSON Schema node."""
    schema_type = schema.get("type")
    where = path or "/"

    if schema_type and not _type_matches(data, schema_type):
        issues.append(f"{where}: expected type '{schema_type}', got {type(data).__name__}")
        return  # Don't recurse into wrong types

    if "const" in schema and data != schema["const"]:
        issues.append(f"{where}: expected '{schema['const']}', got '{data}'")

    if schema_type == "string":
        min_len = schema.get("minLength", 0)
        if len(data) < min_len:
            issues.append(f"{where}: string too short (min {min_len}, got {len(data)})")

    if schema_type == "object":
        for req in schema.get("required", []):
            if req not in data:
                issues.append(f"{where}: missing required property '{req}'")

        props = schema.get("properties", {})
        for key, value in data.items():
            if key in props:
                _validate_node(value, props[key], f"{path}.{key}", issues)
            elif schema.get("additionalProperties") is False:
                issues.append(f"{where}: unexpected property '{key}'")

    if schema_type == "array":
        items_schema = schema.get("items")
        if items_schema:
            for i, item in enumerate(data):
                _validate_node(item, items_schema, f"{path}[{i}]", issues)


_JSON_TYPES = {"string": str, "boolean": bool, "array": list, "object": dict}


def _type_matches(data, schema_type: str) -> bool:
    expected = _JSON_TYPES.get(schema_type)
    return expected is None or isinstance(data, expected)
