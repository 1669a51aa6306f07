"""JSON Schema for the IDL document.

This is the structural contract consumers rely on: the required keys of the
document and of every entry, and their types. Tools can export this and use
it with any JSON Schema validator.
"""

from idlgen.idl import IDL_VERSION

_NAMED_TYPE = {
    "type": "object",
    "required": ["name", "type_name"],
    "additionalProperties": False,
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "type_name": {
            "type": "string",
            "minLength": 1,
            "description": "Canonical Rust rendering of the type.",
        },
    },
}

IDL_SCHEMA: dict = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": f"https://idlgen.dev/schema/idl/v{IDL_VERSION}",
    "title": "Program IDL",
    "description": (
        "Catalogue of a program's instructions, persistent accounts and "
        "auxiliary types, extracted from its macro-expanded source."
    ),
    "type": "object",
    "required": ["version", "name", "instructions", "accounts", "types"],
    "additionalProperties": False,
    "properties": {
        "version": {"type": "string", "const": IDL_VERSION},
        "name": {
            "type": "string",
            "minLength": 1,
            "description": "Package name from the program's Cargo.toml.",
        },
        # --- Instructions ---
        "instructions": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "args", "accounts"],
                "additionalProperties": False,
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "args": {"type": "array", "items": _NAMED_TYPE},
                    "accounts": {
                        "type": "array",
                        "description": (
                            "Accounts the instruction touches. Not inferred yet; "
                            "always empty."
                        ),
                        "items": {
                            "type": "object",
                            "required": ["name", "is_mut", "is_signer"],
                            "additionalProperties": False,
                            "properties": {
                                "name": {"type": "string"},
                                "is_mut": {"type": "boolean"},
                                "is_signer": {"type": "boolean"},
                            },
                        },
                    },
                },
            },
        },
        # --- Accounts ---
        "accounts": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "type_name", "fields"],
                "additionalProperties": False,
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "type_name": {"type": "string", "minLength": 1},
                    "fields": {"type": "array", "items": _NAMED_TYPE},
                },
            },
        },
        # --- Types ---
        "types": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "type_def"],
                "additionalProperties": False,
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "type_def": {
                        "type": "string",
                        "minLength": 1,
                        "description": "Full re-rendered struct or enum declaration.",
                    },
                },
            },
        },
    },
}


def get_schema() -> dict:
    """Return the canonical JSON Schema for IDL documents."""
    return IDL_SCHEMA
