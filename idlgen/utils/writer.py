"""Serialization — render the IDL document and persist it in one write."""

from __future__ import annotations

import json
from pathlib import Path

import yaml

from idlgen.errors import WriteFailure
from idlgen.idl.models import IdlDocument

FORMATS = ("json", "yaml")


def serialize_document(document: IdlDocument, fmt: str = "json") -> str:
    """Render the document as pretty-printed JSON or block-style YAML."""
    data = document.to_dict()
    if fmt == "json":
        return json.dumps(data, indent=2, ensure_ascii=False)
    if fmt == "yaml":
        return yaml.dump(
            data, default_flow_style=False, sort_keys=False, allow_unicode=True, width=100
        )
    raise ValueError(f"Unknown output format: {fmt}")


def write_document(document: IdlDocument, output_path: str | Path, fmt: str = "json") -> Path:
    """Serialize the whole document in memory, then write it with a single call.

    Raises:
        WriteFailure: If the file cannot be written.
    """
    path = Path(output_path)
    text = serialize_document(document, fmt)
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise WriteFailure(f"Cannot write IDL to {path}: {e}") from e
    return path
