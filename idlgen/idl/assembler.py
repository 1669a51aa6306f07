"""Document assembler — merge the extraction results into one IDL document."""

from __future__ import annotations

from idlgen.idl import IDL_VERSION
from idlgen.idl.models import IdlAccount, IdlDocument, IdlInstruction, IdlType


def assemble_document(
    name: str,
    instructions: list[IdlInstruction],
    accounts: list[IdlAccount],
    types: list[IdlType],
) -> IdlDocument:
    return IdlDocument(
        version=IDL_VERSION,
        name=name,
        instructions=list(instructions),
        accounts=list(accounts),
        types=list(types),
    )
