"""IDL generator — runs the full pipeline from a Cargo manifest to an IDL document."""

from __future__ import annotations

import logging
from pathlib import Path

from idlgen.idl.assembler import assemble_document
from idlgen.idl.extractors import (
    AccountPredicate,
    extract_accounts,
    extract_instructions,
    extract_types,
    is_account_record,
)
from idlgen.idl.models import IdlDocument
from idlgen.ir.rust_parser import parse_rust_source
from idlgen.utils.expander import CargoExpander, Expander
from idlgen.utils.manifest import read_program_name
from idlgen.utils.writer import write_document

logger = logging.getLogger(__name__)


class IdlGenerator:
    """Generates the IDL of the program described by a Cargo manifest."""

    def __init__(
        self,
        manifest_path: str | Path,
        expander: Expander | None = None,
        is_account: AccountPredicate = is_account_record,
    ):
        self.manifest_path = Path(manifest_path)
        self.expander = expander if expander is not None else CargoExpander()
        self.is_account = is_account

    def generate(self) -> IdlDocument:
        """Build the IDL document entirely in memory.

        1. Expand the crate's macros
        2. Parse the expanded source
        3. Extract instructions, accounts and types
        4. Read the program name from the manifest
        5. Assemble the document

        Any failure raises an ``IdlGenError`` subclass and nothing is returned.
        """
        logger.debug("Expanding %s", self.manifest_path)
        source = self.expander.expand(self.manifest_path)

        tree = parse_rust_source(source)
        instructions = extract_instructions(tree)
        accounts = extract_accounts(tree, self.is_account)
        types = extract_types(tree, exclude=accounts.names)

        name = read_program_name(self.manifest_path)
        document = assemble_document(name, instructions, accounts.accounts, types)

        logger.debug(
            "IDL for %s: %d instructions, %d accounts, %d types",
            document.name,
            len(document.instructions),
            len(document.accounts),
            len(document.types),
        )
        return document

    def generate_to(self, output_path: str | Path, fmt: str = "json") -> Path:
        """Generate the document and write it; nothing is written on failure."""
        document = self.generate()
        return write_document(document, output_path, fmt)


def generate_idl(
    manifest_path: str | Path,
    expander: Expander | None = None,
    account_predicate: AccountPredicate = is_account_record,
) -> IdlDocument:
    """Generate the IDL document for the crate at ``manifest_path``."""
    return IdlGenerator(manifest_path, expander=expander, is_account=account_predicate).generate()
