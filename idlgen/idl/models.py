"""IDL document models — the catalogue written for client generators.

Each entry is a flat projection of a declaration: types are carried as their
canonical rendered text, not as parsed structure.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from idlgen.idl import IDL_VERSION


# --- Instructions ---


@dataclass(frozen=True)
class IdlArgument:
    name: str
    type_name: str


@dataclass(frozen=True)
class IdlAccountMeta:
    """An account an instruction touches."""

    name: str
    is_mut: bool = False
    is_signer: bool = False


@dataclass(frozen=True)
class IdlInstruction:
    """An externally callable entry point of the program.

    ``accounts`` is part of the document shape but is never populated:
    account usage is not inferred from function bodies.
    """

    name: str
    args: list[IdlArgument] = field(default_factory=list)
    accounts: list[IdlAccountMeta] = field(default_factory=list)


# --- Accounts ---


@dataclass(frozen=True)
class IdlField:
    name: str
    type_name: str


@dataclass(frozen=True)
class IdlAccount:
    """A persistent data record."""

    name: str
    type_name: str
    fields: list[IdlField] = field(default_factory=list)


# --- Types ---


@dataclass(frozen=True)
class IdlType:
    """Any other exposed struct or enum, with its full re-rendered definition."""

    name: str
    type_def: str


# --- The full document ---


@dataclass(frozen=True)
class IdlDocument:
    """The IDL of one program."""

    name: str
    version: str = IDL_VERSION
    instructions: list[IdlInstruction] = field(default_factory=list)
    accounts: list[IdlAccount] = field(default_factory=list)
    types: list[IdlType] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the document as plain data, keys in output order."""
        data = asdict(self)
        return {
            "version": data["version"],
            "name": data["name"],
            "instructions": data["instructions"],
            "accounts": data["accounts"],
            "types": data["types"],
        }

    @property
    def account_names(self) -> set[str]:
        return {a.name for a in self.accounts}

    @property
    def type_names(self) -> set[str]:
        return {t.name for t in self.types}
