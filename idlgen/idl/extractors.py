"""Extraction passes — classify top-level declarations into IDL entries.

The three passes are pure functions of the syntax tree. They share nothing
but the account name set that the account pass hands to the type pass, so
that a record is never emitted both as an account and as a type.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from idlgen.idl.models import IdlAccount, IdlArgument, IdlField, IdlInstruction, IdlType
from idlgen.ir.models import (
    ChoiceDecl,
    FunctionDecl,
    OtherDecl,
    ReceiverParam,
    RecordDecl,
    SyntaxTree,
    TypedParam,
    Visibility,
)
from idlgen.ir.render import render_declaration, render_type

logger = logging.getLogger(__name__)

# Attribute paths that mark a struct as an account under the default heuristic
ACCOUNT_ATTRIBUTES = ("account", "derive")

# Placeholder name for parameters bound by a non-identifier pattern
WILDCARD_ARG_NAME = "_"

AccountPredicate = Callable[[RecordDecl], bool]


def is_account_record(record: RecordDecl) -> bool:
    """Default account classifier.

    Any ``#[account]`` or ``#[derive(...)]`` attribute qualifies, so derived
    plain data structs are classified as accounts too.
    """
    return any(attr.is_ident(name) for attr in record.attributes for name in ACCOUNT_ATTRIBUTES)


def has_account_marker(record: RecordDecl) -> bool:
    """Strict account classifier: only an explicit ``#[account]`` qualifies."""
    return any(attr.is_ident("account") for attr in record.attributes)


@dataclass(frozen=True)
class AccountExtraction:
    """Accounts in source order plus the set of names they claim."""

    accounts: list[IdlAccount] = field(default_factory=list)
    names: frozenset[str] = frozenset()


def extract_instructions(tree: SyntaxTree) -> list[IdlInstruction]:
    """Emit one instruction per top-level ``pub`` function, in source order."""
    instructions = []
    for decl in tree.declarations:
        match decl:
            case FunctionDecl(visibility=Visibility.PUBLIC):
                instructions.append(_instruction_from(decl))
            case FunctionDecl() | RecordDecl() | ChoiceDecl() | OtherDecl():
                pass
    logger.debug("Extracted %d instructions", len(instructions))
    return instructions


def _instruction_from(fn: FunctionDecl) -> IdlInstruction:
    args = []
    for param in fn.parameters:
        match param:
            case TypedParam(name=name, type=ty):
                args.append(
                    IdlArgument(
                        name=name if name is not None else WILDCARD_ARG_NAME,
                        type_name=render_type(ty),
                    )
                )
            case ReceiverParam():
                continue
    return IdlInstruction(name=fn.name, args=args, accounts=[])


def extract_accounts(
    tree: SyntaxTree, is_account: AccountPredicate = is_account_record
) -> AccountExtraction:
    """Emit one account per struct the classifier accepts, in source order."""
    accounts = []
    for decl in tree.declarations:
        match decl:
            case RecordDecl() if is_account(decl):
                accounts.append(_account_from(decl))
            case FunctionDecl() | RecordDecl() | ChoiceDecl() | OtherDecl():
                pass
    logger.debug("Extracted %d accounts", len(accounts))
    return AccountExtraction(accounts=accounts, names=frozenset(a.name for a in accounts))


def _account_from(record: RecordDecl) -> IdlAccount:
    fields = [
        IdlField(name=f.name, type_name=render_type(f.type))
        for f in record.named_fields
    ]
    return IdlAccount(name=record.name, type_name=record.name, fields=fields)


def extract_types(tree: SyntaxTree, exclude: frozenset[str] | set[str] = frozenset()) -> list[IdlType]:
    """Emit every struct not named in ``exclude`` and every enum, in source order."""
    types = []
    for decl in tree.declarations:
        match decl:
            case RecordDecl(name=name) if name not in exclude:
                types.append(IdlType(name=name, type_def=render_declaration(decl)))
            case ChoiceDecl(name=name):
                types.append(IdlType(name=name, type_def=render_declaration(decl)))
            case FunctionDecl() | RecordDecl() | OtherDecl():
                pass
    logger.debug("Extracted %d types", len(types))
    return types
