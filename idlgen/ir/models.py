"""Syntax tree models — the closed declaration model the extractors read.

These models are the normalized form that the Rust parser builds from the
tree-sitter concrete syntax tree. Only what the IDL extractors and the
declaration renderer need is kept; everything else collapses into
``OtherDecl`` or ``VerbatimType``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Visibility(Enum):
    PUBLIC = "public"  # pub
    CRATE = "crate"  # pub(crate), crate
    RESTRICTED = "restricted"  # pub(super), pub(self), pub(in path)
    INHERITED = "inherited"  # no modifier


class RecordShape(Enum):
    NAMED = "named"  # struct S { a: T }
    TUPLE = "tuple"  # struct S(T);
    UNIT = "unit"  # struct S;


# --- Type expressions ---


@dataclass(frozen=True)
class PrimitiveType:
    """A built-in scalar type such as ``u64``, ``bool`` or ``str``."""

    name: str


@dataclass(frozen=True)
class PathType:
    """A (possibly qualified) named type: ``Pubkey``, ``crate::state::Vault``."""

    segments: tuple[str, ...]
    leading_colon: bool = False


@dataclass(frozen=True)
class GenericType:
    """A generic application: ``Vec<u8>``, ``Account<'info, Vault>``."""

    base: TypeExpression
    arguments: tuple[TypeExpression, ...] = ()


@dataclass(frozen=True)
class ReferenceType:
    inner: TypeExpression
    mutable: bool = False
    lifetime: str = ""  # Includes the leading quote, e.g. "'a"


@dataclass(frozen=True)
class PointerType:
    inner: TypeExpression
    mutable: bool = False


@dataclass(frozen=True)
class TupleType:
    """A tuple type. The unit type ``()`` has no elements."""

    elements: tuple[TypeExpression, ...] = ()


@dataclass(frozen=True)
class ArrayType:
    element: TypeExpression
    length: str


@dataclass(frozen=True)
class SliceType:
    element: TypeExpression


@dataclass(frozen=True)
class VerbatimType:
    """Any type (or generic argument) kept as whitespace-normalized source text.

    Covers lifetimes, const arguments, associated type bindings, function
    pointers, ``impl``/``dyn`` traits, qualified paths and macro types.
    """

    text: str


TypeExpression = (
    PrimitiveType
    | PathType
    | GenericType
    | ReferenceType
    | PointerType
    | TupleType
    | ArrayType
    | SliceType
    | VerbatimType
)


# --- Declarations ---


@dataclass(frozen=True)
class Attribute:
    """An outer attribute such as ``#[account]`` or ``#[derive(Clone)]``."""

    path: str
    arguments: str = ""  # Token tree text, e.g. "(Clone, Debug)"
    value: str = ""  # For "#[doc = ...]" style attributes

    def is_ident(self, name: str) -> bool:
        """True if the attribute path is exactly the single identifier ``name``."""
        return self.path == name


@dataclass(frozen=True)
class ReceiverParam:
    """A ``self`` receiver; it carries no type binding."""

    text: str = "self"


@dataclass(frozen=True)
class TypedParam:
    """A typed parameter. ``name`` is None when the pattern is not a plain identifier."""

    name: str | None
    type: TypeExpression


Parameter = ReceiverParam | TypedParam


@dataclass(frozen=True)
class Field:
    """A struct or variant field. ``name`` is None for positional fields."""

    name: str | None
    type: TypeExpression
    visibility: Visibility = Visibility.INHERITED
    attributes: tuple[Attribute, ...] = ()
    restriction: str = ""


@dataclass(frozen=True)
class Variant:
    """A single enum variant."""

    name: str
    shape: RecordShape = RecordShape.UNIT
    fields: tuple[Field, ...] = ()
    discriminant: str = ""
    attributes: tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class FunctionDecl:
    name: str
    visibility: Visibility = Visibility.INHERITED
    attributes: tuple[Attribute, ...] = ()
    parameters: tuple[Parameter, ...] = ()


@dataclass(frozen=True)
class RecordDecl:
    """A struct declaration."""

    name: str
    visibility: Visibility = Visibility.INHERITED
    attributes: tuple[Attribute, ...] = ()
    shape: RecordShape = RecordShape.NAMED
    fields: tuple[Field, ...] = ()
    generics: str = ""  # e.g. "<'info, T: Clone>"
    where_clause: str = ""  # e.g. "where T: Copy"
    restriction: str = ""  # "super", "in crate::state" for RESTRICTED visibility

    @property
    def named_fields(self) -> tuple[Field, ...]:
        return tuple(f for f in self.fields if f.name is not None)


@dataclass(frozen=True)
class ChoiceDecl:
    """An enum declaration."""

    name: str
    visibility: Visibility = Visibility.INHERITED
    attributes: tuple[Attribute, ...] = ()
    variants: tuple[Variant, ...] = ()
    generics: str = ""
    where_clause: str = ""
    restriction: str = ""


@dataclass(frozen=True)
class OtherDecl:
    """Any top-level item the extractors ignore (impl, mod, use, union, ...)."""

    kind: str
    name: str = ""


Declaration = FunctionDecl | RecordDecl | ChoiceDecl | OtherDecl


@dataclass(frozen=True)
class SyntaxTree:
    """The top-level declarations of one expanded source file, in source order."""

    declarations: tuple[Declaration, ...] = field(default_factory=tuple)

    @property
    def functions(self) -> list[FunctionDecl]:
        return [d for d in self.declarations if isinstance(d, FunctionDecl)]

    @property
    def records(self) -> list[RecordDecl]:
        return [d for d in self.declarations if isinstance(d, RecordDecl)]

    @property
    def choices(self) -> list[ChoiceDecl]:
        return [d for d in self.declarations if isinstance(d, ChoiceDecl)]
