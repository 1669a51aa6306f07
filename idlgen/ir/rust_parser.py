"""Rust IR parser — builds the declaration model from expanded Rust source.

Parsing is delegated to tree-sitter with the Rust grammar. This module only
lowers the concrete syntax tree into the closed model in ``idlgen.ir.models``:
top-level functions, structs and enums are kept in detail, everything else
becomes an ``OtherDecl``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

import tree_sitter_rust as tsrust
from tree_sitter import Language, Node, Parser

from idlgen.errors import ParseFailure
from idlgen.ir.models import (
    ArrayType,
    Attribute,
    ChoiceDecl,
    Declaration,
    Field,
    FunctionDecl,
    GenericType,
    OtherDecl,
    Parameter,
    PathType,
    PointerType,
    PrimitiveType,
    ReceiverParam,
    RecordDecl,
    RecordShape,
    ReferenceType,
    SliceType,
    SyntaxTree,
    TupleType,
    TypedParam,
    TypeExpression,
    Variant,
    VerbatimType,
    Visibility,
)
from idlgen.ir.render import render_type

logger = logging.getLogger(__name__)

RUST_LANGUAGE = Language(tsrust.language())

# Nodes that never terminate a run of outer attributes
COMMENT_NODES = {"line_comment", "block_comment"}

# Crate-level attributes belong to no declaration
SKIPPED_NODES = {"inner_attribute_item"}

# Items whose `body` the IR never reads; grammar gaps inside them are ignored
OPAQUE_BODY_ITEMS = {"function_item", "impl_item", "mod_item", "trait_item"}

# Path components that may appear in a type path
PATH_NODES = {"identifier", "type_identifier", "crate", "super", "self", "metavariable"}

_RESTRICTED_VIS_RE = re.compile(r"^pub\s*\(\s*(.+?)\s*\)$")


def parse_rust_source(source: str) -> SyntaxTree:
    """Parse expanded Rust source text into a ``SyntaxTree``.

    Raises:
        ParseFailure: If tree-sitter reports a syntax error outside function,
            impl, mod and trait bodies.
    """
    src = source.encode("utf-8")
    tree = Parser(RUST_LANGUAGE).parse(src)
    root = tree.root_node

    bad = _first_error(root)
    if bad is not None:
        line, column = bad.start_point[0] + 1, bad.start_point[1] + 1
        raise ParseFailure(
            f"Expanded source is not valid Rust: syntax error at line {line}, column {column}",
            line=line,
            column=column,
        )

    declarations: list[Declaration] = []
    pending: list[Attribute] = []

    for node in root.named_children:
        if node.type == "attribute_item":
            pending.append(_parse_attribute(node, src))
            continue
        if node.type in COMMENT_NODES:
            doc = _doc_attribute(node, src)
            if doc:
                pending.append(doc)
            continue
        if node.type in SKIPPED_NODES:
            continue

        attrs = tuple(pending)
        pending = []

        if node.type == "function_item":
            declarations.append(_parse_function(node, src, attrs))
        elif node.type == "struct_item":
            declarations.append(_parse_struct(node, src, attrs))
        elif node.type == "enum_item":
            declarations.append(_parse_enum(node, src, attrs))
        else:
            name_node = node.child_by_field_name("name")
            name = _text(name_node, src) if name_node is not None else ""
            declarations.append(OtherDecl(kind=node.type, name=name))

    logger.debug("Parsed %d top-level declarations", len(declarations))
    return SyntaxTree(declarations=tuple(declarations))


def parse_rust_file(file_path: str | Path) -> SyntaxTree:
    """Parse a file of expanded Rust source."""
    return parse_rust_source(Path(file_path).read_text(encoding="utf-8", errors="replace"))


# --- Declarations ---


def _parse_function(node: Node, src: bytes, attrs: tuple[Attribute, ...]) -> FunctionDecl:
    visibility, _ = _parse_visibility(node, src)
    params: list[Parameter] = []

    params_node = node.child_by_field_name("parameters")
    if params_node is not None:
        for child in params_node.named_children:
            if child.type == "self_parameter":
                params.append(ReceiverParam(text=_normalize(_text(child, src))))
            elif child.type == "parameter":
                params.append(_parse_parameter(child, src))

    return FunctionDecl(
        name=_text(node.child_by_field_name("name"), src),
        visibility=visibility,
        attributes=attrs,
        parameters=tuple(params),
    )


def _parse_parameter(node: Node, src: bytes) -> Parameter:
    pattern = node.child_by_field_name("pattern")
    type_node = node.child_by_field_name("type")

    # "self: Box<Self>" is still a receiver
    if pattern is not None and pattern.type == "self":
        return ReceiverParam(text=_normalize(_text(node, src)))

    return TypedParam(name=_binding_name(pattern, src), type=_parse_type(type_node, src))


def _binding_name(pattern: Node | None, src: bytes) -> str | None:
    """Return the bound identifier for simple identifier patterns, else None."""
    if pattern is None:
        return None
    if pattern.type == "identifier":
        return _text(pattern, src)
    if pattern.type in ("mut_pattern", "ref_pattern", "captured_pattern"):
        inner = [c for c in pattern.named_children if c.type != "mutable_specifier"]
        if inner:
            return _binding_name(inner[0], src)
    return None


def _parse_struct(node: Node, src: bytes, attrs: tuple[Attribute, ...]) -> RecordDecl:
    visibility, restriction = _parse_visibility(node, src)
    body = node.child_by_field_name("body")

    if body is None:
        shape, fields = RecordShape.UNIT, ()
    elif body.type == "ordered_field_declaration_list":
        shape, fields = RecordShape.TUPLE, _parse_ordered_fields(body, src)
    else:
        shape, fields = RecordShape.NAMED, _parse_named_fields(body, src)

    return RecordDecl(
        name=_text(node.child_by_field_name("name"), src),
        visibility=visibility,
        restriction=restriction,
        attributes=attrs,
        shape=shape,
        fields=fields,
        generics=_optional_text(node.child_by_field_name("type_parameters"), src),
        where_clause=_optional_text(_child_of_type(node, "where_clause"), src),
    )


def _parse_enum(node: Node, src: bytes, attrs: tuple[Attribute, ...]) -> ChoiceDecl:
    visibility, restriction = _parse_visibility(node, src)
    variants: list[Variant] = []
    pending: list[Attribute] = []

    body = node.child_by_field_name("body")
    for child in body.named_children if body is not None else []:
        if child.type == "attribute_item":
            pending.append(_parse_attribute(child, src))
        elif child.type in COMMENT_NODES:
            doc = _doc_attribute(child, src)
            if doc:
                pending.append(doc)
        elif child.type == "enum_variant":
            variants.append(_parse_variant(child, src, tuple(pending)))
            pending = []

    return ChoiceDecl(
        name=_text(node.child_by_field_name("name"), src),
        visibility=visibility,
        restriction=restriction,
        attributes=attrs,
        variants=tuple(variants),
        generics=_optional_text(node.child_by_field_name("type_parameters"), src),
        where_clause=_optional_text(_child_of_type(node, "where_clause"), src),
    )


def _parse_variant(node: Node, src: bytes, attrs: tuple[Attribute, ...]) -> Variant:
    body = node.child_by_field_name("body")
    value = node.child_by_field_name("value")

    if body is None:
        shape, fields = RecordShape.UNIT, ()
    elif body.type == "ordered_field_declaration_list":
        shape, fields = RecordShape.TUPLE, _parse_ordered_fields(body, src)
    else:
        shape, fields = RecordShape.NAMED, _parse_named_fields(body, src)

    return Variant(
        name=_text(node.child_by_field_name("name"), src),
        shape=shape,
        fields=fields,
        discriminant=_optional_text(value, src),
        attributes=attrs,
    )


def _parse_named_fields(body: Node, src: bytes) -> tuple[Field, ...]:
    fields = []
    pending: list[Attribute] = []
    for child in body.named_children:
        if child.type == "attribute_item":
            pending.append(_parse_attribute(child, src))
        elif child.type in COMMENT_NODES:
            doc = _doc_attribute(child, src)
            if doc:
                pending.append(doc)
        elif child.type == "field_declaration":
            visibility, restriction = _parse_visibility(child, src)
            fields.append(
                Field(
                    name=_text(child.child_by_field_name("name"), src),
                    type=_parse_type(child.child_by_field_name("type"), src),
                    visibility=visibility,
                    restriction=restriction,
                    attributes=tuple(pending),
                )
            )
            pending = []
    return tuple(fields)


def _parse_ordered_fields(body: Node, src: bytes) -> tuple[Field, ...]:
    """Parse a positional field list: ``(pub u64, #[attr] Pubkey)``."""
    fields = []
    pending: list[Attribute] = []
    visibility, restriction = Visibility.INHERITED, ""
    for child in body.named_children:
        if child.type == "attribute_item":
            pending.append(_parse_attribute(child, src))
        elif child.type in COMMENT_NODES:
            continue
        elif child.type == "visibility_modifier":
            visibility, restriction = _visibility_from_text(_text(child, src))
        else:
            fields.append(
                Field(
                    name=None,
                    type=_parse_type(child, src),
                    visibility=visibility,
                    restriction=restriction,
                    attributes=tuple(pending),
                )
            )
            pending = []
            visibility, restriction = Visibility.INHERITED, ""
    return tuple(fields)


# --- Attributes and visibility ---


def _parse_attribute(node: Node, src: bytes) -> Attribute:
    """Parse an ``attribute_item`` (``#[path(args)]`` or ``#[path = value]``)."""
    attr = _child_of_type(node, "attribute")
    if attr is None:
        return Attribute(path=_normalize(_text(node, src)))

    path_node = attr.named_children[0] if attr.named_children else None
    arguments = attr.child_by_field_name("arguments")
    value = attr.child_by_field_name("value")

    return Attribute(
        path="".join(_text(path_node, src).split()) if path_node is not None else "",
        arguments=_optional_text(arguments, src),
        value=_optional_text(value, src),
    )


def _doc_attribute(node: Node, src: bytes) -> Attribute | None:
    """Turn an outer ``///`` doc comment into its ``#[doc = "..."]`` attribute."""
    text = _text(node, src)
    if not text.startswith("///") or text.startswith("////"):
        return None
    body = text[3:].rstrip("\r\n")
    escaped = body.replace("\\", "\\\\").replace('"', '\\"')
    return Attribute(path="doc", value=f'"{escaped}"')


def _parse_visibility(node: Node, src: bytes) -> tuple[Visibility, str]:
    vis = _child_of_type(node, "visibility_modifier")
    if vis is None:
        return Visibility.INHERITED, ""
    return _visibility_from_text(_text(vis, src))


def _visibility_from_text(text: str) -> tuple[Visibility, str]:
    text = _normalize(text)
    if text == "pub":
        return Visibility.PUBLIC, ""
    if text == "crate":
        return Visibility.CRATE, ""
    match = _RESTRICTED_VIS_RE.match(text)
    if match:
        scope = match.group(1)
        if scope == "crate":
            return Visibility.CRATE, ""
        return Visibility.RESTRICTED, scope
    return Visibility.INHERITED, ""


# --- Types ---


def _parse_type(node: Node | None, src: bytes) -> TypeExpression:
    """Lower a tree-sitter type node. Unmodelled forms become ``VerbatimType``."""
    if node is None:
        return VerbatimType(text="_")

    kind = node.type
    if kind == "primitive_type":
        return PrimitiveType(name=_text(node, src))
    if kind == "type_identifier":
        return PathType(segments=(_text(node, src),))
    if kind == "scoped_type_identifier":
        path = _path_of(node, src)
        if path is not None:
            segments, leading_colon = path
            return PathType(segments=tuple(segments), leading_colon=leading_colon)
    elif kind == "generic_type":
        base = _parse_type(node.child_by_field_name("type"), src)
        args = node.child_by_field_name("type_arguments")
        arguments = tuple(_parse_type_argument(a, src) for a in args.named_children) if args else ()
        return GenericType(base=base, arguments=arguments)
    elif kind == "reference_type":
        lifetime = _child_of_type(node, "lifetime")
        return ReferenceType(
            inner=_parse_type(node.child_by_field_name("type"), src),
            mutable=_child_of_type(node, "mutable_specifier") is not None,
            lifetime="".join(_text(lifetime, src).split()) if lifetime is not None else "",
        )
    elif kind == "pointer_type":
        return PointerType(
            inner=_parse_type(node.child_by_field_name("type"), src),
            mutable=_child_of_type(node, "mutable_specifier") is not None,
        )
    elif kind == "unit_type":
        return TupleType(elements=())
    elif kind == "tuple_type":
        return TupleType(elements=tuple(_parse_type(c, src) for c in _type_children(node)))
    elif kind == "array_type":
        element = _parse_type(node.child_by_field_name("element"), src)
        length = node.child_by_field_name("length")
        if length is None:
            return SliceType(element=element)
        return ArrayType(element=element, length=_normalize(_text(length, src)))

    return VerbatimType(text=_normalize(_text(node, src)))


def _parse_type_argument(node: Node, src: bytes) -> TypeExpression:
    if node.type == "lifetime":
        return VerbatimType(text="".join(_text(node, src).split()))
    if node.type == "type_binding" and node.child_by_field_name("type_arguments") is None:
        name = _text(node.child_by_field_name("name"), src)
        bound = _parse_type(node.child_by_field_name("type"), src)
        return VerbatimType(text=f"{name} = {render_type(bound)}")
    return _parse_type(node, src)


def _path_of(node: Node, src: bytes) -> tuple[list[str], bool] | None:
    """Flatten a (scoped) path into its segments.

    Returns None when the path holds anything but plain identifiers, such as
    generic arguments or a qualified ``<T as Trait>`` prefix.
    """
    if node.type in PATH_NODES:
        return [_text(node, src)], False
    if node.type not in ("scoped_identifier", "scoped_type_identifier"):
        return None

    prefix = node.child_by_field_name("path")
    name = node.child_by_field_name("name")
    if name is None:
        return None

    if prefix is None:
        # "::std" style absolute path
        return [_text(name, src)], True

    inner = _path_of(prefix, src)
    if inner is None:
        return None
    segments, leading_colon = inner
    return [*segments, _text(name, src)], leading_colon


def _type_children(node: Node) -> list[Node]:
    return [c for c in node.named_children if c.type not in COMMENT_NODES]


# --- Node helpers ---


def _text(node: Node | None, src: bytes) -> str:
    if node is None:
        return ""
    return src[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def _optional_text(node: Node | None, src: bytes) -> str:
    return _normalize(_text(node, src)) if node is not None else ""


def _normalize(text: str) -> str:
    """Collapse every run of whitespace to a single space."""
    return " ".join(text.split())


def _child_of_type(node: Node, node_type: str) -> Node | None:
    for child in node.children:
        if child.type == node_type:
            return child
    return None


def _first_error(node: Node) -> Node | None:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.is_error or current.is_missing:
            return current
        if not current.has_error:
            continue
        children = current.children
        if current.type in OPAQUE_BODY_ITEMS:
            body = current.child_by_field_name("body")
            if body is not None and not body.is_missing:
                children = [c for c in children if c.id != body.id]
        stack.extend(reversed(children))
    return None
