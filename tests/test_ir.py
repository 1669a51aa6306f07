"""Tests for the Rust declaration model and its tree-sitter front end."""

import tempfile

import pytest

from idlgen.errors import ParseFailure
from idlgen.ir.models import (
    ArrayType,
    Attribute,
    ChoiceDecl,
    Field,
    FunctionDecl,
    GenericType,
    OtherDecl,
    PathType,
    PrimitiveType,
    ReceiverParam,
    RecordDecl,
    RecordShape,
    ReferenceType,
    SliceType,
    SyntaxTree,
    TupleType,
    TypedParam,
    VerbatimType,
    Visibility,
)
from idlgen.ir.rust_parser import parse_rust_file, parse_rust_source


# --- Model Tests ---


def test_attribute_is_ident():
    assert Attribute(path="account").is_ident("account")
    assert not Attribute(path="anchor_lang::account").is_ident("account")
    assert not Attribute(path="derive", arguments="(Clone)").is_ident("account")


def test_record_named_fields_skips_positional():
    record = RecordDecl(
        name="Pair",
        shape=RecordShape.NAMED,
        fields=(
            Field(name="a", type=PrimitiveType("u8")),
            Field(name=None, type=PrimitiveType("u16")),
        ),
    )
    assert [f.name for f in record.named_fields] == ["a"]


def test_syntax_tree_views():
    tree = SyntaxTree(
        declarations=(
            FunctionDecl(name="run"),
            RecordDecl(name="State"),
            ChoiceDecl(name="Mode"),
            OtherDecl(kind="impl_item"),
        )
    )
    assert [f.name for f in tree.functions] == ["run"]
    assert [r.name for r in tree.records] == ["State"]
    assert [c.name for c in tree.choices] == ["Mode"]


def test_models_are_immutable():
    fn = FunctionDecl(name="run")
    with pytest.raises(AttributeError):
        fn.name = "other"


# --- Parser: functions ---


def test_parse_public_function():
    tree = parse_rust_source("pub fn initialize(ctx: Context, amount: u64) {}\n")

    assert len(tree.functions) == 1
    fn = tree.functions[0]
    assert fn.name == "initialize"
    assert fn.visibility == Visibility.PUBLIC
    assert fn.parameters == (
        TypedParam(name="ctx", type=PathType(segments=("Context",))),
        TypedParam(name="amount", type=PrimitiveType("u64")),
    )


def test_parse_function_visibility_levels():
    code = """
pub fn a() {}
pub(crate) fn b() {}
pub(super) fn c() {}
fn d() {}
"""
    tree = parse_rust_source(code)
    assert [f.visibility for f in tree.functions] == [
        Visibility.PUBLIC,
        Visibility.CRATE,
        Visibility.RESTRICTED,
        Visibility.INHERITED,
    ]


def test_parse_receiver_parameters():
    tree = parse_rust_source("pub fn touch(&mut self, value: u8) {}\n")

    params = tree.functions[0].parameters
    assert isinstance(params[0], ReceiverParam)
    assert params[1] == TypedParam(name="value", type=PrimitiveType("u8"))


def test_parse_non_identifier_patterns():
    tree = parse_rust_source("pub fn f(mut count: u32, (a, b): (u8, u8), _: bool) {}\n")

    params = tree.functions[0].parameters
    assert params[0].name == "count"
    assert params[1].name is None
    assert params[1].type == TupleType(elements=(PrimitiveType("u8"), PrimitiveType("u8")))
    assert params[2].name is None


# --- Parser: structs and enums ---


def test_parse_struct_with_attributes():
    code = """
#[account]
#[derive(Clone, Debug)]
pub struct Vault {
    pub owner: Pubkey,
    balance: u64,
}
"""
    tree = parse_rust_source(code)

    vault = tree.records[0]
    assert vault.name == "Vault"
    assert vault.shape == RecordShape.NAMED
    assert vault.attributes == (
        Attribute(path="account"),
        Attribute(path="derive", arguments="(Clone, Debug)"),
    )
    assert [(f.name, f.visibility) for f in vault.fields] == [
        ("owner", Visibility.PUBLIC),
        ("balance", Visibility.INHERITED),
    ]


def test_parse_tuple_and_unit_structs():
    tree = parse_rust_source("pub struct Amount(pub u64, u8);\npub struct Marker;\n")

    amount, marker = tree.records
    assert amount.shape == RecordShape.TUPLE
    assert [f.name for f in amount.fields] == [None, None]
    assert amount.fields[0].visibility == Visibility.PUBLIC
    assert marker.shape == RecordShape.UNIT
    assert marker.fields == ()


def test_parse_generics_and_where_clause():
    code = "pub struct Wrapper<'a, T> where T: Clone {\n    inner: &'a T,\n}\n"
    tree = parse_rust_source(code)

    wrapper = tree.records[0]
    assert wrapper.generics == "<'a, T>"
    assert wrapper.where_clause == "where T: Clone"
    assert wrapper.fields[0].type == ReferenceType(
        inner=PathType(segments=("T",)), lifetime="'a"
    )


def test_parse_enum_variants():
    code = """
pub enum Action {
    Stop,
    Move(u8, u8),
    Jump { height: u16 },
    Halt = 9,
}
"""
    tree = parse_rust_source(code)

    action = tree.choices[0]
    assert [v.name for v in action.variants] == ["Stop", "Move", "Jump", "Halt"]
    assert [v.shape for v in action.variants] == [
        RecordShape.UNIT,
        RecordShape.TUPLE,
        RecordShape.NAMED,
        RecordShape.UNIT,
    ]
    assert action.variants[2].fields[0].name == "height"
    assert action.variants[3].discriminant == "9"


def test_doc_comments_become_doc_attributes():
    code = '/// Program state\n#[account]\npub struct State {\n    /// Owner "key"\n    pub owner: Pubkey,\n}\n'
    tree = parse_rust_source(code)

    state = tree.records[0]
    assert state.attributes[0] == Attribute(path="doc", value='" Program state"')
    assert state.attributes[1] == Attribute(path="account")
    assert state.fields[0].attributes == (Attribute(path="doc", value='" Owner \\"key\\""'),)


def test_attributes_do_not_leak_past_other_items():
    code = """
#![feature(prelude_import)]
#[prelude_import]
use std::prelude::rust_2021::*;
pub struct Plain {
    pub x: u8,
}
"""
    tree = parse_rust_source(code)

    assert isinstance(tree.declarations[0], OtherDecl)
    assert tree.declarations[0].kind == "use_declaration"
    assert tree.records[0].attributes == ()


def test_parse_other_items():
    code = """
use std::collections::HashMap;
mod inner {
    pub fn nested() {}
}
impl Foo {
    pub fn method(&self) {}
}
const LIMIT: u64 = 10;
"""
    tree = parse_rust_source(code)

    kinds = [d.kind for d in tree.declarations]
    assert kinds == ["use_declaration", "mod_item", "impl_item", "const_item"]
    assert tree.functions == []


# --- Parser: types ---


def _field_type(type_text: str):
    tree = parse_rust_source(f"struct S {{ f: {type_text} }}\n")
    return tree.records[0].fields[0].type


def test_parse_path_and_generic_types():
    assert _field_type("anchor_lang::prelude::Pubkey") == PathType(
        segments=("anchor_lang", "prelude", "Pubkey")
    )
    assert _field_type("Vec<[u8; 32]>") == GenericType(
        base=PathType(segments=("Vec",)),
        arguments=(ArrayType(element=PrimitiveType("u8"), length="32"),),
    )


def test_parse_reference_slice_and_unit_types():
    assert _field_type("&'a mut [u8]") == ReferenceType(
        inner=SliceType(element=PrimitiveType("u8")), mutable=True, lifetime="'a"
    )
    assert _field_type("()") == TupleType(elements=())


def test_parse_unmodelled_types_verbatim():
    assert _field_type("fn(u8)   ->  u8") == VerbatimType(text="fn(u8) -> u8")
    assert _field_type("Box<dyn Fn()>") == GenericType(
        base=PathType(segments=("Box",)), arguments=(VerbatimType(text="dyn Fn()"),)
    )


# --- Parser: errors and files ---


def test_parse_syntax_error():
    with pytest.raises(ParseFailure) as exc_info:
        parse_rust_source("pub fn broken(\n")

    assert exc_info.value.line >= 1
    assert "not valid Rust" in str(exc_info.value)


def test_grammar_gaps_inside_function_bodies_are_ignored():
    tree = parse_rust_source("pub fn f() { let a = builtin # offset_of(A, x); }\n")

    assert [f.name for f in tree.functions] == ["f"]
    assert tree.functions[0].visibility == Visibility.PUBLIC


def test_grammar_gaps_inside_impl_bodies_are_ignored():
    code = """
impl Layout {
    fn offset() -> usize { let a = builtin # offset_of(Layout, x); a }
}
pub fn run() {}
"""
    tree = parse_rust_source(code)

    assert tree.declarations[0].kind == "impl_item"
    assert [f.name for f in tree.functions] == ["run"]


def test_syntax_error_in_struct_body_is_reported():
    with pytest.raises(ParseFailure):
        parse_rust_source("pub struct Broken {\n    a: u8\n    b: u16,\n}\n")


def test_parse_empty_source():
    assert parse_rust_source("").declarations == ()


def test_parse_rust_file():
    with tempfile.NamedTemporaryFile(mode="w", suffix=".rs", delete=False) as f:
        f.write("pub fn run() {}\n")
        f.flush()
        tree = parse_rust_file(f.name)

    assert tree.functions[0].name == "run"
