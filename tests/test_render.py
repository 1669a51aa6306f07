"""Tests for canonical type and declaration rendering."""

from idlgen.ir.models import (
    ArrayType,
    Attribute,
    ChoiceDecl,
    Field,
    GenericType,
    PathType,
    PointerType,
    PrimitiveType,
    RecordDecl,
    RecordShape,
    ReferenceType,
    SliceType,
    TupleType,
    Variant,
    VerbatimType,
    Visibility,
)
from idlgen.ir.render import render_attribute, render_declaration, render_type
from idlgen.ir.rust_parser import parse_rust_source

U8 = PrimitiveType("u8")


# --- Types ---


def test_render_simple_types():
    assert render_type(PrimitiveType("u64")) == "u64"
    assert render_type(PathType(segments=("Pubkey",))) == "Pubkey"
    assert render_type(PathType(segments=("crate", "state", "Vault"))) == "crate::state::Vault"
    assert render_type(PathType(segments=("std", "string", "String"), leading_colon=True)) == (
        "::std::string::String"
    )


def test_render_generic_of_array():
    ty = GenericType(base=PathType(segments=("Vec",)), arguments=(ArrayType(element=U8, length="32"),))
    assert render_type(ty) == "Vec<[u8; 32]>"


def test_render_nested_generics():
    ty = GenericType(
        base=PathType(segments=("HashMap",)),
        arguments=(
            PathType(segments=("String",)),
            GenericType(base=PathType(segments=("Vec",)), arguments=(U8,)),
        ),
    )
    assert render_type(ty) == "HashMap<String, Vec<u8>>"


def test_render_references_and_pointers():
    assert render_type(ReferenceType(inner=PrimitiveType("str"))) == "&str"
    assert render_type(ReferenceType(inner=U8, mutable=True, lifetime="'a")) == "&'a mut u8"
    assert render_type(PointerType(inner=U8)) == "*const u8"
    assert render_type(PointerType(inner=U8, mutable=True)) == "*mut u8"


def test_render_tuples_and_slices():
    assert render_type(TupleType()) == "()"
    assert render_type(TupleType(elements=(U8,))) == "(u8,)"
    assert render_type(TupleType(elements=(U8, PrimitiveType("u16")))) == "(u8, u16)"
    assert render_type(SliceType(element=U8)) == "[u8]"


def test_render_verbatim():
    ty = GenericType(
        base=PathType(segments=("Account",)),
        arguments=(VerbatimType(text="'info"), PathType(segments=("Vault",))),
    )
    assert render_type(ty) == "Account<'info, Vault>"


def test_render_type_is_idempotent():
    ty = GenericType(
        base=PathType(segments=("Option",)),
        arguments=(GenericType(base=PathType(segments=("Box",)), arguments=(U8,)),),
    )
    assert render_type(ty) == render_type(ty) == "Option<Box<u8>>"


def test_render_parsed_types_canonically():
    tree = parse_rust_source("struct S {\n    a: Vec< [ u8 ;32 ] >,\n    b: Option<&'static   str>,\n}\n")
    assert [render_type(f.type) for f in tree.records[0].fields] == [
        "Vec<[u8; 32]>",
        "Option<&'static str>",
    ]


# --- Attributes ---


def test_render_attributes():
    assert render_attribute(Attribute(path="account")) == "#[account]"
    assert render_attribute(Attribute(path="derive", arguments="(Clone, Debug)")) == (
        "#[derive(Clone, Debug)]"
    )
    assert render_attribute(Attribute(path="doc", value='" Docs"')) == '#[doc = " Docs"]'


# --- Declarations ---


def test_render_named_struct():
    decl = RecordDecl(
        name="Config",
        visibility=Visibility.PUBLIC,
        fields=(
            Field(name="admin", type=PathType(segments=("Pubkey",)), visibility=Visibility.PUBLIC),
            Field(name="fee_bps", type=PrimitiveType("u16")),
        ),
    )
    assert render_declaration(decl) == (
        "pub struct Config {\n"
        "    pub admin: Pubkey,\n"
        "    fee_bps: u16,\n"
        "}"
    )


def test_render_struct_with_attributes_and_generics():
    decl = RecordDecl(
        name="Holder",
        attributes=(Attribute(path="repr", arguments="(C)"),),
        generics="<T>",
        where_clause="where T: Copy",
        fields=(
            Field(
                name="value",
                type=PathType(segments=("T",)),
                attributes=(Attribute(path="doc", value='" Held value"'),),
            ),
        ),
    )
    assert render_declaration(decl) == (
        "#[repr(C)]\n"
        "struct Holder<T> where T: Copy {\n"
        '    #[doc = " Held value"]\n'
        "    value: T,\n"
        "}"
    )


def test_render_tuple_unit_and_empty_structs():
    tuple_struct = RecordDecl(
        name="Amount",
        visibility=Visibility.CRATE,
        shape=RecordShape.TUPLE,
        fields=(Field(name=None, type=PrimitiveType("u64"), visibility=Visibility.PUBLIC),),
    )
    assert render_declaration(tuple_struct) == "pub(crate) struct Amount(pub u64);"
    assert render_declaration(RecordDecl(name="Marker", shape=RecordShape.UNIT)) == "struct Marker;"
    assert render_declaration(RecordDecl(name="Empty")) == "struct Empty {}"


def test_render_restricted_visibility():
    decl = RecordDecl(
        name="Inner",
        visibility=Visibility.RESTRICTED,
        restriction="in crate::state",
        shape=RecordShape.UNIT,
    )
    assert render_declaration(decl) == "pub(in crate::state) struct Inner;"


def test_render_enum():
    decl = ChoiceDecl(
        name="Action",
        visibility=Visibility.PUBLIC,
        attributes=(Attribute(path="derive", arguments="(Clone)"),),
        variants=(
            Variant(name="Stop"),
            Variant(
                name="Move",
                shape=RecordShape.TUPLE,
                fields=(Field(name=None, type=U8), Field(name=None, type=U8)),
            ),
            Variant(
                name="Jump",
                shape=RecordShape.NAMED,
                fields=(Field(name="height", type=PrimitiveType("u16")),),
            ),
            Variant(name="Halt", discriminant="9"),
        ),
    )
    assert render_declaration(decl) == (
        "#[derive(Clone)]\n"
        "pub enum Action {\n"
        "    Stop,\n"
        "    Move(u8, u8),\n"
        "    Jump { height: u16 },\n"
        "    Halt = 9,\n"
        "}"
    )


def test_render_empty_enum():
    assert render_declaration(ChoiceDecl(name="Never", visibility=Visibility.PUBLIC)) == (
        "pub enum Never {}"
    )


def test_render_parsed_declaration_normalizes_layout():
    code = "#[derive( Clone ,Debug)]\npub   struct  Pair{ pub a:u8 , b : [u8;4] }\n"
    record = parse_rust_source(code).records[0]
    assert render_declaration(record) == (
        "#[derive( Clone ,Debug)]\n"
        "pub struct Pair {\n"
        "    pub a: u8,\n"
        "    b: [u8; 4],\n"
        "}"
    )


def test_render_parsed_associated_type_binding():
    tree = parse_rust_source("struct S {\n    it: Peekable<Item=u8>,\n}\n")
    assert render_type(tree.records[0].fields[0].type) == "Peekable<Item = u8>"
