"""Canonical text rendering for type expressions and declarations.

Rendering is total and deterministic: every model value has exactly one
textual form, and nothing here can fail.
"""

from __future__ import annotations

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
    TypeExpression,
    Variant,
    VerbatimType,
    Visibility,
)

INDENT = "    "


def render_type(ty: TypeExpression) -> str:
    """Render a type expression in canonical Rust syntax."""
    match ty:
        case PrimitiveType(name=name):
            return name
        case PathType(segments=segments, leading_colon=leading_colon):
            path = "::".join(segments)
            return f"::{path}" if leading_colon else path
        case GenericType(base=base, arguments=arguments):
            args = ", ".join(render_type(a) for a in arguments)
            return f"{render_type(base)}<{args}>"
        case ReferenceType(inner=inner, mutable=mutable, lifetime=lifetime):
            lifetime_part = f"{lifetime} " if lifetime else ""
            mut_part = "mut " if mutable else ""
            return f"&{lifetime_part}{mut_part}{render_type(inner)}"
        case PointerType(inner=inner, mutable=mutable):
            qualifier = "mut" if mutable else "const"
            return f"*{qualifier} {render_type(inner)}"
        case TupleType(elements=elements):
            if len(elements) == 1:
                return f"({render_type(elements[0])},)"
            return "(" + ", ".join(render_type(e) for e in elements) + ")"
        case ArrayType(element=element, length=length):
            return f"[{render_type(element)}; {length}]"
        case SliceType(element=element):
            return f"[{render_type(element)}]"
        case VerbatimType(text=text):
            return text
    raise TypeError(f"Not a type expression: {ty!r}")


def render_attribute(attr: Attribute) -> str:
    if attr.value:
        return f"#[{attr.path} = {attr.value}]"
    return f"#[{attr.path}{attr.arguments}]"


def render_visibility(visibility: Visibility, restriction: str = "") -> str:
    """Return the visibility prefix, including its trailing space when non-empty."""
    if visibility is Visibility.PUBLIC:
        return "pub "
    if visibility is Visibility.CRATE:
        return "pub(crate) "
    if visibility is Visibility.RESTRICTED:
        return f"pub({restriction or 'super'}) "
    return ""


def render_declaration(decl: RecordDecl | ChoiceDecl) -> str:
    """Render a struct or enum declaration as canonical source text.

    The output carries the declaration's outer attributes (one per line),
    visibility, generics and where clause. Named fields and variants are
    written one per line, indented, each followed by a comma.
    """
    lines = [render_attribute(a) for a in decl.attributes]
    vis = render_visibility(decl.visibility, decl.restriction)
    where = f" {decl.where_clause}" if decl.where_clause else ""

    if isinstance(decl, ChoiceDecl):
        header = f"{vis}enum {decl.name}{decl.generics}{where}"
        body = [_render_variant(v) for v in decl.variants]
        lines.extend(_braced(header, body))
    elif decl.shape is RecordShape.UNIT:
        lines.append(f"{vis}struct {decl.name}{decl.generics}{where};")
    elif decl.shape is RecordShape.TUPLE:
        fields = ", ".join(_render_inline_field(f) for f in decl.fields)
        lines.append(f"{vis}struct {decl.name}{decl.generics}({fields}){where};")
    else:
        header = f"{vis}struct {decl.name}{decl.generics}{where}"
        body = [_render_named_field(f) for f in decl.fields]
        lines.extend(_braced(header, body))

    return "\n".join(lines)


def _braced(header: str, entries: list[list[str]]) -> list[str]:
    if not entries:
        return [f"{header} {{}}"]
    lines = [f"{header} {{"]
    for entry in entries:
        *leading, last = entry
        lines.extend(INDENT + line for line in leading)
        lines.append(f"{INDENT}{last},")
    lines.append("}")
    return lines


def _render_named_field(f: Field) -> list[str]:
    lines = [render_attribute(a) for a in f.attributes]
    vis = render_visibility(f.visibility, f.restriction)
    lines.append(f"{vis}{f.name}: {render_type(f.type)}")
    return lines


def _render_inline_field(f: Field) -> str:
    attrs = "".join(f"{render_attribute(a)} " for a in f.attributes)
    vis = render_visibility(f.visibility, f.restriction)
    name = f"{f.name}: " if f.name is not None else ""
    return f"{attrs}{vis}{name}{render_type(f.type)}"


def _render_variant(v: Variant) -> list[str]:
    lines = [render_attribute(a) for a in v.attributes]
    if v.shape is RecordShape.TUPLE:
        text = f"{v.name}(" + ", ".join(_render_inline_field(f) for f in v.fields) + ")"
    elif v.shape is RecordShape.NAMED:
        inner = ", ".join(_render_inline_field(f) for f in v.fields)
        text = f"{v.name} {{ {inner} }}" if inner else f"{v.name} {{}}"
    else:
        text = v.name
    if v.discriminant:
        text += f" = {v.discriminant}"
    lines.append(text)
    return lines
