"""Rust declaration model and its tree-sitter front end.

The IR is what the IDL extractors operate on. It sits between the concrete
tree-sitter parse of the macro-expanded crate and the IDL document, and
normalizes:
- Top-level declarations (functions, structs, enums, everything else)
- Type expressions, rendered back to canonical Rust syntax on demand
- Outer attributes, including doc comments
"""
