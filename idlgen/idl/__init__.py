"""IDL document model, extraction passes and output schema.

This package provides:
1. Models — the IDL document and its entries
2. Extractors — instructions, accounts and types from a syntax tree
3. Schema — JSON Schema for the written document, and a validator for it
"""

IDL_VERSION = "0.1.0"
