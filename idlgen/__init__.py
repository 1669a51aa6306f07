"""idlgen — IDL generator for macro-expanded Rust programs."""

__version__ = "0.1.0"
