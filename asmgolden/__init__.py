"""
Canonical operand values and mnemonic overrides for disassembler golden tests.

Each supported architecture has one table definition file under ``data/``.
The generator renders every form of an instruction catalog with those values
so the reference toolchain's disassembly can be checked in as golden output.
"""

from .errors import (  # noqa: F401
    AmbiguousEncoding,
    CatalogError,
    DeadOverride,
    DefinitionSyntaxError,
    DuplicateField,
    FieldDomainError,
    TableError,
    UndefinedField,
    UnknownArchitecture,
)
from .fields import FieldRole, FieldValue, FieldValueTable, Rationale  # noqa: F401
from .overrides import AliasKind, MnemonicAlias, MnemonicOverrideTable  # noqa: F401
from .tables import (  # noqa: F401
    ArchitectureTable,
    available_architectures,
    build_table,
    check_catalog,
    load,
    resolve_field,
    resolve_mnemonic,
)

__all__ = [
    "AliasKind",
    "AmbiguousEncoding",
    "ArchitectureTable",
    "CatalogError",
    "DeadOverride",
    "DefinitionSyntaxError",
    "DuplicateField",
    "FieldDomainError",
    "FieldRole",
    "FieldValue",
    "FieldValueTable",
    "MnemonicAlias",
    "MnemonicOverrideTable",
    "Rationale",
    "TableError",
    "UndefinedField",
    "UnknownArchitecture",
    "available_architectures",
    "build_table",
    "check_catalog",
    "load",
    "resolve_field",
    "resolve_mnemonic",
]
