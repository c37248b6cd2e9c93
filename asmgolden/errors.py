from __future__ import annotations


class TableError(Exception):
    """Base class for every table/catalog integrity problem."""


class UnknownArchitecture(TableError):
    def __init__(self, architecture: str, known: tuple[str, ...] = ()) -> None:
        self.architecture = architecture
        self.known = known
        hint = f" (known: {', '.join(known)})" if known else ""
        super().__init__(f"no table definitions for architecture {architecture!r}{hint}")


class UndefinedField(TableError):
    """The catalog names a field the architecture table does not declare.

    This means the catalog and the table have drifted apart and generation
    for the architecture must stop.
    """

    def __init__(self, architecture: str, field: str, mnemonic: str | None = None) -> None:
        self.architecture = architecture
        self.field = field
        self.mnemonic = mnemonic
        where = f" (used by {mnemonic})" if mnemonic else ""
        super().__init__(f"{architecture}: undefined field {field!r}{where}")


class DuplicateField(TableError):
    def __init__(self, architecture: str, field: str, first_line: int, line: int) -> None:
        self.architecture = architecture
        self.field = field
        self.first_line = first_line
        self.line = line
        super().__init__(
            f"{architecture}: field {field!r} declared on line {first_line} "
            f"and again on line {line}"
        )


class FieldDomainError(TableError):
    def __init__(self, architecture: str, field: str, reason: str) -> None:
        self.architecture = architecture
        self.field = field
        self.reason = reason
        super().__init__(f"{architecture}: field {field!r}: {reason}")


class DefinitionSyntaxError(TableError):
    def __init__(self, source: str, line: int, column: int, detail: str) -> None:
        self.source = source
        self.line = line
        self.column = column
        self.detail = detail
        super().__init__(f"{source}:{line}:{column}: {detail}")


class DeadOverride(TableError):
    """An override whose source mnemonic no catalog format uses.

    Advisory by default; only raised when the caller asks for strict checks.
    """

    def __init__(self, architecture: str, mnemonic: str) -> None:
        self.architecture = architecture
        self.mnemonic = mnemonic
        super().__init__(
            f"{architecture}: override for {mnemonic!r} is never used by the catalog"
        )


class AmbiguousEncoding(TableError):
    """Field values collide with an extended mnemonic the toolchain prefers.

    Nothing in this package can detect this (it has no encoder); it shows up
    as a golden diff mismatch. Diff tooling raises it so the report points at
    the fix: add a mnemonic override or change the offending field value.
    """

    def __init__(self, architecture: str, expected: str, printed: str) -> None:
        self.architecture = architecture
        self.expected = expected
        self.printed = printed
        super().__init__(
            f"{architecture}: expected {expected!r} but the reference toolchain "
            f"printed {printed!r}; add an override or change the field values"
        )


class CatalogError(TableError):
    pass


__all__ = [
    "AmbiguousEncoding",
    "CatalogError",
    "DeadOverride",
    "DefinitionSyntaxError",
    "DuplicateField",
    "FieldDomainError",
    "TableError",
    "UndefinedField",
    "UnknownArchitecture",
]
