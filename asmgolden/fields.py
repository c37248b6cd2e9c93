"""Per-architecture canonical operand values.

Every field named by an instruction-format catalog resolves to exactly one
value here. The values are hand picked: register operands get small distinct
numbers so operands never alias, register-pair bases are aligned, bit ranges
stay clear of the degenerate 0/max forms, and prefixed immediates are split
into halves that stay recognisable after disassembly.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Tuple, Union

from .errors import DuplicateField, FieldDomainError, UndefinedField


class FieldRole(str, Enum):
    REGISTER = "reg"
    REGISTER_GROUP = "reg-pair"
    IMMEDIATE = "imm"
    DISPLACEMENT = "disp"
    BIT_RANGE = "bits"
    MASK = "mask"
    SHIFT = "shift"
    CONDITION = "cond"
    LEVEL = "level"
    PREFIX_IMMEDIATE = "pfx-imm"

    @property
    def is_register(self) -> bool:
        return self in (FieldRole.REGISTER, FieldRole.REGISTER_GROUP)


class Rationale(str, Enum):
    """Why a value was picked. Documentation only; never affects resolution."""

    REPRESENTATIVE = "representative"
    BOUNDARY = "boundary"
    DISAMBIGUATING = "disambiguating"


REGISTER_FILES = frozenset(
    {"gpr", "fpr", "vr", "vsr", "cr", "crbit", "acc", "ar", "cr-ctl"}
)

Resolved = Union[int, Tuple[int, ...]]


@dataclass(frozen=True, slots=True)
class FieldValue:
    name: str
    role: FieldRole
    values: Tuple[int, ...]
    widths: Tuple[int, ...]
    signed: bool = False
    regfile: Optional[str] = None
    group: int = 1
    align: int = 1
    why: Optional[Rationale] = None
    unchecked: bool = False
    may_alias: bool = False
    hex: bool = False
    rationale: str = ""
    line: int = 0

    @property
    def value(self) -> Resolved:
        """The resolved value: an int, or the ordered halves of a prefixed immediate."""

        if len(self.values) == 1:
            return self.values[0]
        return self.values

    @property
    def width(self) -> int:
        return sum(self.widths)

    @property
    def combined(self) -> int:
        """Reassemble the halves (most significant first) into one integer."""

        if len(self.values) == 1:
            return self.values[0]
        acc = 0
        for half, bits in zip(self.values, self.widths):
            acc = (acc << bits) | half
        if self.signed and acc >> (self.width - 1):
            acc -= 1 << self.width
        return acc

    def span(self) -> range:
        """Register indices occupied by a register or register-group operand."""

        base = self.combined
        return range(base, base + max(self.group, 1))

    def render(self) -> str:
        value = self.combined
        if self.role is FieldRole.PREFIX_IMMEDIATE:
            return str(value) if value < 0 else f"{value:#x}"
        if self.hex:
            return f"-{-value:#x}" if value < 0 else f"{value:#x}"
        return str(value)


def _domain(bits: int, signed: bool) -> Tuple[int, int]:
    if signed:
        return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    return 0, (1 << bits) - 1


def validate_field(architecture: str, fv: FieldValue) -> None:
    """Reject values that would synthesize an illegal or misleading operand."""

    def fail(reason: str) -> None:
        raise FieldDomainError(architecture, fv.name, reason)

    if not fv.widths or any(w <= 0 for w in fv.widths):
        fail("a positive bit width is required")
    if len(fv.values) != len(fv.widths):
        fail(f"{len(fv.values)} value(s) but {len(fv.widths)} width(s)")

    if fv.role is FieldRole.PREFIX_IMMEDIATE:
        if len(fv.values) < 2:
            fail("a prefixed immediate needs at least two halves")
        if len(set(fv.values)) != len(fv.values):
            fail("prefixed immediate halves must be distinct to expose half swaps")
        for half, bits in zip(fv.values, fv.widths):
            lo, hi = _domain(bits, False)
            if not lo <= half <= hi:
                fail(f"half {half:#x} does not fit in {bits} bits")
        return
    if len(fv.values) != 1:
        fail(f"role {fv.role.value} takes a single value")

    if fv.unchecked and not fv.rationale:
        fail("range=unchecked needs a rationale comment")

    value = fv.values[0]
    bits = fv.widths[0]
    lo, hi = _domain(bits, fv.signed)
    if not fv.unchecked and not lo <= value <= hi:
        fail(f"value {value} outside [{lo}, {hi}]")
    if fv.align < 1:
        fail("align= must be positive")
    if value % fv.align:
        fail(f"value {value} is not a multiple of {fv.align}")

    if fv.role.is_register:
        if fv.regfile is None:
            fail("register fields must name their register file")
        if fv.regfile not in REGISTER_FILES:
            fail(f"unknown register file {fv.regfile!r}")
        if value == 0 and not fv.rationale:
            fail("register 0 often means 'no register'; document why it is used")
    if fv.role is FieldRole.REGISTER_GROUP:
        if fv.group < 2:
            fail("register groups span at least two registers")
        if value % fv.group:
            fail(f"base {value} is not aligned to a group of {fv.group}")
        if value + fv.group - 1 > hi:
            fail(f"group starting at {value} runs past register {hi}")
    elif fv.group != 1:
        fail("group= only applies to reg-pair fields")

    if fv.role in (FieldRole.BIT_RANGE, FieldRole.SHIFT) and not fv.unchecked:
        if value in (0, hi):
            fail(
                f"value {value} selects a degenerate full/empty form; "
                "pick something strictly inside (0, max)"
            )


class FieldValueTable:
    """Immutable name -> value map for one architecture."""

    __slots__ = ("_architecture", "_fields")

    def __init__(self, architecture: str, fields: Iterable[FieldValue]) -> None:
        entries: dict[str, FieldValue] = {}
        for fv in fields:
            prev = entries.get(fv.name)
            if prev is not None:
                raise DuplicateField(architecture, fv.name, prev.line, fv.line)
            validate_field(architecture, fv)
            entries[fv.name] = fv
        self._architecture = architecture
        self._fields: Mapping[str, FieldValue] = MappingProxyType(entries)

    @property
    def architecture(self) -> str:
        return self._architecture

    def get(self, name: str) -> FieldValue:
        try:
            return self._fields[name]
        except KeyError:
            raise UndefinedField(self._architecture, name) from None

    def resolve(self, name: str) -> Resolved:
        return self.get(name).value

    def render(self, name: str) -> str:
        return self.get(name).render()

    def names(self) -> Tuple[str, ...]:
        return tuple(self._fields)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[FieldValue]:
        return iter(self._fields.values())

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"FieldValueTable({self._architecture!r}, {len(self)} fields)"


__all__ = [
    "FieldRole",
    "FieldValue",
    "FieldValueTable",
    "REGISTER_FILES",
    "Rationale",
    "Resolved",
    "validate_field",
]
