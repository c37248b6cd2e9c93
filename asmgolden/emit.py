"""Assembly source generation from a catalog and an architecture table."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Iterator, List, Optional

from .catalog import OPERAND_RE, Catalog, InstructionFormat
from .errors import UndefinedField
from .tables import ArchitectureTable

logger = logging.getLogger(__name__)


def render_format(table: ArchitectureTable, fmt: InstructionFormat) -> str:
    """Render one catalog form as an assembler line, e.g. ``add 4,1,2``."""

    first = True

    def repl(match: re.Match[str]) -> str:
        nonlocal first
        token = match.group(0)
        if first:
            first = False
            return table.overrides.resolve(token)
        try:
            return table.fields.render(token)
        except UndefinedField:
            raise UndefinedField(table.name, token, fmt.mnemonic) from None

    return OPERAND_RE.sub(repl, fmt.text)


def iter_asm_lines(table: ArchitectureTable, catalog: Catalog) -> Iterator[str]:
    yield ".text"
    for fmt in catalog:
        yield f"\t{render_format(table, fmt)}"


def emit_asm(table: ArchitectureTable, catalog: Catalog) -> str:
    if catalog.architecture != table.name:
        raise ValueError(
            f"catalog is for {catalog.architecture}, table is for {table.name}"
        )
    lines = list(iter_asm_lines(table, catalog))
    logger.info("%s: rendered %d instructions", table.name, len(lines) - 1)
    return "\n".join(lines) + "\n"


# ppc64 XL-form branch-to-register opcodes: bclr, bcctr, bctar (primary 19).
_PPC64_BRANCH_SPR = (19 << 26 | 16 << 1, 19 << 26 | 528 << 1, 19 << 26 | 560 << 1)
_PPC64_BC = 16 << 26
# objdump mishandles the "at" hint encodings; correct code never uses them.
_PPC64_RESERVED_AT = frozenset({5, 13, 17, 19})


def _branch_bo_values() -> Iterator[int]:
    for bo in range(0x20):
        if bo & 0x15 == 0x1:
            # 0b0.0.z with z != 0
            continue
        if bo & 0x14 == 0x14:
            # 0b1z1zz
            continue
        if bo in _PPC64_RESERVED_AT:
            continue
        yield bo


def ppc64_branch_words(cr_bits: int = 8) -> List[int]:
    """Instruction words covering every interesting conditional branch form.

    Only cr0/cr1 bits are swept by default; cr2-cr7 decode the same way.
    """

    words: List[int] = []
    for bo in _branch_bo_values():
        for bi in range(cr_bits):
            for lk in range(2):
                for bh in range(3):
                    for base in _PPC64_BRANCH_SPR:
                        words.append(base | bo << 21 | bi << 16 | bh << 11 | lk)
                for aa in range(2):
                    words.append(_PPC64_BC | bo << 21 | bi << 16 | lk | aa << 1 | 128)
    return words


def emit_branches(words: Optional[Iterable[int]] = None) -> str:
    if words is None:
        words = ppc64_branch_words()
    lines = [".text"] + [f"\t.long 0x{word:08x}" for word in words]
    return "\n".join(lines) + "\n"


__all__ = [
    "emit_asm",
    "emit_branches",
    "iter_asm_lines",
    "ppc64_branch_words",
    "render_format",
]
