"""Turn ``objdump -d`` output into golden fixture lines.

Fixture lines have the form ``<instruction hex>|\\tgnu\\t<disassembly>``, the
format the disassembler test suites compare against.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, Iterable, Iterator

from .errors import UnknownArchitecture

_SPACE_RE = re.compile(r"\s+")


def _hex_byte(token: str) -> int:
    try:
        return int(token, 16)
    except ValueError:
        return 0


def ppc64_golden(lines: Iterable[str]) -> Iterator[str]:
    """Big-endian ppc64 objdump; prefixed instructions span two lines."""

    pfx = ""
    dec = ""
    for line in lines:
        cols = _SPACE_RE.split(line)
        if len(cols) < 7:
            continue
        opc = "".join(cols[2:6])
        if not pfx:
            dec = " ".join(cols[6:])
        # primary opcode 1 marks the prefix word of a prefixed instruction
        if _hex_byte(cols[2]) & 0xFC == 0x04:
            pfx = opc
            continue
        yield f"{pfx}{opc}|\tgnu\t{dec}"
        pfx = ""


def _s390x_length(first_byte: int) -> int:
    # The two top bits of the first opcode byte give the instruction length.
    top = first_byte >> 6 & 0x3
    if top == 0:
        return 2
    if top in (1, 2):
        return 4
    return 6


def s390x_golden(lines: Iterable[str]) -> Iterator[str]:
    for line in lines:
        cols = _SPACE_RE.split(line)
        if len(cols) < 5:
            continue
        cnt = _s390x_length(_hex_byte(cols[2]))
        opc = "".join(cols[2 : cnt + 2])
        dec = " ".join(cols[cnt + 2 :])
        yield f"{opc:>12}|\tgnu\t{dec:<18}"


_FORMATTERS: Dict[str, Callable[[Iterable[str]], Iterator[str]]] = {
    "ppc64": ppc64_golden,
    "s390x": s390x_golden,
}


def golden_lines(architecture: str, lines: Iterable[str]) -> Iterator[str]:
    formatter = _FORMATTERS.get(architecture)
    if formatter is None:
        raise UnknownArchitecture(architecture, tuple(sorted(_FORMATTERS)))
    return formatter(lines)


def format_golden(architecture: str, objdump_text: str) -> str:
    out = list(golden_lines(architecture, objdump_text.splitlines()))
    return "".join(f"{line}\n" for line in out)


__all__ = ["format_golden", "golden_lines", "ppc64_golden", "s390x_golden"]
