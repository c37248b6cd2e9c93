"""Instruction-format catalog reader.

The catalogs are the ISA CSV files shared with the decoder generators: one row
per encoding with columns ``description, mnemonic text, encoding, tags``.
Only the mnemonic text matters here; it names the operand fields in assembler
order, e.g. ``lwz RT,D(RA)``.
"""

from __future__ import annotations

import csv
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Tuple, Union

from .errors import CatalogError, UnknownArchitecture

logger = logging.getLogger(__name__)

# operand (or leading mnemonic) token in catalog mnemonic text
OPERAND_RE = re.compile(r"[A-Za-z][A-Za-z0-9_]*\.?")

_COND = r"\s*([A-Za-z]+)=([0-9a-f]+)\s*"
_FORM_RE = re.compile(r"^(.*?)\s?(\((" + _COND + r")+\))?$")
_CATEGORY_RE = re.compile(
    r"(\s*\[Category:[^]]*\]\s*)"
    r"|(\s*\[Co-requisite[^]]*\]\s*)"
    r"|(\s*\(\s*0[Xx][\[0-9A-Fa-f_]{9}\s*\)\s*)"
)

# Prefixed load/store forms with an R (PC-relative) bit constrain D, RA and R
# jointly, so they get dedicated field names.
_PREFIXED_RENAMES = (
    ("D(RA),R", "Dpfx(RApfx),Rpfx"),
    ("RA,SI,R", "RApfx,SIpfx,Rpfx"),
)


@dataclass(frozen=True, slots=True)
class InstructionFormat:
    mnemonic: str
    text: str
    fields: Tuple[str, ...]
    prefixed: bool = False
    description: str = ""


@dataclass(frozen=True)
class Catalog:
    architecture: str
    formats: Tuple[InstructionFormat, ...]

    def __iter__(self) -> Iterator[InstructionFormat]:
        return iter(self.formats)

    def __len__(self) -> int:
        return len(self.formats)

    def mnemonics(self) -> frozenset[str]:
        return frozenset(fmt.mnemonic for fmt in self.formats)

    def field_names(self) -> frozenset[str]:
        return frozenset(name for fmt in self.formats for name in fmt.fields)


def split_operands(text: str) -> Tuple[str, Tuple[str, ...]]:
    """Split ``"add. RT,RA,RB"`` into ``("add.", ("RT", "RA", "RB"))``."""

    tokens = OPERAND_RE.findall(text)
    if not tokens:
        raise CatalogError(f"no mnemonic in {text!r}")
    return tokens[0], tuple(tokens[1:])


def _ppc64_forms(description: str, mnemonics: str, encoding: str) -> List[InstructionFormat]:
    prefixed = encoding.startswith(",")
    if prefixed and len(encoding.split(",")[1:]) != 2:
        raise CatalogError(f"{description}: prefixed instruction must be 2 words long")

    forms: List[InstructionFormat] = []
    for form in _CATEGORY_RE.sub("", mnemonics).split("|"):
        form = form.strip()
        if not form:
            continue
        match = _FORM_RE.match(form)
        if match is None:
            raise CatalogError(f"{description}: cannot parse mnemonic form {form!r}")
        text = match.group(1)
        if prefixed and text.startswith("p") and text.endswith("R"):
            for old, new in _PREFIXED_RENAMES:
                text = text.replace(old, new, 1)
        mnemonic, fields = split_operands(text)
        forms.append(
            InstructionFormat(mnemonic, text, fields, prefixed=prefixed, description=description)
        )
    return forms


def _s390x_forms(description: str, mnemonics: str, encoding: str) -> List[InstructionFormat]:
    text = mnemonics.strip()
    mnemonic, fields = split_operands(text)
    return [InstructionFormat(mnemonic, text, fields, description=description)]


_ROW_READERS: Dict[str, Callable[[str, str, str], List[InstructionFormat]]] = {
    "ppc64": _ppc64_forms,
    "s390x": _s390x_forms,
}


def _rows(lines: Iterable[str]) -> Iterator[List[str]]:
    # Skip blank and '#' comment lines before handing the rest to csv.
    body = [line for line in lines if line.strip() and not line.lstrip().startswith("#")]
    yield from csv.reader(body, strict=True)


def read_catalog(source: Union[str, Path, Iterable[str]], architecture: str) -> Catalog:
    reader = _ROW_READERS.get(architecture)
    if reader is None:
        raise UnknownArchitecture(architecture, tuple(sorted(_ROW_READERS)))

    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            with open(path, "r", newline="") as f:
                lines = f.read().splitlines()
        except OSError as exc:
            raise CatalogError(f"{path}: {exc.strerror or exc}") from exc
        name = str(path)
    else:
        lines = list(source)
        name = "<catalog>"

    formats: List[InstructionFormat] = []
    try:
        for number, row in enumerate(_rows(lines), start=1):
            if len(row) < 4:
                raise CatalogError(
                    f"{name}: row {number} too narrow: need at least four columns"
                )
            description, mnemonics, encoding = row[0], row[1], row[2]
            formats.extend(reader(description, mnemonics, encoding))
    except csv.Error as exc:
        raise CatalogError(f"{name}: malformed CSV: {exc}") from exc
    if not formats:
        raise CatalogError(f"{name}: empty catalog")
    logger.info("%s: parsed %d instruction forms", name, len(formats))
    return Catalog(architecture, tuple(formats))


def catalog_from_text(text: str, architecture: str) -> Catalog:
    return read_catalog(text.splitlines(), architecture)


__all__ = [
    "Catalog",
    "InstructionFormat",
    "OPERAND_RE",
    "catalog_from_text",
    "read_catalog",
    "split_operands",
]
