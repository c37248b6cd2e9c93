"""Architecture table loading and catalog consistency checks.

Each architecture is its own namespace: one field table and one override
table built from ``data/<arch>.defs``. Nothing is shared between
architectures, so a field called ``R1`` on s390x has no relation to anything
on ppc64.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

from .catalog import Catalog, InstructionFormat
from .config import load_config
from .defs_parser import read_definitions
from .errors import DeadOverride, UndefinedField, UnknownArchitecture
from .fields import FieldValue, FieldValueTable, Resolved
from .overrides import MnemonicOverrideTable

logger = logging.getLogger(__name__)

DEFS_SUFFIX = ".defs"


@dataclass(frozen=True)
class ArchitectureTable:
    name: str
    fields: FieldValueTable
    overrides: MnemonicOverrideTable
    source: str = ""

    def resolve_field(self, name: str) -> Resolved:
        return self.fields.resolve(name)

    def resolve_mnemonic(self, mnemonic: str) -> str:
        return self.overrides.resolve(mnemonic)


def build_table(architecture: str, text: str, source: str = "<defs>") -> ArchitectureTable:
    defs = read_definitions(architecture, text, source)
    table = ArchitectureTable(
        name=architecture,
        fields=FieldValueTable(architecture, defs.fields),
        overrides=MnemonicOverrideTable(architecture, defs.aliases),
        source=source,
    )
    for mnemonic, count in table.overrides.redeclared().items():
        logger.info(
            "%s: override for %r declared %d times; the last declaration wins",
            architecture,
            mnemonic,
            count,
        )
    return table


def available_architectures(defs_dir: Union[str, Path, None] = None) -> Tuple[str, ...]:
    root = Path(defs_dir) if defs_dir is not None else load_config().defs_dir
    return tuple(sorted(p.stem for p in root.glob(f"*{DEFS_SUFFIX}")))


@lru_cache(maxsize=None)
def _load_cached(architecture: str, defs_dir: Path) -> ArchitectureTable:
    path = defs_dir / f"{architecture}{DEFS_SUFFIX}"
    if not path.is_file():
        raise UnknownArchitecture(architecture, available_architectures(defs_dir))
    table = build_table(architecture, path.read_text(), str(path))
    logger.debug(
        "%s: loaded %d fields and %d overrides from %s",
        architecture,
        len(table.fields),
        len(table.overrides),
        path,
    )
    return table


def load(architecture: str, defs_dir: Union[str, Path, None] = None) -> ArchitectureTable:
    """Return the process-wide table for ``architecture``, building it on first use."""

    root = Path(defs_dir) if defs_dir is not None else load_config().defs_dir
    return _load_cached(architecture, root.resolve())


def resolve_field(architecture: str, name: str) -> Resolved:
    return load(architecture).resolve_field(name)


def resolve_mnemonic(architecture: str, mnemonic: str) -> str:
    return load(architecture).resolve_mnemonic(mnemonic)


@dataclass(frozen=True, slots=True)
class OperandAlias:
    """Two register operands of one format that land on overlapping registers."""

    mnemonic: str
    first: str
    second: str
    regfile: str

    def __str__(self) -> str:
        return (
            f"{self.mnemonic}: {self.first} and {self.second} overlap "
            f"in the {self.regfile} register file"
        )


def _register_operands(
    table: ArchitectureTable, fmt: InstructionFormat
) -> Iterator[FieldValue]:
    seen = set()
    for name in fmt.fields:
        if name in seen:
            continue
        seen.add(name)
        fv = table.fields.get(name)
        if fv.role.is_register:
            yield fv


def operand_collisions(table: ArchitectureTable, fmt: InstructionFormat) -> List[OperandAlias]:
    regs = list(_register_operands(table, fmt))
    found: List[OperandAlias] = []
    for i, a in enumerate(regs):
        for b in regs[i + 1 :]:
            if a.regfile != b.regfile or a.may_alias or b.may_alias:
                continue
            if set(a.span()) & set(b.span()):
                found.append(OperandAlias(fmt.mnemonic, a.name, b.name, a.regfile or "?"))
    return found


@dataclass(frozen=True)
class CatalogReport:
    architecture: str
    undefined: Tuple[UndefinedField, ...] = ()
    dead_overrides: Tuple[DeadOverride, ...] = ()
    collisions: Tuple[OperandAlias, ...] = ()
    redeclared: Mapping[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.undefined


def check_catalog(
    table: ArchitectureTable, catalog: Catalog, strict: Optional[bool] = None
) -> CatalogReport:
    """Cross-check a table against the catalog it will be used with.

    Undefined fields are collected rather than raised so the report lists all
    of them at once; callers must still treat a non-empty ``undefined`` as
    fatal. Dead overrides are warnings unless ``strict`` (default: the
    ``ASMGOLDEN_STRICT`` setting), in which case the first one is raised.
    """

    if strict is None:
        strict = load_config().strict
    arch = table.name

    undefined: Dict[str, UndefinedField] = {}
    for fmt in catalog:
        for name in fmt.fields:
            if name not in table.fields and name not in undefined:
                undefined[name] = UndefinedField(arch, name, fmt.mnemonic)
                logger.error("%s", undefined[name])

    used = catalog.mnemonics()
    dead = tuple(
        DeadOverride(arch, source) for source in table.overrides.sources() if source not in used
    )
    for warning in dead:
        logger.warning("%s", warning)
    if strict and dead:
        raise dead[0]

    collisions: List[OperandAlias] = []
    for fmt in catalog:
        if any(name not in table.fields for name in fmt.fields):
            continue
        for hit in operand_collisions(table, fmt):
            logger.warning("%s: %s", arch, hit)
            collisions.append(hit)

    redeclared = dict(table.overrides.redeclared())
    for mnemonic, count in redeclared.items():
        logger.warning(
            "%s: override for %r is declared %d times; confirm this is intended",
            arch,
            mnemonic,
            count,
        )

    return CatalogReport(
        architecture=arch,
        undefined=tuple(undefined.values()),
        dead_overrides=dead,
        collisions=tuple(collisions),
        redeclared=redeclared,
    )


__all__ = [
    "ArchitectureTable",
    "CatalogReport",
    "OperandAlias",
    "available_architectures",
    "build_table",
    "check_catalog",
    "load",
    "operand_collisions",
    "resolve_field",
    "resolve_mnemonic",
]
