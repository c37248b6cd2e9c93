"""Shared fixtures for the asmgolden tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from asmgolden.tables import ArchitectureTable, build_table

SAMPLE_DEFS = """\
# Registers: distinct and non-zero.
field RA = 1 role=reg width=5 file=gpr why=representative
field RB = 2 role=reg width=5 file=gpr
field RS = 3 role=reg width=5 file=gpr
field RT = 4 role=reg width=5 file=gpr

field RTp = 8 role=reg-pair width=5 file=gpr
field SH  = 7 role=shift width=5
field D   = 0x80 role=disp width=16 signed=yes

alias mfvsrd -> xsrsp kind=label
alias isel -> rldicl kind=donor
"""

SAMPLE_PPC64_CSV = """\
# comment lines are skipped
"Add XO-form","add RT,RA,RB (OE=0 Rc=0)|add. RT,RA,RB (OE=0 Rc=1)","31@0|RT@6|RA@11|RB@16|OE@21|266@22|Rc@31|",""
"Load Word and Zero D-form","lwz RT,D(RA)","32@0|RT@6|RA@11|D@16|",""
"Move From VSR Doubleword","mfvsrd RA,XS","31@0|S@6|RA@11|///@16|51@21|SX@31|",""
"Prefixed Load Word and Zero MLS:D-form","plwz RT,D(RA),R",",1@0|2@6|0@8|//@9|R@11|//@12|d0@14|,32@0|RT@6|RA@11|d1@16|",""
"""


@pytest.fixture
def make_table() -> Callable[..., ArchitectureTable]:
    def _make(text: str = SAMPLE_DEFS, architecture: str = "ppc64") -> ArchitectureTable:
        return build_table(architecture, text, "<test>")

    return _make


@pytest.fixture
def sample_defs() -> str:
    return SAMPLE_DEFS


@pytest.fixture
def ppc64_csv() -> str:
    return SAMPLE_PPC64_CSV


@pytest.fixture
def defs_dir(tmp_path: Path) -> Path:
    """A definitions directory holding only the sample ppc64 table."""

    (tmp_path / "ppc64.defs").write_text(SAMPLE_DEFS)
    return tmp_path


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch):
    for name in ("ASMGOLDEN_DEFS_DIR", "ASMGOLDEN_STRICT"):
        monkeypatch.delenv(name, raising=False)
    yield
