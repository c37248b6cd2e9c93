from __future__ import annotations

import re
import warnings
from pathlib import Path

import pytest

from asmgolden import catalog as catalog_module
from asmgolden.catalog import catalog_from_text, read_catalog, split_operands
from asmgolden.errors import CatalogError, UnknownArchitecture

S390X_CSV = """\
"LOAD MULTIPLE (64)","LMG R1,R3,D2(B2)","235@0|R1@8|R3@12|B2@16|D2@20|4@32|??@40",""
"LOAD AND TEST (32)","LTR R1,R2","18@0|R1@8|R2@12|??@16",""
"""


def test_split_operands() -> None:
    assert split_operands("add. RT,RA,RB") == ("add.", ("RT", "RA", "RB"))
    assert split_operands("lwz RT,D(RA)") == ("lwz", ("RT", "D", "RA"))
    assert split_operands("sync") == ("sync", ())
    with pytest.raises(CatalogError):
        split_operands(" , ")


def test_ppc64_forms_and_conditions(ppc64_csv: str) -> None:
    catalog = catalog_from_text(ppc64_csv, "ppc64")
    assert [fmt.text for fmt in catalog] == [
        "add RT,RA,RB",
        "add. RT,RA,RB",
        "lwz RT,D(RA)",
        "mfvsrd RA,XS",
        "plwz RT,Dpfx(RApfx),Rpfx",
    ]
    assert catalog.mnemonics() == {"add", "add.", "lwz", "mfvsrd", "plwz"}
    assert "XS" in catalog.field_names()


def test_ppc64_prefixed_forms_use_dedicated_fields(ppc64_csv: str) -> None:
    plwz = list(catalog_from_text(ppc64_csv, "ppc64"))[-1]
    assert plwz.prefixed
    assert plwz.fields == ("RT", "Dpfx", "RApfx", "Rpfx")
    assert plwz.description.startswith("Prefixed Load Word")


def test_ppc64_category_tags_are_dropped() -> None:
    text = '"Sync","sync L [Category: Phased-In]","31@0|L@9|598@21|",""\n'
    (fmt,) = catalog_from_text(text, "ppc64")
    assert fmt.mnemonic == "sync"
    assert fmt.fields == ("L",)


def test_ppc64_prefixed_needs_two_words() -> None:
    text = '"Broken","plwz RT,D(RA),R",",1@0|2@6|",""\n'
    with pytest.raises(CatalogError, match="2 words"):
        catalog_from_text(text, "ppc64")


def test_s390x_rows() -> None:
    catalog = catalog_from_text(S390X_CSV, "s390x")
    lmg, ltr = catalog
    assert (lmg.mnemonic, lmg.fields) == ("LMG", ("R1", "R3", "D2", "B2"))
    assert (ltr.mnemonic, ltr.fields) == ("LTR", ("R1", "R2"))
    assert not lmg.prefixed


def test_read_catalog_from_file(tmp_path: Path) -> None:
    path = tmp_path / "s390x.csv"
    path.write_text(S390X_CSV)
    assert len(read_catalog(path, "s390x")) == 2
    assert len(read_catalog(str(path), "s390x")) == 2


def test_narrow_row_rejected() -> None:
    with pytest.raises(CatalogError, match="too narrow"):
        catalog_from_text('"Add","add RT,RA,RB"\n', "ppc64")


def test_empty_catalog_rejected() -> None:
    with pytest.raises(CatalogError, match="empty"):
        catalog_from_text("# nothing here\n\n", "s390x")


def test_unknown_architecture() -> None:
    with pytest.raises(UnknownArchitecture):
        catalog_from_text(S390X_CSV, "arm64")


def test_ppc64_opcode_annotations_are_dropped() -> None:
    text = '"Move From VSR Doubleword","mfvsrd RA,XS (0x7C00_0066)","31@0|S@6|RA@11|",""\n'
    (fmt,) = catalog_from_text(text, "ppc64")
    assert fmt.text == "mfvsrd RA,XS"
    assert fmt.fields == ("RA", "XS")


def test_category_pattern_compiles_without_warnings() -> None:
    re.purge()
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        re.compile(catalog_module._CATEGORY_RE.pattern)


def test_malformed_csv_is_a_catalog_error() -> None:
    with pytest.raises(CatalogError, match="malformed"):
        catalog_from_text('"LTR"x,"LTR R1,R2","18@0|",""\n', "s390x")


def test_missing_catalog_file(tmp_path: Path) -> None:
    with pytest.raises(CatalogError, match="missing.csv"):
        read_catalog(tmp_path / "missing.csv", "s390x")
