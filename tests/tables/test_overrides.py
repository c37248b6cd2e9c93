from asmgolden.overrides import AliasKind, MnemonicAlias, MnemonicOverrideTable


def test_unmapped_mnemonic_resolves_to_itself() -> None:
    table = MnemonicOverrideTable("ppc64", [MnemonicAlias("isel", "rldicl", AliasKind.DONOR)])
    assert table.resolve("add") == "add"
    assert table.get("add") is None
    assert "add" not in table


def test_last_declaration_wins_without_error() -> None:
    table = MnemonicOverrideTable(
        "ppc64",
        [
            MnemonicAlias("sync", "xsrsp", AliasKind.DONOR, line=1),
            MnemonicAlias("wait", "xsrsp", AliasKind.DONOR, line=2),
            MnemonicAlias("rfebb", "sc", AliasKind.DONOR, line=3),
            MnemonicAlias("sync", "xsrsp", AliasKind.LABEL, line=7),
        ],
    )
    assert table.resolve("sync") == "xsrsp"
    winner = table.get("sync")
    assert winner is not None
    assert winner.line == 7
    assert winner.kind is AliasKind.LABEL
    assert table.redeclared() == {"sync": 2}
    assert len(table) == 3


def test_later_target_replaces_earlier_one() -> None:
    table = MnemonicOverrideTable(
        "ppc64",
        [MnemonicAlias("dcbf", "add"), MnemonicAlias("dcbf", "xsrsp")],
    )
    assert table.resolve("dcbf") == "xsrsp"


def test_iteration_follows_winning_declaration() -> None:
    table = MnemonicOverrideTable(
        "ppc64",
        [
            MnemonicAlias("sync", "xsrsp"),
            MnemonicAlias("wait", "xsrsp"),
            MnemonicAlias("sync", "xsrsp"),
        ],
    )
    assert table.sources() == ("wait", "sync")
    assert [alias.source for alias in table] == ["wait", "sync"]


def test_no_redeclarations_reported_for_unique_sources() -> None:
    table = MnemonicOverrideTable("s390x", [])
    assert table.redeclared() == {}
    assert table.resolve("LMG") == "LMG"
