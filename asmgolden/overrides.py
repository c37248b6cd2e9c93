from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Tuple


class AliasKind(str, Enum):
    # The toolchain prints a nicer extended mnemonic for this encoding.
    LABEL = "label"
    # Unrelated mnemonic used only because its operand layout fits.
    DONOR = "donor"


@dataclass(frozen=True, slots=True)
class MnemonicAlias:
    source: str
    target: str
    kind: AliasKind = AliasKind.LABEL
    rationale: str = ""
    line: int = 0


class MnemonicOverrideTable:
    """Source mnemonic -> mnemonic emitted/expected in the golden output.

    Declarations are cumulative and hand curated, so a later declaration for
    the same source simply replaces the earlier one. Re-declarations are
    remembered so they can be shown to a human, but are never an error.
    """

    __slots__ = ("_architecture", "_aliases", "_redeclared")

    def __init__(self, architecture: str, aliases: Iterable[MnemonicAlias]) -> None:
        entries: dict[str, MnemonicAlias] = {}
        redeclared: dict[str, int] = {}
        for alias in aliases:
            if alias.source in entries:
                redeclared[alias.source] = redeclared.get(alias.source, 1) + 1
                # Re-insert so iteration order follows the winning declaration.
                del entries[alias.source]
            entries[alias.source] = alias
        self._architecture = architecture
        self._aliases: Mapping[str, MnemonicAlias] = MappingProxyType(entries)
        self._redeclared: Mapping[str, int] = MappingProxyType(redeclared)

    @property
    def architecture(self) -> str:
        return self._architecture

    def resolve(self, mnemonic: str) -> str:
        alias = self._aliases.get(mnemonic)
        return mnemonic if alias is None else alias.target

    def get(self, mnemonic: str) -> Optional[MnemonicAlias]:
        return self._aliases.get(mnemonic)

    def sources(self) -> Tuple[str, ...]:
        return tuple(self._aliases)

    def redeclared(self) -> Mapping[str, int]:
        """Source mnemonics declared more than once, with their declaration count."""

        return self._redeclared

    def __contains__(self, mnemonic: object) -> bool:
        return mnemonic in self._aliases

    def __iter__(self) -> Iterator[MnemonicAlias]:
        return iter(self._aliases.values())

    def __len__(self) -> int:
        return len(self._aliases)

    def __repr__(self) -> str:
        return f"MnemonicOverrideTable({self._architecture!r}, {len(self)} overrides)"


__all__ = ["AliasKind", "MnemonicAlias", "MnemonicOverrideTable"]
