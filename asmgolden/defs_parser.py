"""Parse ``.defs`` table definition files into field values and overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple, Union

from lark import Lark, Token, Transformer
from lark.exceptions import UnexpectedInput

from .errors import DefinitionSyntaxError, FieldDomainError
from .fields import FieldRole, FieldValue, Rationale
from .overrides import AliasKind, MnemonicAlias

grammar_path = os.path.join(os.path.dirname(__file__), "defs.lark")
with open(grammar_path, "r") as f:
    defs_grammar = f.read()

defs_parser = Lark(defs_grammar, parser="lalr")


@dataclass(frozen=True)
class FieldDecl:
    name: str
    values: Tuple[int, ...]
    hex: bool
    attrs: Dict[str, Tuple[str, ...]]
    line: int
    note: str = ""


@dataclass(frozen=True)
class AliasDecl:
    source: str
    target: str
    attrs: Dict[str, Tuple[str, ...]]
    line: int
    note: str = ""


Decl = Union[FieldDecl, AliasDecl]


@dataclass
class Definitions:
    fields: List[FieldValue] = field(default_factory=list)
    aliases: List[MnemonicAlias] = field(default_factory=list)


def _number(tok: Token) -> int:
    text = str(tok).replace("_", "")
    return int(text, 16 if "x" in text.lower() else 10)


def _comment_text(tok: Token) -> str:
    return str(tok).lstrip("#").strip()


class DefsTransformer(Transformer):
    def attr(self, items: List[Token]) -> Tuple[str, Tuple[str, ...]]:
        key, *values = items
        return str(key), tuple(str(v) for v in values)

    def note(self, items: List[Token]) -> str:
        return _comment_text(items[0])

    def _attrs(self, items: List[Any]) -> Dict[str, Tuple[str, ...]]:
        attrs: Dict[str, Tuple[str, ...]] = {}
        for item in items:
            if isinstance(item, tuple):
                key, values = item
                attrs[key] = values
        return attrs

    def field_decl(self, items: List[Any]) -> FieldDecl:
        name = items[0]
        numbers = [t for t in items[1:] if isinstance(t, Token) and t.type == "NUMBER"]
        return FieldDecl(
            name=str(name),
            values=tuple(_number(t) for t in numbers),
            hex=any("x" in str(t).lower() for t in numbers),
            attrs=self._attrs(items[1:]),
            line=name.line,
        )

    def alias_decl(self, items: List[Any]) -> AliasDecl:
        source, target = items[0], items[1]
        return AliasDecl(
            source=str(source),
            target=str(target),
            attrs=self._attrs(items[2:]),
            line=source.line,
        )

    def _decl_line(self, items: List[Any]) -> Decl:
        decl = items[0]
        if len(items) > 1:
            return replace(decl, note=items[1])
        return decl

    field_line = _decl_line
    alias_line = _decl_line

    def comment_line(self, items: List[Any]) -> Tuple[str, str]:
        return ("comment", items[0])

    def blank_line(self, _: List[Any]) -> Tuple[str, str]:
        return ("blank", "")

    def start(self, items: List[Any]) -> List[Any]:
        return items


def parse_defs(text: str, source: str = "<defs>") -> List[Tuple[Decl, str]]:
    """Return each declaration paired with the rationale comment above it.

    A run of comment lines is the rationale for every declaration that
    follows it until the next blank line, so a single explanation can cover
    a group of related entries.
    """

    if not text.endswith("\n"):
        text += "\n"
    try:
        tree = defs_parser.parse(text)
    except UnexpectedInput as exc:
        raise DefinitionSyntaxError(
            source, exc.line, exc.column, exc.get_context(text).rstrip()
        ) from exc
    lines = DefsTransformer().transform(tree)

    out: List[Tuple[Decl, str]] = []
    block: List[str] = []
    prev_comment = False
    for item in lines:
        if isinstance(item, tuple):
            kind, body = item
            if kind == "comment":
                if not prev_comment:
                    block = []
                block.append(body)
                prev_comment = True
            else:
                block = []
                prev_comment = False
            continue
        prev_comment = False
        rationale = "\n".join(line for line in block if line)
        if item.note:
            rationale = f"{rationale}\n{item.note}" if rationale else item.note
        out.append((item, rationale))
    return out


_FIELD_KEYS = {
    "role", "width", "signed", "file", "group", "align", "why", "range", "overlap",
}
_ALIAS_KEYS = {"kind"}
_YES = {"yes", "true", "1"}
_NO = {"no", "false", "0"}


def _single(
    architecture: str, decl: FieldDecl, attrs: Dict[str, Tuple[str, ...]], key: str
) -> Optional[str]:
    values = attrs.get(key)
    if values is None:
        return None
    if len(values) != 1:
        raise FieldDomainError(architecture, decl.name, f"{key}= takes one value")
    return values[0]


def _count(architecture: str, decl: FieldDecl, key: str) -> Optional[int]:
    raw = _single(architecture, decl, decl.attrs, key)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        raise FieldDomainError(architecture, decl.name, f"{key}= must be numeric") from None


def _flag(
    architecture: str, decl: FieldDecl, key: str, expected: set[str]
) -> bool:
    raw = _single(architecture, decl, decl.attrs, key)
    if raw is None:
        return False
    if raw.casefold() not in expected | _NO:
        raise FieldDomainError(
            architecture, decl.name, f"{key}={raw} (expected one of {sorted(expected)})"
        )
    return raw.casefold() in expected


def _field_value(
    architecture: str, decl: FieldDecl, rationale: str, source: str
) -> FieldValue:
    unknown = set(decl.attrs) - _FIELD_KEYS
    if unknown:
        raise DefinitionSyntaxError(
            source, decl.line, 1, f"unknown field attribute(s): {', '.join(sorted(unknown))}"
        )
    role_raw = _single(architecture, decl, decl.attrs, "role")
    if role_raw is None:
        raise FieldDomainError(architecture, decl.name, "role= is required")
    try:
        role = FieldRole(role_raw)
    except ValueError:
        raise FieldDomainError(architecture, decl.name, f"unknown role {role_raw!r}") from None

    try:
        widths = tuple(int(w) for w in decl.attrs.get("width", ()))
    except ValueError:
        raise FieldDomainError(architecture, decl.name, "width= must be numeric") from None

    why_raw = _single(architecture, decl, decl.attrs, "why")
    try:
        why = Rationale(why_raw) if why_raw is not None else None
    except ValueError:
        raise FieldDomainError(architecture, decl.name, f"unknown why={why_raw}") from None

    group = _count(architecture, decl, "group")
    if group is None:
        group = 2 if role is FieldRole.REGISTER_GROUP else 1
    align = _count(architecture, decl, "align")

    return FieldValue(
        name=decl.name,
        role=role,
        values=decl.values,
        widths=widths,
        signed=_flag(architecture, decl, "signed", _YES),
        regfile=_single(architecture, decl, decl.attrs, "file"),
        group=group,
        align=1 if align is None else align,
        why=why,
        unchecked=_flag(architecture, decl, "range", {"unchecked"}),
        may_alias=_flag(architecture, decl, "overlap", {"ok"}),
        hex=decl.hex,
        rationale=rationale,
        line=decl.line,
    )


def _mnemonic_alias(decl: AliasDecl, rationale: str, source: str) -> MnemonicAlias:
    unknown = set(decl.attrs) - _ALIAS_KEYS
    if unknown:
        raise DefinitionSyntaxError(
            source, decl.line, 1, f"unknown alias attribute(s): {', '.join(sorted(unknown))}"
        )
    kind_raw = decl.attrs.get("kind", (AliasKind.LABEL.value,))
    try:
        kind = AliasKind(kind_raw[0])
    except ValueError:
        raise DefinitionSyntaxError(
            source, decl.line, 1, f"unknown alias kind {kind_raw[0]!r}"
        ) from None
    return MnemonicAlias(
        source=decl.source,
        target=decl.target,
        kind=kind,
        rationale=rationale,
        line=decl.line,
    )


def read_definitions(architecture: str, text: str, source: str = "<defs>") -> Definitions:
    defs = Definitions()
    for decl, rationale in parse_defs(text, source):
        if isinstance(decl, FieldDecl):
            defs.fields.append(_field_value(architecture, decl, rationale, source))
        else:
            defs.aliases.append(_mnemonic_alias(decl, rationale, source))
    return defs


__all__ = [
    "AliasDecl",
    "Definitions",
    "FieldDecl",
    "parse_defs",
    "read_definitions",
]
