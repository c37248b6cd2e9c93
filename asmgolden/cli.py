"""Command line front end: inspect tables, check catalogs, emit test sources."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from .catalog import read_catalog
from .config import load_config
from .emit import emit_asm, emit_branches
from .errors import TableError
from .golden import format_golden
from .tables import ArchitectureTable, available_architectures, check_catalog, load

logger = logging.getLogger("asmgolden")


def _write(text: str, out: Optional[str]) -> None:
    if out is None or out == "-":
        sys.stdout.write(text)
        return
    Path(out).write_text(text)
    logger.info("wrote %s", out)


def _show(table: ArchitectureTable, stream: TextIO) -> None:
    stream.write(f"# {table.name} ({table.source})\n")
    stream.write(f"# {len(table.fields)} fields\n")
    for fv in table.fields:
        why = fv.why.value if fv.why else "-"
        stream.write(f"{fv.name:<12} {fv.render():>14}  {fv.role.value:<8} {why}\n")
    stream.write(f"# {len(table.overrides)} overrides\n")
    redeclared = table.overrides.redeclared()
    for alias in table.overrides:
        note = ""
        if alias.source in redeclared:
            note = f"  (declared {redeclared[alias.source]} times, confirm intent)"
        stream.write(f"{alias.source:<12} -> {alias.target:<12} {alias.kind.value}{note}\n")


def _cmd_show(args: argparse.Namespace) -> int:
    _show(load(args.arch, args.defs_dir), sys.stdout)
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    table = load(args.arch, args.defs_dir)
    catalog = read_catalog(args.catalog, args.arch)
    strict = args.strict if args.strict is not None else load_config().strict
    report = check_catalog(table, catalog, strict=strict)
    print(
        f"{report.architecture}: {len(catalog)} forms, "
        f"{len(report.undefined)} undefined field(s), "
        f"{len(report.dead_overrides)} dead override(s), "
        f"{len(report.collisions)} operand overlap(s)"
    )
    return 0 if report.ok else 1


def _cmd_emit(args: argparse.Namespace) -> int:
    table = load(args.arch, args.defs_dir)
    catalog = read_catalog(args.catalog, args.arch)
    _write(emit_asm(table, catalog), args.output)
    return 0


def _cmd_branches(args: argparse.Namespace) -> int:
    _write(emit_branches(), args.output)
    return 0


def _cmd_golden(args: argparse.Namespace) -> int:
    if args.input is None or args.input == "-":
        text = sys.stdin.read()
    else:
        text = Path(args.input).read_text()
    _write(format_golden(args.arch, text), args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asmgolden",
        description="Operand tables and test-source generation for disassembler golden files",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="More logging (repeatable)"
    )
    parser.add_argument(
        "--defs-dir",
        type=Path,
        default=None,
        help="Directory holding <arch>.defs files (default: $ASMGOLDEN_DEFS_DIR or bundled)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show", help="Print the field values and overrides of an architecture")
    show.add_argument("arch")
    show.set_defaults(func=_cmd_show)

    check = sub.add_parser("check", help="Check a table against an instruction catalog")
    check.add_argument("arch")
    check.add_argument("catalog", help="Instruction-format CSV")
    check.add_argument(
        "--strict",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Treat dead overrides as errors (default: $ASMGOLDEN_STRICT)",
    )
    check.set_defaults(func=_cmd_check)

    emit = sub.add_parser("emit", help="Render the catalog into GNU assembler source")
    emit.add_argument("arch")
    emit.add_argument("catalog", help="Instruction-format CSV")
    emit.add_argument("-o", "--output", help="Output file (default: stdout)")
    emit.set_defaults(func=_cmd_emit)

    branches = sub.add_parser("branches", help="Emit the ppc64 conditional branch sweep")
    branches.add_argument("-o", "--output", help="Output file (default: stdout)")
    branches.set_defaults(func=_cmd_branches)

    golden = sub.add_parser("golden", help="Convert objdump -d output to golden fixture lines")
    golden.add_argument("arch", choices=["ppc64", "s390x"])
    golden.add_argument("input", nargs="?", help="objdump output (default: stdin)")
    golden.add_argument("-o", "--output", help="Output file (default: stdout)")
    golden.set_defaults(func=_cmd_golden)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if getattr(args, "arch", None) and args.command in ("show", "check", "emit"):
        known = available_architectures(args.defs_dir)
        if args.arch not in known:
            parser.error(f"unknown architecture {args.arch!r} (known: {', '.join(known)})")

    try:
        return args.func(args)
    except (TableError, OSError) as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
