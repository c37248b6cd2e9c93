from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Optional

DEFAULT_DEFS_DIR = Path(__file__).resolve().parent / "data"


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().casefold()
    return normalized not in {"0", "false", "off", ""}


def _env_path(name: str) -> Optional[Path]:
    raw = (os.getenv(name) or "").strip()
    return Path(raw).expanduser() if raw else None


@dataclass(frozen=True)
class AsmGoldenConfig:
    defs_dir: Path
    strict: bool


def load_config() -> AsmGoldenConfig:
    return AsmGoldenConfig(
        defs_dir=_env_path("ASMGOLDEN_DEFS_DIR") or DEFAULT_DEFS_DIR,
        strict=_env_flag("ASMGOLDEN_STRICT", default=False),
    )


__all__ = ["AsmGoldenConfig", "DEFAULT_DEFS_DIR", "load_config"]
