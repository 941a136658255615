"""Shared utilities for the Saul engine."""

from __future__ import annotations

import json
import os
import re
from datetime import datetime, timezone
from pathlib import Path
import tomllib
from typing import Any

_DIM = "\x1b[2m"
_RESET = "\x1b[0m"

_TIMESTAMP_PREFIX_RE = re.compile(r"^\d{8}-\d{6}-")
_FENCE_OPEN_SVG_RE = re.compile(r"^```svg\s*", re.IGNORECASE)
_FENCE_OPEN_RE = re.compile(r"^```\s*", re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"\s*```$", re.IGNORECASE)
_FILENAME_INVALID_RE = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUN_RE = re.compile(r"-+")


def now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def timestamp(now: datetime | None = None) -> str:
    """Sortable local-time token in the form ``YYYYMMDD-HHMMSS``."""
    moment = now or datetime.now()
    return moment.strftime("%Y%m%d-%H%M%S")


def remove_timestamp_prefix(filename: str) -> str:
    return _TIMESTAMP_PREFIX_RE.sub("", filename, count=1)


def clean_svg_markup(svg: str) -> str:
    """Strip surrounding whitespace and a Markdown code fence, if present.

    Only the fence is removed; the markup itself is not validated. Stripping
    repeats until nothing changes so the result is stable under re-cleaning.
    """
    cleaned = svg
    while True:
        stripped = cleaned.strip()
        stripped = _FENCE_OPEN_SVG_RE.sub("", stripped, count=1)
        stripped = _FENCE_OPEN_RE.sub("", stripped, count=1)
        stripped = _FENCE_CLOSE_RE.sub("", stripped, count=1)
        stripped = stripped.strip()
        if stripped == cleaned:
            return cleaned
        cleaned = stripped


def sanitize_filename(filename: str) -> str:
    lowered = filename.strip().lower()
    replaced = _FILENAME_INVALID_RE.sub("-", lowered)
    return _HYPHEN_RUN_RE.sub("-", replaced)


def ansi_dim(text: str) -> str:
    return f"{_DIM}{text}{_RESET}"


def read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return default


def write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def load_dotenv(path: Path | None = None, override: bool = False) -> bool:
    env_path = path or _default_env_path()
    if not env_path.exists():
        return False
    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[7:].strip()
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue
        value = value.strip()
        if value and value[0] == value[-1] and value.startswith(("\"", "'")):
            value = value[1:-1]
        if not override and key in os.environ:
            continue
        os.environ[key] = value
    return True


def _default_env_path() -> Path:
    cwd = Path.cwd()
    repo_root = _find_repo_root(cwd)
    if repo_root:
        env_path = repo_root / ".env"
        if env_path.exists():
            return env_path
    return cwd / ".env"


def _find_repo_root(start: Path) -> Path | None:
    for current in (start,) + tuple(start.parents):
        if (current / "saul_engine").is_dir():
            return current
        pyproject = current / "pyproject.toml"
        if pyproject.exists():
            try:
                data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
            except Exception:
                continue
            if data.get("project", {}).get("name") == "svg-saul":
                return current
    return None
