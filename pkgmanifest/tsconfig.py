"""Read build output directories from ``tsconfig.json``."""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .config import ToolConfig
from .errors import TsConfigError

logger = logging.getLogger(__name__)

_COMMENT_TOKEN = re.compile(r'"(?:\\.|[^"\\])*"|//[^\n]*|/\*.*?\*/', re.DOTALL)
_TRAILING_COMMA_TOKEN = re.compile(r'"(?:\\.|[^"\\])*"|,(?=\s*[}\]])')
_PATH_OPTIONS = ("outDir", "declarationDir")


@dataclass(slots=True)
class CompilerOutput:
    """Absolute output directories declared by a tsconfig chain (None when unset)."""

    out_dir: Path | None = None
    declaration_dir: Path | None = None


@dataclass(frozen=True, slots=True)
class BuildDirs:
    """Output directories as POSIX paths relative to the project root."""

    out_dir: str
    declaration_dir: str


def parse_jsonc(text: str) -> Any:
    """Parse JSON that may contain comments and trailing commas, as tsconfig files do."""

    def _drop_comment(match: re.Match[str]) -> str:
        token = match.group(0)
        return token if token.startswith('"') else " "

    def _drop_comma(match: re.Match[str]) -> str:
        token = match.group(0)
        return token if token.startswith('"') else ""

    stripped = _COMMENT_TOKEN.sub(_drop_comment, text)
    stripped = _TRAILING_COMMA_TOKEN.sub(_drop_comma, stripped)
    return json.loads(stripped)


def read_tsconfig(path: Path) -> CompilerOutput:
    """Resolve ``outDir`` and ``declarationDir`` through the ``extends`` chain of ``path``."""
    output = CompilerOutput()
    _apply_config(path.resolve(), output, seen=set())
    return output


def _apply_config(path: Path, output: CompilerOutput, seen: set[Path]) -> None:
    if path in seen:
        raise TsConfigError(f"Circular 'extends' chain at {path}")
    seen.add(path)

    try:
        data = parse_jsonc(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise TsConfigError(f"Cannot read file '{path}': {exc.strerror or exc}") from exc
    except json.JSONDecodeError as exc:
        raise TsConfigError(f"{path}: {exc.msg} (line {exc.lineno}, column {exc.colno})") from exc

    if not isinstance(data, dict):
        raise TsConfigError(f"{path}: expected a JSON object")

    # Base configs first so the extending file wins.
    extends = data.get("extends")
    if isinstance(extends, str):
        extends = [extends]
    for spec in extends or []:
        _apply_config(_resolve_extends(str(spec), path.parent), output, seen)

    options = data.get("compilerOptions") or {}
    if not isinstance(options, dict):
        raise TsConfigError(f"{path}: 'compilerOptions' must be an object")
    for key in _PATH_OPTIONS:
        value = options.get(key)
        if not value:
            continue
        resolved = (path.parent / str(value)).resolve()
        if key == "outDir":
            output.out_dir = resolved
        else:
            output.declaration_dir = resolved


def _resolve_extends(spec: str, base_dir: Path) -> Path:
    if spec.startswith(".") or Path(spec).is_absolute():
        candidate = (base_dir / spec).resolve()
        return _with_json_suffix(candidate, spec)

    for directory in (base_dir, *base_dir.parents):
        candidate = directory / "node_modules" / spec
        if candidate.is_dir() and (candidate / "tsconfig.json").is_file():
            return candidate / "tsconfig.json"
        if candidate.is_file():
            return candidate
        if candidate.with_name(candidate.name + ".json").is_file():
            return candidate.with_name(candidate.name + ".json")
    raise TsConfigError(f"File '{spec}' not found.")


def _with_json_suffix(candidate: Path, spec: str) -> Path:
    if candidate.is_file():
        return candidate
    with_suffix = candidate.with_name(candidate.name + ".json")
    if with_suffix.is_file():
        return with_suffix
    raise TsConfigError(f"File '{spec}' not found.")


def load_build_dirs(tsconfig_path: Path, project_root: Path, config: ToolConfig) -> BuildDirs:
    """Return output directories relative to ``project_root``, falling back to configured defaults."""
    if tsconfig_path.exists():
        output = read_tsconfig(tsconfig_path)
    else:
        logger.warning("tsconfig not found at %s; using default output directories", tsconfig_path)
        output = CompilerOutput()

    root = project_root.resolve()
    out_dir = _relative_dir(output.out_dir, root, config.default_out_dir)
    declaration_dir = _relative_dir(output.declaration_dir, root, config.default_declaration_dir)
    logger.debug("Build directories: outDir=%s declarationDir=%s", out_dir, declaration_dir)
    return BuildDirs(out_dir=out_dir, declaration_dir=declaration_dir)


def _relative_dir(value: Path | None, root: Path, default: str) -> str:
    if value is None:
        return default
    return Path(os.path.relpath(value, root)).as_posix()
