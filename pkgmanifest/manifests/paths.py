"""Map source file paths onto manifest ``exports`` and ``bin`` keys."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Sequence

from ..errors import InvalidBinaryNameError, InvalidExportNameError
from .models import ParsedFilePath

PUBLIC_SUFFIXES: tuple[str, ...] = (".pub.ts", ".pub.tsx")
BINARY_SUFFIXES: tuple[str, ...] = (".bin.ts", ".bin.tsx")
INDEX_NAME = "index"
ROOT_EXPORT = "."

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def relative_posix(file: str | Path, cwd: Path) -> str:
    """Return ``file`` relative to ``cwd`` with forward slashes.

    Relative inputs are taken to be relative to ``cwd`` already. An empty
    input stays empty.
    """
    text = os.fspath(file)
    if not text:
        return ""
    if os.path.isabs(text):
        text = os.path.relpath(text, cwd)
    else:
        text = os.path.normpath(text)
    text = text.replace(os.sep, "/")
    return "" if text == "." else text


def matched_suffix(path: str, suffixes: Sequence[str]) -> str | None:
    """Return the first suffix in ``suffixes`` that ``path`` ends with."""
    for suffix in suffixes:
        if path.endswith(suffix):
            return suffix
    return None


def strip_suffix(path: str, suffixes: Sequence[str]) -> str:
    """Remove the first matching suffix; paths without one are returned unchanged."""
    suffix = matched_suffix(path, suffixes)
    return path[: -len(suffix)] if suffix else path


def parse_export_path(
    file: str | Path,
    cwd: Path,
    suffixes: Sequence[str] = PUBLIC_SUFFIXES,
) -> ParsedFilePath:
    """Derive the ``exports`` key for a public source file.

    ``index.pub.ts`` maps to ``"."``, ``src/index.pub.ts`` to ``"./src"`` and
    ``src/utils.pub.ts`` to ``"./src/utils"``.
    """
    parsed_path = strip_suffix(relative_posix(file, cwd), suffixes)
    if not parsed_path:
        raise InvalidExportNameError(os.fspath(file))

    segments = parsed_path.split("/")
    if segments[-1] == INDEX_NAME:
        if len(segments) == 1:
            name = ROOT_EXPORT
        else:
            name = "./" + "/".join(segments[:-1])
    else:
        name = f"./{parsed_path}"
    return ParsedFilePath(name=name, parsed_path=parsed_path)


def parse_binary_path(
    file: str | Path,
    cwd: Path,
    suffixes: Sequence[str] = BINARY_SUFFIXES,
) -> ParsedFilePath:
    """Derive the ``bin`` command name for a binary source file."""
    parsed_path = strip_suffix(relative_posix(file, cwd), suffixes)
    segment = parsed_path.split("/")[-1]
    name = _NON_ALNUM.sub("-", segment.lower()).strip("-")
    if not name:
        raise InvalidBinaryNameError(os.fspath(file))
    return ParsedFilePath(name=name, parsed_path=parsed_path)
