"""Locate public and binary source files by naming convention."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Sequence

from .config import DEFAULT_SHEBANG, ToolConfig
from .errors import BinaryValidationError

logger = logging.getLogger(__name__)


def find_files(
    cwd: Path,
    suffixes: Sequence[str],
    *,
    max_depth: int = 2,
    ignore_dirs: Sequence[str] = ("node_modules",),
) -> list[str]:
    """Return sorted POSIX paths relative to ``cwd`` whose names end in one of ``suffixes``.

    At most ``max_depth`` path segments are searched (``2`` matches
    ``a.pub.ts`` and ``src/a.pub.ts`` but not ``src/lib/a.pub.ts``). Dot
    entries and ``ignore_dirs`` are skipped.
    """
    matches = [
        path.relative_to(cwd).as_posix()
        for path in _walk(cwd, depth=1, max_depth=max_depth, ignore_dirs=frozenset(ignore_dirs))
        if path.name.endswith(tuple(suffixes))
    ]
    return sorted(matches)


def _walk(directory: Path, *, depth: int, max_depth: int, ignore_dirs: frozenset[str]) -> Iterator[Path]:
    try:
        entries = sorted(directory.iterdir())
    except OSError as exc:
        logger.warning("Skipping unreadable directory %s: %s", directory, exc)
        return
    for entry in entries:
        if entry.name.startswith("."):
            continue
        if entry.is_dir():
            if entry.name in ignore_dirs or depth >= max_depth:
                continue
            yield from _walk(entry, depth=depth + 1, max_depth=max_depth, ignore_dirs=ignore_dirs)
        elif entry.is_file():
            yield entry


def find_public_files(cwd: Path, config: ToolConfig | None = None) -> list[str]:
    config = config or ToolConfig()
    return find_files(
        cwd,
        config.public_suffixes,
        max_depth=config.max_depth,
        ignore_dirs=config.ignore_dirs,
    )


def find_binary_files(cwd: Path, config: ToolConfig | None = None) -> list[str]:
    config = config or ToolConfig()
    return find_files(
        cwd,
        config.binary_suffixes,
        max_depth=config.max_depth,
        ignore_dirs=config.ignore_dirs,
    )


def validate_binary_file(path: Path, shebang: str = DEFAULT_SHEBANG) -> None:
    """Require the first line of ``path`` to start with ``shebang``."""
    with path.open("r", encoding="utf-8", errors="replace") as handle:
        first_line = handle.readline().strip()
    if not first_line.startswith(shebang):
        raise BinaryValidationError(path, shebang, first_line)
