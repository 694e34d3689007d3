"""Build ``exports``/``bin`` mappings and fold them into a manifest."""

from __future__ import annotations

import logging
import os
import unicodedata
from pathlib import Path
from typing import Iterable, Mapping, Sequence, TypeVar

from .models import ExportEntry, PackageManifest
from .paths import (
    BINARY_SUFFIXES,
    PUBLIC_SUFFIXES,
    matched_suffix,
    parse_binary_path,
    parse_export_path,
)

logger = logging.getLogger(__name__)

_V = TypeVar("_V")

# Root collation order for ASCII punctuation and symbols; all of them sort
# before digits, and digits before letters.
_PUNCTUATION = "_-,;:!?.'\"()[]{}@*/\\&#%`^+<=>|~$"
_PUNCTUATION_RANK = {char: rank for rank, char in enumerate(_PUNCTUATION)}

_Weight = tuple[int, int, str]


def _primary_weight(char: str) -> _Weight:
    if char.isspace():
        return (0, 0, "")
    rank = _PUNCTUATION_RANK.get(char)
    if rank is not None:
        return (1, rank, "")
    if char.isdigit():
        return (2, 0, char)
    if char.isalpha():
        return (3, 0, char.casefold())
    return (4, ord(char), "")


def manifest_key_order(key: str) -> tuple[tuple[_Weight, ...], str, str]:
    """Sort key approximating ``localeCompare`` under the root collation.

    Primary: punctuation < digits < letters, ignoring case and accents.
    Ties fall back to accents, then to case with lower case first.
    """
    decomposed = unicodedata.normalize("NFD", key)
    base = "".join(char for char in decomposed if not unicodedata.combining(char))
    primary = tuple(_primary_weight(char) for char in base)
    return (primary, decomposed.casefold(), key.swapcase())


def sort_mapping(mapping: Mapping[str, _V]) -> dict[str, _V]:
    return {key: mapping[key] for key in sorted(mapping, key=manifest_key_order)}


def artifact_marker(file: str | Path, suffixes: Sequence[str]) -> str:
    """Return the part of the matched source suffix kept in build artifacts.

    ``.pub.ts`` gives ``.pub`` and ``.public.tsx`` gives ``.public``. Files
    without a known suffix use the first configured one.
    """
    suffix = matched_suffix(os.fspath(file).replace(os.sep, "/"), suffixes) or suffixes[0]
    return suffix.rsplit(".", 1)[0]


def generate_exports(
    files: Iterable[str],
    cwd: Path,
    out_dir: str,
    declaration_dir: str,
    *,
    suffixes: Sequence[str] = PUBLIC_SUFFIXES,
) -> dict[str, ExportEntry]:
    """Map public files to export entries, sorted by export key."""
    exports: dict[str, ExportEntry] = {}
    for file in files:
        parsed = parse_export_path(file, cwd, suffixes)
        marker = artifact_marker(file, suffixes)
        if parsed.name in exports:
            logger.debug("Export %s from %s replaces an earlier entry", parsed.name, file)
        exports[parsed.name] = ExportEntry(
            types=f"./{declaration_dir}/{parsed.parsed_path}{marker}.d.ts",
            default=f"./{out_dir}/{parsed.parsed_path}{marker}.js",
        )
    return sort_mapping(exports)


def generate_bin(
    files: Iterable[str],
    cwd: Path,
    out_dir: str,
    *,
    suffixes: Sequence[str] = BINARY_SUFFIXES,
) -> dict[str, str]:
    """Map binary files to command names, sorted by command name."""
    bin_entries: dict[str, str] = {}
    for file in files:
        parsed = parse_binary_path(file, cwd, suffixes)
        marker = artifact_marker(file, suffixes)
        if parsed.name in bin_entries:
            logger.debug("Binary %s from %s replaces an earlier entry", parsed.name, file)
        bin_entries[parsed.name] = f"./{out_dir}/{parsed.parsed_path}{marker}.js"
    return sort_mapping(bin_entries)


def exports_payload(exports: Mapping[str, ExportEntry]) -> dict[str, dict[str, str]]:
    """Plain JSON form of an exports mapping."""
    return {key: entry.model_dump() for key, entry in exports.items()}


def update_package_json(
    pkg: Mapping[str, object],
    exports: Mapping[str, ExportEntry],
    bin_entries: Mapping[str, str],
) -> PackageManifest:
    """Return a copy of ``pkg`` with ``exports`` replaced and ``bin`` set or removed.

    ``exports`` is always written, even when empty. ``bin`` is dropped
    entirely when there are no binaries.
    """
    updated: PackageManifest = dict(pkg)
    updated["exports"] = exports_payload(exports)
    if bin_entries:
        updated["bin"] = dict(bin_entries)
    else:
        updated.pop("bin", None)
    return updated
