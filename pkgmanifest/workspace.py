"""Monorepo root discovery and workspace package listing."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .errors import WorkspaceError, WorkspaceRootNotFoundError
from .manifests import PackageManifest, read_package_json

logger = logging.getLogger(__name__)

LOCKFILES: tuple[tuple[str, str], ...] = (
    ("bun.lockb", "bun"),
    ("bun.lock", "bun"),
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("package-lock.json", "npm"),
)
PNPM_WORKSPACE_FILE = "pnpm-workspace.yaml"


@dataclass(frozen=True, slots=True)
class WorkspaceRoot:
    """Directory holding the lockfile of a monorepo."""

    root: Path
    lockfile: Path
    package_manager: str


@dataclass(slots=True)
class WorkspacePackage:
    """A package listed by the workspace globs."""

    name: str
    version: str | None
    directory: Path
    manifest: PackageManifest

    @property
    def manifest_path(self) -> Path:
        return self.directory / "package.json"


def find_root(start: Path) -> WorkspaceRoot:
    """Walk up from ``start`` to the first directory containing a known lockfile."""
    origin = start.resolve()
    for directory in (origin, *origin.parents):
        for filename, manager in LOCKFILES:
            candidate = directory / filename
            if candidate.is_file():
                logger.debug("Workspace root %s (%s)", directory, filename)
                return WorkspaceRoot(root=directory, lockfile=candidate, package_manager=manager)
    raise WorkspaceRootNotFoundError(origin)


def workspace_patterns(root: Path) -> list[str]:
    """Return workspace globs from package.json ``workspaces`` or ``pnpm-workspace.yaml``."""
    manifest = read_package_json(root / "package.json")
    patterns = _patterns_from(manifest.get("workspaces"), "package.json 'workspaces'")
    if patterns:
        return patterns

    pnpm_file = root / PNPM_WORKSPACE_FILE
    if pnpm_file.exists():
        try:
            data = yaml.safe_load(pnpm_file.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise WorkspaceError(f"Invalid YAML in {pnpm_file}: {exc}") from exc
        if not isinstance(data, dict):
            raise WorkspaceError(f"{pnpm_file} should define a mapping.")
        return _patterns_from(data.get("packages"), PNPM_WORKSPACE_FILE)
    return []


def _patterns_from(value: Any, source: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, dict):
        value = value.get("packages") or []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise WorkspaceError(f"{source} must be a list of glob patterns.")
    return list(value)


def list_workspace_packages(root: Path) -> list[WorkspacePackage]:
    """Resolve workspace globs under ``root`` into packages with a package.json."""
    include: set[Path] = set()
    exclude: set[Path] = set()
    for pattern in workspace_patterns(root):
        negated = pattern.startswith("!")
        glob = pattern[1:] if negated else pattern
        glob = glob.rstrip("/")
        if glob.startswith("./"):
            glob = glob[2:]
        if glob in {"", "."}:
            matched = {root}
        else:
            matched = {
                path for path in root.glob(glob) if path.is_dir() and "node_modules" not in path.parts
            }
        (exclude if negated else include).update(matched)

    packages: list[WorkspacePackage] = []
    for directory in sorted(include - exclude):
        manifest_path = directory / "package.json"
        if not manifest_path.is_file():
            continue
        manifest = read_package_json(manifest_path)
        name = manifest.get("name")
        if not isinstance(name, str) or not name:
            logger.warning("Skipping workspace package without a name: %s", manifest_path)
            continue
        version = manifest.get("version")
        packages.append(
            WorkspacePackage(
                name=name,
                version=version if isinstance(version, str) else None,
                directory=directory,
                manifest=manifest,
            )
        )
    return packages
