"""Swap ``workspace:`` dependency ranges for concrete versions around a publish."""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping

from .errors import BackupNotFoundError, WorkspaceError
from .manifests import PackageManifest, render_package_json
from .workspace import WorkspacePackage, list_workspace_packages

logger = logging.getLogger(__name__)

BACKUP_FILENAME = ".workspace-deps-backup.json"
WORKSPACE_PROTOCOL = "workspace:"
DEPENDENCY_FIELDS = (
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "optionalDependencies",
)


@dataclass(frozen=True, slots=True)
class DependencyResolution:
    """A single ``workspace:`` range rewritten to a publishable range."""

    package: str
    dependency: str
    field: str
    original: str
    resolved: str
    source: str


@dataclass(slots=True)
class ResolveResult:
    backup_path: Path | None = None
    modified_packages: list[str] = field(default_factory=list)
    resolutions: list[DependencyResolution] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)


@dataclass(slots=True)
class RestoreResult:
    restored: list[Path] = field(default_factory=list)


def publish_range(workspace_range: str, version: str) -> str:
    """Translate the range after ``workspace:`` into a range for the published manifest.

    ``*`` pins the exact version, ``^`` and ``~`` keep their operator and
    anything else becomes a caret range.
    """
    if workspace_range == "*":
        return version
    if workspace_range in {"^", "~"}:
        return f"{workspace_range}{version}"
    return f"^{version}"


def backup_path_for(root: Path) -> Path:
    return root / BACKUP_FILENAME


def resolve_workspace_dependencies(
    root: Path,
    releases: Mapping[str, str] | None = None,
    *,
    packages: list[WorkspacePackage] | None = None,
) -> ResolveResult:
    """Rewrite ``workspace:`` ranges in every workspace package and back up the originals.

    Versions come from ``releases`` (packages about to be released) first and
    from the local workspace manifests second. Ranges that cannot be
    resolved are left untouched.
    """
    releases = dict(releases or {})
    if packages is None:
        packages = list_workspace_packages(root)
    local_versions = {pkg.name: pkg.version for pkg in packages if pkg.version}

    result = ResolveResult()
    pending: list[tuple[Path, PackageManifest]] = []

    for pkg in packages:
        updated = copy.deepcopy(pkg.manifest)
        changed = False
        for dep_field in DEPENDENCY_FIELDS:
            deps = updated.get(dep_field)
            if not isinstance(deps, dict):
                continue
            for dep_name, dep_version in deps.items():
                if not isinstance(dep_version, str) or not dep_version.startswith(WORKSPACE_PROTOCOL):
                    continue
                if dep_name in releases:
                    version, source = releases[dep_name], "release plan"
                elif dep_name in local_versions:
                    version, source = local_versions[dep_name], "local package"
                else:
                    logger.warning(
                        "%s: could not resolve %s@%s - keeping as is", pkg.name, dep_name, dep_version
                    )
                    result.unresolved.append(f"{pkg.name}: {dep_name}@{dep_version}")
                    continue

                new_range = publish_range(dep_version[len(WORKSPACE_PROTOCOL):], version)
                deps[dep_name] = new_range
                changed = True
                logger.info("%s: %s@%s -> %s (%s)", pkg.name, dep_name, dep_version, new_range, source)
                result.resolutions.append(
                    DependencyResolution(
                        package=pkg.name,
                        dependency=dep_name,
                        field=dep_field,
                        original=dep_version,
                        resolved=new_range,
                        source=source,
                    )
                )

        if changed:
            pending.append((pkg.manifest_path, updated))
            result.modified_packages.append(pkg.name)

    if not pending:
        return result

    # Backup first; manifests are only rewritten once it is on disk.
    original_files = {str(path): path.read_text(encoding="utf-8") for path, _ in pending}
    result.backup_path = _write_backup(root, result.modified_packages, original_files)
    for path, updated in pending:
        path.write_text(render_package_json(updated), encoding="utf-8")
    return result


def _write_backup(root: Path, modified: list[str], original_files: dict[str, str]) -> Path:
    path = backup_path_for(root)
    payload = {
        "modifiedPackages": modified,
        "originalFiles": original_files,
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
    }
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("Backup created at %s", path)
    return path


def restore_workspace_dependencies(root: Path) -> RestoreResult:
    """Write back every manifest saved by :func:`resolve_workspace_dependencies` and drop the backup."""
    path = backup_path_for(root)
    if not path.exists():
        raise BackupNotFoundError(path)

    try:
        backup = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise WorkspaceError(f"Corrupt backup file {path}: {exc.msg}") from exc
    originals = backup.get("originalFiles") if isinstance(backup, dict) else None
    if not isinstance(originals, dict):
        raise WorkspaceError(f"Corrupt backup file {path}: missing 'originalFiles'")

    result = RestoreResult()
    for file_path, content in originals.items():
        target = Path(file_path)
        target.write_text(str(content), encoding="utf-8")
        result.restored.append(target)
        logger.info("Restored %s", target)

    path.unlink()
    return result
