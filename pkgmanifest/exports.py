"""Generate package.json ``exports`` and ``bin`` fields for a TypeScript package."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Sequence

from .config import ToolConfig, load_config
from .discovery import find_binary_files, find_public_files, validate_binary_file
from .errors import (
    BinaryValidationError,
    ExportsValidationError,
    InvalidBinaryNameError,
    InvalidExportNameError,
)
from .manifests import (
    ExportEntry,
    PackageManifest,
    ParsedFilePath,
    exports_payload,
    generate_bin,
    generate_exports,
    parse_binary_path,
    parse_export_path,
    read_package_json,
    render_package_json,
    sort_package_json,
    update_package_json,
    write_package_json,
)
from .tsconfig import BuildDirs, load_build_dirs

logger = logging.getLogger(__name__)


class RunMode(str, Enum):
    """Whether a run writes the manifest or only reports what it would write."""

    APPLY = "apply"
    REPORT = "report"


@dataclass(slots=True)
class ExportsOptions:
    """Inputs for a single exports run; every path is explicit."""

    project_root: Path
    package_json_path: Path | None = None
    tsconfig_path: Path | None = None
    mode: RunMode = RunMode.APPLY
    config: ToolConfig | None = None
    sort: bool | None = None

    def resolved_package_json(self) -> Path:
        return self.package_json_path or self.project_root / "package.json"

    def resolved_tsconfig(self) -> Path:
        return self.tsconfig_path or self.project_root / "tsconfig.json"


@dataclass(slots=True)
class ExportsPlan:
    """Everything computed by a run before anything is written."""

    mode: RunMode
    package_json_path: Path
    build_dirs: BuildDirs
    manifest: PackageManifest
    updated: PackageManifest
    public_files: list[str]
    binary_files: list[str]
    valid_binary_files: list[str]
    exports: dict[str, ExportEntry]
    bin: dict[str, str]
    validation_errors: list[str] = field(default_factory=list)
    naming_errors: list[str] = field(default_factory=list)

    @property
    def invalid_binary_files(self) -> list[str]:
        return [file for file in self.binary_files if file not in self.valid_binary_files]

    @property
    def current_exports_json(self) -> str:
        return _pretty(self.manifest.get("exports") or {})

    @property
    def new_exports_json(self) -> str:
        return _pretty(exports_payload(self.exports))

    @property
    def current_bin_json(self) -> str:
        return _pretty(self.manifest.get("bin") or {})

    @property
    def new_bin_json(self) -> str:
        return _pretty(self.bin)

    @property
    def exports_changed(self) -> bool:
        return self.current_exports_json != self.new_exports_json

    @property
    def bin_changed(self) -> bool:
        return self.current_bin_json != self.new_bin_json

    @property
    def rendered(self) -> str:
        return render_package_json(self.updated)


@dataclass(slots=True)
class ExportsResult:
    """Outcome of :func:`create_exports`."""

    plan: ExportsPlan
    written: Path | None = None
    changed: bool = False


def _pretty(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, indent=2)


def plan_exports(options: ExportsOptions) -> ExportsPlan:
    """Read inputs, discover files and compute the updated manifest.

    In :attr:`RunMode.APPLY` the first invalid file name aborts the run. In
    :attr:`RunMode.REPORT` naming and shebang problems are collected on the
    plan instead.
    """
    root = options.project_root
    pkg_path = options.resolved_package_json()
    manifest = read_package_json(pkg_path)
    config = options.config or load_config(pkg_path.parent)
    build_dirs = load_build_dirs(options.resolved_tsconfig(), root, config)

    public_files = find_public_files(root, config)
    binary_files = find_binary_files(root, config)
    logger.info("Found %d public file(s) and %d binary file(s)", len(public_files), len(binary_files))

    validation_errors: list[str] = []
    valid_binary_files: list[str] = []
    for file in binary_files:
        if not config.validate_shebang:
            valid_binary_files.append(file)
            continue
        try:
            validate_binary_file(root / file, config.shebang)
        except BinaryValidationError as exc:
            logger.debug("Rejected binary %s: %s", file, exc)
            validation_errors.append(str(exc))
        else:
            valid_binary_files.append(file)

    naming_errors: list[str] = []
    export_files: Sequence[str] = public_files
    bin_files: Sequence[str] = valid_binary_files
    if options.mode is RunMode.REPORT:
        export_files = _keep_parsable(
            public_files, lambda f: parse_export_path(f, root, config.public_suffixes), naming_errors
        )
        bin_files = _keep_parsable(
            valid_binary_files, lambda f: parse_binary_path(f, root, config.binary_suffixes), naming_errors
        )

    exports = generate_exports(
        export_files,
        root,
        build_dirs.out_dir,
        build_dirs.declaration_dir,
        suffixes=config.public_suffixes,
    )
    bin_entries = generate_bin(bin_files, root, build_dirs.out_dir, suffixes=config.binary_suffixes)

    updated = update_package_json(manifest, exports, bin_entries)
    sort = config.sort_package_json if options.sort is None else options.sort
    if sort:
        updated = sort_package_json(updated)

    return ExportsPlan(
        mode=options.mode,
        package_json_path=pkg_path,
        build_dirs=build_dirs,
        manifest=manifest,
        updated=updated,
        public_files=public_files,
        binary_files=binary_files,
        valid_binary_files=valid_binary_files,
        exports=exports,
        bin=bin_entries,
        validation_errors=validation_errors,
        naming_errors=naming_errors,
    )


def _keep_parsable(
    files: Sequence[str],
    parse: Callable[[str], ParsedFilePath],
    errors: list[str],
) -> list[str]:
    kept: list[str] = []
    for file in files:
        try:
            parse(file)
        except (InvalidExportNameError, InvalidBinaryNameError) as exc:
            errors.append(str(exc))
        else:
            kept.append(file)
    return kept


def apply_plan(plan: ExportsPlan) -> ExportsResult:
    """Write the planned manifest once all validation has passed."""
    if plan.validation_errors:
        raise ExportsValidationError(plan.validation_errors)

    path = plan.package_json_path
    previous = path.read_text(encoding="utf-8")
    rendered = plan.rendered
    write_package_json(path, plan.updated)
    logger.info("Wrote %s", path)
    return ExportsResult(plan=plan, written=path, changed=previous != rendered)


def create_exports(options: ExportsOptions) -> ExportsResult:
    """Compute exports/bin for a package and write them unless reporting only."""
    plan = plan_exports(options)
    if plan.mode is RunMode.REPORT:
        return ExportsResult(plan=plan)
    return apply_plan(plan)
