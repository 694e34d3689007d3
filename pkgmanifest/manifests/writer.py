"""Read, order and persist package.json manifests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from ..errors import ManifestFormatError, ManifestNotFoundError
from .models import PackageManifest

# Conventional top-level field order used by the npm ecosystem tooling.
FIELD_ORDER: tuple[str, ...] = (
    "$schema",
    "name",
    "displayName",
    "version",
    "stableVersion",
    "private",
    "description",
    "categories",
    "keywords",
    "homepage",
    "bugs",
    "repository",
    "funding",
    "license",
    "qna",
    "author",
    "maintainers",
    "contributors",
    "publisher",
    "sideEffects",
    "type",
    "imports",
    "exports",
    "main",
    "svelte",
    "umd:main",
    "jsdelivr",
    "unpkg",
    "module",
    "source",
    "jsnext:main",
    "browser",
    "react-native",
    "types",
    "typesVersions",
    "typings",
    "style",
    "example",
    "examplestyle",
    "assets",
    "bin",
    "man",
    "directories",
    "files",
    "workspaces",
    "binary",
    "scripts",
    "betterScripts",
    "l10n",
    "contributes",
    "activationEvents",
    "husky",
    "simple-git-hooks",
    "pre-commit",
    "commitlint",
    "lint-staged",
    "nano-staged",
    "config",
    "nodemonConfig",
    "browserify",
    "babel",
    "browserslist",
    "xo",
    "prettier",
    "eslintConfig",
    "eslintIgnore",
    "npmpackagejsonlint",
    "release",
    "remarkConfig",
    "stylelint",
    "ava",
    "jest",
    "mocha",
    "nyc",
    "c8",
    "tap",
    "oclif",
    "resolutions",
    "dependencies",
    "devDependencies",
    "dependenciesMeta",
    "peerDependencies",
    "peerDependenciesMeta",
    "optionalDependencies",
    "bundledDependencies",
    "bundleDependencies",
    "extensionPack",
    "extensionDependencies",
    "flat",
    "packageManager",
    "engines",
    "engineStrict",
    "volta",
    "languageName",
    "os",
    "cpu",
    "preferGlobal",
    "publishConfig",
    "icon",
    "badges",
    "galleryBanner",
    "preview",
    "markdown",
    "pnpm",
)

SORTED_MAP_FIELDS = frozenset(
    {
        "dependencies",
        "devDependencies",
        "dependenciesMeta",
        "peerDependencies",
        "peerDependenciesMeta",
        "optionalDependencies",
        "resolutions",
        "engines",
        "volta",
    }
)

_FIELD_RANK = {name: index for index, name in enumerate(FIELD_ORDER)}


def read_package_json(path: Path) -> PackageManifest:
    """Load a package.json, failing with ``No package.json found`` when it is absent."""
    if not path.exists():
        raise ManifestNotFoundError(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ManifestFormatError(f"Invalid JSON in {path}: {exc.msg} (line {exc.lineno})") from exc
    if not isinstance(data, dict):
        raise ManifestFormatError(f"{path} should contain a JSON object.")
    return data


def sort_package_json(pkg: Mapping[str, Any]) -> PackageManifest:
    """Return ``pkg`` with known fields in conventional order.

    Unknown fields follow in alphabetical order and ``_``-prefixed private
    fields come last. Dependency-style maps are sorted by name.
    """
    known = sorted((key for key in pkg if key in _FIELD_RANK), key=_FIELD_RANK.__getitem__)
    unknown = sorted(key for key in pkg if key not in _FIELD_RANK and not key.startswith("_"))
    private = sorted(key for key in pkg if key not in _FIELD_RANK and key.startswith("_"))

    ordered: PackageManifest = {}
    for key in (*known, *unknown, *private):
        value = pkg[key]
        if key in SORTED_MAP_FIELDS and isinstance(value, dict):
            value = {name: value[name] for name in sorted(value)}
        ordered[key] = value
    return ordered


def render_package_json(pkg: Mapping[str, Any]) -> str:
    """Serialize with two-space indentation and a trailing newline."""
    return json.dumps(pkg, ensure_ascii=False, indent=2) + "\n"


def write_package_json(path: Path, pkg: Mapping[str, Any]) -> Path:
    path.write_text(render_package_json(pkg), encoding="utf-8")
    return path
