from __future__ import annotations

import json
from pathlib import Path

import pytest

from pkgmanifest.deps import (
    BACKUP_FILENAME,
    publish_range,
    resolve_workspace_dependencies,
    restore_workspace_dependencies,
)
from pkgmanifest.errors import BackupNotFoundError


def _write_json(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def _monorepo(root: Path) -> None:
    _write_json(root / "package.json", {"name": "root", "private": True, "workspaces": ["packages/*"]})
    _write_json(root / "packages" / "core" / "package.json", {"name": "@acme/core", "version": "1.2.0"})
    _write_json(root / "packages" / "utils" / "package.json", {"name": "@acme/utils", "version": "0.3.1"})
    _write_json(
        root / "packages" / "app" / "package.json",
        {
            "name": "@acme/app",
            "version": "0.0.1",
            "dependencies": {
                "@acme/core": "workspace:*",
                "@acme/utils": "workspace:^",
                "zod": "^3.0.0",
            },
            "devDependencies": {"@acme/utils": "workspace:~"},
            "peerDependencies": {"@acme/core": "workspace:1.0.0", "@acme/ghost": "workspace:*"},
        },
    )


@pytest.mark.parametrize(
    ("workspace_range", "expected"),
    [("*", "1.2.3"), ("^", "^1.2.3"), ("~", "~1.2.3"), ("1.0.0", "^1.2.3"), ("^1.0.0", "^1.2.3")],
)
def test_publish_range(workspace_range: str, expected: str) -> None:
    assert publish_range(workspace_range, "1.2.3") == expected


def test_resolve_rewrites_ranges_and_writes_backup(tmp_path: Path) -> None:
    _monorepo(tmp_path)
    app_manifest = tmp_path / "packages" / "app" / "package.json"
    original = app_manifest.read_text(encoding="utf-8")

    result = resolve_workspace_dependencies(tmp_path, {"@acme/core": "2.0.0"})

    data = json.loads(app_manifest.read_text(encoding="utf-8"))
    assert data["dependencies"] == {"@acme/core": "2.0.0", "@acme/utils": "^0.3.1", "zod": "^3.0.0"}
    assert data["devDependencies"] == {"@acme/utils": "~0.3.1"}
    assert data["peerDependencies"] == {"@acme/core": "^2.0.0", "@acme/ghost": "workspace:*"}

    assert result.modified_packages == ["@acme/app"]
    assert result.unresolved == ["@acme/app: @acme/ghost@workspace:*"]
    sources = {(r.dependency, r.field): r.source for r in result.resolutions}
    assert sources[("@acme/core", "dependencies")] == "release plan"
    assert sources[("@acme/utils", "dependencies")] == "local package"

    assert result.backup_path == tmp_path / BACKUP_FILENAME
    backup = json.loads(result.backup_path.read_text(encoding="utf-8"))
    assert backup["modifiedPackages"] == ["@acme/app"]
    assert backup["originalFiles"] == {str(app_manifest): original}
    assert "timestamp" in backup


def test_resolve_without_workspace_ranges(tmp_path: Path) -> None:
    _write_json(tmp_path / "package.json", {"name": "root", "workspaces": ["packages/*"]})
    _write_json(tmp_path / "packages" / "solo" / "package.json", {"name": "solo", "version": "1.0.0"})

    result = resolve_workspace_dependencies(tmp_path)

    assert result.backup_path is None
    assert result.modified_packages == []
    assert not (tmp_path / BACKUP_FILENAME).exists()


def test_restore_puts_back_original_files(tmp_path: Path) -> None:
    _monorepo(tmp_path)
    app_manifest = tmp_path / "packages" / "app" / "package.json"
    original = app_manifest.read_text(encoding="utf-8")
    resolve_workspace_dependencies(tmp_path)

    result = restore_workspace_dependencies(tmp_path)

    assert app_manifest.read_text(encoding="utf-8") == original
    assert result.restored == [app_manifest]
    assert not (tmp_path / BACKUP_FILENAME).exists()


def test_restore_without_backup(tmp_path: Path) -> None:
    with pytest.raises(BackupNotFoundError):
        restore_workspace_dependencies(tmp_path)


def test_failed_manifest_write_can_be_restored(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_json(tmp_path / "package.json", {"name": "root", "workspaces": ["packages/*"]})
    _write_json(tmp_path / "packages" / "c" / "package.json", {"name": "c", "version": "2.0.0"})
    for name in ("a", "b"):
        _write_json(
            tmp_path / "packages" / name / "package.json",
            {"name": name, "version": "1.0.0", "dependencies": {"c": "workspace:*"}},
        )
    first = tmp_path / "packages" / "a" / "package.json"
    second = tmp_path / "packages" / "b" / "package.json"
    original_first = first.read_text(encoding="utf-8")
    original_second = second.read_text(encoding="utf-8")

    write_text = Path.write_text

    def failing_write(self: Path, data: str, *args, **kwargs) -> int:
        if self == second:
            raise OSError("disk full")
        return write_text(self, data, *args, **kwargs)

    monkeypatch.setattr(Path, "write_text", failing_write)
    with pytest.raises(OSError, match="disk full"):
        resolve_workspace_dependencies(tmp_path)
    monkeypatch.undo()

    assert json.loads(first.read_text(encoding="utf-8"))["dependencies"] == {"c": "2.0.0"}
    assert (tmp_path / BACKUP_FILENAME).exists()

    restore_workspace_dependencies(tmp_path)

    assert first.read_text(encoding="utf-8") == original_first
    assert second.read_text(encoding="utf-8") == original_second
    assert not (tmp_path / BACKUP_FILENAME).exists()
