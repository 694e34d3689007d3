from __future__ import annotations

from pathlib import Path

import pytest

from pkgmanifest.config import ToolConfig
from pkgmanifest.discovery import find_binary_files, find_files, find_public_files, validate_binary_file
from pkgmanifest.errors import BinaryValidationError


def _touch(path: Path, text: str = "") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_find_public_files_respects_depth_and_ignores(tmp_path: Path) -> None:
    _touch(tmp_path / "index.pub.ts")
    _touch(tmp_path / "src" / "utils.pub.tsx")
    _touch(tmp_path / "src" / "deep" / "hidden.pub.ts")
    _touch(tmp_path / "node_modules" / "dep.pub.ts")
    _touch(tmp_path / ".cache" / "x.pub.ts")
    _touch(tmp_path / ".dot.pub.ts")
    _touch(tmp_path / "src" / "plain.ts")

    assert find_public_files(tmp_path) == ["index.pub.ts", "src/utils.pub.tsx"]


def test_find_binary_files_is_sorted(tmp_path: Path) -> None:
    _touch(tmp_path / "z.bin.ts")
    _touch(tmp_path / "a.bin.tsx")
    _touch(tmp_path / "tools" / "m.bin.ts")
    _touch(tmp_path / "a.pub.ts")

    assert find_binary_files(tmp_path) == ["a.bin.tsx", "tools/m.bin.ts", "z.bin.ts"]


def test_find_files_uses_configured_depth(tmp_path: Path) -> None:
    _touch(tmp_path / "a" / "b" / "c.pub.ts")
    assert find_files(tmp_path, (".pub.ts",), max_depth=2) == []
    assert find_files(tmp_path, (".pub.ts",), max_depth=3) == ["a/b/c.pub.ts"]


def test_find_public_files_with_custom_suffix(tmp_path: Path) -> None:
    _touch(tmp_path / "index.public.ts")
    config = ToolConfig(public_suffixes=["public.ts"])
    assert find_public_files(tmp_path, config) == ["index.public.ts"]


def test_validate_binary_file_accepts_node_shebang(tmp_path: Path) -> None:
    path = tmp_path / "cli.bin.ts"
    _touch(path, "#!/usr/bin/env node\nconsole.log('hi');\n")
    validate_binary_file(path)


def test_validate_binary_file_rejects_missing_shebang(tmp_path: Path) -> None:
    path = tmp_path / "cli.bin.ts"
    _touch(path, "  import x from 'y';\n")
    with pytest.raises(BinaryValidationError) as excinfo:
        validate_binary_file(path)
    message = str(excinfo.value)
    assert 'must start with "#!/usr/bin/env node" shebang' in message
    assert "Found: \"import x from 'y';\"" in message


def test_validate_binary_file_with_custom_shebang(tmp_path: Path) -> None:
    path = tmp_path / "cli.bin.ts"
    _touch(path, "#!/usr/bin/env bun\n")
    validate_binary_file(path, "#!/usr/bin/env bun")
    with pytest.raises(BinaryValidationError):
        validate_binary_file(path)
