from __future__ import annotations

from pathlib import Path

import pytest

from pkgmanifest.errors import InvalidBinaryNameError, InvalidExportNameError
from pkgmanifest.manifests import ParsedFilePath, parse_binary_path, parse_export_path
from pkgmanifest.manifests.paths import relative_posix, strip_suffix


def test_root_index_maps_to_package_root(tmp_path: Path) -> None:
    assert parse_export_path("index.pub.ts", tmp_path) == ParsedFilePath(name=".", parsed_path="index")


def test_nested_index_is_promoted_to_its_folder(tmp_path: Path) -> None:
    result = parse_export_path("src/index.pub.ts", tmp_path)
    assert result.name == "./src"
    assert result.parsed_path == "src/index"


def test_regular_file_keeps_full_path(tmp_path: Path) -> None:
    result = parse_export_path("src/utils.pub.ts", tmp_path)
    assert result == ParsedFilePath(name="./src/utils", parsed_path="src/utils")


def test_tsx_suffix_is_stripped(tmp_path: Path) -> None:
    assert parse_export_path("components/button.pub.tsx", tmp_path).name == "./components/button"


def test_absolute_paths_are_made_relative(tmp_path: Path) -> None:
    result = parse_export_path(tmp_path / "lib" / "index.pub.ts", tmp_path)
    assert result == ParsedFilePath(name="./lib", parsed_path="lib/index")


def test_parsing_is_stable_on_reconstructed_path(tmp_path: Path) -> None:
    first = parse_export_path("src/utils.pub.ts", tmp_path)
    second = parse_export_path(f"{first.parsed_path}.pub.ts", tmp_path)
    assert first == second


def test_empty_export_path_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(InvalidExportNameError):
        parse_export_path("", tmp_path)


def test_binary_name_uses_last_segment(tmp_path: Path) -> None:
    assert parse_binary_path("src/cli.bin.ts", tmp_path) == ParsedFilePath(name="cli", parsed_path="src/cli")


def test_binary_name_keeps_hyphens(tmp_path: Path) -> None:
    assert parse_binary_path("src/my-cli-tool.bin.ts", tmp_path).name == "my-cli-tool"


def test_binary_name_is_normalized(tmp_path: Path) -> None:
    result = parse_binary_path("tools/__My_Tool  v2__.bin.tsx", tmp_path)
    assert result.name == "my-tool-v2"
    assert result.parsed_path == "tools/__My_Tool  v2__"


def test_empty_binary_path_fails_with_input_in_message(tmp_path: Path) -> None:
    with pytest.raises(InvalidBinaryNameError, match="Invalid name for binary file: $"):
        parse_binary_path("", tmp_path)


def test_binary_without_alphanumerics_fails(tmp_path: Path) -> None:
    with pytest.raises(InvalidBinaryNameError, match=r"src/___\.bin\.ts"):
        parse_binary_path("src/___.bin.ts", tmp_path)


def test_strip_suffix_leaves_unknown_suffix_alone() -> None:
    assert strip_suffix("src/readme.md", (".pub.ts", ".pub.tsx")) == "src/readme.md"


def test_relative_posix_normalizes_dot_segments(tmp_path: Path) -> None:
    assert relative_posix("./src/../lib/a.pub.ts", tmp_path) == "lib/a.pub.ts"
    assert relative_posix(tmp_path, tmp_path) == ""
