"""Manifest data structures and helpers."""

from .generator import (
    exports_payload,
    generate_bin,
    generate_exports,
    manifest_key_order,
    update_package_json,
)
from .models import ExportEntry, PackageManifest, ParsedFilePath
from .paths import BINARY_SUFFIXES, PUBLIC_SUFFIXES, parse_binary_path, parse_export_path
from .writer import read_package_json, render_package_json, sort_package_json, write_package_json

__all__ = [
    "BINARY_SUFFIXES",
    "ExportEntry",
    "PUBLIC_SUFFIXES",
    "PackageManifest",
    "ParsedFilePath",
    "exports_payload",
    "generate_bin",
    "generate_exports",
    "manifest_key_order",
    "parse_binary_path",
    "parse_export_path",
    "read_package_json",
    "render_package_json",
    "sort_package_json",
    "update_package_json",
    "write_package_json",
]
