"""Tool configuration loaded from an optional ``pkgmanifest.yml``."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

CONFIG_FILENAME = "pkgmanifest.yml"
DEFAULT_SHEBANG = "#!/usr/bin/env node"


class ToolConfig(BaseModel):
    """Settings controlling discovery and manifest generation."""

    model_config = ConfigDict(extra="forbid")

    public_suffixes: tuple[str, ...] = Field(
        default=(".pub.ts", ".pub.tsx"),
        description="Suffixes marking files exposed through the manifest 'exports' field.",
    )
    binary_suffixes: tuple[str, ...] = Field(
        default=(".bin.ts", ".bin.tsx"),
        description="Suffixes marking executable entry points published through 'bin'.",
    )
    max_depth: int = Field(default=2, ge=1, description="Maximum number of path segments searched.")
    ignore_dirs: tuple[str, ...] = Field(default=("node_modules",))
    default_out_dir: str = Field(default="dist")
    default_declaration_dir: str = Field(default="dist")
    shebang: str = Field(default=DEFAULT_SHEBANG)
    validate_shebang: bool = Field(default=True)
    sort_package_json: bool = Field(default=True)

    @field_validator("public_suffixes", "binary_suffixes", mode="before")
    def _normalize_suffixes(cls, value: Any) -> tuple[str, ...]:
        if isinstance(value, str):
            value = [value]
        suffixes: list[str] = []
        for item in value:
            text = str(item).strip()
            if not text:
                continue
            if not text.startswith("."):
                text = f".{text}"
            suffixes.append(text)
        if not suffixes:
            raise ValueError("At least one suffix is required.")
        return tuple(suffixes)

    @field_validator("default_out_dir", "default_declaration_dir")
    def _strip_dir(cls, value: str) -> str:
        text = value.strip().strip("/")
        return text or "."


def load_config(path: str | Path) -> ToolConfig:
    """Load tool settings from a config file or a directory that may contain one.

    A directory without ``pkgmanifest.yml`` yields the defaults; an explicit
    file path that does not exist is an error.
    """
    candidate = Path(path)
    if candidate.is_dir():
        config_path = candidate / CONFIG_FILENAME
        if not config_path.exists():
            return ToolConfig()
    else:
        config_path = candidate
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} should define a mapping of settings.")

    try:
        return ToolConfig(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {config_path}: {exc}") from exc
