"""Models describing generated manifest entries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

PackageManifest = dict[str, Any]


@dataclass(frozen=True, slots=True)
class ParsedFilePath:
    """Manifest key derived from a source file path."""

    name: str
    parsed_path: str


class ExportEntry(BaseModel):
    """Target record for a single ``exports`` subpath."""

    model_config = ConfigDict(frozen=True)

    # Conditions are matched in key order; "types" has to precede "default".
    types: str = Field(description="Declaration file emitted for the public module.")
    default: str = Field(description="Compiled JavaScript module.")
