"""Exception hierarchy shared by the pkgmanifest commands."""

from __future__ import annotations

from pathlib import Path


class PkgManifestError(RuntimeError):
    """Base class for errors reported to the user as a failed run."""


class ConfigError(PkgManifestError, ValueError):
    """Raised when the pkgmanifest configuration file cannot be used."""


class ManifestNotFoundError(PkgManifestError, FileNotFoundError):
    """Raised when the package.json to operate on does not exist."""

    def __init__(self, path: Path | None = None) -> None:
        super().__init__("No package.json found")
        self.path = path


class ManifestFormatError(PkgManifestError, ValueError):
    """Raised when a package.json is not a JSON object."""


class TsConfigError(PkgManifestError, ValueError):
    """Raised when tsconfig.json exists but cannot be read or parsed."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Error reading tsconfig: {detail}")
        self.detail = detail


class InvalidExportNameError(PkgManifestError, ValueError):
    """Raised when a public file path reduces to an empty export path."""

    def __init__(self, file: str) -> None:
        super().__init__(f"Invalid name for export file: {file}")
        self.file = file


class InvalidBinaryNameError(PkgManifestError, ValueError):
    """Raised when a binary file path reduces to an empty command name."""

    def __init__(self, file: str) -> None:
        super().__init__(f"Invalid name for binary file: {file}")
        self.file = file


class BinaryValidationError(PkgManifestError, ValueError):
    """Raised when a binary file does not start with the expected shebang."""

    def __init__(self, path: Path | str, shebang: str, first_line: str) -> None:
        super().__init__(
            f'Binary file {path} must start with "{shebang}" shebang. Found: "{first_line}"'
        )
        self.path = Path(path)
        self.first_line = first_line


class ExportsValidationError(PkgManifestError):
    """Aggregated binary validation failure raised outside dry-run mode."""

    def __init__(self, messages: list[str]) -> None:
        super().__init__("Binary file validation failed:\n" + "\n".join(messages))
        self.messages = list(messages)


class WorkspaceError(PkgManifestError):
    """Raised when the workspace layout cannot be determined."""


class WorkspaceRootNotFoundError(WorkspaceError):
    """Raised when no lockfile is found between a directory and the filesystem root."""

    def __init__(self, start: Path) -> None:
        super().__init__(f"No lockfile found in {start} or any parent directory")
        self.start = start


class BackupNotFoundError(WorkspaceError):
    """Raised when restoring workspace dependencies without a backup file."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"No backup file found to restore: {path}")
        self.path = path
