"""CLI entrypoints for pkgmanifest."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from . import __version__
from .config import ToolConfig, load_config
from .deps import ResolveResult, resolve_workspace_dependencies, restore_workspace_dependencies
from .errors import PkgManifestError
from .exports import ExportsOptions, ExportsPlan, RunMode, create_exports
from .workspace import find_root

console = Console()
err_console = Console(stderr=True)
app = typer.Typer(help="Keep package.json manifests in sync with the source tree.")
deps_app = typer.Typer(help="Manage workspace dependency ranges around a publish.")
app.add_typer(deps_app, name="deps")

ConfigPathOption = Annotated[
    str | None,
    typer.Option("--config", "-c", help="Path to a pkgmanifest.yml configuration file."),
]
RootOption = Annotated[
    str | None,
    typer.Option("--root", "-r", help="Project directory (defaults to the current directory)."),
]


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging."),
    ] = False,
) -> None:
    """pkgmanifest command-line interface."""
    _configure_logging(verbose)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
        force=True,
    )


@app.command()
def version() -> None:
    """Print the installed pkgmanifest version."""
    console.print(f"pkgmanifest {__version__}")


@app.command()
def exports(  # noqa: PLR0913
    package_json: Annotated[
        str | None,
        typer.Option("--package-json", "-p", help="Path to package.json file."),
    ] = None,
    tsconfig: Annotated[
        str | None,
        typer.Option("--tsconfig", "-t", help="Path to tsconfig.json file."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-d", help="Show what would be changed without writing."),
    ] = False,
    sort: Annotated[
        bool | None,
        typer.Option("--sort/--no-sort", help="Order package.json fields conventionally."),
    ] = None,
    root: RootOption = None,
    config_path: ConfigPathOption = None,
) -> None:
    """Generate package.json 'exports' and 'bin' from *.pub.ts and *.bin.ts files."""
    project_root = Path(root) if root else Path.cwd()
    package_json_path = Path(package_json) if package_json else project_root / "package.json"
    options = ExportsOptions(
        project_root=project_root,
        package_json_path=package_json_path,
        tsconfig_path=Path(tsconfig) if tsconfig else None,
        mode=RunMode.REPORT if dry_run else RunMode.APPLY,
        config=_load_tool_config(config_path, package_json_path.parent),
        sort=sort,
    )

    try:
        result = create_exports(options)
    except (PkgManifestError, OSError) as exc:
        _fail(exc)

    if result.plan.mode is RunMode.REPORT:
        _print_dry_run(result.plan)
        return
    console.print("Exports and binaries generated successfully")


@deps_app.command("resolve")
def deps_resolve(
    root: RootOption = None,
    release: Annotated[
        list[str] | None,
        typer.Option(
            "--release",
            help="Version a package is about to be released at, as NAME=VERSION. Repeatable.",
        ),
    ] = None,
) -> None:
    """Resolve workspace: dependency ranges before publishing."""
    releases = _parse_releases(release or [])
    try:
        workspace_root = _workspace_root(root)
        console.print("Resolving workspace dependencies...")
        result = resolve_workspace_dependencies(workspace_root, releases)
    except (PkgManifestError, OSError) as exc:
        _fail(exc)
    _print_resolve_summary(result)


@deps_app.command("restore")
def deps_restore(root: RootOption = None) -> None:
    """Restore original workspace dependencies after publishing."""
    try:
        workspace_root = _workspace_root(root)
        result = restore_workspace_dependencies(workspace_root)
    except (PkgManifestError, OSError) as exc:
        _fail(exc)

    console.print("Restoring workspace dependencies...")
    for path in result.restored:
        console.print(f"   - Restored: {escape(_display_path(path, workspace_root))}")
    console.print("[bold green]Workspace dependencies restored successfully.[/]")


@app.command("root")
def root_command(
    path: Annotated[
        str,
        typer.Argument(help="Directory to start searching from."),
    ] = ".",
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Emit machine-readable JSON."),
    ] = False,
) -> None:
    """Find the monorepo root by its lockfile."""
    try:
        found = find_root(Path(path))
    except PkgManifestError as exc:
        _fail(exc)

    if json_output:
        console.print_json(
            data={
                "root": found.root.as_posix(),
                "lockfile": found.lockfile.as_posix(),
                "packageManager": found.package_manager,
            }
        )
        return
    console.print(f"[bold green]Root[/]: {escape(found.root.as_posix())}")
    console.print(f"[bold green]Lockfile[/]: {escape(found.lockfile.name)}")
    console.print(f"[bold green]Package manager[/]: {found.package_manager}")


def _print_dry_run(plan: ExportsPlan) -> None:
    console.print("=== DRY RUN - No changes will be written ===")

    console.print("\nFound public files:")
    for file in plan.public_files:
        console.print(f"- {escape(file)}")

    console.print("\nFound binary files:")
    invalid = set(plan.invalid_binary_files)
    for file in plan.binary_files:
        marker = " (INVALID - missing shebang)" if file in invalid else ""
        console.print(f"- {escape(file)}{marker}")

    if plan.validation_errors:
        console.print("\n[bold red]Binary file validation errors:[/]")
        for message in plan.validation_errors:
            console.print(f"- {escape(message)}")

    if plan.naming_errors:
        console.print("\n[bold red]Naming errors:[/]")
        for message in plan.naming_errors:
            console.print(f"- {escape(message)}")

    console.print("\nExports that would be added:")
    console.print(escape(plan.new_exports_json), soft_wrap=True)

    if plan.bin:
        console.print("\nBin entries that would be added:")
        console.print(escape(plan.new_bin_json), soft_wrap=True)

    if not (plan.exports_changed or plan.bin_changed):
        console.print("\nNo changes would be made to package.json")
        return

    console.print("\nChanges that would be made to package.json:")
    if plan.exports_changed:
        console.print("\nExports changes:")
        console.print(f"Current: {escape(plan.current_exports_json)}", soft_wrap=True)
        console.print(f"New: {escape(plan.new_exports_json)}", soft_wrap=True)
    if plan.bin_changed:
        console.print("\nBin changes:")
        console.print(f"Current: {escape(plan.current_bin_json)}", soft_wrap=True)
        console.print(f"New: {escape(plan.new_bin_json)}", soft_wrap=True)


def _print_resolve_summary(result: ResolveResult) -> None:
    for resolution in result.resolutions:
        console.print(
            f"{escape(resolution.package)}: {escape(resolution.dependency)}@{escape(resolution.original)}"
            f" -> {escape(resolution.resolved)} ({resolution.source})"
        )
    for entry in result.unresolved:
        console.print(f"[bold yellow]Could not resolve[/] {escape(entry)} - keeping as is")

    if not result.modified_packages:
        console.print("[bold green]No workspace dependencies to resolve.[/]")
        return

    console.print(
        f"\n[bold green]Resolved workspace dependencies in {len(result.modified_packages)} packages:[/]"
    )
    for name in result.modified_packages:
        console.print(f"   - {escape(name)}")
    if result.backup_path is not None:
        console.print(f"\nBackup created at: {escape(result.backup_path.as_posix())}")


def _parse_releases(values: list[str]) -> dict[str, str]:
    releases: dict[str, str] = {}
    for value in values:
        name, sep, release_version = value.rpartition("=")
        if not sep or not name or not release_version:
            raise typer.BadParameter(f"Expected NAME=VERSION, got '{value}'.", param_hint="--release")
        releases[name] = release_version
    return releases


def _workspace_root(root: str | None) -> Path:
    if root:
        return Path(root).resolve()
    return find_root(Path.cwd()).root


def _load_tool_config(config_path: str | None, default_dir: Path) -> ToolConfig:
    if not config_path and not default_dir.is_dir():
        return ToolConfig()
    try:
        return load_config(config_path or default_dir)
    except PkgManifestError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc


def _display_path(path: Path, base: Path) -> str:
    try:
        return path.resolve().relative_to(base.resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def _fail(exc: BaseException) -> NoReturn:
    err_console.print(f"[bold red]Error[/]: {escape(str(exc))}")
    raise typer.Exit(code=1) from exc
