"""CLI application for lockfix."""

import asyncio
import json
import logging
from pathlib import Path

import typer
from rich.console import Console

from core.config import Settings, get_settings
from core.detect import identify
from core.errors import TemporaryError
from core.fs import delete_local_file, scratch_copy, write_local_file
from core.log import configure_logging
from core.models import LOCK_FILE_MAINTENANCE, UpdateArtifact, UpdateArtifactsResult, UpdateConfig
from core.parse_python import parse_pyproject
from core.rye import RyeProcessor, select_upgrades

console = Console()


def emit(text: str) -> None:
    """Print plain output without rich markup or wrapping."""
    console.print(text, markup=False, highlight=False, soft_wrap=True)


EXIT_ERROR = 1
EXIT_NO_CHANGES = 2
EXIT_TEMPORARY = 3

OUTPUT_FORMATS = ("text", "json")


def format_text_output(results: list[UpdateArtifactsResult]) -> str:
    """Format a human readable summary of a reconciliation."""
    lines = []
    for result in results:
        if result.artifact_error:
            lines.append(f"! {result.artifact_error.lock_file}: {result.artifact_error.stderr}")
        elif result.file.type == "deletion":
            lines.append(f"- {result.file.path} (removed)")
        else:
            lines.append(f"M {result.file.path}")
    return "\n".join(lines)


def format_json_output(results: list[UpdateArtifactsResult]) -> str:
    """Format JSON output."""
    files = []
    errors = []
    for result in results:
        if result.artifact_error:
            errors.append({
                "lock_file": result.artifact_error.lock_file,
                "stderr": result.artifact_error.stderr,
            })
        else:
            files.append({
                "path": result.file.path,
                "type": result.file.type,
                "contents": result.file.contents,
            })

    return json.dumps({"files": files, "errors": errors}, indent=2)


def apply_changes(results: list[UpdateArtifactsResult], settings: Settings) -> list[str]:
    """Write changed lock files to disk and return their paths."""
    written = []
    for result in results:
        if not result.file:
            continue
        if result.file.type == "deletion":
            delete_local_file(result.file.path, settings)
        else:
            write_local_file(result.file.path, result.file.contents, settings)
        written.append(result.file.path)
    return written


app = typer.Typer(
    name="lockfix",
    help="lockfix - Refresh rye lock files after dependency upgrades",
    add_completion=False,
)

@app.command()
def update(
    file_path: str = typer.Argument(help="Path to the project's pyproject.toml"),
    packages: list[str] | None = typer.Option(None, "--package", "-p", help="Package to update (repeatable, default: all)"),
    maintenance: bool = typer.Option(False, "--maintenance", help="Regenerate the complete lock files"),
    write: bool = typer.Option(False, "--write", "-w", help="Write changed lock files back to the project"),
    python_constraint: str | None = typer.Option(None, "--python", help="Python version constraint"),
    rye_constraint: str | None = typer.Option(None, "--rye", help="Rye version constraint"),
    engine: str | None = typer.Option(None, "--engine", help="Force lock manager detection"),
    format_type: str = typer.Option("text", "--format", help="Output format: text or json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """lockfix - Refresh requirements.lock and requirements-dev.lock."""

    try:
        if format_type not in OUTPUT_FORMATS:
            console.print(f"Error: Unknown output format: {format_type}", style="red", markup=False)
            raise typer.Exit(EXIT_ERROR)

        settings = get_settings()
        configure_logging(level=logging.DEBUG if verbose else settings.log_level)

        path_obj = Path(file_path)
        if not path_obj.exists():
            console.print(f"Error: File {file_path} not found", style="red", markup=False)
            raise typer.Exit(EXIT_ERROR)
        content = path_obj.read_text()

        manager = engine or identify(content, path_obj.name)
        if manager != "rye":
            console.print(f"Error: Unsupported lock manager: {manager}", style="red", markup=False)
            raise typer.Exit(EXIT_ERROR)

        manifest = parse_pyproject(content)
        settings = settings.with_local_dir(str(path_obj.parent))
        processor = RyeProcessor(settings)
        deps = processor.process(manifest.project, manifest.entries)

        constraints = {}
        if python_constraint:
            constraints["python"] = python_constraint
        if rye_constraint:
            constraints["rye"] = rye_constraint

        if maintenance:
            config = UpdateConfig(update_type=LOCK_FILE_MAINTENANCE, constraints=constraints)
            updated_deps = []
        else:
            config = UpdateConfig(constraints=constraints)
            updated_deps = select_upgrades(deps, packages)
            if not updated_deps:
                console.print("No dependencies found to update")
                raise typer.Exit(EXIT_NO_CHANGES)

        update_artifact = UpdateArtifact(
            package_file_name=path_obj.name,
            updated_deps=updated_deps,
            config=config,
            new_package_file_content=content,
        )
        # The lock tool runs against a copy, the project only changes with --write
        with scratch_copy(path_obj.parent) as workdir:
            scratch = RyeProcessor(settings.with_local_dir(str(workdir)))
            results = asyncio.run(scratch.update_artifacts(update_artifact, manifest.project))

        if not results:
            if format_type == "json":
                emit(format_json_output([]))
            else:
                console.print("Lock files are up to date")
            raise typer.Exit(EXIT_NO_CHANGES)

        if format_type == "json":
            emit(format_json_output(results))
        else:
            emit(format_text_output(results))

        if any(result.artifact_error for result in results):
            raise typer.Exit(EXIT_ERROR)

        if write:
            for written in apply_changes(results, settings):
                console.print(f"Updated {written}")

    except typer.Exit:
        # Re-raise typer exits (like Exit(2) for no changes)
        raise
    except TemporaryError as e:
        console.print(f"Temporary error, retry later: {e}", style="yellow", markup=False)
        raise typer.Exit(EXIT_TEMPORARY)
    except Exception as e:
        console.print(f"Error: {e}", style="red", markup=False)
        raise typer.Exit(EXIT_ERROR)

if __name__ == "__main__":
    app()
