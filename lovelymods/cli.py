# lovelymods/cli.py
import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from loguru import logger

from .services.logging import setup_logging
from .config.loader import get_config
from .core.handles import PickerCancelledError, StaticDirectorySource
from .core.lua_runtime import get_default_runtime
from .core.models import DirectoryNode, ScriptOutcome
from .core.notify import LogNotifier
from .core.registry import REFERENCE_DUMP_KEY, ModRegistry
from .core.script_runner import ScriptRunner
from .core.tree_builder import ModLoader
from . import __version__

app = typer.Typer(help="Lovely Mods CLI - load mod folders and run their Lua scripts headlessly.")

def version_callback(value: bool):
    if value:
        print(f"Lovely Mods CLI Version: {__version__}")
        raise typer.Exit()

@app.callback()
def main_options(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    version: Optional[bool] = typer.Option(None, "--version", callback=version_callback, is_eager=True, help="Show version and exit."),
):
    """ Main callback to set up logging """
    setup_logging(verbose=verbose, console_level="WARNING")
    ctx.ensure_object(dict)
    ctx.obj["VERBOSE"] = verbose


def _render_tree(tree: DirectoryNode, indent: str = "    ") -> List[str]:
    lines = []
    for name, child in tree.children.items():
        if isinstance(child, DirectoryNode):
            lines.append(f"{indent}{name}/")
            lines.extend(_render_tree(child, indent + "    "))
        else:
            lines.append(f"{indent}{name}")
    return lines


def _load_mods(registry: ModRegistry, paths: List[Path], warn: bool) -> None:
    config = get_config().model_copy(update={"warn_incompatible": warn})
    for path in paths:
        loader = ModLoader(registry, StaticDirectorySource(path), LogNotifier(), config)
        try:
            asyncio.run(loader.add_mod_directory())
        except PickerCancelledError as e:
            logger.error(str(e))
            raise typer.Exit(code=1)


@app.command()
def scan(
    path: Path = typer.Argument(..., help="A mod folder, or a folder containing mod folders.", exists=True, file_okay=False, dir_okay=True, readable=True, resolve_path=True),
    no_warn: bool = typer.Option(False, "--no-warn", help="Don't warn about mods missing the webcompatible marker."),
    tree: bool = typer.Option(False, "--tree", "-t", help="Print every mod's file tree."),
):
    """Shows which mods a folder yields."""
    registry = ModRegistry()
    _load_mods(registry, [path], warn=not no_warn)
    if not len(registry):
        typer.echo("No mods found.")
        raise typer.Exit(code=1)
    for name, mod_tree in registry.items():
        typer.echo(f"{name} ({mod_tree.count_files()} files)")
        if tree:
            for line in _render_tree(mod_tree):
                typer.echo(line)


@app.command()
def run(
    paths: List[Path] = typer.Argument(..., help="Mod folders (or folders of mods) to load.", exists=True, file_okay=False, dir_okay=True, readable=True, resolve_path=True),
    dump: Optional[Path] = typer.Option(None, "--dump", "-d", help="Lovely dump folder to load as the reference tree.", exists=True, file_okay=False, dir_okay=True, resolve_path=True),
    exclude: Optional[List[str]] = typer.Option(None, "--exclude", "-x", help="Mod name to mark dont_patch (needs --dump)."),
):
    """Loads mods and runs every Lua script found in them."""
    runtime = get_default_runtime()
    if runtime is None:
        logger.error("Lua runtime is not available. Install 'lupa' to run mod scripts.")
        raise typer.Exit(code=1)

    registry = ModRegistry()
    _load_mods(registry, paths, warn=get_config().warn_incompatible)

    if dump is not None:
        asyncio.run(ModLoader(registry, StaticDirectorySource(dump), LogNotifier()).load_reference_dump())
    for name in exclude or []:
        if not registry.mark_excluded(name):
            logger.warning(f"Could not mark '{name}' (unknown mod, the dump itself, or no --dump given).")

    results = asyncio.run(ScriptRunner(registry, runtime, LogNotifier()).run_all_scripts())
    for result in results:
        suffix = f" - {result.error}" if result.error else ""
        typer.echo(f"[{result.outcome.value}] {result.mod_name}: {result.path}{suffix}")

    mods = [n for n in registry.names() if n != REFERENCE_DUMP_KEY]
    failed = sum(1 for r in results if r.outcome is ScriptOutcome.FAILED)
    typer.echo(f"{len(mods)} mods, {len(results)} scripts, {failed} failed.")


if __name__ == "__main__":
    app()
