#!/usr/bin/env python3
"""
place-html CLI

Usage:
    place-html -i html/ -o js/              # Place html once
    place-html -i html/ -o js/ -r -w        # Whole tree, then keep watching
    place-html -i html/ -o js/ --dry-run    # Preview without writing
    place-html -i html/ -o js/ status       # Show which files pair up
    place-html -i html/ -o js/ clean        # Remove placed html again
"""

import sys

import click
from rich.console import Console

from place_html import __version__
from place_html.config import Config
from place_html.errors import PlaceError
from place_html.placer import PlaceEngine

console = Console()


def _load_engine(ctx: click.Context) -> PlaceEngine:
    """Build the engine from the environment plus the group's options."""
    options = ctx.obj
    try:
        config = Config.from_env(
            input_dir=options.get("input_dir"),
            output_dir=options.get("output_dir"),
            recursive=options.get("recursive"),
            watch=options.get("watch"),
            dry_run=options.get("dry_run"),
            debug=options.get("debug"),
            tool_name=ctx.find_root().info_name,
        )
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)

    return PlaceEngine(config)


@click.group(invoke_without_command=True)
@click.option("-i", "--input", "input_dir", type=click.Path(file_okay=False),
              help="The directory containing the html files.")
@click.option("-o", "--output", "output_dir", type=click.Path(file_okay=False),
              help="The directory containing the js files.")
@click.option("-r", "--recursive", is_flag=True,
              help="Recursively operate on all html files residing within the input directory.")
@click.option("-w", "--watch", is_flag=True,
              help="Watch the input directory and place html in the corresponding files of the output directory on changes.")
@click.option("--dry-run", is_flag=True, help="Preview placements without writing files")
@click.option("--debug", is_flag=True, help="Enable debug output")
@click.pass_context
def cli(ctx, input_dir, output_dir, recursive: bool, watch: bool, dry_run: bool, debug: bool):
    """
    place-html

    Places html files into the script files of the same name, between
    START/END OF PLACED HTML comments.
    """
    ctx.ensure_object(dict)
    ctx.obj["input_dir"] = input_dir
    ctx.obj["output_dir"] = output_dir
    ctx.obj["recursive"] = recursive
    ctx.obj["watch"] = watch
    ctx.obj["dry_run"] = dry_run
    ctx.obj["debug"] = debug

    # If no subcommand, place
    if ctx.invoked_subcommand is None:
        ctx.invoke(place)


@cli.command()
@click.pass_context
def place(ctx):
    """Place html into script files (and keep doing so with --watch)."""
    engine = _load_engine(ctx)
    debug = engine.config.debug

    try:
        result = engine.place_all()

        if engine.config.watch:
            engine.watch()

        if not result.success:
            sys.exit(1)

    except PlaceError as e:
        console.print(f"[red]Aborted:[/red] {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped watching.[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        if debug:
            import traceback
            traceback.print_exc()
        sys.exit(1)


@cli.command()
@click.pass_context
def status(ctx):
    """Show which html files pair with which script files."""
    engine = _load_engine(ctx)
    try:
        engine.status()
    except PlaceError as e:
        console.print(f"[red]Aborted:[/red] {e}")
        sys.exit(1)


@cli.command()
@click.option("--yes", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def clean(ctx, yes: bool):
    """Remove placed html from all paired script files."""
    engine = _load_engine(ctx)
    try:
        result = engine.clean(confirm=yes)
    except PlaceError as e:
        console.print(f"[red]Aborted:[/red] {e}")
        sys.exit(1)

    if not result.success:
        sys.exit(1)


@cli.command()
def version():
    """Show version information."""
    console.print(f"place-html v{__version__}")


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
