"""
Placement engine for place-html.

Orchestrates:
- Source discovery in the input tree
- Pairing with script files in the output tree
- Splicing and writing
- Re-placement on file changes
"""

import os
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from place_html import paths, splicer
from place_html.config import Config
from place_html.errors import PlaceError
from place_html.watcher import FileChanges, FileChangesObserver, FileEvent

console = Console()

# Changes that mean the source has new content worth placing.
PLACING_EVENTS = {FileEvent.MODIFIED, FileEvent.CREATED}


class ScriptState(Enum):
    """State of the script file paired with a source."""
    MISSING = "missing"
    PLAIN = "plain"
    PLACED = "placed"


@dataclass
class Pairing:
    """A source file and the script file it belongs to."""

    source: Path
    script: Path
    state: ScriptState


@dataclass
class PlaceResult:
    """Result of a placement pass."""

    placed: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    failed: list[Path] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if the pass was successful."""
        return len(self.failed) == 0


def read_exact(path: Path) -> str:
    """Read a UTF-8 file keeping its line endings as they are."""
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def write_atomically(path: Path, content: str) -> None:
    """Write ``content`` to a temp file next to ``path`` and rename it over."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        if path.exists():
            os.chmod(tmp_name, path.stat().st_mode & 0o7777)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


class PlaceEngine:
    """
    Places HTML files into their paired script files.

    A pass looks like this:
    1. Enumerate sources (top level only, or the whole tree when recursive)
    2. Map each source to its script file in the output tree
    3. Skip sources without a script file
    4. Splice the HTML into the script and write it back
    """

    def __init__(self, config: Config):
        """
        Initialize placement engine.

        Args:
            config: Configuration instance.
        """
        self.config = config
        self.input_root = config.input_dir
        self.output_root = config.output_dir

    def script_path_for(self, source: Path) -> Path:
        return paths.script_path_for(
            source, self.input_root, self.output_root, self.config.extension
        )

    def sources(self) -> list[Path]:
        """All sources for the configured mode."""
        return list(paths.iter_sources(self.input_root, self.config.recursive))

    def place_file(self, source: Path, script: Path) -> bool:
        """
        Place one HTML file into one script file.

        Args:
            source: HTML file to copy from.
            script: Script file to place into. Must already exist.

        Returns:
            True if the script was written (or would be, in a dry run).
        """
        try:
            html = read_exact(source)
            script_text = read_exact(script)
        except (OSError, UnicodeDecodeError) as e:
            console.print(f"[red]File skipped! Could not read either .html or .js file: {e}[/red]")
            return False

        block = splicer.render_block(
            html,
            source_name=source.name,
            tool_name=self.config.tool_name,
            moment=self.config.now(),
        )
        updated = splicer.splice(script_text, block)

        if self.config.dry_run:
            console.print(f"[yellow]Dry run - would place[/yellow] {source} [yellow]into[/yellow] {script}")
            return True

        try:
            write_atomically(script, updated)
        except OSError as e:
            console.print(f"[red]File skipped! Could not write .js file: {e}[/red]")
            return False

        if self.config.debug:
            console.print(f"[dim]Placed {source} into {script}[/dim]")
        return True

    def _place_source(self, source: Path, result: PlaceResult) -> Optional[Path]:
        """Place a single source, recording the outcome. Returns the script on success."""
        script = self.script_path_for(source)

        if not script.is_file():
            console.print(
                f"[yellow]Skipping a file![/yellow] No corresponding {self.config.extension} file "
                f"for {source.name}. Searched for `{script}`"
            )
            result.skipped.append(source)
            return None

        if paths.same_file(source, script):
            console.print(f"[dim]Skipping {source} (it is its own script file)[/dim]")
            result.skipped.append(source)
            return None

        if self.place_file(source, script):
            result.placed.append(source)
            return script

        result.failed.append(source)
        return None

    def place_all(self) -> PlaceResult:
        """
        Perform one placement pass over every source.

        Returns:
            PlaceResult with details of the operation.

        Raises:
            PlaceError: If the input directory cannot be listed.
        """
        result = PlaceResult()

        mode = "recursively" if self.config.recursive else "non-recursively"
        console.print(f"\n[bold blue]Placing html from {self.input_root} {mode}[/bold blue]\n")

        for source in paths.iter_sources(self.input_root, self.config.recursive):
            self._place_source(source, result)

        self._print_summary(result)
        return result

    def handle_changes(self, changes: list[FileChanges]) -> PlaceResult:
        """
        Re-place sources reported as changed.

        Only created or modified sources that still exist are placed.
        """
        result = PlaceResult()
        input_root = self.input_root.resolve()

        for change in changes:
            if not PLACING_EVENTS & change.changes:
                continue

            path = change.path
            if not path.is_absolute():
                path = path.resolve()

            if not paths.is_source(path, input_root, self.config.recursive):
                if self.config.debug:
                    console.print(f"[dim]Ignoring {change}[/dim]")
                continue
            if not path.is_file():
                continue

            # Keep the source relative to the configured root so the script
            # path comes out in the same form as during a full pass.
            source = self.input_root / path.relative_to(input_root)
            script = self._place_source(source, result)
            if script is not None:
                stamp = splicer.format_timestamp(self.config.now())
                console.print(f"{stamp} html from {source.name} placed into {script.name}")

        return result

    def watch(self) -> None:
        """
        Watch the input directory and re-place on changes until interrupted.

        Raises:
            PlaceError: If watching could not be started.
        """
        observer = FileChangesObserver(self.handle_changes)
        watched = self.input_root.resolve()

        if not observer.start([watched], recursive=self.config.recursive):
            raise PlaceError("Unable to start watching. Aborting.")

        console.print(f"[cyan]Watching[/cyan] {watched} [dim](Ctrl+C to stop)[/dim]")
        observer.run_forever()

    def pairings(self) -> list[Pairing]:
        """Every source with its script file and the script's state."""
        result = []
        for source in self.sources():
            script = self.script_path_for(source)
            if not script.is_file():
                state = ScriptState.MISSING
            else:
                try:
                    text = read_exact(script)
                except (OSError, UnicodeDecodeError):
                    text = ""
                state = ScriptState.PLACED if splicer.has_placed_block(text) else ScriptState.PLAIN
            result.append(Pairing(source=source, script=script, state=state))
        return result

    def _print_summary(self, result: PlaceResult) -> None:
        """Print pass summary."""
        console.print("\n" + "=" * 50)
        console.print("[bold]Placement Summary[/bold]")
        console.print("=" * 50)

        table = Table(show_header=False, box=None)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="white")

        table.add_row("Files placed", str(len(result.placed)))
        table.add_row("Files skipped", str(len(result.skipped)))
        table.add_row("Files failed", str(len(result.failed)))
        table.add_row("Dry run", "✓" if self.config.dry_run else "✗")

        console.print(table)

        if result.failed:
            console.print(f"\n[red]Failed:[/red] {', '.join(p.name for p in result.failed)}")

        console.print("")

    def status(self) -> None:
        """Print the pairing of every source."""
        console.print("\n[bold]Placement Status[/bold]\n")

        pairings = self.pairings()
        if not pairings:
            console.print(f"[yellow]No html files found in {self.input_root}.[/yellow]")
            return

        styles = {
            ScriptState.MISSING: "red",
            ScriptState.PLAIN: "yellow",
            ScriptState.PLACED: "green",
        }

        table = Table(title="Pairings")
        table.add_column("HTML", style="cyan")
        table.add_column("State", no_wrap=True)
        table.add_column("Script")

        for pairing in pairings:
            style = styles[pairing.state]
            table.add_row(
                str(pairing.source.relative_to(self.input_root)),
                f"[{style}]{pairing.state.value}[/{style}]",
                str(pairing.script),
            )

        console.print(table)

    def clean(self, confirm: bool = False) -> PlaceResult:
        """
        Remove placed blocks from every paired script file.

        Args:
            confirm: Whether to proceed without confirmation.
        """
        result = PlaceResult()

        if not confirm:
            console.print("[yellow]This will remove placed html from all paired script files.[/yellow]")
            response = input("Are you sure? (yes/no): ")
            if response.lower() != "yes":
                console.print("Aborted.")
                return result

        for pairing in self.pairings():
            if pairing.state is not ScriptState.PLACED:
                result.skipped.append(pairing.source)
                continue

            try:
                text = read_exact(pairing.script)
                if not self.config.dry_run:
                    write_atomically(pairing.script, splicer.strip(text))
            except (OSError, UnicodeDecodeError) as e:
                console.print(f"[red]Could not clean {pairing.script}: {e}[/red]")
                result.failed.append(pairing.source)
                continue

            if self.config.dry_run:
                console.print(f"[yellow]Dry run - would clean[/yellow] {pairing.script}")
            else:
                console.print(f"Cleaned: {pairing.script}")
            result.placed.append(pairing.source)

        console.print("[green]Clean complete.[/green]")
        return result
