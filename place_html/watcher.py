"""
File change notifications for watch mode.

Wraps a watchdog observer. Raw events arrive on the observer thread and are
queued; :meth:`FileChangesObserver.run_forever` drains the queue on the
calling thread, coalesces events per path and hands each batch to a single
callback. The callback therefore never runs concurrently with itself.
"""

import os
import queue
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from rich.console import Console
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

console = Console()

DEFAULT_LATENCY = 0.1  # seconds
POLL_INTERVAL = 0.5  # seconds


class FileEvent(Enum):
    """Kinds of change reported for a path."""
    CREATED = "created"
    MODIFIED = "modified"
    RENAMED = "renamed"
    REMOVED = "removed"


@dataclass(frozen=True)
class FileChanges:
    """All changes seen for one path within a batch."""

    path: Path
    changes: frozenset

    def __contains__(self, event: FileEvent) -> bool:
        return event in self.changes

    def __str__(self) -> str:
        names = ", ".join(f".{event.value}" for event in sorted(self.changes, key=lambda e: e.value))
        return f"{self.path} - [{names}]"


def coalesce(events: list[tuple[Path, FileEvent]]) -> list[FileChanges]:
    """
    Merge raw events into one FileChanges per path.

    Paths keep the order in which they were first seen.
    """
    by_path: dict[Path, set[FileEvent]] = {}
    for path, event in events:
        by_path.setdefault(path, set()).add(event)

    return [
        FileChanges(path=path, changes=frozenset(changes))
        for path, changes in by_path.items()
        if changes
    ]


class ChangeCollector(FileSystemEventHandler):
    """Queues file (not directory) events for the main thread."""

    def __init__(self):
        self.pending: "queue.Queue[tuple[Path, FileEvent]]" = queue.Queue()

    def _put(self, path, event: FileEvent) -> None:
        self.pending.put_nowait((Path(os.fsdecode(path)), event))

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._put(event.src_path, FileEvent.CREATED)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._put(event.src_path, FileEvent.MODIFIED)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._put(event.src_path, FileEvent.REMOVED)

    def on_moved(self, event: FileSystemEvent) -> None:
        # Editors often save by renaming a temp file over the target, so the
        # destination counts as freshly created.
        if not event.is_directory:
            self._put(event.src_path, FileEvent.RENAMED)
            self._put(event.dest_path, FileEvent.CREATED)


class FileChangesObserver:
    """
    Observes directories and reports coalesced changes to a callback.

    Usage:
        observer = FileChangesObserver(callback)
        if observer.start([input_dir], recursive=True):
            observer.run_forever()
    """

    def __init__(
        self,
        callback: Callable[[list[FileChanges]], None],
        latency: float = DEFAULT_LATENCY,
    ):
        """
        Args:
            callback: Invoked with every non-empty batch of changes.
            latency: How long to keep collecting after the first event
                     of a batch.
        """
        self.callback = callback
        self.latency = latency
        self.collector = ChangeCollector()
        self._observer: Optional[Observer] = None
        self.observed_paths: list[Path] = []

    @property
    def is_running(self) -> bool:
        return self._observer is not None

    def start(self, paths: list[Path], recursive: bool = False) -> bool:
        """
        Start observing ``paths``.

        Returns:
            False if already started, if no paths were given or if the
            platform observer could not be started.
        """
        if self._observer is not None:
            return False
        if not paths:
            return False

        missing = [path for path in paths if not Path(path).is_dir()]
        if missing:
            console.print(f"[red]Cannot observe missing directory: {missing[0]}[/red]")
            return False

        observer = Observer()
        try:
            for path in paths:
                observer.schedule(self.collector, str(path), recursive=recursive)
            observer.start()
        except OSError as e:
            console.print(f"[red]Could not start observing {', '.join(map(str, paths))}: {e}[/red]")
            return False

        self._observer = observer
        self.observed_paths = list(paths)
        return True

    def stop(self) -> None:
        """Stop observing. Does nothing when not started."""
        if self._observer is None:
            return

        self._observer.stop()
        self._observer.join()
        self._observer = None
        self.observed_paths = []

    def poll(self, timeout: Optional[float] = POLL_INTERVAL) -> list[FileChanges]:
        """
        Wait up to ``timeout`` for a batch of changes.

        Once a first event arrives, keeps collecting for ``latency`` seconds.
        Returns an empty list when nothing happened.
        """
        try:
            if timeout is None or timeout > 0:
                first = self.collector.pending.get(timeout=timeout)
            else:
                first = self.collector.pending.get_nowait()
        except queue.Empty:
            return []

        events = [first]
        deadline = time.monotonic() + self.latency
        while True:
            remaining = deadline - time.monotonic()
            try:
                if remaining > 0:
                    events.append(self.collector.pending.get(timeout=remaining))
                else:
                    events.append(self.collector.pending.get_nowait())
            except queue.Empty:
                break

        return coalesce(events)

    def run_forever(self) -> None:
        """Deliver batches to the callback until stopped or interrupted."""
        try:
            while self.is_running:
                batch = self.poll()
                if batch:
                    self.callback(batch)
        finally:
            self.stop()
