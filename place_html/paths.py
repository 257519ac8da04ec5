"""
Pairing of HTML sources with their script files.

The output tree mirrors the input tree: ``<input>/a/b/card.html`` pairs
with ``<output>/a/b/card.js``. In non-recursive mode only the top level of
the input directory is considered.
"""

import os
from pathlib import Path
from typing import Iterator

from place_html.errors import PlaceError


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def script_path_for(
    source: Path,
    input_root: Path,
    output_root: Path,
    extension: str = ".js",
) -> Path:
    """
    Map a source file to its script file in the output tree.

    Examples:
        input/card.html        -> output/card.js
        input/a/b/card.html    -> output/a/b/card.js
        input/card.tpl.html    -> output/card.tpl.js

    Only the last extension is removed; matching is case sensitive.
    """
    nested = source.parent.relative_to(input_root)
    return output_root / nested / (source.stem + extension)


def list_sources(input_root: Path) -> list[Path]:
    """
    Every non-directory entry directly inside ``input_root``.

    Raises:
        PlaceError: If the directory cannot be listed.
    """
    try:
        entries = sorted(os.listdir(input_root))
    except OSError as e:
        raise PlaceError(f"Could not list contents of directory at path: {input_root}") from e

    return [input_root / name for name in entries if not (input_root / name).is_dir()]


def walk_sources(input_root: Path) -> Iterator[Path]:
    """
    Regular files anywhere below ``input_root``, skipping hidden files and
    everything inside hidden directories.
    """
    if not input_root.is_dir():
        raise PlaceError(f"Could not list contents of directory at path: {input_root}")

    for dirpath, dirnames, filenames in os.walk(input_root):
        dirnames[:] = sorted(d for d in dirnames if not _is_hidden(d))
        for name in sorted(filenames):
            if _is_hidden(name):
                continue
            path = Path(dirpath) / name
            if path.is_file():
                yield path


def iter_sources(input_root: Path, recursive: bool) -> Iterator[Path]:
    """Sources for a pass in the given mode."""
    if recursive:
        yield from walk_sources(input_root)
    else:
        yield from list_sources(input_root)


def is_source(path: Path, input_root: Path, recursive: bool) -> bool:
    """
    Whether ``path`` would be picked up by :func:`iter_sources`.

    Used to filter change notifications. Does not touch the file system
    beyond a directory check.
    """
    try:
        relative = path.relative_to(input_root)
    except ValueError:
        return False

    parts = relative.parts
    if not parts or path.is_dir():
        return False

    if not recursive:
        return len(parts) == 1

    return not any(_is_hidden(part) for part in parts)


def same_file(a: Path, b: Path) -> bool:
    """True if both paths exist and refer to the same file."""
    try:
        return os.path.samefile(a, b)
    except OSError:
        return False
