"""Bounded, deterministic traversal of the header corpus."""

from __future__ import annotations
import os
from pathlib import Path
from typing import Iterable

from azslsense.logging import get_logger

log = get_logger(__name__)

DEFAULT_EXTENSIONS = (".azsli", ".srgi", ".azsl", ".hlsl", ".azslin")
DEFAULT_MAX_FILES = 8000


def should_index_file(path: str | Path, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> bool:
    return str(path).lower().endswith(tuple(e.lower() for e in extensions))


def walk_corpus(
    root: str | Path,
    max_files: int = DEFAULT_MAX_FILES,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> list[Path]:
    """Collect indexable files under ``root``.

    Uses an explicit stack, so deep trees never hit the recursion limit.
    Entries are visited in sorted order, each real directory at most once,
    and the walk stops as soon as ``max_files`` files were collected.
    Unreadable entries are skipped.
    """
    extensions = tuple(extensions)
    files: list[Path] = []
    seen_dirs: set[str] = set()
    stack: list[Path] = [Path(root)]

    while stack and len(files) < max_files:
        current = stack.pop()
        try:
            if current.is_dir():
                real = os.path.realpath(current)
                if real in seen_dirs:
                    continue
                seen_dirs.add(real)
                entries = sorted(os.listdir(current), reverse=True)
                stack.extend(current / name for name in entries)
            elif current.is_file() and should_index_file(current, extensions):
                files.append(current)
        except OSError as exc:
            log.debug("walk_entry_skipped", path=str(current), error=str(exc))

    if stack:
        log.info("walk_truncated", root=str(root), max_files=max_files)
    return files
