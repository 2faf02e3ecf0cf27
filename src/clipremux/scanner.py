"""Clip bundle discovery — recursive search for fg_* clip folders.

Steam's canonical layout is
  gamerecordings/video/clip_<appid>_<date>_<time>/video/fg_<appid>_<date>_<time>/
but clips get copied and reorganized, so no depth is assumed: every
directory under the input root is searched.
"""

import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator

from .timestamps import PatternMismatch, parse_clip_dir_name

MANIFEST_NAME = "session.mpd"


@dataclass(frozen=True)
class ClipBundle:
    """One convertible clip folder (session.mpd present)."""

    directory_path: Path
    app_id: int
    capture_instant: datetime
    manifest_path: Path


def _sorted_subdirs(directory: Path) -> list[os.DirEntry]:
    """Subdirectories in name order. Symlinks are not followed."""
    try:
        with os.scandir(directory) as it:
            entries = [e for e in it if e.is_dir(follow_symlinks=False)]
    except OSError:
        # Unreadable directories are skipped, like any other non-clip.
        return []
    return sorted(entries, key=lambda e: e.name)


def scan_clip_bundles(
    input_root: str | Path,
    app_ids: set[int] | None = None,
) -> Iterator[ClipBundle]:
    """Yield every clip bundle under input_root, depth-first in name order.

    A directory whose name parses as fg_<appid>_<date>_<time> is a clip
    candidate and is not descended into. Candidates without session.mpd
    are partially written or foreign folders and are skipped silently.

    Args:
        input_root: Directory to search recursively.
        app_ids: If non-empty, only yield bundles for these app ids.

    Yields:
        ClipBundle, in the same order for the same directory tree.
    """
    root = Path(input_root).resolve()

    # Explicit stack instead of recursion: nesting depth is unbounded.
    # Children are pushed reversed so they pop in name order.
    stack = [root / e.name for e in reversed(_sorted_subdirs(root))]
    while stack:
        path = stack.pop()
        try:
            app_id, instant = parse_clip_dir_name(path.name)
        except PatternMismatch:
            stack.extend(path / e.name for e in reversed(_sorted_subdirs(path)))
            continue

        manifest = path / MANIFEST_NAME
        if not manifest.is_file():
            continue
        if app_ids and app_id not in app_ids:
            continue
        yield ClipBundle(
            directory_path=path,
            app_id=app_id,
            capture_instant=instant,
            manifest_path=manifest,
        )
