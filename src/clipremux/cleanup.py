"""Post-conversion cleanup — what to delete once a clip is converted.

Steam stores a background clip as
  clip_<appid>_<date>_<time>/video/fg_<appid>_<date>_<time>/
so removing the last fg_* folder leaves an empty clip_* shell behind.
plan_cleanup() decides whether that shell goes too; apply_cleanup()
performs the removal.
"""

import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from .scanner import ClipBundle
from .timestamps import is_clip_container_name

VIDEO_DIR_NAME = "video"


class CleanupFailed(OSError):
    """A planned directory could not be removed."""


@dataclass(frozen=True)
class CleanupPlan:
    clip_dir: Path
    container_dir: Path | None = None

    @property
    def paths(self) -> list[Path]:
        """Directories to remove, in removal order."""
        if self.container_dir is None:
            return [self.clip_dir]
        return [self.clip_dir, self.container_dir]


def _other_subdirs(directory: Path, excluding: set[str]) -> list[str] | None:
    """Subdirectory names not in `excluding`; None if unreadable."""
    try:
        with os.scandir(directory) as it:
            return [e.name for e in it if e.is_dir() and e.name not in excluding]
    except OSError:
        return None


def plan_cleanup(
    bundle: ClipBundle,
    already_removed: set[Path] | None = None,
) -> CleanupPlan:
    """Decide which directories to delete after a successful conversion.

    The fg_* folder is always removed. Its clip_* grandparent is removed
    too when the parent is "video" and holds no other subdirectory.
    Any other layout keeps everything above the fg_* folder.

    already_removed lists folders an earlier step of the same run will
    have deleted by then; a dry run passes its planned removals here.
    """
    clip_dir = bundle.directory_path
    video_dir = clip_dir.parent
    container = video_dir.parent

    if video_dir.name != VIDEO_DIR_NAME or container == video_dir:
        return CleanupPlan(clip_dir)
    if not is_clip_container_name(container.name):
        return CleanupPlan(clip_dir)

    # Check emptiness as if clip_dir were already gone.
    gone = {clip_dir.name}
    gone.update(p.name for p in (already_removed or ()) if p.parent == video_dir)
    others = _other_subdirs(video_dir, excluding=gone)
    if others is None or others:
        return CleanupPlan(clip_dir)
    return CleanupPlan(clip_dir, container_dir=container)


def apply_cleanup(plan: CleanupPlan) -> list[Path]:
    """Remove the planned directories recursively, in order.

    Returns the removed paths. Stops at the first failure, so the
    container is never touched when the clip folder could not be removed.

    Raises:
        CleanupFailed: A removal failed. `removed` lists what did go.
    """
    removed = []
    for path in plan.paths:
        try:
            shutil.rmtree(path)
        except OSError as e:
            err = CleanupFailed(f"Failed to remove {path}: {e}")
            err.removed = removed
            raise err from e
        removed.append(path)
    return removed
