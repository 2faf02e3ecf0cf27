"""Output naming — <GameName>-<YYYYMMDD>-<HHMMSS>.mp4.

Names are deterministic. Two clips that map to the same filename are not
renamed here; the second conversion fails on the existing file instead.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .scanner import ClipBundle
from .timestamps import format_capture_date, format_capture_time

OUTPUT_SUFFIX = ".mp4"

# Most filesystems cap a single name at 255 bytes.
MAX_FILENAME_BYTES = 255

# "-YYYYMMDD-HHMMSS.mp4"
_STAMP_LEN = len("-00000000-000000") + len(OUTPUT_SUFFIX)

# Illegal on Windows (a superset of POSIX's "/" and NUL), plus controls.
_ILLEGAL_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f\x7f-\x9f]')

_RESERVED_RE = re.compile(
    r"(con|prn|aux|nul|com[0-9]|lpt[0-9])(\..*)?", re.IGNORECASE,
)


@dataclass(frozen=True)
class ConversionPlan:
    source_manifest: Path
    output_file_path: Path
    desired_mtime_utc: datetime


def sanitize_filename(name: str, max_bytes: int = MAX_FILENAME_BYTES) -> str:
    """Make a game name safe to use as (part of) a filename.

    Illegal characters are dropped, trailing dots/spaces are stripped,
    and Windows device names (CON, NUL, COM1...) become empty. The result
    may be "" — callers pick their own fallback.
    """
    cleaned = _ILLEGAL_RE.sub("", name).strip()
    cleaned = cleaned.rstrip(". ")
    if cleaned in {".", ".."} or _RESERVED_RE.fullmatch(cleaned):
        return ""

    encoded = cleaned.encode("utf-8")
    if len(encoded) > max_bytes:
        # Cut on a character boundary.
        cleaned = encoded[:max_bytes].decode("utf-8", errors="ignore")
        cleaned = cleaned.rstrip(". ")
    return cleaned


def output_filename(bundle: ClipBundle, name: str) -> str:
    """Canonical output filename for a bundle and its resolved game name."""
    safe = sanitize_filename(name, MAX_FILENAME_BYTES - _STAMP_LEN)
    if not safe:
        safe = str(bundle.app_id)
    date = format_capture_date(bundle.capture_instant)
    time = format_capture_time(bundle.capture_instant)
    return f"{safe}-{date}-{time}{OUTPUT_SUFFIX}"


def plan_conversion(
    bundle: ClipBundle,
    name: str,
    output_dir: str | Path,
) -> ConversionPlan:
    """Build the conversion plan for one bundle.

    Example: fg_294100_20250828_124021 named "RimWorld" into /out
    → /out/RimWorld-20250828-124021.mp4, mtime 2025-08-28 12:40:21 UTC.
    """
    return ConversionPlan(
        source_manifest=bundle.manifest_path,
        output_file_path=Path(output_dir) / output_filename(bundle, name),
        desired_mtime_utc=bundle.capture_instant,
    )
