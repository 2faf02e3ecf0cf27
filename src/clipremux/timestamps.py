"""Clip folder name parsing — app id and UTC capture instant.

Steam names each background-recording folder
fg_<appid>_<YYYYMMDD>_<HHMMSS>, with the recording start already in UTC.
"""

import re
from datetime import datetime, timezone

# ASCII only: \d would also accept other Unicode digit characters.
_CLIP_DIR_RE = re.compile(r"fg_(\d+)_(\d{8})_(\d{6})", re.ASCII)
_CLIP_CONTAINER_RE = re.compile(r"clip_\d+_\d{8}_\d{6}", re.ASCII)

MAX_APP_ID = 2**32 - 1


class PatternMismatch(ValueError):
    """Folder name is not a valid fg_<appid>_<YYYYMMDD>_<HHMMSS> clip name."""


def parse_clip_dir_name(name: str) -> tuple[int, datetime]:
    """Parse a clip folder name into (app_id, capture_instant).

    The date and time digits are taken as UTC wall-clock fields as-is;
    neither the host timezone nor the locale is consulted.

    Raises:
        PatternMismatch: Wrong shape, impossible date/time, or an app id
            outside 1..2**32-1.
    """
    match = _CLIP_DIR_RE.fullmatch(name)
    if match is None:
        raise PatternMismatch(f"Not a clip folder name: '{name}'")

    app_id = int(match.group(1))
    if not 0 < app_id <= MAX_APP_ID:
        raise PatternMismatch(f"App id out of range in '{name}': {app_id}")

    date, time = match.group(2), match.group(3)
    try:
        instant = datetime(
            int(date[0:4]), int(date[4:6]), int(date[6:8]),
            int(time[0:2]), int(time[2:4]), int(time[4:6]),
            tzinfo=timezone.utc,
        )
    except ValueError as e:
        raise PatternMismatch(f"Invalid date/time in '{name}': {e}") from None

    return app_id, instant


def is_clip_container_name(name: str) -> bool:
    """True for clip_<appid>_<YYYYMMDD>_<HHMMSS> container folder names."""
    return _CLIP_CONTAINER_RE.fullmatch(name) is not None


def format_capture_date(instant: datetime) -> str:
    """YYYYMMDD, zero-padded regardless of platform strftime quirks."""
    return f"{instant.year:04d}{instant.month:02d}{instant.day:02d}"


def format_capture_time(instant: datetime) -> str:
    """HHMMSS, zero-padded."""
    return f"{instant.hour:02d}{instant.minute:02d}{instant.second:02d}"
