"""DASH session remux — session.mpd + .m4s segments → single mp4 via ffmpeg."""

import os
import subprocess
from datetime import datetime
from pathlib import Path

import imageio_ffmpeg

_FFMPEG = imageio_ffmpeg.get_ffmpeg_exe()

# Lines of ffmpeg stderr kept in the failure message.
_STDERR_TAIL = 5


class ConversionFailed(RuntimeError):
    """ffmpeg could not be launched or exited non-zero."""


def _stderr_tail(stderr: bytes | None) -> str:
    if not stderr:
        return ""
    lines = stderr.decode("utf-8", errors="replace").strip().splitlines()
    return "\n".join(lines[-_STDERR_TAIL:])


def remux_session(
    manifest: str | Path,
    output: str | Path,
    overwrite: bool = False,
) -> None:
    """Stream-copy a clip's DASH session into an mp4.

    ffmpeg runs inside the clip folder because session.mpd references its
    init/chunk segments by relative path. First video stream is required,
    first audio stream is copied when present.

    Args:
        manifest: Path to session.mpd.
        output: Output mp4 path.
        overwrite: Replace an existing output file. Otherwise ffmpeg
            refuses (-n) and the conversion fails.

    Raises:
        ConversionFailed: Launch failure or non-zero exit.
    """
    manifest = Path(manifest)
    output = Path(output).resolve()

    cmd = [
        _FFMPEG, "-hide_banner",
        "-loglevel", "error",
        "-y" if overwrite else "-n",
        "-i", manifest.name,
        "-map", "0:v:0",
        "-map", "0:a:0?",
        "-c", "copy",
        "-movflags", "+faststart",
        str(output),
    ]
    try:
        subprocess.run(
            cmd, cwd=manifest.parent, check=True, capture_output=True,
        )
    except subprocess.CalledProcessError as e:
        detail = _stderr_tail(e.stderr)
        msg = f"ffmpeg exited with status {e.returncode}"
        raise ConversionFailed(f"{msg}: {detail}" if detail else msg) from e
    except OSError as e:
        raise ConversionFailed(f"Failed to launch ffmpeg: {e}") from e


def set_capture_mtime(path: str | Path, instant: datetime) -> None:
    """Set a file's access and modification times to the capture instant."""
    ts = instant.timestamp()
    os.utime(path, (ts, ts))
