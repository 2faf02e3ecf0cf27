"""Steam library discovery and game name lookup.

Steam can install games into several library folders. The main install
lists them in libraryfolders.vdf; each library's steamapps/ directory holds
one appmanifest_<appid>.acf per installed game, whose "name" key is the
display name we put in output filenames.

Both files are Valve KeyValues text owned by Steam. Only the keys we need
are extracted, everything else is ignored, and any unreadable or malformed
file counts as "no data" rather than an error.
"""

import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path


# ── Steam install locations ────────────────────────────────────────

FLATPAK_STEAM = Path(".var/app/com.valvesoftware.Steam/.local/share/Steam")


def default_steam_roots() -> list[Path]:
    """OS-conventional Steam install directories (not steamapps)."""
    home = Path.home()
    if sys.platform == "darwin":
        return [home / "Library/Application Support/Steam"]
    if sys.platform == "win32":
        pf86 = os.environ.get("PROGRAMFILES(X86)")
        if pf86:
            return [Path(pf86) / "Steam"]
        return [Path(r"C:\Program Files (x86)\Steam")]
    return [
        home / ".local/share/Steam",
        home / ".steam/steam",
        home / FLATPAK_STEAM,
    ]


def default_userdata_dir() -> Path:
    """<Steam>/userdata of the first installed default root.

    Falls back to the first OS default even if it doesn't exist, so the
    caller can report which path was tried.
    """
    roots = default_steam_roots()
    chosen = next((r for r in roots if r.is_dir()), roots[0])
    return chosen / "userdata"


def _steam_root_above_userdata(path: Path) -> Path | None:
    """<Steam> for any path inside <Steam>/userdata, else None."""
    parts = path.parts
    if "userdata" not in parts:
        return None
    idx = len(parts) - 1 - parts[::-1].index("userdata")
    if idx == 0:
        return None
    return Path(*parts[:idx])


def candidate_steam_roots(
    input_root: str | Path | None = None,
    extra_roots: list[str | Path] | None = None,
) -> list[Path]:
    """Prioritized Steam root candidates for library discovery.

    Order: explicitly configured roots, the input directory itself, the
    Steam root above a userdata/ input, then the OS defaults.
    """
    candidates = [Path(p).expanduser() for p in (extra_roots or [])]
    if input_root is not None:
        input_path = Path(input_root).expanduser().resolve()
        candidates.append(input_path)
        above = _steam_root_above_userdata(input_path)
        if above is not None:
            candidates.append(above)
    candidates.extend(default_steam_roots())
    return _dedupe(candidates)


def _dedupe(paths: list[Path]) -> list[Path]:
    seen = set()
    result = []
    for p in paths:
        if p in seen:
            continue
        seen.add(p)
        result.append(p)
    return result


# ── KeyValues parsing ──────────────────────────────────────────────

# A quoted VDF string: backslash escapes allowed inside.
_VDF_STRING = r'"((?:[^"\\]|\\.)*)"'
_PATH_RE = re.compile(r'"path"\s*' + _VDF_STRING, re.IGNORECASE)
_NAME_RE = re.compile(r'"name"\s*' + _VDF_STRING, re.IGNORECASE)
# Pre-2021 layout: "LibraryFolders" { "1" "D:\\SteamLibrary" ... }
_LEGACY_PATH_RE = re.compile(r'"\d+"[ \t]*' + _VDF_STRING)
_ESCAPE_RE = re.compile(r"\\(.)")
_ESCAPES = {"n": "\n", "t": "\t"}


def _unescape(value: str) -> str:
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), value)


def parse_library_folders(text: str) -> list[str]:
    """Return every library "path" value listed in libraryfolders.vdf text.

    Accepts both the current layout ("0" { "path" "..." ... }) and the
    older one ("1" "..."); Windows paths arrive escaped
    ("D:\\\\SteamLibrary").
    """
    paths = [_unescape(m.group(1)) for m in _PATH_RE.finditer(text)]
    if paths:
        return paths
    # Legacy numbered entries; skip numeric values like app sizes.
    return [
        _unescape(m.group(1)) for m in _LEGACY_PATH_RE.finditer(text)
        if m.group(1) and not m.group(1).isdigit()
    ]


def parse_app_name(text: str) -> str | None:
    """Return the first non-empty "name" value in appmanifest .acf text."""
    for m in _NAME_RE.finditer(text):
        name = _unescape(m.group(1)).strip()
        if name:
            return name
    return None


def _read_text(path: Path) -> str | None:
    """File contents, or None if missing/unreadable."""
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None


# ── Library roots ──────────────────────────────────────────────────


@dataclass(frozen=True)
class LibraryRoot:
    """A steamapps/ directory holding appmanifest_<appid>.acf files."""

    root_path: Path

    def manifest_path(self, app_id: int) -> Path:
        return self.root_path / f"appmanifest_{app_id}.acf"


def _library_index_files(steam_root: Path) -> list[Path]:
    return [
        steam_root / "config" / "libraryfolders.vdf",
        steam_root / "steamapps" / "libraryfolders.vdf",
    ]


def discover_library_roots(candidates: list[str | Path]) -> list[LibraryRoot]:
    """Find every steamapps/ directory reachable from the candidate roots.

    Each candidate contributes, in order: itself if it is a steamapps
    directory, its own steamapps/, then every library listed in its
    libraryfolders.vdf files. Duplicates keep their first position.
    """
    found = []
    for candidate in candidates:
        root = Path(candidate)
        if root.name.lower() == "steamapps" and root.is_dir():
            found.append(root)
            root = root.parent

        steamapps = root / "steamapps"
        if steamapps.is_dir():
            found.append(steamapps)

        for vdf in _library_index_files(root):
            text = _read_text(vdf)
            if text is None:
                continue
            for library in parse_library_folders(text):
                library_steamapps = Path(library) / "steamapps"
                if library_steamapps.is_dir():
                    found.append(library_steamapps)

    return [LibraryRoot(p) for p in _dedupe(found)]


def resolve_app_name(app_id: int, roots: list[LibraryRoot]) -> str | None:
    """First game name declared for app_id across roots, in root order."""
    for root in roots:
        text = _read_text(root.manifest_path(app_id))
        if text is None:
            continue
        name = parse_app_name(text)
        if name is not None:
            return name
    return None


class AppNameIndex:
    """Per-run app id → game name lookup over a fixed list of library roots.

    Build once per run (see discover()) and pass it to every lookup.
    Resolved names are remembered per app id so a game with many clips
    is read from disk once.
    """

    def __init__(self, roots: list[LibraryRoot]):
        self.roots = tuple(roots)
        self._names: dict[int, str | None] = {}

    @classmethod
    def discover(cls, candidates: list[str | Path]) -> "AppNameIndex":
        return cls(discover_library_roots(candidates))

    def lookup(self, app_id: int) -> str | None:
        if app_id not in self._names:
            self._names[app_id] = resolve_app_name(app_id, list(self.roots))
        return self._names[app_id]

    def name_for(self, app_id: int) -> tuple[str, bool]:
        """Return (name, fell_back). Falls back to the app id itself."""
        name = self.lookup(app_id)
        if name is None:
            return str(app_id), True
        return name, False
