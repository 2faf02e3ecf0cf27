"""Shared test fixtures for clipremux tests.

Builds fake Steam installs and clip trees on disk. No real media: the
segment files are placeholders and ffmpeg is replaced where it would run.
"""

import pytest


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point HOME at an empty dir so a real Steam install is never found."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    return home


def write_clip(parent, name, manifest=True):
    """Create a clip folder like Steam does; return its path."""
    clip_dir = parent / name
    clip_dir.mkdir(parents=True)
    if manifest:
        (clip_dir / "session.mpd").write_text("<MPD/>")
        (clip_dir / "init-stream0.m4s").write_bytes(b"\x00")
        (clip_dir / "chunk-stream0-00001.m4s").write_bytes(b"\x00")
    return clip_dir


def write_steam_clip(recordings, app_id, date, time, manifest=True):
    """Canonical layout: clip_<id>_<d>_<t>/video/fg_<id>_<d>_<t>/."""
    container = recordings / f"clip_{app_id}_{date}_{time}"
    return write_clip(container / "video", f"fg_{app_id}_{date}_{time}", manifest)


@pytest.fixture
def clip_root(tmp_path):
    """Resolved directory to build clip trees in."""
    root = tmp_path.resolve() / "clips"
    root.mkdir()
    return root


@pytest.fixture
def steam_install(tmp_path):
    """A Steam root with a second library listed in libraryfolders.vdf.

    RimWorld (294100) lives in the main library, Dota 2 (570) in the
    second one. Returns (steam_root, second_library).
    """
    steam = tmp_path.resolve() / "Steam"
    library = tmp_path.resolve() / "SteamLibrary"
    (steam / "steamapps").mkdir(parents=True)
    (steam / "config").mkdir()
    (library / "steamapps").mkdir(parents=True)

    (steam / "config" / "libraryfolders.vdf").write_text(
        '"libraryfolders"\n'
        "{\n"
        '\t"0"\n\t{\n'
        f'\t\t"path"\t\t"{steam}"\n'
        '\t\t"label"\t\t""\n'
        '\t\t"apps"\n\t\t{\n\t\t\t"294100"\t\t"1234567"\n\t\t}\n'
        "\t}\n"
        '\t"1"\n\t{\n'
        f'\t\t"path"\t\t"{library}"\n'
        '\t\t"apps"\n\t\t{\n\t\t\t"570"\t\t"7654321"\n\t\t}\n'
        "\t}\n"
        "}\n"
    )
    write_app_manifest(steam / "steamapps", 294100, "RimWorld")
    write_app_manifest(library / "steamapps", 570, "Dota 2")
    return steam, library


def write_app_manifest(steamapps, app_id, name):
    (steamapps / f"appmanifest_{app_id}.acf").write_text(
        '"AppState"\n'
        "{\n"
        f'\t"appid"\t\t"{app_id}"\n'
        '\t"Universe"\t\t"1"\n'
        f'\t"name"\t\t"{name}"\n'
        '\t"StateFlags"\t\t"4"\n'
        f'\t"installdir"\t\t"{name}"\n'
        "}\n"
    )
