"""Tests for the convert, scan, and libraries CLIs.

ffmpeg is mocked at subprocess.run; the mock writes the output file so
file times and cleanup run for real.
"""

import os
import subprocess
from unittest.mock import patch

import pytest
import yaml

from conftest import write_steam_clip


def _fake_ffmpeg(cmd, **kwargs):
    with open(cmd[-1], "wb") as f:
        f.write(b"mp4")
    return subprocess.CompletedProcess(cmd, 0, b"", b"")


def _failing_ffmpeg(cmd, **kwargs):
    raise subprocess.CalledProcessError(1, cmd, stderr=b"Invalid data found")


@pytest.fixture
def recordings(tmp_path):
    """A Steam userdata tree holding one RimWorld and one Dota 2 clip."""
    steam = tmp_path.resolve() / "Steam"
    rec = steam / "userdata" / "12345" / "gamerecordings" / "video"
    write_steam_clip(rec, 294100, "20250828", "124021")
    write_steam_clip(rec, 570, "20250828", "130000")
    return rec


class TestConvertCli:
    def test_converts_with_library_names(self, recordings, steam_install, tmp_path):
        from clipremux.convert_cli import main

        steam, _ = steam_install
        out = tmp_path / "out"
        with patch("clipremux.remux.subprocess.run", side_effect=_fake_ffmpeg) as run:
            main([str(recordings), "--output", str(out), "--steam-root", str(steam)])
        assert run.call_count == 2
        assert sorted(os.listdir(out)) == [
            "Dota 2-20250828-130000.mp4",
            "RimWorld-20250828-124021.mp4",
        ]

    def test_steam_root_found_above_userdata(self, tmp_path):
        """Input inside <Steam>/userdata finds <Steam>/steamapps on its own."""
        from clipremux.convert_cli import main
        from conftest import write_app_manifest

        steam = tmp_path.resolve() / "Steam"
        (steam / "steamapps").mkdir(parents=True)
        write_app_manifest(steam / "steamapps", 294100, "RimWorld")
        rec = steam / "userdata" / "1" / "gamerecordings" / "video"
        write_steam_clip(rec, 294100, "20250828", "124021")

        out = tmp_path / "out"
        with patch("clipremux.remux.subprocess.run", side_effect=_fake_ffmpeg):
            main(["--input", str(steam / "userdata"), "--output", str(out)])
        assert os.listdir(out) == ["RimWorld-20250828-124021.mp4"]

    def test_game_id_filter(self, recordings, tmp_path):
        from clipremux.convert_cli import main

        out = tmp_path / "out"
        with patch("clipremux.remux.subprocess.run", side_effect=_fake_ffmpeg) as run:
            main([str(recordings), "--output", str(out), "--gameId", "570"])
        assert run.call_count == 1
        assert os.listdir(out) == ["570-20250828-130000.mp4"]

    def test_delete_after(self, recordings, tmp_path):
        from clipremux.convert_cli import main

        with patch("clipremux.remux.subprocess.run", side_effect=_fake_ffmpeg):
            main([str(recordings), "--output", str(tmp_path / "out"), "--delete-after"])
        assert os.listdir(recordings) == []

    def test_failures_exit_1_and_keep_clips(self, recordings, tmp_path, capsys):
        from clipremux.convert_cli import main

        with patch("clipremux.remux.subprocess.run", side_effect=_failing_ffmpeg):
            with pytest.raises(SystemExit) as exc_info:
                main([str(recordings), "--output", str(tmp_path / "out"), "--delete-after"])
        assert exc_info.value.code == 1
        assert len(os.listdir(recordings)) == 2
        assert "2 failed" in capsys.readouterr().out

    def test_dry_run(self, recordings, tmp_path, capsys):
        from clipremux.convert_cli import main

        out = tmp_path / "out"
        with patch("clipremux.remux.subprocess.run") as run:
            main([str(recordings), "--output", str(out), "--dry-run", "--delete-after"])
        run.assert_not_called()
        assert not out.exists()
        assert "PLAN" in capsys.readouterr().out

    def test_config_file(self, recordings, tmp_path):
        from clipremux.convert_cli import main

        out = tmp_path / "from-config"
        config = tmp_path / "run.yaml"
        config.write_text(yaml.dump({
            "paths": {"rec": str(recordings)},
            "input": "${rec}",
            "output": str(out),
            "game_ids": [294100],
        }))
        with patch("clipremux.remux.subprocess.run", side_effect=_fake_ffmpeg):
            main(["--config", str(config)])
        assert os.listdir(out) == ["294100-20250828-124021.mp4"]

    def test_cli_overrides_config(self, recordings, tmp_path):
        from clipremux.convert_cli import main

        config = tmp_path / "run.yaml"
        config.write_text(yaml.dump({"output": str(tmp_path / "from-config")}))
        out = tmp_path / "from-cli"
        with patch("clipremux.remux.subprocess.run", side_effect=_fake_ffmpeg):
            main([str(recordings), "--config", str(config), "--output", str(out)])
        assert len(os.listdir(out)) == 2
        assert not (tmp_path / "from-config").exists()

    def test_invalid_config_exits_2(self, recordings, tmp_path):
        from clipremux.convert_cli import main

        config = tmp_path / "run.yaml"
        config.write_text("bogus_key: 1\n")
        with pytest.raises(SystemExit) as exc_info:
            main([str(recordings), "--config", str(config)])
        assert exc_info.value.code == 2

    def test_positional_and_input_conflict(self, recordings):
        from clipremux.convert_cli import main

        with pytest.raises(SystemExit) as exc_info:
            main([str(recordings), "--input", str(recordings)])
        assert exc_info.value.code == 2

    def test_no_input_and_no_steam_exits_2(self, capsys):
        from clipremux.convert_cli import main

        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2
        assert "defaulting to Steam userdata" in capsys.readouterr().out

    def test_nothing_found(self, tmp_path, capsys):
        from clipremux.convert_cli import main

        main([str(tmp_path), "--output", str(tmp_path / "out")])
        assert "No fg_* clip folders found" in capsys.readouterr().out


class TestScanCli:
    def test_lists_clips(self, recordings, steam_install, capsys):
        from clipremux.scan_cli import main

        steam, _ = steam_install
        main([str(recordings), "--steam-root", str(steam)])
        out = capsys.readouterr().out
        assert "RimWorld-20250828-124021.mp4" in out
        assert "Dota 2" in out
        assert "2 clip folder(s)" in out

    def test_marks_fallback(self, recordings, capsys):
        from clipremux.scan_cli import main

        main([str(recordings), "--game-id", "570"])
        out = capsys.readouterr().out
        assert "no game name found" in out
        assert "1 clip folder(s)" in out


class TestLibrariesCli:
    def test_lists_roots_in_order(self, steam_install, capsys):
        from clipremux.libraries_cli import main

        steam, library = steam_install
        main(["--steam-root", str(steam)])
        out = capsys.readouterr().out
        assert f"1. {steam / 'steamapps'}" in out
        assert f"2. {library / 'steamapps'}" in out
