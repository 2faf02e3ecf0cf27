"""CLI for conversion — find fg_* clips and remux each to mp4.

Usage:
    # Search a folder, write mp4s to the current directory
    clipremux convert ~/.local/share/Steam/userdata

    # Only two games, into a given folder, delete clips once converted
    clipremux convert --input ~/Steam/userdata --output ~/Videos/steam \
        --game-id 294100 --game-id 570 --delete-after

    # Settings from a YAML run config (see run_config.py)
    clipremux convert --config steam-clips.yaml --dry-run
"""

import argparse
import sys
from pathlib import Path

from .library import AppNameIndex, candidate_steam_roots, default_userdata_dir
from .pipeline import convert_bundles, print_summary
from .run_config import DEFAULTS, load_run_config
from .scanner import scan_clip_bundles


def add_common_args(parser: argparse.ArgumentParser) -> None:
    """Input and library arguments shared by convert and scan."""
    parser.add_argument(
        "input_positional", nargs="?", default=None, metavar="INPUT",
        help="Directory to search recursively (same as --input)",
    )
    parser.add_argument(
        "--input", default=None,
        help="Directory to search recursively (default: <Steam>/userdata)",
    )
    parser.add_argument(
        "--game-id", "--gameId", dest="game_ids", type=int,
        action="append", default=[], metavar="APPID",
        help="Only clips for this app id (repeatable)",
    )
    parser.add_argument(
        "--steam-root", dest="steam_roots", action="append", default=[],
        metavar="DIR",
        help="Extra Steam install or library folder to look up game names in (repeatable)",
    )


def resolve_input_dir(parser, parsed, config_input=None) -> Path:
    """Pick the input directory: --input, positional, config, Steam default.

    Exits through parser.error() if nothing usable is found.
    """
    if parsed.input and parsed.input_positional:
        parser.error("Give the input directory either positionally or with --input, not both")

    chosen = parsed.input or parsed.input_positional or config_input
    if chosen is None:
        chosen = default_userdata_dir()
        print(f"  WARN   No input given, defaulting to Steam userdata: {chosen}")
        print("         Pass --input <dir> to override.")

    input_dir = Path(chosen).expanduser()
    if not input_dir.is_dir():
        parser.error(f"input is not a directory: {input_dir}")
    return input_dir


def _parse_args(args=None):
    parser = argparse.ArgumentParser(
        description="Convert Steam background-recording clips (fg_* folders with session.mpd) to mp4.",
    )
    add_common_args(parser)
    parser.add_argument(
        "--output", default=None,
        help="Output directory (default: current directory)",
    )
    parser.add_argument(
        "--config", default=None,
        help="YAML run config; command-line arguments take precedence",
    )
    parser.add_argument(
        "--delete-after", action="store_true", default=None,
        help="After a successful conversion, delete the fg_* folder, and its "
             "clip_* folder when nothing else is left in it",
    )
    parser.add_argument(
        "--force", action="store_true", default=None,
        help="Overwrite existing output files",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Print what would be written and deleted, without doing it",
    )
    return parser, parser.parse_args(args)


def main(args=None):
    parser, parsed = _parse_args(args)

    config = dict(DEFAULTS)
    if parsed.config:
        try:
            config = load_run_config(parsed.config)
        except (OSError, ValueError) as e:
            parser.error(f"invalid run config {parsed.config}: {e}")

    input_dir = resolve_input_dir(parser, parsed, config["input"])

    output_dir = Path(parsed.output or config["output"] or Path.cwd()).expanduser()
    if not parsed.dry_run:
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            parser.error(f"cannot create output dir {output_dir}: {e}")

    game_ids = set(config["game_ids"]) | set(parsed.game_ids)
    delete_after = config["delete_after"] if parsed.delete_after is None else True
    force = config["force"] if parsed.force is None else True

    index = AppNameIndex.discover(
        candidate_steam_roots(input_dir, config["steam_roots"] + parsed.steam_roots)
    )

    bundles = list(scan_clip_bundles(input_dir, game_ids))
    if not bundles:
        if game_ids:
            print(f"No clips for app id(s) {sorted(game_ids)} under {input_dir}")
        else:
            print(f"No fg_* clip folders found under {input_dir}")
        return

    print(f"Found {len(bundles)} clip folder(s).")
    summary = convert_bundles(
        bundles, index, output_dir,
        delete_after=delete_after, force=force, dry_run=parsed.dry_run,
    )
    print_summary(summary)

    if summary.failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
