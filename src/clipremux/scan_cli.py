"""CLI for listing clips — what convert would pick up, without converting.

Usage:
    clipremux scan ~/.local/share/Steam/userdata
    clipremux scan ~/clips --game-id 294100
"""

import argparse

from .convert_cli import add_common_args, resolve_input_dir
from .library import AppNameIndex, candidate_steam_roots
from .naming import output_filename
from .scanner import scan_clip_bundles


def main(args=None):
    parser = argparse.ArgumentParser(
        description="List convertible Steam clip folders with game names and start times.",
    )
    add_common_args(parser)
    parsed = parser.parse_args(args)

    input_dir = resolve_input_dir(parser, parsed)
    index = AppNameIndex.discover(candidate_steam_roots(input_dir, parsed.steam_roots))

    count = 0
    for bundle in scan_clip_bundles(input_dir, set(parsed.game_ids)):
        name, fell_back = index.name_for(bundle.app_id)
        start = bundle.capture_instant.strftime("%Y-%m-%d %H:%M:%S")
        marker = " (no game name found)" if fell_back else ""
        print(f"{bundle.directory_path}")
        print(f"  {name}{marker}  appid={bundle.app_id}  start={start} UTC")
        print(f"  -> {output_filename(bundle, name)}")
        count += 1

    print(f"\n{count} clip folder(s).")


if __name__ == "__main__":
    main()
