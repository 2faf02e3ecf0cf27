"""Subcommand dispatcher for clipremux.

Usage:
    clipremux convert    [INPUT] --output ... [--game-id N] [--delete-after]
    clipremux scan       [INPUT] [--game-id N]
    clipremux libraries  [--steam-root DIR]
"""

import argparse
import sys


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="clipremux",
        description="Convert Steam game-recording clips to mp4 without re-encoding.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # Names and help only; options live in each *_cli module.
    subparsers.add_parser("convert", help="Remux discovered clips to mp4")
    subparsers.add_parser("scan", help="List discovered clips without converting")
    subparsers.add_parser("libraries", help="List Steam library folders used for game names")

    # Everything after the command name goes to that command's parser.
    parsed, remaining = parser.parse_known_args(args)

    if parsed.command is None:
        parser.print_help()
        sys.exit(1)

    if parsed.command == "convert":
        from .convert_cli import main as convert_main
        convert_main(remaining)
    elif parsed.command == "scan":
        from .scan_cli import main as scan_main
        scan_main(remaining)
    elif parsed.command == "libraries":
        from .libraries_cli import main as libraries_main
        libraries_main(remaining)


if __name__ == "__main__":
    main()
