"""CLI for library discovery — where game names are looked up, in order.

Usage:
    clipremux libraries
    clipremux libraries --steam-root /mnt/games/SteamLibrary
    clipremux libraries --input ~/.local/share/Steam/userdata/12345
"""

import argparse

from .library import candidate_steam_roots, discover_library_roots


def main(args=None):
    parser = argparse.ArgumentParser(
        description="List the Steam library folders used to resolve game names.",
    )
    parser.add_argument(
        "--input", default=None,
        help="Clip search directory; a Steam root above a userdata/ path is included",
    )
    parser.add_argument(
        "--steam-root", dest="steam_roots", action="append", default=[],
        metavar="DIR",
        help="Extra Steam install or library folder (repeatable)",
    )
    parsed = parser.parse_args(args)

    candidates = candidate_steam_roots(parsed.input, parsed.steam_roots)
    roots = discover_library_roots(candidates)

    print("Searched:")
    for c in candidates:
        print(f"  {c}")
    if not roots:
        print("\nNo Steam libraries found. Clips will be named by app id.")
        return
    print(f"\n{len(roots)} library folder(s), in lookup order:")
    for i, root in enumerate(roots, 1):
        print(f"  {i}. {root.root_path}")


if __name__ == "__main__":
    main()
