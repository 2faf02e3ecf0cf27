"""Run configuration loader — convert settings from YAML.

Lets a recurring batch (same Steam install, same output folder, same
games) live in a file instead of a long command line. Command-line
arguments override scalar values; lists are merged.

Run config schema:
  paths:
    steam: "/home/me/.local/share/Steam"
  input: "${steam}/userdata"        # directory searched for fg_* clips
  output: "/videos/steam"           # where mp4s are written
  game_ids: [294100, 570]           # only convert these games
  steam_roots: ["${steam}", "/mnt/games/SteamLibrary"]
  delete_after: false               # remove clip folders once converted
  force: false                      # overwrite existing mp4s

Every path value (input, output, steam_roots entries) goes through
resolve_path_vars(), which expands ${name} from the paths: mapping and
rejects names that are not defined there.
"""

import re
from pathlib import Path

import yaml


VALID_KEYS = {
    "paths", "input", "output", "game_ids", "steam_roots",
    "delete_after", "force",
}

BOOL_KEYS = ("delete_after", "force")

DEFAULTS = {
    "input": None,
    "output": None,
    "game_ids": [],
    "steam_roots": [],
    "delete_after": False,
    "force": False,
}

_PATH_VAR_RE = re.compile(r"\$\{(\w+)\}")


def resolve_path_vars(text: str, paths: dict[str, str]) -> str:
    """Expand ${name} references in one config value.

    Raises:
        ValueError: A referenced name is not under paths:.
    """
    def _lookup(match):
        name = match.group(1)
        try:
            return str(paths[name])
        except KeyError:
            raise ValueError(
                f"Run config: unknown path variable ${{{name}}} in {text!r}"
            ) from None
    return _PATH_VAR_RE.sub(_lookup, text)


def _parse_game_ids(value) -> list[int]:
    if not isinstance(value, list):
        raise ValueError(f"Run config: game_ids must be a list, got {value!r}")
    ids = []
    for i, item in enumerate(value):
        # bool is an int subclass; "true" is not an app id.
        if isinstance(item, bool) or not isinstance(item, (int, str)):
            raise ValueError(f"Run config: game_ids[{i}] must be an integer, got {item!r}")
        try:
            app_id = int(item)
        except ValueError:
            raise ValueError(
                f"Run config: game_ids[{i}] must be an integer, got {item!r}"
            ) from None
        if app_id <= 0:
            raise ValueError(f"Run config: game_ids[{i}] must be > 0, got {app_id}")
        ids.append(app_id)
    return ids


def load_run_config(config_path: str | Path) -> dict:
    """Load, validate, and normalize a run config.

    Processing pipeline:
      1. Parse YAML (an empty file is an empty config).
      2. Reject unknown keys.
      3. Resolve ${path} variables in input, output, and steam_roots.
      4. Validate game_ids and boolean flags.
      5. Fill defaults for everything not given.

    Args:
        config_path: Path to the YAML run config.

    Returns:
        Dict with every key of DEFAULTS present.

    Raises:
        ValueError: Unknown keys, wrong types, or unknown ${var}.
    """
    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError("Run config: top level must be a mapping")

    unknown = set(raw) - VALID_KEYS
    if unknown:
        raise ValueError(
            f"Run config: unknown key(s) {sorted(unknown)}. "
            f"Valid: {sorted(VALID_KEYS)}"
        )

    paths = raw.get("paths") or {}
    if not isinstance(paths, dict):
        raise ValueError("Run config: paths must be a mapping")

    config = dict(DEFAULTS)

    for key in ("input", "output"):
        if raw.get(key) is not None:
            config[key] = resolve_path_vars(str(raw[key]), paths)

    roots = raw.get("steam_roots") or []
    if not isinstance(roots, list):
        raise ValueError(f"Run config: steam_roots must be a list, got {roots!r}")
    config["steam_roots"] = [resolve_path_vars(str(r), paths) for r in roots]

    if raw.get("game_ids") is not None:
        config["game_ids"] = _parse_game_ids(raw["game_ids"])

    for key in BOOL_KEYS:
        if key in raw:
            if not isinstance(raw[key], bool):
                raise ValueError(f"Run config: {key} must be true or false, got {raw[key]!r}")
            config[key] = raw[key]

    return config
