"""
config — Runtime configuration for the Start Work CLI.

Configuration can be provided with a JSON file.
Search order:
1) $STARTWORK_CONFIG (explicit path)
2) <workspace>/.startwork/config.json
3) ~/.startwork/config.json

If no config file exists, built-in defaults are used.
"""

import json
import os
import sys


WORKSPACE = os.getenv("STARTWORK_WORKSPACE", os.getcwd())


# Built-in defaults. Override any key via .startwork/config.json.
_DEFAULT_CONFIG = {
    # false: one "Connect to <Name>..." row per integration
    # true:  a single "Connect an Integration..." bulk action
    "cloud_integrations": False,
    "supported_integrations": ["github"],
    "slugify_branch_names": True,
    "skip_confirmations": [],
    "disabled_features": [],
    "telemetry": False,
    "log_level": "warning",
    "log_format": "console",
    "workspace_paths": None,
}


def _candidate_paths(workspace=None):
    env_path = os.getenv("STARTWORK_CONFIG")
    return [
        env_path,
        os.path.join(workspace or WORKSPACE, ".startwork", "config.json"),
        os.path.expanduser("~/.startwork/config.json"),
    ]


def load_config(workspace=None):
    """Return the merged config dict (file values over defaults)."""
    for path in _candidate_paths(workspace):
        if not path:
            continue
        if not os.path.isfile(path):
            continue
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("Config root must be a JSON object")
            return {**_DEFAULT_CONFIG, **data}
        except (OSError, ValueError) as exc:
            print(f"[startwork] Failed to load config at {path}: {exc}", file=sys.stderr)
            break
    return dict(_DEFAULT_CONFIG)


CONFIG = load_config()

LOG_LEVEL = str(CONFIG["log_level"])
LOG_FORMAT = str(CONFIG["log_format"])
