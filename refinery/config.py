"""Centralized config loading — read once at import time.

REFINERY_CONFIG may point at a YAML file that replaces the bundled config.yaml.
"""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

# Load .env from the working directory, then from the project root (parent of refinery/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(Path.cwd() / ".env")
load_dotenv(_PROJECT_ROOT / ".env")

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config.yaml"
CONFIG_PATH = Path(os.environ.get("REFINERY_CONFIG") or DEFAULT_CONFIG_PATH)

_config = yaml.safe_load(CONFIG_PATH.read_text())

_CRITERIA_DEFAULTS = {
    "min_length": 0,
    "max_length": None,
    "required_phrases": [],
    "forbidden_phrases": [],
    "forbid_emojis": True,
    "forbid_hashtags": True,
    "editorial": [],
}


def get_config() -> dict:
    """Return the loaded config dictionary."""
    return _config


def get_criteria() -> dict:
    """Return the acceptance criteria with every key present.

    Missing keys fall back to permissive defaults; empty lists stay empty.
    """
    configured = get_config().get("criteria") or {}
    criteria = dict(_CRITERIA_DEFAULTS)
    criteria.update({k: v for k, v in configured.items() if v is not None})
    return criteria
