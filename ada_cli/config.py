import copy
import json
import os
import sys

from typing import Dict, Optional

from .errors import ConfigError

CONFIG_ENV_VAR = "ADA_CONFIG"
DEFAULT_CONFIG_PATH = os.path.join(os.path.expanduser("~"), ".ada", "config.json")

DEFAULT_CONFIG: Dict = {
    "provider": "openai",
    "model": "gpt-4",
    # Passed through to aisuite, e.g. {"openai": {"api_key": "..."}}
    "provider_configs": {},
    "max_tokens": 4096,
    # Run whitelisted shell commands without asking the model
    "enable_direct_commands": True,
    # Show which agent handled each request
    "show_intent": True,
}


def resolve_config_path(path: Optional[str] = None) -> str:
    return path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH


def save_config(config: Dict, path: Optional[str] = None):
    path = resolve_config_path(path)
    try:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as config_file:
            json.dump(config, config_file, indent=2)
            config_file.write("\n")
    except OSError as e:
        raise ConfigError(f"Failed to write config file {path}: {e}") from e


def load_config(path: Optional[str] = None) -> Dict:
    """
    Loads the assistant configuration.

    A missing file is created with the defaults. Keys absent from the file
    fall back to their defaults.
    """
    path = resolve_config_path(path)
    config = copy.deepcopy(DEFAULT_CONFIG)

    if not os.path.exists(path):
        save_config(config, path)
        print(f"Created default config at: {path}", file=sys.stderr)
        return config

    try:
        with open(path, "r", encoding="utf-8") as config_file:
            data = json.load(config_file)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object.")

    config.update(data)
    return config
