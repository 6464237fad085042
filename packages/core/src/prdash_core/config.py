import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "api_url": "http://localhost:3001",
    "poll_interval": 30,  # seconds between background refreshes
    "request_timeout": 10,
    "cache": "memory",  # "memory" | "sqlite" | "none"
    "cache_path": ".prdash-cache.db",
    "cache_ttl_hours": 24,
    "recent_limit": 5,
}


def load_config(config_path: str = ".prdash.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prdash.yml in the current directory
      3. PRDASH_API_URL from the environment
      4. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            try:
                file_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(file_config, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping, got {type(file_config).__name__}")
        config.update(file_config)

    api_url = os.environ.get("PRDASH_API_URL")
    if api_url:
        config["api_url"] = api_url

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["api_url"] = str(config["api_url"]).rstrip("/")
    return config
