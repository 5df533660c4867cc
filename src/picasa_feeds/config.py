"""Configuration loading and saving.

Config file location: ~/.config/picasa-feeds/config.toml

Schema:
    [auth]
    token = "..."  # AuthSub session token, optional for public feeds

    [api]
    base_url = "https://picasaweb.google.com/data/feed/api"

    [defaults]
    user = "default"
    thumbsize = "72c,160c"
    max_results = 50
"""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

import tomli_w

CONFIG_DIR = Path.home() / ".config" / "picasa-feeds"
CONFIG_FILE = CONFIG_DIR / "config.toml"


@dataclass
class AppConfig:
    token: str | None = None
    base_url: str | None = None
    user: str = "default"
    thumbsize: str | None = None
    max_results: int | None = None

    def feed_options(self) -> dict:
        """Query options applied to every feed request."""
        options: dict = {}
        if self.thumbsize:
            options["thumbsize"] = self.thumbsize
        if self.max_results:
            options["max_results"] = self.max_results
        return options


def load_config(config_path: Path = CONFIG_FILE) -> AppConfig:
    """Load and validate config from TOML file."""
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    auth_data = data.get("auth", {})
    api_data = data.get("api", {})
    defaults = data.get("defaults", {})

    max_results = defaults.get("max_results")
    if max_results is not None and (
        not isinstance(max_results, int) or max_results <= 0
    ):
        raise ValueError("Config defaults.max_results must be a positive integer")

    return AppConfig(
        token=auth_data.get("token") or None,
        base_url=api_data.get("base_url") or None,
        user=defaults.get("user", "default"),
        thumbsize=defaults.get("thumbsize") or None,
        max_results=max_results,
    )


def save_config(config: AppConfig, config_path: Path = CONFIG_FILE) -> None:
    """Write config to TOML file with restricted permissions."""
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data: dict = {"defaults": {"user": config.user}}
    if config.token:
        data["auth"] = {"token": config.token}
    if config.base_url:
        data["api"] = {"base_url": config.base_url}
    if config.thumbsize:
        data["defaults"]["thumbsize"] = config.thumbsize
    if config.max_results:
        data["defaults"]["max_results"] = config.max_results

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)

    # Restrict permissions, the file may contain an auth token
    os.chmod(config_path, 0o600)


def config_exists(config_path: Path = CONFIG_FILE) -> bool:
    """Check if config file exists."""
    return config_path.exists()
