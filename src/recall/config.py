"""
Configuration for the recall graph viewer.

Settings live in the ``graph:`` section of ``~/.recall/config.yaml``.
``RECALL_SERVER_URL`` overrides the server address. A missing or broken
file never stops the viewer: defaults are used and a warning is logged.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "http://127.0.0.1:3141"
SERVER_URL_ENV = "RECALL_SERVER_URL"


def recall_dir() -> Path:
    return Path.home() / ".recall"


def default_config_path() -> Path:
    return recall_dir() / "config.yaml"


class GraphConfig(BaseModel):
    """Viewer settings."""
    server_url: str = DEFAULT_SERVER_URL
    width: int = Field(default=1200, gt=0)
    height: int = Field(default=800, gt=0)
    frame_interval_ms: int = Field(default=16, gt=0)
    request_timeout: float = Field(default=10.0, gt=0)
    seed: Optional[int] = None

    model_config = ConfigDict(extra="ignore")


def load_config(path: Optional[Path] = None) -> GraphConfig:
    """
    Load GraphConfig from YAML, applying the environment override.

    Args:
        path: Config file; defaults to ~/.recall/config.yaml.

    Returns:
        GraphConfig: Settings from the file, or defaults when the file is
        missing or invalid.
    """
    path = path or default_config_path()
    config = GraphConfig()

    if path.exists():
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
            section = (data.get("graph") or {}) if isinstance(data, dict) else {}
            config = GraphConfig.model_validate(section)
        except (OSError, yaml.YAMLError, ValidationError) as e:
            logger.warning(f"Ignoring invalid config {path}: {e}")
            config = GraphConfig()

    env_url = os.getenv(SERVER_URL_ENV)
    if env_url:
        config = config.model_copy(update={"server_url": env_url})
    return config


def write_config(config: GraphConfig, path: Optional[Path] = None) -> Path:
    """Write ``config`` into the ``graph:`` section, preserving other sections."""
    path = path or default_config_path()
    data = {}
    if path.exists():
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        data = {}
    data["graph"] = config.model_dump()

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(data, f, sort_keys=False, default_flow_style=False)
    return path
