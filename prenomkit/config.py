#!/usr/bin/env python3
"""
Configuration Management
========================
Loads API keys and per-machine overrides from the environment or a .env file.
Tunables that ship with the package live in configs/app.yaml (see settings).
"""

import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

from prenomkit.settings import get_setting, resolve_path


@dataclass
class Config:
    """Application configuration"""
    anthropic_api_key: Optional[str] = None
    data_dir: Optional[Path] = None

    @property
    def has_anthropic(self) -> bool:
        return bool(self.anthropic_api_key)


def load_env(env_path: Path = None) -> dict:
    """Load environment variables from .env file."""
    if env_path is None:
        # Look for .env in package parent directory
        env_path = Path(__file__).parent.parent / '.env'

    env_vars = {}
    if env_path.exists():
        for line in env_path.read_text().splitlines():
            line = line.strip()
            if '=' in line and not line.startswith('#'):
                key, value = line.split('=', 1)
                env_vars[key.strip()] = value.strip()
                # Also set in os.environ for modules that use it directly
                os.environ.setdefault(key.strip(), value.strip())

    return env_vars


def get_config(env_path: Path = None) -> Config:
    """Get configuration from environment."""
    env = load_env(env_path)

    data_dir = env.get('PRENOMKIT_DATA_DIR') or os.environ.get('PRENOMKIT_DATA_DIR')
    if not data_dir:
        data_dir = get_setting("dataset.data_dir")
    if not data_dir:
        raise ValueError("dataset.data_dir must be set in app.yaml")

    return Config(
        anthropic_api_key=env.get('ANTHROPIC_API_KEY') or os.environ.get('ANTHROPIC_API_KEY'),
        data_dir=resolve_path(data_dir),
    )
