"""
Configuration Loader

Loads YAML configuration files (service settings, demo catalog data)
and reads secrets from the environment.
"""

import os
from pathlib import Path
from typing import Any, Dict, List

import yaml


class ConfigError(Exception):
    """Raised when required configuration is missing."""


def _get_config_dir() -> Path:
    """Get the config directory path."""
    # Try relative to this file first
    module_dir = Path(__file__).parent.parent.parent
    config_dir = module_dir / 'config'

    if config_dir.exists():
        return config_dir

    # Try current working directory
    cwd_config = Path.cwd() / 'config'
    if cwd_config.exists():
        return cwd_config

    raise FileNotFoundError(
        f"Config directory not found. Tried: {config_dir}, {cwd_config}"
    )


def load_config(filename: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        filename: Name of the config file (e.g., 'settings.yaml')

    Returns:
        Parsed YAML content as dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    config_path = _get_config_dir() / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def load_settings() -> Dict[str, Any]:
    """
    Load service settings.

    Returns:
        Dictionary with 'supabase', 'uploads', 'openai' and 'export' sections

    Example:
        {
            'supabase': {'table': 'shopify_products_complete', 'bucket': 'product-images'},
            'uploads': {'max_size_bytes': 5242880, 'allowed_types': [...]},
            ...
        }
    """
    return load_config('settings.yaml')


def load_demo_products() -> List[Dict[str, Any]]:
    """
    Load the demo catalog used when no database is configured.

    Returns:
        List of product records keyed by store column names
    """
    config = load_config('demo_products.yaml')
    return config.get('products', [])


def require_env(name: str) -> str:
    """
    Read a required secret from the environment.

    Raises:
        ConfigError: If the variable is unset or empty
    """
    value = os.environ.get(name, '').strip()
    if not value:
        raise ConfigError(f"Environment variable {name} is not set")
    return value
