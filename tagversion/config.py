#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys

logger = logging.getLogger("tagversion")

# Namespace for monorepo version tags, e.g. "module-a" selects "module-a/v1.2.3".
# Read at call time, never cached.
TAG_PREFIX_ENV_VAR = "TAGVERSION_TAG_PREFIX"

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. TAGVERSION_CONFIG environment variable
    2. ~/.tagversion/ directory
    """
    if 'TAGVERSION_CONFIG' in os.environ:
        path = Path(os.environ['TAGVERSION_CONFIG'])
        if path.exists():
            return path

    config_dir = Path.home() / '.tagversion'
    for filename in CONFIG_FILENAMES:
        path = config_dir / filename
        if path.exists():
            return path

    # If no file exists, return default path for saving
    return config_dir / 'config.json'


def load_config():
    """Load configuration from file."""
    config_path = get_config_path()

    # Start with default config
    config = get_default_config()

    if config_path.exists():
        try:
            if config_path.suffix.lower() in ['.toml']:
                with open(config_path, 'rb') as f:
                    file_config = tomllib.load(f)
            elif config_path.suffix.lower() in ['.yaml', '.yml']:
                import yaml
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f) or {}
            else:
                with open(config_path, 'r') as f:
                    file_config = json.load(f)

            config = merge_configs(config, file_config)
        except Exception as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    config = apply_env_overrides(config)

    return config


def save_config(config):
    """Save configuration to file."""
    config_path = get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        if config_path.suffix.lower() in ['.toml']:
            # tomllib is read-only
            import toml
            with open(config_path, 'w') as f:
                toml.dump(config, f)
        elif config_path.suffix.lower() in ['.yaml', '.yml']:
            import yaml
            with open(config_path, 'w') as f:
                yaml.safe_dump(config, f, default_flow_style=False)
        else:
            with open(config_path, 'w') as f:
                json.dump(config, f, indent=2)

        logger.info(f"Configuration saved to {config_path}")
    except Exception as e:
        logger.error(f"Error saving config to {config_path}: {e}")


def get_default_config():
    """Get default configuration."""
    return {
        "general": {
            "git_timeout": 60,  # Seconds before a git invocation is abandoned
            "remote_timeout": 0,  # Seconds allowed for clone and fetch, 0 for no limit
        },
        "versioning": {
            "tag_prefix": "",
            "default_version": "0.0.0",
        },
        "auth": {
            "basic_token": "",
        },
        "logging": {
            "level": "WARNING",
            "format": "%(levelname)s: %(message)s",
        },
    }


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: TAGVERSION_SECTION_KEY
    For example: TAGVERSION_GENERAL_GIT_TIMEOUT=120
    """
    env_prefix = "TAGVERSION_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix) or env_key in (TAG_PREFIX_ENV_VAR, 'TAGVERSION_CONFIG'):
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts = config_key.split('_')
                if key_parts[i:i + len(config_key_parts)] == config_key_parts:
                    if len(config_key_parts) > best_match_len:
                        best_match_len = len(config_key_parts)
                        matched_key = config_key

            if matched_key is None:
                break

            if i + best_match_len == len(key_parts):
                # String settings keep the raw value ("1" stays a version, not an int)
                if isinstance(current_level[matched_key], str):
                    current_level[matched_key] = value
                else:
                    current_level[matched_key] = typed_value
                break

            if isinstance(current_level[matched_key], dict):
                current_level = current_level[matched_key]
                i += best_match_len
            else:
                # Env var is longer than the config path it matched
                break

    return config


def get_tag_prefix(config=None):
    """
    Get the active version tag namespace.

    TAGVERSION_TAG_PREFIX wins over the configured versioning.tag_prefix.
    An empty string selects plain "vX.Y.Z" tags.
    """
    prefix = os.environ.get(TAG_PREFIX_ENV_VAR)
    if prefix is not None:
        return prefix.strip()
    if config is None:
        return ""
    return str(config.get("versioning", {}).get("tag_prefix", "") or "").strip()


def configure_logging(config=None, verbose=False):
    """Install a stderr handler on the tagversion logger."""
    log_config = (config or get_default_config()).get("logging", {})
    level_name = "DEBUG" if verbose else str(log_config.get("level", "WARNING")).upper()
    level = getattr(logging, level_name, logging.WARNING)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(log_config.get("format", "%(levelname)s: %(message)s")))
    logger.addHandler(handler)
    logger.setLevel(level)
