"""Runtime configuration for the prompt compilation engine.

Provides the token ceiling shown next to compiled prompts, the location of
the prompt registry file, and the summary length for operator views.
Environment variables take precedence over YAML config.

Usage:
    from staffdesk.config.runtime_config import get_token_ceiling

    ceiling = get_token_ceiling()  # 120000 unless overridden

Resolution order (highest to lowest priority):
1. Environment variables (e.g., STAFFDESK_PROMPT_TOKEN_CEILING=64000)
2. staffdesk/config/runtime.yaml
3. Built-in defaults
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

_CONFIG_PATH = Path(__file__).parent / "runtime.yaml"
_cached_config: Optional[Dict[str, Any]] = None

DEFAULT_TOKEN_CEILING = 120_000
DEFAULT_SUMMARY_LINES = 3
DEFAULT_SKILLPACK_SUMMARY_LINES = 4

ENV_TOKEN_CEILING = "STAFFDESK_PROMPT_TOKEN_CEILING"
ENV_REGISTRY_PATH = "STAFFDESK_PROMPT_REGISTRY"
ENV_SUMMARY_LINES = "STAFFDESK_PROMPT_SUMMARY_LINES"
ENV_SKILLPACK_SUMMARY_LINES = "STAFFDESK_PROMPT_SKILLPACK_SUMMARY_LINES"


def _load_config() -> Dict[str, Any]:
    """Load runtime.yaml configuration, with caching."""
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    config: Optional[Dict[str, Any]] = None
    if _CONFIG_PATH.exists():
        try:
            with open(_CONFIG_PATH, encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except (yaml.YAMLError, OSError) as e:
            logger.warning("Failed to load runtime config from %s: %s", _CONFIG_PATH, e)

    _cached_config = config if isinstance(config, dict) else _default_config()
    return _cached_config


def _default_config() -> Dict[str, Any]:
    """Return default configuration if runtime.yaml doesn't exist."""
    return {
        "version": "1.0",
        "prompts": {
            "token_ceiling": DEFAULT_TOKEN_CEILING,
            "summary_lines": DEFAULT_SUMMARY_LINES,
            "skillpack_summary_lines": DEFAULT_SKILLPACK_SUMMARY_LINES,
            "registry_path": None,
        },
    }


def reset_config() -> None:
    """Reset cached config (for testing)."""
    global _cached_config
    _cached_config = None


def _prompts_section() -> Dict[str, Any]:
    section = _load_config().get("prompts") or {}
    return section if isinstance(section, dict) else {}


def _positive_int(value: Any, name: str, default: int) -> int:
    """Parse a positive integer setting, falling back to default with a warning."""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        logger.warning("Setting '%s' has non-integer value %r. Using %d.", name, value, default)
        return default
    if parsed <= 0:
        logger.warning("Setting '%s' must be positive, got %d. Using %d.", name, parsed, default)
        return default
    return parsed


def get_token_ceiling() -> int:
    """Get the token ceiling for budget display.

    Environment variable precedence:
    1. STAFFDESK_PROMPT_TOKEN_CEILING
    2. prompts.token_ceiling in runtime.yaml
    3. Default: 120000
    """
    env_value = os.environ.get(ENV_TOKEN_CEILING)
    if env_value:
        return _positive_int(env_value, ENV_TOKEN_CEILING, DEFAULT_TOKEN_CEILING)

    config_value = _prompts_section().get("token_ceiling")
    if config_value is not None:
        return _positive_int(config_value, "prompts.token_ceiling", DEFAULT_TOKEN_CEILING)

    return DEFAULT_TOKEN_CEILING


def _int_setting(env_var: str, key: str, default: int) -> int:
    """Resolve a positive integer setting: env var, then runtime.yaml, then default."""
    env_value = os.environ.get(env_var)
    if env_value:
        return _positive_int(env_value, env_var, default)

    config_value = _prompts_section().get(key)
    if config_value is not None:
        return _positive_int(config_value, f"prompts.{key}", default)

    return default


def get_summary_lines() -> int:
    """Get how many non-blank lines a shared or agent block summary shows."""
    return _int_setting(ENV_SUMMARY_LINES, "summary_lines", DEFAULT_SUMMARY_LINES)


def get_skillpack_summary_lines() -> int:
    """Get how many non-blank lines a skillpack block summary shows."""
    return _int_setting(
        ENV_SKILLPACK_SUMMARY_LINES,
        "skillpack_summary_lines",
        DEFAULT_SKILLPACK_SUMMARY_LINES,
    )


def get_registry_path() -> Optional[Path]:
    """Get the configured prompt registry file, or None for the baseline.

    Relative paths in runtime.yaml are resolved against the config directory.
    """
    env_value = os.environ.get(ENV_REGISTRY_PATH)
    if env_value:
        return Path(env_value)

    config_value = _prompts_section().get("registry_path")
    if config_value:
        path = Path(config_value)
        if not path.is_absolute():
            path = _CONFIG_PATH.parent / path
        return path

    return None
