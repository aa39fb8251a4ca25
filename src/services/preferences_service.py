"""
Preferences Service - Manage user preferences.

Stores preferences in a JSON file in the user's platform-specific config
directory (e.g., ~/.config/PastryCost on Linux). The file lives outside
the SQLite database so preferences survive a database reset.

The only preference today is the cost resolution strategy. Cost
calculation itself never reads it: callers fetch it here and pass it in.

Usage:
    from src.services.preferences_service import (
        get_cost_strategy,
        set_cost_strategy,
        reset_all_preferences,
    )

    strategy = get_cost_strategy()      # CostStrategy.CHEAPEST when unset
    set_cost_strategy("latest")
    reset_all_preferences()
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

from src.models.enums import CostStrategy
from src.services.cost_strategy import DEFAULT_STRATEGY, parse_cost_strategy
from src.services.exceptions import InvalidCostStrategy
from src.utils.constants import APP_DIR_NAME

logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

PREF_COST_STRATEGY = "cost_strategy"


def _get_config_dir() -> Path:
    """Get the platform-appropriate config directory for the application."""
    if os.name == "nt":
        base = Path(os.environ.get("APPDATA", Path.home()))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))

    return base / APP_DIR_NAME


def _get_config_file() -> Path:
    """Get the preferences config file path."""
    return _get_config_dir() / "preferences.json"


# ============================================================================
# Internal Helpers
# ============================================================================


def _load_preferences() -> Dict[str, Any]:
    """
    Load preferences from the config file.

    Returns:
        Dictionary of preferences (empty dict if file doesn't exist or is unreadable)
    """
    config_file = _get_config_file()

    if not config_file.exists():
        return {}

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            result = json.load(f)
            return result if isinstance(result, dict) else {}
    except (json.JSONDecodeError, IOError) as e:
        logger.warning(f"Failed to load preferences from {config_file}: {e}")
        return {}


def _save_preferences(prefs: dict) -> bool:
    """
    Save preferences to the config file.

    Returns:
        True if saved successfully, False otherwise
    """
    config_file = _get_config_file()

    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(prefs, f, indent=2)
        return True
    except (IOError, OSError) as e:
        logger.error(f"Failed to save preferences to {config_file}: {e}")
        return False


def _get_preference(key: str) -> Optional[Any]:
    """Get a single preference value, or None if not set."""
    return _load_preferences().get(key)


def _set_preference(key: str, value: Any) -> bool:
    """Set a single preference value."""
    prefs = _load_preferences()
    prefs[key] = value
    return _save_preferences(prefs)


# ============================================================================
# Cost Strategy
# ============================================================================


def get_cost_strategy() -> CostStrategy:
    """
    Get the configured cost resolution strategy.

    Returns the stored preference if recognized, otherwise the default
    (cheapest).

    Returns:
        CostStrategy
    """
    stored = _get_preference(PREF_COST_STRATEGY)

    if stored is None:
        return DEFAULT_STRATEGY

    try:
        return parse_cost_strategy(stored)
    except InvalidCostStrategy:
        logger.warning(
            f"Stored cost strategy '{stored}' is not recognized, "
            f"falling back to '{DEFAULT_STRATEGY.value}'"
        )
        return DEFAULT_STRATEGY


def set_cost_strategy(strategy: Union[CostStrategy, str]) -> bool:
    """
    Set the cost resolution strategy preference.

    Args:
        strategy: CostStrategy or one of "cheapest", "latest", "average"

    Returns:
        True if saved successfully, False otherwise

    Raises:
        InvalidCostStrategy: If strategy is not recognized
    """
    strategy = parse_cost_strategy(strategy)
    saved = _set_preference(PREF_COST_STRATEGY, strategy.value)
    if saved:
        logger.info(f"Cost strategy set to '{strategy.value}'")
    return saved


# ============================================================================
# Reset / Utility
# ============================================================================


def reset_all_preferences() -> bool:
    """
    Reset all preferences to defaults by removing the config file.

    Returns:
        True if reset successfully, False otherwise
    """
    config_file = _get_config_file()

    try:
        if config_file.exists():
            config_file.unlink()
        logger.info("All preferences reset to defaults")
        return True
    except (IOError, OSError) as e:
        logger.error(f"Failed to reset preferences: {e}")
        return False


def get_all_preferences() -> dict:
    """
    Get all current effective preference values (for display).

    Returns:
        Dictionary with current effective values for all preferences
    """
    return {
        PREF_COST_STRATEGY: get_cost_strategy().value,
    }


def get_config_file_path() -> Path:
    """Get the path to the preferences config file."""
    return _get_config_file()
