"""
Constants for the Pastry Cost Tracker application.

This module defines system-wide constants including:
- Application metadata
- Unit categories and their absolute base units
- Cost strategy defaults
- Field length and numeric limits
- Validation error messages
"""

from typing import Dict

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Pastry Cost Tracker"
APP_VERSION = "0.1.0"
DATABASE_VERSION = "1.0"
DATABASE_FILENAME = "pastry_cost.db"
APP_DIR_NAME = "PastryCost"

# Environment variable selecting production/development data directories
ENVIRONMENT_VARIABLE = "PASTRY_COST_ENV"

# ============================================================================
# Unit Categories
# ============================================================================

UNIT_CATEGORY_WEIGHT = "weight"
UNIT_CATEGORY_VOLUME = "volume"
UNIT_CATEGORY_PIECES = "pieces"

# The unit every quantity of a category is reduced to before conversion
ABSOLUTE_BASE_UNITS: Dict[str, str] = {
    UNIT_CATEGORY_WEIGHT: "g",
    UNIT_CATEGORY_VOLUME: "ml",
    UNIT_CATEGORY_PIECES: "pz",
}

# ============================================================================
# Cost Resolution
# ============================================================================

COST_STRATEGY_CHEAPEST = "cheapest"
COST_STRATEGY_LATEST = "latest"
COST_STRATEGY_AVERAGE = "average"

DEFAULT_COST_STRATEGY = COST_STRATEGY_CHEAPEST

AVERAGE_PRICE_LABEL = "average of recorded prices"

CURRENCY_SYMBOL = "€"

# ============================================================================
# Validation Limits
# ============================================================================

MAX_NAME_LENGTH = 200
MAX_CATEGORY_LENGTH = 100
MAX_NOTES_LENGTH = 500
MAX_NARRATIVE_LABEL_LENGTH = 100
MAX_URL_LENGTH = 1000

MIN_PORTIONS = 1
MAX_QUANTITY = 999999999.0
MAX_COST = 999999.99

# ============================================================================
# Error Messages
# ============================================================================

ERROR_REQUIRED_FIELD = "This field is required"
ERROR_INVALID_NUMBER = "Please enter a valid number"
ERROR_INVALID_POSITIVE = "Value must be greater than zero"
ERROR_INVALID_UNIT = "Unknown unit"
ERROR_DUPLICATE_NAME = "An item with this name already exists"
