"""
Enumerations shared by models and services.

- UnitCategory: The three mutually incompatible measurement families
- CostStrategy: Policy for picking one unit cost out of a price history
"""

from enum import Enum

from src.utils.constants import (
    COST_STRATEGY_AVERAGE,
    COST_STRATEGY_CHEAPEST,
    COST_STRATEGY_LATEST,
    UNIT_CATEGORY_PIECES,
    UNIT_CATEGORY_VOLUME,
    UNIT_CATEGORY_WEIGHT,
)


class UnitCategory(str, Enum):
    """
    Measurement unit category.

    Units only convert within their own category.

    Values:
        WEIGHT: Mass units, absolute base gram
        VOLUME: Volume units, absolute base milliliter
        PIECES: Counted items, absolute base piece
    """

    WEIGHT = UNIT_CATEGORY_WEIGHT
    VOLUME = UNIT_CATEGORY_VOLUME
    PIECES = UNIT_CATEGORY_PIECES


class CostStrategy(str, Enum):
    """
    Cost resolution strategy.

    Values:
        CHEAPEST: Lowest recorded cost per base unit (default)
        LATEST: Most recently recorded purchase
        AVERAGE: Arithmetic mean of every recorded cost per base unit
    """

    CHEAPEST = COST_STRATEGY_CHEAPEST
    LATEST = COST_STRATEGY_LATEST
    AVERAGE = COST_STRATEGY_AVERAGE
