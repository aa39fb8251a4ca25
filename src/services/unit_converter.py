"""
Unit catalog and conversion for the Pastry Cost Tracker.

This module provides:
- The closed catalog of supported units (weight, volume, pieces)
- Unit lookup and compatibility queries for unit-choice controls
- Conversion of display quantities into an ingredient's base unit
- Quantity and cost display helpers

Conversion Strategy:
- Every unit carries a factor to its category's absolute base unit
  (g for weight, ml for volume, pz for pieces)
- A value is multiplied into the absolute base, then divided by the
  target unit's own factor
- Units of different categories never convert

Two entry points are offered. ``convert_standard_units`` returns a
detailed ``(success, value, error)`` tuple; ``convert`` is the
boundary used by recipe editing and maps every failure to ``0.0``. A
failed conversion therefore looks exactly like a genuine zero to its
callers; cost calculation later rejects the zero quantity with a warning.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, List, Optional, Tuple

from src.models.enums import UnitCategory
from src.utils.constants import ABSOLUTE_BASE_UNITS, CURRENCY_SYMBOL
from src.utils.validators import is_finite_number


@dataclass(frozen=True)
class UnitDefinition:
    """
    A supported measurement unit.

    Attributes:
        name: Display name (e.g., "Kilograms")
        abbreviation: Stable key (e.g., "kg")
        category: UnitCategory the unit belongs to
        conversion_factor_to_base: Multiplier to the category's absolute base unit
    """

    name: str
    abbreviation: str
    category: UnitCategory
    conversion_factor_to_base: float

    @property
    def is_absolute_base(self) -> bool:
        """True for g, ml and pz."""
        return ABSOLUTE_BASE_UNITS.get(self.category) == self.abbreviation


# ============================================================================
# Unit Catalog
# ============================================================================

SUPPORTED_UNITS: Tuple[UnitDefinition, ...] = (
    # Weight (absolute base: g)
    UnitDefinition("Grams", "g", UnitCategory.WEIGHT, 1.0),
    UnitDefinition("Kilograms", "kg", UnitCategory.WEIGHT, 1000.0),
    UnitDefinition("Milligrams", "mg", UnitCategory.WEIGHT, 0.001),
    # Volume (absolute base: ml)
    UnitDefinition("Milliliters", "ml", UnitCategory.VOLUME, 1.0),
    UnitDefinition("Liters", "l", UnitCategory.VOLUME, 1000.0),
    # Pieces (absolute base: pz)
    UnitDefinition("Pieces", "pz", UnitCategory.PIECES, 1.0),
)

_UNITS_BY_ABBREVIATION = {unit.abbreviation: unit for unit in SUPPORTED_UNITS}


# ============================================================================
# Lookup
# ============================================================================


def lookup_unit(abbreviation: Optional[str]) -> Optional[UnitDefinition]:
    """
    Find a unit by its abbreviation.

    Args:
        abbreviation: Unit abbreviation (exact match, e.g. "kg")

    Returns:
        UnitDefinition, or None if the unit is not in the catalog
    """
    if not isinstance(abbreviation, str):
        return None
    return _UNITS_BY_ABBREVIATION.get(abbreviation)


def get_unit_category(abbreviation: Optional[str]) -> Optional[UnitCategory]:
    """
    Determine the category of a unit.

    Returns:
        UnitCategory, or None for unknown units
    """
    unit = lookup_unit(abbreviation)
    return unit.category if unit else None


def units_compatible(unit1: Optional[str], unit2: Optional[str]) -> bool:
    """
    Check if two units are known and share a category.

    Args:
        unit1: First unit abbreviation
        unit2: Second unit abbreviation

    Returns:
        True if a conversion between them is possible
    """
    category1 = get_unit_category(unit1)
    return category1 is not None and category1 == get_unit_category(unit2)


def compatible_units(base_unit: Optional[str]) -> List[UnitDefinition]:
    """
    List the units an ingredient with the given base unit can be entered in.

    Args:
        base_unit: The ingredient's base unit abbreviation

    Returns:
        Units of the same category in catalog order (empty for unknown units)
    """
    category = get_unit_category(base_unit)
    if category is None:
        return []
    return [unit for unit in SUPPORTED_UNITS if unit.category == category]


# ============================================================================
# Conversion
# ============================================================================


def convert_standard_units(value: Any, from_unit: str, to_unit: str) -> Tuple[bool, float, str]:
    """
    Convert between units of the same category.

    Args:
        value: Quantity to convert
        from_unit: Source unit abbreviation (e.g., "kg")
        to_unit: Target unit abbreviation (e.g., "g")

    Returns:
        Tuple of (success, converted_value, error_message)
        - converted_value is 0.0 when success is False
        - error_message is empty when success is True
    """
    if not is_finite_number(value):
        return False, 0.0, f"Quantity is not a finite number: {value!r}"

    source = lookup_unit(from_unit)
    if source is None:
        return False, 0.0, f"Unknown unit: {from_unit}"

    target = lookup_unit(to_unit)
    if target is None:
        return False, 0.0, f"Unknown unit: {to_unit}"

    if source.category != target.category:
        return (
            False,
            0.0,
            f"Cannot convert {from_unit} ({source.category}) to {to_unit} ({target.category})",
        )

    if source is target:
        return True, float(value), ""

    # value -> absolute base unit -> target unit
    value_in_absolute_base = float(value) * source.conversion_factor_to_base
    return True, value_in_absolute_base / target.conversion_factor_to_base, ""


def convert(quantity: Any, from_unit: Optional[str], to_base_unit: Optional[str]) -> float:
    """
    Convert a display quantity into an ingredient's base unit.

    Any failure (missing or non-finite quantity, unknown unit, units of
    different categories) yields 0.0.

    Args:
        quantity: Quantity as entered
        from_unit: Unit the quantity was entered in
        to_base_unit: The ingredient's base unit

    Returns:
        Quantity in the base unit, or 0.0 if not convertible

    Example:
        >>> convert(1.5, "kg", "g")
        1500.0
        >>> convert(100, "ml", "g")
        0.0
    """
    success, converted, _ = convert_standard_units(quantity, from_unit, to_base_unit)
    return converted if success else 0.0


# ============================================================================
# Display Helpers
# ============================================================================


def _decimal_places(value: float) -> int:
    exponent = Decimal(repr(float(value))).normalize().as_tuple().exponent
    return max(0, -exponent) if isinstance(exponent, int) else 0


def format_quantity(value: float, unit: str = "", max_decimals: int = 3) -> str:
    """
    Format a quantity for display, trimming trailing zeros.

    Returns:
        Formatted string (e.g., "1500 g", "0.125 l")
    """
    text = f"{value:.{max_decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text} {unit}".strip()


def format_cost(amount: float, currency_symbol: str = CURRENCY_SYMBOL, precision: int = 2) -> str:
    """
    Format a currency amount for display.

    Returns:
        Formatted currency string (e.g., "3.80 €")
    """
    return f"{amount:.{precision}f} {currency_symbol}"


def format_unit_cost(
    cost_per_base_unit: float, base_unit: str, currency_symbol: str = CURRENCY_SYMBOL
) -> str:
    """
    Format a cost per base unit with at least four decimals.

    Small unit costs (0.0008 €/g) would vanish at currency precision.

    Returns:
        Formatted string (e.g., "0.0190 €/g")
    """
    precision = max(4, _decimal_places(cost_per_base_unit))
    return f"{cost_per_base_unit:.{precision}f} {currency_symbol}/{base_unit}"
