"""
Input validation functions for the Pastry Cost Tracker application.

This module provides validation functions for user inputs including:
- Numeric validation (finite, positive)
- String validation (length, required fields)
- Unit validation against the unit catalog
- Record-level validation for ingredients and price points
"""

import math
from decimal import Decimal
from typing import Any, Optional, Tuple

from .constants import (
    ERROR_INVALID_NUMBER,
    ERROR_INVALID_POSITIVE,
    ERROR_INVALID_UNIT,
    ERROR_REQUIRED_FIELD,
    MAX_CATEGORY_LENGTH,
    MAX_COST,
    MAX_NAME_LENGTH,
    MAX_NOTES_LENGTH,
    MAX_QUANTITY,
)


def is_finite_number(value: Any) -> bool:
    """
    Check that a value is an actual finite number.

    Strings, booleans and None are not numbers here, even when they could be
    parsed as one; NaN and infinities are rejected.

    Args:
        value: The value to check

    Returns:
        True if value is an int/float/Decimal with a finite value
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False
    return math.isfinite(float(value))


def parse_number(value: Any) -> Optional[float]:
    """
    Parse form input into a finite float.

    Args:
        value: Number or numeric string

    Returns:
        The parsed float, or None if it is not a finite number
    """
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (ValueError, TypeError):
        return None
    return number if math.isfinite(number) else None


def validate_required_string(value: Optional[str], field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a string field is not empty.

    Args:
        value: The string value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return False, f"{field_name}: {ERROR_REQUIRED_FIELD}"
    return True, ""


def validate_string_length(
    value: Optional[str], max_length: int, field_name: str = "Field"
) -> Tuple[bool, str]:
    """
    Validate that a string doesn't exceed maximum length.

    Args:
        value: The string value to validate
        max_length: Maximum allowed length
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value and len(value) > max_length:
        return False, f"{field_name}: Must be {max_length} characters or less"
    return True, ""


def validate_positive_number(
    value: Any, field_name: str = "Field", max_value: Optional[float] = None
) -> Tuple[bool, str]:
    """
    Validate that a value is a positive finite number (> 0).

    Numeric strings are accepted since form fields arrive as text.

    Args:
        value: The value to validate
        field_name: Name of the field for error messages
        max_value: Optional inclusive upper bound

    Returns:
        Tuple of (is_valid, error_message)
    """
    number = parse_number(value)
    if number is None:
        return False, f"{field_name}: {ERROR_INVALID_NUMBER}"
    if number <= 0:
        return False, f"{field_name}: {ERROR_INVALID_POSITIVE}"
    if max_value is not None and number > max_value:
        return False, f"{field_name}: Must be {max_value} or less"
    return True, ""


def validate_unit(unit: Optional[str], field_name: str = "Unit") -> Tuple[bool, str]:
    """
    Validate that a unit abbreviation exists in the unit catalog.

    Args:
        unit: The unit abbreviation to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    # Local import: the converter module is a service
    from src.services.unit_converter import lookup_unit

    if not unit:
        return False, f"{field_name}: {ERROR_REQUIRED_FIELD}"
    if lookup_unit(unit) is None:
        return False, f"{field_name}: {ERROR_INVALID_UNIT} '{unit}'"
    return True, ""


def validate_ingredient_data(data: dict) -> Tuple[bool, list]:
    """
    Validate all fields for a master ingredient.

    Args:
        data: Dictionary containing name, base_unit and optional category

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    name = data.get("name")
    is_valid, error = validate_required_string(name, "Name")
    if not is_valid:
        errors.append(error)
    else:
        is_valid, error = validate_string_length(name, MAX_NAME_LENGTH, "Name")
        if not is_valid:
            errors.append(error)

    is_valid, error = validate_unit(data.get("base_unit"), "Base unit")
    if not is_valid:
        errors.append(error)

    is_valid, error = validate_string_length(data.get("category"), MAX_CATEGORY_LENGTH, "Category")
    if not is_valid:
        errors.append(error)

    return len(errors) == 0, errors


def validate_price_point_data(data: dict) -> Tuple[bool, list]:
    """
    Validate all fields for an ingredient price point.

    Args:
        data: Dictionary containing supplier_notes,
              purchase_quantity_in_base_units and purchase_cost

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    notes = data.get("supplier_notes")
    is_valid, error = validate_required_string(notes, "Supplier notes")
    if not is_valid:
        errors.append(error)
    else:
        is_valid, error = validate_string_length(notes, MAX_NOTES_LENGTH, "Supplier notes")
        if not is_valid:
            errors.append(error)

    is_valid, error = validate_positive_number(
        data.get("purchase_quantity_in_base_units"), "Purchase quantity", MAX_QUANTITY
    )
    if not is_valid:
        errors.append(error)

    is_valid, error = validate_positive_number(data.get("purchase_cost"), "Purchase cost", MAX_COST)
    if not is_valid:
        errors.append(error)

    return len(errors) == 0, errors
