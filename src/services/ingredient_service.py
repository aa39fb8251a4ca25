"""Ingredient Service - master ingredient catalog management.

This module provides CRUD operations for master ingredients, the
canonical raw-ingredient definitions recipes and price points refer to.

All functions accept an optional session for transactional atomicity and
return plain dictionaries.

Key Features:
- Create/Read/Update master ingredients with validation
- Base unit must exist in the unit catalog
- Changing a base unit re-derives canonical quantities of recipe lines
- Delete cascades to price points and recipe lines; recipes left without
  any line are deleted too

Example Usage:
    >>> from src.services.ingredient_service import create_ingredient, delete_ingredient
    >>> flour = create_ingredient(name="Flour 00", base_unit="g", category="Flours")
    >>> flour["base_unit"]
    'g'
    >>> delete_ingredient(flour["id"])["price_points_removed"]
    0
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from src.models import MasterIngredient, Recipe
from src.services import unit_converter
from src.services.database import session_scope
from src.services.exceptions import MasterIngredientNotFound, ValidationError
from src.services.logging_utils import get_service_logger, log_operation
from src.utils.constants import ERROR_DUPLICATE_NAME
from src.utils.validators import validate_ingredient_data

logger = get_service_logger(__name__)

UPDATABLE_FIELDS = ("name", "base_unit", "category")


def _normalize(data: Dict[str, Any]) -> Dict[str, Any]:
    normalized = dict(data)
    if isinstance(normalized.get("name"), str):
        normalized["name"] = normalized["name"].strip()
    if isinstance(normalized.get("category"), str):
        normalized["category"] = normalized["category"].strip() or None
    return normalized


def _check_name_available(
    name: str, session: Session, exclude_id: Optional[int] = None
) -> None:
    query = session.query(MasterIngredient).filter(MasterIngredient.name == name)
    if exclude_id is not None:
        query = query.filter(MasterIngredient.id != exclude_id)
    if query.first() is not None:
        raise ValidationError([f"Name: {ERROR_DUPLICATE_NAME} ('{name}')"])


def create_ingredient(
    name: str,
    base_unit: str,
    category: Optional[str] = None,
    session: Optional[Session] = None,
) -> Dict[str, Any]:
    """Create a new master ingredient.

    Args:
        name: Ingredient name (required, unique)
        base_unit: Base unit abbreviation, must be in the unit catalog
        category: Optional free-text category
        session: Optional database session

    Returns:
        Dict[str, Any]: Created ingredient as dictionary

    Raises:
        ValidationError: If a field is invalid or the name is taken
    """
    if session is not None:
        return _create_ingredient_impl(name, base_unit, category, session)
    with session_scope() as session:
        return _create_ingredient_impl(name, base_unit, category, session)


def _create_ingredient_impl(
    name: str, base_unit: str, category: Optional[str], session: Session
) -> Dict[str, Any]:
    data = _normalize({"name": name, "base_unit": base_unit, "category": category})
    is_valid, errors = validate_ingredient_data(data)
    if not is_valid:
        raise ValidationError(errors)
    _check_name_available(data["name"], session)

    ingredient = MasterIngredient(**data)
    session.add(ingredient)
    session.flush()

    log_operation(
        logger,
        operation="create_ingredient",
        outcome="success",
        ingredient_id=ingredient.id,
        base_unit=ingredient.base_unit,
    )
    return ingredient.to_dict()


def get_ingredient(
    ingredient_id: int, session: Optional[Session] = None
) -> Optional[Dict[str, Any]]:
    """Get a master ingredient by ID.

    Returns:
        Dict[str, Any]: Ingredient data, or None if not found
    """
    if session is not None:
        return _get_ingredient_impl(ingredient_id, session)
    with session_scope() as session:
        return _get_ingredient_impl(ingredient_id, session)


def _get_ingredient_impl(ingredient_id: int, session: Session) -> Optional[Dict[str, Any]]:
    ingredient = session.get(MasterIngredient, ingredient_id)
    return ingredient.to_dict() if ingredient else None


def get_all_ingredients(
    category: Optional[str] = None, session: Optional[Session] = None
) -> List[Dict[str, Any]]:
    """Get all master ingredients sorted by name.

    Args:
        category: Optional category filter
        session: Optional database session

    Returns:
        List[Dict[str, Any]]: Ingredient dictionaries
    """
    if session is not None:
        return _get_all_ingredients_impl(category, session)
    with session_scope() as session:
        return _get_all_ingredients_impl(category, session)


def _get_all_ingredients_impl(category: Optional[str], session: Session) -> List[Dict[str, Any]]:
    query = session.query(MasterIngredient)
    if category is not None:
        query = query.filter(MasterIngredient.category == category)
    return [ingredient.to_dict() for ingredient in query.order_by(MasterIngredient.name).all()]


def update_ingredient(
    ingredient_id: int,
    session: Optional[Session] = None,
    **kwargs,
) -> Dict[str, Any]:
    """Update master ingredient attributes.

    When the base unit changes, every recipe line using the ingredient gets
    its canonical quantity re-derived from its display quantity and unit.
    Lines whose display unit no longer fits end up with quantity 0.

    Args:
        ingredient_id: Ingredient ID
        session: Optional database session
        **kwargs: Fields to update (name, base_unit, category)

    Returns:
        Dict[str, Any]: Updated ingredient as dictionary

    Raises:
        MasterIngredientNotFound: If the ingredient doesn't exist
        ValidationError: If a field is invalid or unknown
    """
    if session is not None:
        return _update_ingredient_impl(ingredient_id, session, **kwargs)
    with session_scope() as session:
        return _update_ingredient_impl(ingredient_id, session, **kwargs)


def _update_ingredient_impl(ingredient_id: int, session: Session, **kwargs) -> Dict[str, Any]:
    ingredient = session.get(MasterIngredient, ingredient_id)
    if ingredient is None:
        raise MasterIngredientNotFound(ingredient_id)

    unknown = sorted(set(kwargs) - set(UPDATABLE_FIELDS))
    if unknown:
        raise ValidationError([f"Unknown field: {field}" for field in unknown])

    data = _normalize(
        {
            "name": kwargs.get("name", ingredient.name),
            "base_unit": kwargs.get("base_unit", ingredient.base_unit),
            "category": kwargs.get("category", ingredient.category),
        }
    )
    is_valid, errors = validate_ingredient_data(data)
    if not is_valid:
        raise ValidationError(errors)
    _check_name_available(data["name"], session, exclude_id=ingredient_id)

    base_unit_changed = data["base_unit"] != ingredient.base_unit
    ingredient.update_from_dict(data)

    if base_unit_changed:
        for line in ingredient.recipe_ingredients:
            line.quantity = unit_converter.convert(
                line.display_quantity, line.display_unit, ingredient.base_unit
            )

    session.flush()
    log_operation(
        logger,
        operation="update_ingredient",
        outcome="success",
        ingredient_id=ingredient_id,
        base_unit_changed=base_unit_changed,
    )
    return ingredient.to_dict()


def delete_ingredient(ingredient_id: int, session: Optional[Session] = None) -> Dict[str, Any]:
    """Delete a master ingredient and everything that depends on it.

    Removes the ingredient's price points and every recipe line referencing
    it. A recipe left with no lines is removed as well.

    Args:
        ingredient_id: Ingredient ID
        session: Optional database session

    Returns:
        Dict with ingredient_id, price_points_removed, recipe_lines_removed
        and recipes_removed (list of recipe IDs)

    Raises:
        MasterIngredientNotFound: If the ingredient doesn't exist
    """
    if session is not None:
        return _delete_ingredient_impl(ingredient_id, session)
    with session_scope() as session:
        return _delete_ingredient_impl(ingredient_id, session)


def _delete_ingredient_impl(ingredient_id: int, session: Session) -> Dict[str, Any]:
    ingredient = session.get(MasterIngredient, ingredient_id)
    if ingredient is None:
        raise MasterIngredientNotFound(ingredient_id)

    price_points_removed = len(ingredient.price_points)

    affected_recipes: Dict[int, Recipe] = {}
    lines = list(ingredient.recipe_ingredients)
    for line in lines:
        recipe = line.recipe
        recipe.recipe_ingredients.remove(line)
        affected_recipes[recipe.id] = recipe

    recipes_removed = []
    for recipe_id, recipe in sorted(affected_recipes.items()):
        if not recipe.recipe_ingredients:
            session.delete(recipe)
            recipes_removed.append(recipe_id)

    session.delete(ingredient)
    session.flush()

    result = {
        "ingredient_id": ingredient_id,
        "price_points_removed": price_points_removed,
        "recipe_lines_removed": len(lines),
        "recipes_removed": recipes_removed,
    }
    log_operation(logger, operation="delete_ingredient", outcome="success", **result)
    return result
