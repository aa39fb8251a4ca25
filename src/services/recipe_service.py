"""Recipe Service - recipe authoring and management.

This module provides CRUD operations for recipes and their ordered
ingredient lines.

Each line keeps what the author typed (display quantity, display unit,
narrative label) plus a canonical ``quantity`` in the master ingredient's
base unit. The canonical quantity is never accepted from the caller: it is
always re-derived with ``unit_converter.convert`` when a line is built.

Validation follows the authoring form rules:
- name and description are required, portions must be a whole number >= 1
- at least one line must reference an ingredient
- each non-empty line needs an ingredient, a non-negative display quantity
  and a display unit the ingredient's base unit can be reached from
- fully empty lines are dropped silently

All functions accept an optional session and return plain dictionaries.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy.orm import Session

from src.models import MasterIngredient, Recipe, RecipeIngredient
from src.services import unit_converter
from src.services.database import session_scope
from src.services.exceptions import RecipeNotFound, ValidationError
from src.services.logging_utils import get_service_logger, log_operation
from src.utils.constants import (
    MAX_NAME_LENGTH,
    MAX_NARRATIVE_LABEL_LENGTH,
    MAX_URL_LENGTH,
    MIN_PORTIONS,
)
from src.utils.validators import (
    parse_number,
    validate_required_string,
    validate_string_length,
)

logger = get_service_logger(__name__)

LINE_FIELDS = ("master_ingredient_id", "display_quantity", "display_unit", "narrative_unit_label")


# ============================================================================
# Line helpers
# ============================================================================


def is_empty_line(line: Mapping[str, Any]) -> bool:
    """True for a line with nothing filled in (no ingredient, no quantity, no unit)."""
    quantity = line.get("display_quantity")
    return (
        not line.get("master_ingredient_id")
        and (quantity is None or quantity == "" or parse_number(quantity) == 0)
        and not line.get("display_unit")
        and not line.get("narrative_unit_label")
    )


def default_narrative_label(display_unit: Optional[str]) -> str:
    """Narrative label used when the author leaves it blank: the unit's name."""
    unit = unit_converter.lookup_unit(display_unit)
    if unit is not None:
        return unit.name
    return display_unit or ""


def build_recipe_line(
    line_data: Mapping[str, Any],
    ingredient: MasterIngredient,
    position: int = 0,
) -> RecipeIngredient:
    """
    Build an unsaved RecipeIngredient from authoring input.

    Args:
        line_data: Dict with display_quantity, display_unit and optional
                   narrative_unit_label
        ingredient: The referenced master ingredient
        position: Order of the line within the recipe

    Returns:
        RecipeIngredient with quantity derived in the ingredient's base unit
    """
    display_quantity = parse_number(line_data.get("display_quantity"))
    display_unit = line_data.get("display_unit")
    narrative = (line_data.get("narrative_unit_label") or "").strip()

    return RecipeIngredient(
        master_ingredient=ingredient,
        position=position,
        display_quantity=display_quantity,
        display_unit=display_unit,
        narrative_unit_label=narrative or default_narrative_label(display_unit),
        quantity=unit_converter.convert(display_quantity, display_unit, ingredient.base_unit),
    )


# ============================================================================
# Validation
# ============================================================================


def _parse_portions(value: Any) -> Optional[int]:
    number = parse_number(value)
    if number is None or number != int(number):
        return None
    return int(number)


def _validate_line(
    index: int, line: Mapping[str, Any], ingredients: Mapping[Any, MasterIngredient]
) -> List[str]:
    errors = []
    ingredient_id = line.get("master_ingredient_id")
    if not ingredient_id:
        return [f"Ingredient {index}: Select an ingredient"]

    ingredient = ingredients.get(ingredient_id)
    if ingredient is None:
        return [f"Ingredient {index}: Ingredient with ID {ingredient_id} not found"]
    prefix = f"Ingredient {index} ({ingredient.name})"

    display_quantity = parse_number(line.get("display_quantity"))
    if display_quantity is None or display_quantity < 0:
        errors.append(f"{prefix}: Quantity must be specified and not negative")

    display_unit = line.get("display_unit")
    if not display_unit:
        errors.append(f"{prefix}: Select a unit")
    elif display_quantity is not None and display_quantity > 0:
        derived = unit_converter.convert(display_quantity, display_unit, ingredient.base_unit)
        if derived <= 0:
            errors.append(
                f"{prefix}: Unable to derive base quantity from "
                f"{display_quantity:g} {display_unit} (base unit: {ingredient.base_unit})"
            )

    is_valid, error = validate_string_length(
        line.get("narrative_unit_label"), MAX_NARRATIVE_LABEL_LENGTH, f"{prefix} label"
    )
    if not is_valid:
        errors.append(error)
    return errors


def validate_recipe_data(
    data: Mapping[str, Any], ingredients: Mapping[Any, MasterIngredient]
) -> Tuple[bool, list]:
    """
    Validate recipe fields and ingredient lines.

    Args:
        data: Dict with name, description, portions, image_url and
              ingredients (list of line dicts)
        ingredients: Master ingredients by ID, for lines to resolve against

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    for field, label in (("name", "Name"), ("description", "Description")):
        is_valid, error = validate_required_string(data.get(field), label)
        if not is_valid:
            errors.append(error)

    is_valid, error = validate_string_length(data.get("name"), MAX_NAME_LENGTH, "Name")
    if not is_valid:
        errors.append(error)
    is_valid, error = validate_string_length(data.get("image_url"), MAX_URL_LENGTH, "Image URL")
    if not is_valid:
        errors.append(error)

    portions = _parse_portions(data.get("portions"))
    if portions is None or portions < MIN_PORTIONS:
        errors.append(f"Portions: Must be a whole number of at least {MIN_PORTIONS}")

    lines = list(data.get("ingredients") or [])
    if not lines or all(not line.get("master_ingredient_id") for line in lines):
        errors.append("Ingredients: A recipe needs at least one ingredient")
    else:
        for index, line in enumerate(lines, start=1):
            if is_empty_line(line):
                continue
            errors.extend(_validate_line(index, line, ingredients))

    return len(errors) == 0, errors


# ============================================================================
# CRUD
# ============================================================================


def _load_referenced_ingredients(
    lines: List[Mapping[str, Any]], session: Session
) -> Dict[Any, MasterIngredient]:
    ids = {line.get("master_ingredient_id") for line in lines}
    ids.discard(None)
    if not ids:
        return {}
    found = session.query(MasterIngredient).filter(MasterIngredient.id.in_(ids)).all()
    return {ingredient.id: ingredient for ingredient in found}


def _build_lines(
    lines: List[Mapping[str, Any]], ingredients: Mapping[Any, MasterIngredient]
) -> List[RecipeIngredient]:
    kept = [line for line in lines if not is_empty_line(line)]
    return [
        build_recipe_line(line, ingredients[line["master_ingredient_id"]], position)
        for position, line in enumerate(kept)
    ]


def _prepare(
    data: Dict[str, Any], session: Session, build_lines: bool = True
) -> Tuple[Dict[str, Any], List[RecipeIngredient]]:
    """Validate recipe data and return normalized fields plus built lines.

    With build_lines=False the lines are only validated and an empty list is
    returned; built lines attach themselves to their ingredients.
    """
    lines = [dict(line) for line in (data.get("ingredients") or [])]
    ingredients = _load_referenced_ingredients(lines, session)
    is_valid, errors = validate_recipe_data(data, ingredients)
    if not is_valid:
        raise ValidationError(errors)

    fields = {
        "name": data["name"].strip(),
        "description": data["description"].strip(),
        "portions": _parse_portions(data["portions"]),
        "image_url": (data.get("image_url") or "").strip() or None,
    }
    if not build_lines:
        return fields, []
    return fields, _build_lines(lines, ingredients)


def create_recipe(
    name: str,
    description: str,
    portions: int,
    ingredients: List[Dict[str, Any]],
    image_url: Optional[str] = None,
    session: Optional[Session] = None,
) -> Dict[str, Any]:
    """
    Create a new recipe with its ingredient lines.

    Args:
        name: Recipe name (required)
        description: Preparation text (required)
        portions: Number of portions (whole number >= 1)
        ingredients: Line dicts with master_ingredient_id, display_quantity,
                     display_unit and optional narrative_unit_label
        image_url: Optional image reference
        session: Optional database session

    Returns:
        Dict[str, Any]: Created recipe with its lines

    Raises:
        ValidationError: If recipe data or any line is invalid
    """
    data = {
        "name": name,
        "description": description,
        "portions": portions,
        "ingredients": ingredients,
        "image_url": image_url,
    }
    if session is not None:
        return _create_recipe_impl(data, session)
    with session_scope() as session:
        return _create_recipe_impl(data, session)


def _create_recipe_impl(data: Dict[str, Any], session: Session) -> Dict[str, Any]:
    fields, lines = _prepare(data, session)

    recipe = Recipe(**fields)
    recipe.recipe_ingredients = lines
    session.add(recipe)
    session.flush()

    log_operation(
        logger,
        operation="create_recipe",
        outcome="success",
        recipe_id=recipe.id,
        line_count=len(lines),
    )
    return recipe.to_dict()


def get_recipe(recipe_id: int, session: Optional[Session] = None) -> Optional[Dict[str, Any]]:
    """Get a recipe with its lines by ID, or None if not found."""
    if session is not None:
        return _get_recipe_impl(recipe_id, session)
    with session_scope() as session:
        return _get_recipe_impl(recipe_id, session)


def _get_recipe_impl(recipe_id: int, session: Session) -> Optional[Dict[str, Any]]:
    recipe = session.get(Recipe, recipe_id)
    return recipe.to_dict() if recipe else None


def get_all_recipes(session: Optional[Session] = None) -> List[Dict[str, Any]]:
    """Get all recipes sorted by name."""
    if session is not None:
        return _get_all_recipes_impl(session)
    with session_scope() as session:
        return _get_all_recipes_impl(session)


def _get_all_recipes_impl(session: Session) -> List[Dict[str, Any]]:
    return [recipe.to_dict() for recipe in session.query(Recipe).order_by(Recipe.name).all()]


def update_recipe(
    recipe_id: int,
    name: Optional[str] = None,
    description: Optional[str] = None,
    portions: Optional[int] = None,
    ingredients: Optional[List[Dict[str, Any]]] = None,
    image_url: Optional[str] = None,
    session: Optional[Session] = None,
) -> Dict[str, Any]:
    """
    Update a recipe.

    Arguments left as None keep their current value. When ``ingredients``
    is given it replaces every existing line.

    Raises:
        RecipeNotFound: If the recipe doesn't exist
        ValidationError: If the resulting recipe is invalid
    """
    changes = {
        "name": name,
        "description": description,
        "portions": portions,
        "ingredients": ingredients,
        "image_url": image_url,
    }
    if session is not None:
        return _update_recipe_impl(recipe_id, changes, session)
    with session_scope() as session:
        return _update_recipe_impl(recipe_id, changes, session)


def _current_lines(recipe: Recipe) -> List[Dict[str, Any]]:
    return [
        {field: getattr(line, field) for field in LINE_FIELDS}
        for line in recipe.recipe_ingredients
    ]


def _update_recipe_impl(
    recipe_id: int, changes: Dict[str, Any], session: Session
) -> Dict[str, Any]:
    recipe = session.get(Recipe, recipe_id)
    if recipe is None:
        raise RecipeNotFound(recipe_id)

    data = {
        "name": recipe.name,
        "description": recipe.description,
        "portions": recipe.portions,
        "image_url": recipe.image_url,
        "ingredients": _current_lines(recipe),
    }
    data.update({key: value for key, value in changes.items() if value is not None})
    replace_lines = changes["ingredients"] is not None
    fields, lines = _prepare(data, session, build_lines=replace_lines)

    recipe.update_from_dict(fields)
    if replace_lines:
        recipe.recipe_ingredients = lines
    session.flush()

    log_operation(
        logger,
        operation="update_recipe",
        outcome="success",
        recipe_id=recipe_id,
        lines_replaced=replace_lines,
    )
    return recipe.to_dict()


def delete_recipe(recipe_id: int, session: Optional[Session] = None) -> bool:
    """
    Delete a recipe and its lines.

    Returns:
        bool: True if deleted

    Raises:
        RecipeNotFound: If the recipe doesn't exist
    """
    if session is not None:
        return _delete_recipe_impl(recipe_id, session)
    with session_scope() as session:
        return _delete_recipe_impl(recipe_id, session)


def _delete_recipe_impl(recipe_id: int, session: Session) -> bool:
    recipe = session.get(Recipe, recipe_id)
    if recipe is None:
        raise RecipeNotFound(recipe_id)
    session.delete(recipe)
    session.flush()

    log_operation(logger, operation="delete_recipe", outcome="success", recipe_id=recipe_id)
    return True
