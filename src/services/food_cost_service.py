"""Food Cost Service - recipe cost calculation.

This module turns a recipe plus the ingredient catalog and price history
into a FoodCost: total cost, cost per portion and a list of warnings.

Key Features:
- Pure calculation over frozen snapshots (no I/O, no mutation, no caching)
- Cost strategy passed explicitly on every call
- Data problems on one line (missing ingredient, bad quantity, no prices)
  exclude that line and add a warning instead of raising
- Session-backed wrappers that load a consistent snapshot and read the
  user's strategy preference

Example Usage:
    >>> from src.services.food_cost_service import calculate_recipe_food_cost
    >>> cost = calculate_recipe_food_cost(recipe_id=1, strategy="cheapest")
    >>> round(cost.total_cost, 2), cost.warnings
    (3.8, None)
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from sqlalchemy.orm import Session

from src.models import IngredientPricePoint, MasterIngredient, Recipe
from src.models.enums import CostStrategy
from src.services.cost_strategy import parse_cost_strategy, resolve_cost
from src.services.database import session_scope
from src.services.dto import (
    FoodCost,
    IngredientCostDetail,
    IngredientSnapshot,
    PricePointSnapshot,
    RecipeLineSnapshot,
    RecipeSnapshot,
)
from src.services.exceptions import RecipeNotFound
from src.services.logging_utils import get_service_logger, log_operation
from src.services.unit_converter import format_cost, format_quantity, format_unit_cost
from src.utils.validators import is_finite_number

logger = get_service_logger(__name__)

StrategyArg = Union[CostStrategy, str]


# ============================================================================
# Pure calculation
# ============================================================================


def _index_catalog(
    ingredients: Iterable[IngredientSnapshot],
    price_points: Iterable[PricePointSnapshot],
) -> Tuple[Dict, Dict]:
    """Index ingredients by id and group price points by ingredient, keeping order."""
    ingredients_by_id = {ingredient.id: ingredient for ingredient in ingredients}
    points_by_ingredient: Dict = {}
    for price_point in price_points:
        points_by_ingredient.setdefault(price_point.master_ingredient_id, []).append(price_point)
    return ingredients_by_id, points_by_ingredient


def is_valid_quantity(quantity) -> bool:
    """A canonical quantity takes part in costing only if finite and > 0."""
    return is_finite_number(quantity) and quantity > 0


def calculate_food_cost(
    recipe: RecipeSnapshot,
    ingredients: Iterable[IngredientSnapshot],
    price_points: Iterable[PricePointSnapshot],
    strategy: StrategyArg,
) -> FoodCost:
    """
    Calculate the food cost of a recipe.

    Lines are processed in order. A line is excluded from the total, with
    a warning, when its ingredient is unknown, its quantity is not a
    finite number above zero, the ingredient has no price points, or the
    strategy yields no usable unit cost.

    Quantities, portions and unit costs may be int, float or Decimal; the
    arithmetic is done in float.

    Args:
        recipe: Recipe snapshot with canonical line quantities
        ingredients: Master ingredient snapshots
        price_points: Price point snapshots (any ingredients)
        strategy: Cost strategy to apply

    Returns:
        FoodCost; ``warnings`` is None when every line was costed

    Raises:
        ValueError: If recipe.portions is not a finite number
        InvalidCostStrategy: If strategy is not recognized
    """
    strategy = parse_cost_strategy(strategy)
    if not is_finite_number(recipe.portions):
        raise ValueError(f"Recipe portions must be a finite number, got {recipe.portions!r}")
    portions = float(recipe.portions)

    ingredients_by_id, points_by_ingredient = _index_catalog(ingredients, price_points)

    total_cost = 0.0
    warnings: List[str] = []

    for line in recipe.lines:
        ingredient = ingredients_by_id.get(line.master_ingredient_id)
        if ingredient is None:
            warnings.append(
                f"Ingredient definition not found for ID {line.master_ingredient_id} "
                f"(recipe line {line.id}). Ingredient excluded from cost."
            )
            _log_skipped(recipe, line, "missing_ingredient")
            continue

        if not is_valid_quantity(line.quantity):
            warnings.append(
                f"Invalid or missing quantity for {ingredient.name} "
                f"(quantity: {line.quantity}). Ingredient excluded from cost."
            )
            _log_skipped(recipe, line, "invalid_quantity")
            continue

        available = points_by_ingredient.get(ingredient.id)
        if not available:
            warnings.append(
                f"No price points recorded for {ingredient.name}. Ingredient excluded from cost."
            )
            _log_skipped(recipe, line, "no_price_points")
            continue

        resolved = resolve_cost(available, strategy)
        if resolved is None:
            warnings.append(
                f"Unable to determine a price for {ingredient.name} "
                f"with the '{strategy.value}' strategy."
            )
            _log_skipped(recipe, line, "unresolved_price")
            continue

        total_cost += float(line.quantity) * resolved.cost_per_base_unit

    cost_per_portion = total_cost / portions if portions > 0 else 0.0

    log_operation(
        logger,
        operation="calculate_food_cost",
        outcome="complete_with_warnings" if warnings else "complete",
        level=logging.DEBUG,
        recipe_id=recipe.id,
        strategy=strategy.value,
        warning_count=len(warnings),
    )

    return FoodCost(
        total_cost=total_cost,
        cost_per_portion=cost_per_portion,
        warnings=tuple(warnings) if warnings else None,
    )


def _log_skipped(recipe: RecipeSnapshot, line: RecipeLineSnapshot, reason: str) -> None:
    log_operation(
        logger,
        operation="calculate_food_cost",
        outcome=f"line_skipped_{reason}",
        level=logging.DEBUG,
        recipe_id=recipe.id,
        line_id=line.id,
        master_ingredient_id=line.master_ingredient_id,
    )


def describe_line_quantity(line: RecipeLineSnapshot, ingredient: IngredientSnapshot) -> str:
    """
    Build the human-readable quantity text of a recipe line.

    The display quantity and unit (or narrative label) come first; the
    canonical base-unit quantity is appended when it says something the
    display text does not.

    Example:
        "1 a pinch (= 0.5 g)", "0.2 kg (= 200 g)", "200 g"
    """
    if is_finite_number(line.quantity):
        canonical = format_quantity(line.quantity, ingredient.base_unit)
    else:
        canonical = f"{line.quantity} {ingredient.base_unit}"

    if line.display_quantity is None or not line.display_unit:
        return canonical

    label = line.narrative_unit_label or line.display_unit
    text = f"{format_quantity(line.display_quantity)} {label}"

    narrative_differs = bool(line.narrative_unit_label) and (
        line.narrative_unit_label.lower() != line.display_unit.lower()
    )
    converted = (
        line.display_unit != ingredient.base_unit or line.display_quantity != line.quantity
    )
    if narrative_differs or converted:
        text += f" (= {canonical})"
    return text


def get_ingredient_cost_details(
    recipe: RecipeSnapshot,
    ingredients: Iterable[IngredientSnapshot],
    price_points: Iterable[PricePointSnapshot],
    strategy: StrategyArg,
) -> List[IngredientCostDetail]:
    """
    Break a recipe's cost down per ingredient line.

    Uses the same strategy resolution as calculate_food_cost(); lines the
    calculator would skip get a descriptive cost text and no line_cost.

    Returns:
        One IngredientCostDetail per line, in line order
    """
    strategy = parse_cost_strategy(strategy)
    ingredients_by_id, points_by_ingredient = _index_catalog(ingredients, price_points)

    details = []
    for line in recipe.lines:
        ingredient = ingredients_by_id.get(line.master_ingredient_id)
        if ingredient is None:
            details.append(
                IngredientCostDetail(
                    line_id=line.id,
                    master_ingredient_id=line.master_ingredient_id,
                    display_text="",
                    cost_text="Ingredient definition not found",
                    quantity=line.quantity,
                )
            )
            continue

        available = points_by_ingredient.get(ingredient.id)
        resolved = resolve_cost(available, strategy) if available else None

        line_cost = None
        if resolved is None:
            cost_text = f"No price recorded for {ingredient.name}"
        else:
            unit_cost = format_unit_cost(resolved.cost_per_base_unit, ingredient.base_unit)
            if is_valid_quantity(line.quantity):
                line_cost = float(line.quantity) * resolved.cost_per_base_unit
                cost_text = f"{format_cost(line_cost)} (@ {unit_cost})"
            else:
                cost_text = f"Invalid quantity (@ {unit_cost})"

        details.append(
            IngredientCostDetail(
                line_id=line.id,
                master_ingredient_id=ingredient.id,
                display_text=describe_line_quantity(line, ingredient),
                cost_text=cost_text,
                ingredient_name=ingredient.name,
                base_unit=ingredient.base_unit,
                quantity=line.quantity,
                line_cost=line_cost,
                cost_per_base_unit=resolved.cost_per_base_unit if resolved else None,
                source_label=resolved.source_label if resolved else "",
            )
        )

    return details


# ============================================================================
# Session-backed wrappers
# ============================================================================


def _resolve_strategy_setting(strategy: Optional[StrategyArg]) -> CostStrategy:
    """Use the explicit strategy, else the stored user preference."""
    if strategy is not None:
        return parse_cost_strategy(strategy)
    # Local import keeps the pure functions free of preference file access
    from src.services.preferences_service import get_cost_strategy

    return get_cost_strategy()


def _load_catalog(
    session: Session, ingredient_ids: Optional[Sequence[int]] = None
) -> Tuple[Tuple[IngredientSnapshot, ...], Tuple[PricePointSnapshot, ...]]:
    """Snapshot ingredients and price points, optionally limited to some ingredients."""
    ingredient_query = session.query(MasterIngredient)
    price_query = session.query(IngredientPricePoint)
    if ingredient_ids is not None:
        ingredient_query = ingredient_query.filter(MasterIngredient.id.in_(ingredient_ids))
        price_query = price_query.filter(
            IngredientPricePoint.master_ingredient_id.in_(ingredient_ids)
        )

    ingredients = tuple(
        IngredientSnapshot.from_model(ingredient)
        for ingredient in ingredient_query.order_by(MasterIngredient.id).all()
    )
    price_points = tuple(
        PricePointSnapshot.from_model(price_point)
        for price_point in price_query.order_by(IngredientPricePoint.id).all()
    )
    return ingredients, price_points


def load_recipe_snapshot(recipe_id: int, session: Session) -> RecipeSnapshot:
    """
    Load one recipe as a snapshot.

    Raises:
        RecipeNotFound: If the recipe doesn't exist
    """
    recipe = session.query(Recipe).filter(Recipe.id == recipe_id).first()
    if recipe is None:
        raise RecipeNotFound(recipe_id)
    return RecipeSnapshot.from_model(recipe)


def calculate_recipe_food_cost(
    recipe_id: int,
    strategy: Optional[StrategyArg] = None,
    session: Optional[Session] = None,
) -> FoodCost:
    """Calculate the food cost of a stored recipe.

    Args:
        recipe_id: Recipe ID
        strategy: Cost strategy; None reads the user's preference
        session: Optional database session

    Returns:
        FoodCost

    Raises:
        RecipeNotFound: If the recipe doesn't exist
    """
    strategy = _resolve_strategy_setting(strategy)
    if session is not None:
        return _calculate_recipe_food_cost_impl(recipe_id, strategy, session)
    with session_scope() as session:
        return _calculate_recipe_food_cost_impl(recipe_id, strategy, session)


def _calculate_recipe_food_cost_impl(
    recipe_id: int, strategy: CostStrategy, session: Session
) -> FoodCost:
    recipe = load_recipe_snapshot(recipe_id, session)
    ingredient_ids = sorted({line.master_ingredient_id for line in recipe.lines})
    ingredients, price_points = _load_catalog(session, ingredient_ids)
    return calculate_food_cost(recipe, ingredients, price_points, strategy)


def get_recipe_cost_details(
    recipe_id: int,
    strategy: Optional[StrategyArg] = None,
    session: Optional[Session] = None,
) -> List[IngredientCostDetail]:
    """Per-line cost breakdown of a stored recipe.

    Raises:
        RecipeNotFound: If the recipe doesn't exist
    """
    strategy = _resolve_strategy_setting(strategy)
    if session is not None:
        return _get_recipe_cost_details_impl(recipe_id, strategy, session)
    with session_scope() as session:
        return _get_recipe_cost_details_impl(recipe_id, strategy, session)


def _get_recipe_cost_details_impl(
    recipe_id: int, strategy: CostStrategy, session: Session
) -> List[IngredientCostDetail]:
    recipe = load_recipe_snapshot(recipe_id, session)
    ingredient_ids = sorted({line.master_ingredient_id for line in recipe.lines})
    ingredients, price_points = _load_catalog(session, ingredient_ids)
    return get_ingredient_cost_details(recipe, ingredients, price_points, strategy)


def calculate_all_food_costs(
    strategy: Optional[StrategyArg] = None,
    session: Optional[Session] = None,
) -> Dict[int, FoodCost]:
    """Calculate the food cost of every stored recipe from one snapshot.

    Args:
        strategy: Cost strategy; None reads the user's preference
        session: Optional database session

    Returns:
        Mapping of recipe ID to FoodCost
    """
    strategy = _resolve_strategy_setting(strategy)
    if session is not None:
        return _calculate_all_food_costs_impl(strategy, session)
    with session_scope() as session:
        return _calculate_all_food_costs_impl(strategy, session)


def _calculate_all_food_costs_impl(strategy: CostStrategy, session: Session) -> Dict[int, FoodCost]:
    ingredients, price_points = _load_catalog(session)
    recipes = session.query(Recipe).order_by(Recipe.id).all()
    return {
        recipe.id: calculate_food_cost(
            RecipeSnapshot.from_model(recipe), ingredients, price_points, strategy
        )
        for recipe in recipes
    }
