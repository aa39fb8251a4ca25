"""
Sample pastry catalog for first start.

Seeds ten master ingredients, their recorded purchases and one chocolate
mousse recipe, so a fresh database shows cost figures right away. Nothing
is written when the database already holds ingredients.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from sqlalchemy.orm import Session

from src.models import IngredientPricePoint, MasterIngredient, Recipe
from src.services.database import session_scope
from src.services.logging_utils import get_service_logger, log_operation
from src.services.recipe_service import build_recipe_line
from src.utils.datetime_utils import utc_now

logger = get_service_logger(__name__)


def _day(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


# (key, name, base_unit, category)
SAMPLE_INGREDIENTS = (
    ("chocolate", "Dark chocolate 70%", "g", "Chocolate"),
    ("eggs", "Fresh medium eggs", "pz", "Eggs"),
    ("sugar", "Granulated sugar", "g", "Sugars"),
    ("cream", "Fresh cream 35% fat", "ml", "Dairy"),
    ("mascarpone", "Mascarpone", "g", "Dairy"),
    ("ladyfingers", "Ladyfingers", "g", "Biscuits"),
    ("espresso", "Espresso coffee (unsweetened)", "ml", "Beverages"),
    ("cocoa", "Unsweetened cocoa powder", "g", "Powders"),
    ("flour", "Flour 00", "g", "Flours"),
    ("butter", "Butter", "g", "Dairy"),
)

# (ingredient key, supplier notes, quantity in base units, cost, recorded)
# A None date means "today"; an int means that many days ago.
SAMPLE_PRICE_POINTS = (
    ("chocolate", "Supplier A - 1kg block", 1000, 22.00, _day(2023, 1, 15)),
    ("chocolate", "Supermarket - 200g bar", 200, 5.00, _day(2023, 3, 10)),
    ("chocolate", "Online offer - 500g", 500, 9.50, _day(2023, 6, 20)),
    ("eggs", "Local farm - pack of 6", 6, 1.80, _day(2023, 1, 1)),
    ("eggs", "Supermarket - pack of 10", 10, 2.80, _day(2023, 5, 5)),
    ("sugar", "Wholesaler - 5kg sack", 5000, 6.50, _day(2022, 12, 1)),
    ("sugar", "Supermarket - 1kg pack", 1000, 1.50, _day(2023, 4, 12)),
    ("cream", "Dairy co-op - 1L bottle", 1000, 3.00, None),
    ("flour", "Mill - 25kg sack", 25000, 20.00, None),
    ("flour", "Supermarket - 1kg pack", 1000, 1.20, 10),
    ("butter", "Creamery - 500g block", 500, 4.50, None),
)

SAMPLE_RECIPE = {
    "name": "Simple Chocolate Mousse",
    "description": (
        "1. Melt the chocolate...\n2. Whip the cream...\n3. Fold in gently."
    ),
    "portions": 6,
    "image_url": "https://picsum.photos/400/300?random=101",
    # (ingredient key, display quantity); display unit is the base unit
    "lines": (("chocolate", 200), ("eggs", 4), ("sugar", 80), ("cream", 250)),
}


def _recorded_at(value, now: datetime) -> datetime:
    if value is None:
        return now
    if isinstance(value, int):
        return now - timedelta(days=value)
    return value


def load_sample_data(
    session: Optional[Session] = None, now: Optional[datetime] = None
) -> bool:
    """
    Seed the sample catalog into an empty database.

    Args:
        session: Optional database session
        now: Reference time for "recent" purchases (default: current UTC time)

    Returns:
        bool: True if data was loaded, False if ingredients already existed
    """
    if session is not None:
        return _load_sample_data_impl(session, now or utc_now())
    with session_scope() as session:
        return _load_sample_data_impl(session, now or utc_now())


def _load_sample_data_impl(session: Session, now: datetime) -> bool:
    if session.query(MasterIngredient).first() is not None:
        log_operation(logger, operation="load_sample_data", outcome="skipped_not_empty")
        return False

    ingredients: Dict[str, MasterIngredient] = {}
    for key, name, base_unit, category in SAMPLE_INGREDIENTS:
        ingredients[key] = MasterIngredient(name=name, base_unit=base_unit, category=category)
        session.add(ingredients[key])
    session.flush()

    for key, notes, quantity, cost, recorded in SAMPLE_PRICE_POINTS:
        price_point = IngredientPricePoint(
            master_ingredient_id=ingredients[key].id,
            supplier_notes=notes,
            date_recorded=_recorded_at(recorded, now),
        )
        price_point.set_purchase(cost, quantity)
        session.add(price_point)

    recipe = Recipe(
        name=SAMPLE_RECIPE["name"],
        description=SAMPLE_RECIPE["description"],
        portions=SAMPLE_RECIPE["portions"],
        image_url=SAMPLE_RECIPE["image_url"],
    )
    recipe.recipe_ingredients = [
        build_recipe_line(
            {"display_quantity": quantity, "display_unit": ingredients[key].base_unit},
            ingredients[key],
            position,
        )
        for position, (key, quantity) in enumerate(SAMPLE_RECIPE["lines"])
    ]
    session.add(recipe)
    session.flush()

    log_operation(
        logger,
        operation="load_sample_data",
        outcome="success",
        ingredient_count=len(SAMPLE_INGREDIENTS),
        price_point_count=len(SAMPLE_PRICE_POINTS),
        recipe_id=recipe.id,
    )
    return True
