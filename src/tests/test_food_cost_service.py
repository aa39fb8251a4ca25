"""
Tests for food cost calculation.

Tests cover:
- The pure calculator over snapshots (totals, per-portion cost, warnings)
- Warning paths: missing ingredient, invalid quantity, no price points,
  unresolved price
- Contract errors (non-finite portions, unknown strategy)
- Per-line cost breakdown
- Session-backed wrappers and the strategy preference fallback
"""

import logging
import math
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import patch

import pytest

from src.models.enums import CostStrategy
from src.services import food_cost_service, preferences_service
from src.services.dto import (
    FoodCost,
    IngredientSnapshot,
    PricePointSnapshot,
    RecipeLineSnapshot,
    RecipeSnapshot,
)
from src.services.exceptions import InvalidCostStrategy, RecipeNotFound
from src.services.food_cost_service import (
    calculate_all_food_costs,
    calculate_food_cost,
    calculate_recipe_food_cost,
    describe_line_quantity,
    get_ingredient_cost_details,
    get_recipe_cost_details,
)


def _pp(pp_id, ingredient_id, cost, day, notes=""):
    return PricePointSnapshot(
        id=pp_id,
        master_ingredient_id=ingredient_id,
        cost_per_base_unit=cost,
        date_recorded=datetime(2023, 1, day, tzinfo=timezone.utc),
        supplier_notes=notes,
    )


def _recipe(*lines, portions=6):
    return RecipeSnapshot(
        id="r1",
        name="Mousse",
        portions=portions,
        lines=tuple(
            RecipeLineSnapshot(id=line_id, master_ingredient_id=mid, quantity=quantity)
            for line_id, mid, quantity in lines
        ),
    )


CHOCOLATE = IngredientSnapshot(id="mi1", name="Dark chocolate 70%", base_unit="g")
EGGS = IngredientSnapshot(id="mi2", name="Fresh medium eggs", base_unit="pz")
CREAM = IngredientSnapshot(id="mi4", name="Fresh cream 35% fat", base_unit="ml")
CATALOG = (CHOCOLATE, EGGS, CREAM)

PRICE_POINTS = (
    _pp("p1", "mi1", 0.022, 15, "Supplier A"),
    _pp("p2", "mi1", 0.025, 20, "Supermarket"),
    _pp("p3", "mi1", 0.019, 25, "Online offer"),
    _pp("p4", "mi2", 0.30, 1, "Local farm"),
    _pp("p5", "mi2", 0.28, 5, "Supermarket"),
)


# ============================================================================
# Pure calculator
# ============================================================================


class TestCalculateFoodCost:
    """Test the pure food cost calculation."""

    def test_single_line_scenario(self):
        """200 g at 0.019 per gram over 6 portions."""
        recipe = _recipe(("l1", "mi1", 200))
        points = (_pp("p3", "mi1", 0.019, 25),)

        result = calculate_food_cost(recipe, CATALOG, points, CostStrategy.CHEAPEST)

        assert result.total_cost == pytest.approx(3.80)
        assert result.cost_per_portion == pytest.approx(0.6333, abs=1e-4)
        assert result.warnings is None
        assert not result.has_warnings

    def test_strategies_change_total(self):
        recipe = _recipe(("l1", "mi1", 200), ("l2", "mi2", 4))

        cheapest = calculate_food_cost(recipe, CATALOG, PRICE_POINTS, "cheapest")
        latest = calculate_food_cost(recipe, CATALOG, PRICE_POINTS, "latest")
        average = calculate_food_cost(recipe, CATALOG, PRICE_POINTS, "average")

        assert cheapest.total_cost == pytest.approx(200 * 0.019 + 4 * 0.28)
        assert latest.total_cost == pytest.approx(200 * 0.019 + 4 * 0.28)
        assert average.total_cost == pytest.approx(200 * 0.022 + 4 * 0.29)

    def test_latest_ignores_cost(self):
        points = (_pp("old", "mi1", 0.010, 1), _pp("new", "mi1", 0.050, 2))
        recipe = _recipe(("l1", "mi1", 100), portions=1)
        result = calculate_food_cost(recipe, CATALOG, points, CostStrategy.LATEST)
        assert result.total_cost == pytest.approx(5.0)

    def test_missing_price_data_warns_once(self):
        """A line with no price points is excluded with one warning."""
        recipe = _recipe(("l1", "mi1", 200), ("l2", "mi4", 250))

        result = calculate_food_cost(recipe, CATALOG, PRICE_POINTS, CostStrategy.CHEAPEST)

        assert result.total_cost == pytest.approx(3.80)
        assert result.warnings == (
            "No price points recorded for Fresh cream 35% fat. Ingredient excluded from cost.",
        )

    def test_missing_ingredient_warns(self):
        recipe = _recipe(("l9", "gone", 50), ("l1", "mi1", 200))

        result = calculate_food_cost(recipe, CATALOG, PRICE_POINTS, CostStrategy.CHEAPEST)

        assert result.total_cost == pytest.approx(3.80)
        assert result.warnings == (
            "Ingredient definition not found for ID gone (recipe line l9). "
            "Ingredient excluded from cost.",
        )

    @pytest.mark.parametrize("quantity", [0, -5, math.nan, math.inf, None, "200"])
    def test_invalid_quantity_warns(self, quantity):
        recipe = _recipe(("l1", "mi1", quantity))

        result = calculate_food_cost(recipe, CATALOG, PRICE_POINTS, CostStrategy.CHEAPEST)

        assert result.total_cost == 0.0
        assert result.cost_per_portion == 0.0
        assert len(result.warnings) == 1
        assert result.warnings[0].startswith("Invalid or missing quantity for Dark chocolate 70%")
        assert f"(quantity: {quantity})" in result.warnings[0]

    def test_unresolved_price_warns(self):
        """A non-finite stored unit cost yields the strategy warning."""
        points = (_pp("bad", "mi1", math.nan, 1),)
        recipe = _recipe(("l1", "mi1", 100))

        result = calculate_food_cost(recipe, CATALOG, points, CostStrategy.AVERAGE)

        assert result.total_cost == 0.0
        assert result.warnings == (
            "Unable to determine a price for Dark chocolate 70% with the 'average' strategy.",
        )

    def test_warnings_follow_line_order(self):
        recipe = _recipe(("l1", "mi4", 100), ("l2", "missing", 1), ("l3", "mi2", 0))

        result = calculate_food_cost(recipe, CATALOG, PRICE_POINTS, CostStrategy.CHEAPEST)

        assert len(result.warnings) == 3
        assert result.warnings[0].startswith("No price points recorded for Fresh cream")
        assert result.warnings[1].startswith("Ingredient definition not found for ID missing")
        assert result.warnings[2].startswith("Invalid or missing quantity for Fresh medium eggs")

    def test_missing_ingredient_checked_before_quantity(self):
        """An unknown ingredient with a bad quantity gets only the missing warning."""
        recipe = _recipe(("l1", "missing", -1))
        result = calculate_food_cost(recipe, CATALOG, PRICE_POINTS, CostStrategy.CHEAPEST)
        assert len(result.warnings) == 1
        assert "definition not found" in result.warnings[0]

    def test_empty_recipe(self):
        result = calculate_food_cost(_recipe(), CATALOG, PRICE_POINTS, CostStrategy.CHEAPEST)
        assert result == FoodCost(total_cost=0.0, cost_per_portion=0.0, warnings=None)

    @pytest.mark.parametrize("portions", [0, -2])
    def test_non_positive_portions_give_zero_per_portion(self, portions):
        recipe = _recipe(("l1", "mi1", 200), portions=portions)
        result = calculate_food_cost(recipe, CATALOG, PRICE_POINTS, CostStrategy.CHEAPEST)
        assert result.total_cost == pytest.approx(3.80)
        assert result.cost_per_portion == 0.0

    @pytest.mark.parametrize("portions", [math.nan, math.inf, None])
    def test_non_finite_portions_raise(self, portions):
        recipe = _recipe(("l1", "mi1", 200), portions=portions)
        with pytest.raises(ValueError):
            calculate_food_cost(recipe, CATALOG, PRICE_POINTS, CostStrategy.CHEAPEST)

    def test_decimal_quantity_and_portions(self):
        """Decimal inputs are costed like floats."""
        recipe = _recipe(("l1", "mi1", Decimal("200")), portions=Decimal("6"))
        points = (_pp("p3", "mi1", 0.019, 25),)

        result = calculate_food_cost(recipe, CATALOG, points, CostStrategy.CHEAPEST)

        assert result.total_cost == pytest.approx(3.80)
        assert result.cost_per_portion == pytest.approx(0.6333, abs=1e-4)
        assert isinstance(result.total_cost, float)
        assert result.warnings is None

    @pytest.mark.parametrize("strategy", list(CostStrategy))
    def test_decimal_unit_costs(self, strategy):
        points = (
            _pp("p1", "mi1", Decimal("0.022"), 15),
            _pp("p3", "mi1", Decimal("0.019"), 25),
        )
        recipe = _recipe(("l1", "mi1", 200))

        result = calculate_food_cost(recipe, CATALOG, points, strategy)

        expected = {"cheapest": 3.80, "latest": 3.80, "average": 4.10}[strategy.value]
        assert result.total_cost == pytest.approx(expected)
        assert result.warnings is None

    def test_decimal_line_cost_in_details(self):
        recipe = _recipe(("l1", "mi1", Decimal("200")))
        points = (_pp("p3", "mi1", Decimal("0.019"), 25),)

        [detail] = get_ingredient_cost_details(recipe, CATALOG, points, "cheapest")

        assert detail.line_cost == pytest.approx(3.80)

    def test_unknown_strategy_raises(self):
        with pytest.raises(InvalidCostStrategy):
            calculate_food_cost(_recipe(("l1", "mi1", 1)), CATALOG, PRICE_POINTS, "median")

    def test_idempotent(self):
        """Identical inputs give identical output."""
        recipe = _recipe(("l1", "mi1", 200), ("l2", "mi2", 4), ("l3", "mi4", 250))
        first = calculate_food_cost(recipe, CATALOG, PRICE_POINTS, CostStrategy.AVERAGE)
        second = calculate_food_cost(recipe, CATALOG, PRICE_POINTS, CostStrategy.AVERAGE)
        assert first == second

    def test_accepts_generators(self):
        """Catalog inputs may be any iterable."""
        recipe = _recipe(("l1", "mi1", 200))
        result = calculate_food_cost(
            recipe,
            (i for i in CATALOG),
            (p for p in PRICE_POINTS),
            CostStrategy.CHEAPEST,
        )
        assert result.total_cost == pytest.approx(3.80)

    def test_logs_summary_at_debug(self, caplog):
        recipe = _recipe(("l1", "mi4", 100))
        with caplog.at_level(logging.DEBUG, logger="pastry_cost.services"):
            calculate_food_cost(recipe, CATALOG, PRICE_POINTS, CostStrategy.CHEAPEST)

        assert "calculate_food_cost: line_skipped_no_price_points" in caplog.text
        assert "calculate_food_cost: complete_with_warnings" in caplog.text
        assert all(record.levelno < logging.WARNING for record in caplog.records)


class TestFoodCostResult:
    """Test the FoodCost value."""

    def test_to_dict_without_warnings(self):
        assert FoodCost(3.8, 0.5).to_dict() == {"total_cost": 3.8, "cost_per_portion": 0.5}

    def test_to_dict_with_warnings(self):
        result = FoodCost(1.0, 1.0, ("careful",))
        assert result.to_dict()["warnings"] == ["careful"]
        assert result.has_warnings


# ============================================================================
# Per-line breakdown
# ============================================================================


class TestIngredientCostDetails:
    """Test the per-line cost breakdown."""

    def test_costed_line(self):
        recipe = _recipe(("l1", "mi1", 200))
        (detail,) = get_ingredient_cost_details(
            recipe, CATALOG, PRICE_POINTS, CostStrategy.CHEAPEST
        )
        assert detail.ingredient_name == "Dark chocolate 70%"
        assert detail.line_cost == pytest.approx(3.80)
        assert detail.cost_per_base_unit == 0.019
        assert detail.cost_text == "3.80 € (@ 0.0190 €/g)"
        assert detail.source_label == 'cheapest recorded price ("Online offer")'

    def test_uncosted_lines(self):
        recipe = _recipe(("l1", "mi4", 100), ("l2", "gone", 1), ("l3", "mi1", 0))
        cream, missing, zero = get_ingredient_cost_details(
            recipe, CATALOG, PRICE_POINTS, CostStrategy.CHEAPEST
        )

        assert cream.line_cost is None
        assert cream.cost_text == "No price recorded for Fresh cream 35% fat"
        assert missing.cost_text == "Ingredient definition not found"
        assert zero.line_cost is None
        assert zero.cost_text == "Invalid quantity (@ 0.0190 €/g)"

    def test_line_costs_sum_to_total(self):
        recipe = _recipe(("l1", "mi1", 200), ("l2", "mi2", 4), ("l3", "mi4", 5))
        details = get_ingredient_cost_details(recipe, CATALOG, PRICE_POINTS, "average")
        total = calculate_food_cost(recipe, CATALOG, PRICE_POINTS, "average").total_cost
        assert sum(d.line_cost for d in details if d.line_cost is not None) == pytest.approx(total)


class TestDescribeLineQuantity:
    """Test the quantity text of a recipe line."""

    def test_base_unit_entry(self):
        line = RecipeLineSnapshot("l1", "mi1", 200.0, 200.0, "g", "Grams")
        assert describe_line_quantity(line, CHOCOLATE) == "200 Grams (= 200 g)"

    def test_converted_entry(self):
        line = RecipeLineSnapshot("l1", "mi1", 200.0, 0.2, "kg", "kg")
        assert describe_line_quantity(line, CHOCOLATE) == "0.2 kg (= 200 g)"

    def test_plain_entry(self):
        line = RecipeLineSnapshot("l1", "mi1", 200.0, 200.0, "g", "")
        assert describe_line_quantity(line, CHOCOLATE) == "200 g"

    def test_canonical_only(self):
        line = RecipeLineSnapshot("l1", "mi1", 150.0)
        assert describe_line_quantity(line, CHOCOLATE) == "150 g"


# ============================================================================
# Session-backed wrappers
# ============================================================================


class TestCalculateRecipeFoodCost:
    """Test cost calculation over stored data."""

    def test_stored_recipe(self, test_db, mousse):
        """0.2 kg chocolate at 0.019/g plus 4 eggs at 0.28 each."""
        result = calculate_recipe_food_cost(mousse["id"], CostStrategy.CHEAPEST)
        assert result.total_cost == pytest.approx(3.80 + 1.12)
        assert result.cost_per_portion == pytest.approx((3.80 + 1.12) / 6)
        assert result.warnings is None

    def test_average_strategy(self, test_db, mousse):
        result = calculate_recipe_food_cost(mousse["id"], "average")
        assert result.total_cost == pytest.approx(200 * 0.022 + 4 * 0.29)

    def test_missing_recipe_raises(self, test_db):
        with pytest.raises(RecipeNotFound):
            calculate_recipe_food_cost(999, CostStrategy.CHEAPEST)

    def test_none_strategy_reads_preference(self, test_db, mousse, temp_config_dir):
        preferences_service.set_cost_strategy("average")
        result = calculate_recipe_food_cost(mousse["id"])
        assert result.total_cost == pytest.approx(200 * 0.022 + 4 * 0.29)

    def test_explicit_strategy_skips_preference(self, test_db, mousse):
        with patch.object(preferences_service, "get_cost_strategy") as mock_get:
            calculate_recipe_food_cost(mousse["id"], "latest")
        mock_get.assert_not_called()

    def test_recipe_cost_details(self, test_db, mousse):
        details = get_recipe_cost_details(mousse["id"], CostStrategy.CHEAPEST)
        assert [d.ingredient_name for d in details] == ["Dark chocolate 70%", "Fresh medium eggs"]
        assert details[0].display_text == "0.2 Kilograms (= 200 g)"


class TestCalculateAllFoodCosts:
    """Test costing every stored recipe at once."""

    def test_all_recipes(self, test_db, mousse, cream):
        from src.services import recipe_service

        panna_cotta = recipe_service.create_recipe(
            name="Panna cotta",
            description="Heat and set.",
            portions=4,
            ingredients=[
                {"master_ingredient_id": cream["id"], "display_quantity": 0.5, "display_unit": "l"}
            ],
        )

        results = calculate_all_food_costs(CostStrategy.CHEAPEST)

        assert set(results) == {mousse["id"], panna_cotta["id"]}
        assert results[mousse["id"]].warnings is None
        assert results[panna_cotta["id"]].total_cost == 0.0
        assert results[panna_cotta["id"]].warnings == (
            "No price points recorded for Fresh cream 35% fat. Ingredient excluded from cost.",
        )

    def test_empty_database(self, test_db):
        assert calculate_all_food_costs(CostStrategy.CHEAPEST) == {}
