"""
Tests for ingredient_service.

Tests cover:
- Create/get/list with validation and name uniqueness
- Update, including base unit changes re-deriving recipe quantities
- Delete cascade to price points, recipe lines and emptied recipes
"""

import logging

import pytest

from src.models import IngredientPricePoint
from src.services import ingredient_service, price_point_service, recipe_service
from src.services.database import session_scope
from src.services.exceptions import MasterIngredientNotFound, ValidationError


class TestCreateIngredient:
    """Test master ingredient creation."""

    def test_create_basic(self, test_db):
        result = ingredient_service.create_ingredient(
            name="  Flour 00 ", base_unit="g", category="Flours"
        )
        assert result["id"] is not None
        assert result["name"] == "Flour 00"
        assert result["base_unit"] == "g"
        assert result["category"] == "Flours"
        assert result["price_point_count"] == 0
        assert result["uuid"]

    def test_category_optional(self, test_db):
        result = ingredient_service.create_ingredient(name="Eggs", base_unit="pz")
        assert result["category"] is None

    def test_blank_category_stored_as_none(self, test_db):
        result = ingredient_service.create_ingredient(name="Eggs", base_unit="pz", category="  ")
        assert result["category"] is None

    def test_name_required(self, test_db):
        with pytest.raises(ValidationError) as exc_info:
            ingredient_service.create_ingredient(name="  ", base_unit="g")
        assert "Name: This field is required" in exc_info.value.errors

    def test_unknown_base_unit_rejected(self, test_db):
        with pytest.raises(ValidationError) as exc_info:
            ingredient_service.create_ingredient(name="Milk", base_unit="cup")
        assert "Base unit: Unknown unit 'cup'" in exc_info.value.errors

    def test_non_absolute_base_unit_allowed(self, test_db):
        """Any catalog unit may serve as a base unit."""
        result = ingredient_service.create_ingredient(name="Honey", base_unit="kg")
        assert result["base_unit"] == "kg"

    def test_duplicate_name_rejected(self, test_db):
        ingredient_service.create_ingredient(name="Butter", base_unit="g")
        with pytest.raises(ValidationError, match="already exists"):
            ingredient_service.create_ingredient(name="Butter", base_unit="g")

    def test_collects_all_errors(self, test_db):
        with pytest.raises(ValidationError) as exc_info:
            ingredient_service.create_ingredient(name="", base_unit="")
        assert len(exc_info.value.errors) == 2

    def test_logs_creation(self, test_db, caplog):
        with caplog.at_level(logging.INFO, logger="pastry_cost.services"):
            ingredient_service.create_ingredient(name="Butter", base_unit="g")
        assert "create_ingredient: success" in caplog.text


class TestGetIngredients:
    """Test ingredient lookup and listing."""

    def test_get_existing(self, test_db, chocolate):
        result = ingredient_service.get_ingredient(chocolate["id"])
        assert result["name"] == "Dark chocolate 70%"
        assert result["price_point_count"] == 3

    def test_get_missing_returns_none(self, test_db):
        assert ingredient_service.get_ingredient(999) is None

    def test_list_sorted_by_name(self, test_db, chocolate, eggs, cream):
        names = [i["name"] for i in ingredient_service.get_all_ingredients()]
        assert names == ["Dark chocolate 70%", "Fresh cream 35% fat", "Fresh medium eggs"]

    def test_list_by_category(self, test_db, chocolate, eggs, cream):
        result = ingredient_service.get_all_ingredients(category="Dairy")
        assert [i["id"] for i in result] == [cream["id"]]

    def test_accepts_session(self, test_db, chocolate):
        with session_scope() as session:
            result = ingredient_service.get_ingredient(chocolate["id"], session=session)
        assert result["id"] == chocolate["id"]


class TestUpdateIngredient:
    """Test ingredient updates."""

    def test_rename(self, test_db, chocolate):
        result = ingredient_service.update_ingredient(chocolate["id"], name="Chocolate 70%")
        assert result["name"] == "Chocolate 70%"
        assert result["base_unit"] == "g"

    def test_missing_raises(self, test_db):
        with pytest.raises(MasterIngredientNotFound):
            ingredient_service.update_ingredient(999, name="x")

    def test_unknown_field_rejected(self, test_db, chocolate):
        with pytest.raises(ValidationError, match="Unknown field: color"):
            ingredient_service.update_ingredient(chocolate["id"], color="brown")

    def test_rename_to_existing_name_rejected(self, test_db, chocolate, eggs):
        with pytest.raises(ValidationError):
            ingredient_service.update_ingredient(eggs["id"], name="Dark chocolate 70%")

    def test_keep_own_name(self, test_db, chocolate):
        result = ingredient_service.update_ingredient(
            chocolate["id"], name="Dark chocolate 70%", category="Couverture"
        )
        assert result["category"] == "Couverture"

    def test_base_unit_change_rederives_line_quantities(self, test_db, mousse, chocolate):
        """Lines entered as 0.2 kg become 0.2 in a kg base."""
        ingredient_service.update_ingredient(chocolate["id"], base_unit="kg")

        recipe = recipe_service.get_recipe(mousse["id"])
        line = recipe["ingredients"][0]
        assert line["display_quantity"] == 0.2
        assert line["quantity"] == pytest.approx(0.2)

    def test_incompatible_base_unit_zeroes_quantities(self, test_db, mousse, chocolate):
        ingredient_service.update_ingredient(chocolate["id"], base_unit="ml")

        line = recipe_service.get_recipe(mousse["id"])["ingredients"][0]
        assert line["quantity"] == 0.0


class TestDeleteIngredient:
    """Test the ingredient deletion cascade."""

    def test_removes_price_points(self, test_db, chocolate):
        result = ingredient_service.delete_ingredient(chocolate["id"])

        assert result["price_points_removed"] == 3
        assert ingredient_service.get_ingredient(chocolate["id"]) is None
        with session_scope() as session:
            assert session.query(IngredientPricePoint).count() == 0

    def test_removes_recipe_lines_but_keeps_recipe(self, test_db, mousse, chocolate, eggs):
        result = ingredient_service.delete_ingredient(chocolate["id"])

        assert result["recipe_lines_removed"] == 1
        assert result["recipes_removed"] == []

        recipe = recipe_service.get_recipe(mousse["id"])
        assert [line["master_ingredient_id"] for line in recipe["ingredients"]] == [eggs["id"]]

    def test_removes_recipes_left_empty(self, test_db, chocolate, eggs, mousse):
        only_chocolate = recipe_service.create_recipe(
            name="Chocolate bark",
            description="Melt and spread.",
            portions=8,
            ingredients=[
                {
                    "master_ingredient_id": chocolate["id"],
                    "display_quantity": 300,
                    "display_unit": "g",
                }
            ],
        )

        result = ingredient_service.delete_ingredient(chocolate["id"])

        assert result["recipes_removed"] == [only_chocolate["id"]]
        assert result["recipe_lines_removed"] == 2
        assert recipe_service.get_recipe(only_chocolate["id"]) is None
        assert recipe_service.get_recipe(mousse["id"]) is not None

    def test_other_ingredients_untouched(self, test_db, chocolate, eggs):
        ingredient_service.delete_ingredient(chocolate["id"])

        remaining = price_point_service.get_price_points_for_ingredient(eggs["id"])
        assert len(remaining) == 2

    def test_missing_raises(self, test_db):
        with pytest.raises(MasterIngredientNotFound):
            ingredient_service.delete_ingredient(999)

    def test_logs_counts(self, test_db, chocolate, caplog):
        with caplog.at_level(logging.INFO, logger="pastry_cost.services"):
            ingredient_service.delete_ingredient(chocolate["id"])

        record = next(r for r in caplog.records if r.getMessage() == "delete_ingredient: success")
        assert record.price_points_removed == 3
