"""
Database models package.

This package contains all SQLAlchemy ORM models for the application.
"""

from .base import Base, BaseModel
from .enums import CostStrategy, UnitCategory
from .master_ingredient import MasterIngredient
from .price_point import IngredientPricePoint
from .recipe import Recipe, RecipeIngredient

__all__ = [
    "Base",
    "BaseModel",
    # Enums
    "CostStrategy",
    "UnitCategory",
    # Ingredient catalog
    "MasterIngredient",
    "IngredientPricePoint",
    # Recipes
    "Recipe",
    "RecipeIngredient",
]
