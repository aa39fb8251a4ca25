"""
Recipe models for pastry recipes.

This module contains:
- Recipe: A named dish with its portion count
- RecipeIngredient: One ordered ingredient line of a recipe
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .base import BaseModel


class Recipe(BaseModel):
    """
    Recipe model representing a pastry recipe.

    Attributes:
        name: Recipe name (required)
        description: Preparation instructions and notes
        portions: Number of portions the recipe yields (>= 1)
        image_url: Optional image reference
    """

    __tablename__ = "recipes"

    name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    portions = Column(Integer, nullable=False, default=1)
    image_url = Column(String(1000), nullable=True)

    recipe_ingredients = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="RecipeIngredient.position",
        lazy="selectin",
    )

    __table_args__ = (CheckConstraint("portions >= 1", name="ck_recipe_portions_positive"),)

    def __repr__(self) -> str:
        return f"Recipe(id={self.id}, name='{self.name}', portions={self.portions})"

    def to_dict(self, include_relationships: bool = False) -> dict:
        """
        Convert recipe to dictionary.

        Ingredient lines are always included since a recipe is meaningless
        without them.
        """
        result = super().to_dict(include_relationships=False)
        result["ingredients"] = [line.to_dict() for line in self.recipe_ingredients]
        return result


class RecipeIngredient(BaseModel):
    """
    One ingredient line inside a recipe.

    ``quantity`` is canonical: it is expressed in the referenced master
    ingredient's base unit and is the only field cost calculation reads.
    The display fields keep what the author typed.

    Attributes:
        recipe_id: Foreign key to Recipe
        master_ingredient_id: Foreign key to MasterIngredient
        position: Display order within the recipe
        quantity: Canonical quantity in the ingredient's base unit
        display_quantity: Quantity as entered
        display_unit: Unit abbreviation as entered
        narrative_unit_label: Free-text label (e.g., "a pinch"), presentation only
    """

    __tablename__ = "recipe_ingredients"

    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    master_ingredient_id = Column(
        Integer, ForeignKey("master_ingredients.id", ondelete="CASCADE"), nullable=False
    )
    position = Column(Integer, nullable=False, default=0)

    quantity = Column(Float, nullable=False, default=0.0)
    display_quantity = Column(Float, nullable=True)
    display_unit = Column(String(20), nullable=True)
    narrative_unit_label = Column(String(100), nullable=True)

    recipe = relationship("Recipe", back_populates="recipe_ingredients")
    master_ingredient = relationship("MasterIngredient", back_populates="recipe_ingredients")

    __table_args__ = (
        Index("idx_recipe_ingredient_recipe", "recipe_id"),
        Index("idx_recipe_ingredient_master", "master_ingredient_id"),
    )

    def __repr__(self) -> str:
        return (
            f"RecipeIngredient(recipe_id={self.recipe_id}, "
            f"master_ingredient_id={self.master_ingredient_id}, "
            f"quantity={self.quantity})"
        )
