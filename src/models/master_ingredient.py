"""
MasterIngredient model for canonical raw-ingredient definitions.

A master ingredient is the generic concept ("Dark chocolate 70%") with the
base unit its quantities are stored in. Purchase observations hang off it
as IngredientPricePoint rows and recipes reference it through
RecipeIngredient lines.
"""

from sqlalchemy import Column, Index, String
from sqlalchemy.orm import relationship

from .base import BaseModel


class MasterIngredient(BaseModel):
    """
    Canonical definition of a raw ingredient.

    Attributes:
        name: Human-readable name, unique (e.g., "Flour 00")
        base_unit: Absolute base unit abbreviation ("g", "ml" or "pz")
        category: Optional free-text category (e.g., "Flours")

    Relationships:
        price_points: Recorded purchases, deleted with the ingredient
        recipe_ingredients: Recipe lines using it, deleted with the ingredient
    """

    __tablename__ = "master_ingredients"

    name = Column(String(200), nullable=False, unique=True)
    base_unit = Column(String(20), nullable=False)
    category = Column(String(100), nullable=True)

    price_points = relationship(
        "IngredientPricePoint",
        back_populates="master_ingredient",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="IngredientPricePoint.id",
        lazy="select",
    )
    recipe_ingredients = relationship(
        "RecipeIngredient",
        back_populates="master_ingredient",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="select",
    )

    __table_args__ = (
        Index("idx_master_ingredient_name", "name"),
        Index("idx_master_ingredient_category", "category"),
    )

    def __repr__(self) -> str:
        return (
            f"MasterIngredient(id={self.id}, name='{self.name}', "
            f"base_unit='{self.base_unit}')"
        )

    def to_dict(self, include_relationships: bool = False) -> dict:
        """
        Convert ingredient to dictionary.

        Args:
            include_relationships: If True, include price points

        Returns:
            Dictionary representation with a price point count
        """
        result = super().to_dict(include_relationships=False)
        result["price_point_count"] = len(self.price_points)
        if include_relationships:
            result["price_points"] = [pp.to_dict() for pp in self.price_points]
        return result
