"""
IngredientPricePoint model for recorded ingredient purchases.

Each record is one purchase observation: how much of the ingredient was
bought (already expressed in the ingredient's base unit) and what it cost.
The cost per base unit is stored redundantly for fast lookup and is
re-derived whenever cost or quantity changes.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
)
from sqlalchemy.orm import relationship, validates

from .base import BaseModel
from src.utils.datetime_utils import utc_now


class IngredientPricePoint(BaseModel):
    """
    One recorded purchase of a master ingredient.

    Attributes:
        master_ingredient_id: Foreign key to MasterIngredient (CASCADE delete)
        supplier_notes: Free-text supplier/purchase notes
        purchase_quantity_in_base_units: Quantity bought, in the ingredient's base unit
        purchase_cost: Total amount paid
        cost_per_base_unit: purchase_cost / purchase_quantity_in_base_units
        date_recorded: When the purchase was recorded
    """

    __tablename__ = "ingredient_price_points"

    master_ingredient_id = Column(
        Integer,
        ForeignKey("master_ingredients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    supplier_notes = Column(Text, nullable=False, default="")
    purchase_quantity_in_base_units = Column(Float, nullable=False)
    purchase_cost = Column(Float, nullable=False)
    cost_per_base_unit = Column(Float, nullable=False)
    date_recorded = Column(DateTime, nullable=False, default=utc_now)

    master_ingredient = relationship("MasterIngredient", back_populates="price_points")

    __table_args__ = (
        CheckConstraint(
            "purchase_quantity_in_base_units > 0", name="ck_price_point_quantity_positive"
        ),
        CheckConstraint("purchase_cost > 0", name="ck_price_point_cost_positive"),
        Index("idx_price_point_ingredient_date", "master_ingredient_id", "date_recorded"),
    )

    @validates("purchase_cost", "purchase_quantity_in_base_units")
    def _rederive_cost_per_base_unit(self, key, value):
        """Keep cost_per_base_unit in step with cost and quantity."""
        cost = value if key == "purchase_cost" else self.purchase_cost
        quantity = value if key == "purchase_quantity_in_base_units" else (
            self.purchase_quantity_in_base_units
        )
        if cost is not None and quantity:
            self.cost_per_base_unit = float(cost) / float(quantity)
        return value

    def set_purchase(self, purchase_cost: float, purchase_quantity_in_base_units: float) -> None:
        """
        Record a new cost/quantity pair.

        Args:
            purchase_cost: Total amount paid
            purchase_quantity_in_base_units: Quantity bought in base units
        """
        self.purchase_quantity_in_base_units = float(purchase_quantity_in_base_units)
        self.purchase_cost = float(purchase_cost)

    def __repr__(self) -> str:
        return (
            f"IngredientPricePoint(id={self.id}, "
            f"master_ingredient_id={self.master_ingredient_id}, "
            f"cost_per_base_unit={self.cost_per_base_unit})"
        )
