"""Data Transfer Objects for the cost engine boundary.

Cost calculation never touches ORM objects. Services load a consistent
snapshot inside one session, freeze it into the dataclasses below and hand
it to the pure functions in ``cost_strategy`` and ``food_cost_service``.

Snapshot inputs:
    IngredientSnapshot, PricePointSnapshot, RecipeLineSnapshot, RecipeSnapshot

Outputs:
    ResolvedCost, FoodCost, IngredientCostDetail
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class IngredientSnapshot:
    """Read-only view of a MasterIngredient."""

    id: Any
    name: str
    base_unit: str
    category: Optional[str] = None

    @classmethod
    def from_model(cls, ingredient) -> "IngredientSnapshot":
        return cls(
            id=ingredient.id,
            name=ingredient.name,
            base_unit=ingredient.base_unit,
            category=ingredient.category,
        )


@dataclass(frozen=True)
class PricePointSnapshot:
    """Read-only view of an IngredientPricePoint.

    Attributes:
        id: Price point identifier
        master_ingredient_id: Owning ingredient identifier
        supplier_notes: Free-text supplier/purchase notes
        purchase_quantity_in_base_units: Quantity bought, in base units
        purchase_cost: Total amount paid
        cost_per_base_unit: Stored derived unit cost
        date_recorded: When the purchase was recorded
    """

    id: Any
    master_ingredient_id: Any
    cost_per_base_unit: float
    date_recorded: datetime
    supplier_notes: str = ""
    purchase_quantity_in_base_units: Optional[float] = None
    purchase_cost: Optional[float] = None

    @classmethod
    def from_model(cls, price_point) -> "PricePointSnapshot":
        return cls(
            id=price_point.id,
            master_ingredient_id=price_point.master_ingredient_id,
            cost_per_base_unit=price_point.cost_per_base_unit,
            date_recorded=price_point.date_recorded,
            supplier_notes=price_point.supplier_notes or "",
            purchase_quantity_in_base_units=price_point.purchase_quantity_in_base_units,
            purchase_cost=price_point.purchase_cost,
        )


@dataclass(frozen=True)
class RecipeLineSnapshot:
    """Read-only view of a RecipeIngredient line.

    ``quantity`` holds whatever the caller stored; the calculator
    validates it before use.
    """

    id: Any
    master_ingredient_id: Any
    quantity: Any
    display_quantity: Optional[float] = None
    display_unit: Optional[str] = None
    narrative_unit_label: Optional[str] = None

    @classmethod
    def from_model(cls, line) -> "RecipeLineSnapshot":
        return cls(
            id=line.id,
            master_ingredient_id=line.master_ingredient_id,
            quantity=line.quantity,
            display_quantity=line.display_quantity,
            display_unit=line.display_unit,
            narrative_unit_label=line.narrative_unit_label,
        )


@dataclass(frozen=True)
class RecipeSnapshot:
    """Read-only view of a Recipe with its ordered lines."""

    id: Any
    name: str
    portions: Any
    lines: Tuple[RecipeLineSnapshot, ...] = ()
    description: str = ""
    image_url: Optional[str] = None

    @classmethod
    def from_model(cls, recipe) -> "RecipeSnapshot":
        return cls(
            id=recipe.id,
            name=recipe.name,
            portions=recipe.portions,
            lines=tuple(RecipeLineSnapshot.from_model(line) for line in recipe.recipe_ingredients),
            description=recipe.description or "",
            image_url=recipe.image_url,
        )


@dataclass(frozen=True)
class ResolvedCost:
    """Effective cost per base unit picked by a cost strategy.

    Attributes:
        cost_per_base_unit: The unit cost to multiply quantities by
        source_label: Human-readable description of where it came from
        price_point_id: The chosen price point, or None for a computed average
    """

    cost_per_base_unit: float
    source_label: str
    price_point_id: Optional[Any] = None

    @property
    def is_synthetic(self) -> bool:
        """True when the cost does not correspond to one recorded purchase."""
        return self.price_point_id is None


@dataclass(frozen=True)
class FoodCost:
    """Result of a food cost calculation.

    Attributes:
        total_cost: Sum of every costed line
        cost_per_portion: total_cost / portions, or 0 when portions <= 0
        warnings: Ordered warning messages, None when nothing went wrong
    """

    total_cost: float
    cost_per_portion: float
    warnings: Optional[Tuple[str, ...]] = None

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "total_cost": self.total_cost,
            "cost_per_portion": self.cost_per_portion,
        }
        if self.warnings:
            result["warnings"] = list(self.warnings)
        return result


@dataclass(frozen=True)
class IngredientCostDetail:
    """Per-line cost breakdown for recipe detail display."""

    line_id: Any
    master_ingredient_id: Any
    display_text: str
    cost_text: str
    ingredient_name: Optional[str] = None
    base_unit: Optional[str] = None
    quantity: Any = None
    line_cost: Optional[float] = None
    cost_per_base_unit: Optional[float] = None
    source_label: str = ""
