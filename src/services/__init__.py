"""Services package - Business logic layer for Pastry Cost Tracker.

This package contains all service modules that provide business logic
and database operations for the application.

Architecture:
- Services: Stateless functions organized by domain (ingredient, price point, recipe)
- Cost engine: Pure functions over frozen snapshots (cost_strategy, food_cost_service)
- Transactions: Managed via session_scope() context manager
- Exceptions: Consistent error handling via ServiceError hierarchy
- Validation: Input validation before database operations

Service Modules:
- ingredient_service: Master ingredient CRUD and deletion cascade
- price_point_service: Recorded purchase management
- recipe_service: Recipe authoring and management
- food_cost_service: Food cost calculation and per-line breakdown
- cost_strategy: Cost resolution strategies (cheapest, latest, average)
- preferences_service: Active cost strategy preference
- sample_data: First-start sample catalog

Infrastructure:
- exceptions: Custom exception classes for service layer errors
- database: Session management and database utilities
- unit_converter: Unit catalog and conversion
- dto: Frozen snapshot and result types
"""

from . import (
    cost_strategy,
    database,
    food_cost_service,
    ingredient_service,
    preferences_service,
    price_point_service,
    recipe_service,
    sample_data,
    unit_converter,
)

from .exceptions import (
    ServiceError,
    MasterIngredientNotFound,
    PricePointNotFound,
    RecipeNotFound,
    ValidationError,
    InvalidCostStrategy,
    DatabaseError,
)

from .dto import (
    FoodCost,
    IngredientCostDetail,
    IngredientSnapshot,
    PricePointSnapshot,
    RecipeLineSnapshot,
    RecipeSnapshot,
    ResolvedCost,
)

__all__ = [
    # Modules
    "cost_strategy",
    "database",
    "food_cost_service",
    "ingredient_service",
    "preferences_service",
    "price_point_service",
    "recipe_service",
    "sample_data",
    "unit_converter",
    # Exceptions
    "ServiceError",
    "MasterIngredientNotFound",
    "PricePointNotFound",
    "RecipeNotFound",
    "ValidationError",
    "InvalidCostStrategy",
    "DatabaseError",
    # DTOs
    "FoodCost",
    "IngredientCostDetail",
    "IngredientSnapshot",
    "PricePointSnapshot",
    "RecipeLineSnapshot",
    "RecipeSnapshot",
    "ResolvedCost",
]
