"""Service layer exception classes for the Pastry Cost Tracker.

This module defines all custom exceptions used by the service layer to
provide consistent error handling across the application.

Exception Hierarchy:
    ServiceError (base)
    ├── MasterIngredientNotFound
    ├── PricePointNotFound
    ├── RecipeNotFound
    ├── ValidationError
    ├── InvalidCostStrategy
    └── DatabaseError

The pure cost engine raises none of these: data problems in a recipe
become warnings, and contract violations raise ValueError.
"""


class ServiceError(Exception):
    """Base exception for all service layer errors."""

    pass


class MasterIngredientNotFound(ServiceError):
    """Raised when a master ingredient cannot be found by ID.

    Example:
        >>> raise MasterIngredientNotFound(12)
        MasterIngredientNotFound: Master ingredient with ID 12 not found
    """

    def __init__(self, ingredient_id: int):
        self.ingredient_id = ingredient_id
        super().__init__(f"Master ingredient with ID {ingredient_id} not found")


class PricePointNotFound(ServiceError):
    """Raised when a price point cannot be found by ID."""

    def __init__(self, price_point_id: int):
        self.price_point_id = price_point_id
        super().__init__(f"Price point with ID {price_point_id} not found")


class RecipeNotFound(ServiceError):
    """Raised when a recipe cannot be found by ID."""

    def __init__(self, recipe_id: int):
        self.recipe_id = recipe_id
        super().__init__(f"Recipe with ID {recipe_id} not found")


class ValidationError(ServiceError):
    """Raised when data validation fails.

    Args:
        errors: List of human-readable validation messages
    """

    def __init__(self, errors: list):
        self.errors = errors
        super().__init__(f"Validation failed: {'; '.join(errors)}")


class InvalidCostStrategy(ServiceError):
    """Raised when a cost strategy value is not one of cheapest/latest/average."""

    def __init__(self, value):
        self.value = value
        super().__init__(
            f"Unknown cost strategy '{value}' (expected one of: cheapest, latest, average)"
        )


class DatabaseError(ServiceError):
    """Raised when a database operation fails."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")
