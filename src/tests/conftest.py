"""Pytest configuration and fixtures for service layer tests."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session
from unittest.mock import patch

from src.models.base import Base


@pytest.fixture(scope="function")
def test_db():
    """Provide a clean test database for each test function.

    This fixture:
    1. Creates an in-memory SQLite database
    2. Creates all tables
    3. Provides the database to the test
    4. Drops all tables after the test completes
    """
    # Importing the package registers every model with Base.metadata
    import src.models  # noqa: F401

    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)

    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    Session = scoped_session(session_factory)

    # Monkey-patch the global session factory for tests
    import src.services.database as db_module

    original_get_session = db_module.get_session_factory
    db_module.get_session_factory = lambda: Session

    yield Session

    # Cleanup
    Session.remove()
    Base.metadata.drop_all(engine)
    engine.dispose()

    db_module.get_session_factory = original_get_session


@pytest.fixture
def temp_config_dir(tmp_path):
    """Point the preferences file at a temporary directory."""
    from src.services import preferences_service

    config_dir = tmp_path / "config"
    config_dir.mkdir()

    with patch.object(preferences_service, "_get_config_dir", return_value=config_dir):
        yield config_dir


# ============================================================================
# Persisted sample data
# ============================================================================


@pytest.fixture(scope="function")
def chocolate(test_db):
    """Dark chocolate (g) with three recorded purchases."""
    from src.services import ingredient_service, price_point_service

    ingredient = ingredient_service.create_ingredient(
        name="Dark chocolate 70%", base_unit="g", category="Chocolate"
    )
    for notes, quantity, cost, recorded in (
        ("Supplier A - 1kg block", 1000, 22.0, datetime(2023, 1, 15, tzinfo=timezone.utc)),
        ("Supermarket - 200g bar", 200, 5.0, datetime(2023, 3, 10, tzinfo=timezone.utc)),
        ("Online offer - 500g", 500, 9.5, datetime(2023, 6, 20, tzinfo=timezone.utc)),
    ):
        price_point_service.create_price_point(
            ingredient_id=ingredient["id"],
            supplier_notes=notes,
            purchase_quantity_in_base_units=quantity,
            purchase_cost=cost,
            date_recorded=recorded,
        )
    return ingredient


@pytest.fixture(scope="function")
def eggs(test_db):
    """Eggs (pz) with two recorded purchases."""
    from src.services import ingredient_service, price_point_service

    ingredient = ingredient_service.create_ingredient(
        name="Fresh medium eggs", base_unit="pz", category="Eggs"
    )
    for notes, quantity, cost, recorded in (
        ("Local farm - pack of 6", 6, 1.8, datetime(2023, 1, 1, tzinfo=timezone.utc)),
        ("Supermarket - pack of 10", 10, 2.8, datetime(2023, 5, 5, tzinfo=timezone.utc)),
    ):
        price_point_service.create_price_point(
            ingredient_id=ingredient["id"],
            supplier_notes=notes,
            purchase_quantity_in_base_units=quantity,
            purchase_cost=cost,
            date_recorded=recorded,
        )
    return ingredient


@pytest.fixture(scope="function")
def cream(test_db):
    """Fresh cream (ml) without any recorded purchase."""
    from src.services import ingredient_service

    return ingredient_service.create_ingredient(
        name="Fresh cream 35% fat", base_unit="ml", category="Dairy"
    )


@pytest.fixture(scope="function")
def mousse(test_db, chocolate, eggs):
    """Chocolate mousse: 0.2 kg chocolate and 4 eggs, 6 portions."""
    from src.services import recipe_service

    return recipe_service.create_recipe(
        name="Simple Chocolate Mousse",
        description="Melt, whip, fold.",
        portions=6,
        ingredients=[
            {
                "master_ingredient_id": chocolate["id"],
                "display_quantity": 0.2,
                "display_unit": "kg",
            },
            {"master_ingredient_id": eggs["id"], "display_quantity": 4, "display_unit": "pz"},
        ],
    )
