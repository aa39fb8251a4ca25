"""Price Point Service - recorded ingredient purchases.

A price point records one purchase of a master ingredient: the quantity
bought (already in the ingredient's base unit), the amount paid and the
derived cost per base unit. Cost resolution reads these records; this
module only maintains them.

All functions accept an optional session and return plain dictionaries.

Example Usage:
    >>> from src.services.price_point_service import create_price_point
    >>> pp = create_price_point(
    ...     ingredient_id=1,
    ...     supplier_notes="Molino Rossi, 25kg sack",
    ...     purchase_quantity_in_base_units=25000,
    ...     purchase_cost=19.0,
    ... )
    >>> pp["cost_per_base_unit"]
    0.00076
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from src.models import IngredientPricePoint, MasterIngredient
from src.services.database import session_scope
from src.services.exceptions import (
    MasterIngredientNotFound,
    PricePointNotFound,
    ValidationError,
)
from src.services.logging_utils import get_service_logger, log_operation
from src.utils.datetime_utils import utc_now
from src.utils.validators import parse_number, validate_price_point_data

logger = get_service_logger(__name__)

UPDATABLE_FIELDS = ("supplier_notes", "purchase_quantity_in_base_units", "purchase_cost")
COPY_SUFFIX = " (copy)"


def _validated(data: Dict[str, Any]) -> Dict[str, Any]:
    """Validate price point fields and return them normalized."""
    is_valid, errors = validate_price_point_data(data)
    if not is_valid:
        raise ValidationError(errors)
    return {
        "supplier_notes": data["supplier_notes"].strip(),
        "purchase_quantity_in_base_units": parse_number(data["purchase_quantity_in_base_units"]),
        "purchase_cost": parse_number(data["purchase_cost"]),
    }


def _get_or_raise(price_point_id: int, session: Session) -> IngredientPricePoint:
    price_point = session.get(IngredientPricePoint, price_point_id)
    if price_point is None:
        raise PricePointNotFound(price_point_id)
    return price_point


def create_price_point(
    ingredient_id: int,
    supplier_notes: str,
    purchase_quantity_in_base_units: float,
    purchase_cost: float,
    date_recorded: Optional[datetime] = None,
    session: Optional[Session] = None,
) -> Dict[str, Any]:
    """Record a purchase for a master ingredient.

    Args:
        ingredient_id: Master ingredient ID
        supplier_notes: Supplier/purchase notes (required)
        purchase_quantity_in_base_units: Quantity bought in base units (> 0)
        purchase_cost: Amount paid (> 0)
        date_recorded: Purchase timestamp (default: now, UTC)
        session: Optional database session

    Returns:
        Dict[str, Any]: Created price point as dictionary

    Raises:
        MasterIngredientNotFound: If the ingredient doesn't exist
        ValidationError: If a field is invalid
    """
    data = {
        "supplier_notes": supplier_notes,
        "purchase_quantity_in_base_units": purchase_quantity_in_base_units,
        "purchase_cost": purchase_cost,
    }
    if session is not None:
        return _create_price_point_impl(ingredient_id, data, date_recorded, session)
    with session_scope() as session:
        return _create_price_point_impl(ingredient_id, data, date_recorded, session)


def _create_price_point_impl(
    ingredient_id: int,
    data: Dict[str, Any],
    date_recorded: Optional[datetime],
    session: Session,
) -> Dict[str, Any]:
    if session.get(MasterIngredient, ingredient_id) is None:
        raise MasterIngredientNotFound(ingredient_id)
    fields = _validated(data)

    price_point = IngredientPricePoint(
        master_ingredient_id=ingredient_id,
        supplier_notes=fields["supplier_notes"],
        date_recorded=date_recorded or utc_now(),
    )
    price_point.set_purchase(fields["purchase_cost"], fields["purchase_quantity_in_base_units"])
    session.add(price_point)
    session.flush()

    log_operation(
        logger,
        operation="create_price_point",
        outcome="success",
        price_point_id=price_point.id,
        ingredient_id=ingredient_id,
    )
    return price_point.to_dict()


def get_price_point(
    price_point_id: int, session: Optional[Session] = None
) -> Optional[Dict[str, Any]]:
    """Get a price point by ID, or None if not found."""
    if session is not None:
        return _get_price_point_impl(price_point_id, session)
    with session_scope() as session:
        return _get_price_point_impl(price_point_id, session)


def _get_price_point_impl(price_point_id: int, session: Session) -> Optional[Dict[str, Any]]:
    price_point = session.get(IngredientPricePoint, price_point_id)
    return price_point.to_dict() if price_point else None


def get_price_points_for_ingredient(
    ingredient_id: int, session: Optional[Session] = None
) -> List[Dict[str, Any]]:
    """Get all price points of an ingredient, newest first.

    Records sharing a timestamp list the later-created one first.

    Raises:
        MasterIngredientNotFound: If the ingredient doesn't exist
    """
    if session is not None:
        return _get_price_points_for_ingredient_impl(ingredient_id, session)
    with session_scope() as session:
        return _get_price_points_for_ingredient_impl(ingredient_id, session)


def _get_price_points_for_ingredient_impl(
    ingredient_id: int, session: Session
) -> List[Dict[str, Any]]:
    if session.get(MasterIngredient, ingredient_id) is None:
        raise MasterIngredientNotFound(ingredient_id)
    price_points = (
        session.query(IngredientPricePoint)
        .filter(IngredientPricePoint.master_ingredient_id == ingredient_id)
        .order_by(IngredientPricePoint.date_recorded.desc(), IngredientPricePoint.id.desc())
        .all()
    )
    return [pp.to_dict() for pp in price_points]


def update_price_point(
    price_point_id: int, session: Optional[Session] = None, **kwargs
) -> Dict[str, Any]:
    """Update a price point.

    Editing a purchase re-derives cost_per_base_unit and stamps
    date_recorded with the current time.

    Args:
        price_point_id: Price point ID
        session: Optional database session
        **kwargs: supplier_notes, purchase_quantity_in_base_units, purchase_cost

    Returns:
        Dict[str, Any]: Updated price point as dictionary

    Raises:
        PricePointNotFound: If the price point doesn't exist
        ValidationError: If a field is invalid or unknown
    """
    if session is not None:
        return _update_price_point_impl(price_point_id, session, **kwargs)
    with session_scope() as session:
        return _update_price_point_impl(price_point_id, session, **kwargs)


def _update_price_point_impl(price_point_id: int, session: Session, **kwargs) -> Dict[str, Any]:
    price_point = _get_or_raise(price_point_id, session)

    unknown = sorted(set(kwargs) - set(UPDATABLE_FIELDS))
    if unknown:
        raise ValidationError([f"Unknown field: {field}" for field in unknown])

    merged = {field: getattr(price_point, field) for field in UPDATABLE_FIELDS}
    merged.update(kwargs)
    fields = _validated(merged)

    price_point.supplier_notes = fields["supplier_notes"]
    price_point.set_purchase(fields["purchase_cost"], fields["purchase_quantity_in_base_units"])
    price_point.date_recorded = utc_now()
    session.flush()

    log_operation(
        logger,
        operation="update_price_point",
        outcome="success",
        price_point_id=price_point_id,
    )
    return price_point.to_dict()


def duplicate_price_point(
    price_point_id: int, session: Optional[Session] = None
) -> Dict[str, Any]:
    """Copy a price point as a new record stamped with the current time.

    The copy's supplier notes get a " (copy)" suffix.

    Raises:
        PricePointNotFound: If the price point doesn't exist
    """
    if session is not None:
        return _duplicate_price_point_impl(price_point_id, session)
    with session_scope() as session:
        return _duplicate_price_point_impl(price_point_id, session)


def _duplicate_price_point_impl(price_point_id: int, session: Session) -> Dict[str, Any]:
    source = _get_or_raise(price_point_id, session)

    copy = IngredientPricePoint(
        master_ingredient_id=source.master_ingredient_id,
        supplier_notes=f"{source.supplier_notes}{COPY_SUFFIX}",
        date_recorded=utc_now(),
    )
    copy.set_purchase(source.purchase_cost, source.purchase_quantity_in_base_units)
    session.add(copy)
    session.flush()

    log_operation(
        logger,
        operation="duplicate_price_point",
        outcome="success",
        source_id=price_point_id,
        price_point_id=copy.id,
    )
    return copy.to_dict()


def delete_price_point(price_point_id: int, session: Optional[Session] = None) -> bool:
    """Delete a price point.

    Returns:
        bool: True if deleted

    Raises:
        PricePointNotFound: If the price point doesn't exist
    """
    if session is not None:
        return _delete_price_point_impl(price_point_id, session)
    with session_scope() as session:
        return _delete_price_point_impl(price_point_id, session)


def _delete_price_point_impl(price_point_id: int, session: Session) -> bool:
    price_point = _get_or_raise(price_point_id, session)
    ingredient_id = price_point.master_ingredient_id
    session.delete(price_point)
    session.flush()

    log_operation(
        logger,
        operation="delete_price_point",
        outcome="success",
        price_point_id=price_point_id,
        ingredient_id=ingredient_id,
    )
    return True
