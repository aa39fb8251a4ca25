"""Cost resolution strategies.

Picks the single effective cost per base unit for one ingredient out of its
recorded price points:

- cheapest: the price point with the lowest cost per base unit
- latest: the most recently recorded price point
- average: the mean cost per base unit over every price point

Min/max selection keeps the first matching element in stored order, so
ties resolve the same way on every run. The average is returned as a plain
number with a descriptive label; it never masquerades as a recorded
purchase.

Every resolver requires at least one price point. Detecting an empty
price history is the caller's job; passing one raises ValueError.

Resolved unit costs are always floats, whatever numeric type the stored
price points use.
"""

from dataclasses import replace
from typing import Callable, Dict, Optional, Sequence, Union

from src.models.enums import CostStrategy
from src.services.dto import PricePointSnapshot, ResolvedCost
from src.services.exceptions import InvalidCostStrategy
from src.utils.constants import AVERAGE_PRICE_LABEL, DEFAULT_COST_STRATEGY
from src.utils.datetime_utils import as_utc, format_date
from src.utils.validators import is_finite_number

DEFAULT_STRATEGY = CostStrategy(DEFAULT_COST_STRATEGY)


def parse_cost_strategy(value: Union[CostStrategy, str, None]) -> CostStrategy:
    """
    Normalize a strategy setting.

    Args:
        value: CostStrategy member or its string value; None means default

    Returns:
        CostStrategy

    Raises:
        InvalidCostStrategy: If the value is not a recognized strategy
    """
    if value is None:
        return DEFAULT_STRATEGY
    if isinstance(value, CostStrategy):
        return value
    try:
        return CostStrategy(str(value).strip().lower())
    except ValueError:
        raise InvalidCostStrategy(value)


def _require_price_points(price_points: Sequence[PricePointSnapshot]) -> None:
    if not price_points:
        raise ValueError("Cost resolution requires at least one price point")


def select_cheapest(price_points: Sequence[PricePointSnapshot]) -> PricePointSnapshot:
    """
    Return the price point with the lowest cost per base unit.

    Raises:
        ValueError: If price_points is empty
    """
    _require_price_points(price_points)
    cheapest = price_points[0]
    for candidate in price_points[1:]:
        if candidate.cost_per_base_unit < cheapest.cost_per_base_unit:
            cheapest = candidate
    return cheapest


def select_latest(price_points: Sequence[PricePointSnapshot]) -> PricePointSnapshot:
    """
    Return the most recently recorded price point.

    Naive timestamps are read as UTC so stored and fresh values compare.

    Raises:
        ValueError: If price_points is empty
    """
    _require_price_points(price_points)
    latest = price_points[0]
    for candidate in price_points[1:]:
        if as_utc(candidate.date_recorded) > as_utc(latest.date_recorded):
            latest = candidate
    return latest


def average_cost_per_base_unit(price_points: Sequence[PricePointSnapshot]) -> float:
    """
    Return the arithmetic mean of every cost per base unit.

    Raises:
        ValueError: If price_points is empty
    """
    _require_price_points(price_points)
    total = 0.0
    for price_point in price_points:
        total += float(price_point.cost_per_base_unit)
    return total / len(price_points)


def _resolve_cheapest(price_points: Sequence[PricePointSnapshot]) -> ResolvedCost:
    chosen = select_cheapest(price_points)
    return ResolvedCost(
        cost_per_base_unit=chosen.cost_per_base_unit,
        source_label=f'cheapest recorded price ("{chosen.supplier_notes}")',
        price_point_id=chosen.id,
    )


def _resolve_latest(price_points: Sequence[PricePointSnapshot]) -> ResolvedCost:
    chosen = select_latest(price_points)
    return ResolvedCost(
        cost_per_base_unit=chosen.cost_per_base_unit,
        source_label=f"most recent recorded price ({format_date(chosen.date_recorded)})",
        price_point_id=chosen.id,
    )


def _resolve_average(price_points: Sequence[PricePointSnapshot]) -> ResolvedCost:
    return ResolvedCost(
        cost_per_base_unit=average_cost_per_base_unit(price_points),
        source_label=AVERAGE_PRICE_LABEL,
    )


_RESOLVERS: Dict[CostStrategy, Callable[[Sequence[PricePointSnapshot]], ResolvedCost]] = {
    CostStrategy.CHEAPEST: _resolve_cheapest,
    CostStrategy.LATEST: _resolve_latest,
    CostStrategy.AVERAGE: _resolve_average,
}


def resolve_cost(
    price_points: Sequence[PricePointSnapshot],
    strategy: Union[CostStrategy, str] = DEFAULT_STRATEGY,
) -> Optional[ResolvedCost]:
    """
    Apply a cost strategy to one ingredient's price points.

    Args:
        price_points: Non-empty price history of a single ingredient
        strategy: Strategy to apply

    Returns:
        ResolvedCost, or None if the strategy produced no usable unit cost

    Raises:
        ValueError: If price_points is empty
        InvalidCostStrategy: If strategy is not recognized

    Example:
        >>> resolve_cost(points, CostStrategy.AVERAGE).source_label
        'average of recorded prices'
    """
    strategy = parse_cost_strategy(strategy)
    _require_price_points(price_points)

    resolver = _RESOLVERS.get(strategy)
    if resolver is None:
        return None

    resolved = resolver(price_points)
    if not is_finite_number(resolved.cost_per_base_unit):
        return None
    return replace(resolved, cost_per_base_unit=float(resolved.cost_per_base_unit))
