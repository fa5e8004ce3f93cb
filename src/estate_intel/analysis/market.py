# src/estate_intel/analysis/market.py
from __future__ import annotations

from typing import Iterable, Mapping

from estate_intel.adapters.config import config
from estate_intel.domain.property import MarketComparison, PropertyCategory, PropertySnapshot


def price_per_sqm(price: float | None, size: float | None) -> float | None:
    if price is None or size is None or size <= 0:
        return None
    return float(price) / float(size)


def average_price_per_sqm(peers: Iterable[Mapping[str, object]]) -> float | None:
    """
    Simple mean of price/size over the peer set.

    Peers without a price or with a non-positive size are skipped; an empty
    set gives None, not 0.
    """
    values: list[float] = []
    for p in peers:
        ppsqm = price_per_sqm(p.get("price"), p.get("size"))  # type: ignore[arg-type]
        if ppsqm is not None:
            values.append(ppsqm)
    if not values:
        return None
    return sum(values) / len(values)


def floor_adjustment(
    category: str,
    floor: int | None,
    *,
    average_floor: int | None = None,
    per_floor: float | None = None,
) -> float:
    """
    Condo units gain/lose `per_floor` of value for each floor above/below
    `average_floor`. Everything else, and condos without a floor, get 1.0.
    """
    if category != PropertyCategory.CONDO.value or floor is None:
        return 1.0
    avg = config.AVERAGE_FLOOR if average_floor is None else average_floor
    rate = config.FLOOR_ADJUSTMENT_PER_FLOOR if per_floor is None else per_floor
    return 1.0 + (floor - avg) * rate


def percent_deviation(actual: float, reference: float | None) -> float | None:
    if reference is None or reference == 0:
        return None
    return (actual - reference) / reference * 100.0


def rental_yield(rent_price: float | None, price: float | None) -> float | None:
    """Annual rent as a percentage of the sale price."""
    if rent_price is None or price is None or price <= 0:
        return None
    return (float(rent_price) * 12.0) / float(price) * 100.0


def compare_to_market(
    prop: PropertySnapshot,
    area_peers: Iterable[Mapping[str, object]],
    project_peers: Iterable[Mapping[str, object]] | None = None,
    *,
    average_floor: int | None = None,
    per_floor: float | None = None,
) -> MarketComparison | None:
    """
    Fair-value comparison of one property against its peer groups.

    Returns None when the property itself lacks a positive price or size;
    those listings stay unscored until the data is filled in.

    Baseline priority:
      1) project average price/sqm
      2) area average price/sqm
      3) none -> price_deviation / fair_value_estimate stay None
    """
    if prop.price is None or prop.price <= 0 or prop.size is None or prop.size <= 0:
        return None

    price = float(prop.price)
    own_ppsqm = price / float(prop.size)

    area_avg = average_price_per_sqm(area_peers)
    project_avg = average_price_per_sqm(project_peers) if project_peers is not None else None

    baseline = project_avg if project_avg is not None else area_avg

    fair_value: float | None = None
    deviation: float | None = None
    if baseline is not None:
        adj = floor_adjustment(
            prop.category,
            prop.floor,
            average_floor=average_floor,
            per_floor=per_floor,
        )
        fair_value = baseline * float(prop.size) * adj
        deviation = percent_deviation(price, fair_value)

    return MarketComparison(
        price_per_sqm=own_ppsqm,
        area_avg_price_per_sqm=area_avg,
        project_avg_price_per_sqm=project_avg,
        price_deviation=deviation,
        fair_value_estimate=fair_value,
        estimated_rental_yield=rental_yield(prop.rent_price, price),
        price_vs_area_avg=percent_deviation(own_ppsqm, area_avg),
        price_vs_project_avg=percent_deviation(own_ppsqm, project_avg),
    )
