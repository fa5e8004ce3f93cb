# src/estate_intel/services/market_comparison.py
from __future__ import annotations

from dataclasses import asdict

from loguru import logger

from estate_intel.analysis.market import compare_to_market
from estate_intel.domain.ports import PeerCriteria, PropertyRepository
from estate_intel.domain.property import MarketComparison, PropertySnapshot


def area_peer_criteria(prop: PropertySnapshot) -> PeerCriteria:
    return PeerCriteria(
        exclude_id=prop.id,
        area=prop.area,
        city=prop.city,
        category=prop.category,
    )


def project_peer_criteria(prop: PropertySnapshot) -> PeerCriteria | None:
    if prop.project_id is None:
        return None
    return PeerCriteria(exclude_id=prop.id, project_id=prop.project_id)


def update_market_comparison(repo: PropertyRepository, property_id: str) -> MarketComparison | None:
    """
    Recompute price/sqm baselines, fair value, deviation and rental yield for
    one property and write them back.

    Missing property, price or size is not an error: nothing is written and
    None is returned. Store failures propagate to the caller.
    """
    prop = repo.get_property(property_id)
    if prop is None:
        logger.debug("market comparison skipped: property not found", property_id=property_id)
        return None

    if prop.price is None or prop.price <= 0 or prop.size is None or prop.size <= 0:
        logger.debug("market comparison skipped: missing price or size", property_id=property_id)
        return None

    area_peers = repo.list_peers(area_peer_criteria(prop))

    project_peers = None
    project_criteria = project_peer_criteria(prop)
    if project_criteria is not None:
        project_peers = repo.list_peers(project_criteria)

    comparison = compare_to_market(prop, area_peers, project_peers)
    if comparison is None:
        return None

    repo.update_fields(prop.id, asdict(comparison))

    logger.debug(
        "market comparison updated",
        property_id=prop.id,
        area_peers=len(area_peers),
        project_peers=len(project_peers) if project_peers is not None else 0,
        price_deviation=comparison.price_deviation,
    )
    return comparison
