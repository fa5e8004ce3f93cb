# src/estate_intel/domain/ports.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Protocol, TypedDict

from estate_intel.domain.property import PropertySnapshot


# ----------------------------
# Peer selection
# ----------------------------

class PeerCriteria(TypedDict, total=False):
    """
    Filter for comparable listings.

    Either `project_id`, or the `area` / `city` / `category` triple.
    `exclude_id` is always the subject property. Implementations only return
    peers with a price and a positive size.
    """
    exclude_id: str
    project_id: str
    area: str | None
    city: str | None
    category: str


class PeerRecord(TypedDict):
    id: str
    price: float
    size: float
    floor: int | None


# ----------------------------
# Property storage
# ----------------------------

class PropertyRepository(Protocol):
    def get_property(self, property_id: str) -> PropertySnapshot | None:
        ...

    def list_peers(self, criteria: PeerCriteria) -> list[PeerRecord]:
        ...

    def list_property_ids(self) -> list[str]:
        ...

    def list_stale_property_ids(self, *, updated_before: datetime, limit: int = 100) -> list[str]:
        ...

    def update_fields(self, property_id: str, fields: dict[str, Any]) -> None:
        ...

    def list_market_rows(self) -> list[dict[str, Any]]:
        """city / area / category / price / size for every priced listing."""
        ...


# ----------------------------
# Area statistics
# ----------------------------

class AreaStatsRecord(TypedDict):
    city: str | None
    area: str | None
    category: str
    sample_size: int
    avg_price_per_sqm: float
    median_price_per_sqm: float
    min_price_per_sqm: float
    max_price_per_sqm: float


class AreaStatsRepository(Protocol):
    def replace_all(self, items: Iterable[AreaStatsRecord]) -> int:
        ...

    def get(self, *, city: str | None, area: str | None, category: str) -> AreaStatsRecord | None:
        ...
