from datetime import datetime
from typing import Any, Iterable

from estate_intel.domain.ports import (
    AreaStatsRecord,
    AreaStatsRepository,
    PeerCriteria,
    PeerRecord,
    PropertyRepository,
)
from estate_intel.domain.property import PropertySnapshot


def _category(value: Any) -> str:
    return str(getattr(value, "value", value) or "").upper()


class InMemoryPropertyRepository(PropertyRepository):
    """Dict-backed store keyed by property id. Rows are plain dicts."""

    def __init__(self, items: Iterable[dict[str, Any]] | None = None) -> None:
        self._items: dict[str, dict[str, Any]] = {}
        for item in items or []:
            self.add(item)

    def add(self, item: dict[str, Any]) -> str:
        pid = str(item["id"])
        self._items[pid] = {**item, "id": pid}
        return pid

    def get_property(self, property_id: str) -> PropertySnapshot | None:
        row = self._items.get(str(property_id))
        if row is None:
            return None
        return PropertySnapshot.model_validate(row)

    def list_peers(self, criteria: PeerCriteria) -> list[PeerRecord]:
        out: list[PeerRecord] = []
        for pid, row in self._items.items():
            if pid == criteria.get("exclude_id"):
                continue
            if row.get("price") is None or not (row.get("size") or 0) > 0:
                continue

            if "project_id" in criteria:
                if row.get("project_id") != criteria["project_id"]:
                    continue
            elif (
                row.get("area") != criteria.get("area")
                or row.get("city") != criteria.get("city")
                or _category(row.get("category")) != criteria.get("category")
            ):
                continue

            out.append(
                PeerRecord(
                    id=pid,
                    price=float(row["price"]),
                    size=float(row["size"]),
                    floor=row.get("floor"),
                )
            )
        return out

    def list_property_ids(self) -> list[str]:
        return list(self._items)

    def list_stale_property_ids(self, *, updated_before: datetime, limit: int = 100) -> list[str]:
        out: list[str] = []
        for pid, row in self._items.items():
            if len(out) >= limit:
                break
            ts = row.get("last_intelligence_update")
            if ts is None or ts < updated_before:
                out.append(pid)
        return out

    def update_fields(self, property_id: str, fields: dict[str, Any]) -> None:
        row = self._items.get(str(property_id))
        if row is None:
            raise KeyError(f"property {property_id} not found")
        row.update(fields)

    def list_market_rows(self) -> list[dict[str, Any]]:
        return [
            {k: row.get(k) for k in ("city", "area", "category", "price", "size")}
            for row in self._items.values()
            if row.get("price") is not None
        ]

    def raw(self, property_id: str) -> dict[str, Any]:
        return dict(self._items[str(property_id)])


class InMemoryAreaStatsRepository(AreaStatsRepository):
    def __init__(self) -> None:
        self._items: list[AreaStatsRecord] = []

    def replace_all(self, items: Iterable[AreaStatsRecord]) -> int:
        self._items = list(items)
        return len(self._items)

    def get(self, *, city: str | None, area: str | None, category: str) -> AreaStatsRecord | None:
        for rec in self._items:
            if rec["city"] == city and rec["area"] == area and rec["category"] == category:
                return rec
        return None

    def all(self) -> list[AreaStatsRecord]:
        return list(self._items)
