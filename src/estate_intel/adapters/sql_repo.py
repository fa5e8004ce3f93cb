# src/estate_intel/adapters/sql_repo.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable
from uuid import uuid4

from sqlalchemy import DateTime, or_
from sqlmodel import JSON, Column, Field, Session, SQLModel, create_engine, select

from estate_intel.domain.ports import AreaStatsRecord, PeerCriteria, PeerRecord
from estate_intel.domain.property import PropertySnapshot, utc_now

# Columns the intelligence engine is allowed to write back.
MARKET_FIELDS = (
    "price_per_sqm",
    "area_avg_price_per_sqm",
    "project_avg_price_per_sqm",
    "price_deviation",
    "fair_value_estimate",
    "estimated_rental_yield",
    "price_vs_area_avg",
    "price_vs_project_avg",
)
SCORE_FIELDS = (
    "location_score",
    "value_score",
    "investment_score",
    "overall_score",
    "key_features",
    "target_buyer",
    "deal_quality",
    "last_intelligence_update",
)
WRITABLE_FIELDS = frozenset(MARKET_FIELDS + SCORE_FIELDS)

# Listing attributes accepted by upsert_many (owned by the CRUD layer).
LISTING_FIELDS = (
    "category", "price", "rent_price", "size", "floor",
    "area", "city", "project_id",
    "nearest_beach_km", "nearest_mall_km", "nearest_hospital_km", "nearest_school_km",
)


# ---------- Property storage ----------

class PropertyRow(SQLModel, table=True):
    __tablename__ = "properties"

    id: str = Field(default_factory=lambda: uuid4().hex, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=DateTime(timezone=True))

    category: str = Field(index=True)

    price: float | None = Field(default=None, index=True)
    rent_price: float | None = None
    size: float = Field(default=0.0)
    floor: int | None = None

    area: str | None = Field(default=None, index=True)
    city: str | None = Field(default=None, index=True)
    project_id: str | None = Field(default=None, index=True)

    nearest_beach_km: float | None = None
    nearest_mall_km: float | None = None
    nearest_hospital_km: float | None = None
    nearest_school_km: float | None = None

    # Market comparison
    price_per_sqm: float | None = None
    area_avg_price_per_sqm: float | None = None
    project_avg_price_per_sqm: float | None = None
    price_deviation: float | None = None
    fair_value_estimate: float | None = None
    estimated_rental_yield: float | None = None
    price_vs_area_avg: float | None = None
    price_vs_project_avg: float | None = None

    # Scores (0..100)
    location_score: int | None = None
    value_score: int | None = None
    investment_score: int | None = Field(default=None)
    overall_score: int | None = Field(default=None, index=True)
    key_features: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    target_buyer: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    deal_quality: str | None = Field(default=None, index=True)
    last_intelligence_update: datetime | None = Field(default=None, index=True, sa_type=DateTime(timezone=True))


def _snapshot(row: PropertyRow) -> PropertySnapshot:
    return PropertySnapshot.model_validate(row.model_dump())


def _category(value: Any) -> str:
    return str(getattr(value, "value", value) or "HOUSE").upper()


def _eq_or_null(column, value):
    return column.is_(None) if value is None else column == value


class SqlPropertyRepository:
    def __init__(self, uri: str = "sqlite:///estate_intel.db"):
        self.engine = create_engine(uri, echo=False)
        SQLModel.metadata.create_all(self.engine)

    def upsert_many(self, items: Iterable[dict[str, Any]]) -> list[str]:
        """Insert or update listings by id. Used by imports and tests."""
        ids: list[str] = []
        with Session(self.engine) as session:
            for item in items:
                if not item:
                    continue

                pid = str(item["id"]) if item.get("id") is not None else None
                row = session.get(PropertyRow, pid) if pid else None

                if row is None:
                    row = PropertyRow(
                        category=_category(item.get("category")),
                        size=float(item.get("size") or 0.0),
                        **({"id": pid} if pid else {}),
                    )

                for field in LISTING_FIELDS:
                    if field in item:
                        value = item[field]
                        if field == "category":
                            value = _category(value)
                        elif field == "size":
                            value = float(value or 0.0)
                        setattr(row, field, value)

                for field in WRITABLE_FIELDS:
                    if field in item:
                        setattr(row, field, item[field])

                session.add(row)
                ids.append(row.id)
            session.commit()
        return ids

    def get_property(self, property_id: str) -> PropertySnapshot | None:
        with Session(self.engine) as session:
            row = session.get(PropertyRow, str(property_id))
            return _snapshot(row) if row else None

    def get_row(self, property_id: str) -> PropertyRow | None:
        with Session(self.engine) as session:
            return session.get(PropertyRow, str(property_id))

    def list_peers(self, criteria: PeerCriteria) -> list[PeerRecord]:
        with Session(self.engine) as session:
            stmt = select(PropertyRow).where(
                PropertyRow.price.is_not(None),  # type: ignore[union-attr]
                PropertyRow.size > 0,
            )
            if criteria.get("exclude_id") is not None:
                stmt = stmt.where(PropertyRow.id != criteria["exclude_id"])

            if "project_id" in criteria:
                stmt = stmt.where(PropertyRow.project_id == criteria["project_id"])
            else:
                stmt = stmt.where(
                    _eq_or_null(PropertyRow.area, criteria.get("area")),
                    _eq_or_null(PropertyRow.city, criteria.get("city")),
                    PropertyRow.category == criteria.get("category"),
                )

            rows = list(session.exec(stmt))

        return [
            PeerRecord(id=r.id, price=float(r.price), size=float(r.size), floor=r.floor)  # type: ignore[arg-type]
            for r in rows
        ]

    def list_property_ids(self) -> list[str]:
        with Session(self.engine) as session:
            stmt = select(PropertyRow.id).order_by(PropertyRow.created_at, PropertyRow.id)
            return [str(pid) for pid in session.exec(stmt)]

    def list_stale_property_ids(self, *, updated_before: datetime, limit: int = 100) -> list[str]:
        with Session(self.engine) as session:
            stmt = (
                select(PropertyRow.id)
                .where(
                    or_(
                        PropertyRow.last_intelligence_update.is_(None),  # type: ignore[union-attr]
                        PropertyRow.last_intelligence_update < updated_before,
                    )
                )
                .order_by(PropertyRow.created_at, PropertyRow.id)
                .limit(limit)
            )
            return [str(pid) for pid in session.exec(stmt)]

    def update_fields(self, property_id: str, fields: dict[str, Any]) -> None:
        unknown = set(fields) - WRITABLE_FIELDS
        if unknown:
            raise ValueError(f"not writable: {sorted(unknown)}")

        with Session(self.engine) as session:
            row = session.get(PropertyRow, str(property_id))
            if not row:
                raise KeyError(f"property {property_id} not found")
            for field, value in fields.items():
                setattr(row, field, value)
            session.add(row)
            session.commit()

    def list_market_rows(self) -> list[dict[str, Any]]:
        with Session(self.engine) as session:
            stmt = select(
                PropertyRow.city,
                PropertyRow.area,
                PropertyRow.category,
                PropertyRow.price,
                PropertyRow.size,
            ).where(PropertyRow.price.is_not(None))  # type: ignore[union-attr]
            return [
                dict(city=city, area=area, category=category, price=price, size=size)
                for city, area, category, price, size in session.exec(stmt)
            ]


# ---------- Area statistics ----------

class AreaStatsRow(SQLModel, table=True):
    __tablename__ = "area_stats"

    id: int | None = Field(default=None, primary_key=True)
    ts: datetime = Field(default_factory=utc_now, index=True, sa_type=DateTime(timezone=True))

    city: str | None = Field(default=None, index=True)
    area: str | None = Field(default=None, index=True)
    category: str = Field(index=True)

    sample_size: int = 0
    avg_price_per_sqm: float
    median_price_per_sqm: float
    min_price_per_sqm: float
    max_price_per_sqm: float


def _stats_record(row: AreaStatsRow) -> AreaStatsRecord:
    return AreaStatsRecord(
        city=row.city,
        area=row.area,
        category=row.category,
        sample_size=row.sample_size,
        avg_price_per_sqm=row.avg_price_per_sqm,
        median_price_per_sqm=row.median_price_per_sqm,
        min_price_per_sqm=row.min_price_per_sqm,
        max_price_per_sqm=row.max_price_per_sqm,
    )


class SqlAreaStatsRepository:
    def __init__(self, uri: str = "sqlite:///estate_intel.db"):
        self.engine = create_engine(uri, echo=False)
        SQLModel.metadata.create_all(self.engine)

    def replace_all(self, items: Iterable[AreaStatsRecord]) -> int:
        written = 0
        with Session(self.engine) as session:
            for old in list(session.exec(select(AreaStatsRow))):
                session.delete(old)
            for item in items:
                session.add(AreaStatsRow(**item))
                written += 1
            session.commit()
        return written

    def get(self, *, city: str | None, area: str | None, category: str) -> AreaStatsRecord | None:
        with Session(self.engine) as session:
            stmt = select(AreaStatsRow).where(
                _eq_or_null(AreaStatsRow.city, city),
                _eq_or_null(AreaStatsRow.area, area),
                AreaStatsRow.category == category,
            )
            row = session.exec(stmt).first()
            return _stats_record(row) if row else None
