from __future__ import annotations

from typing import Any, Iterable

import pandas as pd

from estate_intel.domain.ports import AreaStatsRecord

GROUP_KEYS = ["city", "area", "category"]


def compute_area_stats(rows: Iterable[dict[str, Any]]) -> list[AreaStatsRecord]:
    """
    Roll listings up into price-per-sqm statistics per (city, area, category).

    Rows need `city`, `area`, `category`, `price` and `size`; rows without a
    price or with a non-positive size are dropped before grouping. Missing
    area/city values form their own group.
    """
    df = pd.DataFrame(list(rows), columns=GROUP_KEYS + ["price", "size"])
    if df.empty:
        return []

    df["price"] = pd.to_numeric(df["price"], errors="coerce")
    df["size"] = pd.to_numeric(df["size"], errors="coerce")
    df = df[df["price"].notna() & (df["size"] > 0)].copy()
    if df.empty:
        return []

    df["price_per_sqm"] = df["price"] / df["size"]

    grouped = (
        df.groupby(GROUP_KEYS, dropna=False)["price_per_sqm"]
        .agg(
            sample_size="count",
            avg_ppsqm="mean",
            median_ppsqm="median",
            min_ppsqm="min",
            max_ppsqm="max",
        )
        .reset_index()
        .sort_values(GROUP_KEYS, na_position="first")
    )

    out: list[AreaStatsRecord] = []
    for r in grouped.itertuples(index=False):
        out.append(
            AreaStatsRecord(
                city=None if pd.isna(r.city) else str(r.city),
                area=None if pd.isna(r.area) else str(r.area),
                category=str(r.category),
                sample_size=int(r.sample_size),
                avg_price_per_sqm=float(r.avg_ppsqm),
                median_price_per_sqm=float(r.median_ppsqm),
                min_price_per_sqm=float(r.min_ppsqm),
                max_price_per_sqm=float(r.max_ppsqm),
            )
        )
    return out
