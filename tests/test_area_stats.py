import pytest

from estate_intel.adapters.memory_repo import InMemoryAreaStatsRepository, InMemoryPropertyRepository
from estate_intel.analysis.area_stats import compute_area_stats
from estate_intel.services.intelligence import refresh_area_stats


def test_groups_by_city_area_category():
    rows = [
        {"city": "Pattaya", "area": "Jomtien", "category": "CONDO", "price": 3_000_000, "size": 30},
        {"city": "Pattaya", "area": "Jomtien", "category": "CONDO", "price": 4_000_000, "size": 50},
        {"city": "Pattaya", "area": "Jomtien", "category": "CONDO", "price": 6_000_000, "size": 50},
        {"city": "Pattaya", "area": "Jomtien", "category": "HOUSE", "price": 8_000_000, "size": 200},
        {"city": "Pattaya", "area": None, "category": "LAND", "price": 1_000_000, "size": 500},
    ]

    stats = compute_area_stats(rows)
    by_key = {(s["city"], s["area"], s["category"]): s for s in stats}

    condo = by_key[("Pattaya", "Jomtien", "CONDO")]
    assert condo["sample_size"] == 3
    assert condo["avg_price_per_sqm"] == pytest.approx(100_000)
    assert condo["median_price_per_sqm"] == pytest.approx(100_000)
    assert condo["min_price_per_sqm"] == pytest.approx(80_000)
    assert condo["max_price_per_sqm"] == pytest.approx(120_000)

    assert by_key[("Pattaya", "Jomtien", "HOUSE")]["sample_size"] == 1
    assert by_key[("Pattaya", None, "LAND")]["avg_price_per_sqm"] == pytest.approx(2_000)


def test_unpriced_and_zero_size_rows_are_dropped():
    rows = [
        {"city": "Pattaya", "area": "Jomtien", "category": "CONDO", "price": None, "size": 30},
        {"city": "Pattaya", "area": "Jomtien", "category": "CONDO", "price": 3_000_000, "size": 0},
    ]
    assert compute_area_stats(rows) == []
    assert compute_area_stats([]) == []


def test_refresh_area_stats_with_memory_repos():
    repo = InMemoryPropertyRepository(
        [
            {"id": "1", "category": "CONDO", "price": 2_000_000, "size": 40, "city": "Hua Hin", "area": "Khao Takiab"},
            {"id": "2", "category": "CONDO", "price": None, "size": 40, "city": "Hua Hin", "area": "Khao Takiab"},
        ]
    )
    stats_repo = InMemoryAreaStatsRepository()

    assert refresh_area_stats(repo, stats_repo) == 1
    rec = stats_repo.get(city="Hua Hin", area="Khao Takiab", category="CONDO")
    assert rec["avg_price_per_sqm"] == pytest.approx(50_000)
