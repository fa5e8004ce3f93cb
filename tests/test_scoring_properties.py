# tests/test_scoring_properties.py

from hypothesis import given, strategies as st

from estate_intel.analysis.scoring import (
    calculate_investment_score,
    calculate_location_score,
    calculate_property_scores,
    calculate_value_score,
)
from estate_intel.domain.property import DealQuality, PropertySnapshot

distances = st.floats(min_value=0.0, max_value=60.0, allow_nan=False, allow_infinity=False)
deviations = st.floats(min_value=-90.0, max_value=400.0, allow_nan=False, allow_infinity=False)
yields = st.floats(min_value=-5.0, max_value=40.0, allow_nan=False, allow_infinity=False)
money = st.floats(min_value=1.0, max_value=1e9, allow_nan=False, allow_infinity=False)


@st.composite
def snapshots(draw):
    return PropertySnapshot(
        id="h",
        category=draw(st.sampled_from(["CONDO", "HOUSE", "INVESTMENT", "LAND"])),
        price=draw(st.none() | money),
        rent_price=draw(st.none() | st.floats(min_value=0.0, max_value=1e7, allow_nan=False)),
        size=draw(st.none() | st.floats(min_value=1.0, max_value=5000.0)),
        nearest_beach_km=draw(st.none() | distances),
        nearest_mall_km=draw(st.none() | distances),
        nearest_hospital_km=draw(st.none() | distances),
        nearest_school_km=draw(st.none() | distances),
        price_per_sqm=draw(st.none() | money),
        area_avg_price_per_sqm=draw(st.none() | money),
        price_deviation=draw(st.none() | deviations),
        estimated_rental_yield=draw(st.none() | yields),
    )


@given(snapshots())
def test_scores_are_integers_in_range(prop):
    res = calculate_property_scores(prop)

    for s in (res.location_score, res.value_score, res.investment_score, res.overall_score):
        assert isinstance(s, int)
        assert 0 <= s <= 100

    assert len(res.key_features) <= 5
    assert len(res.target_buyer) <= 3
    # reserved label, no rule produces it
    assert res.deal_quality != DealQuality.HIGH_YIELD


@given(snapshots())
def test_scoring_is_pure(prop):
    assert calculate_property_scores(prop) == calculate_property_scores(prop)


@given(
    poi=st.sampled_from(["nearest_beach_km", "nearest_mall_km", "nearest_hospital_km", "nearest_school_km"]),
    far=distances,
    closer_by=st.floats(min_value=0.0, max_value=60.0),
    others=st.lists(st.none() | distances, min_size=3, max_size=3),
)
def test_moving_closer_never_lowers_location_score(poi, far, closer_by, others):
    names = [n for n in ("nearest_beach_km", "nearest_mall_km", "nearest_hospital_km", "nearest_school_km") if n != poi]
    base = dict(zip(names, others))

    near = max(far - closer_by, 0.0)
    s_far = calculate_location_score(PropertySnapshot(id="a", **base, **{poi: far}))
    s_near = calculate_location_score(PropertySnapshot(id="a", **base, **{poi: near}))

    assert s_near >= s_far


@given(dev=deviations, cheaper_by=st.floats(min_value=0.0, max_value=200.0))
def test_cheaper_never_lowers_value_score(dev, cheaper_by):
    s_high = calculate_value_score(PropertySnapshot(id="a", price_deviation=dev))
    s_low = calculate_value_score(PropertySnapshot(id="a", price_deviation=dev - cheaper_by))
    assert s_low >= s_high


@given(y=yields, more=st.floats(min_value=0.0, max_value=40.0))
def test_higher_yield_never_lowers_investment_score(y, more):
    s1 = calculate_investment_score(PropertySnapshot(id="a", estimated_rental_yield=y))
    s2 = calculate_investment_score(PropertySnapshot(id="a", estimated_rental_yield=y + more))
    assert s2 >= s1
