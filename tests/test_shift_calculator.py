import math

import numpy as np
import pandas as pd
import pytest

from utils.shift_calculator import (
    AggregationResult,
    aggregate,
    coerce_votes,
    compute_state_shifts,
    group_and_sum,
    shifts_to_frame,
)


def county(state, dem, gop, total):
    return {"state_name": state, "votes_dem": dem, "votes_gop": gop, "total_votes": total}


SHIFT_FIELDS = {
    "state",
    "dem_shift",
    "gop_shift",
    "total_shift",
    "margin_shift",
    "dem_pct_2020",
    "dem_pct_2024",
    "gop_pct_2020",
    "gop_pct_2024",
}


def test_ohio_texas_scenario() -> None:
    year_a = [county("Ohio", 40, 60, 100), county("Texas", 20, 30, 50)]
    year_b = [county("Ohio", 55, 45, 100)]

    result = aggregate(year_a, year_b)

    assert isinstance(result, AggregationResult)
    assert result.all_state_names == ["Ohio", "Texas"]
    assert list(result.state_shifts) == ["Ohio"]

    ohio = result.state_shifts["Ohio"]
    assert set(ohio) == SHIFT_FIELDS
    assert ohio["state"] == "Ohio"
    assert ohio["dem_shift"] == 15
    assert ohio["gop_shift"] == -15
    assert ohio["total_shift"] == 0
    assert ohio["dem_pct_2020"] == 40
    assert ohio["dem_pct_2024"] == 55
    assert ohio["gop_pct_2020"] == 60
    assert ohio["gop_pct_2024"] == 45
    assert ohio["margin_shift"] == 15


def test_zero_total_excluded_but_listed() -> None:
    year_a = [county("Alaska", 10, 20, 30), county("Guam", 0, 0, 0), county("Iowa", 5, 5, 10)]
    year_b = [county("Alaska", 12, 18, 30), county("Guam", 3, 4, 7), county("Iowa", 0, 0, 0)]

    result = aggregate(year_a, year_b)

    assert result.all_state_names == ["Alaska", "Guam", "Iowa"]
    assert set(result.state_shifts) == {"Alaska"}


def test_state_only_in_later_year_excluded() -> None:
    result = aggregate([county("Ohio", 1, 1, 2)], [county("Ohio", 1, 1, 2), county("Utah", 3, 4, 7)])

    assert "Utah" in result.all_state_names
    assert "Utah" not in result.state_shifts


def test_negative_total_excluded() -> None:
    result = aggregate([county("Ohio", 1, 1, -2)], [county("Ohio", 1, 1, 2)])

    assert result.all_state_names == ["Ohio"]
    assert result.state_shifts == {}


def test_counties_summed_per_state() -> None:
    split = [county("Ohio", 10, 20, 35), county("Ohio", 30, 40, 75), county("Ohio", 0, 5, 5)]
    single = [county("Ohio", 40, 65, 115)]
    year_b = [county("Ohio", 50, 50, 110)]

    assert aggregate(split, year_b) == aggregate(single, year_b)


def test_identical_shares_have_zero_margin_shift() -> None:
    result = aggregate([county("Maine", 45, 50, 100)], [county("Maine", 90, 100, 200)])

    maine = result.state_shifts["Maine"]
    assert maine["margin_shift"] == 0
    assert maine["dem_shift"] == 45
    assert maine["total_shift"] == 100


def test_margin_shift_is_dem_share_difference() -> None:
    result = aggregate(
        [county("Nevada", 703_486, 669_890, 1_405_376)],
        [county("Nevada", 705_197, 751_205, 1_484_840)],
    )

    nevada = result.state_shifts["Nevada"]
    assert nevada["margin_shift"] == nevada["dem_pct_2024"] - nevada["dem_pct_2020"]
    assert nevada["margin_shift"] < 0
    assert nevada["dem_pct_2020"] == pytest.approx(50.0568, abs=1e-4)


def test_shares_within_bounds() -> None:
    year_a = [
        county("A", 0, 10, 10),
        county("B", 10, 0, 10),
        county("C", 3, 5, 9),
        county("C", 7, 1, 9),
    ]
    year_b = [county("A", 10, 0, 10), county("B", 0, 10, 10), county("C", 1, 1, 3)]

    result = aggregate(year_a, year_b)

    assert set(result.state_shifts) == {"A", "B", "C"}
    for shift in result.state_shifts.values():
        for field in ("dem_pct_2020", "dem_pct_2024", "gop_pct_2020", "gop_pct_2024"):
            assert 0 <= shift[field] <= 100
        assert -100 <= shift["margin_shift"] <= 100


def test_row_order_does_not_matter() -> None:
    year_a = [county("Ohio", 10, 20, 30), county("Iowa", 5, 6, 12), county("Ohio", 7, 8, 16)]
    year_b = [county("Iowa", 6, 6, 13), county("Ohio", 20, 20, 45)]

    first = aggregate(year_a, year_b)
    second = aggregate(list(reversed(year_a)), list(reversed(year_b)))

    assert first == second
    assert aggregate(year_a, year_b) == first


def test_state_names_sorted_ordinally() -> None:
    rows = [county(name, 1, 1, 2) for name in ("ohio", "Wyoming", "Alabama", "New York")]

    result = aggregate(rows, rows)

    assert result.all_state_names == ["Alabama", "New York", "Wyoming", "ohio"]


def test_non_finite_votes_count_as_zero() -> None:
    year_a = [
        county("Ohio", 40, 60, 100),
        county("Ohio", "n/a", 5, 5),
        county("Ohio", float("nan"), None, float("inf")),
    ]
    year_b = [county("Ohio", 55, 45, 100), county("Ohio", 5, float("-inf"), 5)]

    result = aggregate(year_a, year_b)

    ohio = result.state_shifts["Ohio"]
    for field, value in ohio.items():
        if field != "state":
            assert math.isfinite(value), field
    assert ohio["dem_pct_2020"] == pytest.approx(40 * 100 / 105)
    assert ohio["dem_shift"] == 20
    assert ohio["gop_shift"] == -20


def test_rows_without_state_are_dropped() -> None:
    year_a = [county("Ohio", 1, 1, 2), county(None, 100, 100, 200)]

    totals = group_and_sum(year_a)

    assert list(totals.index) == ["Ohio"]
    assert totals.loc["Ohio", "total_votes"] == 2


def test_group_and_sum_accepts_dataframe() -> None:
    df = pd.DataFrame(
        {
            "state_name": ["Ohio", "Ohio", "Iowa"],
            "votes_dem": [1, 2, 3],
            "votes_gop": [4, 5, 6],
            "total_votes": [5, 8, 10],
            "county_name": ["a", "b", "c"],
        }
    )

    totals = group_and_sum(df)

    assert list(totals.columns) == ["dem_votes", "gop_votes", "total_votes"]
    assert totals.loc["Ohio"].tolist() == [3, 9, 13]
    assert totals.loc["Iowa"].tolist() == [3, 6, 10]


def test_inputs_not_mutated() -> None:
    df = pd.DataFrame(
        {
            "state_name": ["Ohio", None],
            "votes_dem": ["x", 1],
            "votes_gop": [1, np.inf],
            "total_votes": [2, 3],
        }
    )
    before = df.copy()
    rows = [county("Ohio", 1, 1, 2)]

    aggregate(df, rows)

    pd.testing.assert_frame_equal(df, before)
    assert rows == [county("Ohio", 1, 1, 2)]


def test_missing_vote_column_counts_as_zero() -> None:
    totals = group_and_sum([{"state_name": "Ohio", "votes_dem": 4, "total_votes": 9}])

    assert totals.loc["Ohio", "gop_votes"] == 0
    assert totals.loc["Ohio", "dem_votes"] == 4


def test_empty_inputs() -> None:
    result = aggregate([], pd.DataFrame())

    assert result.state_shifts == {}
    assert result.all_state_names == []


def test_one_empty_year() -> None:
    result = aggregate([county("Ohio", 1, 1, 2)], [])

    assert result.all_state_names == ["Ohio"]
    assert result.state_shifts == {}


def test_coerce_votes() -> None:
    values = pd.Series(["12", "abc", None, 3.5, float("inf")], name="votes_dem")

    coerced = coerce_votes(values)

    assert coerced.tolist() == [12, 0, 0, 3.5, 0]


def test_compute_state_shifts_from_totals() -> None:
    totals_a = pd.DataFrame(
        {"dem_votes": [40], "gop_votes": [60], "total_votes": [100]}, index=pd.Index(["Ohio"])
    )
    totals_b = pd.DataFrame(
        {"dem_votes": [55], "gop_votes": [45], "total_votes": [100]}, index=pd.Index(["Ohio"])
    )

    result = compute_state_shifts(totals_a, totals_b)

    assert result.state_shifts["Ohio"]["margin_shift"] == 15


def test_shifts_to_frame_skips_excluded_states() -> None:
    result = aggregate(
        [county("Texas", 1, 1, 2), county("Ohio", 1, 1, 2), county("Guam", 0, 0, 0)],
        [county("Texas", 2, 1, 3), county("Ohio", 1, 2, 3), county("Guam", 1, 1, 2)],
    )

    frame = shifts_to_frame(result)

    assert frame["state"].tolist() == ["Ohio", "Texas"]
    assert frame.columns[0] == "state"


def test_overflowing_float_totals_are_excluded() -> None:
    year_a = [county("Ohio", 1e308, 1e308, 1e308), county("Ohio", 1e308, 1e308, 1e308)]
    year_b = [county("Ohio", 5, 5, 10)]

    result = aggregate(year_a, year_b)

    assert result.all_state_names == ["Ohio"]
    assert result.state_shifts == {}


def test_shares_that_overflow_are_excluded() -> None:
    year_a = [county("Ohio", 1e307, 0, 1e307), county("Iowa", 40, 60, 100)]
    year_b = [county("Ohio", 5, 5, 10), county("Iowa", 55, 45, 100)]

    result = aggregate(year_a, year_b)

    assert result.all_state_names == ["Iowa", "Ohio"]
    assert list(result.state_shifts) == ["Iowa"]


def test_large_integer_totals_do_not_wrap() -> None:
    big = 2 ** 62
    year_a = [county("Ohio", big, big, big), county("Ohio", big, big, big)]
    year_b = [county("Ohio", 5, 5, 10)]

    result = aggregate(year_a, year_b)

    ohio = result.state_shifts["Ohio"]
    for field, value in ohio.items():
        if field != "state":
            assert math.isfinite(value), field
    assert ohio["dem_pct_2020"] == 100
    assert ohio["dem_shift"] == pytest.approx(5 - 2 ** 63)


def test_integer_counts_stay_integers() -> None:
    totals = group_and_sum([county("Ohio", 1, 2, 3), county("Ohio", 4.0, 5, 9)])

    assert all(dtype.kind == "i" for dtype in totals.dtypes)
    assert group_and_sum([county("Ohio", 1.5, 2, 3)])["dem_votes"].dtype.kind == "f"
