"""
Functions for aggregating county results to states and calculating shifts.
"""

from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Union
import logging

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

STATE_COLUMN = 'state_name'

# county column -> state totals column
VOTE_COLUMNS = {
    'votes_dem': 'dem_votes',
    'votes_gop': 'gop_votes',
    'total_votes': 'total_votes',
}

TOTALS_COLUMNS = list(VOTE_COLUMNS.values())

CountyRecords = Union[pd.DataFrame, Iterable[Mapping[str, Any]]]


class AggregationResult(NamedTuple):
    """State shifts keyed by state name, plus every state name seen in either year."""
    state_shifts: Dict[str, Dict[str, Any]]
    all_state_names: List[str]


def empty_state_totals() -> pd.DataFrame:
    """State totals table with no states."""
    totals = pd.DataFrame(columns=TOTALS_COLUMNS, dtype='int64')
    totals.index.name = STATE_COLUMN
    return totals


def _as_frame(counties: CountyRecords) -> pd.DataFrame:
    if isinstance(counties, pd.DataFrame):
        return counties
    return pd.DataFrame(list(counties))


def coerce_votes(values: pd.Series) -> pd.Series:
    """
    Convert a vote column to numbers, counting anything non-finite as zero.

    Args:
        values: Raw column (may hold strings, None, NaN or infinities)

    Returns:
        Numeric Series with no NaN or infinite values
    """
    numeric = pd.to_numeric(values, errors='coerce')
    numeric = numeric.replace([np.inf, -np.inf], np.nan)

    bad = numeric.isna().sum()
    if bad > 0:
        logger.warning(f"Coerced {bad} non-finite values in '{values.name}' to 0")
        numeric = numeric.fillna(0)

    return numeric


MAX_EXACT_FLOAT_INT = 2 ** 53


def _restore_integer_counts(totals: pd.DataFrame) -> pd.DataFrame:
    """Go back to int64 when every total is a whole number float64 holds exactly."""
    values = totals.to_numpy()
    if (np.isfinite(values).all()
            and (np.abs(values) < MAX_EXACT_FLOAT_INT).all()
            and (values == np.round(values)).all()):
        return totals.astype('int64')
    return totals


def group_and_sum(counties: CountyRecords) -> pd.DataFrame:
    """
    Sum county vote counts by state.

    Args:
        counties: County rows with state_name, votes_dem, votes_gop, total_votes

    Returns:
        DataFrame indexed by state name with dem_votes, gop_votes, total_votes
    """
    df = _as_frame(counties)

    if STATE_COLUMN not in df.columns:
        logger.warning(f"No '{STATE_COLUMN}' column in {len(df):,} rows; no states to sum")
        return empty_state_totals()

    votes = pd.DataFrame(index=df.index)
    for county_col, totals_col in VOTE_COLUMNS.items():
        if county_col in df.columns:
            votes[totals_col] = coerce_votes(df[county_col])
        else:
            logger.warning(f"Missing column '{county_col}', counting it as 0")
            votes[totals_col] = 0

    states = df[STATE_COLUMN]
    has_state = states.notna()
    if not has_state.all():
        logger.warning(f"Dropping {(~has_state).sum()} rows without a state name")

    votes = votes[has_state].copy()
    votes[STATE_COLUMN] = states[has_state].astype(str)

    # float64 so large counts can't wrap around like int64 does
    votes[TOTALS_COLUMNS] = votes[TOTALS_COLUMNS].astype('float64')
    totals = votes.groupby(STATE_COLUMN)[TOTALS_COLUMNS].sum()

    overflowed = ~np.isfinite(totals.to_numpy()).all(axis=1)
    if overflowed.any():
        logger.warning(f"Vote totals overflowed for {overflowed.sum()} states: "
                       f"{list(totals.index[overflowed])}")

    totals = _restore_integer_counts(totals)

    logger.debug(f"Summed {len(votes):,} counties into {len(totals)} states")

    return totals


def calculate_vote_share(totals: pd.DataFrame, party_col: str,
                         total_col: str = 'total_votes') -> pd.Series:
    """
    Calculate a party's share of all votes: 100 * party / total

    Args:
        totals: DataFrame with vote counts
        party_col: Column name for the party's votes
        total_col: Column name for total votes

    Returns:
        Series with share values (0-100 for consistent data)
    """
    return 100 * totals[party_col] / totals[total_col]


def compute_state_shifts(totals_a: pd.DataFrame, totals_b: pd.DataFrame) -> AggregationResult:
    """
    Calculate per-state shifts from year A to year B.

    A state missing from one year counts as zero votes there. States without
    votes in both years get no shift entry but are still listed in
    all_state_names.

    Args:
        totals_a: State totals for year A (reported as *_2020)
        totals_b: State totals for year B (reported as *_2024)

    Returns:
        AggregationResult
    """
    all_state_names = sorted(set(totals_a.index) | set(totals_b.index))

    a = totals_a.reindex(all_state_names, fill_value=0)
    b = totals_b.reindex(all_state_names, fill_value=0)

    finite_a = np.isfinite(a[TOTALS_COLUMNS].to_numpy(dtype='float64')).all(axis=1)
    finite_b = np.isfinite(b[TOTALS_COLUMNS].to_numpy(dtype='float64')).all(axis=1)

    comparable = (a['total_votes'] > 0) & (b['total_votes'] > 0) & finite_a & finite_b
    excluded = comparable.size - comparable.sum()
    if excluded > 0:
        logger.info(f"Excluding {excluded} states without votes in both years")

    a = a[comparable]
    b = b[comparable]

    shifts = pd.DataFrame(index=a.index)
    shifts['dem_shift'] = b['dem_votes'] - a['dem_votes']
    shifts['gop_shift'] = b['gop_votes'] - a['gop_votes']
    shifts['total_shift'] = b['total_votes'] - a['total_votes']
    shifts['dem_pct_2020'] = calculate_vote_share(a, 'dem_votes')
    shifts['dem_pct_2024'] = calculate_vote_share(b, 'dem_votes')
    shifts['gop_pct_2020'] = calculate_vote_share(a, 'gop_votes')
    shifts['gop_pct_2024'] = calculate_vote_share(b, 'gop_votes')

    # Positive = shift toward Democrats
    shifts['margin_shift'] = shifts['dem_pct_2024'] - shifts['dem_pct_2020']

    shifts = shifts[[
        'dem_shift', 'gop_shift', 'total_shift', 'margin_shift',
        'dem_pct_2020', 'dem_pct_2024', 'gop_pct_2020', 'gop_pct_2024',
    ]]

    # Shares of huge finite totals can still overflow
    finite_shifts = np.isfinite(shifts.to_numpy(dtype='float64')).all(axis=1)
    if not finite_shifts.all():
        logger.warning(f"Dropping {(~finite_shifts).sum()} states with non-finite shifts: "
                       f"{list(shifts.index[~finite_shifts])}")
        shifts = shifts[finite_shifts]

    state_shifts = {
        state: {'state': state, **values}
        for state, values in shifts.to_dict(orient='index').items()
    }

    return AggregationResult(state_shifts=state_shifts, all_state_names=all_state_names)


def aggregate(counties_year_a: CountyRecords, counties_year_b: CountyRecords) -> AggregationResult:
    """
    Aggregate two years of county results into state-level shifts.

    Args:
        counties_year_a: County rows for the earlier election
        counties_year_b: County rows for the later election

    Returns:
        AggregationResult with state_shifts and sorted all_state_names
    """
    totals_a = group_and_sum(counties_year_a)
    totals_b = group_and_sum(counties_year_b)

    result = compute_state_shifts(totals_a, totals_b)

    logger.info(f"Calculated shifts for {len(result.state_shifts)} of "
                f"{len(result.all_state_names)} states")

    return result


def shifts_to_frame(result: AggregationResult) -> pd.DataFrame:
    """Flatten state shifts into a DataFrame ordered by state name."""
    columns = ['state', 'dem_shift', 'gop_shift', 'total_shift', 'margin_shift',
               'dem_pct_2020', 'dem_pct_2024', 'gop_pct_2020', 'gop_pct_2024']
    rows = [result.state_shifts[state] for state in result.all_state_names
            if state in result.state_shifts]
    return pd.DataFrame(rows, columns=columns)
