"""
Pick and order states for the dashboard charts.
"""

from typing import Any, Dict, List, Optional, Sequence, Union
import logging

from .shift_calculator import AggregationResult

logger = logging.getLogger(__name__)

SHIFT_METRICS = ('margin_shift', 'dem_shift', 'gop_shift')

# sort mode -> metric ranked by magnitude (None = alphabetical)
SORT_MODE_METRICS = {
    'alphabet': None,
    'margin': 'margin_shift',
    'dem_shift': 'dem_shift',
    'gop_shift': 'gop_shift',
}

DISPLAY_COUNT_TIERS = (5, 10, 20, 30)
ALL_STATES = 'all'

MIN_CHART_HEIGHT = 400
CHART_ROW_HEIGHT = 40


def _take(names: List[str], n: Optional[int]) -> List[str]:
    if n is None:
        return names
    if n <= 0:
        return []
    return names[:n]


def alphabetical(all_state_names: Sequence[str], n: Optional[int] = None) -> List[str]:
    """
    First n state names in ascending order.

    States without a shift entry are kept, matching the "all states" picker.
    """
    return _take(sorted(all_state_names), n)


def top_n_by_shift(result: AggregationResult, metric: str, n: Optional[int] = None) -> List[str]:
    """
    States with the largest absolute shift for a metric.

    States without a shift entry are left out. Ties keep alphabetical order.

    Args:
        result: Aggregated state shifts
        metric: One of margin_shift, dem_shift, gop_shift
        n: Number of states to return (None for all)

    Returns:
        State names, largest magnitude first
    """
    if metric not in SHIFT_METRICS:
        raise ValueError(f"Unknown shift metric: {metric!r} (expected one of {SHIFT_METRICS})")

    candidates = [state for state in sorted(result.all_state_names)
                  if state in result.state_shifts]

    skipped = len(result.all_state_names) - len(candidates)
    if skipped:
        logger.debug(f"Ranking {len(candidates)} states by {metric}; {skipped} have no shift")

    # sorted() is stable, so equal magnitudes stay alphabetical
    ranked = sorted(candidates,
                    key=lambda state: abs(result.state_shifts[state][metric]),
                    reverse=True)

    return _take(ranked, n)


def select_states(result: AggregationResult, sort_mode: str = 'alphabet',
                  count: Optional[int] = 10) -> List[str]:
    """
    States to chart for a sort mode and display count.

    Args:
        result: Aggregated state shifts
        sort_mode: alphabet, margin, dem_shift or gop_shift
        count: Number of states to show (None for all)

    Returns:
        Ordered list of state names
    """
    if sort_mode not in SORT_MODE_METRICS:
        raise ValueError(f"Unknown sort mode: {sort_mode!r} (expected one of {list(SORT_MODE_METRICS)})")

    metric = SORT_MODE_METRICS[sort_mode]
    if metric is None:
        return alphabetical(result.all_state_names, count)
    return top_n_by_shift(result, metric, count)


def resolve_display_count(value: Union[str, int, float, None]) -> Optional[int]:
    """
    Parse a display count selector value.

    Returns:
        5, 10, 20 or 30, or None for all states
    """
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip().lower()
        if text == ALL_STATES:
            return None
        try:
            value = float(text)
        except ValueError:
            raise ValueError(f"Invalid display count: {value!r}")

    if isinstance(value, bool) or value not in DISPLAY_COUNT_TIERS:
        raise ValueError(f"Invalid display count: {value!r} (expected one of "
                         f"{list(DISPLAY_COUNT_TIERS)} or '{ALL_STATES}')")
    return int(value)


def chart_rows(result: AggregationResult, selected: Sequence[str]) -> List[Dict[str, Any]]:
    """Shift records for the selected states; states without a shift get no bar."""
    return [result.state_shifts[state] for state in selected if state in result.state_shifts]


def chart_height(n_rows: int) -> int:
    """Chart height in pixels for a number of bars."""
    return max(MIN_CHART_HEIGHT, n_rows * CHART_ROW_HEIGHT)
