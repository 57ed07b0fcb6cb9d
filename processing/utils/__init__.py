"""
Utility functions for state shift processing.
"""

from .data_loader import load_county_results, check_data_quality
from .shift_calculator import AggregationResult, aggregate, group_and_sum, compute_state_shifts
from .state_selection import top_n_by_shift, alphabetical, select_states

__all__ = [
    'load_county_results',
    'check_data_quality',
    'AggregationResult',
    'aggregate',
    'group_and_sum',
    'compute_state_shifts',
    'top_n_by_shift',
    'alphabetical',
    'select_states'
]
