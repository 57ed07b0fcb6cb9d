"""
03_export_for_frontend.py
Export state shifts as a single JSON payload for the dashboard.

This script:
1. Aggregates both years of county results
2. Cleans values for JSON (numpy scalars, NaN, infinities)
3. Adds the default selection and chart control options
4. Validates the written file

Usage:
    python processing/03_export_for_frontend.py [--year-a YEAR] [--year-b YEAR] [--output-dir DIR]
        [--sort-mode MODE] [--display-count {5,10,20,30,all}]
"""

import argparse
import logging
import sys
import json
from pathlib import Path
from typing import Any, Dict, Optional
import pandas as pd
import numpy as np

# Add parent directory to path
sys.path.append(str(Path(__file__).parent))
from config import (
    YEAR_A, YEAR_B, EXPORTS_DIR, FRONTEND_FILE_NAME, LOG_DIR, LOG_FORMAT,
    PARTY_COLORS, SORT_MODE_LABELS, DEFAULT_SORT_MODE, DEFAULT_DISPLAY_COUNT,
    get_results_file_path, validate_year_pair
)
from utils.data_loader import load_county_results
from utils.shift_calculator import AggregationResult, aggregate
from utils.state_selection import (
    DISPLAY_COUNT_TIERS, ALL_STATES, chart_height, chart_rows, resolve_display_count,
    select_states
)

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    handlers=[
        logging.FileHandler(LOG_DIR / "03_export_frontend.log", encoding='utf-8'),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

PAYLOAD_VERSION = '1.0.0'


# ============================================================================
# VALUE CLEANING FOR JSON
# ============================================================================

def clean_value_for_json(value: Any) -> Any:
    """
    Clean a value for JSON export.

    Args:
        value: Value to clean

    Returns:
        JSON-serializable value or None
    """
    if value is None:
        return None

    # Handle numpy scalars
    if isinstance(value, np.generic):
        value = value.item()

    if isinstance(value, bool):
        return value

    if isinstance(value, float):
        if np.isnan(value) or np.isinf(value):
            return None
        if value.is_integer():
            return int(value)
        return value

    if isinstance(value, int):
        return value

    if pd.isna(value):
        return None

    return str(value)


def clean_state_shift(state_shift: Dict[str, Any]) -> Dict[str, Any]:
    return {key: (value if key == 'state' else clean_value_for_json(value))
            for key, value in state_shift.items()}


# ============================================================================
# PAYLOAD
# ============================================================================

def build_payload(
    result: AggregationResult,
    year_a: int,
    year_b: int,
    sort_mode: str = DEFAULT_SORT_MODE,
    display_count: Optional[int] = DEFAULT_DISPLAY_COUNT
) -> Dict[str, Any]:
    """
    Build the dashboard payload.

    Args:
        result: Aggregated state shifts
        year_a: First year
        year_b: Second year
        sort_mode: Ordering of the default selection
        display_count: Size of the default selection (None for all)

    Returns:
        JSON-ready dictionary
    """
    default_selection = select_states(result, sort_mode, display_count)

    return {
        'version': PAYLOAD_VERSION,
        'generated_at': pd.Timestamp.now().isoformat(),
        'years': {'a': year_a, 'b': year_b},
        'state_shifts': {
            state: clean_state_shift(shift) for state, shift in result.state_shifts.items()
        },
        'all_state_names': list(result.all_state_names),
        'default_selection': default_selection,
        'controls': {
            'sort_modes': [
                {'value': mode, 'label': label} for mode, label in SORT_MODE_LABELS.items()
            ],
            'default_sort_mode': sort_mode,
            'display_counts': list(DISPLAY_COUNT_TIERS) + [ALL_STATES],
            'default_display_count': ALL_STATES if display_count is None else display_count,
        },
        'chart': {
            'colors': PARTY_COLORS,
            'default_height': chart_height(len(chart_rows(result, default_selection))),
        },
    }


def write_payload(payload: Dict[str, Any], output_dir: Path) -> Path:
    """Write the payload as compact JSON."""
    output_dir.mkdir(parents=True, exist_ok=True)
    output_file = output_dir / FRONTEND_FILE_NAME

    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump(payload, f, separators=(',', ':'), allow_nan=False)

    size_kb = output_file.stat().st_size / 1024
    logger.info(f"Exported: {output_file.name} ({size_kb:.1f} KB, "
                f"{len(payload['state_shifts'])} states)")

    return output_file


# ============================================================================
# VALIDATION
# ============================================================================

def validate_export(output_file: Path) -> Dict[str, Any]:
    """
    Validate the exported file.

    Args:
        output_file: Exported JSON file

    Returns:
        Validation results
    """
    logger.info("\n" + "=" * 70)
    logger.info("VALIDATION")
    logger.info("=" * 70)

    validation = {
        'success': True,
        'errors': [],
        'warnings': []
    }

    if not output_file.exists():
        validation['success'] = False
        validation['errors'].append(f'Missing: {output_file.name}')
        logger.error(f"✗ Missing: {output_file.name}")
        return validation

    try:
        with open(output_file, encoding='utf-8') as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        validation['success'] = False
        validation['errors'].append(f'Invalid JSON: {e}')
        logger.error(f"✗ Invalid JSON: {e}")
        return validation

    all_names = set(payload.get('all_state_names', []))
    unknown = sorted(set(payload.get('state_shifts', {})) - all_names)
    if unknown:
        validation['success'] = False
        validation['errors'].append(f'States missing from all_state_names: {unknown}')
        logger.error(f"✗ States missing from all_state_names: {unknown}")

    no_bar = sorted(all_names - set(payload.get('state_shifts', {})))
    if no_bar:
        validation['warnings'].append(f'States without shifts: {no_bar}')
        logger.warning(f"⚠ {len(no_bar)} states have no shift and will render no bar: {no_bar}")

    if validation['success']:
        logger.info(f"✓ {output_file.name} is valid")

    return validation


# ============================================================================
# MAIN
# ============================================================================

def main(argv=None):
    """Main export function."""
    parser = argparse.ArgumentParser(
        description="Export state shifts for the dashboard"
    )
    parser.add_argument("--year-a", type=int, default=YEAR_A,
                        help=f"Earlier election year (default: {YEAR_A})")
    parser.add_argument("--year-b", type=int, default=YEAR_B,
                        help=f"Later election year (default: {YEAR_B})")
    parser.add_argument("--input-a", type=Path,
                        help="County results CSV for the earlier year")
    parser.add_argument("--input-b", type=Path,
                        help="County results CSV for the later year")
    parser.add_argument("--output-dir", type=Path, default=EXPORTS_DIR,
                        help="Dashboard data output directory")
    parser.add_argument("--sort-mode", choices=list(SORT_MODE_LABELS), default=DEFAULT_SORT_MODE,
                        help=f"Ordering of the default selection (default: {DEFAULT_SORT_MODE})")
    parser.add_argument("--display-count", type=resolve_display_count, default=DEFAULT_DISPLAY_COUNT,
                        help=f"States in the default selection: 5, 10, 20, 30 or all "
                             f"(default: {DEFAULT_DISPLAY_COUNT})")

    args = parser.parse_args(argv)

    if not validate_year_pair(args.year_a, args.year_b):
        logger.error("year-a must be less than year-b")
        return 1

    try:
        logger.info("=" * 70)
        logger.info("DASHBOARD DATA EXPORT")
        logger.info("=" * 70)

        counties_a = load_county_results(args.input_a or get_results_file_path(args.year_a))
        counties_b = load_county_results(args.input_b or get_results_file_path(args.year_b))

        result = aggregate(counties_a, counties_b)

        payload = build_payload(result, args.year_a, args.year_b,
                                args.sort_mode, args.display_count)
        output_file = write_payload(payload, args.output_dir)

        validation = validate_export(output_file)
        if not validation['success']:
            logger.warning("\n⚠ Some issues detected - see validation above")
            return 1

        logger.info("\n✓ Ready for dashboard!")
        return 0

    except (FileNotFoundError, ValueError) as e:
        logger.error(f"\n[ERROR] Export failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
