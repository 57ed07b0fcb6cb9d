"""
02_aggregate_state_shifts.py
Aggregate county results to states and calculate shifts between two elections.

This script:
1. Loads county-level results for both years
2. Sums votes by state
3. Calculates vote, share and margin shifts per state
4. Reports states left out of the comparison
5. Exports state shifts

Usage:
    python processing/02_aggregate_state_shifts.py [--year-a YEAR] [--year-b YEAR]
        [--input-a CSV] [--input-b CSV] [--output CSV]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple
import pandas as pd

# Add parent directory to path
sys.path.append(str(Path(__file__).parent))
from config import (
    YEAR_A, YEAR_B, LOG_DIR, LOG_FORMAT,
    get_results_file_path, get_shift_file_path, validate_year_pair
)
from utils.data_loader import load_county_results, check_data_quality, log_data_quality
from utils.shift_calculator import AggregationResult, aggregate, shifts_to_frame

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    handlers=[
        logging.FileHandler(LOG_DIR / "02_aggregate_state_shifts.log", encoding='utf-8'),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)


# ============================================================================
# DATA LOADING
# ============================================================================

def load_election_year(year: int, file_path: Optional[Path] = None) -> pd.DataFrame:
    """
    Load county results for a specific year.

    Args:
        year: Election year
        file_path: Override for the downloaded results file

    Returns:
        DataFrame with county results
    """
    file_path = file_path or get_results_file_path(year)

    if not file_path.exists():
        raise FileNotFoundError(
            f"County results not found for {year}: {file_path}\n"
            "Please run 01_download_results.py first."
        )

    logger.info(f"Loading {year} data: {file_path.name}")
    df = load_county_results(file_path)

    log_data_quality(check_data_quality(df), str(year))

    return df


# ============================================================================
# ANALYSIS
# ============================================================================

def excluded_states(result: AggregationResult) -> List[str]:
    """States seen in either year that have no shift entry."""
    return [state for state in result.all_state_names if state not in result.state_shifts]


def analyze_shifts(result: AggregationResult, year_a: int, year_b: int) -> Dict:
    """
    Summarize state shifts.

    Args:
        result: Aggregated state shifts
        year_a: First year
        year_b: Second year

    Returns:
        Dictionary with analysis results
    """
    logger.info(f"\nAnalyzing state shifts: {year_a} -> {year_b}")

    shifts_df = shifts_to_frame(result)
    missing = excluded_states(result)

    analysis = {
        'year_a': year_a,
        'year_b': year_b,
        'total_states': len(result.all_state_names),
        'states_compared': len(shifts_df),
        'states_excluded': len(missing),
        'states_shift_dem': int((shifts_df['margin_shift'] > 0).sum()),
        'states_shift_rep': int((shifts_df['margin_shift'] < 0).sum()),
        'states_no_shift': int((shifts_df['margin_shift'] == 0).sum()),
        'dem_vote_change': shifts_df['dem_shift'].sum(),
        'gop_vote_change': shifts_df['gop_shift'].sum(),
        'total_vote_change': shifts_df['total_shift'].sum(),
    }

    logger.info(f"  States compared: {analysis['states_compared']} of {analysis['total_states']}")
    if missing:
        logger.info(f"  Excluded (no votes in one year): {', '.join(missing)}")
    logger.info(f"  States shifting toward Democrats: {analysis['states_shift_dem']}")
    logger.info(f"  States shifting toward Republicans: {analysis['states_shift_rep']}")
    logger.info(f"  Democratic vote change: {analysis['dem_vote_change']:+,.0f}")
    logger.info(f"  Republican vote change: {analysis['gop_vote_change']:+,.0f}")

    if not shifts_df.empty:
        largest = shifts_df.reindex(
            shifts_df['margin_shift'].abs().sort_values(ascending=False).index
        ).head(5)
        logger.info(f"  Largest margin shifts:\n"
                    f"{largest[['state', 'margin_shift']].to_string(index=False)}")

    return analysis


# ============================================================================
# EXPORT
# ============================================================================

def export_state_shifts(result: AggregationResult, output_file: Path) -> Path:
    """
    Export state shifts to CSV.

    Args:
        result: Aggregated state shifts
        output_file: Destination CSV

    Returns:
        Path to exported file
    """
    logger.info(f"\nExporting to: {output_file}")

    output_file.parent.mkdir(parents=True, exist_ok=True)
    shifts_to_frame(result).to_csv(output_file, index=False)

    file_size = output_file.stat().st_size / 1024
    logger.info(f"  File size: {file_size:.1f} KB")

    return output_file


# ============================================================================
# MAIN
# ============================================================================

def process_state_shifts(
    year_a: int,
    year_b: int,
    input_a: Optional[Path] = None,
    input_b: Optional[Path] = None,
    output_file: Optional[Path] = None
) -> Tuple[AggregationResult, Dict]:
    """
    Load both years, aggregate, analyze and export.

    Returns:
        Tuple of (AggregationResult, analysis dict)
    """
    logger.info("=" * 70)
    logger.info(f"STATE SHIFTS: {year_a} -> {year_b}")
    logger.info("=" * 70)

    counties_a = load_election_year(year_a, input_a)
    counties_b = load_election_year(year_b, input_b)

    result = aggregate(counties_a, counties_b)

    analysis = analyze_shifts(result, year_a, year_b)

    export_state_shifts(result, output_file or get_shift_file_path(year_a, year_b))

    logger.info(f"\n[OK] Successfully processed state shifts: {year_a} -> {year_b}")

    return result, analysis


def main(argv=None):
    """Main processing function."""
    parser = argparse.ArgumentParser(
        description="Aggregate county results to state-level shifts"
    )
    parser.add_argument("--year-a", type=int, default=YEAR_A,
                        help=f"Earlier election year (default: {YEAR_A})")
    parser.add_argument("--year-b", type=int, default=YEAR_B,
                        help=f"Later election year (default: {YEAR_B})")
    parser.add_argument("--input-a", type=Path,
                        help="County results CSV for the earlier year")
    parser.add_argument("--input-b", type=Path,
                        help="County results CSV for the later year")
    parser.add_argument("--output", type=Path,
                        help="Output CSV (default: data/processed/state_shifts_A_to_B.csv)")

    args = parser.parse_args(argv)

    if not validate_year_pair(args.year_a, args.year_b):
        logger.error("year-a must be less than year-b")
        return 1

    try:
        process_state_shifts(args.year_a, args.year_b, args.input_a, args.input_b, args.output)

        logger.info("\n" + "=" * 70)
        logger.info("[OK] State shift calculations complete")
        logger.info("=" * 70)

        return 0

    except (FileNotFoundError, ValueError) as e:
        logger.error(f"\n[ERROR] Processing failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
