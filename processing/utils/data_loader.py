import pandas as pd
from pathlib import Path
from typing import Optional, List
import logging

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ['state_name', 'votes_dem', 'votes_gop', 'total_votes']


def load_county_results(
    file_path: Path,
    required_columns: Optional[List[str]] = None
) -> pd.DataFrame:
    """
    Load county-level results from CSV file.

    Args:
        file_path: Path to CSV file
        required_columns: Columns that must be present (defaults to the
            state name and vote count columns)

    Returns:
        DataFrame with one row per county
    """
    logger.info(f"Loading county results from {file_path}")

    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    required = required_columns or REQUIRED_COLUMNS

    df = pd.read_csv(file_path, low_memory=False, skip_blank_lines=True)

    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"{file_path.name} is missing required columns: {missing}")

    logger.info(f"Loaded {len(df):,} rows")

    return df


def check_data_quality(df: pd.DataFrame, required_columns: Optional[List[str]] = None) -> dict:
    """
    Perform basic data quality checks.

    Args:
        df: DataFrame to check
        required_columns: List of required column names

    Returns:
        Dictionary with quality metrics
    """
    required = required_columns or REQUIRED_COLUMNS

    metrics = {
        'total_rows': len(df),
        'missing_columns': [],
        'null_counts': {},
        'non_numeric_counts': {},
        'duplicate_rows': 0
    }

    # Check for missing columns
    for col in required:
        if col not in df.columns:
            metrics['missing_columns'].append(col)

    # Count nulls in each column
    for col in df.columns:
        null_count = int(df[col].isnull().sum())
        if null_count > 0:
            metrics['null_counts'][col] = null_count

    # Values present but not parseable as numbers
    for col in required:
        if col in df.columns and col != 'state_name':
            numeric = pd.to_numeric(df[col], errors='coerce')
            bad = int((numeric.isna() & df[col].notna()).sum())
            if bad > 0:
                metrics['non_numeric_counts'][col] = bad

    # Check for duplicates
    metrics['duplicate_rows'] = int(df.duplicated().sum())

    return metrics


def log_data_quality(metrics: dict, label: str) -> None:
    """Log the output of check_data_quality."""
    logger.info(f"  {label}: {metrics['total_rows']:,} rows")
    if metrics['missing_columns']:
        logger.warning(f"  {label}: missing columns {metrics['missing_columns']}")
    for col, count in metrics['null_counts'].items():
        logger.warning(f"  {label}: {count} null values in '{col}'")
    for col, count in metrics['non_numeric_counts'].items():
        logger.warning(f"  {label}: {count} non-numeric values in '{col}' (counted as 0)")
    if metrics['duplicate_rows']:
        logger.warning(f"  {label}: {metrics['duplicate_rows']} duplicate rows")
