"""
01_download_results.py
Download county-level presidential results for the two compared elections.

Usage:
    python processing/01_download_results.py [--year-a YEAR] [--year-b YEAR] [--force]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List
import requests
from tqdm import tqdm

# Add parent directory to path to import config
sys.path.append(str(Path(__file__).parent))
from config import (
    YEAR_A, YEAR_B, LOG_DIR, LOG_FORMAT,
    get_results_url, get_results_file_path
)

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    handlers=[
        logging.FileHandler(LOG_DIR / "01_download.log", encoding='utf-8'),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 60  # seconds
CHUNK_SIZE = 64 * 1024


def stream_to_file(response: requests.Response, output_path: Path) -> int:
    """
    Write a streamed response to disk through a .part file.

    The .part file is renamed onto output_path only once every chunk is
    written, and removed if the transfer or the write fails.

    Returns:
        Number of bytes written
    """
    partial_path = output_path.with_name(output_path.name + ".part")
    expected = int(response.headers.get('content-length', 0))
    written = 0

    try:
        with open(partial_path, 'wb') as f, tqdm(
            desc=output_path.name, total=expected,
            unit='B', unit_scale=True, unit_divisor=1024,
        ) as pbar:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                written += f.write(chunk)
                pbar.update(len(chunk))
    except BaseException:
        partial_path.unlink(missing_ok=True)
        raise

    partial_path.replace(output_path)
    return written


def download_file(url: str, output_path: Path, force: bool = False) -> bool:
    """
    Fetch one results CSV unless it is already on disk.

    Args:
        url: CSV location
        output_path: Where the CSV ends up
        force: Fetch again even if output_path exists

    Returns:
        True if output_path holds the CSV afterwards
    """
    if output_path.exists() and not force:
        logger.info(f"Already downloaded: {output_path.name}")
        return True

    logger.info(f"Fetching {url}")
    output_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        response = requests.get(url, stream=True, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        written = stream_to_file(response, output_path)
    except (requests.exceptions.RequestException, OSError) as e:
        logger.error(f"Failed to download {url}: {e}")
        return False

    logger.info(f"Saved {output_path.name} ({written / 1024:.1f} KB)")
    return True


def download_results(years: List[int], force: bool = False) -> Dict[int, bool]:
    """
    Download county results for each year.

    Args:
        years: Election years to fetch
        force: If True, re-download existing files

    Returns:
        Mapping of year to download success
    """
    logger.info("=" * 70)
    logger.info("COUNTY RESULTS")
    logger.info("=" * 70)

    status = {}
    for year in years:
        status[year] = download_file(get_results_url(year), get_results_file_path(year), force)

    return status


def verify_downloads(years: List[int]) -> dict:
    """
    Verify that all required data files are present.

    Returns:
        Dictionary with verification status
    """
    logger.info("=" * 70)
    logger.info("VERIFICATION")
    logger.info("=" * 70)

    status = {'missing_years': [], 'all_ready': False}

    for year in years:
        path = get_results_file_path(year)
        if path.exists() and path.stat().st_size > 0:
            logger.info(f"{year}: {path.name} ({path.stat().st_size / 1024:.1f} KB)")
        else:
            logger.warning(f"{year}: NOT FOUND")
            status['missing_years'].append(year)

    status['all_ready'] = not status['missing_years']

    if status['all_ready']:
        logger.info("\nAll required data is ready for processing!")
    else:
        logger.warning("\nSome data files are missing. Please download them.")

    logger.info("=" * 70)

    return status


def main(argv=None):
    """Main download function."""
    parser = argparse.ArgumentParser(
        description="Download county-level results for both election years"
    )
    parser.add_argument(
        "--year-a",
        type=int,
        default=YEAR_A,
        help=f"Earlier election year (default: {YEAR_A})"
    )
    parser.add_argument(
        "--year-b",
        type=int,
        default=YEAR_B,
        help=f"Later election year (default: {YEAR_B})"
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Force re-download of existing files"
    )

    args = parser.parse_args(argv)

    logger.info("Starting data download process...")
    logger.info(f"Force mode: {args.force}")

    years = [args.year_a, args.year_b]
    download_results(years, args.force)

    status = verify_downloads(years)

    return 0 if status['all_ready'] else 1


if __name__ == "__main__":
    sys.exit(main())
