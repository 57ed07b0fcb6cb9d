import os;
from pathlib import Path;
from typing import Dict;

# DATA PATHS =================================================================

PROJECT_ROOT = Path(__file__).parent.parent;
DATA_DIR = Path(os.environ.get("STATE_SHIFT_DATA_DIR", PROJECT_ROOT / "data"));

RAW_DATA_DIR = DATA_DIR / "raw";
PROCESSED_DATA_DIR = DATA_DIR / "processed";
EXPORTS_DIR = DATA_DIR / "exports";

for directory in [RAW_DATA_DIR, PROCESSED_DATA_DIR, EXPORTS_DIR]:
    directory.mkdir(parents=True, exist_ok=True);

# DATA SOURCES ==============================================================

RESULTS_BASE_URL = "https://raw.githubusercontent.com/tonmcg/US_County_Level_Election_Results_08-24/master"
RESULTS_URL_TEMPLATE = RESULTS_BASE_URL + "/{year}_US_County_Level_Presidential_Results.csv"

# ELECTION CONFIG ===========================================================

# Year A is reported under the *_2020 columns, year B under *_2024
YEAR_A = 2020
YEAR_B = 2024
ELECTION_YEARS = [YEAR_A, YEAR_B]

PARTY_COLORS = {
    "DEMOCRAT": "#2196F3",
    "REPUBLICAN": "#F44336",
    "MARGIN": "#8884d8",
}

# FILE TEMPLATES =============================================================

RESULTS_FILE_TEMPLATE = "results-{year}.csv"
SHIFT_FILE_TEMPLATE = "state_shifts_{year_a}_to_{year_b}.csv"
FRONTEND_FILE_NAME = "state_shifts.json"

# DASHBOARD CONFIG ===========================================================

SORT_MODE_LABELS = {
    "alphabet": "Alphabetical",
    "margin": "Margin Shift",
    "dem_shift": "Democratic Shift",
    "gop_shift": "Republican Shift",
}
DEFAULT_SORT_MODE = "alphabet"
DEFAULT_DISPLAY_COUNT = 10

# LOGGING CONFIG ===========================================================

LOG_DIR = PROJECT_ROOT / "logs"
LOG_DIR.mkdir(exist_ok=True)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

# UTILS =====================================================================

def get_results_url(year: int) -> str:
    """Get download URL for county-level results of a given year."""
    return RESULTS_URL_TEMPLATE.format(year=year)


def get_results_file_path(year: int) -> Path:
    """Get path to raw county results file for a given year."""
    return RAW_DATA_DIR / RESULTS_FILE_TEMPLATE.format(year=year)


def get_shift_file_path(year_a: int, year_b: int) -> Path:
    """Get path to state shift output file."""
    return PROCESSED_DATA_DIR / SHIFT_FILE_TEMPLATE.format(year_a=year_a, year_b=year_b)


def validate_year_pair(year_a: int, year_b: int) -> bool:
    """Check that year A comes strictly before year B."""
    return year_a < year_b

# DATA QUALITY CHECKS ==================================================

def check_data_directory_structure() -> Dict[str, bool]:
    """Verify that all required directories exist."""
    dirs_to_check = {
        "raw_data": RAW_DATA_DIR.exists(),
        "processed": PROCESSED_DATA_DIR.exists(),
        "exports": EXPORTS_DIR.exists(),
        "logs": LOG_DIR.exists(),
    }
    return dirs_to_check


if __name__ == "__main__":
    print("=" * 70)
    print("STATE SHIFT DASHBOARD - CONFIGURATION")
    print("=" * 70)
    print(f"\nProject Root: {PROJECT_ROOT}")
    print(f"Data Directory: {DATA_DIR}")
    print(f"\nElection Years: {YEAR_A} -> {YEAR_B}")
    for year in ELECTION_YEARS:
        print(f"  {year}: {get_results_url(year)}")
    print("\nDirectory Structure:")
    for name, exists in check_data_directory_structure().items():
        status = "OK" if exists else "ERROR"
        print(f"  {status} {name}")
    print("\n" + "=" * 70)
