"""Global pytest configuration.

Points the data directory at a scratch location before ``config`` is imported
and exposes a loader for the numbered pipeline steps, which are not importable
by name.
"""

from __future__ import annotations

import importlib.util
import os
import tempfile
from pathlib import Path

import pytest

os.environ.setdefault("STATE_SHIFT_DATA_DIR", tempfile.mkdtemp(prefix="state_shift_data_"))

PROCESSING_DIR = Path(__file__).resolve().parent.parent / "processing"

_loaded_steps: dict = {}


def load_step(name: str):
    """Import ``processing/<name>.py`` once and return the module."""
    if name not in _loaded_steps:
        spec = importlib.util.spec_from_file_location(f"step_{name[:2]}", PROCESSING_DIR / f"{name}.py")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        _loaded_steps[name] = module
    return _loaded_steps[name]


@pytest.fixture
def download_step():
    return load_step("01_download_results")


@pytest.fixture
def aggregate_step():
    return load_step("02_aggregate_state_shifts")


@pytest.fixture
def export_step():
    return load_step("03_export_for_frontend")


def write_counties(path: Path, rows: list[tuple]) -> Path:
    """Write county rows (state, dem, gop, total) as a results CSV."""
    lines = ["state_name,county_fips,county_name,votes_gop,votes_dem,total_votes"]
    for i, (state, dem, gop, total) in enumerate(rows):
        lines.append(f"{state},{10000 + i},County {i},{gop},{dem},{total}")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def county_csvs(tmp_path: Path) -> tuple[Path, Path]:
    year_a = write_counties(
        tmp_path / "results-2020.csv",
        [
            ("Ohio", 30, 45, 80),
            ("Ohio", 10, 15, 20),
            ("Texas", 20, 30, 50),
            ("Vermont", 70, 25, 100),
        ],
    )
    year_b = write_counties(
        tmp_path / "results-2024.csv",
        [
            ("Ohio", 55, 45, 100),
            ("Vermont", 60, 35, 100),
            ("Wyoming", 0, 0, 0),
        ],
    )
    return year_a, year_b
