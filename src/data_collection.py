"""
data_collection.py
Loads the NYPD Shooting Incident (Historic) table from NYC Open Data,
or from a local copy of the same CSV when the remote fetch is not an option.
"""

import logging
import sys
from pathlib import Path

import pandas as pd

log = logging.getLogger(__name__)

DATA_URL = "https://data.cityofnewyork.us/api/views/833y-fsy8/rows.csv?accessType=DOWNLOAD"

# Blank perpetrator fields are exported as the literal text "(null)"
NULL_MARKERS = ["(null)"]

REQUIRED_COLUMNS = {"INCIDENT_KEY", "OCCUR_DATE", "OCCUR_TIME", "BORO"}


def _is_url(source: str) -> bool:
    return str(source).lower().startswith(("http://", "https://"))


def load_data(source: str = DATA_URL) -> pd.DataFrame:
    if not _is_url(source) and not Path(source).exists():
        raise FileNotFoundError(f"Data file not found: {source}")

    log.info(f"Loading: {source}")
    # Read everything as text first; the cleaner decides on final dtypes
    df = pd.read_csv(source, na_values=NULL_MARKERS, low_memory=False,
                     dtype={"OCCUR_DATE": str, "OCCUR_TIME": str})
    log.info(f"Loaded {len(df):,} rows × {len(df.columns)} columns")

    missing_cols = REQUIRED_COLUMNS - set(df.columns)
    if missing_cols:
        raise ValueError(f"Dataset is missing expected columns: {sorted(missing_cols)}")

    return df


def resolve_source(argv=None) -> str:
    """
    Pick the data source for a run: a local CSV passed as the only argument,
    otherwise the Open Data URL.
    """
    args = sys.argv[1:] if argv is None else list(argv)
    if args:
        return args[0]
    return DATA_URL


if __name__ == "__main__":
    df = load_data(resolve_source())
    print(f"Columns: {list(df.columns)}")
    print(df.head())
