"""
data_cleaning.py
Cleaning Pipeline for NYPD Shooting Incident Data

Design principles:
- Every transformation is logged with the number of rows it touched
- Missing categorical values are replaced from one explicit sentinel table
- Functions take a DataFrame and return a new one; the raw table is never edited
- A single `run_pipeline()` call reproduces the cleaned table end-to-end
"""

import json
import logging
from pathlib import Path

import numpy as np
import pandas as pd

from data_collection import DATA_URL, load_data

# ── Logging Setup ─────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger(__name__)


# ── Constants ─────────────────────────────────────────────────────────────────

# Identifier and geographic columns are not used by the report
DROP_COLUMNS = [
    "INCIDENT_KEY", "X_COORD_CD", "Y_COORD_CD",
    "Latitude", "Longitude", "Lon_Lat",
]

DATE_COLUMN      = "OCCUR_DATE"
TIME_COLUMN      = "OCCUR_TIME"
TIMESTAMP_COLUMN = "OCCUR_DATETIME"
TIMESTAMP_FORMAT = "%m/%d/%Y %H:%M:%S"

# Column → placeholder for a missing value. Columns not listed keep their NaNs.
SENTINEL_VALUES = {
    "LOCATION_DESC":     "UNKNOWN",
    "PERP_AGE_GROUP":    "UNKNOWN",
    "PERP_SEX":          "U",
    "PERP_RACE":         "UNKNOWN",
    "VIC_AGE_GROUP":     "UNKNOWN",
    "VIC_SEX":           "U",
    "VIC_RACE":          "UNKNOWN",
    "JURISDICTION_CODE": -1,
}


class TimestampParseError(ValueError):
    """Raised when a merged date/time value does not match TIMESTAMP_FORMAT."""


# ── Audit Trail ───────────────────────────────────────────────────────────────

class AuditTrail:
    """Tracks every cleaning decision with the rows it touched."""

    def __init__(self, total_rows: int):
        self.total_rows = total_rows
        self.steps: list[dict] = []

    def record(self, step: str, description: str, changed: int, detail: str = ""):
        pct = changed / self.total_rows * 100 if self.total_rows else 0.0
        self.steps.append({
            "step": step,
            "description": description,
            "rows_affected": int(changed),
            "pct_affected": round(pct, 2),
            "detail": detail,
        })
        log.info(f"[{step}] {description} → {changed:,} rows affected ({pct:.1f}%) {detail}")

    def to_dict(self) -> dict:
        return {"total_rows": self.total_rows, "steps": self.steps}

    def save(self, path: str):
        class _NumpyEncoder(json.JSONEncoder):
            def default(self, obj):
                if isinstance(obj, np.integer):
                    return int(obj)
                if isinstance(obj, np.floating):
                    return float(obj)
                return super().default(obj)

        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2, cls=_NumpyEncoder)
        log.info(f"Audit trail saved → {path}")

    def summary(self):
        print("\n" + "=" * 65)
        print("CLEANING AUDIT SUMMARY")
        print("=" * 65)
        print(f"{'Step':<26} {'Affected':>10} {'%':>7}  Description")
        print("-" * 65)
        for s in self.steps:
            print(f"{s['step']:<26} {s['rows_affected']:>10,} {s['pct_affected']:>6.1f}%  {s['description']}")
        print("=" * 65)


# ── Step 1: Drop Unused Columns ───────────────────────────────────────────────

def drop_unused_columns(df: pd.DataFrame, audit: AuditTrail = None) -> pd.DataFrame:
    present = [c for c in DROP_COLUMNS if c in df.columns]
    df = df.drop(columns=present)
    if audit is not None:
        audit.record("Columns dropped", "Identifier and coordinate columns removed",
                     0, f"({present})")
    return df


# ── Step 2: Merge Date + Time ─────────────────────────────────────────────────

def merge_occurrence_timestamp(df: pd.DataFrame, audit: AuditTrail = None) -> pd.DataFrame:
    """
    Combine OCCUR_DATE ("01/02/2020") and OCCUR_TIME ("03:04:05") into a single
    OCCUR_DATETIME column. Any row that does not parse aborts the run.
    """
    combined = df[DATE_COLUMN].astype("string") + " " + df[TIME_COLUMN].astype("string")
    parsed = pd.to_datetime(combined, format=TIMESTAMP_FORMAT, errors="coerce")

    bad = parsed.isna()
    if bad.any():
        first = bad.idxmax()
        raise TimestampParseError(
            f"Cannot parse occurrence timestamp {combined.loc[first]!r} at row {first} "
            f"({bad.sum():,} bad rows, expected format {TIMESTAMP_FORMAT!r})"
        )

    df = df.drop(columns=[DATE_COLUMN, TIME_COLUMN])
    df.insert(0, TIMESTAMP_COLUMN, parsed)
    if audit is not None:
        audit.record("Timestamp merge", f"{DATE_COLUMN} + {TIME_COLUMN} → {TIMESTAMP_COLUMN}", len(df))
    return df


# ── Step 3: Sentinel Substitution ─────────────────────────────────────────────

def fill_missing_values(df: pd.DataFrame, audit: AuditTrail = None) -> pd.DataFrame:
    df = df.copy()
    for col, sentinel in SENTINEL_VALUES.items():
        if col not in df.columns:
            log.warning(f"'{col}' column not found — skipping sentinel fill")
            continue
        missing = df[col].isna().sum()
        df[col] = df[col].fillna(sentinel)
        if audit is not None:
            audit.record(f"Fill: {col}", f"Missing → {sentinel!r}", missing)

    if "JURISDICTION_CODE" in df.columns:
        df["JURISDICTION_CODE"] = df["JURISDICTION_CODE"].astype(int)
    return df


# ── Step 4: Categorical Encoding ──────────────────────────────────────────────

def encode_categoricals(df: pd.DataFrame, audit: AuditTrail = None) -> pd.DataFrame:
    df = df.copy()
    text_cols = [
        c for c in df.columns
        if pd.api.types.is_object_dtype(df[c]) or pd.api.types.is_string_dtype(df[c])
    ]
    for col in text_cols:
        df[col] = df[col].astype("category")
    if audit is not None:
        audit.record("Categorical encoding", f"{len(text_cols)} text columns → category", 0,
                     f"({text_cols})")
    return df


# ── Validation ────────────────────────────────────────────────────────────────

def find_missing_values(df: pd.DataFrame):
    """
    Return (column, offending_rows) for the first column holding a missing
    value, or None when every column is complete.
    """
    for col in df.columns:
        mask = df[col].isna()
        if mask.any():
            return col, df[mask]
    return None


def report_missing_values(df: pd.DataFrame):
    result = find_missing_values(df)
    if result is None:
        log.info("Validation passed: no missing values remain")
        return None

    col, rows = result
    log.warning(f"Column '{col}' still has {len(rows):,} missing values after cleaning:\n"
                f"{rows.to_string(max_rows=20)}")
    return result


# ── Pipeline Orchestrator ─────────────────────────────────────────────────────

def clean_data(raw: pd.DataFrame, audit: AuditTrail = None) -> pd.DataFrame:
    df = drop_unused_columns(raw, audit)
    df = merge_occurrence_timestamp(df, audit)
    df = fill_missing_values(df, audit)
    df = encode_categoricals(df, audit)
    return df


def run_pipeline(
    source: str = DATA_URL,
    output_path: str = None,
    audit_path: str = None,
) -> pd.DataFrame:
    """
    End-to-end cleaning pipeline.

    Parameters
    ----------
    source      : Open Data URL or path to a local copy of the CSV
    output_path : optional path for the cleaned CSV
    audit_path  : optional path for the JSON audit log

    Returns
    -------
    Cleaned DataFrame
    """
    log.info("=" * 60)
    log.info("NYPD SHOOTING DATA — CLEANING PIPELINE START")
    log.info("=" * 60)

    raw = load_data(source)
    audit = AuditTrail(total_rows=len(raw))
    df = clean_data(raw, audit)
    report_missing_values(df)

    if output_path:
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(output_path, index=False)
        log.info(f"Cleaned data saved → {output_path}")
    log.info(f"Final shape: {df.shape[0]:,} rows × {df.shape[1]} columns")

    if audit_path:
        audit.save(audit_path)
    audit.summary()

    return df


# ── Entry Point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    from data_collection import resolve_source

    run_pipeline(
        source=resolve_source(),
        output_path="data/processed/shootings_cleaned.csv",
        audit_path="data/cleaning_audit.json",
    )
