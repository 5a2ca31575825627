"""
aggregation.py
Group-by summaries over the cleaned shooting table.

None of these functions modify the input; each returns a fresh table.
"""

import pandas as pd

from data_cleaning import TIMESTAMP_COLUMN

HOURS  = range(0, 24)
MONTHS = range(1, 13)
SUMMER_MONTHS = (6, 7, 8)


def _relative_frequency(buckets: pd.Series, index, name: str) -> pd.DataFrame:
    counts = buckets.value_counts().reindex(index, fill_value=0)
    total = counts.sum()
    out = counts.rename_axis(name).reset_index(name="count")
    out["rel_freq"] = out["count"] / total
    return out


def count_by_borough(df: pd.DataFrame) -> pd.DataFrame:
    """Incidents per borough, largest first."""
    counts = df.groupby("BORO", observed=True, dropna=False).size().sort_values(ascending=False)
    return counts.reset_index(name="count")


def frequency_by_hour(df: pd.DataFrame) -> pd.DataFrame:
    """Count and share of incidents for every hour of the day (0–23)."""
    return _relative_frequency(df[TIMESTAMP_COLUMN].dt.hour, HOURS, "hour")


def frequency_by_month(df: pd.DataFrame) -> pd.DataFrame:
    """Count and share of incidents for every calendar month (1–12)."""
    return _relative_frequency(df[TIMESTAMP_COLUMN].dt.month, MONTHS, "month")


def count_summer_incidents(df: pd.DataFrame) -> tuple[int, int]:
    """Return (summer_count, num_trials): incidents in June–August and all incidents."""
    summer = df[TIMESTAMP_COLUMN].dt.month.isin(SUMMER_MONTHS)
    return int(summer.sum()), len(df)


def murder_rate_by_borough(df: pd.DataFrame) -> pd.DataFrame:
    # The flag column keeps its NaNs through cleaning; they count as "not murder"
    flag = df["STATISTICAL_MURDER_FLAG"].astype(str).str.lower() == "true"
    grouped = (
        pd.DataFrame({"BORO": df["BORO"], "murder": flag})
        .groupby("BORO", observed=True, dropna=False)["murder"]
        .agg(incidents="size", murders="sum")
    )
    grouped["murder_share"] = grouped["murders"] / grouped["incidents"]
    return grouped.sort_values("incidents", ascending=False).reset_index()
