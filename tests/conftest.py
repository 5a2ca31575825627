"""
Shared fixtures: small synthetic shooting tables in the Open Data CSV schema.
"""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

BOROUGHS = ["BROOKLYN", "BRONX", "QUEENS", "MANHATTAN", "STATEN ISLAND"]


def make_raw_incidents(n_rows: int = 120) -> pd.DataFrame:
    """
    Raw rows as the loader returns them. Month cycles 1..12 and hour steps by 7,
    so every month and every hour of the day appears; the last rows pile up
    at 10pm to give the hourly profile some shape.
    """
    idx = np.arange(n_rows)
    months = idx % 12 + 1
    days = idx % 28 + 1
    hours = np.where(idx >= 96, 22, (idx * 7) % 24)

    df = pd.DataFrame({
        "INCIDENT_KEY": 200000000 + idx,
        "OCCUR_DATE": [f"{m:02d}/{d:02d}/2020" for m, d in zip(months, days)],
        "OCCUR_TIME": [f"{h:02d}:{(i * 11) % 60:02d}:00" for i, h in zip(idx, hours)],
        "BORO": [BOROUGHS[i % len(BOROUGHS)] for i in idx],
        "LOC_OF_OCCUR_DESC": ["OUTSIDE" if i % 3 else "INSIDE" for i in idx],
        "PRECINCT": 40 + idx % 30,
        "JURISDICTION_CODE": [np.nan if i % 17 == 0 else float(i % 3) for i in idx],
        "LOC_CLASSFCTN_DESC": ["STREET" if i % 2 else "HOUSING" for i in idx],
        "LOCATION_DESC": [np.nan if i % 4 == 0 else "MULTI DWELL - PUBLIC HOUS" for i in idx],
        "STATISTICAL_MURDER_FLAG": [i % 5 == 0 for i in idx],
        "PERP_AGE_GROUP": [np.nan if i % 3 == 0 else "18-24" for i in idx],
        "PERP_SEX": [np.nan if i % 3 == 0 else "M" for i in idx],
        "PERP_RACE": [np.nan if i % 3 == 0 else "BLACK" for i in idx],
        "VIC_AGE_GROUP": [np.nan if i % 29 == 0 else "25-44" for i in idx],
        "VIC_SEX": [np.nan if i % 31 == 0 else "M" for i in idx],
        "VIC_RACE": [np.nan if i % 37 == 0 else "WHITE HISPANIC" for i in idx],
        "X_COORD_CD": 1000000.0 + idx,
        "Y_COORD_CD": 200000.0 + idx,
        "Latitude": 40.7 + idx / 1000,
        "Longitude": -73.9 - idx / 1000,
        "Lon_Lat": ["POINT (-73.9 40.7)" for _ in idx],
    })
    return df


def make_cleaned_incidents(months, hours=None, boroughs=None) -> pd.DataFrame:
    """Minimal cleaned table for aggregation and modeling tests."""
    months = list(months)
    hours = list(hours) if hours is not None else [i % 24 for i in range(len(months))]
    boroughs = boroughs or [BOROUGHS[i % len(BOROUGHS)] for i in range(len(months))]
    return pd.DataFrame({
        "OCCUR_DATETIME": [pd.Timestamp(2021, m, 15, h) for m, h in zip(months, hours)],
        "BORO": pd.Categorical(boroughs),
        "STATISTICAL_MURDER_FLAG": [i % 4 == 0 for i in range(len(months))],
    })


@pytest.fixture
def raw_incidents() -> pd.DataFrame:
    return make_raw_incidents()


@pytest.fixture
def raw_csv(tmp_path, raw_incidents) -> str:
    df = raw_incidents.copy()
    # The export writes blank perpetrator fields as "(null)"
    df["PERP_AGE_GROUP"] = df["PERP_AGE_GROUP"].astype(object)
    df.loc[1, "PERP_AGE_GROUP"] = "(null)"
    path = tmp_path / "NYPD_Shooting_Incident_Data__Historic_.csv"
    df.to_csv(path, index=False)
    return str(path)


@pytest.fixture
def cleaned_incidents(raw_incidents) -> pd.DataFrame:
    from data_cleaning import clean_data

    return clean_data(raw_incidents)
