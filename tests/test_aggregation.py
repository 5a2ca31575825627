"""
Tests for borough / hour / month summaries.
"""

import numpy as np
import pytest

from aggregation import (
    count_by_borough,
    count_summer_incidents,
    frequency_by_hour,
    frequency_by_month,
    murder_rate_by_borough,
)
from conftest import make_cleaned_incidents, make_raw_incidents
from data_cleaning import clean_data


class TestCountByBorough:

    def test_counts_sum_to_total(self, cleaned_incidents):
        borough = count_by_borough(cleaned_incidents)
        assert borough["count"].sum() == len(cleaned_incidents)

    def test_sorted_largest_first(self):
        df = make_cleaned_incidents([1] * 6, boroughs=["BRONX", "QUEENS", "QUEENS",
                                                       "QUEENS", "BRONX", "BROOKLYN"])
        borough = count_by_borough(df)
        assert list(borough["BORO"].astype(str)) == ["QUEENS", "BRONX", "BROOKLYN"]
        assert list(borough["count"]) == [3, 2, 1]

    def test_missing_borough_kept_as_own_group(self):
        raw = make_raw_incidents()
        raw.loc[[3, 7], "BORO"] = np.nan
        df = clean_data(raw)

        borough = count_by_borough(df)
        assert borough["count"].sum() == len(df) == 120
        assert borough.loc[borough["BORO"].isna(), "count"].item() == 2

        rates = murder_rate_by_borough(df)
        assert rates["incidents"].sum() == 120

    def test_input_not_modified(self, cleaned_incidents):
        before = cleaned_incidents.copy()
        count_by_borough(cleaned_incidents)
        frequency_by_hour(cleaned_incidents)
        frequency_by_month(cleaned_incidents)
        assert cleaned_incidents.equals(before)


class TestFrequencyByHour:

    def test_relative_frequencies_sum_to_one(self, cleaned_incidents):
        hourly = frequency_by_hour(cleaned_incidents)
        assert hourly["rel_freq"].sum() == pytest.approx(1.0)
        assert hourly["count"].sum() == len(cleaned_incidents)

    def test_every_hour_present(self):
        df = make_cleaned_incidents([3, 3, 3], hours=[0, 0, 23])
        hourly = frequency_by_hour(df)
        assert list(hourly["hour"]) == list(range(24))
        assert hourly.loc[hourly["hour"] == 0, "rel_freq"].item() == pytest.approx(2 / 3)
        assert hourly.loc[hourly["hour"] == 12, "count"].item() == 0


class TestFrequencyByMonth:

    def test_relative_frequencies_sum_to_one(self, cleaned_incidents):
        monthly = frequency_by_month(cleaned_incidents)
        assert monthly["rel_freq"].sum() == pytest.approx(1.0)
        assert monthly["month"].between(1, 12).all()

    def test_every_month_present(self):
        monthly = frequency_by_month(make_cleaned_incidents([7, 7, 12, 1]))
        assert list(monthly["month"]) == list(range(1, 13))
        assert monthly.loc[monthly["month"] == 7, "rel_freq"].item() == pytest.approx(0.5)


class TestCountSummerIncidents:

    def test_counts_june_through_august(self):
        df = make_cleaned_incidents([5, 6, 7, 8, 9, 6])
        assert count_summer_incidents(df) == (4, 6)

    def test_summer_never_exceeds_total(self, cleaned_incidents):
        summer_count, num_trials = count_summer_incidents(cleaned_incidents)
        assert summer_count <= num_trials
        assert summer_count == 30


class TestMurderRateByBorough:

    def test_shares(self):
        df = make_cleaned_incidents([1] * 5, boroughs=["BRONX"] * 5)
        # Row 4 has no flag recorded and must not count as a murder
        df["STATISTICAL_MURDER_FLAG"] = [True, False, False, False, np.nan]
        rates = murder_rate_by_borough(df)
        row = rates.iloc[0]
        assert row["incidents"] == 5
        assert row["murders"] == 1
        assert row["murder_share"] == pytest.approx(0.2)
