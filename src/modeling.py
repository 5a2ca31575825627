"""
modeling.py
Statistical models behind the report narrative:

- a degree-2 polynomial fit of hourly incident share against hour of day
- a one-proportion z-test of the summer (June–August) share against 1/4
"""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf
from statsmodels.stats.proportion import proportion_confint, proportions_ztest

log = logging.getLogger(__name__)

SUMMER_NULL_PROPORTION = 0.25
HOURLY_FORMULA = "rel_freq ~ hour + I(hour ** 2)"


@dataclass
class HourlyFit:
    intercept: float
    linear: float
    quadratic: float
    r_squared: float
    p_value: float
    nobs: int

    def predict(self, hours) -> np.ndarray:
        h = np.asarray(hours, dtype=float)
        return self.intercept + self.linear * h + self.quadratic * h ** 2


@dataclass
class ProportionTest:
    count: int
    nobs: int
    proportion: float
    null_proportion: float
    statistic: float
    p_value: float
    ci_low: float
    ci_high: float

    def significant(self, alpha: float = 0.05) -> bool:
        return self.p_value < alpha


def fit_hourly_polynomial(hourly: pd.DataFrame) -> HourlyFit:
    """
    OLS of relative frequency on hour and hour². `hourly` is the output of
    aggregation.frequency_by_hour (columns: hour, count, rel_freq).
    """
    model = smf.ols(HOURLY_FORMULA, data=hourly).fit()
    params = model.params
    fit = HourlyFit(
        intercept=float(params["Intercept"]),
        linear=float(params["hour"]),
        quadratic=float(params["I(hour ** 2)"]),
        r_squared=float(model.rsquared),
        p_value=float(model.f_pvalue),
        nobs=int(model.nobs),
    )
    log.info(f"Hourly fit: rel_freq = {fit.intercept:.4f} + {fit.linear:.5f}·h + "
             f"{fit.quadratic:.6f}·h²  (R² = {fit.r_squared:.3f}, p = {fit.p_value:.3g})")
    return fit


def run_summer_proportion_test(
    summer_count: int,
    num_trials: int,
    null_proportion: float = SUMMER_NULL_PROPORTION,
) -> ProportionTest:
    """
    Two-sided one-proportion test without continuity correction. The standard
    error uses the null proportion, so the statistic squared equals Pearson's
    chi-square for the same table.
    """
    if num_trials <= 0:
        raise ValueError("Proportion test needs at least one trial (num_trials = 0)")
    if not 0 <= summer_count <= num_trials:
        raise ValueError(f"summer_count must lie in [0, {num_trials}], got {summer_count}")

    stat, p_value = proportions_ztest(summer_count, num_trials,
                                      value=null_proportion, prop_var=null_proportion)
    ci_low, ci_high = proportion_confint(summer_count, num_trials, method="wilson")

    result = ProportionTest(
        count=int(summer_count),
        nobs=int(num_trials),
        proportion=summer_count / num_trials,
        null_proportion=null_proportion,
        statistic=float(stat),
        p_value=float(p_value),
        ci_low=float(ci_low),
        ci_high=float(ci_high),
    )
    log.info(f"Summer share {result.proportion:.3f} vs {null_proportion} → "
             f"z = {result.statistic:.3f}, p = {result.p_value:.3g}")
    return result
