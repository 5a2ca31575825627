"""
eda.py
Charts and narrative report for the NYPD shooting analysis.

Design principles:
- Every chart answers one question asked in the report text
- Figures are saved as PNG and embedded in a single standalone HTML file
- Narrative numbers are computed from the same tables the charts use
"""

import html
import logging
from pathlib import Path

import matplotlib
import matplotlib.pyplot as plt
import matplotlib.ticker as mticker
import numpy as np
import pandas as pd
import seaborn as sns

from aggregation import (
    SUMMER_MONTHS,
    count_by_borough,
    count_summer_incidents,
    frequency_by_hour,
    frequency_by_month,
    murder_rate_by_borough,
)
from data_cleaning import TIMESTAMP_COLUMN, run_pipeline
from data_collection import DATA_URL
from modeling import fit_hourly_polynomial, run_summer_proportion_test

log = logging.getLogger(__name__)

# ── Style ─────────────────────────────────────────────────────────────────────
PALETTE  = "YlOrRd"
ACCENT   = "#D62728"   # red — summer months, fitted curve
NEUTRAL  = "#4C72B0"   # blue — standard bars
BG_GRAY  = "#F7F7F7"
REPORT_DIR = Path("reports")
SOURCE_NOTE = "Source: NYPD Shooting Incident Data (Historic) / NYC Open Data"

HOUR_LABELS  = [f"{(h % 12) or 12}{'am' if h < 12 else 'pm'}" for h in range(24)]
MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
                "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

plt.rcParams.update({
    "figure.facecolor": BG_GRAY,
    "axes.facecolor":   BG_GRAY,
    "axes.spines.top":  False,
    "axes.spines.right": False,
    "axes.labelsize":   11,
    "axes.titlesize":   13,
    "axes.titleweight": "bold",
    "xtick.labelsize":  9,
    "ytick.labelsize":  9,
    "font.family":      "sans-serif",
})


# ── Helpers ───────────────────────────────────────────────────────────────────

def _save(fig: plt.Figure, name: str, fig_dir: Path) -> Path:
    fig_dir = Path(fig_dir)
    fig_dir.mkdir(parents=True, exist_ok=True)
    path = fig_dir / f"{name}.png"
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    print(f"  ✓ Saved → {path}")
    return path


def _source_note(ax, note=SOURCE_NOTE):
    ax.annotate(note, xy=(0, -0.14), xycoords="axes fraction",
                fontsize=7, color="gray")


def fmt_thousands(ax, axis="y"):
    fmt = mticker.FuncFormatter(lambda x, _: f"{x:,.0f}")
    if axis == "y":
        ax.yaxis.set_major_formatter(fmt)
    else:
        ax.xaxis.set_major_formatter(fmt)


def _banner(title: str):
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


# ── Chart 1: Borough Share ────────────────────────────────────────────────────

def plot_borough_pie(borough: pd.DataFrame, fig_dir: Path) -> Path:
    """Q: Which boroughs account for the shootings?"""
    fig, ax = plt.subplots(figsize=(7, 7))
    colors = sns.color_palette(PALETTE, len(borough))[::-1]
    ax.pie(borough["count"], labels=borough["BORO"].astype(str),
           autopct="%1.1f%%", colors=colors, startangle=90,
           wedgeprops={"edgecolor": "white"})
    ax.set_title("Shooting Incidents by Borough")
    _source_note(ax)
    return _save(fig, "01_borough_share", fig_dir)


# ── Chart 2: Hour of Day ──────────────────────────────────────────────────────

def plot_hourly_bar(hourly: pd.DataFrame, fig_dir: Path) -> Path:
    """Q: At what time of day do shootings happen?"""
    fig, ax = plt.subplots(figsize=(12, 5))
    sns.barplot(data=hourly, x="hour", y="count", color=NEUTRAL, ax=ax)
    ax.set_xticks(range(24))
    ax.set_xticklabels(HOUR_LABELS, rotation=45)
    ax.set_title("Shooting Incidents by Hour of Day")
    ax.set_xlabel("Hour of Day")
    ax.set_ylabel("Number of Incidents")
    fmt_thousands(ax)
    _source_note(ax)
    return _save(fig, "02_hourly_counts", fig_dir)


def plot_hourly_fit(hourly: pd.DataFrame, fit, fig_dir: Path) -> Path:
    """Observed hourly share against the fitted quadratic."""
    fig, ax = plt.subplots(figsize=(12, 5))
    grid = np.linspace(0, 23, 200)
    ax.plot(hourly["hour"], hourly["rel_freq"], marker="o", color=NEUTRAL,
            linewidth=1.5, label="Observed share")
    ax.plot(grid, fit.predict(grid), color=ACCENT, linewidth=2,
            label=f"Quadratic fit (R² = {fit.r_squared:.2f})")
    ax.set_xticks(range(24))
    ax.set_xticklabels(HOUR_LABELS, rotation=45)
    ax.yaxis.set_major_formatter(mticker.PercentFormatter(xmax=1, decimals=1))
    ax.set_title("Hourly Share of Incidents with Polynomial Fit")
    ax.set_xlabel("Hour of Day")
    ax.set_ylabel("Share of Incidents")
    ax.legend(fontsize=8)
    _source_note(ax)
    return _save(fig, "03_hourly_fit", fig_dir)


# ── Chart 3: Month ────────────────────────────────────────────────────────────

def plot_monthly_bar(monthly: pd.DataFrame, fig_dir: Path) -> Path:
    """Q: Do shootings rise in the summer?"""
    fig, ax = plt.subplots(figsize=(10, 5))
    colors = [ACCENT if m in SUMMER_MONTHS else NEUTRAL for m in monthly["month"]]
    ax.bar(range(12), monthly["count"], color=colors, edgecolor="white")
    ax.set_xticks(range(12))
    ax.set_xticklabels(MONTH_LABELS)
    ax.set_title("Shooting Incidents by Month\n(Summer months highlighted)")
    ax.set_xlabel("")
    ax.set_ylabel("Number of Incidents")
    fmt_thousands(ax)
    _source_note(ax)
    return _save(fig, "04_monthly_counts", fig_dir)


# ── Chart 4: Borough × Hour ───────────────────────────────────────────────────

def plot_borough_hour_heatmap(df: pd.DataFrame, fig_dir: Path) -> Path:
    """Q: Is the night-time peak the same in every borough?"""
    share = pd.crosstab(df["BORO"].astype(str), df[TIMESTAMP_COLUMN].dt.hour,
                        normalize="index")
    share = share.reindex(columns=range(24), fill_value=0)

    fig, ax = plt.subplots(figsize=(14, 4))
    sns.heatmap(share, ax=ax, cmap=PALETTE, linewidths=0.3,
                xticklabels=HOUR_LABELS,
                cbar_kws={"label": "Share of Borough's Incidents"})
    ax.tick_params(axis="x", labelrotation=45)
    ax.set_title("Hour-of-Day Profile by Borough")
    ax.set_xlabel("Hour of Day")
    ax.set_ylabel("")
    return _save(fig, "05_borough_hour_heatmap", fig_dir)


# ── Summary Statistics ────────────────────────────────────────────────────────

def summary_statistics(df: pd.DataFrame, summer_test) -> pd.DataFrame:
    ts = df[TIMESTAMP_COLUMN]
    murders = int((df["STATISTICAL_MURDER_FLAG"].astype(str).str.lower() == "true").sum())
    rows = [
        ("Incidents", f"{len(df):,}"),
        ("First incident", f"{ts.min():%Y-%m-%d}"),
        ("Last incident", f"{ts.max():%Y-%m-%d}"),
        ("Statistical murders", f"{murders:,} ({murders / len(df):.1%})"),
        ("Summer incidents (Jun–Aug)", f"{summer_test.count:,} ({summer_test.proportion:.1%})"),
    ]
    return pd.DataFrame(rows, columns=["Measure", "Value"])


# ── HTML Report ───────────────────────────────────────────────────────────────

def write_report(path: Path, title: str, sections: list) -> Path:
    """
    Render `sections` to a standalone HTML page. Each section is a dict with
    "heading" and any of "text" (str), "table" (DataFrame), "image" (path).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    parts = [
        "<!DOCTYPE html>",
        "<html><head><meta charset='utf-8'>",
        f"<title>{html.escape(title)}</title>",
        "<style>body{font-family:sans-serif;max-width:960px;margin:auto;padding:1em}"
        "table{border-collapse:collapse}td,th{padding:4px 10px;border:1px solid #ddd}"
        "img{max-width:100%}</style>",
        "</head><body>",
        f"<h1>{html.escape(title)}</h1>",
    ]
    for section in sections:
        parts.append(f"<h2>{html.escape(section['heading'])}</h2>")
        if section.get("text"):
            parts.append(f"<p>{html.escape(section['text'])}</p>")
        if section.get("table") is not None:
            parts.append(section["table"].to_html(index=False, border=0))
        if section.get("image"):
            rel = Path(section["image"]).relative_to(path.parent).as_posix()
            parts.append(f"<img src='{html.escape(rel)}' alt='{html.escape(section['heading'])}'>")
    parts.append(f"<p><small>{html.escape(SOURCE_NOTE)}</small></p>")
    parts.append("</body></html>")

    path.write_text("\n".join(parts), encoding="utf-8")
    log.info(f"Report written → {path}")
    return path


# ── Pipeline Orchestrator ─────────────────────────────────────────────────────

def run_report(source: str = DATA_URL, out_dir: Path = REPORT_DIR) -> Path:
    """
    Load, clean, aggregate, model and render in one call.
    Returns the path of the HTML report.
    """
    out_dir = Path(out_dir)
    fig_dir = out_dir / "figures"

    df = run_pipeline(source, audit_path=out_dir / "cleaning_audit.json")

    _banner("AGGREGATES")
    borough = count_by_borough(df)
    hourly  = frequency_by_hour(df)
    monthly = frequency_by_month(df)
    murders = murder_rate_by_borough(df)
    print(borough.to_string(index=False))

    _banner("MODELS")
    fit = fit_hourly_polynomial(hourly)
    summer_count, num_trials = count_summer_incidents(df)
    summer = run_summer_proportion_test(summer_count, num_trials)
    print(f"  Hourly quadratic: R² = {fit.r_squared:.3f}, p = {fit.p_value:.3g}")
    print(f"  Summer share: {summer.proportion:.3f} (p = {summer.p_value:.3g})")

    _banner("CHARTS")
    pie     = plot_borough_pie(borough, fig_dir)
    hour    = plot_hourly_bar(hourly, fig_dir)
    curve   = plot_hourly_fit(hourly, fit, fig_dir)
    month   = plot_monthly_bar(monthly, fig_dir)
    heatmap = plot_borough_hour_heatmap(df, fig_dir)

    top = borough.iloc[0]
    peak = hourly.loc[hourly["count"].idxmax()]
    trough = hourly.loc[hourly["count"].idxmin()]
    verdict = ("differs significantly from" if summer.significant()
               else "is not significantly different from")

    sections = [
        {"heading": "Overview", "table": summary_statistics(df, summer)},
        {"heading": "Where",
         "text": f"{top['BORO']} has the most recorded shootings "
                 f"({top['count']:,} of {len(df):,}, {top['count'] / len(df):.1%}).",
         "image": pie},
        {"heading": "Murders by Borough", "table": murders},
        {"heading": "When: Hour of Day",
         "text": f"Incidents peak at {HOUR_LABELS[int(peak['hour'])]} "
                 f"({peak['rel_freq']:.1%} of the total) and are rarest at "
                 f"{HOUR_LABELS[int(trough['hour'])]} ({trough['rel_freq']:.1%}).",
         "image": hour},
        {"heading": "Hourly Model",
         "text": f"A quadratic in hour of day explains {fit.r_squared:.1%} of the variation "
                 f"in hourly share (F-test p = {fit.p_value:.3g}). The curve is "
                 f"{'U-shaped, lowest around midday' if fit.quadratic > 0 else 'hump-shaped'}.",
         "image": curve},
        {"heading": "When: Month",
         "text": f"June to August hold {summer.proportion:.1%} of incidents "
                 f"(95% CI {summer.ci_low:.1%}–{summer.ci_high:.1%}). Against an even "
                 f"{summer.null_proportion:.0%} share the summer proportion {verdict} "
                 f"the baseline (z = {summer.statistic:.2f}, p = {summer.p_value:.3g}).",
         "image": month},
        {"heading": "Borough × Hour", "image": heatmap},
    ]
    report = write_report(out_dir / "nypd_shooting_report.html",
                          "NYPD Shooting Incidents: Where and When", sections)

    _banner(f"✓ REPORT COMPLETE — {report}")
    return report


# ── Entry Point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    from data_collection import resolve_source

    matplotlib.use("Agg")
    run_report(resolve_source())
