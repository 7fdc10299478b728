"""
Offline review of the quality ratings log.

Summarizes logged ratings per category and tier and writes the summary as CSV
or markdown for manual review of how generated clues perform in play.
"""

import logging
from pathlib import Path
from typing import Dict, List, Any, Union

import pandas as pd

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = ["category", "value", "ratings", "good", "bad", "success_rate"]


def ratings_summary(entries: List[Dict[str, Any]]) -> pd.DataFrame:
    """
    Aggregate ratings log entries per category and value.

    Args:
        entries: Ratings log entries ({category, value, outcome, ...})

    Returns:
        DataFrame with SUMMARY_COLUMNS, sorted by category then value
    """
    df = pd.DataFrame(entries, columns=["category", "value", "outcome"])
    df = df.dropna(subset=["category", "value", "outcome"])
    if df.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    df["value"] = pd.to_numeric(df["value"], errors="coerce")
    df = df.dropna(subset=["value"])
    df["value"] = df["value"].astype(int)
    df["good"] = (df["outcome"] == "good").astype(int)
    df["bad"] = (df["outcome"] == "bad").astype(int)

    summary = (
        df.groupby(["category", "value"])
        .agg(ratings=("outcome", "size"), good=("good", "sum"), bad=("bad", "sum"))
        .reset_index()
    )
    summary["success_rate"] = summary["good"] / summary["ratings"]
    return summary.sort_values(["category", "value"]).reset_index(drop=True)[SUMMARY_COLUMNS]


def write_report(
    entries: List[Dict[str, Any]],
    output_path: Union[str, Path],
    output_format: str = "csv",
) -> str:
    """
    Write the ratings summary to disk.

    Args:
        entries: Ratings log entries
        output_path: Destination file
        output_format: 'csv' or 'markdown'

    Returns:
        Path to the written report

    Raises:
        ValueError: For an unsupported output format
    """
    summary = ratings_summary(entries)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if output_format == "csv":
        summary.to_csv(output_path, index=False)
    elif output_format == "markdown":
        with open(output_path, "w", encoding="utf-8") as f:
            f.write("# Clue Ratings Report\n\n")
            f.write(f"Ratings analyzed: {int(summary['ratings'].sum()) if not summary.empty else 0}\n\n")
            f.write("| Category | Value | Ratings | Good | Bad | Success Rate |\n")
            f.write("|----------|-------|---------|------|-----|--------------|\n")
            for row in summary.itertuples(index=False):
                f.write(
                    f"| {row.category} | ${row.value} | {row.ratings} | {row.good} | {row.bad} | {row.success_rate:.3f} |\n"
                )
    else:
        raise ValueError(f"Unsupported output format: {output_format}")

    logger.info(f"Generated {output_format} ratings report: {output_path}")
    return str(output_path)
