"""
Analysis Module for the provider comparison dashboard.

Provides Pandas-based helpers for:
- Flat comparison tables (one row per ComparisonEntity)
- Grouping by JMH mode (one table/chart per mode)
- Per-category win counts
"""

import pandas as pd
from typing import Dict, List, Optional, Any, Sequence

from benchcore.formatters import comparison_rows, unique_modes
from benchcore.hierarchy import Hierarchy, entity_path
from benchcore.records import ComparisonEntity, JmhMode


# =============================================================================
# TABLES
# =============================================================================

def comparisons_to_dataframe(
    comparisons: Sequence[ComparisonEntity],
    hierarchy: Optional[Hierarchy] = None,
) -> pd.DataFrame:
    """
    Convert comparisons to a Pandas DataFrame, one row each, in input order.

    Paths come from ``hierarchy`` when given so they match its node paths.
    """
    df = pd.DataFrame(comparison_rows(comparisons))
    if df.empty:
        return df
    path_of = hierarchy.path_of if hierarchy is not None else entity_path
    df["path"] = [path_of(c) for c in comparisons]
    return df


def compute_comparison_table(
    comparisons: Sequence[ComparisonEntity],
    mode: Optional[JmhMode] = None,
    hierarchy: Optional[Hierarchy] = None,
) -> List[Dict[str, Any]]:
    """
    Rows for one comparison table.

    Labels only name algorithm/operation when the table mixes several of
    them, so filtering by mode happens before labelling.
    """
    if mode is not None:
        comparisons = [c for c in comparisons if c.mode is mode]
    df = comparisons_to_dataframe(comparisons, hierarchy)
    if df.empty:
        return []
    df = df.astype(object).where(pd.notnull(df), None)
    rows = df.to_dict(orient="records")
    for row, entity in zip(rows, comparisons):
        row["extras"] = dict(entity.extras)
    return rows


def group_by_mode(comparisons: Sequence[ComparisonEntity]) -> Dict[JmhMode, List[ComparisonEntity]]:
    """Comparisons per JMH mode, modes in first-seen order."""
    groups: Dict[JmhMode, List[ComparisonEntity]] = {mode: [] for mode in unique_modes(comparisons)}
    for entity in comparisons:
        groups[entity.mode].append(entity)
    return groups


# =============================================================================
# AGGREGATION
# =============================================================================

def summarize_by_category(comparisons: Sequence[ComparisonEntity]) -> pd.DataFrame:
    """
    Count comparisons, paired comparisons and wins per provider for each
    category. Plain counts only.
    """
    df = comparisons_to_dataframe(comparisons)
    if df.empty:
        return pd.DataFrame()

    df["paired"] = df["provider_a"].notna() & df["provider_b"].notna()
    grouped = df.groupby("category", sort=False).agg(
        comparisons=("id", "count"),
        paired=("paired", "sum"),
    )
    decided = df.dropna(subset=["winner"])
    if not decided.empty:
        wins = decided.groupby(["category", "winner"], sort=False).size().unstack(fill_value=0)
        grouped = grouped.join(wins, how="left").fillna(0)
    return grouped.astype(int)
