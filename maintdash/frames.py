from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import pandas as pd


def rows_to_frame(rows: Sequence[Dict[str, Any]], index: Optional[str] = None) -> pd.DataFrame:
    """Engine rows -> DataFrame; keeps the row order the engine produced."""
    df = pd.DataFrame(list(rows or []))
    if index and not df.empty and index in df.columns:
        df = df.set_index(index)
    return df


def series_to_frame(points: List[Dict[str, Any]], value_name: str = "value") -> pd.DataFrame:
    """Bucket series -> label-indexed frame, ready for st.bar_chart / st.line_chart."""
    df = rows_to_frame(points, index="label")
    if value_name != "value" and "value" in df.columns:
        df = df.rename(columns={"value": value_name})
    return df


def ranking_to_frame(rows: List[Dict[str, Any]], value_name: str = "value") -> pd.DataFrame:
    df = rows_to_frame(rows, index="name")
    if value_name != "value" and "value" in df.columns:
        df = df.rename(columns={"value": value_name})
    return df
