"""Pairing of two price series that cover the same day.

Two modes:
- "timestamp" (default): each point of ``a`` is paired with the price of ``b``
  in effect at the same instant, which works across differing resolutions
  (30-minute Agile slots against 60- or 15-minute auction prices).
- "position" (legacy): point i of ``a`` is paired with point i of ``b``. Only
  meaningful when both series share resolution and start offset.
"""

import numpy as np
import pandas as pd

ALIGNMENT_MODES = ("timestamp", "position")


def infer_resolution(df: pd.DataFrame, default: pd.Timedelta = pd.Timedelta(hours=1)) -> pd.Timedelta:
    """Return the most common spacing between consecutive timestamps of a series."""
    if len(df) < 2:
        return default
    diffs = df.index.to_series().diff().dropna()
    return diffs.mode().iloc[0]


def _empty_aligned(index=None) -> pd.DataFrame:
    if index is None:
        index = pd.DatetimeIndex([], tz="UTC", name="time")
    return pd.DataFrame(
        {
            "a": pd.Series(dtype="float64"),
            "b": pd.Series(dtype="float64"),
            "matched": pd.Series(dtype="bool"),
        },
        index=index,
    )


def _align_by_timestamp(a: pd.DataFrame, b: pd.DataFrame, tolerance=None) -> pd.DataFrame:
    if a.empty:
        return _empty_aligned()
    if b.empty:
        out = pd.DataFrame({"a": a["value"].to_numpy(), "b": np.nan}, index=a.index)
        out["matched"] = False
        return out

    tolerance = tolerance if tolerance is not None else infer_resolution(b)

    left = pd.DataFrame({"time": a.index.as_unit("ns"), "a": a["value"].to_numpy()})
    right = pd.DataFrame({"time": b.index.as_unit("ns"), "b": b["value"].to_numpy()})

    # A price of b applies from its timestamp until the next settlement interval starts
    merged = pd.merge_asof(
        left,
        right,
        on="time",
        direction="backward",
        tolerance=tolerance - pd.Timedelta(1, "ns"),
    )
    merged = merged.set_index("time")
    merged["matched"] = merged["b"].notna()
    return merged


def _align_by_position(a: pd.DataFrame, b: pd.DataFrame) -> pd.DataFrame:
    n = len(a)
    if n == 0:
        return _empty_aligned()

    b_values = np.full(n, np.nan)
    m = min(n, len(b))
    b_values[:m] = b["value"].to_numpy()[:m]

    out = pd.DataFrame({"a": a["value"].to_numpy(), "b": b_values}, index=a.index)
    out["matched"] = np.arange(n) < m
    return out


def align_series(
    a: pd.DataFrame, b: pd.DataFrame, how: str = "timestamp", tolerance: pd.Timedelta | None = None
) -> pd.DataFrame:
    """Pair the points of two price series.

    Args:
        a: Reference series; the output is indexed by its timestamps.
        b: Series to pair against ``a``.
        how: "timestamp" or "position".
        tolerance: Timestamp mode only. How long a price of ``b`` stays in
            effect; defaults to the inferred resolution of ``b``.

    Returns:
        DataFrame with columns "a", "b" and "matched", one row per point of
        ``a``. Points of ``a`` without a counterpart in ``b`` (no price in
        effect, or beyond the end of ``b`` in position mode) have b=NaN and
        matched=False.
    """
    if how == "timestamp":
        return _align_by_timestamp(a, b, tolerance=tolerance)
    if how == "position":
        return _align_by_position(a, b)
    raise ValueError(f"Unknown alignment mode '{how}'. Valid: {list(ALIGNMENT_MODES)}")
