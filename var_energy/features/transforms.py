"""Derived price series.

All transforms take normalized price series (ct/kWh) and return new frames
with a UTC "time" index and a "value" column; inputs are left untouched.
"""

import pandas as pd

from var_energy.config import DEFAULT_OVERHEAD_CT_PER_KWH, DISPLAY_TZ
from var_energy.features.alignment import align_series


def _derived(values: pd.Series, source: pd.DataFrame) -> pd.DataFrame:
    df = pd.DataFrame({"value": values.astype("float64")})
    df.index.name = "time"
    df.attrs["warnings"] = list(source.attrs.get("warnings", []))
    return df


def add_overhead(df: pd.DataFrame, overhead: float | None = None) -> pd.DataFrame:
    """Simulate a retail price by adding a flat overhead (taxes, grid fees) to each price.

    Args:
        df: Normalized price series.
        overhead: Markup in ct/kWh. Defaults to DEFAULT_OVERHEAD_CT_PER_KWH.
    """
    if overhead is None:
        overhead = DEFAULT_OVERHEAD_CT_PER_KWH
    return _derived(df["value"] + overhead, df)


def price_delta(a: pd.DataFrame, b: pd.DataFrame, how: str = "timestamp") -> pd.DataFrame:
    """Compute ``a - b`` per paired point, keeping the timestamps of ``a``.

    A positive delta means ``a`` is more expensive than ``b`` at that time.

    The result always has len(a) points. Points of ``a`` without a counterpart in
    ``b`` (beyond its end, or no price in effect at that time) count as a zero
    difference.
    """
    aligned = align_series(a, b, how=how)
    delta = (aligned["a"] - aligned["b"]).where(aligned["matched"], 0.0)
    return _derived(delta, a)


def combine_series(named_series: dict[str, pd.DataFrame], how: str = "position") -> pd.DataFrame:
    """Overlay several price series on the timestamps of the first one.

    Rows where the second series has no counterpart are dropped; later series
    are optional per row (NaN when missing).

    Args:
        named_series: Ordered mapping of column name to price series.
        how: Alignment mode passed to align_series.

    Returns:
        DataFrame indexed by "time" with one column per series.
    """
    names = list(named_series.keys())
    if not names:
        raise ValueError("combine_series needs at least one series")

    reference = named_series[names[0]]
    out = pd.DataFrame({names[0]: reference["value"].astype("float64")}, index=reference.index)

    for name in names[1:]:
        aligned = align_series(reference, named_series[name], how=how)
        paired = aligned["b"].where(aligned["matched"])
        out[name] = paired.reindex(out.index)

    if len(names) > 1:
        out = out.dropna(subset=[names[1]])
    out.index.name = "time"
    return out


def shift_days(df: pd.DataFrame, days: int, tz: str = DISPLAY_TZ) -> pd.DataFrame:
    """Move a price series by whole calendar days, keeping the local wall-clock time.

    Used to compare two days at the same time of day. Points whose wall-clock
    time does not exist (or is repeated) on the target day because of a DST
    transition are dropped.
    """
    wall_time = df.index.tz_convert(tz).tz_localize(None) + pd.Timedelta(days=days)
    index = wall_time.tz_localize(tz, ambiguous="NaT", nonexistent="NaT").tz_convert("UTC")

    out = df.copy()
    out.index = index.rename("time")
    out = out[out.index.notna()]
    out = out[~out.index.duplicated(keep="first")]
    out.attrs = dict(df.attrs)
    return out
