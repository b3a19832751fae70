"""Price series data model.

A price series is a DataFrame with a UTC DatetimeIndex named "time" and a float
"value" column, sorted ascending without duplicate timestamps. Sources may add
extra columns (e.g. the net Octopus rate); derived series only carry "value".

Parse warnings travel with the frame in ``df.attrs["warnings"]``.
"""

from dataclasses import dataclass
import datetime as dt
from typing import Iterable, Iterator

import pandas as pd


@dataclass(frozen=True)
class PricePoint:
    """Price of one settlement interval, starting at ``timestamp``."""

    timestamp: pd.Timestamp
    value: float


def empty_series(columns: Iterable[str] = ("value",)) -> pd.DataFrame:
    """Return an empty price series with the canonical index."""
    index = pd.DatetimeIndex([], tz="UTC", name="time")
    df = pd.DataFrame({col: pd.Series(dtype="float64") for col in columns}, index=index)
    df.attrs["warnings"] = []
    return df


def series_from_records(records: list[dict], warnings: list[str] | None = None) -> pd.DataFrame:
    """Build a price series from dicts with a "time" key and value columns.

    Sorts ascending and keeps the last record for duplicate timestamps.
    """
    if not records:
        df = empty_series()
    else:
        df = pd.DataFrame(records)
        df["time"] = pd.to_datetime(df["time"], utc=True).dt.as_unit("ns")
        df = df.set_index("time").sort_index(kind="stable")
        df = df[~df.index.duplicated(keep="last")]
        df = df.astype("float64")
    df.attrs["warnings"] = list(warnings or [])
    validate_series(df)
    return df


def series_from_points(
    points: Iterable[PricePoint], warnings: list[str] | None = None
) -> pd.DataFrame:
    """Build a price series from PricePoints."""
    records = [{"time": p.timestamp, "value": p.value} for p in points]
    return series_from_records(records, warnings=warnings)


def iter_points(df: pd.DataFrame) -> Iterator[PricePoint]:
    """Yield the rows of a price series as PricePoints."""
    for timestamp, value in df["value"].items():
        yield PricePoint(timestamp=timestamp, value=float(value))


def validate_series(df: pd.DataFrame) -> None:
    """Check the price series invariants.

    Raises:
        ValueError: If the index is not a UTC DatetimeIndex, timestamps are not
            strictly increasing, or the "value" column is missing.
    """
    if not isinstance(df.index, pd.DatetimeIndex):
        raise ValueError("Price series must have a DatetimeIndex")
    if df.index.tz is None or str(df.index.tz) != "UTC":
        raise ValueError(f"Price series index must be UTC, got {df.index.tz}")
    if "value" not in df.columns:
        raise ValueError("Price series must have a 'value' column")
    if len(df) > 1 and not (df.index[1:] > df.index[:-1]).all():
        raise ValueError("Price series timestamps must be strictly increasing")


def get_warnings(df: pd.DataFrame) -> list[str]:
    return list(df.attrs.get("warnings", []))


def day_bounds(target_date, tz: str = "UTC") -> tuple[pd.Timestamp, pd.Timestamp]:
    """Return the UTC start (inclusive) and end (exclusive) of a calendar day in ``tz``.

    DST days are 23 or 25 hours long.
    """
    if isinstance(target_date, dt.date) and not isinstance(target_date, dt.datetime):
        target_date = target_date.isoformat()
    day = pd.Timestamp(target_date)
    if day.tzinfo is not None:
        day = day.tz_convert(tz).tz_localize(None)
    start = day.normalize().tz_localize(tz)
    end = (day.normalize() + pd.Timedelta(days=1)).tz_localize(tz)
    return start.tz_convert("UTC"), end.tz_convert("UTC")
