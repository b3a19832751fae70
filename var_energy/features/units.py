"""Conversion of source price units to the canonical ct/kWh."""

import pandas as pd

CANONICAL_UNIT = "ct/kWh"

# Multiplier from each source unit to ct/kWh
CONVERSION_FACTORS = {
    "EUR/MWh": 0.1,  # 1 MWh = 1000 kWh, 1 EUR = 100 ct
    "EUR/kWh": 100.0,
    "ct/kWh": 1.0,
    "p/kWh": 1.0,  # Octopus pence are displayed as cents
}


def _factor(source_unit: str) -> float:
    if source_unit not in CONVERSION_FACTORS:
        raise ValueError(
            f"Unknown price unit '{source_unit}'. Valid: {list(CONVERSION_FACTORS.keys())}"
        )
    return CONVERSION_FACTORS[source_unit]


def normalize(raw_value, source_unit: str):
    """Convert a price (scalar, array or pandas object) to ct/kWh.

    EUR/MWh is divided by 10; ct/kWh and p/kWh pass through unchanged.
    """
    factor = _factor(source_unit)
    if factor == 1.0:
        return raw_value
    if source_unit == "EUR/MWh":
        return raw_value / 10
    return raw_value * factor


def denormalize(value, source_unit: str):
    """Inverse of normalize: convert ct/kWh back to ``source_unit``."""
    factor = _factor(source_unit)
    if factor == 1.0:
        return value
    if source_unit == "EUR/MWh":
        return value * 10
    return value / factor


def normalize_series(df: pd.DataFrame, source_unit: str) -> pd.DataFrame:
    """Return a copy of a price series with every price column in ct/kWh."""
    out = df.copy()
    price_cols = [col for col in out.columns if col.startswith("value")]
    for col in price_cols:
        out[col] = normalize(out[col], source_unit)
    out.attrs = dict(df.attrs)
    return out
