"""ENTSO-E Transparency Platform API configuration."""

import pandas as pd

ENTSOE_BASE_URL = "https://web-api.tp.entsoe.eu/api"

# Price document (day-ahead auction)
DAY_AHEAD_DOCUMENT_TYPE = "A44"

# EIC codes of bidding zones (in_Domain and out_Domain are equal for price documents)
BIDDING_ZONES = {
    "DE-LU": "10Y1001A1001A82H",
    "AT": "10YAT-APG------L",
    "BE": "10YBE----------2",
    "CH": "10YCH-SWISSGRIDZ",
    "CZ": "10YCZ-CEPS-----N",
    "DK1": "10YDK-1--------W",
    "DK2": "10YDK-2--------M",
    "FR": "10YFR-RTE------C",
    "NL": "10YNL----------L",
    "PL": "10YPL-AREA-----S",
}

DEFAULT_ZONE = "DE-LU"

# ISO 8601 durations used in the <resolution> element of a Period
RESOLUTIONS = {
    "PT15M": pd.Timedelta(minutes=15),
    "PT30M": pd.Timedelta(minutes=30),
    "PT60M": pd.Timedelta(minutes=60),
    "PT1H": pd.Timedelta(hours=1),
    "P1D": pd.Timedelta(days=1),
}

# Curve type where omitted positions repeat the previous price
VARIABLE_BLOCK_CURVE_TYPE = "A03"

PRICE_UNIT = "EUR/MWh"

NOT_PUBLISHED_HINT = "ENTSO-E might not have data for this date yet."
