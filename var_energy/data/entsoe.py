"""ENTSO-E Transparency Platform day-ahead price download and parsing.

API functions:
- format_entsoe_date(): Format a timestamp as YYYYMMDDHH00 (UTC)
- parse_entsoe_xml(): Parse a Publication_MarketDocument into a price series
- fetch_day_ahead_prices(): Request and parse day-ahead prices for one day

Prices are returned as published, in EUR/MWh. Use
``var_energy.features.units.normalize_series`` to convert to ct/kWh.
"""

import xml.etree.ElementTree as ET

from loguru import logger
import pandas as pd
import requests

from var_energy.config import DISPLAY_TZ, get_entsoe_api_key
from var_energy.config.entsoe import (
    BIDDING_ZONES,
    DAY_AHEAD_DOCUMENT_TYPE,
    DEFAULT_ZONE,
    ENTSOE_BASE_URL,
    NOT_PUBLISHED_HINT,
    RESOLUTIONS,
    VARIABLE_BLOCK_CURVE_TYPE,
)
from var_energy.data import http
from var_energy.data.errors import ConfigurationError, MalformedPayload, SourceUnavailable
from var_energy.data.series import PricePoint, day_bounds, series_from_points

SOURCE = "ENTSO-E"


def format_entsoe_date(ts, round_up: bool = False) -> str:
    """Format a timestamp as YYYYMMDDHH00 in UTC (the API is hour-granular).

    Timestamps off the full hour (half-hour timezone offsets) are floored, or
    ceiled with ``round_up`` so that a period end still covers the whole day.
    """
    ts = pd.Timestamp(ts)
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    ts = ts.tz_convert("UTC")
    hour = ts.ceil("h") if round_up else ts.floor("h")
    if hour != ts:
        logger.warning(f"ENTSO-E periods are hour-granular: {ts} sent as {hour}")
    return hour.strftime("%Y%m%d%H00")


# =============================================================================
# XML helpers (namespace-agnostic)
# =============================================================================


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(elem, name):
    for child in elem:
        if _local_name(child.tag) == name:
            return child
    return None


def _children(elem, name):
    return [child for child in elem if _local_name(child.tag) == name]


def _child_text(elem, name):
    child = _child(elem, name)
    if child is None or child.text is None:
        return None
    return child.text.strip() or None


# =============================================================================
# Parsing
# =============================================================================


def _parse_period(period, curve_type, block_no, warnings):
    """Parse one Period element into a list of PricePoints."""
    time_interval = _child(period, "timeInterval")
    resolution = _child_text(period, "resolution")
    if time_interval is None or resolution is None:
        warnings.append(f"TimeSeries {block_no}: period without timeInterval or resolution, skipped")
        return []

    start_str = _child_text(time_interval, "start")
    if start_str is None:
        warnings.append(f"TimeSeries {block_no}: timeInterval without start, skipped")
        return []

    if resolution not in RESOLUTIONS:
        warnings.append(f"TimeSeries {block_no}: unknown resolution {resolution!r}, skipped")
        return []
    increment = RESOLUTIONS[resolution]

    try:
        period_start = pd.Timestamp(start_str)
    except ValueError:
        warnings.append(f"TimeSeries {block_no}: invalid period start {start_str!r}, skipped")
        return []
    if period_start.tzinfo is None:
        period_start = period_start.tz_localize("UTC")

    prices = {}
    for point in _children(period, "Point"):
        position_str = _child_text(point, "position")
        price_str = _child_text(point, "price.amount")
        try:
            position = int(position_str)
            price = float(price_str)
        except (TypeError, ValueError):
            warnings.append(
                f"TimeSeries {block_no}: invalid point position={position_str!r} "
                f"price={price_str!r}, skipped"
            )
            continue
        if position < 1:
            warnings.append(f"TimeSeries {block_no}: position {position} out of range, skipped")
            continue
        prices[position] = price

    if curve_type == VARIABLE_BLOCK_CURVE_TYPE and prices:
        prices = _fill_variable_blocks(prices, time_interval, period_start, increment)

    # Position is 1-indexed within the period
    return [
        PricePoint(timestamp=period_start + (position - 1) * increment, value=price)
        for position, price in prices.items()
    ]


def _fill_variable_blocks(prices, time_interval, period_start, increment):
    """Repeat the previous price for positions an A03 curve omits."""
    last_position = max(prices)
    end_str = _child_text(time_interval, "end")
    if end_str is not None:
        try:
            period_end = pd.Timestamp(end_str)
            if period_end.tzinfo is None:
                period_end = period_end.tz_localize("UTC")
            last_position = max(last_position, int((period_end - period_start) / increment))
        except ValueError:
            pass

    filled = {}
    current = None
    for position in range(min(prices), last_position + 1):
        current = prices.get(position, current)
        filled[position] = current
    return filled


def _check_acknowledgement(root):
    """Raise SourceUnavailable for an Acknowledgement_MarketDocument ("no data")."""
    reason = _child(root, "Reason")
    text = _child_text(reason, "text") if reason is not None else None
    code = _child_text(reason, "code") if reason is not None else None
    logger.warning(f"ENTSO-E acknowledgement received (code={code}): {text}")
    raise SourceUnavailable(
        text or "ENTSO-E returned an acknowledgement instead of prices",
        status_code=200,
        hint=NOT_PUBLISHED_HINT,
        source=SOURCE,
    )


def parse_entsoe_xml(xml_text: str | bytes) -> pd.DataFrame:
    """Parse an ENTSO-E price document into a price series.

    Collects the points of every TimeSeries block, computing each timestamp as
    ``periodStart + (position - 1) * resolution``, and sorts them ascending.
    Blocks missing a period, time interval, start or resolution are skipped.
    Points with a malformed position or price are skipped rather than replaced
    by zero, since zero and negative prices are real market data. Every skip is
    recorded in ``df.attrs["warnings"]``.

    Args:
        xml_text: Response body of the ENTSO-E API.

    Returns:
        DataFrame with UTC DatetimeIndex named "time" and a "value" column (EUR/MWh).

    Raises:
        MalformedPayload: If the body is not XML or not a price document.
        SourceUnavailable: If the body is an acknowledgement (no matching data).
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise MalformedPayload(f"ENTSO-E response is not valid XML: {e}", source=SOURCE) from e

    root_name = _local_name(root.tag)
    if root_name == "Acknowledgement_MarketDocument":
        _check_acknowledgement(root)
    if not root_name.endswith("MarketDocument"):
        raise MalformedPayload(f"Unexpected ENTSO-E document type: {root_name}", source=SOURCE)

    points = []
    warnings = []
    time_series_list = [elem for elem in root.iter() if _local_name(elem.tag) == "TimeSeries"]

    for block_no, time_series in enumerate(time_series_list, start=1):
        curve_type = _child_text(time_series, "curveType")
        periods = _children(time_series, "Period")
        if not periods:
            warnings.append(f"TimeSeries {block_no}: no Period, skipped")
            continue
        for period in periods:
            points.extend(_parse_period(period, curve_type, block_no, warnings))

    for warning in warnings:
        logger.warning(warning)

    df = series_from_points(points, warnings=warnings)
    logger.debug(f"Parsed {len(df)} ENTSO-E points from {len(time_series_list)} TimeSeries")
    return df


# =============================================================================
# API
# =============================================================================


def fetch_day_ahead_prices(
    target_date,
    zone: str = DEFAULT_ZONE,
    api_key: str | None = None,
    document_type: str = DAY_AHEAD_DOCUMENT_TYPE,
    contract_type: str | None = None,
    tz: str = DISPLAY_TZ,
    session: requests.Session | None = None,
) -> pd.DataFrame:
    """Fetch day-ahead prices for one calendar day from ENTSO-E.

    Args:
        target_date: Day to fetch (date, string or timestamp).
        zone: Bidding zone key from BIDDING_ZONES, or a raw EIC code.
        api_key: Security token. Defaults to the ENTSOE_API_KEY environment variable.
        document_type: ENTSO-E document type code, "A44" for prices.
        contract_type: Optional contract_MarketAgreement.Type, e.g. "A07" (intraday).
        tz: Timezone whose calendar day is requested.
        session: Optional requests session.

    Returns:
        DataFrame with UTC DatetimeIndex named "time" and a "value" column (EUR/MWh).
    """
    api_key = api_key or get_entsoe_api_key()
    if not api_key:
        raise ConfigurationError("ENTSOE_API_KEY is not set", source=SOURCE)

    domain = BIDDING_ZONES.get(zone, zone)
    start, end = day_bounds(target_date, tz)

    params = {
        "securityToken": api_key,
        "documentType": document_type,
        "in_Domain": domain,
        "out_Domain": domain,
        "periodStart": format_entsoe_date(start),
        "periodEnd": format_entsoe_date(end, round_up=True),
    }
    if contract_type is not None:
        params["contract_MarketAgreement.Type"] = contract_type

    logger.info(
        f"Fetching ENTSO-E {document_type} prices for {zone} "
        f"({params['periodStart']} - {params['periodEnd']})"
    )
    response = http.get(
        ENTSOE_BASE_URL, params=params, source=SOURCE, hint=NOT_PUBLISHED_HINT, session=session
    )
    df = parse_entsoe_xml(response.content)
    logger.info(f"  Received {len(df)} ENTSO-E points")
    return df
