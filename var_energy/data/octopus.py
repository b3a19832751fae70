"""Octopus Energy Agile tariff download and parsing.

Unit rates are published per 30-minute slot in pence per kWh, which is used as
the canonical ct/kWh unit without conversion. The API commonly returns slots in
descending order; the parser always sorts ascending.
"""

import json

from loguru import logger
import pandas as pd
import requests

from var_energy.config import DISPLAY_TZ
from var_energy.config.octopus import (
    OCTOPUS_BASE_URL,
    PAGE_SIZE,
    PRODUCT_CODE,
    QUERY_MARGIN_HOURS,
    TARIFF_CODE,
)
from var_energy.data import http
from var_energy.data.errors import MalformedPayload
from var_energy.data.series import day_bounds, series_from_records

SOURCE = "Octopus"


def _results(payload) -> list:
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise MalformedPayload(f"Octopus response is not valid JSON: {e}", source=SOURCE) from e

    if not isinstance(payload, dict) or not isinstance(payload.get("results"), list):
        raise MalformedPayload("Octopus response has no 'results' list", source=SOURCE)
    return payload["results"]


def parse_octopus_json(payload, target_date=None, tz: str = DISPLAY_TZ) -> pd.DataFrame:
    """Parse an Octopus unit-rates response into a price series.

    Args:
        payload: Decoded JSON dict (or raw JSON text) with a "results" list of
            {valid_from, valid_to, value_exc_vat, value_inc_vat} records.
        target_date: If given, keep only slots whose local calendar date in ``tz``
            equals this date.
        tz: Timezone for the target date filter.

    Returns:
        DataFrame with UTC DatetimeIndex named "time", a "value" column holding
        the gross rate (value_inc_vat) and a "value_exc_vat" column.
    """
    records = []
    warnings = []

    for i, item in enumerate(_results(payload)):
        if not isinstance(item, dict):
            warnings.append(f"Octopus result {i}: not an object, skipped")
            continue
        try:
            timestamp = pd.Timestamp(item["valid_from"])
            value = float(item["value_inc_vat"])
            if pd.isna(timestamp):
                raise ValueError("missing valid_from")
        except (KeyError, TypeError, ValueError):
            warnings.append(
                f"Octopus result {i}: invalid valid_from={item.get('valid_from')!r} "
                f"value_inc_vat={item.get('value_inc_vat')!r}, skipped"
            )
            continue
        if timestamp.tzinfo is None:
            timestamp = timestamp.tz_localize("UTC")

        exc_vat = item.get("value_exc_vat")
        try:
            exc_vat = float(exc_vat) if exc_vat is not None else float("nan")
        except (TypeError, ValueError):
            exc_vat = float("nan")

        records.append({"time": timestamp, "value": value, "value_exc_vat": exc_vat})

    for warning in warnings:
        logger.warning(warning)

    df = series_from_records(records, warnings=warnings)

    if target_date is not None and not df.empty:
        start, end = day_bounds(target_date, tz)
        df = df[(df.index >= start) & (df.index < end)]
        df.attrs["warnings"] = warnings

    return df


def fetch_octopus_prices(
    target_date,
    product_code: str = PRODUCT_CODE,
    tariff_code: str = TARIFF_CODE,
    tz: str = DISPLAY_TZ,
    session: requests.Session | None = None,
) -> pd.DataFrame:
    """Fetch Agile unit rates covering one calendar day.

    The query window is widened by QUERY_MARGIN_HOURS on each side so that no
    boundary slot is truncated, then filtered back to the target date. Paginated
    responses are followed through their "next" links.

    Returns:
        DataFrame as returned by parse_octopus_json (ct/kWh, gross and net).
    """
    start, end = day_bounds(target_date, tz)
    margin = pd.Timedelta(hours=QUERY_MARGIN_HOURS)

    url = (
        f"{OCTOPUS_BASE_URL}/products/{product_code}/tariffs/{tariff_code}/standard-unit-rates/"
    )
    params = {
        "period_from": (start - margin).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "period_to": (end + margin).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "page_size": PAGE_SIZE,
    }

    logger.info(f"Fetching Octopus {tariff_code} rates ({params['period_from']} - {params['period_to']})")

    results = []
    while url:
        response = http.get(url, params=params, source=SOURCE, session=session)
        try:
            data = response.json()
        except ValueError as e:
            raise MalformedPayload(f"Octopus response is not valid JSON: {e}", source=SOURCE) from e
        results.extend(_results(data))
        url = data.get("next")
        # "next" already carries the query string
        params = None

    df = parse_octopus_json({"results": results}, target_date=target_date, tz=tz)
    logger.info(f"  Received {len(df)} Octopus slots")
    return df
