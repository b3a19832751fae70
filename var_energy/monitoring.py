"""
Price publication monitoring script.

Checks whether the next day's auction prices and Agile rates are published
and complete. Run this via cron/task scheduler after the daily auction to be
alerted when a source is late.
"""

import datetime as dt
import sys

from loguru import logger
import pandas as pd

from var_energy.config import DISPLAY_TZ
from var_energy.data.entsoe import fetch_day_ahead_prices
from var_energy.data.errors import PriceSourceError, SourceUnavailable
from var_energy.data.octopus import fetch_octopus_prices
from var_energy.data.series import day_bounds
from var_energy.features.alignment import infer_resolution

# Exit codes for monitoring systems
EXIT_OK = 0
EXIT_WARNING = 1
EXIT_CRITICAL = 2

STATUS_SYMBOLS = {"OK": "✓", "PARTIAL": "⚠", "MISSING": "✗", "ERROR": "✗"}


def check_coverage(df: pd.DataFrame, target_date, tz: str = DISPLAY_TZ) -> dict:
    """Compare a fetched series with the number of intervals its day should have.

    Returns:
        Dict with status, points, expected, resolution and message.
    """
    if df.empty:
        return {
            "status": "MISSING",
            "points": 0,
            "expected": None,
            "resolution": None,
            "message": "No prices published",
        }

    start, end = day_bounds(target_date, tz)
    resolution = infer_resolution(df)
    expected = int((end - start) / resolution)
    points = len(df)

    if points >= expected:
        status = "OK"
        message = f"{points} prices at {resolution} resolution"
    else:
        status = "PARTIAL"
        message = f"{points}/{expected} prices at {resolution} resolution"

    return {
        "status": status,
        "points": points,
        "expected": expected,
        "resolution": resolution,
        "message": message,
    }


def check_source(name: str, fetch, target_date, tz: str = DISPLAY_TZ) -> dict:
    """Fetch one source and check its coverage of ``target_date``."""
    try:
        df = fetch(target_date, tz=tz)
    except SourceUnavailable as e:
        return {
            "status": "MISSING",
            "points": 0,
            "expected": None,
            "resolution": None,
            "message": str(e),
        }
    except PriceSourceError as e:
        return {
            "status": "ERROR",
            "points": 0,
            "expected": None,
            "resolution": None,
            "message": f"{type(e).__name__}: {e}",
        }
    return check_coverage(df, target_date, tz)


def monitor_publication(target_date=None, tz: str = DISPLAY_TZ) -> int:
    """Run publication checks for ``target_date`` (default: tomorrow) and return exit code.

    Returns:
        0 if all OK, 1 if prices are partial or not yet published, 2 on errors
    """
    if target_date is None:
        target_date = pd.Timestamp.now(tz=tz).date() + dt.timedelta(days=1)

    logger.info("=" * 80)
    logger.info(f"PRICE PUBLICATION MONITORING - {target_date}")
    logger.info("=" * 80)

    sources = {
        "entsoe_day_ahead": fetch_day_ahead_prices,
        "octopus_agile": fetch_octopus_prices,
    }

    has_errors = False
    has_warnings = False

    for name, fetch in sources.items():
        result = check_source(name, fetch, target_date, tz)
        status_symbol = STATUS_SYMBOLS.get(result["status"], "?")
        logger.info(f"  [{status_symbol}] {name:20s}: {result['message']}")

        if result["status"] == "ERROR":
            has_errors = True
        elif result["status"] in ["PARTIAL", "MISSING"]:
            has_warnings = True

    # Summary
    logger.info("=" * 80)
    if has_errors:
        logger.error("CRITICAL: A price source failed!")
        return EXIT_CRITICAL
    elif has_warnings:
        logger.warning("WARNING: Some prices are not published yet!")
        return EXIT_WARNING
    else:
        logger.success("OK: All prices are published!")
        return EXIT_OK


if __name__ == "__main__":
    exit_code = monitor_publication()
    sys.exit(exit_code)
