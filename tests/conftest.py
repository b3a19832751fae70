"""Shared fixtures: ENTSO-E documents, Octopus payloads and fake HTTP responses."""

import json
from unittest.mock import MagicMock

import pandas as pd
import pytest

ENTSOE_NS = "urn:iec62325.351:tc57wg16:451-3:publicationdocument:7:3"


def _point_xml(position, price):
    return (
        f"<Point><position>{position}</position>"
        f"<price.amount>{price}</price.amount></Point>"
    )


def _time_series_xml(start, resolution, points, end=None, curve_type=None):
    interval = f"<start>{start}</start>" if start is not None else ""
    if end is not None:
        interval += f"<end>{end}</end>"
    curve = f"<curveType>{curve_type}</curveType>" if curve_type else ""
    res = f"<resolution>{resolution}</resolution>" if resolution is not None else ""
    body = "".join(_point_xml(pos, price) for pos, price in points)
    return (
        f"<TimeSeries><mRID>1</mRID>{curve}"
        f"<Period><timeInterval>{interval}</timeInterval>{res}{body}</Period>"
        f"</TimeSeries>"
    )


@pytest.fixture
def entsoe_xml():
    """Build a Publication_MarketDocument from (start, resolution, points, ...) blocks."""

    def build(*blocks, raw_blocks=()):
        series = "".join(_time_series_xml(**block) for block in blocks) + "".join(raw_blocks)
        return (
            '<?xml version="1.0" encoding="UTF-8"?>'
            f'<Publication_MarketDocument xmlns="{ENTSOE_NS}">'
            "<mRID>doc</mRID><type>A44</type>"
            f"{series}</Publication_MarketDocument>"
        )

    return build


@pytest.fixture
def acknowledgement_xml():
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<Acknowledgement_MarketDocument xmlns="urn:iec62325.351:tc57wg16:451-1:acknowledgementdocument:7:0">'
        "<mRID>ack</mRID>"
        "<Reason><code>999</code><text>No matching data found for Data item Day-ahead Prices</text></Reason>"
        "</Acknowledgement_MarketDocument>"
    )


@pytest.fixture
def octopus_payload():
    """Build an Octopus unit-rates payload from (valid_from, value_inc_vat) pairs."""

    def build(rates, next_url=None):
        results = []
        for valid_from, inc_vat in rates:
            start = pd.Timestamp(valid_from)
            results.append(
                {
                    "value_exc_vat": round(inc_vat / 1.05, 4),
                    "value_inc_vat": inc_vat,
                    "valid_from": start.strftime("%Y-%m-%dT%H:%M:%SZ"),
                    "valid_to": (start + pd.Timedelta(minutes=30)).strftime("%Y-%m-%dT%H:%M:%SZ"),
                }
            )
        return {"count": len(results), "next": next_url, "previous": None, "results": results}

    return build


@pytest.fixture
def make_response():
    """Build a fake requests.Response."""

    def build(status_code=200, text="", payload=None):
        response = MagicMock()
        response.status_code = status_code
        response.ok = status_code < 400
        if payload is not None:
            text = json.dumps(payload)
            response.json.return_value = payload
        else:
            response.json.side_effect = ValueError("No JSON object could be decoded")
        response.text = text
        response.content = text.encode("utf-8")
        return response

    return build


@pytest.fixture
def hourly_series():
    """Build a price series of hourly points starting at ``start``."""

    def build(values, start="2024-03-01T00:00Z", freq="60min"):
        index = pd.date_range(start=start, periods=len(values), freq=freq, name="time")
        df = pd.DataFrame({"value": [float(v) for v in values]}, index=index)
        df.attrs["warnings"] = []
        return df

    return build


@pytest.fixture
def entsoe_api_key(monkeypatch):
    monkeypatch.setenv("ENTSOE_API_KEY", "test-token")
    return "test-token"
