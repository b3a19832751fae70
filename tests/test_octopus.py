"""Tests for the Octopus Agile parser and fetcher."""

import json
from unittest.mock import MagicMock

import pandas as pd
import pytest

from var_energy.data.errors import MalformedPayload, SourceUnavailable
from var_energy.data.octopus import fetch_octopus_prices, parse_octopus_json


class TestParseOctopusJson:
    def test_descending_results_are_sorted(self):
        payload = {
            "results": [
                {"valid_from": "2024-03-01T01:00:00Z", "value_inc_vat": 20},
                {"valid_from": "2024-03-01T00:00:00Z", "value_inc_vat": 15},
            ]
        }

        df = parse_octopus_json(payload)

        assert list(df.index) == [
            pd.Timestamp("2024-03-01T00:00Z"),
            pd.Timestamp("2024-03-01T01:00Z"),
        ]
        assert df["value"].tolist() == [15.0, 20.0]

    def test_unordered_input_gives_ascending_output(self, octopus_payload):
        slots = pd.date_range("2024-03-01T00:00Z", periods=48, freq="30min")
        rates = [(ts, float(i)) for i, ts in enumerate(slots)]
        shuffled = rates[::2][::-1] + rates[1::2]

        df = parse_octopus_json(octopus_payload(shuffled))

        assert df.index.is_monotonic_increasing
        assert df.index.is_unique
        assert df["value"].tolist() == [float(i) for i in range(48)]

    def test_gross_rate_is_value_and_net_rate_kept(self, octopus_payload):
        df = parse_octopus_json(octopus_payload([("2024-03-01T00:00Z", 21.0)]))

        assert df["value"].iloc[0] == 21.0
        assert df["value_exc_vat"].iloc[0] == pytest.approx(20.0)

    def test_accepts_json_text(self, octopus_payload):
        text = json.dumps(octopus_payload([("2024-03-01T00:00Z", 21.0)]))

        assert len(parse_octopus_json(text)) == 1

    def test_target_date_filter(self, octopus_payload):
        slots = pd.date_range("2024-02-29T23:00Z", periods=52, freq="30min")
        df = parse_octopus_json(
            octopus_payload([(ts, 10.0) for ts in slots]), target_date="2024-03-01", tz="UTC"
        )

        assert len(df) == 48
        assert df.index[0] == pd.Timestamp("2024-03-01T00:00Z")
        assert df.index[-1] == pd.Timestamp("2024-03-01T23:30Z")

    def test_invalid_records_are_skipped_with_warning(self):
        payload = {
            "results": [
                {"valid_from": "2024-03-01T00:00:00Z", "value_inc_vat": 15},
                {"valid_from": None, "value_inc_vat": 16},
                {"valid_from": "2024-03-01T01:00:00Z", "value_inc_vat": "n/a"},
            ]
        }

        df = parse_octopus_json(payload)

        assert df["value"].tolist() == [15.0]
        assert len(df.attrs["warnings"]) == 2

    @pytest.mark.parametrize("payload", [{}, {"results": None}, [], "not json"])
    def test_missing_results_raises(self, payload):
        with pytest.raises(MalformedPayload):
            parse_octopus_json(payload)


class TestFetchOctopusPrices:
    def test_window_and_filter(self, octopus_payload, make_response):
        slots = pd.date_range("2024-02-29T23:00Z", periods=52, freq="30min")
        session = MagicMock()
        session.get.return_value = make_response(
            payload=octopus_payload([(ts, 10.0) for ts in reversed(slots)])
        )

        df = fetch_octopus_prices("2024-03-01", tz="UTC", session=session)

        params = session.get.call_args.kwargs["params"]
        assert params["period_from"] == "2024-02-29T23:00:00Z"
        assert params["period_to"] == "2024-03-02T01:00:00Z"
        assert len(df) == 48
        assert df.index.is_monotonic_increasing

    def test_follows_pagination(self, octopus_payload, make_response):
        first = [(ts, 1.0) for ts in pd.date_range("2024-03-01T12:00Z", periods=24, freq="30min")]
        second = [(ts, 2.0) for ts in pd.date_range("2024-03-01T00:00Z", periods=24, freq="30min")]
        next_url = "https://api.octopus.energy/v1/products/X/tariffs/Y/standard-unit-rates/?page=2"
        session = MagicMock()
        session.get.side_effect = [
            make_response(payload=octopus_payload(first, next_url=next_url)),
            make_response(payload=octopus_payload(second)),
        ]

        df = fetch_octopus_prices("2024-03-01", tz="UTC", session=session)

        assert session.get.call_count == 2
        assert session.get.call_args_list[1].args[0] == next_url
        assert session.get.call_args_list[1].kwargs["params"] is None
        assert len(df) == 48
        assert df["value"].iloc[0] == 2.0
        assert df["value"].iloc[-1] == 1.0

    def test_http_error(self, make_response):
        session = MagicMock()
        session.get.return_value = make_response(status_code=503, text="Service Unavailable")

        with pytest.raises(SourceUnavailable) as excinfo:
            fetch_octopus_prices("2024-03-01", session=session)

        assert excinfo.value.status_code == 503
