"""Tests for the Typer CLI."""

import datetime as dt
import json

import pandas as pd
from typer.testing import CliRunner

from var_energy import dashboard
from var_energy.cli import app
from var_energy.data import octopus
from var_energy.data.errors import SourceUnavailable

runner = CliRunner()


def _day_series(target_date, value):
    index = pd.date_range(
        pd.Timestamp(target_date.isoformat(), tz="UTC"), periods=24, freq="60min", name="time"
    )
    return pd.DataFrame({"value": [value] * 24}, index=index)


def test_dashboard_command_shows_failed_panel(monkeypatch):
    seen_dates = []

    def fake_entsoe(target_date, zone="DE-LU", tz="UTC"):
        seen_dates.append(target_date)
        return _day_series(target_date, 100.0)

    def fake_octopus(target_date, tz="UTC"):
        raise SourceUnavailable("HTTP error! status: 404", status_code=404)

    monkeypatch.setattr(dashboard, "fetch_day_ahead_prices", fake_entsoe)
    monkeypatch.setattr(dashboard, "fetch_octopus_prices", fake_octopus)

    result = runner.invoke(app, ["dashboard", "--date", "2024-03-01", "--next", "--table"])

    assert result.exit_code == 0
    assert "Energy Overview 02.03.2024" in result.output
    assert "No data available. HTTP error! status: 404" in result.output
    assert sorted(seen_dates) == [dt.date(2024, 3, 2), dt.date(2024, 3, 3)]


def test_dashboard_command_reports_unexpected_error(monkeypatch):
    def broken(target_date, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(dashboard, "fetch_day_ahead_prices", broken)
    monkeypatch.setattr(dashboard, "fetch_octopus_prices", broken)

    result = runner.invoke(app, ["dashboard", "--date", "2024-03-01"])

    assert result.exit_code == 1
    assert "boom" in result.output


def test_invalid_date():
    result = runner.invoke(app, ["dashboard", "--date", "not-a-date"])

    assert result.exit_code != 0


def test_dashboard_command_prints_parse_warnings(monkeypatch):
    def fake_entsoe(target_date, zone="DE-LU", tz="UTC"):
        df = _day_series(target_date, 100.0)
        df.attrs["warnings"] = ["TimeSeries 1: invalid point position='3' price='n/a', skipped"]
        return df

    monkeypatch.setattr(dashboard, "fetch_day_ahead_prices", fake_entsoe)
    monkeypatch.setattr(
        dashboard, "fetch_octopus_prices", lambda target_date, tz="UTC": _day_series(target_date, 25.0)
    )

    result = runner.invoke(app, ["dashboard", "--date", "2024-03-01"])

    assert result.exit_code == 0
    assert "Warning: TimeSeries 1: invalid point" in result.output
    assert "ct/kWh" in result.output


def test_prices_command_writes_chart_json(monkeypatch, tmp_path):
    monkeypatch.setattr(
        octopus, "fetch_octopus_prices", lambda target_date: _day_series(target_date, 21.0)
    )
    output = tmp_path / "octopus.json"

    result = runner.invoke(
        app, ["prices", "octopus", "--date", "2024-03-01", "--json", "--output", str(output)]
    )

    assert result.exit_code == 0
    rows = json.loads(output.read_text())
    assert len(rows) == 24
    assert rows[0]["time"] == int(pd.Timestamp("2024-03-01T00:00Z").timestamp() * 1000)
    assert rows[0]["price"] == 21.0
    assert rows[0]["price_euro"] == "0.210"
