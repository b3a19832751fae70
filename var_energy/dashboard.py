"""Dashboard aggregation: fetch every panel for a selected date and derive views.

Panels are fetched concurrently and each one is isolated: a PriceSourceError
turns only that panel into a "no data" state while its siblings render.
Anything else propagates to the caller, which shows it as a top-level error.

DashboardSession holds the selected date and tags each load with a generation
number so that only the most recently requested date is ever displayed.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
import datetime as dt
import threading

from loguru import logger
import pandas as pd

from var_energy.config import DEFAULT_OVERHEAD_CT_PER_KWH, DISPLAY_TZ
from var_energy.config import entsoe as entsoe_config
from var_energy.config import octopus as octopus_config
from var_energy.data.entsoe import fetch_day_ahead_prices
from var_energy.data.errors import PriceSourceError
from var_energy.data.octopus import fetch_octopus_prices
from var_energy.data.series import empty_series
from var_energy.features.transforms import add_overhead, price_delta, shift_days
from var_energy.features.units import normalize_series


@dataclass(frozen=True)
class PanelSpec:
    key: str
    title: str
    source: str  # "entsoe" or "octopus"
    day_offset: int
    unit: str


PANEL_SPECS = [
    PanelSpec("current", "ENTSO-E: Current Energy Prices", "entsoe", 0, entsoe_config.PRICE_UNIT),
    PanelSpec("day_ahead", "ENTSO-E: Day-Ahead Prices", "entsoe", 1, entsoe_config.PRICE_UNIT),
    PanelSpec("octopus", "Octopus Energy Prices", "octopus", 0, octopus_config.PRICE_UNIT),
]


@dataclass
class Panel:
    """One chart of the dashboard: a normalized series or the reason it is missing."""

    key: str
    title: str
    source: str
    target_date: dt.date
    series: pd.DataFrame = field(default_factory=empty_series)
    error: str | None = None

    @property
    def has_data(self) -> bool:
        return self.error is None and not self.series.empty


@dataclass
class DashboardResult:
    selected_date: dt.date
    panels: dict[str, Panel]
    overhead: float
    generation: int | None = None

    def __getitem__(self, key: str) -> Panel:
        return self.panels[key]

    @property
    def errors(self) -> dict[str, str]:
        return {key: p.error for key, p in self.panels.items() if p.error is not None}


def to_date(value, tz: str = DISPLAY_TZ) -> dt.date:
    """Coerce a date, string or timestamp to a calendar date in ``tz``."""
    if isinstance(value, dt.datetime):
        value = pd.Timestamp(value)
    elif isinstance(value, dt.date):
        return value
    ts = pd.Timestamp(value)
    if ts.tzinfo is not None:
        ts = ts.tz_convert(tz)
    return ts.date()


def today(tz: str = DISPLAY_TZ) -> dt.date:
    return pd.Timestamp.now(tz=tz).date()


def _fetch_panel(spec: PanelSpec, selected_date: dt.date, zone: str, tz: str) -> Panel:
    target_date = selected_date + dt.timedelta(days=spec.day_offset)
    panel = Panel(key=spec.key, title=spec.title, source=spec.source, target_date=target_date)

    try:
        if spec.source == "entsoe":
            raw = fetch_day_ahead_prices(target_date, zone=zone, tz=tz)
        else:
            raw = fetch_octopus_prices(target_date, tz=tz)
    except PriceSourceError as e:
        logger.warning(f"{spec.title} ({target_date}): {e}")
        panel.error = str(e)
        return panel

    panel.series = normalize_series(raw, spec.unit)
    return panel


def _derive_panel(key, title, source, target_date, inputs, build) -> Panel:
    panel = Panel(key=key, title=title, source=source, target_date=target_date)
    missing = [p.title for p in inputs if not p.has_data]
    if missing:
        panel.error = f"No data for {', '.join(missing)}"
        return panel
    panel.series = build(*[p.series for p in inputs])
    return panel


def derive_panels(
    panels: dict[str, Panel],
    selected_date: dt.date,
    overhead: float,
    tz: str = DISPLAY_TZ,
    delta_mode: str = "timestamp",
) -> dict[str, Panel]:
    """Build the derived panels from fetched ones.

    - customer: current wholesale price plus the flat retail overhead.
    - day_ahead_delta: tomorrow minus today at the same local time of day
      (positive means tomorrow is more expensive).
    - octopus_delta: Agile rate minus the simulated customer price
      (positive means the Agile tariff is more expensive).
    """
    current, day_ahead, octopus = panels["current"], panels["day_ahead"], panels["octopus"]

    customer = _derive_panel(
        "customer",
        "Simulated Customer Prices",
        "derived",
        selected_date,
        [current],
        lambda s: add_overhead(s, overhead),
    )
    day_ahead_delta = _derive_panel(
        "day_ahead_delta",
        "Day-Ahead minus Current",
        "derived",
        selected_date,
        [day_ahead, current],
        lambda tomorrow, today_: price_delta(shift_days(tomorrow, -1, tz), today_, how=delta_mode),
    )
    octopus_delta = _derive_panel(
        "octopus_delta",
        "Octopus minus Simulated Customer Price",
        "derived",
        selected_date,
        [octopus, customer],
        lambda agile, simulated: price_delta(agile, simulated, how=delta_mode),
    )
    return {p.key: p for p in (customer, day_ahead_delta, octopus_delta)}


def load_dashboard(
    selected_date=None,
    overhead: float | None = None,
    zone: str = entsoe_config.DEFAULT_ZONE,
    tz: str = DISPLAY_TZ,
    delta_mode: str = "timestamp",
    max_workers: int = 3,
) -> DashboardResult:
    """Fetch and derive every panel for ``selected_date``.

    Args:
        selected_date: Day to display. Defaults to today in ``tz``.
        overhead: Retail overhead in ct/kWh for the simulated customer price.
        zone: ENTSO-E bidding zone.
        tz: Timezone defining calendar days.
        delta_mode: Alignment mode for the delta panels.
        max_workers: Number of parallel fetch threads.

    Returns:
        DashboardResult with fetched and derived panels.
    """
    selected_date = to_date(selected_date, tz) if selected_date is not None else today(tz)
    overhead = DEFAULT_OVERHEAD_CT_PER_KWH if overhead is None else overhead

    logger.info(f"Loading dashboard for {selected_date} ({zone}, overhead {overhead} ct/kWh)")

    panels = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(_fetch_panel, spec, selected_date, zone, tz): spec for spec in PANEL_SPECS
        }
        for future in as_completed(futures):
            panel = future.result()  # propagate unexpected exceptions
            panels[panel.key] = panel

    # Keep the display order of PANEL_SPECS regardless of completion order
    panels = {spec.key: panels[spec.key] for spec in PANEL_SPECS}
    panels.update(derive_panels(panels, selected_date, overhead, tz=tz, delta_mode=delta_mode))

    return DashboardResult(selected_date=selected_date, panels=panels, overhead=overhead)


class DashboardSession:
    """Selected date, date navigation and last-requested-wins result handling.

    Each load takes a generation token from ``begin()``; ``complete()`` only
    accepts a result whose token is still the latest one issued.
    """

    def __init__(self, selected_date=None, tz: str = DISPLAY_TZ, loader=None, **load_kwargs):
        self.tz = tz
        self.selected_date = to_date(selected_date, tz) if selected_date is not None else today(tz)
        self.loader = loader if loader is not None else load_dashboard
        self.load_kwargs = load_kwargs
        self.result: DashboardResult | None = None
        self._generation = 0
        self._lock = threading.RLock()

    def prev_day(self) -> dt.date:
        with self._lock:
            self.selected_date -= dt.timedelta(days=1)
            return self.selected_date

    def next_day(self) -> dt.date:
        with self._lock:
            self.selected_date += dt.timedelta(days=1)
            return self.selected_date

    def go_today(self) -> dt.date:
        return self.select(today(self.tz))

    def select(self, value) -> dt.date:
        selected_date = to_date(value, self.tz)
        with self._lock:
            self.selected_date = selected_date
            return self.selected_date

    def begin(self) -> int:
        """Start a new load and return its generation token."""
        with self._lock:
            self._generation += 1
            return self._generation

    def complete(self, token: int, result: DashboardResult) -> bool:
        """Apply ``result`` if ``token`` is the latest generation.

        Returns:
            True if the result was applied, False if it was stale and discarded.
        """
        with self._lock:
            if token != self._generation:
                logger.debug(
                    f"Discarding stale result for {result.selected_date} "
                    f"(generation {token}, latest {self._generation})"
                )
                return False
            result.generation = token
            self.result = result
            return True

    def refresh(self) -> bool:
        """Load the selected date and apply the result unless a newer load started meanwhile."""
        with self._lock:
            token = self.begin()
            selected_date = self.selected_date
        result = self.loader(selected_date, tz=self.tz, **self.load_kwargs)
        return self.complete(token, result)
