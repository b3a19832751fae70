"""Chart data and figure rendering for the dashboard panels.

Prices are drawn as step lines (a price holds for its whole settlement
interval) against local time.
"""

from pathlib import Path

from loguru import logger
import matplotlib

matplotlib.use("Agg")

import matplotlib.dates as mdates  # noqa: E402
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402

from var_energy.config import DISPLAY_TZ  # noqa: E402
from var_energy.data.series import iter_points  # noqa: E402
from var_energy.features.transforms import combine_series, shift_days  # noqa: E402
from var_energy.features.units import CANONICAL_UNIT  # noqa: E402

PANEL_COLORS = {
    "current": "#3182CE",
    "day_ahead": "#805AD5",
    "octopus": "#E53E3E",
    "customer": "#38A169",
    "day_ahead_delta": "#DD6B20",
    "octopus_delta": "#D53F8C",
}


def to_chart_data(df: pd.DataFrame, tz: str = DISPLAY_TZ) -> list[dict]:
    """Convert a normalized price series into chart rows.

    Returns:
        List of dicts with "time" (epoch ms), "display_time" (HH:MM local),
        "date_name" (DD.MM.YYYY local), "price" (ct/kWh, 2 decimals) and
        "price_euro" (EUR/kWh as a 3-decimal string).
    """
    rows = []
    for point in iter_points(df):
        timestamp, value = point.timestamp, point.value
        local = timestamp.tz_convert(tz)
        rows.append(
            {
                "time": int(timestamp.timestamp() * 1000),
                "display_time": local.strftime("%H:%M"),
                "date_name": local.strftime("%d.%m.%Y"),
                "price": round(value, 2),
                "price_euro": f"{value / 100:.3f}",
            }
        )
    return rows


def plot_series(ax, df: pd.DataFrame, label: str, color: str, tz: str = DISPLAY_TZ) -> None:
    """Draw one price series as a step line on ``ax``."""
    local_index = df.index.tz_convert(tz)
    ax.step(
        local_index.to_pydatetime(),
        df["value"].to_numpy(),
        where="post",
        label=label,
        color=color,
        linewidth=2.0,
    )


def _format_axes(ax, tz: str):
    ax.axhline(0, color="#CBD5E0", linewidth=1)
    ax.grid(axis="y", linestyle="--", alpha=0.5)
    ax.xaxis.set_major_formatter(mdates.DateFormatter("%H:%M", tz=tz))
    ax.set_ylabel(CANONICAL_UNIT)


def plot_dashboard(result, output_path: Path, tz: str = DISPLAY_TZ) -> Path:
    """Render every panel of a DashboardResult to a PNG file.

    Panels without data show "No data available" together with the error.

    Args:
        result: DashboardResult from load_dashboard.
        output_path: PNG path; parent directories are created.
        tz: Timezone of the time axis.

    Returns:
        The written path.
    """
    panels = list(result.panels.values())
    fig, axes = plt.subplots(len(panels), 1, figsize=(12, 3.2 * len(panels)), squeeze=False)

    for ax, panel in zip(axes[:, 0], panels):
        ax.set_title(f"{panel.title} - {panel.target_date:%d.%m.%Y}", loc="left", fontsize=11)
        if panel.has_data:
            plot_series(ax, panel.series, panel.title, PANEL_COLORS.get(panel.key, "#4A5568"), tz)
            _format_axes(ax, tz)
        else:
            message = "No data available"
            if panel.error:
                message += f"\n{panel.error}"
            ax.text(0.5, 0.5, message, ha="center", va="center", transform=ax.transAxes)
            ax.set_xticks([])
            ax.set_yticks([])

    fig.suptitle(f"Energy Overview {result.selected_date:%d.%m.%Y}", fontsize=14)
    fig.tight_layout()

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=120)
    plt.close(fig)

    logger.info(f"Saved dashboard figure to {output_path}")
    return output_path


def combined_table(result, tz: str = DISPLAY_TZ, how: str = "timestamp") -> pd.DataFrame:
    """Overlay the price panels of a DashboardResult on the current day's timeline.

    The day-ahead series is moved back one day so that both days line up by time
    of day. Returns an empty frame if the current panel has no data.
    """
    current = result.panels["current"]
    if not current.has_data:
        return pd.DataFrame()

    named = {"current": current.series}
    customer = result.panels.get("customer")
    if customer is not None and customer.has_data:
        named["customer"] = customer.series
    day_ahead = result.panels.get("day_ahead")
    if day_ahead is not None and day_ahead.has_data:
        named["day_ahead"] = shift_days(day_ahead.series, -1, tz)
    octopus = result.panels.get("octopus")
    if octopus is not None and octopus.has_data:
        named["octopus"] = octopus.series

    table = combine_series(named, how=how)
    table.index = table.index.tz_convert(tz)
    return table
