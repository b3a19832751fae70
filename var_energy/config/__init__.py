import os
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

# Load environment variables from .env file if it exists
load_dotenv()

# Paths
PROJ_ROOT = Path(__file__).resolve().parents[2]
logger.debug(f"PROJ_ROOT path is: {PROJ_ROOT}")

REPORTS_DIR = PROJ_ROOT / "reports"
FIGURES_DIR = REPORTS_DIR / "figures"

# Display timezone: calendar days, chart axes and date navigation use this zone
DISPLAY_TZ = os.getenv("VAR_ENERGY_TZ", "Europe/Berlin")

# Illustrative retail markup (taxes, grid fees) added to wholesale prices, ct/kWh.
# Variants of the dashboard used values between 18.0 and 20.0.
DEFAULT_OVERHEAD_CT_PER_KWH = float(os.getenv("VAR_ENERGY_OVERHEAD_CT", "18.5"))

# HTTP timeout in seconds for both price APIs
REQUEST_TIMEOUT = float(os.getenv("VAR_ENERGY_TIMEOUT", "30"))


def get_entsoe_api_key() -> str | None:
    """Return the ENTSO-E security token from the environment, if set.

    Read on each call so that a key exported after import is still picked up.
    """
    return os.getenv("ENTSOE_API_KEY") or None
