"""Octopus Energy API configuration."""

OCTOPUS_BASE_URL = "https://api.octopus.energy/v1"

# Public UK Agile tariff, no account needed for unit rates
PRODUCT_CODE = "AGILE-FLEX-22-11-25"
TARIFF_CODE = "E-1R-AGILE-FLEX-22-11-25-C"

# Maximum page size the unit-rates endpoint accepts
PAGE_SIZE = 1500

# Extra margin on each side of the requested day so no slot at the boundary is lost
QUERY_MARGIN_HOURS = 1

PRICE_UNIT = "p/kWh"
