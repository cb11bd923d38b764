"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 500

DEFAULT_POOL_SIZE = 10
DEFAULT_POOL_TIMEOUT_SECONDS = 10.0

MAX_COMPONENT_NAME_LENGTH = 100
# DECIMAL(12, 2) columns
MAX_AMOUNT = Decimal("9999999999.99")

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")
