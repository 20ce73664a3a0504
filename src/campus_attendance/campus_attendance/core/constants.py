"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_GRACE_PERIOD_MINUTES = 15
DEFAULT_LATE_RATE_PER_MINUTE = Decimal("1.00")
DEFAULT_ABSENCE_RATE_PER_DAY = Decimal("240.00")
DEFAULT_OVERTIME_BONUS = Decimal("200.00")

DEFAULT_DEAN_APPROVAL_POSITIONS = ("Program Head", "Full Time", "Part Time")

DEFAULT_DB_CONNECT_TIMEOUT = 10
DEFAULT_DB_LOCK_WAIT_TIMEOUT = 5
DEFAULT_DB_STATEMENT_TIMEOUT_MS = 10_000

DEFAULT_LIST_LIMIT = 200
MONEY_QUANTUM = Decimal("0.01")
