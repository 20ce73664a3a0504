from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from .constants import (
    DEFAULT_ABSENCE_RATE_PER_DAY,
    DEFAULT_DEAN_APPROVAL_POSITIONS,
    DEFAULT_GRACE_PERIOD_MINUTES,
    DEFAULT_LATE_RATE_PER_MINUTE,
    DEFAULT_OVERTIME_BONUS,
)


@dataclass(frozen=True)
class EngineSettings:
    """Configuration surface of the rule engines."""

    grace_period_minutes: int = DEFAULT_GRACE_PERIOD_MINUTES
    late_rate_per_minute: Decimal = DEFAULT_LATE_RATE_PER_MINUTE
    absence_rate_per_day: Decimal = DEFAULT_ABSENCE_RATE_PER_DAY
    overtime_bonus: Decimal = DEFAULT_OVERTIME_BONUS
    dean_approval_positions: frozenset[str] = field(
        default_factory=lambda: frozenset(DEFAULT_DEAN_APPROVAL_POSITIONS)
    )

    @classmethod
    def from_settings(cls, settings) -> "EngineSettings":
        """Build from a settings module (``config.development`` etc.)."""

        positions = getattr(settings, "DEAN_APPROVAL_POSITIONS", DEFAULT_DEAN_APPROVAL_POSITIONS)
        return cls(
            grace_period_minutes=int(getattr(settings, "GRACE_PERIOD_MINUTES", DEFAULT_GRACE_PERIOD_MINUTES)),
            late_rate_per_minute=Decimal(str(getattr(settings, "LATE_RATE_PER_MINUTE", DEFAULT_LATE_RATE_PER_MINUTE))),
            absence_rate_per_day=Decimal(str(getattr(settings, "ABSENCE_RATE_PER_DAY", DEFAULT_ABSENCE_RATE_PER_DAY))),
            overtime_bonus=Decimal(str(getattr(settings, "OVERTIME_BONUS", DEFAULT_OVERTIME_BONUS))),
            dean_approval_positions=frozenset(str(p).strip() for p in positions if str(p).strip()),
        )
