"""Domain models."""
from __future__ import annotations

from dataclasses import dataclass

from redelivery_guard.app.constants import StopReason


@dataclass(frozen=True)
class GuardPolicy:
    """Redelivery limits. A value of 0 disables the corresponding check."""

    max_redelivery_count: int
    max_message_ttl_seconds: int
    reception_delay_seconds: int

    def __post_init__(self) -> None:
        for name in ("max_redelivery_count", "max_message_ttl_seconds", "reception_delay_seconds"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be an int")
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")

    @property
    def redelivery_limit_enabled(self) -> bool:
        return self.max_redelivery_count > 0

    @property
    def ttl_enabled(self) -> bool:
        return self.max_message_ttl_seconds > 0

    @property
    def throttling_enabled(self) -> bool:
        return self.reception_delay_seconds > 0

    @property
    def ttl_ms(self) -> int:
        return self.max_message_ttl_seconds * 1000


@dataclass(frozen=True)
class GuardDecision:
    """Outcome of one guard evaluation (value object)."""

    stop: bool
    reason: StopReason | None = None
    throttled_seconds: int = 0

    @staticmethod
    def proceed(throttled_seconds: int = 0) -> "GuardDecision":
        return GuardDecision(stop=False, throttled_seconds=throttled_seconds)

    @staticmethod
    def halt(reason: StopReason) -> "GuardDecision":
        return GuardDecision(stop=True, reason=reason)
