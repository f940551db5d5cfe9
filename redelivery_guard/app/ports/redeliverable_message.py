"""Port: read-only view of a broker message the guard inspects. Broker adapters implement it."""
from __future__ import annotations

from typing import Protocol, runtime_checkable


class MessageReadError(Exception):
    """Raised when a message property cannot be read from the transport."""


@runtime_checkable
class RedeliverableMessage(Protocol):
    """Transport-agnostic message capabilities needed to detect poison redelivery.

    Every accessor may raise MessageReadError. str(message) is a diagnostic dump
    used only in error-level logs.
    """

    def is_redelivered(self) -> bool: ...

    def get_redelivery_count(self) -> int | None:
        """Delivery attempts recorded by the broker. Meaningful only when redelivered; None reads as 0."""
        ...

    def get_timestamp(self) -> int | None:
        """Time the message was originally sent, in ms since epoch (broker clock). None is a read failure."""
        ...

    def get_id(self) -> str | None: ...
