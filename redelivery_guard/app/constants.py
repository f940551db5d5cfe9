"""Guard-level constants shared across modules."""
from __future__ import annotations

from enum import Enum

# RabbitMQ quorum queues track delivery attempts in this header.
AMQP_DELIVERY_COUNT_HEADER = "x-delivery-count"


class StopReason(str, Enum):
    NULL_MESSAGE = "NULL_MESSAGE"
    REDELIVERY_LIMIT_EXCEEDED = "REDELIVERY_LIMIT_EXCEEDED"
    TTL_EXCEEDED = "TTL_EXCEEDED"
    READ_FAILURE = "READ_FAILURE"
