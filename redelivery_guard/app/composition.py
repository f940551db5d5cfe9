"""Composition root: build the guard from settings with system-backed collaborators.

Composition may: import concrete classes, read settings, choose defaults.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger as default_logger

from redelivery_guard.app.config.settings import Settings
from redelivery_guard.app.core import SERVICE_NAME
from redelivery_guard.app.domain.models import GuardPolicy
from redelivery_guard.app.domain.redelivery_guard import RedeliveryGuard
from redelivery_guard.app.infrastructure.messaging.rabbitmq.aio_pika_message_adapter import (
    AioPikaMessageAdapter,
)
from redelivery_guard.app.infrastructure.runtime.system_runtime import BlockingSleeper, SystemClock
from redelivery_guard.app.ports.runtime import Clock, Sleeper

if TYPE_CHECKING:
    from aio_pika import IncomingMessage as AioPikaIncomingMessage
    from loguru import Logger


def _log(event: str, **kwargs: Any) -> None:
    default_logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def create_redelivery_guard(
    settings: Settings | None = None,
    *,
    clock: Clock | None = None,
    sleeper: Sleeper | None = None,
    logger: "Logger | None" = None,
) -> RedeliveryGuard:
    settings = settings or Settings()
    policy = GuardPolicy(
        max_redelivery_count=settings.max_redelivery_count,
        max_message_ttl_seconds=settings.max_message_ttl_seconds,
        reception_delay_seconds=settings.redelivered_message_delay_seconds,
    )
    _log(
        "guard_created",
        max_redelivery_count=policy.max_redelivery_count,
        max_message_ttl_seconds=policy.max_message_ttl_seconds,
        reception_delay_seconds=policy.reception_delay_seconds,
    )
    return RedeliveryGuard.from_policy(
        policy,
        clock=clock or SystemClock(),
        sleeper=sleeper or BlockingSleeper(),
        logger=logger,
    )


def adapt_aio_pika_message(
    message: "AioPikaIncomingMessage",
    settings: Settings | None = None,
) -> AioPikaMessageAdapter:
    settings = settings or Settings()
    return AioPikaMessageAdapter(message, delivery_count_header=settings.delivery_count_header)
