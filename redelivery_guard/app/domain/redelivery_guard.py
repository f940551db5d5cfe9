"""Redelivery guard: decides whether a redelivered message must not be processed further.

Checks run in a fixed order and each can short-circuit to a stop:
  null message -> redelivered flag -> redelivery count -> message TTL -> throttling.
First deliveries are never counted, TTL-checked or delayed. Throttling never
stops processing; it only blocks the calling thread for the configured delay.

The guard never raises for message inspection: an absent message or a
MessageReadError on any accessor is logged and turned into a stop, so an
unreadable message cannot be redelivered forever.

Stateless apart from its immutable policy; safe to share between threads.
"""
from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from loguru import logger as default_logger

from redelivery_guard.app.constants import StopReason
from redelivery_guard.app.core import SERVICE_NAME
from redelivery_guard.app.domain.models import GuardDecision, GuardPolicy
from redelivery_guard.app.ports.redeliverable_message import MessageReadError, RedeliverableMessage
from redelivery_guard.app.ports.runtime import Clock, Sleeper

if TYPE_CHECKING:
    from loguru import Logger


class RedeliveryGuard:
    """Poison-message gate parameterized by a GuardPolicy.

    Clock and sleeper are required collaborators (see composition.create_redelivery_guard
    for the system-backed ones). logger defaults to the global loguru logger.
    """

    def __init__(
        self,
        max_redelivery_count: int,
        max_message_ttl_seconds: int,
        reception_delay_seconds: int,
        *,
        clock: Clock,
        sleeper: Sleeper,
        logger: "Logger | None" = None,
    ) -> None:
        self._policy = GuardPolicy(
            max_redelivery_count=max_redelivery_count,
            max_message_ttl_seconds=max_message_ttl_seconds,
            reception_delay_seconds=reception_delay_seconds,
        )
        self._clock = clock
        self._sleeper = sleeper
        self._logger = (logger or default_logger).bind(service_name=SERVICE_NAME)

    @classmethod
    def from_policy(
        cls,
        policy: GuardPolicy,
        *,
        clock: Clock,
        sleeper: Sleeper,
        logger: "Logger | None" = None,
    ) -> "RedeliveryGuard":
        return cls(
            policy.max_redelivery_count,
            policy.max_message_ttl_seconds,
            policy.reception_delay_seconds,
            clock=clock,
            sleeper=sleeper,
            logger=logger,
        )

    @property
    def policy(self) -> GuardPolicy:
        return self._policy

    def should_stop(self, message: RedeliverableMessage | None) -> bool:
        """Return True if the caller must not process the message further."""
        return self.evaluate(message).stop

    async def should_stop_async(self, message: RedeliverableMessage | None) -> bool:
        """should_stop() run in a worker thread so the event loop is not blocked while throttling."""
        return await asyncio.to_thread(self.should_stop, message)

    def evaluate(self, message: RedeliverableMessage | None) -> GuardDecision:
        if message is None:
            self._log("message_null").error(
                "Message is null! Check the calling code for errors. Stopping processing to avoid "
                "potential poison message redelivery."
            )
            return GuardDecision.halt(StopReason.NULL_MESSAGE)

        try:
            if not message.is_redelivered():
                message_id = message.get_id()
                self._log("message_not_redelivered", message_id=message_id).debug(
                    "Message [{}] detected as NOT redelivered, allowing further processing...",
                    message_id,
                )
                return GuardDecision.proceed()

            # Absent count reads as 0.
            redelivery_count = message.get_redelivery_count() or 0

            if self._policy.redelivery_limit_enabled and self._redelivery_limit_exceeded(
                message, redelivery_count
            ):
                return GuardDecision.halt(StopReason.REDELIVERY_LIMIT_EXCEEDED)

            if self._policy.ttl_enabled and self._ttl_exceeded(message):
                return GuardDecision.halt(StopReason.TTL_EXCEEDED)

            return GuardDecision.proceed(self._throttle(message, redelivery_count))
        except MessageReadError:
            self._log("message_read_failed").exception(
                "Unexpected error while checking redelivery conditions. This should not happen and "
                "requires investigation. Message will not be processed further to avoid potential "
                "poison message redelivery."
            )
            return GuardDecision.halt(StopReason.READ_FAILURE)

    def _log(self, event: str, **kwargs: Any) -> "Logger":
        return self._logger.bind(event=event, **kwargs)

    def _redelivery_limit_exceeded(self, message: RedeliverableMessage, redelivery_count: int) -> bool:
        limit = self._policy.max_redelivery_count
        message_id = message.get_id()
        if redelivery_count > limit:
            self._log(
                "redelivery_limit_exceeded",
                message_id=message_id,
                redelivery_count=redelivery_count,
                max_redelivery_count=limit,
            ).error(
                "Redelivery count: {} of message [{}] exceeds max redelivery count: {}, this message "
                "will be dropped to prevent poison message redelivery, please investigate it! "
                "Message details: {}",
                redelivery_count,
                message_id,
                limit,
                message,
            )
            return True

        self._log(
            "redelivery_limit_ok",
            message_id=message_id,
            redelivery_count=redelivery_count,
            max_redelivery_count=limit,
        ).debug(
            "Redelivery count: {} of message [{}] does not exceed max redelivery count: {}",
            redelivery_count,
            message_id,
            limit,
        )
        return False

    def _ttl_exceeded(self, message: RedeliverableMessage) -> bool:
        timestamp_ms = message.get_timestamp()
        if timestamp_ms is None:
            raise MessageReadError("message has no timestamp")
        lifespan_ms = self._clock.now_ms() - timestamp_ms
        ttl_seconds = self._policy.max_message_ttl_seconds
        message_id = message.get_id()
        if lifespan_ms > self._policy.ttl_ms:
            self._log(
                "message_ttl_exceeded",
                message_id=message_id,
                lifespan_ms=lifespan_ms,
                max_message_ttl_seconds=ttl_seconds,
            ).error(
                "Message lifespan: {} ms of message [{}] exceeds max message TTL: {} s, this message "
                "will be dropped to prevent poison message redelivery, please investigate it! "
                "Message details: {}",
                lifespan_ms,
                message_id,
                ttl_seconds,
                message,
            )
            return True

        self._log(
            "message_ttl_ok",
            message_id=message_id,
            lifespan_ms=lifespan_ms,
            max_message_ttl_seconds=ttl_seconds,
        ).debug(
            "Message lifespan: {} ms of message [{}] does not exceed max message TTL: {} s",
            lifespan_ms,
            message_id,
            ttl_seconds,
        )
        return False

    def _throttle(self, message: RedeliverableMessage, redelivery_count: int) -> int:
        """Block for the configured delay. Returns the delay applied, in seconds."""
        delay = self._policy.reception_delay_seconds
        message_id = message.get_id()
        if not self._policy.throttling_enabled:
            self._log("throttling_skipped", message_id=message_id, redelivery_count=redelivery_count).debug(
                "Message [{}] detected as redelivered {} times. Throttling not applied as not configured.",
                message_id,
                redelivery_count,
            )
            return 0

        self._log(
            "throttling_applied",
            message_id=message_id,
            redelivery_count=redelivery_count,
            delay_seconds=delay,
        ).debug(
            "Message [{}] detected as redelivered {} times. Delaying further processing by {} s ...",
            message_id,
            redelivery_count,
            delay,
        )
        try:
            self._sleeper.sleep(delay)
        except InterruptedError:
            self._log("throttling_interrupted", message_id=message_id).warning(
                "Silently ignoring interruption while throttling redelivered message [{}]",
                message_id,
            )
        return delay
