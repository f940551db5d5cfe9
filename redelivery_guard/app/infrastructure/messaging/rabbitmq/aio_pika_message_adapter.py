"""Adapter: wrap aio_pika.IncomingMessage to implement ports.RedeliverableMessage."""
from __future__ import annotations

from datetime import datetime, timezone

from aio_pika import IncomingMessage as AioPikaIncomingMessage

from redelivery_guard.app.constants import AMQP_DELIVERY_COUNT_HEADER
from redelivery_guard.app.ports.redeliverable_message import MessageReadError


class AioPikaMessageAdapter:
    """Implements redelivery_guard.app.ports.redeliverable_message.RedeliverableMessage for aio_pika.

    The redelivery count comes from a header (RabbitMQ quorum queues set
    x-delivery-count); a missing header reads as 0. A missing timestamp cannot
    be TTL-checked and is reported as a read failure.
    """

    def __init__(
        self,
        message: AioPikaIncomingMessage,
        *,
        delivery_count_header: str = AMQP_DELIVERY_COUNT_HEADER,
    ) -> None:
        self._message = message
        self._delivery_count_header = delivery_count_header

    @property
    def raw(self) -> AioPikaIncomingMessage:
        return self._message

    def is_redelivered(self) -> bool:
        try:
            return bool(self._message.redelivered)
        except AttributeError as exc:
            raise MessageReadError(f"cannot read redelivered flag: {exc}") from exc

    def get_redelivery_count(self) -> int:
        try:
            headers = self._message.headers or {}
        except AttributeError as exc:
            raise MessageReadError(f"cannot read headers: {exc}") from exc

        value = headers.get(self._delivery_count_header)
        if value is None:
            return 0
        if isinstance(value, bytes):
            value = value.decode()
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise MessageReadError(
                f"header {self._delivery_count_header} is not an integer: {value!r}"
            ) from exc

    def get_timestamp(self) -> int:
        try:
            timestamp = self._message.timestamp
        except AttributeError as exc:
            raise MessageReadError(f"cannot read timestamp: {exc}") from exc

        if timestamp is None:
            raise MessageReadError("message has no timestamp")
        if isinstance(timestamp, datetime):
            if timestamp.tzinfo is None:
                timestamp = timestamp.replace(tzinfo=timezone.utc)
            return int(timestamp.timestamp() * 1000)
        try:
            # AMQP timestamps are whole seconds.
            return int(timestamp) * 1000
        except (TypeError, ValueError) as exc:
            raise MessageReadError(f"unsupported timestamp: {timestamp!r}") from exc

    def get_id(self) -> str | None:
        return getattr(self._message, "message_id", None)

    def __str__(self) -> str:
        m = self._message
        body = getattr(m, "body", b"") or b""
        return (
            f"AioPikaMessage(message_id={getattr(m, 'message_id', None)!r}, "
            f"redelivered={getattr(m, 'redelivered', None)!r}, "
            f"delivery_tag={getattr(m, 'delivery_tag', None)!r}, "
            f"routing_key={getattr(m, 'routing_key', None)!r}, "
            f"timestamp={getattr(m, 'timestamp', None)!r}, "
            f"headers={getattr(m, 'headers', None)!r}, "
            f"body_size={len(body)})"
        )
