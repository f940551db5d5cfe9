from __future__ import annotations

from typing import Any

import pytest
from loguru import logger

from redelivery_guard.app.domain.redelivery_guard import RedeliveryGuard
from tests.fakes import (
    MAX_REDELIVERY_10_TIMES,
    MAX_TTL_10_SECONDS,
    REDELIVERED_MESSAGE_THROTTLE_DELAY_ONE_SECOND,
    FixedClock,
    RecordingSleeper,
)


@pytest.fixture()
def sleeper() -> RecordingSleeper:
    return RecordingSleeper()


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def default_guard(clock: FixedClock, sleeper: RecordingSleeper) -> RedeliveryGuard:
    return RedeliveryGuard(
        MAX_REDELIVERY_10_TIMES,
        MAX_TTL_10_SECONDS,
        REDELIVERED_MESSAGE_THROTTLE_DELAY_ONE_SECOND,
        clock=clock,
        sleeper=sleeper,
    )


@pytest.fixture()
def captured_logs():
    """Collects loguru records (level, event, extra, message) emitted while the test runs."""
    records: list[dict[str, Any]] = []

    def sink(message: Any) -> None:
        record = message.record
        records.append(
            {
                "level": record["level"].name,
                "event": record["extra"].get("event"),
                "extra": dict(record["extra"]),
                "message": record["message"],
            }
        )

    handler_id = logger.add(sink, level="DEBUG")
    yield records
    logger.remove(handler_id)
