from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from redelivery_guard.app.constants import AMQP_DELIVERY_COUNT_HEADER


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # 0 disables the corresponding check.
    max_redelivery_count: int = Field(0, ge=0, validation_alias="GUARD_MAX_REDELIVERY_COUNT")
    max_message_ttl_seconds: int = Field(0, ge=0, validation_alias="GUARD_MAX_MESSAGE_TTL_SECONDS")
    redelivered_message_delay_seconds: int = Field(
        0,
        ge=0,
        validation_alias="GUARD_REDELIVERED_MESSAGE_DELAY_SECONDS",
    )

    delivery_count_header: str = Field(
        AMQP_DELIVERY_COUNT_HEADER,
        validation_alias="GUARD_DELIVERY_COUNT_HEADER",
    )
