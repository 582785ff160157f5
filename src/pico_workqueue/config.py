import os
from typing import Any

from pydantic import BaseModel, ConfigDict, PositiveInt, ValidationError

from .exceptions import InvalidConfigurationError

DEFAULT_CONCURRENCY = 10
CONCURRENCY_ENV_VAR = "PICO_WORKQUEUE_CONCURRENCY"
NAME_ENV_VAR = "PICO_WORKQUEUE_NAME"


class QueueConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    concurrency: PositiveInt = DEFAULT_CONCURRENCY
    name: str = "default"

    @classmethod
    def from_env(cls) -> "QueueConfig":
        values = {}
        if os.getenv(CONCURRENCY_ENV_VAR):
            values["concurrency"] = os.environ[CONCURRENCY_ENV_VAR]
        if os.getenv(NAME_ENV_VAR):
            values["name"] = os.environ[NAME_ENV_VAR]
        try:
            return cls(**values)
        except ValidationError as exc:
            raise InvalidConfigurationError(f"Invalid queue configuration from environment: {exc}") from exc


def check_concurrency(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidConfigurationError(f"Concurrency must be a positive integer, got {value!r}")
    return value
