"""Process-level settings for standin.

Priority chain (highest to lowest):
  1. Init kwargs  — e.g. the ``--standin-backend`` pytest option
  2. Env vars     — ``STANDIN_*`` prefix
  3. Code defaults

Per-double behavior (mutability, leniency) is never configured here; it
belongs to each definition.
"""

from __future__ import annotations

from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings

DEFAULT_BACKEND = "mock"


class StandinSettings(BaseSettings):
    """Frozen settings object.

    Attributes:
        backend: Name of the backend :meth:`EntityDoubleFactory.for_backend`
            uses when called without a name.
        verbose: Log construction steps at DEBUG level.
        log_json: Render logs as JSON lines instead of console output.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "STANDIN_",
    }

    backend: str = DEFAULT_BACKEND
    verbose: bool = False
    log_json: bool = False

    @field_validator("backend", mode="before")
    @classmethod
    def _normalize_backend(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
            return value or DEFAULT_BACKEND
        return value

    @classmethod
    def from_options(cls, **options: Any) -> StandinSettings:
        """Construct settings, ignoring options left unset (``None``)."""
        return cls(**{key: value for key, value in options.items() if value is not None})
