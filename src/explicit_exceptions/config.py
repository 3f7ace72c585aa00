"""Settings for leak tracking, resolved from defaults, env and overrides.

Resolution order (later wins): schema defaults, ``EXPLICIT_EXCEPTIONS_*``
environment variables (after loading a ``.env`` file), explicit overrides.
The pydantic ``Settings`` model is the single validation wall.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any, Literal, get_args

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from explicit_exceptions.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

log = logging.getLogger(__name__)

ENV_PREFIX = "EXPLICIT_EXCEPTIONS_"

LeakSinkName = Literal["warnings", "logging"]

_DOTENV_LOADED: bool = False


class Settings(BaseModel):
    """Validated configuration for the leak detector."""

    leak_detection: bool = Field(default=True)
    capture_stack: bool = Field(default=True)
    stack_limit: int | None = Field(default=None, ge=1)
    leak_sink: LeakSinkName = Field(default="warnings")
    report_at_exit: bool = Field(default=False)

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("leak_sink", mode="before")
    @classmethod
    def normalize_leak_sink(cls, v: Any) -> Any:
        """Accept sink names case-insensitively."""
        if isinstance(v, str):
            return v.strip().lower()
        return v


def _coerce_bool(v: str) -> bool:
    return v.strip().lower() in {"1", "true", "yes", "on"}


def _coerce_env_value(value: str, field_name: str) -> Any:
    info = Settings.model_fields.get(field_name)
    annotation = info.annotation if info is not None else None
    if annotation is bool:
        return _coerce_bool(value)
    optional = type(None) in get_args(annotation)
    if annotation is int or (optional and int in get_args(annotation)):
        stripped = value.strip()
        if optional and stripped.lower() in {"", "none"}:
            return None
        try:
            return int(stripped)
        except ValueError:
            return value
    return value


def load_env() -> dict[str, Any]:
    """Read ``EXPLICIT_EXCEPTIONS_*`` variables into a field dictionary.

    Unknown suffixes are kept so that the schema can reject them with a
    precise message.
    """
    config: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        config[field_name] = _coerce_env_value(value, field_name)
    return config


def _try_load_dotenv() -> None:
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    _DOTENV_LOADED = True
    try:
        load_dotenv()
    except Exception as e:
        # A broken .env must not stop the library from importing.
        log.debug("Ignoring .env load failure: %s", e)


def resolve_settings(overrides: Mapping[str, Any] | None = None) -> Settings:
    """Resolve and validate settings.

    Args:
        overrides: Field values that take precedence over the environment.

    Returns:
        A frozen ``Settings`` instance.

    Raises:
        ConfigurationError: When any source supplies an invalid value.
    """
    _try_load_dotenv()
    merged = {**load_env(), **(overrides or {})}
    try:
        return Settings(**merged)
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(p) for p in err["loc"]) or "<root>" for err in e.errors()
        )
        raise ConfigurationError(
            f"Invalid explicit-exceptions settings: {fields}",
            hint=(
                f"Check {ENV_PREFIX}* environment variables; valid fields are "
                f"{', '.join(Settings.model_fields)}"
            ),
        ) from e
