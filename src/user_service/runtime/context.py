"""Current configuration, held in a context variable.

Code reads settings through ``get_config()``. Tests and scripts swap in a
partial override for a block of code with ``with_context``; only the leaves
set on the override replace the active values.
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel

from src.user_service.runtime.config.config_data import ConfigData
from src.user_service.runtime.config.config_template import load_config


@dataclass
class AppContext:
    """State shared by the whole process; currently just the configuration."""

    config: ConfigData


# .env is optional; existing environment variables win
load_dotenv(".env", override=False)

_app_context: ContextVar[AppContext] = ContextVar(
    "app_context", default=AppContext(config=load_config(Path("config.yaml")))
)


def get_context() -> AppContext:
    return _app_context.get()


def set_context(context: AppContext) -> Token[AppContext]:
    return _app_context.set(context)


def get_config() -> ConfigData:
    """Configuration active in the current context."""
    return get_context().config


def _assigned_values(model: BaseModel) -> dict[str, Any]:
    """Collect the leaves that were passed or assigned on ``model``.

    ``ConfigData().app.port = 1`` marks ``port`` as set on the nested model
    only, so nested models are walked even when the parent never saw them.
    """
    assigned: dict[str, Any] = {}
    for name in type(model).model_fields:
        value = getattr(model, name)
        if isinstance(value, BaseModel):
            nested = _assigned_values(value)
            if nested:
                assigned[name] = nested
            elif name in model.model_fields_set:
                assigned[name] = value.model_dump()
        elif name in model.model_fields_set:
            assigned[name] = value
    return assigned


def _overlay(base: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in changes.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _overlay(merged[key], value)
        else:
            merged[key] = value
    return merged


@contextmanager
def with_context(config_override: ConfigData | None = None):
    """Apply ``config_override`` on top of the current configuration.

    Example:
        with with_context(ConfigData(app=AppConfig(expose_error_details=False))):
            assert get_config().app.expose_error_details is False
    """
    if config_override is None:
        yield
        return

    if not isinstance(config_override, ConfigData):
        raise ValueError(
            f"config_override must be ConfigData, or None, got {type(config_override)}"
        )

    current = get_context()
    merged = ConfigData.model_validate(
        _overlay(current.config.model_dump(), _assigned_values(config_override))
    )
    token = set_context(replace(current, config=merged))
    try:
        yield
    finally:
        _app_context.reset(token)
