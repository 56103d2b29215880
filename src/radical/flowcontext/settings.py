"""Settings models for the context runtime.

The runtime only reads the settings it needs to select and construct stores:
the store declarations, the seed for the global scope and the approved
top-level settings that every store receives in its config.
"""

from __future__ import annotations

import copy
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from .constants import APPROVED_SETTINGS
from .errors import ConfigError


class StoreDeclaration(BaseModel):
    # One entry of context_storage: the store implementation and its own config.
    # Descriptive keys alongside module and config are allowed and ignored.
    model_config = ConfigDict(extra="ignore", arbitrary_types_allowed=True)
    module: Union[str, Callable[..., Any]]
    config: dict[str, Any] = Field(default_factory=dict)

    @field_validator("config", mode="before")
    @classmethod
    def _empty_config(cls, value: Any) -> Any:
        # An empty ``config:`` key in YAML loads as None
        return {} if value is None else value

    @classmethod
    def from_raw(cls, name: str, raw: Any) -> StoreDeclaration:
        """Validate a raw declaration, reporting problems as ``ConfigError``."""
        if not isinstance(raw, Mapping):
            raise ConfigError(
                f"Context storage '{name}' must be a mapping with a 'module' entry, "
                f"got {type(raw).__name__}"
            )
        if "module" not in raw:
            raise ConfigError(f"No module specified for context storage '{name}'")
        try:
            return cls.model_validate(dict(raw))
        except ValidationError as e:
            raise ConfigError(f"Invalid context storage '{name}': {e}") from e


class ContextSettings(BaseModel):
    # Unrelated runtime settings may be passed in and are ignored.
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    user_dir: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("user_dir", "userDir")
    )
    function_global_context: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices(
            "function_global_context", "functionGlobalContext"
        ),
    )
    # Raw declarations are validated one by one during load so that the
    # 'default' alias check runs first and failures name the offending store.
    context_storage: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("context_storage", "contextStorage"),
    )

    @classmethod
    def from_mapping(
        cls, settings: Union[ContextSettings, Mapping[str, Any], None]
    ) -> ContextSettings:
        if settings is None:
            return cls()
        if isinstance(settings, cls):
            return settings
        try:
            return cls.model_validate(dict(settings))
        except ValidationError as e:
            raise ConfigError(f"Invalid context settings: {e}") from e

    def approved_settings(self) -> dict[str, Any]:
        """Deep copies of the settings every store is allowed to see."""
        return {
            name: copy.deepcopy(getattr(self, name)) for name in APPROVED_SETTINGS
        }
