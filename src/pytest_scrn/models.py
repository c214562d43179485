"""Base Pydantic models for screenshot workflow elements.

This module defines the foundational model classes used by all workflow
structures. It enforces immutability and strict schema validation to
guarantee that parsed workflows are deterministic, explicit, and safe to
execute.
"""

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchemaModel(BaseModel):
    """Base immutable model for all workflow elements.

    This class serves as the root for all Pydantic models representing
    workflow constructs such as screenshot items, actions, selectors,
    and derived test plan entries.

    Design principles enforced by this model:
        - Immutability: elements cannot be modified after creation.
          Test plan entries derived from one specification never share
          mutable state with each other.
        - Strict schema validation: unknown or extra fields are rejected
          to avoid silent errors caused by typos in YAML files.

    All workflow models must inherit from this class.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra='forbid',
        populate_by_name=True,
    )


class SettingsModel(BaseSettings):
    """Base immutable model for runtime settings.

    This class serves as the root for all settings models responsible for
    resolving runtime configuration (for example, environment variables,
    CI-provided values, or local overrides).

    Design principles enforced by this model:
        - Immutability: resolved settings cannot be modified after creation.
          Flags such as highlight support are read once per runner.
        - Tolerant schema handling: unknown or extra fields are ignored.
          This allows the surrounding environment to contain unrelated
          variables without breaking configuration resolution.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )
