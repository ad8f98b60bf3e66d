"""Base Pydantic models for runner records and settings.

This module defines the foundational model classes used by persisted
records (such as spec tags) and by the runner settings. It enforces
immutability so that values read before a run stay stable during it.
"""

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchemaModel(BaseModel):
    """Base immutable model for runner records.

    Design principles enforced by this model:
        - Immutability: records cannot be modified after creation.
          A tag read from a file is the same tag when it is written back.
        - Strict schema validation: unknown or extra fields are rejected
          to avoid silent errors caused by typos.

    All record models must inherit from this class.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra='forbid',
    )


class SettingsModel(BaseSettings):
    """Base immutable model for runner settings.

    This class serves as the root for settings models responsible for
    resolving runtime configuration (for example, environment variables,
    CI-provided values, or configuration files).

    Design principles enforced by this model:
        - Immutability: resolved settings cannot be modified after creation.
          The kernel reads them during a run and never writes them.
        - Tolerant schema handling: unknown environment variables are
          ignored, so the surrounding environment does not break
          configuration resolution.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )
