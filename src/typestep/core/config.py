# src/typestep/core/config.py
"""
Configuration schema and loading for typestep compilations.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from typestep.contracts import OutputFormat, Queue


class QueueSettings(BaseModel):
    """Reference to an existing SQS queue.

    Example YAML:
        dead_letter_queue:
          name: reply
          url: https://sqs.eu-west-1.amazonaws.com/000000000000/reply
    """

    model_config = {"frozen": True}

    name: str = Field(min_length=1, description="Stable queue identifier")
    url: str = Field(min_length=1, description="Queue URL used by SQS send-message tasks")
    arn: str | None = Field(default=None, description="Queue ARN")

    def to_resource(self) -> Queue:
        return Queue(name=self.name, url=self.url, arn=self.arn)


class StateMachineSettings(BaseModel):
    """Naming and limits of the compiled state machine."""

    model_config = {"frozen": True}

    name: str = Field(
        default="StateMachine",
        min_length=1,
        description="State machine name; the trigger rule is named <name>Rule",
    )
    max_seq_concurrency: int | None = Field(
        default=None,
        gt=0,
        description="Upper bound on MaxConcurrency of every fan-out (None = use each function's bound)",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """State machine names are limited to 80 letters, digits, '-' and '_'."""
        if not re.fullmatch(r"[A-Za-z0-9_-]{1,80}", v):
            raise ValueError(f"invalid state machine name '{v}': use up to 80 letters, digits, '-' or '_'")
        return v


class OutputSettings(BaseModel):
    """How compiled artifacts are written."""

    model_config = {"frozen": True}

    format: OutputFormat = Field(default=OutputFormat.JSON, description="json or yaml")
    indent: int = Field(default=2, ge=0, le=8, description="Indentation of JSON output")


class TypeStepSettings(BaseModel):
    """Top-level typestep configuration.

    All settings are validated and frozen after construction.
    """

    model_config = {"frozen": True}

    state_machine: StateMachineSettings = Field(
        default_factory=StateMachineSettings,
        description="State machine naming and limits",
    )
    dead_letter_queue: QueueSettings | None = Field(
        default=None,
        description="Queue receiving inputs of failed invocations (None = no catch branches)",
    )
    output: OutputSettings = Field(
        default_factory=OutputSettings,
        description="Artifact serialization",
    )


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Args:
        config: Configuration dict (may contain nested structures)

    Returns:
        New dict with environment variables expanded

    Raises:
        ValueError: If a referenced environment variable is unset and has no default
    """
    import os

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default = match.group(2)
            env_value = os.environ.get(var_name)
            if env_value is not None:
                return env_value
            if default is not None:
                return default
            raise ValueError(f"Required environment variable '{var_name}' is not set")

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _lower_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_lower_keys(item) for item in value]
    return value


def load_settings(config_path: Path) -> TypeStepSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (TYPESTEP_*) - highest priority
    2. Config file
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: TYPESTEP_STATE_MACHINE__NAME for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated TypeStepSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="TYPESTEP",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; Pydantic fields are lowercase
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): _lower_keys(v) for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    raw_config = _expand_env_vars(raw_config)

    return TypeStepSettings(**raw_config)
