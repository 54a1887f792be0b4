# src/typestep/core/__init__.py
"""Core infrastructure: morphism algebra, state machine compiler, canonical hashing, configuration, logging."""

from typestep.core.canonical import (
    canonical_json,
    stable_hash,
)
from typestep.core.config import (
    OutputSettings,
    QueueSettings,
    StateMachineSettings,
    TypeStepSettings,
    load_settings,
)
from typestep.core.logging import (
    configure_logging,
    get_logger,
)

__all__ = [
    "OutputSettings",
    "QueueSettings",
    "StateMachineSettings",
    "TypeStepSettings",
    "canonical_json",
    "configure_logging",
    "get_logger",
    "load_settings",
    "stable_hash",
]
