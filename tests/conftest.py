# tests/conftest.py
"""Shared test fixtures.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import os
from collections.abc import Iterator

import pytest
import structlog
from hypothesis import Phase, Verbosity, settings

from typestep import EventBus, Queue
from typestep.core.statemachine import StateMachineBuilder
from tests.fixtures.pipeline import INPUT_BUS, REPLY


@pytest.fixture
def input_bus() -> EventBus:
    return INPUT_BUS


@pytest.fixture
def reply_queue() -> Queue:
    return REPLY


@pytest.fixture
def builder() -> StateMachineBuilder:
    """Builder without a dead-letter queue."""
    return StateMachineBuilder()


@pytest.fixture
def dlq_builder(reply_queue: Queue) -> StateMachineBuilder:
    """Builder wiring every invoke state to the reply queue on failure."""
    return StateMachineBuilder(dead_letter_queue=reply_queue)


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Tests that configure logging must not leak configuration to others."""
    yield
    structlog.reset_defaults()


# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
