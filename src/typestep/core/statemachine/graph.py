# src/typestep/core/statemachine/graph.py
"""Compiled artifacts: the state machine, its trigger rule, and the pair.

StateMachine wraps the top-level chain produced by the builder. Its
NetworkX view flattens every nesting level into one directed graph, which
is what validation and topology queries run against.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import networkx as nx

from typestep.contracts import DuplicateStateError, EventBus, MalformedPipelineError, StateKind, TransitionKind
from typestep.core.canonical import stable_hash
from typestep.core.statemachine.models import Chain, ForEach, Invoke, State, render_chain


class StateMachine:
    """Compiled state machine.

    Attributes:
        name: State machine name (also the trigger rule's target)
        chain: Top-level chain; the first state is the start state
    """

    def __init__(self, name: str, chain: Chain) -> None:
        if not chain:
            raise MalformedPipelineError(f"State machine '{name}' has no states")
        self.name = name
        self.chain = chain

    @property
    def start_at(self) -> str:
        return self.chain[0].name

    def iter_states(self) -> Iterator[tuple[int, State]]:
        """All states with their fan-out depth, depth-first in chain order.

        Catch branch states follow the invoke state that owns them.
        """
        yield from _iter_chain(self.chain, 0)

    def get_state(self, name: str) -> State:
        """Look up a state by name at any depth.

        Raises:
            KeyError: If no state has that name
        """
        for _, state in self.iter_states():
            if state.name == name:
                return state
        raise KeyError(name)

    def states_of_kind(self, kind: StateKind) -> list[State]:
        return [state for _, state in self.iter_states() if state.kind == kind]

    @property
    def state_count(self) -> int:
        return sum(1 for _ in self.iter_states())

    def graph(self) -> nx.DiGraph[str]:
        """Return a frozen NetworkX view of all states and transitions.

        Nodes carry `kind` and `depth` attributes; edges carry `label`
        (a TransitionKind).
        """
        graph: nx.DiGraph[str] = nx.DiGraph()
        _add_chain(graph, self.chain, 0)
        return nx.freeze(graph)  # type: ignore[no-any-return]

    def validate(self) -> None:
        """Validate the state machine structure.

        Validates:
        1. State names are unique across all nesting levels
        2. The transition graph is acyclic
        3. Every state is reachable from the start state

        Raises:
            DuplicateStateError: If two states share a name
            MalformedPipelineError: If the graph has a cycle or unreachable states
        """
        counts = Counter(state.name for _, state in self.iter_states())
        duplicates = [name for name, count in counts.items() if count > 1]
        if duplicates:
            raise DuplicateStateError(duplicates)

        graph = self.graph()
        if not nx.is_directed_acyclic_graph(graph):
            cycle = nx.find_cycle(graph)
            raise MalformedPipelineError(f"State machine contains a cycle: {' -> '.join(edge[0] for edge in cycle)}")

        reachable = nx.descendants(graph, self.start_at) | {self.start_at}
        unreachable = sorted(set(graph.nodes) - reachable)
        if unreachable:
            raise MalformedPipelineError(f"Unreachable states: {', '.join(unreachable)}")

    def to_asl(self) -> dict[str, Any]:
        """Amazon States Language definition of this state machine."""
        start_at, states = render_chain(self.chain)
        return {"StartAt": start_at, "States": states}

    def __repr__(self) -> str:
        return f"StateMachine(name={self.name!r}, start_at={self.start_at!r}, states={self.state_count})"


def _iter_chain(chain: Chain, depth: int) -> Iterator[tuple[int, State]]:
    for state in chain:
        yield depth, state
        if isinstance(state, Invoke) and state.catch is not None:
            for branch in state.catch.states:
                yield depth, branch
        if isinstance(state, ForEach):
            yield from _iter_chain(state.chain, depth + 1)


def _add_chain(graph: nx.DiGraph[str], chain: Chain, depth: int) -> None:
    previous: State | None = None
    for state in chain:
        graph.add_node(state.name, kind=state.kind, depth=depth)
        if previous is not None:
            graph.add_edge(previous.name, state.name, label=TransitionKind.NEXT)
        if isinstance(state, Invoke) and state.catch is not None:
            forward, fail = state.catch.states
            graph.add_node(forward.name, kind=forward.kind, depth=depth)
            graph.add_node(fail.name, kind=fail.kind, depth=depth)
            graph.add_edge(state.name, forward.name, label=TransitionKind.CATCH)
            graph.add_edge(forward.name, fail.name, label=TransitionKind.NEXT)
        if isinstance(state, ForEach):
            _add_chain(graph, state.chain, depth + 1)
            graph.add_edge(state.name, state.chain[0].name, label=TransitionKind.ITEM)
        previous = state


@dataclass(frozen=True, slots=True)
class TriggerRule:
    """EventBridge rule starting the state machine on matching events.

    Attributes:
        name: Rule name
        event_bus: Bus the rule listens on
        categories: detail-type values the rule matches
        target: Name of the state machine started by the rule
    """

    name: str
    event_bus: EventBus
    categories: tuple[str, ...]
    target: str

    def __post_init__(self) -> None:
        if not self.categories:
            raise ValueError(f"Trigger rule '{self.name}' requires at least one category")

    @property
    def event_pattern(self) -> dict[str, Any]:
        return {"detail-type": list(self.categories)}

    def to_dict(self) -> dict[str, Any]:
        return {
            "Name": self.name,
            "EventBusName": self.event_bus.address,
            "EventPattern": self.event_pattern,
            "Targets": [{"Id": "Target0", "StateMachine": self.target}],
        }


@dataclass(frozen=True, slots=True)
class CompiledPipeline:
    """Result of compiling a pipeline: one state machine plus one trigger rule."""

    state_machine: StateMachine
    rule: TriggerRule

    @property
    def definition(self) -> dict[str, Any]:
        return self.state_machine.to_asl()

    @property
    def definition_hash(self) -> str:
        """Stable hash of the ASL definition; equal pipelines hash equal."""
        return stable_hash(self.definition)

    def to_dict(self) -> dict[str, Any]:
        return {
            "StateMachine": {
                "Name": self.state_machine.name,
                "Definition": self.definition,
                "DefinitionHash": self.definition_hash,
            },
            "Rule": self.rule.to_dict(),
        }
