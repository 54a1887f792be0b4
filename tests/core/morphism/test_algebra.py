# tests/core/morphism/test_algebra.py
"""Tests for morphism construction and construction-time type checking."""

from typing import Any

import pytest

import typestep
from typestep.contracts import MorphismTypeError
from typestep.core.morphism import MapNode, SeqNode, YieldNode, function
from typestep.core.morphism.ast import FromNode, QueueTarget
from tests.fixtures.pipeline import (
    GET_USER,
    INPUT_BUS,
    MAIL_TO,
    PICK_CATEGORY,
    PICK_PRODUCT,
    REPLY,
    Account,
    Category,
    Mail,
    PremiumAccount,
    Product,
    User,
    make_lambda,
    passthrough,
)


class TestFrom:
    def test_creates_root_with_from_node(self) -> None:
        m = typestep.from_(Account, INPUT_BUS)

        assert m.root.root is True
        assert len(m.root.items) == 1
        assert isinstance(m.root.items[0], FromNode)
        assert m.root.items[0].type_name == "Account"
        assert m.input_type is Account
        assert m.output_type is Account
        assert m.open_depth == 0

    def test_categories_recorded(self) -> None:
        m = typestep.from_(Account, INPUT_BUS, "AccountCreated", "AccountUpdated")

        node = m.root.items[0]
        assert isinstance(node, FromNode)
        assert node.source.categories == ("AccountCreated", "AccountUpdated")
        assert node.source.bus == INPUT_BUS

    def test_not_complete_without_yield(self) -> None:
        assert typestep.from_(Account, INPUT_BUS).is_complete is False


class TestJoin:
    def test_appends_map_node(self) -> None:
        m = typestep.join(GET_USER, typestep.from_(Account, INPUT_BUS))

        assert isinstance(m.root.items[1], MapNode)
        assert m.root.items[1].binding.name == "GetUser"
        assert m.root.items[1].binding.concurrency == 1
        assert m.output_type is User

    def test_rejects_mismatched_input(self) -> None:
        m = typestep.from_(Account, INPUT_BUS)

        with pytest.raises(MorphismTypeError, match="join: function PickCategory expects User, upstream produces Account") as exc_info:
            typestep.join(PICK_CATEGORY, m)  # type: ignore[arg-type]

        assert exc_info.value.produced is Account
        assert exc_info.value.expected is User

    def test_accepts_subclass_input(self) -> None:
        m = typestep.join(GET_USER, typestep.from_(PremiumAccount, INPUT_BUS))

        assert m.output_type is User

    def test_any_accepts_everything(self) -> None:
        m = typestep.join(passthrough("Echo"), typestep.from_(Account, INPUT_BUS))

        assert m.output_type is Any

    def test_does_not_mutate_argument(self) -> None:
        a = typestep.from_(Account, INPUT_BUS)
        typestep.join(GET_USER, a)

        assert len(a.root.items) == 1

    def test_join_inside_fan_out_lands_in_nested_chain(self) -> None:
        c = typestep.join(PICK_CATEGORY, typestep.join(GET_USER, typestep.from_(Account, INPUT_BUS)))
        d = typestep.lift(PICK_PRODUCT, c)
        describe = function(make_lambda("Describe"), list[Product], str)
        e = typestep.join(describe, d)

        nested = e.root.items[-1]
        assert isinstance(nested, SeqNode)
        assert [item.binding.name for item in nested.items if isinstance(item, MapNode)] == ["PickProduct", "Describe"]
        assert e.open_depth == 1


class TestLift:
    def _categories(self) -> typestep.Morphism[Account, list[Category]]:
        return typestep.join(PICK_CATEGORY, typestep.join(GET_USER, typestep.from_(Account, INPUT_BUS)))

    def test_opens_nested_chain(self) -> None:
        m = typestep.lift(PICK_PRODUCT, self._categories())

        nested = m.root.items[-1]
        assert isinstance(nested, SeqNode)
        assert nested.root is False
        assert nested.items == (MapNode(binding=PICK_PRODUCT.bind()),)
        assert m.open_depth == 1
        assert m.output_type == list[Product]

    def test_lift_p_records_concurrency(self) -> None:
        m = typestep.lift_p(5, PICK_PRODUCT, self._categories())

        nested = m.root.items[-1]
        assert isinstance(nested, SeqNode)
        assert nested.items[0] == MapNode(binding=PICK_PRODUCT.bind(5))

    def test_second_lift_nests_inside_first(self) -> None:
        m = typestep.lift(MAIL_TO, typestep.lift(PICK_PRODUCT, self._categories()))

        outer = m.root.items[-1]
        assert isinstance(outer, SeqNode)
        inner = outer.items[-1]
        assert isinstance(inner, SeqNode)
        assert inner.items == (MapNode(binding=MAIL_TO.bind()),)
        assert m.open_depth == 2
        assert m.output_type is Mail

    def test_rejects_non_list_upstream(self) -> None:
        m = typestep.join(GET_USER, typestep.from_(Account, INPUT_BUS))

        with pytest.raises(MorphismTypeError, match="upstream must produce a list, got User"):
            typestep.lift(PICK_CATEGORY, m)  # type: ignore[arg-type]

    def test_rejects_mismatched_element(self) -> None:
        with pytest.raises(MorphismTypeError, match="expects Product, upstream produces Category"):
            typestep.lift(MAIL_TO, self._categories())  # type: ignore[arg-type]

    @pytest.mark.parametrize("n", [0, -3])
    def test_lift_p_rejects_non_positive_bound(self, n: int) -> None:
        with pytest.raises(ValueError, match="concurrency must be a positive integer"):
            typestep.lift_p(n, PICK_PRODUCT, self._categories())


class TestWrapAndUnit:
    def test_wrap_opens_empty_fan_out(self) -> None:
        c = typestep.join(PICK_CATEGORY, typestep.join(GET_USER, typestep.from_(Account, INPUT_BUS)))
        m = typestep.wrap(c)

        assert m.root.items[-1] == SeqNode()
        assert m.output_type is Category
        assert m.open_depth == 1

    def test_wrap_then_join_runs_per_element(self) -> None:
        c = typestep.join(PICK_CATEGORY, typestep.join(GET_USER, typestep.from_(Account, INPUT_BUS)))
        m = typestep.join(PICK_PRODUCT, typestep.wrap(c))

        nested = m.root.items[-1]
        assert isinstance(nested, SeqNode)
        assert nested.items == (MapNode(binding=PICK_PRODUCT.bind()),)

    def test_unit_closes_context(self) -> None:
        c = typestep.join(PICK_CATEGORY, typestep.join(GET_USER, typestep.from_(Account, INPUT_BUS)))
        d = typestep.lift(PICK_PRODUCT, c)
        m = typestep.unit(d)

        assert m.open_depth == 0
        assert m.output_type == list[list[Product]]
        assert m.root == d.root

    def test_join_after_unit_lands_in_parent_chain(self) -> None:
        c = typestep.join(PICK_CATEGORY, typestep.join(GET_USER, typestep.from_(Account, INPUT_BUS)))
        m = typestep.join(passthrough("Flatten"), typestep.unit(typestep.lift(PICK_PRODUCT, c)))

        assert isinstance(m.root.items[-1], MapNode)
        assert m.root.items[-1].binding.name == "Flatten"

    def test_unit_without_open_context_rejected(self) -> None:
        with pytest.raises(MorphismTypeError, match="no open fan-out context"):
            typestep.unit(typestep.from_(Account, INPUT_BUS))

    def test_wrap_rejects_non_list(self) -> None:
        with pytest.raises(MorphismTypeError, match="wrap: upstream must produce a list"):
            typestep.wrap(typestep.from_(Account, INPUT_BUS))  # type: ignore[arg-type]

    def test_unit_on_unseeded_wrap_rejected(self) -> None:
        c = typestep.join(PICK_CATEGORY, typestep.join(GET_USER, typestep.from_(Account, INPUT_BUS)))

        with pytest.raises(MorphismTypeError, match="needs a join before unit"):
            typestep.unit(typestep.wrap(c))


class TestYield:
    def test_to_queue_terminates(self) -> None:
        m = typestep.to_queue(REPLY, typestep.join(GET_USER, typestep.from_(Account, INPUT_BUS)))

        assert m.root.items[-1] == YieldNode(target=QueueTarget(queue=REPLY), type_name="User")
        assert m.terminated is True
        assert m.is_complete is True
        assert m.output_type is type(None)

    def test_yield_closes_open_fan_outs_at_root(self) -> None:
        c = typestep.join(PICK_CATEGORY, typestep.join(GET_USER, typestep.from_(Account, INPUT_BUS)))
        m = typestep.to_queue(REPLY, typestep.lift(PICK_PRODUCT, c))

        assert isinstance(m.root.items[-1], YieldNode)
        assert m.open_depth == 0

    def test_yield_rejects_unseeded_wrap(self) -> None:
        c = typestep.join(PICK_CATEGORY, typestep.join(GET_USER, typestep.from_(Account, INPUT_BUS)))

        with pytest.raises(MorphismTypeError, match="to_queue: a fan-out opened by wrap needs a join before the yield"):
            typestep.to_queue(REPLY, typestep.wrap(c))

    def test_event_bus_yield_rejects_unseeded_wrap(self) -> None:
        c = typestep.join(PICK_CATEGORY, typestep.join(GET_USER, typestep.from_(Account, INPUT_BUS)))

        with pytest.raises(MorphismTypeError, match="needs a join before the yield"):
            typestep.to_event_bus("recommendations", INPUT_BUS, typestep.wrap(c))

    def test_yield_rejects_wrap_nested_in_lift(self) -> None:
        c = typestep.join(PICK_CATEGORY, typestep.join(GET_USER, typestep.from_(Account, INPUT_BUS)))
        products = typestep.lift(PICK_PRODUCT, c)

        with pytest.raises(MorphismTypeError, match="needs a join before the yield"):
            typestep.to_queue(REPLY, typestep.wrap(products))

    def test_cannot_compose_after_yield(self) -> None:
        m = typestep.to_queue(REPLY, typestep.from_(Account, INPUT_BUS))

        with pytest.raises(MorphismTypeError, match="cannot compose after a terminal yield"):
            typestep.join(passthrough("Late"), m)

    def test_event_bus_requires_source(self) -> None:
        with pytest.raises(ValueError, match="non-empty event source"):
            typestep.to_event_bus("", INPUT_BUS, typestep.from_(Account, INPUT_BUS))

    def test_repr_is_readable(self) -> None:
        m = typestep.join(GET_USER, typestep.from_(Account, INPUT_BUS))

        assert repr(m) == "Morphism[Account, User](2 nodes, open_depth=0)"
