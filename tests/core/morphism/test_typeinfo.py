# tests/core/morphism/test_typeinfo.py
"""Tests for runtime type-token helpers."""

from collections.abc import Sequence
from typing import Any

import pytest

from typestep.core.morphism.typeinfo import element_type, is_compatible, list_of, type_name
from tests.fixtures.pipeline import Account, PremiumAccount, Product, User


class TestTypeName:
    @pytest.mark.parametrize(
        ("tp", "expected"),
        [
            (Account, "Account"),
            (list[Product], "list[Product]"),
            (list[list[Product]], "list[list[Product]]"),
            (None, "None"),
            (type(None), "None"),
            (Any, "Any"),
            (str, "str"),
        ],
    )
    def test_names(self, tp: Any, expected: str) -> None:
        assert type_name(tp) == expected


class TestElementType:
    def test_list(self) -> None:
        assert element_type(list[Product]) is Product

    def test_sequence(self) -> None:
        assert element_type(Sequence[Product]) is Product

    def test_bare_list_is_any(self) -> None:
        assert element_type(list) is Any

    def test_non_list(self) -> None:
        assert element_type(Product) is None

    def test_list_of_roundtrip(self) -> None:
        assert element_type(list_of(User)) is User


class TestIsCompatible:
    @pytest.mark.parametrize(
        ("produced", "expected"),
        [
            (Account, Account),
            (PremiumAccount, Account),
            (Any, User),
            (User, Any),
            (list[PremiumAccount], list[Account]),
            (list[Product], Sequence[Product]),
        ],
    )
    def test_compatible(self, produced: Any, expected: Any) -> None:
        assert is_compatible(produced, expected)

    @pytest.mark.parametrize(
        ("produced", "expected"),
        [
            (Account, PremiumAccount),
            (Account, User),
            (list[Account], Account),
            (Account, list[Account]),
            (list[User], list[Account]),
        ],
    )
    def test_incompatible(self, produced: Any, expected: Any) -> None:
        assert not is_compatible(produced, expected)
