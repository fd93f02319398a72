"""Tests for filter expression translation."""

from __future__ import annotations

import pytest

from docstore.database.filters import (
    And,
    Comparison,
    Not,
    Or,
    and_,
    field,
    not_,
    or_,
    to_query,
)


@pytest.mark.unit
class TestComparisons:
    """Each operator on a field reference produces one condition."""

    @pytest.mark.parametrize(
        ("expression", "expected"),
        [
            (field("name") == "A", {"name": {"$eq": "A"}}),
            (field("name") != "A", {"name": {"$ne": "A"}}),
            (field("age") > 1, {"age": {"$gt": 1}}),
            (field("age") >= 1, {"age": {"$gte": 1}}),
            (field("age") < 1, {"age": {"$lt": 1}}),
            (field("age") <= 1, {"age": {"$lte": 1}}),
            (field("age").is_in([1, 2]), {"age": {"$in": [1, 2]}}),
            (field("age").not_in([1, 2]), {"age": {"$nin": [1, 2]}}),
            (field("email").exists(), {"email": {"$exists": True}}),
            (field("email").exists(False), {"email": {"$exists": False}}),
            (field("name").matches("^A"), {"name": {"$regex": "^A"}}),
        ],
    )
    def test_translation(self, expression: Comparison, expected: dict) -> None:
        assert expression.to_query() == expected

    def test_field_comparison_builds_filter_not_bool(self) -> None:
        """== on a field reference returns a Comparison."""
        expression = field("name") == "A"
        assert isinstance(expression, Comparison)
        assert expression == Comparison("name", "$eq", "A")


@pytest.mark.unit
class TestCombinators:
    """&, | and ~ compose filters."""

    def test_and(self) -> None:
        query = ((field("a") == 1) & (field("b") == 2)).to_query()
        assert query == {"$and": [{"a": {"$eq": 1}}, {"b": {"$eq": 2}}]}

    def test_or(self) -> None:
        query = ((field("a") == 1) | (field("b") == 2)).to_query()
        assert query == {"$or": [{"a": {"$eq": 1}}, {"b": {"$eq": 2}}]}

    def test_nested_and_is_flattened(self) -> None:
        expression = (field("a") == 1) & (field("b") == 2) & (field("c") == 3)
        assert isinstance(expression, And)
        assert len(expression.to_query()["$and"]) == 3

    def test_mixed_nesting_is_kept(self) -> None:
        expression = ((field("a") == 1) | (field("b") == 2)) & (field("c") == 3)
        assert expression.to_query() == {
            "$and": [
                {"$or": [{"a": {"$eq": 1}}, {"b": {"$eq": 2}}]},
                {"c": {"$eq": 3}},
            ]
        }

    def test_not_uses_nor(self) -> None:
        query = (~(field("a") == 1)).to_query()
        assert query == {"$nor": [{"a": {"$eq": 1}}]}

    def test_function_helpers(self) -> None:
        a, b = field("a") == 1, field("b") == 2
        assert and_(a, b) == And((a, b))
        assert or_(a, b) == Or((a, b))
        assert not_(a) == Not(a)


@pytest.mark.unit
class TestResolver:
    """The resolver maps field names and values before translation."""

    @staticmethod
    def resolve(name: str, value: object) -> tuple[str, object]:
        if name == "id":
            return "_id", f"oid:{value}" if value is not None else None
        return name, value

    def test_equality_resolves_name_and_value(self) -> None:
        assert (field("id") == "x").to_query(self.resolve) == {"_id": {"$eq": "oid:x"}}

    def test_in_resolves_each_value(self) -> None:
        query = field("id").is_in(["x", "y"]).to_query(self.resolve)
        assert query == {"_id": {"$in": ["oid:x", "oid:y"]}}

    def test_exists_resolves_name_only(self) -> None:
        assert field("id").exists().to_query(self.resolve) == {"_id": {"$exists": True}}

    def test_resolver_reaches_nested_filters(self) -> None:
        query = (~((field("id") == "x") | (field("name") == "A"))).to_query(self.resolve)
        assert query == {"$nor": [{"$or": [{"_id": {"$eq": "oid:x"}}, {"name": {"$eq": "A"}}]}]}


@pytest.mark.unit
class TestToQuery:
    def test_none_matches_everything(self) -> None:
        assert to_query(None) == {}

    def test_mapping_passes_through(self) -> None:
        raw = {"name": {"$in": ["A", "B"]}}
        assert to_query(raw) == raw

    def test_rejects_other_types(self) -> None:
        with pytest.raises(TypeError):
            to_query(lambda c: c.name == "A")  # type: ignore[arg-type]
