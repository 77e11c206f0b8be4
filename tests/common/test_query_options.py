"""Tests for sort, projection and find option normalisation."""

import pytest

from store_bridge.base.query import (
    FindOptions,
    parse_direction,
    parse_projection,
    parse_sort_fields,
)
from store_bridge.errors import UsageError


class TestSortParsing:
    @pytest.mark.parametrize(
        ("sort", "expected"),
        [
            (None, []),
            ("name", [("name", 1)]),
            ("-name", [("name", -1)]),
            (("name", "desc"), [("name", -1)]),
            (("name", -1), [("name", -1)]),
            ({"a": 1, "b": "descending"}, [("a", 1), ("b", -1)]),
            (["a", "-b"], [("a", 1), ("b", -1)]),
            ([("a", "asc"), "-b"], [("a", 1), ("b", -1)]),
        ],
    )
    def test_accepted_forms(self, sort, expected):
        assert parse_sort_fields(sort) == expected

    def test_tuple_is_always_a_pair(self):
        """A 2-tuple with an unknown direction should raise, not sort on two fields"""
        with pytest.raises(UsageError):
            parse_sort_fields(("n", "sideways"))
        assert parse_sort_fields(["a", "b"]) == [("a", 1), ("b", 1)]

    def test_bad_pair_in_sequence(self):
        with pytest.raises(UsageError):
            parse_sort_fields(["a", ("b", "up")])

    def test_not_a_sort(self):
        with pytest.raises(UsageError):
            parse_sort_fields(42)

    @pytest.mark.parametrize("direction", [True, 0, 2, "up", None, [1]])
    def test_invalid_direction(self, direction):
        with pytest.raises(UsageError):
            parse_direction(direction)

    def test_invalid_element(self):
        with pytest.raises(UsageError):
            parse_sort_fields([42])


class TestProjection:
    def test_forms(self):
        assert parse_projection(None) is None
        assert parse_projection({"a": 0}) == {"a": 0}
        assert parse_projection("a") == {"a": 1}
        assert parse_projection(["a", "b"]) == {"a": 1, "b": 1}


class TestFindOptions:
    def test_defaults(self):
        options = FindOptions.build()
        assert options.sort == []
        assert options.skip == 0
        assert options.limit == 0
        assert options.projection is None

    def test_none_means_unset(self):
        options = FindOptions.build(skip=None, limit=None)
        assert (options.skip, options.limit) == (0, 0)

    @pytest.mark.parametrize("kwargs", [{"skip": -1}, {"limit": -5}])
    def test_negative_rejected(self, kwargs):
        with pytest.raises(UsageError):
            FindOptions.build(**kwargs)
