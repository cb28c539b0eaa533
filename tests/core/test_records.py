"""
Test suite for record validation, filtering and ordering helpers.

System role: Verification of flexible record rules
"""

from astar_backend.core.positions import (
    DEFAULT_POSITION,
    needs_rebalance,
    next_position,
    position_between,
    spaced_positions,
)
from astar_backend.core.records import matches_filters, matches_search, sort_key, validate_record_data

PROPERTIES = {
    "title": {"type_id": "text", "display_name": "Title", "required": True},
    "amount": {"type_id": "number", "display_name": "Amount", "config": {"min": 0}},
    "labels": {"type_id": "multi_select", "display_name": "Labels"},
}


class TestValidateRecordData:
    """Test suite for validate_record_data."""

    def test_valid_record_should_have_no_errors(self) -> None:
        assert validate_record_data(PROPERTIES, {"title": "Case A", "amount": 10}) == []

    def test_missing_required_property(self) -> None:
        errors = validate_record_data(PROPERTIES, {"amount": 1})

        assert errors == ["title: Required property is missing"]

    def test_partial_update_should_skip_required_check(self) -> None:
        assert validate_record_data(PROPERTIES, {"amount": 1}, partial=True) == []

    def test_required_property_must_not_be_empty(self) -> None:
        errors = validate_record_data(PROPERTIES, {"title": ""})

        assert errors == ["title: Required property must have a value"]

    def test_unknown_keys_and_type_errors_are_prefixed(self) -> None:
        errors = validate_record_data(PROPERTIES, {"title": "A", "amount": -5, "ghost": 1})

        assert "ghost: Unknown property" in errors
        assert "amount: Value must be at least 0" in errors


class TestQueryHelpers:
    def test_filters_should_match_list_membership(self) -> None:
        data = {"title": "A", "labels": ["urgent", "court"]}

        assert matches_filters(data, {"labels": "court"})
        assert not matches_filters(data, {"labels": "tax"})
        assert matches_filters(data, {"title": "A"})
        assert matches_filters(data, None)

    def test_search_should_be_case_insensitive(self) -> None:
        data = {"title": "Tanaka v. Suzuki", "labels": ["Appeal"]}

        assert matches_search(data, "suzuki")
        assert matches_search(data, "appeal")
        assert not matches_search(data, "sato")
        assert matches_search(data, "")

    def test_sort_key_should_place_missing_values_last(self) -> None:
        rows = [{"amount": None}, {"amount": 5}, {"amount": "x"}, {"amount": 1}]

        ordered = sorted(rows, key=lambda row: sort_key(row, "amount"))

        assert [row["amount"] for row in ordered] == [1, 5, "x", None]


class TestPositions:
    """Test suite for fractional record positions."""

    def test_first_position_is_default(self) -> None:
        assert next_position(None) == DEFAULT_POSITION
        assert next_position(DEFAULT_POSITION) == DEFAULT_POSITION * 2

    def test_position_between_neighbours(self) -> None:
        assert position_between(100.0, 200.0) == 150.0
        assert position_between(None, 100.0) == 50.0
        assert position_between(None, None) == DEFAULT_POSITION

    def test_needs_rebalance_when_gap_collapses(self) -> None:
        assert needs_rebalance(1.0, 1.0 + 1e-12)
        assert not needs_rebalance(1.0, 2.0)
        assert not needs_rebalance(None, 2.0)

    def test_spaced_positions_are_increasing(self) -> None:
        positions = spaced_positions(3)

        assert positions == sorted(positions)
        assert len(set(positions)) == 3
