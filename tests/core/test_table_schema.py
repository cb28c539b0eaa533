"""
Test suite for property type validation and table schema edits.

System role: Verification of the flexible table type system
"""

from decimal import Decimal

import pytest

from astar_backend.core.property_types import (
    BUILTIN_TYPE_IDS,
    coerce_csv_value,
    format_csv_value,
    is_system_type,
    validate_property_value,
)
from astar_backend.core.table_schema import (
    MAX_PROPERTIES_PER_TABLE,
    TABLE_TEMPLATES,
    PropertyDefinition,
    SelectOption,
    add_property,
    ordered_keys,
    remove_property,
    reorder_properties,
    update_property,
    validate_table_name,
)

STATUS_CONFIG = {"options": [{"value": "open", "label": "Open"}, {"value": "closed", "label": "Closed"}]}


class TestValidatePropertyValue:
    """Test suite for per-type value validation."""

    @pytest.mark.parametrize(
        ("type_id", "value"),
        [
            ("text", "hello"),
            ("number", 12.5),
            ("checkbox", False),
            ("date", "2024-02-29"),
            ("datetime", "2024-02-29T10:00:00Z"),
            ("email", "a@b.jp"),
            ("url", "https://example.com"),
            ("phone", "+81 (3) 1234-5678"),
            ("user", ["u1", "u2"]),
            ("text", None),
        ],
    )
    def test_should_accept_valid_values(self, type_id, value) -> None:
        assert validate_property_value(type_id, value) == []

    @pytest.mark.parametrize(
        ("type_id", "value"),
        [
            ("text", 5),
            ("number", True),
            ("number", "12"),
            ("checkbox", "yes"),
            ("date", "2023-02-30"),
            ("date", "02/03/2024"),
            ("url", "ftp://example.com"),
            ("phone", "call me"),
        ],
    )
    def test_should_reject_invalid_values(self, type_id, value) -> None:
        assert validate_property_value(type_id, value) != []

    def test_text_should_respect_max_length(self) -> None:
        errors = validate_property_value("text", "abcdef", schema={"max_length": 5})

        assert errors == ["Value exceeds maximum length of 5"]

    def test_number_bounds_should_come_from_config(self) -> None:
        assert validate_property_value("number", 11, config={"max": 10}) == ["Value must be at most 10"]
        assert validate_property_value("number", -1, config={"min": 0}) == ["Value must be at least 0"]

    def test_select_should_check_configured_options(self) -> None:
        assert validate_property_value("select", "open", config=STATUS_CONFIG) == []
        assert validate_property_value("select", "pending", config=STATUS_CONFIG) != []
        assert validate_property_value("multi_select", ["open", "x"], config=STATUS_CONFIG) != []

    def test_non_nullable_config_should_reject_none(self) -> None:
        assert validate_property_value("text", None, config={"nullable": False}) == ["Value must not be null"]

    @pytest.mark.parametrize(
        "value", [float("nan"), float("inf"), float("-inf"), Decimal("NaN"), Decimal("Infinity")]
    )
    def test_non_finite_numbers_should_be_rejected(self, value) -> None:
        assert validate_property_value("number", value) == ["Value must be a number"]


class TestCsvConversion:
    def test_should_coerce_by_type(self) -> None:
        assert coerce_csv_value("number", "3") == 3
        assert coerce_csv_value("number", "3.5") == 3.5
        assert coerce_csv_value("checkbox", "Yes") is True
        assert coerce_csv_value("multi_select", "a; b;") == ["a", "b"]
        assert coerce_csv_value("text", "") is None

    def test_unconvertible_values_should_pass_through(self) -> None:
        assert coerce_csv_value("number", "many") == "many"

    @pytest.mark.parametrize("raw", ["nan", "inf", "-Infinity"])
    def test_non_finite_cells_should_fail_validation(self, raw: str) -> None:
        value = coerce_csv_value("number", raw)

        assert value == raw
        assert validate_property_value("number", value) == ["Value must be a number"]

    def test_format_should_invert_coercion(self) -> None:
        assert format_csv_value(True) == "true"
        assert format_csv_value(["a", "b"]) == "a;b"
        assert format_csv_value(None) == ""


class TestSchemaEdits:
    """Test suite for add/update/remove/reorder of table properties."""

    def test_add_property_should_append_to_order(self) -> None:
        properties, order = add_property({}, [], "title", PropertyDefinition("text", "Title"))

        properties, order = add_property(properties, order, "status", PropertyDefinition("select", "Status", STATUS_CONFIG))

        assert order == ["title", "status"]
        assert properties["status"]["config"] == STATUS_CONFIG

    def test_add_property_should_not_mutate_input(self) -> None:
        original: dict = {}

        add_property(original, [], "title", PropertyDefinition("text", "Title"))

        assert original == {}

    def test_add_property_should_reject_duplicate_key(self) -> None:
        properties, order = add_property({}, [], "title", PropertyDefinition("text", "Title"))

        with pytest.raises(ValueError, match="already exists"):
            add_property(properties, order, "title", PropertyDefinition("text", "Again"))

    def test_add_property_should_reject_unknown_type(self) -> None:
        with pytest.raises(ValueError, match="Unknown type ID"):
            add_property({}, [], "x", PropertyDefinition("hologram", "X"))

    def test_add_property_should_enforce_limit(self) -> None:
        properties = {f"p{i}": {"type_id": "text"} for i in range(MAX_PROPERTIES_PER_TABLE)}

        with pytest.raises(ValueError, match="more than"):
            add_property(properties, list(properties), "extra", PropertyDefinition("text", "Extra"))

    def test_bad_option_color_should_fail(self) -> None:
        definition = PropertyDefinition(
            "select", "Status", {"options": [{"value": "a", "label": "A", "color": "red"}]}
        )

        with pytest.raises(ValueError, match="hex color"):
            definition.validate()

    def test_update_and_remove_require_existing_key(self) -> None:
        with pytest.raises(ValueError):
            update_property({}, "missing", PropertyDefinition("text", "Missing"))
        with pytest.raises(ValueError):
            remove_property({}, [], "missing")

    def test_remove_property_should_drop_from_order(self) -> None:
        properties = {"a": {}, "b": {}}

        new_properties, new_order = remove_property(properties, ["a", "b"], "a")

        assert new_properties == {"b": {}}
        assert new_order == ["b"]

    def test_reorder_should_require_same_keys(self) -> None:
        properties = {"a": {}, "b": {}}

        assert reorder_properties(properties, ["b", "a"]) == ["b", "a"]
        with pytest.raises(ValueError):
            reorder_properties(properties, ["a"])
        with pytest.raises(ValueError):
            reorder_properties(properties, ["a", "a"])

    def test_ordered_keys_should_append_unlisted_keys(self) -> None:
        assert ordered_keys({"c": {}, "a": {}, "b": {}}, ["b", "gone"]) == ["b", "a", "c"]


class TestTableRules:
    def test_table_name_should_be_trimmed(self) -> None:
        assert validate_table_name("  Cases  ") == "Cases"
        with pytest.raises(ValueError):
            validate_table_name("   ")

    def test_select_option_requires_label(self) -> None:
        with pytest.raises(ValueError):
            SelectOption(value="a", label=" ")

    @pytest.mark.parametrize("template", sorted(TABLE_TEMPLATES))
    def test_templates_should_use_known_types(self, template: str) -> None:
        spec = TABLE_TEMPLATES[template]

        for definition in spec["properties"].values():
            PropertyDefinition.from_dict(definition).validate(BUILTIN_TYPE_IDS)
        assert set(spec["order"]) == set(spec["properties"])

    def test_system_types_are_builtin(self) -> None:
        assert is_system_type("text")
        assert not is_system_type("email")
