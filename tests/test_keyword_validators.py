"""
Tests for keyword validators

Tests each keyword factory through the JsonValidators facade, including
configuration errors, empty values and the invert flag.
"""
import json
import logging
from datetime import date, time

import pytest

from json_validators import FormControl, FormGroup, InvalidValidatorConfig, JsonValidators as V
from json_validators import get_config
from json_validators.keywords import check_required, null_validator


def ctrl(value):
    return FormControl(value)


class TestRequired:
    """Test the dual-mode required validator."""

    def test_no_argument_returns_checker(self):
        """Test required() returns a callable checker."""
        checker = V.required()
        assert callable(checker)
        assert checker(ctrl("x")) is None
        assert "required" in checker(ctrl(""))

    def test_control_argument_runs_check(self):
        """Test required(control) returns the report directly."""
        report = V.required(ctrl(""))
        assert report["required"]["requiredValue"] is True
        assert report["required"]["actualValue"] == ""
        assert V.required(ctrl("x")) is None

    def test_false_disables(self):
        """Test required(False) accepts everything."""
        assert V.required(False) is null_validator
        assert V.required(False)(ctrl(None)) is None

    def test_true_same_as_no_argument(self):
        """Test required(True) checks presence."""
        assert V.required(True)(ctrl(None)) is not None

    def test_zero_and_false_are_present(self):
        """Test 0 and False satisfy required."""
        assert check_required(ctrl(0)) is None
        assert check_required(ctrl(False)) is None

    def test_rejects_other_arguments(self):
        """Test non-boolean, non-control arguments raise TypeError."""
        with pytest.raises(TypeError):
            V.required(42)


class TestType:
    """Test the type validator."""

    def test_string(self):
        """Test string type."""
        checker = V.type("string")
        assert checker(ctrl("x")) is None
        report = checker(ctrl(3))
        assert report["type"]["requiredType"] == "string"
        assert report["type"]["actualValue"] == 3

    def test_number_accepts_numeric_text(self):
        """Test number type accepts numbers and numeric text but not booleans."""
        checker = V.type("number")
        assert checker(ctrl(3.5)) is None
        assert checker(ctrl("3.5")) is None
        assert checker(ctrl("abc")) is not None
        assert checker(ctrl(True)) is not None

    def test_integer(self):
        """Test integer type needs no fractional part."""
        checker = V.type("integer")
        assert checker(ctrl(3)) is None
        assert checker(ctrl(3.0)) is None
        assert checker(ctrl("3")) is None
        assert checker(ctrl("3.5")) is not None
        assert checker(ctrl(3.5)) is not None

    def test_integer_beyond_float_range(self):
        """Test JSON integers too large for a float are still integers."""
        huge = json.loads("1" + "0" * 400)
        assert V.type("integer")(ctrl(huge)) is None
        assert V.type("number")(ctrl(huge)) is None
        assert V.minimum(5)(ctrl(huge)) is None

    def test_boolean_is_strict(self):
        """Test boolean type does not accept text."""
        checker = V.type("boolean")
        assert checker(ctrl(False)) is None
        assert checker(ctrl("true")) is not None

    def test_containers(self):
        """Test object and array types."""
        assert V.type("object")(ctrl({"a": 1})) is None
        assert V.type("array")(ctrl([1])) is None
        assert V.type("array")(ctrl({"a": 1})) is not None

    def test_union_of_types(self):
        """Test a list of type names accepts any of them."""
        checker = V.type(["integer", "boolean"])
        assert checker(ctrl(True)) is None
        assert checker(ctrl(2)) is None
        assert checker(ctrl("x")) is not None

    def test_empty_value_passes(self):
        """Test empty values are not type checked."""
        assert V.type("integer")(ctrl("")) is None
        assert V.type("integer")(ctrl(None)) is None

    def test_none_type_disables(self):
        """Test a None type returns the null validator."""
        assert V.type(None) is null_validator

    @pytest.mark.parametrize("bad", ["decimal", [], ["string", "text"], 5, {"type": "string"}])
    def test_bad_config(self, bad):
        """Test unknown or missing type names raise."""
        with pytest.raises(InvalidValidatorConfig) as exc_info:
            V.type(bad)
        assert exc_info.value.keyword == "type"


class TestEnumAndConst:
    """Test enum and const with loose matching."""

    def test_enum_loose_matching(self):
        """Test "1", 2 and "true" all match enum [1, "2", True]."""
        checker = V.enum([1, "2", True])
        assert checker(ctrl("1")) is None
        assert checker(ctrl(2)) is None
        assert checker(ctrl("true")) is None

    def test_enum_mismatch_report(self):
        """Test the enum report lists allowed values."""
        report = V.enum([1, "2", True])(ctrl("x"))
        assert report["enum"]["allowedValues"] == [1, "2", True]
        assert report["enum"]["actualValue"] == "x"

    def test_enum_multi_select(self):
        """Test a list value passes when every item is allowed."""
        checker = V.enum(["a", "b", "c"])
        assert checker(ctrl(["a", "c"])) is None
        assert checker(ctrl(["a", "z"])) is not None

    def test_enum_list_option(self):
        """Test a list value passes when it equals an allowed list."""
        assert V.enum([[1, 2], "x"])(ctrl([1, 2])) is None

    def test_enum_requires_list(self):
        """Test enum config must be a list of JSON values."""
        with pytest.raises(InvalidValidatorConfig):
            V.enum("abc")
        with pytest.raises(InvalidValidatorConfig):
            V.enum([date(2024, 1, 1)])

    def test_non_json_values_do_not_raise(self):
        """Test date objects are simply unequal to enum/const options."""
        assert V.enum(["2024-01-01"])(ctrl(date(2024, 1, 1))) is not None
        assert V.const("x")(ctrl(date(2024, 1, 1))) is not None
        assert V.unique_items()(ctrl([date(2024, 1, 1), date(2024, 1, 1)])) is not None

    def test_const(self):
        """Test const matches a single value loosely."""
        assert V.const("a")(ctrl("a")) is None
        assert V.const(True)(ctrl("true")) is None
        report = V.const("a")(ctrl("b"))
        assert report["const"]["requiredValue"] == "a"

    def test_const_requires_json_value(self):
        """Test const config must be JSON."""
        with pytest.raises(InvalidValidatorConfig):
            V.const(object())


class TestTextKeywords:
    """Test minLength, maxLength, pattern and format."""

    def test_min_length(self):
        """Test minLength report details."""
        report = V.min_length(3)(ctrl("ab"))
        assert report["minLength"]["requiredLength"] == 3
        assert report["minLength"]["actualLength"] == 2
        assert V.min_length(3)(ctrl("abc")) is None

    def test_min_length_ignores_numbers(self):
        """Test minLength(3) on 42 is valid."""
        assert V.min_length(3)(ctrl(42)) is None

    def test_max_length(self):
        """Test maxLength."""
        assert V.max_length(2)(ctrl("ab")) is None
        assert V.max_length(2)(ctrl("abc"))["maxLength"]["actualLength"] == 3

    @pytest.mark.parametrize("bad", [-1, 1.5, True, "3"])
    def test_length_bad_config(self, bad):
        """Test lengths must be non-negative integers."""
        with pytest.raises(InvalidValidatorConfig):
            V.min_length(bad)

    def test_pattern_matches_anywhere(self):
        """Test pattern 'bc' accepts 'abcd' by default."""
        assert V.pattern("bc")(ctrl("abcd")) is None

    def test_pattern_whole_string(self):
        """Test whole_string anchors the pattern."""
        report = V.pattern("bc", whole_string=True)(ctrl("abcd"))
        assert report["pattern"]["requiredPattern"] == "^bc$"
        assert V.pattern("bc", whole_string=True)(ctrl("bc")) is None

    def test_pattern_whole_string_from_settings(self, tmp_path):
        """Test pattern.whole_string in settings changes the default."""
        override = tmp_path / "settings.yaml"
        override.write_text("pattern:\n  whole_string: true\n")
        get_config(str(override))
        assert V.pattern("bc")(ctrl("abcd")) is not None

    def test_pattern_ignores_non_text(self):
        """Test pattern does not apply to numbers."""
        assert V.pattern("^a")(ctrl(5)) is None

    def test_pattern_bad_regex(self):
        """Test an invalid regex raises at build time."""
        with pytest.raises(InvalidValidatorConfig):
            V.pattern("(")

    def test_format(self):
        """Test a known format."""
        assert V.format("email")(ctrl("someone@example.com")) is None
        report = V.format("email")(ctrl("nope"))
        assert report["format"]["requiredFormat"] == "email"

    def test_format_temporal_objects(self):
        """Test date/time objects satisfy the matching format."""
        assert V.format("date")(ctrl(date(2024, 1, 31))) is None
        assert V.format("time")(ctrl(time(12, 0))) is None
        assert V.format("time")(ctrl(date(2024, 1, 31))) is not None

    def test_unknown_format_passes_with_warning(self, caplog):
        """Test unknown formats log a warning and accept everything."""
        with caplog.at_level(logging.WARNING, logger="json_validators.keywords"):
            checker = V.format("zip-code")
        assert "zip-code" in caplog.text
        assert checker(ctrl("anything")) is None

    def test_unknown_format_error_policy(self, tmp_path):
        """Test formats.unknown: error rejects unknown formats."""
        override = tmp_path / "settings.yaml"
        override.write_text("formats:\n  unknown: error\n")
        get_config(str(override))
        with pytest.raises(InvalidValidatorConfig):
            V.format("zip-code")

    def test_empty_format_disables(self):
        """Test an empty format tag returns the null validator."""
        assert V.format("") is null_validator


class TestNumericKeywords:
    """Test minimum, maximum, exclusive bounds and multipleOf."""

    def test_minimum(self):
        """Test minimum(5) with 4, 5 and 6."""
        checker = V.minimum(5)
        report = checker(ctrl(4))
        assert report["minimum"]["minimumValue"] == 5
        assert report["minimum"]["actualValue"] == 4
        assert checker(ctrl(5)) is None
        assert checker(ctrl(6)) is None

    def test_minimum_exclusive_flag(self):
        """Test exclusive=True rejects the bound itself."""
        report = V.minimum(5, exclusive=True)(ctrl(5))
        assert report["minimum"]["exclusive"] is True

    def test_minimum_numeric_text(self):
        """Test numeric text is compared as a number."""
        assert V.minimum(5)(ctrl("4")) is not None
        assert V.minimum(5)(ctrl("abc")) is None

    def test_maximum(self):
        """Test maximum."""
        assert V.maximum(5)(ctrl(5)) is None
        assert V.maximum(5)(ctrl(6))["maximum"]["maximumValue"] == 5

    def test_exclusive_bounds(self):
        """Test exclusiveMinimum and exclusiveMaximum keywords."""
        assert V.exclusive_minimum(5)(ctrl(5))["exclusiveMinimum"]["exclusiveMinimumValue"] == 5
        assert V.exclusive_minimum(5)(ctrl(5.1)) is None
        assert V.exclusive_maximum(5)(ctrl(5)) is not None
        assert V.exclusive_maximum(5)(ctrl(4.9)) is None

    def test_bound_bad_config(self):
        """Test bounds must be finite numbers."""
        with pytest.raises(InvalidValidatorConfig):
            V.minimum("5")
        with pytest.raises(InvalidValidatorConfig):
            V.maximum(float("nan"))

    def test_multiple_of_float_noise(self):
        """Test 0.3 is a multiple of 0.1 despite float rounding."""
        assert V.multiple_of(0.1)(ctrl(0.3)) is None
        assert V.multiple_of(0.1)(ctrl(0.35)) is not None

    def test_multiple_of_integers(self):
        """Test integer multiples, including numeric text."""
        assert V.multiple_of(2)(ctrl("4")) is None
        assert V.multiple_of(2)(ctrl(3))["multipleOf"]["multipleOfValue"] == 2

    def test_multiple_of_large_integers_exact(self):
        """Test integers past 2**53 are checked exactly."""
        assert V.multiple_of(2)(ctrl(2**53 + 1)) is not None
        assert V.multiple_of(2)(ctrl(2**53 + 2)) is None
        huge = json.loads("1" + "0" * 400)
        assert V.multiple_of(2)(ctrl(huge)) is None
        assert V.multiple_of(3)(ctrl(huge)) is not None

    def test_multiple_of_float_divisor_with_large_integer(self):
        """Test a float divisor does not overflow on huge integers."""
        huge = json.loads("1" + "0" * 400)
        assert V.multiple_of(0.5)(ctrl(huge)) is None
        assert V.multiple_of(0.5)(ctrl(huge + 1)) is None
        assert V.multiple_of(2.5)(ctrl(7)) is not None

    @pytest.mark.parametrize("bad", [0, -2, float("inf")])
    def test_multiple_of_bad_config(self, bad):
        """Test multipleOf must be a finite number above zero."""
        with pytest.raises(InvalidValidatorConfig):
            V.multiple_of(bad)


class TestGroupKeywords:
    """Test minProperties, maxProperties and dependencies."""

    def test_min_properties(self):
        """Test minProperties on a group's value."""
        group = FormGroup({"a": ctrl(1)})
        report = V.min_properties(2)(group)
        assert report["minProperties"]["actualProperties"] == 1
        assert V.min_properties(1)(group) is None

    def test_max_properties(self):
        """Test maxProperties."""
        group = FormGroup({"a": ctrl(1), "b": ctrl(2)})
        assert V.max_properties(1)(group)["maxProperties"]["maximumProperties"] == 1

    def test_property_dependency(self):
        """Test a list dependency requires siblings when the key has a value."""
        checker = V.dependencies({"card": ["billing"]})
        report = checker(FormGroup({"card": ctrl("4111"), "billing": ctrl("")}))
        assert "required" in report["dependencies"]["failedDependencies"]["card"]["billing"]
        assert checker(FormGroup({"card": ctrl("4111"), "billing": ctrl("1 Main St")})) is None

    def test_dependency_inactive_without_value(self):
        """Test dependencies do not apply when the key is empty."""
        checker = V.dependencies({"card": ["billing"]})
        assert checker(FormGroup({"card": ctrl(""), "billing": ctrl("")})) is None

    def test_schema_dependency(self):
        """Test a schema dependency checks sibling property schemas."""
        checker = V.dependencies({
            "card": {"required": ["cvv"], "properties": {"cvv": {"minLength": 3}}},
        })
        report = checker(FormGroup({"card": ctrl("4111"), "cvv": ctrl("12")}))
        assert "minLength" in report["dependencies"]["failedDependencies"]["card"]["cvv"]
        assert checker(FormGroup({"card": ctrl("4111"), "cvv": ctrl("123")})) is None

    def test_dependencies_bad_config(self):
        """Test dependencies must map keys to lists or objects."""
        with pytest.raises(InvalidValidatorConfig):
            V.dependencies(["card"])
        with pytest.raises(InvalidValidatorConfig):
            V.dependencies({"card": 5})

    @pytest.mark.parametrize("bad", [
        {"card": {"properties": ["cvv"]}},
        {"card": {"required": "cvv"}},
        {"card": "billing"},
        {"card": [1, 2]},
    ])
    def test_dependencies_malformed_shapes(self, bad):
        """Test malformed dependency shapes raise InvalidValidatorConfig."""
        with pytest.raises(InvalidValidatorConfig) as exc_info:
            V.dependencies(bad)
        assert exc_info.value.keyword == "dependencies"

    def test_empty_dependencies_disable(self):
        """Test None and {} return the null validator."""
        assert V.dependencies(None) is null_validator
        assert V.dependencies({}) is null_validator


class TestArrayKeywords:
    """Test minItems, maxItems, uniqueItems and contains."""

    def test_min_and_max_items(self):
        """Test item counts."""
        assert V.min_items(2)(ctrl([1]))["minItems"]["actualItems"] == 1
        assert V.min_items(2)(ctrl([1, 2])) is None
        assert V.max_items(1)(ctrl([1, 2]))["maxItems"]["maximumItems"] == 1

    def test_unique_items(self):
        """Test [1, 2, 2] is rejected and [1, 2, 3] accepted."""
        report = V.unique_items()(ctrl([1, 2, 2]))
        assert report["uniqueItems"]["duplicateItems"] == [2]
        assert V.unique_items()(ctrl([1, 2, 3])) is None

    def test_unique_items_deep(self):
        """Test uniqueness compares nested items structurally."""
        assert V.unique_items()(ctrl([{"a": 1}, {"a": 1}])) is not None
        assert V.unique_items()(ctrl([1, True])) is None

    def test_unique_items_false_disables(self):
        """Test uniqueItems false returns the null validator."""
        assert V.unique_items(False) is null_validator

    def test_contains_accepts_everything(self):
        """Test contains is a pass-through that fails only when inverted."""
        checker = V.contains({"type": "string"})
        assert checker(ctrl([1, 2])) is None
        assert checker(ctrl([1, 2]), True)["contains"]["inverted"] is True


class TestAliases:
    """Test forms-library aliases."""

    def test_min_and_max(self):
        """Test min/max are minimum/maximum."""
        assert "minimum" in V.min(3)(ctrl(2))
        assert "maximum" in V.max(3)(ctrl(4))

    def test_required_true(self):
        """Test required_true runs const(True) directly."""
        assert V.required_true(ctrl(True)) is None
        assert "const" in V.required_true(ctrl(False))

    def test_email(self):
        """Test email runs format('email') directly."""
        assert V.email(ctrl("a@b.co")) is None
        assert "format" in V.email(ctrl("not-an-email"))


class TestInvert:
    """Test invert=True is the exact complement of a check."""

    @pytest.mark.parametrize("checker,value", [
        (V.required(), ""),
        (V.required(), "x"),
        (V.type("string"), 3),
        (V.type("string"), ""),
        (V.enum(["a"]), "b"),
        (V.min_length(3), "ab"),
        (V.pattern("^a"), "abc"),
        (V.format("ipv4"), "10.0.0.1"),
        (V.minimum(5), 4),
        (V.multiple_of(3), 9),
        (V.unique_items(), [1, 1]),
        (V.unique_items(), [1, 2]),
        (V.null_validator, "anything"),
        (V.const("a"), "a"),
        (V.const("a"), "b"),
        (V.max_length(2), "ab"),
        (V.max_length(2), "abc"),
        (V.min_properties(2), {"a": 1}),
        (V.min_properties(2), {"a": 1, "b": 2}),
        (V.max_properties(1), {"a": 1}),
        (V.max_properties(1), {"a": 1, "b": 2}),
        (V.dependencies({"card": ["billing"]}), {"card": "4111", "billing": "1 Main St"}),
        (V.dependencies({"card": ["billing"]}), {"card": "4111"}),
        (V.min_items(2), [1]),
        (V.min_items(2), [1, 2]),
        (V.max_items(1), [1]),
        (V.max_items(1), [1, 2]),
        (V.contains(True), [1, 2]),
        (V.compose_all_of([V.type("string"), V.min_length(2)]), "ab"),
        (V.compose_all_of([V.type("string"), V.min_length(2)]), "a"),
        (V.compose_any_of([V.type("integer"), V.pattern("^n/a$")]), "n/a"),
        (V.compose_any_of([V.type("integer"), V.pattern("^n/a$")]), "x"),
        (V.compose_one_of([V.type("string"), V.type("number")]), "x"),
        (V.compose_one_of([V.type("string"), V.type("number")]), "3.5"),
        (V.compose_not(V.type("string")), 3),
        (V.compose_not(V.type("string")), "x"),
        (V.compose([V.required(), V.max_length(3)]), "abc"),
        (V.compose([V.required(), V.max_length(3)]), ""),
    ])
    def test_complement(self, checker, value):
        """Test exactly one of the plain and inverted calls reports."""
        control = ctrl(value)
        assert (checker(control) is None) != (checker(control, True) is None)

    def test_inverted_report_shape(self):
        """Test inverted reports are flagged and prefixed."""
        report = V.type("string")(ctrl("x"), True)
        assert report["type"]["inverted"] is True
        assert report["type"]["message"].startswith("Must not satisfy")
