"""
Tests for controls and the value accessor
"""
from json_validators import FormArray, FormControl, FormGroup, JsonValidators as V, get_value
from json_validators.control import as_control, is_control, set_errors


class ValueHolder:
    """Host control exposing only a value attribute."""

    def __init__(self, value):
        self.value = value
        self.errors = None


class TestValueAccessor:
    """Test get_value() across control shapes."""

    def test_form_control(self):
        """Test a leaf control's value."""
        assert get_value(FormControl("x")) == "x"

    def test_group_and_array(self):
        """Test group and array values are built from children."""
        group = FormGroup({
            "name": FormControl("Ada"),
            "tags": FormArray([FormControl("a"), FormControl("b")]),
        })
        assert get_value(group) == {"name": "Ada", "tags": ["a", "b"]}
        assert group.controls["name"].value == "Ada"
        assert group.controls["tags"].at(1).value == "b"

    def test_value_attribute(self):
        """Test host objects with only a value attribute work."""
        holder = ValueHolder("abc")
        assert get_value(holder) == "abc"
        assert V.min_length(5)(holder) is not None

    def test_raw_value(self):
        """Test a raw value is its own value."""
        assert get_value(42) == 42


class TestControlHelpers:
    """Test is_control(), as_control() and set_errors()."""

    def test_is_control(self):
        """Test control detection."""
        assert is_control(FormControl(1))
        assert not is_control(1)
        assert not is_control({"get_value": 1})

    def test_as_control(self):
        """Test raw values are wrapped and controls pass through."""
        control = FormControl(1)
        assert as_control(control) is control
        assert as_control(2).value == 2

    def test_set_errors(self):
        """Test checkers never touch the error slot; set_errors does."""
        control = FormControl("")
        report = V.required()(control)
        assert control.errors is None
        set_errors(control, report)
        assert control.errors == report
        assert not control.valid
