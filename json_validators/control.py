"""
Controls and the value accessor.

A control is anything that holds one current value and an ``errors`` slot.
Checkers only ever read the value through ``get_value``; attaching a report
to the slot is left to whoever invoked the checker (see ``set_errors``).

FormControl, FormGroup and FormArray are small reference implementations
for hosts without their own control model (and for tests). Any object that
exposes ``get_value()`` or a ``value`` attribute works as a control.
"""

from typing import Any, Dict, Iterable, List, Optional


class AbstractControl:
    """Base class for value holders with an error slot."""

    def __init__(self):
        self.errors: Optional[Dict[str, Any]] = None

    def get_value(self) -> Any:
        raise NotImplementedError

    @property
    def value(self) -> Any:
        return self.get_value()

    @property
    def valid(self) -> bool:
        return self.errors is None


class FormControl(AbstractControl):
    """Leaf control holding a primitive (or raw JSON) value."""

    def __init__(self, value: Any = None):
        super().__init__()
        self._value = value

    def get_value(self) -> Any:
        return self._value

    def set_value(self, value: Any) -> None:
        self._value = value

    def __repr__(self):
        return f"FormControl({self._value!r})"


class FormGroup(AbstractControl):
    """Keyed mapping of named child controls; its value is a dict of child values."""

    def __init__(self, controls: Dict[str, AbstractControl]):
        super().__init__()
        self.controls = dict(controls)

    def get_value(self) -> Dict[str, Any]:
        return {name: get_value(control) for name, control in self.controls.items()}


class FormArray(AbstractControl):
    """Ordered sequence of child controls; its value is a list of child values."""

    def __init__(self, controls: Iterable[AbstractControl]):
        super().__init__()
        self.controls: List[AbstractControl] = list(controls)

    def get_value(self) -> List[Any]:
        return [get_value(control) for control in self.controls]

    def at(self, index: int) -> AbstractControl:
        return self.controls[index]


def is_control(candidate: Any) -> bool:
    """Whether an object follows the control interface."""
    return isinstance(candidate, AbstractControl) or callable(
        getattr(candidate, "get_value", None)
    )


def get_value(control: Any) -> Any:
    """
    Read a control's current value.

    Objects with ``get_value()`` are asked for it; objects with only a
    ``value`` attribute are read directly. Anything else is treated as a
    raw value already.
    """
    getter = getattr(control, "get_value", None)
    if callable(getter):
        return getter()
    if hasattr(control, "value"):
        return control.value
    return control


def set_errors(control: Any, report: Optional[Dict[str, Any]]) -> None:
    """Store a checker's report in the control's error slot."""
    control.errors = report


def as_control(value: Any) -> Any:
    """Wrap a raw value in a FormControl; controls pass through unchanged."""
    if is_control(value):
        return value
    return FormControl(value)
