"""
json-validators: JSON Schema keywords as form-control validators

This library turns JSON Schema validation keywords into checkers that run
against a single form control and return a structured error report:
- One factory per keyword (type, enum, const, minLength, pattern, format, ...)
- allOf / anyOf / oneOf / not combinators built on an invert flag
- Loose coercion of form text against number and boolean schemas
- Schema node compiler with meta-schema checking (jsonschema)
- YAML settings with remote schema fetching and caching

Example:
    from json_validators import FormControl, JsonValidators as V

    checker = V.compose([V.required(), V.type("string"), V.min_length(3)])
    checker(FormControl("ab"))   # -> {"minLength": {...}}
"""

from .api import JsonValidators, validate, validate_async, validators_for
from .config_loader import ConfigLoader, get_config, reset_config
from .control import AbstractControl, FormArray, FormControl, FormGroup, get_value
from .errors import ErrorReport, merge_errors
from .exceptions import InvalidValidatorConfig
from .schema_compiler import compile_schema, compile_schema_uri

__version__ = "0.1.0"
__all__ = [
    "JsonValidators",
    "validate",
    "validate_async",
    "validators_for",
    "ConfigLoader",
    "get_config",
    "reset_config",
    "AbstractControl",
    "FormControl",
    "FormGroup",
    "FormArray",
    "get_value",
    "ErrorReport",
    "merge_errors",
    "InvalidValidatorConfig",
    "compile_schema",
    "compile_schema_uri",
]
