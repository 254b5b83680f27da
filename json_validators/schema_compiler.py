"""
Schema Compiler - JSON Schema node to checker tree

Turns the validation keywords of one schema node into a single checker by
calling the keyword factories and combinators. Nested 'properties' and
'items' schemas belong to child controls, so they are left to whoever
builds the control tree; this module only compiles the keywords that apply
to the node's own value.

Example:
    checker = compile_schema({"type": "string", "minLength": 3})
    checker(FormControl("ab"))   # -> {"minLength": {...}}

Form-style schemas are accepted too: a boolean 'required' marks the node
itself as required, and draft-4 boolean 'exclusiveMinimum' /
'exclusiveMaximum' modify 'minimum' / 'maximum'.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from jsonschema.validators import Draft4Validator, Draft202012Validator, validator_for

from .combinators import compose, compose_all_of, compose_any_of, compose_not, compose_one_of
from .config_loader import get_config
from .errors import Checker, keyword_error
from .exceptions import InvalidValidatorConfig
from .keywords import (
    const_validator,
    contains_validator,
    dependencies_validator,
    enum_validator,
    exclusive_maximum_validator,
    exclusive_minimum_validator,
    format_validator,
    max_items_validator,
    max_length_validator,
    max_properties_validator,
    maximum_validator,
    min_items_validator,
    min_length_validator,
    min_properties_validator,
    minimum_validator,
    multiple_of_validator,
    null_validator,
    pattern_validator,
    required_checker,
    type_validator,
    unique_items_validator,
)

logger = logging.getLogger(__name__)

# Keywords whose value is passed straight to a factory
KEYWORD_FACTORIES: Dict[str, Callable[[Any], Checker]] = {
    "type": type_validator,
    "enum": enum_validator,
    "const": const_validator,
    "minLength": min_length_validator,
    "maxLength": max_length_validator,
    "pattern": pattern_validator,
    "format": format_validator,
    "multipleOf": multiple_of_validator,
    "minProperties": min_properties_validator,
    "maxProperties": max_properties_validator,
    "dependencies": dependencies_validator,
    "minItems": min_items_validator,
    "maxItems": max_items_validator,
    "uniqueItems": unique_items_validator,
    "contains": contains_validator,
}

BRANCH_COMBINATORS = {
    "allOf": compose_all_of,
    "anyOf": compose_any_of,
    "oneOf": compose_one_of,
}


def reject_all(control: Any, invert: bool = False):
    """Checker for the 'false' schema: no value is valid."""
    if invert:
        return None
    return keyword_error("false", "No value is allowed here")


def _uses_boolean_exclusive(schema: Any) -> bool:
    """Whether any node uses draft-4 boolean exclusiveMinimum/exclusiveMaximum."""
    if isinstance(schema, dict):
        for key, value in schema.items():
            if key in ("exclusiveMinimum", "exclusiveMaximum") and isinstance(value, bool):
                return True
            if _uses_boolean_exclusive(value):
                return True
    elif isinstance(schema, list):
        return any(_uses_boolean_exclusive(item) for item in schema)
    return False


def _without_form_required(schema: Any) -> Any:
    """Copy of a schema with boolean 'required' flags removed (not valid in meta-schemas)."""
    if isinstance(schema, dict):
        return {
            key: _without_form_required(value)
            for key, value in schema.items()
            if not (key == "required" and isinstance(value, bool))
        }
    if isinstance(schema, list):
        return [_without_form_required(item) for item in schema]
    return schema


def check_schema_document(schema: Dict[str, Any]) -> None:
    """
    Check a schema against its meta-schema.

    The draft comes from '$schema' when present; otherwise draft 4 for
    schemas using boolean exclusive bounds and 2020-12 for the rest.

    Raises:
        jsonschema.exceptions.SchemaError: If the schema is malformed
    """
    default = Draft4Validator if _uses_boolean_exclusive(schema) else Draft202012Validator
    cls = validator_for(schema, default=default)
    cls.check_schema(_without_form_required(schema))


def _compile_branches(keyword: str, branches: Any) -> Optional[Checker]:
    if not isinstance(branches, list):
        raise InvalidValidatorConfig(keyword, f"expected a list of schemas, got {branches!r}")
    compiled = [compile_schema(branch, check_schema=False) for branch in branches]
    if keyword != "allOf":
        # A 'true' branch compiles to None but still counts as a valid branch
        compiled = [null_validator if checker is None else checker for checker in compiled]
    return BRANCH_COMBINATORS[keyword](compiled)


def compile_schema(schema: Any, check_schema: Optional[bool] = None) -> Optional[Checker]:
    """
    Compile one schema node into a checker.

    Args:
        schema: Schema object, or True/False boolean schema
        check_schema: Check against the meta-schema first; None reads
            schema_compiler.check_schema from settings

    Returns:
        Checker for the node, or None if the node constrains nothing

    Raises:
        InvalidValidatorConfig: If a keyword value is unusable
        jsonschema.exceptions.SchemaError: If the meta-schema check fails
    """
    if schema is True:
        return None
    if schema is False:
        return reject_all
    if not isinstance(schema, dict):
        raise InvalidValidatorConfig("schema", f"expected an object or boolean, got {schema!r}")

    if check_schema is None:
        check_schema = get_config().get_check_schema()
    if check_schema:
        check_schema_document(schema)

    checkers: List[Checker] = []
    for keyword, config in schema.items():
        if keyword == "required":
            if isinstance(config, bool):
                if config:
                    checkers.append(required_checker(True))
            else:
                logger.debug("Property-list 'required' applies to child controls, skipping")
        elif keyword == "minimum":
            checkers.append(minimum_validator(config, schema.get("exclusiveMinimum") is True))
        elif keyword == "maximum":
            checkers.append(maximum_validator(config, schema.get("exclusiveMaximum") is True))
        elif keyword == "exclusiveMinimum":
            if not isinstance(config, bool):
                checkers.append(exclusive_minimum_validator(config))
        elif keyword == "exclusiveMaximum":
            if not isinstance(config, bool):
                checkers.append(exclusive_maximum_validator(config))
        elif keyword in KEYWORD_FACTORIES:
            checkers.append(KEYWORD_FACTORIES[keyword](config))
        elif keyword in BRANCH_COMBINATORS:
            checkers.append(_compile_branches(keyword, config))
        elif keyword == "not":
            inner = compile_schema(config, check_schema=False)
            checkers.append(compose_not(null_validator if inner is None else inner))
        elif keyword == "$ref":
            logger.warning(f"$ref is not resolved, '{config}' will not be checked")

    checkers = [c for c in checkers if c is not None and c is not null_validator]
    if not checkers:
        return None
    if len(checkers) == 1:
        return checkers[0]
    return compose(checkers)


def compile_schema_uri(uri: str, base_dir: Optional[str] = None) -> Optional[Checker]:
    """Load a schema document (path, file:// or http(s)://) and compile it."""
    schema = get_config().load_schema(uri, base_dir=base_dir)
    return compile_schema(schema)
