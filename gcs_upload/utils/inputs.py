"""
Action input resolution.

GitHub Actions hands step inputs to the process as ``INPUT_<NAME>``
environment variables. This module reads them against a small schema and
converts each value to its declared type.

Schema types are "string", "boolean" and "number". A trailing "?" marks the
input optional; missing optional inputs resolve to None.

Example usage:
    >>> get_inputs(
    ...     {"destination": "string", "displayProgress": "boolean?"},
    ...     environ={"INPUT_DESTINATION": "/releases"},
    ... )
    {'destination': '/releases', 'displayProgress': None}
"""

import math
import os
from typing import Any, Dict, Mapping, Optional, Union

from gcs_upload.exceptions import ConfigurationError

# YAML 1.2 core schema spellings, same as the runner's own toolkit
TRUE_VALUES = ("true", "True", "TRUE")
FALSE_VALUES = ("false", "False", "FALSE")

SUPPORTED_TYPES = ("string", "boolean", "number")


def get_input(name: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Read a raw input value.

    Args:
        name: Input name as declared in action.yml
        environ: Environment mapping (default: os.environ)

    Returns:
        The stripped value, or "" when the input was not supplied
    """
    env = os.environ if environ is None else environ
    key = "INPUT_" + name.replace(" ", "_").upper()
    return env.get(key, "").strip()


def parse_boolean(name: str, value: str) -> bool:
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"Input does not meet YAML 1.2 \"Core Schema\" specification: {name}\n"
        "Support boolean input list: `true | True | TRUE | false | False | FALSE`"
    )


def parse_number(name: str, value: str) -> Union[int, float]:
    try:
        return int(value)
    except ValueError:
        pass
    try:
        number = float(value)
    except ValueError:
        raise ConfigurationError(f"Input is not a number: {name}={value!r}") from None
    if not math.isfinite(number):
        raise ConfigurationError(f"Input is not a finite number: {name}={value!r}")
    return int(number) if number.is_integer() else number


def get_inputs(
    schema: Mapping[str, str],
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Resolve every input named in ``schema``.

    Args:
        schema: Mapping of input name to type ("string", "boolean", "number",
            each optionally suffixed with "?")
        environ: Environment mapping (default: os.environ)

    Returns:
        Mapping of input name to converted value (None for missing optionals)

    Raises:
        ConfigurationError: If a required input is missing, a value cannot be
            converted, or the schema names an unknown type
    """
    values: Dict[str, Any] = {}

    for name, declared in schema.items():
        optional = declared.endswith("?")
        kind = declared.rstrip("?")
        if kind not in SUPPORTED_TYPES:
            raise ConfigurationError(f"Unsupported input type for {name}: {declared}")

        raw = get_input(name, environ)
        if not raw:
            if not optional:
                raise ConfigurationError(f"Input required and not supplied: {name}")
            values[name] = None
        elif kind == "boolean":
            values[name] = parse_boolean(name, raw)
        elif kind == "number":
            values[name] = parse_number(name, raw)
        else:
            values[name] = raw

    return values
