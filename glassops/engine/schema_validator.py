"""JSON Schema subset validator shared by the config loader and the contract validator.

Supports the subset of JSON Schema 2020-12 the governance documents need:
- type: object, array, string, number, boolean
- properties, required
- items
- enum, pattern
- minimum, maximum
- format: date-time (ISO-8601 with an explicit UTC designator or offset)

Numbers must be finite; booleans are never numbers.

Errors are ``"<path>:<rule>"`` strings in document order, so the first entry
is always the first structural violation encountered.
"""

from __future__ import annotations

from datetime import datetime
import math
import re

_ISO_DATETIME = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(?::\d{2}(?:\.\d{1,9})?)?(?:Z|[+-]\d{2}:\d{2})$"
)
_FRACTION = re.compile(r"\.(\d+)")


def _six_digit_fraction(match: re.Match[str]) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def is_iso_datetime(value: str) -> bool:
    if not _ISO_DATETIME.match(value):
        return False
    normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
    # fromisoformat on 3.10 only takes exactly three or six fractional digits.
    normalized = _FRACTION.sub(_six_digit_fraction, normalized, count=1)
    try:
        datetime.fromisoformat(normalized)
    except ValueError:
        return False
    return True


def validate_against_schema(
    *,
    schema: dict[str, object],
    value: object,
    path: str = "$",
) -> list[str]:
    """Validate a value against a JSON Schema subset.

    Returns a list of error strings, each prefixed with the path.
    Empty list means valid.
    """
    errors: list[str] = []

    expected_type = schema.get("type")

    if expected_type == "object":
        errors.extend(_validate_object(schema, value, path))
    elif expected_type == "array":
        errors.extend(_validate_array(schema, value, path))
    elif expected_type == "string":
        errors.extend(_validate_string(schema, value, path))
    elif expected_type == "number":
        errors.extend(_validate_number(schema, value, path))
    elif expected_type == "boolean":
        errors.extend(_validate_boolean(value, path))

    return errors


def _validate_object(schema: dict[str, object], value: object, path: str) -> list[str]:
    errors: list[str] = []

    if not isinstance(value, dict):
        return [f"{path}:expected object"]

    properties = schema.get("properties")
    if not isinstance(properties, dict):
        properties = {}

    required = schema.get("required")
    if isinstance(required, list):
        for key in required:
            if isinstance(key, str) and key not in value:
                errors.append(f"{path}.{key}:required")

    for key, child in properties.items():
        if not isinstance(key, str) or key not in value or not isinstance(child, dict):
            continue
        errors.extend(validate_against_schema(schema=child, value=value[key], path=f"{path}.{key}"))

    return errors


def _validate_array(schema: dict[str, object], value: object, path: str) -> list[str]:
    errors: list[str] = []

    if not isinstance(value, list):
        return [f"{path}:expected array"]

    item_schema = schema.get("items")
    if isinstance(item_schema, dict):
        for idx, item in enumerate(value):
            errors.extend(validate_against_schema(schema=item_schema, value=item, path=f"{path}[{idx}]"))

    return errors


def _validate_string(schema: dict[str, object], value: object, path: str) -> list[str]:
    errors: list[str] = []

    if not isinstance(value, str):
        return [f"{path}:expected string"]

    enum = schema.get("enum")
    if isinstance(enum, list) and value not in enum:
        errors.append(f"{path}:enum")

    pattern = schema.get("pattern")
    if isinstance(pattern, str):
        if not re.match(pattern, value):
            errors.append(f"{path}:pattern")

    if schema.get("format") == "date-time" and not is_iso_datetime(value):
        errors.append(f"{path}:format")

    return errors


def _validate_number(schema: dict[str, object], value: object, path: str) -> list[str]:
    errors: list[str] = []

    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return [f"{path}:expected number"]

    minimum = schema.get("minimum")
    if isinstance(minimum, (int, float)) and value < minimum:
        errors.append(f"{path}:minimum")

    maximum = schema.get("maximum")
    if isinstance(maximum, (int, float)) and value > maximum:
        errors.append(f"{path}:maximum")

    return errors


def _validate_boolean(value: object, path: str) -> list[str]:
    if isinstance(value, bool):
        return []
    return [f"{path}:expected boolean"]
