"""Schema Mismatch Detector.

Compares two Schema Objects field by field, recursing into properties,
items and additionalProperties. Titles, defaults and descriptions are
informational and not compared.
"""

from specguard.types import Schema

from .formatting import mismatch, missing, unexpected


def detect_schema_mismatches(
    expected: Schema,
    actual: Schema,
    where: str,
) -> list[str]:
    """Detect differences between an expected and an actual schema.

    Args:
        expected: Schema from the specification.
        actual: Schema derived from the code.
        where: Location of the schema for error reporting.

    Returns:
        List of discrepancy messages.
    """
    # Nothing else is comparable once the types differ
    if expected.type != actual.type:
        return [mismatch(where, "type", expected.type, actual.type)]

    discrepancies: list[str] = []

    if expected.format != actual.format:
        discrepancies.append(mismatch(where, "format", expected.format, actual.format))
    if expected.nullable != actual.nullable:
        discrepancies.append(mismatch(where, "nullable", expected.nullable, actual.nullable))
    if expected.deprecated != actual.deprecated:
        discrepancies.append(mismatch(where, "deprecated", expected.deprecated, actual.deprecated))

    expected_required = set(expected.required or [])
    actual_required = set(actual.required or [])
    if expected_required != actual_required:
        discrepancies.append(mismatch(where, "required", expected_required, actual_required))

    expected_enum = set(expected.enum or [])
    actual_enum = set(actual.enum or [])
    if expected_enum != actual_enum:
        discrepancies.append(mismatch(where, "enum", expected_enum, actual_enum))

    discrepancies.extend(_detect_property_mismatches(expected, actual, where))
    discrepancies.extend(_detect_nested_mismatches(expected.items, actual.items, f"{where}.items"))
    discrepancies.extend(
        _detect_nested_mismatches(
            expected.additional_properties,
            actual.additional_properties,
            f"{where}.additionalProperties",
        )
    )

    return discrepancies


def _detect_property_mismatches(expected: Schema, actual: Schema, where: str) -> list[str]:
    expected_properties = {prop.name: prop.schema_ for prop in expected.properties or []}
    actual_properties = {prop.name: prop.schema_ for prop in actual.properties or []}

    discrepancies: list[str] = []
    for name, expected_schema in expected_properties.items():
        if name not in actual_properties:
            discrepancies.append(missing(where, f"property '{name}'"))
            continue
        discrepancies.extend(
            detect_schema_mismatches(expected_schema, actual_properties[name], f"{where}.properties.{name}")
        )

    for name in actual_properties:
        if name not in expected_properties:
            discrepancies.append(unexpected(where, f"property '{name}'"))

    return discrepancies


def _detect_nested_mismatches(expected: Schema | None, actual: Schema | None, where: str) -> list[str]:
    if expected is None and actual is None:
        return []
    if actual is None:
        return [missing(where, "schema")]
    if expected is None:
        return [unexpected(where, "schema")]
    return detect_schema_mismatches(expected, actual, where)
