"""Response Mismatch Detector.

Matches responses by status code and headers by name, ignoring order.
"""

from specguard.types import Header, Response

from .content_detector import detect_content_mismatches
from .formatting import mismatch, missing, unexpected
from .schema_detector import detect_schema_mismatches


def detect_response_mismatches(
    expected: list[Response],
    actual: list[Response],
    where: str,
) -> list[str]:
    """Detect differences between expected and actual responses.

    Args:
        expected: Responses declared by the specification.
        actual: Responses derived from the code.
        where: Operation location for error reporting.

    Returns:
        List of discrepancy messages.
    """
    expected_by_status = {response.status: response for response in expected}
    actual_by_status = {response.status: response for response in actual}

    discrepancies: list[str] = []
    for status, expected_response in expected_by_status.items():
        actual_response = actual_by_status.get(status)
        if actual_response is None:
            discrepancies.append(missing(where, f"response {status}"))
            continue

        response_where = f"{where} > response {status}"
        if expected_response.description != actual_response.description:
            discrepancies.append(
                mismatch(response_where, "description", expected_response.description, actual_response.description)
            )
        discrepancies.extend(
            detect_content_mismatches(expected_response.content, actual_response.content, response_where)
        )
        discrepancies.extend(
            detect_header_mismatches(expected_response.headers, actual_response.headers, response_where)
        )

    for status in actual_by_status:
        if status not in expected_by_status:
            discrepancies.append(unexpected(where, f"response {status}"))

    return discrepancies


def detect_header_mismatches(
    expected: list[Header] | None,
    actual: list[Header] | None,
    where: str,
) -> list[str]:
    """Detect differences between expected and actual response headers.

    Header names are compared case-insensitively.
    """
    expected_by_name = {header.name.lower(): header for header in expected or []}
    actual_by_name = {header.name.lower(): header for header in actual or []}

    discrepancies: list[str] = []
    for key, expected_header in expected_by_name.items():
        actual_header = actual_by_name.get(key)
        if actual_header is None:
            discrepancies.append(missing(where, f"header '{expected_header.name}'"))
            continue

        header_where = f"{where} > header '{expected_header.name}'"
        if expected_header.required != actual_header.required:
            discrepancies.append(mismatch(header_where, "required", expected_header.required, actual_header.required))
        if expected_header.deprecated != actual_header.deprecated:
            discrepancies.append(
                mismatch(header_where, "deprecated", expected_header.deprecated, actual_header.deprecated)
            )
        discrepancies.extend(
            detect_schema_mismatches(expected_header.schema_, actual_header.schema_, f"{header_where} > schema")
        )

    for key, actual_header in actual_by_name.items():
        if key not in expected_by_name:
            discrepancies.append(unexpected(where, f"header '{actual_header.name}'"))

    return discrepancies
