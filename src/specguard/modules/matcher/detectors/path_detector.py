"""Path Mismatch Detector.

Matches paths by pattern and operations by method, then compares each
matched operation.
"""

from specguard.types import Document, Operation

from .content_detector import detect_request_body_mismatches
from .formatting import mismatch
from .parameter_detector import detect_parameter_mismatches
from .response_detector import detect_response_mismatches


def detect_path_mismatches(
    expected: Document,
    actual: Document,
    strict: bool = False,
) -> list[str]:
    """Detect missing paths and operations and compare the matched ones.

    Args:
        expected: Document parsed from the specification.
        actual: Document derived from the code.
        strict: Also report paths, operations and parameters the
            specification does not declare.

    Returns:
        List of discrepancy messages.
    """
    discrepancies: list[str] = []

    for expected_path in expected.paths:
        actual_path = actual.find_path(expected_path.pattern)
        if actual_path is None:
            discrepancies.append(f"Missing path: {expected_path.pattern}")
            continue

        for expected_operation in expected_path.operations:
            method = expected_operation.method.upper()
            actual_operation = actual_path.find_operation(expected_operation.method)
            if actual_operation is None:
                discrepancies.append(f"Missing operation: {method} {expected_path.pattern}")
                continue
            discrepancies.extend(
                detect_operation_mismatches(
                    expected_operation,
                    actual_operation,
                    f"{method} {expected_path.pattern}",
                    strict,
                )
            )

        if strict:
            for actual_operation in actual_path.operations:
                if expected_path.find_operation(actual_operation.method) is None:
                    discrepancies.append(
                        f"Unexpected operation: {actual_operation.method.upper()} {expected_path.pattern}"
                    )

    if strict:
        for actual_path in actual.paths:
            if expected.find_path(actual_path.pattern) is None:
                discrepancies.append(f"Unexpected path: {actual_path.pattern}")

    return discrepancies


def detect_operation_mismatches(
    expected: Operation,
    actual: Operation,
    where: str,
    strict: bool = False,
) -> list[str]:
    """Compare two operations on the same path and method."""
    discrepancies: list[str] = []

    if expected.deprecated != actual.deprecated:
        discrepancies.append(mismatch(where, "deprecated", expected.deprecated, actual.deprecated))

    discrepancies.extend(detect_parameter_mismatches(expected.parameters, actual.parameters, where, strict))
    discrepancies.extend(detect_request_body_mismatches(expected.request_body, actual.request_body, where))
    discrepancies.extend(detect_response_mismatches(expected.responses, actual.responses, where))

    return discrepancies
