"""Content Mismatch Detector.

Compares request bodies and media type maps by content type.
"""

from specguard.types import MediaType, RequestBody

from .formatting import mismatch, missing, unexpected
from .schema_detector import detect_schema_mismatches


def detect_request_body_mismatches(
    expected: RequestBody | None,
    actual: RequestBody | None,
    where: str,
) -> list[str]:
    """Detect differences between expected and actual request bodies.

    Args:
        expected: Request body declared by the specification.
        actual: Request body derived from the code.
        where: Operation location for error reporting.

    Returns:
        List of discrepancy messages.
    """
    if expected is None and actual is None:
        return []
    if actual is None:
        return [missing(where, "requestBody")]
    if expected is None:
        return [unexpected(where, "requestBody")]

    body_where = f"{where} > requestBody"
    discrepancies: list[str] = []
    if expected.required != actual.required:
        discrepancies.append(mismatch(body_where, "required", expected.required, actual.required))
    discrepancies.extend(detect_content_mismatches(expected.content, actual.content, body_where))
    return discrepancies


def detect_content_mismatches(
    expected: list[MediaType] | None,
    actual: list[MediaType] | None,
    where: str,
) -> list[str]:
    """Detect differences between two media type lists, keyed by content type.

    Args:
        expected: Media types declared by the specification.
        actual: Media types derived from the code.
        where: Location of the content for error reporting.

    Returns:
        List of discrepancy messages.
    """
    expected_by_type = {media.content_type.lower(): media for media in expected or []}
    actual_by_type = {media.content_type.lower(): media for media in actual or []}

    discrepancies: list[str] = []
    for content_type, expected_media in expected_by_type.items():
        actual_media = actual_by_type.get(content_type)
        if actual_media is None:
            discrepancies.append(missing(where, f"content '{content_type}'"))
            continue
        discrepancies.extend(
            detect_schema_mismatches(
                expected_media.schema_,
                actual_media.schema_,
                f"{where} > content '{content_type}' > schema",
            )
        )

    for content_type in actual_by_type:
        if content_type not in expected_by_type:
            discrepancies.append(unexpected(where, f"content '{content_type}'"))

    return discrepancies
