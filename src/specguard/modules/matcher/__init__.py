"""Matcher Package - Structural comparison of two API descriptions.

Compares a Document parsed from a specification against a Document
derived from the code and reports every discrepancy as a human-readable
message. Comparison is order-independent and never raises.
"""

import logging

from specguard.types import Document

from .detectors.path_detector import detect_path_mismatches


logger = logging.getLogger("specguard.matcher")


def match_documents(
    expected: Document,
    actual: Document,
    strict: bool = False,
) -> list[str]:
    """Compare two documents.

    This is the main entry point for the matcher.

    Args:
        expected: Document parsed from the specification.
        actual: Document derived from the code.
        strict: Also report elements present only in ``actual``
            (paths, operations and parameters).

    Returns:
        List of discrepancies; empty when the documents match.
    """
    discrepancies = detect_path_mismatches(expected, actual, strict)
    logger.debug(f"Matched {len(expected.paths)} expected paths: {len(discrepancies)} discrepancies")
    return discrepancies


class OpenAPIMatcher:
    """Reusable matcher configuration.

    Args:
        strict: Also report elements present only in the actual document.
    """

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict

    def match(self, expected: Document, actual: Document) -> list[str]:
        return match_documents(expected, actual, self.strict)


__all__ = [
    "OpenAPIMatcher",
    "match_documents",
]
