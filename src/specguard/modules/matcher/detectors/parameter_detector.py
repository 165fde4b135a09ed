"""Parameter Mismatch Detector.

Matches parameters by (name, location), ignoring declaration order.
"""

from specguard.types import Parameter

from .formatting import mismatch, missing, unexpected
from .schema_detector import detect_schema_mismatches


def detect_parameter_mismatches(
    expected: list[Parameter] | None,
    actual: list[Parameter] | None,
    where: str,
    strict: bool = False,
) -> list[str]:
    """Detect differences between expected and actual operation parameters.

    Args:
        expected: Parameters declared by the specification.
        actual: Parameters derived from the code.
        where: Operation location for error reporting.
        strict: Also report parameters the specification does not declare.

    Returns:
        List of discrepancy messages.
    """
    expected_by_key = {(p.name, p.location): p for p in expected or []}
    actual_by_key = {(p.name, p.location): p for p in actual or []}

    discrepancies: list[str] = []
    for key, expected_param in expected_by_key.items():
        label = _label(expected_param)
        actual_param = actual_by_key.get(key)
        if actual_param is None:
            discrepancies.append(missing(where, label))
            continue

        param_where = f"{where} > {label}"
        if expected_param.required != actual_param.required:
            discrepancies.append(mismatch(param_where, "required", expected_param.required, actual_param.required))
        if expected_param.deprecated != actual_param.deprecated:
            discrepancies.append(
                mismatch(param_where, "deprecated", expected_param.deprecated, actual_param.deprecated)
            )
        discrepancies.extend(
            detect_schema_mismatches(expected_param.schema_, actual_param.schema_, f"{param_where} > schema")
        )

    # Code may expose parameters the document omits; only strict mode reports them
    if strict:
        for key, actual_param in actual_by_key.items():
            if key not in expected_by_key:
                discrepancies.append(unexpected(where, _label(actual_param)))

    return discrepancies


def _label(parameter: Parameter) -> str:
    return f"parameter '{parameter.name}' in {parameter.location.value}"
