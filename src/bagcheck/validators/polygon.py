"""Validation of GML posList values describing a closed polygon ring."""

from dataclasses import dataclass

PREVIEW_LENGTH = 10


@dataclass(frozen=True)
class PolygonValidationResult:
    is_valid: bool
    message: str | None = None

    @classmethod
    def valid(cls) -> "PolygonValidationResult":
        return cls(True)

    @classmethod
    def invalid(cls, message: str) -> "PolygonValidationResult":
        return cls(False, message)


def _offending(values: list[str]) -> str:
    preview = ", ".join(values[:PREVIEW_LENGTH])
    suffix = "..." if len(values) > PREVIEW_LENGTH else ""
    return f"(Offending posList starts with: {preview}{suffix})"


def validate_polygon_list(pos_list: str) -> PolygonValidationResult:
    """Validate one posList.

    Checks, in order: an even number of values, at least four coordinate
    pairs, and a first pair equal to the last pair. Only the first failing
    check is reported.
    """
    values = pos_list.split()
    count = len(values)

    if count % 2 != 0:
        return PolygonValidationResult.invalid(
            f"Found posList with odd number of values: {count}. {_offending(values)}"
        )

    if count < 8:
        return PolygonValidationResult.invalid(
            f"Found posList with too few values (fewer than 4 pairs). {_offending(values)}"
        )

    if values[:2] != values[-2:]:
        return PolygonValidationResult.invalid(
            f"Found posList with unequal first and last pairs. {_offending(values)}"
        )

    return PolygonValidationResult.valid()
