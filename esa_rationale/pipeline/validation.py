from __future__ import annotations

from typing import Any, Mapping, Sequence

from pydantic import ValidationError as PydanticValidationError

from esa_rationale.errors import ValidationError
from esa_rationale.pipeline.state import RationaleRequest


def _field_path(loc: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc) or "body"


def error_details(errors: Sequence[Mapping[str, Any]]) -> list[dict[str, str]]:
    return [
        {"field": _field_path(tuple(err.get("loc", ()))), "message": str(err.get("msg", ""))}
        for err in errors
    ]


def validate_payload(payload: Any) -> RationaleRequest:
    """Parse a raw request body into typed inputs without coercing values.

    Every offending field is reported, not only the first one.
    """
    if not isinstance(payload, dict):
        raise ValidationError([{"field": "body", "message": "Input should be a JSON object"}])
    try:
        return RationaleRequest.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(error_details(exc.errors())) from exc
