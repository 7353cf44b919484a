"""Validate submitted values against the visible fields of a form."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from common_utils import configure_logger

from .conditional_logic import visible_fields
from .field_registry import FieldTypeRegistry, default_registry
from .models import FormSchema

logger = configure_logger(__name__)

__all__ = ["ValidationResult", "validate_submission", "BOOKING_ROLES"]

BOOKING_ROLES = ("name", "email", "phone", "date")


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: Dict[str, str] = field(default_factory=dict)


def validate_submission(
    schema: FormSchema,
    submission: Mapping[str, Any],
    registry: Optional[FieldTypeRegistry] = None,
    normalized: Optional[Mapping[str, Any]] = None,
) -> ValidationResult:
    """Check every visible field of ``schema`` against ``submission``.

    Fields hidden by conditional logic are not validated. For booking forms
    a warning is logged for each core role missing from ``normalized``.
    """
    registry = registry if registry is not None else default_registry()
    result = ValidationResult()
    for _, fld in visible_fields(schema, submission):
        message = registry.validate(submission.get(fld.id), fld)
        if message:
            result.errors[fld.id] = message
    result.is_valid = not result.errors

    if schema.form_type == "BOOKING" and normalized is not None:
        for role in BOOKING_ROLES:
            if not normalized.get(role):
                logger.warning(
                    "Booking form is missing the %s field", role, extra={"form_id": schema.id}
                )

    if result.errors:
        logger.info(
            "Submission failed validation on %d field(s)",
            len(result.errors),
            extra={"form_id": schema.id},
        )
    return result
