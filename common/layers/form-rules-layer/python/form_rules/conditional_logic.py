"""Show/hide evaluation for form sections and fields."""

from __future__ import annotations

from typing import Any, Iterator, Mapping, Optional, Tuple

from common_utils import configure_logger

from .models import ConditionalLogic, FieldDescriptor, FormSchema, Section
from .operators import evaluate

logger = configure_logger(__name__)

__all__ = ["condition_met", "is_visible", "visible_fields"]


def condition_met(
    logic: ConditionalLogic,
    values: Mapping[str, Any],
    schema: Optional[FormSchema] = None,
) -> bool:
    """Evaluate the ``when`` predicate of ``logic`` against ``values``.

    A reference to a field that is neither submitted nor (when ``schema`` is
    given) declared in the schema is never met.
    """
    when = logic.when
    if when is None or not when.field:
        return False
    if when.field in values:
        actual = values[when.field]
    elif schema is not None and schema.has_field(when.field):
        actual = None
    else:
        logger.debug("Conditional logic references unknown field %s", when.field)
        return False
    return evaluate(when.operator, actual, when.value)


def is_visible(
    logic: Optional[ConditionalLogic],
    values: Mapping[str, Any],
    schema: Optional[FormSchema] = None,
) -> bool:
    """Return whether an element carrying ``logic`` is shown for ``values``."""
    if logic is None or logic.when is None:
        return True
    met = condition_met(logic, values, schema)
    if logic.action == "hide":
        return not met
    return met


def visible_fields(
    schema: FormSchema, values: Mapping[str, Any]
) -> Iterator[Tuple[Section, FieldDescriptor]]:
    """Yield the ``(section, field)`` pairs currently shown to the user."""
    for section in schema.sections:
        if not is_visible(section.conditional_logic, values, schema):
            continue
        for fld in section.fields:
            if is_visible(fld.conditional_logic, values, schema):
                yield section, fld
