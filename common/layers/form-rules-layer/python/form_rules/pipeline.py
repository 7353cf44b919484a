"""
Module: pipeline.py
Description:
  Run one form submission end to end: map fields, validate, select firing
  email rules and render the outgoing emails. Sending is left to the caller.

Version: 1.0.0
Created: 2025-04-28
Last Modified: 2025-05-12
Modified By: Koushik Sinha
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from common_utils import configure_logger

from .contact_extractor import process_name_fields
from .field_registry import FieldTypeRegistry
from .mapper import FieldMapper
from .models import EmailRule, EmailTemplate, FormSchema, OutgoingEmail
from .rule_engine import (
    FieldCatalogue,
    build_condition_data,
    resolve_copy_lists,
    resolve_recipient,
    select_firing_rules,
)
from .validation import ValidationResult, validate_submission
from .variables import build_render_context, render_template

# Module Metadata
__author__ = "Koushik Sinha"
__version__ = "1.0.0"
__modified_by__ = "Koushik Sinha"

logger = configure_logger(__name__)

__all__ = ["SkippedRule", "SubmissionResult", "process_submission"]


@dataclass
class SkippedRule:
    rule_id: str
    template_id: str
    reason: str


@dataclass
class SubmissionResult:
    normalized: Dict[str, Any]
    validation: ValidationResult
    fired_rules: List[str] = field(default_factory=list)
    emails: List[OutgoingEmail] = field(default_factory=list)
    skipped: List[SkippedRule] = field(default_factory=list)


def process_submission(
    schema: FormSchema,
    submission: Mapping[str, Any],
    rules: Iterable[EmailRule],
    templates: Iterable[EmailTemplate],
    registry: Optional[FieldTypeRegistry] = None,
    extra: Optional[Mapping[str, Any]] = None,
) -> SubmissionResult:
    """Return the normalised data, validation outcome and emails for a submission.

    A firing rule whose template is unknown or whose recipient cannot be
    resolved is reported in ``skipped`` instead of raising.
    """
    mapper = FieldMapper(registry)
    normalized = process_name_fields(mapper.map_fields(schema, submission), submission)
    validation = validate_submission(schema, submission, mapper.registry, normalized)

    context = build_render_context(schema, submission, normalized, extra)
    rule_data = build_condition_data(schema, submission, normalized, extra)
    fired = select_firing_rules(rules, rule_data, schema)
    catalogue = FieldCatalogue(schema, rule_data)
    by_id = {t.id: t for t in templates}

    result = SubmissionResult(normalized=normalized, validation=validation)
    for rule in fired:
        result.fired_rules.append(rule.id)
        template = by_id.get(rule.template_id)
        if template is None:
            logger.warning(
                "Template %s for rule %s not found",
                rule.template_id,
                rule.id,
                extra={"rule_id": rule.id, "template_id": rule.template_id},
            )
            result.skipped.append(SkippedRule(rule.id, rule.template_id, "template not found"))
            continue

        recipient = resolve_recipient(rule, catalogue)
        if recipient is None:
            result.skipped.append(SkippedRule(rule.id, rule.template_id, "recipient not resolved"))
            continue

        rendered = render_template(template, context)
        cc, bcc = resolve_copy_lists(rule, template)
        result.emails.append(
            OutgoingEmail(
                rule_id=rule.id,
                template_id=template.id,
                recipient=recipient,
                subject=rendered.subject,
                html=rendered.html,
                text=rendered.text,
                cc=cc,
                bcc=bcc,
            )
        )

    logger.info(
        "Submission processed: %d rule(s) fired, %d email(s), %d skipped",
        len(result.fired_rules),
        len(result.emails),
        len(result.skipped),
        extra={"form_id": schema.id},
    )
    return result
