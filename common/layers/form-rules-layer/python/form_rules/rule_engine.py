"""
Module: rule_engine.py
Description:
  Select the email automation rules that fire for a form submission and
  resolve who each resulting email goes to.

  Rule conditions name a field by id, stable id or label. A
  :class:`FieldCatalogue` built from the form schema and the submitted data
  resolves any of the three, so rules keep working after the form builder
  renames or reorders fields.

Version: 1.0.0
Created: 2025-04-27
Last Modified: 2025-05-12
Modified By: Koushik Sinha
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from common_utils import configure_logger

from . import stable_id
from .models import Condition, EmailRule, EmailTemplate, FieldDescriptor, FormSchema
from .operators import evaluate

# Module Metadata
__author__ = "Koushik Sinha"
__version__ = "1.0.0"
__modified_by__ = "Koushik Sinha"

logger = configure_logger(__name__)

__all__ = [
    "FieldCatalogue",
    "build_condition_data",
    "RuleEvaluation",
    "resolve_condition",
    "evaluate_rule",
    "select_firing_rules",
    "resolve_recipient",
    "resolve_copy_lists",
]

_SPACE_RE = re.compile(r"\s+")


def _norm_label(label: str) -> str:
    return _SPACE_RE.sub(" ", label.strip().lower())


class FieldCatalogue:
    """Index the fields of a submission by id, stable id and label."""

    def __init__(self, schema: Optional[FormSchema], data: Mapping[str, Any]) -> None:
        self.schema = schema
        self.data = data
        self._by_stable_id: Dict[str, FieldDescriptor] = {}
        self._by_label: Dict[str, FieldDescriptor] = {}
        if schema is None:
            return
        for section, fld in schema.fields():
            sid = stable_id.resolve(fld, section.title or None)
            self._by_stable_id.setdefault(sid, fld)
            # label-derived ids are registered without the section prefix too
            if not fld.stable_id:
                self._by_stable_id.setdefault(stable_id.resolve(fld), fld)
            if fld.label:
                self._by_label.setdefault(_norm_label(fld.label), fld)
                camel = stable_id.camel_case(fld.label)
                if camel:
                    self._by_label.setdefault(camel.lower(), fld)

    def _value_of(self, fld: FieldDescriptor) -> Tuple[bool, Any]:
        value = self.data.get(fld.id)
        if value is None:
            return False, None
        return True, value

    def lookup(self, ref: str) -> Tuple[bool, Any, str]:
        """Return ``(found, value, matched_by)`` for a field reference."""
        if not ref:
            return False, None, ""
        if self.data.get(ref) is not None:
            return True, self.data[ref], "id"

        fld = self._by_stable_id.get(ref)
        if fld is not None:
            found, value = self._value_of(fld)
            if found:
                return True, value, "stable_id"

        fld = self._by_label.get(_norm_label(ref)) or self._by_label.get(ref.lower())
        if fld is not None:
            found, value = self._value_of(fld)
            if found:
                return True, value, "label"
        return False, None, ""


def build_condition_data(
    schema: Optional[FormSchema],
    submission: Mapping[str, Any],
    normalized: Optional[Mapping[str, Any]] = None,
    extra: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Return the data rule conditions and recipients are resolved against.

    Submitted values by field id come first, then values keyed by stable id,
    then the normalised roles and caller extras. An earlier source is never
    overwritten, so a field whose id matches a role name keeps its own value.
    """
    data: Dict[str, Any] = {k: v for k, v in submission.items() if v is not None}
    if schema is not None:
        for section, fld in schema.fields():
            value = submission.get(fld.id)
            if value is None:
                continue
            data.setdefault(stable_id.resolve(fld, section.title or None), value)
            if not fld.stable_id:
                data.setdefault(stable_id.resolve(fld), value)
    for source in (normalized or {}, extra or {}):
        for key, value in source.items():
            if value is not None:
                data.setdefault(key, value)
    return data


@dataclass
class RuleEvaluation:
    """Outcome of evaluating one rule, with a readable trace."""

    rule: EmailRule
    matched: bool
    trace: List[str] = field(default_factory=list)


def resolve_condition(condition: Condition, catalogue: FieldCatalogue) -> Tuple[bool, Any, str]:
    """Try each of the condition's references in turn; first resolvable wins."""
    for ref in condition.references:
        found, value, matched_by = catalogue.lookup(ref)
        if found:
            return True, value, f"{matched_by}:{ref}"
    return False, None, ""


def evaluate_rule(rule: EmailRule, catalogue: FieldCatalogue) -> RuleEvaluation:
    """Evaluate all conditions of ``rule``; every one must hold."""
    result = RuleEvaluation(rule=rule, matched=False)
    if not rule.active:
        result.trace.append("rule is inactive")
        return result
    if not rule.conditions:
        result.trace.append("rule has no conditions")
        return result

    for index, condition in enumerate(rule.conditions, start=1):
        found, actual, via = resolve_condition(condition, catalogue)
        if not found:
            refs = ", ".join(condition.references) or "<none>"
            result.trace.append(f"condition {index}: field not found ({refs})")
            return result
        ok = evaluate(condition.operator, actual, condition.value)
        result.trace.append(
            f"condition {index}: {via} {actual!r} {condition.operator} {condition.value!r} -> {ok}"
        )
        if not ok:
            return result

    result.matched = True
    return result


def select_firing_rules(
    rules: Iterable[EmailRule],
    data: Mapping[str, Any],
    schema: Optional[FormSchema] = None,
) -> List[EmailRule]:
    """Return every rule whose conditions all hold for ``data``, in input order.

    Rules sharing a template or recipient are all returned.
    """
    catalogue = FieldCatalogue(schema, data)
    fired: List[EmailRule] = []
    for rule in rules:
        evaluation = evaluate_rule(rule, catalogue)
        logger.debug(
            "Rule %s evaluated to %s: %s",
            rule.id,
            evaluation.matched,
            "; ".join(evaluation.trace),
            extra={"rule_id": rule.id},
        )
        if evaluation.matched:
            fired.append(rule)
    logger.info("%d rule(s) fired", len(fired))
    return fired


def resolve_recipient(rule: EmailRule, catalogue: FieldCatalogue) -> Optional[str]:
    """Return the address ``rule`` sends to, or ``None`` when it cannot be resolved."""
    rtype = (rule.recipient_type or "").strip()
    if rtype == "formField":
        ref = rule.recipient_field or "email"
        found, value, _ = catalogue.lookup(ref)
        recipient = value if found else None
    elif rtype == "custom":
        recipient = rule.recipient_email
    else:
        recipient = catalogue.data.get("email")

    if not isinstance(recipient, str) or not recipient.strip():
        logger.warning(
            "Could not resolve recipient for rule %s (type %s)",
            rule.id,
            rtype or "default",
            extra={"rule_id": rule.id},
        )
        return None
    return recipient.strip()


def _merge(*lists: Sequence[str]) -> List[str]:
    merged: List[str] = []
    for items in lists:
        for item in items:
            address = str(item).strip()
            if address:
                merged.append(address)
    return merged


def resolve_copy_lists(
    rule: EmailRule, template: Optional[EmailTemplate]
) -> Tuple[List[str], List[str]]:
    """Return ``(cc, bcc)``: template addresses first, then the rule's."""
    tmpl_cc = template.cc_emails if template is not None else ()
    tmpl_bcc = template.bcc_emails if template is not None else ()
    return _merge(tmpl_cc, rule.cc_emails), _merge(tmpl_bcc, rule.bcc_emails)
