"""``{{variable}}`` substitution for email subjects and bodies."""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from common_utils import configure_logger

from . import stable_id
from .models import EmailTemplate, FormSchema

logger = configure_logger(__name__)

__all__ = [
    "VARIABLE_RE",
    "RenderedTemplate",
    "to_display",
    "find_variables",
    "resolve_variable",
    "render",
    "render_template",
    "build_render_context",
]

VARIABLE_RE = re.compile(r"{{([^{}]+)}}")
_TAG_RE = re.compile(r"<[^>]*>")

_CONTEXT_FALLBACKS = ("email", "name", "phone")


@dataclass
class RenderedTemplate:
    subject: str
    html: str
    text: str


def to_display(value: Any) -> str:
    """Stringify like JavaScript's ``String()``."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, tuple)):
        return ",".join(to_display(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, default=str)
    return str(value)


def find_variables(text: Optional[str]) -> List[str]:
    """Return the distinct variable names in ``text`` in order of appearance."""
    seen: List[str] = []
    for match in VARIABLE_RE.finditer(text or ""):
        name = match.group(1).strip()
        if name not in seen:
            seen.append(name)
    return seen


def _first_name(context: Mapping[str, Any]) -> str:
    if context.get("firstName"):
        return to_display(context["firstName"])
    name = context.get("name")
    if isinstance(name, str) and name.strip():
        return name.strip().split()[0]
    email = context.get("email")
    if isinstance(email, str) and "@" in email:
        local = email.split("@", 1)[0]
        if local:
            return local
    return "Customer"


def resolve_variable(name: str, context: Mapping[str, Any]) -> Optional[str]:
    """Return the display value for ``name`` or ``None`` when unresolved."""
    value = context.get(name)
    if value is not None:
        return to_display(value)
    if name == "firstName":
        return _first_name(context)
    if name in _CONTEXT_FALLBACKS:
        # other spellings the mapper may have produced
        for key in (name.capitalize(), name.upper()):
            if context.get(key):
                return to_display(context[key])
    return None


def render(text: Optional[str], context: Mapping[str, Any]) -> str:
    """Replace every ``{{identifier}}`` in ``text``; unknown ones stay verbatim."""
    if not text:
        return ""
    missing: List[str] = []

    def _replace(match: "re.Match[str]") -> str:
        name = match.group(1).strip()
        value = resolve_variable(name, context)
        if value is None:
            missing.append(name)
            return match.group(0)
        return value

    rendered = VARIABLE_RE.sub(_replace, text)
    if missing:
        logger.warning("Unresolved template variables: %s", ", ".join(missing))
    return rendered


def render_template(template: EmailTemplate, context: Mapping[str, Any]) -> RenderedTemplate:
    """Render subject, HTML and text parts of ``template``."""
    html = render(template.html_content, context)
    if template.text_content:
        text = render(template.text_content, context)
    else:
        text = _TAG_RE.sub("", html)
    return RenderedTemplate(subject=render(template.subject, context), html=html, text=text)


def build_render_context(
    schema: Optional[FormSchema],
    submission: Mapping[str, Any],
    normalized: Optional[Mapping[str, Any]] = None,
    extra: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Merge the data sources a template can draw on.

    Raw values by field id, then values keyed by stable id, then the
    normalised roles, then caller extras; later sources win.
    """
    context: Dict[str, Any] = dict(submission)
    if schema is not None:
        for section, fld in schema.fields():
            value = submission.get(fld.id)
            if value is None:
                continue
            context[stable_id.resolve(fld, section.title or None)] = value
            if not fld.stable_id:
                context.setdefault(stable_id.resolve(fld), value)
    for key, value in (normalized or {}).items():
        if value is not None:
            context[key] = value
    context.update(extra or {})
    return context
