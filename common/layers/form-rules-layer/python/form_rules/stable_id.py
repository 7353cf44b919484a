"""
Module: stable_id.py
Description:
  Derive durable semantic keys ("stable ids") for form fields so email
  rules that reference a field keep working after the form is edited.

Version: 1.0.0
Created: 2025-04-26
Last Modified: 2025-05-12
Modified By: Koushik Sinha
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Set, Tuple

from common_utils import configure_logger

from .models import FieldDescriptor, FormSchema, Section

# Module Metadata
__author__ = "Koushik Sinha"
__version__ = "1.0.0"
__modified_by__ = "Koushik Sinha"

logger = configure_logger(__name__)

__all__ = [
    "KNOWN_LABEL_PATTERNS",
    "StableIdMigration",
    "camel_case",
    "label_key",
    "resolve",
    "add_stable_id",
    "add_stable_ids",
]

_TYPE_KEYS: Dict[str, str] = {
    "email": "email",
    "tel": "phone",
    "phone": "phone",
    "name": "name",
}

# (key, keywords, exact) - first match wins. ``exact`` keywords must equal the
# whole label instead of appearing in it.
KNOWN_LABEL_PATTERNS: Tuple[Tuple[str, Tuple[str, ...], bool], ...] = (
    ("email", ("email",), False),
    ("phone", ("phone", "tel"), False),
    ("name", ("name", "full name"), True),
    ("firstName", ("first name",), False),
    ("lastName", ("last name",), False),
    ("company", ("company", "organization"), False),
    ("address", ("address",), False),
    ("city", ("city",), False),
    ("state", ("state", "province"), False),
    ("zip", ("zip", "postal"), False),
    ("country", ("country",), False),
)

_BOUNDARY_RE = re.compile(r"[^a-zA-Z0-9]+(.)")
_LEFTOVER_RE = re.compile(r"[^a-zA-Z0-9]+")


def camel_case(text: str) -> str:
    """Return ``text`` in camelCase.

    >>> camel_case("First Name")
    'firstName'
    >>> camel_case("E-mail Address")
    'eMailAddress'
    """
    lowered = (text or "").lower()
    folded = _BOUNDARY_RE.sub(lambda m: m.group(1).upper(), lowered)
    stripped = _LEFTOVER_RE.sub("", folded)
    if stripped and stripped[0].isupper():
        stripped = stripped[0].lower() + stripped[1:]
    return stripped


def label_key(label: str) -> Optional[str]:
    """Return the canonical key for a well-known label, if any."""
    lowered = (label or "").lower().strip()
    if not lowered:
        return None
    for key, keywords, exact in KNOWN_LABEL_PATTERNS:
        if exact:
            if lowered in keywords:
                return key
        elif any(kw in lowered for kw in keywords):
            return key
    return None


def resolve(field: FieldDescriptor, section_title: Optional[str] = None) -> str:
    """Return the stable id for ``field``.

    An id already stored on the field is returned unchanged; otherwise one is
    derived from the mapping, the type, the label, the name and finally the
    raw field id, in that order.
    """
    if field.stable_id:
        return field.stable_id

    if field.mapping is not None and field.mapping.value:
        return field.mapping.value

    type_key = _TYPE_KEYS.get((field.type or "").lower())
    if type_key:
        return type_key

    if field.label:
        known = label_key(field.label)
        if known:
            return known
        stable_id = camel_case(field.label)
        if stable_id:
            if section_title:
                prefix = camel_case(section_title)
                if prefix:
                    stable_id = f"{prefix}_{stable_id}"
            return stable_id

    if field.name:
        return field.name
    return f"field_{field.id}"


def add_stable_id(field: FieldDescriptor, section_title: Optional[str] = None) -> FieldDescriptor:
    """Return ``field`` with a stable id, assigning one only if it has none."""
    if field.stable_id:
        return field
    return field.with_stable_id(resolve(field, section_title))


@dataclass
class StableIdMigration:
    """Summary of an :func:`add_stable_ids` run."""

    fields_processed: int = 0
    fields_updated: int = 0
    fields_with_stable_ids: int = 0
    assigned: Dict[str, str] | None = None


def add_stable_ids(schema: FormSchema) -> Tuple[FormSchema, StableIdMigration]:
    """Assign stable ids to every field of ``schema`` that lacks one.

    Existing ids are preserved. Generated ids that collide with an id already
    used in the schema get a numeric suffix (``email_2``) so the schema stays
    unique.
    """
    summary = StableIdMigration(assigned={})
    taken: Set[str] = {f.stable_id for _, f in schema.fields() if f.stable_id}
    sections: List[Section] = []

    for section in schema.sections:
        fields: List[FieldDescriptor] = []
        for fld in section.fields:
            summary.fields_processed += 1
            if fld.stable_id:
                summary.fields_with_stable_ids += 1
                fields.append(fld)
                continue
            candidate = resolve(fld, section.title or None)
            unique = candidate
            counter = 2
            while unique in taken:
                unique = f"{candidate}_{counter}"
                counter += 1
            taken.add(unique)
            summary.fields_updated += 1
            summary.assigned[fld.id] = unique
            fields.append(fld.with_stable_id(unique))
        sections.append(replace(section, fields=tuple(fields)))

    logger.info(
        "Stable id migration: %d processed, %d updated, %d already set",
        summary.fields_processed,
        summary.fields_updated,
        summary.fields_with_stable_ids,
        extra={"form_id": schema.id},
    )
    return replace(schema, sections=tuple(sections)), summary
