"""
Module: mapper.py
Description:
  Map a raw form submission onto canonical roles (name, email, phone, date,
  ...). Each field runs through an ordered chain of strategies and the first
  one that names a role wins; contact details missing after the chain are
  searched for across the whole submission.

Version: 1.0.0
Created: 2025-04-26
Last Modified: 2025-05-12
Modified By: Koushik Sinha
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from common_utils import configure_logger

from .contact_extractor import extract_contact_fields, is_valid_email, process_phone_field
from .field_registry import FieldTypeRegistry, default_registry
from .models import FieldDescriptor, FormSchema
from .stable_id import label_key

# Module Metadata
__author__ = "Koushik Sinha"
__version__ = "1.0.0"
__modified_by__ = "Koushik Sinha"

logger = configure_logger(__name__)

__all__ = [
    "MappingResult",
    "FieldMapper",
    "map_fields",
    "explicit_mapping_strategy",
    "label_strategy",
    "id_strategy",
    "value_pattern_strategy",
]

# stable-id keys that the mapper writes under a different role name
_ROLE_ALIASES = {"firstName": "first_name", "lastName": "last_name"}

# label patterns only the mapper uses: (role, predicate on lower-cased label)
_MAPPER_LABEL_PATTERNS: Tuple[Tuple[str, Callable[[str], bool]], ...] = (
    ("first_name", lambda l: "first" in l and "name" in l),
    ("last_name", lambda l: "last" in l and "name" in l),
    ("name", lambda l: "name" in l and "first" not in l and "last" not in l),
    ("mobile", lambda l: "mobile" in l),
    ("datetime", lambda l: ("date" in l and "time" in l) or "datetime" in l),
    ("date", lambda l: ("date" in l or "day" in l) and "time" not in l and "birth" not in l),
    ("time", lambda l: "time" in l and "date" not in l),
    ("location", lambda l: "location" in l or "office" in l or "branch" in l),
)

_ID_PATTERNS: Tuple[Tuple[str, Callable[[str], bool]], ...] = (
    ("email", lambda i: "email" in i),
    ("name", lambda i: "name" in i and "first" not in i and "last" not in i),
    ("first_name", lambda i: "first" in i and "name" in i),
    ("last_name", lambda i: "last" in i and "name" in i),
    ("phone", lambda i: "phone" in i or "tel" in i or "mobile" in i),
    ("date", lambda i: "date" in i and "time" not in i and "birth" not in i),
    ("time", lambda i: "time" in i and "date" not in i),
)

_PHONE_VALUE_RE = re.compile(r"^[\d\s+\-()]{7,}$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")
_TIME_RE = re.compile(r"^\d{1,2}:\d{2}")
_NAME_VALUE_RE = re.compile(r"^[A-Za-z\s.'\-]+$")

_CONTACT_ROLES = ("name", "email", "phone")


@dataclass
class MappingResult:
    field_id: str
    role: str
    value: Any
    strategy: str


# ─── Strategies ──────────────────────────────────────────────────────────────
# Each takes the field and its value and returns a role or ``None``.


def explicit_mapping_strategy(fld: FieldDescriptor, value: Any) -> Optional[str]:
    if fld.mapping is None:
        return None
    return fld.mapping.role


def label_strategy(fld: FieldDescriptor, value: Any) -> Optional[str]:
    label = (fld.label or "").lower()
    if not label:
        return None
    known = label_key(label)
    if known:
        return _ROLE_ALIASES.get(known, known)
    for role, predicate in _MAPPER_LABEL_PATTERNS:
        if predicate(label):
            return "phone" if role == "mobile" else role
    return None


def id_strategy(fld: FieldDescriptor, value: Any) -> Optional[str]:
    for ref in (fld.id, fld.name):
        lowered = (ref or "").lower()
        if not lowered:
            continue
        for role, predicate in _ID_PATTERNS:
            if predicate(lowered):
                return role
    return None


def value_pattern_strategy(fld: FieldDescriptor, value: Any) -> Optional[str]:
    if not isinstance(value, str) or not value:
        return None
    if is_valid_email(value):
        return "email"
    if _PHONE_VALUE_RE.match(value):
        return "phone"
    if _ISO_DATE_RE.match(value):
        return "date"
    if _TIME_RE.match(value):
        return "time"
    if " " in value and len(value) < 50 and "@" not in value and _NAME_VALUE_RE.match(value):
        return "name"
    return None


def verbatim_strategy(fld: FieldDescriptor, value: Any) -> Optional[str]:
    return fld.name or fld.id or None


class FieldMapper:
    """Apply the mapping strategy chain using a :class:`FieldTypeRegistry`."""

    def __init__(self, registry: Optional[FieldTypeRegistry] = None) -> None:
        self.registry = registry if registry is not None else default_registry()
        self.strategies: List[Tuple[str, Callable[[FieldDescriptor, Any], Optional[str]]]] = [
            ("explicit", explicit_mapping_strategy),
            ("field-type", self._type_strategy),
            ("field-label", label_strategy),
            ("field-id", id_strategy),
            ("value-pattern", value_pattern_strategy),
            ("verbatim", verbatim_strategy),
        ]

    def _type_strategy(self, fld: FieldDescriptor, value: Any) -> Optional[str]:
        return self.registry.role_for(fld.type)

    def map_field(self, fld: FieldDescriptor, value: Any) -> Optional[MappingResult]:
        """Return the first strategy result for ``fld``, if any."""
        for name, strategy in self.strategies:
            role = strategy(fld, value)
            if role:
                return MappingResult(fld.id, role, value, name)
        return None

    def trace(self, schema: FormSchema, submission: Mapping[str, Any]) -> List[MappingResult]:
        """Return the per-field mapping decisions in schema order."""
        results = []
        for _, fld in schema.fields():
            value = submission.get(fld.id)
            if value is None:
                continue
            result = self.map_field(fld, value)
            if result is not None:
                results.append(result)
        return results

    def map_fields(
        self,
        schema: FormSchema,
        submission: Mapping[str, Any],
        include_raw: bool = False,
    ) -> Dict[str, Any]:
        """Return the canonical ``{role: value}`` map for ``submission``.

        The first field in schema order wins a role, except ``phone``, which
        is always decided by the scoring search over the whole submission.
        """
        mapped: Dict[str, Any] = {}
        for result in self.trace(schema, submission):
            if result.role in mapped:
                logger.debug(
                    "Role %s already filled, ignoring field %s", result.role, result.field_id
                )
                continue
            mapped[result.role] = result.value
            logger.debug(
                "Mapped field %s to %s using %s strategy",
                result.field_id,
                result.role,
                result.strategy,
                extra={"field_id": result.field_id},
            )

        if "name" not in mapped and ("first_name" in mapped or "last_name" in mapped):
            parts = [mapped.get("first_name"), mapped.get("last_name")]
            mapped["name"] = " ".join(str(p) for p in parts if p)

        if any(role not in mapped for role in _CONTACT_ROLES):
            contact = extract_contact_fields(submission)
            for role in ("name", "email"):
                found = getattr(contact, role)
                if role not in mapped and found:
                    logger.info("Extracted %s from raw submission data", role)
                    mapped[role] = found

        phone = process_phone_field(mapped.get("phone"), submission)
        if phone:
            mapped["phone"] = phone
        else:
            mapped.pop("phone", None)

        if include_raw:
            for key, value in submission.items():
                mapped[f"raw_{key}"] = value
        return mapped


def map_fields(
    schema: FormSchema,
    submission: Mapping[str, Any],
    registry: Optional[FieldTypeRegistry] = None,
    include_raw: bool = False,
) -> Dict[str, Any]:
    """Convenience wrapper around :meth:`FieldMapper.map_fields`."""
    return FieldMapper(registry).map_fields(schema, submission, include_raw=include_raw)
