"""Registry of form field types.

A :class:`FieldTypeRegistry` is built by the caller (usually once per
process through :func:`default_registry`) and handed to the mapper and the
validator. Each entry knows the canonical role a field of that type fills
and how to validate a submitted value.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from .contact_extractor import EMAIL_RE
from .models import FieldDescriptor
from .operators import is_empty, to_number

__all__ = ["FieldType", "FieldTypeRegistry", "default_registry", "parse_date"]

Validator = Callable[[Any, FieldDescriptor], Optional[str]]


@dataclass(frozen=True)
class FieldType:
    """One registered field type."""

    type: str
    display_name: str
    role: Optional[str] = None
    aliases: Tuple[str, ...] = ()
    validate: Optional[Validator] = None
    defaults: Dict[str, Any] = field(default_factory=dict, compare=False)


class FieldTypeRegistry:
    """Lookup table from field type names (and aliases) to :class:`FieldType`."""

    def __init__(self, entries: Iterable[FieldType] = ()) -> None:
        self._entries: Dict[str, FieldType] = {}
        self._aliases: Dict[str, str] = {}
        for entry in entries:
            self.register(entry)

    def register(self, entry: FieldType) -> None:
        key = entry.type.lower()
        self._entries[key] = entry
        for alias in entry.aliases:
            self._aliases[alias.lower()] = key

    def get(self, type_name: Optional[str]) -> Optional[FieldType]:
        if not type_name:
            return None
        key = type_name.lower()
        key = self._aliases.get(key, key)
        return self._entries.get(key)

    def role_for(self, type_name: Optional[str]) -> Optional[str]:
        """Canonical role a field of ``type_name`` fills, if the type implies one."""
        entry = self.get(type_name)
        return entry.role if entry else None

    def default_config(self, type_name: str, field_id: str) -> Dict[str, Any]:
        entry = self.get(type_name)
        if entry is None:
            raise KeyError(f'Field type "{type_name}" is not registered')
        config = {
            "id": field_id,
            "type": entry.type,
            "name": f"{entry.type}_{field_id}",
            "label": f"{entry.display_name} Field",
        }
        config.update(entry.defaults)
        return config

    def validate(self, value: Any, fld: FieldDescriptor) -> Optional[str]:
        """Return an error message for ``value`` or ``None`` when it is valid."""
        if fld.required and _missing(value):
            return "This field is required"
        entry = self.get(fld.type)
        if entry is None or entry.validate is None or _missing(value):
            return None
        return entry.validate(value, fld)


def _missing(value: Any) -> bool:
    return is_empty(value) or value == []


# ─── Validators ──────────────────────────────────────────────────────────────

_PHONE_DIGITS_RE = re.compile(r"^\+?[0-9]{10,15}$")


def _validate_email(value: Any, fld: FieldDescriptor) -> Optional[str]:
    if not isinstance(value, str) or not EMAIL_RE.match(value):
        return "Please enter a valid email address"
    return None


def _validate_phone(value: Any, fld: FieldDescriptor) -> Optional[str]:
    digits = re.sub(r"[^0-9+]", "", str(value))
    if not _PHONE_DIGITS_RE.match(digits):
        return "Please enter a valid phone number"
    return None


def _validate_number(value: Any, fld: FieldDescriptor) -> Optional[str]:
    number = to_number(value)
    if math.isnan(number):
        return "Please enter a valid number"
    if fld.min is not None and not math.isnan(to_number(fld.min)) and number < to_number(fld.min):
        return f"Value must be at least {fld.min}"
    if fld.max is not None and not math.isnan(to_number(fld.max)) and number > to_number(fld.max):
        return f"Value must be at most {fld.max}"
    return None


def parse_date(value: Any) -> Optional[datetime]:
    """Parse an ISO date or datetime string; ``None`` when it is not one."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    # compare naive so mixed inputs never raise
    return parsed.replace(tzinfo=None)


def _validate_date(value: Any, fld: FieldDescriptor) -> Optional[str]:
    parsed = parse_date(value)
    if parsed is None:
        return "Please enter a valid date"
    lower = parse_date(fld.min) if fld.min else None
    upper = parse_date(fld.max) if fld.max else None
    if lower is not None and parsed < lower:
        return f"Date must be on or after {fld.min}"
    if upper is not None and parsed > upper:
        return f"Date must be on or before {fld.max}"
    return None


def _validate_choice(value: Any, fld: FieldDescriptor) -> Optional[str]:
    if not fld.options:
        return None
    allowed = set()
    for option in fld.options:
        if isinstance(option, dict):
            allowed.add(str(option.get("value", option.get("label", ""))))
        else:
            allowed.add(str(option))
    chosen = value if isinstance(value, list) else [value]
    if any(str(v) not in allowed for v in chosen):
        return "Please select a valid option"
    return None


def default_registry() -> FieldTypeRegistry:
    """Return a fresh registry with the built-in field types."""
    return FieldTypeRegistry(
        [
            FieldType("text", "Text", defaults={"placeholder": "Enter text"}),
            FieldType("textarea", "Text Area"),
            FieldType(
                "email",
                "Email",
                role="email",
                aliases=("mail", "e-mail"),
                validate=_validate_email,
                defaults={"placeholder": "Enter email address"},
            ),
            FieldType(
                "tel",
                "Phone",
                role="phone",
                aliases=("phone", "telephone", "mobile"),
                validate=_validate_phone,
                defaults={"placeholder": "Enter phone number"},
            ),
            FieldType("name", "Name", role="name", aliases=("fullname", "full_name", "full-name")),
            FieldType("firstname", "First Name", role="first_name", aliases=("first_name", "first-name")),
            FieldType("lastname", "Last Name", role="last_name", aliases=("last_name", "last-name")),
            FieldType("number", "Number", validate=_validate_number, defaults={"placeholder": "Enter a number"}),
            FieldType(
                "date",
                "Date",
                role="date",
                aliases=("booking_date", "appointment_date"),
                validate=_validate_date,
                defaults={"placeholder": "Select a date"},
            ),
            FieldType("time", "Time", role="time", aliases=("booking_time", "appointment_time")),
            FieldType(
                "datetime",
                "Date & Time",
                role="datetime",
                aliases=("datetime-local", "booking_datetime"),
                validate=_validate_date,
            ),
            FieldType("dob", "Date of Birth", validate=_validate_date),
            FieldType(
                "select",
                "Dropdown",
                validate=_validate_choice,
                defaults={"placeholder": "Select an option"},
            ),
            FieldType("multiselect", "Multi Select", validate=_validate_choice),
            FieldType("radio", "Radio", validate=_validate_choice),
            FieldType("checkbox", "Checkbox"),
            FieldType("file", "File Upload"),
            FieldType("hidden", "Hidden"),
        ]
    )
