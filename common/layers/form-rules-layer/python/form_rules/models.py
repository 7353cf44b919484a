"""Dataclasses describing forms, submissions, email rules and templates.

Payloads arrive as the camelCase JSON stored by the form builder. Every
``from_dict`` accepts that shape (and the snake_case equivalent), ignores
unknown keys and only raises :class:`~form_rules.errors.SchemaError` when the
top-level value is not a mapping at all.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from .errors import SchemaError

__all__ = [
    "MAPPING_TYPES",
    "FieldMapping",
    "Condition",
    "ConditionalLogic",
    "FieldDescriptor",
    "Section",
    "FormSchema",
    "EmailRule",
    "EmailTemplate",
    "OutgoingEmail",
    "SubmissionData",
]

SubmissionData = Dict[str, Any]

MAPPING_TYPES = (
    "name",
    "email",
    "phone",
    "date",
    "time",
    "location",
    "location_office",
    "datetime",
    "custom",
)


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present, non-None value among ``keys``."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise SchemaError(f"{what} must be an object, got {type(data).__name__}")
    return data


def _load_json_list(raw: Any, what: str) -> List[Any]:
    """Return ``raw`` as a list, decoding JSON text stored in a TEXT column."""
    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise SchemaError(f"{what} is not valid JSON: {exc}") from None
    if raw is None:
        return []
    if isinstance(raw, Mapping):
        # "{}" is how an empty condition set is sometimes stored
        return [] if not raw else [raw]
    if not isinstance(raw, list):
        raise SchemaError(f"{what} must be a list")
    return raw


@dataclass(frozen=True)
class FieldMapping:
    """The canonical role a field plays in a submission."""

    type: str
    value: Optional[str] = None
    custom_key: Optional[str] = None

    @property
    def role(self) -> Optional[str]:
        """Role key this mapping writes to, or ``None`` when it names none."""
        if self.type == "custom":
            return self.custom_key or self.value or None
        return self.type or None

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["FieldMapping"]:
        """Parse an object mapping, a JSON string, or a legacy bare string."""
        if raw is None or raw == "":
            return None
        if isinstance(raw, FieldMapping):
            return raw
        if isinstance(raw, str):
            text = raw.strip()
            if text.startswith("{") and text.endswith("}"):
                try:
                    return cls.from_raw(json.loads(text))
                except json.JSONDecodeError:
                    pass
            if text in MAPPING_TYPES and text != "custom":
                return cls(type=text, value=text)
            return cls(type="custom", value=text, custom_key=text)
        if isinstance(raw, Mapping):
            mtype = raw.get("type") or "custom"
            value = raw.get("value")
            custom_key = _pick(raw, "customKey", "custom_key")
            if mtype not in MAPPING_TYPES:
                return cls(type="custom", value=value, custom_key=custom_key or mtype)
            return cls(type=mtype, value=value, custom_key=custom_key)
        return None


@dataclass(frozen=True)
class Condition:
    """A single ``{field, operator, value}`` predicate.

    ``stable_id`` and ``label`` are alternative references tried after
    ``field`` when the rule engine looks the field up.
    """

    field: Optional[str]
    operator: str
    value: Any = None
    stable_id: Optional[str] = None
    label: Optional[str] = None

    @property
    def references(self) -> Tuple[str, ...]:
        """Non-empty field references in lookup order."""
        refs = []
        for ref in (self.field, self.stable_id, self.label):
            if isinstance(ref, str) and ref and ref not in refs:
                refs.append(ref)
        return tuple(refs)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Condition":
        data = _require_mapping(data, "condition")
        return cls(
            field=_pick(data, "field", "fieldId"),
            operator=str(data.get("operator") or ""),
            value=data.get("value"),
            stable_id=_pick(data, "stableId", "fieldStableId", "stable_id"),
            label=_pick(data, "label", "fieldLabel"),
        )


@dataclass(frozen=True)
class ConditionalLogic:
    action: str
    when: Optional[Condition]

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["ConditionalLogic"]:
        if not raw:
            return None
        if isinstance(raw, ConditionalLogic):
            return raw
        if not isinstance(raw, Mapping):
            return None
        when = raw.get("when")
        return cls(
            action=str(raw.get("action") or "show"),
            when=Condition.from_dict(when) if isinstance(when, Mapping) else None,
        )


@dataclass(frozen=True)
class FieldDescriptor:
    id: str
    type: str = "text"
    label: str = ""
    name: str = ""
    required: bool = False
    mapping: Optional[FieldMapping] = None
    conditional_logic: Optional[ConditionalLogic] = None
    stable_id: Optional[str] = None
    options: Tuple[Any, ...] = ()
    min: Any = None
    max: Any = None
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    def with_stable_id(self, stable_id: str) -> "FieldDescriptor":
        return replace(self, stable_id=stable_id)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FieldDescriptor":
        data = _require_mapping(data, "field")
        field_id = data.get("id")
        if field_id is None or field_id == "":
            raise SchemaError("field is missing an id")
        options = data.get("options") or ()
        if isinstance(options, str):
            options = [opt.strip() for opt in options.split(",") if opt.strip()]
        return cls(
            id=str(field_id),
            type=str(data.get("type") or "text"),
            label=str(data.get("label") or ""),
            name=str(data.get("name") or ""),
            required=bool(data.get("required") or False),
            mapping=FieldMapping.from_raw(data.get("mapping")),
            conditional_logic=ConditionalLogic.from_raw(
                _pick(data, "conditionalLogic", "conditional_logic")
            ),
            stable_id=_pick(data, "stableId", "stable_id") or None,
            options=tuple(options),
            min=data.get("min"),
            max=data.get("max"),
            metadata=dict(data["metadata"]) if isinstance(data.get("metadata"), Mapping) else {},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialise back to the form builder's camelCase shape."""
        out: Dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "label": self.label,
            "name": self.name,
            "required": self.required,
        }
        if self.stable_id:
            out["stableId"] = self.stable_id
        if self.mapping is not None:
            out["mapping"] = {"type": self.mapping.type, "value": self.mapping.value}
            if self.mapping.custom_key:
                out["mapping"]["customKey"] = self.mapping.custom_key
        if self.conditional_logic is not None:
            out["conditionalLogic"] = _logic_to_dict(self.conditional_logic)
        if self.options:
            out["options"] = list(self.options)
        if self.min is not None:
            out["min"] = self.min
        if self.max is not None:
            out["max"] = self.max
        if self.metadata:
            out["metadata"] = dict(self.metadata)
        return out


def _logic_to_dict(logic: ConditionalLogic) -> Dict[str, Any]:
    out: Dict[str, Any] = {"action": logic.action}
    if logic.when is not None:
        out["when"] = {
            "field": logic.when.field,
            "operator": logic.when.operator,
            "value": logic.when.value,
        }
    return out


@dataclass(frozen=True)
class Section:
    id: str
    title: str = ""
    fields: Tuple[FieldDescriptor, ...] = ()
    conditional_logic: Optional[ConditionalLogic] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], index: int = 0) -> "Section":
        data = _require_mapping(data, "section")
        fields = data.get("fields") or []
        if not isinstance(fields, list):
            raise SchemaError("section fields must be a list")
        return cls(
            id=str(data.get("id") or f"section_{index}"),
            title=str(data.get("title") or ""),
            fields=tuple(FieldDescriptor.from_dict(f) for f in fields),
            conditional_logic=ConditionalLogic.from_raw(
                _pick(data, "conditionalLogic", "conditional_logic")
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "fields": [f.to_dict() for f in self.fields],
        }
        if self.conditional_logic is not None:
            out["conditionalLogic"] = _logic_to_dict(self.conditional_logic)
        return out


@dataclass(frozen=True)
class FormSchema:
    """Ordered sections of ordered fields."""

    sections: Tuple[Section, ...] = ()
    id: Optional[str] = None
    name: Optional[str] = None
    form_type: str = "INQUIRY"

    def fields(self) -> Iterator[Tuple[Section, FieldDescriptor]]:
        """Yield ``(section, field)`` pairs in schema order."""
        for section in self.sections:
            for fld in section.fields:
                yield section, fld

    def field_by_id(self, field_id: str) -> Optional[FieldDescriptor]:
        for _, fld in self.fields():
            if fld.id == field_id:
                return fld
        return None

    def has_field(self, field_id: str) -> bool:
        return self.field_by_id(field_id) is not None

    @classmethod
    def from_dict(cls, data: Any) -> "FormSchema":
        if isinstance(data, FormSchema):
            return data
        data = _require_mapping(data, "form schema")
        sections = _load_json_list(data.get("sections"), "sections")
        if not sections and data.get("fields"):
            # legacy forms stored a flat field list
            sections = [
                {
                    "id": "default_section",
                    "title": "Default Section",
                    "fields": _load_json_list(data["fields"], "fields"),
                }
            ]
        metadata = data.get("metadata")
        if not isinstance(metadata, Mapping):
            metadata = {}
        form_type = _pick(data, "type", "formType", "form_type") or metadata.get("formType") or "INQUIRY"
        schema = cls(
            sections=tuple(Section.from_dict(s, i) for i, s in enumerate(sections)),
            id=data.get("id"),
            name=data.get("name"),
            form_type=str(form_type).upper(),
        )
        seen = set()
        for _, fld in schema.fields():
            if fld.id in seen:
                raise SchemaError(f"duplicate field id {fld.id!r}")
            seen.add(fld.id)
        return schema

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.form_type,
            "sections": [s.to_dict() for s in self.sections],
        }


def _email_list(raw: Any) -> Tuple[str, ...]:
    if not raw:
        return ()
    if isinstance(raw, str):
        parts = raw.split(",")
    else:
        parts = list(raw)
    return tuple(str(p).strip() for p in parts if p and str(p).strip())


@dataclass(frozen=True)
class EmailRule:
    id: str
    template_id: str
    conditions: Tuple[Condition, ...] = ()
    name: str = ""
    active: bool = True
    recipient_type: Optional[str] = None
    recipient_field: Optional[str] = None
    recipient_email: Optional[str] = None
    cc_emails: Tuple[str, ...] = ()
    bcc_emails: Tuple[str, ...] = ()
    form_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EmailRule":
        data = _require_mapping(data, "email rule")
        conditions = _load_json_list(data.get("conditions"), "rule conditions")
        active = data.get("active")
        return cls(
            id=str(data.get("id") or ""),
            template_id=str(_pick(data, "templateId", "template_id", default="")),
            conditions=tuple(Condition.from_dict(c) for c in conditions if isinstance(c, Mapping)),
            name=str(data.get("name") or ""),
            active=True if active is None else bool(active),
            recipient_type=_pick(data, "recipientType", "recipient_type"),
            recipient_field=_pick(data, "recipientField", "recipient_field"),
            recipient_email=_pick(data, "recipientEmail", "recipient_email"),
            cc_emails=_email_list(_pick(data, "ccEmails", "cc_emails")),
            bcc_emails=_email_list(_pick(data, "bccEmails", "bcc_emails")),
            form_id=_pick(data, "formId", "form_id"),
        )


@dataclass(frozen=True)
class EmailTemplate:
    id: str
    subject: str = ""
    html_content: str = ""
    text_content: Optional[str] = None
    name: str = ""
    cc_emails: Tuple[str, ...] = ()
    bcc_emails: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EmailTemplate":
        data = _require_mapping(data, "email template")
        return cls(
            id=str(data.get("id") or ""),
            subject=str(data.get("subject") or ""),
            html_content=str(_pick(data, "htmlContent", "html_content", default="")),
            text_content=_pick(data, "textContent", "text_content"),
            name=str(data.get("name") or ""),
            cc_emails=_email_list(_pick(data, "ccEmails", "cc_emails")),
            bcc_emails=_email_list(_pick(data, "bccEmails", "bcc_emails")),
        )


@dataclass
class OutgoingEmail:
    """A rendered email ready for the dispatch queue."""

    rule_id: str
    template_id: str
    recipient: str
    subject: str
    html: str
    text: str
    cc: List[str] = field(default_factory=list)
    bcc: List[str] = field(default_factory=list)
