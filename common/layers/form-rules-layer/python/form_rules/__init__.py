# Module Metadata
__author__ = "Koushik Sinha"
__version__ = "1.0.0"
__modified_by__ = "Koushik Sinha"

from .errors import FormRulesError, SchemaError
from .models import (
    Condition,
    ConditionalLogic,
    EmailRule,
    EmailTemplate,
    FieldDescriptor,
    FieldMapping,
    FormSchema,
    OutgoingEmail,
    Section,
)
from .operators import Operator, evaluate
from .stable_id import add_stable_id, add_stable_ids, camel_case, resolve
from .contact_extractor import extract_contact_fields, find_phone, process_phone_field
from .field_registry import FieldType, FieldTypeRegistry, default_registry
from .mapper import FieldMapper, map_fields
from .conditional_logic import is_visible, visible_fields
from .validation import ValidationResult, validate_submission
from .rule_engine import FieldCatalogue, build_condition_data, evaluate_rule, select_firing_rules
from .variables import build_render_context, find_variables, render, render_template
from .pipeline import SubmissionResult, process_submission

__all__ = [
    "FormRulesError",
    "SchemaError",
    "Condition",
    "ConditionalLogic",
    "EmailRule",
    "EmailTemplate",
    "FieldDescriptor",
    "FieldMapping",
    "FormSchema",
    "OutgoingEmail",
    "Section",
    "Operator",
    "evaluate",
    "add_stable_id",
    "add_stable_ids",
    "camel_case",
    "resolve",
    "extract_contact_fields",
    "find_phone",
    "process_phone_field",
    "FieldType",
    "FieldTypeRegistry",
    "default_registry",
    "FieldMapper",
    "map_fields",
    "is_visible",
    "visible_fields",
    "ValidationResult",
    "validate_submission",
    "FieldCatalogue",
    "build_condition_data",
    "evaluate_rule",
    "select_firing_rules",
    "build_render_context",
    "find_variables",
    "render",
    "render_template",
    "SubmissionResult",
    "process_submission",
]
