"""Exceptions raised by the form rules layer."""

__all__ = ["FormRulesError", "SchemaError"]


class FormRulesError(Exception):
    """Base class for errors raised by :mod:`form_rules`."""


class SchemaError(FormRulesError):
    """Raised when a form schema, rule or template payload has the wrong shape."""
