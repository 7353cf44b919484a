"""Locate name, email and phone values inside an arbitrary submission.

Used when a form carries no explicit mapping, or when the mapping points at
the wrong field. Phone detection is a scoring model whose heuristics are
plain ``ScoreRule`` tables so each rule can be exercised on its own.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from common_utils import configure_logger

# Module Metadata
__author__ = "Koushik Sinha"
__version__ = "1.0.0"
__modified_by__ = "Koushik Sinha"

logger = configure_logger(__name__)

__all__ = [
    "ScoreRule",
    "ContactFields",
    "PHONE_KEY_DISQUALIFIERS",
    "PHONE_VALUE_DISQUALIFIERS",
    "PHONE_KEY_RULES",
    "PHONE_VALUE_RULES",
    "EMAIL_RE",
    "is_valid_email",
    "looks_like_date",
    "score_phone_candidate",
    "find_phone",
    "process_phone_field",
    "extract_contact_fields",
    "process_name_fields",
]


@dataclass(frozen=True)
class ScoreRule:
    """A named ``(predicate, weight)`` pair."""

    name: str
    predicate: Callable[[str], bool]
    weight: int = 0


def _has(*needles: str) -> Callable[[str], bool]:
    return lambda text: any(n in text for n in needles)


def _matches(pattern: str) -> Callable[[str], bool]:
    compiled = re.compile(pattern)
    return lambda text: bool(compiled.search(text))


def _digit_count(text: str) -> int:
    return sum(ch.isdigit() for ch in text)


# ─── Phone scoring tables ────────────────────────────────────────────────────

# Applied to the lower-cased key.
PHONE_KEY_DISQUALIFIERS: Tuple[ScoreRule, ...] = (
    ScoreRule("date-key", _has("date", "time", "year", "month", "day")),
)

# Applied to the raw value.
PHONE_VALUE_DISQUALIFIERS: Tuple[ScoreRule, ...] = (
    ScoreRule("iso-date", _matches(r"^\d{4}-\d{1,2}-\d{1,2}")),
    ScoreRule("dmy-date", _matches(r"^\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4}")),
    ScoreRule("bare-year", _matches(r"^\d{4}$")),
    ScoreRule("recent-year", _has("202", "203")),
)

PHONE_KEY_RULES: Tuple[ScoreRule, ...] = (
    ScoreRule("phone", _has("phone"), 50),
    ScoreRule("mobile", _has("mobile"), 40),
    ScoreRule("cell", _has("cell"), 40),
    ScoreRule("tel", _has("tel"), 30),
    ScoreRule("contact", _has("contact"), 20),
)

PHONE_VALUE_RULES: Tuple[ScoreRule, ...] = (
    ScoreRule("parentheses", lambda v: "(" in v and ")" in v, 30),
    ScoreRule("international", _has("+"), 25),
    ScoreRule("grouped-digits", _matches(r"\d{3}[\s\-]?\d{3}[\s\-]?\d{4}"), 35),
    ScoreRule("phone-charset", _matches(r"^[\d\s+\-()]{7,}$"), 20),
    ScoreRule("enough-digits", lambda v: _digit_count(v) >= 10, 15),
    ScoreRule("not-too-many-digits", lambda v: _digit_count(v) <= 15, 10),
)

_PHONE_LIKE_RE = re.compile(r"^[\d\s+\-()]{7,}$")

# Wider net used to reject an explicitly mapped phone value.
_DATE_PATTERNS = tuple(
    re.compile(p)
    for p in (
        r"^\d{4}-\d{1,2}-\d{1,2}",
        r"^\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4}",
        r"^\d{4}$",
        r"^\d{1,2}-[A-Za-z]{3}-\d{4}$",
        r"^[A-Za-z]{3} \d{1,2}, \d{4}$",
        r"^\d{1,2} [A-Za-z]{3} \d{4}$",
        r"^\d{1,2}\s?[A-Za-z]+\s?\d{4}$",
        r"^\d{1,2}\.\d{1,2}\.\d{2,4}$",
    )
)
_MONTHS = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_FULL_NAME_RE = re.compile(r"^[A-Za-z\s.'\-]+$")
_SINGLE_NAME_RE = re.compile(r"^[A-Za-z.'\-]+$")
_TITLED_NAME_RE = re.compile(r"^(Mr\.|Mrs\.|Ms\.|Dr\.|Prof\.)\s[A-Za-z\s.'\-]+$")
_NUMERIC_RE = re.compile(r"^[\d\s+\-()]+$")


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and bool(EMAIL_RE.match(value.strip()))


def looks_like_date(value: str) -> bool:
    """Return ``True`` when ``value`` reads as a date rather than a phone."""
    if any(p.search(value) for p in _DATE_PATTERNS):
        return True
    if re.match(r"^\d{8}$", value) and value.startswith(("19", "20")):
        return True  # YYYYMMDD
    lowered = value.lower()
    if "202" in lowered or "203" in lowered:
        return True
    return any(month in lowered for month in _MONTHS)


def _apply(rules: Iterable[ScoreRule], text: str) -> int:
    return sum(rule.weight for rule in rules if rule.predicate(text))


def score_phone_candidate(key: str, value: Any) -> Optional[int]:
    """Return the phone score for one submission entry.

    ``None`` means the entry is disqualified (not a string, empty, or
    date-like by key or value).
    """
    if not isinstance(value, str) or not value:
        return None
    lower_key = str(key).lower()
    if any(rule.predicate(lower_key) for rule in PHONE_KEY_DISQUALIFIERS):
        return None
    if any(rule.predicate(value) for rule in PHONE_VALUE_DISQUALIFIERS):
        return None
    return _apply(PHONE_KEY_RULES, lower_key) + _apply(PHONE_VALUE_RULES, value)


def find_phone(form_data: Mapping[str, Any]) -> Optional[str]:
    """Return the best phone-number candidate in ``form_data``.

    Only candidates scoring above zero count; ties go to the entry seen first.
    """
    best: Optional[Tuple[int, str, str]] = None
    for key, value in form_data.items():
        score = score_phone_candidate(key, value)
        if score is None or score <= 0:
            continue
        if best is None or score > best[0]:
            best = (score, key, value)
    if best is None:
        return None
    logger.debug("Best phone match in %s: %r (score %d)", best[1], best[2], best[0])
    return best[2]


def process_phone_field(candidate: Any, form_data: Mapping[str, Any]) -> Optional[str]:
    """Return the phone number to store for a submission.

    The scoring search over ``form_data`` always wins; ``candidate`` (usually
    the explicitly mapped value) is only used when the search finds nothing
    and the value itself passes a sanity check.
    """
    best = find_phone(form_data)
    if best:
        return best
    if candidate is None or candidate == "":
        return None
    phone = str(candidate)
    if looks_like_date(phone):
        logger.info("Phone value %r looks like a date, rejecting it", phone)
        return None
    has_indicator = (
        "(" in phone
        or ")" in phone
        or "+" in phone
        or bool(re.search(r"\d{3}[\s\-]?\d{3}[\s\-]?\d{4}", phone))
    )
    if not has_indicator and len(phone) < 10:
        logger.info("Value %r does not look like a phone number, rejecting it", phone)
        return None
    return phone


# ─── Name and email ──────────────────────────────────────────────────────────


@dataclass
class ContactFields:
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    def as_dict(self) -> Dict[str, str]:
        return {k: v for k, v in self.__dict__.items() if v}


def _is_first_name_key(key: str) -> bool:
    return key in ("firstname", "first_name", "first-name") or ("first" in key and "name" in key)


def _is_last_name_key(key: str) -> bool:
    return key in ("lastname", "last_name", "last-name") or (
        "last" in key and "name" in key and "first" not in key
    )


def _is_full_name_key(key: str) -> bool:
    return key in ("name", "fullname", "full_name", "full-name") or (
        "name" in key and "first" not in key and "last" not in key
    )


def _looks_like_name(value: str) -> bool:
    if "@" in value or _NUMERIC_RE.match(value):
        return False
    if " " in value and len(value) < 50 and _FULL_NAME_RE.match(value):
        return True
    if 1 < len(value) < 30 and _SINGLE_NAME_RE.match(value):
        return True
    return len(value) < 50 and bool(_TITLED_NAME_RE.match(value))


def _explicit_name_pair(form_data: Mapping[str, Any]) -> Tuple[Optional[str], Optional[str]]:
    """Return values of keys ending in ``first_name``/``last_name`` (or camel forms)."""
    first = last = None
    for key, value in form_data.items():
        if not isinstance(value, str) or not value:
            continue
        lower_key = str(key).lower()
        if lower_key.endswith(("first_name", "firstname")):
            first = value
        elif lower_key.endswith(("last_name", "lastname")):
            last = value
    return first, last


def _split_name(name: str) -> Tuple[str, str]:
    first, _, rest = name.partition(" ")
    return first, rest


def extract_contact_fields(form_data: Mapping[str, Any]) -> ContactFields:
    """Best-effort extraction of name, email and phone from raw ``form_data``."""
    found = ContactFields()

    # first pass: keys that say what they hold
    for key, value in form_data.items():
        if not isinstance(value, str) or not value:
            continue
        lower_key = str(key).lower()
        if found.first_name is None and _is_first_name_key(lower_key):
            found.first_name = value
        elif found.last_name is None and _is_last_name_key(lower_key):
            found.last_name = value
        elif found.name is None and _is_full_name_key(lower_key):
            found.name = value
        if found.email is None and ("mail" in lower_key) and "@" in value and "." in value:
            found.email = value

    # second pass: values that look like what we still miss
    for key, value in form_data.items():
        if not isinstance(value, str) or not value.strip():
            continue
        if found.email is None and is_valid_email(value):
            found.email = value
        if found.name is None and found.first_name is None and found.last_name is None:
            if _looks_like_name(value):
                found.name = value

    if found.first_name and found.last_name:
        found.name = f"{found.first_name} {found.last_name}"
    elif found.name is None:
        found.name = found.first_name or found.last_name

    if found.name and " " in found.name and not (found.first_name and found.last_name):
        first, rest = _split_name(found.name)
        found.first_name = found.first_name or first
        found.last_name = found.last_name or rest or None

    explicit_first, explicit_last = _explicit_name_pair(form_data)
    if explicit_first and explicit_last:
        found.first_name = explicit_first
        found.last_name = explicit_last
        found.name = f"{explicit_first} {explicit_last}"

    found.phone = find_phone(form_data)
    logger.debug("Extracted contact fields: %s", sorted(found.as_dict()))
    return found


def process_name_fields(mapped: Mapping[str, Any], form_data: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``mapped`` with consistent name, first and last name keys.

    A full name is split on its first space to fill missing parts; first and
    last names found in ``form_data`` are combined into ``name``; an explicit
    ``first_name``/``last_name`` pair in ``form_data`` overrides everything.
    """
    result: Dict[str, Any] = dict(mapped)
    first = result.get("first_name") or result.get("firstName")
    last = result.get("last_name") or result.get("lastName")
    full = result.get("name")

    if not first or not last:
        for key, value in form_data.items():
            if not isinstance(value, str) or not value:
                continue
            lower_key = str(key).lower()
            if not first and _is_first_name_key(lower_key):
                first = value
            elif not last and _is_last_name_key(lower_key):
                last = value

    if isinstance(full, str) and " " in full and (not first or not last):
        split_first, split_rest = _split_name(full)
        first = first or split_first
        last = last or split_rest or None

    if first and last:
        result["name"] = f"{first} {last}"
    elif not full and (first or last):
        result["name"] = first or last

    explicit_first, explicit_last = _explicit_name_pair(form_data)
    if explicit_first and explicit_last:
        first, last = explicit_first, explicit_last
        result["name"] = f"{first} {last}"

    if first:
        result["first_name"] = result["firstName"] = first
    if last:
        result["last_name"] = result["lastName"] = last
    return result
