import pytest

from form_rules.contact_extractor import (
    PHONE_KEY_RULES,
    PHONE_VALUE_DISQUALIFIERS,
    PHONE_VALUE_RULES,
    extract_contact_fields,
    find_phone,
    looks_like_date,
    process_name_fields,
    process_phone_field,
    score_phone_candidate,
)


def _rule(rules, name):
    return next(r for r in rules if r.name == name)


def test_date_value_rejected_even_with_neutral_key():
    data = {"field_a": "2025-06-01", "field_b": "+1 (555) 123-4567"}
    assert find_phone(data) == "+1 (555) 123-4567"


def test_date_key_disqualifies_entry():
    assert score_phone_candidate("booking_day", "0215550100") is None
    assert find_phone({"booking_day": "0215550100"}) is None


def test_key_weights_prefer_phone_named_field():
    data = {"contact": "555 123 4567", "phone": "555 123 4567"}
    assert score_phone_candidate("phone", "555 123 4567") > score_phone_candidate("contact", "555 123 4567")
    assert find_phone(data) == "555 123 4567"


def test_ties_go_to_first_seen():
    data = {"a": "0215550100", "b": "0215550199"}
    assert find_phone(data) == "0215550100"


def test_any_string_that_is_not_date_like_is_a_candidate():
    assert score_phone_candidate("mobile", "555 12") == 50
    assert find_phone({"name": "Jane Doe", "notes": "call me"}) == "Jane Doe"


@pytest.mark.parametrize(
    "rule, value, expected",
    [
        ("parentheses", "(021) 555", True),
        ("parentheses", "021) 555", False),
        ("international", "+27 21", True),
        ("grouped-digits", "555-123-4567", True),
        ("phone-charset", "12 34", False),
        ("phone-charset", "12 34 56", True),
        ("enough-digits", "021 555 0100", True),
    ],
)
def test_value_rules(rule, value, expected):
    assert _rule(PHONE_VALUE_RULES, rule).predicate(value) is expected


def test_recent_year_disqualifier():
    assert _rule(PHONE_VALUE_DISQUALIFIERS, "recent-year").predicate("12 March 2031")
    assert not _rule(PHONE_VALUE_DISQUALIFIERS, "recent-year").predicate("021 555 0100")
    assert _rule(PHONE_VALUE_DISQUALIFIERS, "recent-year").predicate("021 202 5555")
    assert find_phone({"x": "021 202 5555"}) is None


def test_key_rule_weights():
    assert {r.name: r.weight for r in PHONE_KEY_RULES} == {
        "phone": 50,
        "mobile": 40,
        "cell": 40,
        "tel": 30,
        "contact": 20,
    }


def test_looks_like_date():
    assert looks_like_date("2025-01-01")
    assert looks_like_date("01/02/2025")
    assert looks_like_date("Mar 3, 2024")
    assert looks_like_date("19991231")
    assert not looks_like_date("+1 555 123 4567")


def test_process_phone_field_prefers_search():
    assert process_phone_field("0215550100", {"phone": "ext 12"}) == "ext 12"
    data = {"mobile": "082 555 0100", "other": "x"}
    assert process_phone_field("12345", data) == "082 555 0100"


def test_process_phone_field_rejects_bad_candidates():
    assert process_phone_field("2025-03-01", {}) is None
    assert process_phone_field("12345", {}) is None
    assert process_phone_field("(021) 555", {}) == "(021) 555"
    assert process_phone_field(None, {}) is None


def test_extract_contact_fields_by_key():
    found = extract_contact_fields(
        {"first_name": "Jane", "last_name": "Doe", "email_address": "jane@example.com", "phone": "021 555 0100"}
    )
    assert found.name == "Jane Doe"
    assert found.first_name == "Jane"
    assert found.last_name == "Doe"
    assert found.email == "jane@example.com"
    assert found.phone == "021 555 0100"


def test_extract_contact_fields_by_value():
    found = extract_contact_fields({"q1": "Sam Smith", "q2": "sam@example.org"})
    assert found.name == "Sam Smith"
    assert found.first_name == "Sam"
    assert found.last_name == "Smith"
    assert found.email == "sam@example.org"
    assert found.phone == "Sam Smith"


def test_single_name_part_used_alone():
    found = extract_contact_fields({"firstName": "Cher"})
    assert found.name == "Cher"
    assert found.last_name is None


def test_explicit_pair_overrides():
    found = extract_contact_fields(
        {"full_name": "J. Doe", "contact_first_name": "Jane", "contact_last_name": "Doe-Smith"}
    )
    assert found.name == "Jane Doe-Smith"


def test_process_name_fields_splits_full_name():
    result = process_name_fields({"name": "Jane van Wyk"}, {})
    assert result["first_name"] == result["firstName"] == "Jane"
    assert result["last_name"] == result["lastName"] == "van Wyk"
    assert result["name"] == "Jane van Wyk"


def test_process_name_fields_combines_parts_from_form_data():
    result = process_name_fields({}, {"firstName": "Jane", "lastName": "Doe"})
    assert result["name"] == "Jane Doe"
