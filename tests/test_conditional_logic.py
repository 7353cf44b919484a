from form_rules.conditional_logic import condition_met, is_visible, visible_fields
from form_rules.models import Condition, ConditionalLogic, FormSchema


def _logic(action, field="f1", operator="equals", value=None):
    return ConditionalLogic(action=action, when=Condition(field=field, operator=operator, value=value))


def test_is_empty_show_and_hide():
    values = {"f1": ""}
    assert is_visible(_logic("show", operator="is_empty"), values) is True
    assert is_visible(_logic("hide", operator="is_empty"), values) is False


def test_no_logic_is_visible():
    assert is_visible(None, {})
    assert is_visible(ConditionalLogic(action="hide", when=None), {})


def test_unknown_field_is_not_met():
    logic = _logic("show", field="missing", operator="is_empty")
    assert condition_met(logic, {"f1": "x"}) is False
    assert is_visible(logic, {"f1": "x"}) is False
    assert is_visible(_logic("hide", field="missing", operator="is_empty"), {}) is True


def test_declared_but_unsubmitted_field_is_empty(contact_schema):
    schema = FormSchema.from_dict(contact_schema)
    logic = _logic("show", field="f_notes", operator="is_empty")
    assert condition_met(logic, {}, schema) is True


def test_unknown_operator_hides_show_rules():
    assert is_visible(_logic("show", operator="between", value=1), {"f1": 1}) is False


def test_visible_fields_follow_field_logic(contact_schema):
    schema = FormSchema.from_dict(contact_schema)
    shown = [f.id for _, f in visible_fields(schema, {"f_province": "Gauteng"})]
    assert "f_notes" in shown
    hidden = [f.id for _, f in visible_fields(schema, {"f_province": "Western Cape"})]
    assert "f_notes" not in hidden
    assert "f_province" in hidden


def test_section_logic_gates_its_fields():
    schema = FormSchema.from_dict(
        {
            "sections": [
                {"id": "s1", "fields": [{"id": "kind", "type": "radio"}]},
                {
                    "id": "s2",
                    "conditionalLogic": {
                        "action": "show",
                        "when": {"field": "kind", "operator": "equals", "value": "business"},
                    },
                    "fields": [{"id": "company"}, {"id": "vat"}],
                },
            ]
        }
    )
    assert [f.id for _, f in visible_fields(schema, {"kind": "personal"})] == ["kind"]
    assert [f.id for _, f in visible_fields(schema, {"kind": "business"})] == ["kind", "company", "vat"]
