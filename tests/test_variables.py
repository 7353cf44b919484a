from form_rules.models import EmailTemplate, FormSchema
from form_rules.variables import (
    build_render_context,
    find_variables,
    render,
    render_template,
    to_display,
)


def test_first_name_from_full_name():
    assert render("Hi {{firstName}}", {"firstName": None, "name": "Jane Doe"}) == "Hi Jane"


def test_first_name_from_email_local_part():
    assert render("Hi {{firstName}}", {"email": "jane@x.com"}) == "Hi jane"


def test_first_name_literal_fallback():
    assert render("Hi {{firstName}}", {}) == "Hi Customer"


def test_direct_value_wins():
    assert render("Hi {{firstName}}", {"firstName": "Janet", "name": "Jane Doe"}) == "Hi Janet"


def test_unresolved_placeholders_stay_verbatim(caplog):
    text = "Dear {{ title }} {{surname}}, ref {{ref}}"
    assert render(text, {"ref": 7}) == "Dear {{ title }} {{surname}}, ref 7"
    assert "title, surname" in caplog.text


def test_none_and_empty_text():
    assert render(None, {"a": 1}) == ""
    assert render("", {"a": 1}) == ""


def test_stringification_matches_js():
    assert to_display(True) == "true"
    assert to_display(3.0) == "3"
    assert to_display(2.5) == "2.5"
    assert to_display(["a", 1, None]) == "a,1,"
    assert render("{{count}} items, paid: {{paid}}", {"count": 3.0, "paid": False}) == "3 items, paid: false"


def test_find_variables():
    assert find_variables("{{a}} {{ b }} {{a}} {{}}") == ["a", "b"]
    assert find_variables(None) == []


def test_render_template_strips_html_for_text():
    template = EmailTemplate(id="t", subject="Hello {{name}}", html_content="<p>Hi <b>{{name}}</b></p>")
    rendered = render_template(template, {"name": "Sam"})
    assert rendered.subject == "Hello Sam"
    assert rendered.html == "<p>Hi <b>Sam</b></p>"
    assert rendered.text == "Hi Sam"


def test_render_template_uses_text_content():
    template = EmailTemplate(id="t", html_content="<p>x</p>", text_content="Plain {{name}}")
    assert render_template(template, {"name": "Sam"}).text == "Plain Sam"


def test_build_render_context_precedence(contact_schema, contact_submission):
    schema = FormSchema.from_dict(contact_schema)
    context = build_render_context(
        schema,
        contact_submission,
        normalized={"name": "J. Doe", "date": None},
        extra={"province": "GP"},
    )
    assert context["f_email"] == "jane@example.com"
    assert context["email"] == "jane@example.com"
    assert context["eventDate"] == "2025-06-01"
    assert context["booking_eventDate"] == "2025-06-01"
    assert context["name"] == "J. Doe"
    assert context["province"] == "GP"
    assert "date" not in context
