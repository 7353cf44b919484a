import math

import pytest

from form_rules.operators import _EVALUATORS, Operator, evaluate, to_number


def test_every_operator_has_an_evaluator():
    assert set(_EVALUATORS) == set(Operator)


@pytest.mark.parametrize(
    "alias, member",
    [
        ("equals", Operator.EQUALS),
        ("notEquals", Operator.NOT_EQUALS),
        ("not_contains", Operator.NOT_CONTAINS),
        ("greaterThan", Operator.GREATER_THAN),
        ("less-than", Operator.LESS_THAN),
        ("isEmpty", Operator.IS_EMPTY),
        ("isNotEmpty", Operator.IS_NOT_EMPTY),
    ],
)
def test_parse_aliases(alias, member):
    assert Operator.parse(alias) is member


def test_unknown_operator_is_false():
    assert Operator.parse("between") is None
    assert evaluate("between", 1, 1) is False
    assert evaluate(None, 1, 1) is False


def test_equals_is_strict():
    assert evaluate("equals", "Gauteng", "Gauteng")
    assert evaluate("equals", 5, 5.0)
    assert not evaluate("equals", "5", 5)
    assert not evaluate("equals", True, 1)
    assert evaluate("not_equals", "5", 5)
    assert evaluate("equals", None, None)


def test_contains_only_on_strings():
    assert evaluate("contains", "hello world", "world")
    assert not evaluate("contains", ["world"], "world")
    assert not evaluate("contains", None, "x")
    assert evaluate("not_contains", "hello", "x")
    assert not evaluate("not_contains", 42, "x")


def test_numeric_comparisons_coerce():
    assert evaluate("greater_than", "10", 5)
    assert evaluate("less_than", "", 1)
    assert not evaluate("greater_than", "abc", 5)
    assert not evaluate("less_than", "abc", 5)
    assert evaluate("greater_than", True, 0)


def test_emptiness():
    assert evaluate("is_empty", "", None)
    assert evaluate("is_empty", None, None)
    assert not evaluate("is_empty", 0, None)
    assert evaluate("is_not_empty", "x", None)


def test_to_number():
    assert to_number(" 12.5 ") == 12.5
    assert to_number("") == 0
    assert to_number(False) == 0
    assert math.isnan(to_number("12px"))
    assert math.isnan(to_number(None))
