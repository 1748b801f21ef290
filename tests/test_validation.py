import pytest

from finance_tracker.core.validation import (
    AMOUNT_MESSAGE,
    CATEGORY_MESSAGE,
    DATE_MESSAGE,
    MISSING_FIELDS_MESSAGE,
    TYPE_MESSAGE,
    first_message,
    validate_transaction_data,
)

VALID = {
    "type": "income",
    "amount": "12.50",
    "category": "Salaire",
    "description": "Prime",
    "date": "2024-03-01",
}


def test_valid_data_has_no_violations():
    assert validate_transaction_data(VALID) == []
    assert first_message([]) is None


def test_missing_fields_reported_first():
    data = dict(VALID, description="  ", amount="0")
    data.pop("category")

    violations = validate_transaction_data(data)

    assert {v.field for v in violations} == {"category", "description"}
    assert {v.code for v in violations} == {"required"}
    assert first_message(violations) == MISSING_FIELDS_MESSAGE


@pytest.mark.parametrize("amount", ["0", "-5", "abc", "nan", "inf", "1e400", 0])
def test_amount_must_be_positive(amount):
    violations = validate_transaction_data(dict(VALID, amount=amount))
    assert [(v.field, v.code) for v in violations] == [("amount", "not_positive")]
    assert first_message(violations) == AMOUNT_MESSAGE


def test_unknown_type():
    violations = validate_transaction_data(dict(VALID, type="transfer"))
    assert [(v.field, v.message) for v in violations] == [("type", TYPE_MESSAGE)]


def test_invalid_date():
    violations = validate_transaction_data(dict(VALID, date="2024-13-01"))
    assert [(v.field, v.code, v.message) for v in violations] == [("date", "invalid_date", DATE_MESSAGE)]


@pytest.mark.parametrize("data", [
    dict(VALID, type="expense", category="Salaire"),
    dict(VALID, category="N'importe quoi"),
])
def test_category_must_belong_to_type(data):
    categories = {"income": ["Salaire", "Freelance"], "expense": ["Logement", "Transport"]}

    violations = validate_transaction_data(data, categories)

    assert [(v.field, v.code, v.message) for v in violations] == [
        ("category", "invalid_category", CATEGORY_MESSAGE),
    ]
    assert validate_transaction_data(VALID, categories) == []
    # without a category list any category is accepted
    assert validate_transaction_data(data) == []
