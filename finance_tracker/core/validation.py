# finance_tracker/core/validation.py
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import List, Mapping, Optional, Sequence

from finance_tracker.core.models import TRANSACTION_TYPES

REQUIRED_FIELDS = ("type", "amount", "category", "description", "date")

MISSING_FIELDS_MESSAGE = "Veuillez remplir tous les champs"
AMOUNT_MESSAGE = "Le montant doit être supérieur à zéro"
TYPE_MESSAGE = "Type de transaction invalide"
DATE_MESSAGE = "Date invalide (format attendu : AAAA-MM-JJ)"
CATEGORY_MESSAGE = "Catégorie invalide pour ce type de transaction"


@dataclass(frozen=True)
class Violation:
    field: str
    code: str
    message: str


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _parse_amount(value):
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def validate_transaction_data(
    data: Mapping[str, object],
    categories: Optional[Mapping[str, Sequence[str]]] = None,
) -> List[Violation]:
    """Check form data before it reaches the store.

    Returns an empty list when the data is acceptable. Missing fields are
    reported first; the remaining checks only run once every field is
    present, so a half-filled form yields a single kind of violation.
    When a categories mapping is given, the category must belong to the
    list for the transaction type.
    """
    missing = [name for name in REQUIRED_FIELDS if _is_blank(data.get(name))]
    if missing:
        return [Violation(name, "required", MISSING_FIELDS_MESSAGE) for name in missing]

    violations: List[Violation] = []
    amount = _parse_amount(data.get("amount"))
    if amount is None or not math.isfinite(amount) or amount <= 0:
        violations.append(Violation("amount", "not_positive", AMOUNT_MESSAGE))

    if data.get("type") not in TRANSACTION_TYPES:
        violations.append(Violation("type", "invalid_choice", TYPE_MESSAGE))
    elif categories is not None and data.get("category") not in categories.get(data.get("type"), ()):
        violations.append(Violation("category", "invalid_category", CATEGORY_MESSAGE))

    raw_date = data.get("date")
    if not isinstance(raw_date, date):
        try:
            date.fromisoformat(str(raw_date))
        except ValueError:
            violations.append(Violation("date", "invalid_date", DATE_MESSAGE))

    return violations


def first_message(violations: List[Violation]) -> str | None:
    """The message shown to the user for a list of violations."""
    return violations[0].message if violations else None
