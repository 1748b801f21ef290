# finance_tracker/core/categories.py
from finance_tracker.core.models import EXPENSE, INCOME

INCOME_CATEGORIES = [
    "Salaire",
    "Freelance",
    "Investissements",
    "Allocations",
    "Remboursements",
    "Vente",
    "Autre revenu",
]

EXPENSE_CATEGORIES = [
    "Logement",
    "Alimentation",
    "Transport",
    "Santé",
    "Loisirs",
    "Vêtements",
    "Éducation",
    "Télécommunications",
    "Services financiers",
    "Assurances",
    "Autre dépense",
]

DEFAULT_CATEGORIES = {
    INCOME: INCOME_CATEGORIES,
    EXPENSE: EXPENSE_CATEGORIES,
}


def categories_for_type(categories_map, type_):
    """Return the category options offered for a transaction type."""
    if not type_:
        return []
    return list(categories_map.get(type_, []))


def filter_options(categories_map):
    """Sorted union of every category, as offered by the category filter."""
    merged = set()
    for names in categories_map.values():
        merged.update(names)
    return sorted(merged)
