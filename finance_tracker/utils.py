# finance_tracker/utils.py
import html
import math
from datetime import date

SHORT_MONTHS = [
    "janv.", "févr.", "mars", "avr.", "mai", "juin",
    "juil.", "août", "sept.", "oct.", "nov.", "déc.",
]

LONG_MONTHS = [
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
]

# fr-FR groups thousands with a narrow no-break space and puts a no-break
# space before the currency sign.
_GROUP_SEP = "\u202f"
_CURRENCY_SEP = "\u00a0"


def month_key(d: date) -> str:
    return f"{d.year}-{d.month:02d}"


def add_months(original_date: date, months: int) -> date:
    """Shift to the first day of the month ``months`` away (may be negative)."""
    month_index = original_date.month - 1 + months
    year = original_date.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, 1)


def trailing_months(reference: date, count: int):
    """Return the first day of each of the ``count`` months ending at ``reference``."""
    return [add_months(reference, -offset) for offset in range(count - 1, -1, -1)]


def short_month_label(d: date) -> str:
    return SHORT_MONTHS[d.month - 1]


def filter_transactions_by_month(transactions, month_str):
    """
    Return only those transactions whose date falls in the given YYYY-MM.
    """
    year, month = map(int, month_str.split('-'))
    return [tx for tx in transactions if tx.date.year == year and tx.date.month == month]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_currency(amount: float) -> str:
    """Format an amount the way fr-FR renders euros, e.g. '1 234,56 €'."""
    sign = "-" if amount < 0 else ""
    grouped = f"{abs(amount):,.2f}"
    grouped = grouped.replace(",", _GROUP_SEP).replace(".", ",")
    return f"{sign}{grouped}{_CURRENCY_SEP}€"


def format_compact_currency(amount: float) -> str:
    """Chart axis label: 1500 -> '1.5k€', 999 -> '999€'."""
    if amount >= 1000:
        return f"{round_half_up(amount / 100) / 10:.1f}k€"
    return f"{round_half_up(amount)}€"


def format_long_date(d: date) -> str:
    return f"{d.day} {LONG_MONTHS[d.month - 1]} {d.year}"


def format_relative_date(d: date, today: date) -> str:
    """List label for a transaction date, relative for the last week."""
    delta = abs((today - d).days)
    if delta == 0:
        return "Aujourd'hui"
    if delta == 1:
        return "Hier"
    if delta <= 6:
        return f"Il y a {delta} jours"
    label = f"{d.day} {SHORT_MONTHS[d.month - 1]}"
    if d.year != today.year:
        label += f" {d.year}"
    return label


def format_percentage(part: float, total: float) -> str:
    if not total:
        return "0.0"
    return f"{part / total * 100:.1f}"


def escape_html(text) -> str:
    return html.escape(str(text), quote=True)
