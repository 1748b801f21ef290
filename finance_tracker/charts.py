# finance_tracker/charts.py
"""Monthly bar chart and category breakdown rendering.

The bar chart is drawn on ``SvgCanvas``, a small recorder with a 2D-context
style API (``fill_rect``, ``line``, ``fill_text``). The recorded operations
are what tests inspect; ``to_svg()`` turns them into markup. The category
breakdown is plain HTML.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence

from finance_tracker.aggregation import (
    CHART_TOP_CATEGORIES,
    CHART_WINDOW_MONTHS,
    CategoryTotal,
    MonthlyTotal,
    aggregate_categories,
    aggregate_monthly,
)
from finance_tracker.utils import (
    escape_html,
    format_compact_currency,
    format_currency,
    format_percentage,
)

INCOME_COLOR = "#10B981"
EXPENSE_COLOR = "#EF4444"
AXIS_COLOR = "#E5E7EB"
GRID_COLOR = "#F3F4F6"
LABEL_COLOR = "#6B7280"
EMPTY_COLOR = "#9CA3AF"

CATEGORY_PALETTE = [
    "#EF4444", "#F97316", "#F59E0B", "#EAB308",
    "#84CC16", "#22C55E", "#06B6D4", "#3B82F6",
]

PADDING = 60
HEADROOM = 1.1
GRID_STEPS = 4
DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 300

EMPTY_MONTHLY_MESSAGE = "Aucune donnée disponible"
EMPTY_CATEGORY_MESSAGE = "Aucune dépense à afficher"


@dataclass
class DrawOp:
    kind: str                       # 'rect' | 'line' | 'text'
    x: float
    y: float
    x2: float = 0.0                 # width for rects, end x for lines
    y2: float = 0.0                 # height for rects, end y for lines
    color: str = ""
    text: str = ""
    anchor: str = "start"
    size: int = 12


@dataclass
class SvgCanvas:
    width: float
    height: float
    pixel_ratio: float = 1.0
    ops: List[DrawOp] = field(default_factory=list)

    @property
    def pixel_width(self) -> int:
        return int(round(self.width * self.pixel_ratio))

    @property
    def pixel_height(self) -> int:
        return int(round(self.height * self.pixel_ratio))

    def clear(self) -> None:
        self.ops.clear()

    def fill_rect(self, x, y, width, height, color) -> None:
        self.ops.append(DrawOp("rect", x, y, width, height, color=color))

    def line(self, x1, y1, x2, y2, color) -> None:
        self.ops.append(DrawOp("line", x1, y1, x2, y2, color=color))

    def fill_text(self, text, x, y, color, anchor="start", size=12) -> None:
        self.ops.append(DrawOp("text", x, y, color=color, text=text, anchor=anchor, size=size))

    def texts(self) -> List[str]:
        return [op.text for op in self.ops if op.kind == "text"]

    def rects(self, color: Optional[str] = None) -> List[DrawOp]:
        return [op for op in self.ops if op.kind == "rect" and (color is None or op.color == color)]

    def to_svg(self) -> str:
        parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{self.pixel_width}" '
            f'height="{self.pixel_height}" viewBox="0 0 {_num(self.width)} {_num(self.height)}" '
            f'font-family="Inter, sans-serif">'
        ]
        for op in self.ops:
            if op.kind == "rect":
                parts.append(
                    f'<rect x="{_num(op.x)}" y="{_num(op.y)}" width="{_num(op.x2)}" '
                    f'height="{_num(op.y2)}" fill="{op.color}"/>'
                )
            elif op.kind == "line":
                parts.append(
                    f'<line x1="{_num(op.x)}" y1="{_num(op.y)}" x2="{_num(op.x2)}" '
                    f'y2="{_num(op.y2)}" stroke="{op.color}" stroke-width="1"/>'
                )
            else:
                parts.append(
                    f'<text x="{_num(op.x)}" y="{_num(op.y)}" fill="{op.color}" '
                    f'font-size="{op.size}" text-anchor="{op.anchor}">{escape_html(op.text)}</text>'
                )
        parts.append("</svg>")
        return "".join(parts)


def _num(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def draw_monthly_chart(canvas: SvgCanvas, data: Sequence[MonthlyTotal]) -> None:
    """Grouped income/expense bars with axes, grid, month labels and legend."""
    canvas.clear()
    plot_width = canvas.width - 2 * PADDING
    plot_height = canvas.height - 2 * PADDING
    baseline = PADDING + plot_height

    peak = max((max(item.income, item.expense) for item in data), default=0.0)
    if not data or peak <= 0:
        draw_empty_chart(canvas, EMPTY_MONTHLY_MESSAGE)
        return

    max_value = peak * HEADROOM
    bar_width = plot_width / (len(data) * 3)

    canvas.line(PADDING, PADDING, PADDING, baseline, AXIS_COLOR)
    canvas.line(PADDING, baseline, PADDING + plot_width, baseline, AXIS_COLOR)

    for step in range(GRID_STEPS):
        y = PADDING + plot_height * step / GRID_STEPS
        canvas.line(PADDING, y, PADDING + plot_width, y, GRID_COLOR)

    for step in range(GRID_STEPS + 1):
        value = max_value * (GRID_STEPS - step) / GRID_STEPS
        y = PADDING + plot_height * step / GRID_STEPS
        canvas.fill_text(format_compact_currency(value), PADDING - 10, y + 5, LABEL_COLOR, anchor="end")

    for index, item in enumerate(data):
        x = PADDING + index * (bar_width * 2 + bar_width / 2) + bar_width / 4

        income_height = item.income / max_value * plot_height
        canvas.fill_rect(x, baseline - income_height, bar_width, income_height, INCOME_COLOR)

        expense_height = item.expense / max_value * plot_height
        canvas.fill_rect(x + bar_width + 5, baseline - expense_height, bar_width, expense_height, EXPENSE_COLOR)

        canvas.fill_text(item.label, x + bar_width / 2 + 2.5, baseline + 20, LABEL_COLOR, anchor="middle")

    draw_legend(canvas)


def draw_legend(canvas: SvgCanvas) -> None:
    legend_y = canvas.height - 20
    legend_x = canvas.width / 2 - 80
    canvas.fill_rect(legend_x, legend_y, 15, 12, INCOME_COLOR)
    canvas.fill_text("Revenus", legend_x + 20, legend_y + 9, LABEL_COLOR)
    canvas.fill_rect(legend_x + 80, legend_y, 15, 12, EXPENSE_COLOR)
    canvas.fill_text("Dépenses", legend_x + 105, legend_y + 9, LABEL_COLOR)


def draw_empty_chart(canvas: SvgCanvas, message: str) -> None:
    canvas.fill_text(message, canvas.width / 2, canvas.height / 2, EMPTY_COLOR, anchor="middle", size=16)


def render_category_chart(data: Sequence[CategoryTotal]) -> str:
    """HTML breakdown: one proportional bar per category."""
    if not data:
        return (
            '<div class="category-empty">'
            f"<p>{EMPTY_CATEGORY_MESSAGE}</p>"
            "</div>"
        )

    total = sum(item.amount for item in data)
    rows = []
    for index, item in enumerate(data):
        percentage = format_percentage(item.amount, total)
        color = CATEGORY_PALETTE[index % len(CATEGORY_PALETTE)]
        rows.append(
            '<div class="category-item">'
            '<div class="category-info">'
            f'<div class="category-color" style="background: {color}"></div>'
            f'<span class="category-name">{escape_html(item.category)}</span>'
            "</div>"
            f'<div class="category-amount">{format_currency(item.amount)} ({percentage}%)</div>'
            '<div class="category-bar">'
            f'<div class="category-progress" style="width: {percentage}%; background: {color}"></div>'
            "</div>"
            "</div>"
        )
    return "".join(rows)


class ChartRenderer:
    """Keeps the current chart output and redraws it on demand."""

    def __init__(
        self,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
        pixel_ratio: float = 1.0,
        window_months: int = CHART_WINDOW_MONTHS,
        top_categories: int = CHART_TOP_CATEGORIES,
    ):
        self.window_months = window_months
        self.top_categories = top_categories
        self.canvas = SvgCanvas(width, height, pixel_ratio)
        self.monthly_data: List[MonthlyTotal] = []
        self.category_data: List[CategoryTotal] = []
        self.category_html = render_category_chart([])

    @property
    def width(self) -> float:
        return self.canvas.width

    def monthly_chart_data(self, transactions, reference: date) -> List[MonthlyTotal]:
        return aggregate_monthly(transactions, self.window_months, reference)

    def category_chart_data(self, transactions) -> List[CategoryTotal]:
        return aggregate_categories(transactions, self.top_categories)

    def update_monthly_chart(self, transactions, reference: Optional[date] = None) -> str:
        self.monthly_data = self.monthly_chart_data(transactions, reference or date.today())
        draw_monthly_chart(self.canvas, self.monthly_data)
        return self.monthly_svg

    def update_category_chart(self, transactions) -> str:
        self.category_data = self.category_chart_data(transactions)
        self.category_html = render_category_chart(self.category_data)
        return self.category_html

    @property
    def monthly_svg(self) -> str:
        return self.canvas.to_svg()

    def handle_resize(self, new_width: float) -> bool:
        """Reconfigure for a new available width and redraw the last data.

        Returns True when the width changed.
        """
        if new_width == self.canvas.width:
            return False
        self.canvas = SvgCanvas(new_width, self.canvas.height, self.canvas.pixel_ratio)
        draw_monthly_chart(self.canvas, self.monthly_data)
        return True
