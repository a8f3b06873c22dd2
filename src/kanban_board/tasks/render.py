"""
Board rendering.

render() projects the card collection onto the three columns; the HTML and
terminal renderers draw that projection. Nothing here mutates cards.

Usage:
    from kanban_board.tasks.render import render, render_columns_html, print_board

    view = render(board.cards)
    html = render_columns_html(view)
    print_board(board.cards)
"""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from rich.columns import Columns
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from .models import Card, CardStatus, STATUSES

console = Console()

BORDER_COLORS = {
    CardStatus.TODO: "blue",
    CardStatus.DOING: "yellow",
    CardStatus.DONE: "green",
}


@dataclass(frozen=True)
class CardView:
    """One visual card element."""
    id: str
    title: str
    description: str
    html: str


@dataclass
class ColumnView:
    """One status column: its cards and count badge."""
    status: CardStatus
    cards: List[CardView] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.cards)

    @property
    def title(self) -> str:
        return self.status.label


@dataclass
class BoardView:
    columns: Dict[CardStatus, ColumnView]

    def column(self, status: CardStatus) -> ColumnView:
        return self.columns[CardStatus(status)]

    def counts(self) -> Dict[str, int]:
        return {status.value: col.count for status, col in self.columns.items()}


def render_card_html(card: Card) -> str:
    """Markup for one card; title, description and id are escaped."""
    parts = [
        f'<div class="card" draggable="true" data-id="{html.escape(card.id)}">',
        f"<h3>{html.escape(card.title)}</h3>",
    ]
    if card.description:
        parts.append(f"<p>{html.escape(card.description)}</p>")
    parts.append("</div>")
    return "".join(parts)


def render(cards: Iterable[Card]) -> BoardView:
    """
    Project cards onto the three columns.

    Every call starts from empty columns. Cards keep collection order.

    Args:
        cards: The card collection (not modified)

    Returns:
        BoardView with one ColumnView per status
    """
    columns = {status: ColumnView(status) for status in STATUSES}
    for card in cards:
        column = columns.get(card.status)
        if column is None:
            continue
        column.cards.append(CardView(
            id=card.id,
            title=card.title,
            description=card.description,
            html=render_card_html(card),
        ))
    return BoardView(columns)


def render_column_html(column: ColumnView) -> str:
    return "".join(card.html for card in column.cards)


def render_columns_html(view: BoardView) -> str:
    """Full markup for the three columns, each with add button and count badge."""
    out = []
    for status in STATUSES:
        column = view.column(status)
        out.append(
            f'<section class="column" data-status="{status.value}">'
            f'<header><h2>{html.escape(column.title)}</h2>'
            f'<span class="count">{column.count}</span>'
            f'<button class="add-card" data-status="{status.value}" title="Add card">+</button>'
            f"</header>"
            f'<div class="cards" data-status="{status.value}">{render_column_html(column)}</div>'
            f"</section>"
        )
    return "\n".join(out)


def _card_lines(card: CardView, width: int) -> str:
    title = card.title if len(card.title) <= width else card.title[: width - 3] + "..."
    line = f"[bold]{escape(title)}[/bold]\n[dim]{escape(card.id)}[/dim]"
    if card.description:
        desc = card.description
        if len(desc) > width * 2:
            desc = desc[: width * 2 - 3] + "..."
        line += f"\n{escape(desc)}"
    return line


def print_board(
    cards: Iterable[Card],
    out: Optional[Console] = None,
    width: int = 36,
) -> None:
    """
    Draw the board in the terminal.

    Args:
        cards: Card collection
        out: Console to draw on (module console by default)
        width: Panel width per column
    """
    out = out or console
    view = render(cards)

    panels = []
    for status in STATUSES:
        column = view.column(status)
        lines = [_card_lines(card, width - 4) for card in column.cards]
        content = "\n\n".join(lines) if lines else "[dim]No cards[/dim]"
        panels.append(Panel(
            content,
            title=f"{column.title} ({column.count})",
            border_style=BORDER_COLORS[status],
            width=width,
        ))

    out.print(Columns(panels))


def print_card_detail(card: Card, out: Optional[Console] = None) -> None:
    """Draw one card with all of its fields."""
    out = out or console
    content = (
        f"[bold]ID:[/bold] {escape(card.id)}\n"
        f"[bold]Title:[/bold] {escape(card.title)}\n"
        f"[bold]Status:[/bold] {card.status.label}\n"
        f"[bold]Created:[/bold] {escape(card.created_at[:19]) or '-'}\n\n"
        f"[bold]Description:[/bold]\n{escape(card.description) or '[dim]No description[/dim]'}"
    )
    out.print(Panel(content, title=f"Card: {escape(card.id)}", border_style=BORDER_COLORS[card.status]))
