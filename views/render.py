"""
Screen regions, each drawn by a pure function of the Session.

    HEADER       title bar
    SIDEBAR      virtual slots and decks
    CARD_TABLE   cards of the selected slot, filtered by the search buffer
    DETAIL       selected card info, review history and description
    MODAL        review prompt or deck delete confirmation
    FOOTER       transient notice and context key bindings
"""

from enum import Enum

from rich.align import Align
from rich.console import Group, RenderableType
from rich.layout import Layout
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from config import VERSION
from handlers.session import Session
from utils.constants import (
    Focus, Mode, SUSPENDED_SLOT, VIRTUAL_SLOTS,
    SIDEBAR_BINDINGS, CARDS_BINDINGS, SUSPENDED_BINDINGS,
    SEARCH_BINDINGS, REVISE_BINDINGS, CONFIRM_BINDINGS,
)
from utils.srs import format_interval
from utils.utils import date_to_relative_string, truncate

OFF_WHITE = 'grey39'
FOCUSED = 'bold yellow'
SIDEBAR_WIDTH = 30
TITLE_MAX = 35

# Header, footer, table borders and column header.
CHROME_ROWS = 6


class Region(Enum):
    HEADER = 'header'
    SIDEBAR = 'sidebar'
    CARD_TABLE = 'card_table'
    DETAIL = 'detail'
    MODAL = 'modal'
    FOOTER = 'footer'


def render_header(session: Session) -> RenderableType:
    return Align.center(Text(f" REVISE {VERSION} ", style='bold black on yellow'))


def render_sidebar(session: Session) -> RenderableType:
    lines = Text()
    labels = list(VIRTUAL_SLOTS) + [
        f"[{i}] {deck['name']}" for i, deck in enumerate(session.decks, start=1)
    ]
    for slot, label in enumerate(labels):
        if slot == session.selected_slot:
            lines.append(f"• {label}\n", style='bold')
        else:
            lines.append(f"  {label}\n")

    border = FOCUSED if session.focus == Focus.SIDEBAR else OFF_WHITE
    return Panel(lines, title='|Decks|', border_style=border)


def render_card_table(session: Session, max_rows: int | None = None) -> RenderableType:
    border = FOCUSED if session.focus == Focus.CARDS else OFF_WHITE
    subtitle = None
    if session.mode == Mode.SEARCHING or session.search:
        subtitle = f"|search: {session.search}|"

    visible = session.visible_cards()
    if not visible:
        empty = Align.center(
            Text(" No cards available. Press 'a' to add a new card. "),
            vertical='middle',
        )
        return Panel(empty, title='|Cards|', subtitle=subtitle, border_style=border)

    table = Table(expand=True, box=None, header_style='cyan', style=OFF_WHITE)
    table.add_column('Title', ratio=4)
    table.add_column('Due Date', ratio=3)
    table.add_column('Deck', ratio=2)
    table.add_column('Id', ratio=1)

    start, end = _window(len(visible), session.selected_row, max_rows)
    for index in range(start, end):
        card = visible[index]
        table.add_row(
            truncate(card['title'], TITLE_MAX),
            date_to_relative_string(card['next_show_date']),
            card['deck_name'],
            str(card['id']),
            style='bold white' if index == session.selected_row else None,
        )

    return Panel(table, title='|Cards|', subtitle=subtitle, border_style=border)


def render_detail(session: Session) -> RenderableType | None:
    if session.card_info is None:
        return None
    card = session.card_info['card']
    reviews = session.card_info['reviews']

    info = Table.grid(padding=(0, 2))
    info.add_column(style='cyan', width=12)
    info.add_column()
    info.add_row('Name', card['title'])
    info.add_row('Due Date', date_to_relative_string(card['next_show_date']))
    info.add_row('Created At', date_to_relative_string(card['created_at']))

    history = Table(title='Previous Revisions:', title_justify='left', box=None, header_style='cyan')
    for column in ('No.', 'Date', 'Interval', 'Stability', 'Difficulty'):
        history.add_column(column)
    for number, review in enumerate(reviews, start=1):
        history.add_row(
            str(number),
            date_to_relative_string(review['review_time']),
            str(review['interval']),
            f"{review['stability']:.2f}",
            f"{review['difficulty']:.2f}",
        )

    grid = Table.grid(expand=True)
    grid.add_column(ratio=1)
    grid.add_column(ratio=1)
    grid.add_row(
        Panel(Group(info, Text(), history), title='|Card Info|', border_style=OFF_WHITE),
        Panel(Text(card['description']), title='|Description|', border_style=OFF_WHITE),
    )
    return grid


def render_modal(session: Session) -> RenderableType | None:
    if session.mode == Mode.REVISING and session.revise_card:
        text = Text()
        for number, (label, days) in enumerate(session.revise_card['next_dates'], start=1):
            text.append(f"[{number}] {label}: {format_interval(days)}\n")
        text.append('[Esc] skip')
        return Panel(
            text,
            title=f"|Revise: {truncate(session.revise_card['title'], 30)}|",
            border_style='yellow',
            width=50,
        )

    if session.mode == Mode.CONFIRMING_DELETE and session.confirm_delete_deck:
        text = Text(justify='center')
        text.append(f"Delete deck \"{session.confirm_delete_deck['name']}\"?\n")
        text.append("This will delete all cards in the deck.\n\n")
        text.append('[y] Yes  [n] No', style='yellow')
        return Panel(text, title='|Confirm Delete|', border_style='red', width=50)

    return None


def render_footer(session: Session) -> RenderableType:
    footer = Table.grid(expand=True)
    footer.add_column(ratio=1)
    footer.add_column(justify='right')

    notice = Text(session.notice or '', style='bold red')
    bindings = Text()
    for keys, description in _bindings(session):
        bindings.append('[', style=OFF_WHITE)
        bindings.append(keys, style='yellow')
        bindings.append('→ ', style=OFF_WHITE)
        bindings.append(description)
        bindings.append('] ', style=OFF_WHITE)
    footer.add_row(notice, bindings)
    return footer


REGION_RENDERERS = {
    Region.HEADER: render_header,
    Region.SIDEBAR: render_sidebar,
    Region.CARD_TABLE: render_card_table,
    Region.DETAIL: render_detail,
    Region.MODAL: render_modal,
    Region.FOOTER: render_footer,
}


def render(session: Session, height: int | None = None) -> Layout:
    """Compose all regions into the full screen."""
    layout = Layout()
    layout.split_column(
        Layout(REGION_RENDERERS[Region.HEADER](session), size=1),
        Layout(name='body'),
        Layout(REGION_RENDERERS[Region.FOOTER](session), size=1),
    )
    layout['body'].split_row(
        Layout(REGION_RENDERERS[Region.SIDEBAR](session), size=SIDEBAR_WIDTH),
        Layout(name='main'),
    )

    detail = REGION_RENDERERS[Region.DETAIL](session)
    modal = REGION_RENDERERS[Region.MODAL](session)

    max_rows = None
    if height is not None:
        table_height = height * 2 // 3 if detail is not None else height
        max_rows = max(1, table_height - CHROME_ROWS)
    table = REGION_RENDERERS[Region.CARD_TABLE](session, max_rows)

    main_parts = []
    if modal is not None:
        main_parts.append(Layout(Align.center(modal), name='modal', size=9))
    main_parts.append(Layout(table, name='cards', ratio=2))
    if detail is not None:
        main_parts.append(Layout(detail, name='detail', ratio=1))
    layout['main'].split_column(*main_parts)
    return layout


def _bindings(session: Session) -> list[tuple[str, str]]:
    if session.mode == Mode.SEARCHING:
        return SEARCH_BINDINGS
    if session.mode == Mode.REVISING:
        return REVISE_BINDINGS
    if session.mode == Mode.CONFIRMING_DELETE:
        return CONFIRM_BINDINGS
    if session.focus == Focus.SIDEBAR:
        return SIDEBAR_BINDINGS
    if session.selected_slot == SUSPENDED_SLOT:
        return SUSPENDED_BINDINGS
    return CARDS_BINDINGS


def _window(count: int, selected: int | None, size: int | None) -> tuple[int, int]:
    """Rows [start, end) to draw so the selected row stays on screen."""
    if size is None or count <= size:
        return 0, count
    anchor = selected or 0
    start = max(0, min(anchor - size // 2, count - size))
    return start, start + size
