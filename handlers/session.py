from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import Callable, ContextManager

from config import NOTICE_TICKS
from utils.constants import Focus, Mode, REVIEW_SLOT, FIRST_DECK_SLOT, KEYMAP
from utils.editor import CardEditor
from utils.keys import ChordBuffer


@dataclass
class Session:
    """Everything the interface shows, owned by the event loop."""
    decks: list[dict] = field(default_factory=list)
    cards: list[dict] = field(default_factory=list)
    focus: Focus = Focus.CARDS
    mode: Mode = Mode.NORMAL
    selected_slot: int = REVIEW_SLOT
    selected_row: int | None = 0
    search: str = ''

    # Derived from the store for the selected row, never edited directly.
    card_info: dict | None = None

    # Open modals
    revise_card: dict | None = None
    confirm_delete_deck: dict | None = None

    notice: str | None = None
    notice_ticks: int = 0
    should_quit: bool = False
    chords: ChordBuffer = field(default_factory=lambda: ChordBuffer(KEYMAP), repr=False)

    @property
    def slot_count(self) -> int:
        return FIRST_DECK_SLOT + len(self.decks)

    def current_deck(self) -> dict | None:
        if self.selected_slot < FIRST_DECK_SLOT:
            return None
        index = self.selected_slot - FIRST_DECK_SLOT
        return self.decks[index] if index < len(self.decks) else None

    def visible_cards(self) -> list[dict]:
        if not self.search:
            return self.cards
        return [c for c in self.cards if self.search in c['title']]

    def selected_card(self) -> dict | None:
        visible = self.visible_cards()
        if self.selected_row is None or self.selected_row >= len(visible):
            return None
        return visible[self.selected_row]

    def notify(self, message: str) -> None:
        self.notice = message
        self.notice_ticks = NOTICE_TICKS

    def tick(self) -> bool:
        """Advance timers; True when something visible changed."""
        self.chords.tick()
        if self.notice is None:
            return False
        self.notice_ticks -= 1
        if self.notice_ticks <= 0:
            self.notice = None
            return True
        return False


@dataclass
class Context:
    """Collaborators the handlers may call out to."""
    editor: CardEditor
    # Releases the terminal while the editor runs.
    suspended: Callable[[], ContextManager] = nullcontext
