"""
Routes each key to the handler for the current focus and mode.

Modal modes (search, review prompt, delete confirmation) take every key.
In Normal mode keys first go through the chord buffer for the global
bindings (quit, jump to first/last), then to the focused pane.
"""

import logging

import handlers.cards as hand_card
import handlers.decks as hand_deck
import handlers.navigation as nav
import handlers.review as hand_review
import handlers.search as hand_search
from handlers.session import Session, Context
from utils.constants import Focus, Mode
from utils.errors import ReviseError
from utils.keys import PENDING

MODE_HANDLERS = {
    Mode.SEARCHING: hand_search.handle_key,
    Mode.REVISING: hand_review.handle_key,
    Mode.CONFIRMING_DELETE: hand_deck.handle_confirm,
}

FOCUS_HANDLERS = {
    Focus.SIDEBAR: hand_deck.handle_key,
    Focus.CARDS: hand_card.handle_key,
}


def handle_key(session: Session, key: str, context: Context) -> None:
    logging.debug(f"Key {key!r} focus={session.focus.name} mode={session.mode.name}")
    try:
        if session.mode in MODE_HANDLERS:
            MODE_HANDLERS[session.mode](session, key, context)
        else:
            action = session.chords.feed(key)
            if action is PENDING:
                return
            if action is not None:
                run_action(session, action)
            else:
                FOCUS_HANDLERS[session.focus](session, key, context)

        nav.refresh_card_info(session)
    except ReviseError as e:
        logging.warning(f"Key {key!r} failed: {e}")
        session.notify(f"⚠ {e}")


def handle_tick(session: Session) -> bool:
    return session.tick()


def run_action(session: Session, action: str) -> None:
    if action == 'quit':
        session.should_quit = True
    elif action == 'first':
        if session.focus == Focus.SIDEBAR:
            nav.select_slot(session, 0)
        elif session.selected_row is not None:
            session.selected_row = 0
    elif action == 'last':
        if session.focus == Focus.SIDEBAR:
            nav.select_slot(session, session.slot_count - 1)
        elif session.selected_row is not None:
            session.selected_row = len(session.visible_cards()) - 1
