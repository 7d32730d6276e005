import logging

import database.database as db
import handlers.navigation as nav
from handlers.session import Session, Context
from utils.constants import Focus, Mode, REVIEW_SLOT, UP_KEYS, DOWN_KEYS


def handle_key(session: Session, key: str, context: Context) -> None:
    """Deck sidebar."""
    if key in UP_KEYS:
        nav.move_slot(session, -1)
    elif key in DOWN_KEYS:
        nav.move_slot(session, 1)
    elif key in ('tab', 'l'):
        session.focus = Focus.CARDS
    elif key == 'd':
        deck_delete_confirm(session)


def deck_delete_confirm(session: Session) -> None:
    deck = session.current_deck()
    if deck is None:
        return
    session.confirm_delete_deck = deck
    session.mode = Mode.CONFIRMING_DELETE


def handle_confirm(session: Session, key: str, context: Context) -> None:
    """'y' deletes the deck and all its cards; any other key cancels."""
    deck = session.confirm_delete_deck
    session.confirm_delete_deck = None
    session.mode = Mode.NORMAL

    if key == 'y':
        db.delete_deck(deck['id'])
        logging.info(f"Deck {deck['name']!r} deleted with its cards")
        session.decks = db.list_decks()
        nav.select_slot(session, REVIEW_SLOT)
