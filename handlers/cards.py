import logging

import database.database as db
import handlers.navigation as nav
import utils.srs as srs
from handlers.session import Session, Context
from utils.constants import Focus, Mode, SUSPENDED_SLOT, UP_KEYS, DOWN_KEYS
from utils.utils import render_card_text


def handle_key(session: Session, key: str, context: Context) -> None:
    """Cards table, Normal mode."""
    if key in UP_KEYS:
        nav.move_row(session, -1)
    elif key in DOWN_KEYS:
        nav.move_row(session, 1)
    elif key.isdigit() and key != '0':
        nav.quick_filter(session, int(key))
    elif key in ('tab', 'h'):
        session.focus = Focus.SIDEBAR
    elif key == '/':
        session.mode = Mode.SEARCHING
    elif key == 'esc':
        session.search = ''
        nav.clamp_row(session)
    elif key == 'a':
        add_card(session, context)
    elif key == 'e':
        edit_card(session, context)
    elif key == 'd':
        delete_card(session)
    elif key == 's':
        toggle_suspend(session)
    elif key == 'r':
        review_entry(session)


def add_card(session: Session, context: Context) -> None:
    if session.selected_slot == SUSPENDED_SLOT:
        return

    deck = session.current_deck()
    text = render_card_text(deck=deck['name'] if deck else '')
    with context.suspended():
        authored = context.editor.author(text)

    if authored is None:
        session.notify("Card discarded")
        return

    deck_id = db.get_or_create_deck(authored['deck'])
    db.add_card(deck_id, authored['title'], authored['body'])
    logging.info(f"Added card {authored['title']!r} to {authored['deck']!r}")

    nav.refresh_decks(session)
    nav.refresh_cards(session)


def edit_card(session: Session, context: Context) -> None:
    selected = session.selected_card()
    if selected is None:
        return

    card = db.get_card(selected['id'])
    text = render_card_text(card['title'], card['deck_name'], card['description'])
    with context.suspended():
        authored = context.editor.author(text)

    if authored is None:
        session.notify("Edit discarded")
        return

    deck_changed = authored['deck'] != card['deck_name']
    deck_id = db.get_or_create_deck(authored['deck']) if deck_changed else card['deck_id']
    db.update_card_details(card['id'], authored['title'], deck_id, authored['body'])
    if deck_changed:
        db.remove_orphan_decks()

    nav.refresh_decks(session)
    nav.refresh_cards(session)


def delete_card(session: Session) -> None:
    selected = session.selected_card()
    if selected is None:
        return

    db.remove_card(selected['id'])
    db.remove_orphan_decks()

    nav.refresh_decks(session)
    nav.refresh_cards(session)


def toggle_suspend(session: Session) -> None:
    """In the Suspended view 's' brings the card back, elsewhere it suspends it."""
    selected = session.selected_card()
    if selected is None:
        return

    if session.selected_slot == SUSPENDED_SLOT:
        db.unsuspend_card(selected['id'])
    else:
        db.suspend_card(selected['id'])
    nav.refresh_cards(session)


def review_entry(session: Session) -> None:
    """Open the review prompt with the four candidate intervals."""
    if session.selected_slot == SUSPENDED_SLOT:
        return
    selected = session.selected_card()
    if selected is None:
        return

    card = db.get_card(selected['id'])
    last_review = db.get_last_review(card['id'])
    session.revise_card = {
        'id': card['id'],
        'title': card['title'],
        'next_dates': srs.preview(card, last_review),
    }
    session.mode = Mode.REVISING
