import database.database as db
from handlers.session import Session
from utils.constants import REVIEW_SLOT, SUSPENDED_SLOT, ALL_SLOT, FIRST_DECK_SLOT


def cards_for_slot(slot: int, decks: list[dict]) -> list[dict]:
    if slot == REVIEW_SLOT:
        return db.list_card_summaries(None, all=False, is_suspended=False)
    if slot == SUSPENDED_SLOT:
        return db.list_card_summaries(None, all=True, is_suspended=True)
    if slot == ALL_SLOT:
        return db.list_card_summaries(None, all=True, is_suspended=False)

    deck = decks[slot - FIRST_DECK_SLOT]
    return db.list_card_summaries(deck['id'], all=False, is_suspended=False)


def clamp_slot(session: Session, index: int) -> int:
    return max(0, min(index, session.slot_count - 1))


def clamp_row(session: Session) -> None:
    count = len(session.visible_cards())
    if count == 0:
        session.selected_row = None
    elif session.selected_row is None:
        session.selected_row = 0
    else:
        session.selected_row = max(0, min(session.selected_row, count - 1))


def load(session: Session) -> None:
    """Initial fill: decks, the Review slot and the detail panel."""
    session.decks = db.list_decks()
    select_slot(session, REVIEW_SLOT)
    refresh_card_info(session)


def refresh_decks(session: Session) -> None:
    """Reload decks, keeping a deck slot on the same deck if it still exists."""
    current = session.current_deck()
    session.decks = db.list_decks()

    if current is None:
        session.selected_slot = clamp_slot(session, session.selected_slot)
        return

    for index, deck in enumerate(session.decks):
        if deck['id'] == current['id']:
            session.selected_slot = FIRST_DECK_SLOT + index
            return
    session.selected_slot = REVIEW_SLOT


def refresh_cards(session: Session) -> None:
    session.cards = cards_for_slot(session.selected_slot, session.decks)
    clamp_row(session)


def refresh_card_info(session: Session) -> None:
    card = session.selected_card()
    if card is None:
        session.card_info = None
        return
    session.card_info = {
        'card': db.get_card(card['id']),
        'reviews': db.get_reviews(card['id']),
    }


def select_slot(session: Session, index: int) -> None:
    session.selected_slot = clamp_slot(session, index)
    refresh_cards(session)


def move_slot(session: Session, delta: int) -> None:
    select_slot(session, session.selected_slot + delta)


def move_row(session: Session, delta: int) -> None:
    if session.selected_row is None:
        return
    session.selected_row += delta
    clamp_row(session)


def quick_filter(session: Session, digit: int) -> None:
    """Digit n (1-9) jumps to the n-th deck; digits past the last deck do nothing."""
    if 1 <= digit <= len(session.decks):
        select_slot(session, digit + FIRST_DECK_SLOT - 1)
