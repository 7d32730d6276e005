import logging
from datetime import datetime

import database.database as db
import handlers.navigation as nav
import utils.srs as srs
from handlers.session import Session, Context
from utils.constants import Mode
from utils.errors import InvalidRatingError

RATING_KEYS = {'1': srs.AGAIN, '2': srs.HARD, '3': srs.GOOD, '4': srs.EASY}


def handle_key(session: Session, key: str, context: Context) -> None:
    """Review prompt: 1-4 commits, Esc skips, anything else is ignored."""
    if key in RATING_KEYS:
        commit(session.revise_card['id'], RATING_KEYS[key])
        _close_prompt(session)
        nav.refresh_cards(session)
    elif key == 'esc':
        _close_prompt(session)


def commit(card_id: int, rating: int, now: datetime | None = None) -> dict:
    """Record a review for the card and move its next show date."""
    if rating not in srs.RATINGS:
        raise InvalidRatingError(f"invalid rating {rating!r}")

    card = db.get_card(card_id)
    last_review = db.get_last_review(card_id)
    review = srs.schedule(card, last_review, rating, now)

    db.add_review(review)
    db.update_card(card_id, review['next_show_date'])

    logging.info(
        f"Card {card_id}: rated {rating}, interval {review['interval']}d, "
        f"next show {review['next_show_date']}"
    )
    return review


def _close_prompt(session: Session) -> None:
    session.revise_card = None
    session.mode = Mode.NORMAL
