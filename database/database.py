import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from database.schema import deck_schema, deck_name_index, card_schema, revlog_schema
from config import DB_PATH
from utils.errors import NotFoundError, PersistenceError
from utils.utils import utcnow, to_db_time, from_db_time


# DECKS COMMANDS =============================================

def add_deck(name: str) -> int:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            'INSERT INTO decks (name, created_at) VALUES (?, ?)',
            (name, to_db_time(utcnow()))
        )
        logging.info(f"Created deck {cursor.lastrowid}: {name!r}")
        return cursor.lastrowid


def list_decks() -> list[dict]:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute('SELECT id, name FROM decks ORDER BY id')
        return [{'id': row['id'], 'name': row['name']} for row in cursor.fetchall()]


def get_deck_by_name(name: str) -> dict | None:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute('SELECT id, name FROM decks WHERE name = ?', (name,))
        row = cursor.fetchone()
        if row:
            return {'id': row['id'], 'name': row['name']}
        return None


def get_or_create_deck(name: str) -> int:
    """Exact-name lookup; creates the deck when it doesn't exist yet."""
    deck = get_deck_by_name(name)
    if deck:
        return deck['id']
    return add_deck(name)


def delete_deck(deck_id: int) -> None:
    """Delete a deck together with its cards and their review history."""
    with get_db() as conn:
        conn.execute(
            'DELETE FROM revlog WHERE card_id IN (SELECT id FROM cards WHERE deck_id = ?)',
            (deck_id,)
        )
        conn.execute('DELETE FROM cards WHERE deck_id = ?', (deck_id,))
        cursor = conn.execute('DELETE FROM decks WHERE id = ?', (deck_id,))
        if cursor.rowcount == 0:
            raise NotFoundError(deck_id)
        logging.info(f"Deleted deck {deck_id}")


def remove_orphan_decks() -> int:
    with get_db() as conn:
        cursor = conn.execute(
            'DELETE FROM decks WHERE id NOT IN (SELECT DISTINCT deck_id FROM cards)'
        )
        if cursor.rowcount:
            logging.info(f"Removed {cursor.rowcount} orphan deck(s)")
        return cursor.rowcount


# CARDS COMMANDS =============================================

def add_card(deck_id: int, title: str, description: str) -> int:
    now = to_db_time(utcnow())
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            """INSERT INTO cards (deck_id, title, description, next_show_date, created_at)
               VALUES (?, ?, ?, ?, ?)
            """,
            (deck_id, title, description, now, now)
        )
        logging.info(f"Created card {cursor.lastrowid} in deck {deck_id}")
        return cursor.lastrowid


def update_card_details(card_id: int, title: str, deck_id: int, description: str) -> None:
    with get_db() as conn:
        cursor = conn.execute(
            'UPDATE cards SET title = ?, deck_id = ?, description = ? WHERE id = ?',
            (title, deck_id, description, card_id)
        )
        if cursor.rowcount == 0:
            raise NotFoundError(card_id)
        logging.info(f"Updated card {card_id}")


def update_card(card_id: int, next_show_date: datetime) -> None:
    with get_db() as conn:
        cursor = conn.execute(
            'UPDATE cards SET next_show_date = ? WHERE id = ?',
            (to_db_time(next_show_date), card_id)
        )
        if cursor.rowcount == 0:
            raise NotFoundError(card_id)


def get_card(card_id: int) -> dict:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            """SELECT c.id, c.deck_id, d.name AS deck_name, c.title, c.description,
                      c.next_show_date, c.created_at, c.suspended
               FROM cards c JOIN decks d ON c.deck_id = d.id
               WHERE c.id = ?
            """,
            (card_id,)
        )
        row = cursor.fetchone()
        if row is None:
            raise NotFoundError(card_id)
        card = dict(row)
        card['next_show_date'] = from_db_time(card['next_show_date'])
        card['created_at'] = from_db_time(card['created_at'])
        card['suspended'] = bool(card['suspended'])
        return card


def remove_card(card_id: int) -> None:
    with get_db() as conn:
        conn.execute('DELETE FROM revlog WHERE card_id = ?', (card_id,))
        cursor = conn.execute('DELETE FROM cards WHERE id = ?', (card_id,))
        if cursor.rowcount == 0:
            raise NotFoundError(card_id)
        logging.info(f"Removed card {card_id}")


def suspend_card(card_id: int) -> None:
    _set_suspended(card_id, True)


def unsuspend_card(card_id: int) -> None:
    _set_suspended(card_id, False)


def _set_suspended(card_id: int, suspended: bool) -> None:
    with get_db() as conn:
        cursor = conn.execute(
            'UPDATE cards SET suspended = ? WHERE id = ?',
            (int(suspended), card_id)
        )
        if cursor.rowcount == 0:
            raise NotFoundError(card_id)
        logging.info(f"Card {card_id}: suspended={suspended}")


def list_card_summaries(
    deck_id: int | None = None,
    all: bool = False,
    is_suspended: bool = False,
    now: datetime | None = None,
) -> list[dict]:
    """
    is_suspended -> every suspended card, deck_id and all are ignored
    all          -> every non-suspended card (optionally one deck)
    otherwise    -> non-suspended cards due at `now` (optionally one deck)
    """
    clauses = []
    params: list = []
    if is_suspended:
        clauses.append('c.suspended = 1')
    else:
        clauses.append('c.suspended = 0')
        if not all:
            clauses.append('c.next_show_date <= ?')
            params.append(to_db_time(now or utcnow()))
        if deck_id is not None:
            clauses.append('d.id = ?')
            params.append(deck_id)

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"""SELECT c.id, d.name AS deck_name, c.title, c.next_show_date, c.created_at
                FROM cards c JOIN decks d ON c.deck_id = d.id
                WHERE {' AND '.join(clauses)}
                ORDER BY c.next_show_date, c.id
            """,
            params
        )
        rows = [dict(row) for row in cursor.fetchall()]

    for row in rows:
        row['next_show_date'] = from_db_time(row['next_show_date'])
        row['created_at'] = from_db_time(row['created_at'])
    return rows


# REVIEW COMMANDS ============================================

def add_review(review: dict) -> int:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            """INSERT INTO revlog (card_id, last_interval, interval, review_time, stability, difficulty)
               VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                review['card_id'],
                review['last_interval'],
                review['interval'],
                to_db_time(review['review_time']),
                review['stability'],
                review['difficulty'],
            )
        )
        return cursor.lastrowid


def get_last_review(card_id: int) -> dict | None:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            """SELECT id, card_id, last_interval, interval, review_time, stability, difficulty
               FROM revlog WHERE card_id = ?
               ORDER BY id DESC LIMIT 1
            """,
            (card_id,)
        )
        row = cursor.fetchone()
        if row:
            return _review_row(row)
        return None


def get_reviews(card_id: int) -> list[dict]:
    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            """SELECT id, card_id, last_interval, interval, review_time, stability, difficulty
               FROM revlog WHERE card_id = ?
               ORDER BY id
            """,
            (card_id,)
        )
        return [_review_row(row) for row in cursor.fetchall()]


def _review_row(row: sqlite3.Row) -> dict:
    review = dict(row)
    review['review_time'] = from_db_time(review['review_time'])
    return review


# DB CONNECTION ==============================================

@contextmanager
def get_db():
    try:
        conn = sqlite3.connect(DB_PATH)
    except sqlite3.Error as e:
        raise PersistenceError(f"Cannot open {DB_PATH}: {e}") from e
    conn.row_factory = sqlite3.Row
    conn.execute('PRAGMA foreign_keys = ON')

    try:
        yield conn
        conn.commit()
    except sqlite3.Error as e:
        conn.rollback()
        logging.warning(f"Database error: {e}")
        raise PersistenceError(str(e)) from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db():
    Path(DB_PATH).parent.mkdir(parents=True, exist_ok=True)
    with get_db() as conn:
        conn.execute(deck_schema)
        conn.execute(deck_name_index)
        conn.execute(card_schema)
        conn.execute(revlog_schema)
