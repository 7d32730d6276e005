"""
Tests for the session state machine: handlers/dispatch.py and the focus and
mode handlers behind it, run against a real SQLite file.
"""
import pytest

import database.database as db
import handlers.dispatch as dispatch
import handlers.navigation as nav
import handlers.review as hand_review
from config import NOTICE_TICKS
from handlers.session import Session, Context
from utils.constants import (
    Focus, Mode, REVIEW_SLOT, SUSPENDED_SLOT, ALL_SLOT, FIRST_DECK_SLOT,
)
from utils.errors import EditorLaunchError, InvalidRatingError, NotFoundError


# ── Fixtures ──────────────────────────────────────────────────

@pytest.fixture()
def tdb(tmp_path, monkeypatch):
    """Patch DB_PATH to a fresh temp file and initialise the schema."""
    db_path = str(tmp_path / "test.db")
    monkeypatch.setattr(db, 'DB_PATH', db_path)
    db.init_db()
    return db_path


class FakeEditor:
    """Returns scripted authoring results and records the buffers it was given."""

    def __init__(self, *results):
        self.results = list(results)
        self.buffers = []

    def author(self, text):
        self.buffers.append(text)
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture()
def editor():
    return FakeEditor()


@pytest.fixture()
def ctx(editor):
    return Context(editor=editor)


def _session():
    session = Session()
    nav.load(session)
    return session


def press(session, ctx, *keys):
    for key in keys:
        dispatch.handle_key(session, key, ctx)


def _titles(session):
    return [c['title'] for c in session.visible_cards()]


# ── Loading and slots ─────────────────────────────────────────

class TestSlots:
    def test_empty_store(self, tdb, ctx):
        session = _session()
        assert session.slot_count == FIRST_DECK_SLOT
        assert session.cards == []
        assert session.selected_row is None
        assert session.card_info is None

    def test_load_selects_review_slot(self, tdb, ctx):
        deck_id = db.add_deck('Rust')
        card_id = db.add_card(deck_id, 'Ownership', 'body')
        session = _session()

        assert session.selected_slot == REVIEW_SLOT
        assert _titles(session) == ['Ownership']
        assert session.selected_row == 0
        assert session.card_info['card']['id'] == card_id
        assert session.card_info['reviews'] == []

    def test_sidebar_moves_and_clamps(self, tdb, ctx):
        db.add_deck('Rust')
        session = _session()
        press(session, ctx, 'tab')
        assert session.focus == Focus.SIDEBAR

        press(session, ctx, 'k')
        assert session.selected_slot == REVIEW_SLOT

        press(session, ctx, 'j', 'down', 'j', 'j', 'j')
        assert session.selected_slot == FIRST_DECK_SLOT

        press(session, ctx, 'l')
        assert session.focus == Focus.CARDS

    def test_slot_contents(self, tdb, ctx):
        rust = db.add_deck('Rust')
        due = db.add_card(rust, 'Due', '')
        suspended = db.add_card(rust, 'Suspended', '')
        db.suspend_card(suspended)
        session = _session()

        nav.select_slot(session, SUSPENDED_SLOT)
        assert [c['id'] for c in session.cards] == [suspended]

        nav.select_slot(session, ALL_SLOT)
        assert [c['id'] for c in session.cards] == [due]

        nav.select_slot(session, FIRST_DECK_SLOT)
        assert [c['id'] for c in session.cards] == [due]

    def test_quick_filter(self, tdb, ctx):
        db.add_card(db.add_deck('Rust'), 'Ownership', '')
        db.add_card(db.add_deck('Go'), 'Goroutines', '')
        session = _session()

        press(session, ctx, '2')
        assert session.selected_slot == FIRST_DECK_SLOT + 1
        assert _titles(session) == ['Goroutines']

        press(session, ctx, '1')
        assert session.selected_slot == FIRST_DECK_SLOT

    def test_quick_filter_past_last_deck_is_ignored(self, tdb, ctx):
        db.add_deck('Rust')
        session = _session()
        press(session, ctx, '9')
        assert session.selected_slot == REVIEW_SLOT

    def test_rows_move_and_clamp(self, tdb, ctx):
        deck_id = db.add_deck('Rust')
        for title in ('a', 'b', 'c'):
            db.add_card(deck_id, title, '')
        session = _session()

        press(session, ctx, 'j', 'j', 'j', 'j')
        assert session.selected_row == 2
        assert session.card_info['card']['title'] == 'c'

        press(session, ctx, 'k', 'up', 'up')
        assert session.selected_row == 0

    def test_first_and_last(self, tdb, ctx):
        deck_id = db.add_deck('Rust')
        for title in ('a', 'b', 'c'):
            db.add_card(deck_id, title, '')
        session = _session()

        press(session, ctx, 'G')
        assert session.selected_row == 2

        press(session, ctx, 'g', 'g')
        assert session.selected_row == 0

    def test_first_and_last_in_sidebar(self, tdb, ctx):
        db.add_deck('Rust')
        db.add_deck('Go')
        session = _session()
        press(session, ctx, 'tab', 'G')
        assert session.selected_slot == session.slot_count - 1

        press(session, ctx, 'g', 'g')
        assert session.selected_slot == REVIEW_SLOT


# ── Quit and ticks ────────────────────────────────────────────

class TestQuit:
    @pytest.mark.parametrize('key', ['q', 'ctrl-c'])
    def test_quit(self, tdb, ctx, key):
        session = _session()
        press(session, ctx, key)
        assert session.should_quit

    def test_q_is_text_while_searching(self, tdb, ctx):
        session = _session()
        press(session, ctx, '/', 'q')
        assert not session.should_quit
        assert session.search == 'q'

    def test_notice_expires(self, tdb, ctx):
        session = _session()
        session.notify('hello')
        for _ in range(NOTICE_TICKS - 1):
            assert dispatch.handle_tick(session) is False
        assert dispatch.handle_tick(session) is True
        assert session.notice is None


# ── Search ────────────────────────────────────────────────────

class TestSearch:
    @pytest.fixture()
    def session(self, tdb):
        deck_id = db.add_deck('Misc')
        for i in range(10):
            title = f"foo {i}" if i in (3, 7) else f"card {i}"
            db.add_card(deck_id, title, '')
        return _session()

    def test_filter_by_title(self, session, ctx):
        press(session, ctx, '/', 'f', 'o', 'o')
        assert session.mode == Mode.SEARCHING
        assert _titles(session) == ['foo 3', 'foo 7']
        assert session.selected_row in (0, 1)

    def test_selection_clamped_to_filter(self, session, ctx):
        press(session, ctx, 'G')
        assert session.selected_row == 9
        press(session, ctx, '/', 'f', 'o', 'o')
        assert session.selected_row == 1

    def test_no_match(self, session, ctx):
        press(session, ctx, '/', 'z', 'z')
        assert session.visible_cards() == []
        assert session.selected_row is None
        assert session.card_info is None

    def test_search_is_case_sensitive(self, session, ctx):
        press(session, ctx, '/', 'F', 'O', 'O')
        assert session.visible_cards() == []

    def test_backspace_and_clear(self, session, ctx):
        press(session, ctx, '/', 'f', 'x')
        assert session.visible_cards() == []
        press(session, ctx, 'backspace')
        assert session.search == 'f'
        assert len(session.visible_cards()) == 2
        press(session, ctx, 'ctrl-u')
        assert session.search == ''
        assert len(session.visible_cards()) == 10

    def test_enter_keeps_filter(self, session, ctx):
        press(session, ctx, '/', 'f', 'o', 'o', 'enter')
        assert session.mode == Mode.NORMAL
        assert len(session.visible_cards()) == 2

    def test_esc_in_normal_clears_filter(self, session, ctx):
        press(session, ctx, '/', 'f', 'o', 'o', 'esc')
        assert session.search == 'foo'
        press(session, ctx, 'esc')
        assert session.search == ''
        assert len(session.visible_cards()) == 10


# ── Review ────────────────────────────────────────────────────

class TestReview:
    @pytest.fixture()
    def session(self, tdb):
        db.add_card(db.add_deck('Rust'), 'Ownership', '')
        return _session()

    def test_entry_opens_prompt(self, session, ctx):
        press(session, ctx, 'r')
        assert session.mode == Mode.REVISING
        labels = [label for label, _ in session.revise_card['next_dates']]
        assert labels == ['again', 'hard', 'good', 'easy']

    def test_prompt_ignores_other_keys(self, session, ctx):
        press(session, ctx, 'r', 'j', 'q', 'd', '5')
        assert session.mode == Mode.REVISING
        assert not session.should_quit
        assert db.get_reviews(session.revise_card['id']) == []

    def test_esc_skips(self, session, ctx):
        card_id = session.selected_card()['id']
        press(session, ctx, 'r', 'esc')
        assert session.mode == Mode.NORMAL
        assert session.revise_card is None
        assert db.get_reviews(card_id) == []

    def test_commit_matches_preview(self, session, ctx):
        card_id = session.selected_card()['id']
        press(session, ctx, 'r')
        shown = dict(session.revise_card['next_dates'])

        press(session, ctx, '3')

        assert session.mode == Mode.NORMAL
        reviews = db.get_reviews(card_id)
        assert len(reviews) == 1
        assert reviews[0]['interval'] == shown['good']
        assert reviews[0]['last_interval'] == 0
        card = db.get_card(card_id)
        assert (card['next_show_date'] - reviews[0]['review_time']).days == shown['good']

    def test_second_review_appends(self, session, ctx):
        card_id = session.selected_card()['id']
        hand_review.commit(card_id, 3)
        hand_review.commit(card_id, 4)
        reviews = db.get_reviews(card_id)
        assert len(reviews) == 2
        assert reviews[1]['last_interval'] == 0
        assert db.get_last_review(card_id)['id'] == reviews[1]['id']

    def test_commit_rejects_bad_rating(self, session, ctx):
        card_id = session.selected_card()['id']
        with pytest.raises(InvalidRatingError):
            hand_review.commit(card_id, 0)
        assert db.get_reviews(card_id) == []

    def test_commit_missing_card(self, tdb):
        with pytest.raises(NotFoundError):
            hand_review.commit(999, 3)

    def test_review_disabled_in_suspended_slot(self, session, ctx):
        press(session, ctx, 's')
        nav.select_slot(session, SUSPENDED_SLOT)
        press(session, ctx, 'r')
        assert session.mode == Mode.NORMAL


# ── Card actions ──────────────────────────────────────────────

class TestCardActions:
    def test_delete_only_card_sweeps_deck(self, tdb, ctx):
        db.add_card(db.add_deck('Rust'), 'Ownership', '')
        session = _session()
        press(session, ctx, 'd')

        assert session.decks == []
        assert session.cards == []
        assert session.card_info is None

    def test_delete_keeps_deck_with_cards(self, tdb, ctx):
        deck_id = db.add_deck('Rust')
        db.add_card(deck_id, 'a', '')
        db.add_card(deck_id, 'b', '')
        session = _session()
        press(session, ctx, 'd')

        assert len(session.decks) == 1
        assert _titles(session) == ['b']

    def test_suspend_and_unsuspend(self, tdb, ctx):
        card_id = db.add_card(db.add_deck('Rust'), 'Ownership', '')
        session = _session()

        press(session, ctx, 's')
        assert session.cards == []
        assert db.get_card(card_id)['suspended'] is True

        press(session, ctx, 'tab', 'j', 'tab')
        assert session.selected_slot == SUSPENDED_SLOT
        assert _titles(session) == ['Ownership']

        press(session, ctx, 's')
        assert session.cards == []
        assert db.get_card(card_id)['suspended'] is False

    def test_stale_card_becomes_notice(self, tdb, ctx):
        card_id = db.add_card(db.add_deck('Rust'), 'Ownership', '')
        session = _session()
        db.remove_card(card_id)

        press(session, ctx, 's')

        assert session.notice.startswith('⚠')
        assert str(card_id) in session.notice
        assert not session.should_quit


# ── Authoring ─────────────────────────────────────────────────

class TestAuthoring:
    def test_add_card_prefills_current_deck(self, tdb, editor, ctx):
        db.add_card(db.add_deck('Rust'), 'Ownership', '')
        session = _session()
        editor.results.append({'title': 'Borrowing', 'deck': 'Rust', 'body': '&T'})

        press(session, ctx, '1', 'a')

        assert 'deck: Rust' in editor.buffers[0]
        assert _titles(session) == ['Ownership', 'Borrowing']

    def test_add_card_creates_deck(self, tdb, editor, ctx):
        session = _session()
        editor.results.append({'title': 'Goroutines', 'deck': 'Go', 'body': ''})

        press(session, ctx, 'a')

        assert [d['name'] for d in session.decks] == ['Go']
        assert _titles(session) == ['Goroutines']
        assert session.selected_slot == REVIEW_SLOT

    def test_add_cancelled(self, tdb, editor, ctx):
        session = _session()
        editor.results.append(None)
        press(session, ctx, 'a')
        assert session.notice == 'Card discarded'
        assert session.decks == []

    def test_add_disabled_in_suspended_slot(self, tdb, editor, ctx):
        session = _session()
        nav.select_slot(session, SUSPENDED_SLOT)
        press(session, ctx, 'a')
        assert editor.buffers == []

    def test_editor_failure_becomes_notice(self, tdb, editor, ctx):
        session = _session()
        editor.results.append(EditorLaunchError("Failed to launch editor 'nope'"))
        press(session, ctx, 'a')
        assert session.notice == "⚠ Failed to launch editor 'nope'"

    def test_add_runs_inside_suspended_terminal(self, tdb, editor):
        calls = []

        class Suspend:
            def __enter__(self):
                calls.append('enter')

            def __exit__(self, *exc):
                calls.append('exit')

        ctx = Context(editor=editor, suspended=Suspend)
        session = _session()
        editor.results.append(None)
        press(session, ctx, 'a')
        assert calls == ['enter', 'exit']

    def test_edit_prefills_card(self, tdb, editor, ctx):
        db.add_card(db.add_deck('Rust'), 'Ownership', 'One owner.')
        session = _session()
        editor.results.append({'title': 'Ownership rules', 'deck': 'Rust', 'body': 'Still one.'})

        press(session, ctx, 'e')

        assert 'title: Ownership' in editor.buffers[0]
        assert editor.buffers[0].endswith('One owner.')
        assert _titles(session) == ['Ownership rules']
        assert session.card_info['card']['description'] == 'Still one.'

    def test_edit_moving_last_card_sweeps_old_deck(self, tdb, editor, ctx):
        db.add_card(db.add_deck('Rust'), 'Goroutines', '')
        session = _session()
        editor.results.append({'title': 'Goroutines', 'deck': 'Go', 'body': ''})

        press(session, ctx, 'e')

        assert [d['name'] for d in session.decks] == ['Go']
        assert session.card_info['card']['deck_name'] == 'Go'

    def test_edit_cancelled_keeps_card(self, tdb, editor, ctx):
        db.add_card(db.add_deck('Rust'), 'Ownership', '')
        session = _session()
        editor.results.append(None)
        press(session, ctx, 'e')
        assert session.notice == 'Edit discarded'
        assert _titles(session) == ['Ownership']

    def test_edit_without_selection(self, tdb, editor, ctx):
        session = _session()
        press(session, ctx, 'e')
        assert editor.buffers == []


# ── Deck deletion ─────────────────────────────────────────────

class TestDeckDeletion:
    @pytest.fixture()
    def session(self, tdb, ctx):
        rust = db.add_deck('Rust')
        db.add_card(rust, 'Ownership', '')
        db.add_card(db.add_deck('Go'), 'Goroutines', '')
        session = _session()
        press(session, ctx, 'tab', 'j', 'j', 'j')
        assert session.current_deck()['name'] == 'Rust'
        return session

    def test_confirm_opens_modal(self, session, ctx):
        press(session, ctx, 'd')
        assert session.mode == Mode.CONFIRMING_DELETE
        assert session.confirm_delete_deck['name'] == 'Rust'

    def test_decline_keeps_deck(self, session, ctx):
        press(session, ctx, 'd', 'n')
        assert session.mode == Mode.NORMAL
        assert session.confirm_delete_deck is None
        assert len(db.list_decks()) == 2

    def test_other_keys_cancel(self, session, ctx):
        press(session, ctx, 'd', 'q')
        assert not session.should_quit
        assert session.mode == Mode.NORMAL
        assert len(db.list_decks()) == 2

    def test_accept_deletes_deck_and_cards(self, session, ctx):
        press(session, ctx, 'd', 'y')
        assert session.mode == Mode.NORMAL
        assert [d['name'] for d in session.decks] == ['Go']
        assert session.selected_slot == REVIEW_SLOT
        assert _titles(session) == ['Goroutines']

    def test_virtual_slot_cannot_be_deleted(self, tdb, ctx):
        session = _session()
        press(session, ctx, 'tab', 'd')
        assert session.mode == Mode.NORMAL
