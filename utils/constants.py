from enum import auto, IntEnum


class Focus(IntEnum):
    SIDEBAR = auto()
    CARDS = auto()


class Mode(IntEnum):
    NORMAL = auto()
    SEARCHING = auto()
    REVISING = auto()
    CONFIRMING_DELETE = auto()


# Virtual sidebar slots; real decks start at FIRST_DECK_SLOT.
REVIEW_SLOT = 0
SUSPENDED_SLOT = 1
ALL_SLOT = 2
FIRST_DECK_SLOT = 3

VIRTUAL_SLOTS = ('Review', 'Suspended', 'All Collection')

# Global key sequences, matched through utils.keys.ChordBuffer in Normal mode.
KEYMAP = {
    ('q',): 'quit',
    ('ctrl-c',): 'quit',
    ('g', 'g'): 'first',
    ('G',): 'last',
}

UP_KEYS = ('k', 'up')
DOWN_KEYS = ('j', 'down')

SIDEBAR_BINDINGS = [
    ('Tab/l', 'Focus cards'),
    ('k/j', 'Previous/Next collection'),
    ('d', 'Delete deck'),
    ('q', 'Quit'),
]

CARDS_BINDINGS = [
    ('<n>', 'Quick deck filter'),
    ('Tab/h', 'Focus decks'),
    ('j/k', 'Move down/up'),
    ('/', 'Search'),
    ('a', 'Add card'),
    ('e', 'Edit card'),
    ('d', 'Delete card'),
    ('r', 'Review card'),
    ('s', 'Suspend card'),
    ('q', 'Quit'),
]

SUSPENDED_BINDINGS = [
    ('<n>', 'Quick deck filter'),
    ('Tab/h', 'Focus decks'),
    ('j/k', 'Move down/up'),
    ('/', 'Search'),
    ('e', 'Edit card'),
    ('d', 'Delete card'),
    ('s', 'Unsuspend card'),
    ('q', 'Quit'),
]

SEARCH_BINDINGS = [
    ('Enter/Esc', 'Done'),
    ('Ctrl-u', 'Clear search'),
]

REVISE_BINDINGS = [
    ('1-4', 'Revise card with <ease>'),
    ('Esc', 'Skip'),
]

CONFIRM_BINDINGS = [
    ('y', 'Delete deck'),
    ('n/Esc', 'Cancel'),
]
