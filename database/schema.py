# ======================= DECKS ==========================

deck_schema = '''
    CREATE TABLE IF NOT EXISTS decks (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
'''

deck_name_index = '''
    CREATE UNIQUE INDEX IF NOT EXISTS decks_name_key ON decks(name)
'''

# ======================= CARDS ==========================

card_schema = '''
    CREATE TABLE IF NOT EXISTS cards (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        deck_id INTEGER NOT NULL,

        -- Card content
        title TEXT NOT NULL,
        description TEXT NOT NULL,

        -- Scheduling
        next_show_date TEXT NOT NULL,
        suspended INTEGER NOT NULL DEFAULT 0,

        created_at TEXT NOT NULL,

        FOREIGN KEY (deck_id) REFERENCES decks(id) ON DELETE CASCADE
    )
'''

# ======================= REVIEW LOG =====================

revlog_schema = '''
    CREATE TABLE IF NOT EXISTS revlog (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        card_id INTEGER NOT NULL,

        last_interval INTEGER NOT NULL,  -- days since the previous review
        interval INTEGER NOT NULL,       -- days until the next review
        review_time TEXT NOT NULL,

        -- Memory state after this review
        stability REAL NOT NULL,
        difficulty REAL NOT NULL,

        FOREIGN KEY (card_id) REFERENCES cards(id) ON DELETE CASCADE
    )
'''
