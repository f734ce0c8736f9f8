# SQL schema for the LineByLine database

SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Texts (study material, split into lines on ingestion)
CREATE TABLE IF NOT EXISTS texts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    author TEXT,
    content TEXT NOT NULL,
    created_at TEXT NOT NULL,
    last_reviewed_at TEXT,
    max_unlocked_line_number INTEGER NOT NULL DEFAULT 0 CHECK(max_unlocked_line_number >= 0)
);

-- Lines (with scheduling fields)
CREATE TABLE IF NOT EXISTS lines (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    text_id INTEGER NOT NULL,
    line_number INTEGER NOT NULL CHECK(line_number >= 0),
    original_line_text TEXT NOT NULL,
    next_review_date TEXT NOT NULL,
    interval INTEGER NOT NULL DEFAULT 0 CHECK(interval >= 0),
    ease_factor REAL NOT NULL DEFAULT 2.5,
    repetitions INTEGER NOT NULL DEFAULT 0 CHECK(repetitions >= 0),
    lapses INTEGER NOT NULL DEFAULT 0 CHECK(lapses >= 0),
    last_reviewed_at TEXT,
    mask_level INTEGER NOT NULL DEFAULT 0 CHECK(mask_level >= 0),
    UNIQUE (text_id, line_number),
    FOREIGN KEY (text_id) REFERENCES texts (id) ON DELETE CASCADE
);
"""

# Indexes for the due-set queries
INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_texts_created ON texts (created_at);
CREATE INDEX IF NOT EXISTS idx_lines_text ON lines (text_id, line_number);
CREATE INDEX IF NOT EXISTS idx_lines_due ON lines (text_id, next_review_date);
"""
