"""Database schema for the chunk metadata store."""

SCHEMA = """
-- Chunks table: one row per chunk, id shared with the vector index
CREATE TABLE IF NOT EXISTS chunks (
    id INTEGER PRIMARY KEY,    -- vector index ordinal, assigned by the index
    file TEXT NOT NULL,
    ls INTEGER NOT NULL,       -- first line, 1-based
    le INTEGER NOT NULL,       -- last line, inclusive
    byte_start INTEGER NOT NULL,
    byte_end INTEGER NOT NULL  -- exclusive
);

-- Metadata table: embedding model, dimension, creation time
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT
);

-- Indexes for efficient queries
CREATE INDEX IF NOT EXISTS idx_chunks_file ON chunks(file);
"""
