"""SQLite connection helpers."""
