"""Database engine, sessions and table definitions."""
