"""Core infrastructure: configuration, database, cache, email and scheduling."""
