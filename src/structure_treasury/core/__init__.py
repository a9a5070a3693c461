"""Core infrastructure: database, exceptions and logging."""
