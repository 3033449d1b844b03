"""Database-backed adapters."""
