"""Core move, rollback and rename engines."""
