"""Access control helpers."""
