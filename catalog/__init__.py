"""File-backed product catalog."""
