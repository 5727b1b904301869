"""Brand visibility tracking for AI-generated answers."""

__version__ = "1.0.0"
