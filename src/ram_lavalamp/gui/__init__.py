"""PySide6 presentation layer."""
