"""Shared value objects, events, configuration and errors."""
