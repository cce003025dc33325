"""Slack assistant that answers in threads using tool-augmented generation."""

__version__ = "0.1.0"
