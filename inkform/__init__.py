"""Inkform: tattoo-studio appointment lifecycle, intake forms and notifications."""

__version__ = "0.1.0"
