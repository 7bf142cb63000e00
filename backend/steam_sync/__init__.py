"""Steam achievement sync relay backend."""

__version__ = "0.1.0"
