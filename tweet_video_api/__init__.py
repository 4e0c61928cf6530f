"""Twitter / X video download API."""

__version__ = "2.0.0"
