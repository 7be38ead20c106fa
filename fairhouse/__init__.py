"""Fairhouse: provably-fair casino settlement engine."""

__version__ = "0.1.0"
__author__ = "Fairhouse Team"

# Engine and storage import config lazily through get_settings()
__all__ = ["__version__", "__author__"]
