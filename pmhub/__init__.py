"""PMHub user hierarchy service."""

__version__ = "1.0.0"
