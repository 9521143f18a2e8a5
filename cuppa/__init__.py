"""Find the newest upstream releases of source archives."""

__version__ = "1.0.0"