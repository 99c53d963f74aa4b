"""Compare AWS costs between time periods."""

__version__ = "0.1.0"
