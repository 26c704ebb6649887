"""spark: proximity profile exchange and encounter records."""

__version__ = "0.3.0"
