"""Bank statement payment verification for channel orders."""

__version__ = "0.1.0"
