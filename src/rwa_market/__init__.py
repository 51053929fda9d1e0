"""Data-access and resilience layer for the tokenized asset marketplace."""

__version__ = "0.1.0"
