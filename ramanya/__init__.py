"""Ramanya - retrieval-augmented English/Mon translation relay."""

__version__ = "0.3.0"
