"""predoracle - optimistic dispute-resolution oracle for binary events."""

__version__ = "0.1.0"
