"""seatsweep - prune workspace members outside the allowed email domains."""

__version__ = "0.1.0"
