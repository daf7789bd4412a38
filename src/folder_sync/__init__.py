"""One-way periodic directory synchronisation."""

__version__ = "1.0.0"
