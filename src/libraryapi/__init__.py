"""Library catalog and loan management."""

__version__ = "0.1.0"
