"""Trading journal: execution quality scoring, partial exits and analytics."""

__version__ = "0.1.0"
