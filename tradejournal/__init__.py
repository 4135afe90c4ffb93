"""Trade journal analytics engine."""

__version__ = "0.3.0"
