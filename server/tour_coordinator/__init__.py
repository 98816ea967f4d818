"""Wildlife tour lifecycle and staff availability coordinator."""

__version__ = "1.0.0"
