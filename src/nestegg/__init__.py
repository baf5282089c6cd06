"""nestegg: personal net-worth tracking and projection."""

__version__ = "0.1.0"
