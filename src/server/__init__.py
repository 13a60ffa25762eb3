"""HTTP request channel for the Twitter login coordinator."""

__version__ = "1.0.0"
