"""Client-side state synchronization for a mail application."""

__version__ = "0.1.0"
