"""GitHub Mirror - mirror a GitHub account into a local store."""

__version__ = "0.1.0"
