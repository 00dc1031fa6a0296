"""OAuth token exchange and refresh for CI pipelines."""

__version__ = "0.1.0"
