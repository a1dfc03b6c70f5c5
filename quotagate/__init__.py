"""Per-client request quota enforcement for HTTP services."""

__version__ = "0.1.0"
