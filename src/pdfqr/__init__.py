"""Password-gated PDF upload service that hands back QR-ready retrieval links."""

__version__ = "0.1.0"
