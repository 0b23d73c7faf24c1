"""Counter-based URL shortening service."""

__version__ = "1.0.0"
