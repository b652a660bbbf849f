"""dirstream: browse upstream HTML directory indexes and re-serve their files."""

__version__ = "0.1.0"
