"""Upload finished session artifacts to object storage."""

__version__ = "0.1.0"
