"""Student Power: catalog of university study material."""

__version__ = "0.1.0"
