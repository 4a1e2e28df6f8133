"""Console operator client for a receiving antenna system over TCP."""

__version__ = "0.1.0"

__all__ = ["__version__"]