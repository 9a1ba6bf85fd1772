"""HTTP front end for the full URL resolver."""

__version__ = "0.1.0"
