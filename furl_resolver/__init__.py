"""Full URL resolution with an adaptive in-memory cache."""

__all__ = [
    "config",
    "logging_utils",
    "url_tools",
    "store",
    "stats",
    "memory",
    "resolver",
    "cleaner",
    "scheduler",
    "service",
]

__version__ = "0.1.0"
