"""expresskit — rollback-safe Express project scaffolder."""

__version__ = "0.1.0"
