"""includeprune: drop #include lines the build does not need."""

__version__ = "1.0.0"
