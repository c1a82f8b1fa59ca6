"""lms-cache: read-through caching and invalidation for the LMS backend."""

__version__ = "1.0.0"
