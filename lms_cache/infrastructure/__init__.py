"""Infrastructure: Redis-backed cache layer."""
