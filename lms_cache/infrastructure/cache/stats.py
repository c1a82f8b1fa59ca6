"""Cache statistics read from the backing store (INFO stats + DBSIZE)."""

from pydantic import BaseModel, Field, computed_field


class CacheStats(BaseModel):
    """Keyspace hit/miss counters and key count for the selected Redis db."""

    hits: int = Field(default=0, ge=0, description="INFO keyspace_hits")
    misses: int = Field(default=0, ge=0, description="INFO keyspace_misses")
    keys: int = Field(default=0, ge=0, description="DBSIZE of the selected db")
    connected: bool = True

    @computed_field  # type: ignore[prop-decorator]
    @property
    def hit_rate(self) -> float:
        """Percentage of lookups that hit, 0.0 when nothing was looked up."""
        total = self.hits + self.misses
        return round(self.hits / total * 100, 2) if total else 0.0
