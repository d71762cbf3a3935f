"""
Fluent construction helper for Bloom filters.
"""
from typing import Any, Iterable

from bloom_engine.bloom_filter import BloomFilter


class BloomFilterBuilder:
    """
    Collects values through chained ``insert`` calls and hands back the filter.

    Example:
        bf = (BloomFilterBuilder(1000, 4)
              .insert("Hello, world")
              .insert("Hello, again")
              .build())

    Without arguments the builder starts from ``BloomFilter.of()``.
    """

    def __init__(self, *args, **kwargs):
        self._filter = BloomFilter(*args, **kwargs) if args or kwargs else BloomFilter.of()

    def insert(self, value: Any) -> "BloomFilterBuilder":
        """
        Add a value and return the builder for chaining.

        Raises:
            InvalidInput: If the value is missing or empty
        """
        self._filter.insert(value)
        return self

    def insert_all(self, values: Iterable[Any]) -> "BloomFilterBuilder":
        """Add every value from an iterable and return the builder."""
        for value in values:
            self.insert(value)
        return self

    def build(self) -> BloomFilter:
        """Return the populated filter."""
        return self._filter


def build_filter(values: Iterable[Any], *args, **kwargs) -> BloomFilter:
    """Build a filter containing every value from an iterable."""
    return BloomFilterBuilder(*args, **kwargs).insert_all(values).build()
