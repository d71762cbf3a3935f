"""
Bloom Engine - probabilistic set membership with a bounded false positive rate.

This package provides:
- A packed, insert-only Bloom filter with double-hashing position derivation
- Pluggable, deterministic hash strategies (BLAKE2b, xxHash64)
- Sizing helpers relating bit count, hash count and false positive rate
- A lock-striped bit vector for concurrent inserts
- A fluent builder, metrics and a command-line interface
"""

__version__ = "0.1.0"

from bloom_engine.bloom_filter import BloomFilter
from bloom_engine.builder import BloomFilterBuilder, build_filter
from bloom_engine.config import FilterConfig
from bloom_engine.errors import BloomFilterError, InvalidInput, InvalidParameter
from bloom_engine.hashing import (
    Blake2bHashStrategy,
    HashStrategy,
    XXHashStrategy,
    get_hash_strategy,
)
from bloom_engine.sizing import false_positive_rate, recommended_parameters

__all__ = [
    "BloomFilter",
    "BloomFilterBuilder",
    "build_filter",
    "FilterConfig",
    "BloomFilterError",
    "InvalidInput",
    "InvalidParameter",
    "HashStrategy",
    "Blake2bHashStrategy",
    "XXHashStrategy",
    "get_hash_strategy",
    "false_positive_rate",
    "recommended_parameters",
]
