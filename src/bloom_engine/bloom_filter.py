"""
Bloom filter engine.

A Bloom filter is a space-efficient probabilistic data structure used to test
whether an element is a member of a set. False positive matches are possible,
but false negatives are not.

Bit positions are derived by double hashing: two independent 64-bit hashes
h1 and h2 are computed once per value and the k positions are

    position_i = (h1 + i * h2) mod m,   i = 0 .. k-1

Re-hashing the value k times with k seed prefixes through the same function
gives positions that are correlated whenever that function is weak, which
pushes the real false positive rate above the theoretical one. Two well-mixed
evaluations combined linearly do not have that problem.

Concurrency: a filter built with ``concurrent=False`` (the default) must be
guarded externally when several threads insert into it. With
``concurrent=True`` the bit vector serializes writes per byte stripe, so
concurrent inserts are safe without a global lock; ``contains`` never needs
a lock because bits only go from 0 to 1.
"""
import threading
import time
from typing import Any, Iterable, List, Optional

import structlog

from bloom_engine.bitvector import BitVector, ConcurrentBitVector
from bloom_engine.config import (
    DEFAULT_EXPECTED_ELEMENTS,
    DEFAULT_FALSE_POSITIVE_RATE,
    DEFAULT_HASH_COUNT,
    FilterConfig,
)
from bloom_engine.errors import InvalidInput, InvalidParameter
from bloom_engine.hashing import HashStrategy, encode_value, get_hash_strategy
from bloom_engine.metrics import FilterMetrics
from bloom_engine.sizing import false_positive_rate, recommended_parameters


def _require_positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameter(f"{name} must be an integer, got {type(value).__name__}")
    if value <= 0:
        raise InvalidParameter(f"{name} must be positive, got {value}")
    return value


class BloomFilter:
    """
    Fixed-size, insert-only Bloom filter.

    The filter owns a packed bit vector of ``capacity_bits`` bits and derives
    ``hash_count`` positions per value from a pluggable ``HashStrategy``.
    Values may be str, bytes, numbers, or lists/tuples/dicts of those; see
    ``bloom_engine.hashing.encode_value``.
    """

    def __init__(
        self,
        capacity_bits: int,
        hash_count: int = DEFAULT_HASH_COUNT,
        hash_strategy: Optional[HashStrategy] = None,
        concurrent: bool = False,
        lock_stripes: int = 64,
        metrics: Optional[FilterMetrics] = None,
    ):
        """
        Initialize a Bloom filter.

        Args:
            capacity_bits: Number of bits in the filter (m)
            hash_count: Number of positions derived per value (k)
            hash_strategy: Hash used for position derivation (default: BLAKE2b)
            concurrent: Back the filter with a lock-striped bit vector
            lock_stripes: Number of write locks when concurrent is set
            metrics: Records filter activity when given

        Raises:
            InvalidParameter: If capacity_bits or hash_count is not positive
        """
        self.capacity_bits = _require_positive_int("capacity_bits", capacity_bits)
        self.hash_count = _require_positive_int("hash_count", hash_count)
        self.hash_strategy = hash_strategy or get_hash_strategy()
        self.concurrent = concurrent

        if concurrent:
            self.bits: BitVector = ConcurrentBitVector(
                capacity_bits, _require_positive_int("lock_stripes", lock_stripes)
            )
        else:
            self.bits = BitVector(capacity_bits)

        self.num_inserts = 0
        self._count_lock = threading.Lock()
        self.metrics = metrics
        self.logger = structlog.get_logger()

    @classmethod
    def for_capacity(
        cls,
        expected_elements: int,
        false_positive_rate: float = DEFAULT_FALSE_POSITIVE_RATE,
        **kwargs,
    ) -> "BloomFilter":
        """
        Create a filter sized for an expected load.

        Args:
            expected_elements: Number of elements expected to be inserted
            false_positive_rate: Target false positive probability
            **kwargs: Passed through to the constructor

        Returns:
            Filter with recommended (capacity_bits, hash_count)
        """
        m, k = recommended_parameters(expected_elements, false_positive_rate)
        return cls(m, k, **kwargs)

    @classmethod
    def of(cls) -> "BloomFilter":
        """Create a filter with the default sizing."""
        return cls.for_capacity(DEFAULT_EXPECTED_ELEMENTS, DEFAULT_FALSE_POSITIVE_RATE)

    @classmethod
    def from_config(
        cls, config: FilterConfig, metrics: Optional[FilterMetrics] = None
    ) -> "BloomFilter":
        """Create a filter from a FilterConfig."""
        m, k = config.resolve_parameters()
        return cls(
            m,
            k,
            hash_strategy=get_hash_strategy(config.hash_algorithm),
            concurrent=config.concurrent,
            lock_stripes=config.lock_stripes,
            metrics=metrics,
        )

    @classmethod
    def builder(cls, *args, **kwargs):
        """Start a fluent BloomFilterBuilder; arguments go to the constructor."""
        from bloom_engine.builder import BloomFilterBuilder
        return BloomFilterBuilder(*args, **kwargs)

    def _encode(self, value: Any) -> bytes:
        try:
            return encode_value(value)
        except InvalidInput:
            if self.metrics is not None:
                self.metrics.record_input_error()
            raise

    def _positions(self, data: bytes) -> List[int]:
        m = self.capacity_bits
        h1, h2 = self.hash_strategy.hash_pair(data)
        # h1 and h2 are unsigned here; an odd stride is never a multiple of an
        # even m, and the fallback covers odd m dividing the stride
        start = h1 % m
        step = (h2 | 1) % m or 1
        return [(start + i * step) % m for i in range(self.hash_count)]

    def indices(self, value: Any) -> List[int]:
        """
        Derive the bit positions for a value.

        Args:
            value: Value to derive positions for

        Returns:
            hash_count positions in [0, capacity_bits); the same value always
            yields the same positions

        Raises:
            InvalidInput: If the value is missing or empty
        """
        return self._positions(self._encode(value))

    def insert(self, value: Any) -> None:
        """
        Add a value to the filter.

        Inserting the same value again leaves the bits unchanged.

        Args:
            value: Value to add

        Raises:
            InvalidInput: If the value is missing or empty
        """
        started = time.perf_counter()
        positions = self.indices(value)
        for position in positions:
            self.bits.set(position)
        with self._count_lock:
            self.num_inserts += 1
        if self.metrics is not None:
            self.metrics.record_insert(time.perf_counter() - started)
        self.logger.debug(
            "bloom_insert", capacity_bits=self.capacity_bits, positions=positions
        )

    def insert_all(self, values: Iterable[Any]) -> None:
        """Add every value from an iterable."""
        for value in values:
            self.insert(value)

    def contains(self, value: Any) -> bool:
        """
        Check if a value might be in the set.

        Args:
            value: Value to check

        Returns:
            True if the value might be in the set (possible false positive),
            False if the value is definitely not in the set

        Raises:
            InvalidInput: If the value is missing or empty
        """
        positions = self.indices(value)
        found = all(self.bits.get(position) for position in positions)
        if self.metrics is not None:
            self.metrics.record_query(found)
        return found

    def __contains__(self, value: Any) -> bool:
        """Support 'in' operator."""
        return self.contains(value)

    def fill_ratio(self) -> float:
        """Fraction of bits set to 1."""
        ratio = self.bits.count() / self.capacity_bits
        if self.metrics is not None:
            self.metrics.record_fill_ratio(ratio)
        return ratio

    def estimated_false_positive_rate(self) -> float:
        """
        Theoretical false positive rate for the number of insert calls so far.

        Repeated inserts of the same value are counted each time, so this is
        an upper estimate when values repeat.
        """
        return false_positive_rate(self.capacity_bits, self.hash_count, self.num_inserts)

    def get_stats(self) -> dict:
        """
        Get statistics about the Bloom filter.

        Returns:
            Dictionary with filter statistics
        """
        return {
            'capacity_bits': self.capacity_bits,
            'size_bytes': self.bits.nbytes,
            'hash_count': self.hash_count,
            'hash_algorithm': self.hash_strategy.name,
            'concurrent': self.concurrent,
            'inserts': self.num_inserts,
            'bits_set': self.bits.count(),
            'fill_ratio': self.fill_ratio(),
            'estimated_false_positive_rate': self.estimated_false_positive_rate(),
        }

    def __repr__(self) -> str:
        return (f"BloomFilter(bits={self.capacity_bits}, "
                f"hashes={self.hash_count}, "
                f"inserts={self.num_inserts}, "
                f"hash={self.hash_strategy.name}, "
                f"fpr={self.estimated_false_positive_rate():.4f})")
