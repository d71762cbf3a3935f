"""
Pluggable hash strategies used to derive Bloom filter bit positions.

A strategy maps ``(seed, data)`` to an unsigned 64-bit integer. The filter
asks for exactly two evaluations per value (``hash_pair``) and derives all of
its positions from those by double hashing, so a strategy only needs good
avalanche behavior, not a family of k independent functions.

Values are turned into bytes with ``encode_value`` before hashing. Python's
built-in ``hash()`` is salted per process for ``str`` and ``bytes``, so it is
never used here.
"""
import hashlib
from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple, Type

import msgpack
import xxhash

from bloom_engine.errors import InvalidInput, InvalidParameter


UINT64_MASK = (1 << 64) - 1

# Seeds for the two hash evaluations. Any two distinct values work; these
# are the 64-bit golden ratio and its complement.
DEFAULT_SEEDS = (0x9E3779B97F4A7C15, 0x61C8864680B583EB)

# msgpack extension code that keeps dicts distinct from lists of pairs
_DICT_EXT_CODE = 1

# Integer range msgpack can pack
_INT_MIN = -(1 << 63)
_INT_MAX = UINT64_MASK


def _canonical(value: Any) -> Any:
    """Normalize values so that values comparing equal pack to identical bytes."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, float) and value.is_integer() and _INT_MIN <= value <= _INT_MAX:
        # 1.0 == 1 and -0.0 == 0, so they must hash alike
        return int(value)
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, dict):
        items = [(_canonical(k), _canonical(v)) for k, v in value.items()]
        items.sort(key=lambda kv: msgpack.packb(kv[0], use_bin_type=True))
        return msgpack.ExtType(
            _DICT_EXT_CODE, msgpack.packb(items, use_bin_type=True)
        )
    if isinstance(value, (list, tuple)):
        return [_canonical(v) for v in value]
    return value


def is_empty(value: Any) -> bool:
    """Check whether a value counts as missing for insert/contains."""
    if value is None:
        return True
    if isinstance(value, (str, bytes, bytearray, memoryview, list, tuple, dict)):
        return len(value) == 0
    return False


def encode_value(value: Any) -> bytes:
    """
    Encode a value to a stable byte string.

    Every value goes through msgpack so that str, bytes and numbers never
    share an encoding (the int ``65`` and the byte string ``b"A"`` stay
    distinct). Numbers that compare equal encode alike: ``True``, ``1`` and
    ``1.0`` are the same value, as are ``0.0`` and ``-0.0``. Lists and tuples
    with equal items encode alike. Dict items are ordered by their packed key.

    Args:
        value: str, bytes, int, float, bool, or a list/tuple/dict of those

    Returns:
        Canonical bytes for the value

    Raises:
        InvalidInput: If the value is missing, empty, or cannot be encoded
    """
    if is_empty(value):
        raise InvalidInput("value must not be None or empty")
    try:
        return msgpack.packb(_canonical(value), use_bin_type=True)
    except (TypeError, ValueError, OverflowError) as e:
        raise InvalidInput(
            f"cannot encode value of type {type(value).__name__}: {e}"
        ) from e


class HashStrategy(ABC):
    """Deterministic seeded hash producing unsigned 64-bit integers."""

    name = "abstract"

    def __init__(self, seeds: Tuple[int, int] = DEFAULT_SEEDS):
        if len(seeds) != 2 or seeds[0] == seeds[1]:
            raise InvalidParameter("seeds must be two distinct integers")
        self.seeds = (seeds[0] & UINT64_MASK, seeds[1] & UINT64_MASK)

    @abstractmethod
    def hash(self, seed: int, data: bytes) -> int:
        """Hash ``data`` with ``seed`` to an unsigned 64-bit integer."""

    def hash_pair(self, data: bytes) -> Tuple[int, int]:
        """
        Evaluate the hash twice with independent seeds.

        Returns:
            (h1, h2), both reduced to unsigned 64-bit range
        """
        h1 = self.hash(self.seeds[0], data) & UINT64_MASK
        h2 = self.hash(self.seeds[1], data) & UINT64_MASK
        return h1, h2

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Blake2bHashStrategy(HashStrategy):
    """BLAKE2b keyed by the seed, truncated to an 8-byte digest."""

    name = "blake2b"

    def hash(self, seed: int, data: bytes) -> int:
        key = (seed & UINT64_MASK).to_bytes(8, "big")
        digest = hashlib.blake2b(data, digest_size=8, key=key).digest()
        return int.from_bytes(digest, "big", signed=False)


class XXHashStrategy(HashStrategy):
    """xxHash64, a fast non-cryptographic mixing hash."""

    name = "xxhash"

    def hash(self, seed: int, data: bytes) -> int:
        return xxhash.xxh64(data, seed=seed & UINT64_MASK).intdigest()


_STRATEGIES: Dict[str, Type[HashStrategy]] = {
    Blake2bHashStrategy.name: Blake2bHashStrategy,
    XXHashStrategy.name: XXHashStrategy,
}


def available_strategies() -> Tuple[str, ...]:
    """Names accepted by ``get_hash_strategy``."""
    return tuple(sorted(_STRATEGIES))


def get_hash_strategy(name: str = Blake2bHashStrategy.name) -> HashStrategy:
    """
    Resolve a hash strategy by name.

    Raises:
        InvalidParameter: If the name is unknown
    """
    try:
        cls = _STRATEGIES[name.lower()]
    except (KeyError, AttributeError):
        raise InvalidParameter(
            f"unknown hash algorithm {name!r}, expected one of "
            f"{', '.join(available_strategies())}"
        ) from None
    return cls()
