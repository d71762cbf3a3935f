"""
Packed bit storage for Bloom filters.

Bits are stored eight to a byte in a ``bytearray``. Bits are only ever set,
never cleared, so the set of ones grows monotonically for the lifetime of a
vector.
"""
import threading
from typing import List


class BitVector:
    """
    Fixed-size, zero-initialized packed bit vector.

    Not safe for unsynchronized concurrent writers: ``set`` is a
    read-modify-write on a shared byte. Use ``ConcurrentBitVector`` when
    several threads insert at once.
    """

    def __init__(self, size: int):
        """
        Initialize a bit vector.

        Args:
            size: Number of addressable bits

        Raises:
            ValueError: If size is not positive
        """
        if size <= 0:
            raise ValueError("size must be positive")
        self.size = size
        self._data = bytearray((size + 7) // 8)

    def _check(self, position: int) -> None:
        if not 0 <= position < self.size:
            raise IndexError(f"bit position {position} out of range [0, {self.size})")

    def set(self, position: int) -> None:
        """Set the bit at the given position to 1."""
        self._check(position)
        self._data[position >> 3] |= 1 << (position & 7)

    def get(self, position: int) -> bool:
        """Get the value of the bit at the given position."""
        self._check(position)
        return bool(self._data[position >> 3] & (1 << (position & 7)))

    def count(self) -> int:
        """Number of bits set to 1."""
        return sum(bin(byte).count("1") for byte in self._data)

    def set_positions(self) -> List[int]:
        """Sorted list of positions currently set to 1."""
        return [
            (i << 3) + bit
            for i, byte in enumerate(self._data) if byte
            for bit in range(8) if byte & (1 << bit)
        ]

    @property
    def nbytes(self) -> int:
        """Bytes of backing storage."""
        return len(self._data)

    def to_bytes(self) -> bytes:
        """Snapshot of the backing storage."""
        return bytes(self._data)

    def __len__(self) -> int:
        return self.size

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BitVector):
            return NotImplemented
        return self.size == other.size and self._data == other._data

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={self.size}, set={self.count()})"


class ConcurrentBitVector(BitVector):
    """
    Bit vector that tolerates concurrent writers.

    Each ``set`` holds one lock from a fixed pool of stripes, picked by byte
    index, so two threads setting bits in the same byte cannot overwrite each
    other's update. Reads take no lock: a single byte read is never torn and
    bits only ever go from 0 to 1, so a reader sees either the old or the new
    state of a byte.
    """

    def __init__(self, size: int, stripes: int = 64):
        """
        Initialize a concurrent bit vector.

        Args:
            size: Number of addressable bits
            stripes: Number of locks shared across the bytes of the vector

        Raises:
            ValueError: If size or stripes is not positive
        """
        super().__init__(size)
        if stripes <= 0:
            raise ValueError("stripes must be positive")
        self.stripes = stripes
        self._locks = [threading.Lock() for _ in range(stripes)]

    def set(self, position: int) -> None:
        """Set the bit at the given position to 1 under its stripe lock."""
        self._check(position)
        index = position >> 3
        with self._locks[index % self.stripes]:
            self._data[index] |= 1 << (position & 7)
