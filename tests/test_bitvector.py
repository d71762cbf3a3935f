"""
Unit tests for packed bit storage.
"""
import threading

import pytest

from bloom_engine.bitvector import BitVector, ConcurrentBitVector


class TestBitVector:
    """Test cases for BitVector."""

    def test_initialization(self):
        """Test a new vector is all zeros and packed."""
        bv = BitVector(100)

        assert len(bv) == 100
        assert bv.nbytes == 13
        assert bv.count() == 0
        assert not any(bv.get(i) for i in range(100))

    def test_invalid_size(self):
        """Test that a non-positive size is rejected."""
        with pytest.raises(ValueError):
            BitVector(0)

    def test_set_and_get(self):
        """Test setting individual bits."""
        bv = BitVector(20)
        bv.set(0)
        bv.set(9)
        bv.set(19)

        assert bv.get(0) and bv.get(9) and bv.get(19)
        assert not bv.get(1)
        assert bv.count() == 3
        assert bv.set_positions() == [0, 9, 19]

    def test_set_is_idempotent(self):
        """Test that setting a bit twice changes nothing."""
        bv = BitVector(16)
        bv.set(5)
        snapshot = bv.to_bytes()
        bv.set(5)

        assert bv.to_bytes() == snapshot
        assert bv.count() == 1

    def test_byte_layout(self):
        """Test bit i lives at byte i // 8, bit i % 8."""
        bv = BitVector(16)
        bv.set(1)
        bv.set(8)

        assert bv.to_bytes() == bytes([0b00000010, 0b00000001])

    def test_out_of_range(self):
        """Test that positions outside the vector raise IndexError."""
        bv = BitVector(10)

        with pytest.raises(IndexError):
            bv.set(10)
        with pytest.raises(IndexError):
            bv.get(-1)

    def test_equality(self):
        """Test equality compares size and content."""
        a, b = BitVector(32), BitVector(32)
        a.set(3)
        assert a != b
        b.set(3)
        assert a == b
        assert BitVector(32) != BitVector(33)

    def test_repr(self):
        """Test string representation."""
        assert "size=8" in repr(BitVector(8))


class TestConcurrentBitVector:
    """Test cases for ConcurrentBitVector."""

    def test_invalid_stripes(self):
        """Test that a non-positive stripe count is rejected."""
        with pytest.raises(ValueError):
            ConcurrentBitVector(64, stripes=0)

    def test_threads_setting_same_bytes(self):
        """Test that writers sharing bytes never lose an update."""
        bv = ConcurrentBitVector(64, stripes=2)

        def worker(offset):
            for _ in range(500):
                for position in range(offset, 64, 8):
                    bv.set(position)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert bv.count() == 64

    def test_equal_to_plain_vector(self):
        """Test the concurrent vector compares equal to a plain one with the same bits."""
        plain, concurrent = BitVector(40), ConcurrentBitVector(40)
        for position in (1, 17, 39):
            plain.set(position)
            concurrent.set(position)

        assert plain == concurrent
