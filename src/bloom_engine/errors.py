"""
Error types raised by the Bloom filter engine.
"""


class BloomFilterError(ValueError):
    """Base class for all Bloom filter errors."""


class InvalidParameter(BloomFilterError):
    """Raised when a filter is constructed or sized with invalid parameters."""


class InvalidInput(BloomFilterError):
    """Raised when a missing or empty value is inserted or queried."""
