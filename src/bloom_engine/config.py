"""
Configuration management for Bloom filters.
"""
from dataclasses import asdict, dataclass
from typing import Optional, Tuple
import json
import logging
import sys

import structlog

from bloom_engine.errors import InvalidParameter
from bloom_engine.hashing import available_strategies
from bloom_engine.sizing import recommended_parameters


DEFAULT_HASH_COUNT = 4
DEFAULT_EXPECTED_ELEMENTS = 100_000
DEFAULT_FALSE_POSITIVE_RATE = 0.01

# Stream opened by the last configure_logging call for a log file
_log_stream = None


def _check_type(name, value, expected, optional=False):
    if value is None and optional:
        return
    if isinstance(value, bool) and expected is not bool:
        raise InvalidParameter(f"{name} must not be a boolean")
    if not isinstance(value, expected):
        raise InvalidParameter(f"{name} has invalid type {type(value).__name__}")


@dataclass
class FilterConfig:
    """Configuration for a Bloom filter."""

    # Explicit sizing; when capacity_bits is unset the filter is sized
    # from expected_elements and false_positive_rate instead
    capacity_bits: Optional[int] = None
    hash_count: Optional[int] = None

    # Load-based sizing
    expected_elements: int = DEFAULT_EXPECTED_ELEMENTS
    false_positive_rate: float = DEFAULT_FALSE_POSITIVE_RATE

    # Hashing
    hash_algorithm: str = "blake2b"

    # Concurrency
    concurrent: bool = False
    lock_stripes: int = 64

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_file(cls, path: str) -> "FilterConfig":
        """Load configuration from a JSON file."""
        with open(path, "r") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise InvalidParameter(f"malformed configuration in {path}: {e}") from e
        if not isinstance(data, dict):
            raise InvalidParameter(f"configuration in {path} must be a JSON object")
        try:
            return cls(**data)
        except TypeError as e:
            raise InvalidParameter(f"invalid configuration in {path}: {e}") from e

    def to_file(self, path: str):
        """Save configuration to a JSON file."""
        with open(path, "w") as f:
            json.dump(asdict(self), f, indent=2)

    def validate(self) -> bool:
        """Validate configuration parameters."""
        _check_type("capacity_bits", self.capacity_bits, int, optional=True)
        _check_type("hash_count", self.hash_count, int, optional=True)
        _check_type("expected_elements", self.expected_elements, int)
        _check_type("false_positive_rate", self.false_positive_rate, (int, float))
        _check_type("hash_algorithm", self.hash_algorithm, str)
        _check_type("concurrent", self.concurrent, bool)
        _check_type("lock_stripes", self.lock_stripes, int)
        _check_type("log_level", self.log_level, str)
        _check_type("log_file", self.log_file, str, optional=True)

        if self.capacity_bits is not None and self.capacity_bits <= 0:
            raise InvalidParameter(f"capacity_bits must be positive, got {self.capacity_bits}")

        if self.hash_count is not None and self.hash_count <= 0:
            raise InvalidParameter(f"hash_count must be positive, got {self.hash_count}")

        if self.expected_elements <= 0:
            raise InvalidParameter("expected_elements must be positive")

        if not 0 < self.false_positive_rate < 1:
            raise InvalidParameter("false_positive_rate must be between 0 and 1")

        if self.hash_algorithm.lower() not in available_strategies():
            raise InvalidParameter(f"unknown hash_algorithm {self.hash_algorithm!r}")

        if self.lock_stripes < 1:
            raise InvalidParameter("lock_stripes must be at least 1")

        return True

    def resolve_parameters(self) -> Tuple[int, int]:
        """
        Resolve the (capacity_bits, hash_count) pair to build a filter with.

        Explicit values win. A missing capacity is derived from the expected
        load; a missing hash count then comes from the same derivation, or
        falls back to DEFAULT_HASH_COUNT next to an explicit capacity.
        """
        self.validate()
        if self.capacity_bits is not None:
            return self.capacity_bits, self.hash_count or DEFAULT_HASH_COUNT
        m, k = recommended_parameters(self.expected_elements, self.false_positive_rate)
        return m, self.hash_count or k


def configure_logging(level: str = "INFO", log_file: Optional[str] = None):
    """
    Configure structlog output for the package.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR)
        log_file: Append log lines to this file instead of stderr
    """
    global _log_stream

    level_no = logging.getLevelName(level.upper()) if isinstance(level, str) else None
    if not isinstance(level_no, int):
        raise InvalidParameter(f"unknown log level {level!r}")

    previous = _log_stream
    _log_stream = open(log_file, "a") if log_file else None
    stream = _log_stream or sys.stderr
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=log_file is None),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_no),
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )
    if previous is not None:
        previous.close()
