"""
Sizing formulas relating bit count, hash count, and false positive rate.

For n elements inserted into a filter of m bits with k hash functions the
expected false positive probability is

    p = (1 - e^(-k*n/m))^k

which is minimized at k = (m/n) * ln 2. Solving for m at that k gives

    m = -n * ln(p) / (ln 2)^2
"""
import math
from typing import Tuple

from bloom_engine.errors import InvalidParameter


def false_positive_rate(m: int, k: int, n: int) -> float:
    """
    Expected false positive probability after n insertions.

    Args:
        m: Number of bits
        k: Number of hash positions per element
        n: Number of elements inserted

    Returns:
        Probability in [0, 1]
    """
    if m <= 0 or k <= 0:
        raise InvalidParameter("m and k must be positive")
    if n < 0:
        raise InvalidParameter("n must not be negative")
    if n == 0:
        return 0.0
    return (1 - math.exp(-k * n / m)) ** k


def optimal_bit_count(n: int, p: float) -> int:
    """Calculate the bit count that reaches rate p for n elements."""
    if n <= 0:
        raise InvalidParameter("expected_n must be positive")
    if not 0 < p < 1:
        raise InvalidParameter("target_p must be between 0 and 1")
    return max(1, int(math.ceil(-n * math.log(p) / (math.log(2) ** 2))))


def optimal_hash_count(m: int, n: int) -> int:
    """Calculate the hash count minimizing false positives for m bits and n elements."""
    if m <= 0:
        raise InvalidParameter("m must be positive")
    if n <= 0:
        raise InvalidParameter("n must be positive")
    return max(1, int(round((m / n) * math.log(2))))


def recommended_parameters(expected_n: int, target_p: float) -> Tuple[int, int]:
    """
    Recommend filter parameters for an expected load.

    Args:
        expected_n: Number of elements expected to be inserted
        target_p: Desired false positive probability, strictly between 0 and 1

    Returns:
        (capacity_bits, hash_count)

    Raises:
        InvalidParameter: If expected_n or target_p is out of range
    """
    m = optimal_bit_count(expected_n, target_p)
    k = optimal_hash_count(m, expected_n)
    return m, k
