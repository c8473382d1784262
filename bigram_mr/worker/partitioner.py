"""
Routes bigram keys to reduce partitions by their first word
"""

import zlib

from bigram_mr.common.keys import BigramKey

HASH_MASK = 0x7FFFFFFF


def stable_hash(text: str) -> int:
    """
    Non-negative 31-bit hash of a string.

    The built-in hash() is salted per interpreter, so partition assignments
    would differ between processes; CRC-32 does not.
    """
    return zlib.crc32(text.encode('utf-8')) & HASH_MASK


def partition(key: BigramKey, num_groups: int) -> int:
    """
    Pick the reduce partition for a key.

    Only the first word is hashed, so a word's marginal and all of its pairs
    meet in the same reduce task.
    """
    if num_groups < 1:
        raise ValueError(f"Number of partitions must be positive, got {num_groups}")
    return stable_hash(key.first) % num_groups
