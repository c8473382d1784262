"""
Map-side pre-aggregation.

Summing weights per exact key before the shuffle reduces intermediate data.
Addition is associative and commutative, so combining any subset of the
records, any number of times, leaves the final counts unchanged. The combiner
never divides: normalization needs the complete marginal, which only the
reduce side has.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Tuple

from bigram_mr.common.keys import BigramKey


def combine(pairs: Iterable[Tuple[BigramKey, float]]) -> List[Tuple[BigramKey, float]]:
    """
    Sum weights sharing the same key

    Returns:
        List of (key, total) tuples in order of each key's first appearance
    """
    totals = defaultdict(float)
    for key, weight in pairs:
        totals[key] += weight
    return list(totals.items())


def combine_partitions(intermediate: Dict[int, list]) -> Dict[int, list]:
    """
    Apply the combiner within each partition of a map task's output

    Args:
        intermediate: Dictionary mapping partition_id to list of (key, weight) pairs

    Returns:
        Dictionary with the same partitions and combined pairs
    """
    return {
        partition_id: combine(kv_pairs)
        for partition_id, kv_pairs in intermediate.items()
    }
