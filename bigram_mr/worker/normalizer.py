"""
Reduce side of the bigram job: sum counts and turn them into relative
frequencies P(second | first) = count(first, second) / count(first, *).
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from bigram_mr.common.errors import OrderingViolation
from bigram_mr.common.keys import BigramKey

logger = logging.getLogger(__name__)


def order_keys(keys: Iterable[BigramKey]) -> List[BigramKey]:
    """Sort keys so each first word's marginal precedes its pairs"""
    return sorted(keys, key=BigramKey.sort_key)


@dataclass
class MarginalState:
    """Most recent marginal seen by one reduce group"""
    first: Optional[str] = None
    total: Optional[float] = None


class RelativeFrequencyNormalizer:
    """
    Per-partition normalizer.

    Expects keys grouped by first word with the marginal key leading each
    group. Create one instance per reduce group; the marginal state is never
    shared between groups.
    """

    def __init__(self):
        self.state = MarginalState()
        self._closed: Set[str] = set()

    def reduce(self, key: BigramKey, weights: Iterable[float]) -> Tuple[BigramKey, float]:
        """
        Sum the weights of one key and emit its output value

        Returns:
            (key, marginal total) for a marginal key, (key, count / marginal) otherwise

        Raises:
            OrderingViolation: If the key stream is not grouped marginal-first
        """
        total = sum(weights)

        if key.is_marginal:
            if key.first in self._closed or key.first == self.state.first:
                raise OrderingViolation(
                    f"Keys for {key.first!r} are not contiguous: marginal seen twice", key)
            if self.state.first is not None:
                self._closed.add(self.state.first)
            self.state = MarginalState(first=key.first, total=total)
            return key, total

        if self.state.first != key.first:
            raise OrderingViolation(
                f"No marginal for {key.first!r} before pair {key.first!r} {key.second!r}", key)
        if not self.state.total:
            raise OrderingViolation(f"Marginal total for {key.first!r} is zero", key)

        return key, total / self.state.total

    def run(self, grouped: Iterable[Tuple[BigramKey, Iterable[float]]]) -> Iterator[Tuple[BigramKey, float]]:
        for key, weights in grouped:
            yield self.reduce(key, weights)


def normalize(grouped: Iterable[Tuple[BigramKey, Iterable[float]]]) -> Iterator[Tuple[BigramKey, float]]:
    """Normalize one group's ordered (key, weights) stream with a fresh state"""
    return RelativeFrequencyNormalizer().run(grouped)
