"""
Key types for bigram counting.

A BigramKey is an ordered (first, second) word pair. The reserved second
element "*" marks the marginal key of `first`: the number of bigrams that
start with `first`. The marker shares the token type, so a literal "*" in the
input is indistinguishable from the marginal.
"""

from typing import NamedTuple, Tuple

MARGINAL = "*"
MAX_TOKEN_LENGTH = 100


class BigramKey(NamedTuple):
    """Ordered pair of words, or a word and the marginal marker"""

    first: str
    second: str

    @classmethod
    def marginal(cls, first: str) -> "BigramKey":
        return cls(first, MARGINAL)

    @property
    def is_marginal(self) -> bool:
        return self.second == MARGINAL

    def sort_key(self) -> Tuple[str, int, str]:
        """
        Shuffle ordering: grouped by first word, marginal ahead of every pair.

        Plain tuple ordering is not enough since tokens such as "!" or "#"
        sort before "*".
        """
        return (self.first, 0 if self.is_marginal else 1, self.second)

    def to_list(self) -> list:
        return [self.first, self.second]

    @classmethod
    def from_list(cls, value) -> "BigramKey":
        first, second = value
        if not isinstance(first, str) or not isinstance(second, str):
            raise ValueError(f"Bigram key elements must be strings: {value!r}")
        if not second:
            raise ValueError(f"Bigram key has an empty second element: {value!r}")
        return cls(first, second)
