"""
Map side of the bigram job: split lines into words and emit adjacent pairs
"""

from typing import Iterator, List, Tuple

from bigram_mr.common.keys import BigramKey, MAX_TOKEN_LENGTH

ONE = 1.0


def tokenize(line: str) -> List[str]:
    """Split on runs of whitespace, dropping empty fragments"""
    return line.split()


def truncate(token: str, max_length: int = MAX_TOKEN_LENGTH) -> str:
    return token[:max_length]


def emit_bigrams(line: str, max_token_length: int = MAX_TOKEN_LENGTH) -> Iterator[Tuple[BigramKey, float]]:
    """
    Emit the bigrams of one line of text.

    For every adjacent pair of words (prev, cur) two records are produced:
    ((prev, cur), 1.0) and the marginal ((prev, "*"), 1.0). Words longer than
    `max_token_length` are silently cut. Lines with fewer than two words
    produce nothing.

    Args:
        line: A single line of input text
        max_token_length: Number of leading characters kept from each word

    Yields:
        (BigramKey, weight) tuples
    """
    prev = None
    for cur in tokenize(line):
        cur = truncate(cur, max_token_length)
        if prev is not None:
            yield BigramKey(prev, cur), ONE
            yield BigramKey.marginal(prev), ONE
        prev = cur


def map_fn(key, line, max_token_length: int = MAX_TOKEN_LENGTH):
    """Map function: the line offset key is not used"""
    return emit_bigrams(line, max_token_length)
