"""
Unit tests for the relative-frequency normalizer
"""

import pytest

from bigram_mr.common.errors import OrderingViolation
from bigram_mr.common.keys import BigramKey
from bigram_mr.worker.combiner import combine
from bigram_mr.worker.normalizer import (
    MarginalState, RelativeFrequencyNormalizer, normalize, order_keys
)
from bigram_mr.worker.tokenizer import emit_bigrams


def _grouped(pairs):
    """Group (key, weight) pairs the way the shuffle does"""
    groups = {}
    for key, weight in pairs:
        groups.setdefault(key, []).append(weight)
    return [(key, groups[key]) for key in order_keys(groups)]


class TestOrderKeys:
    """Tests for marginal-first shuffle ordering"""

    def test_marginal_precedes_pairs_of_same_word(self):
        keys = [BigramKey('a', 'z'), BigramKey('a', '*'), BigramKey('a', 'b')]
        assert order_keys(keys) == [BigramKey('a', '*'), BigramKey('a', 'b'), BigramKey('a', 'z')]

    def test_marginal_precedes_tokens_that_sort_before_star(self):
        keys = [BigramKey('a', '!'), BigramKey('a', '#hash'), BigramKey('a', '*')]
        assert order_keys(keys)[0] == BigramKey('a', '*')

    def test_keys_are_contiguous_by_first_word(self):
        keys = [BigramKey('b', 'x'), BigramKey('a', 'x'), BigramKey('b', '*'), BigramKey('a', '*')]
        firsts = [key.first for key in order_keys(keys)]
        assert firsts == ['a', 'a', 'b', 'b']


class TestNormalizer:
    """Tests for the marginal/ratio state machine"""

    def test_example_sentence(self):
        results = dict(normalize(_grouped(emit_bigrams("the cat sat the cat ran"))))

        assert results[BigramKey('the', '*')] == 2.0
        assert results[BigramKey('cat', '*')] == 2.0
        assert results[BigramKey('sat', '*')] == 1.0
        assert results[BigramKey('the', 'cat')] == pytest.approx(1.0)
        assert results[BigramKey('cat', 'sat')] == pytest.approx(0.5)
        assert results[BigramKey('sat', 'the')] == pytest.approx(1.0)
        assert results[BigramKey('cat', 'ran')] == pytest.approx(0.5)
        assert len(results) == 7

    def test_marginal_is_emitted_unchanged(self):
        normalizer = RelativeFrequencyNormalizer()
        assert normalizer.reduce(BigramKey('a', '*'), [1.0, 2.0, 3.0]) == (BigramKey('a', '*'), 6.0)

    def test_pair_is_divided_by_marginal(self):
        normalizer = RelativeFrequencyNormalizer()
        normalizer.reduce(BigramKey('a', '*'), [4.0])
        key, value = normalizer.reduce(BigramKey('a', 'b'), [1.0, 2.0])
        assert key == BigramKey('a', 'b')
        assert value == pytest.approx(0.75)

    def test_ratios_are_in_unit_interval_for_well_formed_input(self):
        text = "a b a c a b b c c a b a"
        for key, value in normalize(_grouped(emit_bigrams(text))):
            if not key.is_marginal:
                assert 0 < value <= 1

    def test_combined_and_raw_input_agree(self):
        pairs = list(emit_bigrams("x y z x y x z z y x"))
        raw = dict(normalize(_grouped(pairs)))
        combined = dict(normalize(_grouped(combine(pairs))))
        assert raw.keys() == combined.keys()
        for key in raw:
            assert combined[key] == pytest.approx(raw[key])

    def test_state_tracks_latest_marginal(self):
        normalizer = RelativeFrequencyNormalizer()
        normalizer.reduce(BigramKey('a', '*'), [2.0])
        normalizer.reduce(BigramKey('b', '*'), [5.0])
        assert normalizer.state == MarginalState(first='b', total=5.0)

    def test_new_normalizer_starts_empty(self):
        assert RelativeFrequencyNormalizer().state == MarginalState()

    def test_empty_stream(self):
        assert list(normalize([])) == []


class TestOrderingViolations:
    """Tests for rejecting malformed key streams"""

    def test_pair_before_any_marginal(self):
        normalizer = RelativeFrequencyNormalizer()
        with pytest.raises(OrderingViolation) as exc_info:
            normalizer.reduce(BigramKey('a', 'b'), [1.0])
        assert exc_info.value.key == BigramKey('a', 'b')

    def test_pair_after_marginal_of_a_different_word(self):
        normalizer = RelativeFrequencyNormalizer()
        normalizer.reduce(BigramKey('a', '*'), [1.0])
        with pytest.raises(OrderingViolation):
            normalizer.reduce(BigramKey('b', 'c'), [1.0])

    def test_non_contiguous_group(self):
        stream = [
            (BigramKey('a', '*'), [1.0]),
            (BigramKey('b', '*'), [1.0]),
            (BigramKey('a', '*'), [1.0]),
        ]
        with pytest.raises(OrderingViolation):
            list(normalize(stream))

    def test_repeated_marginal_key(self):
        stream = [(BigramKey('a', '*'), [1.0]), (BigramKey('a', '*'), [1.0])]
        with pytest.raises(OrderingViolation):
            list(normalize(stream))

    def test_zero_marginal(self):
        stream = [(BigramKey('a', '*'), [0.0]), (BigramKey('a', 'b'), [1.0])]
        with pytest.raises(OrderingViolation):
            list(normalize(stream))

    def test_plain_tuple_order_is_rejected_when_token_sorts_before_star(self):
        stream = [(BigramKey('a', '!'), [1.0]), (BigramKey('a', '*'), [1.0])]
        with pytest.raises(OrderingViolation):
            list(normalize(stream))
