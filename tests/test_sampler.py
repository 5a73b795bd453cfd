from __future__ import annotations

import random
from collections import Counter

import pytest

from review_sentiment.errors import EmptyCorpusError
from review_sentiment.sampler import ReviewSampler


def test_sample_returns_member_and_remembers_index():
    corpus = ("a", "b", "c")
    sampler = ReviewSampler(random.Random(7))
    for _ in range(50):
        picked = sampler.sample(corpus)
        assert picked.text in corpus
        assert corpus[picked.index] == picked.text
        assert sampler.last_index == picked.index


def test_sample_covers_all_indices_roughly_uniformly():
    corpus = ("a", "b", "c", "d")
    sampler = ReviewSampler(random.Random(1234))
    counts = Counter(sampler.sample(corpus).index for _ in range(8000))

    assert set(counts) == {0, 1, 2, 3}
    for c in counts.values():
        assert 1700 < c < 2300


def test_duplicates_are_allowed():
    sampler = ReviewSampler(random.Random(0))
    assert sampler.sample(["same", "same"]).text == "same"


def test_empty_corpus_raises():
    sampler = ReviewSampler()
    with pytest.raises(EmptyCorpusError, match="No reviews loaded"):
        sampler.sample(())
    assert sampler.last_index is None
