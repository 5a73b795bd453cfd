from __future__ import annotations

import random
from typing import Optional, Sequence

from review_sentiment.errors import EmptyCorpusError
from review_sentiment.models import SampledReview


class ReviewSampler:
    """Uniform random pick from the corpus. Remembers the last index for display."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()
        self.last_index: Optional[int] = None

    def sample(self, corpus: Sequence[str]) -> SampledReview:
        """
        Raises:
            EmptyCorpusError: if nothing has been loaded
        """
        if not corpus:
            raise EmptyCorpusError("No reviews loaded. Please load reviews first.")
        idx = self._rng.randrange(len(corpus))
        self.last_index = idx
        return SampledReview(index=idx, text=corpus[idx])
