"""
Seedable source of independent standard normal draws.

Every simulation receives a RandomNormalSource explicitly; nothing reads
numpy's global random state. Parallel workers get independent child
streams through spawn(), which derives children from the parent's
numpy SeedSequence, so a seed reproduces the same run no matter how the
children are scheduled.
"""

from typing import List, Optional, Sequence, Union

import numpy as np

from option_engine.backend.core.errors import require_count


class RandomNormalSource:
    """Wraps a numpy Generator (PCG64) seeded from a SeedSequence."""

    def __init__(self, seed: Optional[Union[int, np.random.SeedSequence]] = None):
        if isinstance(seed, np.random.SeedSequence):
            self._seed_sequence = seed
        else:
            self._seed_sequence = np.random.SeedSequence(seed)
        self._rng = np.random.default_rng(self._seed_sequence)

    @property
    def entropy(self):
        """Root entropy; pass it back as the seed to replay an unseeded run."""
        return self._seed_sequence.entropy

    def standard_normal(self, size: Union[int, Sequence[int]]) -> np.ndarray:
        return self._rng.standard_normal(size)

    def spawn(self, n: int) -> List['RandomNormalSource']:
        """n independent child sources."""
        n = require_count('n', n)
        return [RandomNormalSource(child) for child in self._seed_sequence.spawn(n)]

    def __repr__(self) -> str:
        return f"RandomNormalSource(entropy={self.entropy})"
