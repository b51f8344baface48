"""
Simulated chooser implementation.

Picks the highest-scoring items of each batch from latent scores with a noise
parameter, for testing and unattended runs.
"""

import random
from collections.abc import Mapping, Sequence

from typing_extensions import override

from ..exceptions import ValidationError
from ..interfaces import Chooser
from ..models import Decision, Item, ItemId, Settings


class SimulatedChooser(Chooser):
    """
    Simulated chooser for testing purposes.

    Ranks each batch by ground truth scores with added noise and picks the top
    ``pick_count`` items, always leaving at least one item of a larger batch
    unpicked. Items without a score count as 0.0.
    """

    def __init__(
        self,
        scores: Mapping[ItemId, float],
        noise: float = 0.0,
        pick_count: int = 1,
        rng: random.Random | None = None,
    ):
        """
        Initialize simulated chooser.

        Args:
            scores: Dict mapping item id to how much the simulated user likes it
            noise: Amount of noise to add (0-1, where 1 = full noise)
            pick_count: How many items to pick per batch
            rng: Random source for the noise (default: a fresh Random)
        """
        if pick_count < 1:
            raise ValidationError(f"pick_count must be at least 1, got {pick_count}")
        self.scores = dict(scores)
        self.noise = max(0.0, min(1.0, noise))  # Clamp to [0, 1]
        self.pick_count = pick_count
        self.rng = rng or random.Random()

    def _noisy_score(self, item: Item) -> float:
        """Score with Gaussian noise scaled by the score magnitude."""
        score = float(self.scores.get(item.id, 0.0))
        if self.noise == 0:
            return score
        return score + self.rng.gauss(0, abs(score) * self.noise)

    @override
    def choose(self, batch: Sequence[Item], settings: Settings) -> Decision:
        """Pick the top-scoring items of the batch."""
        if not batch:
            raise ValidationError("Cannot choose from an empty batch")

        ranked = sorted(batch, key=self._noisy_score, reverse=True)
        # Picking the whole batch is a pass; leave at least one item behind
        count = min(self.pick_count, len(batch) - 1) if len(batch) > 1 else 1
        return Decision(action="pick", picked=[item.id for item in ranked[:count]])
