"""
Blend weights shared by every hybrid recommendation call
"""
import logging
import threading
from dataclasses import dataclass, asdict
from typing import Dict

logger = logging.getLogger(__name__)

# Rounding applied after each adjustment so repeated steps do not drift
_PRECISION = 10


@dataclass(frozen=True)
class WeightSnapshot:
    """Immutable view of the weights captured at the start of a request"""
    content: float
    collaborative: float
    popularity: float
    diversity: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


class EngineWeights:
    """
    Mutable blend weights with clamping bounds and an adjustment step

    Readers take a snapshot(); rebalance() is the only mutator and runs
    under a lock, so a snapshot never mixes values from two adjustments.
    The diversity weight is carried for configuration compatibility only:
    diversity is applied through the blender's penalty factors.
    """

    def __init__(
        self,
        content: float = 0.6,
        collaborative: float = 0.4,
        popularity: float = 0.1,
        diversity: float = 0.1,
        min_weight: float = 0.2,
        max_weight: float = 0.8,
        step: float = 0.1
    ):
        if min_weight > max_weight:
            raise ValueError("min_weight must not exceed max_weight")
        if step < 0:
            raise ValueError("step must be non-negative")

        self.min_weight = min_weight
        self.max_weight = max_weight
        self.step = step

        self._lock = threading.Lock()
        self._content = content
        self._collaborative = collaborative
        self._popularity = popularity
        self._diversity = diversity

    @property
    def content(self) -> float:
        return self._content

    @property
    def collaborative(self) -> float:
        return self._collaborative

    @property
    def popularity(self) -> float:
        return self._popularity

    @property
    def diversity(self) -> float:
        return self._diversity

    def snapshot(self) -> WeightSnapshot:
        """Capture a consistent copy of all weights"""
        with self._lock:
            return WeightSnapshot(
                content=self._content,
                collaborative=self._collaborative,
                popularity=self._popularity,
                diversity=self._diversity
            )

    def rebalance(self, content_precision: float, collaborative_precision: float) -> WeightSnapshot:
        """
        Hill-climbing step towards the engine with the better precision

        Args:
            content_precision: Observed precision of content-based results
            collaborative_precision: Observed precision of collaborative results

        Returns:
            Snapshot of the weights after the adjustment
        """
        with self._lock:
            if content_precision > collaborative_precision:
                self._content = self._clamp(self._content + self.step)
                self._collaborative = self._clamp(self._collaborative - self.step)
            else:
                self._collaborative = self._clamp(self._collaborative + self.step)
                self._content = self._clamp(self._content - self.step)

            result = WeightSnapshot(
                content=self._content,
                collaborative=self._collaborative,
                popularity=self._popularity,
                diversity=self._diversity
            )

        logger.info(
            "Weights rebalanced (content_precision=%.4f, collaborative_precision=%.4f): "
            "content=%.2f collaborative=%.2f",
            content_precision, collaborative_precision, result.content, result.collaborative
        )
        return result

    def _clamp(self, value: float) -> float:
        return round(min(self.max_weight, max(self.min_weight, value)), _PRECISION)

    def __repr__(self) -> str:
        return (
            f"EngineWeights(content={self._content}, collaborative={self._collaborative}, "
            f"popularity={self._popularity}, diversity={self._diversity})"
        )
