"""
Convert raw drop weights into the 0-4 rarity scale.

Two policies exist and they are not interchangeable:

- AbsoluteThresholdClassifier (default): fixed weight thresholds. A weight of
  0 means the item has no data for this drop source, so it is UNKNOWN,
  boss-exclusive or not.
- RelativeWeightClassifier: percentage of the batch maximum, with a
  bucket-tier fallback for zero-weight rows.

Pick one per load; never mix their zero-weight rules.
"""

from abc import ABC, abstractmethod
from typing import List, NamedTuple
from models.base import Rarity
from schemas.weights import ClassifiedWeightRow, RawWeightRow
from core.config import settings
import logging

logger = logging.getLogger(__name__)


class WeightThresholds(NamedTuple):
    """Inclusive upper bounds for the absolute policy"""
    extremely_rare_max: int = 30
    rare_max: int = 1000
    less_common_max: int = 5000


# Percentage-of-max breakpoints for the relative policy
COMMON_PCT = 70
LESS_COMMON_PCT = 35
RARE_PCT = 5


def weight_to_rarity(weight: int, thresholds: WeightThresholds = WeightThresholds()) -> Rarity:
    """
    Absolute thresholds.

    | weight       | rarity          |
    |--------------|-----------------|
    | 0            | UNKNOWN         |
    | 1 - 30       | EXTREMELY_RARE  |
    | 31 - 1000    | RARE            |
    | 1001 - 5000  | LESS_COMMON     |
    | > 5000       | COMMON          |

    The weights sit on a stable normalised scale (Rain of Chaos is around
    121 400 in every league), so fixed bounds hold across league columns.
    """
    if weight <= 0:
        return Rarity.UNKNOWN
    if weight > thresholds.less_common_max:
        return Rarity.COMMON
    if weight > thresholds.rare_max:
        return Rarity.LESS_COMMON
    if weight > thresholds.extremely_rare_max:
        return Rarity.RARE
    return Rarity.EXTREMELY_RARE


def percentage_to_rarity(weight: int, max_weight: int) -> Rarity:
    """Relative policy; UNKNOWN only when the batch maximum is not positive."""
    if max_weight <= 0:
        return Rarity.UNKNOWN

    pct = weight / max_weight * 100
    if pct >= COMMON_PCT:
        return Rarity.COMMON
    if pct >= LESS_COMMON_PCT:
        return Rarity.LESS_COMMON
    if pct >= RARE_PCT:
        return Rarity.RARE
    return Rarity.EXTREMELY_RARE


def bucket_to_fallback_rarity(bucket: int) -> Rarity:
    """Bucket tier used by the relative policy when weight is 0."""
    if 1 <= bucket <= 5:
        return Rarity.COMMON
    if 6 <= bucket <= 12:
        return Rarity.LESS_COMMON
    if 13 <= bucket <= 17:
        return Rarity.RARE
    return Rarity.EXTREMELY_RARE


class RarityClassifier(ABC):
    """Maps a batch of parsed rows to classified rows"""

    name: str = ""

    @abstractmethod
    def classify_batch(self, rows: List[RawWeightRow]) -> List[ClassifiedWeightRow]:
        pass

    @staticmethod
    def _tag(row: RawWeightRow, rarity: Rarity) -> ClassifiedWeightRow:
        return ClassifiedWeightRow(**row.model_dump(), rarity=rarity)


class AbsoluteThresholdClassifier(RarityClassifier):
    name = "absolute"

    def __init__(self, thresholds: WeightThresholds = WeightThresholds()):
        if not (0 < thresholds.extremely_rare_max < thresholds.rare_max < thresholds.less_common_max):
            raise ValueError(f"Thresholds must be positive and strictly increasing: {thresholds}")
        self.thresholds = thresholds

    def classify(self, weight: int) -> Rarity:
        return weight_to_rarity(weight, self.thresholds)

    def classify_batch(self, rows: List[RawWeightRow]) -> List[ClassifiedWeightRow]:
        return [self._tag(row, self.classify(row.weight)) for row in rows]


class RelativeWeightClassifier(RarityClassifier):
    name = "relative"

    def classify_batch(self, rows: List[RawWeightRow]) -> List[ClassifiedWeightRow]:
        max_weight = max((row.weight for row in rows), default=0)

        classified = []
        for row in rows:
            if row.weight > 0 and max_weight > 0:
                rarity = percentage_to_rarity(row.weight, max_weight)
            else:
                rarity = bucket_to_fallback_rarity(row.bucket)
            classified.append(self._tag(row, rarity))
        return classified


def build_classifier(policy: str = None) -> RarityClassifier:
    """Create the classifier selected by RARITY_POLICY."""
    policy = (policy or settings.RARITY_POLICY).lower()

    if policy == AbsoluteThresholdClassifier.name:
        return AbsoluteThresholdClassifier(WeightThresholds(
            extremely_rare_max=settings.RARITY_EXTREMELY_RARE_MAX,
            rare_max=settings.RARITY_RARE_MAX,
            less_common_max=settings.RARITY_LESS_COMMON_MAX,
        ))
    if policy == RelativeWeightClassifier.name:
        return RelativeWeightClassifier()

    raise ValueError(f"Unknown rarity policy: {policy}")
