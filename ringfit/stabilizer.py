"""
Temporal stabilization of per-frame diameter samples.

This module handles:
- Median-anchored outlier rejection over a rolling window
- A long-lived, session-owned sample window

A single mis-detected frame (e.g. a 40mm spike in a 17mm cluster) is
dropped by the median tolerance test, so it cannot drag the average
outside the cluster's own spread.
"""

import logging
import math
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, List

import numpy as np

from .geometry_constants import NO_MEASUREMENT

logger = logging.getLogger(__name__)

# Default rolling window length (frames)
DEFAULT_WINDOW = 8

# Default outlier tolerance as a fraction of the window median
DEFAULT_TOLERANCE_PCT = 0.12


@dataclass(frozen=True)
class StabilizedMeasurement:
    diameter_mm: float
    circumference_mm: float
    sample_count: int

    def to_dict(self):
        return {
            "diameter_mm": round(self.diameter_mm, 3),
            "circumference_mm": round(self.circumference_mm, 3),
            "sample_count": self.sample_count,
        }


def stabilize_measurements(
    values: Iterable[float],
    tolerance_pct: float = DEFAULT_TOLERANCE_PCT,
    window: int = DEFAULT_WINDOW,
) -> float:
    """
    Robust average of the most recent samples.

    Args:
        values: Samples in arrival order
        tolerance_pct: Samples further than tolerance_pct * median from the
            median are rejected
        window: Number of most recent samples to consider

    Returns:
        Mean of the retained samples; mean of the whole window if every
        sample was rejected; 0.0 for an empty window
    """
    recent = np.asarray(list(values), dtype=np.float64)[-window:] if window > 0 else np.array([])
    if recent.size == 0:
        return 0.0

    median = float(np.median(recent))
    keep = np.abs(recent - median) <= median * tolerance_pct
    base = recent[keep] if np.any(keep) else recent

    rejected = int(recent.size - np.count_nonzero(keep))
    if rejected:
        logger.debug(f"Rejected {rejected}/{recent.size} samples around median {median:.2f}")

    return float(np.mean(base))


class Stabilizer:
    """
    Bounded FIFO of raw diameter samples with a robust read-out.

    Create one per tracking session and keep it for the session's lifetime;
    the window only works if it survives across frames.
    """

    def __init__(self, window: int = DEFAULT_WINDOW, tolerance_pct: float = DEFAULT_TOLERANCE_PCT):
        if window < 1:
            raise ValueError(f"Stabilizer window must be >= 1, got {window}")
        if tolerance_pct < 0:
            raise ValueError(f"Tolerance must be non-negative, got {tolerance_pct}")
        self.window = int(window)
        self.tolerance_pct = float(tolerance_pct)
        self._samples: Deque[float] = deque(maxlen=self.window)

    def push(self, sample: float) -> bool:
        """
        Add a sample. The 0.0 "no measurement" sentinel and non-finite
        values are ignored.

        Returns:
            True if the sample was stored
        """
        if sample is None or not math.isfinite(sample) or sample <= NO_MEASUREMENT:
            return False
        self._samples.append(float(sample))
        return True

    def value(self) -> float:
        return stabilize_measurements(self._samples, self.tolerance_pct, self.window)

    def measurement(self) -> StabilizedMeasurement:
        diameter = self.value()
        return StabilizedMeasurement(diameter, diameter * math.pi, len(self._samples))

    @property
    def samples(self) -> List[float]:
        return list(self._samples)

    def reset(self) -> None:
        self._samples.clear()

    def __len__(self) -> int:
        return len(self._samples)
