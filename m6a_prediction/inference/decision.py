"""
Decision mapping: positive-class probability -> binary m6A status.

A site is called Positive iff its probability is STRICTLY greater than the
threshold; a probability equal to the threshold is Negative.
"""

from typing import Any, Dict, Sequence, Union

import numpy as np
import polars as pl

from ..core.config import validate_threshold
from ..core.feature_schema import STATUS_LEVELS

PROB_COL = 'predicted_m6A_prob'
STATUS_COL = 'predicted_m6A_status'


def apply_threshold(
    probabilities: Union[Sequence[float], np.ndarray],
    threshold: float = 0.5,
    positive_label: str = STATUS_LEVELS[1],
    negative_label: str = STATUS_LEVELS[0]
) -> np.ndarray:
    """
    Map probabilities to status labels.

    Parameters
    ----------
    probabilities : array-like of float
        Positive-class probabilities.
    threshold : float
        Decision threshold in [0, 1].

    Returns
    -------
    np.ndarray
        Array of labels, same length as *probabilities*.

    Examples
    --------
    >>> apply_threshold([0.82, 0.5, 0.1]).tolist()
    ['Positive', 'Negative', 'Negative']
    """
    threshold = validate_threshold(threshold)
    probs = np.asarray(probabilities, dtype=float)
    return np.where(probs > threshold, positive_label, negative_label).astype(object)


class DecisionMapper:
    """Attach probability and status to assembled rows, or package a single result."""

    def __init__(
        self,
        threshold: float = 0.5,
        positive_label: str = STATUS_LEVELS[1],
        negative_label: str = STATUS_LEVELS[0]
    ):
        self.threshold = validate_threshold(threshold)
        self.positive_label = positive_label
        self.negative_label = negative_label

    @property
    def status_dtype(self) -> pl.Enum:
        return pl.Enum([self.negative_label, self.positive_label])

    def labels(self, probabilities) -> np.ndarray:
        return apply_threshold(
            probabilities,
            self.threshold,
            positive_label=self.positive_label,
            negative_label=self.negative_label
        )

    def annotate(self, frame: pl.DataFrame, probabilities) -> pl.DataFrame:
        """
        Append ``predicted_m6A_prob`` and ``predicted_m6A_status`` to *frame*.

        Rows are matched positionally; *probabilities* must have one value per row.
        """
        probs = np.asarray(probabilities, dtype=float)
        if probs.shape != (frame.height,):
            raise ValueError(
                f"Got {probs.shape[0] if probs.ndim else 0} probabilities for {frame.height} rows"
            )

        return frame.with_columns([
            pl.Series(PROB_COL, probs, dtype=pl.Float64),
            pl.Series(STATUS_COL, self.labels(probs).tolist(), dtype=pl.Utf8).cast(self.status_dtype),
        ])

    def package(self, probability: float) -> Dict[str, Any]:
        """Standalone result for a single record."""
        probability = float(probability)
        return {
            PROB_COL: probability,
            STATUS_COL: str(self.labels([probability])[0]),
        }
