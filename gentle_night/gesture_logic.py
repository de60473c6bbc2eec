"""
Gesture Logic Module - Grip Detection
=====================================
Classifies a frame's hand predictions as a closed fist (grip) or an open hand.

A fist pulls all landmarks close together, so their mean squared distance
from the centroid is small. An open hand spreads them out. The threshold is
tied to the detector's pixel scale on a typical webcam frame.
"""

import os
from typing import List, Optional, Sequence, Tuple
from dataclasses import dataclass


# Empirical dispersion threshold (pixel units squared)
GRIP_THRESHOLD = 5000.0


@dataclass
class HandPrediction:
    """
    Landmarks for one detected hand in a single frame.

    Attributes:
        landmarks: Ordered (x, y) keypoints in pixel coordinates
        handedness: 'Left' or 'Right' when known
    """
    landmarks: Sequence[Tuple[float, float]]
    handedness: str = ""


def mean_squared_errors(
    predictions: Sequence[HandPrediction],
    independent_hands: bool = False
) -> List[float]:
    """
    Compute the dispersion statistic for every prediction in a batch.

    By default the coordinate and error sums run across the whole batch:
    later hands see a centroid and an error total that include the hands
    before them, and the centroid divides by the batch size times the
    current hand's landmark count. With ``independent_hands`` each hand is
    measured against its own centroid.

    Args:
        predictions: Hand predictions for this frame
        independent_hands: Reset the running sums for every hand

    Returns:
        One mean squared error per prediction, in batch order
    """
    errors = []
    total_x = 0.0
    total_y = 0.0
    total_error = 0.0
    batch_size = len(predictions)

    for prediction in predictions:
        count = len(prediction.landmarks)
        if count == 0:
            raise ValueError("hand prediction has no landmarks")

        if independent_hands:
            total_x = total_y = total_error = 0.0
            divisor = count
        else:
            divisor = batch_size * count

        for x, y in prediction.landmarks:
            total_x += float(x)
            total_y += float(y)

        center_x = total_x / divisor
        center_y = total_y / divisor

        for x, y in prediction.landmarks:
            error_x = float(x) - center_x
            error_y = float(y) - center_y
            total_error += error_x * error_x + error_y * error_y

        errors.append(total_error / count)

    return errors


def classify_grip(
    predictions: Sequence[HandPrediction],
    previous: bool,
    threshold: float = GRIP_THRESHOLD,
    independent_hands: bool = False
) -> bool:
    """
    Reduce a prediction batch to a single grip signal.

    An empty batch leaves the previous signal unchanged. Otherwise the
    last hand in the batch decides.
    """
    errors = mean_squared_errors(predictions, independent_hands)
    if not errors:
        return previous
    return bool(errors[-1] < threshold)


class GripClassifier:
    """
    Holds the grip signal across frames.

    The signal is recomputed from whatever predictions are available each
    frame, with no smoothing or hysteresis, so it may flip every frame.
    """

    def __init__(
        self,
        threshold: float = GRIP_THRESHOLD,
        independent_hands: bool = False,
        verbose: Optional[bool] = None
    ):
        """
        Initialize the classifier.

        Args:
            threshold: Mean squared error below which a hand counts as a fist
            independent_hands: Measure every hand against its own centroid
            verbose: Print each error; defaults to the GENTLE_NIGHT_DEBUG env var
        """
        self.threshold = threshold
        self.independent_hands = independent_hands
        if verbose is None:
            verbose = bool(os.environ.get("GENTLE_NIGHT_DEBUG"))
        self.verbose = verbose

        self.is_fist = False
        self.last_error: Optional[float] = None

    def update(self, predictions: Sequence[HandPrediction]) -> bool:
        """
        Classify this frame's predictions and return the grip signal.
        """
        errors = mean_squared_errors(predictions, self.independent_hands)

        for prediction, error in zip(predictions, errors):
            self.is_fist = bool(error < self.threshold)
            self.last_error = error
            if self.verbose:
                hand = prediction.handedness or "hand"
                print(f"[DEBUG] Mean squared error ({hand}): {error:.1f}")

        return self.is_fist

    def reset(self):
        """Reset to the open-hand state."""
        self.is_fist = False
        self.last_error = None
