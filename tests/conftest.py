from __future__ import annotations

import numpy as np
import pytest
from sklearn.linear_model import LinearRegression


class StubPredictor:
    """Fixed-answer predictor that records what it was asked."""

    def __init__(self, seconds: float = 8 * 3600) -> None:
        self.seconds = seconds
        self.calls: list[tuple[float, float, float]] = []

    def predict(self, wake_seconds: float, sleep_hours: float, coffee_cups: float) -> float:
        self.calls.append((wake_seconds, sleep_hours, coffee_cups))
        return self.seconds


def failing_loader():
    raise FileNotFoundError("SleepCalculator.joblib")


@pytest.fixture
def stub_predictor() -> StubPredictor:
    return StubPredictor(seconds=8.2 * 3600)


@pytest.fixture
def reference_regressor() -> LinearRegression:
    # actualSleep grows with estimatedSleep and coffee, barely with wake time
    rng = np.random.default_rng(7)
    wake = rng.uniform(4 * 3600, 12 * 3600, 200)
    sleep = rng.uniform(4, 12, 200)
    coffee = rng.integers(1, 21, 200).astype(float)
    actual = sleep * 3600 + coffee * 300 + wake * 0.01
    features = np.column_stack([wake, sleep, coffee])
    return LinearRegression().fit(features, actual)
