from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional, Protocol, Sequence, Union

import joblib
import numpy as np
import pandas as pd


logger = logging.getLogger(__name__)

# Default column order; target column is "actualSleep".
FEATURE_NAMES: tuple[str, ...] = ("wake", "estimatedSleep", "coffee")


class SleepModelError(RuntimeError):
    pass


class ModelLoadError(SleepModelError):
    pass


class PredictionError(SleepModelError):
    pass


class SleepPredictor(Protocol):
    def predict(self, wake_seconds: float, sleep_hours: float, coffee_cups: float) -> float:
        ...


PredictorLoader = Callable[[], SleepPredictor]


class RegressionSleepPredictor:
    """Adapts a scikit-learn style regressor to the three-input signature.

    The wrapped estimator receives a single row in ``feature_names`` order and
    must answer with exactly one finite number of seconds. Estimators fitted on
    a DataFrame get a one-row DataFrame so named-column steps keep working.
    """

    def __init__(self, estimator: Any, feature_names: Sequence[str] = FEATURE_NAMES) -> None:
        self._estimator = estimator
        self.feature_names = tuple(feature_names)
        self._named_input = getattr(estimator, "feature_names_in_", None) is not None

    def _build_row(self, wake_seconds: float, sleep_hours: float, coffee_cups: float):
        values = dict(zip(FEATURE_NAMES, (wake_seconds, sleep_hours, coffee_cups)))
        row = [[float(values[name]) for name in self.feature_names]]
        if self._named_input:
            return pd.DataFrame(row, columns=list(self.feature_names))
        return np.array(row, dtype=float)

    def predict(self, wake_seconds: float, sleep_hours: float, coffee_cups: float) -> float:
        features = self._build_row(wake_seconds, sleep_hours, coffee_cups)
        try:
            output = self._estimator.predict(features)
        except Exception as exc:
            raise PredictionError(f"Model rejected input {np.asarray(features).tolist()}: {exc}") from exc
        values = np.ravel(np.asarray(output, dtype=float))
        if values.size != 1:
            raise PredictionError(f"Expected a single prediction, got {values.size}")
        value = float(values[0])
        if not np.isfinite(value):
            raise PredictionError(f"Model returned a non-finite prediction: {value}")
        return value


def _resolve_features(estimator: Any, declared: Optional[Sequence[str]]) -> tuple[str, ...]:
    if not callable(getattr(estimator, "predict", None)):
        raise ModelLoadError(f"{type(estimator).__name__} has no predict() method")
    trained = getattr(estimator, "feature_names_in_", None)
    trained_names = tuple(str(name) for name in trained) if trained is not None else None
    if declared is not None and trained_names is not None and tuple(declared) != trained_names:
        raise ModelLoadError(f"Bundle features {list(declared)} differ from trained {list(trained_names)}")
    names = tuple(declared if declared is not None else trained_names or FEATURE_NAMES)
    if sorted(names) != sorted(FEATURE_NAMES):
        raise ModelLoadError(f"Model features {list(names)} do not match {list(FEATURE_NAMES)}")
    n_features = getattr(estimator, "n_features_in_", None)
    if n_features is not None and n_features != len(FEATURE_NAMES):
        raise ModelLoadError(f"Model expects {n_features} features, not {len(FEATURE_NAMES)}")
    return names


def load_predictor(path: Union[str, Path]) -> RegressionSleepPredictor:
    """Read a joblib artifact: a bare estimator or ``{"model": ..., "features": [...]}``.

    Column order comes from the bundle's ``features``, else from the names the
    estimator was fitted with, else ``FEATURE_NAMES``.
    """
    path = Path(path)
    if not path.is_file():
        raise ModelLoadError(f"Model artifact not found: {path}")
    try:
        artifact = joblib.load(path)
    except Exception as exc:
        raise ModelLoadError(f"Unable to read model artifact {path}: {exc}") from exc

    declared: Optional[Sequence[str]] = None
    estimator = artifact
    if isinstance(artifact, dict):
        if "model" not in artifact:
            raise ModelLoadError(f"Model bundle {path} has no 'model' entry")
        estimator = artifact["model"]
        declared = artifact.get("features")
    feature_names = _resolve_features(estimator, declared)
    logger.debug(f"Loaded sleep model {type(estimator).__name__} from {path} with features {feature_names}")
    return RegressionSleepPredictor(estimator, feature_names)
