"""
Inference for m6A prediction.

- model_loader.py: Load/save classifier bundles (pickle, joblib)
- adapter.py: Schema-checked calls into the trained classifier
- decision.py: Threshold -> Positive/Negative status
- predictor.py: predict_batch / predict_one and M6APredictor
"""

from .model_loader import ClassifierBundle, load_classifier, save_classifier
from .adapter import InferenceAdapter
from .decision import DecisionMapper, apply_threshold, PROB_COL, STATUS_COL
from .predictor import (
    BatchPrediction,
    M6APredictor,
    PredictionResult,
    predict_batch,
    predict_one,
)

__all__ = [
    "ClassifierBundle",
    "load_classifier",
    "save_classifier",
    "InferenceAdapter",
    "DecisionMapper",
    "apply_threshold",
    "PROB_COL",
    "STATUS_COL",
    "BatchPrediction",
    "M6APredictor",
    "PredictionResult",
    "predict_batch",
    "predict_one",
]
