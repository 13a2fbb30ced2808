"""
m6A site prediction.

Predicts whether an RNA position is an N6-methyladenosine (m6A) site from
per-site features and a trained classifier.

Quick Start
-----------
>>> from m6a_prediction import load_classifier, predict_batch, predict_one
>>> classifier = load_classifier('rf_fit.pkl')
>>> predict_one(classifier, 0.45, 'mRNA', 'CDS', 120, 30, 0.8, 'ATGCC')
{'predicted_m6A_prob': 0.82, 'predicted_m6A_status': 'Positive'}
"""

__version__ = "0.1.0"

from .core import (
    PredictionConfig,
    load_config,
    FeatureSchema,
    DEFAULT_SCHEMA,
    RNAType,
    RNARegion,
    Nucleotide,
    UNMATCHED,
    M6APredictionError,
    SchemaError,
    ShapeMismatch,
    InferenceSchemaError,
    UnmatchedCategory,
    UnmatchedCategoryError,
    UnmatchedCategoryWarning,
)
from .features import encode_sequences, assemble_features, assemble_single_record
from .inference import (
    ClassifierBundle,
    load_classifier,
    save_classifier,
    InferenceAdapter,
    DecisionMapper,
    apply_threshold,
    BatchPrediction,
    M6APredictor,
    PredictionResult,
    predict_batch,
    predict_one,
)

__all__ = [
    "PredictionConfig",
    "load_config",
    "FeatureSchema",
    "DEFAULT_SCHEMA",
    "RNAType",
    "RNARegion",
    "Nucleotide",
    "UNMATCHED",
    "M6APredictionError",
    "SchemaError",
    "ShapeMismatch",
    "InferenceSchemaError",
    "UnmatchedCategory",
    "UnmatchedCategoryError",
    "UnmatchedCategoryWarning",
    "encode_sequences",
    "assemble_features",
    "assemble_single_record",
    "ClassifierBundle",
    "load_classifier",
    "save_classifier",
    "InferenceAdapter",
    "DecisionMapper",
    "apply_threshold",
    "BatchPrediction",
    "M6APredictor",
    "PredictionResult",
    "predict_batch",
    "predict_one",
]
