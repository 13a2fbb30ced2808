"""
Loading and saving of trained m6A classifiers.

A persisted classifier is either:
- a bundle dictionary ``{'type': 'M6AClassifierBundle', 'model': estimator,
  'feature_schema': {...}}`` (preferred: the schema travels with the model), or
- a bare estimator exposing ``predict_proba`` and ``classes_``; the schema is
  then taken from a YAML file or falls back to DEFAULT_SCHEMA.

Supported formats: pickle (``.pkl``, ``.pickle``) and joblib (``.joblib``).
Only load files from trusted sources.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging
import pickle

import joblib

from ..core.feature_schema import DEFAULT_SCHEMA, FeatureSchema

logger = logging.getLogger(__name__)

BUNDLE_TYPE = 'M6AClassifierBundle'
PICKLE_SUFFIXES = ('.pkl', '.pickle')
JOBLIB_SUFFIXES = ('.joblib',)


@dataclass
class ClassifierBundle:
    """A trained classifier together with the feature schema it was trained on."""
    model: Any
    schema: FeatureSchema = field(default_factory=lambda: DEFAULT_SCHEMA)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def classes(self):
        return list(getattr(self.model, 'classes_', []))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': BUNDLE_TYPE,
            'model': self.model,
            'feature_schema': self.schema.to_dict(),
            'metadata': dict(self.metadata),
        }


def _read(path: Path) -> Any:
    suffix = path.suffix.lower()
    if suffix in PICKLE_SUFFIXES:
        with open(path, 'rb') as f:
            return pickle.load(f)
    if suffix in JOBLIB_SUFFIXES:
        return joblib.load(path)
    raise ValueError(
        f"Unsupported model file format: {path.name}. "
        f"Expected one of: {', '.join(PICKLE_SUFFIXES + JOBLIB_SUFFIXES)}"
    )


def load_classifier(
    model_path: Union[str, Path],
    schema_path: Optional[Union[str, Path]] = None
) -> ClassifierBundle:
    """
    Load a trained classifier and its feature schema.

    Parameters
    ----------
    model_path : str or Path
        Pickle or joblib file.
    schema_path : str or Path, optional
        YAML feature schema, used when the file holds a bare estimator
        (and overriding the embedded schema otherwise).

    Returns
    -------
    ClassifierBundle
    """
    model_path = Path(model_path)
    if not model_path.exists():
        raise FileNotFoundError(f"Model file not found: {model_path}")

    data = _read(model_path)

    if isinstance(data, dict) and data.get('type') == BUNDLE_TYPE:
        model = data['model']
        schema = FeatureSchema.from_dict(data.get('feature_schema') or DEFAULT_SCHEMA.to_dict())
        metadata = data.get('metadata') or {}
    else:
        model = data
        schema = DEFAULT_SCHEMA
        metadata = {}
        if schema_path is None:
            logger.warning(
                f"No feature schema stored with {model_path.name}, using default schema "
                f"v{DEFAULT_SCHEMA.version}"
            )

    if schema_path is not None:
        schema = FeatureSchema.from_yaml(schema_path)

    if not hasattr(model, 'predict_proba'):
        raise TypeError(
            f"Loaded object {type(model).__name__} has no predict_proba method"
        )

    logger.info(
        f"Loaded {type(model).__name__} from {model_path} "
        f"(schema v{schema.version}, {len(schema.get_feature_cols())} features)"
    )
    return ClassifierBundle(model=model, schema=schema, metadata=dict(metadata))


def save_classifier(bundle: ClassifierBundle, model_path: Union[str, Path]) -> Path:
    """Persist a classifier bundle (model + schema) to pickle or joblib."""
    model_path = Path(model_path)
    model_path.parent.mkdir(parents=True, exist_ok=True)

    suffix = model_path.suffix.lower()
    if suffix in PICKLE_SUFFIXES:
        with open(model_path, 'wb') as f:
            pickle.dump(bundle.to_dict(), f)
    elif suffix in JOBLIB_SUFFIXES:
        joblib.dump(bundle.to_dict(), model_path)
    else:
        raise ValueError(
            f"Unsupported model file format: {model_path.name}. "
            f"Expected one of: {', '.join(PICKLE_SUFFIXES + JOBLIB_SUFFIXES)}"
        )

    logger.info(f"Saved {type(bundle.model).__name__} bundle to {model_path}")
    return model_path
