"""
Inference adapter between the assembled feature matrix and a trained classifier.

The classifier is treated as an opaque, frozen capability following the
scikit-learn protocol (``predict_proba`` + ``classes_``). Before it is called
the assembled matrix is checked against the schema the classifier was trained
on (names, numeric types, categorical levels and their order); any mismatch is
a caller error raised as InferenceSchemaError. Nothing is coerced here.
"""

from typing import Any, List, Optional, Union
import logging

import numpy as np
import pandas as pd
import polars as pl
from tqdm import tqdm

from ..core.errors import InferenceSchemaError
from ..core.feature_schema import DEFAULT_SCHEMA, FeatureSchema
from ..features.feature_assembler import AssembledFeatures
from .model_loader import ClassifierBundle

logger = logging.getLogger(__name__)


class InferenceAdapter:
    """
    Call a trained classifier on an assembled feature matrix.

    Parameters
    ----------
    classifier : ClassifierBundle or estimator
        Bundle (estimator + training schema) or a bare estimator.
    schema : FeatureSchema, optional
        Training schema. Overrides the bundle schema; defaults to
        DEFAULT_SCHEMA for bare estimators.
    positive_label : str
        Class whose probability is returned.
    chunk_size : int, optional
        Call ``predict_proba`` on chunks of this many rows.
    show_progress : bool
        Show a progress bar over chunks.

    Examples
    --------
    >>> adapter = InferenceAdapter(load_classifier('rf_fit.pkl'))
    >>> probs = adapter.predict_positive_proba(assemble_features(records))
    """

    def __init__(
        self,
        classifier: Union[ClassifierBundle, Any],
        schema: Optional[FeatureSchema] = None,
        positive_label: str = 'Positive',
        chunk_size: Optional[int] = None,
        show_progress: bool = False
    ):
        if isinstance(classifier, ClassifierBundle):
            self.model = classifier.model
            bundle_schema = classifier.schema
        else:
            self.model = classifier
            bundle_schema = None

        if not hasattr(self.model, 'predict_proba'):
            raise TypeError(
                f"Classifier {type(self.model).__name__} has no predict_proba method"
            )

        self.schema = schema or bundle_schema or DEFAULT_SCHEMA
        self.positive_label = positive_label
        self.chunk_size = chunk_size
        self.show_progress = show_progress

        logger.info(
            f"InferenceAdapter for {type(self.model).__name__} "
            f"(schema v{self.schema.version}, positive label '{positive_label}')"
        )

    @property
    def classes(self) -> List[str]:
        return [str(c) for c in getattr(self.model, 'classes_', [])]

    def _column_order(self) -> List[str]:
        names = getattr(self.model, 'feature_names_in_', None)
        if names is not None:
            return [str(n) for n in names]
        return self.schema.get_feature_cols()

    def validate(self, features: Union[AssembledFeatures, pl.DataFrame]) -> List[str]:
        """
        Structurally compare a feature matrix with the classifier schema.

        Returns
        -------
        list of str
            Issues found; empty if the matrix can be passed to the classifier.
        """
        issues = []

        if isinstance(features, AssembledFeatures):
            frame = features.frame
            issues.extend(
                f"matrix was assembled with a different schema: {d}"
                for d in self.schema.diff(features.schema)
            )
        else:
            frame = features

        levels = self.schema.get_all_categorical_levels()
        for col in self.schema.get_feature_cols():
            if col not in frame.columns:
                issues.append(f"missing feature column '{col}'")
                continue

            dtype = frame.schema[col]
            if col in levels:
                expected = list(levels[col])
                if not isinstance(dtype, pl.Enum):
                    issues.append(
                        f"column '{col}' must be categorical with levels {expected}, got {dtype}"
                    )
                elif dtype.categories.to_list() != expected:
                    issues.append(
                        f"column '{col}' has levels {dtype.categories.to_list()}, "
                        f"classifier expects {expected}"
                    )
            elif not dtype.is_numeric():
                issues.append(f"column '{col}' must be numeric, got {dtype}")

        fitted_names = getattr(self.model, 'feature_names_in_', None)
        if fitted_names is not None:
            fitted = {str(n) for n in fitted_names}
            provided = set(self.schema.get_feature_cols())
            if fitted != provided:
                issues.append(
                    f"classifier was fitted on features {sorted(fitted)}, "
                    f"schema provides {sorted(provided)}"
                )

        if not hasattr(self.model, 'classes_'):
            issues.append("classifier exposes no classes_")
        elif self.positive_label not in self.classes:
            issues.append(
                f"positive label '{self.positive_label}' not among classifier classes {self.classes}"
            )

        return issues

    def design_matrix(self, frame: pl.DataFrame) -> pd.DataFrame:
        """pandas matrix in classifier column order; categoricals keep the schema levels."""
        levels = self.schema.get_all_categorical_levels()
        data = {}
        for col in self._column_order():
            if col in levels:
                data[col] = pd.Categorical(
                    frame[col].cast(pl.Utf8).to_list(),
                    categories=list(levels[col])
                )
            else:
                data[col] = frame[col].cast(pl.Float64).to_numpy()
        return pd.DataFrame(data, columns=self._column_order())

    def predict_positive_proba(self, features: Union[AssembledFeatures, pl.DataFrame]) -> np.ndarray:
        """
        Probability of the positive class for every row.

        Parameters
        ----------
        features : AssembledFeatures or pl.DataFrame
            Assembled feature matrix.

        Returns
        -------
        np.ndarray
            Shape (n_rows,), aligned with the input rows, values in [0, 1].

        Raises
        ------
        InferenceSchemaError
            If the matrix does not match the classifier schema or the
            classifier output is malformed.
        """
        issues = self.validate(features)
        if issues:
            raise InferenceSchemaError(issues)

        frame = features.frame if isinstance(features, AssembledFeatures) else features
        X = self.design_matrix(frame)
        n_rows = len(X)
        positive_idx = self.classes.index(self.positive_label)

        step = self.chunk_size or max(n_rows, 1)
        starts = range(0, n_rows, step)
        if self.show_progress:
            starts = tqdm(starts, desc="Predicting m6A sites")

        chunks = []
        for start in starts:
            part = X.iloc[start:start + step]
            try:
                proba = self.model.predict_proba(part)
            except (ValueError, KeyError) as e:
                raise InferenceSchemaError(
                    [f"classifier rejected the feature matrix: {e}"]
                ) from e

            proba = np.asarray(proba, dtype=float)
            if proba.ndim != 2 or proba.shape != (len(part), len(self.classes)):
                raise InferenceSchemaError([
                    f"predict_proba returned shape {proba.shape}, "
                    f"expected ({len(part)}, {len(self.classes)})"
                ])
            chunks.append(proba[:, positive_idx])

        probs = np.concatenate(chunks) if chunks else np.empty(0, dtype=float)

        if np.isnan(probs).any() or (probs < 0).any() or (probs > 1).any():
            raise InferenceSchemaError(["classifier returned probabilities outside [0, 1]"])

        logger.debug(f"Scored {n_rows} row(s); mean positive probability {probs.mean() if n_rows else float('nan'):.3f}")
        return probs
