"""
Prediction entry points for m6A site classification.

Wires the pipeline: records -> feature assembly -> classifier -> decision.

Provides:
- predict_batch / predict_one functional entry points
- M6APredictor, the object form holding classifier and configuration
- BatchPrediction / PredictionResult output containers
"""

import logging
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

import numpy as np
import pandas as pd
import polars as pl

from ..core.config import PredictionConfig
from ..core.errors import (
    UnmatchedCategory,
    UnmatchedCategoryError,
    UnmatchedCategoryWarning,
    summarize_unmatched,
)
from ..core.feature_schema import FeatureSchema
from ..features.feature_assembler import RecordsLike, assemble_features, build_record
from .adapter import InferenceAdapter
from .decision import PROB_COL, STATUS_COL, DecisionMapper
from .model_loader import ClassifierBundle, load_classifier

logger = logging.getLogger(__name__)


@dataclass
class PredictionResult:
    """Prediction for one site: the assembled row plus the two derived values."""
    predicted_m6A_prob: float
    predicted_m6A_status: str
    record: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        out = dict(self.record)
        out[PROB_COL] = self.predicted_m6A_prob
        out[STATUS_COL] = self.predicted_m6A_status
        return out


@dataclass
class BatchPrediction:
    """
    Output of a batch prediction.

    Attributes
    ----------
    frame : pl.DataFrame
        One row per input record (order preserved): the assembled features
        followed by ``predicted_m6A_prob`` and ``predicted_m6A_status``.
    threshold : float
        Decision threshold used.
    unmatched : list of UnmatchedCategory
        Out-of-domain categorical values that were encoded as missing.
    """
    frame: pl.DataFrame
    threshold: float
    unmatched: List[UnmatchedCategory] = field(default_factory=list)

    def __len__(self) -> int:
        return self.frame.height

    def __iter__(self) -> Iterator[PredictionResult]:
        for row in self.frame.iter_rows(named=True):
            prob = row.pop(PROB_COL)
            status = row.pop(STATUS_COL)
            yield PredictionResult(predicted_m6A_prob=prob, predicted_m6A_status=status, record=row)

    def __getitem__(self, index: int) -> PredictionResult:
        row = self.frame.row(index, named=True)
        prob = row.pop(PROB_COL)
        status = row.pop(STATUS_COL)
        return PredictionResult(predicted_m6A_prob=prob, predicted_m6A_status=status, record=row)

    @property
    def probabilities(self) -> np.ndarray:
        return self.frame[PROB_COL].to_numpy()

    @property
    def statuses(self) -> List[str]:
        return self.frame[STATUS_COL].cast(pl.Utf8).to_list()

    @property
    def n_positive(self) -> int:
        positive_label = self.frame.schema[STATUS_COL].categories.to_list()[-1]
        return int((self.frame[STATUS_COL].cast(pl.Utf8) == positive_label).sum())

    def to_pandas(self) -> pd.DataFrame:
        """Convert the output frame; Enum columns become ``pd.Categorical`` with the same levels."""
        data = {}
        for name, dtype in self.frame.schema.items():
            values = self.frame[name]
            if isinstance(dtype, pl.Enum):
                data[name] = pd.Categorical(
                    values.cast(pl.Utf8).to_list(),
                    categories=dtype.categories.to_list()
                )
            else:
                data[name] = values.to_list()
        return pd.DataFrame(data, columns=self.frame.columns)


class M6APredictor:
    """
    m6A site predictor around a trained classifier.

    Parameters
    ----------
    classifier : ClassifierBundle or estimator
        Trained classifier exposing ``predict_proba`` and ``classes_``.
    config : PredictionConfig, optional
        Threshold, labels, unmatched-category policy and chunking.
    schema : FeatureSchema, optional
        Overrides the schema carried by the bundle.

    Examples
    --------
    >>> predictor = M6APredictor.from_path('rf_fit.pkl')
    >>> batch = predictor.predict_batch(pl.read_csv('m6A_input_example.csv'))
    >>> predictor.predict_one(0.45, 'mRNA', 'CDS', 120, 30, 0.8, 'ATGCC')
    {'predicted_m6A_prob': 0.82, 'predicted_m6A_status': 'Positive'}
    """

    def __init__(
        self,
        classifier: Union[ClassifierBundle, Any],
        config: Optional[PredictionConfig] = None,
        schema: Optional[FeatureSchema] = None
    ):
        self.config = config or PredictionConfig()
        self.adapter = InferenceAdapter(
            classifier,
            schema=schema,
            positive_label=self.config.positive_label,
            chunk_size=self.config.chunk_size,
            show_progress=self.config.show_progress
        )

    @classmethod
    def from_path(
        cls,
        model_path: Union[str, Path],
        schema_path: Optional[Union[str, Path]] = None,
        config: Optional[PredictionConfig] = None
    ) -> 'M6APredictor':
        """Load the classifier from disk and build a predictor."""
        return cls(load_classifier(model_path, schema_path=schema_path), config=config)

    @property
    def schema(self) -> FeatureSchema:
        return self.adapter.schema

    def _mapper(self, threshold: Optional[float]) -> DecisionMapper:
        if threshold is not None and threshold != self.config.threshold:
            logger.debug(f"Threshold {threshold} overrides configured {self.config.threshold}")
        return DecisionMapper(
            self.config.threshold if threshold is None else threshold,
            positive_label=self.config.positive_label,
            negative_label=self.config.negative_label
        )

    def _report_unmatched(self, findings: List[UnmatchedCategory], stacklevel: int) -> None:
        if not findings:
            return

        policy = self.config.unmatched_policy
        if policy == 'error':
            raise UnmatchedCategoryError(findings)

        summary = summarize_unmatched(findings)
        if policy == 'warn':
            logger.warning(summary)
            warnings.warn(summary, UnmatchedCategoryWarning, stacklevel=stacklevel + 1)
        else:
            logger.debug(summary)

    def predict_batch(self, records: RecordsLike, threshold: Optional[float] = None) -> BatchPrediction:
        """
        Predict m6A status for every record.

        Parameters
        ----------
        records : pl.DataFrame, pd.DataFrame or sequence of mappings
            Non-empty batch; every record supplies all required fields and
            all nucleotide strings have the schema length.
        threshold : float, optional
            Overrides ``config.threshold`` (0.5 by default).

        Returns
        -------
        BatchPrediction
            One row per input record, input order preserved.

        Raises
        ------
        SchemaError, ShapeMismatch, InferenceSchemaError, UnmatchedCategoryError
            The whole call is aborted; no partial output is returned.
        """
        return self._predict(records, threshold, stacklevel=2)

    def _predict(self, records: RecordsLike, threshold: Optional[float], stacklevel: int) -> BatchPrediction:
        # stacklevel is counted from the caller, the way warnings.warn counts it
        mapper = self._mapper(threshold)

        features = assemble_features(records, schema=self.schema)
        self._report_unmatched(features.unmatched, stacklevel + 1)

        probs = self.adapter.predict_positive_proba(features)
        frame = mapper.annotate(features.frame, probs)

        batch = BatchPrediction(frame=frame, threshold=mapper.threshold, unmatched=features.unmatched)
        logger.info(
            f"Predicted {len(batch)} site(s) at threshold {mapper.threshold}: "
            f"{batch.n_positive} {self.config.positive_label}"
        )
        return batch

    def predict_one(
        self,
        gc_content,
        RNA_type,
        RNA_region,
        exon_length,
        distance_to_junction,
        evolutionary_conservation,
        DNA_5mer,
        threshold: Optional[float] = None
    ) -> Dict[str, Any]:
        """
        Predict a single site given its individual feature values.

        Runs the batch path on a one-record batch.

        Returns
        -------
        dict
            ``{'predicted_m6A_prob': float, 'predicted_m6A_status': str}``
        """
        record = build_record(
            gc_content=gc_content,
            RNA_type=RNA_type,
            RNA_region=RNA_region,
            exon_length=exon_length,
            distance_to_junction=distance_to_junction,
            evolutionary_conservation=evolutionary_conservation,
            DNA_5mer=DNA_5mer
        )
        return self._predict_record(record, threshold, stacklevel=2)

    def _predict_record(
        self,
        record: Dict[str, Any],
        threshold: Optional[float],
        stacklevel: int
    ) -> Dict[str, Any]:
        batch = self._predict([record], threshold, stacklevel + 1)
        return self._mapper(batch.threshold).package(batch.probabilities[0])


def predict_batch(
    classifier: Union[ClassifierBundle, Any],
    records: RecordsLike,
    threshold: Optional[float] = None,
    config: Optional[PredictionConfig] = None
) -> BatchPrediction:
    """
    Predict m6A status for a batch of feature records.

    Parameters
    ----------
    classifier : ClassifierBundle or estimator
        Trained classifier.
    records : pl.DataFrame, pd.DataFrame or sequence of mappings
        Feature records.
    threshold : float, optional
        Decision threshold in [0, 1]; a site is Positive iff its probability
        is strictly greater. Defaults to ``config.threshold`` (0.5).
    config : PredictionConfig, optional
        Remaining pipeline settings.

    Returns
    -------
    BatchPrediction
    """
    return M6APredictor(classifier, config=config)._predict(records, threshold, stacklevel=2)


def predict_one(
    classifier: Union[ClassifierBundle, Any],
    gc_content,
    RNA_type,
    RNA_region,
    exon_length,
    distance_to_junction,
    evolutionary_conservation,
    DNA_5mer,
    threshold: Optional[float] = None,
    config: Optional[PredictionConfig] = None
) -> Dict[str, Any]:
    """
    Predict m6A status for a single site.

    The threshold defaults to ``config.threshold`` (0.5).

    Examples
    --------
    >>> predict_one(rf_fit, 0.45, 'mRNA', 'CDS', 120, 30, 0.8, 'ATGCC')
    {'predicted_m6A_prob': 0.82, 'predicted_m6A_status': 'Positive'}
    """
    record = build_record(
        gc_content=gc_content,
        RNA_type=RNA_type,
        RNA_region=RNA_region,
        exon_length=exon_length,
        distance_to_junction=distance_to_junction,
        evolutionary_conservation=evolutionary_conservation,
        DNA_5mer=DNA_5mer
    )
    return M6APredictor(classifier, config=config)._predict_record(record, threshold, stacklevel=2)
