"""Shared fixtures: example records and stub classifiers following the scikit-learn protocol."""

import numpy as np
import pytest


class FixedProbaClassifier:
    """Returns the same positive-class probability for every row."""

    def __init__(self, positive_proba=0.82, classes=('Negative', 'Positive'), feature_names=None):
        self.positive_proba = positive_proba
        self.classes_ = np.array(classes, dtype=object)
        if feature_names is not None:
            self.feature_names_in_ = np.array(feature_names, dtype=object)
        self.calls = []

    def predict_proba(self, X):
        self.calls.append(X)
        pos = list(self.classes_).index('Positive') if 'Positive' in self.classes_ else 1
        proba = np.zeros((len(X), len(self.classes_)))
        proba[:, pos] = self.positive_proba
        proba[:, 1 - pos] = 1.0 - self.positive_proba
        return proba


class GCContentClassifier:
    """Positive probability equals gc_content, so each row gets its own value."""

    classes_ = np.array(['Negative', 'Positive'], dtype=object)

    def predict_proba(self, X):
        gc = np.asarray(X['gc_content'], dtype=float)
        return np.column_stack([1.0 - gc, gc])


@pytest.fixture
def example_record():
    return {
        'gc_content': 0.45,
        'RNA_type': 'mRNA',
        'RNA_region': 'CDS',
        'exon_length': 120,
        'distance_to_junction': 30,
        'evolutionary_conservation': 0.8,
        'DNA_5mer': 'ATGCC',
    }


@pytest.fixture
def example_records(example_record):
    second = dict(example_record, gc_content=0.61, RNA_type='lincRNA', RNA_region="3'UTR", DNA_5mer='GGACT')
    third = dict(example_record, gc_content=0.2, RNA_type='pseudogene', RNA_region='intron', DNA_5mer='TGACA')
    return [example_record, second, third]


@pytest.fixture
def fixed_classifier():
    return FixedProbaClassifier(0.82)


@pytest.fixture
def gc_classifier():
    return GCContentClassifier()
