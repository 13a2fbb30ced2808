import warnings

import pandas as pd
import polars as pl
import pytest

from m6a_prediction.core.config import PredictionConfig
from m6a_prediction.core.errors import (
    InferenceSchemaError,
    SchemaError,
    ShapeMismatch,
    UnmatchedCategoryError,
    UnmatchedCategoryWarning,
)
from m6a_prediction.inference.decision import PROB_COL, STATUS_COL
from m6a_prediction.inference.model_loader import ClassifierBundle, save_classifier
from m6a_prediction.inference.predictor import (
    BatchPrediction,
    M6APredictor,
    PredictionResult,
    predict_batch,
    predict_one,
)
from m6a_prediction.tests.conftest import FixedProbaClassifier


def test_example_record_positive(fixed_classifier, example_record):
    result = predict_one(fixed_classifier, **example_record)
    assert result == {PROB_COL: pytest.approx(0.82), STATUS_COL: 'Positive'}


def test_example_record_at_threshold_is_negative(example_record):
    result = predict_one(FixedProbaClassifier(0.5), **example_record)
    assert result[STATUS_COL] == 'Negative'


def test_threshold_argument(fixed_classifier, example_record):
    assert predict_one(fixed_classifier, **example_record, threshold=0.9)[STATUS_COL] == 'Negative'
    with pytest.raises(ValueError):
        predict_one(fixed_classifier, **example_record, threshold=1.2)


def test_single_matches_batch(gc_classifier, example_records):
    batch = predict_batch(gc_classifier, example_records, threshold=0.4)
    for record, result in zip(example_records, batch):
        single = predict_one(gc_classifier, **{k: record[k] for k in record}, threshold=0.4)
        assert single[PROB_COL] == pytest.approx(result.predicted_m6A_prob)
        assert single[STATUS_COL] == result.predicted_m6A_status


def test_batch_preserves_order_and_rows(gc_classifier, example_records):
    batch = predict_batch(gc_classifier, example_records)

    assert isinstance(batch, BatchPrediction)
    assert len(batch) == 3
    assert batch.threshold == 0.5
    assert batch.probabilities.tolist() == pytest.approx([0.45, 0.61, 0.2])
    assert batch.statuses == ['Negative', 'Positive', 'Negative']
    assert batch.n_positive == 1
    assert batch.frame.columns[-2:] == [PROB_COL, STATUS_COL]
    assert batch.frame['DNA_5mer'].to_list() == ['ATGCC', 'GGACT', 'TGACA']


def test_iteration_yields_results(gc_classifier, example_records):
    batch = predict_batch(gc_classifier, example_records)
    results = list(batch)

    assert all(isinstance(r, PredictionResult) for r in results)
    assert results[1].record['RNA_type'] == 'lincRNA'
    assert results[1].record['nt_pos1'] == 'G'
    assert batch[1].to_dict()[STATUS_COL] == 'Positive'
    assert PROB_COL not in results[0].record


def test_to_pandas_keeps_levels(gc_classifier, example_records):
    df = predict_batch(gc_classifier, example_records).to_pandas()

    assert isinstance(df, pd.DataFrame)
    assert list(df[STATUS_COL].cat.categories) == ['Negative', 'Positive']
    assert list(df['RNA_region'].cat.categories) == ['CDS', 'intron', "3'UTR", "5'UTR"]
    assert df[PROB_COL].tolist() == pytest.approx([0.45, 0.61, 0.2])


def test_polars_input(gc_classifier, example_records):
    batch = predict_batch(gc_classifier, pl.DataFrame(example_records))
    assert batch.statuses == ['Negative', 'Positive', 'Negative']


def test_missing_field_aborts_without_calling_classifier(fixed_classifier, example_record):
    record = dict(example_record)
    del record['gc_content']

    with pytest.raises(SchemaError) as exc_info:
        predict_batch(fixed_classifier, [record])
    assert 'gc_content' in exc_info.value.missing_fields
    assert fixed_classifier.calls == []


def test_mixed_lengths_abort(fixed_classifier, example_records):
    example_records[2]['DNA_5mer'] = 'ATGCCA'
    with pytest.raises(ShapeMismatch):
        predict_batch(fixed_classifier, example_records)
    assert fixed_classifier.calls == []


def test_ambiguous_nucleotide_proceeds(fixed_classifier, example_record):
    record = dict(example_record, DNA_5mer='ATGCN')
    with pytest.warns(UnmatchedCategoryWarning, match='nt_pos5'):
        batch = predict_batch(fixed_classifier, [record])

    assert batch.frame['nt_pos5'].to_list() == [None]
    assert batch.statuses == ['Positive']
    assert [f.field for f in batch.unmatched] == ['nt_pos5']


def test_unmatched_policy_error(fixed_classifier, example_record):
    config = PredictionConfig(unmatched_policy='error')
    record = dict(example_record, RNA_type='snoRNA')

    with pytest.raises(UnmatchedCategoryError) as exc_info:
        predict_batch(fixed_classifier, [record], config=config)
    assert exc_info.value.findings[0].field == 'RNA_type'
    assert fixed_classifier.calls == []


def test_unmatched_policy_ignore(fixed_classifier, example_record):
    config = PredictionConfig(unmatched_policy='ignore')
    record = dict(example_record, RNA_region='exon')

    with warnings.catch_warnings():
        warnings.simplefilter('error', UnmatchedCategoryWarning)
        batch = predict_batch(fixed_classifier, [record], config=config)
    assert batch.frame['RNA_region'].to_list() == [None]
    assert batch.unmatched[0].values == ('exon',)


def test_config_threshold_used_when_not_given(gc_classifier, example_records):
    config = PredictionConfig(threshold=0.3)
    batch = predict_batch(gc_classifier, example_records, threshold=None, config=config)
    assert batch.threshold == 0.3
    assert batch.statuses == ['Positive', 'Positive', 'Negative']


def test_custom_labels(example_record):
    clf = FixedProbaClassifier(0.7, classes=('unmodified', 'm6A'))
    config = PredictionConfig(positive_label='m6A', negative_label='unmodified')
    result = M6APredictor(clf, config=config).predict_one(**example_record)
    assert result[STATUS_COL] == 'm6A'


def test_incompatible_classifier(example_record):
    clf = FixedProbaClassifier(0.7, classes=('0', '1'))
    with pytest.raises(InferenceSchemaError):
        predict_batch(clf, [example_record])


def test_predictor_from_path(tmp_path, fixed_classifier, example_record):
    path = save_classifier(ClassifierBundle(model=fixed_classifier), tmp_path / 'model.joblib')
    predictor = M6APredictor.from_path(path, config=PredictionConfig(threshold=0.9))

    assert predictor.predict_one(**example_record)[STATUS_COL] == 'Negative'
    assert predictor.predict_one(**example_record, threshold=0.5)[STATUS_COL] == 'Positive'


def test_module_functions_use_config_threshold(gc_classifier, example_records):
    config = PredictionConfig(threshold=0.9)

    batch = predict_batch(gc_classifier, example_records, config=config)
    assert batch.threshold == 0.9
    assert batch.statuses == ['Negative', 'Negative', 'Negative']

    assert predict_one(FixedProbaClassifier(0.82), **example_records[0], config=config)[STATUS_COL] == 'Negative'
    assert predict_one(FixedProbaClassifier(0.82), **example_records[0])[STATUS_COL] == 'Positive'


def test_explicit_threshold_wins_over_config(gc_classifier, example_records):
    config = PredictionConfig(threshold=0.9)
    batch = predict_batch(gc_classifier, example_records, threshold=0.4, config=config)
    assert batch.threshold == 0.4
    assert batch.statuses == ['Positive', 'Positive', 'Negative']


@pytest.mark.parametrize('entry_point', ['predict_batch', 'predict_one', 'method_batch', 'method_one'])
def test_unmatched_warning_points_at_caller(fixed_classifier, example_record, entry_point):
    record = dict(example_record, RNA_type='snoRNA')
    predictor = M6APredictor(fixed_classifier)

    with pytest.warns(UnmatchedCategoryWarning) as record_list:
        if entry_point == 'predict_batch':
            predict_batch(fixed_classifier, [record])
        elif entry_point == 'predict_one':
            predict_one(fixed_classifier, **record)
        elif entry_point == 'method_batch':
            predictor.predict_batch([record])
        else:
            predictor.predict_one(**record)

    assert record_list[0].filename == __file__
