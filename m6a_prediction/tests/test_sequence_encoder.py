import polars as pl
import pytest

from m6a_prediction.core.errors import ShapeMismatch
from m6a_prediction.features.sequence_encoder import (
    decode_positions,
    encode_sequences,
    position_columns,
)


def test_position_columns_are_one_based():
    assert position_columns(3) == ['nt_pos1', 'nt_pos2', 'nt_pos3']


def test_columns_match_input_characters():
    sequences = ["ATGCC", "GCTAA", "TTTTG"]
    encoded = encode_sequences(sequences)

    assert encoded.columns == position_columns(5)
    assert encoded.height == 3
    for row, seq in enumerate(sequences):
        assert [encoded[col][row] for col in encoded.columns] == list(seq)


def test_decode_reconstructs_strings():
    sequences = ["ATGCC", "GCTAA"]
    assert decode_positions(encode_sequences(sequences)) == sequences


def test_domain_is_fixed_regardless_of_observed_letters():
    encoded = encode_sequences(["AAAAA"])
    for col in encoded.columns:
        assert isinstance(encoded.schema[col], pl.Enum)
        assert encoded.schema[col].categories.to_list() == ['A', 'T', 'C', 'G']


def test_unknown_letter_becomes_null():
    encoded = encode_sequences(["ATGCN", "atgcc"])
    assert encoded['nt_pos5'].to_list() == [None, None]
    assert encoded['nt_pos1'].to_list() == ['A', None]
    assert decode_positions(encoded) == ["ATGCN", "NNNNN"]


def test_length_inferred_from_first_element():
    encoded = encode_sequences(["ACG", "TTA"])
    assert encoded.columns == position_columns(3)


def test_inconsistent_lengths_raise_shape_mismatch():
    with pytest.raises(ShapeMismatch) as exc_info:
        encode_sequences(["ATGCC", "ATGCCA", "ATG"])
    assert exc_info.value.expected_length == 5
    assert exc_info.value.rows == [1, 2]
    assert exc_info.value.lengths == [6, 3]


def test_explicit_k_is_enforced():
    with pytest.raises(ShapeMismatch):
        encode_sequences(["ATGC"], k=5)


def test_null_sequence_is_a_length_mismatch():
    with pytest.raises(ShapeMismatch):
        encode_sequences(pl.Series(["ATGCC", None]), k=5)


def test_empty_input_needs_k():
    with pytest.raises(ValueError):
        encode_sequences([])
    assert encode_sequences([], k=5).shape == (0, 5)


def test_single_string_is_rejected():
    with pytest.raises(TypeError):
        encode_sequences("ATGCC")


def test_custom_prefix():
    encoded = encode_sequences(["AT"], prefix='pos')
    assert encoded.columns == ['pos1', 'pos2']
    assert decode_positions(encoded, prefix='pos') == ["AT"]
