"""
Feature encoding for m6A prediction.

- sequence_encoder.py: Positional encoding of fixed-length nucleotide strings
- feature_assembler.py: Record validation and assembly of the classifier matrix
- categorical.py: Coercion of text columns into closed categorical domains
"""

from .sequence_encoder import encode_sequences, decode_positions, position_columns
from .feature_assembler import (
    AssembledFeatures,
    assemble_features,
    assemble_single_record,
    build_record,
    check_sequence_lengths,
    records_to_frame,
    validate_records,
)
from .categorical import restrict_to_levels, find_unmatched

__all__ = [
    "encode_sequences",
    "decode_positions",
    "position_columns",
    "AssembledFeatures",
    "assemble_features",
    "assemble_single_record",
    "build_record",
    "check_sequence_lengths",
    "records_to_frame",
    "validate_records",
    "restrict_to_levels",
    "find_unmatched",
]
