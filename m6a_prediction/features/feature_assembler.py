"""
Feature assembly for m6A site prediction.

Turns raw feature records into the canonical matrix the classifier was
trained on:

1. Normalize the input (mappings, polars or pandas frames) to a polars frame
2. Structural validation of ALL records, reporting every violation at once
3. Whole-batch check of the nucleotide string length
4. Coerce RNA_type / RNA_region into their closed domains (fixed level order)
5. Append the positional nucleotide columns

Steps 2-3 are fatal; out-of-domain categories are recorded as soft findings.
The single-record path builds a one-row batch and runs the same steps.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
import logging
import numbers
import re

import pandas as pd
import polars as pl

from ..core.errors import (
    SchemaError,
    SchemaViolation,
    ShapeMismatch,
    UnmatchedCategory,
)
from ..core.feature_schema import FeatureSchema, resolve_schema
from .categorical import find_unmatched, restrict_to_levels
from .sequence_encoder import encode_sequences

logger = logging.getLogger(__name__)

RecordsLike = Union[pl.DataFrame, pd.DataFrame, Mapping[str, Any], Sequence[Mapping[str, Any]]]


@dataclass
class AssembledFeatures:
    """Assembled feature matrix plus the soft findings collected on the way.

    Attributes
    ----------
    frame : pl.DataFrame
        Input columns (categoricals coerced) followed by the positional
        nucleotide columns. One row per input record, order preserved.
    schema : FeatureSchema
        Schema the matrix was assembled against.
    unmatched : list of UnmatchedCategory
        Out-of-domain values encoded as missing.
    """
    frame: pl.DataFrame
    schema: FeatureSchema
    unmatched: List[UnmatchedCategory] = field(default_factory=list)

    def __len__(self) -> int:
        return self.frame.height

    @property
    def has_unmatched(self) -> bool:
        return bool(self.unmatched)

    @property
    def unmatched_count(self) -> int:
        return sum(f.count for f in self.unmatched)

    def feature_frame(self) -> pl.DataFrame:
        """Only the columns the classifier consumes, in schema order."""
        return self.frame.select(self.schema.get_feature_cols())


# ==============================================================================
# Input normalization
# ==============================================================================

def _is_real(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _column_from_values(name: str, values: List[Any]) -> pl.Series:
    values = [v.value if isinstance(v, Enum) else v for v in values]

    # Ints and floats mixed in one column are all numeric
    present = [v for v in values if v is not None]
    dtype = None
    if (
        present
        and all(_is_real(v) for v in present)
        and not all(isinstance(v, numbers.Integral) for v in present)
    ):
        dtype = pl.Float64
        values = [None if v is None else float(v) for v in values]

    try:
        return pl.Series(name, values, dtype=dtype)
    except (TypeError, ValueError, OverflowError, pl.exceptions.PolarsError) as e:
        raise SchemaError(
            [SchemaViolation(name, 'dtype', f"values have inconsistent types ({e})")]
        ) from e


def records_to_frame(records: RecordsLike) -> pl.DataFrame:
    """
    Normalize supported record containers to a polars DataFrame.

    Parameters
    ----------
    records : pl.DataFrame, pd.DataFrame, mapping or sequence of mappings
        A single mapping is treated as a one-row batch. Keys absent from some
        mappings become nulls in those rows.

    Returns
    -------
    pl.DataFrame
    """
    if isinstance(records, pl.DataFrame):
        return records

    if isinstance(records, pd.DataFrame):
        # Go through plain Python objects so NaN / pd.NA both end up as null
        return pl.DataFrame([
            _column_from_values(
                str(col),
                [None if pd.isna(v) else v for v in records[col].astype(object).tolist()]
            )
            for col in records.columns
        ])

    if isinstance(records, Mapping):
        records = [records]

    rows = list(records)
    for i, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise TypeError(f"Record {i} is a {type(row).__name__}, expected a mapping")

    columns: List[str] = []
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)

    return pl.DataFrame([
        _column_from_values(str(col), [row.get(col) for row in rows]) for col in columns
    ])


# ==============================================================================
# Validation
# ==============================================================================

def _is_text(dtype: pl.DataType) -> bool:
    return dtype == pl.Utf8 or dtype == pl.Categorical or isinstance(dtype, pl.Enum)


def validate_records(frame: pl.DataFrame, schema: Optional[FeatureSchema] = None) -> List[SchemaViolation]:
    """
    Check that every record supplies every required field with a usable type.

    Parameters
    ----------
    frame : pl.DataFrame
        Normalized input records.
    schema : FeatureSchema, optional
        Defaults to DEFAULT_SCHEMA.

    Returns
    -------
    list of SchemaViolation
        All violations found (empty if the input is valid). Nothing is raised
        here so that callers can report every problem in one go.
    """
    schema = resolve_schema(schema)
    violations = []

    for name in schema.get_required_fields():
        if name not in frame.columns:
            violations.append(SchemaViolation(name, 'missing', "required field is missing"))
            continue

        col = frame[name]
        missing = col.is_null()
        if col.dtype.is_float():
            missing = missing | col.is_nan()
        missing_rows = missing.arg_true().to_list()
        if missing_rows:
            violations.append(SchemaViolation(
                name, 'null',
                f"value missing in {len(missing_rows)} record(s)",
                tuple(missing_rows)
            ))

        if col.dtype == pl.Null:
            continue

        if name in schema.numeric_cols:
            if not col.dtype.is_numeric():
                violations.append(SchemaViolation(
                    name, 'dtype', f"must be numeric, got {col.dtype}"
                ))
        elif name == schema.sequence_col:
            if col.dtype != pl.Utf8:
                violations.append(SchemaViolation(
                    name, 'dtype', f"must be a nucleotide string, got {col.dtype}"
                ))
        elif not _is_text(col.dtype):
            violations.append(SchemaViolation(
                name, 'dtype', f"must be categorical text, got {col.dtype}"
            ))

    return violations


def check_sequence_lengths(frame: pl.DataFrame, schema: Optional[FeatureSchema] = None) -> None:
    """Raise ShapeMismatch unless every nucleotide string has the schema length."""
    schema = resolve_schema(schema)
    lengths = frame[schema.sequence_col].str.len_chars().to_list()
    bad = [(i, n) for i, n in enumerate(lengths) if n != schema.sequence_length]
    if bad:
        raise ShapeMismatch(
            schema.sequence_length,
            [i for i, _ in bad],
            [n for _, n in bad]
        )


# ==============================================================================
# Assembly
# ==============================================================================

def assemble_features(
    records: RecordsLike,
    schema: Optional[FeatureSchema] = None
) -> AssembledFeatures:
    """
    Build the classifier feature matrix from raw records.

    Parameters
    ----------
    records : pl.DataFrame, pd.DataFrame, mapping or sequence of mappings
        Raw feature records. Extra columns are carried through.
    schema : FeatureSchema, optional
        Defaults to DEFAULT_SCHEMA.

    Returns
    -------
    AssembledFeatures
        Matrix plus unmatched-category findings.

    Raises
    ------
    SchemaError
        If the input is empty or any record lacks a required field.
    ShapeMismatch
        If any nucleotide string does not have the schema length.
    """
    schema = resolve_schema(schema)
    frame = records_to_frame(records)

    if frame.height == 0:
        raise SchemaError(
            [SchemaViolation('*', 'missing', "no records to assemble")],
            message="Cannot assemble features from an empty batch"
        )

    violations = validate_records(frame, schema)
    if violations:
        raise SchemaError(violations)

    check_sequence_lengths(frame, schema)

    unmatched = []

    # Closed categorical domains with fixed level order
    coerced = frame.with_columns([
        restrict_to_levels(pl.col(name), levels).alias(name)
        for name, levels in schema.categorical_levels.items()
    ])
    for name in schema.categorical_levels:
        finding = find_unmatched(frame[name], coerced[name], name)
        if finding is not None:
            unmatched.append(finding)

    # Positional nucleotide columns (re-encoded if already present)
    position_pattern = re.compile(rf"^{re.escape(schema.position_prefix)}\d+$")
    stale = [c for c in coerced.columns if position_pattern.match(c)]
    if stale:
        logger.debug(f"Replacing existing positional columns: {stale}")
        coerced = coerced.drop(stale)

    sequences = frame[schema.sequence_col]
    encoded = encode_sequences(
        sequences,
        k=schema.sequence_length,
        levels=schema.nucleotide_levels,
        prefix=schema.position_prefix
    )
    for i, col in enumerate(encoded.columns):
        finding = find_unmatched(sequences.str.slice(i, 1), encoded[col], col)
        if finding is not None:
            unmatched.append(finding)

    assembled = pl.concat([coerced, encoded], how='horizontal')

    logger.debug(
        f"Assembled {assembled.height} record(s) into {len(schema.get_feature_cols())} "
        f"feature columns ({sum(f.count for f in unmatched)} unmatched value(s))"
    )

    return AssembledFeatures(frame=assembled, schema=schema, unmatched=unmatched)


def build_record(
    gc_content,
    RNA_type,
    RNA_region,
    exon_length,
    distance_to_junction,
    evolutionary_conservation,
    DNA_5mer
) -> Dict[str, Any]:
    """Pack individually named feature values into a record mapping."""
    return {
        'gc_content': gc_content,
        'RNA_type': RNA_type,
        'RNA_region': RNA_region,
        'exon_length': exon_length,
        'distance_to_junction': distance_to_junction,
        'evolutionary_conservation': evolutionary_conservation,
        'DNA_5mer': DNA_5mer,
    }


def assemble_single_record(
    gc_content,
    RNA_type,
    RNA_region,
    exon_length,
    distance_to_junction,
    evolutionary_conservation,
    DNA_5mer,
    schema: Optional[FeatureSchema] = None
) -> AssembledFeatures:
    """Assemble a one-row matrix; identical logic to the batch path."""
    record = build_record(
        gc_content=gc_content,
        RNA_type=RNA_type,
        RNA_region=RNA_region,
        exon_length=exon_length,
        distance_to_junction=distance_to_junction,
        evolutionary_conservation=evolutionary_conservation,
        DNA_5mer=DNA_5mer
    )
    return assemble_features([record], schema=schema)
