"""
Positional encoding of fixed-length nucleotide strings.

Each position of a k-mer becomes its own categorical column (``nt_pos1`` ..
``nt_posk``) whose domain is fixed to the nucleotide alphabet, in order
(A, T, C, G), regardless of which letters are observed. Letters outside the
alphabet (ambiguity codes such as ``N``, lowercase) are kept as missing values
so that a single odd site does not abort a batch.

Examples
--------
>>> encoded = encode_sequences(["ATGCC", "GCTAN"])
>>> encoded.columns
['nt_pos1', 'nt_pos2', 'nt_pos3', 'nt_pos4', 'nt_pos5']
>>> encoded['nt_pos5'].to_list()
['C', None]
"""

import re
from typing import List, Optional, Sequence, Union
import polars as pl

from ..core.errors import ShapeMismatch
from ..core.feature_schema import NUCLEOTIDE_LEVELS
from .categorical import restrict_to_levels


def position_columns(k: int, prefix: str = 'nt_pos') -> List[str]:
    """Names of the k positional columns, 1-based, left to right."""
    return [f"{prefix}{i}" for i in range(1, k + 1)]


def _as_series(sequences: Union[Sequence[str], pl.Series]) -> pl.Series:
    if isinstance(sequences, str):
        raise TypeError("Expected a sequence of strings, got a single string")
    if isinstance(sequences, pl.Series):
        series = sequences
    else:
        series = pl.Series('sequence', list(sequences), dtype=pl.Utf8)
    if series.dtype != pl.Utf8:
        raise TypeError(f"Nucleotide strings must be text, got dtype {series.dtype}")
    return series


def encode_sequences(
    sequences: Union[Sequence[str], pl.Series],
    k: Optional[int] = None,
    levels: Sequence[str] = NUCLEOTIDE_LEVELS,
    prefix: str = 'nt_pos'
) -> pl.DataFrame:
    """
    Encode nucleotide strings as positional categorical columns.

    Parameters
    ----------
    sequences : sequence of str or pl.Series
        Nucleotide strings, all of length k.
    k : int, optional
        Expected length. If None, taken from the first string.
    levels : sequence of str
        Domain of every positional column, in level order.
    prefix : str
        Column name prefix.

    Returns
    -------
    pl.DataFrame
        One row per input string and k ``pl.Enum`` columns. Letters outside
        *levels* are null.

    Raises
    ------
    ShapeMismatch
        If any string (or null) does not have length k.
    """
    series = _as_series(sequences)
    levels = list(levels)

    lengths = series.str.len_chars().fill_null(0).to_list()
    if k is None:
        if not lengths:
            raise ValueError("Cannot infer sequence length from an empty input; pass k")
        k = lengths[0]

    bad = [(i, n) for i, n in enumerate(lengths) if n != k]
    if bad:
        raise ShapeMismatch(k, [i for i, _ in bad], [n for _, n in bad])

    frame = pl.DataFrame({'_sequence': series})
    exprs = []
    for i, col in enumerate(position_columns(k, prefix)):
        letter = pl.col("_sequence").str.slice(i, 1)
        exprs.append(restrict_to_levels(letter, levels).alias(col))

    if not exprs:
        return pl.DataFrame()
    return frame.select(exprs)


def decode_positions(frame: pl.DataFrame, prefix: str = 'nt_pos', missing: str = 'N') -> List[str]:
    """Rebuild nucleotide strings from positional columns.

    Missing (unmatched) positions are rendered as *missing*.
    """
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
    cols = sorted(
        (c for c in frame.columns if pattern.match(c)),
        key=lambda c: int(pattern.match(c).group(1))
    )
    if not cols:
        raise ValueError(f"No positional columns with prefix '{prefix}' found")

    joined = frame.select(
        pl.concat_str(
            [pl.col(c).cast(pl.Utf8).fill_null(missing) for c in cols]
        ).alias('_sequence')
    )
    return joined['_sequence'].to_list()
