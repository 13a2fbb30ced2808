"""Helpers for coercing text columns into closed categorical domains."""

from typing import Optional, Sequence
import polars as pl

from ..core.errors import UnmatchedCategory


def restrict_to_levels(expr: pl.Expr, levels: Sequence[str]) -> pl.Expr:
    """Cast *expr* to an Enum over *levels*; values outside the domain become null."""
    levels = list(levels)
    text = expr.cast(pl.Utf8)
    return (
        pl.when(text.is_in(levels))
        .then(text)
        .otherwise(None)
        .cast(pl.Enum(levels))
    )


def find_unmatched(
    raw: pl.Series,
    encoded: pl.Series,
    field: str
) -> Optional[UnmatchedCategory]:
    """
    Compare raw values with their encoded counterpart.

    A row is unmatched when the raw value is present but the encoded one is
    null. Returns None when every present value matched.
    """
    mask = raw.is_not_null() & encoded.is_null()
    rows = mask.arg_true().to_list()
    if not rows:
        return None

    values = raw.filter(mask).cast(pl.Utf8).unique(maintain_order=True).to_list()
    return UnmatchedCategory(
        field=field,
        count=len(rows),
        values=tuple(values),
        rows=tuple(rows)
    )
