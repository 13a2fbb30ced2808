"""
Error types for the m6A prediction pipeline.

Fatal errors abort the whole call (no partial batch output):
- SchemaError: required fields missing, null or badly typed
- ShapeMismatch: nucleotide strings of the wrong or inconsistent length
- InferenceSchemaError: assembled features do not match the classifier schema
- UnmatchedCategoryError: out-of-domain categories under the 'error' policy

Out-of-domain categorical values are otherwise soft findings, collected as
UnmatchedCategory records and reported alongside the output.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple


class M6APredictionError(Exception):
    """Base class for all pipeline errors."""
    pass


@dataclass
class SchemaViolation:
    """A single structural problem found in the input records.

    Attributes
    ----------
    field : str
        Name of the offending field.
    kind : str
        'missing', 'null' or 'dtype'.
    detail : str
        Human-readable description.
    rows : tuple of int
        Zero-based row indices affected (empty when the whole column is at fault).
    """
    field: str
    kind: str
    detail: str
    rows: Tuple[int, ...] = ()

    def __str__(self) -> str:
        return f"{self.field}: {self.detail}"


class SchemaError(M6APredictionError, ValueError):
    """Raised when input records do not supply the required fields."""

    def __init__(self, violations: Sequence[SchemaViolation], message: Optional[str] = None):
        self.violations = list(violations)
        if message is None:
            details = "; ".join(str(v) for v in self.violations)
            message = f"Invalid feature records ({len(self.violations)} violation(s)): {details}"
        super().__init__(message)

    @property
    def missing_fields(self) -> List[str]:
        """Fields that are absent or null in at least one record."""
        seen = []
        for v in self.violations:
            if v.kind in ('missing', 'null') and v.field not in seen:
                seen.append(v.field)
        return seen


class ShapeMismatch(M6APredictionError, ValueError):
    """Raised when nucleotide strings do not all have the expected length."""

    def __init__(self, expected_length: int, rows: Sequence[int], lengths: Sequence[int]):
        self.expected_length = expected_length
        self.rows = list(rows)
        self.lengths = list(lengths)
        shown = ", ".join(
            f"row {r} (length {n})" for r, n in list(zip(self.rows, self.lengths))[:10]
        )
        if len(self.rows) > 10:
            shown += f", ... {len(self.rows) - 10} more"
        super().__init__(
            f"Expected nucleotide strings of length {expected_length}, "
            f"found {len(self.rows)} mismatching: {shown}"
        )


class InferenceSchemaError(M6APredictionError):
    """Raised when the assembled matrix does not match the classifier schema."""

    def __init__(self, issues: Sequence[str]):
        self.issues = list(issues)
        super().__init__(
            "Feature matrix does not match the classifier schema:\n  - "
            + "\n  - ".join(self.issues)
        )


@dataclass
class UnmatchedCategory:
    """Values of a closed categorical field that fell outside its domain.

    These values are encoded as null (no level matches) and still reach the
    classifier, which can silently degrade its predictions.
    """
    field: str
    count: int
    values: Tuple[str, ...] = ()
    rows: Tuple[int, ...] = ()

    def __str__(self) -> str:
        vals = ", ".join(repr(v) for v in self.values[:5])
        if len(self.values) > 5:
            vals += ", ..."
        return f"{self.field}: {self.count} unmatched value(s) [{vals}]"


class UnmatchedCategoryWarning(UserWarning):
    """Issued when categorical values fall outside their closed domain."""
    pass


class UnmatchedCategoryError(M6APredictionError, ValueError):
    """Raised for out-of-domain categories when the policy is 'error'."""

    def __init__(self, findings: Sequence[UnmatchedCategory]):
        self.findings = list(findings)
        super().__init__(
            "Unmatched categorical values: " + "; ".join(str(f) for f in self.findings)
        )


def summarize_unmatched(findings: Sequence[UnmatchedCategory]) -> str:
    """One-line summary of unmatched findings for logs and warnings."""
    total = sum(f.count for f in findings)
    return f"{total} unmatched categorical value(s) in {len(findings)} field(s): " + "; ".join(
        str(f) for f in findings
    )
