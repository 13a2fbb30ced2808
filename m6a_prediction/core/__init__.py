"""
Core components for m6A prediction.

- config.py: PredictionConfig and load_config
- feature_schema.py: Versioned feature schema and closed categorical domains
- errors.py: Error taxonomy (fatal errors and soft unmatched findings)
"""

from .config import PredictionConfig, load_config, validate_threshold
from .feature_schema import (
    FeatureSchema,
    DEFAULT_SCHEMA,
    RNAType,
    RNARegion,
    Nucleotide,
    UNMATCHED,
    RNA_TYPE_LEVELS,
    RNA_REGION_LEVELS,
    NUCLEOTIDE_LEVELS,
    STATUS_LEVELS,
    parse_rna_type,
    parse_rna_region,
    parse_nucleotide,
)
from .errors import (
    M6APredictionError,
    SchemaError,
    SchemaViolation,
    ShapeMismatch,
    InferenceSchemaError,
    UnmatchedCategory,
    UnmatchedCategoryError,
    UnmatchedCategoryWarning,
)

__all__ = [
    "PredictionConfig",
    "load_config",
    "validate_threshold",
    "FeatureSchema",
    "DEFAULT_SCHEMA",
    "RNAType",
    "RNARegion",
    "Nucleotide",
    "UNMATCHED",
    "RNA_TYPE_LEVELS",
    "RNA_REGION_LEVELS",
    "NUCLEOTIDE_LEVELS",
    "STATUS_LEVELS",
    "parse_rna_type",
    "parse_rna_region",
    "parse_nucleotide",
    "M6APredictionError",
    "SchemaError",
    "SchemaViolation",
    "ShapeMismatch",
    "InferenceSchemaError",
    "UnmatchedCategory",
    "UnmatchedCategoryError",
    "UnmatchedCategoryWarning",
]
