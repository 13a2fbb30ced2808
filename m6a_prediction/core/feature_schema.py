"""
Feature schema definitions for m6A site prediction.

This module is the single source of truth for:
1. Which fields a feature record must supply
2. The closed categorical domains and their level ORDER
3. The nucleotide alphabet and positional column naming

The level order matters: the classifier was trained with these exact
levels, and a different ordering silently produces wrong predictions.
The schema is versioned and travels with the serialized classifier so the
inference side can validate it structurally instead of by convention.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Type, Union
import yaml


SCHEMA_VERSION = "1.0"


# ==============================================================================
# Closed Categorical Domains
# ==============================================================================

class RNAType(str, Enum):
    """Transcript biotype of the candidate site."""
    MRNA = "mRNA"
    LINCRNA = "lincRNA"
    LNCRNA = "lncRNA"
    PSEUDOGENE = "pseudogene"


class RNARegion(str, Enum):
    """Transcript region the candidate site falls into."""
    CDS = "CDS"
    INTRON = "intron"
    UTR3 = "3'UTR"
    UTR5 = "5'UTR"


class Nucleotide(str, Enum):
    """DNA alphabet used for the positional sequence columns."""
    A = "A"
    T = "T"
    C = "C"
    G = "G"


class _Unmatched:
    """Sentinel for a value outside a closed categorical domain."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNMATCHED"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Unmatched, ())


UNMATCHED = _Unmatched()


def _levels(enum_cls: Type[Enum]) -> Tuple[str, ...]:
    return tuple(member.value for member in enum_cls)


RNA_TYPE_LEVELS: Tuple[str, ...] = _levels(RNAType)
RNA_REGION_LEVELS: Tuple[str, ...] = _levels(RNARegion)
NUCLEOTIDE_LEVELS: Tuple[str, ...] = _levels(Nucleotide)

# Output label levels (Negative first, matching the decision factor)
STATUS_LEVELS: Tuple[str, ...] = ("Negative", "Positive")


def _parse(enum_cls: Type[Enum], value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return UNMATCHED


def parse_rna_type(value: str) -> Union[RNAType, _Unmatched]:
    """Parse a raw RNA type string.

    Examples
    --------
    >>> parse_rna_type('mRNA')
    <RNAType.MRNA: 'mRNA'>
    >>> parse_rna_type('snoRNA')
    UNMATCHED
    """
    return _parse(RNAType, value)


def parse_rna_region(value: str) -> Union[RNARegion, _Unmatched]:
    """Parse a raw RNA region string (case-sensitive, e.g. "3'UTR")."""
    return _parse(RNARegion, value)


def parse_nucleotide(value: str) -> Union[Nucleotide, _Unmatched]:
    """Parse a single nucleotide letter; ambiguity codes and lowercase are unmatched."""
    return _parse(Nucleotide, value)


# ==============================================================================
# Feature Schema
# ==============================================================================

@dataclass
class FeatureSchema:
    """
    Versioned feature schema shared by training and inference.

    Attributes
    ----------
    record_fields : tuple of str
        Fields every input record must supply, in canonical order.
    numeric_cols : tuple of str
        Subset of record_fields that must be numeric.
    categorical_levels : dict
        Closed categorical fields mapped to their ordered levels.
    sequence_col : str
        Field holding the fixed-length nucleotide string.
    sequence_length : int
        Expected length k of every nucleotide string.
    nucleotide_levels : tuple of str
        Levels of every positional column.
    position_prefix : str
        Prefix of positional columns (``nt_pos1`` .. ``nt_posk``).
    version : str
        Schema version, persisted alongside the classifier.
    """

    record_fields: Tuple[str, ...] = (
        'gc_content',
        'RNA_type',
        'RNA_region',
        'exon_length',
        'distance_to_junction',
        'evolutionary_conservation',
        'DNA_5mer',
    )
    numeric_cols: Tuple[str, ...] = (
        'gc_content',
        'exon_length',
        'distance_to_junction',
        'evolutionary_conservation',
    )
    categorical_levels: Dict[str, Tuple[str, ...]] = field(default_factory=lambda: {
        'RNA_type': RNA_TYPE_LEVELS,
        'RNA_region': RNA_REGION_LEVELS,
    })
    sequence_col: str = 'DNA_5mer'
    sequence_length: int = 5
    nucleotide_levels: Tuple[str, ...] = NUCLEOTIDE_LEVELS
    position_prefix: str = 'nt_pos'
    version: str = SCHEMA_VERSION

    def __post_init__(self):
        self.record_fields = tuple(self.record_fields)
        self.numeric_cols = tuple(self.numeric_cols)
        self.nucleotide_levels = tuple(self.nucleotide_levels)
        self.categorical_levels = {
            name: tuple(levels) for name, levels in self.categorical_levels.items()
        }
        self.version = str(self.version)

        if self.sequence_length < 1:
            raise ValueError(f"sequence_length must be positive, got {self.sequence_length}")

        declared = set(self.numeric_cols) | set(self.categorical_levels) | {self.sequence_col}
        if declared != set(self.record_fields):
            raise ValueError(
                "record_fields must be exactly the numeric, categorical and sequence fields; "
                f"undeclared: {sorted(set(self.record_fields) - declared)}, "
                f"not in record_fields: {sorted(declared - set(self.record_fields))}"
            )

    def get_required_fields(self) -> List[str]:
        """Fields every record must supply."""
        return list(self.record_fields)

    def get_position_cols(self) -> List[str]:
        """Positional nucleotide columns, 1-based, left to right."""
        return [f"{self.position_prefix}{i}" for i in range(1, self.sequence_length + 1)]

    def get_feature_cols(self) -> List[str]:
        """Columns the classifier consumes (record fields minus the raw sequence)."""
        return [f for f in self.record_fields if f != self.sequence_col] + self.get_position_cols()

    def get_all_categorical_levels(self) -> Dict[str, Tuple[str, ...]]:
        """Levels of every categorical feature column, positional ones included."""
        levels = dict(self.categorical_levels)
        for col in self.get_position_cols():
            levels[col] = self.nucleotide_levels
        return levels

    def is_categorical(self, col_name: str) -> bool:
        return col_name in self.get_all_categorical_levels()

    def diff(self, other: 'FeatureSchema') -> List[str]:
        """Human-readable differences between two schemas (empty if compatible)."""
        issues = []
        if self.version.split('.')[0] != other.version.split('.')[0]:
            issues.append(f"schema version {self.version} is incompatible with {other.version}")
        if self.get_feature_cols() != other.get_feature_cols():
            issues.append(
                f"feature columns differ: {self.get_feature_cols()} vs {other.get_feature_cols()}"
            )
        mine, theirs = self.get_all_categorical_levels(), other.get_all_categorical_levels()
        for name in sorted(set(mine) & set(theirs)):
            if mine[name] != theirs[name]:
                issues.append(
                    f"levels of '{name}' differ: {list(mine[name])} vs {list(theirs[name])}"
                )
        return issues

    def to_dict(self) -> Dict:
        return {
            'version': self.version,
            'record_fields': list(self.record_fields),
            'numeric_cols': list(self.numeric_cols),
            'categorical_levels': {k: list(v) for k, v in self.categorical_levels.items()},
            'sequence_col': self.sequence_col,
            'sequence_length': self.sequence_length,
            'nucleotide_levels': list(self.nucleotide_levels),
            'position_prefix': self.position_prefix,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'FeatureSchema':
        known = cls().to_dict().keys()
        unknown = set(data) - set(known)
        if unknown:
            raise ValueError(f"Unknown feature schema keys: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> 'FeatureSchema':
        """Load a schema from a YAML file."""
        with open(Path(yaml_path)) as f:
            return cls.from_dict(yaml.safe_load(f))

    def to_yaml(self, yaml_path: Union[str, Path]) -> None:
        """Save the schema to a YAML file."""
        yaml_path = Path(yaml_path)
        yaml_path.parent.mkdir(parents=True, exist_ok=True)
        with open(yaml_path, 'w') as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)


# Default schema instance (reference deployment, k=5)
DEFAULT_SCHEMA = FeatureSchema()


def resolve_schema(schema: Optional[FeatureSchema]) -> FeatureSchema:
    return DEFAULT_SCHEMA if schema is None else schema
