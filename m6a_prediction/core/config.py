"""
Configuration for m6A prediction.

Loads configuration from a YAML file with environment variable overrides:
- M6A_THRESHOLD: decision threshold
- M6A_UNMATCHED_POLICY: 'warn', 'error' or 'ignore'
- M6A_CHUNK_SIZE: rows per classifier call (empty or 0 disables chunking)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union
import math
import os
import yaml


UNMATCHED_POLICIES = ('warn', 'error', 'ignore')


def validate_threshold(threshold) -> float:
    """Return *threshold* as a float, or raise ValueError if it is not in [0, 1]."""
    if isinstance(threshold, bool):
        raise ValueError(f"threshold must be a number in [0, 1], got {threshold!r}")
    try:
        value = float(threshold)
    except (TypeError, ValueError):
        raise ValueError(f"threshold must be a number in [0, 1], got {threshold!r}")
    if math.isnan(value) or not 0.0 <= value <= 1.0:
        raise ValueError(f"threshold must be a number in [0, 1], got {threshold!r}")
    return value


@dataclass
class PredictionConfig:
    """
    Configuration for the prediction pipeline.

    Parameters
    ----------
    threshold : float
        Probability above which a site is called Positive (strictly greater).
    positive_label : str
        Class label of the classifier whose probability is reported.
    negative_label : str
        Label assigned when the probability does not exceed the threshold.
    unmatched_policy : str
        What to do with categorical values outside their closed domain:
        - 'warn': encode as missing, log and emit UnmatchedCategoryWarning
        - 'error': abort the call with UnmatchedCategoryError
        - 'ignore': encode as missing, log at debug level only
    chunk_size : int, optional
        If set, the classifier is called on chunks of this many rows.
    show_progress : bool
        Show a progress bar over chunks.
    verbosity : int
        0=quiet, 1=normal, 2=detailed (used by the CLI for log level).

    Examples
    --------
    >>> config = PredictionConfig(threshold=0.7, unmatched_policy='error')
    >>> config.to_yaml('prediction.yaml')
    """

    threshold: float = 0.5
    positive_label: str = 'Positive'
    negative_label: str = 'Negative'
    unmatched_policy: str = 'warn'
    chunk_size: Optional[int] = None
    show_progress: bool = False
    verbosity: int = 1

    def __post_init__(self):
        self.threshold = validate_threshold(self.threshold)

        self.unmatched_policy = str(self.unmatched_policy).lower()
        if self.unmatched_policy not in UNMATCHED_POLICIES:
            raise ValueError(
                f"Unknown unmatched_policy: {self.unmatched_policy}. "
                f"Use one of: {', '.join(UNMATCHED_POLICIES)}"
            )

        if self.chunk_size is not None:
            self.chunk_size = int(self.chunk_size)
            if self.chunk_size <= 0:
                self.chunk_size = None

        if self.positive_label == self.negative_label:
            raise ValueError("positive_label and negative_label must differ")

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> 'PredictionConfig':
        """Load configuration from YAML file."""
        yaml_path = Path(yaml_path)
        with open(yaml_path) as f:
            config_dict = yaml.safe_load(f) or {}
        return cls(**config_dict)

    def to_yaml(self, yaml_path: Union[str, Path]) -> None:
        """Save configuration to YAML file."""
        yaml_path = Path(yaml_path)
        yaml_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = {
            k: v for k, v in self.__dict__.items()
            if not k.startswith('_')
        }

        with open(yaml_path, 'w') as f:
            yaml.dump(config_dict, f, default_flow_style=False)


def load_config(path: Optional[Union[str, Path]] = None) -> PredictionConfig:
    """Load configuration from YAML (if given) and apply environment overrides.

    Parameters
    ----------
    path : str or Path, optional
        YAML file. If None, defaults are used.

    Returns
    -------
    PredictionConfig
        Resolved configuration.
    """
    values = {}
    if path is not None:
        with open(Path(path)) as f:
            values = yaml.safe_load(f) or {}

    threshold = os.getenv("M6A_THRESHOLD")
    if threshold:
        values['threshold'] = threshold

    policy = os.getenv("M6A_UNMATCHED_POLICY")
    if policy:
        values['unmatched_policy'] = policy

    chunk_size = os.getenv("M6A_CHUNK_SIZE")
    if chunk_size is not None:
        values['chunk_size'] = int(chunk_size) if chunk_size.strip() else None

    return PredictionConfig(**values)
