#!/usr/bin/env python3
"""
CLI entry point for m6A site prediction.

Usage:
    # Batch: CSV in, CSV out
    m6a-predict --model rf_fit.pkl --input m6A_input_example.csv --output predictions.csv

    # Single site
    m6a-predict --model rf_fit.pkl --gc-content 0.45 --rna-type mRNA --rna-region CDS \\
        --exon-length 120 --distance-to-junction 30 --evolutionary-conservation 0.8 \\
        --dna-5mer ATGCC
"""

import sys
import json
import logging
import argparse
import dataclasses
from pathlib import Path

import polars as pl

from m6a_prediction.core.config import UNMATCHED_POLICIES, load_config
from m6a_prediction.core.errors import M6APredictionError
from m6a_prediction.inference.decision import PROB_COL, STATUS_COL
from m6a_prediction.inference.predictor import M6APredictor

logger = logging.getLogger(__name__)

# argparse dest -> record field
SINGLE_SAMPLE_ARGS = {
    'gc_content': 'gc_content',
    'rna_type': 'RNA_type',
    'rna_region': 'RNA_region',
    'exon_length': 'exon_length',
    'distance_to_junction': 'distance_to_junction',
    'evolutionary_conservation': 'evolutionary_conservation',
    'dna_5mer': 'DNA_5mer',
}

LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO, 2: logging.DEBUG}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='m6a-predict',
        description='Predict m6A sites from per-site features with a trained classifier',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Batch prediction
  m6a-predict --model rf_fit.pkl --input m6A_input_example.csv --output predictions.csv

  # Single site
  m6a-predict --model rf_fit.pkl --gc-content 0.45 --rna-type mRNA --rna-region CDS \\
      --exon-length 120 --distance-to-junction 30 --evolutionary-conservation 0.8 --dna-5mer ATGCC

  # Stricter threshold, abort on unknown categories
  m6a-predict --model rf_fit.pkl --input sites.csv --threshold 0.7 --unmatched-policy error
"""
    )

    parser.add_argument(
        '--model',
        type=str,
        required=True,
        help='Trained classifier (.pkl, .pickle or .joblib)'
    )
    parser.add_argument(
        '--schema',
        type=str,
        default=None,
        help='Feature schema YAML (for classifiers saved without one)'
    )

    batch_group = parser.add_argument_group('batch mode')
    batch_group.add_argument(
        '--input',
        type=str,
        default=None,
        help='CSV file with one feature record per row'
    )
    batch_group.add_argument(
        '--output',
        type=str,
        default=None,
        help='Output CSV (default: print a preview)'
    )

    single_group = parser.add_argument_group('single-site mode')
    single_group.add_argument('--gc-content', type=float, default=None)
    single_group.add_argument('--rna-type', type=str, default=None,
                              help='mRNA, lincRNA, lncRNA or pseudogene')
    single_group.add_argument('--rna-region', type=str, default=None,
                              help="CDS, intron, 3'UTR or 5'UTR")
    single_group.add_argument('--exon-length', type=float, default=None)
    single_group.add_argument('--distance-to-junction', type=float, default=None)
    single_group.add_argument('--evolutionary-conservation', type=float, default=None)
    single_group.add_argument('--dna-5mer', type=str, default=None,
                              help='Nucleotide string of the schema length (e.g. ATGCC)')

    parser.add_argument(
        '--threshold',
        type=float,
        default=None,
        help='Decision threshold in [0, 1] (default: from config, 0.5)'
    )
    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Prediction config YAML'
    )
    parser.add_argument(
        '--unmatched-policy',
        type=str,
        default=None,
        choices=list(UNMATCHED_POLICIES),
        help='Handling of out-of-domain categorical values (default: warn)'
    )
    parser.add_argument(
        '--verbosity',
        type=int,
        default=1,
        choices=[0, 1, 2],
        help='Output verbosity (0=minimal, 1=normal, 2=detailed) (default: 1)'
    )
    return parser


def _single_sample_values(args) -> dict:
    return {field: getattr(args, dest) for dest, field in SINGLE_SAMPLE_ARGS.items()}


def _write_csv(frame: pl.DataFrame, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.with_columns([
        pl.col(name).cast(pl.Utf8)
        for name, dtype in frame.schema.items()
        if isinstance(dtype, pl.Enum)
    ]).write_csv(path)


def main(argv=None) -> int:
    """Main CLI entry point for m6A prediction."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=LOG_LEVELS[args.verbosity],
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    single = _single_sample_values(args)
    given = [name for name, value in single.items() if value is not None]
    if args.input and given:
        parser.error("--input cannot be combined with single-site options")
    if not args.input:
        missing = [
            '--' + dest.replace('_', '-')
            for dest, field in SINGLE_SAMPLE_ARGS.items() if single[field] is None
        ]
        if missing:
            parser.error(
                "either --input or all single-site options are required; missing: "
                + ", ".join(missing)
            )

    try:
        config = load_config(args.config)
        overrides = {}
        if args.threshold is not None:
            overrides['threshold'] = args.threshold
        if args.unmatched_policy is not None:
            overrides['unmatched_policy'] = args.unmatched_policy
        if overrides:
            config = dataclasses.replace(config, **overrides)

        predictor = M6APredictor.from_path(args.model, schema_path=args.schema, config=config)

        if args.input:
            records = pl.read_csv(args.input)
            logger.info(f"Read {records.height} record(s) from {args.input}")
            batch = predictor.predict_batch(records)

            if args.output:
                _write_csv(batch.frame, Path(args.output))
                logger.info(f"Wrote predictions to {args.output}")
            else:
                preview_cols = [c for c in records.columns if c in batch.frame.columns]
                print(batch.frame.select(preview_cols + [PROB_COL, STATUS_COL]).head(10))

            print(
                f"Predicted {len(batch)} site(s): {batch.n_positive} {config.positive_label}, "
                f"{len(batch) - batch.n_positive} {config.negative_label} "
                f"(threshold {batch.threshold})"
            )
        else:
            result = predictor.predict_one(**single)
            print(json.dumps(result))

        return 0

    except (M6APredictionError, OSError, ValueError, TypeError, pl.exceptions.PolarsError) as e:
        logger.error(f"Prediction failed: {e}")
        if args.verbosity >= 2:
            logger.exception("Traceback")
        return 1


if __name__ == '__main__':
    sys.exit(main())
