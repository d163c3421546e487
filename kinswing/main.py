# main.py
# ---------------------------------------------------------
# Runs the full kinswing pipeline:
#   1) Build PWMs from the kinase-substrate table.
#   2) Score PWM matches against the phosphopeptides.
#   3) Compute swing scores and their permutation p-values.
#
# CLI behavior:
#   • Both tables are read with pandas (CSV, or TSV for .tsv/.txt files).
#   • Columns are used by position, header names are free.
#   • Results are written next to the input unless -o/--output is given.
# ---------------------------------------------------------

import argparse
import os
import time

import pandas as pd

from . import settings
from .activity import swing
from .pwm import build_pwm
from .scoring import score_sequences
from .settings import logger, setup_logging
from .utils import clean_annotation


def swing_master(
    input_data=None,
    kinase_table=None,
    wild_card=settings.WILD_CARD,
    substrate_length=settings.SUBSTRATE_LENGTH,
    remove_center=False,
    background=settings.BACKGROUND,
    n=settings.N_BACKGROUND,
    force_trim=False,
    seed=settings.SEED,
    pseudo_count=settings.PSEUDO_COUNT,
    p_cut_pwm=settings.P_CUT_PWM,
    p_cut_fc=settings.P_CUT_FC,
    permutations=settings.PERMUTATIONS,
    verbose=False,
    threads=settings.THREADS
):
    """
    Build PWMs, score peptide matches and compute swing scores in one call.

    Parameters are forwarded unchanged to `build_pwm`, `score_sequences` and
    `swing`; see those functions for details. `input_data` should already be
    cleaned with `clean_annotation` if annotations are multi-mapped.

    Returns
    -------
    pandas.DataFrame
        Swing scores and p-values (NaN if no permutations were run), one row
        per kinase.
    """
    if input_data is None or kinase_table is None:
        raise ValueError("input_data and kinase_table are both required")
    setup_logging(verbose)

    logger.info("[Step1/3] : Building PWMs")
    pwm_out = build_pwm(
        kinase_table,
        wild_card=wild_card,
        substrate_length=substrate_length,
        remove_center=remove_center,
        verbose=verbose,
    )

    logger.info("[Step2/3] : Scoring PWM matches to peptide sequences")
    scores_out = score_sequences(
        input_data,
        background=background,
        pwm_in=pwm_out,
        n=n,
        force_trim=force_trim,
        seed=seed,
        verbose=verbose,
        threads=threads,
    )

    logger.info("[Step3/3] : Computing Swing scores")
    swing_out = swing(
        input_data,
        pwm_in=pwm_out,
        pwm_scores=scores_out,
        pseudo_count=pseudo_count,
        p_cut_pwm=p_cut_pwm,
        p_cut_fc=p_cut_fc,
        permutations=permutations,
        seed=seed,
        verbose=verbose,
        threads=threads,
    )

    logger.info("[COMPLETE]")
    return swing_out


def read_table(path):
    """Read a CSV, or a tab-separated file for .tsv/.txt extensions."""
    sep = "\t" if os.path.splitext(path)[1].lower() in (".tsv", ".txt") else ","
    return pd.read_csv(path, sep=sep)


def make_output_path(input_path: str):
    base = os.path.splitext(input_path)[0]
    return f"{base}_swing.csv"


def _seed(value):
    return None if str(value).lower() == "none" else int(value)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="kinswing",
        description="Predict kinase activity from phosphoproteomic data with PWM matching and swing scores.",
    )
    parser.add_argument("input_data", help="Phosphopeptide table: annotation, sequence, fold change, p-value")
    parser.add_argument("kinase_table", help="Kinase-substrate table: kinase, centered sequence")
    parser.add_argument("-o", "--output", default=None, help="Output CSV (default: <input_data>_swing.csv)")
    parser.add_argument("--clean-annotation", action="store_true",
                        help="Split multi-mapped annotations before scoring")
    parser.add_argument("--annotation-sep", default=";", help="Separator of multi-mapped annotations")
    parser.add_argument("--wild-card", default=settings.WILD_CARD)
    parser.add_argument("--substrate-length", type=int, default=settings.SUBSTRATE_LENGTH)
    parser.add_argument("--remove-center", default=False,
                        help="Drop substrates whose center residue is this letter (e.g. Y)")
    parser.add_argument("--background", default=settings.BACKGROUND, choices=["random"])
    parser.add_argument("-n", type=int, default=settings.N_BACKGROUND,
                        help="Number of random background peptides for PWM p-values")
    parser.add_argument("--force-trim", action="store_true", help="Not yet supported; ignored")
    parser.add_argument("--seed", type=_seed, default=settings.SEED, help="Random seed, or 'none'")
    parser.add_argument("--pseudo-count", type=float, default=settings.PSEUDO_COUNT)
    parser.add_argument("--p-cut-pwm", type=float, default=settings.P_CUT_PWM)
    parser.add_argument("--p-cut-fc", type=float, default=settings.P_CUT_FC)
    parser.add_argument("--permutations", type=int, default=settings.PERMUTATIONS)
    parser.add_argument("--threads", type=int, default=settings.THREADS, help="Number of worker threads")
    parser.add_argument("--verbose", action="store_true", help="Print stage progress")
    return parser


def main(argv=None):
    """CLI entry: read both tables, run swing_master and write the result CSV."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    start = time.time()
    input_data = read_table(args.input_data)
    if args.clean_annotation:
        input_data = clean_annotation(input_data, sep=args.annotation_sep)
    kinase_table = read_table(args.kinase_table)

    swing_out = swing_master(
        input_data=input_data,
        kinase_table=kinase_table,
        wild_card=args.wild_card,
        substrate_length=args.substrate_length,
        remove_center=args.remove_center,
        background=args.background,
        n=args.n,
        force_trim=args.force_trim,
        seed=args.seed,
        pseudo_count=args.pseudo_count,
        p_cut_pwm=args.p_cut_pwm,
        p_cut_fc=args.p_cut_fc,
        permutations=args.permutations,
        verbose=args.verbose,
        threads=args.threads,
    )

    output = args.output or make_output_path(args.input_data)
    swing_out.to_csv(output, index=False)
    logger.info(f"Completed in {time.time() - start:.2f} seconds with {args.threads} threads")
    print(f"Swing scores written to {output}")
    return swing_out


# Runs when executed with python -m kinswing.main
if __name__ == "__main__":
    main()
