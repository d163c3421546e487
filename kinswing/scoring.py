#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Fri Sep  5 11:27:38 2025

@author: kinswing

Score phosphopeptides against kinase PWMs and assign empirical p-values from
randomly generated background peptides.
"""

import numpy as np
import pandas as pd

from .errors import SequenceLengthError
from .pwm import PWMSet
from .settings import BACKGROUND, N_BACKGROUND, SEED, THREADS, logger, setup_logging
from .utils import (SCORING_STREAM, center_sequence, check_positive_int,
                    encode_sequences, kinase_rng, read_input_data, run_per_kinase)

MATCH_SCORE_COLUMNS = ['kinase_id', 'peptide_id', 'raw_score', 'log_odds_score', 'empirical_p']


def empirical_p_values(observed, null_scores):
    """
    Rank-based p-value of each observed score against a null sample.

        p = (1 + #(null >= observed)) / (n + 1)

    The +1 keeps every p-value at or above 1 / (n + 1). Ties with the null
    count as at least as extreme.

    Parameters
    ----------
    observed : numpy.ndarray
        Observed scores.
    null_scores : numpy.ndarray
        Scores of the null sample.

    Returns
    -------
    numpy.ndarray
        p-values in [1 / (n + 1), 1].
    """
    null_sorted = np.sort(np.asarray(null_scores, dtype=float))
    n = null_sorted.shape[0]
    n_greater_equal = n - np.searchsorted(null_sorted, observed, side='left')
    return (1.0 + n_greater_equal) / (n + 1.0)


def score_matrix(weights, encoded):
    """Sum the weights of every aligned residue; `weights` must carry the zero wild-card column."""
    if encoded.shape[0] == 0:
        return np.zeros(0)
    positions = np.arange(weights.shape[0])
    return weights[positions, encoded].sum(axis=1)


def align_peptides(peptides, substrate_length, wild_card):
    """
    Center every peptide on the PWM window.

    Peptides whose length cannot share a center with the window are skipped
    with a warning; they get no match score.

    Returns
    -------
    ids : list of str
    aligned : list of str
    """
    ids = []
    aligned = []
    for peptide in peptides:
        try:
            sequence = center_sequence(peptide.sequence, substrate_length, wild_card, peptide.annotation)
        except SequenceLengthError as err:
            logger.warning(f"Skipping peptide: {err}")
            continue
        ids.append(peptide.annotation)
        aligned.append(sequence)
    return ids, aligned


def score_sequences(
    input_data,
    background=BACKGROUND,
    pwm_in=None,
    n=N_BACKGROUND,
    force_trim=False,
    seed=SEED,
    verbose=False,
    threads=THREADS
):
    """
    Score PWM matches of every kinase against a set of peptide sequences.

    Every peptide is aligned on its center and scored against each PWM by
    summing the log-odds weights of its non-wild-card residues. For each kinase
    `n` random peptides are drawn from the background amino acid frequencies
    and scored the same way; the rank of the observed score in that null gives
    the empirical p-value.

    Parameters
    ----------
    input_data : pandas.DataFrame
        Column 1 - annotation, column 2 - centered peptide sequence,
        column 3 - fold change, column 4 - p-value. The same table is later
        passed to `swing`.
    background : str, optional
        Only "random" is supported (default).
    pwm_in : PWMSet
        Output of `build_pwm`.
    n : int, optional
        Number of random background peptides per kinase (default 1000).
    force_trim : bool, optional
        Not yet supported; True only logs a warning (default False).
    seed : int or None, optional
        Seed for reproducible backgrounds. None draws a fresh background per
        kinase (default 1234).
    verbose : bool, optional
        Log progress messages.
    threads : int, optional
        Number of worker threads, one task per kinase (default 1).

    Returns
    -------
    pandas.DataFrame
        Columns 'kinase_id', 'peptide_id', 'raw_score', 'log_odds_score',
        'empirical_p', sorted by kinase then peptide.
    """
    setup_logging(verbose)
    if not isinstance(pwm_in, PWMSet):
        raise TypeError("pwm_in must be the PWMSet returned by build_pwm()")
    if background != "random":
        raise ValueError(f"background={background!r} is not supported; only 'random' is available")
    if force_trim:
        logger.warning("force_trim is not yet supported and is ignored")
    n = check_positive_int(n, "n")
    threads = check_positive_int(threads, "threads")

    wild_card = pwm_in.wild_card
    length = pwm_in.substrate_length
    peptides = read_input_data(input_data, wild_card, pwm_in.alphabet)
    ids, aligned = align_peptides(peptides, length, wild_card)
    encoded = encode_sequences(aligned, pwm_in.alphabet, wild_card)

    logger.info(f"Scoring {len(ids)} peptides against {len(pwm_in)} PWMs with {n} background sequences")

    def score_kinase(kinase_id):
        pwm = pwm_in[kinase_id]
        weights = pwm.padded_weights()
        observed = score_matrix(weights, encoded)
        raw = score_matrix(pwm.padded_frequencies(), encoded)

        rng = kinase_rng(seed, kinase_id, SCORING_STREAM)
        null_scores = score_matrix(weights, pwm_in.background.sample(rng, n, length))

        return pd.DataFrame({
            'kinase_id': kinase_id,
            'peptide_id': ids,
            'raw_score': raw,
            'log_odds_score': observed,
            'empirical_p': empirical_p_values(observed, null_scores),
        }, columns=MATCH_SCORE_COLUMNS)

    fragments = run_per_kinase(score_kinase, list(pwm_in), threads)

    if not ids or not fragments:
        return pd.DataFrame(columns=MATCH_SCORE_COLUMNS)

    scores = pd.concat([fragments[k] for k in sorted(fragments)], ignore_index=True)
    scores = scores.sort_values(['kinase_id', 'peptide_id'], kind='mergesort').reset_index(drop=True)

    return scores
