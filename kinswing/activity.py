#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Mon Sep  8 15:02:26 2025

@author: kinswing

Swing statistic: integrate kinase-substrate PWM matches with the direction and
significance of phosphopeptide changes, tested against label permutations.
"""

import numpy as np
import pandas as pd
import scipy.stats as stats
from statsmodels.stats.multitest import multipletests

from .errors import MalformedInputError
from .pwm import PWMSet
from .scoring import MATCH_SCORE_COLUMNS, empirical_p_values
from .settings import (P_CUT_FC, P_CUT_PWM, PERMUTATIONS, PSEUDO_COUNT, SEED,
                       THREADS, logger, setup_logging)
from .utils import (SWING_STREAM, check_cutoff, check_positive_int, kinase_rng,
                    read_input_data, run_per_kinase)

SWING_COLUMNS = ['kinase_id', 'swing_score', 'empirical_p', 'n_substrates_significant',
                 'n_permutations_run', 'n_network', 'n_positive', 'n_negative',
                 'pk', 'nk', 'swing_raw', 'swing_z', 'p_less', 'fdr']
NETWORK_COLUMNS = ['kinase_id', 'peptide_id', 'fold_change', 'p_value', 'empirical_p_pwm']


def peptide_contributions(fold_changes, p_values, p_cut_fc):
    """
    Signed unit contribution of each peptide: the sign of its fold change when
    its p-value passes `p_cut_fc`, otherwise 0.
    """
    fold_changes = np.asarray(fold_changes, dtype=float)
    p_values = np.asarray(p_values, dtype=float)
    return np.where(p_values <= p_cut_fc, np.sign(fold_changes), 0.0)


def network_score(contributions, edges):
    """Mean contribution over the kinase's network edges; NaN for an empty network."""
    if len(edges) == 0:
        return np.nan
    return contributions[edges].sum() / len(edges)


def permutation_p_values(observed, null_scores):
    """
    Upper and lower tail p-values of `observed` against permuted swing scores.

    A null without any spread cannot rank the observed score, so both tails are
    NaN in that case.
    """
    if np.isnan(observed) or len(null_scores) == 0 or np.ptp(null_scores) == 0:
        return np.nan, np.nan
    n = len(null_scores)
    p_greater = float(empirical_p_values(np.array([observed]), null_scores)[0])
    p_less = (1.0 + np.count_nonzero(null_scores <= observed)) / (n + 1.0)
    return p_greater, p_less


def _n_permutations(permutations):
    if permutations is None or isinstance(permutations, bool):
        return 0
    permutations = int(permutations)
    return permutations if permutations > 1 else 0


def _network_edges(pwm_scores, peptide_index, kinases, p_cut_pwm):
    missing = [col for col in MATCH_SCORE_COLUMNS if col not in pwm_scores.columns]
    if missing:
        raise MalformedInputError("pwm_scores", missing[0], "is missing")

    unknown_kinases = set(pwm_scores['kinase_id']) - set(kinases)
    if unknown_kinases:
        raise MalformedInputError("pwm_scores", "kinase_id",
                                  f"references kinase '{sorted(unknown_kinases)[0]}' not in pwm_in")
    unknown_peptides = set(pwm_scores['peptide_id']) - set(peptide_index)
    if unknown_peptides:
        raise MalformedInputError("pwm_scores", "peptide_id",
                                  f"references peptide '{sorted(unknown_peptides)[0]}' not in input_data")

    significant = pwm_scores[pwm_scores['empirical_p'] <= p_cut_pwm]
    significant = significant.drop_duplicates(subset=['kinase_id', 'peptide_id'])
    significant = significant.sort_values(['kinase_id', 'peptide_id'], kind='mergesort')

    edges = {kinase: np.zeros(0, dtype=np.intp) for kinase in kinases}
    pwm_p = {}
    for kinase, group in significant.groupby('kinase_id', sort=True):
        edges[kinase] = np.array([peptide_index[p] for p in group['peptide_id']], dtype=np.intp)
        pwm_p[kinase] = group['empirical_p'].to_numpy(dtype=float)
    return edges, pwm_p


def swing(
    input_data,
    pwm_in,
    pwm_scores,
    pseudo_count=PSEUDO_COUNT,
    p_cut_pwm=P_CUT_PWM,
    p_cut_fc=P_CUT_FC,
    permutations=PERMUTATIONS,
    seed=SEED,
    verbose=False,
    threads=THREADS,
    return_network=False
):
    """
    Predict kinase activity from PWM matches and phosphopeptide changes.

    For each kinase the peptides it matches with ``empirical_p <= p_cut_pwm``
    form its network. Each network peptide contributes +1 or -1 (sign of its
    fold change) if its own p-value passes `p_cut_fc`, otherwise 0. The swing
    score is the mean contribution over the network, so it lies in [-1, 1].

    Significance comes from permuting the (fold change, p-value) pairs across
    all peptides while keeping the kinase-peptide network fixed.

    Parameters
    ----------
    input_data : pandas.DataFrame
        The same four-column table passed to `score_sequences`.
    pwm_in : PWMSet
        Output of `build_pwm`; every kinase gets a row in the result.
    pwm_scores : pandas.DataFrame
        Output of `score_sequences`.
    pseudo_count : float, optional
        Pseudo-count for the pk/nk proportions and the log-weighted raw swing
        score (default 1).
    p_cut_pwm : float, optional
        Match p-value cut-off for a kinase-substrate edge (default 0.05).
    p_cut_fc : float, optional
        Peptide p-value cut-off for a directional contribution (default 0.05).
    permutations : int or False, optional
        Number of label permutations. 1, 0 or False skips permutation and
        reports NaN p-values (default 100).
    seed : int or None, optional
        Seed for reproducible permutations (default 1234).
    verbose : bool, optional
        Log progress messages.
    threads : int, optional
        Number of worker threads, one task per kinase (default 1).
    return_network : bool, optional
        Also return the table of network edges (default False).

    Returns
    -------
    pandas.DataFrame
        One row per kinase, sorted by kinase, with columns
        'kinase_id', 'swing_score', 'empirical_p', 'n_substrates_significant',
        'n_permutations_run', 'n_network', 'n_positive', 'n_negative', 'pk',
        'nk', 'swing_raw', 'swing_z', 'p_less', 'fdr'.
    pandas.DataFrame, optional
        Network edges ('kinase_id', 'peptide_id', 'fold_change', 'p_value',
        'empirical_p_pwm') when `return_network` is True.
    """
    setup_logging(verbose)
    if not isinstance(pwm_in, PWMSet):
        raise TypeError("pwm_in must be the PWMSet returned by build_pwm()")
    if not isinstance(pwm_scores, pd.DataFrame):
        raise MalformedInputError("pwm_scores", "*", "must be a pandas DataFrame")
    if not pseudo_count > 0:
        raise ValueError(f"pseudo_count must be positive, got {pseudo_count!r}")
    p_cut_pwm = check_cutoff(p_cut_pwm, "p_cut_pwm")
    p_cut_fc = check_cutoff(p_cut_fc, "p_cut_fc")
    threads = check_positive_int(threads, "threads")
    n_perm = _n_permutations(permutations)

    peptides = read_input_data(input_data, pwm_in.wild_card, pwm_in.alphabet)
    peptide_index = {peptide.annotation: i for i, peptide in enumerate(peptides)}
    fold_changes = np.array([peptide.fold_change for peptide in peptides], dtype=float)
    p_values = np.array([peptide.p_value for peptide in peptides], dtype=float)
    contributions = peptide_contributions(fold_changes, p_values, p_cut_fc)

    kinases = list(pwm_in)
    edges, pwm_p = _network_edges(pwm_scores.copy(), peptide_index, kinases, p_cut_pwm)

    logger.info(f"Computing swing scores for {len(kinases)} kinases over {len(peptides)} peptides "
                f"with {n_perm} permutations")

    def swing_kinase(kinase_id):
        network = edges[kinase_id]
        size = len(network)
        n_positive = int(np.count_nonzero(contributions[network] > 0))
        n_negative = int(np.count_nonzero(contributions[network] < 0))
        observed = network_score(contributions, network)

        if size > 0:
            pk = (n_positive + pseudo_count) / (size + 2 * pseudo_count)
            nk = (n_negative + pseudo_count) / (size + 2 * pseudo_count)
            swing_raw = pk * np.log2(n_positive + pseudo_count) - nk * np.log2(n_negative + pseudo_count)
        else:
            pk = nk = swing_raw = np.nan

        p_greater = p_less = np.nan
        if n_perm and size > 0:
            rng = kinase_rng(seed, kinase_id, SWING_STREAM)
            null_scores = np.empty(n_perm)
            for i in range(n_perm):
                shuffled = contributions[rng.permutation(len(contributions))]
                null_scores[i] = network_score(shuffled, network)
            p_greater, p_less = permutation_p_values(observed, null_scores)

        return {
            'kinase_id': kinase_id,
            'swing_score': observed,
            'empirical_p': p_greater,
            'n_substrates_significant': n_positive + n_negative,
            'n_permutations_run': n_perm,
            'n_network': size,
            'n_positive': n_positive,
            'n_negative': n_negative,
            'pk': pk,
            'nk': nk,
            'swing_raw': swing_raw,
            'p_less': p_less,
        }

    rows = run_per_kinase(swing_kinase, kinases, threads)
    swing_out = pd.DataFrame([rows[k] for k in sorted(rows)])
    if swing_out.empty:
        swing_out = pd.DataFrame(columns=SWING_COLUMNS)
    swing_out['swing_z'] = normalise_scores(swing_out['swing_raw'].to_numpy(dtype=float))
    swing_out['fdr'] = adjust_p_values(swing_out['empirical_p'].to_numpy(dtype=float))
    swing_out = swing_out[SWING_COLUMNS].reset_index(drop=True)

    n_no_network = int((swing_out['n_network'] == 0).sum())
    if n_no_network:
        logger.info(f"{n_no_network} kinases have no substrate passing p_cut_pwm={p_cut_pwm}")

    if not return_network:
        return swing_out

    network_rows = []
    for kinase_id in sorted(edges):
        for peptide_i, match_p in zip(edges[kinase_id], pwm_p.get(kinase_id, [])):
            network_rows.append((kinase_id, peptides[peptide_i].annotation,
                                 fold_changes[peptide_i], p_values[peptide_i], match_p))
    network = pd.DataFrame(network_rows, columns=NETWORK_COLUMNS)

    return swing_out, network


def normalise_scores(values):
    """
    Z-score finite values across kinases; NaN where undefined.

    Fewer than two finite values, or no spread between them, gives all NaN.
    """
    out = np.full(len(values), np.nan)
    finite = np.isfinite(values)
    if finite.sum() < 2 or np.ptp(values[finite]) == 0:
        return out
    out[finite] = stats.zscore(values[finite], ddof=1)
    return out


def adjust_p_values(p_values, method="fdr_bh"):
    """Benjamini-Hochberg adjust the finite p-values; NaN stays NaN."""
    out = np.full(len(p_values), np.nan)
    finite = np.isfinite(p_values)
    if finite.any():
        out[finite] = multipletests(p_values[finite], method=method)[1]
    return out
