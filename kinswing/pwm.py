#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Thu Sep  4 14:33:10 2025

@author: kinswing

Position weight matrices for kinases, built from known substrate sequences.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

import numpy as np
import pandas as pd

from .background import BackgroundModel
from .errors import EmptyKinaseGroupError
from .settings import (AMINO_ACIDS, MIN_CONFIDENT_SUBSTRATES, PWM_PSEUDO_COUNT,
                       SUBSTRATE_LENGTH, WILD_CARD, logger, setup_logging)
from .utils import (SubstrateRecord, center_sequence, check_positive_int,
                    check_wild_card, countPositionOccurrence, read_kinase_table)


@dataclass(frozen=True, eq=False)
class PositionWeightMatrix:
    """
    Log-odds scoring matrix for one kinase.

    `weights` and `frequencies` are read-only arrays of shape
    (substrate length, len(alphabet)). Row i is position ``i - length // 2``
    relative to the phosphosite.
    """

    kinase_id: str
    weights: np.ndarray = field(repr=False)
    frequencies: np.ndarray = field(repr=False)
    n_substrates_used: int
    pseudo_count: float
    wild_card: str
    alphabet: tuple = AMINO_ACIDS

    @property
    def substrate_length(self):
        return self.weights.shape[0]

    @property
    def low_confidence(self):
        return self.n_substrates_used < MIN_CONFIDENT_SUBSTRATES

    def position_labels(self):
        center = self.substrate_length // 2
        return [f"Pos{i - center}" for i in range(self.substrate_length)]

    def to_frame(self, values="weights"):
        """
        Return the matrix as a DataFrame with positions as rows and amino acids
        as columns. `values` is "weights" (log-odds) or "frequencies".
        """
        data = self.weights if values == "weights" else self.frequencies
        return pd.DataFrame(data, index=self.position_labels(), columns=list(self.alphabet))

    def padded_weights(self):
        """Weights with an extra zero column so wild-card indices score nothing."""
        return np.hstack([self.weights, np.zeros((self.substrate_length, 1))])

    def padded_frequencies(self):
        return np.hstack([self.frequencies, np.zeros((self.substrate_length, 1))])


class PWMSet(Mapping):
    """
    Read-only mapping of kinase_id -> PositionWeightMatrix, together with the
    background model and alignment settings the matrices were built with.
    """

    def __init__(self, matrices, background, substrate_length, wild_card, alphabet=AMINO_ACIDS):
        self._matrices = MappingProxyType(dict(sorted(matrices.items())))
        self.background = background
        self.substrate_length = substrate_length
        self.wild_card = wild_card
        self.alphabet = tuple(alphabet)

    def __getitem__(self, kinase_id):
        return self._matrices[kinase_id]

    def __iter__(self):
        return iter(self._matrices)

    def __len__(self):
        return len(self._matrices)

    def __repr__(self):
        return f"PWMSet({len(self)} kinases, substrate_length={self.substrate_length})"

    def summary(self):
        """One row per kinase with the number of substrates used."""
        return pd.DataFrame({
            'kinase_id': list(self),
            'n_substrates_used': [pwm.n_substrates_used for pwm in self.values()],
            'low_confidence': [pwm.low_confidence for pwm in self.values()],
        })


def log_odds(counts, background, pseudo_count):
    """
    Convert a (positions x alphabet) count matrix to frequencies and log-odds.

    Each position is normalized by its own number of real residues, so padding
    does not dilute the probability mass. Positions without any residue get
    zero frequencies and zero weights.

    Parameters
    ----------
    counts : numpy.ndarray
        Residue counts per position, wild cards excluded.
    background : numpy.ndarray
        Background probability per alphabet letter.
    pseudo_count : float
        Added to every frequency before dividing by the background; must be
        positive to keep the weights finite.

    Returns
    -------
    frequencies : numpy.ndarray
    weights : numpy.ndarray
    """
    totals = counts.sum(axis=1, keepdims=True)
    frequencies = np.divide(counts, totals, out=np.zeros_like(counts, dtype=float), where=totals > 0)
    weights = np.log((frequencies + pseudo_count) / background)
    weights[totals[:, 0] == 0] = 0.0
    return frequencies, weights


def _center_letters(remove_center):
    if remove_center is None or remove_center is False:
        return None
    if not isinstance(remove_center, str) or not remove_center.strip():
        raise ValueError(f"remove_center must be False or amino acid letter(s), got {remove_center!r}")
    return set(remove_center.strip().upper())


def build_pwm(
    kinase_table,
    wild_card=WILD_CARD,
    substrate_length=SUBSTRATE_LENGTH,
    remove_center=False,
    pseudo_count=PWM_PSEUDO_COUNT,
    verbose=False
):
    """
    Build a position weight matrix for every kinase in a kinase-substrate table.

    Parameters
    ----------
    kinase_table : pandas.DataFrame
        Column 1 - kinase or kinase family name, column 2 - peptide sequence
        centered on the phosphosite. Rows without a sequence are ignored.
    wild_card : str, optional
        Character for positions outside the protein after centering
        (e.g. "___MERSTRELCLNF"). Default "_".
    substrate_length : int, optional
        Full length of the substrate window (default 15). Longer sequences are
        trimmed around their center; shorter ones raise SequenceLengthError.
    remove_center : str or False, optional
        Drop substrates whose center residue matches this letter (e.g. "Y").
        Default False keeps everything.
    pseudo_count : float, optional
        Added to position frequencies before the log transform (default 0.01).
    verbose : bool, optional
        Log progress messages.

    Returns
    -------
    PWMSet
        Mapping of kinase name to PositionWeightMatrix, carrying the background
        model derived from all kept substrates.

    Raises
    ------
    MalformedInputError
        If the table does not have kinase and sequence columns.
    InvalidAlphabetError
        If a sequence contains a residue outside the amino acid alphabet.
    SequenceLengthError
        If a sequence is too short or cannot be centered.
    EmptyKinaseGroupError
        If a kinase has no substrates left after filtering.
    """
    setup_logging(verbose)
    check_wild_card(wild_card)
    wild_card = wild_card.upper()
    substrate_length = check_positive_int(substrate_length, "substrate_length")
    if not pseudo_count > 0:
        raise ValueError(f"pseudo_count must be positive, got {pseudo_count!r}")
    center_letters = _center_letters(remove_center)
    center = substrate_length // 2

    pairs, kinases = read_kinase_table(kinase_table, wild_card)

    groups = {kinase: [] for kinase in kinases}
    removed = 0
    for kinase, sequence in pairs:
        aligned = center_sequence(sequence, substrate_length, wild_card, kinase, allow_padding=False)
        if center_letters is not None and aligned[center] in center_letters:
            removed += 1
            continue
        groups[kinase].append(SubstrateRecord(kinase, aligned, center))

    if removed:
        logger.info(f"Removed {removed} substrates with center residue in {sorted(center_letters)}")

    for kinase in sorted(groups):
        if not groups[kinase]:
            raise EmptyKinaseGroupError(kinase)

    substrates = [record for kinase in sorted(groups) for record in groups[kinase]]
    background = BackgroundModel.from_sequences(
        (record.sequence for record in substrates),
        AMINO_ACIDS, wild_card,
        records=(record.kinase_id for record in substrates),
    )
    if background.uniform:
        logger.warning("Too few substrate residues to estimate background composition; using uniform background")
    background_freq = background.as_array()

    matrices = {}
    for kinase in sorted(groups):
        records = groups[kinase]
        counts = countPositionOccurrence([record.sequence for record in records], AMINO_ACIDS, wild_card)
        frequencies, weights = log_odds(counts, background_freq, pseudo_count)
        frequencies.setflags(write=False)
        weights.setflags(write=False)
        matrices[kinase] = PositionWeightMatrix(
            kinase_id=kinase,
            weights=weights,
            frequencies=frequencies,
            n_substrates_used=len(records),
            pseudo_count=pseudo_count,
            wild_card=wild_card,
            alphabet=AMINO_ACIDS,
        )
        if len(records) < MIN_CONFIDENT_SUBSTRATES:
            logger.info(f"Kinase {kinase!r} built from {len(records)} substrate(s); low confidence PWM")

    logger.info(f"Built PWMs for {len(matrices)} kinases from {len(substrates)} substrates")

    return PWMSet(matrices, background, substrate_length, wild_card, AMINO_ACIDS)
