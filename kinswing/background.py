#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Wed Sep  3 09:05:52 2025

@author: kinswing

Background amino acid frequencies used for log-odds transforms and for drawing
random null peptides.
"""

from collections import Counter

import numpy as np

from .errors import InvalidAlphabetError
from .settings import AMINO_ACIDS


class BackgroundModel:
    """
    Expected frequency of each amino acid, independent of position.

    Frequencies are add-one smoothed counts over every residue observed in the
    substrate sequences, so no amino acid has a zero background. When fewer
    residues than alphabet letters were observed the model is uniform.
    """

    def __init__(self, probabilities, alphabet=AMINO_ACIDS, uniform=False):
        probabilities = np.asarray(probabilities, dtype=float)
        if probabilities.shape != (len(alphabet),):
            raise ValueError("probabilities must have one entry per alphabet letter")
        probabilities = probabilities / probabilities.sum()
        probabilities.setflags(write=False)
        self._probabilities = probabilities
        self.alphabet = tuple(alphabet)
        self.uniform = uniform

    @classmethod
    def uniform_model(cls, alphabet=AMINO_ACIDS):
        return cls(np.full(len(alphabet), 1.0 / len(alphabet)), alphabet, uniform=True)

    @classmethod
    def from_sequences(cls, sequences, alphabet=AMINO_ACIDS, wild_card='_', records=None):
        """
        Build the background from aggregate residue composition.

        Parameters
        ----------
        sequences : iterable of str
            Aligned substrate sequences.
        alphabet : sequence of str, optional
            Amino acids, in the order used by the PWMs.
        wild_card : str, optional
            Padding character; ignored when counting.
        records : iterable of str or None, optional
            Identifier for each sequence, used in error messages.

        Returns
        -------
        BackgroundModel
        """
        sequences = list(sequences)
        records = list(records) if records is not None else [str(i) for i in range(len(sequences))]

        counts = Counter()
        for sequence, record in zip(sequences, records):
            for residue in sequence:
                if residue == wild_card:
                    continue
                if residue not in alphabet:
                    raise InvalidAlphabetError(residue, record)
                counts[residue] += 1

        total = sum(counts.values())
        if total < len(alphabet):
            return cls.uniform_model(alphabet)

        smoothed = np.array([counts[aa] + 1 for aa in alphabet], dtype=float)
        return cls(smoothed / (total + len(alphabet)), alphabet)

    def frequencies(self, alphabet=None):
        """Return an ordered symbol -> probability dict."""
        if alphabet is None:
            alphabet = self.alphabet
        lookup = dict(zip(self.alphabet, self._probabilities))
        missing = [aa for aa in alphabet if aa not in lookup]
        if missing:
            raise InvalidAlphabetError(missing[0], "background")
        return {aa: float(lookup[aa]) for aa in alphabet}

    def as_array(self):
        return self._probabilities

    def sample(self, rng, n, length):
        """Draw `n` random sequences of `length` residues as alphabet indices."""
        return rng.choice(len(self.alphabet), size=(n, length), p=self._probabilities)

    def __repr__(self):
        kind = "uniform" if self.uniform else "composition"
        return f"BackgroundModel({kind}, {len(self.alphabet)} symbols)"
