#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Tue Sep  2 16:41:19 2025

@author: kinswing

Sequence handling and input table helpers shared by the PWM builder, the
sequence scorer and the swing engine.
"""

import zlib
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

import numpy as np
import pandas as pd

from .errors import InvalidAlphabetError, MalformedInputError, SequenceLengthError
from .settings import AMINO_ACIDS, logger


@dataclass(frozen=True)
class SubstrateRecord:
    """Known substrate of a kinase, centered on its phosphosite."""

    kinase_id: str
    sequence: str
    center_position: int


@dataclass(frozen=True)
class PeptideRecord:
    """Observed phosphopeptide with its fold change and significance."""

    annotation: str
    sequence: str
    fold_change: float
    p_value: float


# Stage salts keep the scorer and swing random streams apart
SCORING_STREAM = 0
SWING_STREAM = 1


def check_wild_card(wild_card, alphabet=AMINO_ACIDS):
    if not isinstance(wild_card, str) or len(wild_card) != 1:
        raise ValueError(f"wild_card must be a single character, got {wild_card!r}")
    if wild_card.upper() in alphabet:
        raise ValueError(f"wild_card '{wild_card}' collides with the amino acid alphabet")


def check_positive_int(value, name):
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 1:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return int(value)


def check_cutoff(value, name):
    if not 0 <= value <= 1:
        raise ValueError(f"{name} must be within [0, 1], got {value!r}")
    return float(value)


def check_alphabet(sequence, record, wild_card, alphabet=AMINO_ACIDS):
    """
    Raise InvalidAlphabetError for the first residue of `sequence` that is
    neither in `alphabet` nor the wild card.
    """
    allowed = set(alphabet)
    allowed.add(wild_card)
    for residue in sequence:
        if residue not in allowed:
            raise InvalidAlphabetError(residue, record)


def center_sequence(sequence, substrate_length, wild_card, record, allow_padding=True):
    """
    Align a phosphosite-centered sequence to `substrate_length`.

    The phosphosite is taken to be at index ``len(sequence) // 2``. Longer
    sequences are trimmed symmetrically around it; shorter sequences are padded
    with `wild_card` on both sides (e.g. ``"MERST"`` -> ``"_____MERST_____"``
    for length 15 gives the site at index 7) when `allow_padding` is True.

    Parameters
    ----------
    sequence : str
        Upper-cased sequence centered on the phosphosite.
    substrate_length : int
        Length of the aligned window.
    wild_card : str
        Padding character for positions outside the protein.
    record : str
        Identifier used in error messages (kinase or peptide annotation).
    allow_padding : bool, optional
        If False, sequences shorter than `substrate_length` are rejected.

    Returns
    -------
    str
        Sequence of exactly `substrate_length` characters.

    Raises
    ------
    SequenceLengthError
        If the sequence length parity differs from `substrate_length` (no common
        center exists) or the sequence is too short and padding is disabled.
    """
    length = len(sequence)
    if length == substrate_length:
        return sequence
    if (substrate_length - length) % 2 != 0:
        raise SequenceLengthError(record, length, substrate_length)
    if length > substrate_length:
        start = (length - substrate_length) // 2
        return sequence[start:start + substrate_length]
    if not allow_padding:
        raise SequenceLengthError(record, length, substrate_length)
    pad = wild_card * ((substrate_length - length) // 2)
    return pad + sequence + pad


def encode_sequences(sequences, alphabet=AMINO_ACIDS, wild_card='_'):
    """
    Convert aligned sequences to an integer array of alphabet indices.

    The wild card is encoded as ``len(alphabet)`` so it can index an extra
    all-zero weight column.

    Parameters
    ----------
    sequences : list of str
        Sequences of equal length.

    Returns
    -------
    numpy.ndarray
        Integer array of shape (len(sequences), sequence length).
    """
    lookup = {aa: i for i, aa in enumerate(alphabet)}
    lookup[wild_card] = len(alphabet)
    if not sequences:
        return np.zeros((0, 0), dtype=np.intp)
    return np.array([[lookup[aa] for aa in seq] for seq in sequences], dtype=np.intp)


def countPositionOccurrence(sequences, alphabet=AMINO_ACIDS, wild_card='_'):
    """
    Counts the occurrence of each amino acid at each position in a set of aligned sequences.

    Wild cards are not counted, so a position's column total is the number of
    sequences that have a real residue there.

    Parameters
    ----------
    sequences : list of str
        Aligned sequences of equal length.
    alphabet : sequence of str, optional
        Amino acid order of the output columns.
    wild_card : str, optional
        Padding character to skip.

    Returns
    -------
    numpy.ndarray
        A (sequence length x len(alphabet)) array of counts.
    """
    encoded = encode_sequences(list(sequences), alphabet, wild_card)
    counts = np.zeros((encoded.shape[1], len(alphabet) + 1))
    for position in range(encoded.shape[1]):
        counts[position] = np.bincount(encoded[:, position], minlength=len(alphabet) + 1)
    # drop the wild card column
    return counts[:, :len(alphabet)]


def _as_clean_string(value):
    if value is None or (np.ndim(value) == 0 and pd.isna(value)):
        return None
    if not isinstance(value, str):
        return value
    value = value.strip()
    return value or None


def read_kinase_table(kinase_table, wild_card='_', alphabet=AMINO_ACIDS):
    """
    Validate a kinase-substrate table and convert it to substrate records.

    Columns are used by position: column 1 is the kinase (or kinase family)
    name, column 2 the centered substrate sequence. Rows without a sequence are
    dropped; their kinase is still reported so that an emptied group can be
    detected by the caller.

    Parameters
    ----------
    kinase_table : pandas.DataFrame
        Table of known substrates.
    wild_card : str, optional
        Padding character allowed inside sequences.

    Returns
    -------
    records : list of tuple
        (kinase_id, upper-cased sequence) pairs in table order.
    kinases : list of str
        Every kinase named in the table, including those without sequences.
    """
    if not isinstance(kinase_table, pd.DataFrame):
        raise MalformedInputError("kinase_table", "*", "must be a pandas DataFrame")
    if kinase_table.shape[1] < 2:
        raise MalformedInputError("kinase_table", "*",
                                  f"expected 2 columns (kinase, sequence), found {kinase_table.shape[1]}")

    kinase_col, sequence_col = kinase_table.columns[0], kinase_table.columns[1]
    records = []
    kinases = []
    seen = set()
    for kinase, sequence in zip(kinase_table.iloc[:, 0], kinase_table.iloc[:, 1]):
        kinase = _as_clean_string(kinase)
        if kinase is None:
            raise MalformedInputError("kinase_table", kinase_col, "contains a missing kinase name")
        kinase = str(kinase)
        if kinase not in seen:
            seen.add(kinase)
            kinases.append(kinase)

        sequence = _as_clean_string(sequence)
        if sequence is None:
            continue
        if not isinstance(sequence, str):
            raise MalformedInputError("kinase_table", sequence_col,
                                      f"holds a non-text sequence for kinase '{kinase}'")
        sequence = sequence.upper()
        check_alphabet(sequence, kinase, wild_card.upper(), alphabet)
        records.append((kinase, sequence))

    return records, kinases


def read_input_data(input_data, wild_card='_', alphabet=AMINO_ACIDS):
    """
    Validate phosphoproteome data and convert it to peptide records.

    Columns are used by position: 1 annotation, 2 centered peptide sequence,
    3 fold change (-ve to +ve), 4 p-value [0-1]. Extra columns are ignored.

    Parameters
    ----------
    input_data : pandas.DataFrame
        Cleaned phosphopeptide table (see `clean_annotation`).
    wild_card : str, optional
        Padding character allowed inside sequences.

    Returns
    -------
    list of PeptideRecord
        One record per row, in table order.
    """
    if not isinstance(input_data, pd.DataFrame):
        raise MalformedInputError("input_data", "*", "must be a pandas DataFrame")
    if input_data.shape[1] < 4:
        raise MalformedInputError("input_data", "*",
                                  "expected 4 columns (annotation, sequence, fold change, p-value), "
                                  f"found {input_data.shape[1]}")

    annotation_col, sequence_col, fc_col, p_col = input_data.columns[:4]
    fold_changes = pd.to_numeric(input_data.iloc[:, 2], errors='coerce').to_numpy(dtype=float)
    p_values = pd.to_numeric(input_data.iloc[:, 3], errors='coerce').to_numpy(dtype=float)

    peptides = []
    seen = set()
    for i, (annotation, sequence) in enumerate(zip(input_data.iloc[:, 0], input_data.iloc[:, 1])):
        annotation = _as_clean_string(annotation)
        if annotation is None:
            raise MalformedInputError("input_data", annotation_col, f"is missing in row {i}")
        annotation = str(annotation)
        if annotation in seen:
            raise MalformedInputError("input_data", annotation_col,
                                      f"has duplicate annotation '{annotation}'")
        seen.add(annotation)

        sequence = _as_clean_string(sequence)
        if not isinstance(sequence, str):
            raise MalformedInputError("input_data", sequence_col,
                                      f"has no sequence for '{annotation}'")
        sequence = sequence.upper()
        check_alphabet(sequence, annotation, wild_card.upper(), alphabet)

        if not np.isfinite(fold_changes[i]):
            raise MalformedInputError("input_data", fc_col,
                                      f"is not a finite number for '{annotation}'")
        if not 0 <= p_values[i] <= 1:
            raise MalformedInputError("input_data", p_col,
                                      f"is not a p-value in [0, 1] for '{annotation}'")

        peptides.append(PeptideRecord(annotation, sequence, float(fold_changes[i]), float(p_values[i])))

    return peptides


def clean_annotation(input_data, sep=";"):
    """
    Extract one row per identifier from multi-mapped phosphopeptide annotations.

    Search engines often report a phosphopeptide that maps to several proteins
    as a single annotation joined by `sep` (e.g. ``"P1|AKT1|S473;P2|AKT2|S474"``).
    Each identifier becomes its own row carrying the same sequence, fold change
    and p-value. An identifier that ends up in several rows keeps only its
    first row, and the dropped identifiers are logged as a warning.

    Parameters
    ----------
    input_data : pandas.DataFrame
        Raw phosphoproteome table; the annotation is column 1.
    sep : str, optional
        Separator between mapped identifiers (default ";").

    Returns
    -------
    pandas.DataFrame
        New table with a fresh index; `input_data` is not modified.
    """
    if not isinstance(input_data, pd.DataFrame) or input_data.shape[1] < 4:
        raise MalformedInputError("input_data", "*",
                                  "expected a DataFrame with 4 columns (annotation, sequence, fold change, p-value)")

    df = input_data.copy()
    annotation_col = df.columns[0]
    if df[annotation_col].isna().any():
        raise MalformedInputError("input_data", annotation_col, "contains missing annotations")

    df[annotation_col] = df[annotation_col].astype(str).str.split(sep)
    df = df.explode(annotation_col)
    df[annotation_col] = df[annotation_col].str.strip()
    df = df[df[annotation_col] != ""]

    # First row wins for identifiers reported more than once
    repeated = df[annotation_col].duplicated(keep='first')
    if repeated.any():
        dropped = sorted(set(df.loc[repeated, annotation_col]))
        logger.warning(f"clean_annotation: {len(dropped)} identifiers occur in more than one row, "
                       f"keeping the first row of each ({', '.join(dropped[:5])}"
                       f"{', ...' if len(dropped) > 5 else ''})")
    df = df[~repeated].reset_index(drop=True)

    return df


def kinase_rng(seed, kinase_id, stream):
    """
    Independent random generator for one kinase task.

    With a seed, the stream is derived from (seed, crc32 of the kinase name,
    stage) so it does not depend on which worker runs the task. With
    ``seed=None`` a freshly seeded generator is returned.
    """
    if seed is None:
        return np.random.default_rng()
    salt = zlib.crc32(str(kinase_id).encode("utf-8"))
    return np.random.default_rng([int(seed), salt, stream])


def run_per_kinase(task, kinases, threads=1):
    """
    Run ``task(kinase_id)`` for every kinase in a bounded thread pool.

    Results are collected after all futures complete and returned as a dict
    keyed by kinase, so worker completion order never leaks into the output.
    """
    results = {}
    if threads == 1:
        for kinase_id in kinases:
            results[kinase_id] = task(kinase_id)
        return results

    with ThreadPoolExecutor(max_workers=threads) as executor:
        futures = {executor.submit(task, kinase_id): kinase_id for kinase_id in kinases}
        for future in as_completed(futures):
            kinase_id = futures[future]
            results[kinase_id] = future.result()
            logger.debug(f"Finished task for kinase {kinase_id!r}")

    return results
