# -*- coding: utf-8 -*-
"""
Created on Mon Sep  1 10:20:07 2025

@author: kinswing

Exceptions raised while validating kinase tables, peptide data and sequences.

All of them derive from ValueError so callers that already guard against bad
input with ``except ValueError`` keep working.
"""


class KinSwingError(ValueError):
    """Base class for input errors raised by kinswing."""


class InvalidAlphabetError(KinSwingError):
    """A residue symbol is not part of the amino acid alphabet or the wild card."""

    def __init__(self, symbol, record):
        self.symbol = symbol
        self.record = record
        super().__init__(f"Unrecognized residue '{symbol}' in record '{record}'")


class EmptyKinaseGroupError(KinSwingError):
    """A kinase has no usable substrate sequences left after filtering."""

    def __init__(self, kinase_id):
        self.kinase_id = kinase_id
        super().__init__(f"No usable substrate sequences for kinase '{kinase_id}'")


class MalformedInputError(KinSwingError):
    """Wrong column count or column types in kinase_table or input_data."""

    def __init__(self, table, column, detail):
        self.table = table
        self.column = column
        self.detail = detail
        super().__init__(f"{table}: column '{column}' {detail}")


class SequenceLengthError(KinSwingError):
    """Sequence is shorter than required or cannot be centered on its phosphosite."""

    def __init__(self, record, length, expected):
        self.record = record
        self.length = length
        self.expected = expected
        super().__init__(
            f"Sequence for '{record}' has length {length} and cannot be centered "
            f"to substrate length {expected}"
        )
