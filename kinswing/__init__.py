# -*- coding: utf-8 -*-
"""
Created on Mon Sep  1 10:12:44 2025

@author: kinswing

kinswing: kinase activity prediction from phosphoproteomic data.

Builds kinase PWMs from known substrates, scores phosphopeptide matches with
random-background p-values and integrates them with fold changes into
permutation-tested swing scores.
"""

# Optional convenience re-exports
from .errors import (	KinSwingError,
						InvalidAlphabetError,
						EmptyKinaseGroupError,
						MalformedInputError,
						SequenceLengthError
					)
from .background import BackgroundModel
from .pwm import build_pwm, PositionWeightMatrix, PWMSet
from .scoring import score_sequences
from .activity import swing
from .main import swing_master
from .utils import clean_annotation, SubstrateRecord, PeptideRecord
from .plots import plot_pwm_heatmap, plot_swing_scores

__version__ = "0.1.0"

__all__ = [
			"build_pwm", "score_sequences", "swing", "swing_master",
			"clean_annotation", "plot_pwm_heatmap", "plot_swing_scores",
			"BackgroundModel", "PositionWeightMatrix", "PWMSet",
			"SubstrateRecord", "PeptideRecord",
			"KinSwingError", "InvalidAlphabetError", "EmptyKinaseGroupError",
			"MalformedInputError", "SequenceLengthError"
			]
