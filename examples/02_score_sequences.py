#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Score phosphopeptides against kinase PWMs, then compute swing scores stage by stage.
"""

import pandas as pd

from kinswing import build_pwm, clean_annotation, score_sequences, swing

kinase_table = pd.read_csv("data/kinase_substrates.csv")
phospho = clean_annotation(pd.read_csv("data/phosphoproteome.csv"))

pwms = build_pwm(kinase_table)
scores = score_sequences(phospho, pwm_in=pwms, n=1000, seed=1234, threads=4)
scores.to_csv("./pwm_scores.csv", index=False)

swing_out, network = swing(phospho, pwms, scores, permutations=1000, threads=4, return_network=True)
swing_out.to_csv("./swing_scores.csv", index=False)
network.to_csv("./swing_network.csv", index=False)
