#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Run the whole pipeline in one call and plot the strongest kinases.
"""

import pandas as pd

from kinswing import clean_annotation, plot_swing_scores, swing_master

kinase_table = pd.read_csv("data/kinase_substrates.csv")
phospho = clean_annotation(pd.read_csv("data/phosphoproteome.csv"))

swing_out = swing_master(input_data=phospho, kinase_table=kinase_table,
                         permutations=10, threads=4, verbose=True)

plot_swing_scores(swing_out, pdfname="./swing_scores.pdf", alpha=0.05, top_n=30)
