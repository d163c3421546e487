#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Build kinase PWMs from a kinase-substrate table and plot one of them.
"""

import pandas as pd

from kinswing import build_pwm, plot_pwm_heatmap

kinase_table = pd.read_csv("data/kinase_substrates.csv")

pwms = build_pwm(kinase_table, wild_card="_", substrate_length=15, remove_center=False, verbose=True)
print(pwms.summary())

plot_pwm_heatmap(pwms["AKT1"], pdfname="./akt1_pwm.pdf")
