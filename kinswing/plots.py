#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Tue Sep  9 13:48:03 2025

@author: kinswing

Heatmaps of kinase PWMs and bar charts of swing scores.
"""

import numpy as np
import matplotlib.pyplot as plt
import seaborn as sns
from matplotlib.patches import Rectangle


def plot_pwm_heatmap(pwm, pdfname=None, highlim=None, lowlim=None, ax=None):
    """
    Plot the log-odds weights of a PWM as a heatmap.

    Amino acids are on the y-axis and positions relative to the phosphosite on
    the x-axis. Colour limits default to symmetric around zero.

    Parameters
    ----------
    pwm : PositionWeightMatrix
        Matrix returned in the `build_pwm` output.
    pdfname : str or None, optional
        If set, the figure is saved to this path and closed.
    highlim, lowlim : float or None, optional
        Color limits; if None, set symmetrically around 0 based on data.
    ax : matplotlib.axes.Axes or None, optional
        Axes to draw on; a new figure is created if None.

    Returns
    -------
    matplotlib.axes.Axes
    """
    weights = pwm.to_frame().T

    if highlim is None or lowlim is None:
        highlim = float(np.nanmax(np.abs(weights.to_numpy())))
        if highlim == 0:
            highlim = 1.0
        lowlim = -highlim

    if ax is None:
        fig, ax = plt.subplots(figsize=(0.45 * weights.shape[1] + 2, 6))
    else:
        fig = ax.figure

    sns.heatmap(
        weights,
        vmin=lowlim, vmax=highlim,
        center=0,
        cmap='RdBu_r',
        xticklabels=True,
        yticklabels=True,
        square=True,
        ax=ax,
        cbar_kws={'label': 'Log-odds'}
    )
    ax.set_title(f"{pwm.kinase_id} (n = {pwm.n_substrates_used})")
    ax.tick_params(axis='y', rotation=0)

    if pdfname is not None:
        fig.savefig(pdfname, bbox_inches='tight')
        plt.close(fig)

    return ax


def plot_swing_scores(swing_out, pdfname=None, alpha=0.05, top_n=None, ax=None):
    """
    Bar chart of swing scores per kinase.

    Kinases without a network (NaN swing score) are left out. Bars whose
    permutation p-value is at or below `alpha` are outlined in black.

    Parameters
    ----------
    swing_out : pandas.DataFrame
        Output of `swing` or `swing_master`.
    pdfname : str or None, optional
        If set, the figure is saved to this path and closed.
    alpha : float, optional
        Significance threshold for outlining bars (default 0.05).
    top_n : int or None, optional
        Only plot the `top_n` kinases with the largest absolute swing score.
    ax : matplotlib.axes.Axes or None, optional
        Axes to draw on; a new figure is created if None.

    Returns
    -------
    matplotlib.axes.Axes
    """
    data = swing_out.dropna(subset=['swing_score'])
    data = data.assign(abs_score=data['swing_score'].abs())
    if top_n is not None:
        data = data.nlargest(top_n, 'abs_score')
    data = data.sort_values('swing_score', ascending=False)

    if ax is None:
        fig, ax = plt.subplots(figsize=(max(4, 0.3 * len(data) + 2), 4))
    else:
        fig = ax.figure

    colors = ['#B2182B' if score > 0 else '#2166AC' for score in data['swing_score']]
    x = np.arange(len(data))
    ax.bar(x, data['swing_score'], color=colors)
    ax.axhline(0, color='black', linewidth=0.5)
    ax.set_xticks(x)
    ax.set_xticklabels(data['kinase_id'], rotation=90)
    ax.set_ylabel('Swing score')
    ax.set_ylim(-1.05, 1.05)

    # Outline bars with a significant permutation p-value
    significant = (data['empirical_p'] <= alpha).to_numpy()
    for i, (score, sig) in enumerate(zip(data['swing_score'], significant)):
        if sig:
            rect = Rectangle((i - 0.4, min(0, score)), 0.8, abs(score), linewidth=1.2,
                             edgecolor='black', facecolor='none')
            ax.add_patch(rect)

    if pdfname is not None:
        fig.savefig(pdfname, bbox_inches='tight')
        plt.close(fig)

    return ax
