"""Tests for PWM match scoring and background p-values."""

import numpy as np
import pandas as pd
import pytest

from kinswing import InvalidAlphabetError, MalformedInputError, build_pwm, score_sequences
from kinswing.scoring import MATCH_SCORE_COLUMNS, empirical_p_values


def test_output_layout(input_data, pwms):
    scores = score_sequences(input_data, pwm_in=pwms, n=200)

    assert list(scores.columns) == MATCH_SCORE_COLUMNS
    assert len(scores) == len(pwms) * len(input_data)
    expected = scores.sort_values(['kinase_id', 'peptide_id']).reset_index(drop=True)
    pd.testing.assert_frame_equal(scores, expected)


def test_empirical_p_bounds(input_data, pwms):
    n = 150
    scores = score_sequences(input_data, pwm_in=pwms, n=n)

    assert (scores['empirical_p'] >= 1 / (n + 1)).all()
    assert (scores['empirical_p'] <= 1).all()


def test_rerun_is_identical(input_data, pwms):
    first = score_sequences(input_data, pwm_in=pwms, n=300, seed=1234)
    second = score_sequences(input_data, pwm_in=pwms, n=300, seed=1234)

    pd.testing.assert_frame_equal(first, second)


def test_thread_count_does_not_change_output(input_data, pwms):
    single = score_sequences(input_data, pwm_in=pwms, n=300, seed=7, threads=1)
    threaded = score_sequences(input_data, pwm_in=pwms, n=300, seed=7, threads=3)

    pd.testing.assert_frame_equal(single, threaded)


def test_log_odds_does_not_depend_on_n(input_data, pwms):
    small = score_sequences(input_data, pwm_in=pwms, n=20)
    large = score_sequences(input_data, pwm_in=pwms, n=2000)

    np.testing.assert_array_equal(small['log_odds_score'], large['log_odds_score'])
    np.testing.assert_array_equal(small['raw_score'], large['raw_score'])


def test_exact_motif_match_is_significant(k1_table):
    pwms = build_pwm(k1_table)
    data = pd.DataFrame({
        'annotation': ['match', 'other'],
        'sequence': ['AAAMAAAAAAAAAAA', 'WWWWWWWSWWWWWWW'],
        'fc': [2.0, 1.0],
        'pval': [0.01, 0.01],
    })
    scores = score_sequences(data, pwm_in=pwms, n=1000).set_index('peptide_id')

    assert scores.loc['match', 'empirical_p'] <= 0.05
    assert scores.loc['other', 'empirical_p'] > scores.loc['match', 'empirical_p']
    assert scores.loc['match', 'log_odds_score'] > scores.loc['other', 'log_odds_score']


def test_log_odds_is_sum_of_aligned_weights(pwms, input_data):
    scores = score_sequences(input_data, pwm_in=pwms, n=10)
    row = scores[(scores['kinase_id'] == 'AKT1') & (scores['peptide_id'] == 'P2|GSK3B|S9')].iloc[0]

    weights = pwms['AKT1'].to_frame()
    expected = sum(weights.iloc[i][aa] for i, aa in enumerate('GRPRTTSFAESCKPV'))
    assert row['log_odds_score'] == pytest.approx(expected)


def test_short_peptides_are_padded_with_wild_card(pwms):
    data = pd.DataFrame({
        'annotation': ['short', 'padded'],
        'sequence': ['RPRAATF', '____RPRAATF____'],
        'fc': [1.0, 1.0],
        'pval': [0.01, 0.01],
    })
    scores = score_sequences(data, pwm_in=pwms, n=50)
    akt1 = scores[scores['kinase_id'] == 'AKT1'].set_index('peptide_id')

    assert akt1.loc['short', 'log_odds_score'] == akt1.loc['padded', 'log_odds_score']
    assert akt1.loc['short', 'empirical_p'] == akt1.loc['padded', 'empirical_p']


def test_uncenterable_peptide_emits_no_record(pwms):
    data = pd.DataFrame({
        'annotation': ['even', 'odd'],
        'sequence': ['RPRAATFA', 'RPRAATFAE'],
        'fc': [1.0, 1.0],
        'pval': [0.01, 0.01],
    })
    scores = score_sequences(data, pwm_in=pwms, n=50)

    assert set(scores['peptide_id']) == {'odd'}


def test_unseeded_run_stays_in_bounds(input_data, pwms):
    scores = score_sequences(input_data, pwm_in=pwms, n=100, seed=None)

    assert scores['empirical_p'].between(1 / 101, 1).all()


def test_force_trim_is_ignored(input_data, pwms):
    trimmed = score_sequences(input_data, pwm_in=pwms, n=100, force_trim=True)
    default = score_sequences(input_data, pwm_in=pwms, n=100)

    pd.testing.assert_frame_equal(trimmed, default)


def test_input_data_is_not_modified(input_data, pwms):
    before = input_data.copy()
    score_sequences(input_data, pwm_in=pwms, n=50)

    pd.testing.assert_frame_equal(input_data, before)


def test_rejects_unsupported_options(input_data, pwms):
    with pytest.raises(ValueError):
        score_sequences(input_data, background="proteome", pwm_in=pwms)
    with pytest.raises(ValueError):
        score_sequences(input_data, pwm_in=pwms, n=0)
    with pytest.raises(TypeError):
        score_sequences(input_data, pwm_in={'AKT1': None})


def test_malformed_input_data(input_data, pwms):
    with pytest.raises(MalformedInputError):
        score_sequences(input_data.iloc[:, :3], pwm_in=pwms)

    bad_p = input_data.copy()
    bad_p.loc[0, 'pval'] = 1.5
    with pytest.raises(MalformedInputError, match="pval"):
        score_sequences(bad_p, pwm_in=pwms)

    duplicated = pd.concat([input_data, input_data.iloc[[0]]], ignore_index=True)
    with pytest.raises(MalformedInputError, match="P1"):
        score_sequences(duplicated, pwm_in=pwms)


def test_empirical_p_values_counts_ties_as_extreme():
    null = np.array([1.0, 2.0, 3.0])

    np.testing.assert_allclose(
        empirical_p_values(np.array([0.0, 2.0, 3.0, 4.0]), null),
        [1.0, 0.75, 0.5, 0.25],
    )


def test_invalid_residue_in_peptide_names_the_peptide(input_data, pwms):
    data = input_data.copy()
    data.loc[3, 'peptide'] = 'ADEDDDDXEEDDSEE'
    with pytest.raises(InvalidAlphabetError, match="P4\\|NPM1\\|S125") as excinfo:
        score_sequences(data, pwm_in=pwms, n=50)

    assert excinfo.value.symbol == 'X'
    assert excinfo.value.record == 'P4|NPM1|S125'
