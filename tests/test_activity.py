"""Tests for swing scores and network permutation."""

import numpy as np
import pandas as pd
import pytest

from kinswing import MalformedInputError, build_pwm, score_sequences, swing
from kinswing.activity import (SWING_COLUMNS, adjust_p_values, normalise_scores,
                               peptide_contributions, permutation_p_values)


@pytest.fixture
def k1_pwms(k1_table):
    return build_pwm(k1_table)


def match_table(kinase_id, peptide_ids, p_values):
    return pd.DataFrame({
        'kinase_id': kinase_id,
        'peptide_id': peptide_ids,
        'raw_score': 0.0,
        'log_odds_score': 0.0,
        'empirical_p': p_values,
    })


def test_single_matching_peptide_scores_plus_one(k1_pwms):
    data = pd.DataFrame({
        'annotation': ['K1_motif'],
        'sequence': ['AAAMAAAAAAAAAAA'],
        'fc': [2.0],
        'pval': [0.01],
    })
    scores = score_sequences(data, pwm_in=k1_pwms, n=1000)
    result = swing(data, k1_pwms, scores, p_cut_pwm=0.05, p_cut_fc=0.05, permutations=0)

    assert list(result.columns) == SWING_COLUMNS
    row = result.iloc[0]
    assert row['kinase_id'] == 'K1'
    assert row['swing_score'] == 1.0
    assert np.isnan(row['empirical_p'])
    assert row['n_substrates_significant'] == 1
    assert row['n_permutations_run'] == 0


def test_score_is_mean_of_gated_signs(k1_pwms):
    data = pd.DataFrame({
        'annotation': ['up', 'down', 'up_ns', 'outside'],
        'sequence': ['AAAMAAAAAAAAAAA'] * 4,
        'fc': [1.5, -2.0, 3.0, 1.0],
        'pval': [0.01, 0.001, 0.5, 0.01],
    })
    scores = match_table('K1', ['up', 'down', 'up_ns', 'outside'], [0.01, 0.02, 0.03, 0.2])
    row = swing(data, k1_pwms, scores, permutations=False).iloc[0]

    assert row['n_network'] == 3
    assert row['n_positive'] == 1
    assert row['n_negative'] == 1
    assert row['n_substrates_significant'] == 2
    assert row['swing_score'] == 0.0
    assert row['pk'] == pytest.approx(2 / 5)
    assert row['nk'] == pytest.approx(2 / 5)
    assert row['swing_raw'] == pytest.approx(0.0)


def test_kinase_without_network_is_kept_as_na(kinase_table, input_data):
    pwms = build_pwm(kinase_table)
    scores = match_table('AKT1', ['P1|AKT1S1|T246'], [0.01])
    result = swing(input_data, pwms, scores, permutations=10).set_index('kinase_id')

    assert list(result.index) == ['AKT1', 'CDK1', 'CK2']
    assert result.loc['AKT1', 'swing_score'] == 1.0
    for kinase in ['CDK1', 'CK2']:
        assert np.isnan(result.loc[kinase, 'swing_score'])
        assert np.isnan(result.loc[kinase, 'empirical_p'])
        assert result.loc[kinase, 'n_network'] == 0


def test_swing_scores_are_bounded(input_data, pwms):
    scores = score_sequences(input_data, pwm_in=pwms, n=200)
    result = swing(input_data, pwms, scores, p_cut_pwm=0.5, permutations=20)
    finite = result['swing_score'].dropna()

    assert ((finite >= -1) & (finite <= 1)).all()


def test_permutations_are_reproducible(input_data, pwms):
    scores = score_sequences(input_data, pwm_in=pwms, n=200, seed=1234)
    first = swing(input_data, pwms, scores, p_cut_pwm=0.5, permutations=10, seed=1234)
    second = swing(input_data, pwms, scores, p_cut_pwm=0.5, permutations=10, seed=1234)

    pd.testing.assert_frame_equal(first, second)


def test_thread_count_does_not_change_output(input_data, pwms):
    scores = score_sequences(input_data, pwm_in=pwms, n=200)
    single = swing(input_data, pwms, scores, p_cut_pwm=0.5, permutations=50, threads=1)
    threaded = swing(input_data, pwms, scores, p_cut_pwm=0.5, permutations=50, threads=4)

    pd.testing.assert_frame_equal(single, threaded)


def test_consistently_up_network_is_significant(k1_pwms):
    ids = [f"pep{i:02d}" for i in range(20)]
    data = pd.DataFrame({
        'annotation': ids,
        'sequence': ['AAAMAAAAAAAAAAA'] * 20,
        'fc': [1.0] * 10 + [-0.1] * 10,
        'pval': [0.001] * 10 + [0.9] * 10,
    })
    scores = match_table('K1', ids[:10], [0.001] * 10)
    row = swing(data, k1_pwms, scores, permutations=100, seed=1234).iloc[0]

    assert row['swing_score'] == 1.0
    assert row['n_permutations_run'] == 100
    assert row['empirical_p'] < 0.05
    assert row['p_less'] == pytest.approx(1.0)
    assert 0 <= row['fdr'] <= 1


def test_permutation_flag_values(k1_pwms):
    data = pd.DataFrame({
        'annotation': ['a', 'b', 'c'],
        'sequence': ['AAAMAAAAAAAAAAA'] * 3,
        'fc': [1.0, -1.0, 1.0],
        'pval': [0.01, 0.01, 0.5],
    })
    scores = match_table('K1', ['a', 'b'], [0.01, 0.01])
    for permutations in (0, 1, False):
        row = swing(data, k1_pwms, scores, permutations=permutations).iloc[0]
        assert row['n_permutations_run'] == 0
        assert np.isnan(row['empirical_p'])
        assert np.isnan(row['p_less'])


def test_return_network(k1_pwms):
    data = pd.DataFrame({
        'annotation': ['a', 'b'],
        'sequence': ['AAAMAAAAAAAAAAA'] * 2,
        'fc': [1.0, -1.0],
        'pval': [0.01, 0.2],
    })
    scores = match_table('K1', ['b', 'a'], [0.03, 0.01])
    result, network = swing(data, k1_pwms, scores, permutations=0, return_network=True)

    assert len(result) == 1
    assert network['peptide_id'].tolist() == ['a', 'b']
    assert network['fold_change'].tolist() == [1.0, -1.0]
    assert network['empirical_p_pwm'].tolist() == [0.01, 0.03]


def test_unknown_peptide_in_scores(k1_pwms):
    data = pd.DataFrame({'annotation': ['a'], 'sequence': ['AAAMAAAAAAAAAAA'],
                         'fc': [1.0], 'pval': [0.01]})
    with pytest.raises(MalformedInputError, match="ghost"):
        swing(data, k1_pwms, match_table('K1', ['ghost'], [0.01]))


def test_missing_score_column(k1_pwms):
    data = pd.DataFrame({'annotation': ['a'], 'sequence': ['AAAMAAAAAAAAAAA'],
                         'fc': [1.0], 'pval': [0.01]})
    scores = match_table('K1', ['a'], [0.01]).drop(columns='empirical_p')
    with pytest.raises(MalformedInputError, match="empirical_p"):
        swing(data, k1_pwms, scores)


def test_peptide_contributions():
    contributions = peptide_contributions([2.0, -1.0, 3.0, 0.0], [0.01, 0.04, 0.06, 0.01], 0.05)

    np.testing.assert_array_equal(contributions, [1.0, -1.0, 0.0, 0.0])


def test_degenerate_null_gives_na():
    assert all(np.isnan(p) for p in permutation_p_values(0.5, np.full(10, 0.5)))
    p_greater, p_less = permutation_p_values(0.5, np.array([0.0, 0.5, 1.0]))
    assert p_greater == pytest.approx(3 / 4)
    assert p_less == pytest.approx(3 / 4)


def test_normalise_scores():
    z = normalise_scores(np.array([1.0, np.nan, 3.0]))
    assert np.isnan(z[1])
    np.testing.assert_allclose(z[[0, 2]], [-1 / np.sqrt(2), 1 / np.sqrt(2)])

    assert np.isnan(normalise_scores(np.array([1.0, np.nan]))).all()
    assert np.isnan(normalise_scores(np.array([2.0, 2.0]))).all()


def test_adjust_p_values_keeps_na():
    adjusted = adjust_p_values(np.array([0.01, np.nan, 0.04]))

    assert np.isnan(adjusted[1])
    np.testing.assert_allclose(adjusted[[0, 2]], [0.02, 0.04])
