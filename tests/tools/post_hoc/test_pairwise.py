"""Tests for pairwise and cell-wise post-hoc procedures."""
import numpy as np
import pytest


def _scores(seed=42):
    np.random.seed(seed)
    cats = ["a"] * 8 + ["b"] * 10 + ["c"] * 9
    values = np.concatenate([
        np.random.normal(10, 2, 8),
        np.random.normal(12, 2, 10),
        np.random.normal(15, 3, 9),
    ])
    return cats, values


@pytest.mark.parametrize("test", ["student", "welch", "z", "yuen", "trimmed"])
def test_pairwise_is_runs_every_pair(test):
    from statkit.tools.post_hoc import pairwise_is

    cats, values = _scores()
    result = pairwise_is(cats, values, test=test)
    assert len(result) == 3
    assert (result["adj_p_value"] >= result["p_value"]).all()
    assert result["sample_diff"].iloc[1] < 0


def test_pairwise_is_matches_single_test():
    from statkit.tools.hypothesis import welch_t_is
    from statkit.tools.post_hoc import pairwise_is

    cats, values = _scores()
    result = pairwise_is(cats, values, test="welch")
    single = welch_t_is(cats, values, categories=["b", "c"])
    row = result.iloc[2]
    assert row["statistic"] == pytest.approx(single["statistic"])
    assert row["adj_p_value"] == pytest.approx(min(3 * single["p_value"], 1.0))


def test_winer_with_two_groups_is_student_t():
    from statkit.tools.hypothesis import student_t_is
    from statkit.tools.post_hoc import pairwise_t_winer

    cats, values = _scores()
    keep = [i for i, c in enumerate(cats) if c != "c"]
    two_cats = [cats[i] for i in keep]
    two_values = values[keep]

    row = pairwise_t_winer(two_cats, two_values).iloc[0]
    student = student_t_is(two_cats, two_values)
    assert row["statistic"] == pytest.approx(student["statistic"])
    assert row["p_value"] == pytest.approx(student["p_value"])


def test_residual_analysis_two_by_two():
    from statkit.tools.hypothesis import pearson_ind
    from statkit.tools.post_hoc import residual_analysis

    smoker = ["yes"] * 40 + ["no"] * 60
    sport = (["yes"] * 10 + ["no"] * 30) + (["yes"] * 35 + ["no"] * 25)
    result = residual_analysis(smoker, sport)

    assert len(result) == 4
    assert result["observed"].sum() == 100
    # in a 2x2 table every adjusted residual has the same size and squares to chi-square
    z = np.abs(result["z"].to_numpy())
    assert np.allclose(z, z[0])
    assert z[0] ** 2 == pytest.approx(pearson_ind(smoker, sport)["statistic"])
    assert (result["adj_p_value"] == np.minimum(result["p_value"] * 4, 1.0)).all()


def test_residual_analysis_standardized():
    from statkit.tools.post_hoc import residual_analysis

    rows = ["x", "x", "x", "y", "y", "z", "z", "z", "z"]
    cols = ["p", "q", "p", "q", "q", "p", "q", "p", "p"]
    result = residual_analysis(rows, cols, version="standardized")
    expected = result["residual"] / np.sqrt(result["expected"])
    np.testing.assert_allclose(result["z"], expected)


def test_pairwise_gof():
    from statkit.tools.post_hoc import pairwise_gof

    data = ["a"] * 20 + ["b"] * 30 + ["c"] * 10
    result = pairwise_gof(data)
    assert len(result) == 3
    ab = result.iloc[0]
    assert ab["statistic"] == pytest.approx((20 - 30) ** 2 / 50)
    assert ab["exp_prop_1"] == pytest.approx(0.5)
    assert ab["obs_prop_1"] == pytest.approx(0.4)


def test_pairwise_gof_expected_and_multinomial():
    from statkit.tools.post_hoc import pairwise_gof

    data = ["a"] * 4 + ["b"] * 6 + ["c"] * 2
    result = pairwise_gof(data, expected={"a": 2, "b": 2, "c": 1}, test="multinomial")
    assert list(result["category_1"]) == ["a", "a", "b"]
    ac = result.iloc[1]
    assert ac["exp_prop_1"] == pytest.approx(2 / 3)
    assert ac["n_combinations"] == 7
    assert 0 < ac["p_value"] <= 1

    with pytest.raises(ValueError, match="Invalid test"):
        pairwise_gof(data, test="fisher")
