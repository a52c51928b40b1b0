"""Tests for Dunn, Nemenyi and Conover-Iman pairwise rank comparisons."""
import pytest


CATS = ["a"] * 5 + ["b"] * 6 + ["c"] * 5
VALUES = [2, 3, 3, 5, 4, 6, 7, 5, 8, 9, 6, 10, 12, 9, 11, 13]


def test_dunn_pairs_and_bonferroni():
    from statkit.tools.post_hoc import dunn

    result = dunn(CATS, VALUES)
    assert len(result) == 3
    assert list(zip(result["category_1"], result["category_2"])) == [("a", "b"), ("a", "c"), ("b", "c")]
    for _, row in result.iterrows():
        assert row["adj_p_value"] == pytest.approx(min(3 * row["p_value"], 1.0))
    # a has the lowest scores and c the highest
    assert result.loc[1, "statistic"] < 0
    assert result.loc[1, "p_value"] < 0.01


def test_dunn_two_groups_equals_mann_whitney_z():
    from statkit.tools.hypothesis import mann_whitney
    from statkit.tools.post_hoc import dunn

    cats = ["x"] * 6 + ["y"] * 7
    values = [1, 3, 3, 5, 6, 8, 4, 7, 9, 9, 10, 12, 11]
    row = dunn(cats, values).iloc[0]
    mw = mann_whitney(cats, values, method="appr", cc=False)
    assert row["p_value"] == pytest.approx(mw["p_value"])


def test_nemenyi_method_selection():
    from statkit.tools.post_hoc import nemenyi

    equal = nemenyi(["a"] * 4 + ["b"] * 4 + ["c"] * 4, list(range(12)))
    assert set(equal["method"]) == {"exact"}

    unequal = nemenyi(["a"] * 4 + ["b"] * 5 + ["c"] * 3, list(range(12)))
    assert set(unequal["method"]) == {"sh"}

    tied = nemenyi(CATS, VALUES)
    assert set(tied["method"]) == {"sh-ties"}

    with pytest.raises(ValueError, match="Invalid method"):
        nemenyi(CATS, VALUES, method="tukey")


def test_nemenyi_sh_is_squared_dunn_without_ties():
    from statkit.tools.post_hoc import dunn, nemenyi

    cats = ["a"] * 4 + ["b"] * 5 + ["c"] * 3
    values = [3, 1, 4, 2, 9, 6, 5, 8, 7, 12, 10, 11]
    sh = nemenyi(cats, values, method="sh")
    z = dunn(cats, values)
    for s, d in zip(sh["statistic"], z["statistic"]):
        assert s == pytest.approx(d ** 2)


def test_nemenyi_exact_pvalues():
    from statkit.tools.post_hoc import nemenyi

    cats = ["a"] * 4 + ["b"] * 4 + ["c"] * 4
    result = nemenyi(cats, list(range(12)), method="exact")
    extreme = result[(result["category_1"] == "a") & (result["category_2"] == "c")].iloc[0]
    assert extreme["mean_rank_1"] == pytest.approx(2.5)
    assert extreme["mean_rank_2"] == pytest.approx(10.5)
    assert 0 < extreme["p_value"] < 0.05


def test_conover_iman():
    from statkit.tools.post_hoc import conover_iman

    result = conover_iman(CATS, VALUES)
    assert len(result) == 3
    assert (result["df"] == 13).all()
    assert result.loc[1, "statistic"] < 0
    assert result["p_value"].between(0, 1).all()
