"""Tests for k independent samples."""
import numpy as np
import pytest


def _groups(seed=42):
    np.random.seed(seed)
    samples = {
        "a": np.random.normal(20, 2, 8),
        "b": np.random.normal(22, 4, 11),
        "c": np.random.normal(25, 6, 9),
    }
    cats = [c for c, v in samples.items() for _ in v]
    values = np.concatenate(list(samples.values()))
    return cats, values, list(samples.values())


def test_sums_of_squares_add_up():
    from statkit.tools.hypothesis import sums_of_squares

    ss = sums_of_squares({"x": np.array([1.0, 2.0, 3.0]), "y": np.array([4.0, 5.0, 6.0])})
    assert ss["SSb"] == pytest.approx(13.5)
    assert ss["SSw"] == pytest.approx(4.0)
    assert ss["SSt"] == pytest.approx(17.5)
    assert ss["F"] == pytest.approx(13.5 / 1.0)


def test_fisher_anova_table_matches_scipy():
    from scipy import stats
    from statkit.tools.hypothesis import fisher_owa

    cats, values, samples = _groups()
    table = fisher_owa(cats, values)
    expected = stats.f_oneway(*samples)

    assert list(table.index) == ["between", "within", "total"]
    assert table.loc["between", "F"] == pytest.approx(expected.statistic)
    assert table.loc["between", "p_value"] == pytest.approx(expected.pvalue)
    assert table.loc["total", "df"] == len(values) - 1


def test_welch_anova_matches_statsmodels():
    from statsmodels.stats.oneway import anova_oneway
    from statkit.tools.hypothesis import welch_owa

    cats, values, samples = _groups()
    result = welch_owa(cats, values)
    expected = anova_oneway(samples, use_var="unequal", welch_correction=True)

    assert result["statistic"] == pytest.approx(expected.statistic)
    assert result["p_value"] == pytest.approx(expected.pvalue)
    assert result["df2"] == pytest.approx(expected.df[1])


def test_brown_forsythe_matches_statsmodels():
    from statsmodels.stats.oneway import anova_oneway
    from statkit.tools.hypothesis import brown_forsythe_owa

    cats, values, samples = _groups()
    result = brown_forsythe_owa(cats, values)
    expected = anova_oneway(samples, use_var="bf")

    assert result["statistic"] == pytest.approx(expected.statistic)
    assert result["df1"] == 2


def test_alexander_govern_matches_scipy():
    from scipy import stats
    from statkit.tools.hypothesis import alexander_govern_owa

    cats, values, samples = _groups()
    result = alexander_govern_owa(cats, values)
    expected = stats.alexandergovern(*samples)

    assert result["statistic"] == pytest.approx(expected.statistic)
    assert result["p_value"] == pytest.approx(expected.pvalue)


def test_james_orders():
    from scipy import stats
    from statkit.tools.hypothesis import james_owa

    cats, values, _ = _groups()
    zero = james_owa(cats, values, order=0)
    assert zero["p_value"] == pytest.approx(stats.chi2.sf(zero["statistic"], 2))

    for order in (1, 2):
        result = james_owa(cats, values, order=order)
        assert result["statistic"] == pytest.approx(zero["statistic"])
        assert 0 < result["p_value"] < 1
        assert result["j_critical"] > 0

    first = james_owa(cats, values, order=1)
    assert first["j_critical"] > stats.chi2.isf(0.05, 2)

    with pytest.raises(ValueError, match="Invalid order"):
        james_owa(cats, values, order=3)


def test_ozdemir_kurt_statistic_matches_its_critical_value():
    from scipy import stats
    from statkit.tools.hypothesis import ozdemir_kurt_owa

    cats, values, _ = _groups()
    result = ozdemir_kurt_owa(cats, values)

    assert 0 < result["p_value"] < 1
    assert result["statistic"] == pytest.approx(stats.chi2.isf(result["p_value"], 2), rel=1e-3)


def test_group_with_one_value_raises():
    from statkit.tools.hypothesis import welch_owa

    with pytest.raises(ValueError, match="at least 2 values"):
        welch_owa(["a", "a", "b"], [1.0, 2.0, 3.0])


def test_kruskal_wallis_matches_scipy():
    from scipy import stats
    from statkit.tools.hypothesis import kruskal_wallis

    cats = ["a"] * 5 + ["b"] * 6 + ["c"] * 5
    values = [2, 3, 3, 5, 4, 6, 7, 5, 8, 9, 6, 10, 12, 9, 11, 13]
    result = kruskal_wallis(cats, values)
    expected = stats.kruskal(values[:5], values[5:11], values[11:])

    assert result["H"] == pytest.approx(expected.statistic)
    assert result["p_value"] == pytest.approx(expected.pvalue)
    assert result["df"] == 2


def test_kruskal_wallis_without_ties_correction_is_smaller():
    from statkit.tools.hypothesis import kruskal_wallis

    cats = ["a"] * 5 + ["b"] * 6 + ["c"] * 5
    values = [2, 3, 3, 5, 4, 6, 7, 5, 8, 9, 6, 10, 12, 9, 11, 13]
    corrected = kruskal_wallis(cats, values)
    plain = kruskal_wallis(cats, values, ties=False)
    assert plain["H"] < corrected["H"]


@pytest.mark.parametrize("method", [
    "kw-gamma", "kw-gamma-chi2", "kw-beta", "kw-beta-f",
    "wallace-f1", "wallace-f2", "wallace-f3",
    "wallace-beta1", "wallace-beta2", "wallace-beta3", "ikw",
])
def test_kruskal_wallis_approximations(method):
    from statkit.tools.hypothesis import kruskal_wallis

    cats = ["a"] * 5 + ["b"] * 6 + ["c"] * 5
    values = [2, 3, 3, 5, 4, 6, 7, 5, 8, 9, 6, 10, 12, 9, 11, 13]
    result = kruskal_wallis(cats, values, method=method)
    assert 0 < result["p_value"] < 0.05
    assert method in result["test"]


def test_kruskal_wallis_ordinal_levels():
    from statkit.tools.hypothesis import kruskal_wallis

    levels = ["never", "sometimes", "often", "always"]
    cats = ["x"] * 4 + ["y"] * 4
    scores = ["never", "sometimes", "never", "sometimes", "often", "always", "always", "often"]
    result = kruskal_wallis(cats, scores, levels=levels)
    assert result["n"] == 8
    assert result["p_value"] < 0.05
