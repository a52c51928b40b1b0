"""Tests for rank, ordinal and Pearson correlation coefficients."""
import warnings

import numpy as np
import pytest


def _pair_counts(x, y):
    """Concordant and discordant pairs counted directly."""
    conc = disc = 0
    for i in range(len(x)):
        for j in range(i + 1, len(x)):
            s = np.sign(x[i] - x[j]) * np.sign(y[i] - y[j])
            conc += s > 0
            disc += s < 0
    return conc, disc


def test_spearman_matches_scipy():
    from scipy import stats
    from statkit.tools.correlation import spearman_rho

    np.random.seed(42)
    x = np.random.normal(size=30)
    y = x + np.random.normal(scale=1.5, size=30)

    result = spearman_rho(x, y)
    expected = stats.spearmanr(x, y)

    assert result["rho"] == pytest.approx(expected.statistic)
    assert result["p_value"] == pytest.approx(expected.pvalue)
    assert result["df"] == 28


def test_spearman_with_ordinal_levels():
    from statkit.tools.correlation import spearman_rho

    levels = ["low", "mid", "high"]
    x = ["low", "low", "mid", "mid", "high", "high"]
    y = [1, 2, 2, 3, 5, 4]

    result = spearman_rho(x, y, levels1=levels)
    assert result["rho"] > 0.8


def test_spearman_exact_perfect_agreement():
    from statkit.tools.correlation import spearman_rho

    x = [1, 2, 3, 4, 5]
    result = spearman_rho(x, x, test="exact")
    assert result["rho"] == pytest.approx(1.0)
    assert result["statistic"] == pytest.approx(0.0)
    assert result["p_value"] == pytest.approx(2 / 120)


def test_spearman_exact_large_n_warns():
    from statkit.tools.correlation import spearman_rho

    np.random.seed(42)
    x = np.random.normal(size=12)
    y = np.random.normal(size=12)
    with pytest.warns(UserWarning, match="AS 89"):
        result = spearman_rho(x, y, test="exact")
    assert 0 <= result["p_value"] <= 1


@pytest.mark.parametrize("test", ["z-fieller", "z-olds", "iman-conover", "as89"])
def test_spearman_tests_give_valid_pvalues(test):
    from statkit.tools.correlation import spearman_rho

    np.random.seed(42)
    x = np.random.normal(size=20)
    y = 0.7 * x + np.random.normal(scale=0.5, size=20)

    result = spearman_rho(x, y, test=test)
    assert 0 < result["p_value"] < 0.05


def test_spearman_invalid_test():
    from statkit.tools.correlation import spearman_rho

    with pytest.raises(ValueError, match="Invalid test"):
        spearman_rho([1, 2, 3], [1, 2, 3], test="magic")


def test_kendall_tau_b_matches_scipy_asymptotic():
    from scipy import stats
    from statkit.tools.correlation import kendall_tau

    x = [1, 2, 2, 3, 4, 4, 5, 6, 7, 7]
    y = [2, 1, 3, 3, 5, 4, 6, 6, 8, 7]

    result = kendall_tau(x, y)
    expected = stats.kendalltau(x, y, method="asymptotic")

    assert result["tau_b"] == pytest.approx(expected.statistic)
    assert result["p_value"] == pytest.approx(expected.pvalue)


def test_kendall_exact_matches_scipy():
    from scipy import stats
    from statkit.tools.correlation import kendall_tau

    x = [1, 2, 3, 4, 5, 6, 7, 8]
    y = [2, 1, 4, 3, 6, 5, 8, 7]

    result = kendall_tau(x, y, test="exact")
    expected = stats.kendalltau(x, y, method="exact")

    assert result["test"] == "Kendall exact"
    assert result["p_value"] == pytest.approx(expected.pvalue)


def test_kendall_exact_with_ties_falls_back():
    from statkit.tools.correlation import kendall_tau

    with pytest.warns(UserWarning, match="Ties present"):
        result = kendall_tau([1, 1, 2, 3, 4], [1, 2, 2, 3, 5], test="exact")
    assert result["test"] == "Kendall approximation"


def test_kendall_tau_a():
    from statkit.tools.correlation import kendall_tau

    x = [1, 2, 3, 4, 5, 6]
    y = [1, 3, 2, 4, 6, 5]
    conc, disc = _pair_counts(x, y)

    result = kendall_tau(x, y, tau="a")
    assert result["tau_a"] == pytest.approx((conc - disc) / 15)


def test_gamma_from_pair_counts():
    from statkit.tools.correlation import goodman_kruskal_gamma

    x = [1, 1, 2, 2, 2, 3, 3, 3, 3, 1]
    y = [1, 2, 1, 2, 3, 2, 3, 3, 1, 1]
    conc, disc = _pair_counts(x, y)

    result = goodman_kruskal_gamma(x, y)
    assert result["gamma"] == pytest.approx((conc - disc) / (conc + disc))
    assert result["P"] == conc
    assert result["Q"] == disc
    assert 0 <= result["p_value"] <= 1

    for ase in ("0", "1"):
        with_ase = goodman_kruskal_gamma(x, y, ase=ase)
        assert with_ase["ase"] > 0
        assert with_ase["gamma"] == pytest.approx(result["gamma"])


def test_gamma_undefined_without_pairs():
    from statkit.tools.correlation import goodman_kruskal_gamma

    with pytest.raises(ValueError, match="undefined"):
        goodman_kruskal_gamma([1, 1, 1], [1, 2, 3])


def test_somers_d_matches_scipy():
    from scipy import stats
    from statkit.tools.correlation import somers_d

    x = [1, 1, 2, 2, 2, 3, 3, 3, 3, 1, 2, 3]
    y = [1, 2, 1, 2, 3, 2, 3, 3, 1, 1, 3, 3]

    # scipy's somersd(x, y) is d(y|x): pairs tied on x are excluded
    result = somers_d(x, y, direction="columns")
    assert result["d"] == pytest.approx(stats.somersd(x, y).statistic)

    result_rows = somers_d(x, y, direction="rows")
    assert result_rows["d"] == pytest.approx(stats.somersd(y, x).statistic)

    both = somers_d(x, y, direction="both")
    assert min(result["d"], result_rows["d"]) <= both["d"] <= max(result["d"], result_rows["d"])


def test_pearson_matches_scipy():
    from scipy import stats
    from statkit.tools.correlation import pearson_r

    np.random.seed(42)
    x = np.random.normal(size=25)
    y = 0.5 * x + np.random.normal(size=25)

    result = pearson_r(x, y)
    expected = stats.pearsonr(x, y)
    assert result["r"] == pytest.approx(expected.statistic)
    assert result["p_value"] == pytest.approx(expected.pvalue)

    z_result = pearson_r(x, y, test="z")
    assert z_result["df"] is None
    assert z_result["statistic"] == pytest.approx(abs(np.arctanh(expected.statistic)) * np.sqrt(22))


def test_pearson_corrections_shrink_towards_zero():
    from statkit.tools.correlation import pearson_r

    np.random.seed(42)
    x = np.random.normal(size=15)
    y = 0.8 * x + np.random.normal(scale=0.5, size=15)
    r = pearson_r(x, y)["r"]

    for corr in ("smith", "wherry", "ezekiel"):
        assert abs(pearson_r(x, y, corr=corr)["r"]) < abs(r)
    assert pearson_r(x, y, corr="fisher")["r"] > r


def test_rank_biserial_one_sample():
    from statkit.tools.correlation import rank_biserial_os

    result = rank_biserial_os([1, 2, 3, 4, 5, 6], mu=0)
    assert result["rb"] == pytest.approx(1.0)

    # midrange 3.5: ranks of |d| are symmetric
    assert rank_biserial_os([1, 2, 3, 4, 5, 6])["rb"] == pytest.approx(0.0)

    with pytest.raises(ValueError, match="undefined"):
        rank_biserial_os([2, 2, 2], mu=2)


def test_rank_biserial_independent_samples():
    from statkit.tools.correlation import rank_biserial_is

    groups = ["a"] * 4 + ["b"] * 4
    scores = [5, 6, 7, 8, 1, 2, 3, 4]

    glass = rank_biserial_is(groups, scores, method="glass")
    cureton = rank_biserial_is(groups, scores)
    assert glass["rb"] == pytest.approx(1.0)
    assert cureton["rb"] == pytest.approx(1.0)
    assert glass["categories"] == ["a", "b"]

    reversed_result = rank_biserial_is(groups, scores, categories=["b", "a"], method="glass")
    assert reversed_result["rb"] == pytest.approx(-1.0)
