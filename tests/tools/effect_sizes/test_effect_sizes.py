"""Tests for effect size measures and conversions."""
import math

import numpy as np
import pandas as pd
import pytest


def _two_group_data():
    np.random.seed(42)
    a = np.random.normal(loc=10, scale=2, size=15)
    b = np.random.normal(loc=8, scale=2, size=12)
    groups = ["a"] * len(a) + ["b"] * len(b)
    return groups, np.concatenate([a, b]), a, b


def _three_group_data():
    np.random.seed(42)
    values = np.concatenate([
        np.random.normal(10, 2, 10),
        np.random.normal(12, 2, 12),
        np.random.normal(15, 2, 8),
    ])
    groups = ["x"] * 10 + ["y"] * 12 + ["z"] * 8
    return groups, values


def test_hedges_correction_variants():
    from statkit.tools.effect_sizes import hedges_correction

    exact = hedges_correction(10, 12, "exact")
    assert exact == pytest.approx(24 / (math.sqrt(5) * math.gamma(4.5)))
    assert hedges_correction(10, 12, "hedges") == pytest.approx(1 - 3 / 39)
    assert exact == pytest.approx(hedges_correction(10, 12, "hedges"), abs=1e-3)
    assert hedges_correction(10, 12, "none") == 1.0
    assert hedges_correction(10, 12, "xue") == pytest.approx(exact, abs=1e-3)

    # large df must not overflow
    assert hedges_correction(2000, 2002, "exact") == pytest.approx(1.0, abs=1e-3)

    with pytest.raises(ValueError, match="Invalid correction"):
        hedges_correction(10, 12, "magic")


def test_cohen_d_one_sample():
    from statkit.tools.effect_sizes import cohen_d_os, hedges_g_os

    result = cohen_d_os([2, 4, 6, 8], mu=3)
    assert result["d"] == pytest.approx(2 / math.sqrt(20 / 3))

    # default mu is the midrange (5) which equals the mean here
    assert cohen_d_os([2, 4, 6, 8])["d"] == pytest.approx(0.0)

    g = hedges_g_os([2, 4, 6, 8], mu=3)
    assert abs(g["g"]) < abs(result["d"])


def test_cohen_d_independent_samples():
    from statkit.tools.effect_sizes import cohen_d_is, hedges_g_is

    groups, values, a, b = _two_group_data()
    pooled = math.sqrt(((len(a) - 1) * a.var(ddof=1) + (len(b) - 1) * b.var(ddof=1)) / (len(a) + len(b) - 2))

    d = cohen_d_is(groups, values)
    assert d["d"] == pytest.approx((a.mean() - b.mean()) / pooled)
    assert d["categories"] == ["a", "b"]

    g = hedges_g_is(groups, values, cor="hedges")
    assert g["g"] == pytest.approx(d["d"] * (1 - 3 / (4 * 25 - 1)))

    unweighted = hedges_g_is(groups, values, var_weighted=False)
    assert unweighted["d"] == pytest.approx((a.mean() - b.mean()) / math.sqrt((a.var(ddof=1) + b.var(ddof=1)) / 2))


def test_cohen_d_paired():
    from statkit.tools.effect_sizes import cohen_d_ps, hedges_g_ps

    before = [10, 12, 9, 14, 11, 13, 10, 12]
    after = [12, 13, 11, 15, 11, 15, 12, 14]
    diffs = np.array(before, dtype=float) - np.array(after, dtype=float)

    dz = cohen_d_ps(before, after, within=False)
    assert dz["d"] == pytest.approx(diffs.mean() / diffs.std(ddof=1))
    assert dz["r"] is None

    drm = cohen_d_ps(before, after)
    assert drm["r"] == pytest.approx(np.corrcoef(before, after)[0, 1])

    g = hedges_g_ps(before, after, within=False, cor="none")
    assert g["g"] == pytest.approx(dz["d"])


def test_variance_explained_measures():
    from statkit.tools.effect_sizes import cohen_f, eta_squared, omega_squared, epsilon_squared, es_convert

    groups, values = _three_group_data()
    df = pd.DataFrame({"g": groups, "v": values})
    grand = df["v"].mean()
    ssb = sum(len(s) * (s.mean() - grand) ** 2 for _, s in df.groupby("g")["v"])
    sst = ((df["v"] - grand) ** 2).sum()
    ssw = sst - ssb
    msw = ssw / (30 - 3)

    eta = eta_squared(groups, values)
    assert eta["eta_sq"] == pytest.approx(ssb / sst)
    assert eta["k"] == 3
    assert eta["n"] == 30

    f = cohen_f(groups, values)
    assert f["f"] == pytest.approx(math.sqrt(ssb / ssw))
    assert es_convert(f["f"], "cohenf", "etasq") == pytest.approx(eta["eta_sq"])

    omega = omega_squared(groups, values)
    assert omega["omega_sq"] == pytest.approx((ssb - 2 * msw) / (sst + msw))
    assert omega_squared(groups, values, variant="hays2")["omega_sq"] < eta["eta_sq"]

    eps = epsilon_squared(groups, values)
    assert eps["epsilon_sq"] < eta["eta_sq"]
    assert es_convert(eps["epsilon_sq"], "epsilonsq", "etasq", ex1=30, ex2=3) == pytest.approx(eta["eta_sq"])


def test_cramers_v_matches_scipy():
    from scipy.stats.contingency import association
    from statkit.tools.core import cross_counts
    from statkit.tools.effect_sizes import cramers_v_ind

    np.random.seed(42)
    x = np.random.choice(["a", "b", "c"], size=120)
    y = np.where(np.random.rand(120) < 0.6, x, np.random.choice(["a", "b", "c"], size=120))

    table = cross_counts(x, y).to_numpy()
    result = cramers_v_ind(x, y)
    assert result["v"] == pytest.approx(association(table, method="cramer"))
    assert result["n"] == 120

    corrected = cramers_v_ind(x, y, bergsma=True)
    assert corrected["v"] < result["v"]


def test_cramers_v_and_cohen_w_gof():
    from statkit.tools.effect_sizes import cramers_v_gof, cohen_w_gof, es_convert

    data = ["a"] * 30 + ["b"] * 20 + ["c"] * 10
    # chi2 = (100 + 0 + 100) / 20 = 10
    w = cohen_w_gof(data)
    assert w["chi2"] == pytest.approx(10.0)
    assert w["w"] == pytest.approx(math.sqrt(10 / 60))

    v = cramers_v_gof(data)
    assert v["v"] == pytest.approx(math.sqrt(10 / (60 * 2)))
    assert es_convert(v["v"], "cramervgof", "cohenw", ex1=3) == pytest.approx(w["w"])


def test_odds_ratio_matches_statsmodels():
    from statsmodels.stats.contingency_tables import Table2x2
    from statkit.tools.effect_sizes import odds_ratio

    exposure = ["yes"] * 30 + ["no"] * 40
    outcome = ["ill"] * 20 + ["well"] * 10 + ["ill"] * 10 + ["well"] * 30

    result = odds_ratio(exposure, outcome, categories1=["yes", "no"], categories2=["ill", "well"])
    reference = Table2x2(np.array([[20, 10], [10, 30]]))

    assert result["or"] == pytest.approx(reference.oddsratio)
    assert result["statistic"] == pytest.approx(reference.log_oddsratio / reference.log_oddsratio_se)
    assert result["p_value"] == pytest.approx(reference.oddsratio_pvalue())


def test_odds_ratio_empty_cell():
    from statkit.tools.effect_sizes import odds_ratio

    with pytest.raises(ValueError, match="empty cell"):
        odds_ratio(["a", "a", "b", "b"], ["x", "x", "y", "y"])


def test_cohen_h():
    from statkit.tools.effect_sizes import cohen_h_os, es_convert

    result = cohen_h_os(["a", "a", "a", "b"])
    assert result["p"] == pytest.approx(0.75)
    assert result["h"] == pytest.approx(math.pi / 6)

    coded = cohen_h_os(["a", "a", "a", "b", "c"], codes=["b", "a"], p0=0.25)
    assert coded["p"] == pytest.approx(0.25)
    assert coded["h"] == pytest.approx(0.0)

    assert es_convert(result["h"], "cohenhos", "cohenh") == pytest.approx(math.pi / 6 * math.sqrt(2))


def test_vargha_delaney_and_common_language():
    from statkit.tools.effect_sizes import vargha_delaney_a, common_language_is, es_convert

    groups = ["a"] * 4 + ["b"] * 5
    scores = [3, 5, 6, 8, 1, 2, 3, 4, 9]

    vda = vargha_delaney_a(groups, scores)
    brute = common_language_is(groups, scores)
    assert vda["a1"] == pytest.approx(brute["cle1"])
    assert vda["a1"] + vda["a2"] == pytest.approx(1.0)
    assert common_language_is(groups, scores, method="vda")["cle1"] == pytest.approx(vda["a1"])

    # one tie (3 vs 3) is ignored
    ignoring = common_language_is(groups, scores, method="brute-it")
    assert ignoring["cle1"] + ignoring["cle2"] == pytest.approx(1 - 1 / 20)

    rb = es_convert(vda["a1"], "vda", "rb")
    assert es_convert(rb, "rb", "vda") == pytest.approx(vda["a1"])


def test_common_language_approximation():
    from scipy import stats
    from statkit.tools.effect_sizes import common_language_is

    groups, values, a, b = _two_group_data()
    result = common_language_is(groups, values, method="appr")
    z = (a.mean() - b.mean()) / math.sqrt(a.var(ddof=1) + b.var(ddof=1))
    assert result["cle1"] == pytest.approx(stats.norm.cdf(z))


def test_es_convert_round_trips():
    from statkit.tools.effect_sizes import es_convert

    assert es_convert(es_convert(0.5, "cohend", "rb"), "rb", "cohend") == pytest.approx(0.5)
    assert es_convert(es_convert(0.5, "cohend", "or", ex1="chinn"), "or", "cohend", ex1="chinn") == pytest.approx(0.5)
    assert es_convert(es_convert(2.0, "or", "yuleq"), "yuleq", "or") == pytest.approx(2.0)
    assert es_convert(es_convert(2.0, "or", "yuley"), "yuley", "or") == pytest.approx(2.0)
    assert es_convert(es_convert(0.3, "cohenw", "cc"), "cc", "cohenw") == pytest.approx(0.3)


def test_es_convert_errors():
    from statkit.tools.effect_sizes import es_convert

    with pytest.raises(ValueError, match="not supported"):
        es_convert(0.5, "cohend", "pearson")
    with pytest.raises(ValueError, match="requires ex1"):
        es_convert(0.3, "cramervgof", "cohenw")
