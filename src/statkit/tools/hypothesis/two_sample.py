"""
Two independent samples.

Means: student_t_is, welch_t_is, z_is, trimmed_mean_is (Yuen-Welch)
Ranks: mann_whitney, fligner_policello

All functions split `scale_field`/`ord_field` by the first two categories of
`cat_field` (or the two given in `categories`).
"""

import math
import warnings
from typing import Dict, Optional, Sequence

import numpy as np
import pandas as pd
from scipy import stats

from statkit.tools.core.fields import check_option, two_groups
from statkit.tools.distributions import mww_cdf


def _group_summary(labels, x1: np.ndarray, x2: np.ndarray) -> Dict:
    return {
        "categories": labels,
        "n1": len(x1),
        "n2": len(x2),
        "mean1": float(x1.mean()),
        "mean2": float(x2.mean()),
    }


def student_t_is(cat_field, scale_field, categories: Optional[Sequence] = None, dmu: float = 0) -> Dict:
    """Student t-test for two independent samples with pooled variance, df = n1 + n2 - 2."""
    x1, x2, labels = two_groups(cat_field, scale_field, categories)
    n1, n2 = len(x1), len(x2)
    if n1 + n2 < 3:
        raise ValueError(f"Student t-test requires at least 3 values in total. Sizes: {n1}, {n2}")

    sp = math.sqrt(((n1 - 1) * x1.var(ddof=1) + (n2 - 1) * x2.var(ddof=1)) / (n1 + n2 - 2))
    se = sp * math.sqrt(1 / n1 + 1 / n2)
    t = (x1.mean() - x2.mean() - dmu) / se
    df = n1 + n2 - 2

    result = _group_summary(labels, x1, x2)
    result.update({
        "test": "Student independent samples t-test",
        "dmu": dmu,
        "statistic": float(t),
        "df": df,
        "p_value": float(2 * stats.t.sf(abs(t), df)),
    })
    return result


def welch_t_is(cat_field, scale_field, categories: Optional[Sequence] = None, dmu: float = 0) -> Dict:
    """Welch t-test, Welch-Satterthwaite degrees of freedom."""
    x1, x2, labels = two_groups(cat_field, scale_field, categories)
    n1, n2 = len(x1), len(x2)
    if n1 < 2 or n2 < 2:
        raise ValueError(f"Welch t-test requires at least 2 values per category. Sizes: {n1}, {n2}")

    v1, v2 = x1.var(ddof=1), x2.var(ddof=1)
    sse = v1 / n1 + v2 / n2
    t = (x1.mean() - x2.mean() - dmu) / math.sqrt(sse)
    df = sse ** 2 / (v1 ** 2 / (n1 ** 2 * (n1 - 1)) + v2 ** 2 / (n2 ** 2 * (n2 - 1)))

    result = _group_summary(labels, x1, x2)
    result.update({
        "test": "Welch independent samples t-test",
        "dmu": dmu,
        "statistic": float(t),
        "df": float(df),
        "p_value": float(2 * stats.t.sf(abs(t), df)),
    })
    return result


def z_is(
    cat_field,
    scale_field,
    categories: Optional[Sequence] = None,
    dmu: float = 0,
    sigma1: Optional[float] = None,
    sigma2: Optional[float] = None,
) -> Dict:
    """
    z-test for two independent means.

    sigma1/sigma2 are the known population standard deviations; when omitted
    the sample variance is used.
    """
    x1, x2, labels = two_groups(cat_field, scale_field, categories)
    n1, n2 = len(x1), len(x2)
    v1 = x1.var(ddof=1) if sigma1 is None else sigma1 ** 2
    v2 = x2.var(ddof=1) if sigma2 is None else sigma2 ** 2
    if np.isnan(v1) or np.isnan(v2):
        raise ValueError("Sample variance needs at least 2 values per category; pass sigma1/sigma2 instead")

    z = (x1.mean() - x2.mean() - dmu) / math.sqrt(v1 / n1 + v2 / n2)
    result = _group_summary(labels, x1, x2)
    result.update({
        "test": "independent samples z-test",
        "dmu": dmu,
        "statistic": float(z),
        "df": None,
        "p_value": float(2 * stats.norm.sf(abs(z))),
    })
    return result


def _trim_and_winsorize(x: np.ndarray, trim_prop: float):
    """Trimmed mean (trim_prop/2 off each side, rounded down) and the winsorized sample."""
    x = np.sort(x)
    n = len(x)
    g = int(math.floor(n * trim_prop / 2))
    if n - 2 * g < 2:
        raise ValueError(f"Trimming {trim_prop} of {n} values leaves fewer than 2")
    trimmed_mean = x[g:n - g].mean()
    winsorized = np.clip(x, x[g], x[n - g - 1])
    return trimmed_mean, winsorized, n - 2 * g


def trimmed_mean_is(
    cat_field,
    scale_field,
    categories: Optional[Sequence] = None,
    dmu: float = 0,
    trim_prop: float = 0.1,
    se: str = "yuen",
) -> Dict:
    """
    Trimmed means test for two independent samples.

    Args:
        trim_prop: Total proportion to trim (half from each end)
        se: "yuen" (Yuen-Welch, unequal variances) or "wilcox" (pooled winsorized variance)
    """
    check_option(se, ["yuen", "wilcox"], "se")
    x1, x2, labels = two_groups(cat_field, scale_field, categories)
    n1, n2 = len(x1), len(x2)
    m1t, w1, n1t = _trim_and_winsorize(x1, trim_prop)
    m2t, w2, n2t = _trim_and_winsorize(x2, trim_prop)
    var1, var2 = w1.var(ddof=1), w2.var(ddof=1)

    if se == "yuen":
        var1w = var1 * (n1 - 1) / (n1t - 1)
        var2w = var2 * (n2 - 1) / (n2t - 1)
        se_value = math.sqrt(var1w / n1t + var2w / n2t)
        c = (var1w / n1t) / (var1w / n1t + var2w / n2t)
        df = 1 / (c ** 2 / (n1t - 1) + (1 - c) ** 2 / (n2t - 1))
        test_used = "Yuen-Welch independent samples t-test"
    else:
        s2 = ((n1 - 1) * var1 + (n2 - 1) * var2) / ((n1t - 1) + (n2t - 1))
        se_value = math.sqrt(s2 * (1 / n1t + 1 / n2t))
        df = n1t + n2t - 2
        test_used = "Trimmed mean independent samples t-test"

    t = (m1t - m2t - dmu) / se_value
    return {
        "test": test_used,
        "categories": labels,
        "n1": n1,
        "n2": n2,
        "trimmed_mean1": float(m1t),
        "trimmed_mean2": float(m2t),
        "dmu": dmu,
        "statistic": float(t),
        "df": float(df),
        "p_value": float(2 * stats.t.sf(abs(t), df)),
    }


def mann_whitney(
    cat_field,
    ord_field,
    categories: Optional[Sequence] = None,
    levels: Optional[Sequence] = None,
    method: str = "exact",
    cc: bool = True,
) -> Dict:
    """
    Mann-Whitney U test.

    U is the smaller of U1 and U2. The exact p-value is 2 P(U' <= U) from the
    exact null distribution; with ties present the normal approximation is
    used instead (with a warning). The approximation applies the ties
    correction to the standard error and, with cc, subtracts 0.5/se from |z|.
    """
    check_option(method, ["exact", "appr"], "method")
    x1, x2, labels = two_groups(cat_field, ord_field, categories, levels)
    n1, n2 = len(x1), len(x2)
    n = n1 + n2

    ranks = stats.rankdata(np.concatenate([x1, x2]))
    r1 = ranks[:n1].sum()
    r2 = n * (n + 1) / 2 - r1
    u1 = n1 * n2 + n1 * (n1 + 1) / 2 - r1
    u2 = n1 * n2 + n2 * (n2 + 1) / 2 - r2
    U = float(min(u1, u2))

    has_ties = len(np.unique(ranks)) != n
    if method == "exact" and has_ties:
        warnings.warn("Ties present, exact Mann-Whitney distribution not available; using normal approximation")
        method = "appr"

    result = {"categories": labels, "n1": n1, "n2": n2, "U": U}
    if method == "exact":
        result.update({
            "test": "Mann-Whitney U exact",
            "statistic": U,
            "p_value": float(min(2 * mww_cdf(U, n1, n2), 1.0)),
        })
        return result

    tie_counts = pd.Series(ranks).value_counts().to_numpy(dtype=float)
    t = float(np.sum(tie_counts ** 3 - tie_counts)) / 12
    se = math.sqrt(n1 * n2 / (n * (n - 1)) * ((n ** 3 - n) / 12 - t))
    z = (U - n1 * n2 / 2) / se
    z_abs = abs(z)
    test_used = "Mann-Whitney U normal approximation"
    if cc:
        z_abs = z_abs - 0.5 / se
        test_used += ", with continuity correction"

    result.update({
        "test": test_used,
        "statistic": float(z),
        "p_value": float(2 * stats.norm.sf(abs(z_abs))),
    })
    return result


def fligner_policello(
    cat_field,
    ord_field,
    categories: Optional[Sequence] = None,
    levels: Optional[Sequence] = None,
    ties: bool = True,
    cc: bool = False,
) -> Dict:
    """
    Fligner-Policello robust rank order test.

    Placements are counted per distinct score: for each score of category 1
    the number of category 2 scores below it (ties as half with ties=True), and
    vice versa. z = (Nx - Ny) / (2 sqrt(SSx + SSy + Mx My)).
    """
    x1, x2, labels = two_groups(cat_field, ord_field, categories, levels)
    scores = np.unique(np.concatenate([x1, x2]))
    c1 = np.array([np.sum(x1 == s) for s in scores], dtype=float)
    c2 = np.array([np.sum(x2 == s) for s in scores], dtype=float)

    # placements: other-category scores strictly below, plus half the ties
    below2 = np.concatenate([[0.0], np.cumsum(c2)[:-1]])
    below1 = np.concatenate([[0.0], np.cumsum(c1)[:-1]])
    fx = below2 + (0.5 * c2 if ties else 0)
    fy = below1 + (0.5 * c1 if ties else 0)

    n1, n2 = c1.sum(), c2.sum()
    nx = float(np.sum(fx * c1))
    ny = float(np.sum(fy * c2))
    mx, my = nx / n1, ny / n2
    ssx = float(np.sum(c1 * (fx - mx) ** 2))
    ssy = float(np.sum(c2 * (fy - my) ** 2))

    num = abs(nx - ny) - 0.5 if cc else nx - ny
    z = num / (2 * math.sqrt(ssx + ssy + mx * my))

    if cc and ties:
        test_used = "Fligner-Policello test, with continuity and ties correction"
    elif cc:
        test_used = "Fligner-Policello test, with continuity correction"
    elif ties:
        test_used = "Fligner-Policello test, with ties correction"
    else:
        test_used = "Fligner-Policello test"

    return {
        "test": test_used,
        "categories": labels,
        "n": int(n1 + n2),
        "statistic": float(z),
        "p_value": float(2 * stats.norm.sf(abs(z))),
    }
