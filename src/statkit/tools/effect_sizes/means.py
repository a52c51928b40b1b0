"""
Effect sizes for differences in means.

Standardised mean differences:
- Cohen d for one sample, two independent samples, paired samples and k groups
- Hedges g (bias-corrected d) with exact gamma-function or approximate corrections

Variance explained in a one-way design:
- Cohen f, eta squared, omega squared (Hays), epsilon squared
"""

import math
from typing import Dict, Optional, Sequence

import numpy as np
from scipy import special

from statkit.tools.core.fields import check_option, k_groups, midrange, numeric_values, paired_values, two_groups
from statkit.tools.hypothesis.anova import sums_of_squares


HEDGES_CORRECTIONS = ["none", "exact", "hedges", "durlak", "xue"]


def hedges_correction(df: float, n: int, method: str) -> float:
    """
    Small-sample correction factor J applied to Cohen's d to obtain Hedges g.

    method:
        "exact"  - Gamma(df/2) / (sqrt(df/2) Gamma((df-1)/2)), via log-gamma so it never overflows
        "hedges" - 1 - 3 / (4 df - 1)
        "durlak" - (n - 3) / (n - 2.25) * sqrt((n - 2) / n)
        "xue"    - Xue (2020) twelfth-root series
        "none"   - 1
    """
    check_option(method, HEDGES_CORRECTIONS, "correction")
    if method == "none":
        return 1.0
    if method == "exact":
        m = df / 2
        return float(math.exp(special.gammaln(m) - special.gammaln(m - 0.5)) / math.sqrt(m))
    if method == "hedges":
        return 1 - 3 / (4 * df - 1)
    if method == "durlak":
        return (n - 3) / (n - 2.25) * math.sqrt((n - 2) / n)
    series = (1 - 9 / df + 69 / (2 * df ** 2) - 72 / df ** 3 + 687 / (8 * df ** 4)
              - 441 / (8 * df ** 5) + 247 / (16 * df ** 6))
    return series ** (1 / 12)


def cohen_d_os(data, mu: Optional[float] = None) -> Dict:
    """One-sample Cohen d: (mean - mu) / sd. mu defaults to the midrange."""
    values = numeric_values(data)
    if len(values) < 2:
        raise ValueError(f"Cohen d requires at least 2 values. Found: {len(values)}")
    if mu is None:
        mu = midrange(values)
    d = (values.mean() - mu) / values.std(ddof=1)
    return {"mu": float(mu), "d": float(d), "n": len(values)}


def cohen_d_is(cat_field, scale_field, categories: Optional[Sequence] = None, dmu: float = 0) -> Dict:
    """Cohen d_s for two independent samples, using the pooled standard deviation."""
    return hedges_g_is(cat_field, scale_field, categories=categories, dmu=dmu, cor="none")


def cohen_d_ps(field1, field2, within: bool = True) -> Dict:
    """
    Paired-samples Cohen d.

    With within=True the sd of the differences is rescaled by sqrt(2 (1 - r))
    (d_rm, repeated measures); otherwise d_z = mean(diff) / sd(diff).
    """
    x, y = paired_values(field1, field2)
    if len(x) < 2:
        raise ValueError(f"Cohen d requires at least 2 pairs. Found: {len(x)}")
    diffs = x - y
    s = diffs.std(ddof=1)
    r = None
    if within:
        r = float(np.corrcoef(x, y)[0, 1])
        s = s / math.sqrt(2 * (1 - r))
    return {
        "version": "d_rm (within)" if within else "d_z",
        "d": float(diffs.mean() / s),
        "r": r,
        "n": len(x),
    }


def cohen_d(cat_field, scale_field, categories: Optional[Sequence] = None) -> Dict:
    """Cohen d for k groups: (largest mean - smallest mean) / sqrt(SSw / n)."""
    groups = k_groups(cat_field, scale_field, categories)
    ss = sums_of_squares(groups)
    means = [g.mean() for g in groups.values()]
    return {
        "d": float((max(means) - min(means)) / math.sqrt(ss["SSw"] / ss["n"])),
        "k": ss["k"],
        "n": ss["n"],
    }


def hedges_g_os(data, mu: Optional[float] = None, cor: str = "exact") -> Dict:
    """One-sample Hedges g: Cohen d_os times the correction factor with df = n - 1."""
    res = cohen_d_os(data, mu)
    n = res["n"]
    g = res["d"] * hedges_correction(n - 1, n, cor)
    return {"mu": res["mu"], "g": g, "correction": cor, "n": n}


def hedges_g_is(
    cat_field,
    scale_field,
    categories: Optional[Sequence] = None,
    dmu: float = 0,
    var_weighted: bool = True,
    cor: str = "none",
) -> Dict:
    """
    Independent-samples Hedges g (Cohen d_s when cor="none").

    Args:
        var_weighted: Pool variances weighted by degrees of freedom; if False
            use the plain average of the two variances
        cor: Bias correction, one of HEDGES_CORRECTIONS, with df = n - 2
    """
    x1, x2, labels = two_groups(cat_field, scale_field, categories)
    n1, n2 = len(x1), len(x2)
    n = n1 + n2
    if n1 < 2 or n2 < 2:
        raise ValueError(f"Each category needs at least 2 values. Sizes: {n1}, {n2}")

    v1, v2 = x1.var(ddof=1), x2.var(ddof=1)
    if var_weighted:
        s = math.sqrt(((n1 - 1) * v1 + (n2 - 1) * v2) / (n - 2))
    else:
        s = math.sqrt((v1 + v2) / 2)

    d = (x1.mean() - x2.mean() - dmu) / s
    g = d * hedges_correction(n - 2, n, cor)
    return {
        "categories": labels,
        "d": float(d),
        "g": float(g),
        "correction": cor,
        "n1": n1,
        "n2": n2,
    }


def hedges_g_ps(field1, field2, dmu: float = 0, within: bool = True, cor: str = "exact") -> Dict:
    """Paired-samples Hedges g, df = n - 1."""
    x, y = paired_values(field1, field2)
    n = len(x)
    diffs = x - y
    s = diffs.std(ddof=1)
    if within:
        s = s / math.sqrt(2 * (1 - np.corrcoef(x, y)[0, 1]))
    d = (diffs.mean() - dmu) / s
    return {
        "d": float(d),
        "g": float(d * hedges_correction(n - 1, n, cor)),
        "correction": cor,
        "n": n,
    }


def cohen_f(cat_field, scale_field, categories: Optional[Sequence] = None) -> Dict:
    """Cohen f = sqrt(SSb / SSw)."""
    ss = sums_of_squares(k_groups(cat_field, scale_field, categories))
    return {"f": math.sqrt(ss["SSb"] / ss["SSw"]), "k": ss["k"], "n": ss["n"]}


def eta_squared(cat_field, scale_field, categories: Optional[Sequence] = None,
                levels: Optional[Sequence] = None) -> Dict:
    """Eta squared = SSb / SSt."""
    ss = sums_of_squares(k_groups(cat_field, scale_field, categories, levels))
    return {"eta_sq": ss["SSb"] / ss["SSt"], "k": ss["k"], "n": ss["n"]}


def omega_squared(cat_field, scale_field, categories: Optional[Sequence] = None, variant: str = "hays1") -> Dict:
    """
    Omega squared.

    variant:
        "hays1" - (SSb - dfb MSw) / (SSt + MSw)
        "hays2" - expressed through F: ((dfw-2) F/dfw - 1) / ((dfw+1)/dfb + (dfw-2) F/dfw)
    """
    check_option(variant, ["hays1", "hays2"], "variant")
    ss = sums_of_squares(k_groups(cat_field, scale_field, categories))
    if variant == "hays1":
        es = (ss["SSb"] - ss["dfb"] * ss["MSw"]) / (ss["SSt"] + ss["MSw"])
    else:
        dfw, dfb, F = ss["dfw"], ss["dfb"], ss["F"]
        es = ((dfw - 2) * F / dfw - 1) / ((dfw + 1) / dfb + (dfw - 2) * F / dfw)
    return {"omega_sq": es, "variant": variant, "k": ss["k"], "n": ss["n"]}


def epsilon_squared(cat_field, scale_field, categories: Optional[Sequence] = None,
                    levels: Optional[Sequence] = None) -> Dict:
    """Epsilon squared (Kelley): (n eta^2 - k + (1 - eta^2)) / (n - k)."""
    res = eta_squared(cat_field, scale_field, categories, levels)
    e2, n, k = res["eta_sq"], res["n"], res["k"]
    return {"epsilon_sq": (n * e2 - k + (1 - e2)) / (n - k), "k": k, "n": n}
