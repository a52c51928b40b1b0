"""
Rank and ordinal association coefficients.

- Goodman-Kruskal gamma: (P - Q) / (P + Q) from concordant / discordant pairs
- Somers' d: asymmetric (rows, columns) or symmetric version of gamma with tied pairs counted
- Spearman rho: Pearson correlation of the mid-ranks with six different tests
- Kendall tau-a / tau-b with normal approximations or the exact distribution
- Pearson r with optional bias corrections

All coefficients are returned in a dict together with the test statistic,
p-value (two-sided) and the name of the test that was used.
"""

import math
import warnings
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy import stats, special

from statkit.tools.core.fields import check_option, cross_counts, paired_values, apply_levels, to_series
from statkit.tools.distributions import (
    bisect_pvalue,
    kendall_exact_pvalue,
    spearman_as89,
    spearman_exact_cdf,
)


def _ordered_cross_table(field1, field2, levels1=None, levels2=None) -> np.ndarray:
    """Cross table with rows/columns in ordinal order (levels when given, else sorted values)."""
    s1 = to_series(field1, "field1")
    s2 = to_series(field2, "field2")
    if levels1 is not None:
        s1 = apply_levels(s1, levels1)
    if levels2 is not None:
        s2 = apply_levels(s2, levels2)
    return cross_counts(s1, s2).to_numpy(dtype=float)


def concordance_matrices(ct: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    For every cell, the number of observations concordant and discordant with it.

    Concordant: cells above-left plus below-right. Discordant: above-right plus below-left.
    """
    nr, nc = ct.shape
    conc = np.zeros_like(ct, dtype=float)
    disc = np.zeros_like(ct, dtype=float)
    for i in range(nr):
        for j in range(nc):
            conc[i, j] = ct[:i, :j].sum() + ct[i + 1:, j + 1:].sum()
            disc[i, j] = ct[:i, j + 1:].sum() + ct[i + 1:, :j].sum()
    return conc, disc


def _two_sided_normal(z: float) -> float:
    return float(2 * stats.norm.sf(abs(z)))


def goodman_kruskal_gamma(
    field1,
    field2,
    levels1: Optional[Sequence] = None,
    levels2: Optional[Sequence] = None,
    ase: str = "appr",
) -> Dict:
    """
    Goodman-Kruskal gamma for two ordinal fields.

    Args:
        field1, field2: Paired ordinal values
        levels1, levels2: Optional order of the labels of each field
        ase: "appr" (z = g sqrt((P+Q)/(n(1-g^2)))), "0" (ASE under H0) or "1" (ASE under H1)

    Returns:
        Dictionary with gamma, P, Q, ase (None for "appr"), statistic (z), p_value, n
    """
    check_option(str(ase), ["appr", "0", "1"], "ase")
    ct = _ordered_cross_table(field1, field2, levels1, levels2)
    conc, disc = concordance_matrices(ct)
    P = float((ct * conc).sum())
    Q = float((ct * disc).sum())
    n = float(ct.sum())
    if P + Q == 0:
        raise ValueError("No concordant or discordant pairs: gamma is undefined")

    g = (P - Q) / (P + Q)
    ase_value = None
    if str(ase) == "appr":
        if abs(g) == 1:
            z = math.copysign(math.inf, g)
        else:
            z = g * math.sqrt((P + Q) / (n * (1 - g ** 2)))
    else:
        if str(ase) == "0":
            ase_value = 4 * math.sqrt(float((ct * (Q * conc - P * disc) ** 2).sum())) / (P + Q) ** 2
        else:
            ase_value = 2 * math.sqrt(float((ct * (conc - disc) ** 2).sum()) - (P - Q) ** 2 / n) / (P + Q)
        z = g / ase_value

    return {
        "test": "Goodman-Kruskal gamma",
        "gamma": g,
        "P": P / 2,
        "Q": Q / 2,
        "ase": ase_value,
        "statistic": z,
        "p_value": _two_sided_normal(z),
        "n": int(n),
    }


def somers_d(
    field1,
    field2,
    levels1: Optional[Sequence] = None,
    levels2: Optional[Sequence] = None,
    direction: str = "rows",
) -> Dict:
    """
    Somers' d for two ordinal fields (field1 as rows, field2 as columns).

    direction:
        "rows"    - d(x|y) = (P - Q) / Dc
        "columns" - d(y|x) = (P - Q) / Dr
        "both"    - symmetric, (P - Q) / ((Dr + Dc) / 2)
    """
    check_option(direction, ["rows", "columns", "both"], "direction")
    ct = _ordered_cross_table(field1, field2, levels1, levels2)
    nr, nc = ct.shape
    conc, disc = concordance_matrices(ct)
    P = float((ct * conc).sum())
    Q = float((ct * disc).sum())
    n = float(ct.sum())

    row_sums = ct.sum(axis=1)
    col_sums = ct.sum(axis=0)
    Dr = n ** 2 - float((row_sums ** 2).sum())
    Dc = n ** 2 - float((col_sums ** 2).sum())
    s = math.sqrt(max(float((ct * (conc - disc) ** 2).sum()) - (P - Q) ** 2 / n, 0.0))

    if direction == "columns":
        d = (P - Q) / Dr
        terms = ct * (Dr * (conc - disc) - (P - Q) * (n - row_sums[:, None])) ** 2
        ase1 = 2 * math.sqrt(float(terms.sum())) / Dr ** 2
        ase0 = 2 * s / Dr
    elif direction == "rows":
        d = (P - Q) / Dc
        terms = ct * (Dc * (conc - disc) - (P - Q) * (n - col_sums[None, :])) ** 2
        ase1 = 2 * math.sqrt(float(terms.sum())) / Dc ** 2
        ase0 = 2 * s / Dc
    else:
        d = (P - Q) / (0.5 * (Dr + Dc))
        tau_b = (P - Q) / math.sqrt(Dr * Dc)
        v = row_sums[:, None] * Dc + col_sums[None, :] * Dr
        total = float((ct * (2 * math.sqrt(Dr * Dc) * (conc - disc) + tau_b * v) ** 2).sum())
        ase1_tau_b = math.sqrt(max(total - n ** 3 * tau_b ** 2 * (Dr + Dc) ** 2, 0.0)) / (Dr * Dc)
        ase1 = 2 * ase1_tau_b / (Dr + Dc) * math.sqrt(Dr * Dc)
        ase0 = 4 * s / (Dc + Dr)

    z = d / ase0 if ase0 > 0 else math.copysign(math.inf, d)
    return {
        "test": "Somers d",
        "direction": direction,
        "d": d,
        "ase0": ase0,
        "ase1": ase1,
        "statistic": z,
        "p_value": _two_sided_normal(z),
        "n": int(n),
    }


SPEARMAN_TESTS = ["t", "z-fieller", "z-olds", "iman-conover", "as89", "exact", "none"]


def spearman_rho(
    field1,
    field2,
    levels1: Optional[Sequence] = None,
    levels2: Optional[Sequence] = None,
    test: str = "t",
    cc: bool = False,
    iters: int = 500,
) -> Dict:
    """
    Spearman rank correlation with a choice of significance test.

    test:
        "t"            - t = rs sqrt((n-2)/(1-rs^2)), df = n - 2 (Kendall & Stuart)
        "z-fieller"    - z = atanh(rs) / sqrt(1.06/(n-3))
        "z-olds"       - normal approximation of S (Olds)
        "iman-conover" - average of the normal and t critical values, inverted by bisection
        "as89"         - Edgeworth series (exact for n <= 6)
        "exact"        - full permutation distribution (n <= 9, otherwise AS 89 with a warning)
        "none"         - coefficient only
    cc: Zar's continuity correction |rs| - 6/(n^3 - n) (not used by the exact test)
    """
    check_option(test, SPEARMAN_TESTS, "test")
    x = apply_levels(to_series(field1, "field1"), levels1)
    y = apply_levels(to_series(field2, "field2"), levels2)
    x, y = paired_values(x, y)
    n = len(x)
    if n < 3:
        raise ValueError(f"Spearman rho requires at least 3 pairs. Found: {n}")

    rx = stats.rankdata(x)
    ry = stats.rankdata(y)
    rs = float(np.corrcoef(rx, ry)[0, 1])
    rs_reported = rs
    if cc and test != "exact":
        rs = abs(rs) - 6 / (n ** 3 - n)

    result = {"test": f"Spearman rho ({test})", "rho": rs_reported, "n": n}
    if test == "none":
        return result

    df = n - 2
    statistic = None
    if test == "t":
        statistic = rs * math.sqrt(df / (1 - rs ** 2)) if abs(rs) < 1 else math.copysign(math.inf, rs)
        p_value = float(2 * stats.t.sf(abs(statistic), df))
    elif test == "z-fieller":
        if n < 4:
            raise ValueError(f"Fieller z requires at least 4 pairs. Found: {n}")
        statistic = math.atanh(max(min(rs, 1 - 1e-15), -1 + 1e-15)) / math.sqrt(1.06 / (n - 3))
        p_value = _two_sided_normal(statistic)
    elif test == "z-olds":
        S = (n ** 3 - n) * (1 - rs) / 6
        x_olds = S / 2 - (n ** 3 - n) / 12
        statistic = x_olds / (math.sqrt(n - 1) * (n * (n + 1) / 12))
        p_value = _two_sided_normal(statistic)
    elif test == "iman-conover":
        statistic = abs(rs) / 2 * (math.sqrt(n - 1) + math.sqrt(df / (1 - abs(rs) ** 2)))
        p_value = bisect_pvalue(
            lambda p: (stats.norm.isf(p / 2) + stats.t.isf(p / 2, df)) / 2,
            statistic,
            max_iter=iters,
        )
    elif test == "as89":
        S = (n ** 3 - n) * (1 - rs) / 6
        statistic = S
        if S < (n ** 3 - n) / 6:
            S = (n ** 3 - n) / 3 - S
        upper = spearman_as89(n, S)
        p_value = 2 * (1 - upper) if upper > 0.5 else 2 * upper
    else:
        S = (n ** 3 - n) * (1 - rs) / 6
        statistic = S
        if n > 9:
            warnings.warn(f"Exact Spearman distribution not enumerated for n={n}, using AS 89 instead")
            upper = spearman_as89(n, S if S >= (n ** 3 - n) / 6 else (n ** 3 - n) / 3 - S)
            p_value = 2 * upper
        elif S > (n ** 3 - n) / 6:
            p_value = 2 * spearman_exact_cdf(S, n, lower_tail=False)
        else:
            p_value = 2 * spearman_exact_cdf(S, n, lower_tail=True)

    result.update({
        "statistic": statistic,
        "df": df if test in ("t", "iman-conover") else None,
        "p_value": float(min(p_value, 1.0)),
    })
    return result


def kendall_tau(
    field1,
    field2,
    levels1: Optional[Sequence] = None,
    levels2: Optional[Sequence] = None,
    tau: str = "b",
    test: str = "kendall-appr",
    cc: bool = False,
) -> Dict:
    """
    Kendall's tau-a or tau-b.

    Tau-a is always tested with Kendall's normal approximation. For tau-b:
        "kendall-appr" - normal approximation with the tie-corrected variance (Kendall, 1962)
        "bb"           - Brown & Benedetti ASE0
        "exact"        - exact permutation distribution (falls back to kendall-appr with ties)
    """
    check_option(tau, ["a", "b"], "tau")
    check_option(test, ["kendall-appr", "bb", "exact"], "test")
    x = apply_levels(to_series(field1, "field1"), levels1)
    y = apply_levels(to_series(field2, "field2"), levels2)
    x, y = paired_values(x, y)
    n = len(x)
    if n < 3:
        raise ValueError(f"Kendall tau requires at least 3 pairs. Found: {n}")

    sx = np.sign(x[:, None] - x[None, :])
    sy = np.sign(y[:, None] - y[None, :])
    prod = sx * sy
    per_obs = (prod > 0).sum(axis=1) - (prod < 0).sum(axis=1)
    P = float((prod > 0).sum())
    Q = float((prod < 0).sum())
    n_conc = P / 2
    n_disc = Q / 2

    if tau == "a":
        tau = (n_conc - n_disc) / (n * (n - 1) / 2)
        tau_test = abs(tau) - 2 / (n * (n - 1)) if cc else tau
        z = 3 * n * tau_test / math.sqrt((4 * n + 10) / (n - 1))
        statistic = -abs(z) if tau < 0 else z
        return {
            "test": "Kendall approximation",
            "tau_a": tau,
            "statistic": statistic,
            "p_value": _two_sided_normal(z),
            "n": n,
        }

    t1 = pd.Series(x).value_counts().to_numpy(dtype=float)
    t2 = pd.Series(y).value_counts().to_numpy(dtype=float)
    if test == "exact" and (t1.max() > 1 or t2.max() > 1):
        warnings.warn("Ties present, exact Kendall distribution not available; using kendall-appr")
        test = "kendall-appr"

    Dr = n ** 2 - float((t1 ** 2).sum())
    Dc = n ** 2 - float((t2 ** 2).sum())
    tau = (P - Q) / math.sqrt(Dr * Dc)

    if test == "bb":
        ase0 = 2 * math.sqrt((float((per_obs ** 2).sum()) - (P - Q) ** 2 / n) / (Dr * Dc))
        tau_test = abs(tau) - 2 / (n * (n - 1)) if cc else tau
        z = tau_test / ase0
        statistic = -abs(z) if tau < 0 else z
        p_value = _two_sided_normal(z)
        test_used = "Brown and Benedetti approximation"
    elif test == "kendall-appr":
        v0 = n * (n - 1) * (2 * n + 5)
        vt1 = float((t1 * (t1 - 1) * (2 * t1 + 5)).sum())
        vt2 = float((t2 * (t2 - 1) * (2 * t2 + 5)).sum())
        v1 = float((t1 * (t1 - 1)).sum()) * float((t2 * (t2 - 1)).sum()) / (2 * n * (n - 1))
        v2 = float((t1 * (t1 - 1) * (t1 - 2)).sum()) * float((t2 * (t2 - 1) * (t2 - 2)).sum()) / (9 * n * (n - 1) * (n - 2))
        v = (v0 - vt1 - vt2) / 18 + v1 + v2
        if cc:
            z = (abs(n_conc - n_disc) - 1) / math.sqrt(v)
        else:
            z = (n_conc - n_disc) / math.sqrt(v)
        statistic = -abs(z) if tau < 0 else z
        p_value = _two_sided_normal(z)
        test_used = "Kendall approximation"
    else:
        statistic = n_conc
        p_value = kendall_exact_pvalue(n_conc, n)
        test_used = "Kendall exact"

    return {
        "test": test_used,
        "tau_b": tau,
        "statistic": statistic,
        "p_value": p_value,
        "n": n,
    }


PEARSON_CORRECTIONS = [
    "none", "fisher", "olkin-pratt-1", "olkin-pratt-2", "olkin-pratt-3",
    "smith", "wherry", "ezekiel", "cattin", "pratt", "herzberg", "claudy",
]


def _correct_r(r: float, n: int, corr: str) -> float:
    one_minus = 1 - r ** 2
    if corr == "fisher":
        return r * (1 + one_minus / (2 * n))
    if corr == "olkin-pratt-1":
        return r * special.hyp2f1(0.5, 0.5, (n - 1) / 2, one_minus)
    if corr == "olkin-pratt-2":
        return r * (1 + one_minus / (2 * (n - 3)))
    if corr == "olkin-pratt-3":
        return math.sqrt(max(1 - one_minus * special.hyp2f1(1, 1, (n - 1) / 2, one_minus), 0.0))
    if corr == "smith":
        return math.sqrt(max(1 - n / (n - 2) * one_minus, 0.0))
    if corr == "wherry":
        return math.sqrt(max(1 - (n - 1) / (n - 2) * one_minus, 0.0))
    if corr == "ezekiel":
        return math.sqrt(max(1 - (n - 1) / (n - 3) * one_minus, 0.0))
    if corr == "cattin":
        return math.sqrt(max(1 - one_minus * (1 + 2 * one_minus / (n - 1) + 8 * one_minus ** 2 / ((n - 3) * (n + 1))), 0.0))
    if corr == "pratt":
        return math.sqrt(max(1 - one_minus * (1 + 2 * one_minus / (n - 4.3)), 0.0))
    if corr == "herzberg":
        return math.sqrt(max(1 - one_minus * (1 + 2 * one_minus / (n - 1)), 0.0))
    if corr == "claudy":
        return math.sqrt(max(1 - (n - 4) * one_minus / (n - 3) * (1 + 2 * one_minus / (n - 1)), 0.0))
    return r


def pearson_r(field1, field2, corr: str = "none", test: str = "t") -> Dict:
    """
    Pearson product-moment correlation.

    Args:
        corr: Optional bias correction of r (see PEARSON_CORRECTIONS)
        test: "t" (df = n - 2) or "z" (Fisher transformation)
    """
    check_option(corr, PEARSON_CORRECTIONS, "corr")
    check_option(test, ["t", "z"], "test")
    x, y = paired_values(field1, field2)
    n = len(x)
    if n < 4 and test == "z":
        raise ValueError(f"Fisher z test requires at least 4 pairs. Found: {n}")
    if n < 3:
        raise ValueError(f"Pearson correlation requires at least 3 pairs. Found: {n}")

    r = float(np.sum((x - x.mean()) * (y - y.mean())) / ((n - 1) * math.sqrt(x.var(ddof=1) * y.var(ddof=1))))
    r = float(_correct_r(r, n, corr))

    if test == "t":
        df = n - 2
        statistic = r * math.sqrt(df / (1 - r ** 2)) if abs(r) < 1 else math.copysign(math.inf, r)
        p_value = float(2 * stats.t.sf(abs(statistic), df))
    else:
        df = None
        statistic = abs(math.atanh(max(min(r, 1 - 1e-15), -1 + 1e-15))) * math.sqrt(n - 3)
        p_value = _two_sided_normal(statistic)

    return {
        "test": f"Pearson correlation ({test} test)",
        "r": r,
        "statistic": statistic,
        "df": df,
        "p_value": p_value,
        "n": n,
    }
