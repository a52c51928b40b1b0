"""
One-way tests for k independent groups.

Means (scale_field split by cat_field):
- fisher_owa: classic one-way ANOVA, returned as the full ANOVA table
- welch_owa, brown_forsythe_owa, alexander_govern_owa: unequal-variance alternatives
- james_owa: James (1951) test of order 0, 1 or 2
- ozdemir_kurt_owa: Özdemir & Kurt (2006) B2 test

Ranks (ord_field split by cat_field):
- kruskal_wallis with chi-square, gamma, beta, F and Iman-Davenport approximations

James order 1/2 and Özdemir-Kurt have no closed-form p-value; their critical
value functions are inverted with bisect_pvalue.
"""

import math
from typing import Dict, Mapping, Optional, Sequence

import numpy as np
import pandas as pd
from scipy import stats

from statkit.tools.core.fields import check_option, k_groups
from statkit.tools.distributions import bisect_pvalue


def sums_of_squares(groups: Mapping[object, np.ndarray]) -> Dict:
    """
    Between, within and total sums of squares for a one-way layout.

    Args:
        groups: Mapping of category label to its values

    Returns:
        Dict with n, k, SSb, SSw, SSt, dfb, dfw, MSb, MSw, F
    """
    values = [np.asarray(v, dtype=float) for v in groups.values()]
    all_values = np.concatenate(values)
    n = len(all_values)
    k = len(values)
    if n <= k:
        raise ValueError(f"Need more observations ({n}) than groups ({k})")

    grand_mean = all_values.mean()
    ss_b = float(sum(len(v) * (v.mean() - grand_mean) ** 2 for v in values))
    ss_t = float(np.sum((all_values - grand_mean) ** 2))
    ss_w = ss_t - ss_b
    dfb, dfw = k - 1, n - k
    ms_b = ss_b / dfb
    ms_w = ss_w / dfw
    return {
        "n": n,
        "k": k,
        "SSb": ss_b,
        "SSw": ss_w,
        "SSt": ss_t,
        "dfb": dfb,
        "dfw": dfw,
        "MSb": ms_b,
        "MSw": ms_w,
        "F": ms_b / ms_w if ms_w > 0 else math.inf,
    }


def _moments(groups: Mapping[object, np.ndarray]):
    """Per-group counts, means and sample variances as numpy arrays."""
    ns = np.array([len(v) for v in groups.values()], dtype=float)
    if (ns < 2).any():
        small = [c for c, v in groups.items() if len(v) < 2]
        raise ValueError(f"Each category needs at least 2 values. Too small: {small}")
    means = np.array([v.mean() for v in groups.values()])
    variances = np.array([v.var(ddof=1) for v in groups.values()])
    return ns, means, variances


def fisher_owa(cat_field, scale_field, categories: Optional[Sequence] = None) -> pd.DataFrame:
    """
    Fisher one-way ANOVA.

    Returns:
        ANOVA table with rows between/within/total and columns SS, df, MS, F, p_value
    """
    ss = sums_of_squares(k_groups(cat_field, scale_field, categories))
    p_value = float(stats.f.sf(ss["F"], ss["dfb"], ss["dfw"]))
    return pd.DataFrame(
        {
            "SS": [ss["SSb"], ss["SSw"], ss["SSt"]],
            "df": [ss["dfb"], ss["dfw"], ss["n"] - 1],
            "MS": [ss["MSb"], ss["MSw"], np.nan],
            "F": [ss["F"], np.nan, np.nan],
            "p_value": [p_value, np.nan, np.nan],
        },
        index=["between", "within", "total"],
    )


def welch_owa(cat_field, scale_field, categories: Optional[Sequence] = None) -> Dict:
    """Welch one-way ANOVA for unequal variances."""
    groups = k_groups(cat_field, scale_field, categories)
    ns, means, variances = _moments(groups)
    k = len(ns)

    w = ns / variances
    h = w / w.sum()
    yw = float(np.sum(h * means))
    lamb = float(np.sum((1 - h) ** 2 / (ns - 1)))
    F = (np.sum(w * (means - yw) ** 2) / (k - 1)) / (1 + 2 * (k - 2) / (k ** 2 - 1) * lamb)
    df1 = k - 1
    df2 = (k ** 2 - 1) / (3 * lamb)
    return {
        "test": "Welch one-way ANOVA",
        "n": int(ns.sum()),
        "statistic": float(F),
        "df1": df1,
        "df2": float(df2),
        "p_value": float(stats.f.sf(F, df1, df2)),
    }


def brown_forsythe_owa(cat_field, scale_field, categories: Optional[Sequence] = None) -> Dict:
    """Brown-Forsythe test for equal means: F* = Σ n_j (m_j - m)² / Σ (1 - n_j/n) s_j²."""
    groups = k_groups(cat_field, scale_field, categories)
    ns, means, variances = _moments(groups)
    n = ns.sum()
    k = len(ns)

    grand_mean = np.sum(ns * means) / n
    denom_terms = (1 - ns / n) * variances
    F = np.sum(ns * (means - grand_mean) ** 2) / denom_terms.sum()
    df1 = k - 1
    df2 = 1 / np.sum((denom_terms / denom_terms.sum()) ** 2 / (ns - 1))
    return {
        "test": "Brown-Forsythe one-way ANOVA",
        "n": int(n),
        "k": k,
        "statistic": float(F),
        "df1": df1,
        "df2": float(df2),
        "p_value": float(stats.f.sf(F, df1, df2)),
    }


def alexander_govern_owa(cat_field, scale_field, categories: Optional[Sequence] = None) -> Dict:
    """Alexander-Govern test: normalised t-values combined into a chi-square statistic A."""
    groups = k_groups(cat_field, scale_field, categories)
    ns, means, variances = _moments(groups)
    k = len(ns)

    se = np.sqrt(variances / ns)
    w = (1 / se ** 2) / np.sum(1 / se ** 2)
    mu_hat = np.sum(w * means)
    t = (means - mu_hat) / se
    v = ns - 1
    a = v - 0.5
    b = 48 * a ** 2
    c = np.sqrt(a * np.log(1 + t ** 2 / v))
    z = (c + (c ** 3 + 3 * c) / b
         - (4 * c ** 7 + 33 * c ** 5 + 240 * c ** 3 + 855 * c) / (10 * b ** 2 + 8 * b * c ** 4 + 1000 * b))
    A = float(np.sum(z ** 2))
    df = k - 1
    return {
        "test": "Alexander-Govern one-way ANOVA",
        "n": int(ns.sum()),
        "statistic": A,
        "df": df,
        "p_value": float(stats.chi2.sf(A, df)),
    }


def _james_second_order_crit(c_crit: float, k: int, h: np.ndarray, v: np.ndarray, lamb: float) -> float:
    """James (1951) second-order critical value for a chi-square critical value c_crit."""
    R = {(s, t): float(np.sum(h ** t / v ** s)) for s in (1, 2) for t in range(4)}
    R10, R11, R12 = R[(1, 0)], R[(1, 1)], R[(1, 2)]
    R20, R21, R22, R23 = R[(2, 0)], R[(2, 1)], R[(2, 2)], R[(2, 3)]

    c2 = c_crit / (k + 2 - 3)
    c4 = c2 * c_crit / (k + 4 - 3)
    c6 = c4 * c_crit / (k + 6 - 3)
    c8 = c6 * c_crit / (k + 8 - 3)

    return (
        c_crit
        + 0.5 * (3 * c4 + c2) * lamb
        + 1 / 16 * (3 * c4 + c2) ** 2 * (1 - (k - 3) / c_crit) * lamb ** 2
        + 0.5 * (3 * c4 + c2) * (
            (8 * R23 - 10 * R22 + 4 * R21 - 6 * R12 ** 2 + 8 * R12 * R11 - 4 * R11 ** 2)
            + (2 * R23 - 4 * R22 + 2 * R21 - 2 * R12 ** 2 + 4 * R12 * R11 - 2 * R11 ** 2) * (c2 - 1)
            + 0.25 * (-R12 ** 2 + 4 * R12 * R11 - 2 * R12 * R10 - 4 * R11 ** 2 + 4 * R11 * R10 - R10 ** 2)
            * (3 * c4 - 2 * c2 - 1)
        )
        + (R23 - 3 * R22 + 3 * R21 - R20) * (5 * c6 + 2 * c4 + c2)
        + 3 / 16 * (R12 ** 2 - 4 * R23 + 6 * R22 - 4 * R21 + R20) * (35 * c8 + 15 * c6 + 9 * c4 + 5 * c2)
        + 1 / 16 * (-2 * R22 ** 2 + 4 * R21 - R20 + 2 * R12 * R10 - 4 * R11 * R10 + R10 ** 2)
        * (9 * c8 - 3 * c6 - 5 * c4 - c2)
        + 0.25 * (-R22 + R11 ** 2) * (27 * c8 + 3 * c6 + c4 + c2)
        + 0.25 * (R23 - R12 * R11) * (45 * c8 + 9 * c6 + 7 * c4 + 3 * c2)
    )


def james_owa(cat_field, scale_field, categories: Optional[Sequence] = None,
              order: int = 2, ddof: int = 2, iters: int = 500) -> Dict:
    """
    James test for equal means with unequal variances.

    The statistic J is Cochran's weighted sum of squares. Order 0 compares J
    with a chi-square distribution; orders 1 and 2 use James' corrected
    critical values, inverted by bisection to obtain the p-value.

    Args:
        order: 0, 1 or 2
        ddof: Degrees of freedom subtracted from each n_j in the second-order terms
        iters: Maximum bisection steps
    """
    check_option(order, [0, 1, 2], "order")
    groups = k_groups(cat_field, scale_field, categories)
    ns, means, variances = _moments(groups)
    k = len(ns)
    df = k - 1

    w = ns / variances
    h = w / w.sum()
    yw = np.sum(h * means)
    J = float(np.sum(w * (means - yw) ** 2))
    result = {"n": int(ns.sum()), "statistic": J, "df": df}

    if order == 0:
        result.update({
            "test": "James large-sample approximation",
            "p_value": float(stats.chi2.sf(J, df)),
        })
        return result

    if order == 1:
        lamb = float(np.sum((1 - h) ** 2 / (ns - 1)))

        def critical(p):
            c = stats.chi2.isf(p, df)
            return c * (1 + (3 * c + k + 1) / (2 * (k ** 2 - 1)) * lamb)

        test_used = "James first-order"
    else:
        v = ns - ddof
        lamb = float(np.sum((1 - h) ** 2 / v))

        def critical(p):
            return _james_second_order_crit(stats.chi2.isf(p, df), k, h, v, lamb)

        test_used = "James second-order"

    result.update({
        "test": test_used,
        "j_critical": float(critical(0.05)),
        "p_value": float(bisect_pvalue(critical, J, max_iter=iters)),
    })
    return result


def ozdemir_kurt_owa(cat_field, scale_field, categories: Optional[Sequence] = None, iters: int = 100) -> Dict:
    """
    Özdemir-Kurt B2 test.

    The normalising constants depend on the critical z-value, so B2 is
    recomputed at every bisection step and the p-value is the level at which
    B2 equals the chi-square critical value.
    """
    groups = k_groups(cat_field, scale_field, categories)
    ns, means, variances = _moments(groups)
    k = len(ns)
    df = k - 1

    se = np.sqrt(variances / ns)
    w = (1 / se ** 2) / np.sum(1 / se ** 2)
    w_mean = np.sum(w * means)
    t = (means - w_mean) / se
    v = ns - 1

    def b2(p):
        z_crit = stats.norm.isf(p / 2)
        c = (4 * v ** 2 + 5 * (2 * z_crit ** 2 + 3) / 24) / (4 * v ** 2 + v + (4 * z_crit ** 2 + 9) / 12) * np.sqrt(v)
        return float(np.sum((c * np.sqrt(np.log(1 + t ** 2 / v))) ** 2))

    p_value = bisect_pvalue(lambda p: stats.chi2.isf(p, df) - b2(p), 0.0, max_iter=iters)
    return {
        "test": "Özdemir-Kurt B2 one-way ANOVA",
        "n": int(ns.sum()),
        "statistic": b2(p_value),
        "df": df,
        "p_value": float(p_value),
    }


KRUSKAL_WALLIS_METHODS = [
    "chi2", "kw-gamma", "kw-gamma-chi2", "kw-beta", "kw-beta-f",
    "wallace-f1", "wallace-f2", "wallace-f3",
    "wallace-beta1", "wallace-beta2", "wallace-beta3", "ikw",
]


def kruskal_wallis(
    cat_field,
    ord_field,
    categories: Optional[Sequence] = None,
    levels: Optional[Sequence] = None,
    method: str = "chi2",
    ties: bool = True,
) -> Dict:
    """
    Kruskal-Wallis H test with a choice of approximation.

    method:
        "chi2"                       - H ~ chi2(k - 1)
        "kw-gamma", "kw-gamma-chi2"  - Kruskal & Wallis (1952) gamma and its chi-square form
        "kw-beta", "kw-beta-f"       - Kruskal & Wallis (1952) beta and its F form
        "wallace-f1/2/3"             - Wallace (1959) F approximations
        "wallace-beta1/2/3"          - Wallace (1959) beta approximations
        "ikw"                        - Iman & Davenport (1976) F with Satterthwaite df2
    ties: Divide H by 1 - Σ(t³ - t)/(n³ - n)
    """
    check_option(method, KRUSKAL_WALLIS_METHODS, "method")
    groups = k_groups(cat_field, ord_field, categories, levels)
    all_values = np.concatenate(list(groups.values()))
    ranks = stats.rankdata(all_values)
    n = len(all_values)
    k = len(groups)

    nc = np.array([len(v) for v in groups.values()], dtype=float)
    bounds = np.concatenate([[0], np.cumsum(nc)]).astype(int)
    rank_groups = [ranks[bounds[j]:bounds[j + 1]] for j in range(k)]
    rc = np.array([r.sum() for r in rank_groups])

    H = 12 / (n * (n + 1)) * np.sum(rc ** 2 / nc) - 3 * (n + 1)
    if ties:
        t = pd.Series(ranks).value_counts().to_numpy(dtype=float)
        H = H / (1 - np.sum(t ** 3 - t) / (n ** 3 - n))
    H = float(H)

    result = {"test": f"Kruskal-Wallis ({method})", "n": n, "H": H}
    if method == "chi2":
        df = k - 1
        result.update({"statistic": H, "df": df, "p_value": float(stats.chi2.sf(H, df))})
        return result

    E = k - 1
    V = 2 * (k - 1) - 2 * (3 * k ** 2 - 6 * k + n * (2 * k ** 2 - 6 * k + 1)) / (5 * n * (n + 1)) - 6 / 5 * np.sum(1 / nc)
    M = (n ** 3 - np.sum(nc ** 3)) / (n * (n + 1))

    if method == "kw-gamma":
        alpha, beta = E ** 2 / V, V / E
        result.update({"statistic": H, "alpha": float(alpha), "beta": float(beta),
                       "p_value": float(stats.gamma.sf(H, alpha, scale=beta))})
    elif method == "kw-gamma-chi2":
        chi_a = 2 * H * E / V
        df_a = 2 * E ** 2 / V
        result.update({"statistic": float(chi_a), "df": float(df_a),
                       "p_value": float(stats.chi2.sf(chi_a, df_a))})
    elif method in ("kw-beta", "kw-beta-f"):
        f1 = E * ((E * (M - E) - V) / (0.5 * M * V))
        f2 = ((M - E) / E) * f1
        if method == "kw-beta":
            statistic = H / M
            result.update({"statistic": float(statistic), "alpha": float(0.5 * f1), "beta": float(0.5 * f2),
                           "p_value": float(stats.beta.sf(statistic, 0.5 * f1, 0.5 * f2))})
        else:
            F = H * (M - E) / (E * (M - H))
            result.update({"statistic": float(F), "df1": float(f1), "df2": float(f2),
                           "p_value": float(stats.f.sf(F, f1, f2))})
    else:
        variant = method[-1]
        if variant == "1":
            d = ((n - k) * (k - 1) - V) / (0.5 * (n - 1) * V)
        elif variant == "2":
            d = 1 - 6 / 5 * (n + 1) / (n - 1) / (n + 1.2)
        else:
            d = 1
        df1 = (k - 1) * d
        df2 = (n - k) * d

        if method.startswith("wallace-beta"):
            B2 = H / (n - 1)
            result.update({"statistic": float(B2), "alpha": float(0.5 * df1), "beta": float(0.5 * df2),
                           "p_value": float(stats.beta.sf(B2, 0.5 * df1, 0.5 * df2))})
        else:
            F2 = (n - k) * H / ((k - 1) * (n - 1 - H))
            if method == "ikw":
                # Satterthwaite df2 from the within-group rank variances
                vi = np.array([np.sum((r - r.mean()) ** 2) for r in rank_groups]) / (nc - 1)
                df1 = k - 1
                df2 = np.sum((nc - 1) * vi) ** 2 / np.sum(((nc - 1) * vi) ** 2 / (nc - 1))
            result.update({"statistic": float(F2), "df1": float(df1), "df2": float(df2),
                           "p_value": float(stats.f.sf(F2, df1, df2))})
    return result
