"""
One-sample tests.

Location:
- student_t_os: one-sample Student t on the mean
- sign_os: sign test on the median
- wilcoxon_os: Wilcoxon signed rank test on the median

Proportion:
- binomial_os: exact binomial test with three ways of forming the two-sided p-value

Unless given, the hypothesised location mu is the midrange of the data.
"""

import math
import warnings
from typing import Dict, Optional, Sequence

import numpy as np
import pandas as pd
from scipy import stats

from statkit.tools.core.fields import category_counts, check_option, midrange, numeric_values, to_series
from statkit.tools.distributions import wilcoxon_cdf


def student_t_os(data, mu: Optional[float] = None) -> Dict:
    """One-sample Student t-test: t = (mean - mu) / (sd / sqrt(n)), df = n - 1."""
    values = numeric_values(data)
    n = len(values)
    if n < 2:
        raise ValueError(f"One-sample t-test requires at least 2 values. Found: {n}")
    if mu is None:
        mu = midrange(values)

    mean = values.mean()
    se = values.std(ddof=1) / math.sqrt(n)
    t = (mean - mu) / se
    df = n - 1
    return {
        "test": "one-sample Student t",
        "mu": float(mu),
        "sample_mean": float(mean),
        "statistic": float(t),
        "df": df,
        "p_value": float(2 * stats.t.sf(abs(t), df)),
        "n": n,
    }


def sign_os(data, levels: Optional[Sequence] = None, mu: Optional[float] = None) -> Dict:
    """
    One-sample sign test: 2 * P(X <= min(n below, n above)) with X ~ Bin(n, 0.5).

    Values equal to mu are ignored.
    """
    values = numeric_values(data, levels)
    if mu is None:
        mu = midrange(values)
    n_below = int(np.sum(values < mu))
    n_above = int(np.sum(values > mu))
    n = n_below + n_above
    if n == 0:
        raise ValueError(f"All values are equal to mu={mu}; sign test is undefined")

    p_value = min(2 * stats.binom.cdf(min(n_below, n_above), n, 0.5), 1.0)
    return {
        "test": "one-sample sign test",
        "mu": float(mu),
        "n_below": n_below,
        "n_above": n_above,
        "p_value": float(p_value),
    }


def binomial_os(data, codes: Optional[Sequence] = None, p0: float = 0.5, two_sided: str = "eqdist") -> Dict:
    """
    One-sample binomial test.

    Without codes the first category (sorted) is tested against all others; when
    p0 > 0.5 and the first category is the smaller one, the second is used instead.

    two_sided:
        "eqdist" - other tail starts at the same distance from the expected count
        "double" - twice the one-sided p-value
        "smallp" - other tail holds every outcome no more likely than the observed one
    """
    check_option(two_sided, ["eqdist", "double", "smallp"], "two_sided")
    values = to_series(data).dropna()

    if codes is None:
        counts = category_counts(values)
        if len(counts) < 1:
            raise ValueError("No observations")
        n1 = int(counts.iloc[0])
        n2 = int(counts.sum()) - n1
        p0_category = counts.index[0]
        if p0 > 0.5 and n1 < n2 and len(counts) > 1:
            n1, n2 = n2, n1
            p0_category = counts.index[1]
    else:
        n1 = int((values == codes[0]).sum())
        n2 = int((values == codes[1]).sum())
        p0_category = codes[0]

    n = n1 + n2
    if n == 0:
        raise ValueError("No observations in the selected categories")

    min_count, exp_prop, obs_prop = n1, p0, n1 / n
    if n2 < n1:
        min_count, exp_prop, obs_prop = n2, 1 - p0, n2 / n

    if exp_prop < obs_prop:
        sig1 = stats.binom.sf(min_count - 1, n, exp_prop)
    else:
        sig1 = stats.binom.cdf(min_count, n, exp_prop)

    if two_sided == "double":
        sig2 = sig1
        method = "double one-sided method"
    elif two_sided == "eqdist":
        exp_count = n * exp_prop
        other_count = 2 * exp_count - min_count
        if exp_prop < obs_prop:
            sig2 = stats.binom.cdf(math.floor(other_count), n, exp_prop)
        else:
            sig2 = stats.binom.sf(math.floor(other_count) - 1, n, exp_prop)
        method = "equal-distance method"
    else:
        p_small = stats.binom.pmf(min_count, n, exp_prop)
        exp_count = n * exp_prop
        if exp_prop < obs_prop:
            other_side = np.arange(0, math.ceil(exp_count))
        else:
            other_side = np.arange(math.floor(exp_count) + 1, n + 1)
        pmfs = stats.binom.pmf(other_side, n, exp_prop)
        sig2 = float(pmfs[pmfs <= p_small * (1 + 1e-7)].sum())
        method = "small p method"

    return {
        "test": f"one-sample binomial, with {method} (p0 for {p0_category})",
        "n": n,
        "n_success": n1,
        "p0": p0,
        "p_value": float(min(sig1 + sig2, 1.0)),
    }


def signed_rank_test(
    diffs: np.ndarray,
    ties: bool = True,
    appr: str = "wilcoxon",
    eq_med: str = "wilcoxon",
    cc: bool = False,
    statistic_side: str = "positive",
) -> Dict:
    """
    Wilcoxon signed rank test on differences from the hypothesised value.

    Shared by the one-sample and paired-samples versions.

    Args:
        diffs: Differences (data - mu, or field1 - field2)
        ties: Apply the ties correction to the variance
        appr: "wilcoxon" (normal), "exact", "imanz" or "imant" (Iman, 1974)
        eq_med: Handling of zero differences: "wilcoxon" (drop), "zsplit"
            (split their ranks over both sides) or "pratt" (rank, then ignore)
        cc: Continuity correction
        statistic_side: Report the positive rank sum ("positive") or the smaller
            of the two rank sums ("min") as W
    """
    check_option(appr, ["wilcoxon", "exact", "imanz", "imant"], "appr")
    check_option(eq_med, ["wilcoxon", "zsplit", "pratt"], "eq_med")

    diffs = np.asarray(diffs, dtype=float)
    if eq_med == "wilcoxon" or appr == "exact":
        diffs = diffs[diffs != 0]
    nr = len(diffs)
    if nr == 0:
        raise ValueError("All differences are zero; signed rank test is undefined")

    abs_diffs = np.abs(diffs)
    ranks = stats.rankdata(abs_diffs)
    w_pos = float(ranks[diffs > 0].sum())
    w_neg = float(ranks[diffs < 0].sum())
    W = w_pos if statistic_side == "positive" else min(w_pos, w_neg)

    if appr == "exact" and len(np.unique(ranks)) < nr:
        warnings.warn("Ties present, exact signed rank distribution not available; using normal approximation")
        appr = "wilcoxon"

    if appr == "exact":
        w_min = min(w_pos, w_neg)
        return {
            "test": "Wilcoxon signed rank exact test",
            "W": W,
            "statistic": w_min,
            "df": None,
            "p_value": float(min(2 * wilcoxon_cdf(w_min, nr), 1.0)),
            "n": nr,
        }

    n_zero = int(np.sum(diffs == 0))
    if eq_med == "zsplit":
        W = W + float(ranks[diffs == 0].sum()) / 2

    r_avg = nr * (nr + 1) / 4
    s2 = nr * (nr + 1) * (2 * nr + 1) / 24
    if eq_med == "pratt":
        # Cureton (1967) adjustment
        s2 -= n_zero * (n_zero + 1) * (2 * n_zero + 1) / 24
        r_avg = (nr * (nr + 1) - n_zero * (n_zero + 1)) / 4

    if ties:
        tie_ranks = ranks[abs_diffs != 0] if eq_med == "pratt" else ranks
        tie_counts = pd.Series(tie_ranks).value_counts().to_numpy(dtype=float)
        s2 -= float(np.sum(tie_counts ** 3 - tie_counts)) / 48

    num = abs(W - r_avg)
    if cc:
        num -= 0.5

    df = None
    if appr == "imant":
        var = (s2 * nr - num ** 2) / (nr - 1)
        statistic = num / math.sqrt(var)
        df = nr - 1
        p_value = 2 * stats.t.sf(abs(statistic), df)
    else:
        statistic = num / math.sqrt(s2)
        if appr == "imanz":
            statistic = statistic / 2 * (1 + math.sqrt((nr - 1) / (nr - statistic ** 2)))
        p_value = 2 * stats.norm.sf(abs(statistic))

    test_used = "Wilcoxon signed rank test"
    if ties and cc:
        test_used += ", with ties and continuity correction"
    elif ties:
        test_used += ", with ties correction"
    elif cc:
        test_used += ", with continuity correction"
    if appr == "imant":
        test_used += ", using Iman (1974) t approximation"
    elif appr == "imanz":
        test_used += ", using Iman (1974) z approximation"
    if eq_med == "pratt":
        test_used += ", Pratt method for zero differences"
    elif eq_med == "zsplit":
        test_used += ", z-split method for zero differences"

    return {
        "test": test_used,
        "W": W,
        "statistic": float(statistic),
        "df": df,
        "p_value": float(p_value),
        "n": nr,
    }


def wilcoxon_os(
    data,
    levels: Optional[Sequence] = None,
    mu: Optional[float] = None,
    ties: bool = True,
    appr: str = "wilcoxon",
    eq_med: str = "wilcoxon",
    cc: bool = False,
) -> Dict:
    """One-sample Wilcoxon signed rank test. W is the sum of ranks of values above mu."""
    values = numeric_values(data, levels)
    if mu is None:
        mu = midrange(values)
    result = signed_rank_test(values - mu, ties=ties, appr=appr, eq_med=eq_med, cc=cc)
    result["test"] = f"one-sample {result['test']}"
    result["mu"] = float(mu)
    return result
