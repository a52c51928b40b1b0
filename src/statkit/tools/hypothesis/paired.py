"""Paired-samples tests on the differences field1 - field2."""

import math
from typing import Dict, Optional, Sequence

import numpy as np
from scipy import stats

from statkit.tools.core.fields import check_option, paired_values
from statkit.tools.hypothesis.one_sample import signed_rank_test


def student_t_ps(field1, field2, dmu: float = 0) -> Dict:
    """Paired-samples Student t: t = (mean(d) - dmu) / (sd(d) / sqrt(n)), df = n - 1."""
    x, y = paired_values(field1, field2)
    n = len(x)
    if n < 2:
        raise ValueError(f"Paired t-test requires at least 2 pairs. Found: {n}")
    diffs = x - y
    t = (diffs.mean() - dmu) / (diffs.std(ddof=1) / math.sqrt(n))
    df = n - 1
    return {
        "test": "paired-samples Student t",
        "dmu": dmu,
        "mean_difference": float(diffs.mean()),
        "statistic": float(t),
        "df": df,
        "p_value": float(2 * stats.t.sf(abs(t), df)),
        "n": n,
    }


def sign_ps(field1, field2, levels: Optional[Sequence] = None, dmu: float = 0, method: str = "exact") -> Dict:
    """
    Paired-samples sign test.

    Differences equal to dmu are ignored. The exact version uses the binomial
    distribution; "appr" uses z = (max count - n/2 - 0.5) / (sqrt(n) / 2).
    """
    check_option(method, ["exact", "appr"], "method")
    x, y = paired_values(field1, field2, levels)
    diffs = x - y - dmu
    n_pos = int(np.sum(diffs > 0))
    n_neg = int(np.sum(diffs < 0))
    n = n_pos + n_neg
    if n == 0:
        raise ValueError("All paired differences are equal to dmu; sign test is undefined")

    statistic = None
    if method == "exact":
        p_value = 2 * stats.binom.cdf(min(n_pos, n_neg), n, 0.5)
        test_used = "exact paired-samples sign test"
    else:
        statistic = (max(n_pos, n_neg) - 0.5 * n - 0.5) / (0.5 * math.sqrt(n))
        p_value = 2 * stats.norm.sf(abs(statistic))
        test_used = "paired-samples sign test with normal approximation"

    return {
        "test": test_used,
        "n_pos": n_pos,
        "n_neg": n_neg,
        "statistic": statistic,
        "p_value": float(min(p_value, 1.0)),
    }


def wilcoxon_ps(
    field1,
    field2,
    levels: Optional[Sequence] = None,
    ties: bool = True,
    appr: str = "wilcoxon",
    eq_med: str = "wilcoxon",
    cc: bool = False,
) -> Dict:
    """Wilcoxon signed rank test for paired samples. W is the smaller of the two rank sums."""
    x, y = paired_values(field1, field2, levels)
    result = signed_rank_test(x - y, ties=ties, appr=appr, eq_med=eq_med, cc=cc, statistic_side="min")
    result["test"] = f"paired-samples {result['test']}"
    return result
