"""Rank-biserial correlation for one sample (against a hypothesised median) and two independent samples."""

from typing import Dict, Optional, Sequence

import numpy as np
from scipy import stats

from statkit.tools.core.fields import check_option, midrange, numeric_values, two_groups


def rank_biserial_os(data, levels: Optional[Sequence] = None, mu: Optional[float] = None) -> Dict:
    """
    One-sample rank-biserial correlation: (R+ - R-) / (R+ + R-).

    Scores equal to mu are dropped; the absolute deviations from mu are ranked.
    mu defaults to the midrange of the data.
    """
    values = numeric_values(data, levels)
    if mu is None:
        mu = midrange(values)

    values = values[values != mu]
    if len(values) == 0:
        raise ValueError(f"All values are equal to mu={mu}; rank-biserial correlation is undefined")

    diffs = values - mu
    ranks = stats.rankdata(np.abs(diffs))
    r_plus = float(ranks[diffs > 0].sum())
    r_neg = float(ranks[diffs < 0].sum())

    return {
        "mu": float(mu),
        "rb": (r_plus - r_neg) / (r_plus + r_neg),
        "r_plus": r_plus,
        "r_neg": r_neg,
        "n": len(values),
    }


def rank_biserial_is(
    cat_field,
    ord_field,
    categories: Optional[Sequence] = None,
    levels: Optional[Sequence] = None,
    method: str = "cureton",
) -> Dict:
    """
    Independent-samples rank-biserial correlation.

    method:
        "glass"   - 2 (mean rank 1 - mean rank 2) / n
        "cureton" - corrected for bracket ties between the two groups
    """
    check_option(method, ["glass", "cureton"], "method")
    x1, x2, labels = two_groups(cat_field, ord_field, categories, levels)
    n1, n2 = len(x1), len(x2)
    n = n1 + n2

    ranks = stats.rankdata(np.concatenate([x1, x2]))
    ranks1, ranks2 = ranks[:n1], ranks[n1:]
    r1_avg = ranks1.mean()
    r2_avg = ranks2.mean()

    if method == "glass":
        rb = 2 * (r1_avg - r2_avg) / n
    else:
        # pairs (one from each group) sharing the same rank
        bracket_ties = sum(
            np.sum(ranks2 == r) * np.sum(ranks1 == r) for r in np.unique(ranks1)
        )
        rb = (r1_avg - (n + 1) / 2) / (n2 / 2 - (bracket_ties / 2) / n1)

    return {
        "method": method,
        "categories": labels,
        "rb": float(rb),
        "n1": n1,
        "n2": n2,
    }
