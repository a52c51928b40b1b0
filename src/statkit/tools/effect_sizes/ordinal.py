"""Effect sizes for two independent ordinal samples: Vargha-Delaney A and the common language effect size."""

import math
from typing import Dict, Optional, Sequence

import numpy as np
from scipy import stats

from statkit.tools.core.fields import check_option, two_groups


def vargha_delaney_a(cat_field, ord_field, categories: Optional[Sequence] = None,
                     levels: Optional[Sequence] = None) -> Dict:
    """
    Vargha-Delaney A for each of two categories.

    A1 = (R1/n1 - (n1+1)/2) / n2 is the probability that a random score from
    category 1 exceeds one from category 2 (ties count half). A2 = 1 - A1.
    """
    x1, x2, labels = two_groups(cat_field, ord_field, categories, levels)
    n1, n2 = len(x1), len(x2)
    ranks = stats.rankdata(np.concatenate([x1, x2]))
    r1 = ranks[:n1].sum()
    r2 = ranks[n1:].sum()

    a1 = (r1 / n1 - (n1 + 1) / 2) / n2
    a2 = (r2 / n2 - (n2 + 1) / 2) / n1
    return {
        "categories": labels,
        "a1": float(a1),
        "a2": float(a2),
        "n1": n1,
        "n2": n2,
    }


def common_language_is(
    cat_field,
    scale_field,
    categories: Optional[Sequence] = None,
    levels: Optional[Sequence] = None,
    dmu: float = 0,
    method: str = "brute",
) -> Dict:
    """
    Common language effect size: probability that a score from category 1 exceeds one from category 2.

    method:
        "brute"    - count all pairs, ties as half
        "brute-it" - count all pairs, ties ignored (c1 + c2 may be below 1)
        "appr"     - McGraw & Wong normal approximation Phi((m1 - m2 - dmu) / sqrt(v1 + v2))
        "vda"      - via the rank sums (Vargha-Delaney A)
    """
    check_option(method, ["brute", "brute-it", "appr", "vda"], "method")
    x1, x2, labels = two_groups(cat_field, scale_field, categories, levels)

    if method == "appr":
        z = (x1.mean() - x2.mean() - dmu) / math.sqrt(x1.var(ddof=1) + x2.var(ddof=1))
        c1 = float(stats.norm.cdf(z))
        c2 = 1 - c1
    elif method == "vda":
        res = vargha_delaney_a(cat_field, scale_field, categories, levels)
        c1, c2 = res["a1"], res["a2"]
    else:
        diff = x1[:, None] - x2[None, :]
        n_pairs = diff.size
        if method == "brute":
            c1 = float(((diff > 0).sum() + 0.5 * (diff == 0).sum()) / n_pairs)
            c2 = 1 - c1
        else:
            c1 = float((diff > 0).sum() / n_pairs)
            c2 = float((diff < 0).sum() / n_pairs)

    return {"categories": labels, "cle1": c1, "cle2": c2, "method": method}
