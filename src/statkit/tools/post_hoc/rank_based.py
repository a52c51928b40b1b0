"""
Pairwise follow-ups for the Kruskal-Wallis test.

All three compare the mean ranks of every pair of categories, with the ranks
taken over the pooled sample of all k categories.
"""

import math
from itertools import combinations
from typing import Optional, Sequence

import numpy as np
import pandas as pd
from scipy import stats

from statkit.tools.core.fields import check_option, k_groups


def _pooled_ranks(cat_field, ord_field, categories, levels):
    """Group labels, group sizes, per-group rank sums and all ranks (pooled ranking)."""
    groups = k_groups(cat_field, ord_field, categories, levels)
    labels = list(groups)
    ns = np.array([len(groups[c]) for c in labels], dtype=float)
    ranks = stats.rankdata(np.concatenate([groups[c] for c in labels]))
    bounds = np.concatenate([[0], np.cumsum(ns)]).astype(int)
    rank_sums = np.array([ranks[bounds[j]:bounds[j + 1]].sum() for j in range(len(labels))])
    return labels, ns, rank_sums, ranks


def _tie_sum(ranks: np.ndarray) -> float:
    t = pd.Series(ranks).value_counts().to_numpy(dtype=float)
    return float(np.sum(t ** 3 - t))


def dunn(cat_field, ord_field, categories: Optional[Sequence] = None,
         levels: Optional[Sequence] = None) -> pd.DataFrame:
    """
    Dunn (1964) pairwise z-tests on mean ranks, with ties correction.

    The adjusted p-value is the Bonferroni correction over k(k-1)/2 pairs.
    """
    labels, ns, rank_sums, ranks = _pooled_ranks(cat_field, ord_field, categories, levels)
    n = len(ranks)
    k = len(labels)
    a = n * (n + 1) / 12 - _tie_sum(ranks) / (12 * (n - 1))
    n_comp = k * (k - 1) / 2

    rows = []
    for i, j in combinations(range(k), 2):
        m1, m2 = rank_sums[i] / ns[i], rank_sums[j] / ns[j]
        z = (m1 - m2) / math.sqrt(a * (1 / ns[i] + 1 / ns[j]))
        p = 2 * stats.norm.sf(abs(z))
        rows.append({
            "category_1": labels[i],
            "category_2": labels[j],
            "n1": int(ns[i]),
            "n2": int(ns[j]),
            "mean_rank_1": m1,
            "mean_rank_2": m2,
            "statistic": z,
            "p_value": p,
            "adj_p_value": min(p * n_comp, 1.0),
        })
    return pd.DataFrame(rows)


def nemenyi(cat_field, ord_field, categories: Optional[Sequence] = None,
            levels: Optional[Sequence] = None, method: str = "auto") -> pd.DataFrame:
    """
    Nemenyi pairwise comparisons of mean ranks.

    method:
        "exact"   - q = d / se with se² = n(n+1)/24 (1/n1 + 1/n2), studentized range with infinite df
        "sh"      - Schaich & Hamerle chi-square (d/se)², df = k - 1
        "sh-ties" - as "sh" with the variance multiplied by 1 - Σ(t³-t)/(n³-n)
        "auto"    - "exact" for equal group sizes without ties, else "sh" without ties, else "sh-ties"
    """
    check_option(method, ["auto", "exact", "sh", "sh-ties"], "method")
    labels, ns, rank_sums, ranks = _pooled_ranks(cat_field, ord_field, categories, levels)
    n = len(ranks)
    k = len(labels)
    tie_sum = _tie_sum(ranks)

    if method == "auto":
        if tie_sum == 0 and len(set(ns)) == 1:
            method = "exact"
        elif tie_sum == 0:
            method = "sh"
        else:
            method = "sh-ties"

    ff = n * (n + 1) / 24 if method == "exact" else n * (n + 1) / 12
    ties_factor = 1 - tie_sum / (n ** 3 - n) if method == "sh-ties" else 1.0

    rows = []
    for i, j in combinations(range(k), 2):
        m1, m2 = rank_sums[i] / ns[i], rank_sums[j] / ns[j]
        se = math.sqrt(ties_factor * ff * (1 / ns[i] + 1 / ns[j]))
        if method == "exact":
            statistic = (m1 - m2) / se
            p = float(stats.studentized_range.sf(abs(statistic), k, np.inf))
        else:
            statistic = ((m1 - m2) / se) ** 2
            p = float(stats.chi2.sf(statistic, k - 1))
        rows.append({
            "category_1": labels[i],
            "category_2": labels[j],
            "n1": int(ns[i]),
            "n2": int(ns[j]),
            "mean_rank_1": m1,
            "mean_rank_2": m2,
            "se": se,
            "statistic": statistic,
            "p_value": min(p, 1.0),
            "method": method,
        })
    return pd.DataFrame(rows)


def conover_iman(cat_field, ord_field, categories: Optional[Sequence] = None,
                 levels: Optional[Sequence] = None) -> pd.DataFrame:
    """Conover-Iman pairwise t-tests on mean ranks, df = n - k."""
    labels, ns, rank_sums, ranks = _pooled_ranks(cat_field, ord_field, categories, levels)
    n = len(ranks)
    k = len(labels)

    ff = n * (n + 1) ** 2 / 4
    s2 = (np.sum(ranks ** 2) - ff) / (n - 1)
    T = (np.sum(rank_sums ** 2 / ns) - ff) / s2
    var_factor = s2 * (n - 1 - T) / (n - k)
    df = n - k

    rows = []
    for i, j in combinations(range(k), 2):
        m1, m2 = rank_sums[i] / ns[i], rank_sums[j] / ns[j]
        t = (m1 - m2) / math.sqrt(var_factor * (1 / ns[i] + 1 / ns[j]))
        rows.append({
            "category_1": labels[i],
            "category_2": labels[j],
            "n1": int(ns[i]),
            "n2": int(ns[j]),
            "mean_rank_1": m1,
            "mean_rank_2": m2,
            "statistic": float(t),
            "df": df,
            "p_value": float(min(2 * stats.t.sf(abs(t), df), 1.0)),
        })
    return pd.DataFrame(rows)
