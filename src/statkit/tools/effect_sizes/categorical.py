"""Effect sizes for nominal data: Cramér V, Cohen w, odds ratio, Cohen h'."""

import math
from typing import Dict, Mapping, Optional, Sequence

import numpy as np
from scipy import stats

from statkit.tools.core.fields import category_counts, cross_counts, to_series
from statkit.tools.hypothesis.categorical import power_divergence_gof, power_divergence_ind


def cramers_v_from_chi2_gof(chi2: float, n: int, k: int, bergsma: bool = False) -> float:
    """
    Cramér V for a goodness-of-fit chi-square: sqrt(chi2 / (n (k - 1))).

    With bergsma=True the bias-corrected version of Bergsma (2013) is used.
    """
    if bergsma:
        k_avg = k - (k - 1) ** 2 / (n - 1)
        phi2_avg = max(0.0, chi2 / n - (k - 1) / (n - 1))
        return math.sqrt(phi2_avg / (k_avg - 1))
    return math.sqrt(chi2 / (n * (k - 1)))


def cramers_v_from_chi2_ind(chi2: float, n: int, r: int, c: int, bergsma: bool = False) -> float:
    """Cramér V for an r x c test of independence: sqrt(chi2 / (n min(r-1, c-1)))."""
    if bergsma:
        m = min(r, c)
        m_hat = m - (m - 1) ** 2 / (n - 1)
        phi2 = max(0.0, chi2 / n - (r - 1) * (c - 1) / (n - 1))
        return math.sqrt(phi2 / (m_hat - 1))
    return math.sqrt(chi2 / (n * min(r - 1, c - 1)))


def cramers_v_gof(data, expected: Optional[Mapping] = None, lambd="pearson",
                  cc: Optional[str] = None, bergsma: bool = False) -> Dict:
    """Cramér V for a nominal field, based on a power-divergence goodness-of-fit statistic."""
    test = power_divergence_gof(data, expected, lambd=lambd, cc=cc)
    v = cramers_v_from_chi2_gof(test["statistic"], test["n"], test["k"], bergsma)
    return {"v": v, "chi2": test["statistic"], "n": test["n"], "k": test["k"], "bergsma": bergsma}


def cramers_v_ind(field1, field2, categories1: Optional[Sequence] = None, categories2: Optional[Sequence] = None,
                  lambd="pearson", cc: Optional[str] = None, bergsma: bool = False) -> Dict:
    """Cramér V for the association between two nominal fields."""
    test = power_divergence_ind(field1, field2, categories1, categories2, lambd=lambd, cc=cc)
    v = cramers_v_from_chi2_ind(test["statistic"], test["n"], test["n_rows"], test["n_cols"], bergsma)
    return {"v": v, "chi2": test["statistic"], "n": test["n"], "bergsma": bergsma}


def cohen_w(chi2: float, n: int) -> float:
    """Cohen w = sqrt(chi2 / n)."""
    return math.sqrt(chi2 / n)


def cohen_w_gof(data, expected: Optional[Mapping] = None, lambd="pearson", cc: Optional[str] = None) -> Dict:
    test = power_divergence_gof(data, expected, lambd=lambd, cc=cc)
    return {"w": cohen_w(test["statistic"], test["n"]), "chi2": test["statistic"], "n": test["n"]}


def odds_ratio(field1, field2, categories1: Optional[Sequence] = None,
               categories2: Optional[Sequence] = None) -> Dict:
    """
    Odds ratio of a 2x2 table, (a/c) / (b/d), with a z-test on ln(OR).

    The first two categories (in `categories1`/`categories2` order, or sorted)
    of each field form the table.
    """
    ct = cross_counts(field1, field2, categories1, categories2)
    if ct.shape[0] < 2 or ct.shape[1] < 2:
        raise ValueError(f"Odds ratio needs two categories in each field. Got table of shape {ct.shape}")
    cells = ct.iloc[:2, :2].to_numpy(dtype=float)
    a, b = cells[0]
    c, d = cells[1]
    if (cells == 0).any():
        raise ValueError(f"Odds ratio is undefined with an empty cell. Table: {cells.tolist()}")

    or_value = (a / c) / (b / d)
    se = math.sqrt(float(np.sum(1 / cells)))
    z = math.log(or_value) / se
    return {
        "or": or_value,
        "n": int(cells.sum()),
        "statistic": z,
        "p_value": float(2 * stats.norm.sf(abs(z))),
    }


def cohen_h_os(data, codes: Optional[Sequence] = None, p0: float = 0.5) -> Dict:
    """
    Cohen h' for one proportion: 2 asin(sqrt(p)) - 2 asin(sqrt(p0)).

    p is the proportion of codes[0] among codes[0] and codes[1]; without codes
    the first category (sorted) is counted against all others.
    """
    values = to_series(data).dropna()
    if codes is None:
        counts = category_counts(values)
        n1 = int(counts.iloc[0])
        n = int(counts.sum())
    else:
        n1 = int((values == codes[0]).sum())
        n = n1 + int((values == codes[1]).sum())
    if n == 0:
        raise ValueError("No observations to compute a proportion from")
    p1 = n1 / n
    h = 2 * math.asin(math.sqrt(p1)) - 2 * math.asin(math.sqrt(p0))
    return {"h": h, "p": p1, "p0": p0, "n": n}
