"""
Tests for categorical data.

Goodness-of-fit (one nominal field against expected counts):
- power_divergence_gof: Cressie-Read family, with pearson_gof, g_gof, freeman_tukey_gof,
  neyman_gof, mod_log_likelihood_gof as named members
- multinomial_gof: exact test by enumerating all possible outcomes

Independence (two nominal fields):
- power_divergence_ind with pearson_ind, g_ind, freeman_tukey_ind, neyman_ind

Corrections (cc): "yates" (move each count half a unit towards its expectation),
"pearson" ((n-1)/n), "williams" (Williams' q).
"""

import math
from typing import Dict, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from scipy import stats

from statkit.constants import POWER_DIVERGENCE_LAMBDAS
from statkit.tools.core.fields import category_counts, check_option, cross_counts
from statkit.tools.distributions import multinomial_cdf, multinomial_pmf


CORRECTIONS = [None, "none", "yates", "pearson", "williams"]


def resolve_lambda(lambd: Union[str, float]) -> Tuple[float, str]:
    """Translate a named power-divergence member (or a raw number) to (lambda, test name)."""
    if isinstance(lambd, str):
        if lambd not in POWER_DIVERGENCE_LAMBDAS:
            raise ValueError(f"Unknown lambda '{lambd}'. Choose from: {list(POWER_DIVERGENCE_LAMBDAS)} or a number")
        entry = POWER_DIVERGENCE_LAMBDAS[lambd]
        return entry["lambda"], entry["name"]
    for entry in POWER_DIVERGENCE_LAMBDAS.values():
        if math.isclose(float(lambd), entry["lambda"]):
            return entry["lambda"], entry["name"]
    return float(lambd), f"power divergence (lambda = {lambd})"


def divergence(observed: np.ndarray, expected: np.ndarray, lambd: float) -> float:
    """Power-divergence statistic 2/(l(l+1)) sum O((O/E)^l - 1), with the l = 0 and l = -1 limits."""
    observed = np.asarray(observed, dtype=float)
    expected = np.asarray(expected, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        if lambd == 0:
            terms = np.where(observed > 0, observed * np.log(observed / expected), 0.0)
            return float(2 * terms.sum())
        if lambd == -1:
            return float(2 * np.sum(expected * np.log(expected / observed)))
        terms = observed * ((observed / expected) ** lambd - 1)
        return float(2 * terms.sum() / (lambd * (lambd + 1)))


def _yates_adjust(observed: np.ndarray, expected: np.ndarray) -> np.ndarray:
    return observed - 0.5 * np.sign(observed - expected)


def observed_and_expected(data, expected: Optional[Mapping] = None) -> Tuple[pd.Series, np.ndarray]:
    """
    Observed counts per category and the matching expected counts.

    Without `expected` all categories present in the data are equally likely.
    `expected` maps each category to an expected count (or proportion); these are
    rescaled to the observed total.
    """
    if expected is None:
        observed = category_counts(data)
        k = len(observed)
        exp_counts = np.full(k, observed.sum() / k)
    else:
        expected = pd.Series(expected, dtype=float)
        observed = category_counts(data, list(expected.index))
        exp_counts = expected.to_numpy() / expected.sum() * observed.sum()
    if len(observed) < 2:
        raise ValueError(f"Goodness-of-fit needs at least 2 categories. Found: {list(observed.index)}")
    if observed.sum() == 0:
        raise ValueError("No observations in the listed categories")
    return observed, exp_counts


def power_divergence_gof(
    data,
    expected: Optional[Mapping] = None,
    lambd: Union[str, float] = "cressie-read",
    cc: Optional[str] = None,
) -> Dict:
    """
    Power-divergence goodness-of-fit test.

    Args:
        data: Nominal field
        expected: Optional mapping category -> expected count; equal counts if None
        lambd: "cressie-read" (2/3), "g" (0), "mod-log" (-1), "pearson" (1),
               "freeman-tukey" (-1/2), "neyman" (-2) or any number
        cc: None, "yates", "pearson" or "williams"

    Returns:
        Dictionary with n, k, statistic, df, p_value, min_exp, prop_below_5, test
    """
    check_option(cc, CORRECTIONS, "correction")
    lam, test_used = resolve_lambda(lambd)
    observed, exp_counts = observed_and_expected(data, expected)
    obs = observed.to_numpy(dtype=float)
    n = obs.sum()
    k = len(obs)
    df = k - 1

    if cc == "yates":
        obs = _yates_adjust(obs, exp_counts)
        test_used += ", with Yates correction"

    statistic = divergence(obs, exp_counts, lam)

    if cc == "williams":
        statistic = statistic / (1 + (k ** 2 - 1) / (6 * n * df))
        test_used += ", with Williams correction"
    elif cc == "pearson":
        statistic = statistic * (n - 1) / n
        test_used += ", with E.S. Pearson correction"

    return {
        "test": f"{test_used} goodness-of-fit",
        "n": int(n),
        "k": k,
        "statistic": statistic,
        "df": df,
        "p_value": float(stats.chi2.sf(statistic, df)),
        "min_exp": float(exp_counts.min()),
        "prop_below_5": float(np.mean(exp_counts < 5)),
    }


def power_divergence_ind(
    field1,
    field2,
    categories1: Optional[Sequence] = None,
    categories2: Optional[Sequence] = None,
    lambd: Union[str, float] = "cressie-read",
    cc: Optional[str] = None,
) -> Dict:
    """
    Power-divergence test of independence on the cross table of two nominal fields.

    Expected counts are row total * column total / n; df = (r - 1)(c - 1).
    """
    check_option(cc, CORRECTIONS, "correction")
    lam, test_used = resolve_lambda(lambd)
    ct = cross_counts(field1, field2, categories1, categories2).to_numpy(dtype=float)
    nr, nc = ct.shape
    if nr < 2 or nc < 2:
        raise ValueError(f"Test of independence needs at least a 2x2 table. Got {nr}x{nc}")

    n = ct.sum()
    row_totals = ct.sum(axis=1)
    col_totals = ct.sum(axis=0)
    exp_counts = np.outer(row_totals, col_totals) / n
    df = (nr - 1) * (nc - 1)

    obs = ct
    if cc == "yates":
        obs = _yates_adjust(ct, exp_counts)
        test_used += ", with Yates correction"

    statistic = divergence(obs, exp_counts, lam)

    if cc == "williams":
        q = 1 + (n * np.sum(1 / row_totals) - 1) * (n * np.sum(1 / col_totals) - 1) / (6 * n * df)
        statistic = statistic / q
        test_used += ", with Williams correction"
    elif cc == "pearson":
        statistic = statistic * (n - 1) / n
        test_used += ", with E.S. Pearson correction"

    return {
        "test": f"{test_used} test of independence",
        "n": int(n),
        "n_rows": nr,
        "n_cols": nc,
        "statistic": float(statistic),
        "df": df,
        "p_value": float(stats.chi2.sf(statistic, df)),
        "min_exp": float(exp_counts.min()),
        "prop_below_5": float(np.mean(exp_counts < 5)),
    }


def pearson_gof(data, expected: Optional[Mapping] = None, cc: Optional[str] = None) -> Dict:
    return power_divergence_gof(data, expected, lambd="pearson", cc=cc)


def g_gof(data, expected: Optional[Mapping] = None, cc: Optional[str] = None) -> Dict:
    return power_divergence_gof(data, expected, lambd="g", cc=cc)


def freeman_tukey_gof(data, expected: Optional[Mapping] = None, cc: Optional[str] = None) -> Dict:
    return power_divergence_gof(data, expected, lambd="freeman-tukey", cc=cc)


def neyman_gof(data, expected: Optional[Mapping] = None, cc: Optional[str] = None) -> Dict:
    return power_divergence_gof(data, expected, lambd="neyman", cc=cc)


def mod_log_likelihood_gof(data, expected: Optional[Mapping] = None, cc: Optional[str] = None) -> Dict:
    return power_divergence_gof(data, expected, lambd="mod-log", cc=cc)


def pearson_ind(field1, field2, categories1=None, categories2=None, cc: Optional[str] = None) -> Dict:
    return power_divergence_ind(field1, field2, categories1, categories2, lambd="pearson", cc=cc)


def g_ind(field1, field2, categories1=None, categories2=None, cc: Optional[str] = None) -> Dict:
    return power_divergence_ind(field1, field2, categories1, categories2, lambd="g", cc=cc)


def freeman_tukey_ind(field1, field2, categories1=None, categories2=None, cc: Optional[str] = None) -> Dict:
    return power_divergence_ind(field1, field2, categories1, categories2, lambd="freeman-tukey", cc=cc)


def neyman_ind(field1, field2, categories1=None, categories2=None, cc: Optional[str] = None) -> Dict:
    return power_divergence_ind(field1, field2, categories1, categories2, lambd="neyman", cc=cc)


def multinomial_gof(data, expected: Optional[Mapping] = None) -> Dict:
    """
    Exact multinomial goodness-of-fit test.

    Every way of distributing the n observations over the k categories is
    enumerated; the p-value is the total probability of the outcomes that are
    no more likely than the observed one. The enumeration grows as C(n+k-1, k-1),
    so this is meant for small samples.

    Returns:
        Dictionary with p_obs (probability of the observed counts), n_combinations, p_value
    """
    observed, exp_counts = observed_and_expected(data, expected)
    counts = observed.to_numpy(dtype=int)
    n = int(counts.sum())
    k = len(counts)
    probs = exp_counts / exp_counts.sum()

    p_obs = multinomial_pmf(counts, probs)
    p_value = multinomial_cdf(counts, probs)

    return {
        "test": "one-sample multinomial exact goodness-of-fit test",
        "n": n,
        "k": k,
        "p_obs": p_obs,
        "n_combinations": math.comb(n + k - 1, k - 1),
        "p_value": p_value,
    }
