"""
Exact null distributions for rank and count statistics.

Mann-Whitney U:
- mww_count: number of arrangements of n1 x's and n2 y's giving U = u (memoised recursion)
- mww_count_table: the same counts for every u at once (dynamic programming)
- mww_pmf / mww_cdf

Wilcoxon signed rank:
- wilcoxon_counts / wilcoxon_pmf / wilcoxon_cdf (shift method)

Kendall:
- kendall_counts: permutations of n items by number of inversions
- kendall_exact_pvalue

Spearman:
- spearman_exact_cdf: full permutation distribution of S = sum(d^2), small n only
- spearman_as89: Best & Roberts (1975) AS 89 upper tail probability

Multinomial:
- find_combinations / multinomial_pmf / multinomial_cdf

All counts are held as Python ints so large sample sizes do not overflow.
"""

import itertools
import math
from functools import lru_cache
from typing import List, Sequence

import numpy as np
from scipy import stats


# Mann-Whitney U


@lru_cache(maxsize=None)
def mww_count(u: int, n1: int, n2: int) -> int:
    """
    Number of orderings of n1 + n2 observations for which U equals u.

        f(u, n1, n2) = 0                                   if u < 0 or u > n1*n2
                     = 1                                   if n1 == 1 or n2 == 1
                     = f(u, n1, n2 - 1) + f(u - n2, n1 - 1, n2)   otherwise
    """
    if u < 0 or u > n1 * n2:
        return 0
    if n1 <= 1 or n2 <= 1:
        return 1
    return mww_count(u, n1, n2 - 1) + mww_count(u - n2, n1 - 1, n2)


def mww_count_table(n1: int, n2: int) -> List[int]:
    """
    Counts of f(u, n1, n2) for u = 0 .. n1*n2, built bottom-up.

    table[i][j] holds the distribution for sample sizes (i, j); every entry is
    derived from the (i, j - 1) and (i - 1, j) distributions, same recurrence as
    mww_count.
    """
    _check_sample_sizes(n1, n2)
    table = [[None] * (n2 + 1) for _ in range(n1 + 1)]
    for i in range(1, n1 + 1):
        for j in range(1, n2 + 1):
            if i == 1 or j == 1:
                table[i][j] = [1] * (i * j + 1)
                continue
            left = table[i][j - 1]
            up = table[i - 1][j]
            dist = []
            for u in range(i * j + 1):
                count = left[u] if u < len(left) else 0
                if 0 <= u - j < len(up):
                    count += up[u - j]
                dist.append(count)
            table[i][j] = dist
    return table[n1][n2]


def _check_sample_sizes(n1: int, n2: int) -> None:
    if n1 < 1 or n2 < 1:
        raise ValueError(f"Both sample sizes must be at least 1. Got n1={n1}, n2={n2}")


def mww_pmf(u: int, n1: int, n2: int, method: str = "table") -> float:
    """P(U = u) under H0 for sample sizes n1 and n2."""
    _check_sample_sizes(n1, n2)
    u = int(u)
    if method == "recursive":
        count = mww_count(u, n1, n2)
    elif method == "table":
        dist = mww_count_table(n1, n2)
        count = dist[u] if 0 <= u < len(dist) else 0
    else:
        raise ValueError(f"Unknown method '{method}'. Choose from: ['table', 'recursive']")
    return count / math.comb(n1 + n2, n1)


def mww_cdf(u: float, n1: int, n2: int, method: str = "table") -> float:
    """P(U <= u) under H0 for sample sizes n1 and n2."""
    _check_sample_sizes(n1, n2)
    u = int(math.floor(u))
    if u < 0:
        return 0.0
    if u >= n1 * n2:
        return 1.0
    if method == "recursive":
        total = sum(mww_count(x, n1, n2) for x in range(u + 1))
    elif method == "table":
        total = sum(mww_count_table(n1, n2)[:u + 1])
    else:
        raise ValueError(f"Unknown method '{method}'. Choose from: ['table', 'recursive']")
    return total / math.comb(n1 + n2, n2)


# Wilcoxon signed rank


def wilcoxon_counts(n: int) -> List[int]:
    """
    Number of sign assignments of ranks 1..n giving each positive rank sum T.

    Starting from [1, 0, ..., 0], adding rank i doubles the possibilities by
    adding a copy of the frequencies shifted i places to the right.
    """
    if n < 1:
        raise ValueError(f"Number of ranks must be at least 1. Got {n}")
    max_rank = n * (n + 1) // 2
    freqs = [1] + [0] * max_rank
    for i in range(1, n + 1):
        shifted = [0] * i + freqs[:max_rank + 1 - i]
        freqs = [a + b for a, b in zip(freqs, shifted)]
    return freqs


def wilcoxon_pmf(t: int, n: int) -> float:
    freqs = wilcoxon_counts(n)
    t = int(t)
    if t < 0 or t >= len(freqs):
        return 0.0
    return freqs[t] / 2 ** n


def wilcoxon_cdf(t: float, n: int) -> float:
    """P(T <= t) for the Wilcoxon signed-rank statistic with n non-zero differences."""
    freqs = wilcoxon_counts(n)
    t = int(math.floor(t))
    if t < 0:
        return 0.0
    return sum(freqs[:t + 1]) / 2 ** n


# Kendall


def kendall_counts(n: int) -> List[int]:
    """Number of permutations of n items with 0, 1, ..., n(n-1)/2 inversions."""
    counts = [1]
    for j in range(2, n + 1):
        new = [0] * (len(counts) + j - 1)
        for k, c in enumerate(counts):
            for shift in range(j):
                new[k + shift] += c
        counts = new
    return counts


def kendall_exact_pvalue(n_concordant: float, n: int) -> float:
    """Two-sided exact p-value for the number of concordant pairs when there are no ties."""
    counts = kendall_counts(n)
    max_c = n * (n - 1) // 2
    c = int(round(min(n_concordant, max_c - n_concordant)))
    p_value = 2 * sum(counts[:c + 1]) / math.factorial(n)
    return min(p_value, 1.0)


# Spearman


def spearman_exact_cdf(s: float, n: int, lower_tail: bool = True) -> float:
    """
    Exact P(S <= s) (or P(S >= s)) for S = sum of squared rank differences.

    Enumerates all n! permutations, so only feasible for small n (n <= 9).
    """
    if n > 9:
        raise ValueError(f"Exact Spearman distribution is only enumerated for n <= 9. Got n={n}")
    ranks = np.arange(1, n + 1)
    s_values = np.array([
        int(((ranks - np.array(perm)) ** 2).sum())
        for perm in itertools.permutations(range(1, n + 1))
    ])
    if lower_tail:
        return float(np.mean(s_values <= s + 1e-9))
    return float(np.mean(s_values >= s - 1e-9))


def spearman_as89(n: int, s: float) -> float:
    """
    AS 89: upper tail probability P(S >= s) for Spearman's S.

    Uses exact enumeration for n <= 6 and the Edgeworth series expansion otherwise.
    """
    if n <= 1 or s <= 0:
        return 1.0
    if s > n * (n * n - 1) / 3:
        return 0.0

    js = math.ceil(s)
    # S only takes even values
    if js % 2 != 0:
        js += 1

    if n <= 6:
        return spearman_exact_cdf(js, n, lower_tail=False)

    b = 1 / n
    x = (6 * (js - 1) * b / (1 / (b * b) - 1) - 1) * math.sqrt(1 / b - 1)
    y = x * x
    u = x * b * (0.2274 + b * (0.2531 + 0.1745 * b)
                 + y * (-0.0758 + b * (0.1033 + 0.3932 * b)
                        - y * b * (0.0879 + 0.0151 * b
                                   - y * (0.0072 - 0.0831 * b + y * b * (0.0131 - 0.00046 * y)))))
    prho = u / math.exp(y / 2) + stats.norm.sf(x)
    return float(min(max(prho, 0.0), 1.0))


# Multinomial


def find_combinations(n: int, k: int) -> List[List[int]]:
    """All ways to write n as an ordered sum of k non-negative integers."""
    if k < 1:
        raise ValueError(f"Number of categories must be at least 1. Got {k}")
    if k == 1:
        return [[n]]
    return [[i] + rest for i in range(n + 1) for rest in find_combinations(n - i, k - 1)]


def multinomial_pmf(counts: Sequence[int], probs: Sequence[float], method: str = "loggamma") -> float:
    """
    Multinomial probability of observing `counts` given category probabilities `probs`.

    method:
        "factorial" - n! / prod(F!) * prod(P^F), exact integer arithmetic
        "gamma"     - same via the gamma function (overflows for n > 170)
        "loggamma"  - exp(lgamma(n+1) + sum(F log P - lgamma(F+1)))
    """
    counts = np.asarray(counts, dtype=int)
    probs = np.asarray(probs, dtype=float)
    if counts.shape != probs.shape:
        raise ValueError(f"counts and probs must have the same length. Got {len(counts)} and {len(probs)}")
    n = int(counts.sum())

    if method == "factorial":
        coefficient = math.factorial(n)
        for f in counts:
            coefficient //= math.factorial(int(f))
        return float(coefficient * np.prod(probs ** counts))
    if method == "gamma":
        return float(math.gamma(n + 1) / np.prod([math.gamma(f + 1) for f in counts]) * np.prod(probs ** counts))
    if method == "loggamma":
        # 0 * log(0) contributes nothing
        with np.errstate(divide="ignore", invalid="ignore"):
            terms = np.where(counts > 0, counts * np.log(probs), 0.0)
        log_pmf = math.lgamma(n + 1) + float(np.sum(terms)) - sum(math.lgamma(f + 1) for f in counts)
        return math.exp(log_pmf)
    raise ValueError(f"Unknown method '{method}'. Choose from: ['factorial', 'gamma', 'loggamma']")


def multinomial_cdf(counts: Sequence[int], probs: Sequence[float], method: str = "loggamma") -> float:
    """
    Sum of probabilities of all outcomes at most as likely as the observed one.

    Probabilities are compared after rounding to 8 digits so that outcomes
    equally likely as the observed one are not lost to floating point noise.
    """
    counts = list(counts)
    p_obs = round(multinomial_pmf(counts, probs, method), 8)
    total = 0.0
    for combination in find_combinations(int(sum(counts)), len(counts)):
        pmf = multinomial_pmf(combination, probs, method)
        if round(pmf, 8) <= p_obs:
            total += pmf
    return min(total, 1.0)
