"""Exact null distributions and the p-value bisection search."""

from statkit.tools.distributions.exact import (
    mww_count,
    mww_count_table,
    mww_pmf,
    mww_cdf,
    wilcoxon_counts,
    wilcoxon_pmf,
    wilcoxon_cdf,
    kendall_counts,
    kendall_exact_pvalue,
    spearman_exact_cdf,
    spearman_as89,
    find_combinations,
    multinomial_pmf,
    multinomial_cdf,
)
from statkit.tools.distributions.search import bisect_pvalue

__all__ = [
    'mww_count',
    'mww_count_table',
    'mww_pmf',
    'mww_cdf',
    'wilcoxon_counts',
    'wilcoxon_pmf',
    'wilcoxon_cdf',
    'kendall_counts',
    'kendall_exact_pvalue',
    'spearman_exact_cdf',
    'spearman_as89',
    'find_combinations',
    'multinomial_pmf',
    'multinomial_cdf',
    'bisect_pvalue',
]
