"""Correlation and association coefficients."""

from statkit.tools.correlation.rank import (
    concordance_matrices,
    goodman_kruskal_gamma,
    somers_d,
    spearman_rho,
    kendall_tau,
    pearson_r,
)
from statkit.tools.correlation.biserial import (
    rank_biserial_os,
    rank_biserial_is,
)

__all__ = [
    'concordance_matrices',
    'goodman_kruskal_gamma',
    'somers_d',
    'spearman_rho',
    'kendall_tau',
    'pearson_r',
    'rank_biserial_os',
    'rank_biserial_is',
]
