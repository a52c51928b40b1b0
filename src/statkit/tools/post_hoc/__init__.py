"""Post-hoc procedures and multiple-comparison adjustment."""

from statkit.tools.post_hoc.p_adjust import P_ADJUST_METHODS, p_adjust
from statkit.tools.post_hoc.rank_based import dunn, nemenyi, conover_iman
from statkit.tools.post_hoc.pairwise import (
    pairwise_is,
    pairwise_t_winer,
    residual_analysis,
    pairwise_gof,
)

__all__ = [
    'P_ADJUST_METHODS',
    'p_adjust',
    'dunn',
    'nemenyi',
    'conover_iman',
    'pairwise_is',
    'pairwise_t_winer',
    'residual_analysis',
    'pairwise_gof',
]
