"""Rule-of-thumb classifiers for effect sizes."""

from statkit.tools.thumb.rules import (
    classify,
    th_cohen_d,
    th_cramer_v,
    th_gk_gamma,
    th_somers_d,
    th_cohen_w,
    th_cohen_f,
    th_pearson_r,
    th_eta_sq,
    th_odds_ratio,
    th_rank_biserial,
    th_vda,
)

__all__ = [
    'classify',
    'th_cohen_d',
    'th_cramer_v',
    'th_gk_gamma',
    'th_somers_d',
    'th_cohen_w',
    'th_cohen_f',
    'th_pearson_r',
    'th_eta_sq',
    'th_odds_ratio',
    'th_rank_biserial',
    'th_vda',
]
