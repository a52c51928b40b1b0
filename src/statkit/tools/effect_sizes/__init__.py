"""Effect size measures and conversions between them."""

from statkit.tools.effect_sizes.means import (
    hedges_correction,
    cohen_d_os,
    cohen_d_is,
    cohen_d_ps,
    cohen_d,
    hedges_g_os,
    hedges_g_is,
    hedges_g_ps,
    cohen_f,
    eta_squared,
    omega_squared,
    epsilon_squared,
)
from statkit.tools.effect_sizes.categorical import (
    cramers_v_from_chi2_gof,
    cramers_v_from_chi2_ind,
    cramers_v_gof,
    cramers_v_ind,
    cohen_w,
    cohen_w_gof,
    odds_ratio,
    cohen_h_os,
)
from statkit.tools.effect_sizes.ordinal import (
    vargha_delaney_a,
    common_language_is,
)
from statkit.tools.effect_sizes.conversions import es_convert

__all__ = [
    'hedges_correction',
    'cohen_d_os',
    'cohen_d_is',
    'cohen_d_ps',
    'cohen_d',
    'hedges_g_os',
    'hedges_g_is',
    'hedges_g_ps',
    'cohen_f',
    'eta_squared',
    'omega_squared',
    'epsilon_squared',
    'cramers_v_from_chi2_gof',
    'cramers_v_from_chi2_ind',
    'cramers_v_gof',
    'cramers_v_ind',
    'cohen_w',
    'cohen_w_gof',
    'odds_ratio',
    'cohen_h_os',
    'vargha_delaney_a',
    'common_language_is',
    'es_convert',
]
