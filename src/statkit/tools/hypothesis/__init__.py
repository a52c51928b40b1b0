"""Hypothesis tests: one-sample, paired, two-sample, k-sample and categorical."""

from statkit.tools.hypothesis.one_sample import (
    student_t_os,
    sign_os,
    binomial_os,
    signed_rank_test,
    wilcoxon_os,
)
from statkit.tools.hypothesis.paired import (
    student_t_ps,
    sign_ps,
    wilcoxon_ps,
)
from statkit.tools.hypothesis.two_sample import (
    student_t_is,
    welch_t_is,
    z_is,
    trimmed_mean_is,
    mann_whitney,
    fligner_policello,
)
from statkit.tools.hypothesis.anova import (
    sums_of_squares,
    fisher_owa,
    welch_owa,
    brown_forsythe_owa,
    alexander_govern_owa,
    james_owa,
    ozdemir_kurt_owa,
    kruskal_wallis,
)
from statkit.tools.hypothesis.categorical import (
    power_divergence_gof,
    power_divergence_ind,
    pearson_gof,
    g_gof,
    freeman_tukey_gof,
    neyman_gof,
    mod_log_likelihood_gof,
    pearson_ind,
    g_ind,
    freeman_tukey_ind,
    neyman_ind,
    multinomial_gof,
)

__all__ = [
    'student_t_os',
    'sign_os',
    'binomial_os',
    'signed_rank_test',
    'wilcoxon_os',
    'student_t_ps',
    'sign_ps',
    'wilcoxon_ps',
    'student_t_is',
    'welch_t_is',
    'z_is',
    'trimmed_mean_is',
    'mann_whitney',
    'fligner_policello',
    'sums_of_squares',
    'fisher_owa',
    'welch_owa',
    'brown_forsythe_owa',
    'alexander_govern_owa',
    'james_owa',
    'ozdemir_kurt_owa',
    'kruskal_wallis',
    'power_divergence_gof',
    'power_divergence_ind',
    'pearson_gof',
    'g_gof',
    'freeman_tukey_gof',
    'neyman_gof',
    'mod_log_likelihood_gof',
    'pearson_ind',
    'g_ind',
    'freeman_tukey_ind',
    'neyman_ind',
    'multinomial_gof',
]
