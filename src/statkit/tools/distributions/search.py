from typing import Callable


def bisect_pvalue(
    critical_value: Callable[[float], float],
    statistic: float,
    start: float = 0.05,
    max_iter: int = 500,
) -> float:
    """
    Find the p-value at which a critical-value function equals the observed statistic.

    `critical_value(p)` must decrease as p increases (as any upper-tail quantile
    does). The interval (0, 1) is halved towards the side holding the statistic
    until the critical value matches exactly or `max_iter` steps have been taken.

    Args:
        critical_value: Maps a significance level p to the critical statistic
        statistic: Observed test statistic
        start: First p to evaluate
        max_iter: Maximum number of bisection steps

    Returns:
        The p-value after the last step.
    """
    p_low, p_high = 0.0, 1.0
    p_value = start
    for _ in range(max_iter):
        crit = critical_value(p_value)
        if crit == statistic:
            break
        if crit < statistic:
            # critical value too small: p must shrink
            p_high = p_value
            p_value = (p_low + p_value) / 2
        else:
            p_low = p_value
            p_value = (p_high + p_value) / 2
    return p_value
