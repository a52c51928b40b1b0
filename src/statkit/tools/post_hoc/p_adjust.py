from typing import Sequence

import numpy as np

from statkit.tools.core.fields import check_option


P_ADJUST_METHODS = ["none", "bonferroni", "sidak", "holm", "holm-sidak", "hochberg", "bh", "by", "hommel"]


def _hommel(p_sorted: np.ndarray) -> np.ndarray:
    """Hommel adjustment of ascending p-values."""
    k = len(p_sorted)
    adjusted = p_sorted.copy()
    ci = np.zeros(k)
    for m in range(k, 1, -1):
        # tail of m hypotheses
        tail = np.arange(k - m, k)
        ci[tail] = m * p_sorted[tail] / (m + tail + 1 - k)
        c_min = min(1.0, ci[tail].min())
        adjusted[tail] = np.maximum(adjusted[tail], c_min)
        if k - m > 0:
            head = np.arange(0, k - m)
            ci[head] = np.minimum(c_min, m * p_sorted[head])
            adjusted[head] = np.maximum(adjusted[head], ci[head])
    return adjusted


def p_adjust(p_values: Sequence[float], method: str = "bonferroni") -> np.ndarray:
    """
    Adjust p-values for multiple comparisons.

    method:
        "none", "bonferroni", "sidak"  - single-step
        "holm", "holm-sidak"           - step-down
        "hochberg", "bh", "by"         - step-up (bh/by control the false discovery rate)
        "hommel"                       - Hommel (1988) closed testing

    Returns:
        Adjusted p-values in the original order, capped at 1
    """
    check_option(method, P_ADJUST_METHODS, "method")
    p = np.asarray(p_values, dtype=float)
    k = len(p)
    if k == 0:
        return p
    if method == "none":
        return p.copy()
    if method == "bonferroni":
        return np.minimum(1.0, p * k)
    if method == "sidak":
        return np.minimum(1.0, 1 - (1 - p) ** k)

    order = np.argsort(p, kind="stable")
    p_sorted = p[order]
    i = np.arange(1, k + 1)

    if method == "holm":
        adjusted = np.maximum.accumulate(np.minimum(1.0, p_sorted * (k + 1 - i)))
    elif method == "holm-sidak":
        adjusted = np.maximum.accumulate(np.minimum(1.0, 1 - (1 - p_sorted) ** (k + 1 - i)))
    elif method == "hochberg":
        adjusted = np.minimum.accumulate(np.minimum(1.0, (k + 1 - i) * p_sorted)[::-1])[::-1]
    elif method in ("bh", "by"):
        factor = np.sum(1 / i) if method == "by" else 1.0
        adjusted = np.minimum.accumulate(np.minimum(1.0, p_sorted * k * factor / i)[::-1])[::-1]
    else:
        adjusted = _hommel(p_sorted)

    result = np.empty(k)
    result[order] = np.minimum(adjusted, 1.0)
    return result
