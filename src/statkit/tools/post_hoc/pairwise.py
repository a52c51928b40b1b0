"""
Pairwise and cell-wise post-hoc procedures.

- pairwise_is: an independent-samples test on every pair of categories
- pairwise_t_winer: pairwise t-tests with the pooled within-group mean square
- residual_analysis: (adjusted) standardized residuals of a cross table
- pairwise_gof: goodness-of-fit on every pair of categories of one field

Adjusted p-values use the Bonferroni factor: the number of pairs, or the
number of cells for residual_analysis.
"""

import math
from itertools import combinations
from typing import Mapping, Optional, Sequence

import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.stats.contingency_tables import Table

from statkit.constants import POWER_DIVERGENCE_LAMBDAS
from statkit.tools.core.fields import check_option, cross_counts, k_groups, to_series
from statkit.tools.hypothesis.anova import sums_of_squares
from statkit.tools.hypothesis.categorical import multinomial_gof, power_divergence_gof
from statkit.tools.hypothesis.two_sample import student_t_is, trimmed_mean_is, welch_t_is, z_is


PAIRWISE_IS_TESTS = ["student", "welch", "z", "yuen", "trimmed"]


def pairwise_is(
    cat_field,
    scale_field,
    categories: Optional[Sequence] = None,
    test: str = "student",
    trim_prop: float = 0.1,
) -> pd.DataFrame:
    """
    Run a two-sample test on each pair of categories.

    test:
        "student" - Student t (pooled variance)
        "welch"   - Welch t
        "z"       - z-test with sample variances
        "yuen"    - Yuen-Welch trimmed means test
        "trimmed" - trimmed means test with the pooled winsorized variance
    """
    check_option(test, PAIRWISE_IS_TESTS, "test")
    labels = list(k_groups(cat_field, scale_field, categories))
    n_comp = len(labels) * (len(labels) - 1) / 2

    rows = []
    for c1, c2 in combinations(labels, 2):
        pair = [c1, c2]
        if test == "student":
            res = student_t_is(cat_field, scale_field, pair)
        elif test == "welch":
            res = welch_t_is(cat_field, scale_field, pair)
        elif test == "z":
            res = z_is(cat_field, scale_field, pair)
        else:
            res = trimmed_mean_is(cat_field, scale_field, pair, trim_prop=trim_prop,
                                  se="yuen" if test == "yuen" else "wilcox")
        mean1 = res.get("mean1", res.get("trimmed_mean1"))
        mean2 = res.get("mean2", res.get("trimmed_mean2"))
        rows.append({
            "category_1": c1,
            "category_2": c2,
            "n1": res["n1"],
            "n2": res["n2"],
            "mean_1": mean1,
            "mean_2": mean2,
            "sample_diff": mean1 - mean2,
            "statistic": res["statistic"],
            "df": res["df"],
            "p_value": res["p_value"],
            "adj_p_value": min(res["p_value"] * n_comp, 1.0),
            "test": res["test"],
        })
    return pd.DataFrame(rows)


def pairwise_t_winer(cat_field, scale_field, categories: Optional[Sequence] = None) -> pd.DataFrame:
    """Pairwise t-tests using MSw of all k groups as the common variance, df = n - k."""
    groups = k_groups(cat_field, scale_field, categories)
    ss = sums_of_squares(groups)
    msw, dfw = ss["MSw"], ss["dfw"]
    n_comp = ss["k"] * (ss["k"] - 1) / 2

    rows = []
    for c1, c2 in combinations(list(groups), 2):
        x1, x2 = groups[c1], groups[c2]
        diff = x1.mean() - x2.mean()
        t = diff / math.sqrt(msw * (1 / len(x1) + 1 / len(x2)))
        p = float(2 * stats.t.sf(abs(t), dfw))
        rows.append({
            "category_1": c1,
            "category_2": c2,
            "n1": len(x1),
            "n2": len(x2),
            "mean_1": float(x1.mean()),
            "mean_2": float(x2.mean()),
            "sample_diff": float(diff),
            "statistic": float(t),
            "df": dfw,
            "p_value": p,
            "adj_p_value": min(p * n_comp, 1.0),
            "test": "Winer pairwise t",
        })
    return pd.DataFrame(rows)


def residual_analysis(
    field1,
    field2,
    categories1: Optional[Sequence] = None,
    categories2: Optional[Sequence] = None,
    version: str = "adjusted",
) -> pd.DataFrame:
    """
    Cell residuals of a cross table with a z-test per cell.

    version:
        "standardized" - (O - E) / sqrt(E)
        "adjusted"     - (O - E) / sqrt(E (1 - row prop) (1 - col prop))
    """
    check_option(version, ["standardized", "adjusted"], "version")
    ct = cross_counts(field1, field2, categories1, categories2)
    table = Table(ct.to_numpy(dtype=float), shift_zeros=False)
    expected = table.fittedvalues
    z = table.resid_pearson if version == "standardized" else table.standardized_resids
    n_cells = ct.size

    rows = []
    for i, row_label in enumerate(ct.index):
        for j, col_label in enumerate(ct.columns):
            p = float(2 * stats.norm.sf(abs(z[i, j])))
            rows.append({
                "field1": row_label,
                "field2": col_label,
                "observed": int(ct.iat[i, j]),
                "expected": float(expected[i, j]),
                "residual": float(ct.iat[i, j] - expected[i, j]),
                "z": float(z[i, j]),
                "p_value": p,
                "adj_p_value": min(p * n_cells, 1.0),
            })
    return pd.DataFrame(rows)


def pairwise_gof(
    data,
    expected: Optional[Mapping] = None,
    test: str = "pearson",
    cc: Optional[str] = None,
) -> pd.DataFrame:
    """
    Goodness-of-fit test on every pair of categories.

    For each pair only the observations in those two categories are kept and
    the expected counts are the pair total split in proportion to the overall
    expected proportions.

    Args:
        expected: Optional mapping category -> expected count or proportion
        test: A power-divergence member (see POWER_DIVERGENCE_LAMBDAS) or "multinomial"
        cc: Correction passed to the power-divergence test
    """
    check_option(test, list(POWER_DIVERGENCE_LAMBDAS) + ["multinomial"], "test")
    values = to_series(data).dropna()
    if expected is None:
        categories = sorted(pd.unique(values))
        exp_props = pd.Series(1.0, index=categories)
    else:
        exp_props = pd.Series(expected, dtype=float)
    exp_props = exp_props / exp_props.sum()
    n_comp = len(exp_props) * (len(exp_props) - 1) / 2

    rows = []
    for c1, c2 in combinations(list(exp_props.index), 2):
        pair_data = values[values.isin([c1, c2])]
        n1 = int((pair_data == c1).sum())
        n2 = int((pair_data == c2).sum())
        pair_expected = {c1: exp_props[c1], c2: exp_props[c2]}
        row = {
            "category_1": c1,
            "category_2": c2,
            "n1": n1,
            "n2": n2,
            "obs_prop_1": n1 / (n1 + n2) if n1 + n2 > 0 else np.nan,
            "exp_prop_1": exp_props[c1] / (exp_props[c1] + exp_props[c2]),
        }
        if test == "multinomial":
            res = multinomial_gof(pair_data, pair_expected)
            row.update({"p_obs": res["p_obs"], "n_combinations": res["n_combinations"]})
        else:
            res = power_divergence_gof(pair_data, pair_expected, lambd=test, cc=cc)
            row.update({
                "statistic": res["statistic"],
                "df": res["df"],
                "min_exp": res["min_exp"],
                "prop_below_5": res["prop_below_5"],
            })
        row.update({
            "p_value": res["p_value"],
            "adj_p_value": min(res["p_value"] * n_comp, 1.0),
            "test": res["test"],
        })
        rows.append(row)
    return pd.DataFrame(rows)
