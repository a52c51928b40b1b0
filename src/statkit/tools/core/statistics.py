"""
Dataset-level statistical tools.

Each tool loads a CSV resource, validates the requested columns, runs one of
the procedures from statkit.tools.* and adds a rule-of-thumb classification
of the matching effect size, a human-readable interpretation and a one-line
summary.

One sample:      run_one_sample_test     (Student t, sign, Wilcoxon, binomial)
Two groups:      run_two_group_test      (Student, Welch, z, Yuen, Mann-Whitney, Fligner-Policello)
Paired:          run_paired_test         (Student t, sign, Wilcoxon)
k groups:        run_multi_group_test    (Fisher, Welch, James, Brown-Forsythe,
                                          Alexander-Govern, Özdemir-Kurt, Kruskal-Wallis)
Association:     run_rank_correlation    (Spearman, Kendall, gamma, Somers d, Pearson)
Effect sizes:    run_effect_size
Categorical:     run_independence_test, run_goodness_of_fit
Post-hoc:        run_post_hoc
"""

from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from statkit.infrastructure.logging import loggable
from statkit.infrastructure.resources import _load_resource
from statkit.tools.core.fields import check_option
from statkit.tools import correlation, effect_sizes, hypothesis, post_hoc, thumb


def _require_columns(df: pd.DataFrame, *columns: Optional[str]) -> None:
    for column in columns:
        if column is not None and column not in df.columns:
            raise ValueError(f"Column '{column}' not found in dataset. Available: {list(df.columns)}")


def _clean(value):
    """Make test results JSON-friendly (numpy scalars, arrays and DataFrames)."""
    if isinstance(value, dict):
        return {k: _clean(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_clean(v) for v in value]
    if isinstance(value, pd.DataFrame):
        return [_clean(r) for r in value.reset_index().to_dict(orient="records")]
    if isinstance(value, np.ndarray):
        return _clean(value.tolist())
    if isinstance(value, np.generic):
        return value.item()
    return value


def _significance(p_value: float, alpha: float) -> str:
    if p_value <= alpha:
        return f"Significant at α={alpha} (p={p_value:.4f}); the null hypothesis is rejected."
    return f"Not significant at α={alpha} (p={p_value:.4f}); the null hypothesis is not rejected."


def _finish(result: Dict, name: str, alpha: float, effect: Optional[Dict] = None) -> Dict:
    result = _clean(result)
    p_value = result["p_value"]
    result["alpha"] = alpha
    result["is_significant"] = bool(p_value <= alpha)
    interpretation = _significance(p_value, alpha)
    es_text = ""
    if effect is not None:
        result["effect_size"] = _clean(effect)
        interpretation += (
            f" Effect size {effect['measure']} = {effect['value']:.4f} "
            f"({effect['classification']}, {effect['reference']})."
        )
        es_text = f", {effect['measure']}={effect['value']:.4f} ({effect['classification']})"
    result["interpretation"] = interpretation
    stat = result.get("statistic")
    stat_text = f"statistic={stat:.4f}, " if isinstance(stat, (int, float)) else ""
    result["summary"] = f"{name}: {stat_text}p={p_value:.4f}{es_text}, significant={result['is_significant']}"
    return result


def _effect(measure: str, value: float, rule_result: Dict) -> Dict:
    return {
        "measure": measure,
        "value": float(value),
        "classification": rule_result["classification"],
        "reference": rule_result["reference"],
    }


@loggable
def run_one_sample_test(
    input_filename: str,
    project_manifest_path: str,
    column: str,
    test: str = "student-t",
    mu: float | None = None,
    levels: list | None = None,
    p0: float = 0.5,
    codes: list | None = None,
    alpha: float = 0.05,
) -> Dict:
    """
    Run a one-sample test on a dataset column.

    Args:
        input_filename: CSV dataset resource filename
        project_manifest_path: Path to project manifest.json
        column: Column to test
        test: "student-t", "sign", "wilcoxon" or "binomial"
        mu: Hypothesised location (defaults to the midrange) for student-t, sign, wilcoxon
        levels: Ordered labels for an ordinal text column (sign, wilcoxon)
        p0: Hypothesised proportion (binomial)
        codes: The two categories compared by the binomial test
        alpha: Significance level

    Returns:
        Test result with effect_size (Cohen d, rank-biserial or Cohen h'),
        interpretation and summary
    """
    check_option(test, ["student-t", "sign", "wilcoxon", "binomial"], "test")
    df = _load_resource(project_manifest_path, input_filename)
    _require_columns(df, column)
    data = df[column]

    if test == "student-t":
        result = hypothesis.student_t_os(data, mu=mu)
        es = effect_sizes.cohen_d_os(data, mu=result["mu"])
        effect = _effect("cohen_d", es["d"], thumb.th_cohen_d(es["d"]))
    elif test == "sign":
        result = hypothesis.sign_os(data, levels=levels, mu=mu)
        effect = None
    elif test == "wilcoxon":
        result = hypothesis.wilcoxon_os(data, levels=levels, mu=mu)
        es = correlation.rank_biserial_os(data, levels=levels, mu=result["mu"])
        effect = _effect("rank_biserial", es["rb"], thumb.th_rank_biserial(es["rb"]))
    else:
        result = hypothesis.binomial_os(data, codes=codes, p0=p0)
        es = effect_sizes.cohen_h_os(data, codes=codes, p0=p0)
        effect = _effect("cohen_h", es["h"], thumb.th_cohen_d(es["h"], rule="cohen"))

    result.update({"dataset": input_filename, "column": column})
    return _finish(result, f"One-sample {test} test on '{column}'", alpha, effect)


TWO_GROUP_TESTS = ["student", "welch", "z", "yuen", "mann-whitney", "fligner-policello"]


@loggable
def run_two_group_test(
    input_filename: str,
    project_manifest_path: str,
    group_column: str,
    value_column: str,
    test: str = "welch",
    categories: list | None = None,
    levels: list | None = None,
    alpha: float = 0.05,
) -> Dict:
    """
    Compare two independent groups of a dataset.

    Args:
        input_filename: CSV dataset resource filename
        project_manifest_path: Path to project manifest.json
        group_column: Column holding the group labels
        value_column: Column holding the scores
        test: "student", "welch", "z", "yuen", "mann-whitney" or "fligner-policello"
        categories: The two groups to compare (default: first two in the data)
        levels: Ordered labels for an ordinal text value column (rank tests)
        alpha: Significance level

    Returns:
        Test result with Hedges g (mean tests) or Vargha-Delaney A (rank tests)
        classified by a rule of thumb
    """
    check_option(test, TWO_GROUP_TESTS, "test")
    df = _load_resource(project_manifest_path, input_filename)
    _require_columns(df, group_column, value_column)
    groups, values = df[group_column], df[value_column]

    if test in ("mann-whitney", "fligner-policello"):
        if test == "mann-whitney":
            result = hypothesis.mann_whitney(groups, values, categories, levels)
        else:
            result = hypothesis.fligner_policello(groups, values, categories, levels)
        es = effect_sizes.vargha_delaney_a(groups, values, categories, levels)
        effect = _effect("vda", es["a1"], thumb.th_vda(es["a1"]))
    else:
        if test == "student":
            result = hypothesis.student_t_is(groups, values, categories)
        elif test == "welch":
            result = hypothesis.welch_t_is(groups, values, categories)
        elif test == "z":
            result = hypothesis.z_is(groups, values, categories)
        else:
            result = hypothesis.trimmed_mean_is(groups, values, categories)
        es = effect_sizes.hedges_g_is(groups, values, categories, cor="exact")
        effect = _effect("hedges_g", es["g"], thumb.th_cohen_d(es["g"]))

    result.update({"dataset": input_filename, "group_column": group_column, "value_column": value_column})
    return _finish(result, f"Two-group {test} test of '{value_column}' by '{group_column}'", alpha, effect)


@loggable
def run_paired_test(
    input_filename: str,
    project_manifest_path: str,
    column1: str,
    column2: str,
    test: str = "student-t",
    levels: list | None = None,
    alpha: float = 0.05,
) -> Dict:
    """
    Compare two paired columns (e.g. before/after) of a dataset.

    Args:
        test: "student-t", "sign" or "wilcoxon"
        levels: Ordered labels when both columns are ordinal text

    Returns:
        Test result; the Student t-test adds Cohen d (repeated measures)
    """
    check_option(test, ["student-t", "sign", "wilcoxon"], "test")
    df = _load_resource(project_manifest_path, input_filename)
    _require_columns(df, column1, column2)
    x, y = df[column1], df[column2]

    effect = None
    if test == "student-t":
        result = hypothesis.student_t_ps(x, y)
        es = effect_sizes.cohen_d_ps(x, y)
        effect = _effect("cohen_d", es["d"], thumb.th_cohen_d(es["d"]))
    elif test == "sign":
        result = hypothesis.sign_ps(x, y, levels=levels)
    else:
        result = hypothesis.wilcoxon_ps(x, y, levels=levels)

    result.update({"dataset": input_filename, "column1": column1, "column2": column2})
    return _finish(result, f"Paired {test} test of '{column1}' vs '{column2}'", alpha, effect)


MULTI_GROUP_TESTS = ["fisher", "welch", "james", "brown-forsythe", "alexander-govern", "ozdemir-kurt", "kruskal-wallis"]


@loggable
def run_multi_group_test(
    input_filename: str,
    project_manifest_path: str,
    group_column: str,
    value_column: str,
    test: str = "fisher",
    categories: list | None = None,
    levels: list | None = None,
    alpha: float = 0.05,
) -> Dict:
    """
    Compare k independent groups of a dataset.

    Args:
        test: "fisher", "welch", "james", "brown-forsythe", "alexander-govern",
            "ozdemir-kurt" or "kruskal-wallis"
        categories: Groups to include (default: all)
        levels: Ordered labels for an ordinal text value column (Kruskal-Wallis)

    Returns:
        Test result; mean-based tests add eta squared classified via Cohen f
    """
    check_option(test, MULTI_GROUP_TESTS, "test")
    df = _load_resource(project_manifest_path, input_filename)
    _require_columns(df, group_column, value_column)
    groups, values = df[group_column], df[value_column]

    effect = None
    if test == "kruskal-wallis":
        result = hypothesis.kruskal_wallis(groups, values, categories, levels)
    else:
        if test == "fisher":
            table = hypothesis.fisher_owa(groups, values, categories)
            between = table.loc["between"]
            result = {
                "test": "Fisher one-way ANOVA",
                "statistic": float(between["F"]),
                "df1": int(between["df"]),
                "df2": int(table.loc["within", "df"]),
                "p_value": float(between["p_value"]),
                "anova_table": table,
            }
        elif test == "welch":
            result = hypothesis.welch_owa(groups, values, categories)
        elif test == "james":
            result = hypothesis.james_owa(groups, values, categories)
        elif test == "brown-forsythe":
            result = hypothesis.brown_forsythe_owa(groups, values, categories)
        elif test == "alexander-govern":
            result = hypothesis.alexander_govern_owa(groups, values, categories)
        else:
            result = hypothesis.ozdemir_kurt_owa(groups, values, categories)
        es = effect_sizes.eta_squared(groups, values, categories)
        effect = _effect("eta_squared", es["eta_sq"], thumb.th_eta_sq(es["eta_sq"]))

    result.update({"dataset": input_filename, "group_column": group_column, "value_column": value_column})
    return _finish(result, f"{test} test of '{value_column}' across '{group_column}'", alpha, effect)


@loggable
def run_rank_correlation(
    input_filename: str,
    project_manifest_path: str,
    column1: str,
    column2: str,
    method: str = "spearman",
    levels1: list | None = None,
    levels2: list | None = None,
    alpha: float = 0.05,
) -> Dict:
    """
    Measure the association between two ordinal or scale columns.

    Args:
        method: "spearman", "kendall", "gamma", "somers" or "pearson"
        levels1, levels2: Ordered labels for ordinal text columns

    Returns:
        Coefficient, test result and its rule-of-thumb classification
    """
    check_option(method, ["spearman", "kendall", "gamma", "somers", "pearson"], "method")
    df = _load_resource(project_manifest_path, input_filename)
    _require_columns(df, column1, column2)
    x, y = df[column1], df[column2]

    if method == "spearman":
        result = correlation.spearman_rho(x, y, levels1, levels2)
        effect = _effect("spearman_rho", result["rho"], thumb.th_pearson_r(result["rho"]))
    elif method == "kendall":
        result = correlation.kendall_tau(x, y, levels1, levels2)
        tau = result.get("tau_b", result.get("tau_a"))
        effect = _effect("kendall_tau", tau, thumb.th_pearson_r(tau))
    elif method == "gamma":
        result = correlation.goodman_kruskal_gamma(x, y, levels1, levels2)
        effect = _effect("gk_gamma", result["gamma"], thumb.th_gk_gamma(result["gamma"]))
    elif method == "somers":
        result = correlation.somers_d(x, y, levels1, levels2)
        effect = _effect("somers_d", result["d"], thumb.th_somers_d(result["d"]))
    else:
        result = correlation.pearson_r(x, y)
        effect = _effect("pearson_r", result["r"], thumb.th_pearson_r(result["r"]))

    result.update({"dataset": input_filename, "column1": column1, "column2": column2})
    return _finish(result, f"{method} association of '{column1}' and '{column2}'", alpha, effect)


EFFECT_SIZE_MEASURES = [
    "cohen_d_os", "hedges_g_os", "cohen_d_is", "hedges_g_is", "cohen_d_ps", "hedges_g_ps",
    "cohen_f", "eta_squared", "omega_squared", "epsilon_squared",
    "vda", "rank_biserial_is", "common_language_is", "cramers_v_ind", "odds_ratio",
]


@loggable
def run_effect_size(
    input_filename: str,
    project_manifest_path: str,
    measure: str,
    column: str,
    second_column: str | None = None,
    categories: list | None = None,
    levels: list | None = None,
    mu: float | None = None,
) -> Dict:
    """
    Compute one effect size from a dataset.

    Args:
        measure: One of EFFECT_SIZE_MEASURES
        column: The data column (one-sample measures) or the first of two
            columns; for group comparisons the column with the group labels
        second_column: Second column (paired measures, cross tables) or the
            score column for group comparisons
        categories: Groups/categories to use
        levels: Ordered labels of an ordinal text column
        mu: Hypothesised mean for one-sample measures

    Returns:
        The effect size result with a rule-of-thumb classification where one exists
    """
    check_option(measure, EFFECT_SIZE_MEASURES, "measure")
    df = _load_resource(project_manifest_path, input_filename)
    _require_columns(df, column, second_column)
    one_column = measure in ("cohen_d_os", "hedges_g_os")
    if not one_column and second_column is None:
        raise ValueError(f"Measure '{measure}' needs second_column")
    a = df[column]
    b = df[second_column] if second_column is not None else None

    if measure == "cohen_d_os":
        result = effect_sizes.cohen_d_os(a, mu)
        rule = thumb.th_cohen_d(result["d"])
    elif measure == "hedges_g_os":
        result = effect_sizes.hedges_g_os(a, mu)
        rule = thumb.th_cohen_d(result["g"])
    elif measure == "cohen_d_is":
        result = effect_sizes.cohen_d_is(a, b, categories)
        rule = thumb.th_cohen_d(result["d"])
    elif measure == "hedges_g_is":
        result = effect_sizes.hedges_g_is(a, b, categories, cor="exact")
        rule = thumb.th_cohen_d(result["g"])
    elif measure == "cohen_d_ps":
        result = effect_sizes.cohen_d_ps(a, b)
        rule = thumb.th_cohen_d(result["d"])
    elif measure == "hedges_g_ps":
        result = effect_sizes.hedges_g_ps(a, b)
        rule = thumb.th_cohen_d(result["g"])
    elif measure == "cohen_f":
        result = effect_sizes.cohen_f(a, b, categories)
        rule = thumb.th_cohen_f(result["f"])
    elif measure == "eta_squared":
        result = effect_sizes.eta_squared(a, b, categories)
        rule = thumb.th_eta_sq(result["eta_sq"])
    elif measure == "omega_squared":
        result = effect_sizes.omega_squared(a, b, categories)
        rule = None
    elif measure == "epsilon_squared":
        result = effect_sizes.epsilon_squared(a, b, categories)
        rule = None
    elif measure == "vda":
        result = effect_sizes.vargha_delaney_a(a, b, categories, levels)
        rule = thumb.th_vda(result["a1"])
    elif measure == "rank_biserial_is":
        result = correlation.rank_biserial_is(a, b, categories, levels)
        rule = thumb.th_rank_biserial(result["rb"])
    elif measure == "common_language_is":
        result = effect_sizes.common_language_is(a, b, categories, levels)
        rule = thumb.th_vda(result["cle1"])
    elif measure == "cramers_v_ind":
        result = effect_sizes.cramers_v_ind(a, b)
        rule = thumb.th_cramer_v(result["v"])
    else:
        result = effect_sizes.odds_ratio(a, b)
        rule = thumb.th_odds_ratio(result["or"])

    result = _clean(result)
    result.update({"dataset": input_filename, "measure": measure})
    if rule is not None:
        result["classification"] = rule["classification"]
        result["reference"] = rule["reference"]
        result["summary"] = f"{measure}: {rule['value']:.4f} ({rule['classification']}, {rule['reference']})"
    else:
        result["summary"] = f"{measure}: no rule of thumb available"
    return result


@loggable
def run_independence_test(
    input_filename: str,
    project_manifest_path: str,
    column1: str,
    column2: str,
    test: str = "pearson",
    cc: str | None = None,
    alpha: float = 0.05,
) -> Dict:
    """
    Test the association of two nominal columns with a power-divergence test.

    Args:
        test: "pearson", "g", "freeman-tukey", "neyman", "mod-log" or "cressie-read"
        cc: None, "yates", "pearson" or "williams"

    Returns:
        Test result with Cramér V and its rule-of-thumb classification
    """
    df = _load_resource(project_manifest_path, input_filename)
    _require_columns(df, column1, column2)
    x, y = df[column1], df[column2]

    result = hypothesis.power_divergence_ind(x, y, lambd=test, cc=cc)
    v = effect_sizes.cramers_v_from_chi2_ind(result["statistic"], result["n"], result["n_rows"], result["n_cols"])
    effect = _effect("cramer_v", v, thumb.th_cramer_v(v))

    result.update({"dataset": input_filename, "column1": column1, "column2": column2})
    return _finish(result, f"{result['test']} of '{column1}' and '{column2}'", alpha, effect)


@loggable
def run_goodness_of_fit(
    input_filename: str,
    project_manifest_path: str,
    column: str,
    test: str = "pearson",
    expected: dict | None = None,
    cc: str | None = None,
    alpha: float = 0.05,
) -> Dict:
    """
    Test whether the category frequencies of a column match expected counts.

    Args:
        test: A power-divergence member ("pearson", "g", "cressie-read", ...) or "multinomial"
        expected: Mapping category -> expected count or proportion (default: all equal)
        cc: Correction for the power-divergence tests

    Returns:
        Test result; power-divergence tests add Cohen w with its classification
    """
    df = _load_resource(project_manifest_path, input_filename)
    _require_columns(df, column)
    data = df[column]

    effect = None
    if test == "multinomial":
        result = hypothesis.multinomial_gof(data, expected)
    else:
        result = hypothesis.power_divergence_gof(data, expected, lambd=test, cc=cc)
        w = effect_sizes.cohen_w(result["statistic"], result["n"])
        effect = _effect("cohen_w", w, thumb.th_cohen_w(w))

    result.update({"dataset": input_filename, "column": column})
    return _finish(result, f"{result['test']} on '{column}'", alpha, effect)


POST_HOC_PROCEDURES = ["dunn", "nemenyi", "conover-iman", "pairwise-is", "winer", "residuals", "pairwise-gof"]


@loggable
def run_post_hoc(
    input_filename: str,
    project_manifest_path: str,
    procedure: str,
    column: str,
    second_column: str | None = None,
    categories: list | None = None,
    levels: list | None = None,
    test: str | None = None,
    p_adjust_method: str | None = None,
    alpha: float = 0.05,
) -> Dict:
    """
    Run a post-hoc procedure after a significant omnibus test.

    Args:
        procedure: "dunn", "nemenyi", "conover-iman" (rank-based, column = groups,
            second_column = ordinal scores), "pairwise-is", "winer" (column = groups,
            second_column = scores), "residuals" (two nominal columns) or
            "pairwise-gof" (one nominal column)
        test: Test for "pairwise-is" ("student", "welch", "z", "yuen", "trimmed")
            or "pairwise-gof" (power-divergence member or "multinomial")
        p_adjust_method: Re-adjust the raw p-values with p_adjust (e.g. "holm")

    Returns:
        {"procedure", "comparisons": list of records, "n_significant", "summary"}
    """
    check_option(procedure, POST_HOC_PROCEDURES, "procedure")
    df = _load_resource(project_manifest_path, input_filename)
    _require_columns(df, column, second_column)
    if procedure != "pairwise-gof" and second_column is None:
        raise ValueError(f"Procedure '{procedure}' needs second_column")
    a = df[column]
    b = df[second_column] if second_column is not None else None

    if procedure == "dunn":
        table = post_hoc.dunn(a, b, categories, levels)
    elif procedure == "nemenyi":
        table = post_hoc.nemenyi(a, b, categories, levels)
    elif procedure == "conover-iman":
        table = post_hoc.conover_iman(a, b, categories, levels)
    elif procedure == "pairwise-is":
        table = post_hoc.pairwise_is(a, b, categories, test=test or "student")
    elif procedure == "winer":
        table = post_hoc.pairwise_t_winer(a, b, categories)
    elif procedure == "residuals":
        table = post_hoc.residual_analysis(a, b)
    else:
        table = post_hoc.pairwise_gof(a, test=test or "pearson")

    if p_adjust_method is not None:
        table["adj_p_value"] = post_hoc.p_adjust(table["p_value"].to_numpy(), method=p_adjust_method)
    p_column = "adj_p_value" if "adj_p_value" in table.columns else "p_value"
    n_significant = int((table[p_column] <= alpha).sum())

    return {
        "procedure": procedure,
        "dataset": input_filename,
        "comparisons": _clean(table.to_dict(orient="records")),
        "p_value_column": p_column,
        "n_comparisons": len(table),
        "n_significant": n_significant,
        "summary": f"{procedure}: {n_significant} of {len(table)} comparisons significant at α={alpha} ({p_column})",
    }


def get_all_statistical_test_tools() -> List:
    """Return all dataset-level statistical tools for server registration."""
    return [
        run_one_sample_test,
        run_two_group_test,
        run_paired_test,
        run_multi_group_test,
        run_rank_correlation,
        run_effect_size,
        run_independence_test,
        run_goodness_of_fit,
        run_post_hoc,
    ]
