"""
Rule-of-thumb classification of effect sizes.

Every classifier takes the effect size and the name of a published rule and
returns {"classification", "reference", "value"}. The threshold tables are in
statkit.constants.RULES_OF_THUMB; a value is given the label of the first
upper bound it stays below.

Measures without a table of their own (rank-biserial with "cohen", eta
squared) are converted first with es_convert.
"""

import math
from typing import Dict

from statkit.constants import RULES_OF_THUMB
from statkit.tools.core.fields import check_option
from statkit.tools.effect_sizes.conversions import es_convert


def classify(measure: str, value: float, rule: str) -> Dict:
    """Look up the label of `value` in the rule table for `measure`."""
    check_option(measure, RULES_OF_THUMB, "measure")
    check_option(rule, RULES_OF_THUMB[measure], f"rule for {measure}")
    table = RULES_OF_THUMB[measure][rule]

    label = table["otherwise"]
    for upper, name in table["bounds"]:
        if value < upper:
            label = name
            break
    return {"classification": label, "reference": table["reference"], "value": value}


def th_cohen_d(d: float, rule: str = "sawilowsky") -> Dict:
    return classify("cohen_d", abs(d), rule)


def th_cramer_v(v: float, rule: str = "rea-parker") -> Dict:
    return classify("cramer_v", abs(v), rule)


def th_gk_gamma(g: float, rule: str = "blaikie") -> Dict:
    return classify("gk_gamma", abs(g), rule)


def th_somers_d(d: float, rule: str = "metsamuuronen") -> Dict:
    return classify("somers_d", abs(d), rule)


def th_cohen_w(w: float, rule: str = "cohen") -> Dict:
    return classify("cohen_w", abs(w), rule)


def th_cohen_f(f: float, rule: str = "cohen") -> Dict:
    return classify("cohen_f", abs(f), rule)


def th_pearson_r(r: float, rule: str = "cohen") -> Dict:
    return classify("pearson_r", abs(r), rule)


def th_eta_sq(eta_sq: float, rule: str = "cohen") -> Dict:
    """Eta squared classified through Cohen f = sqrt(eta² / (1 - eta²))."""
    f = es_convert(eta_sq, "etasq", "cohenf") if eta_sq < 1 else math.inf
    res = th_cohen_f(f, rule)
    res["value"] = eta_sq
    return res


def th_odds_ratio(odds: float, rule: str = "chen") -> Dict:
    """Odds ratio classification; values below 1 are inverted first."""
    if odds <= 0:
        raise ValueError(f"Odds ratio must be positive. Got: {odds}")
    res = classify("odds_ratio", max(odds, 1 / odds), rule)
    res["value"] = odds
    return res


def th_rank_biserial(rb: float, rule: str = "cohen") -> Dict:
    """
    Rank-biserial correlation.

    rule: "cohen" or "vd" use their own tables. "cohen-conv" and the other
    cohen_d rule names (e.g. "sawilowsky") convert rb to Cohen d =
    2 rb / sqrt(1 - rb²) first; "cohen-conv" then applies Cohen's d thresholds.
    """
    conversion_rules = ["cohen-conv"] + [r for r in RULES_OF_THUMB["cohen_d"] if r != "cohen"]
    check_option(rule, list(RULES_OF_THUMB["rank_biserial"]) + conversion_rules, "rule")
    if rule in RULES_OF_THUMB["rank_biserial"]:
        return classify("rank_biserial", abs(rb), rule)

    d = es_convert(rb, "rb", "cohend") if abs(rb) < 1 else math.inf
    res = th_cohen_d(d, "cohen" if rule == "cohen-conv" else rule)
    res["value"] = rb
    return res


def th_vda(a: float, rule: str = "vd") -> Dict:
    """
    Vargha-Delaney A, classified on |A - 0.5| for "vd".

    Other rule names go through the rank-biserial correlation rb = 2A - 1.
    """
    if rule in RULES_OF_THUMB["vda"]:
        res = classify("vda", abs(a - 0.5), rule)
        res["value"] = a
        return res
    res = th_rank_biserial(es_convert(a, "vda", "rb"), rule)
    res["value"] = a
    return res
