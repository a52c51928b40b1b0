"""
Constants for the statkit package.

POWER_DIVERGENCE_LAMBDAS: Named members of the Cressie-Read power-divergence family.
ES_CONVERSIONS: Effect-size conversions supported by es_convert, with their formula.
RULES_OF_THUMB: Published qualification tables for effect sizes. Each rule lists
    (upper bound, label) pairs that are checked in order against the absolute
    effect size; values at or above the last bound get the "otherwise" label.
"""

from __future__ import annotations
from typing import Dict, Mapping


POWER_DIVERGENCE_LAMBDAS: Dict[str, Mapping] = {
    "cressie-read": {"lambda": 2 / 3, "name": "Cressie-Read"},
    "g": {"lambda": 0.0, "name": "likelihood-ratio (G)"},
    "likelihood-ratio": {"lambda": 0.0, "name": "likelihood-ratio (G)"},
    "mod-log": {"lambda": -1.0, "name": "mod-log likelihood ratio"},
    "pearson": {"lambda": 1.0, "name": "Pearson chi-square"},
    "freeman-tukey": {"lambda": -0.5, "name": "Freeman-Tukey"},
    "neyman": {"lambda": -2.0, "name": "Neyman"},
}


ES_CONVERSIONS: Dict[tuple, str] = {
    ("cohendos", "cohend"): "d * sqrt(2)",
    ("cohend", "or"): "exp(1.81 d) (chinn) or exp(d pi / sqrt(3)) (borenstein)",
    ("cohend", "rb"): "d / sqrt(d^2 + 4)",
    ("cohenf", "etasq"): "f^2 / (1 + f^2)",
    ("cohenhos", "cohenh"): "h' * sqrt(2)",
    ("cohenw", "cc"): "sqrt(w^2 / (1 + w^2))",
    ("cc", "cohenw"): "sqrt(cc^2 / (1 - cc^2))",
    ("cramervgof", "cohenw"): "v * sqrt(k - 1), ex1 = k",
    ("epsilonsq", "etasq"): "1 - (1 - e) (n - k) / (n - 1), ex1 = n, ex2 = k",
    ("epsilonsq", "omegasq"): "e (1 - msw / (sst + msw)), ex1 = msw, ex2 = sst",
    ("etasq", "cohenf"): "sqrt(eta / (1 - eta))",
    ("etasq", "epsilonsq"): "(n eta - k + (1 - eta)) / (n - k), ex1 = n, ex2 = k",
    ("jbme", "cohenw"): "sqrt(e (1 - q) / q), ex1 = q",
    ("or", "cohend"): "ln(or) / 1.81 (chinn) or ln(or) sqrt(3) / pi (borenstein)",
    ("or", "yuleq"): "(or - 1) / (or + 1)",
    ("or", "yuley"): "(sqrt(or) - 1) / (sqrt(or) + 1)",
    ("omegasq", "epsilonsq"): "w / (1 - msw / (sst + msw)), ex1 = msw, ex2 = sst",
    ("rb", "cohend"): "2 rb / sqrt(1 - rb^2)",
    ("rb", "vda"): "(rb + 1) / 2",
    ("vda", "rb"): "2 a - 1",
    ("yuleq", "or"): "(1 + q) / (1 - q)",
    ("yuleq", "yuley"): "(1 - sqrt(1 - q^2)) / q",
    ("yuley", "or"): "((1 + y) / (1 - y))^2",
    ("yuley", "yuleq"): "2 y / (1 + y^2)",
}


RULES_OF_THUMB: Dict[str, Dict[str, Mapping]] = {
    "cohen_d": {
        "cohen": {
            "reference": "Cohen (1988, p. 40)",
            "bounds": [(0.2, "negligible"), (0.5, "small"), (0.8, "medium")],
            "otherwise": "large",
        },
        "lovakov": {
            "reference": "Lovakov and Agadullina (2021, p. 501)",
            "bounds": [(0.15, "negligible"), (0.35, "small"), (0.65, "medium")],
            "otherwise": "large",
        },
        "rosenthal": {
            "reference": "Rosenthal (1996, p. 45)",
            "bounds": [(0.2, "negligible"), (0.5, "small"), (0.8, "medium"), (1.3, "large")],
            "otherwise": "very large",
        },
        "sawilowsky": {
            "reference": "Sawilowsky (2009, p. 599)",
            "bounds": [(0.1, "negligible"), (0.2, "very small"), (0.5, "small"), (0.8, "medium"),
                       (1.2, "large"), (2.0, "very large")],
            "otherwise": "huge",
        },
    },
    "cramer_v": {
        "rea-parker": {
            "reference": "Rea and Parker (1992, p. 203)",
            "bounds": [(0.1, "negligible"), (0.2, "weak"), (0.4, "moderate"), (0.6, "relatively strong"),
                       (0.8, "strong")],
            "otherwise": "very strong",
        },
        "akoglu": {
            "reference": "Akoglu (2018, p. 92)",
            "bounds": [(0.05, "very weak"), (0.1, "weak"), (0.15, "moderate"), (0.25, "strong")],
            "otherwise": "very strong",
        },
        "calamba-rustico": {
            "reference": "Calamba and Rustico (2019, p. 7)",
            "bounds": [(0.15, "very weak"), (0.2, "weak"), (0.25, "moderate"), (0.3, "moderately strong"),
                       (0.35, "strong"), (0.5, "worrisomely strong")],
            "otherwise": "redundant",
        },
    },
    "gk_gamma": {
        "blaikie": {
            "reference": "Blaikie (2003, p. 100)",
            "bounds": [(0.1, "negligible"), (0.3, "weak"), (0.6, "moderate"), (0.75, "strong")],
            "otherwise": "very strong",
        },
        "rea-parker": {
            "reference": "Rea and Parker (2014, p. 229)",
            "bounds": [(0.1, "negligible"), (0.3, "low"), (0.6, "moderate"), (0.75, "strong")],
            "otherwise": "very strong",
        },
        "metsamuuronen": {
            "reference": "Metsämuuronen (2023, p. 17)",
            "bounds": [(0.14, "negligible"), (0.31, "small"), (0.45, "medium"), (0.62, "large"),
                       (0.84, "very large")],
            "otherwise": "huge",
        },
    },
    "somers_d": {
        "metsamuuronen": {
            "reference": "Metsämuuronen (2023, p. 17)",
            "bounds": [(0.13, "negligible"), (0.29, "small"), (0.43, "medium"), (0.59, "large"),
                       (0.81, "very large")],
            "otherwise": "huge",
        },
    },
    "rank_biserial": {
        "cohen": {
            "reference": "Cohen (1988, p. 82)",
            "bounds": [(0.125, "negligible"), (0.304, "small"), (0.465, "medium")],
            "otherwise": "large",
        },
        "vd": {
            "reference": "Vargha and Delaney (2000, p. 106)",
            "bounds": [(0.11, "negligible"), (0.28, "small"), (0.43, "medium")],
            "otherwise": "large",
        },
    },
    # classified on |A - 0.5|
    "vda": {
        "vd": {
            "reference": "Vargha and Delaney (2000, p. 106)",
            "bounds": [(0.06, "negligible"), (0.14, "small"), (0.21, "medium")],
            "otherwise": "large",
        },
    },
    "cohen_w": {
        "cohen": {
            "reference": "Cohen (1988, p. 227)",
            "bounds": [(0.1, "negligible"), (0.3, "small"), (0.5, "medium")],
            "otherwise": "large",
        },
    },
    "cohen_f": {
        "cohen": {
            "reference": "Cohen (1988, pp. 285-287)",
            "bounds": [(0.1, "negligible"), (0.25, "small"), (0.4, "medium")],
            "otherwise": "large",
        },
    },
    # classified on max(or, 1/or)
    "odds_ratio": {
        "chen": {
            "reference": "Chen et al. (2010, p. 862)",
            "bounds": [(1.68, "negligible"), (3.47, "weak"), (6.71, "moderate")],
            "otherwise": "strong",
        },
        "hopkins": {
            "reference": "Hopkins (2006, tbl. 1)",
            "bounds": [(1.5, "trivial"), (3.5, "small"), (9, "moderate"), (32, "large"), (360, "very large")],
            "otherwise": "nearly perfect",
        },
        "jones1": {
            "reference": "Jones (2014)",
            "bounds": [(1.5, "negligible"), (2.5, "small"), (4.3, "medium")],
            "otherwise": "large",
        },
        "jones2": {
            "reference": "Jones (2014)",
            "bounds": [(1.5, "negligible"), (3.5, "small"), (9, "medium")],
            "otherwise": "large",
        },
        "wuensch": {
            "reference": "Wuensch (2009, p. 2)",
            "bounds": [(1.49, "negligible"), (3.45, "small"), (9, "medium")],
            "otherwise": "large",
        },
    },
    "pearson_r": {
        "agnes": {
            "reference": "Agnes (2011)",
            "bounds": [(0.2, "negligible"), (0.4, "low"), (0.6, "moderate"), (0.8, "marked")],
            "otherwise": "high",
        },
        "bartz": {
            "reference": "Bartz (1988, p. 199)",
            "bounds": [(0.2, "very low"), (0.4, "low"), (0.6, "moderate"), (0.8, "strong")],
            "otherwise": "very high",
        },
        "brydges": {
            "reference": "Brydges (2019, p. 5); Gignac and Szodorai (2016, p. 75); Hemphill (2003, p. 78)",
            "bounds": [(0.1, "negligible"), (0.2, "small"), (0.3, "medium")],
            "otherwise": "large",
        },
        "cohen": {
            "reference": "Cohen (1988, p. 82)",
            "bounds": [(0.1, "negligible"), (0.3, "small"), (0.5, "medium")],
            "otherwise": "large",
        },
        "disha": {
            "reference": "Disha (2016)",
            "bounds": [(0.1, "markedly low and negligible"), (0.3, "very low"), (0.5, "low"), (0.7, "moderate"),
                       (0.9, "high")],
            "otherwise": "very high",
        },
        "funder": {
            "reference": "Funder and Ozer (2019, p. 166)",
            "bounds": [(0.05, "negligible"), (0.1, "very small"), (0.2, "small"), (0.3, "medium"),
                       (0.4, "large")],
            "otherwise": "very large",
        },
        "hopkins": {
            "reference": "Hopkins (2006, tbl. 1)",
            "bounds": [(0.1, "trivial"), (0.3, "low"), (0.5, "moderate"), (0.7, "high"), (0.9, "very large")],
            "otherwise": "nearly perfect",
        },
        "lovakov": {
            "reference": "Lovakov and Agadullina (2021, p. 514)",
            "bounds": [(0.12, "negligible"), (0.24, "small"), (0.41, "medium")],
            "otherwise": "large",
        },
        "rafter": {
            "reference": "Rafter et al. (2003, p. 194)",
            "bounds": [(0.25, "weak"), (0.75, "moderate")],
            "otherwise": "strong",
        },
        "rea-parker": {
            "reference": "Rea and Parker (2014, pp. 229, 271)",
            "bounds": [(0.1, "negligible"), (0.3, "low"), (0.6, "moderate"), (0.75, "strong")],
            "otherwise": "very strong",
        },
        "rosenthal": {
            "reference": "Rosenthal (1996, p. 45)",
            "bounds": [(0.1, "negligible"), (0.3, "small"), (0.5, "medium"), (0.7, "large")],
            "otherwise": "very large",
        },
        "rumsey": {
            "reference": "Rumsey (2011, p. 284)",
            "bounds": [(0.3, "negligible"), (0.5, "weak"), (0.7, "moderate")],
            "otherwise": "strong",
        },
    },
}
