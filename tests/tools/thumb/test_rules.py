"""Tests for the rule-of-thumb classifiers."""
import math

import pytest


@pytest.mark.parametrize("d, rule, label", [
    (0.05, "sawilowsky", "negligible"),
    (-0.15, "sawilowsky", "very small"),
    (0.9, "sawilowsky", "large"),
    (2.5, "sawilowsky", "huge"),
    (0.5, "cohen", "medium"),
    (0.79, "cohen", "medium"),
    (1.5, "rosenthal", "very large"),
])
def test_cohen_d(d, rule, label):
    from statkit.tools.thumb import th_cohen_d

    result = th_cohen_d(d, rule)
    assert result["classification"] == label
    assert result["value"] == abs(d)


def test_reference_is_reported():
    from statkit.tools.thumb import th_cohen_d

    assert th_cohen_d(0.3, "cohen")["reference"] == "Cohen (1988, p. 40)"


def test_invalid_rule():
    from statkit.tools.thumb import th_cramer_v

    with pytest.raises(ValueError, match="Invalid rule for cramer_v"):
        th_cramer_v(0.3, "cohen")


def test_cramer_v_and_gamma():
    from statkit.tools.thumb import th_cramer_v, th_gk_gamma, th_somers_d

    assert th_cramer_v(0.3)["classification"] == "moderate"
    assert th_cramer_v(0.3, "akoglu")["classification"] == "very strong"
    assert th_gk_gamma(-0.5)["classification"] == "moderate"
    assert th_somers_d(0.3)["classification"] == "medium"


def test_eta_squared_goes_through_cohen_f():
    from statkit.tools.thumb import th_eta_sq

    result = th_eta_sq(0.06)
    # f = sqrt(0.06 / 0.94) = 0.253
    assert result["classification"] == "medium"
    assert result["value"] == 0.06
    assert th_eta_sq(1.0)["classification"] == "large"


def test_odds_ratio_is_symmetric():
    from statkit.tools.thumb import th_odds_ratio

    assert th_odds_ratio(4.0)["classification"] == th_odds_ratio(0.25)["classification"] == "moderate"
    assert th_odds_ratio(0.25)["value"] == 0.25
    with pytest.raises(ValueError, match="positive"):
        th_odds_ratio(0)


def test_rank_biserial_rules():
    from statkit.tools.thumb import th_rank_biserial

    assert th_rank_biserial(0.2)["classification"] == "small"
    assert th_rank_biserial(0.5, "cohen")["classification"] == "large"
    # rb = 0.3 is d = 0.6 / sqrt(0.91) = 0.629
    converted = th_rank_biserial(0.3, "sawilowsky")
    assert converted["classification"] == "medium"
    assert converted["value"] == 0.3
    assert th_rank_biserial(1.0, "cohen")["classification"] == "large"
    assert th_rank_biserial(-1.0, "sawilowsky")["classification"] == "huge"
    with pytest.raises(ValueError, match="Invalid rule"):
        th_rank_biserial(0.3, "blaikie")


def test_rank_biserial_default_and_cohen_conversion():
    from statkit.tools.thumb import th_rank_biserial

    # default is Cohen's own rank-biserial table: 0.3 < 0.304
    default = th_rank_biserial(0.3)
    assert default["classification"] == "small"
    assert default["reference"] == "Cohen (1988, p. 82)"

    # via d = 0.629 and Cohen's d thresholds
    converted = th_rank_biserial(0.3, "cohen-conv")
    assert converted["classification"] == "medium"
    assert converted["reference"] == "Cohen (1988, p. 40)"
    assert converted["value"] == 0.3
    assert th_rank_biserial(-0.05, "cohen-conv")["classification"] == "negligible"

    with pytest.raises(ValueError) as excinfo:
        th_rank_biserial(0.3, "brydges")
    assert str(excinfo.value).count("'cohen'") == 1
    assert "cohen-conv" in str(excinfo.value)


def test_vda():
    from statkit.tools.thumb import th_vda

    assert th_vda(0.5)["classification"] == "negligible"
    assert th_vda(0.3)["classification"] == "medium"
    assert th_vda(0.95)["classification"] == "large"
    # A = 0.7 is rb = 0.4
    assert th_vda(0.7, "cohen")["classification"] == "medium"
    assert th_vda(0.7, "cohen")["value"] == 0.7


def test_other_measures():
    from statkit.tools.thumb import th_cohen_f, th_cohen_w, th_pearson_r

    assert th_cohen_w(0.35)["classification"] == "medium"
    assert th_cohen_f(0.05)["classification"] == "negligible"
    assert th_pearson_r(-0.45)["classification"] == "medium"
    assert th_pearson_r(0.45, "bartz")["classification"] == "moderate"
    assert math.isclose(th_pearson_r(-0.45)["value"], 0.45)
