"""Tests for multiple-comparison p-value adjustment."""
import numpy as np
import pytest


P_VALUES = [0.01, 0.04, 0.03, 0.005, 0.20, 0.012, 0.65]


@pytest.mark.parametrize("method, sm_method", [
    ("bonferroni", "bonferroni"),
    ("sidak", "sidak"),
    ("holm", "holm"),
    ("holm-sidak", "holm-sidak"),
    ("hochberg", "simes-hochberg"),
    ("bh", "fdr_bh"),
    ("by", "fdr_by"),
    ("hommel", "hommel"),
])
def test_p_adjust_matches_statsmodels(method, sm_method):
    from statsmodels.stats.multitest import multipletests
    from statkit.tools.post_hoc import p_adjust

    adjusted = p_adjust(P_VALUES, method=method)
    expected = multipletests(P_VALUES, method=sm_method)[1]
    np.testing.assert_allclose(adjusted, expected)


def test_p_adjust_none_and_bounds():
    from statkit.tools.post_hoc import p_adjust

    assert list(p_adjust(P_VALUES, "none")) == P_VALUES
    for method in ("bonferroni", "holm", "hommel", "by"):
        adjusted = p_adjust(P_VALUES, method)
        assert (adjusted >= np.array(P_VALUES) - 1e-12).all()
        assert (adjusted <= 1).all()


def test_p_adjust_empty_and_invalid():
    from statkit.tools.post_hoc import p_adjust

    assert len(p_adjust([], "holm")) == 0
    with pytest.raises(ValueError, match="Invalid method"):
        p_adjust(P_VALUES, "tukey")
