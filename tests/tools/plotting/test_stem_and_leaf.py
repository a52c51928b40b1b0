"""Tests for the stem-and-leaf display."""
import pandas as pd
import pytest


def test_stem_and_leaf_default_key():
    from statkit.tools.plotting.stem_and_leaf import stem_and_leaf

    display = stem_and_leaf([27, 12, 31, 15, 23])
    assert display["key"] == 10
    assert display["table"]["stem"].tolist() == [1, 2, 3]
    assert display["table"]["leaf"].tolist() == ["2 5", "3 7", "1"]
    assert display["text"].splitlines()[0] == "Stem | Leaf"
    assert display["text"].splitlines()[-1] == "key: 1 | 2 = 12"


def test_stem_and_leaf_keeps_empty_stems():
    from statkit.tools.plotting.stem_and_leaf import stem_and_leaf

    display = stem_and_leaf([105, 112, 131, 138], key=10)
    assert display["table"]["stem"].tolist() == [10, 11, 12, 13]
    assert display["table"].loc[2, "leaf"] == ""


def test_stem_and_leaf_two_digit_leaves():
    from statkit.tools.plotting.stem_and_leaf import stem_and_leaf

    display = stem_and_leaf([1205, 1350, 2410], key=100)
    leaves = display["table"]["leaf"].tolist()
    assert len(leaves) == 13
    assert leaves[:2] == ["05", "50"]
    assert leaves[-1] == "10"
    assert set(leaves[2:-1]) == {""}


def test_stem_and_leaf_rounds_into_next_stem():
    from statkit.tools.plotting.stem_and_leaf import stem_and_leaf

    display = stem_and_leaf([12, 19.6, 25])
    assert display["table"]["stem"].tolist() == [1, 2]
    assert display["table"]["leaf"].tolist() == ["2", "0 5"]


def test_stem_and_leaf_decimal_key():
    from statkit.tools.plotting.stem_and_leaf import stem_and_leaf

    display = stem_and_leaf([1.2, 1.96, 2.5], key=1)
    assert display["table"]["stem"].tolist() == [1, 2]
    assert display["table"]["leaf"].tolist() == ["2", "0 5"]


def test_stem_and_leaf_invalid_key():
    from statkit.tools.plotting.stem_and_leaf import stem_and_leaf

    with pytest.raises(ValueError, match="key must be positive"):
        stem_and_leaf([1, 2, 3], key=-1)


def test_show_stem_and_leaf_tool(session_workdir):
    from statkit.infrastructure.resources import _store_resource
    from statkit.tools.plotting.stem_and_leaf import show_stem_and_leaf

    manifest_path = str(session_workdir / "test_manifest.json")
    df = pd.DataFrame({"weight": [61, 64, 70, 72, 75, 88, None]})
    input_filename = _store_resource(df, manifest_path, "weights", "Body weights", "csv")

    result = show_stem_and_leaf(input_filename, "weight", manifest_path)
    assert result["key"] == 10
    assert "7 | 0 2 5" in result["text"]
    assert "3 stems" in result["summary"]

    with pytest.raises(ValueError, match="Column 'height' not found"):
        show_stem_and_leaf(input_filename, "height", manifest_path)
