"""Tests for the plotnine charts and the plot_* tools."""
import numpy as np
import pandas as pd
import pytest


PNG_SIGNATURE = b"\x89PNG"


def test_chart_builders_return_ggplot():
    from plotnine import ggplot
    from statkit.tools.plotting.charts import bar_chart, boxplot_chart, histogram_chart, pareto_chart

    np.random.seed(42)
    values = np.random.normal(0, 1, 50)
    cats = ["a", "b", "b", "c", "c", "c"]

    assert isinstance(bar_chart(cats), ggplot)
    assert isinstance(bar_chart(cats, height="percent"), ggplot)
    assert isinstance(pareto_chart(cats), ggplot)
    assert isinstance(histogram_chart(values, bin_method="fd"), ggplot)
    assert isinstance(boxplot_chart(values), ggplot)
    assert isinstance(boxplot_chart(values[:6], groups=cats), ggplot)

    with pytest.raises(ValueError, match="Invalid height"):
        bar_chart(cats, height="density")


def test_category_frequencies_respect_order():
    from statkit.tools.plotting.charts import _category_frequencies

    freq = _category_frequencies(["b", "a", "b"], order=["b", "a", "c"])
    assert freq["category"].tolist() == ["b", "a", "c"]
    assert freq["count"].tolist() == [2, 1, 0]
    assert freq["percent"].sum() == pytest.approx(100)


def test_render_png():
    from statkit.tools.plotting.charts import bar_chart, render_png

    png = render_png(bar_chart(["x", "y", "y"]), width=3, height=2, dpi=50)
    assert png.startswith(PNG_SIGNATURE)


@pytest.mark.slow
def test_plot_tools_store_png(session_workdir):
    from mcp.server.fastmcp import Image
    from statkit.infrastructure.resources import _load_resource, _store_resource
    from statkit.tools.plotting.charts import plot_bar_simple, plot_boxplot, plot_histogram, plot_pareto

    manifest_path = str(session_workdir / "test_manifest.json")
    np.random.seed(42)
    df = pd.DataFrame({
        "group": np.random.choice(["a", "b", "c"], 40),
        "score": np.random.normal(10, 2, 40),
    })
    input_filename = _store_resource(df, manifest_path, "chart_data", "Chart data", "csv")

    bar = plot_bar_simple(input_filename, "group", manifest_path, "group_bar", dpi=50)
    assert isinstance(bar[0], Image)
    assert "3 categories" in bar[1]

    pareto = plot_pareto(input_filename, "group", manifest_path, "group_pareto", dpi=50)
    assert "most frequent category" in pareto[1]

    hist = plot_histogram(input_filename, "score", manifest_path, "score_hist", bins=8, dpi=50)
    assert "40 values in 8 bins" in hist[1]
    stored = hist[1].split("stored as ")[-1]
    assert _load_resource(manifest_path, stored).startswith(PNG_SIGNATURE)

    box = plot_boxplot(input_filename, "score", manifest_path, "score_box", group_column="group", dpi=50)
    assert "by 'group'" in box[1]

    with pytest.raises(ValueError, match="Column 'age' not found"):
        plot_histogram(input_filename, "age", manifest_path, "bad")


def test_get_all_plotting_tools():
    from statkit.tools.plotting import get_all_plotting_tools

    names = [tool.__name__ for tool in get_all_plotting_tools()]
    assert names == ["plot_bar_simple", "plot_pareto", "plot_histogram", "plot_boxplot", "show_stem_and_leaf"]
