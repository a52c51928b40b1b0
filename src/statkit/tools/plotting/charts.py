"""
Charts for a single dataset column, drawn with plotnine.

The chart builders (bar_chart, pareto_chart, histogram_chart, boxplot_chart)
return a ggplot object. The plot_* tools load a column from a CSV resource,
render the chart to PNG bytes, store the PNG as a project resource and return
it as an inline image together with a one-line summary.
"""

import io
from typing import Optional

import pandas as pd
from plotnine import (
    ggplot, aes, geom_col, geom_line, geom_point, geom_histogram, geom_boxplot,
    theme_minimal, theme, element_text, element_line, element_rect, labs, scale_y_continuous,
)
from mcp.server.fastmcp import Image

from statkit.infrastructure.resources import _load_resource, _store_resource
from statkit.infrastructure.logging import loggable
from statkit.tools.core.fields import check_option, numeric_values
from statkit.tools.core.tables import n_bins
from statkit.tools.plotting.stem_and_leaf import show_stem_and_leaf


FILL_COLOR = "#577788"
LINE_COLOR = "#C0392B"


def _paper_theme():
    return theme_minimal() + theme(
        text=element_text(size=11, color="#2C3E50"),
        axis_title_x=element_text(size=11, face="bold", margin={"t": 10}),
        axis_title_y=element_text(size=11, face="bold", margin={"r": 10}),
        axis_text=element_text(size=9, color="#34495E"),
        panel_grid_major=element_line(color="#ECF0F1"),
        panel_grid_minor=element_line(color="#ECF0F1"),
        panel_background=element_rect(fill="white"),
        plot_background=element_rect(fill="white"),
        axis_line=element_line(color="#95A5A6"),
    )


def _category_frequencies(data, order=None) -> pd.DataFrame:
    values = pd.Series(list(data)).dropna()
    counts = values.value_counts()
    categories = list(order) if order is not None else sorted(counts.index)
    counts = counts.reindex(categories, fill_value=0)
    freq = pd.DataFrame({"category": [str(c) for c in categories], "count": counts.to_numpy()})
    freq["percent"] = freq["count"] / freq["count"].sum() * 100
    return freq


def bar_chart(data, height: str = "count", order=None, varname: str = "category"):
    """Simple bar chart of the category frequencies (height "count" or "percent")."""
    check_option(height, ["count", "percent"], "height")
    freq = _category_frequencies(data, order)
    freq["category"] = pd.Categorical(freq["category"], categories=list(freq["category"]), ordered=True)
    return (
        ggplot(freq, aes(x="category", y=height))
        + geom_col(fill=FILL_COLOR)
        + labs(x=varname, y="Frequency" if height == "count" else "Percent")
        + _paper_theme()
    )


def pareto_chart(data, varname: str = "category"):
    """
    Pareto chart: bars in decreasing frequency with the cumulative percentage as a line.

    The cumulative line is drawn on the count scale (100% = total count) and
    labelled on the axis title.
    """
    freq = _category_frequencies(data).sort_values("count", ascending=False, kind="stable")
    total = freq["count"].sum()
    freq["cumulative"] = freq["count"].cumsum()
    freq["category"] = pd.Categorical(freq["category"], categories=list(freq["category"]), ordered=True)
    return (
        ggplot(freq, aes(x="category"))
        + geom_col(aes(y="count"), fill=FILL_COLOR)
        + geom_line(aes(y="cumulative", group=1), color=LINE_COLOR)
        + geom_point(aes(y="cumulative"), color=LINE_COLOR)
        + scale_y_continuous(limits=(0, total))
        + labs(x=varname, y=f"count (line: cumulative, {total} = 100%)")
        + _paper_theme()
    )


def histogram_chart(data, bins: Optional[int] = None, bin_method: str = "sturges", varname: str = "value"):
    """Histogram; the number of bins defaults to the n_bins rule `bin_method`."""
    values = numeric_values(data)
    if bins is None:
        bins = n_bins(values, method=bin_method)
    plot_df = pd.DataFrame({"value": values})
    return (
        ggplot(plot_df, aes(x="value"))
        + geom_histogram(bins=bins, fill=FILL_COLOR, alpha=0.9)
        + labs(x=varname, y="Count")
        + _paper_theme()
    )


def boxplot_chart(data, varname: str = "value", groups=None, group_name: str = "group"):
    """Box plot of a numeric field, split by `groups` when given."""
    if groups is None:
        plot_df = pd.DataFrame({"value": numeric_values(data), "group": varname})
        x_label = ""
    else:
        plot_df = pd.DataFrame({
            "value": pd.to_numeric(pd.Series(list(data)), errors="coerce"),
            "group": pd.Series(list(groups)),
        }).dropna()
        if plot_df.empty:
            raise ValueError("No complete (value, group) pairs to plot")
        plot_df["group"] = plot_df["group"].astype(str)
        x_label = group_name
    return (
        ggplot(plot_df, aes(x="group", y="value"))
        + geom_boxplot(fill=FILL_COLOR, alpha=0.6, outlier_color=LINE_COLOR)
        + labs(x=x_label, y=varname)
        + _paper_theme()
    )


def render_png(plot, width: float = 6.0, height: float = 4.0, dpi: int = 150) -> bytes:
    """Render a ggplot object to PNG bytes."""
    buf = io.BytesIO()
    plot.save(buf, format="png", width=width, height=height, dpi=dpi, verbose=False)
    buf.seek(0)
    png_bytes = buf.read()
    buf.close()
    return png_bytes


def _load_column(project_manifest_path: str, input_filename: str, column: str) -> pd.Series:
    df = _load_resource(project_manifest_path, input_filename)
    if column not in df.columns:
        raise ValueError(f"Column '{column}' not found in dataset. Available columns: {df.columns.tolist()}")
    data = df[column].dropna()
    if len(data) == 0:
        raise ValueError(f"Column '{column}' contains no valid (non-NaN) values")
    return data


def _store_chart(plot, project_manifest_path: str, output_filename: str, explanation: str, width, height, dpi):
    png_bytes = render_png(plot, width=width, height=height, dpi=dpi)
    stored = _store_resource(png_bytes, project_manifest_path, output_filename, explanation, "png")
    return Image(data=png_bytes, format="png"), stored


@loggable
def plot_bar_simple(input_filename: str, column: str, project_manifest_path: str, output_filename: str,
                    explanation: str = "Bar chart", height: str = "count",
                    width: float = 6.0, fig_height: float = 4.0, dpi: int = 150) -> list:
    """
    Create a bar chart of the category frequencies of one column.

    Parameters
    ----------
    input_filename : str
        Filename of the dataset resource.
    column : str
        Column with the categories.
    project_manifest_path : str
        Path to the project manifest JSON file.
    output_filename : str
        Base filename for the stored PNG.
    height : str
        "count" or "percent".

    Returns
    -------
    list
        [Image, str] - the chart and a summary with the stored filename
    """
    data = _load_column(project_manifest_path, input_filename, column)
    plot = bar_chart(data, height=height, varname=column)
    img, stored = _store_chart(plot, project_manifest_path, output_filename, explanation, width, fig_height, dpi)
    summary = f"Bar chart of '{column}' ({data.nunique()} categories, {len(data)} values) stored as {stored}"
    return [img, summary]


@loggable
def plot_pareto(input_filename: str, column: str, project_manifest_path: str, output_filename: str,
                explanation: str = "Pareto chart", width: float = 6.0, fig_height: float = 4.0, dpi: int = 150) -> list:
    """
    Create a Pareto chart (sorted bars with cumulative line) of one column.

    Returns
    -------
    list
        [Image, str]
    """
    data = _load_column(project_manifest_path, input_filename, column)
    plot = pareto_chart(data, varname=column)
    img, stored = _store_chart(plot, project_manifest_path, output_filename, explanation, width, fig_height, dpi)
    top = data.value_counts().index[0]
    summary = f"Pareto chart of '{column}', most frequent category '{top}', stored as {stored}"
    return [img, summary]


@loggable
def plot_histogram(input_filename: str, column: str, project_manifest_path: str, output_filename: str,
                   explanation: str = "Histogram", bins: int | None = None, bin_method: str = "sturges",
                   width: float = 6.0, fig_height: float = 4.0, dpi: int = 150) -> list:
    """
    Create a histogram of a numeric column.

    Parameters
    ----------
    bins : int | None
        Number of bins. If None it is chosen with n_bins(method=bin_method).
    bin_method : str
        Any n_bins method, e.g. "sturges", "fd", "knuth".

    Returns
    -------
    list
        [Image, str]
    """
    data = _load_column(project_manifest_path, input_filename, column)
    values = numeric_values(data, name=column)
    if bins is None:
        bins = n_bins(values, method=bin_method)
    plot = histogram_chart(values, bins=bins, varname=column)
    img, stored = _store_chart(plot, project_manifest_path, output_filename, explanation, width, fig_height, dpi)
    summary = (
        f"Histogram of '{column}': {len(values)} values in {bins} bins, "
        f"range [{values.min():.2f}, {values.max():.2f}], stored as {stored}"
    )
    return [img, summary]


@loggable
def plot_boxplot(input_filename: str, column: str, project_manifest_path: str, output_filename: str,
                 explanation: str = "Box plot", group_column: str | None = None,
                 width: float = 6.0, fig_height: float = 4.0, dpi: int = 150) -> list:
    """
    Create a box plot of a numeric column, optionally split by a categorical column.

    Returns
    -------
    list
        [Image, str]
    """
    df = _load_resource(project_manifest_path, input_filename)
    for col in [column] + ([group_column] if group_column else []):
        if col not in df.columns:
            raise ValueError(f"Column '{col}' not found in dataset. Available columns: {df.columns.tolist()}")

    if group_column is None:
        plot = boxplot_chart(df[column], varname=column)
    else:
        plot = boxplot_chart(df[column], varname=column, groups=df[group_column], group_name=group_column)
    img, stored = _store_chart(plot, project_manifest_path, output_filename, explanation, width, fig_height, dpi)
    split = f" by '{group_column}'" if group_column else ""
    return [img, f"Box plot of '{column}'{split} stored as {stored}"]


def get_all_plotting_tools():
    """Return a list of all plotting tools."""
    return [
        plot_bar_simple,
        plot_pareto,
        plot_histogram,
        plot_boxplot,
        show_stem_and_leaf,
    ]
