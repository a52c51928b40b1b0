"""Text displays and plotnine charts."""

from statkit.tools.plotting.stem_and_leaf import stem_and_leaf, show_stem_and_leaf
from statkit.tools.plotting.charts import (
    bar_chart,
    pareto_chart,
    histogram_chart,
    boxplot_chart,
    render_png,
    plot_bar_simple,
    plot_pareto,
    plot_histogram,
    plot_boxplot,
    get_all_plotting_tools,
)

__all__ = [
    'stem_and_leaf',
    'show_stem_and_leaf',
    'bar_chart',
    'pareto_chart',
    'histogram_chart',
    'boxplot_chart',
    'render_png',
    'plot_bar_simple',
    'plot_pareto',
    'plot_histogram',
    'plot_boxplot',
    'get_all_plotting_tools',
]
