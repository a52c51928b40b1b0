"""
Frequency and cross tables.

- cross_table: counts or percentages of two fields, optionally with totals
- frequency_table: counts, percent, valid percent and cumulative percent of one field
- n_bins: number of bins suggested by one of thirteen rules
- frequency_bins: binned frequency table with frequency densities

The make_* tools run these on a dataset column and store the result as a CSV
resource.
"""

import math
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd
from scipy import special

from statkit.infrastructure.logging import loggable
from statkit.infrastructure.resources import _load_resource, _store_resource
from statkit.tools.core.fields import check_option, cross_counts, numeric_values, to_series


def cross_table(
    field1,
    field2,
    order1: Optional[Sequence] = None,
    order2: Optional[Sequence] = None,
    percent: Optional[str] = None,
    totals: bool = False,
) -> pd.DataFrame:
    """
    Cross table of field1 (rows) against field2 (columns).

    Args:
        percent: None for counts, or "all", "row", "column" for percentages of
            the grand total, the row totals or the column totals
        totals: Add a "Total" row and column
    """
    check_option(percent, [None, "all", "row", "column"], "percent")
    ct = cross_counts(field1, field2, order1, order2).astype(float)

    if totals:
        ct["Total"] = ct.sum(axis=1)
        ct.loc["Total"] = ct.sum(axis=0)
        row_tot, col_tot, grand = ct["Total"], ct.loc["Total"], ct.at["Total", "Total"]
    else:
        row_tot, col_tot, grand = ct.sum(axis=1), ct.sum(axis=0), ct.to_numpy().sum()

    if percent == "all":
        ct = ct / grand * 100
    elif percent == "row":
        ct = ct.div(row_tot, axis=0) * 100
    elif percent == "column":
        ct = ct.div(col_tot, axis=1) * 100
    else:
        ct = ct.astype(int)
    return ct


def frequency_table(data, order: Optional[Sequence] = None) -> pd.DataFrame:
    """
    Frequency table of one field.

    Columns: frequency, percent (of all rows, including missing), valid_percent
    (of non-missing rows) and cumulative_percent (of valid rows). A "Missing"
    row is added when there are missing values, and a "Total" row at the end.
    """
    values = to_series(data)
    valid = values.dropna()
    counts = valid.value_counts()
    categories = list(order) if order is not None else sorted(counts.index)
    counts = counts.reindex(categories, fill_value=0)

    n_total = len(values)
    n_valid = int(counts.sum())
    n_missing = n_total - len(valid)

    table = pd.DataFrame({"frequency": counts.astype(int)})
    table["percent"] = table["frequency"] / n_total * 100
    table["valid_percent"] = table["frequency"] / n_valid * 100 if n_valid > 0 else np.nan
    table["cumulative_percent"] = table["valid_percent"].cumsum()

    if n_missing > 0:
        table.loc["Missing"] = [n_missing, n_missing / n_total * 100, np.nan, np.nan]
    table.loc["Total"] = [
        table["frequency"].sum(),
        table["percent"].sum(),
        table["valid_percent"].sum(skipna=True),
        np.nan,
    ]
    table["frequency"] = table["frequency"].astype(int)
    return table


N_BINS_METHODS = ["src", "sturges", "qr", "rice", "ts", "exp", "velleman", "doane",
                  "scott", "fd", "shinshim", "stone", "knuth"]


def _cost_based_bins(data: np.ndarray, method: str, max_bins: int) -> int:
    """Number of bins minimising the Shimazaki-Shinomoto, Stone or Knuth cost."""
    n = len(data)
    data_range = data.max() - data.min()
    ks = np.arange(2, max(max_bins, 2) + 1)
    costs = np.empty(len(ks))
    widths = data_range / ks
    for idx, k in enumerate(ks):
        counts, _ = np.histogram(data, bins=np.linspace(data.min(), data.max(), k + 1))
        h = widths[idx]
        if method == "shinshim":
            avg = counts.mean()
            var = np.sum((counts - avg) ** 2) / k
            costs[idx] = (2 * avg - var) / h ** 2
        elif method == "stone":
            costs[idx] = 1 / h * (2 / (n - 1) - (n + 1) / (n - 1) * np.sum((counts / n) ** 2))
        else:
            profit = (n * math.log(k) + special.gammaln(k / 2) - k * special.gammaln(0.5)
                      - special.gammaln(n + k / 2) + np.sum(special.gammaln(counts + 0.5)))
            costs[idx] = -profit
    return int(ks[int(np.argmin(costs))])


def n_bins(data, method: str = "src", max_bins: Optional[int] = None) -> int:
    """
    Suggested number of bins for a histogram.

    method:
        "src" (square root), "sturges", "qr" (2.5 n^1/4), "rice", "ts" (Terrell-Scott),
        "exp" (log2 n), "velleman", "doane", "scott", "fd" (Freedman-Diaconis),
        "shinshim" (Shimazaki-Shinomoto), "stone", "knuth"

    The last three search 2..max_bins (default n) for the lowest cost.
    """
    check_option(method, N_BINS_METHODS, "method")
    values = numeric_values(data)
    n = len(values)
    if n < 2:
        raise ValueError(f"At least 2 values are needed to suggest bins. Found: {n}")

    if method == "src":
        k = math.sqrt(n)
    elif method == "sturges":
        k = math.log2(n) + 1
    elif method == "qr":
        k = 2.5 * n ** 0.25
    elif method == "rice":
        k = 2 * n ** (1 / 3)
    elif method == "ts":
        k = (2 * n) ** (1 / 3)
    elif method == "exp":
        k = math.log2(n)
    elif method == "velleman":
        k = 2 * math.sqrt(n) if n <= 100 else 10 * math.log10(n)
    elif method == "doane":
        sd_pop = values.std(ddof=0)
        g1 = float(np.mean(((values - values.mean()) / sd_pop) ** 3)) if sd_pop > 0 else 0.0
        sg1 = math.sqrt(6 * (n - 2) / ((n + 1) * (n + 3)))
        k = 1 + math.log2(n) + math.log2(1 + abs(g1) / sg1)
    else:
        data_range = values.max() - values.min()
        if data_range == 0:
            return 1
        if method == "scott":
            k = data_range / (3.49 * values.std(ddof=1) / n ** (1 / 3))
        elif method == "fd":
            q1, q3 = np.percentile(values, [25, 75])
            iqr = q3 - q1
            if iqr == 0:
                raise ValueError("Freedman-Diaconis rule is undefined for an interquartile range of 0")
            k = data_range / (2 * iqr / n ** (1 / 3))
        else:
            return _cost_based_bins(values, method, max_bins or n)
    return int(math.ceil(k))


def frequency_bins(
    data,
    nbins: Union[int, str, None] = None,
    bins: Optional[Sequence[Sequence[float]]] = None,
    incl_lower: bool = True,
    adjust: float = 1,
) -> pd.DataFrame:
    """
    Binned frequency table.

    Args:
        nbins: Number of equal-width bins, or an n_bins method name (default "sturges")
        bins: Explicit (lower, upper) pairs; overrides nbins
        incl_lower: Bins include their lower bound ([lb, ub)); otherwise their
            upper bound ((lb, ub])
        adjust: Amount the maximum is raised (incl_lower) or the minimum lowered
            so the extreme value falls inside a bin

    Returns:
        DataFrame with lower_bound, upper_bound, frequency, frequency_density
    """
    values = numeric_values(data)

    if bins is None:
        k = nbins if isinstance(nbins, int) else n_bins(values, method=nbins or "sturges")
        mn, mx = values.min(), values.max()
        if incl_lower:
            mx = mx + adjust
        else:
            mn = mn - adjust
        h = (mx - mn) / k
        bounds = [(mn + i * h, mn + (i + 1) * h) for i in range(k)]
    else:
        bounds = [(float(lb), float(ub)) for lb, ub in bins]

    rows = []
    for lb, ub in bounds:
        if incl_lower:
            f = int(np.sum(values < ub) - np.sum(values < lb))
        else:
            f = int(np.sum(values <= ub) - np.sum(values <= lb))
        rows.append({
            "lower_bound": lb,
            "upper_bound": ub,
            "frequency": f,
            "frequency_density": f / (ub - lb),
        })
    return pd.DataFrame(rows)


def _load_columns(project_manifest_path: str, input_filename: str, *columns: str) -> pd.DataFrame:
    df = _load_resource(project_manifest_path, input_filename)
    for column in columns:
        if column not in df.columns:
            raise ValueError(f"Column '{column}' not found in dataset. Available: {list(df.columns)}")
    return df


def _records(table: pd.DataFrame, index_name: str) -> list[dict]:
    out = table.rename_axis(index_name).reset_index()
    out[index_name] = out[index_name].astype(str)
    return out.astype(object).where(out.notna(), None).to_dict(orient="records")


@loggable
def make_frequency_table(input_filename: str, column: str, project_manifest_path: str, output_filename: str,
                         explanation: str = "Frequency table", order: list | None = None) -> dict:
    """
    Frequency table of one dataset column, stored as a CSV resource.

    Parameters
    ----------
    input_filename : str
        Filename of the dataset resource.
    column : str
        Column to tabulate.
    project_manifest_path : str
        Path to the project manifest file.
    output_filename : str
        Base filename for the stored table.
    order : list | None
        Category order; sorted categories if None.

    Returns
    -------
    dict
        {"output_filename", "column", "n_categories", "rows", "summary"}
    """
    df = _load_columns(project_manifest_path, input_filename, column)
    table = frequency_table(df[column], order=order)
    rows = _records(table, "category")
    stored = _store_resource(pd.DataFrame(rows), project_manifest_path, output_filename, explanation, "csv")
    n_categories = len(table) - 1 - int("Missing" in table.index)
    n_missing = int(table.at["Missing", "frequency"]) if "Missing" in table.index else 0
    return {
        "output_filename": stored,
        "column": column,
        "n_categories": n_categories,
        "rows": rows,
        "summary": f"Frequency table of '{column}': {n_categories} categories, {n_missing} missing, stored as {stored}",
    }


@loggable
def make_cross_table(input_filename: str, column1: str, column2: str, project_manifest_path: str,
                     output_filename: str, explanation: str = "Cross table",
                     percent: str | None = None, totals: bool = True) -> dict:
    """
    Cross table of two dataset columns (rows: column1), stored as a CSV resource.

    Parameters
    ----------
    percent : str | None
        None for counts, "all", "row" or "column" for percentages.
    totals : bool
        Add row and column totals.

    Returns
    -------
    dict
        {"output_filename", "n_rows", "n_columns", "rows", "summary"}
    """
    df = _load_columns(project_manifest_path, input_filename, column1, column2)
    table = cross_table(df[column1], df[column2], percent=percent, totals=totals)
    table.columns = [str(c) for c in table.columns]
    rows = _records(table, column1)
    stored = _store_resource(pd.DataFrame(rows), project_manifest_path, output_filename, explanation, "csv")
    n_rows = len(table) - int(totals)
    n_cols = len(table.columns) - int(totals)
    kind = "counts" if percent is None else f"{percent} percentages"
    return {
        "output_filename": stored,
        "n_rows": n_rows,
        "n_columns": n_cols,
        "rows": rows,
        "summary": f"{n_rows}x{n_cols} cross table ({kind}) of '{column1}' by '{column2}' stored as {stored}",
    }


@loggable
def make_frequency_bins(input_filename: str, column: str, project_manifest_path: str, output_filename: str,
                        explanation: str = "Binned frequency table", nbins: int | str | None = None,
                        incl_lower: bool = True) -> dict:
    """
    Binned frequency table of a numeric dataset column, stored as a CSV resource.

    Parameters
    ----------
    nbins : int | str | None
        Number of bins or an n_bins method name ("sturges" if None).
    incl_lower : bool
        Bins are [lower, upper) if True, (lower, upper] otherwise.

    Returns
    -------
    dict
        {"output_filename", "n_bins", "rows", "summary"}
    """
    df = _load_columns(project_manifest_path, input_filename, column)
    table = frequency_bins(df[column], nbins=nbins, incl_lower=incl_lower)
    stored = _store_resource(table, project_manifest_path, output_filename, explanation, "csv")
    return {
        "output_filename": stored,
        "n_bins": len(table),
        "rows": table.to_dict(orient="records"),
        "summary": f"'{column}' grouped into {len(table)} bins of width {table['upper_bound'].iloc[0] - table['lower_bound'].iloc[0]:.4g}, stored as {stored}",
    }


def get_all_table_tools():
    """Return a list of all table tools."""
    return [
        make_frequency_table,
        make_cross_table,
        make_frequency_bins,
    ]
