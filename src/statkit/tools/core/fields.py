"""
Shared input handling for the statistical functions.

Every function in statkit accepts plain lists, numpy arrays or pandas Series.
These helpers turn those inputs into clean pandas objects (missing values
dropped, ordinal labels mapped to their rank codes, groups split out) and
validate string options.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd


def check_option(value, options: Iterable, name: str):
    """Raise ValueError listing the valid choices when `value` is not one of `options`."""
    options = list(options)
    if value not in options:
        raise ValueError(f"Invalid {name} '{value}'. Choose from: {options}")
    return value


def to_series(data, name: str = "data") -> pd.Series:
    if isinstance(data, pd.Series):
        return data.reset_index(drop=True)
    if isinstance(data, pd.DataFrame):
        raise ValueError(f"{name} must be one-dimensional, got a DataFrame with columns {list(data.columns)}")
    return pd.Series(list(data) if not isinstance(data, np.ndarray) else data, name=name)


def _label_key(label) -> str:
    if isinstance(label, (float, np.floating)) and float(label).is_integer():
        return str(int(label))
    return str(label)


def sorted_labels(labels: Iterable) -> List:
    """Labels in sorted order; mixed types are sorted by their text."""
    labels = list(labels)
    try:
        return sorted(labels)
    except TypeError:
        return sorted(labels, key=str)


def match_labels(requested: Sequence, available: Iterable) -> List:
    """
    Map each requested label onto the label used in the data.

    Labels that arrive as text (JSON keys such as "1") are matched to numeric
    labels in the data by their string form. Labels without a match are
    returned unchanged.
    """
    available = list(available)
    present = set(available)
    by_key = {_label_key(label): label for label in available}
    return [r if r in present else by_key.get(_label_key(r), r) for r in requested]


def apply_levels(field: pd.Series, levels: Optional[Sequence] = None) -> pd.Series:
    """
    Replace ordinal labels with their position in `levels` (1, 2, ...).

    Values not listed in `levels` become NaN. Without levels the field is
    converted to numbers as-is.
    """
    if levels is None:
        return pd.to_numeric(field, errors="coerce")
    matched = match_labels(levels, field.dropna().unique())
    codes = {level: i + 1 for i, level in enumerate(matched)}
    return field.map(codes).astype(float)


def numeric_values(data, levels: Optional[Sequence] = None, name: str = "data") -> np.ndarray:
    """Numeric values of a single field with missing values removed."""
    values = apply_levels(to_series(data, name), levels).dropna().to_numpy(dtype=float)
    if len(values) == 0:
        raise ValueError(f"No valid (non-NaN) values in {name}")
    return values


def paired_values(field1, field2, levels: Optional[Sequence] = None) -> Tuple[np.ndarray, np.ndarray]:
    """Two numeric fields with every row that is missing in either dropped."""
    s1 = apply_levels(to_series(field1, "field1"), levels)
    s2 = apply_levels(to_series(field2, "field2"), levels)
    if len(s1) != len(s2):
        raise ValueError(f"Paired fields must have the same length. Got {len(s1)} and {len(s2)}")
    df = pd.DataFrame({"x": s1, "y": s2}).dropna()
    if len(df) == 0:
        raise ValueError("No complete pairs after removing missing values")
    return df["x"].to_numpy(dtype=float), df["y"].to_numpy(dtype=float)


def paired_labels(field1, field2) -> pd.DataFrame:
    """Two (possibly non-numeric) fields as a DataFrame with incomplete rows removed."""
    s1 = to_series(field1, "field1")
    s2 = to_series(field2, "field2")
    if len(s1) != len(s2):
        raise ValueError(f"Paired fields must have the same length. Got {len(s1)} and {len(s2)}")
    return pd.DataFrame({"field1": s1, "field2": s2}).dropna()


def group_values(cat_field, value_field, categories: Optional[Sequence] = None,
                 levels: Optional[Sequence] = None) -> Dict[object, np.ndarray]:
    """
    Split `value_field` by the labels in `cat_field`.

    With `categories` only those groups are kept, in that order; otherwise all
    groups are used in sorted order.
    """
    cats = to_series(cat_field, "cat_field")
    vals = apply_levels(to_series(value_field, "value_field"), levels)
    if len(cats) != len(vals):
        raise ValueError(f"cat_field and value_field must have the same length. Got {len(cats)} and {len(vals)}")
    df = pd.DataFrame({"cat": cats, "value": vals}).dropna()
    present = list(pd.unique(df["cat"]))

    if categories is None:
        categories = sorted_labels(present)
        matched = categories
    else:
        matched = match_labels(categories, present)
        missing = [c for c, m in zip(categories, matched) if m not in set(present)]
        if missing:
            raise ValueError(f"Categories {missing} not found. Available: {present}")

    return {c: df.loc[df["cat"] == m, "value"].to_numpy(dtype=float) for c, m in zip(categories, matched)}


def two_groups(cat_field, value_field, categories: Optional[Sequence] = None,
               levels: Optional[Sequence] = None) -> Tuple[np.ndarray, np.ndarray, List]:
    """The two groups compared by a two-sample procedure and their labels."""
    groups = group_values(cat_field, value_field, categories, levels)
    if categories is None and len(groups) > 2:
        groups = dict(list(groups.items())[:2])
    if len(groups) != 2:
        raise ValueError(f"Exactly two categories are required. Found: {list(groups)}")
    labels = list(groups)
    x1, x2 = groups[labels[0]], groups[labels[1]]
    if len(x1) == 0 or len(x2) == 0:
        raise ValueError(f"Both categories need at least one value. Sizes: {len(x1)}, {len(x2)}")
    return x1, x2, labels


def k_groups(cat_field, value_field, categories: Optional[Sequence] = None,
             levels: Optional[Sequence] = None, min_groups: int = 2) -> Dict[object, np.ndarray]:
    groups = group_values(cat_field, value_field, categories, levels)
    if len(groups) < min_groups:
        raise ValueError(f"At least {min_groups} groups are required. Found: {list(groups)}")
    return groups


def cross_counts(field1, field2, order1: Optional[Sequence] = None,
                 order2: Optional[Sequence] = None) -> pd.DataFrame:
    """
    Contingency table of counts, rows from field1 and columns from field2.

    Categories follow `order1`/`order2` when given (unlisted values are dropped),
    otherwise they are sorted.
    """
    df = paired_labels(field1, field2)
    rows = cols = None
    if order1 is not None:
        rows = match_labels(order1, df["field1"].unique())
        df = df[df["field1"].isin(rows)]
    if order2 is not None:
        cols = match_labels(order2, df["field2"].unique())
        df = df[df["field2"].isin(cols)]
    if len(df) == 0:
        raise ValueError("No complete pairs left to cross-tabulate")

    table = pd.crosstab(df["field1"], df["field2"])
    table = table.reindex(index=rows if rows is not None else sorted_labels(table.index),
                          columns=cols if cols is not None else sorted_labels(table.columns), fill_value=0)
    if order1 is not None:
        table.index = list(order1)
    if order2 is not None:
        table.columns = list(order2)
    table.index.name = None
    table.columns.name = None
    return table


def category_counts(data, categories: Optional[Sequence] = None) -> pd.Series:
    """Frequencies per category, in `categories` order (zero counts kept) or sorted."""
    values = to_series(data).dropna()
    counts = values.value_counts()
    if categories is None:
        categories = sorted_labels(counts.index)
    categories = list(categories)
    counts = counts.reindex(match_labels(categories, counts.index), fill_value=0).astype(int)
    counts.index = categories
    return counts


def midrange(values: np.ndarray) -> float:
    """Default hypothesised location: the middle of the observed range."""
    return (np.min(values) + np.max(values)) / 2
