import math
from typing import Dict, Optional

import numpy as np
import pandas as pd

from statkit.infrastructure.logging import loggable
from statkit.infrastructure.resources import _load_resource
from statkit.tools.core.fields import numeric_values


def stem_and_leaf(data, key: Optional[float] = None) -> Dict:
    """
    Text stem-and-leaf display.

    Each value is split into stem = floor(value / key) and a leaf made of the
    remaining digits. Stems without values between the smallest and largest
    stem are shown with an empty leaf.

    Args:
        data: Numeric values
        key: Stem unit; defaults to 10^floor(log10(|max|))

    Returns:
        Dict with "table" (DataFrame of stem and leaves), "text" and "key"
    """
    values = np.sort(numeric_values(data))
    if key is None:
        largest = abs(values.max())
        key = 10 ** math.floor(math.log10(largest)) if largest > 0 else 1
    if key <= 0:
        raise ValueError(f"key must be positive. Got: {key}")

    width = max(len(str(int(key))) - 1, 1)
    stem_size = 10 ** width
    # round to the leaf unit before splitting so a leaf never carries into the next stem
    units = np.floor(values / (key / stem_size) + 0.5).astype(int)
    stems = np.floor_divide(units, stem_size)
    leaves = [f"{u - stem_size * s:0{width}d}" for u, s in zip(units, stems)]

    rows = []
    for stem in range(stems.min(), stems.max() + 1):
        stem_leaves = [leaf for leaf, s in zip(leaves, stems) if s == stem]
        rows.append({"stem": stem, "leaf": " ".join(stem_leaves)})
    table = pd.DataFrame(rows)

    lines = ["Stem | Leaf"] + [f"{r['stem']} | {r['leaf']}" for r in rows]
    lines.append(f"key: {stems[0]} | {leaves[0]} = {values[0]:g}")
    return {"table": table, "text": "\n".join(lines), "key": key}


@loggable
def show_stem_and_leaf(input_filename: str, column: str, project_manifest_path: str, key: float | None = None) -> dict:
    """
    Stem-and-leaf display of a numeric dataset column.

    Returns
    -------
    dict
        {"column", "key", "text", "summary"}
    """
    df = _load_resource(project_manifest_path, input_filename)
    if column not in df.columns:
        raise ValueError(f"Column '{column}' not found in dataset. Available: {list(df.columns)}")
    display = stem_and_leaf(df[column], key=key)
    n_stems = len(display["table"])
    return {
        "column": column,
        "key": display["key"],
        "text": display["text"],
        "summary": f"Stem-and-leaf display of '{column}' with {n_stems} stems (stem unit {display['key']:g})",
    }
