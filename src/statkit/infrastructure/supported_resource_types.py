from pathlib import Path
from typing import Any


TYPE_REGISTRY: dict[str, dict[str, Any]] = {}
# Supported resource types and their handlers:
# csv   datasets (pandas DataFrame)
# json  test results, tables rendered as records
# png   charts (raw PNG bytes from plotnine)


# csv
def _save_csv(obj, path: Path):
    assert hasattr(obj, "to_csv"), "csv type expects a DataFrame-like object"
    obj.to_csv(path, index=False)

def _load_csv(path: Path):
    import pandas as pd
    return pd.read_csv(path)

TYPE_REGISTRY["csv"] = {
    "ext": ".csv",
    "save": _save_csv,
    "load": _load_csv,
}


# json
def _save_json(obj, path: Path):
    import json
    with open(path, "w") as f:
        # numpy scalars (np.float64, np.bool_) end up in test results
        json.dump(obj, f, indent=2, default=_json_default)

def _load_json(path: Path):
    import json
    with open(path, "r") as f:
        return json.load(f)

def _json_default(val):
    import numpy as np
    if isinstance(val, np.generic):
        return val.item()
    if isinstance(val, np.ndarray):
        return val.tolist()
    if hasattr(val, "to_dict"):
        return val.to_dict(orient="records")
    raise TypeError(f"Object of type {type(val).__name__} is not JSON serializable")

TYPE_REGISTRY["json"] = {
    "ext": ".json",
    "save": _save_json,
    "load": _load_json,
}


# png
def _save_png(png_bytes: bytes, path: Path):
    """Save PNG image bytes to file."""
    assert isinstance(png_bytes, bytes), "png type expects bytes"
    with open(path, "wb") as f:
        f.write(png_bytes)

def _load_png(path: Path) -> bytes:
    """Load PNG image bytes from file."""
    with open(path, "rb") as f:
        return f.read()

TYPE_REGISTRY["png"] = {
    "ext": ".png",
    "save": _save_png,
    "load": _load_png,
}
