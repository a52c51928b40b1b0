from datetime import datetime
import inspect
from functools import wraps

import numpy as np

from statkit.config import LOG_PATH


def _fmt(val):
    """Compact representation of a tool input or output for the history log."""
    try:
        if isinstance(val, str):
            return val if len(val) <= 100 else val[:97] + "..."

        if isinstance(val, (float, np.floating)):
            return f"{float(val):.6g}"

        # DataFrame, Series, ndarray
        if hasattr(val, "shape"):
            return f"<{type(val).__name__} shape={val.shape}>"

        if isinstance(val, (list, dict, tuple, set)) and len(val) > 30:
            return f"<{type(val).__name__} len={len(val)}>"
        return repr(val)
    except Exception:
        return "<unprintable>"


def _write_entry(lines: list[str]) -> None:
    entry = datetime.now().strftime("\n%Y-%m-%d %H:%M:%S:\n") + "".join(f"\t{line}\n" for line in lines)
    with LOG_PATH.open("a", encoding="utf-8") as f:
        f.write(entry)


def loggable(func):
    """
    Decorator that appends a record of each tool call to the statkit history log.

    Every entry holds the function name, the first docstring line, the inputs as
    passed, the (compacted) outputs and the wall-clock time. Calls that raise are
    recorded with the exception and the exception is re-raised unchanged.
    """
    sig = inspect.signature(func)
    doc = inspect.getdoc(func)
    description = doc.strip().split("\n")[0] if doc else "Description not available."

    @wraps(func)
    def wrapper(*args, **kwargs):
        bound = sig.bind(*args, **kwargs)
        bound.apply_defaults()
        inputs_str = {k: _fmt(v) for k, v in bound.arguments.items()}

        start_time = datetime.now()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            elapsed_time = (datetime.now() - start_time).total_seconds()
            _write_entry([
                f"Function: {func.__name__}()",
                f"Description: {description}",
                f"Inputs: {inputs_str}",
                f"Error: {type(e).__name__}: {_fmt(str(e))}",
                f"Execution Time: {elapsed_time:.4f}s",
            ])
            raise
        elapsed_time = (datetime.now() - start_time).total_seconds()

        if isinstance(result, dict):
            outputs_str = {k: _fmt(v) for k, v in result.items()}
        else:
            outputs_str = _fmt(result)

        _write_entry([
            f"Function: {func.__name__}()",
            f"Description: {description}",
            f"Inputs: {inputs_str}",
            f"Outputs: {outputs_str}",
            f"Execution Time: {elapsed_time:.4f}s",
        ])
        return result

    return wrapper
