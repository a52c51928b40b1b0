"""
Client-facing dataset tools.

These functions load tabular data into the project as CSV resources and let
the client look at it before running any statistical procedure on its columns.
"""

from statkit.infrastructure.resources import _load_resource, _store_resource
from statkit.infrastructure.logging import loggable


def _dataset_info(output_filename: str, df) -> dict:
    return {
        "output_filename": output_filename,
        "n_rows": len(df),
        "columns": list(df.columns),
        "preview": df.head(5).to_dict(orient="records"),
    }


@loggable
def store_csv_as_dataset(file_path: str, project_manifest_path: str, filename: str, explanation: str) -> dict:
    """
    Store a CSV file from a local file path provided by the MCP client.

    The CSV is read as-is and stored as a tracked resource; no type inference
    or cleaning is done beyond what pandas does when reading.

    Parameters
    ----------
    file_path : str
        Path to a CSV file supplied by the client.
    project_manifest_path : str
        Path to the project manifest file for tracking this resource.
    filename : str
        Base filename for the stored resource (without extension).
    explanation : str
        Brief description of what this dataset contains.

    Returns
    -------
    dict
        {
            "output_filename": str,  # identifier for the stored dataset
            "n_rows": int,
            "columns": list[str],
            "preview": list[dict],   # first 5 rows as records
        }
    """
    import pandas as pd

    df = pd.read_csv(file_path)
    output_filename = _store_resource(df, project_manifest_path, filename, explanation, "csv")
    return _dataset_info(output_filename, df)


@loggable
def store_csv_as_dataset_from_text(csv_content: str, project_manifest_path: str, filename: str, explanation: str) -> dict:
    """
    Store CSV data from content provided by the MCP client.

    Parameters
    ----------
    csv_content : str
        The CSV content as a string.
    project_manifest_path : str
        Path to the project manifest file for tracking this resource.
    filename : str
        Base filename for the stored resource (without extension).
    explanation : str
        Brief description of what this dataset contains.

    Returns
    -------
    dict
        Dataset metadata, as for store_csv_as_dataset
    """
    import pandas as pd
    from io import StringIO

    df = pd.read_csv(StringIO(csv_content))
    output_filename = _store_resource(df, project_manifest_path, filename, explanation, "csv")
    return _dataset_info(output_filename, df)


def get_dataset_head(project_manifest_path: str, input_filename: str, n_rows: int = 10) -> dict:
    """
    Get the first n rows of a dataset.

    Parameters
    ----------
    project_manifest_path : str
        Path to the project manifest file.
    input_filename : str
        Filename of the dataset resource.
    n_rows : int, default=10
        Number of rows to return.

    Returns
    -------
    dict
        {
            "input_filename": str,
            "n_rows_returned": int,
            "n_rows_total": int,
            "columns": list[str],
            "rows": list[dict],
        }
    """
    df = _load_resource(project_manifest_path, input_filename)
    head_df = df.head(n_rows)
    return {
        "input_filename": input_filename,
        "n_rows_returned": len(head_df),
        "n_rows_total": len(df),
        "columns": list(df.columns),
        "rows": head_df.to_dict(orient="records"),
    }


def get_dataset_summary(project_manifest_path: str, input_filename: str, columns: list[str] | None = None) -> dict:
    """
    Summarise every column (or the listed ones) of a dataset.

    Numeric columns get count, n_missing, min, max, mean, median, std and the
    midrange (the default hypothesised location of the one-sample tests).
    Other columns get count, n_missing, n_unique and the most frequent value.

    Parameters
    ----------
    project_manifest_path : str
        Path to the project manifest file.
    input_filename : str
        Filename of the dataset resource.
    columns : list[str] | None, optional
        Columns to summarise. All columns if None.

    Returns
    -------
    dict
        {
            "input_filename": str,
            "n_rows": int,
            "n_columns": int,
            "n_columns_summarized": int,
            "column_summaries": dict,  # per column, see above
        }

    Raises
    ------
    ValueError
        If a requested column does not exist.
    """
    import pandas as pd
    import numpy as np

    df = _load_resource(project_manifest_path, input_filename)

    if columns is None:
        cols_to_summarize = list(df.columns)
    else:
        missing_cols = [col for col in columns if col not in df.columns]
        if missing_cols:
            raise ValueError(f"Column(s) not found in dataset: {missing_cols}. Available: {list(df.columns)}")
        cols_to_summarize = columns

    column_summaries = {}
    for col in cols_to_summarize:
        col_data = df[col]
        count = int(col_data.notna().sum())
        summary = {
            "dtype": str(col_data.dtype),
            "count": count,
            "n_missing": int(col_data.isna().sum()),
        }

        if pd.api.types.is_numeric_dtype(col_data) and not pd.api.types.is_bool_dtype(col_data):
            if count > 0:
                summary.update({
                    "min": float(col_data.min()),
                    "max": float(col_data.max()),
                    "mean": float(col_data.mean()),
                    "median": float(col_data.median()),
                    "std": float(col_data.std()) if count > 1 else None,
                    "midrange": float((col_data.min() + col_data.max()) / 2),
                })
            else:
                summary.update({k: None for k in ("min", "max", "mean", "median", "std", "midrange")})
        else:
            if count > 0:
                value_counts = col_data.value_counts()
                top_value = value_counts.index[0]
                # JSON-serialisable top value
                if isinstance(top_value, (np.integer, np.floating)):
                    top_value = float(top_value)
                elif isinstance(top_value, np.bool_):
                    top_value = bool(top_value)
                else:
                    top_value = str(top_value)
                summary.update({
                    "n_unique": int(col_data.nunique()),
                    "top_value": top_value,
                    "top_freq": int(value_counts.iloc[0]),
                })
            else:
                summary.update({"n_unique": 0, "top_value": None, "top_freq": 0})

        column_summaries[col] = summary

    return {
        "input_filename": input_filename,
        "n_rows": len(df),
        "n_columns": len(df.columns),
        "n_columns_summarized": len(cols_to_summarize),
        "column_summaries": column_summaries,
    }


@loggable
def drop_missing_rows(input_filename: str, columns: list[str] | None, project_manifest_path: str,
                      output_filename: str, explanation: str) -> dict:
    """
    Remove rows with a missing value in any of the listed columns (all columns if None).

    Parameters
    ----------
    input_filename : str
        Filename of the dataset resource.
    columns : list[str] | None
        Columns to check for missing values.
    project_manifest_path : str
        Path to the project manifest file.
    output_filename : str
        Base filename for the cleaned dataset.
    explanation : str
        Brief description of why rows are dropped.

    Returns
    -------
    dict
        {
            "output_filename": str,
            "n_rows_before": int,
            "n_rows_after": int,
            "n_rows_dropped": int,
            "columns": list[str],
        }
    """
    df = _load_resource(project_manifest_path, input_filename)
    if columns is not None:
        missing_cols = [col for col in columns if col not in df.columns]
        if missing_cols:
            raise ValueError(f"Column(s) not found in dataset: {missing_cols}. Available: {list(df.columns)}")

    n_before = len(df)
    df_clean = df.dropna(subset=columns).reset_index(drop=True)
    output_filename = _store_resource(df_clean, project_manifest_path, output_filename, explanation, "csv")
    return {
        "output_filename": output_filename,
        "n_rows_before": n_before,
        "n_rows_after": len(df_clean),
        "n_rows_dropped": n_before - len(df_clean),
        "columns": list(df_clean.columns),
    }


def get_all_dataset_tools():
    """Return a list of all dataset tools."""
    return [
        store_csv_as_dataset,
        store_csv_as_dataset_from_text,
        get_dataset_head,
        get_dataset_summary,
        drop_missing_rows,
    ]
