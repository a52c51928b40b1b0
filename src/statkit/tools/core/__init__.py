"""Core tools package - field handling, frequency tables and dataset operations."""

from statkit.tools.core.fields import (
    check_option,
    to_series,
    apply_levels,
    numeric_values,
    paired_values,
    group_values,
    two_groups,
    k_groups,
    cross_counts,
    category_counts,
    midrange,
)
from statkit.tools.core.tables import (
    cross_table,
    frequency_table,
    n_bins,
    frequency_bins,
    N_BINS_METHODS,
    make_frequency_table,
    make_cross_table,
    make_frequency_bins,
    get_all_table_tools,
)
from statkit.tools.core.dataset_ops import (
    store_csv_as_dataset,
    store_csv_as_dataset_from_text,
    get_dataset_head,
    get_dataset_summary,
    drop_missing_rows,
    get_all_dataset_tools,
)

__all__ = [
    'check_option',
    'to_series',
    'apply_levels',
    'numeric_values',
    'paired_values',
    'group_values',
    'two_groups',
    'k_groups',
    'cross_counts',
    'category_counts',
    'midrange',
    'cross_table',
    'frequency_table',
    'n_bins',
    'frequency_bins',
    'N_BINS_METHODS',
    'make_frequency_table',
    'make_cross_table',
    'make_frequency_bins',
    'get_all_table_tools',
    'store_csv_as_dataset',
    'store_csv_as_dataset_from_text',
    'get_dataset_head',
    'get_dataset_summary',
    'drop_missing_rows',
    'get_all_dataset_tools',
]
