"""
Loading of metabolite concentration tables.

The expected layout is one row per subject: a subject identifier column
(discarded), a two-level class label column, and one numeric column per
metabolite with the metabolite name as header.
"""

import os
from typing import Optional, Tuple

import numpy as np
import pandas as pd


def _read_table(path: str) -> pd.DataFrame:
    """Read CSV/TSV (optionally compressed) or parquet by extension."""
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Metabolite table not found: {path}")
    lower = path.lower()
    if lower.endswith('.parquet'):
        return pd.read_parquet(path)
    if lower.endswith(('.tsv', '.tsv.gz', '.txt')):
        return pd.read_csv(path, sep='\t')
    return pd.read_csv(path)


def validate_metabolite_table(df: pd.DataFrame, label_column: str, id_column: Optional[str] = None) -> None:
    """Validate the raw table has the label/id columns and at least one feature."""
    if label_column not in df.columns:
        raise ValueError(
            f"Label column '{label_column}' not found. "
            f"Available columns: {df.columns.tolist()[:10]}"
        )
    if id_column is not None and id_column not in df.columns:
        raise ValueError(f"Id column '{id_column}' not found")
    if len(df) == 0:
        raise ValueError("Metabolite table has no rows")


def split_features_and_labels(
    df: pd.DataFrame,
    label_column: str,
    id_column: Optional[str] = None,
    log_transform: bool = False
) -> Tuple[pd.DataFrame, pd.Series]:
    """
    Separate a raw table into (feature matrix, label vector).

    Args:
        df: Raw table as read from disk
        label_column: Column holding the class label
        id_column: Subject id column to drop (None = first column, unless
                   it is the label column)
        log_transform: Apply log2(x + 1) to all concentrations

    Returns:
        Tuple of (matrix indexed by subject id, labels Series on the same index)
    """
    validate_metabolite_table(df, label_column, id_column)

    if id_column is None and df.columns[0] != label_column:
        id_column = df.columns[0]

    table = df.set_index(id_column) if id_column is not None else df.copy()
    labels = table[label_column].astype(object)
    labels = labels.where(labels.notna(), None)

    # Concentrations may come in as strings; unparseable cells become NaN
    matrix = table.drop(columns=[label_column]).apply(pd.to_numeric, errors='coerce')

    empty = matrix.columns[matrix.isna().all()].tolist()
    if empty:
        print(f"  WARNING: Dropping {len(empty)} columns with no numeric values: {empty}")
        matrix = matrix.drop(columns=empty)

    if log_transform:
        if (matrix < 0).any().any():
            raise ValueError("log_transform requires non-negative concentrations")
        matrix = np.log2(matrix + 1)

    return matrix, labels


def load_metabolite_table(
    path: str,
    label_column: str = 'Muscle loss',
    id_column: Optional[str] = None,
    log_transform: bool = False
) -> Tuple[pd.DataFrame, pd.Series]:
    """
    Load a metabolite table from disk and split it into features and labels.

    Args:
        path: CSV, TSV or parquet file
        label_column: Column holding the class label
        id_column: Subject id column (None = first column)
        log_transform: Apply log2(x + 1) to all concentrations

    Returns:
        Tuple of (matrix, labels)
    """
    df = _read_table(path)
    matrix, labels = split_features_and_labels(df, label_column, id_column, log_transform)
    print(f"  Loaded {matrix.shape[0]} subjects x {matrix.shape[1]} metabolites from {os.path.basename(path)}")
    print(f"  Class counts: {labels.value_counts(dropna=False).to_dict()}")
    return matrix, labels
