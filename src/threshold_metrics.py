"""
threshold_metrics.py
====================

Module for the threshold-type bibliometric indices used by xindex-analyzer.

This module implements the two primitive "threshold" rules that every
expertise index is built on, plus their per-document counterparts:
- h-index (Hirsch index)
- g-index (Egghe index)
- h/g indices computed straight from a publication table

The primitives only see an unordered multiset of non-negative numbers.
Whether those numbers are raw citations per document or aggregated
citations per keyword/category is decided by the caller.

Authors: Diogo Abreu, João Machado, Pedro Lopes
Date: 11/2025
Version: 2.0 (xindex-analyzer)
"""

import numpy as np
import pandas as pd


INDEX_TYPES = ("h", "g")


def _clean_values(values):
    """Return a descending float array with NaN entries removed."""
    arr = np.asarray(list(values), dtype=float)
    arr = arr[~np.isnan(arr)]
    return np.sort(arr)[::-1]


def h_index(values):
    """
    Calculate the h-index of a multiset of values.

    The h-index is the largest number h such that the h-th largest value
    (1-indexed) is at least h.

    Parameters
    ----------
    values : iterable of float
        Citation counts (or aggregated citation weights). Order is
        irrelevant; NaN entries are ignored.

    Returns
    -------
    int
        The h-index value (0 for an empty input)

    Examples
    --------
    >>> h_index([0, 1, 1, 2, 3, 5, 8])
    3
    >>> # Sorted: [8, 5, 3, 2, 1, 1, 0]
    >>> # 3rd value = 3 >= 3 ✓
    >>> # 4th value = 2 >= 4 ✗
    """
    sorted_vals = _clean_values(values)

    h = 0
    for i, v in enumerate(sorted_vals, start=1):
        if v >= i:
            h = i
        else:
            break

    return h


def g_index(values):
    """
    Calculate the g-index of a multiset of values.

    The g-index is defined as the largest number g such that the top g
    values have together at least g² citations.

    Parameters
    ----------
    values : iterable of float
        Citation counts (or aggregated citation weights). NaN entries
        are ignored.

    Returns
    -------
    int
        The g-index value (0 for an empty input)

    Notes
    -----
    g is bounded by the number of values: the sequence is not padded
    with zeros. The g-index is always greater than or equal to the
    h-index of the same values.

    Examples
    --------
    >>> g_index([100, 50, 30, 20, 10, 5, 5, 5])
    8
    >>> # Top 8 values sum to 225 >= 8² = 64 ✓
    """
    sorted_vals = _clean_values(values)
    cumulative = 0.0
    g = 0

    for i, v in enumerate(sorted_vals, start=1):
        cumulative += v
        if cumulative >= i * i:
            g = i
        else:
            break

    return g


def resolve_index_function(type):
    """
    Map an index type selector to its threshold function.

    Parameters
    ----------
    type : str
        "h" for Hirsch's h-type index or "g" for Egghe's g-type index

    Returns
    -------
    callable
        `h_index` or `g_index`

    Raises
    ------
    ValueError
        If `type` is not one of "h" or "g"
    """
    if type == "h":
        return h_index
    if type == "g":
        return g_index
    raise ValueError(f"Unsupported index type {type!r}: expected one of {', '.join(INDEX_TYPES)}")


def _document_citations(df, cit, id=None):
    if cit not in df.columns:
        raise KeyError(f"Column '{cit}' not found in table")
    cits = pd.to_numeric(df[cit], errors="coerce")
    mask = cits.notna()
    if id is not None:
        if id not in df.columns:
            raise KeyError(f"Column '{id}' not found in table")
        mask &= df[id].notna()
    return cits[mask]


def h_index_from_table(df, cit, id=None):
    """
    Calculate the classic h-index straight from a publication table.

    No tag splitting takes place: each row is one document with its own
    citation count. Rows with a missing or non-numeric citation count
    (and, when `id` is given, a missing identifier) are dropped.

    Parameters
    ----------
    df : pd.DataFrame
        Publication table
    cit : str
        Name of the citation count column
    id : str, optional
        Name of the document identifier column

    Returns
    -------
    int
        h-index value
    """
    return h_index(_document_citations(df, cit, id))


def g_index_from_table(df, cit, id=None):
    """Calculate the classic g-index straight from a publication table."""
    return g_index(_document_citations(df, cit, id))
