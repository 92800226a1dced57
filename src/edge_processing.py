"""
edge_processing.py
==================

Module for turning publication tables into (document, tag, citation)
edge lists and per-tag citation profiles for xindex-analyzer.

This module provides standardized functions for:
- 📋 Selecting and cleaning the id/citation/tag columns of a table
- ✂️ Splitting delimiter-joined keyword/category cells into edges
- 🔗 Building composite "keyword (category)" edges (xc-index support)
- 📊 Aggregating edges into a tag → total citation profile

Edge Format
-----------
Every edge list is a pd.DataFrame with the columns:
- id     : Document identifier (str)
- tag    : Trimmed, non-empty keyword/category (str)
- cit    : The document's raw citation count (float)
- weight : Weight aggregated into the profile (float, equals `cit`
           until a weighting variant rescales it)

A citation is NOT divided across a document's tags: each tag of a
document receives the document's full citation weight.

Authors: Diogo Abreu, João Machado, Pedro Lopes
Date: 11/2025
Version: 2.0 (xindex-analyzer)
"""

import pandas as pd


DEFAULT_DELIMITER = ";"
EDGE_COLUMNS = ["id", "tag", "cit", "weight"]


def _id_to_str(value):
    # Integral floats come from int columns that pandas widened because of NaN
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _require_columns(df, columns):
    for column in columns:
        if column not in df.columns:
            raise KeyError(f"Column '{column}' not found in table")


def select_documents(df, id, cit, tags=(), keep=()):
    """
    Select and clean the document-level columns of a publication table.

    Rows whose identifier is missing, or whose citation count is missing
    or not numeric, are dropped silently. The input table is not modified.

    Parameters
    ----------
    df : pd.DataFrame
        Publication table, one row per document
    id : str
        Name of the unique identifier column
    cit : str
        Name of the citation count column
    tags : sequence of str, optional
        Tag columns to carry along (cells left untouched)
    keep : sequence of str, optional
        Auxiliary columns to carry along (e.g. contributor counts)

    Returns
    -------
    pd.DataFrame
        Columns `id` (str) and `cit` (float) followed by the requested
        tag and auxiliary columns under their original names

    Examples
    --------
    >>> df = pd.DataFrame({"UT": ["w1", None, "w3"], "TC": ["4", "2", "n/a"]})
    >>> select_documents(df, "UT", "TC")
       id  cit
    0  w1  4.0
    """
    columns = [id, cit, *tags, *keep]
    _require_columns(df, columns)

    # Positional copy: the caller's index may contain duplicates
    docs = pd.DataFrame({
        "id": df[id].to_numpy(),
        "cit": pd.to_numeric(df[cit], errors="coerce").to_numpy(),
    })
    for column in [*tags, *keep]:
        docs[column] = df[column].to_numpy()

    docs = docs[docs["id"].notna() & docs["cit"].notna()].reset_index(drop=True)
    docs["id"] = docs["id"].map(_id_to_str)
    docs["cit"] = docs["cit"].astype(float)
    return docs


def split_tags(docs, column, dlm=DEFAULT_DELIMITER, regex=False):
    """
    Explode a delimiter-joined tag column of a document table into edges.

    Each token is whitespace-trimmed; tokens that are empty after trimming
    are dropped, so a document without usable tags yields no edge at all.
    Repeated tags on one document each produce their own edge.

    Parameters
    ----------
    docs : pd.DataFrame
        Output of `select_documents`
    column : str
        Tag column to split
    dlm : str, optional
        Delimiter between tags (default: ";")
    regex : bool, optional
        Treat `dlm` as a regular expression instead of a literal string

    Returns
    -------
    pd.DataFrame
        Edge list (`id`, `tag`, `cit`, `weight`) plus any auxiliary
        columns carried by `docs`
    """
    cells = docs[column]
    cells = cells[cells.notna()].astype(str)
    tokens = cells.str.split(dlm, regex=regex).explode().str.strip()
    tokens = tokens[tokens.notna() & (tokens != "")]

    extra = [c for c in docs.columns if c not in ("id", "cit", column)]
    edges = docs.loc[tokens.index, ["id", "cit", *extra]].copy()
    edges.insert(1, "tag", tokens.values)
    edges.insert(3, "weight", edges["cit"])
    return edges.reset_index(drop=True)


def normalize_edges(df, tag, id, cit, dlm=DEFAULT_DELIMITER, regex=False, keep=()):
    """
    Normalize a publication table into a flat (document, tag, citation) edge list.

    Parameters
    ----------
    df : pd.DataFrame
        Publication table
    tag : str
        Name of the keyword/category column
    id : str
        Name of the identifier column
    cit : str
        Name of the citation count column
    dlm : str, optional
        Delimiter used inside the tag column (default: ";")
    regex : bool, optional
        Treat `dlm` as a regular expression
    keep : sequence of str, optional
        Auxiliary document columns to carry onto every edge

    Returns
    -------
    pd.DataFrame
        Edge list

    Examples
    --------
    >>> df = pd.DataFrame({"id": ["p1", "p2"], "cit": [3, 8], "kw": ["e; g", "g"]})
    >>> normalize_edges(df, "kw", "id", "cit")
       id tag  cit  weight
    0  p1   e  3.0     3.0
    1  p1   g  3.0     3.0
    2  p2   g  8.0     8.0
    """
    docs = select_documents(df, id, cit, tags=[tag], keep=keep)
    return split_tags(docs, tag, dlm=dlm, regex=regex)


def compose_edges(lower_edges, higher_edges):
    """
    Pair lower-level tags with higher-level tags of the same document.

    For a document with lower tags {l1, l2, ...} and higher tags
    {h1, h2, ...}, one composite edge "l (h)" is emitted for every
    (l, h) pair, each carrying the document's full citation weight.
    Documents missing either dimension emit nothing.

    Parameters
    ----------
    lower_edges : pd.DataFrame
        Edge list of the lower level (generally keywords)
    higher_edges : pd.DataFrame
        Edge list of the higher level (generally categories); only
        its `id` and `tag` columns are used

    Returns
    -------
    pd.DataFrame
        Composite edge list
    """
    higher = higher_edges[["id", "tag"]].rename(columns={"tag": "higher"})
    merged = lower_edges.merge(higher, on="id", how="inner", sort=False)
    merged["tag"] = merged["tag"] + " (" + merged["higher"] + ")"
    return merged.drop(columns="higher").reset_index(drop=True)


def normalize_composite_edges(df, lower, higher, id, cit, ldlm=DEFAULT_DELIMITER,
                              hdlm=DEFAULT_DELIMITER, regex=False):
    """
    Normalize a table into composite "lower (higher)" edges.

    Both tag dimensions are split with their own delimiter before
    pairing (see `compose_edges`).
    """
    docs = select_documents(df, id, cit, tags=[lower, higher])
    lower_edges = split_tags(docs.drop(columns=higher), lower, dlm=ldlm, regex=regex)
    higher_edges = split_tags(docs.drop(columns=lower), higher, dlm=hdlm, regex=regex)
    return compose_edges(lower_edges, higher_edges)


def aggregate_profile(edges):
    """
    Sum edge weights per tag.

    Parameters
    ----------
    edges : pd.DataFrame
        Edge list with `tag` and `weight` columns

    Returns
    -------
    pd.Series
        Tag profile: index = tag, values = total weight. Every tag seen
        on at least one edge is present, even with a total of 0.
    """
    if edges.empty:
        return pd.Series(dtype=float, name="weight").rename_axis("tag")
    profile = edges.groupby("tag", sort=True)["weight"].sum().astype(float)
    return profile.rename("weight")


def rank_profile(profile):
    """
    Order a tag profile by weight descending, ties broken by tag ascending.

    This is the single ordering used for core extraction and for the
    ranked plotting frame, so results are reproducible under ties.
    """
    ranked = profile.sort_index(kind="mergesort")
    return ranked.sort_values(ascending=False, kind="mergesort")
