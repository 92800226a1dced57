"""
expertise_index.py
==================

Module for calculating institutional expertise indices from an edge list.

This module implements the expertise index families, all sharing the
pipeline normalize → [weight] → [compose] → aggregate → threshold → core:
- x-index       (keywords)
- xd-index      (categories; full, fractional or field-normalized counts)
- ivw-xd-index  (categories, inverse-variance weighted)
- xc-index      (composite "keyword (category)" tags)
- xdc-index     (summary table of the above, single or dual dimension)

The classic h- and g-indices over raw per-document citations live in
threshold_metrics (h_index_from_table / g_index_from_table).

Core Set
--------
The core of an index k is the top-k tags of the profile ranked by
weight descending, ties broken by tag ascending (see
edge_processing.rank_profile). Under ties this can differ from "all tags
with weight >= k"; the top-k rule is used everywhere.

Authors: Diogo Abreu, João Machado, Pedro Lopes
Date: 11/2025
Version: 2.0 (xindex-analyzer)
"""

from typing import NamedTuple

import pandas as pd

from edge_processing import (
    DEFAULT_DELIMITER,
    aggregate_profile,
    normalize_composite_edges,
    normalize_edges,
    rank_profile,
)
from threshold_metrics import g_index, g_index_from_table, h_index, h_index_from_table, resolve_index_function
from variant_weighting import apply_variant, validate_variant


XD_VARIANTS = ("full", "fractional", "field")


class IndexResult(NamedTuple):
    """Index value and the core tags that justify it."""
    index: int
    core: tuple


def extract_core(profile, index):
    """
    Return the top-`index` tags of a profile.

    Parameters
    ----------
    profile : pd.Series
        Tag profile (tag → total weight)
    index : int
        Number of tags to return; values above the number of distinct
        tags return every tag

    Returns
    -------
    tuple of str
        Core tags, highest weight first

    Examples
    --------
    >>> profile = pd.Series({"d": 3.0, "e": 3.0, "f": 5.0, "g": 11.0})
    >>> extract_core(profile, 3)
    ('g', 'f', 'd')
    """
    if index < 0:
        raise ValueError(f"Index must be non-negative, got {index}")
    return tuple(rank_profile(profile).index[:index])


def tag_index(edges, type="h"):
    """
    Aggregate an edge list and apply a threshold rule to the tag profile.

    Parameters
    ----------
    edges : pd.DataFrame
        Edge list (already weighted/composed as needed)
    type : str, optional
        "h" (default) or "g"

    Returns
    -------
    IndexResult
    """
    index_func = resolve_index_function(type)
    profile = aggregate_profile(edges)
    value = int(index_func(profile.values))
    return IndexResult(value, extract_core(profile, value))


def ranked_profile_frame(profile, index):
    """
    Prepare a tag profile for an external rank-vs-weight plot.

    Parameters
    ----------
    profile : pd.Series
        Tag profile
    index : int
        Index value (position of the threshold marker)

    Returns
    -------
    pd.DataFrame
        Columns ['rank', 'tag', 'weight', 'in_core'], ranked like
        `extract_core`
    """
    ranked = rank_profile(profile)
    frame = pd.DataFrame({
        "rank": range(1, len(ranked) + 1),
        "tag": ranked.index.astype(str),
        "weight": ranked.values,
    })
    frame["in_core"] = frame["rank"] <= index
    return frame


# ============================================================
# INDEX FAMILIES
# ============================================================
def x_index(df, kw, id, cit, type="h", dlm=DEFAULT_DELIMITER, regex=False):
    """
    Calculate the x-index of an institution from keyword-tagged publications.

    Parameters
    ----------
    df : pd.DataFrame
        Publication table, one row per document
    kw : str
        Keyword column; each cell holds zero or more keywords joined by `dlm`
    id : str
        Unique document identifier column
    cit : str
        Citation count column
    type : str, optional
        "h" for Hirsch's h-type index or "g" for Egghe's g-type index
    dlm : str, optional
        Keyword delimiter (default: ";")
    regex : bool, optional
        Treat `dlm` as a regular expression

    Returns
    -------
    IndexResult
        (index, core keywords)

    Examples
    --------
    >>> dat = pd.DataFrame({
    ...     "citations": [0, 1, 1, 2, 3, 5, 8],
    ...     "keywords": ["a; b; c", "b; d", "c", "d", "e; g", "f", "g"],
    ...     "id": ["abc123", "bcd234", "def345", "efg456", "fgh567", "ghi678", "hij789"],
    ... })
    >>> x_index(dat, kw="keywords", id="id", cit="citations")
    IndexResult(index=3, core=('g', 'f', 'd'))
    """
    resolve_index_function(type)
    edges = normalize_edges(df, kw, id, cit, dlm=dlm, regex=regex)
    return tag_index(edges, type)


def xd_index(df, cat, id, cit, type="h", dlm=DEFAULT_DELIMITER, variant="full",
             contributors=None, mfc=None, regex=False, verbose=True):
    """
    Calculate the xd-index (expertise diversity) from category-tagged publications.

    Parameters
    ----------
    df : pd.DataFrame
        Publication table
    cat : str
        Category column
    id : str
        Unique document identifier column
    cit : str
        Citation count column
    type : str, optional
        "h" (default) or "g"
    dlm : str, optional
        Category delimiter (default: ";")
    variant : str, optional
        "full" (default) counts every citation once per category,
        "fractional" divides by the document's contributor count,
        "field" divides by the category's mean citation
    contributors : str or dict or pd.Series, optional
        Contributor-count column name, or document id → count lookup.
        Required for the fractional variant.
    mfc : dict or pd.Series or pd.DataFrame, optional
        Mean field citation per category (field variant). Computed from
        the data when omitted.
    regex : bool, optional
        Treat `dlm` as a regular expression
    verbose : bool, optional
        Print diagnostics about excluded/clamped categories

    Returns
    -------
    IndexResult
        (index, core categories)

    Raises
    ------
    ValueError
        Unknown `type`/`variant`, or missing contributor counts for the
        fractional variant
    """
    resolve_index_function(type)
    validate_variant(variant, XD_VARIANTS)
    if variant == "fractional" and contributors is None:
        raise ValueError("Fractional xd-index requires 'contributors'")

    keep = [contributors] if variant == "fractional" and isinstance(contributors, str) else []
    edges = normalize_edges(df, cat, id, cit, dlm=dlm, regex=regex, keep=keep)
    edges = apply_variant(edges, variant, contributors=contributors, mfc=mfc, verbose=verbose)
    return tag_index(edges, type)


def ivw_xd_index(df, cat, id, cit, vfc=None, type="h", dlm=DEFAULT_DELIMITER,
                 regex=False, verbose=True):
    """
    Calculate the inverse-variance weighted (IVW) xd-index.

    Each category's citations are divided by that category's citation
    variance, either taken from `vfc` or computed as the sample variance
    of the data. Categories with an undefined variance (e.g. seen only
    once) are excluded; zero variances are replaced by 0.01.

    Parameters
    ----------
    df : pd.DataFrame
        Publication table
    cat, id, cit : str
        Category, identifier and citation columns
    vfc : dict or pd.Series or pd.DataFrame, optional
        Variance of field citations per category (e.g. a DataFrame with
        columns 'cat' and 'var_cit')
    type : str, optional
        "h" (default) or "g"
    dlm : str, optional
        Category delimiter
    regex : bool, optional
        Treat `dlm` as a regular expression
    verbose : bool, optional
        Print diagnostics

    Returns
    -------
    IndexResult
        (index, core categories)
    """
    resolve_index_function(type)
    edges = normalize_edges(df, cat, id, cit, dlm=dlm, regex=regex)
    edges = apply_variant(edges, "ivw", vfc=vfc, verbose=verbose)
    return tag_index(edges, type)


def xc_index(df, kw, cat, id, cit, type="h", kdlm=DEFAULT_DELIMITER, cdlm=DEFAULT_DELIMITER,
             regex=False):
    """
    Calculate the xc-index (category-adjusted x-index).

    Keywords are paired with every category of the same document into
    composite tags "keyword (category)", each carrying the document's
    full citation count, before aggregation.

    Parameters
    ----------
    df : pd.DataFrame
        Publication table
    kw, cat, id, cit : str
        Keyword, category, identifier and citation columns
    type : str, optional
        "h" (default) or "g"
    kdlm, cdlm : str, optional
        Keyword and category delimiters (default: ";")
    regex : bool, optional
        Treat delimiters as regular expressions

    Returns
    -------
    IndexResult
        (index, core composite tags)
    """
    resolve_index_function(type)
    edges = normalize_composite_edges(df, kw, cat, id, cit, ldlm=kdlm, hdlm=cdlm, regex=regex)
    return tag_index(edges, type)


def _hg_profile_values(profile):
    return int(h_index(profile.values)), int(g_index(profile.values))


def xdc_index(df, p1, id, cit, p2=None, dlm1=DEFAULT_DELIMITER, dlm2=DEFAULT_DELIMITER,
              hg=False, regex=False):
    """
    General summary of the x-, xd- and xc-indices as a table.

    With only `p1`, returns the x-type index of that column: the x-index
    for a keyword column, the xd-index for a category column. With `p2`
    as well, `p1` is the lower level (keywords) and `p2` the higher level
    (categories), and the x-, xd- and xc-indices are returned together.

    Parameters
    ----------
    df : pd.DataFrame
        Publication table
    p1 : str
        First (lower-level) tag column
    id, cit : str
        Identifier and citation columns
    p2 : str, optional
        Second (higher-level) tag column
    dlm1, dlm2 : str, optional
        Delimiters of `p1` and `p2`
    hg : bool, optional
        Also report the classic h- and g-indices over documents
    regex : bool, optional
        Treat delimiters as regular expressions

    Returns
    -------
    pd.DataFrame
        Single dimension: row 'x-type', columns ['h-type', 'g-type'];
        with `hg`, rows ['h-type', 'g-type'], columns ['index', 'x-type'].
        Two dimensions: rows ['h-type', 'g-type'], columns
        ['x-index', 'xd-index', 'xc-index'] (prefixed by 'index' with `hg`).

    Examples
    --------
    >>> xdc_index(dat, p1="keywords", p2="categories", id="id", cit="citations")
            x-index  xd-index  xc-index
    h-type        3         3         3
    g-type        4         4         4
    """
    p1_profile = aggregate_profile(normalize_edges(df, p1, id, cit, dlm=dlm1, regex=regex))

    if p2 is None:
        x_h, x_g = _hg_profile_values(p1_profile)
        if hg:
            rows = [[h_index_from_table(df, cit, id), x_h],
                    [g_index_from_table(df, cit, id), x_g]]
            return pd.DataFrame(rows, index=["h-type", "g-type"], columns=["index", "x-type"])
        return pd.DataFrame([[x_h, x_g]], index=["x-type"], columns=["h-type", "g-type"])

    p2_profile = aggregate_profile(normalize_edges(df, p2, id, cit, dlm=dlm2, regex=regex))
    composite_profile = aggregate_profile(
        normalize_composite_edges(df, p1, p2, id, cit, ldlm=dlm1, hdlm=dlm2, regex=regex)
    )

    x_h, x_g = _hg_profile_values(p1_profile)
    xd_h, xd_g = _hg_profile_values(p2_profile)
    xc_h, xc_g = _hg_profile_values(composite_profile)

    h_row = [x_h, xd_h, xc_h]
    g_row = [x_g, xd_g, xc_g]
    columns = ["x-index", "xd-index", "xc-index"]
    if hg:
        h_row.insert(0, h_index_from_table(df, cit, id))
        g_row.insert(0, g_index_from_table(df, cit, id))
        columns.insert(0, "index")

    return pd.DataFrame([h_row, g_row], index=["h-type", "g-type"], columns=columns)


def expertise_summary(df, id, cit, kw=None, cat=None, type="h", kdlm=DEFAULT_DELIMITER,
                      cdlm=DEFAULT_DELIMITER, verbose=True):
    """
    Compute every index family available for the given columns.

    Parameters
    ----------
    df : pd.DataFrame
        Publication table
    id, cit : str
        Identifier and citation columns
    kw, cat : str, optional
        Keyword and category columns; families needing a missing column
        are skipped
    type : str, optional
        "h" (default) or "g"
    kdlm, cdlm : str, optional
        Keyword and category delimiters
    verbose : bool, optional
        Print diagnostics of the IVW variant

    Returns
    -------
    dict
        - 'index' : int
            Classic h- or g-index over documents
        - 'x-index', 'xd-index', 'ivw-xd-index', 'xc-index' : IndexResult
            Present when the needed columns were given
    """
    doc_index = h_index_from_table if resolve_index_function(type) is h_index else g_index_from_table
    summary = {"index": doc_index(df, cit, id)}

    if kw is not None:
        summary["x-index"] = x_index(df, kw, id, cit, type=type, dlm=kdlm)
    if cat is not None:
        summary["xd-index"] = xd_index(df, cat, id, cit, type=type, dlm=cdlm, verbose=verbose)
        summary["ivw-xd-index"] = ivw_xd_index(df, cat, id, cit, type=type, dlm=cdlm, verbose=verbose)
    if kw is not None and cat is not None:
        summary["xc-index"] = xc_index(df, kw, cat, id, cit, type=type, kdlm=kdlm, cdlm=cdlm)

    return summary
