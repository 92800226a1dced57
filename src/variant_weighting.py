"""
variant_weighting.py
====================

Module for the bias-correction variants of the xd-index.

Each variant rescales edge weights before they are aggregated into a
tag profile:

Variants Implemented
--------------------
1. full:       weight = citations (no correction)
2. fractional: weight = citations / contributor count of the document
3. field:      weight = citations / mean citations of the tag
4. ivw:        weight = citations / citation variance of the tag

Field statistics (means or variances) are either supplied by the caller
or computed from the edges themselves. This happens in two explicit
passes: `field_statistics` computes one value per tag, then
`apply_field_statistic` rescales (and filters) the edges.

Tags whose statistic is missing are excluded; statistics equal to zero
are replaced by ZERO_STATISTIC_FLOOR. Both situations are reported on
the console and never change what is computed for the remaining tags.

Authors: Diogo Abreu, João Machado, Pedro Lopes
Date: 11/2025
Version: 2.0 (xindex-analyzer)
"""

import pandas as pd


VARIANTS = ("full", "fractional", "field", "ivw")
ZERO_STATISTIC_FLOOR = 0.01

_STATISTIC_NAMES = {"mean": "mean citation", "var": "variance"}


def validate_variant(variant, allowed=VARIANTS):
    """Raise ValueError unless `variant` is one of `allowed`."""
    if variant not in allowed:
        raise ValueError(f"Unsupported variant {variant!r}: expected one of {', '.join(allowed)}")
    return variant


def _as_lookup(table, name):
    """
    Coerce a tag → value table into a pd.Series indexed by tag.

    Accepts a dict, a pd.Series indexed by tag, or a pd.DataFrame whose
    first column holds tags and second column holds values.
    """
    if isinstance(table, pd.DataFrame):
        if table.shape[1] < 2:
            raise ValueError(f"'{name}' table needs a tag column and a value column")
        lookup = pd.Series(table.iloc[:, 1].values, index=table.iloc[:, 0].values)
    elif isinstance(table, pd.Series):
        lookup = table.copy()
    elif isinstance(table, dict):
        lookup = pd.Series(table, dtype=float)
    else:
        raise ValueError(f"'{name}' must be a dict, pd.Series or pd.DataFrame")

    lookup.index = [str(tag).strip() for tag in lookup.index]
    lookup = lookup[~lookup.index.duplicated(keep="first")]
    return pd.to_numeric(lookup, errors="coerce").astype(float)


def _format_tags(tags):
    return "; ".join(str(t) for t in tags)


# ============================================================
# FRACTIONAL COUNTING
# ============================================================
def fractional_weights(edges, contributors):
    """
    Divide each edge weight by the contributor count of its document.

    Parameters
    ----------
    edges : pd.DataFrame
        Edge list
    contributors : str or dict or pd.Series
        Either the name of a contributor-count column carried on the
        edges, or a document id → contributor count lookup

    Returns
    -------
    pd.DataFrame
        New edge list with rescaled `weight`

    Raises
    ------
    ValueError
        If a contributor count is missing, not numeric or not positive
        for any document in `edges`. Nothing is aggregated in that case.
    """
    if contributors is None:
        raise ValueError("Fractional variant requires contributor counts for every document")

    if isinstance(contributors, str):
        if contributors not in edges.columns:
            raise KeyError(f"Column '{contributors}' not found in table")
        counts = pd.to_numeric(edges[contributors], errors="coerce")
    else:
        counts = edges["id"].map(_as_lookup(contributors, "contributors"))

    missing = edges.loc[counts.isna(), "id"].unique()
    if len(missing) > 0:
        raise ValueError(
            f"Missing contributor count for {len(missing)} document(s): "
            f"{_format_tags(missing[:5])}{' ...' if len(missing) > 5 else ''}"
        )
    invalid = edges.loc[counts <= 0, "id"].unique()
    if len(invalid) > 0:
        raise ValueError(
            f"Contributor counts must be positive; found {len(invalid)} document(s): "
            f"{_format_tags(invalid[:5])}{' ...' if len(invalid) > 5 else ''}"
        )

    out = edges.copy()
    out["weight"] = out["weight"] / counts.astype(float)
    return out


# ============================================================
# FIELD STATISTICS (two passes)
# ============================================================
def field_statistics(edges, statistic="mean", external=None):
    """
    First pass: one field statistic per tag.

    Parameters
    ----------
    edges : pd.DataFrame
        Edge list
    statistic : str, optional
        "mean" (field-normalized) or "var" (inverse-variance weighted)
    external : dict or pd.Series or pd.DataFrame, optional
        Caller-supplied tag → statistic table. When given, nothing is
        computed from `edges`; tags absent from the table get NaN.

    Returns
    -------
    pd.Series
        tag → statistic for every tag present in `edges`

    Notes
    -----
    Internally computed variances are sample variances (ddof=1), so a
    tag seen on a single edge has an undefined (NaN) variance.
    """
    if statistic not in _STATISTIC_NAMES:
        raise ValueError(f"Unsupported statistic {statistic!r}: expected 'mean' or 'var'")

    tags = pd.Index(sorted(edges["tag"].unique()), name="tag")
    if external is not None:
        return _as_lookup(external, statistic).reindex(tags)

    grouped = edges.groupby("tag")["cit"]
    stats = grouped.mean() if statistic == "mean" else grouped.var(ddof=1)
    return stats.reindex(tags).astype(float)


def field_statistic_issues(stats):
    """
    Find the tags a statistic table cannot be applied to as-is.

    Returns
    -------
    tuple (list, list)
        (tags with a missing statistic, tags with a zero statistic),
        both sorted
    """
    missing = sorted(stats.index[stats.isna()])
    zero = sorted(stats.index[stats == 0])
    return missing, zero


def apply_field_statistic(edges, stats, statistic="mean", label="category", verbose=True):
    """
    Second pass: divide each edge weight by its tag's statistic.

    Edges of tags with a missing statistic are excluded; zero statistics
    are replaced by ZERO_STATISTIC_FLOOR. Each case prints a diagnostic
    naming the affected tags.

    Parameters
    ----------
    edges : pd.DataFrame
        Edge list
    stats : pd.Series
        tag → statistic (output of `field_statistics`)
    statistic : str, optional
        "mean" or "var", only used in messages
    label : str, optional
        Tag dimension name used in messages (default: "category")
    verbose : bool, optional
        Print diagnostics (default: True)

    Returns
    -------
    pd.DataFrame
        New edge list with rescaled `weight`
    """
    stat_name = _STATISTIC_NAMES.get(statistic, statistic)
    missing, zero = field_statistic_issues(stats)

    if missing:
        if verbose:
            print(f"⚠️ {stat_name.capitalize()} cannot be computed for {len(missing)} {label}(s): "
                  f"{_format_tags(missing)}")
            if statistic == "var":
                print(f"   💡 {label.capitalize()}(s) occurring only once are likely to result in NA variances.")
            print(f"   ❌ Excluding {len(missing)} {label}(s).")
        edges = edges[~edges["tag"].isin(missing)]

    stats = stats.drop(index=missing)
    if zero:
        if verbose:
            print(f"⚠️ Found {len(zero)} {label}(s) with zero {stat_name}(s): {_format_tags(zero)}")
            print(f"   🔧 Replacing with '{ZERO_STATISTIC_FLOOR}' to allow index calculation.")
        stats = stats.where(stats != 0, ZERO_STATISTIC_FLOOR)

    out = edges.copy()
    out["weight"] = out["weight"] / out["tag"].map(stats).astype(float)
    return out.reset_index(drop=True)


def field_normalized_weights(edges, mfc=None, label="category", verbose=True):
    """
    Field-normalize edge weights by the mean citation of each tag.

    Parameters
    ----------
    edges : pd.DataFrame
        Edge list
    mfc : dict or pd.Series or pd.DataFrame, optional
        Mean field citation per tag. Computed from `edges` when omitted.
    label : str, optional
        Tag dimension name used in messages
    verbose : bool, optional
        Print diagnostics

    Returns
    -------
    pd.DataFrame
        Reweighted edge list
    """
    if mfc is None and verbose:
        print(f"ℹ️ 'mfc' not provided. Computing {label} mean citations from provided data.")
    stats = field_statistics(edges, "mean", external=mfc)
    return apply_field_statistic(edges, stats, "mean", label=label, verbose=verbose)


def inverse_variance_weights(edges, vfc=None, label="category", verbose=True):
    """Weight edges by the inverse citation variance of each tag."""
    if vfc is None and verbose:
        print(f"ℹ️ 'vfc' not provided. Computing {label} variances from provided data.")
    stats = field_statistics(edges, "var", external=vfc)
    return apply_field_statistic(edges, stats, "var", label=label, verbose=verbose)


def apply_variant(edges, variant="full", contributors=None, mfc=None, vfc=None,
                  label="category", verbose=True):
    """
    Apply one weighting variant to an edge list.

    Parameters
    ----------
    edges : pd.DataFrame
        Edge list
    variant : str, optional
        One of "full", "fractional", "field", "ivw" (default: "full")
    contributors : str or dict or pd.Series, optional
        Contributor counts (fractional variant only)
    mfc, vfc : dict or pd.Series or pd.DataFrame, optional
        External mean / variance tables (field and ivw variants)

    Returns
    -------
    pd.DataFrame
        Reweighted copy of `edges` (never the input object itself)
    """
    validate_variant(variant)

    if variant == "fractional":
        return fractional_weights(edges, contributors)
    if variant == "field":
        return field_normalized_weights(edges, mfc=mfc, label=label, verbose=verbose)
    if variant == "ivw":
        return inverse_variance_weights(edges, vfc=vfc, label=label, verbose=verbose)
    return edges.copy()
