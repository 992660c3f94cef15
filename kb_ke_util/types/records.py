"""
Parameter and output records for each kb_ke_util operation.

Field names match the service's wire names exactly. Matrices travel in the
service's own JSON form, e.g. a data matrix is
{"row_ids": [...], "col_ids": [...], "values": [[...], ...]}.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .base import OpenRecord

Matrix = List[List[float]]


# -----------------------------------------------------------------------------
# linkage_2_newick
# -----------------------------------------------------------------------------


class NewickParams(OpenRecord):
    """
    linkage_matrix - hierarchical clustering linkage matrix (see run_linkage)
    labels - items corresponding to each linkage_matrix element
    """

    linkage_matrix: Optional[Matrix] = None
    labels: Optional[List[str]] = None


class NewickOutput(OpenRecord):
    newick: Optional[str] = None


# -----------------------------------------------------------------------------
# run_PCA
# -----------------------------------------------------------------------------


class PCAParams(OpenRecord):
    """
    data_matrix - raw data matrix with row_ids, col_ids and values
    n_components - number of components (default 2)
    """

    data_matrix: Optional[Dict[str, Any]] = None
    n_components: Optional[int] = None


class PCAOutput(OpenRecord):
    """
    pca_matrix - PCA matrix in the data_matrix JSON form
    explained_variance / explained_variance_ratio - one entry per component
    """

    pca_matrix: Optional[Dict[str, Any]] = None
    explained_variance: Optional[List[float]] = None
    explained_variance_ratio: Optional[List[float]] = None


# -----------------------------------------------------------------------------
# run_kmeans2
# -----------------------------------------------------------------------------


class KmeansParams(OpenRecord):
    """
    dist_matrix - a condensed distance matrix (as returned by run_pdist)
    k_num - number of clusters to form

    Optional: dist_metric (default 'euclidean'), minit (centroid
    initialisation, default 'random').
    """

    dist_matrix: Optional[Dict[str, Any]] = None
    k_num: Optional[int] = None
    dist_metric: Optional[str] = None
    minit: Optional[str] = None


class KmeansOutput(OpenRecord):
    centroid: Optional[List[Any]] = None
    idx: Optional[List[int]] = None


# -----------------------------------------------------------------------------
# run_pdist
# -----------------------------------------------------------------------------


class PdistParams(OpenRecord):
    """
    dist_matrix - raw data matrix with row_ids, col_ids and values, e.g.
        {'row_ids': ['gene_1', 'gene_2'],
         'col_ids': ['condition_1', 'condition_2'],
         'values': [[0.1, 0.2], [0.3, 0.4]]}
    metric - distance metric, default 'euclidean'. Any of braycurtis,
        canberra, chebyshev, cityblock, correlation, cosine, dice, euclidean,
        hamming, jaccard, kulsinski, matching, rogerstanimoto, russellrao,
        sokalmichener, sokalsneath, sqeuclidean, yule. The service rejects
        minkowski, seuclidean and mahalanobis.

    The service documents the input matrix as data_matrix, but the wire key
    is dist_matrix. A data_matrix key can still be sent through the open map.
    """

    dist_matrix: Optional[Dict[str, Any]] = None
    metric: Optional[str] = None


class PdistOutput(OpenRecord):
    """
    dist_matrix - condensed distance matrix keyed by "<row>-<row>"
    labels - row labels in matrix order
    """

    dist_matrix: Optional[Dict[str, Any]] = None
    labels: Optional[List[str]] = None


# -----------------------------------------------------------------------------
# run_linkage
# -----------------------------------------------------------------------------


class LinkageParams(OpenRecord):
    """
    dist_matrix - condensed distance matrix (see run_pdist)
    method - single, complete, average, weighted, centroid, median or ward
    """

    dist_matrix: Optional[Dict[str, Any]] = None
    method: Optional[str] = None


class LinkageOutput(OpenRecord):
    linkage_matrix: Optional[Matrix] = None


# -----------------------------------------------------------------------------
# run_fcluster
# -----------------------------------------------------------------------------


class FclusterParams(OpenRecord):
    """
    linkage_matrix - hierarchical clustering linkage matrix
    dist_threshold - the threshold to apply when forming flat clusters
    labels - items corresponding to each linkage_matrix element
    criterion - inconsistent, distance or maxclust (default 'inconsistent')
    """

    linkage_matrix: Optional[Matrix] = None
    dist_threshold: Optional[float] = None
    labels: Optional[List[str]] = None
    criterion: Optional[str] = None


class FclusterOutput(OpenRecord):
    flat_cluster: Optional[Dict[str, List[str]]] = None


# -----------------------------------------------------------------------------
# run_dendrogram
# -----------------------------------------------------------------------------


class DendrogramParams(OpenRecord):
    linkage_matrix: Optional[Matrix] = None
    dist_threshold: Optional[float] = None
    labels: Optional[List[str]] = None
    last_merged_edge_color: Optional[str] = None


class DendrogramOutput(OpenRecord):
    result_plots: Optional[List[str]] = None


# -----------------------------------------------------------------------------
# build_biclusters
# -----------------------------------------------------------------------------


class BuildBiclustersParams(OpenRecord):
    """
    ndarray_ref - reference to the expression matrix object
    dist_threshold - threshold for forming flat clusters

    Optional: dist_metric, linkage_method, fcluster_criterion.
    """

    ndarray_ref: Optional[str] = None
    dist_threshold: Optional[float] = None
    dist_metric: Optional[str] = None
    linkage_method: Optional[str] = None
    fcluster_criterion: Optional[str] = None


class BuildBiclustersOutput(OpenRecord):
    """shock_id_list - external store ids of the bicluster feature sets (JSON)."""

    shock_id_list: Optional[List[str]] = None


# -----------------------------------------------------------------------------
# enrich_onthology
# -----------------------------------------------------------------------------


class EnrichOnthologyParams(OpenRecord):
    """
    sample_set - list of gene ids
    entity_term_set - entity terms dict, e.g. {'gene_1': ['GO:0005737']}
    propagation - include is_a relationships to all terms (1/0, default 1)
    """

    sample_set: Optional[List[str]] = None
    entity_term_set: Optional[Dict[str, List[str]]] = None
    propagation: Optional[int] = None


class EnrichOnthologyOutput(OpenRecord):
    """
    enrichment_profile - per term: sample_count, total_count, expected_count
    and p_value
    """

    enrichment_profile: Optional[Dict[str, Dict[str, Any]]] = None


# -----------------------------------------------------------------------------
# calc_onthology_dist / calc_weighted_onthology_dist
# -----------------------------------------------------------------------------


class CalcOnthologyDistParams(OpenRecord):
    """
    onthology_set - pairs of terms to measure, e.g.
        {'gene_1': ['GO:0005737', 'GO:0005623']}
    """

    onthology_set: Optional[Dict[str, List[str]]] = None


class CalcOnthologyDistOutput(OpenRecord):
    """
    onthology_dist_set - distance per key; inf when the two terms share no
    ancestor.
    """

    onthology_dist_set: Optional[Dict[str, float]] = None


__all__ = [
    "NewickParams",
    "NewickOutput",
    "PCAParams",
    "PCAOutput",
    "KmeansParams",
    "KmeansOutput",
    "PdistParams",
    "PdistOutput",
    "LinkageParams",
    "LinkageOutput",
    "FclusterParams",
    "FclusterOutput",
    "DendrogramParams",
    "DendrogramOutput",
    "BuildBiclustersParams",
    "BuildBiclustersOutput",
    "EnrichOnthologyParams",
    "EnrichOnthologyOutput",
    "CalcOnthologyDistParams",
    "CalcOnthologyDistOutput",
]
