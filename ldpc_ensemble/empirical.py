"""Empirical degree distributions of a concrete parity-check matrix."""

from __future__ import annotations

import logging

import numba
import numpy as np

from ldpc_ensemble.degree_distribution import DegreeDistribution, DistributionConfig
from ldpc_ensemble.ensemble import Ensemble
from ldpc_ensemble.errors import InconsistentGraphError
from ldpc_ensemble.parity import DenseParityCheck, ParityCheckMatrix

logger = logging.getLogger(__name__)


@numba.njit(cache=True)
def _weight_histogram(weights: np.ndarray, max_weight: int) -> np.ndarray:
    """JIT-compiled histogram: entry ``w`` counts the nodes of weight ``w``."""
    counts = np.zeros(max_weight + 1, dtype=np.int64)
    for w in weights:
        counts[w] += 1
    return counts


def _as_weights(values: np.ndarray, what: str) -> np.ndarray:
    """Check that node weights are non-negative whole numbers and cast them to int64."""
    weights = np.asarray(values).ravel()
    if len(weights) and not (np.issubdtype(weights.dtype, np.integer) or np.issubdtype(weights.dtype, np.floating)):
        msg = f"{what} weights must be numeric, got dtype {weights.dtype}"
        raise InconsistentGraphError(msg)
    as_float = weights.astype(np.float64)
    if not np.all(np.isfinite(as_float)) or np.any(as_float != np.round(as_float)):
        msg = f"{what} weights must be whole numbers, got {weights.tolist()}"
        raise InconsistentGraphError(msg)
    if np.any(as_float < 0):
        msg = f"{what} weights must be non-negative, got {weights.tolist()}"
        raise InconsistentGraphError(msg)
    return weights.astype(np.int64)


def _edge_distribution(weights: np.ndarray, num_edges: int, config: DistributionConfig) -> DegreeDistribution:
    """Edge-perspective distribution: mass of degree d is d * (nodes of degree d) / edges."""
    counts = _weight_histogram(weights, int(weights.max()))
    degrees = np.arange(len(counts), dtype=np.int64)
    edge_mass = degrees * counts / num_edges
    return DegreeDistribution.from_dense(edge_mass[1:], config)


def get_empirical_ensemble(
    h: ParityCheckMatrix | np.ndarray,
    config: DistributionConfig | None = None,
) -> Ensemble:
    """Derive the ensemble of a parity-check matrix from its row and column weights.

    Rows are check nodes and columns are variable nodes. Row and column
    weights must add up to the same number of edges.
    """
    if not isinstance(h, ParityCheckMatrix):
        h = DenseParityCheck(h)
    config = config or DistributionConfig()

    row_weights = _as_weights(h.row_weights(), "Row")
    col_weights = _as_weights(h.col_weights(), "Column")

    row_edges = int(np.sum(row_weights))
    col_edges = int(np.sum(col_weights))
    if row_edges != col_edges:
        msg = f"Row weights sum to {row_edges} edges but column weights sum to {col_edges}"
        raise InconsistentGraphError(msg)
    if row_edges == 0:
        msg = "Parity-check matrix has no nonzero entries"
        raise InconsistentGraphError(msg)

    rho = _edge_distribution(row_weights, row_edges, config)
    lam = _edge_distribution(col_weights, col_edges, config)
    logger.debug(
        "Extracted ensemble from %d checks x %d variables with %d edges",
        len(row_weights),
        len(col_weights),
        row_edges,
    )
    return Ensemble.from_distributions(lam, rho, config)
