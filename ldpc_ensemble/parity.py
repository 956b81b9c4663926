"""Parity-check matrices as seen by the ensemble extractor."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

import numpy as np
import pyldpc
from scipy import sparse

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray

_MATRIX_NDIM = 2


@runtime_checkable
class ParityCheckMatrix(Protocol):
    """Protocol for a parity-check matrix that can count its nonzeros."""

    def row_weights(self) -> np.ndarray:
        """Number of nonzero entries in each row (check node degrees)."""
        ...

    def col_weights(self) -> np.ndarray:
        """Number of nonzero entries in each column (variable node degrees)."""
        ...


class DenseParityCheck:
    """Parity-check matrix backed by a numpy array or a scipy sparse matrix."""

    def __init__(self, h_mat: ArrayLike | sparse.spmatrix | sparse.sparray) -> None:
        """Wrap a two-dimensional binary matrix."""
        if sparse.issparse(h_mat):
            self.h_mat = sparse.csr_matrix(h_mat, copy=True)
            self.h_mat.eliminate_zeros()
        else:
            self.h_mat = np.asarray(h_mat)
        if self.h_mat.ndim != _MATRIX_NDIM:
            msg = f"Parity-check matrix must be two-dimensional, got shape {self.h_mat.shape}"
            raise ValueError(msg)

    @classmethod
    def regular(cls, n: int, d_v: int, d_c: int, seed: int | None = None) -> DenseParityCheck:
        """Random (d_v, d_c)-regular Gallager parity-check matrix with ``n`` columns.

        Requires ``d_c > d_v >= 2`` and ``n`` divisible by ``d_c``.
        """
        return cls(pyldpc.parity_check_matrix(n, d_v, d_c, seed=seed))

    @property
    def shape(self) -> tuple[int, int]:
        return self.h_mat.shape

    def row_weights(self) -> NDArray[np.int64]:
        """Nonzeros per row."""
        if sparse.issparse(self.h_mat):
            return np.asarray(self.h_mat.getnnz(axis=1), dtype=np.int64)
        return np.count_nonzero(self.h_mat, axis=1).astype(np.int64)

    def col_weights(self) -> NDArray[np.int64]:
        """Nonzeros per column."""
        if sparse.issparse(self.h_mat):
            return np.asarray(self.h_mat.getnnz(axis=0), dtype=np.int64)
        return np.count_nonzero(self.h_mat, axis=0).astype(np.int64)
