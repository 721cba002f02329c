# semspace/matrix/masked.py
from typing import Sequence, Tuple

import numpy as np
from scipy.sparse import csr_matrix, issparse


class CellMaskedSparseMatrix:
    """
    Read-only view of a sparse matrix restricted to selected rows and columns.

    row_mask[new_row] and col_mask[new_col] give the index in the backing
    matrix. The backing data is never copied until to_csr() is called.
    """

    def __init__(self, matrix, row_mask: Sequence[int], col_mask: Sequence[int]):
        if not issparse(matrix):
            raise TypeError("CellMaskedSparseMatrix requires a scipy sparse matrix")
        self._matrix = matrix.tocsr()
        self.row_mask = np.asarray(row_mask, dtype=np.int64)
        self.col_mask = np.asarray(col_mask, dtype=np.int64)

        n_rows, n_cols = self._matrix.shape
        if self.row_mask.size and (self.row_mask.min() < 0 or self.row_mask.max() >= n_rows):
            raise IndexError("row mask refers to rows outside the backing matrix")
        if self.col_mask.size and (self.col_mask.min() < 0 or self.col_mask.max() >= n_cols):
            raise IndexError("column mask refers to columns outside the backing matrix")

    @property
    def shape(self) -> Tuple[int, int]:
        return (int(self.row_mask.size), int(self.col_mask.size))

    @property
    def backing(self):
        return self._matrix

    def to_csr(self) -> csr_matrix:
        """Materializes the view with rows and columns in mask order."""
        return self._matrix[self.row_mask][:, self.col_mask].tocsr()

    def __repr__(self):
        return f"CellMaskedSparseMatrix(shape={self.shape}, backing={self._matrix.shape})"
