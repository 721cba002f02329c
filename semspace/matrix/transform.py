# semspace/matrix/transform.py
"""
Matrix Transforms

Each transform is fitted once on a matrix. The fitted statistics are frozen
and every later call, whether on the whole matrix or on a single row,
scores against that same snapshot. Transforming row i of the fitted matrix
with transform_row gives row i of transform(matrix).

CorrelationTransform:
    z = (T*v - r*c) / sqrt(r*(T - r)*c*(T - c)), output sqrt(z) when z > 0 else 0

TfLogIdfTransform:
    ln(v + 1) * ln(columns / (nonzero(row) + 1))
"""
import logging
from dataclasses import dataclass

import numpy as np
from scipy.sparse import csr_matrix, issparse

from semspace.exceptions import ConfigurationError, InvariantViolation

logger = logging.getLogger(__name__)


def _readonly(array: np.ndarray) -> np.ndarray:
    array = np.array(array, dtype=np.float64).ravel()
    array.setflags(write=False)
    return array


@dataclass(frozen=True)
class MatrixStatistics:
    row_sums: np.ndarray
    col_sums: np.ndarray
    total: float
    row_nonzeros: np.ndarray
    n_rows: int
    n_cols: int

    @classmethod
    def from_matrix(cls, matrix) -> 'MatrixStatistics':
        matrix = csr_matrix(matrix).astype(np.float64, copy=True)
        matrix.eliminate_zeros()
        return cls(
            row_sums=_readonly(matrix.sum(axis=1)),
            col_sums=_readonly(matrix.sum(axis=0)),
            total=float(matrix.sum()),
            row_nonzeros=_readonly(np.diff(matrix.indptr)),
            n_rows=matrix.shape[0],
            n_cols=matrix.shape[1]
        )


class BaseTransform:
    name = 'base'

    def __init__(self):
        self._statistics = None

    @property
    def statistics(self) -> MatrixStatistics:
        if self._statistics is None:
            raise InvariantViolation(f"{type(self).__name__} used before it was fitted")
        return self._statistics

    @property
    def fitted(self) -> bool:
        return self._statistics is not None

    def fit(self, matrix) -> 'BaseTransform':
        if self._statistics is not None:
            raise InvariantViolation(f"{type(self).__name__} statistics are already computed")
        self._statistics = MatrixStatistics.from_matrix(matrix)
        logger.debug("%s fitted on a %dx%d matrix", type(self).__name__,
                     self._statistics.n_rows, self._statistics.n_cols)
        return self

    def transform(self, matrix) -> csr_matrix:
        """Transforms every row of matrix, fitting the statistics on it first if needed."""
        matrix = self._as_csr(matrix)
        if self._statistics is None:
            self.fit(matrix)
        self._check_width(matrix)
        stats = self.statistics
        if matrix.shape[0] != stats.n_rows:
            raise InvariantViolation("transform() expects the matrix the statistics were computed from")

        coo = matrix.tocoo()
        values = self._apply(coo.data, stats.row_sums[coo.row], stats.col_sums[coo.col],
                             stats.row_nonzeros[coo.row])
        return self._rebuild(values, coo, matrix.shape)

    def transform_row(self, row) -> csr_matrix:
        """Transforms a single 1 x columns row against the fitted statistics."""
        row = self._as_csr(row)
        if row.shape[0] != 1:
            raise InvariantViolation(f"transform_row expects a single row, got shape {row.shape}")
        self._check_width(row)

        coo = row.tocoo()
        row_sum = np.full(coo.nnz, coo.data.sum())
        row_nonzeros = np.full(coo.nnz, float(np.count_nonzero(coo.data)))
        values = self._apply(coo.data, row_sum, self.statistics.col_sums[coo.col], row_nonzeros)
        return self._rebuild(values, coo, row.shape)

    def transform_rows(self, matrix) -> csr_matrix:
        """Transforms each row of a matrix that was not part of the fit."""
        matrix = self._as_csr(matrix)
        self._check_width(matrix)
        if matrix.shape[0] == 0:
            return csr_matrix(matrix.shape, dtype=np.float64)

        coo = matrix.tocoo()
        row_sums = np.asarray(matrix.sum(axis=1), dtype=np.float64).ravel()
        row_nonzeros = np.diff(matrix.indptr).astype(np.float64)
        values = self._apply(coo.data, row_sums[coo.row], self.statistics.col_sums[coo.col],
                             row_nonzeros[coo.row])
        return self._rebuild(values, coo, matrix.shape)

    def transform_column(self, column) -> csr_matrix:
        """
        Transforms a single rows x 1 column that was not part of the fit.

        Row statistics come from the fitted snapshot, the column sum from the
        column itself, so column j of the fitted matrix transforms to column j
        of transform(matrix).
        """
        column = self._as_csr(column)
        stats = self.statistics
        if column.shape != (stats.n_rows, 1):
            raise InvariantViolation(
                f"transform_column expects a {stats.n_rows} x 1 column, got shape {column.shape}"
            )

        coo = column.tocoo()
        col_sum = np.full(coo.nnz, coo.data.sum())
        values = self._apply(coo.data, stats.row_sums[coo.row], col_sum, stats.row_nonzeros[coo.row])
        return self._rebuild(values, coo, column.shape)

    def transform_cell(self, row: int, col: int, value: float) -> float:
        """Scores one cell of the fitted matrix."""
        stats = self.statistics
        result = self._apply(np.array([value], dtype=np.float64), np.array([stats.row_sums[row]]),
                             np.array([stats.col_sums[col]]), np.array([stats.row_nonzeros[row]]))
        return float(result[0])

    def _apply(self, values, row_sums, col_sums, row_nonzeros) -> np.ndarray:
        raise NotImplementedError("Subclasses must implement _apply()")

    @staticmethod
    def _as_csr(matrix) -> csr_matrix:
        if not issparse(matrix):
            raise InvariantViolation(f"Expected a sparse matrix, got {type(matrix).__name__}")
        matrix = matrix.tocsr().astype(np.float64, copy=True)
        matrix.eliminate_zeros()
        return matrix

    def _check_width(self, matrix):
        if matrix.shape[1] != self.statistics.n_cols:
            raise InvariantViolation(
                f"Row width {matrix.shape[1]} does not match the {self.statistics.n_cols} fitted columns"
            )

    @staticmethod
    def _rebuild(values, coo, shape) -> csr_matrix:
        result = csr_matrix((values, (coo.row, coo.col)), shape=shape, dtype=np.float64)
        result.eliminate_zeros()
        return result

    def __repr__(self):
        return f"{type(self).__name__}()"


class NoTransform(BaseTransform):
    name = 'none'

    def _apply(self, values, row_sums, col_sums, row_nonzeros):
        return np.array(values, dtype=np.float64)


class CorrelationTransform(BaseTransform):
    name = 'correlation'

    def _apply(self, values, row_sums, col_sums, row_nonzeros):
        total = self.statistics.total

        numerator = total * values - row_sums * col_sums
        denominator = row_sums * (total - row_sums) * col_sums * (total - col_sums)

        z = np.zeros_like(numerator, dtype=np.float64)
        valid = (denominator > 0) & (values != 0)
        np.divide(numerator, np.sqrt(denominator, where=valid, out=np.ones_like(denominator)),
                  out=z, where=valid)
        return np.sqrt(np.clip(z, 0.0, None))


class TfLogIdfTransform(BaseTransform):
    name = 'tflogidf'

    def _apply(self, values, row_sums, col_sums, row_nonzeros):
        n_cols = self.statistics.n_cols
        tf = np.log(values + 1.0)
        idf = np.log(n_cols / (row_nonzeros + 1.0))
        out = tf * idf
        out[values == 0] = 0.0
        return out


class TransformFactory:
    TRANSFORM_CLASSES = {
        "correlation": CorrelationTransform,
        "tflogidf": TfLogIdfTransform,
        "none": NoTransform
    }

    @staticmethod
    def create_transform(name) -> BaseTransform:
        if name is None:
            return NoTransform()
        if isinstance(name, BaseTransform):
            return name
        try:
            return TransformFactory.TRANSFORM_CLASSES[name]()
        except KeyError:
            raise ConfigurationError(
                f"Unknown transform: {name}. Expected one of {sorted(TransformFactory.TRANSFORM_CLASSES)}"
            ) from None
