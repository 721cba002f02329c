# semspace/matrix/svd.py
"""
SVD Reducer / Projector

The decomposition itself is delegated to scipy or scikit-learn. This module
checks the requested rank, keeps the factors, and projects rows that were
left out of the factorization (compounds, held-out words) into the latent
space through the cached Sigma^-1 * V^t product.
"""
import logging
from dataclasses import dataclass
from threading import Lock

import numpy as np
from scipy.sparse import issparse
from scipy.sparse.linalg import svds
from sklearn.utils.extmath import randomized_svd

from semspace.exceptions import ConfigurationError, InvariantViolation, SVDError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SVDFactors:
    U: np.ndarray       # terms x k
    sigma: np.ndarray   # k, descending
    Vt: np.ndarray      # k x features

    @property
    def rank(self) -> int:
        return int(self.sigma.size)


class ScipySVDSolver:
    """Truncated SVD with ARPACK, falling back to a dense LAPACK solve when k is not below min(shape)."""
    name = 'scipy'

    def __init__(self, random_state=0):
        self.random_state = random_state

    def factorize(self, matrix, k: int) -> SVDFactors:
        if k < min(matrix.shape):
            rng = np.random.default_rng(self.random_state)
            v0 = rng.uniform(-1.0, 1.0, min(matrix.shape))
            U, sigma, Vt = svds(matrix.astype(np.float64), k=k, v0=v0)
        else:
            dense = matrix.toarray() if issparse(matrix) else np.asarray(matrix, dtype=np.float64)
            U, sigma, Vt = np.linalg.svd(dense, full_matrices=False)
            U, sigma, Vt = U[:, :k], sigma[:k], Vt[:k]

        order = np.argsort(-sigma, kind='stable')
        return SVDFactors(U=U[:, order], sigma=sigma[order], Vt=Vt[order])


class RandomizedSVDSolver:
    """Halko et al. randomized SVD from scikit-learn."""
    name = 'randomized'

    def __init__(self, random_state=0, n_iter='auto'):
        self.random_state = random_state
        self.n_iter = n_iter

    def factorize(self, matrix, k: int) -> SVDFactors:
        U, sigma, Vt = randomized_svd(matrix.astype(np.float64), n_components=k,
                                      n_iter=self.n_iter, random_state=self.random_state)
        return SVDFactors(U=U, sigma=sigma, Vt=Vt)


SOLVER_CLASSES = {
    'scipy': ScipySVDSolver,
    'randomized': RandomizedSVDSolver
}


def get_svd_solver(name='auto'):
    if hasattr(name, 'factorize'):
        return name
    if name == 'auto':
        name = 'scipy'
    try:
        return SOLVER_CLASSES[name]()
    except KeyError:
        raise ConfigurationError(
            f"Unknown SVD solver: {name}. Expected one of {sorted(SOLVER_CLASSES) + ['auto']}"
        ) from None


class ProjectionCache:
    """
    Lazily computed projection product.

    side='rows' caches Sigma^-1 * V^t, used to place new rows of the
    factorized matrix. side='columns' caches U * Sigma^-1, used to fold in new
    columns. The product is built on first use and rebuilt after
    invalidate(). Callers never see the difference between a hit and a
    recomputation.
    """
    SIDES = ('rows', 'columns')

    def __init__(self, factors: SVDFactors, side: str = 'rows'):
        if side not in self.SIDES:
            raise ValueError(f"Unknown projection side: {side}")
        self._factors = factors
        self.side = side
        self._value = None
        self._lock = Lock()
        self.computations = 0

    def _compute(self) -> np.ndarray:
        if self.side == 'rows':
            return self._factors.Vt / self._factors.sigma[:, np.newaxis]
        return self._factors.U / self._factors.sigma

    def get(self) -> np.ndarray:
        value = self._value
        if value is not None:
            return value
        with self._lock:
            if self._value is None:
                self._value = self._compute()
                self.computations += 1
            return self._value

    def invalidate(self):
        with self._lock:
            self._value = None

    @property
    def cached(self) -> bool:
        return self._value is not None


class SVDReducer:
    """
    Args:
        dimensions (int): Target rank k
        solver: 'auto', 'scipy', 'randomized' or an object with factorize(matrix, k)
        scale_by_singular_values (bool): Word space is U * Sigma instead of U
    """

    def __init__(self, dimensions: int, solver='auto', scale_by_singular_values: bool = False):
        if dimensions <= 0:
            raise ConfigurationError(f"SVD rank must be positive, got {dimensions}")
        self.dimensions = dimensions
        self.solver = get_svd_solver(solver)
        self.scale_by_singular_values = scale_by_singular_values
        self.factors = None
        self._cache = None
        self._column_cache = None

    @classmethod
    def from_factors(cls, factors: SVDFactors, scale_by_singular_values: bool = False) -> 'SVDReducer':
        reducer = cls(factors.rank, scale_by_singular_values=scale_by_singular_values)
        reducer._set_factors(factors)
        return reducer

    def _set_factors(self, factors: SVDFactors):
        if np.any(factors.sigma == 0):
            raise SVDError("Singular value of exactly 0 returned by the solver; Sigma cannot be inverted")
        self.factors = factors
        self._cache = ProjectionCache(factors, side='rows')
        self._column_cache = ProjectionCache(factors, side='columns')

    @property
    def projection_cache(self) -> ProjectionCache:
        if self._cache is None:
            raise InvariantViolation("SVDReducer has not been fitted")
        return self._cache

    def reduce(self, matrix) -> np.ndarray:
        """Factorizes matrix and returns the word space."""
        n_rows, n_cols = matrix.shape
        if self.dimensions > n_cols:
            raise ConfigurationError(
                f"Cannot reduce to {self.dimensions} dimensions: the matrix has only {n_cols} columns"
            )
        if self.dimensions > n_rows:
            raise ConfigurationError(
                f"Cannot reduce to {self.dimensions} dimensions: the matrix has only {n_rows} rows"
            )

        logger.info("Reducing a %dx%d matrix to %d dimensions with %s",
                    n_rows, n_cols, self.dimensions, type(self.solver).__name__)
        self._set_factors(self.solver.factorize(matrix, self.dimensions))
        return self.word_space()

    def word_space(self) -> np.ndarray:
        factors = self.factors
        if factors is None:
            raise InvariantViolation("SVDReducer has not been fitted")
        if self.scale_by_singular_values:
            return factors.U * factors.sigma
        return factors.U

    def project(self, rows) -> np.ndarray:
        """
        Projects transformed rows into the latent space.

        Args:
            rows: n x features matrix in the factorized feature space

        Returns:
            np.ndarray: n x k latent rows, comparable with word_space()
        """
        projection = self.projection_cache.get()
        if rows.shape[1] != projection.shape[1]:
            raise InvariantViolation(
                f"Rows have {rows.shape[1]} features, the factorization has {projection.shape[1]}"
            )
        latent = np.asarray(rows @ projection.T)
        if self.scale_by_singular_values:
            latent = latent * self.factors.sigma
        return latent

    @property
    def column_projection_cache(self) -> ProjectionCache:
        if self._column_cache is None:
            raise InvariantViolation("SVDReducer has not been fitted")
        return self._column_cache

    def column_space(self) -> np.ndarray:
        """Latent vectors of the factorized columns: V, or V * Sigma when scaled."""
        factors = self.factors
        if factors is None:
            raise InvariantViolation("SVDReducer has not been fitted")
        space = factors.Vt.T
        if self.scale_by_singular_values:
            return space * factors.sigma
        return space

    def project_columns(self, columns) -> np.ndarray:
        """
        Folds new columns of the factorized matrix into the latent space.

        Args:
            columns: n x rows matrix, one transformed column per row

        Returns:
            np.ndarray: n x k latent vectors, comparable with column_space()
        """
        projection = self.column_projection_cache.get()
        if columns.shape[1] != projection.shape[0]:
            raise InvariantViolation(
                f"Columns have {columns.shape[1]} entries, the factorization has {projection.shape[0]} rows"
            )
        latent = np.asarray(columns @ projection)
        if self.scale_by_singular_values:
            latent = latent * self.factors.sigma
        return latent
