# semspace/matrix/__init__.py
from semspace.matrix.masked import CellMaskedSparseMatrix
from semspace.matrix.builder import MatrixBuilder, ReducedMatrices, retained_count
from semspace.matrix.transform import (
    MatrixStatistics, BaseTransform, NoTransform, CorrelationTransform, TfLogIdfTransform, TransformFactory
)
from semspace.matrix.svd import (
    SVDFactors, ScipySVDSolver, RandomizedSVDSolver, get_svd_solver, ProjectionCache, SVDReducer
)

__all__ = [
    'CellMaskedSparseMatrix',
    'MatrixBuilder',
    'ReducedMatrices',
    'retained_count',
    'MatrixStatistics',
    'BaseTransform',
    'NoTransform',
    'CorrelationTransform',
    'TfLogIdfTransform',
    'TransformFactory',
    'SVDFactors',
    'ScipySVDSolver',
    'RandomizedSVDSolver',
    'get_svd_solver',
    'ProjectionCache',
    'SVDReducer'
]
