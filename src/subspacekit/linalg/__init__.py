"""Dense matrix container and symmetric eigen-solver wrappers."""

from subspacekit.linalg.eigen import EigenDecomposition, EigenStrategy, eigen, generalized_eigen
from subspacekit.linalg.matrix import DenseMatrix

__all__ = [
    "DenseMatrix",
    "EigenDecomposition",
    "EigenStrategy",
    "eigen",
    "generalized_eigen",
]
