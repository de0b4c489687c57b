from .matrix import Matrix, DenseMatrix
from .symmetric import SymmetricMatrix
from .diagonal import DiagonalMatrix
from .psd import SymmetricPositiveMatrix
from .decomposed import DecomposedSymmetricPositiveMatrix
from .decompositions import (
    Decomposition,
    LUDecomposition,
    QRDecomposition,
    CholeskyDecomposition,
)
from .dispatch import MatrixKind
from .visitors import MatrixPreservingVisitor, MatrixChangingVisitor
from .config import (
    LinalgContext,
    get_default_decomposition,
    set_default_decomposition,
)


__version__ = "0.1.0"


__all__ = [
    "Matrix",
    "DenseMatrix",
    "SymmetricMatrix",
    "DiagonalMatrix",
    "SymmetricPositiveMatrix",
    "DecomposedSymmetricPositiveMatrix",
    "Decomposition",
    "LUDecomposition",
    "QRDecomposition",
    "CholeskyDecomposition",
    "MatrixKind",
    "MatrixPreservingVisitor",
    "MatrixChangingVisitor",
    "LinalgContext",
    "get_default_decomposition",
    "set_default_decomposition",
]
