import torch

from .dispatch import MatrixKind, register_kind
from .exceptions import (
    NoDataError,
    NonZeroOffDiagonalError,
    NotPositiveError,
    NullArgumentError,
    SingularMatrixError,
)
from .symmetric import SymmetricMatrix
from .utils import (
    DTYPE,
    as_tensor_1d,
    check_dimension,
    check_matrix_index,
    check_sub_matrix_indices,
)


@register_kind(MatrixKind.DIAGONAL)
class DiagonalMatrix(SymmetricMatrix):
    def __init__(self, data, copy=True):
        r"""
        Diagonal matrix. Only the diagonal is stored

        Args:
            data (int or torch.Tensor or sequence): Either the dimension of a
                zero matrix or the diagonal entries
            copy (bool): Optional. Whether to copy a ``float64`` tensor or array.
                Default: ``True``
        """
        if isinstance(data, int) and not isinstance(data, bool):
            check_dimension(data)
            self._diagonal = torch.zeros(data, dtype=DTYPE)
            return
        if data is None:
            raise NullArgumentError("array")
        diagonal = as_tensor_1d(data, copy=copy)
        if diagonal.size(0) == 0:
            raise NoDataError("matrix must have at least one row")
        self._diagonal = diagonal

    @classmethod
    def from_tensor(cls, tensor):
        return cls(tensor.diagonal().clone(), copy=False)

    @classmethod
    def create_identity_matrix(cls, n):
        check_dimension(n)
        return cls(torch.ones(n, dtype=DTYPE), copy=False)

    @property
    def diagonal(self):
        return self._diagonal.clone()

    def _dense(self):
        return torch.diag(self._diagonal)

    @property
    def row_dimension(self):
        return self._diagonal.size(0)

    @property
    def column_dimension(self):
        return self._diagonal.size(0)

    def copy(self):
        return DiagonalMatrix(self._diagonal)

    def set_entry(self, row, column, value):
        check_matrix_index(self, row, column)
        if row == column:
            self._diagonal[row] = value
        elif value != 0.0:
            raise NonZeroOffDiagonalError(row, column, value)

    def add_to_entry(self, row, column, increment):
        check_matrix_index(self, row, column)
        if row == column:
            self._diagonal[row] += increment
        elif increment != 0.0:
            raise NonZeroOffDiagonalError(row, column, increment)

    def multiply_entry(self, row, column, factor):
        check_matrix_index(self, row, column)
        if row == column:
            self._diagonal[row] *= factor

    def is_diagonal(self, threshold=0.0):
        return True

    def is_singular(self, absolute_tolerance=None):
        r"""
        Returns whether a diagonal entry is zero

        Args:
            absolute_tolerance (float): Optional. Entries smaller than this value
                in absolute value are considered to be zero.
                Default: the smallest positive normal ``float64``
        """
        if absolute_tolerance is None:
            absolute_tolerance = torch.finfo(DTYPE).tiny
        return bool((self._diagonal.abs() <= absolute_tolerance).any())

    def scalar_add(self, d):
        return SymmetricMatrix.from_tensor(self._dense() + d)

    def scalar_multiply(self, d):
        return DiagonalMatrix(self._diagonal * d, copy=False)

    def power(self, p):
        if p < 0:
            raise NotPositiveError("exponent", p)
        if p == 0:
            return DiagonalMatrix.create_identity_matrix(self.row_dimension)
        return DiagonalMatrix(self._diagonal.pow(p), copy=False)

    def get_inverse(self, decomposition=None):
        # The inverse is computed entry-wise, decomposition is not used
        if self.is_singular():
            raise SingularMatrixError()
        return DiagonalMatrix(self._diagonal.reciprocal(), copy=False)

    def get_symmetric_sub_matrix_by_index(self, indices):
        # Repeated indices give non-diagonal principal sub-matrices
        check_sub_matrix_indices(self, indices, indices)
        return SymmetricMatrix.from_tensor(self._select(indices, indices))
