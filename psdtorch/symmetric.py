import torch

from . import decompositions
from .dispatch import MatrixKind, register_kind
from .exceptions import (
    DimensionMismatchError,
    NonSquareError,
    NonSymmetricMatrixError,
    NotPositiveError,
    UnsupportedOperationError,
)
from .matrix import Matrix, as_matrix
from .utils import (
    DTYPE,
    as_tensor_2d,
    check_dimension,
    check_matrix_index,
    check_multiplication_compatible,
    check_sub_matrix_indices,
    check_sub_matrix_range,
    equals_with_tolerances,
)


SYMMETRY_TYPES = ("lower", "upper", "mean")


@register_kind(MatrixKind.SYMMETRIC)
class SymmetricMatrix(Matrix):
    def __init__(self, data, symmetry="lower", tolerance=None, copy=True):
        r"""
        Symmetric matrix, stored as a full square tensor

        Args:
            data (int or torch.Tensor or sequence of sequences): Either the
                dimension of a zero matrix or its entries
            symmetry (str): Optional. How to make ``data`` symmetric. One of
                ``["lower", "upper", "mean"]``: keep the lower triangular part,
                the upper triangular part, or average ``data`` with its
                transpose. Default: ``"lower"``
            tolerance (float): Optional. If given, ``data`` has to be symmetric
                up to this absolute and relative tolerance.
                Default: ``None``, no check
            copy (bool): Optional. Whether to copy a ``float64`` tensor.
                Default: ``True``
        """
        if isinstance(data, int) and not isinstance(data, bool):
            check_dimension(data)
            self._data = torch.zeros(data, data, dtype=DTYPE)
            return
        X = as_tensor_2d(data, copy=copy)
        if X.size(0) != X.size(1):
            raise NonSquareError(X.size(0), X.size(1))
        if tolerance is not None:
            self.check_symmetric(X, tolerance)
        self._data = self.frame(X, symmetry)

    @classmethod
    def from_tensor(cls, tensor):
        obj = cls.__new__(cls)
        obj._data = cls.frame(tensor, "upper")
        return obj

    @staticmethod
    def frame(X, symmetry="lower"):
        if symmetry == "lower":
            return X.tril(0) + X.tril(-1).transpose(-2, -1)
        elif symmetry == "upper":
            return X.triu(0) + X.triu(1).transpose(-2, -1)
        elif symmetry == "mean":
            return 0.5 * (X + X.transpose(-2, -1))
        raise ValueError(
            "Argument symmetry was not recognized. Should be one of {}. "
            "Found {}".format(list(SYMMETRY_TYPES), symmetry)
        )

    @staticmethod
    def check_symmetric(X, tolerance):
        symmetric = equals_with_tolerances(X, X.transpose(-2, -1), tolerance, tolerance)
        if not symmetric.all():
            row, column = (~symmetric).nonzero()[0].tolist()
            raise NonSymmetricMatrixError(row, column, tolerance)

    @staticmethod
    def in_manifold(X, eps=1e-6):
        return (
            X.dim() == 2
            and X.size(-2) == X.size(-1)
            and torch.allclose(X, X.transpose(-2, -1), atol=eps)
        )

    @classmethod
    def create_identity_matrix(cls, n):
        check_dimension(n)
        return cls.from_tensor(torch.eye(n, dtype=DTYPE))

    def create_matrix(self, rows, columns):
        if rows != columns:
            raise DimensionMismatchError(columns, rows)
        return type(self)(rows)

    def _dense(self):
        return self._data

    @property
    def row_dimension(self):
        return self._data.size(0)

    @property
    def column_dimension(self):
        return self._data.size(0)

    def set_entry(self, row, column, value):
        check_matrix_index(self, row, column)
        self._data[row, column] = value
        self._data[column, row] = value

    def add_to_entry(self, row, column, increment):
        check_matrix_index(self, row, column)
        self.set_entry(row, column, self._data[row, column].item() + increment)

    def multiply_entry(self, row, column, factor):
        check_matrix_index(self, row, column)
        self.set_entry(row, column, self._data[row, column].item() * factor)

    def _check_changing_visitor(self):
        raise UnsupportedOperationError()

    def is_symmetric(self, relative_tolerance=None, absolute_tolerance=None):
        return True

    def transpose(self, force_copy=True):
        r"""
        A symmetric matrix is its own transpose

        Args:
            force_copy (bool): Optional. Whether to return a copy or the
                matrix itself. Default: ``True``
        """
        return self.copy() if force_copy else self

    def scalar_add(self, d):
        return SymmetricMatrix.from_tensor(self._dense() + d)

    def scalar_multiply(self, d):
        return SymmetricMatrix.from_tensor(self._dense() * d)

    def power(self, p):
        if p < 0:
            raise NotPositiveError("exponent", p)
        return SymmetricMatrix.from_tensor(torch.linalg.matrix_power(self._dense(), p))

    def get_inverse(self, decomposition=None):
        return SymmetricMatrix.from_tensor(
            decompositions.inverse(self._dense(), decomposition)
        )

    def _quadratic_product(self, m, is_transpose):
        m = as_matrix(m)
        X = m._dense()
        if is_transpose:
            check_multiplication_compatible(self, m)
            return X.transpose(-2, -1) @ self._dense() @ X
        check_multiplication_compatible(m, self)
        return X @ self._dense() @ X.transpose(-2, -1)

    def quadratic_multiplication(self, m, is_transpose=False):
        r"""
        Returns :math:`XSX^\intercal`, or :math:`X^\intercal SX` if
        ``is_transpose=True``

        Args:
            m (Matrix or torch.Tensor): The matrix :math:`X`
            is_transpose (bool): Optional. Default: ``False``
        """
        return SymmetricMatrix.from_tensor(self._quadratic_product(m, is_transpose))

    # Principal sub-matrices

    def get_symmetric_sub_matrix(self, start, end):
        r"""
        Returns the principal sub-matrix of the rows and columns
        ``start, ..., end``
        """
        check_sub_matrix_range(self, start, end, start, end)
        block = self._dense()[start : end + 1, start : end + 1]
        return type(self).from_tensor(block.clone())

    def get_symmetric_sub_matrix_by_index(self, indices):
        check_sub_matrix_indices(self, indices, indices)
        return type(self).from_tensor(self._select(indices, indices))

    def get_sub_matrix(self, start_row, end_row, start_column, end_column):
        if start_row == start_column and end_row == end_column:
            return self.get_symmetric_sub_matrix(start_row, end_row)
        return super().get_sub_matrix(start_row, end_row, start_column, end_column)

    def get_sub_matrix_by_index(self, selected_rows, selected_columns):
        if (
            selected_rows is not None
            and selected_columns is not None
            and list(selected_rows) == list(selected_columns)
        ):
            return self.get_symmetric_sub_matrix_by_index(selected_rows)
        return super().get_sub_matrix_by_index(selected_rows, selected_columns)

    def extra_repr(self):
        return "n={}".format(self.row_dimension)

