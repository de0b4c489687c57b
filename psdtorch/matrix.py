import torch

from . import config, decompositions, dispatch
from .dispatch import MatrixKind, register_kind
from .exceptions import (
    DimensionMismatchError,
    MatrixDimensionMismatchError,
    NotPositiveError,
    NullArgumentError,
    UnsupportedOperationError,
)
from .utils import (
    DTYPE,
    _extra_repr,
    as_tensor_1d,
    as_tensor_2d,
    check_addition_compatible,
    check_column_index,
    check_dimension,
    check_matrix_index,
    check_multiplication_compatible,
    check_row_index,
    check_square,
    check_sub_matrix_indices,
    check_sub_matrix_range,
    copy_block,
    equals_with_tolerances,
)
from .visitors import MatrixChangingVisitor, column_order, optimized_order, row_order


def as_matrix(m):
    r"""
    Returns ``m`` if it is a :class:`Matrix`, otherwise wraps it into a
    :class:`DenseMatrix` without copying it
    """
    if m is None:
        raise NullArgumentError("matrix")
    if isinstance(m, Matrix):
        return m
    return DenseMatrix(m, copy=False)


class Matrix:
    r"""
    Base class of the matrices of the package.

    Subclasses provide the dimensions, the dense form through ``_dense()`` and
    a ``from_tensor`` classmethod. Every operation that can be computed on the
    dense form is implemented here. Results of binary operations are typed
    according to the tables in :mod:`psdtorch.dispatch`.
    """

    kind = None

    @classmethod
    def from_tensor(cls, tensor):
        raise NotImplementedError()

    def _dense(self):
        r"""
        Dense form of the matrix. The returned tensor must not be modified
        """
        raise NotImplementedError()

    @property
    def row_dimension(self):
        raise NotImplementedError()

    @property
    def column_dimension(self):
        raise NotImplementedError()

    @property
    def shape(self):
        return (self.row_dimension, self.column_dimension)

    def create_matrix(self, rows, columns):
        return DenseMatrix.zeros(rows, columns)

    def copy(self):
        return type(self).from_tensor(self._dense().clone())

    # Entries

    def get_data(self):
        return self._dense().clone()

    def get_entry(self, row, column):
        check_matrix_index(self, row, column)
        return self._dense()[row, column].item()

    def __getitem__(self, index):
        row, column = index
        return self.get_entry(row, column)

    def set_entry(self, row, column, value):
        raise UnsupportedOperationError()

    def add_to_entry(self, row, column, increment):
        raise UnsupportedOperationError()

    def multiply_entry(self, row, column, factor):
        raise UnsupportedOperationError()

    def set_row(self, row, array):
        raise UnsupportedOperationError()

    def set_column(self, column, array):
        raise UnsupportedOperationError()

    def set_row_matrix(self, row, matrix):
        raise UnsupportedOperationError()

    def set_column_matrix(self, column, matrix):
        raise UnsupportedOperationError()

    def set_sub_matrix(self, sub_matrix, row, column):
        raise UnsupportedOperationError()

    # Rows, columns and sub-matrices

    def get_row(self, row):
        check_row_index(self, row)
        return self._dense()[row].clone()

    def get_row_matrix(self, row):
        return DenseMatrix.from_tensor(self.get_row(row).unsqueeze(0))

    def get_column(self, column):
        check_column_index(self, column)
        return self._dense()[:, column].clone()

    def get_column_matrix(self, column):
        return DenseMatrix.from_tensor(self.get_column(column).unsqueeze(1))

    def get_sub_matrix(self, start_row, end_row, start_column, end_column):
        r"""
        Returns the block of rows ``start_row, ..., end_row`` and columns
        ``start_column, ..., end_column``. Both ranges are inclusive
        """
        check_sub_matrix_range(self, start_row, end_row, start_column, end_column)
        block = self._dense()[start_row : end_row + 1, start_column : end_column + 1]
        return DenseMatrix.from_tensor(block.clone())

    def get_sub_matrix_by_index(self, selected_rows, selected_columns):
        check_sub_matrix_indices(self, selected_rows, selected_columns)
        return DenseMatrix.from_tensor(self._select(selected_rows, selected_columns))

    def _select(self, selected_rows, selected_columns):
        X = self._dense()
        rows = torch.as_tensor(selected_rows, dtype=torch.long, device=X.device)
        columns = torch.as_tensor(selected_columns, dtype=torch.long, device=X.device)
        return X.index_select(0, rows).index_select(1, columns)

    def copy_sub_matrix(
        self,
        start_row,
        end_row,
        start_column,
        end_column,
        destination,
        start_row_destination=0,
        start_column_destination=0,
    ):
        r"""
        Copies a block of the matrix into ``destination``

        Args:
            start_row (int): First row of the block
            end_row (int): Last row of the block (inclusive)
            start_column (int): First column of the block
            end_column (int): Last column of the block (inclusive)
            destination (list of lists or torch.Tensor): Container receiving
                the block
            start_row_destination (int): Optional. Row of ``destination`` where
                the block starts. Default: ``0``
            start_column_destination (int): Optional. Column of
                ``destination`` where the block starts. Default: ``0``
        """
        check_sub_matrix_range(self, start_row, end_row, start_column, end_column)
        block = self._dense()[start_row : end_row + 1, start_column : end_column + 1]
        copy_block(block, destination, start_row_destination, start_column_destination)

    def copy_sub_matrix_by_index(
        self,
        selected_rows,
        selected_columns,
        destination,
        start_row_destination=0,
        start_column_destination=0,
    ):
        check_sub_matrix_indices(self, selected_rows, selected_columns)
        block = self._select(selected_rows, selected_columns)
        copy_block(block, destination, start_row_destination, start_column_destination)

    # Concatenation

    def concatenate_horizontally(self, m, right_concatenation=True):
        r"""
        Returns ``[self, m]``, or ``[m, self]`` if ``right_concatenation=False``
        """
        m = as_matrix(m)
        if m.row_dimension != self.row_dimension:
            raise DimensionMismatchError(m.row_dimension, self.row_dimension)
        blocks = [self._dense(), m._dense()]
        if not right_concatenation:
            blocks.reverse()
        return DenseMatrix.from_tensor(torch.cat(blocks, dim=1))

    def concatenate_vertically(self, m, lower_concatenation=True):
        m = as_matrix(m)
        if m.column_dimension != self.column_dimension:
            raise DimensionMismatchError(m.column_dimension, self.column_dimension)
        blocks = [self._dense(), m._dense()]
        if not lower_concatenation:
            blocks.reverse()
        return DenseMatrix.from_tensor(torch.cat(blocks, dim=0))

    def concatenate_diagonally(
        self, m, right_concatenation=True, lower_concatenation=True
    ):
        r"""
        Returns a block matrix with ``self`` and ``m`` on its block diagonal or
        anti-diagonal, and zeros elsewhere

        Args:
            m (Matrix): Matrix to concatenate
            right_concatenation (bool): Optional. Whether ``m`` goes to the
                right of ``self``. Default: ``True``
            lower_concatenation (bool): Optional. Whether ``m`` goes below
                ``self``. Default: ``True``
        """
        m = as_matrix(m)
        r1, c1 = self.shape
        r2, c2 = m.shape
        X = self._dense()
        out = X.new_zeros(r1 + r2, c1 + c2)
        row = 0 if lower_concatenation else r2
        column = 0 if right_concatenation else c2
        out[row : row + r1, column : column + c1] = X
        row = r1 if lower_concatenation else 0
        column = c1 if right_concatenation else 0
        out[row : row + r2, column : column + c2] = m._dense()
        return DenseMatrix.from_tensor(out)

    # Arithmetic

    def add(self, m):
        m = as_matrix(m)
        check_addition_compatible(self, m)
        return dispatch.addition(self, m)

    def subtract(self, m):
        m = as_matrix(m)
        check_addition_compatible(self, m)
        return dispatch.subtraction(self, m)

    def multiply(self, m, to_transpose=False, d=1.0):
        r"""
        Returns :math:`d \cdot AM` or :math:`d \cdot AM^\intercal`

        Args:
            m (Matrix): Right operand
            to_transpose (bool): Optional. Whether to multiply by the
                transpose of ``m``. Default: ``False``
            d (float): Optional. Scalar factor. Default: ``1.``
        """
        m = as_matrix(m)
        check_multiplication_compatible(self, m, to_transpose)
        if to_transpose:
            m = m.transpose()
        out = dispatch.multiplication(self, m)
        if d != 1.0:
            out = out.scalar_multiply(d)
        return out

    def pre_multiply(self, m):
        m = as_matrix(m)
        check_multiplication_compatible(m, self)
        return dispatch.multiplication(m, self)

    def operate(self, vector):
        v = as_tensor_1d(vector)
        if v.size(0) != self.column_dimension:
            raise DimensionMismatchError(v.size(0), self.column_dimension)
        return self._dense() @ v

    def pre_multiply_vector(self, vector):
        v = as_tensor_1d(vector)
        if v.size(0) != self.row_dimension:
            raise DimensionMismatchError(v.size(0), self.row_dimension)
        return v @ self._dense()

    def scalar_add(self, d):
        return type(self).from_tensor(self._dense() + d)

    def scalar_multiply(self, d):
        return type(self).from_tensor(self._dense() * d)

    def power(self, p):
        check_square(self)
        if p < 0:
            raise NotPositiveError("exponent", p)
        return type(self).from_tensor(torch.linalg.matrix_power(self._dense(), p))

    def transpose(self):
        return DenseMatrix.from_tensor(self._dense().transpose(-2, -1).clone())

    def get_inverse(self, decomposition=None):
        r"""
        Returns the inverse of the matrix

        Args:
            decomposition (str or callable): Optional. Strategy used to invert
                the matrix. Default: the configured default decomposition
        """
        check_square(self)
        return type(self).from_tensor(
            decompositions.inverse(self._dense(), decomposition)
        )

    def __add__(self, other):
        return self.add(other)

    def __sub__(self, other):
        return self.subtract(other)

    def __matmul__(self, other):
        return self.multiply(other)

    # Norms and predicates

    def get_min(self):
        return self._dense().min().item()

    def get_max(self):
        return self._dense().max().item()

    def get_trace(self):
        check_square(self)
        return self._dense().trace().item()

    def get_norm(self):
        r"""
        Maximum absolute column sum
        """
        return self._dense().abs().sum(dim=0).max().item()

    def get_frobenius_norm(self):
        return torch.linalg.matrix_norm(self._dense(), "fro").item()

    def is_square(self):
        return self.row_dimension == self.column_dimension

    def is_diagonal(self, threshold=0.0):
        if not self.is_square():
            return False
        X = self._dense()
        off_diagonal = X - torch.diag_embed(X.diagonal())
        return bool((off_diagonal.abs() <= threshold).all())

    def is_symmetric(self, relative_tolerance=None, absolute_tolerance=None):
        r"""
        Returns whether the matrix is symmetric within tolerances

        Args:
            relative_tolerance (float): Optional.
                Default: ``config.linalg_config.symmetry_tolerance``
            absolute_tolerance (float): Optional.
                Default: ``config.linalg_config.symmetry_tolerance``
        """
        if relative_tolerance is None:
            relative_tolerance = config.linalg_config.symmetry_tolerance
        if absolute_tolerance is None:
            absolute_tolerance = config.linalg_config.symmetry_tolerance
        if not self.is_square():
            return False
        X = self._dense()
        return bool(
            equals_with_tolerances(
                X, X.transpose(-2, -1), relative_tolerance, absolute_tolerance
            ).all()
        )

    def is_antisymmetric(self, relative_tolerance, absolute_tolerance):
        r"""
        Returns whether :math:`M^\intercal = -M` within tolerances

        The diagonal entries have to be smaller than ``absolute_tolerance`` in
        absolute value. The off-diagonal entries are compared with
        :func:`~psdtorch.utils.equals_with_tolerances`.
        """
        if not self.is_square():
            return False
        X = self._dense()
        if not (X.diagonal().abs() <= absolute_tolerance).all():
            return False
        return bool(
            equals_with_tolerances(
                X, -X.transpose(-2, -1), relative_tolerance, absolute_tolerance
            )
            .logical_or(torch.eye(X.size(0), dtype=torch.bool, device=X.device))
            .all()
        )

    def is_orthogonal(self, normality_threshold, orthogonality_threshold):
        r"""
        Returns whether the columns of the matrix are orthonormal

        Args:
            normality_threshold (float): Largest relative difference allowed
                between the norm of a column and ``1``
            orthogonality_threshold (float): Largest dot product allowed
                between two different columns, in absolute value
        """
        if not self.is_square():
            return False
        columns = [self.get_column(j) for j in range(self.column_dimension)]
        for column in columns:
            norm = torch.linalg.vector_norm(column).item()
            if not abs((norm - 1.0) / max(norm, 1.0)) <= normality_threshold:
                return False
        for i in range(len(columns)):
            for j in range(i + 1, len(columns)):
                dot = torch.dot(columns[i], columns[j]).item()
                if not abs(dot) <= orthogonality_threshold:
                    return False
        return True

    # Equality

    def equals(self, m, relative_threshold=0.0, absolute_threshold=0.0):
        r"""
        Entry-wise comparison with another matrix of any kind

        Args:
            m (Matrix): Matrix to compare with
            relative_threshold (float): Optional. Default: ``0.``
            absolute_threshold (float): Optional. Default: ``0.``
        """
        if m is self:
            return True
        if not isinstance(m, Matrix) or m.shape != self.shape:
            return False
        return bool(
            equals_with_tolerances(
                self._dense(), m._dense(), relative_threshold, absolute_threshold
            ).all()
        )

    def __eq__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.equals(other)

    def __hash__(self):
        entries = tuple(self._dense().flatten().tolist())
        return hash((self.row_dimension, self.column_dimension, entries))

    # Visitors

    def _check_changing_visitor(self):
        pass

    def _walk(
        self, visitor, order, start_row, end_row, start_column, end_column
    ):
        changing = isinstance(visitor, MatrixChangingVisitor)
        if changing:
            self._check_changing_visitor()
        bounds = (start_row, end_row, start_column, end_column)
        if all(bound is None for bound in bounds):
            start_row, end_row = 0, self.row_dimension - 1
            start_column, end_column = 0, self.column_dimension - 1
        elif any(bound is None for bound in bounds):
            # Either the whole matrix or a fully bounded block
            raise NullArgumentError("sub-matrix bound")
        else:
            check_sub_matrix_range(self, start_row, end_row, start_column, end_column)

        visitor.start(
            self.row_dimension,
            self.column_dimension,
            start_row,
            end_row,
            start_column,
            end_column,
        )
        entries = self._dense().tolist()
        for row, column in order(start_row, end_row, start_column, end_column):
            value = visitor.visit(row, column, entries[row][column])
            if changing:
                self.set_entry(row, column, value)
        return visitor.end()

    def walk_in_row_order(
        self, visitor, start_row=None, end_row=None, start_column=None, end_column=None
    ):
        r"""
        Visits the entries row by row

        Args:
            visitor (MatrixPreservingVisitor or MatrixChangingVisitor): Visitor
            start_row, end_row, start_column, end_column (int): Optional.
                Inclusive bounds of the visited block. Default: the whole matrix

        Returns:
            The value returned by ``visitor.end()``
        """
        return self._walk(
            visitor, row_order, start_row, end_row, start_column, end_column
        )

    def walk_in_column_order(
        self, visitor, start_row=None, end_row=None, start_column=None, end_column=None
    ):
        return self._walk(
            visitor, column_order, start_row, end_row, start_column, end_column
        )

    def walk_in_optimized_order(
        self, visitor, start_row=None, end_row=None, start_column=None, end_column=None
    ):
        return self._walk(
            visitor, optimized_order, start_row, end_row, start_column, end_column
        )

    # Representation

    def extra_repr(self):
        return _extra_repr(
            rows=self.row_dimension,
            columns=self.column_dimension,
            device=self._dense().device,
        )

    def __repr__(self):
        return "{}({})".format(type(self).__name__, self.extra_repr())

    def __str__(self):
        name = type(self).__name__
        rows = [
            "[" + ", ".join(repr(x) for x in row) + "]"
            for row in self._dense().tolist()
        ]
        return "{}[{}]".format(name, (",\n" + " " * (len(name) + 1)).join(rows))


@register_kind(MatrixKind.DENSE)
class DenseMatrix(Matrix):
    r"""
    General mutable matrix backed by a two-dimensional tensor

    Args:
        data (torch.Tensor or sequence of sequences): Entries of the matrix
        copy (bool): Optional. If ``False``, a ``float64`` tensor is used as
            storage without copying it. Default: ``True``
    """

    def __init__(self, data, copy=True):
        self._data = as_tensor_2d(data, copy=copy)

    @classmethod
    def from_tensor(cls, tensor):
        return cls(tensor, copy=False)

    @classmethod
    def zeros(cls, rows, columns):
        check_dimension(rows, "row dimension")
        check_dimension(columns, "column dimension")
        return cls.from_tensor(torch.zeros(rows, columns, dtype=DTYPE))

    @classmethod
    def create_identity_matrix(cls, n):
        check_dimension(n)
        return cls.from_tensor(torch.eye(n, dtype=DTYPE))

    def _dense(self):
        return self._data

    @property
    def row_dimension(self):
        return self._data.size(0)

    @property
    def column_dimension(self):
        return self._data.size(1)

    def set_entry(self, row, column, value):
        check_matrix_index(self, row, column)
        self._data[row, column] = value

    def add_to_entry(self, row, column, increment):
        check_matrix_index(self, row, column)
        self._data[row, column] += increment

    def multiply_entry(self, row, column, factor):
        check_matrix_index(self, row, column)
        self._data[row, column] *= factor

    def set_row(self, row, array):
        check_row_index(self, row)
        v = as_tensor_1d(array)
        if v.size(0) != self.column_dimension:
            raise MatrixDimensionMismatchError(1, v.size(0), 1, self.column_dimension)
        self._data[row] = v

    def set_column(self, column, array):
        check_column_index(self, column)
        v = as_tensor_1d(array)
        if v.size(0) != self.row_dimension:
            raise MatrixDimensionMismatchError(v.size(0), 1, self.row_dimension, 1)
        self._data[:, column] = v

    def set_row_matrix(self, row, matrix):
        check_row_index(self, row)
        m = as_matrix(matrix)
        if m.shape != (1, self.column_dimension):
            raise MatrixDimensionMismatchError(
                m.row_dimension, m.column_dimension, 1, self.column_dimension
            )
        self._data[row] = m._dense()[0]

    def set_column_matrix(self, column, matrix):
        check_column_index(self, column)
        m = as_matrix(matrix)
        if m.shape != (self.row_dimension, 1):
            raise MatrixDimensionMismatchError(
                m.row_dimension, m.column_dimension, self.row_dimension, 1
            )
        self._data[:, column] = m._dense()[:, 0]

    def set_sub_matrix(self, sub_matrix, row, column):
        r"""
        Writes ``sub_matrix`` into the block whose upper left corner is
        ``(row, column)``
        """
        block = as_tensor_2d(sub_matrix, copy=False)
        rows, columns = block.size()
        check_row_index(self, row)
        check_column_index(self, column)
        check_row_index(self, row + rows - 1)
        check_column_index(self, column + columns - 1)
        self._data[row : row + rows, column : column + columns] = block

