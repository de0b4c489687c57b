import torch

from .exceptions import (
    DimensionMismatchError,
    InvalidRangeError,
    MatrixDimensionMismatchError,
    NoDataError,
    NonSquareError,
    NotStrictlyPositiveError,
    NullArgumentError,
    OutOfRangeError,
)


DTYPE = torch.float64


def as_tensor_2d(data, copy=True):
    r"""
    Validates two-dimensional data and returns it as a ``float64`` tensor

    Args:
        data (torch.Tensor or sequence of sequences): The entries, row by row
        copy (bool): Optional. If ``False`` and ``data`` is already a ``float64``
            tensor, the tensor itself is returned. Default: ``True``
    """
    if data is None:
        raise NullArgumentError("array")
    if not isinstance(data, torch.Tensor) and hasattr(data, "__array__"):
        # Array-likes share their memory when possible
        data = torch.as_tensor(data)
    if isinstance(data, torch.Tensor):
        if data.dim() != 2:
            raise DimensionMismatchError(data.dim(), 2)
        if data.size(0) == 0:
            raise NoDataError("matrix must have at least one row")
        if data.size(1) == 0:
            raise NoDataError("matrix must have at least one column")
        if data.dtype != DTYPE:
            return data.to(DTYPE)
        return data.clone() if copy else data

    if len(data) == 0:
        raise NoDataError("matrix must have at least one row")
    for row in data:
        if not isinstance(row, (list, tuple)):
            # A flat sequence of numbers is a vector, not a matrix
            raise DimensionMismatchError(1, 2)
    n_columns = len(data[0])
    if n_columns == 0:
        raise NoDataError("matrix must have at least one column")
    for row in data:
        if len(row) != n_columns:
            raise DimensionMismatchError(len(row), n_columns)
    return torch.tensor(data, dtype=DTYPE)


def as_tensor_1d(data, copy=True):
    if data is None:
        raise NullArgumentError("array")
    if isinstance(data, torch.Tensor) or hasattr(data, "__array__"):
        # Tensors and array-likes may share their memory with the caller
        tensor = torch.as_tensor(data)
        if tensor.dim() != 1:
            raise DimensionMismatchError(tensor.dim(), 1)
        if tensor.dtype != DTYPE:
            return tensor.to(DTYPE)
        return tensor.clone() if copy else tensor
    tensor = torch.as_tensor(data, dtype=DTYPE)
    if tensor.dim() != 1:
        raise DimensionMismatchError(tensor.dim(), 1)
    return tensor


def equals_with_tolerances(x, y, relative_tolerance, absolute_tolerance):
    r"""
    Entry-wise comparison of two tensors.

    Two entries are considered equal if they are exactly equal, if their
    difference is at most ``absolute_tolerance``, or if their difference is at
    most ``relative_tolerance`` times the largest of the two in absolute value.
    """
    diff = (x - y).abs()
    scale = torch.maximum(x.abs(), y.abs())
    return (
        (x == y)
        | (diff <= absolute_tolerance)
        | (diff <= relative_tolerance * scale)
    )


def check_dimension(dimension, name="row dimension"):
    if dimension < 1:
        raise NotStrictlyPositiveError(name, dimension)


def check_row_index(m, row):
    if row < 0 or row >= m.row_dimension:
        raise OutOfRangeError("row index", row, 0, m.row_dimension - 1)


def check_column_index(m, column):
    if column < 0 or column >= m.column_dimension:
        raise OutOfRangeError("column index", column, 0, m.column_dimension - 1)


def check_matrix_index(m, row, column):
    check_row_index(m, row)
    check_column_index(m, column)


def check_sub_matrix_range(m, start_row, end_row, start_column, end_column):
    check_row_index(m, start_row)
    check_row_index(m, end_row)
    check_column_index(m, start_column)
    check_column_index(m, end_column)
    if end_row < start_row:
        raise InvalidRangeError("row", start_row, end_row)
    if end_column < start_column:
        raise InvalidRangeError("column", start_column, end_column)


def check_sub_matrix_indices(m, selected_rows, selected_columns):
    if selected_rows is None:
        raise NullArgumentError()
    if len(selected_rows) == 0:
        raise NoDataError("empty selected row index array")
    for row in selected_rows:
        check_row_index(m, row)
    if selected_columns is None:
        raise NullArgumentError()
    if len(selected_columns) == 0:
        raise NoDataError("empty selected column index array")
    for column in selected_columns:
        check_column_index(m, column)


def check_square(m):
    if m.row_dimension != m.column_dimension:
        raise NonSquareError(m.row_dimension, m.column_dimension)


def check_addition_compatible(left, right):
    if (
        left.row_dimension != right.row_dimension
        or left.column_dimension != right.column_dimension
    ):
        raise MatrixDimensionMismatchError(
            right.row_dimension,
            right.column_dimension,
            left.row_dimension,
            left.column_dimension,
        )


def check_multiplication_compatible(left, right, right_transposed=False):
    if right_transposed:
        if left.column_dimension != right.column_dimension:
            raise DimensionMismatchError(right.column_dimension, left.column_dimension)
    elif left.column_dimension != right.row_dimension:
        raise DimensionMismatchError(right.row_dimension, left.column_dimension)


def copy_block(block, destination, start_row, start_column):
    r"""
    Copies a two-dimensional tensor into a caller-provided container.

    Args:
        block (torch.Tensor): The entries to copy
        destination (list of lists or torch.Tensor): Where to write the entries.
            It has to be large enough to hold ``block`` at the given offsets
        start_row (int): Row of ``destination`` receiving the first row of ``block``
        start_column (int): Column of ``destination`` receiving the first column
            of ``block``
    """
    if destination is None:
        raise NullArgumentError("array")
    n_rows = len(destination)
    if n_rows == 0:
        raise OutOfRangeError("row index", 0, 0, -1)
    n_columns = len(destination[0])
    if n_columns == 0:
        raise OutOfRangeError("column index", 0, 0, -1)
    if start_row < 0 or start_row >= n_rows:
        raise OutOfRangeError("row index", start_row, 0, n_rows - 1)
    if start_column < 0 or start_column >= n_columns:
        raise OutOfRangeError("column index", start_column, 0, n_columns - 1)

    rows, columns = block.size()
    if n_rows - start_row < rows or n_columns - start_column < columns:
        raise MatrixDimensionMismatchError(
            n_rows - start_row, n_columns - start_column, rows, columns
        )
    for i, values in enumerate(block.tolist()):
        target = destination[start_row + i]
        for j, value in enumerate(values):
            target[start_column + j] = value


def _extra_repr(**kwargs):
    if "n" in kwargs:
        ret = "n={}".format(kwargs["n"])
    else:
        ret = "rows={}, columns={}".format(kwargs["rows"], kwargs["columns"])

    if "transparent_dimension" in kwargs:
        ret += ", transparent_dimension={}".format(kwargs["transparent_dimension"])
    if "device" in kwargs:
        if kwargs["device"].type != "cpu":
            ret += ", device={}".format(kwargs["device"])
    return ret
