r"""
Visitors walk over the entries of a matrix in a fixed order.

A :class:`MatrixPreservingVisitor` only reads the entries. A
:class:`MatrixChangingVisitor` returns the new value of every entry it visits,
which is written back into the matrix. Matrices with structural constraints
(symmetric, diagonal, positive semi-definite) reject changing visitors.
"""


class MatrixPreservingVisitor:
    def start(self, rows, columns, start_row, end_row, start_column, end_column):
        r"""
        Called once before the walk

        Args:
            rows (int): Number of rows of the matrix
            columns (int): Number of columns of the matrix
            start_row (int): First visited row
            end_row (int): Last visited row (inclusive)
            start_column (int): First visited column
            end_column (int): Last visited column (inclusive)
        """
        pass

    def visit(self, row, column, value):
        pass

    def end(self):
        r"""
        Called once after the walk. Its result is returned by the walk
        """
        return 0.0


class MatrixChangingVisitor:
    def start(self, rows, columns, start_row, end_row, start_column, end_column):
        pass

    def visit(self, row, column, value):
        r"""
        Returns the new value of the entry ``(row, column)``
        """
        return value

    def end(self):
        return 0.0


def row_order(start_row, end_row, start_column, end_column):
    for row in range(start_row, end_row + 1):
        for column in range(start_column, end_column + 1):
            yield row, column


def column_order(start_row, end_row, start_column, end_column):
    for column in range(start_column, end_column + 1):
        for row in range(start_row, end_row + 1):
            yield row, column


# Matrices are stored row-major
optimized_order = row_order
