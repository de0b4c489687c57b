class NotStrictlyPositiveError(ValueError):
    def __init__(self, name, value):
        super().__init__("invalid {}: {} (must be positive)".format(name, value))
        self.value = value


class NotPositiveError(ValueError):
    def __init__(self, name, value):
        super().__init__("invalid {} {} (must be positive)".format(name, value))
        self.value = value


class NullArgumentError(ValueError):
    def __init__(self, what=None):
        if what is None:
            super().__init__("None is not allowed")
        else:
            super().__init__("the supplied {} is None".format(what))


class NoDataError(ValueError):
    def __init__(self, message):
        super().__init__(message)


class DimensionMismatchError(ValueError):
    def __init__(self, actual, expected):
        super().__init__("{} != {}".format(actual, expected))
        self.actual = actual
        self.expected = expected


class MatrixDimensionMismatchError(DimensionMismatchError):
    def __init__(self, actual_rows, actual_columns, expected_rows, expected_columns):
        ValueError.__init__(
            self,
            "got {}x{} but expected {}x{}".format(
                actual_rows, actual_columns, expected_rows, expected_columns
            ),
        )
        self.actual = (actual_rows, actual_columns)
        self.expected = (expected_rows, expected_columns)


class OutOfRangeError(ValueError):
    def __init__(self, name, index, low, high):
        super().__init__(
            "{} ({}) out of range [{}, {}]".format(name, index, low, high)
        )
        self.index = index


class InvalidRangeError(OutOfRangeError):
    def __init__(self, name, start, end):
        ValueError.__init__(
            self, "initial {} {} after final {} {}".format(name, start, name, end)
        )
        self.index = end


class SingularMatrixError(ValueError):
    def __init__(self):
        super().__init__("matrix is singular")


class UnsupportedOperationError(ValueError):
    def __init__(self):
        super().__init__("unsupported operation")


class NonSquareError(ValueError):
    def __init__(self, rows, columns):
        super().__init__("non square ({}x{}) matrix".format(rows, columns))


class NonSymmetricMatrixError(ValueError):
    def __init__(self, row, column, threshold):
        super().__init__(
            "non symmetric matrix: the difference between entries at ({},{}) and "
            "({},{}) is larger than {}".format(row, column, column, row, threshold)
        )


class NonPositiveSemidefiniteMatrixError(ValueError):
    def __init__(self, eigenvalue, threshold):
        super().__init__(
            "not positive semi-definite matrix: eigenvalue {} is smaller than "
            "{}".format(eigenvalue, -threshold)
        )
        self.eigenvalue = eigenvalue


class NonZeroOffDiagonalError(ValueError):
    def __init__(self, row, column, value):
        super().__init__(
            "off-diagonal entry ({}, {}) of a diagonal matrix can only be set to 0. "
            "Got {}".format(row, column, value)
        )
