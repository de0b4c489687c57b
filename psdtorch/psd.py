import torch

from . import config, decompositions
from .dispatch import MatrixKind, register_kind
from .exceptions import (
    NonPositiveSemidefiniteMatrixError,
    NotPositiveError,
    UnsupportedOperationError,
)
from .symmetric import SymmetricMatrix


@register_kind(MatrixKind.SYMMETRIC_POSITIVE)
class SymmetricPositiveMatrix(SymmetricMatrix):
    def __init__(
        self,
        data,
        symmetry="lower",
        tolerance=None,
        absolute_positivity_threshold=None,
        relative_positivity_threshold=None,
        check=True,
        copy=True,
    ):
        r"""
        Symmetric positive semi-definite matrix. Its entries cannot be modified

        Args:
            data (int or torch.Tensor or sequence of sequences): Either the
                dimension of a zero matrix or its entries
            symmetry (str): Optional. One of ``["lower", "upper", "mean"]``.
                See :class:`SymmetricMatrix`. Default: ``"lower"``
            tolerance (float): Optional. Symmetry tolerance. See
                :class:`SymmetricMatrix`. Default: ``None``, no check
            absolute_positivity_threshold (float): Optional. Default:
                ``config.linalg_config.absolute_positivity_threshold``
            relative_positivity_threshold (float): Optional. Default:
                ``config.linalg_config.relative_positivity_threshold``
            check (bool): Optional. Whether to check that the matrix is
                positive semi-definite. Default: ``True``
            copy (bool): Optional. Whether to copy a ``float64`` tensor.
                Default: ``True``
        """
        super().__init__(data, symmetry=symmetry, tolerance=tolerance, copy=copy)
        if check:
            L = torch.linalg.eigvalsh(self._data)
            threshold = self.positivity_threshold(
                L, absolute_positivity_threshold, relative_positivity_threshold
            )
            if L[0].item() < -threshold:
                raise NonPositiveSemidefiniteMatrixError(L[0].item(), threshold)

    @staticmethod
    def positivity_threshold(eigenvalues, absolute=None, relative=None):
        r"""
        Largest magnitude allowed for a negative eigenvalue

        Args:
            eigenvalues (torch.Tensor): Eigenvalues of the matrix
            absolute (float): Optional. Default:
                ``config.linalg_config.absolute_positivity_threshold``
            relative (float): Optional. Relative to the largest eigenvalue in
                absolute value. Default:
                ``config.linalg_config.relative_positivity_threshold``
        """
        if absolute is None:
            absolute = config.linalg_config.absolute_positivity_threshold
        if relative is None:
            relative = config.linalg_config.relative_positivity_threshold
        return absolute + relative * eigenvalues.abs().max().item()

    @staticmethod
    def in_manifold(X, eps=1e-6):
        if not SymmetricMatrix.in_manifold(X, eps):
            return False
        L = torch.linalg.eigvalsh(X)
        return bool((L >= -eps).all())

    def is_positive_semi_definite(self, absolute_tolerance=0.0):
        L = torch.linalg.eigvalsh(self._dense())
        return L[0].item() >= -absolute_tolerance

    def set_entry(self, row, column, value):
        raise UnsupportedOperationError()

    def add_to_entry(self, row, column, increment):
        raise UnsupportedOperationError()

    def multiply_entry(self, row, column, factor):
        raise UnsupportedOperationError()

    def scalar_add(self, d):
        if d >= 0:
            return self.positive_scalar_add(d)
        return SymmetricMatrix.from_tensor(self._dense() + d)

    def positive_scalar_add(self, d):
        if d < 0:
            raise NotPositiveError("scalar", d)
        return SymmetricPositiveMatrix.from_tensor(self._dense() + d)

    def scalar_multiply(self, d):
        if d >= 0:
            return self.positive_scalar_multiply(d)
        return SymmetricMatrix.from_tensor(self._dense() * d)

    def positive_scalar_multiply(self, d):
        if d < 0:
            raise NotPositiveError("scalar", d)
        return SymmetricPositiveMatrix.from_tensor(self._dense() * d)

    def power(self, p):
        if p < 0:
            raise NotPositiveError("exponent", p)
        return SymmetricPositiveMatrix.from_tensor(
            torch.linalg.matrix_power(self._dense(), p)
        )

    def get_inverse(self, decomposition=None):
        return SymmetricPositiveMatrix.from_tensor(
            decompositions.inverse(self._dense(), decomposition)
        )

    def quadratic_multiplication(self, m, is_transpose=False):
        return SymmetricPositiveMatrix.from_tensor(
            self._quadratic_product(m, is_transpose)
        )
