import math

import torch

from . import decompositions, dispatch
from .dispatch import MatrixKind, register_kind
from .exceptions import NotPositiveError
from .logging import get_logger
from .matrix import DenseMatrix, Matrix, as_matrix
from .psd import SymmetricPositiveMatrix
from .symmetric import SymmetricMatrix
from .utils import (
    DTYPE,
    _extra_repr,
    check_dimension,
    check_multiplication_compatible,
    check_addition_compatible,
    check_sub_matrix_indices,
    check_sub_matrix_range,
)


logger = get_logger(__name__)


@register_kind(MatrixKind.DECOMPOSED)
class DecomposedSymmetricPositiveMatrix(SymmetricPositiveMatrix):
    r"""
    Symmetric positive semi-definite matrix stored through a factor.

    The matrix is represented as :math:`M = BB^\intercal`, and the factor stored
    is :math:`B^\intercal`, of size ``transparent_dimension x n``. The
    ``transparent_dimension`` may be larger or smaller than ``n``: sums of
    decomposed matrices stack their factors, and :meth:`resize_b` brings the
    factor back to a square one.

    The dense form :math:`M` is computed lazily and cached. The cache is
    dropped whenever the factor is replaced.

    Args:
        bt (int or torch.Tensor or sequence of sequences or Matrix): Either the
            dimension ``n`` of a zero matrix or the factor :math:`B^\intercal`
        copy (bool): Optional. If ``False``, the factor is stored without
            copying it. A :class:`Matrix` is then kept as it is, and a
            ``float64`` tensor is used as storage. Default: ``True``

    Examples::

        >>> M = DecomposedSymmetricPositiveMatrix([[1., 2.], [0., 3.]])
        >>> M.get_data()
        tensor([[ 1.,  2.],
                [ 2., 13.]], dtype=torch.float64)
    """

    def __init__(self, bt, copy=True):
        if isinstance(bt, int) and not isinstance(bt, bool):
            check_dimension(bt)
            bt = DenseMatrix.zeros(bt, bt)
        elif isinstance(bt, Matrix):
            if copy:
                bt = bt.copy()
        else:
            bt = DenseMatrix(bt, copy=copy)
        self._bt = bt
        self._cache = None

    @classmethod
    def from_tensor(cls, tensor):
        return cls(cls._factorize(tensor), copy=False)

    @staticmethod
    def _factorize(X):
        # X = Q diag(L) Q^T = (diag(sqrt L) Q^T)^T (diag(sqrt L) Q^T)
        L, Q = torch.linalg.eigh(SymmetricMatrix.frame(X, "upper"))
        return L.clamp(min=0.0).sqrt().unsqueeze(-1) * Q.transpose(-2, -1)

    @classmethod
    def cast_or_transform(cls, matrix):
        r"""
        Returns ``matrix`` if it is already decomposed. Otherwise, returns a
        decomposed matrix built from the eigendecomposition of ``matrix``.
        Negative eigenvalues coming from rounding errors are set to zero

        Args:
            matrix (SymmetricPositiveMatrix): Matrix to decompose
        """
        matrix = as_matrix(matrix)
        if isinstance(matrix, DecomposedSymmetricPositiveMatrix):
            return matrix
        return cls.from_tensor(matrix._dense())

    @classmethod
    def create_identity_matrix(cls, n):
        check_dimension(n)
        return cls(torch.eye(n, dtype=DTYPE), copy=False)

    def _factor(self):
        return self._bt._dense()

    def _dense(self):
        if self._cache is None:
            bt = self._factor()
            self._cache = SymmetricMatrix.frame(bt.transpose(-2, -1) @ bt, "upper")
        return self._cache

    @property
    def row_dimension(self):
        return self._bt.column_dimension

    @property
    def column_dimension(self):
        return self._bt.column_dimension

    @property
    def transparent_dimension(self):
        return self._bt.row_dimension

    def get_b(self):
        r"""
        Returns the factor :math:`B` of :math:`M = BB^\intercal`
        """
        return self._bt.transpose()

    def get_bt(self, copy=True):
        r"""
        Returns the stored factor :math:`B^\intercal`

        Args:
            copy (bool): Optional. If ``False``, the stored factor itself is
                returned. Default: ``True``
        """
        return self._bt.copy() if copy else self._bt

    def copy(self):
        return DecomposedSymmetricPositiveMatrix(self._bt, copy=True)

    def to_symmetric_matrix(self):
        return SymmetricMatrix.from_tensor(self._dense().clone())

    def to_symmetric_positive_matrix(self):
        return SymmetricPositiveMatrix.from_tensor(self._dense().clone())

    def is_positive_semi_definite(self, absolute_tolerance=0.0):
        return True

    # Resize

    def get_resized_bt(self):
        r"""
        Returns a square factor of the matrix

        If the factor has more rows than columns, the upper triangular factor
        of its QR decomposition is returned. If it has fewer, it is padded with
        rows of zeros.
        """
        bt = self._factor()
        n, k = self.row_dimension, self.transparent_dimension
        if k > n:
            _, R = torch.linalg.qr(bt, mode="r")
            return DenseMatrix.from_tensor(R[:n, :n].contiguous())
        if k < n:
            return DenseMatrix.from_tensor(torch.cat([bt, bt.new_zeros(n - k, n)]))
        return self._bt.copy()

    def get_resized_b(self):
        return self.get_resized_bt().transpose()

    def resize_b(self):
        r"""
        Replaces the factor by a square one. Returns the matrix itself
        """
        n, k = self.row_dimension, self.transparent_dimension
        if k != n:
            logger.debug("Resizing the factor from %dx%d to %dx%d", k, n, n, n)
            self._bt = self.get_resized_bt()
            self._cache = None
        return self

    # Arithmetic

    def add(self, m, resize=True):
        r"""
        Returns the sum of the matrix and ``m``

        Args:
            m (Matrix): Matrix to add
            resize (bool): Optional. If ``m`` is decomposed, whether to resize
                the factor of the sum. Default: ``True``
        """
        m = as_matrix(m)
        check_addition_compatible(self, m)
        return dispatch.addition(self, m, resize=resize)

    def scalar_add(self, d):
        if d == 0:
            return self.copy()
        if d > 0:
            return self.positive_scalar_add(d)
        return SymmetricMatrix.from_tensor(self._dense() + d)

    def positive_scalar_add(self, d):
        r"""
        Adds ``d`` to every entry. The factor gets an extra row
        :math:`\sqrt{d}\mathbf{1}^\intercal`
        """
        if d < 0:
            raise NotPositiveError("scalar", d)
        bt = self._factor()
        row = bt.new_full((1, self.row_dimension), math.sqrt(d))
        return DecomposedSymmetricPositiveMatrix(torch.cat([bt, row]), copy=False)

    def scalar_multiply(self, d):
        if d == 0:
            return DecomposedSymmetricPositiveMatrix(self.row_dimension)
        if d > 0:
            return self.positive_scalar_multiply(d)
        return SymmetricMatrix.from_tensor(self._dense() * d)

    def positive_scalar_multiply(self, d):
        if d < 0:
            raise NotPositiveError("scalar", d)
        return DecomposedSymmetricPositiveMatrix(
            self._factor() * math.sqrt(d), copy=False
        )

    def quadratic_multiplication(self, m, is_transpose=False):
        r"""
        Returns :math:`XMX^\intercal`, or :math:`X^\intercal MX` if
        ``is_transpose=True``. The factor of the result is
        :math:`B^\intercal X^\intercal` (resp. :math:`B^\intercal X`)

        Args:
            m (Matrix or torch.Tensor): The matrix :math:`X`
            is_transpose (bool): Optional. Default: ``False``
        """
        m = as_matrix(m)
        X = m._dense()
        if is_transpose:
            check_multiplication_compatible(self, m)
            factor = self._factor() @ X
        else:
            check_multiplication_compatible(m, self)
            factor = self._factor() @ X.transpose(-2, -1)
        return DecomposedSymmetricPositiveMatrix(factor, copy=False)

    def power(self, p):
        if p < 0:
            raise NotPositiveError("exponent", p)
        if p == 0:
            return self.create_identity_matrix(self.row_dimension)
        if p == 1:
            return self.copy()
        # M^p = (M^(p/2))^T M^(p/2) for even p, and B M^(p//2) is a factor for odd p
        factor = torch.linalg.matrix_power(self._dense(), p // 2)
        if p % 2 == 1:
            factor = self._factor() @ factor
        return DecomposedSymmetricPositiveMatrix(factor, copy=False)

    def get_inverse(self, decomposition=None):
        r"""
        Returns the inverse of the matrix

        With :math:`B` the square factor of :meth:`get_resized_b`,
        :math:`M^{-1} = (B^{-1})^\intercal B^{-1}`, so :math:`B^{-1}` is the
        factor of the inverse. Decompositions restricted to symmetric matrices,
        such as Cholesky, are applied to :math:`M` instead, and the inverse is
        factorized again through its eigendecomposition.

        Args:
            decomposition (str or callable): Optional. Strategy used to invert
                :math:`B`. Default: the configured default decomposition
        """
        builder = decompositions.parse_decomposition(decomposition)
        if decompositions.requires_symmetric_input(builder):
            return self.from_tensor(decompositions.inverse(self._dense(), builder))
        B = self.get_resized_b()._dense()
        return DecomposedSymmetricPositiveMatrix(
            decompositions.inverse(B, builder), copy=False
        )

    # Principal sub-matrices

    def get_symmetric_sub_matrix(self, start, end):
        check_sub_matrix_range(self, start, end, start, end)
        factor = self._factor()[:, start : end + 1].clone()
        return DecomposedSymmetricPositiveMatrix(factor, copy=False)

    def get_symmetric_sub_matrix_by_index(self, indices):
        check_sub_matrix_indices(self, indices, indices)
        bt = self._factor()
        index = torch.as_tensor(indices, dtype=torch.long, device=bt.device)
        return DecomposedSymmetricPositiveMatrix(bt.index_select(1, index), copy=False)

    # Persistence

    def __getstate__(self):
        state = self.__dict__.copy()
        state["_cache"] = None
        return state

    def extra_repr(self):
        return _extra_repr(
            n=self.row_dimension,
            transparent_dimension=self.transparent_dimension,
            device=self._factor().device,
        )


@dispatch.addition.register(MatrixKind.DECOMPOSED, MatrixKind.DECOMPOSED)
def _add_decomposed(left, right, resize=True):
    # BB^T + CC^T = [B C][B C]^T
    bt = torch.cat([left._factor(), right._factor()])
    out = DecomposedSymmetricPositiveMatrix(bt, copy=False)
    if resize:
        out.resize_b()
    return out
