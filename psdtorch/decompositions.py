import functools

import torch

from . import config
from .exceptions import NonSquareError, NonSymmetricMatrixError, SingularMatrixError
from .logging import get_logger
from .utils import equals_with_tolerances


logger = get_logger(__name__)


class Decomposition:
    r"""
    Factorization of a square matrix used to solve linear systems

    Args:
        A (torch.Tensor): Square matrix to factorize
        threshold (float): Optional. Singularity threshold.
            Default: ``config.linalg_config.singularity_threshold``
    """

    # Whether only symmetric matrices can be factorized
    symmetric_input = False

    def __init__(self, A, threshold=None):
        if A.dim() != 2:
            raise ValueError(
                "Expected a matrix. Got a tensor of shape {}".format(tuple(A.size()))
            )
        if A.size(0) != A.size(1):
            raise NonSquareError(A.size(0), A.size(1))
        if threshold is None:
            threshold = config.linalg_config.singularity_threshold
        self.threshold = threshold
        self.n = A.size(0)
        self.dtype, self.device = A.dtype, A.device

    def is_non_singular(self):
        raise NotImplementedError()

    def _solve(self, B):
        raise NotImplementedError()

    def solve(self, B):
        r"""
        Solves :math:`AX = B`

        Args:
            B (torch.Tensor): Right hand side. A vector or a matrix with as
                many rows as :math:`A`
        """
        if not self.is_non_singular():
            raise SingularMatrixError()
        vector = B.dim() == 1
        if vector:
            B = B.unsqueeze(-1)
        if B.size(0) != self.n:
            raise ValueError(
                "Cannot solve a system of size {} with a right hand side with {} "
                "rows".format(self.n, B.size(0))
            )
        X = self._solve(B)
        return X.squeeze(-1) if vector else X

    def get_inverse(self):
        return self.solve(torch.eye(self.n, dtype=self.dtype, device=self.device))

    @classmethod
    def decomposition_builder(cls, threshold=None):
        r"""
        Returns a callable building this decomposition with a fixed threshold

        Args:
            threshold (float): Optional. Singularity threshold.
                Default: ``config.linalg_config.singularity_threshold``
        """
        return functools.partial(cls, threshold=threshold)


class LUDecomposition(Decomposition):
    def __init__(self, A, threshold=None):
        super().__init__(A, threshold)
        self.LU, self.pivots, _ = torch.linalg.lu_factor_ex(A)

    def is_non_singular(self):
        pivots = self.LU.diagonal().abs()
        return bool((pivots > self.threshold).all())

    def _solve(self, B):
        return torch.linalg.lu_solve(self.LU, self.pivots, B)


class QRDecomposition(Decomposition):
    def __init__(self, A, threshold=None):
        super().__init__(A, threshold)
        self.Q, self.R = torch.linalg.qr(A)

    def is_non_singular(self):
        return bool((self.R.diagonal().abs() > self.threshold).all())

    def _solve(self, B):
        return torch.linalg.solve_triangular(
            self.R, self.Q.transpose(-2, -1) @ B, upper=True
        )


class CholeskyDecomposition(Decomposition):
    r"""
    Cholesky factorization :math:`A = LL^\intercal` of a symmetric matrix

    Args:
        A (torch.Tensor): Symmetric matrix to factorize
        threshold (float): Optional. Singularity threshold.
            Default: ``config.linalg_config.singularity_threshold``
        symmetry_tolerance (float): Optional. Absolute and relative tolerance
            when checking that ``A`` is symmetric.
            Default: ``config.linalg_config.symmetry_tolerance``
    """

    symmetric_input = True

    def __init__(self, A, threshold=None, symmetry_tolerance=None):
        super().__init__(A, threshold)
        if symmetry_tolerance is None:
            symmetry_tolerance = config.linalg_config.symmetry_tolerance
        symmetric = equals_with_tolerances(
            A, A.transpose(-2, -1), symmetry_tolerance, symmetry_tolerance
        )
        if not symmetric.all():
            row, column = (~symmetric).nonzero()[0].tolist()
            raise NonSymmetricMatrixError(row, column, symmetry_tolerance)
        self.L, self.info = torch.linalg.cholesky_ex(A)

    def is_non_singular(self):
        if self.info.item() != 0:
            return False
        return bool((self.L.diagonal() > self.threshold).all())

    def _solve(self, B):
        return torch.cholesky_solve(B, self.L)


decompositions = {
    "lu": LUDecomposition,
    "qr": QRDecomposition,
    "cholesky": CholeskyDecomposition,
}


def parse_decomposition(decomposition):
    r"""
    Resolves a decomposition strategy

    Args:
        decomposition (str or callable or None): One of
            ``["lu", "qr", "cholesky"]``, a callable mapping a square tensor to a
            :class:`Decomposition`, or ``None`` for the configured default
    """
    if decomposition is None:
        decomposition = config.linalg_config.default_decomposition
    if isinstance(decomposition, str):
        if decomposition in decompositions:
            return decompositions[decomposition]
        raise ValueError(
            "Argument decomposition was not recognized as a decomposition. "
            "Should be one of {}. Found {}".format(
                list(decompositions.keys()), decomposition
            )
        )
    if callable(decomposition):
        return decomposition
    raise ValueError(
        "Argument decomposition should be a string or a callable. Found {}".format(
            decomposition
        )
    )


def requires_symmetric_input(builder):
    r"""
    Whether the strategy returned by :func:`parse_decomposition` only accepts
    symmetric matrices
    """
    # Builders made by decomposition_builder are partials of the class
    cls = getattr(builder, "func", builder)
    return getattr(cls, "symmetric_input", False)


def inverse(A, decomposition=None):
    r"""
    Inverts a square tensor

    Args:
        A (torch.Tensor): Square matrix
        decomposition (str or callable): Optional. Strategy used to invert ``A``.
            Default: the configured default decomposition
    """
    builder = parse_decomposition(decomposition)
    logger.debug(
        "Inverting a %dx%d matrix with %s",
        A.size(0),
        A.size(1),
        getattr(builder, "__name__", builder),
    )
    return builder(A).get_inverse()
