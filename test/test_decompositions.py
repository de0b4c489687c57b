from unittest import TestCase
import itertools

import torch

from psdtorch import CholeskyDecomposition, LUDecomposition, QRDecomposition
from psdtorch.decompositions import inverse, parse_decomposition
from psdtorch.exceptions import NonSquareError, NonSymmetricMatrixError, SingularMatrixError


class TestDecompositions(TestCase):
    def test_solve(self):
        torch.manual_seed(0)
        sizes = [1, 2, 5]
        for n, cls in itertools.product(sizes, [LUDecomposition, QRDecomposition]):
            A = torch.randn(n, n, dtype=torch.float64) + n * torch.eye(n, dtype=torch.float64)
            B = torch.randn(n, 3, dtype=torch.float64)
            decomposition = cls(A)
            self.assertTrue(decomposition.is_non_singular())
            self.assertTrue(torch.allclose(A @ decomposition.solve(B), B))
            v = B[:, 0]
            x = decomposition.solve(v)
            self.assertEqual(x.dim(), 1)
            self.assertTrue(torch.allclose(A @ x, v))
            self.assertTrue(
                torch.allclose(decomposition.get_inverse(), torch.linalg.inv(A))
            )

    def test_cholesky(self):
        A = torch.randn(4, 4, dtype=torch.float64)
        A = A @ A.T + torch.eye(4, dtype=torch.float64)
        A = 0.5 * (A + A.T)
        decomposition = CholeskyDecomposition(A)
        self.assertTrue(decomposition.is_non_singular())
        self.assertTrue(torch.allclose(decomposition.get_inverse(), torch.linalg.inv(A)))

        # Not positive definite
        decomposition = CholeskyDecomposition(-A)
        self.assertFalse(decomposition.is_non_singular())
        with self.assertRaises(SingularMatrixError):
            decomposition.get_inverse()

        # Not symmetric
        B = A.clone()
        B[0, 1] += 1.0
        with self.assertRaises(NonSymmetricMatrixError):
            CholeskyDecomposition(B)
        CholeskyDecomposition(B, symmetry_tolerance=1.0)

    def test_singular(self):
        A = torch.tensor([[1.0, 2.0], [2.0, 4.0]], dtype=torch.float64)
        for cls in [LUDecomposition, QRDecomposition, CholeskyDecomposition]:
            decomposition = cls(A)
            self.assertFalse(decomposition.is_non_singular())
            with self.assertRaises(SingularMatrixError):
                decomposition.solve(torch.ones(2, dtype=torch.float64))

        # The threshold decides what is singular
        A = torch.diag(torch.tensor([1.0, 1e-6], dtype=torch.float64))
        for cls in [LUDecomposition, QRDecomposition, CholeskyDecomposition]:
            self.assertTrue(cls(A).is_non_singular())
            self.assertFalse(cls(A, threshold=1e-2).is_non_singular())
            self.assertFalse(cls.decomposition_builder(1e-2)(A).is_non_singular())

    def test_errors(self):
        for cls in [LUDecomposition, QRDecomposition, CholeskyDecomposition]:
            with self.assertRaises(NonSquareError):
                cls(torch.rand(3, 2, dtype=torch.float64))
            # Try to instantiate it in a vector rather than a matrix
            with self.assertRaises(ValueError):
                cls(torch.rand(3, dtype=torch.float64))

        decomposition = LUDecomposition(torch.eye(3, dtype=torch.float64))
        with self.assertRaises(ValueError):
            decomposition.solve(torch.ones(2, dtype=torch.float64))

    def test_parse_decomposition(self):
        self.assertIs(parse_decomposition("lu"), LUDecomposition)
        self.assertIs(parse_decomposition("qr"), QRDecomposition)
        self.assertIs(parse_decomposition("cholesky"), CholeskyDecomposition)
        self.assertIs(parse_decomposition(None), LUDecomposition)
        builder = QRDecomposition.decomposition_builder(1e-3)
        self.assertIs(parse_decomposition(builder), builder)

        # Pass a non-callable object
        with self.assertRaises(ValueError):
            parse_decomposition(3)
        # Or the wrong string
        with self.assertRaises(ValueError):
            parse_decomposition("fail")

    def test_inverse(self):
        A = torch.tensor([[4.0, 1.0], [1.0, 3.0]], dtype=torch.float64)
        for decomposition in [None, "lu", "qr", "cholesky", LUDecomposition]:
            self.assertTrue(
                torch.allclose(inverse(A, decomposition), torch.linalg.inv(A))
            )
