# Tests for SymmetricMatrix
from unittest import TestCase
import itertools

import torch

from psdtorch import DenseMatrix, MatrixChangingVisitor, SymmetricMatrix
from psdtorch.exceptions import (
    DimensionMismatchError,
    NonSquareError,
    NonSymmetricMatrixError,
    NotPositiveError,
    UnsupportedOperationError,
)


class TestSymmetric(TestCase):
    def test_construction(self):
        sizes = [1, 2, 3, 8]
        for n, symmetry in itertools.product(sizes, ["lower", "upper", "mean"]):
            X = torch.rand(n, n, dtype=torch.float64)
            S = SymmetricMatrix(X, symmetry=symmetry)
            self.assertTrue(SymmetricMatrix.in_manifold(S.get_data()))
            self.assertTrue(torch.equal(S.get_data(), S.get_data().T))
            if symmetry == "lower":
                self.assertTrue(torch.equal(S.get_data().tril(), X.tril()))
            elif symmetry == "upper":
                self.assertTrue(torch.equal(S.get_data().triu(), X.triu()))
            else:
                self.assertTrue(torch.allclose(S.get_data(), 0.5 * (X + X.T)))

        S = SymmetricMatrix(3)
        self.assertTrue(torch.equal(S.get_data(), torch.zeros(3, 3, dtype=torch.float64)))

    def test_construction_errors(self):
        # Non-square sym
        with self.assertRaises(NonSquareError) as cm:
            SymmetricMatrix(torch.rand(3, 2))
        self.assertEqual(str(cm.exception), "non square (3x2) matrix")

        with self.assertRaises(ValueError):
            SymmetricMatrix(torch.rand(1, 3))

        # Try to instantiate it in a vector rather than a matrix
        with self.assertRaises(ValueError):
            SymmetricMatrix(torch.rand(4))

        # Or with the wrong symmetry
        with self.assertRaises(ValueError):
            SymmetricMatrix(torch.rand(3, 3), symmetry="fail")

        # Or with a non-symmetric matrix when a tolerance is given
        X = torch.tensor([[1.0, 2.0], [2.5, 1.0]], dtype=torch.float64)
        with self.assertRaises(NonSymmetricMatrixError):
            SymmetricMatrix(X, tolerance=0.1)
        SymmetricMatrix(X, tolerance=0.5)

    def test_set_entry(self):
        S = SymmetricMatrix(3)
        S.set_entry(0, 2, 1.5)
        self.assertEqual(S.get_entry(0, 2), 1.5)
        self.assertEqual(S.get_entry(2, 0), 1.5)
        S.add_to_entry(2, 0, 1.0)
        self.assertEqual(S.get_entry(0, 2), 2.5)
        S.multiply_entry(0, 2, 2.0)
        self.assertEqual(S.get_entry(2, 0), 5.0)
        S.set_entry(1, 1, -1.0)
        self.assertTrue(S.is_symmetric(0.0, 0.0))

    def test_changing_visitor(self):
        S = SymmetricMatrix(3)
        with self.assertRaises(UnsupportedOperationError):
            S.walk_in_row_order(MatrixChangingVisitor())

    def test_create_matrix(self):
        S = SymmetricMatrix(torch.rand(3, 3))
        self.assertIs(type(S.create_matrix(2, 2)), SymmetricMatrix)
        with self.assertRaises(DimensionMismatchError):
            S.create_matrix(2, 3)
        I = SymmetricMatrix.create_identity_matrix(3)
        self.assertTrue(torch.equal(I.get_data(), torch.eye(3, dtype=torch.float64)))

    def test_operations(self):
        X = torch.rand(4, 4, dtype=torch.float64)
        X = X @ X.T + torch.eye(4, dtype=torch.float64)
        S = SymmetricMatrix(X)
        self.assertIs(S.transpose(force_copy=False), S)
        self.assertEqual(S.transpose(), S)

        for N, Y in [
            (S.scalar_add(-2.0), X - 2.0),
            (S.scalar_multiply(-3.0), -3.0 * X),
            (S.power(3), torch.linalg.matrix_power(X, 3)),
            (S.get_inverse(), torch.linalg.inv(X)),
            (S.get_inverse("cholesky"), torch.linalg.inv(X)),
        ]:
            self.assertIs(type(N), SymmetricMatrix)
            self.assertTrue(torch.allclose(N.get_data(), Y))
        with self.assertRaises(NotPositiveError):
            S.power(-1)

        A = torch.rand(2, 4, dtype=torch.float64)
        N = S.quadratic_multiplication(A)
        self.assertIs(type(N), SymmetricMatrix)
        self.assertTrue(torch.allclose(N.get_data(), A @ X @ A.T))
        N = S.quadratic_multiplication(A.T, is_transpose=True)
        self.assertTrue(torch.allclose(N.get_data(), A @ X @ A.T))
        with self.assertRaises(DimensionMismatchError):
            S.quadratic_multiplication(A.T)

    def test_sub_matrices(self):
        S = SymmetricMatrix(torch.rand(5, 5))
        X = S.get_data()
        N = S.get_symmetric_sub_matrix(1, 3)
        self.assertIs(type(N), SymmetricMatrix)
        self.assertTrue(torch.equal(N.get_data(), X[1:4, 1:4]))
        N = S.get_sub_matrix_by_index([4, 0, 4], [4, 0, 4])
        self.assertIs(type(N), SymmetricMatrix)
        self.assertTrue(torch.equal(N.get_data(), X[[4, 0, 4]][:, [4, 0, 4]]))
        self.assertIs(type(S.get_sub_matrix(0, 1, 1, 2)), DenseMatrix)

    def test_add(self):
        X = SymmetricMatrix(torch.rand(3, 3))
        Y = SymmetricMatrix(torch.rand(3, 3))
        self.assertIs(type(X + Y), SymmetricMatrix)
        self.assertIs(type(X - Y), SymmetricMatrix)
        self.assertIs(type(X @ Y), DenseMatrix)
        self.assertTrue(torch.equal((X + Y).get_data(), X.get_data() + Y.get_data()))

    def test_repr(self):
        self.assertEqual(repr(SymmetricMatrix(3)), "SymmetricMatrix(n=3)")
        print(SymmetricMatrix(torch.eye(2)))
