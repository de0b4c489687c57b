from unittest import TestCase
import itertools

import torch

from psdtorch import (
    DecomposedSymmetricPositiveMatrix,
    DenseMatrix,
    DiagonalMatrix,
    MatrixKind,
    SymmetricMatrix,
    SymmetricPositiveMatrix,
)
from psdtorch import dispatch


def matrices(n):
    A = torch.randn(n + 2, n, dtype=torch.float64)
    X = A.T @ A
    return {
        MatrixKind.DENSE: DenseMatrix(torch.randn(n, n, dtype=torch.float64)),
        MatrixKind.SYMMETRIC: SymmetricMatrix(torch.randn(n, n, dtype=torch.float64)),
        MatrixKind.DIAGONAL: DiagonalMatrix(torch.randn(n, dtype=torch.float64)),
        MatrixKind.SYMMETRIC_POSITIVE: SymmetricPositiveMatrix(X),
        MatrixKind.DECOMPOSED: DecomposedSymmetricPositiveMatrix(A),
    }


class TestDispatch(TestCase):
    def test_tables(self):
        kinds = list(MatrixKind)
        for table in [dispatch.SUM_KINDS, dispatch.DIFFERENCE_KINDS, dispatch.PRODUCT_KINDS]:
            self.assertEqual(len(table), len(kinds) ** 2)
            for left, right in itertools.product(kinds, kinds):
                # The kind of the result does not depend on the order of the operands
                self.assertEqual(table[(left, right)], table[(right, left)])
            # Anything combined with a dense matrix is dense
            for kind in kinds:
                self.assertEqual(table[(MatrixKind.DENSE, kind)], MatrixKind.DENSE)

        for kind in kinds:
            self.assertEqual(dispatch.SUM_KINDS[(kind, kind)], kind)
        self.assertEqual(
            dispatch.SUM_KINDS[(MatrixKind.DECOMPOSED, MatrixKind.SYMMETRIC_POSITIVE)],
            MatrixKind.SYMMETRIC_POSITIVE,
        )
        self.assertEqual(
            dispatch.DIFFERENCE_KINDS[(MatrixKind.DECOMPOSED, MatrixKind.DECOMPOSED)],
            MatrixKind.SYMMETRIC,
        )

    def test_result_kinds(self):
        ms = matrices(3)
        operations = [
            (dispatch.SUM_KINDS, lambda a, b: a.add(b), torch.add),
            (dispatch.DIFFERENCE_KINDS, lambda a, b: a.subtract(b), torch.sub),
            (dispatch.PRODUCT_KINDS, lambda a, b: a.multiply(b), torch.matmul),
        ]
        for (table, operation, combine), left, right in itertools.product(
            operations, MatrixKind, MatrixKind
        ):
            result = operation(ms[left], ms[right])
            self.assertEqual(result.kind, table[(left, right)])
            self.assertIs(type(result), dispatch.builder(table[(left, right)]))
            expected = combine(ms[left].get_data(), ms[right].get_data())
            self.assertTrue(torch.allclose(result.get_data(), expected))

    def test_builders(self):
        self.assertIs(dispatch.builder(MatrixKind.DENSE), DenseMatrix)
        self.assertIs(
            dispatch.builder(MatrixKind.DECOMPOSED), DecomposedSymmetricPositiveMatrix
        )
        self.assertEqual(DiagonalMatrix.kind, MatrixKind.DIAGONAL)
        with self.assertRaises(ValueError):
            dispatch.builder("fail")

    def test_register(self):
        calls = []
        operation = dispatch.BinaryOperation(
            "maximum", dispatch.SUM_KINDS, torch.maximum
        )

        @operation.register(MatrixKind.DIAGONAL, MatrixKind.DIAGONAL)
        def maximum_diagonal(left, right, **options):
            calls.append(options)
            return DiagonalMatrix(torch.maximum(left.diagonal, right.diagonal))

        D = DiagonalMatrix([1.0, -1.0])
        E = DiagonalMatrix([0.0, 2.0])
        result = operation(D, E, scale=2)
        self.assertEqual(calls, [{"scale": 2}])
        self.assertEqual(result.diagonal.tolist(), [1.0, 2.0])

        # Pairs without a handler work on the dense forms
        result = operation(D, SymmetricMatrix(2))
        self.assertIs(type(result), SymmetricMatrix)
        self.assertEqual(result.get_data().tolist(), [[1.0, 0.0], [0.0, 0.0]])
        self.assertEqual(len(calls), 1)
        self.assertEqual(repr(operation), "BinaryOperation(maximum)")
