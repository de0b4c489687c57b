r"""
Result kinds of binary operations between matrices.

Every matrix class is registered under a :class:`MatrixKind`. The kind of the
result of a sum, a difference or a product only depends on the kinds of the
operands, and is read from the tables :data:`SUM_KINDS`,
:data:`DIFFERENCE_KINDS` and :data:`PRODUCT_KINDS`. Operations that can do
better than operating on the dense forms register a handler for a pair of
kinds (see :meth:`BinaryOperation.register`).
"""

import enum

import torch


class MatrixKind(enum.Enum):
    DENSE = "dense"
    SYMMETRIC = "symmetric"
    DIAGONAL = "diagonal"
    SYMMETRIC_POSITIVE = "symmetric positive"
    DECOMPOSED = "decomposed symmetric positive"


_builders = {}


def register_kind(kind):
    r"""
    Class decorator registering a matrix class as the builder of ``kind``

    The class has to implement a ``from_tensor(tensor)`` classmethod that takes
    ownership of a tensor known to satisfy the structure of the kind.
    """

    def decorator(cls):
        cls.kind = kind
        _builders[kind] = cls
        return cls

    return decorator


def builder(kind):
    if kind not in _builders:
        raise ValueError("No matrix class registered for the kind {}".format(kind))
    return _builders[kind]


D = MatrixKind.DENSE
S = MatrixKind.SYMMETRIC
G = MatrixKind.DIAGONAL
P = MatrixKind.SYMMETRIC_POSITIVE
C = MatrixKind.DECOMPOSED

_ORDER = (D, S, G, P, C)


def _table(rows):
    return {
        (left, right): rows[i][j]
        for i, left in enumerate(_ORDER)
        for j, right in enumerate(_ORDER)
    }


# Rows are indexed by the left operand, columns by the right one,
# both in the order DENSE, SYMMETRIC, DIAGONAL, SYMMETRIC_POSITIVE, DECOMPOSED
SUM_KINDS = _table(
    [
        [D, D, D, D, D],
        [D, S, S, S, S],
        [D, S, G, S, S],
        [D, S, S, P, P],
        [D, S, S, P, C],
    ]
)

DIFFERENCE_KINDS = _table(
    [
        [D, D, D, D, D],
        [D, S, S, S, S],
        [D, S, G, S, S],
        [D, S, S, S, S],
        [D, S, S, S, S],
    ]
)

PRODUCT_KINDS = _table(
    [
        [D, D, D, D, D],
        [D, D, D, D, D],
        [D, D, G, D, D],
        [D, D, D, D, D],
        [D, D, D, D, D],
    ]
)


class BinaryOperation:
    r"""
    Binary operation on matrices dispatched on the kinds of its operands

    Args:
        name (str): Name of the operation, used in error messages
        kinds (dict): Maps pairs of kinds to the kind of the result
        combine (callable): Operation on the dense forms of the operands used
            when no handler is registered for a pair of kinds
    """

    def __init__(self, name, kinds, combine):
        self.name = name
        self.kinds = kinds
        self.combine = combine
        self.handlers = {}

    def register(self, left, right):
        r"""
        Decorator registering the handler of the pair of kinds ``(left, right)``

        The handler is called as ``handler(left, right, **options)``
        """

        def decorator(f):
            self.handlers[(left, right)] = f
            return f

        return decorator

    def result_kind(self, left, right):
        return self.kinds[(left.kind, right.kind)]

    def __call__(self, left, right, **options):
        handler = self.handlers.get((left.kind, right.kind))
        if handler is not None:
            return handler(left, right, **options)
        cls = builder(self.result_kind(left, right))
        return cls.from_tensor(self.combine(left._dense(), right._dense()))

    def __repr__(self):
        return "BinaryOperation({})".format(self.name)


addition = BinaryOperation("addition", SUM_KINDS, torch.add)
subtraction = BinaryOperation("subtraction", DIFFERENCE_KINDS, torch.sub)
multiplication = BinaryOperation("multiplication", PRODUCT_KINDS, torch.matmul)
