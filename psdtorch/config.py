"""Process-wide numerical configuration.

The values stored in :data:`linalg_config` are the ambient defaults used when
an operation is called without an explicit argument. They can be changed for
the whole process or temporarily through :class:`LinalgContext`::

    >>> from psdtorch.config import LinalgContext
    >>> with LinalgContext(default_decomposition="qr"):
    ...     inverse = matrix.get_inverse()
"""

from dataclasses import dataclass, fields
from typing import Callable, Union

from .logging import get_logger


logger = get_logger(__name__)

DEFAULT_DECOMPOSITION = "lu"


@dataclass
class LinalgConfig:
    r"""
    Numerical defaults of the package.

    Args:
        default_decomposition (str or callable): Strategy used by
            ``get_inverse`` when none is given. Either one of
            ``["lu", "qr", "cholesky"]`` or a callable mapping a square tensor
            to a :class:`~psdtorch.decompositions.Decomposition`.
            Default: ``"lu"``
        singularity_threshold (float): Pivots smaller than this value in
            absolute value make a decomposition singular. Default: ``1e-11``
        absolute_positivity_threshold (float): Absolute tolerance on the
            smallest eigenvalue when checking positive semi-definiteness.
            Default: ``0.``
        relative_positivity_threshold (float): Tolerance on the smallest
            eigenvalue, relative to the largest eigenvalue in absolute value.
            Default: ``1e-14``
        symmetry_tolerance (float): Absolute and relative tolerance used when
            checking that data is symmetric. Default: ``1e-14``
    """

    default_decomposition: Union[str, Callable] = DEFAULT_DECOMPOSITION
    singularity_threshold: float = 1e-11
    absolute_positivity_threshold: float = 0.0
    relative_positivity_threshold: float = 1e-14
    symmetry_tolerance: float = 1e-14


linalg_config = LinalgConfig()


def get_default_decomposition():
    return linalg_config.default_decomposition


def set_default_decomposition(decomposition):
    r"""
    Sets the strategy used by ``get_inverse`` when none is given

    Args:
        decomposition (str or callable or None): Name of a registered
            decomposition or a callable building one. ``None`` restores
            the default ``"lu"``
    """
    # Imported here, as decompositions reads the thresholds of this module
    from .decompositions import parse_decomposition

    if decomposition is None:
        decomposition = DEFAULT_DECOMPOSITION
    parse_decomposition(decomposition)
    logger.debug("Default decomposition set to %s", decomposition)
    linalg_config.default_decomposition = decomposition


class LinalgContext:
    r"""
    Context manager that temporarily overrides fields of :data:`linalg_config`

    Args:
        **overrides: Values of the fields of :class:`LinalgConfig` to use
            inside the ``with`` block
    """

    def __init__(self, **overrides):
        names = {f.name for f in fields(LinalgConfig)}
        for key in overrides:
            if key not in names:
                raise ValueError("Unknown configuration parameter: {}".format(key))
        if overrides.get("default_decomposition") is not None:
            from .decompositions import parse_decomposition

            parse_decomposition(overrides["default_decomposition"])
        self.overrides = overrides
        self.saved_values = {}

    def __enter__(self):
        for key, value in self.overrides.items():
            self.saved_values[key] = getattr(linalg_config, key)
            if key == "default_decomposition" and value is None:
                value = DEFAULT_DECOMPOSITION
            setattr(linalg_config, key, value)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        for key, value in self.saved_values.items():
            setattr(linalg_config, key, value)
        return False
