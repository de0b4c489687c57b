from unittest import TestCase
import logging

import torch

from psdtorch import DecomposedSymmetricPositiveMatrix
from psdtorch.logging import (
    LOGGER_NAME,
    configure_logging,
    disable_logging,
    get_logger,
    log_level,
    set_log_level,
)


class TestLogging(TestCase):
    def setUp(self):
        self.logger = logging.getLogger(LOGGER_NAME)
        self.saved = (list(self.logger.handlers), self.logger.level, self.logger.propagate)

    def tearDown(self):
        handlers, level, propagate = self.saved
        self.logger.handlers[:] = handlers
        self.logger.setLevel(level)
        self.logger.propagate = propagate

    def test_get_logger(self):
        self.assertIs(get_logger(), self.logger)
        self.assertEqual(get_logger("decomposed").name, "psdtorch.decomposed")
        self.assertEqual(get_logger("psdtorch.config").name, "psdtorch.config")

    def test_levels(self):
        set_log_level("debug")
        self.assertEqual(self.logger.level, logging.DEBUG)
        with log_level(logging.ERROR):
            self.assertEqual(self.logger.level, logging.ERROR)
        self.assertEqual(self.logger.level, logging.DEBUG)
        disable_logging()
        self.assertFalse(self.logger.isEnabledFor(logging.CRITICAL))

    def test_configure_logging(self):
        configure_logging(level="WARNING")
        self.assertEqual(len(self.logger.handlers), 1)
        self.assertIsInstance(self.logger.handlers[0], logging.StreamHandler)
        self.assertFalse(self.logger.propagate)
        # Configuring twice does not duplicate the handler
        configure_logging(level="DEBUG", format_string="%(message)s")
        self.assertEqual(len(self.logger.handlers), 1)
        self.assertEqual(self.logger.level, logging.DEBUG)

    def test_resize_is_logged(self):
        M = DecomposedSymmetricPositiveMatrix(torch.randn(5, 3, dtype=torch.float64))
        with self.assertLogs(LOGGER_NAME, level="DEBUG") as cm:
            M.resize_b()
        self.assertEqual(len(cm.records), 1)
        self.assertIn("5x3 to 3x3", cm.output[0])

        # Square factors are left alone
        with self.assertLogs(LOGGER_NAME, level="DEBUG") as cm:
            M.resize_b()
            get_logger().debug("done")
        self.assertEqual(len(cm.records), 1)

    def test_inverse_is_logged(self):
        M = DecomposedSymmetricPositiveMatrix.create_identity_matrix(2)
        with self.assertLogs("psdtorch.decompositions", level="DEBUG") as cm:
            M.get_inverse("qr")
        self.assertIn("QRDecomposition", cm.output[0])
