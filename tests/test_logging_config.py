import logging
import unittest
from logging.handlers import RotatingFileHandler

from clinic_agent.config.logging_config import LOG_FORMAT, configure_logging


class TestLoggingConfig(unittest.TestCase):
    def test_configure_logging(self):
        # Test that the function returns a logger
        logger = configure_logging("INFO")
        self.assertIsInstance(logger, logging.Logger)

        # Test that the logger has the correct name
        self.assertEqual(logger.name, "clinic_agent")

        # Test that the logger has the correct level
        self.assertEqual(logger.level, logging.INFO)

        # Console handler first, writing the shared format
        self.assertGreaterEqual(len(logger.handlers), 1)
        handler = logger.handlers[0]
        self.assertIsInstance(handler, logging.StreamHandler)
        self.assertNotIsInstance(handler, RotatingFileHandler)
        self.assertEqual(handler.formatter._fmt, LOG_FORMAT)
        self.assertFalse(logger.propagate)

    def test_level_override(self):
        logger = configure_logging("debug")
        self.assertEqual(logger.level, logging.DEBUG)

    def test_reconfigure_does_not_duplicate_handlers(self):
        first = len(configure_logging("INFO").handlers)
        second = len(configure_logging("INFO").handlers)
        self.assertEqual(first, second)

    def test_unknown_level_falls_back_to_info(self):
        logger = configure_logging("chatty")
        self.assertEqual(logger.level, logging.INFO)


if __name__ == "__main__":
    unittest.main()
