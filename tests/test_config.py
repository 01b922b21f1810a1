"""
Tests for configuration helpers.
"""
import argparse
import logging
import unittest

from check_certs.config import DEFAULT_TIMEOUT, CheckConfig, get_log_level


class TestCheckConfig(unittest.TestCase):

    def test_defaults(self):
        config = CheckConfig()
        self.assertFalse(config.insecure)
        self.assertFalse(config.utc)
        self.assertEqual(config.timeout, DEFAULT_TIMEOUT)
        self.assertIsNone(config.template)

    def test_from_args(self):
        args = argparse.Namespace(insecure=True, utc=True, timeout=9.5)
        config = CheckConfig.from_args(args, template="{{ records }}")
        self.assertEqual(config, CheckConfig(insecure=True, utc=True, timeout=9.5, template="{{ records }}"))

    def test_from_args_missing_attributes(self):
        self.assertEqual(CheckConfig.from_args(argparse.Namespace()), CheckConfig())


class TestGetLogLevel(unittest.TestCase):

    def test_known_levels(self):
        self.assertEqual(get_log_level("DEBUG"), logging.DEBUG)
        self.assertEqual(get_log_level("info"), logging.INFO)

    def test_unknown_and_empty(self):
        self.assertEqual(get_log_level("LOUD"), logging.WARNING)
        self.assertEqual(get_log_level(None), logging.WARNING)


if __name__ == '__main__':
    unittest.main()
